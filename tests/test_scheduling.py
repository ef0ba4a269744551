"""
Tests for scheduled recomputation and service wiring.
"""
import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import StatusEngineConfig, get_config
from app.domain.services import StatusRecomputeService
from app.infrastructure import CachedStatusStore, SqlAlchemyStatusStore
from app.models import Base
from app.scheduling import (
    RECOMPUTE_JOB_ID,
    build_recompute_service,
    run_scheduled_recompute,
    setup_scheduler,
)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def no_cache_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "recompute:\n  max_workers: 2\n"
        "cache:\n  enabled: false\n"
        "scheduler:\n  enabled: false\n"
    )
    return StatusEngineConfig(path)


class TestBuildRecomputeService:

    def test_cache_enabled_wraps_store(self, session_factory):
        service = build_recompute_service(session_factory=session_factory, config=get_config())

        assert isinstance(service, StatusRecomputeService)
        assert isinstance(service.store, CachedStatusStore)
        assert service.max_workers == 4

    def test_cache_disabled(self, session_factory, no_cache_config):
        service = build_recompute_service(session_factory=session_factory, config=no_cache_config)

        assert isinstance(service.store, SqlAlchemyStatusStore)
        assert service.max_workers == 2
        assert service.recompute_all() == []


class TestSetupScheduler:

    def test_registers_interval_job(self):
        scheduler = setup_scheduler(service=MagicMock(), config=get_config(), start=False)

        job = scheduler.get_job(RECOMPUTE_JOB_ID)
        assert job is not None
        assert job.trigger.interval == timedelta(minutes=60)
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_disabled_returns_none(self, no_cache_config):
        assert setup_scheduler(service=MagicMock(), config=no_cache_config, start=False) is None


class TestRunScheduledRecompute:

    def test_runs_recompute_all(self):
        service = MagicMock()
        service.recompute_all.return_value = [MagicMock(changed=True), MagicMock(changed=False)]

        run_scheduled_recompute(service)

        service.recompute_all.assert_called_once_with()

    def test_failure_is_logged_not_raised(self, caplog):
        service = MagicMock()
        service.recompute_all.side_effect = RuntimeError("database unavailable")

        run_scheduled_recompute(service)

        assert "database unavailable" in caplog.text
