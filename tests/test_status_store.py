"""
Tests for the SQLAlchemy-backed status store and its repositories.
"""
import pytest
from datetime import date, datetime
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.models import (
    Base,
    Activity as ActivityModel,
    Project as ProjectModel,
    ProgressRecord as ProgressRecordModel,
    StatusChangeLog,
)
from app.domain.entities import ActivityTiming, InputType, ProjectStatus
from app.domain.exceptions import (
    ProjectNotFoundError,
    RecordValidationError,
    StatusPersistenceError,
)
from app.infrastructure import (
    ActivityRepository,
    ProgressRecordRepository,
    ProjectRepository,
    SqlAlchemyStatusStore,
)

NOW = datetime(2026, 10, 19, 12, 0)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def session_factory():
    """In-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """Two projects with activities and progress records."""
    session = session_factory()
    alpha = ProjectModel(
        code="P-ALPHA", name="Alpha", status="upcoming", created_at=datetime(2026, 1, 1)
    )
    beta = ProjectModel(
        code="P-BETA", name="Beta", status="on-hold", created_at=datetime(2026, 3, 1)
    )
    session.add_all([alpha, beta])
    session.add_all([
        ActivityModel(project_code="P-ALPHA", name="Site Clearance", timing="pre-commencement"),
        ActivityModel(project_code="P-ALPHA", name="Foundation Pour", timing="post-commencement"),
        ActivityModel(project_code="P-BETA", name="Handover", timing="post-completion"),
    ])
    session.add_all([
        ProgressRecordModel(project_code="P-ALPHA", activity_name="Foundation Pour",
                            input_type="actual", quantity=5, activity_date=date(2026, 10, 2)),
        ProgressRecordModel(project_code="P-ALPHA", activity_name="Foundation Pour",
                            input_type="planned", quantity=50, activity_date=date(2026, 10, 1)),
    ])
    session.commit()
    ids = {"alpha": alpha.id, "beta": beta.id}
    session.close()
    return ids


@pytest.fixture
def store(session_factory):
    return SqlAlchemyStatusStore(session_factory)


# =============================================================================
# Reads
# =============================================================================

class TestStoreReads:

    def test_get_project(self, store, seeded):
        project = store.get_project(seeded["beta"])

        assert project.code == "P-BETA"
        assert project.status is ProjectStatus.ON_HOLD

    def test_get_missing_project(self, store, seeded):
        with pytest.raises(ProjectNotFoundError):
            store.get_project(999)

    def test_list_activities(self, store, seeded):
        activities = store.list_activities("P-ALPHA")

        assert [a.name for a in activities] == ["Site Clearance", "Foundation Pour"]
        assert activities[0].timing is ActivityTiming.PRE_COMMENCEMENT

    def test_list_progress_records_ordered_by_date(self, store, seeded):
        records = store.list_progress_records("P-ALPHA")

        assert [r.input_type for r in records] == [InputType.PLANNED, InputType.ACTUAL]
        assert store.list_progress_records("P-BETA") == []

    def test_malformed_row_is_rejected(self, store, session_factory, seeded):
        session = session_factory()
        session.add(ActivityModel(project_code="P-BETA", name="Oops", timing="during"))
        session.commit()
        session.close()

        with pytest.raises(RecordValidationError):
            store.list_activities("P-BETA")

    def test_list_project_ids_newest_first(self, store, seeded):
        assert store.list_project_ids() == [seeded["beta"], seeded["alpha"]]

    def test_list_project_ids_filters(self, store, seeded):
        assert store.list_project_ids(project_codes=["P-ALPHA"]) == [seeded["alpha"]]
        assert store.list_project_ids(statuses=[ProjectStatus.ON_HOLD]) == [seeded["beta"]]
        assert store.list_project_ids(
            created_between=(date(2026, 1, 1), date(2026, 1, 1))
        ) == [seeded["alpha"]]
        assert store.list_project_ids(project_codes=["P-NONE"]) == []


# =============================================================================
# Write-back
# =============================================================================

class TestStoreWrites:

    def test_update_writes_status_and_audit_row(self, store, session_factory, seeded):
        store.update_project_status(
            seeded["alpha"], ProjectStatus.ON_GOING, 100, "Post-commencement started",
            NOW, kpi_added=True,
        )

        session = session_factory()
        project = session.get(ProjectModel, seeded["alpha"])
        assert project.status == "on-going"
        assert project.status_confidence == 100
        assert project.status_reason == "Post-commencement started"
        assert project.status_updated_at == NOW
        assert project.kpi_added is True

        log = session.query(StatusChangeLog).one()
        assert log.old_status == "upcoming"
        assert log.new_status == "on-going"
        assert log.source == "automatic"
        session.close()

    def test_update_missing_project(self, store, seeded):
        with pytest.raises(ProjectNotFoundError):
            store.update_project_status(999, ProjectStatus.ON_GOING, 100, "x", NOW)

    def test_failed_commit_leaves_project_untouched(self, store, session_factory, seeded):
        with patch.object(ProjectRepository, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(StatusPersistenceError) as excinfo:
                store.update_project_status(
                    seeded["alpha"], ProjectStatus.ON_GOING, 100, "x", NOW
                )

        assert excinfo.value.project_id == seeded["alpha"]
        session = session_factory()
        assert session.get(ProjectModel, seeded["alpha"]).status == "upcoming"
        assert session.query(StatusChangeLog).count() == 0
        session.close()

    def test_status_counts_and_recent_changes(self, store, seeded):
        store.update_project_status(seeded["alpha"], ProjectStatus.SITE_PREPARATION, 100, "a", NOW)
        store.update_project_status(
            seeded["beta"], ProjectStatus.CANCELLED, 100, "b", NOW, source="manual"
        )

        assert store.status_counts() == {"site-preparation": 1, "cancelled": 1}

        changes = store.recent_status_changes(limit=1)
        assert len(changes) == 1
        assert changes[0]["project_id"] == seeded["beta"]
        assert changes[0]["source"] == "manual"
        assert changes[0]["changed_at"] == NOW.isoformat()


class TestRepositories:

    def test_project_lookup_by_code(self, session_factory, seeded):
        session = session_factory()
        repo = ProjectRepository(session)

        assert repo.get_by_code("P-BETA").id == seeded["beta"]
        assert repo.get_by_code("P-NONE") is None
        assert repo.exists(code="P-ALPHA")
        assert session.query(ProjectModel).count() == 2
        session.close()

    def test_activity_and_record_lookup(self, session_factory, seeded):
        session = session_factory()

        assert len(ActivityRepository(session).list_by_project_code("P-ALPHA")) == 2
        assert ProgressRecordRepository(session).exists(input_type="planned")
        assert not ProgressRecordRepository(session).exists(project_code="P-BETA")
        session.close()
