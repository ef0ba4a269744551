"""
Background scheduling of bulk status recomputation.
"""
import logging
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from app.config import StatusEngineConfig, get_config
from app.domain.services import StatusRecomputeService
from app.infrastructure import CachedStatusStore, SqlAlchemyStatusStore
from app.models import create_session_factory

logger = logging.getLogger(__name__)

RECOMPUTE_JOB_ID = "recompute_project_statuses"


def build_recompute_service(
    session_factory: Optional[Callable[[], Session]] = None,
    config: Optional[StatusEngineConfig] = None,
) -> StatusRecomputeService:
    """Wire the SQLAlchemy store (and cache, if enabled) into a recompute service."""
    config = config or get_config()
    if session_factory is None:
        session_factory = create_session_factory(config.database_url)

    store = SqlAlchemyStatusStore(session_factory)
    if config.cache_enabled:
        store = CachedStatusStore(
            store,
            ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_entries,
        )
    return StatusRecomputeService.from_config(store, config)


def run_scheduled_recompute(service: StatusRecomputeService) -> None:
    """Background job: recompute every project's status."""
    logger.info("Running scheduled status recompute")
    try:
        results = service.recompute_all()
    except Exception as e:
        logger.error(f"Scheduled status recompute failed: {e}")
        return
    changed = sum(1 for r in results if r.changed)
    logger.info(f"Scheduled recompute completed: {changed} projects updated")


def setup_scheduler(
    service: Optional[StatusRecomputeService] = None,
    config: Optional[StatusEngineConfig] = None,
    scheduler: Optional[BackgroundScheduler] = None,
    start: bool = True,
) -> Optional[BackgroundScheduler]:
    """
    Register the periodic recompute job.

    Returns:
        The scheduler, or None when scheduling is disabled in config
    """
    config = config or get_config()
    if not config.scheduler_enabled:
        logger.info("Status recompute scheduling disabled")
        return None

    service = service or build_recompute_service(config=config)
    scheduler = scheduler or BackgroundScheduler()

    # Never run two bulk recomputes at once
    scheduler.add_job(
        run_scheduled_recompute,
        'interval',
        minutes=config.scheduler_interval_minutes,
        args=[service],
        id=RECOMPUTE_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Scheduling status recompute every {config.scheduler_interval_minutes} minutes"
    )

    if start:
        scheduler.start()
    return scheduler
