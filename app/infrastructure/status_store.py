"""
SQLAlchemy Status Store - StatusDataStore backed by the application database.

Every call opens its own session from the factory so the store can be
shared by a bulk recompute worker pool.
"""
import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import Activity, ProgressRecord, Project, ProjectStatus
from app.domain.exceptions import StatusPersistenceError
from .ingestion import parse_activity, parse_progress_record, parse_project
from .repositories import (
    ActivityRepository,
    ProgressRecordRepository,
    ProjectRepository,
)

logger = logging.getLogger(__name__)


class SqlAlchemyStatusStore:
    """StatusDataStore implementation over SQLAlchemy sessions."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        session = self.session_factory()
        try:
            yield session
        finally:
            session.close()

    # =========================================================================
    # Reads
    # =========================================================================

    def get_project(self, project_id: int) -> Project:
        with self._session() as session:
            return parse_project(ProjectRepository(session).get_or_raise(project_id))

    def list_activities(self, project_code: str) -> List[Activity]:
        with self._session() as session:
            rows = ActivityRepository(session).list_by_project_code(project_code)
            return [parse_activity(row) for row in rows]

    def list_progress_records(self, project_code: str) -> List[ProgressRecord]:
        with self._session() as session:
            rows = ProgressRecordRepository(session).list_by_project_code(project_code)
            return [parse_progress_record(row) for row in rows]

    def list_project_ids(
        self,
        project_codes: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[ProjectStatus]] = None,
        created_between: Optional[Tuple[date, date]] = None,
    ) -> List[int]:
        with self._session() as session:
            return ProjectRepository(session).list_ids(
                project_codes=project_codes,
                statuses=statuses,
                created_between=created_between,
            )

    def status_counts(self) -> Dict[str, int]:
        with self._session() as session:
            return ProjectRepository(session).status_counts()

    def recent_status_changes(self, limit: int = 20) -> List[dict]:
        with self._session() as session:
            return [
                {
                    'project_id': log.project_id,
                    'old_status': log.old_status,
                    'new_status': log.new_status,
                    'confidence': log.confidence,
                    'reason': log.reason,
                    'source': log.source,
                    'changed_at': log.changed_at.isoformat() if log.changed_at else None,
                }
                for log in ProjectRepository(session).recent_status_changes(limit)
            ]

    # =========================================================================
    # Write-back
    # =========================================================================

    def update_project_status(
        self,
        project_id: int,
        status: ProjectStatus,
        confidence: Optional[int],
        reason: str,
        timestamp: datetime,
        kpi_added: Optional[bool] = None,
        source: str = "automatic",
    ) -> None:
        """
        Write a status, its diagnostics and an audit row in one transaction.

        Raises:
            ProjectNotFoundError: If the project does not exist
            StatusPersistenceError: If the database write fails
        """
        with self._session() as session:
            repo = ProjectRepository(session)
            try:
                repo.apply_status(
                    project_id,
                    ProjectStatus(status).value,
                    confidence,
                    reason,
                    timestamp,
                    kpi_added=kpi_added,
                    source=source,
                )
                repo.commit()
            except SQLAlchemyError as e:
                repo.rollback()
                logger.error(f"Status write failed for project {project_id}: {e}")
                raise StatusPersistenceError(project_id, str(e)) from e
