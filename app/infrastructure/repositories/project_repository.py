"""
Project Repository - Data access layer for Project entities.

Implements repository pattern for Project operations with:
- Lookup by id / code
- Selection by code list, stored status and creation date range
- Atomic status write-back with audit log entry
"""
from datetime import date, datetime, time
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import Project as ProjectModel, StatusChangeLog
from app.domain.exceptions import ProjectNotFoundError
from .base_repository import BaseRepository


class ProjectRepository(BaseRepository[ProjectModel]):
    """Repository for Project rows."""

    def __init__(self, session: Session):
        super().__init__(session, ProjectModel)

    def exists(self, **criteria) -> bool:
        """Check if a Project matching the criteria exists."""
        return self._exists(**criteria)

    def get_or_raise(self, project_id: int) -> ProjectModel:
        """
        Get a project by database id.

        Raises:
            ProjectNotFoundError: If not found
        """
        project = self.get_by_id(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def get_by_code(self, code: str) -> Optional[ProjectModel]:
        return self.session.query(ProjectModel).filter(ProjectModel.code == code).first()

    def list_ids(
        self,
        project_codes: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[str]] = None,
        created_between: Optional[Tuple[date, date]] = None,
    ) -> List[int]:
        """
        Project ids matching the criteria, newest first.

        Args:
            project_codes: Restrict to these codes
            statuses: Restrict to these stored statuses
            created_between: Inclusive (start, end) creation date range
        """
        query = self.session.query(ProjectModel.id)
        if project_codes:
            query = query.filter(ProjectModel.code.in_(list(project_codes)))
        if statuses:
            query = query.filter(ProjectModel.status.in_([getattr(s, 'value', s) for s in statuses]))
        if created_between:
            start, end = created_between
            query = query.filter(
                ProjectModel.created_at >= datetime.combine(start, time.min),
                ProjectModel.created_at <= datetime.combine(end, time.max),
            )
        query = query.order_by(ProjectModel.created_at.desc(), ProjectModel.id.desc())
        return [row.id for row in query.all()]

    def apply_status(
        self,
        project_id: int,
        status: str,
        confidence: Optional[int],
        reason: str,
        timestamp: datetime,
        kpi_added: Optional[bool] = None,
        source: str = "automatic",
    ) -> StatusChangeLog:
        """
        Set a project's status and add its audit entry (not committed).

        Returns:
            The added StatusChangeLog row
        """
        project = self.get_or_raise(project_id)
        log = StatusChangeLog(
            project_id=project.id,
            old_status=project.status,
            new_status=status,
            confidence=confidence,
            reason=reason,
            source=source,
            changed_at=timestamp,
        )
        project.status = status
        project.status_confidence = confidence
        project.status_reason = reason
        project.status_updated_at = timestamp
        if kpi_added is not None:
            project.kpi_added = kpi_added
        self.session.add(log)
        return log

    def status_counts(self) -> Dict[str, int]:
        """Number of projects per stored status."""
        rows = self.session.query(
            ProjectModel.status, func.count(ProjectModel.id)
        ).group_by(ProjectModel.status).all()
        return {status: count for status, count in rows}

    def recent_status_changes(self, limit: int = 20) -> List[StatusChangeLog]:
        """Latest status changes across all projects."""
        return self.session.query(StatusChangeLog).order_by(
            StatusChangeLog.changed_at.desc(), StatusChangeLog.id.desc()
        ).limit(limit).all()
