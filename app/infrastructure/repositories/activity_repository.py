"""
Activity Repository - Data access layer for project activities.
"""
from typing import List

from sqlalchemy.orm import Session

from app.models import Activity as ActivityModel
from .base_repository import BaseRepository


class ActivityRepository(BaseRepository[ActivityModel]):
    """Repository for Activity rows, keyed by project code."""

    def __init__(self, session: Session):
        super().__init__(session, ActivityModel)

    def exists(self, **criteria) -> bool:
        """Check if an Activity matching the criteria exists."""
        return self._exists(**criteria)

    def list_by_project_code(self, project_code: str) -> List[ActivityModel]:
        """All activities of a project in insertion order."""
        return self.session.query(ActivityModel).filter(
            ActivityModel.project_code == project_code
        ).order_by(ActivityModel.id).all()

