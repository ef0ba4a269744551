"""
Progress Record Repository - Data access layer for planned/actual KPI rows.
"""
from typing import List

from sqlalchemy.orm import Session

from app.models import ProgressRecord as ProgressRecordModel
from .base_repository import BaseRepository


class ProgressRecordRepository(BaseRepository[ProgressRecordModel]):
    """Repository for ProgressRecord rows, keyed by project code."""

    def __init__(self, session: Session):
        super().__init__(session, ProgressRecordModel)

    def exists(self, **criteria) -> bool:
        """Check if a ProgressRecord matching the criteria exists."""
        return self._exists(**criteria)

    def list_by_project_code(self, project_code: str) -> List[ProgressRecordModel]:
        """All progress records of a project ordered by date."""
        return self.session.query(ProgressRecordModel).filter(
            ProgressRecordModel.project_code == project_code
        ).order_by(ProgressRecordModel.activity_date, ProgressRecordModel.id).all()
