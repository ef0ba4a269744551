"""
Status Store Protocol - What the recompute service needs from a data store.
"""
from datetime import date, datetime
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from app.domain.entities import Activity, ProgressRecord, Project, ProjectStatus


class StatusDataStore(Protocol):
    """
    Read projects, activities and progress records; write back statuses.

    update_project_status must apply the status, its diagnostics and the
    audit entry atomically.
    """

    def get_project(self, project_id: int) -> Project:
        ...

    def list_activities(self, project_code: str) -> List[Activity]:
        ...

    def list_progress_records(self, project_code: str) -> List[ProgressRecord]:
        ...

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
        ...

    def list_project_ids(
        self,
        project_codes: Optional[Sequence[str]] = None,
        statuses: Optional[Sequence[ProjectStatus]] = None,
        created_between: Optional[Tuple[date, date]] = None,
    ) -> List[int]:
        ...

    def status_counts(self) -> Dict[str, int]:
        ...

    def recent_status_changes(self, limit: int = 20) -> List[dict]:
        ...
