"""
Status Result Entities - Derived, non-persisted outputs of a classification pass.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .project import ActivityTiming, ProjectStatus


@dataclass(frozen=True)
class ActivityProgress:
    """
    Progress of one activity derived from its matched records.

    Attributes:
        activity_name: Name of the activity
        timing: Phase of the activity
        started: At least one qualifying actual record exists
        completed: Summed actual meets summed planned (> 0)
        progress_percent: 0-100 completion
        planned_quantity: Sum of matched planned quantities
        actual_quantity: Sum of matched actual quantities
    """

    activity_name: str
    timing: ActivityTiming
    started: bool = False
    completed: bool = False
    progress_percent: float = 0.0
    planned_quantity: float = 0.0
    actual_quantity: float = 0.0


@dataclass(frozen=True)
class PhaseAggregate:
    """Completion metrics for one phase of one project."""

    timing: ActivityTiming
    progress_percent: float = 0.0
    activity_count: int = 0
    started_count: int = 0
    completed_count: int = 0

    @property
    def is_empty(self) -> bool:
        return self.activity_count == 0

    @property
    def completion_percent(self) -> float:
        """Progress used for completion checks; an empty phase is vacuously complete."""
        if self.is_empty:
            return 100.0
        return self.progress_percent

    @property
    def all_completed(self) -> bool:
        return not self.is_empty and self.completed_count == self.activity_count

    @property
    def any_started(self) -> bool:
        return self.started_count > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'timing': self.timing.value,
            'progress_percent': round(self.progress_percent, 2),
            'activity_count': self.activity_count,
            'started_count': self.started_count,
            'completed_count': self.completed_count,
        }


@dataclass(frozen=True)
class StatusResult:
    """
    Classified status of a project with its justification.

    confidence is always 100: the rule is deterministic.
    """

    status: ProjectStatus
    confidence: int
    reason: str
    pre_commencement: PhaseAggregate
    post_commencement: PhaseAggregate
    post_completion: PhaseAggregate
    evaluated_at: datetime

    @property
    def phases(self) -> List[PhaseAggregate]:
        return [self.pre_commencement, self.post_commencement, self.post_completion]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'status': self.status.value,
            'confidence': self.confidence,
            'reason': self.reason,
            'evaluated_at': self.evaluated_at.isoformat(),
            'phases': {p.timing.value: p.to_dict() for p in self.phases},
        }


@dataclass
class RecomputeResult:
    """Outcome of recomputing (and writing back) one project's status."""

    project_id: int
    project_code: str = ""
    previous_status: Optional[ProjectStatus] = None
    result: Optional[StatusResult] = None
    changed: bool = False
    skipped: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def new_status(self) -> Optional[ProjectStatus]:
        return self.result.status if self.result else None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'project_id': self.project_id,
            'project_code': self.project_code,
            'previous_status': self.previous_status.value if self.previous_status else None,
            'new_status': self.new_status.value if self.new_status else None,
            'changed': self.changed,
            'skipped': self.skipped,
            'errors': list(self.errors),
        }
