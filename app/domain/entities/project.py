"""
Project Entities - Inputs to status determination.

Projects, their scheduled activities, and the planned/actual progress
records (KPIs) reported against those activities.
"""
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class ProjectStatus(str, Enum):
    """Lifecycle status of a construction project."""
    UPCOMING = "upcoming"
    SITE_PREPARATION = "site-preparation"
    ON_GOING = "on-going"
    COMPLETED_DURATION = "completed-duration"
    CONTRACT_COMPLETED = "contract-completed"
    ON_HOLD = "on-hold"            # Manual only
    CANCELLED = "cancelled"        # Manual only

    @property
    def is_manual(self) -> bool:
        """Statuses that are only ever set by an operator."""
        return self in MANUAL_STATUSES


MANUAL_STATUSES = frozenset({ProjectStatus.ON_HOLD, ProjectStatus.CANCELLED})


class ActivityTiming(str, Enum):
    """Construction phase an activity belongs to, in lifecycle order."""
    PRE_COMMENCEMENT = "pre-commencement"
    POST_COMMENCEMENT = "post-commencement"
    POST_COMPLETION = "post-completion"


class InputType(str, Enum):
    """Whether a progress record is a plan or a measured actual."""
    PLANNED = "planned"
    ACTUAL = "actual"


@dataclass(frozen=True)
class Project:
    """
    Construction project whose status is derived by the engine.

    Attributes:
        id: Store identifier
        code: Project code used to look up activities and progress records
        name: Display name
        start_date: Contract start date
        end_date: Contract completion date
        status: Currently stored status
    """

    id: int
    code: str
    name: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ProjectStatus = ProjectStatus.UPCOMING


@dataclass(frozen=True)
class Activity:
    """
    Scheduled activity of a project (BOQ line).

    planned_units / actual_units are legacy totals kept on the activity row.
    They are not authoritative; progress comes from matched records.
    """

    project_code: str
    name: str
    timing: ActivityTiming
    id: Optional[int] = None
    planned_units: float = 0.0
    actual_units: float = 0.0


@dataclass(frozen=True)
class ProgressRecord:
    """
    Planned or actual progress entry (KPI).

    Joined to its activity by activity_name, not by identifier.
    """

    project_code: str
    activity_name: str
    input_type: InputType
    quantity: float
    activity_date: Optional[date] = None
    id: Optional[int] = None

    @property
    def is_actual(self) -> bool:
        return self.input_type == InputType.ACTUAL

    @property
    def is_planned(self) -> bool:
        return self.input_type == InputType.PLANNED

    def is_on_or_before(self, moment: datetime) -> bool:
        """True when the record is dated on or before the given moment's date."""
        if self.activity_date is None:
            return False
        return self.activity_date <= moment.date()
