"""
Domain Entities - Inputs and derived outputs of status determination.
"""

from .project import (
    Project, Activity, ProgressRecord,
    ProjectStatus, ActivityTiming, InputType, MANUAL_STATUSES,
)
from .status_result import ActivityProgress, PhaseAggregate, StatusResult, RecomputeResult

__all__ = [
    'Project', 'Activity', 'ProgressRecord',
    'ProjectStatus', 'ActivityTiming', 'InputType', 'MANUAL_STATUSES',
    'ActivityProgress', 'PhaseAggregate', 'StatusResult', 'RecomputeResult',
]
