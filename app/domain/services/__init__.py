"""
Domain Services - Status determination pipeline and recomputation.
"""

from .phase_classifier import PhasedActivities, classify_phases
from .activity_matcher import MatchedRecords, RecordMatcher, NameRecordMatcher, match_records, normalize_name
from .progress_aggregator import (
    UNSCHEDULED_ACTIVE_PROGRESS,
    LegacyUnitProgressStrategy,
    aggregate_phase,
    assess_activity,
)
from .status_classifier import classify_project
from .transition_validator import (
    VALID_TRANSITIONS,
    allowed_transitions,
    require_transition,
    validate_transition,
)
from .status_store import StatusDataStore
from .status_recompute_service import StatusRecomputeService

__all__ = [
    'PhasedActivities',
    'classify_phases',
    'MatchedRecords',
    'RecordMatcher',
    'NameRecordMatcher',
    'match_records',
    'normalize_name',
    'UNSCHEDULED_ACTIVE_PROGRESS',
    'LegacyUnitProgressStrategy',
    'aggregate_phase',
    'assess_activity',
    'classify_project',
    'VALID_TRANSITIONS',
    'allowed_transitions',
    'require_transition',
    'validate_transition',
    'StatusDataStore',
    'StatusRecomputeService',
]
