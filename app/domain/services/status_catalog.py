"""
Status Catalog - Display metadata, legacy normalisation and grouping
for project statuses.
"""
from collections import Counter
from typing import Dict, Iterable, List, Optional, Union

from app.domain.entities import ProjectStatus

S = ProjectStatus

STATUS_DISPLAY_INFO: Dict[ProjectStatus, dict] = {
    S.UPCOMING: {
        'label': 'Upcoming',
        'color': 'gray',
        'description': 'Project awarded; no activities have started',
    },
    S.SITE_PREPARATION: {
        'label': 'Site Preparation',
        'color': 'orange',
        'description': 'Pre-commencement activities have started',
    },
    S.ON_GOING: {
        'label': 'On Going',
        'color': 'blue',
        'description': 'Post-commencement activities have started',
    },
    S.COMPLETED_DURATION: {
        'label': 'Completed Duration',
        'color': 'purple',
        'description': 'All post-commencement activities finished',
    },
    S.CONTRACT_COMPLETED: {
        'label': 'Contract Completed',
        'color': 'emerald',
        'description': 'All post-completion activities finished',
    },
    S.ON_HOLD: {
        'label': 'On Hold',
        'color': 'yellow',
        'description': 'Project is temporarily suspended (manual)',
    },
    S.CANCELLED: {
        'label': 'Cancelled',
        'color': 'red',
        'description': 'Project has been cancelled (manual)',
    },
}

# Values written by older versions of the dashboard
LEGACY_STATUS_MAP: Dict[str, ProjectStatus] = {
    'active': S.ON_GOING,
    'on_hold': S.ON_HOLD,
    'completed': S.COMPLETED_DURATION,
    'contract-duration': S.CONTRACT_COMPLETED,
}

STATUS_PRIORITY: Dict[ProjectStatus, int] = {
    S.UPCOMING: 1,
    S.SITE_PREPARATION: 2,
    S.ON_GOING: 3,
    S.COMPLETED_DURATION: 4,
    S.CONTRACT_COMPLETED: 5,
    S.ON_HOLD: 6,
    S.CANCELLED: 7,
}

COMPLETED_STATUSES = frozenset({S.COMPLETED_DURATION, S.CONTRACT_COMPLETED})
PROBLEMATIC_STATUSES = frozenset({S.ON_HOLD, S.CANCELLED})
INACTIVE_STATUSES = COMPLETED_STATUSES | {S.CANCELLED}

_LABEL_LOOKUP = {info['label'].lower(): status for status, info in STATUS_DISPLAY_INFO.items()}

KNOWN_STATUS_VALUES = frozenset(
    {s.value for s in S} | set(LEGACY_STATUS_MAP) | set(_LABEL_LOOKUP)
)


def normalize_status(raw: Optional[Union[str, ProjectStatus]]) -> ProjectStatus:
    """
    Map a stored, legacy or display status value to a ProjectStatus.

    Unknown or empty values fall back to upcoming.
    """
    if isinstance(raw, ProjectStatus):
        return raw
    if not raw:
        return S.UPCOMING
    value = str(raw).strip()
    try:
        return ProjectStatus(value.lower())
    except ValueError:
        pass
    key = value.lower()
    if key in LEGACY_STATUS_MAP:
        return LEGACY_STATUS_MAP[key]
    return _LABEL_LOOKUP.get(key, S.UPCOMING)


def parse_status(raw: Union[str, ProjectStatus]) -> ProjectStatus:
    """
    Strict counterpart of normalize_status for operator and import input.

    Raises:
        ValueError: If raw is not a canonical, legacy or display value
    """
    if isinstance(raw, ProjectStatus):
        return raw
    if raw is None or str(raw).strip().lower() not in KNOWN_STATUS_VALUES:
        raise ValueError(f"unknown project status '{raw}'")
    return normalize_status(raw)


def get_status_display_info(status: Union[str, ProjectStatus]) -> dict:
    """Label, color and description for a status (with its value)."""
    normalized = normalize_status(status)
    return {'value': normalized.value, **STATUS_DISPLAY_INFO[normalized]}


def get_all_statuses() -> List[dict]:
    """Display info for every status, in lifecycle order."""
    return [get_status_display_info(s) for s in sorted(S, key=STATUS_PRIORITY.get)]


def is_active(status) -> bool:
    return normalize_status(status) not in INACTIVE_STATUSES


def is_completed(status) -> bool:
    return normalize_status(status) in COMPLETED_STATUSES


def is_problematic(status) -> bool:
    return normalize_status(status) in PROBLEMATIC_STATUSES


def status_priority(status) -> int:
    """Sort key placing statuses in lifecycle order."""
    return STATUS_PRIORITY[normalize_status(status)]


def status_statistics(statuses: Iterable) -> dict:
    """
    Summarise a collection of stored statuses.

    Returns:
        Dict with total, by_status counts and active / completed /
        problematic counts
    """
    normalized = [normalize_status(s) for s in statuses]
    counts = Counter(s.value for s in normalized)
    return {
        'total': len(normalized),
        'by_status': dict(counts),
        'active_count': sum(1 for s in normalized if s not in INACTIVE_STATUSES),
        'completed_count': sum(1 for s in normalized if s in COMPLETED_STATUSES),
        'problematic_count': sum(1 for s in normalized if s in PROBLEMATIC_STATUSES),
    }
