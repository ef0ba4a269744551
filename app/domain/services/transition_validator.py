"""
Transition Validator - Legal manual status changes.

Pure table lookup used by the editing surface before a manual status
change is accepted.
"""
from typing import Dict, FrozenSet, Union

from app.domain.entities import ProjectStatus
from app.domain.exceptions import InvalidStatusTransitionError

S = ProjectStatus

VALID_TRANSITIONS: Dict[ProjectStatus, FrozenSet[ProjectStatus]] = {
    S.UPCOMING: frozenset({S.SITE_PREPARATION, S.ON_HOLD, S.CANCELLED}),
    S.SITE_PREPARATION: frozenset({S.ON_GOING, S.ON_HOLD, S.CANCELLED}),
    S.ON_GOING: frozenset({S.COMPLETED_DURATION, S.ON_HOLD, S.CANCELLED}),
    S.COMPLETED_DURATION: frozenset({S.CONTRACT_COMPLETED, S.ON_HOLD, S.CANCELLED}),
    S.CONTRACT_COMPLETED: frozenset(),  # Terminal
    S.ON_HOLD: frozenset({S.SITE_PREPARATION, S.ON_GOING, S.CANCELLED}),
    S.CANCELLED: frozenset(),  # Terminal
}


def _coerce(status: Union[str, ProjectStatus]):
    try:
        return ProjectStatus(status)
    except ValueError:
        return None


def allowed_transitions(current: Union[str, ProjectStatus]) -> FrozenSet[ProjectStatus]:
    """Statuses reachable from current by a manual change."""
    status = _coerce(current)
    if status is None:
        return frozenset()
    return VALID_TRANSITIONS[status]


def validate_transition(
    current: Union[str, ProjectStatus],
    requested: Union[str, ProjectStatus]
) -> bool:
    """True iff requested is a legal manual target from current."""
    target = _coerce(requested)
    return target is not None and target in allowed_transitions(current)


def require_transition(
    current: Union[str, ProjectStatus],
    requested: Union[str, ProjectStatus]
) -> ProjectStatus:
    """
    Validate a manual transition.

    Returns:
        The requested status as a ProjectStatus

    Raises:
        InvalidStatusTransitionError: If the pair is not in the table
    """
    if not validate_transition(current, requested):
        current_value = getattr(current, 'value', current)
        requested_value = getattr(requested, 'value', requested)
        raise InvalidStatusTransitionError(
            str(current_value),
            str(requested_value),
            [s.value for s in allowed_transitions(current)],
        )
    return ProjectStatus(requested)
