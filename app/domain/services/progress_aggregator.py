"""
Progress Aggregator - Activity and phase completion from matched records.

Activity rules:
- started: any actual record with quantity > 0, or any actual record dated
  on or before the evaluation date. Planned records never start an activity.
- completed: planned and actual records both present, planned total > 0,
  and actual total >= planned total.
- progress: actual / planned (capped at 100) when both are present and
  planned total > 0; UNSCHEDULED_ACTIVE_PROGRESS when only actuals exist;
  otherwise 0.

Phase rule: mean progress over activities with non-zero progress; an
empty phase counts as complete for completion checks.
"""
import warnings
from datetime import datetime
from typing import Iterable, List

from app.domain.entities import (
    Activity,
    ActivityProgress,
    ActivityTiming,
    PhaseAggregate,
)
from .activity_matcher import MatchedRecords

# Partial credit for actual progress on an activity that has no plan.
# Kept at the value used in production; pending product-owner confirmation.
UNSCHEDULED_ACTIVE_PROGRESS = 50.0


def _total(records) -> float:
    return sum(float(r.quantity) for r in records)


def assess_activity(
    activity: Activity,
    matched: MatchedRecords,
    now: datetime
) -> ActivityProgress:
    """
    Derive started / completed / progress for one activity.

    Args:
        activity: The activity being assessed
        matched: Its planned and actual records
        now: Evaluation moment

    Returns:
        ActivityProgress for the activity
    """
    planned = matched.planned_records
    actual = matched.actual_records
    planned_total = _total(planned)
    actual_total = _total(actual)

    started = any(
        r.quantity > 0 or r.is_on_or_before(now)
        for r in actual
    )

    completed = bool(
        planned and actual
        and planned_total > 0
        and actual_total >= planned_total
    )

    if planned and actual and planned_total > 0:
        progress = min(100.0, 100.0 * actual_total / planned_total)
    elif actual and not planned:
        progress = UNSCHEDULED_ACTIVE_PROGRESS
    else:
        progress = 0.0

    return ActivityProgress(
        activity_name=activity.name,
        timing=ActivityTiming(activity.timing),
        started=started,
        completed=completed,
        progress_percent=progress,
        planned_quantity=planned_total,
        actual_quantity=actual_total,
    )


def aggregate_phase(
    timing: ActivityTiming,
    progresses: Iterable[ActivityProgress]
) -> PhaseAggregate:
    """
    Roll activity progress up to a phase aggregate.

    Activities without progress are excluded from the mean rather than
    counted as zero.
    """
    progresses = list(progresses)
    contributing = [p.progress_percent for p in progresses if p.progress_percent > 0]
    mean = sum(contributing) / len(contributing) if contributing else 0.0

    return PhaseAggregate(
        timing=timing,
        progress_percent=mean,
        activity_count=len(progresses),
        started_count=sum(1 for p in progresses if p.started),
        completed_count=sum(1 for p in progresses if p.completed),
    )


class LegacyUnitProgressStrategy:
    """
    DEPRECATED: progress from an activity's own planned/actual unit totals.

    The canonical path ignores unit fields. This strategy exists for
    callers that still read unit-based progress directly and must not be
    mixed into the status classifier.
    """

    def __init__(self):
        warnings.warn(
            "LegacyUnitProgressStrategy is deprecated; progress is derived "
            "from matched progress records",
            DeprecationWarning,
            stacklevel=2,
        )

    def assess(self, activity: Activity) -> ActivityProgress:
        planned = float(activity.planned_units or 0)
        actual = float(activity.actual_units or 0)
        progress = min(100.0, 100.0 * actual / planned) if planned > 0 else 0.0
        return ActivityProgress(
            activity_name=activity.name,
            timing=ActivityTiming(activity.timing),
            started=actual > 0,
            completed=planned > 0 and actual >= planned,
            progress_percent=progress,
            planned_quantity=planned,
            actual_quantity=actual,
        )

    def phase_progress(self, activities: List[Activity]) -> float:
        """Mean unit progress over all activities; an empty phase is 100."""
        if not activities:
            return 100.0
        return sum(self.assess(a).progress_percent for a in activities) / len(activities)
