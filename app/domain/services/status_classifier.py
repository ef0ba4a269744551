"""
Status Classifier - Lifecycle state machine over phase aggregates.

Rules, evaluated in priority order (first match wins):
1. No activities                           -> upcoming
2. All post-completion activities complete -> contract-completed
3. All post-commencement activities complete -> completed-duration
4. Any post-commencement activity started  -> on-going
5. Any pre-commencement activity started   -> site-preparation
6. Otherwise                               -> upcoming

Completion states are checked before in-progress states so a finished
project is never reported as merely on-going. on-hold and cancelled are
never produced here.
"""
from datetime import datetime
from typing import Callable, Iterable, Optional

from app.domain.entities import (
    Activity,
    ActivityTiming,
    PhaseAggregate,
    ProgressRecord,
    Project,
    ProjectStatus,
    StatusResult,
)
from .activity_matcher import NameRecordMatcher, RecordMatcher
from .phase_classifier import classify_phases
from .progress_aggregator import aggregate_phase, assess_activity

DETERMINISTIC_CONFIDENCE = 100

MatcherFactory = Callable[[Iterable[ProgressRecord]], RecordMatcher]


def _phase_label(timing: ActivityTiming) -> str:
    return timing.value.capitalize()


def _decide(
    pre: PhaseAggregate,
    post: PhaseAggregate,
    completion: PhaseAggregate
) -> tuple:
    if pre.is_empty and post.is_empty and completion.is_empty:
        return ProjectStatus.UPCOMING, "no activities"

    if completion.all_completed:
        return (
            ProjectStatus.CONTRACT_COMPLETED,
            f"All {_phase_label(completion.timing).lower()} activities completed "
            f"({completion.completed_count}/{completion.activity_count})"
        )

    if post.all_completed:
        return (
            ProjectStatus.COMPLETED_DURATION,
            f"All {_phase_label(post.timing).lower()} activities completed "
            f"({post.completed_count}/{post.activity_count})"
        )

    if post.any_started:
        return (
            ProjectStatus.ON_GOING,
            f"{_phase_label(post.timing)} activities started "
            f"({post.started_count}/{post.activity_count}, "
            f"{post.progress_percent:.1f}% progress)"
        )

    if pre.any_started:
        return (
            ProjectStatus.SITE_PREPARATION,
            f"{_phase_label(pre.timing)} activities started "
            f"({pre.started_count}/{pre.activity_count}, "
            f"{pre.progress_percent:.1f}% progress)"
        )

    return ProjectStatus.UPCOMING, "No activities have started"


def classify_project(
    project: Optional[Project],
    activities: Iterable[Activity],
    records: Iterable[ProgressRecord],
    now: datetime,
    matcher_factory: MatcherFactory = NameRecordMatcher,
) -> StatusResult:
    """
    Classify a project's lifecycle status from its activities and records.

    Pure: no I/O and no dependence on the project's stored status.

    Args:
        project: Project being classified (identity only, may be None)
        activities: All activities of the project
        records: All progress records of the project
        now: Evaluation moment
        matcher_factory: Builds the activity-record matcher for the project

    Returns:
        StatusResult with status, reason and per-phase aggregates
    """
    phased = classify_phases(activities)
    matcher = matcher_factory(records)

    aggregates = {}
    for timing in ActivityTiming:
        progresses = [
            assess_activity(activity, matcher.match(activity), now)
            for activity in phased.for_timing(timing)
        ]
        aggregates[timing] = aggregate_phase(timing, progresses)

    pre = aggregates[ActivityTiming.PRE_COMMENCEMENT]
    post = aggregates[ActivityTiming.POST_COMMENCEMENT]
    completion = aggregates[ActivityTiming.POST_COMPLETION]

    status, reason = _decide(pre, post, completion)

    return StatusResult(
        status=status,
        confidence=DETERMINISTIC_CONFIDENCE,
        reason=reason,
        pre_commencement=pre,
        post_commencement=post,
        post_completion=completion,
        evaluated_at=now,
    )
