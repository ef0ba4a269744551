"""
Phase Classifier - Partitions a project's activities by timing tag.
"""
from dataclasses import dataclass, field
from typing import Iterable, List

from app.domain.entities import Activity, ActivityTiming


@dataclass
class PhasedActivities:
    """A project's activities split into the three ordered phases."""
    pre_commencement: List[Activity] = field(default_factory=list)
    post_commencement: List[Activity] = field(default_factory=list)
    post_completion: List[Activity] = field(default_factory=list)

    def for_timing(self, timing: ActivityTiming) -> List[Activity]:
        return {
            ActivityTiming.PRE_COMMENCEMENT: self.pre_commencement,
            ActivityTiming.POST_COMMENCEMENT: self.post_commencement,
            ActivityTiming.POST_COMPLETION: self.post_completion,
        }[timing]

    @property
    def total(self) -> int:
        return (
            len(self.pre_commencement)
            + len(self.post_commencement)
            + len(self.post_completion)
        )


def classify_phases(activities: Iterable[Activity]) -> PhasedActivities:
    """
    Split activities into disjoint phase lists, preserving input order.

    Timing values are a closed enum validated at ingestion.
    """
    phased = PhasedActivities()
    for activity in activities:
        phased.for_timing(ActivityTiming(activity.timing)).append(activity)
    return phased
