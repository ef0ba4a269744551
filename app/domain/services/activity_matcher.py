"""
Activity-Record Matcher - Joins progress records to activities.

Progress records reference their activity by name rather than by
identifier. Names are compared after trimming whitespace and
lower-casing; only exact equality matches. No fuzzy or substring
matching is performed.
"""
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from app.domain.entities import Activity, ProgressRecord


def normalize_name(name: Optional[str]) -> str:
    """Trim and lower-case a join name; None becomes ''."""
    if not name:
        return ''
    return str(name).strip().lower()


@dataclass
class MatchedRecords:
    """Progress records matched to one activity, split by input type."""
    planned_records: List[ProgressRecord] = field(default_factory=list)
    actual_records: List[ProgressRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.planned_records and not self.actual_records


class RecordMatcher(ABC):
    """
    Resolves the progress records belonging to an activity.

    Implementations are built once per project from its full record list
    and queried per activity.
    """

    @abstractmethod
    def match(self, activity: Activity) -> MatchedRecords:
        pass


class NameRecordMatcher(RecordMatcher):
    """
    Matches records whose normalized activity_name equals the activity's
    normalized name.

    Records are bucketed by normalized name on construction so each
    lookup is a single dict access.
    """

    def __init__(self, records: Iterable[ProgressRecord]):
        self._buckets: Dict[str, MatchedRecords] = defaultdict(MatchedRecords)
        for record in records:
            key = normalize_name(record.activity_name)
            if not key:
                continue
            bucket = self._buckets[key]
            if record.is_actual:
                bucket.actual_records.append(record)
            elif record.is_planned:
                bucket.planned_records.append(record)

    def match(self, activity: Activity) -> MatchedRecords:
        key = normalize_name(activity.name)
        if not key or key not in self._buckets:
            return MatchedRecords()
        bucket = self._buckets[key]
        # Copies so callers cannot mutate the shared buckets
        return MatchedRecords(
            planned_records=list(bucket.planned_records),
            actual_records=list(bucket.actual_records),
        )


def match_records(
    activity: Activity,
    records: Iterable[ProgressRecord]
) -> MatchedRecords:
    """Match a single activity against a record list."""
    return NameRecordMatcher(records).match(activity)
