"""
Tests for phase partitioning and activity-record matching.
"""
import pytest

from app.domain.entities import Activity, ActivityTiming, InputType, ProgressRecord
from app.domain.services import (
    NameRecordMatcher,
    classify_phases,
    match_records,
    normalize_name,
)

PRE = ActivityTiming.PRE_COMMENCEMENT
POST = ActivityTiming.POST_COMMENCEMENT
COMPLETION = ActivityTiming.POST_COMPLETION


@pytest.fixture
def records():
    return [
        ProgressRecord("P1", "Foundation Pour", InputType.PLANNED, 100),
        ProgressRecord("P1", "  foundation POUR ", InputType.ACTUAL, 40),
        ProgressRecord("P1", "Foundation", InputType.ACTUAL, 999),
        ProgressRecord("P1", "Superstructure", InputType.ACTUAL, 5),
        ProgressRecord("P1", "", InputType.ACTUAL, 7),
    ]


class TestNormalizeName:

    def test_trims_and_lower_cases(self):
        assert normalize_name("  Site Clearance ") == "site clearance"

    def test_none_is_empty(self):
        assert normalize_name(None) == ""


class TestNameRecordMatcher:
    """Tests for exact, normalized name matching."""

    def test_matches_case_and_whitespace_insensitively(self, records):
        activity = Activity("P1", "FOUNDATION POUR", POST)

        matched = NameRecordMatcher(records).match(activity)

        assert [r.quantity for r in matched.planned_records] == [100]
        assert [r.quantity for r in matched.actual_records] == [40]

    def test_no_substring_matching(self, records):
        activity = Activity("P1", "Foundation Pour Phase 2", POST)

        assert NameRecordMatcher(records).match(activity).is_empty

    def test_empty_activity_name_matches_nothing(self, records):
        activity = Activity("P1", "", POST)

        assert NameRecordMatcher(records).match(activity).is_empty

    def test_same_records_for_equivalent_names(self, records):
        matcher = NameRecordMatcher(records)

        first = matcher.match(Activity("P1", "Superstructure", POST))
        second = matcher.match(Activity("P1", " superstructure", PRE))

        assert first == second

    def test_returned_lists_are_copies(self, records):
        matcher = NameRecordMatcher(records)
        activity = Activity("P1", "Foundation Pour", POST)

        matcher.match(activity).actual_records.clear()

        assert len(matcher.match(activity).actual_records) == 1

    def test_match_records_helper(self, records):
        matched = match_records(Activity("P1", "Superstructure", POST), records)

        assert len(matched.actual_records) == 1
        assert matched.planned_records == []


class TestClassifyPhases:
    """Tests for splitting activities by timing."""

    def test_partitions_and_preserves_order(self):
        activities = [
            Activity("P1", "a", POST),
            Activity("P1", "b", PRE),
            Activity("P1", "c", POST),
            Activity("P1", "d", COMPLETION),
        ]

        phased = classify_phases(activities)

        assert [a.name for a in phased.pre_commencement] == ["b"]
        assert [a.name for a in phased.post_commencement] == ["a", "c"]
        assert [a.name for a in phased.post_completion] == ["d"]
        assert phased.total == len(activities)

    def test_accepts_string_timing(self):
        phased = classify_phases([Activity("P1", "a", "post-completion")])

        assert len(phased.for_timing(COMPLETION)) == 1

    def test_empty(self):
        assert classify_phases([]).total == 0
