"""
Tests for status display info, legacy normalisation and grouping.
"""
import pytest

from app.domain.entities import ProjectStatus
from app.domain.services.status_catalog import (
    get_all_statuses,
    get_status_display_info,
    is_active,
    is_completed,
    is_problematic,
    normalize_status,
    parse_status,
    status_priority,
    status_statistics,
)

S = ProjectStatus


class TestNormalizeStatus:

    def test_canonical_values(self):
        for status in S:
            assert normalize_status(status.value) is status

    def test_legacy_values(self):
        assert normalize_status("active") is S.ON_GOING
        assert normalize_status("on_hold") is S.ON_HOLD
        assert normalize_status("completed") is S.COMPLETED_DURATION
        assert normalize_status("contract-duration") is S.CONTRACT_COMPLETED

    def test_display_labels(self):
        assert normalize_status("Site Preparation") is S.SITE_PREPARATION

    def test_unknown_and_empty_fall_back_to_upcoming(self):
        assert normalize_status("mystery") is S.UPCOMING
        assert normalize_status("") is S.UPCOMING
        assert normalize_status(None) is S.UPCOMING


class TestDisplayInfo:

    def test_display_info(self):
        info = get_status_display_info("on-going")

        assert info['value'] == "on-going"
        assert info['label'] == "On Going"
        assert info['color'] == "blue"

    def test_all_statuses_in_lifecycle_order(self):
        values = [info['value'] for info in get_all_statuses()]

        assert values[0] == "upcoming"
        assert values[4] == "contract-completed"
        assert len(values) == len(S)

    def test_priority(self):
        assert status_priority("upcoming") < status_priority("on-going")
        assert status_priority("cancelled") == 7


class TestGrouping:

    def test_categories(self):
        assert is_active("on-going")
        assert not is_active("cancelled")
        assert not is_active("contract-completed")
        assert is_completed("completed-duration")
        assert is_problematic("on-hold")
        assert not is_problematic("upcoming")

    def test_statistics(self):
        stats = status_statistics([
            "upcoming", "on-going", "on-going", "on-hold", "contract-completed", "active",
        ])

        assert stats['total'] == 6
        assert stats['by_status']['on-going'] == 3
        assert stats['active_count'] == 5
        assert stats['completed_count'] == 1
        assert stats['problematic_count'] == 1

    def test_statistics_empty(self):
        stats = status_statistics([])

        assert stats['total'] == 0
        assert stats['by_status'] == {}


class TestParseStatus:

    def test_accepts_canonical_legacy_and_display_values(self):
        assert parse_status("on-hold") is S.ON_HOLD
        assert parse_status("active") is S.ON_GOING
        assert parse_status(" Contract Completed ") is S.CONTRACT_COMPLETED
        assert parse_status(S.CANCELLED) is S.CANCELLED

    def test_rejects_unknown_values(self):
        for raw in ("bogus", "", None):
            with pytest.raises(ValueError, match="unknown project status"):
                parse_status(raw)
