"""Tests for DST transition advisories."""
from datetime import date, datetime, time

import pytest

from coachcal.engine.clock import UTC
from coachcal.engine.dst import (
    DSTCheckResult,
    check_lesson,
    is_dst,
    is_transition_date,
    offset_label,
    transition_kind,
    transitions_in_year,
)
from coachcal.engine.exceptions import UnknownTimezone

NEW_YORK = "America/New_York"


class TestTransitionDetection:
    """Test detection of offset changes within a local day."""

    def test_spring_forward_day(self):
        """Test the US spring-forward day is detected."""
        assert is_transition_date(date(2024, 3, 10), NEW_YORK)
        assert transition_kind(date(2024, 3, 10), NEW_YORK) == "spring"

    def test_fall_back_day(self):
        """Test the US fall-back day is detected."""
        assert is_transition_date(date(2024, 11, 3), NEW_YORK)
        assert transition_kind(date(2024, 11, 3), NEW_YORK) == "fall"

    def test_ordinary_day(self):
        """Test days around the transition are not flagged."""
        assert not is_transition_date(date(2024, 3, 9), NEW_YORK)
        assert not is_transition_date(date(2024, 3, 11), NEW_YORK)
        assert transition_kind(date(2024, 3, 11), NEW_YORK) is None

    def test_zone_without_dst(self):
        """Test zones without DST have no transitions."""
        assert transitions_in_year(2024, "Asia/Tokyo") == ()

    def test_transitions_in_year(self):
        """Test both 2024 New York transitions with their wall-clock time."""
        transitions = transitions_in_year(2024, NEW_YORK)

        assert [t.local_date for t in transitions] == [date(2024, 3, 10), date(2024, 11, 3)]
        assert [t.kind for t in transitions] == ["spring", "fall"]
        assert all(t.local_time == time(2, 0) for t in transitions)
        assert transitions[0].to_dict()["offset_before_minutes"] == -300
        assert transitions[0].to_dict()["offset_after_minutes"] == -240

    def test_southern_hemisphere(self):
        """Test Sydney springs forward in October."""
        assert transition_kind(date(2024, 10, 6), "Australia/Sydney") == "spring"
        assert transition_kind(date(2024, 4, 7), "Australia/Sydney") == "fall"

    def test_unknown_zone(self):
        """Test unknown zones raise."""
        with pytest.raises(UnknownTimezone):
            is_transition_date(date(2024, 3, 10), "Nowhere/Special")


class TestOffsets:
    """Test offset labels and DST flags."""

    @pytest.mark.parametrize(
        "instant,tz_name,expected",
        [
            (datetime(2024, 1, 15, 12, 0, tzinfo=UTC), NEW_YORK, "UTC-5"),
            (datetime(2024, 7, 15, 12, 0, tzinfo=UTC), NEW_YORK, "UTC-4"),
            (datetime(2024, 7, 15, 12, 0, tzinfo=UTC), "Asia/Kolkata", "UTC+5:30"),
            (datetime(2024, 7, 15, 12, 0, tzinfo=UTC), "UTC", "UTC+0"),
        ],
    )
    def test_offset_label(self, instant, tz_name, expected):
        """Test offset labels per zone and season."""
        assert offset_label(instant, tz_name) == expected

    def test_is_dst(self):
        """Test DST flag follows the season."""
        assert is_dst(datetime(2024, 7, 15, 12, 0, tzinfo=UTC), NEW_YORK)
        assert not is_dst(datetime(2024, 1, 15, 12, 0, tzinfo=UTC), NEW_YORK)


class TestCheckLesson:
    """Test lesson advisories."""

    def test_ordinary_day_passes(self):
        """Test a normal day raises no warning."""
        result = check_lesson(date(2024, 3, 11), time(10, 0), NEW_YORK)

        assert isinstance(result, DSTCheckResult)
        assert result.passed
        assert result.warnings == ()
        assert result.message == "DST check passed for 2024-03-11"

    def test_spring_forward_day_warns(self):
        """Test a lesson on the spring-forward day is flagged."""
        result = check_lesson(date(2024, 3, 10), time(10, 0), NEW_YORK)

        assert not result.passed
        assert result.transition_kind == "spring"
        assert len(result.warnings) == 1
        assert "spring-forward" in result.warnings[0]
        assert "skip 60 minutes at 02:00" in result.warnings[0]

    def test_fall_back_day_warns(self):
        """Test a lesson on the fall-back day is flagged with extra guidance."""
        result = check_lesson(date(2024, 11, 3), time(16, 0), NEW_YORK)

        assert not result.passed
        assert result.transition_kind == "fall"
        assert len(result.suggestions) == 2
        assert "fall-back" in result.message

    def test_lesson_near_transition_hour(self):
        """Test a lesson within an hour of the change gets a second warning."""
        result = check_lesson(date(2024, 3, 10), time(1, 30), NEW_YORK)

        assert len(result.warnings) == 2
        assert "transition hour" in result.warnings[1]

    def test_to_dict(self):
        """Test serialization includes the advisory fields."""
        payload = check_lesson(date(2024, 3, 10), time(10, 0), NEW_YORK).to_dict()

        assert payload["passed"] is False
        assert payload["transition_kind"] == "spring"
        assert isinstance(payload["warnings"], list)
