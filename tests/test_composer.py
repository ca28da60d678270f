"""Tests for calendar day composition."""
from datetime import date, datetime, time, timedelta

import pytest

from coachcal.engine.clock import UTC
from coachcal.engine.composer import CalendarInputs, DayView, compose_day, compose_range
from coachcal.engine.constants import LessonStatus, ProgramItemKind
from coachcal.engine.exceptions import InvalidDateRange, UnknownTimezone
from coachcal.schemas.records import ReplacementRecord, RoutineAssignment, VideoAssignment

NEW_YORK = "America/New_York"


@pytest.fixture
def inputs(assignment, make_lesson):
    """The 2024-01-03 scenario: a lesson replaces that day's program cell."""
    return CalendarInputs(
        assignments=[assignment],
        replacements=[ReplacementRecord(assignment_id="a1", replaced_date=date(2024, 1, 3))],
        lessons=[make_lesson("l1", datetime(2024, 1, 3, 19, 0, tzinfo=UTC))],
    )


class TestComposeDay:
    """Test single-day composition."""

    def test_replaced_day_shows_only_the_lesson(self, inputs):
        """Test the end-to-end replacement scenario in New York."""
        view = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)

        assert isinstance(view, DayView)
        assert len(view.lessons) == 1
        lesson = view.lessons[0]
        assert lesson.status == LessonStatus.CONFIRMED
        assert lesson.local_start.time() == time(14, 0)
        assert lesson.local_end.time() == time(15, 0)
        assert view.program_items == ()
        assert view.routines == ()
        assert view.videos == ()

    def test_unreplaced_rest_day(self, assignment):
        """Test a rest day shows as a rest program item."""
        view = compose_day("c1", date(2024, 1, 3), CalendarInputs(assignments=[assignment]), timezone=NEW_YORK)

        assert [item.kind for item in view.program_items] == [ProgramItemKind.REST]
        assert view.lessons == ()

    def test_lesson_and_workout_coexist(self, inputs, make_lesson):
        """Test only the overlay suppresses program items."""
        lessons = [make_lesson("l2", datetime(2024, 1, 2, 19, 0, tzinfo=UTC))]
        view = compose_day(
            "c1",
            date(2024, 1, 2),
            CalendarInputs(assignments=inputs.assignments, lessons=lessons),
            timezone=NEW_YORK,
        )

        assert len(view.lessons) == 1
        assert [item.kind for item in view.program_items] == [ProgramItemKind.WORKOUT]
        assert view.program_items[0].work_item_count == 1

    def test_replacement_leaves_lessons_untouched(self, inputs):
        """Test removing a program day never removes a lesson."""
        with_replacement = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)
        without = compose_day(
            "c1",
            date(2024, 1, 3),
            CalendarInputs(assignments=inputs.assignments, lessons=inputs.lessons),
            timezone=NEW_YORK,
        )
        assert with_replacement.lessons == without.lessons

    def test_other_client_records_ignored(self, inputs, make_assignment, make_lesson):
        """Test records of other clients never appear."""
        mixed = CalendarInputs(
            assignments=[*inputs.assignments, make_assignment("a2", client_id="c2")],
            lessons=[
                *inputs.lessons,
                make_lesson("l5", datetime(2024, 1, 3, 15, 0, tzinfo=UTC), client_id="c2"),
            ],
            routine_assignments=[
                RoutineAssignment(id="r9", client_id="c2", routine_id="rt", start_date=date(2024, 1, 3))
            ],
        )
        view = compose_day("c1", date(2024, 1, 3), mixed, timezone=NEW_YORK)

        assert [lesson.id for lesson in view.lessons] == ["l1"]
        assert {item.assignment_id for item in view.program_items} == {"a1"}
        assert view.routines == ()

    def test_lesson_date_follows_viewer_zone(self, make_lesson):
        """Test a late-evening lesson lands on the local date of the zone."""
        inputs = CalendarInputs(lessons=[make_lesson("l1", datetime(2024, 1, 4, 3, 0, tzinfo=UTC))])

        assert len(compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK).lessons) == 1
        assert compose_day("c1", date(2024, 1, 4), inputs, timezone=NEW_YORK).lessons == ()
        assert len(compose_day("c1", date(2024, 1, 4), inputs, timezone="UTC").lessons) == 1

    def test_all_statuses_are_shown(self, make_lesson):
        """Test lessons are status-tagged rather than filtered."""
        inputs = CalendarInputs(
            lessons=[
                make_lesson("l1", datetime(2024, 1, 3, 15, 0, tzinfo=UTC), status=LessonStatus.PENDING),
                make_lesson("l2", datetime(2024, 1, 3, 17, 0, tzinfo=UTC), status=LessonStatus.DECLINED),
            ]
        )
        view = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)
        assert [lesson.status for lesson in view.lessons] == [LessonStatus.PENDING, LessonStatus.DECLINED]

    def test_routines_and_videos_exact_match(self):
        """Test markers appear only on their exact date."""
        inputs = CalendarInputs(
            routine_assignments=[
                RoutineAssignment(id="r1", client_id="c1", routine_id="rt1", start_date=date(2024, 1, 3)),
                RoutineAssignment(id="r2", client_id="c1", routine_id="rt2", start_date=date(2024, 1, 4)),
            ],
            video_assignments=[
                VideoAssignment(id="v1", client_id="c1", video_id="vid1", due_date=date(2024, 1, 3)),
                VideoAssignment(id="v2", client_id="c1", video_id="vid2", due_date=None),
            ],
        )
        view = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)

        assert [m.id for m in view.routines] == ["r1"]
        assert [m.id for m in view.videos] == ["v1"]

    def test_lists_ordered_by_id(self, make_lesson):
        """Test deterministic ordering regardless of input order."""
        inputs = CalendarInputs(
            lessons=[
                make_lesson("l2", datetime(2024, 1, 3, 15, 0, tzinfo=UTC)),
                make_lesson("l1", datetime(2024, 1, 3, 17, 0, tzinfo=UTC)),
            ],
            video_assignments=[
                VideoAssignment(id="v2", client_id="c1", video_id="x", due_date=date(2024, 1, 3)),
                VideoAssignment(id="v1", client_id="c1", video_id="y", due_date=date(2024, 1, 3)),
            ],
        )
        first = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)
        second = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK)

        assert [lesson.id for lesson in first.lessons] == ["l1", "l2"]
        assert [m.id for m in first.videos] == ["v1", "v2"]
        assert first == second

    def test_empty_day(self):
        """Test a day with nothing on it."""
        view = compose_day("c1", date(2024, 1, 3), CalendarInputs(), timezone=NEW_YORK)
        assert view.is_empty

    def test_unknown_timezone(self, inputs):
        """Test the zone is validated."""
        with pytest.raises(UnknownTimezone):
            compose_day("c1", date(2024, 1, 3), inputs, timezone="")

    def test_to_dict(self, inputs):
        """Test the view serializes to plain values."""
        payload = compose_day("c1", date(2024, 1, 3), inputs, timezone=NEW_YORK).to_dict()

        assert payload["date"] == "2024-01-03"
        assert payload["lessons"][0]["status"] == "CONFIRMED"
        assert payload["lessons"][0]["local_start"] == "2024-01-03T14:00:00-05:00"
        assert payload["program_items"] == []


class TestComposeRange:
    """Test multi-day composition."""

    def test_one_view_per_date(self, inputs):
        """Test a week yields seven consecutive views."""
        views = compose_range("c1", date(2024, 1, 1), date(2024, 1, 7), inputs, timezone=NEW_YORK)

        assert [v.date for v in views] == [date(2024, 1, 1) + timedelta(days=n) for n in range(7)]
        assert views[2].program_items == ()
        assert len(views[2].lessons) == 1

    def test_maximum_span(self, inputs):
        """Test a six-week grid is allowed."""
        views = compose_range("c1", date(2024, 1, 1), date(2024, 2, 11), inputs, timezone=NEW_YORK)
        assert len(views) == 42

    def test_span_too_long(self, inputs):
        """Test ranges over the cap raise."""
        with pytest.raises(InvalidDateRange) as exc_info:
            compose_range("c1", date(2024, 1, 1), date(2024, 2, 12), inputs, timezone=NEW_YORK)
        assert exc_info.value.details["days"] == 43

    def test_reversed_range(self, inputs):
        """Test reversed ranges raise."""
        with pytest.raises(InvalidDateRange):
            compose_range("c1", date(2024, 1, 7), date(2024, 1, 1), inputs, timezone=NEW_YORK)
