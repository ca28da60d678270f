"""Shared fixtures for calendar engine tests."""
from datetime import date, datetime, timedelta

import pytest

from coachcal.config.settings import get_settings
from coachcal.schemas.records import (
    LessonEvent,
    ProgramAssignment,
    ProgramDay,
    ProgramWeek,
    WorkItem,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so env overrides in a test never leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _build_assignment(
    assignment_id: str = "a1",
    client_id: str = "c1",
    start_date: date = date(2024, 1, 1),
    duration_weeks: int = 6,
    rest_days: tuple[tuple[int, int], ...] = ((1, 3),),
    grid_weeks: int | None = None,
    program_id: str = "p1",
) -> ProgramAssignment:
    weeks = []
    for week_number in range(1, (grid_weeks or duration_weeks) + 1):
        days = []
        for day_number in range(1, 8):
            rest = (week_number, day_number) in rest_days
            days.append(
                ProgramDay(
                    day_number=day_number,
                    is_rest_day=rest,
                    work_items=() if rest else (WorkItem(id=f"w{week_number}d{day_number}"),),
                )
            )
        weeks.append(ProgramWeek(week_number=week_number, days=tuple(days)))
    return ProgramAssignment(
        id=assignment_id,
        client_id=client_id,
        program_id=program_id,
        start_date=start_date,
        weeks=tuple(weeks),
        duration_weeks=duration_weeks,
    )


def _build_lesson(
    lesson_id: str,
    start: datetime,
    minutes: int = 60,
    client_id: str = "c1",
    coach_id: str = "k1",
    **kwargs,
) -> LessonEvent:
    return LessonEvent(
        id=lesson_id,
        client_id=client_id,
        coach_id=coach_id,
        start_instant=start,
        end_instant=start + timedelta(minutes=minutes),
        **kwargs,
    )


@pytest.fixture
def make_assignment():
    """Factory for assignments whose grid has one work item per non-rest day."""
    return _build_assignment


@pytest.fixture
def make_lesson():
    """Factory for lesson events of a given length in minutes."""
    return _build_lesson


@pytest.fixture
def assignment() -> ProgramAssignment:
    """Six-week program starting 2024-01-01 with week 1 day 3 as rest."""
    return _build_assignment()
