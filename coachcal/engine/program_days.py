"""Program-day resolver.

Maps a calendar date onto a cell of an assignment's week/day grid:

    days_since_start = target_date - start_date   (local-date arithmetic)
    week index       = days_since_start // 7
    day index        = days_since_start % 7

Dates before the start, on or after ``duration_weeks * 7`` days, or pointing at
a week/day the grid does not define resolve to an Inactive value. Malformed
grids never raise.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from coachcal.core.logging import get_logger
from coachcal.engine.constants import DAYS_PER_WEEK, InactiveReason
from coachcal.engine.exceptions import InvalidDateRange
from coachcal.schemas.records import ProgramAssignment, ProgramDay

logger = get_logger(__name__)


@dataclass(frozen=True)
class DayCell:
    """The active program cell for one assignment on one date."""

    assignment_id: str
    program_id: str
    date: date
    week_number: int
    day_number: int
    is_rest_day: bool
    work_item_count: int
    title: str | None = None

    @property
    def key(self) -> tuple[str, date]:
        """Identity shared with replacement records."""
        return (self.assignment_id, self.date)

    def to_dict(self) -> dict[str, Any]:
        return {
            "assignment_id": self.assignment_id,
            "program_id": self.program_id,
            "date": self.date.isoformat(),
            "week_number": self.week_number,
            "day_number": self.day_number,
            "is_rest_day": self.is_rest_day,
            "work_item_count": self.work_item_count,
            "title": self.title,
        }


@dataclass(frozen=True)
class Inactive:
    assignment_id: str
    date: date
    reason: InactiveReason


def _find_day(assignment: ProgramAssignment, week_number: int, day_number: int) -> ProgramDay | None:
    for week in assignment.weeks:
        if week.week_number != week_number:
            continue
        for day in week.days:
            if day.day_number == day_number:
                return day
    return None


def resolve(assignment: ProgramAssignment, target_date: date) -> DayCell | Inactive:
    """Resolve the program cell active on a date.

    Args:
        assignment: The client's program assignment
        target_date: Local calendar date to resolve

    Returns:
        DayCell when the program is active on the date, otherwise Inactive
    """
    days_since_start = (target_date - assignment.start_date).days
    if days_since_start < 0:
        return Inactive(assignment.id, target_date, InactiveReason.BEFORE_START)
    if days_since_start >= assignment.total_days:
        return Inactive(assignment.id, target_date, InactiveReason.AFTER_END)

    week_number = days_since_start // DAYS_PER_WEEK + 1
    day_number = days_since_start % DAYS_PER_WEEK + 1
    day = _find_day(assignment, week_number, day_number)
    if day is None:
        logger.warning(
            "program_cell_missing",
            assignment_id=assignment.id,
            program_id=assignment.program_id,
            week_number=week_number,
            day_number=day_number,
            date=target_date.isoformat(),
        )
        return Inactive(assignment.id, target_date, InactiveReason.MISSING_CELL)

    work_item_count = len(day.work_items)
    return DayCell(
        assignment_id=assignment.id,
        program_id=assignment.program_id,
        date=target_date,
        week_number=week_number,
        day_number=day_number,
        is_rest_day=day.is_rest_day or work_item_count == 0,
        work_item_count=work_item_count,
        title=day.title,
    )


def resolve_range(assignment: ProgramAssignment, start: date, end: date) -> list[DayCell]:
    """All active cells of an assignment between two dates, inclusive.

    Raises:
        InvalidDateRange: If ``end`` is before ``start``
    """
    if end < start:
        raise InvalidDateRange(
            "Range end is before its start",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )

    # Only walk the part of the range the assignment can cover
    first = max(start, assignment.start_date)
    last = min(end, assignment.end_date) if assignment.end_date else None
    if last is None or first > last:
        return []

    cells: list[DayCell] = []
    current = first
    while current <= last:
        result = resolve(assignment, current)
        if isinstance(result, DayCell):
            cells.append(result)
        current += timedelta(days=1)
    return cells
