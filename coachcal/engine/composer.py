"""Calendar composer.

Builds the per-day view a client or coach sees: lessons, program workout/rest
days, routine markers and video due-dates. The only suppression rule is the
replacement overlay; a lesson and a program day on the same date otherwise
coexist.

Every list is ordered by entity id so repeated calls with the same inputs
produce identical output.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from coachcal.config.settings import get_settings
from coachcal.core.logging import get_logger
from coachcal.engine.clock import resolve_zone, to_local_date, to_local_datetime
from coachcal.engine.constants import LessonStatus, ProgramItemKind
from coachcal.engine.exceptions import InvalidDateRange
from coachcal.engine.overlay import filter_replaced
from coachcal.engine.program_days import DayCell, resolve
from coachcal.schemas.records import (
    LessonEvent,
    ProgramAssignment,
    ReplacementRecord,
    RoutineAssignment,
    VideoAssignment,
)

logger = get_logger(__name__)


# =============================================================================
# Inputs
# =============================================================================

@dataclass(frozen=True)
class CalendarInputs:
    """Records already fetched and authorized by the caller.

    Records for other clients may be included; the composer filters by client.
    """

    assignments: Sequence[ProgramAssignment] = ()
    replacements: Sequence[ReplacementRecord] = ()
    lessons: Sequence[LessonEvent] = ()
    routine_assignments: Sequence[RoutineAssignment] = ()
    video_assignments: Sequence[VideoAssignment] = ()

    def for_client(self, client_id: str) -> "CalendarInputs":
        """Inputs restricted to one client.

        Replacement records carry no client, so they are kept when they point
        at one of the client's assignments.
        """
        assignments = tuple(a for a in self.assignments if a.client_id == client_id)
        assignment_ids = {a.id for a in assignments}
        return CalendarInputs(
            assignments=assignments,
            replacements=tuple(r for r in self.replacements if r.assignment_id in assignment_ids),
            lessons=tuple(e for e in self.lessons if e.client_id == client_id),
            routine_assignments=tuple(
                r for r in self.routine_assignments if r.client_id == client_id
            ),
            video_assignments=tuple(v for v in self.video_assignments if v.client_id == client_id),
        )


# =============================================================================
# View Items
# =============================================================================

@dataclass(frozen=True)
class LessonItem:
    """A lesson as shown on a day, with its times in the viewer's zone."""

    id: str
    coach_id: str
    status: LessonStatus
    start_instant: datetime
    end_instant: datetime
    local_start: datetime
    local_end: datetime
    recurrence_group_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "coach_id": self.coach_id,
            "status": self.status.value,
            "start_instant": self.start_instant.isoformat(),
            "end_instant": self.end_instant.isoformat(),
            "local_start": self.local_start.isoformat(),
            "local_end": self.local_end.isoformat(),
            "recurrence_group_id": self.recurrence_group_id,
        }


@dataclass(frozen=True)
class ProgramItem:
    assignment_id: str
    program_id: str
    kind: ProgramItemKind
    week_number: int
    day_number: int
    work_item_count: int
    title: str | None = None

    @classmethod
    def from_cell(cls, cell: DayCell) -> "ProgramItem":
        return cls(
            assignment_id=cell.assignment_id,
            program_id=cell.program_id,
            kind=ProgramItemKind.REST if cell.is_rest_day else ProgramItemKind.WORKOUT,
            week_number=cell.week_number,
            day_number=cell.day_number,
            work_item_count=cell.work_item_count,
            title=cell.title,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "assignment_id": self.assignment_id,
            "program_id": self.program_id,
            "kind": self.kind.value,
            "week_number": self.week_number,
            "day_number": self.day_number,
            "work_item_count": self.work_item_count,
            "title": self.title,
        }


@dataclass(frozen=True)
class RoutineMarker:
    id: str
    routine_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "routine_id": self.routine_id}


@dataclass(frozen=True)
class VideoMarker:
    id: str
    video_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "video_id": self.video_id}


@dataclass(frozen=True)
class DayView:
    """Everything visible for one client on one local date."""

    client_id: str
    date: date
    timezone: str
    lessons: tuple[LessonItem, ...] = field(default_factory=tuple)
    program_items: tuple[ProgramItem, ...] = field(default_factory=tuple)
    routines: tuple[RoutineMarker, ...] = field(default_factory=tuple)
    videos: tuple[VideoMarker, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.lessons or self.program_items or self.routines or self.videos)

    def to_dict(self) -> dict[str, Any]:
        return {
            "client_id": self.client_id,
            "date": self.date.isoformat(),
            "timezone": self.timezone,
            "lessons": [item.to_dict() for item in self.lessons],
            "program_items": [item.to_dict() for item in self.program_items],
            "routines": [item.to_dict() for item in self.routines],
            "videos": [item.to_dict() for item in self.videos],
        }


# =============================================================================
# Composition
# =============================================================================

def _lesson_items(lessons: Sequence[LessonEvent], target: date, tz_name: str) -> tuple[LessonItem, ...]:
    items = [
        LessonItem(
            id=lesson.id,
            coach_id=lesson.coach_id,
            status=lesson.status,
            start_instant=lesson.start_instant,
            end_instant=lesson.end_instant,
            local_start=to_local_datetime(lesson.start_instant, tz_name),
            local_end=to_local_datetime(lesson.end_instant, tz_name),
            recurrence_group_id=lesson.recurrence_group_id,
        )
        for lesson in lessons
        if to_local_date(lesson.start_instant, tz_name) == target
    ]
    items.sort(key=lambda item: (item.id, item.start_instant))
    return tuple(items)


def _program_items(
    assignments: Sequence[ProgramAssignment],
    replacements: Sequence[ReplacementRecord],
    target: date,
) -> tuple[ProgramItem, ...]:
    cells = [
        cell
        for cell in (resolve(assignment, target) for assignment in assignments)
        if isinstance(cell, DayCell)
    ]
    items = [ProgramItem.from_cell(cell) for cell in filter_replaced(cells, replacements)]
    items.sort(key=lambda item: (item.assignment_id, item.program_id))
    return tuple(items)


def _compose(client_id: str, target: date, inputs: CalendarInputs, tz_name: str) -> DayView:
    routines = sorted(
        (
            RoutineMarker(id=r.id, routine_id=r.routine_id)
            for r in inputs.routine_assignments
            if r.start_date == target
        ),
        key=lambda m: (m.id, m.routine_id),
    )
    videos = sorted(
        (
            VideoMarker(id=v.id, video_id=v.video_id)
            for v in inputs.video_assignments
            if v.due_date is not None and v.due_date == target
        ),
        key=lambda m: (m.id, m.video_id),
    )
    return DayView(
        client_id=client_id,
        date=target,
        timezone=tz_name,
        lessons=_lesson_items(inputs.lessons, target, tz_name),
        program_items=_program_items(inputs.assignments, inputs.replacements, target),
        routines=tuple(routines),
        videos=tuple(videos),
    )


def compose_day(client_id: str, target: date, inputs: CalendarInputs, *, timezone: str) -> DayView:
    """Compose the view of one client's day.

    Args:
        client_id: Client whose calendar is shown
        target: Local calendar date
        inputs: Records fetched by the caller
        timezone: IANA zone the day and lesson times are expressed in

    Returns:
        DayView with lessons, program items, routines and videos

    Raises:
        UnknownTimezone: If the zone name is invalid
    """
    resolve_zone(timezone)
    view = _compose(client_id, target, inputs.for_client(client_id), timezone)
    logger.debug(
        "day_composed",
        client_id=client_id,
        date=target.isoformat(),
        lessons=len(view.lessons),
        program_items=len(view.program_items),
        routines=len(view.routines),
        videos=len(view.videos),
    )
    return view


def compose_range(
    client_id: str,
    start: date,
    end: date,
    inputs: CalendarInputs,
    *,
    timezone: str,
) -> list[DayView]:
    """Compose one DayView per date from ``start`` to ``end`` inclusive.

    Raises:
        InvalidDateRange: If the range is reversed or longer than the
            configured maximum
        UnknownTimezone: If the zone name is invalid
    """
    max_days = get_settings().calendar_range_max_days
    if end < start:
        raise InvalidDateRange(
            "Range end is before its start",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )
    span = (end - start).days + 1
    if span > max_days:
        raise InvalidDateRange(
            f"Calendar range may cover at most {max_days} days",
            details={"start": start.isoformat(), "end": end.isoformat(), "days": span},
        )

    views = list(iter_days(client_id, start, end, inputs, timezone=timezone))
    logger.debug("range_composed", client_id=client_id, start=start.isoformat(), days=span)
    return views


def iter_days(
    client_id: str,
    start: date,
    end: date,
    inputs: CalendarInputs,
    *,
    timezone: str,
) -> Iterator[DayView]:
    """Yield a DayView per date from ``start`` to ``end`` inclusive, uncapped.

    Used by read paths such as compliance that walk longer spans than a
    calendar screen shows. Yields nothing for a reversed range.
    """
    resolve_zone(timezone)
    client_inputs = inputs.for_client(client_id)
    current = start
    while current <= end:
        yield _compose(client_id, current, client_inputs, timezone)
        current += timedelta(days=1)
