"""Daylight-saving transition advisories for lesson scheduling.

Transitions are detected from the zone's own rules (UTC offset changes within a
local day) rather than from hard-coded March/November dates, so the advisories
hold for any IANA zone, including zones without DST.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Literal

from coachcal.core.logging import get_logger
from coachcal.engine.base import BaseValidationResult, ValidationMixin
from coachcal.engine.clock import UTC, resolve_zone, to_local_datetime

logger = get_logger(__name__)

TransitionKind = Literal["spring", "fall"]

_SCAN_STEP = timedelta(minutes=15)
_TRANSITION_PROXIMITY = timedelta(hours=1)


@dataclass(frozen=True)
class DSTTransition:
    """One offset change in a zone, expressed in local wall-clock terms."""

    local_date: date
    kind: TransitionKind
    local_time: time
    offset_before: timedelta
    offset_after: timedelta

    def to_dict(self) -> dict[str, Any]:
        return {
            "local_date": self.local_date.isoformat(),
            "kind": self.kind,
            "local_time": self.local_time.strftime("%H:%M"),
            "offset_before_minutes": int(self.offset_before.total_seconds() // 60),
            "offset_after_minutes": int(self.offset_after.total_seconds() // 60),
        }


@dataclass(frozen=True)
class DSTCheckResult(BaseValidationResult):
    """Outcome of checking one lesson time against DST transitions.

    Attributes:
        passed: False when the lesson falls on a transition day
        message: Summary of warnings and suggestions
        warnings: Individual warning lines
        suggestions: Individual suggestion lines
        transition_kind: "spring", "fall" or None
    """

    warnings: tuple[str, ...] = field(default_factory=tuple)
    suggestions: tuple[str, ...] = field(default_factory=tuple)
    transition_kind: TransitionKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "transition_kind": self.transition_kind,
        }


def _find_transition(local_date: date, tz_name: str) -> DSTTransition | None:
    zone = resolve_zone(tz_name)
    start = datetime.combine(local_date, time(0, 0), tzinfo=zone)
    end = datetime.combine(local_date, time(23, 59, 59), tzinfo=zone)
    offset_before = start.utcoffset()
    offset_after = end.utcoffset()
    if offset_before == offset_after:
        return None

    # Walk the day in absolute time to find the wall-clock moment of the change
    cursor = start.astimezone(UTC)
    limit = end.astimezone(UTC)
    transition_time = time(0, 0)
    while cursor <= limit:
        local = cursor.astimezone(zone)
        if local.utcoffset() != offset_before:
            transition_time = (local - (offset_after - offset_before)).time().replace(second=0, microsecond=0)
            break
        cursor += _SCAN_STEP

    kind: TransitionKind = "spring" if offset_after > offset_before else "fall"
    return DSTTransition(
        local_date=local_date,
        kind=kind,
        local_time=transition_time,
        offset_before=offset_before,
        offset_after=offset_after,
    )


def is_transition_date(local_date: date, tz_name: str) -> bool:
    """True when the zone's UTC offset changes during the local day."""
    return _find_transition(local_date, tz_name) is not None


def transition_kind(local_date: date, tz_name: str) -> TransitionKind | None:
    transition = _find_transition(local_date, tz_name)
    return transition.kind if transition else None


def transitions_in_year(year: int, tz_name: str) -> tuple[DSTTransition, ...]:
    """All offset changes of a zone during a calendar year, in date order."""
    resolve_zone(tz_name)
    found: list[DSTTransition] = []
    day = date(year, 1, 1)
    while day.year == year:
        transition = _find_transition(day, tz_name)
        if transition is not None:
            found.append(transition)
        day += timedelta(days=1)
    return tuple(found)


def is_dst(instant: datetime, tz_name: str) -> bool:
    local = to_local_datetime(instant, tz_name)
    return bool(local.dst())


def offset_label(instant: datetime, tz_name: str) -> str:
    """Offset of the zone at an instant, formatted as "UTC-5" or "UTC+5:30"."""
    offset = to_local_datetime(instant, tz_name).utcoffset() or timedelta(0)
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    if minutes:
        return f"UTC{sign}{hours}:{minutes:02d}"
    return f"UTC{sign}{hours}"


def check_lesson(local_date: date, local_time: time, tz_name: str) -> DSTCheckResult:
    """Flag a lesson that lands on a DST transition day in its zone.

    Args:
        local_date: Lesson date in the zone
        local_time: Lesson wall-clock start time
        tz_name: IANA zone name

    Returns:
        DSTCheckResult; ``passed`` is False when warnings were raised
    """
    transition = _find_transition(local_date, tz_name)
    if transition is None:
        return DSTCheckResult(
            passed=True,
            message=ValidationMixin._build_pass_message("DST check", local_date.isoformat()),
        )

    warnings: list[str] = []
    suggestions: list[str] = []
    shift = abs(int((transition.offset_after - transition.offset_before).total_seconds() // 60))
    at = transition.local_time.strftime("%H:%M")
    if transition.kind == "spring":
        warnings.append(
            f"Lesson scheduled on a DST spring-forward day: clocks skip {shift} minutes at {at}."
        )
        suggestions.append("Consider scheduling the lesson for a different day to avoid the time jump.")
    else:
        warnings.append(
            f"Lesson scheduled on a DST fall-back day: clocks repeat {shift} minutes at {at}."
        )
        suggestions.append("Consider scheduling the lesson for a different day to avoid confusion.")
        suggestions.append("If scheduling is necessary, clearly communicate the time to the client.")

    lesson_wall = datetime.combine(local_date, local_time.replace(tzinfo=None))
    transition_wall = datetime.combine(local_date, transition.local_time)
    if abs(lesson_wall - transition_wall) <= _TRANSITION_PROXIMITY:
        warnings.append("Lesson scheduled during the DST transition hour. This may cause confusion.")
        suggestions.append("Consider scheduling for a different time to avoid DST transition issues.")

    logger.debug(
        "dst_lesson_flagged",
        local_date=local_date.isoformat(),
        timezone=tz_name,
        kind=transition.kind,
    )
    return DSTCheckResult(
        passed=False,
        message=ValidationMixin._build_fail_message(
            "DST check", local_date.isoformat(), warnings, suggestions
        ),
        warnings=tuple(warnings),
        suggestions=tuple(suggestions),
        transition_kind=transition.kind,
    )
