"""Lesson instant builder.

Turns expanded recurrence dates plus a local wall-clock time into absolute UTC
lesson instants. A recurring request is planned as a LessonBatch: every
instance either becomes a LessonDraft or is recorded as a SkippedInstance, so
the caller decides between partial creation and full rejection.

Request-level problems (bad recurrence, unknown zone, bad duration) raise
immediately. Instance-level problems never abort the batch:
- PAST_INSTANT: the instant is at or before "now"
- NONEXISTENT_LOCAL_TIME: the wall-clock time falls in a DST gap
- NON_WORKING_DAY: the date is outside the coach's working weekdays
- CONFLICT: the interval overlaps a confirmed lesson or blocked time of the coach

Nothing here persists anything; drafts are handed back to the caller.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any

from coachcal.config.settings import get_settings
from coachcal.core.logging import get_logger
from coachcal.engine.clock import Clock, current_instant, resolve_zone, to_absolute
from coachcal.engine.constants import WEEKDAY_NAMES, LessonStatus, SkipReason
from coachcal.engine.dst import check_lesson
from coachcal.engine.exceptions import (
    CalendarException,
    InvalidLessonDuration,
    InvalidRecurrence,
    LessonConflict,
    NonexistentLocalTime,
    PastInstant,
)
from coachcal.engine.recurrence import RecurrenceRequest, expand, validate_request
from coachcal.schemas.records import BlockedTime, LessonEvent

logger = get_logger(__name__)

_GROUP_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "coachcal:recurrence-group")


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class LessonDraft:
    """One lesson instance ready to be persisted by the caller."""

    local_date: date
    client_id: str
    coach_id: str
    start_instant: datetime
    end_instant: datetime
    timezone: str
    status: LessonStatus = LessonStatus.CONFIRMED
    recurrence_group_id: str | None = None
    dst_warning: str | None = None

    @property
    def duration(self) -> timedelta:
        return self.end_instant - self.start_instant

    def to_dict(self) -> dict[str, Any]:
        return {
            "local_date": self.local_date.isoformat(),
            "client_id": self.client_id,
            "coach_id": self.coach_id,
            "start_instant": self.start_instant.isoformat(),
            "end_instant": self.end_instant.isoformat(),
            "timezone": self.timezone,
            "status": self.status.value,
            "recurrence_group_id": self.recurrence_group_id,
            "dst_warning": self.dst_warning,
        }


@dataclass(frozen=True)
class SkippedInstance:
    """An expanded date that did not become a draft.

    ``error`` holds the scheduling error for failures; it is None for dates
    filtered out as non-working days.
    """

    local_date: date
    reason: SkipReason
    message: str
    error: CalendarException | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "local_date": self.local_date.isoformat(),
            "reason": self.reason.value,
            "message": self.message,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass(frozen=True)
class LessonBatch:
    """Outcome of planning a recurring lesson request.

    Attributes:
        request: The recurrence that was expanded
        recurrence_group_id: Identifier shared by all drafts
        drafts: Instances that can be created, in date order
        skipped: Instances that were not created, in date order
    """

    request: RecurrenceRequest
    recurrence_group_id: str
    drafts: tuple[LessonDraft, ...] = field(default_factory=tuple)
    skipped: tuple[SkippedInstance, ...] = field(default_factory=tuple)

    @property
    def created_count(self) -> int:
        return len(self.drafts)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def failures(self) -> tuple[SkippedInstance, ...]:
        """Skipped instances that carry a scheduling error."""
        return tuple(s for s in self.skipped if s.error is not None)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def next_lesson_start(self) -> datetime | None:
        if not self.drafts:
            return None
        return min(d.start_instant for d in self.drafts)

    def raise_for_failures(self) -> None:
        """Re-raise the first scheduling error, for all-or-nothing callers.

        Raises:
            SchedulingError: The error of the earliest failed instance
        """
        failures = self.failures
        if failures:
            raise failures[0].error

    def to_dict(self) -> dict[str, Any]:
        return {
            "request": self.request.to_dict(),
            "recurrence_group_id": self.recurrence_group_id,
            "created_count": self.created_count,
            "skipped_count": self.skipped_count,
            "next_lesson_start": (
                self.next_lesson_start.isoformat() if self.next_lesson_start else None
            ),
            "drafts": [d.to_dict() for d in self.drafts],
            "skipped": [s.to_dict() for s in self.skipped],
        }


# =============================================================================
# Helpers
# =============================================================================

def resolve_duration(duration_minutes: int | None = None) -> timedelta:
    """Return the lesson duration, falling back to the configured default.

    Raises:
        InvalidLessonDuration: If the override is outside the configured bounds
    """
    settings = get_settings()
    if duration_minutes is None:
        return timedelta(minutes=settings.default_lesson_duration_minutes)

    lower = settings.min_lesson_duration_minutes
    upper = settings.max_lesson_duration_minutes
    if (
        isinstance(duration_minutes, bool)
        or not isinstance(duration_minutes, int)
        or not lower <= duration_minutes <= upper
    ):
        raise InvalidLessonDuration(
            f"Lesson duration must be between {lower} and {upper} minutes",
            details={"duration_minutes": duration_minutes, "min": lower, "max": upper},
        )
    return timedelta(minutes=duration_minutes)


def normalize_weekdays(values: Iterable[int | str] | None) -> frozenset[int] | None:
    """Normalize working weekdays to ISO numbers (Monday=1 .. Sunday=7).

    Returns None when no filter applies.

    Raises:
        InvalidRecurrence: On an unknown day name or number
    """
    if values is None:
        return None

    days: set[int] = set()
    for value in values:
        if isinstance(value, str):
            number = WEEKDAY_NAMES.get(value.strip().lower())
        elif isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 7:
            number = value
        else:
            number = None
        if number is None:
            raise InvalidRecurrence(
                f"Unknown working weekday: {value!r}",
                details={"weekday": value},
            )
        days.add(number)
    return frozenset(days)


def recurrence_group_id_for(
    request: RecurrenceRequest,
    local_time: time,
    *,
    client_id: str,
    coach_id: str,
) -> str:
    """Deterministic group id, so replaying a request yields the same id."""
    cadence = validate_request(request)
    name = "|".join(
        [
            client_id,
            coach_id,
            request.start_local_date.isoformat(),
            cadence.value,
            str(request.interval),
            local_time.strftime("%H:%M"),
        ]
    )
    return str(uuid.uuid5(_GROUP_NAMESPACE, name))


def _overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    # Half-open intervals: back-to-back lessons do not conflict
    return start < other_end and other_start < end


def find_conflict(
    start: datetime,
    end: datetime,
    coach_id: str,
    existing_lessons: Sequence[LessonEvent] = (),
    blocked_times: Sequence[BlockedTime] = (),
) -> str | None:
    """Describe the first confirmed lesson or blocked time the interval overlaps.

    Args:
        start: Candidate start (UTC)
        end: Candidate end (UTC)
        coach_id: Coach the candidate belongs to
        existing_lessons: Lessons already on record
        blocked_times: Coach unavailability

    Returns:
        Description of the conflict, or None
    """
    for lesson in sorted(existing_lessons, key=lambda e: e.id):
        if lesson.coach_id != coach_id or lesson.status != LessonStatus.CONFIRMED:
            continue
        if _overlaps(start, end, lesson.start_instant, lesson.end_instant):
            return f"Overlaps confirmed lesson {lesson.id}"

    for blocked in sorted(blocked_times, key=lambda b: b.id):
        if blocked.coach_id != coach_id:
            continue
        if _overlaps(start, end, blocked.start_instant, blocked.end_instant):
            return f"Overlaps blocked time {blocked.id}"
    return None


# =============================================================================
# Builders
# =============================================================================

def _instant(
    local_date: date,
    local_time: time,
    tz_name: str,
    now_utc: datetime,
    duration: timedelta,
) -> tuple[datetime, datetime]:
    start = to_absolute(local_date, local_time, tz_name)
    if start <= now_utc:
        raise PastInstant(
            f"Lesson on {local_date.isoformat()} at {local_time.strftime('%H:%M')} is in the past",
            details={
                "local_date": local_date.isoformat(),
                "start_instant": start.isoformat(),
                "now": now_utc.isoformat(),
            },
        )
    return start, start + duration


def build_instant(
    local_date: date,
    local_time: time,
    tz_name: str,
    *,
    now: datetime | Clock,
    duration_minutes: int | None = None,
) -> tuple[datetime, datetime]:
    """Build the absolute start and end of one lesson.

    Args:
        local_date: Lesson date in the zone
        local_time: Wall-clock start time in the zone
        tz_name: IANA zone name
        now: Caller-supplied current instant (aware) or a Clock
        duration_minutes: Optional override of the default duration

    Returns:
        (start, end) as UTC datetimes

    Raises:
        UnknownTimezone: If the zone name is invalid
        NaiveInstant: If ``now`` is naive
        InvalidLessonDuration: If the override is out of bounds
        NonexistentLocalTime: If the wall-clock time is skipped by a DST gap
        PastInstant: If the start is not strictly after ``now``
    """
    duration = resolve_duration(duration_minutes)
    return _instant(local_date, local_time, tz_name, current_instant(now), duration)


def build_lessons(
    request: RecurrenceRequest,
    local_time: time,
    *,
    now: datetime | Clock,
    client_id: str,
    coach_id: str,
    duration_minutes: int | None = None,
    status: LessonStatus = LessonStatus.CONFIRMED,
    recurrence_group_id: str | None = None,
    working_weekdays: Iterable[int | str] | None = None,
    existing_lessons: Sequence[LessonEvent] = (),
    blocked_times: Sequence[BlockedTime] = (),
) -> LessonBatch:
    """Plan every lesson of a recurring request.

    Args:
        request: Recurrence to expand; its ``timezone`` applies to ``local_time``
        local_time: Wall-clock start time of every instance
        now: Caller-supplied current instant (aware) or a Clock
        client_id: Client the lessons are for
        coach_id: Coach giving the lessons
        duration_minutes: Optional duration override
        status: Status given to every draft
        recurrence_group_id: Group id to use instead of the derived one
        working_weekdays: Optional ISO weekday numbers or English day names
        existing_lessons: Lessons to check for coach conflicts
        blocked_times: Coach unavailability to check for conflicts

    Returns:
        LessonBatch with drafts and skipped instances in date order

    Raises:
        InvalidRecurrence: If the request or working weekdays are malformed
        UnknownTimezone: If the request zone is invalid
        NaiveInstant: If ``now`` is naive
        InvalidLessonDuration: If the override is out of bounds
    """
    settings = get_settings()
    tz_name = request.timezone
    resolve_zone(tz_name)
    dates = expand(request)
    duration = resolve_duration(duration_minutes)
    now_utc = current_instant(now)
    weekdays = normalize_weekdays(working_weekdays)
    group_id = recurrence_group_id or recurrence_group_id_for(
        request, local_time, client_id=client_id, coach_id=coach_id
    )

    drafts: list[LessonDraft] = []
    skipped: list[SkippedInstance] = []

    for local_date in dates:
        if weekdays is not None and local_date.isoweekday() not in weekdays:
            skipped.append(
                SkippedInstance(
                    local_date=local_date,
                    reason=SkipReason.NON_WORKING_DAY,
                    message=f"{local_date.strftime('%A')} is not a working day",
                )
            )
            continue

        try:
            start, end = _instant(local_date, local_time, tz_name, now_utc, duration)
        except PastInstant as exc:
            skipped.append(SkippedInstance(local_date, SkipReason.PAST_INSTANT, exc.message, exc))
            continue
        except NonexistentLocalTime as exc:
            skipped.append(
                SkippedInstance(local_date, SkipReason.NONEXISTENT_LOCAL_TIME, exc.message, exc)
            )
            continue

        conflict = find_conflict(start, end, coach_id, existing_lessons, blocked_times)
        if conflict is not None:
            error = LessonConflict(
                conflict,
                details={
                    "local_date": local_date.isoformat(),
                    "start_instant": start.isoformat(),
                    "end_instant": end.isoformat(),
                    "coach_id": coach_id,
                },
            )
            skipped.append(SkippedInstance(local_date, SkipReason.CONFLICT, conflict, error))
            continue

        dst_warning = None
        if settings.dst_warnings_enabled:
            check = check_lesson(local_date, local_time, tz_name)
            if not check.passed:
                dst_warning = " ".join(check.warnings)

        drafts.append(
            LessonDraft(
                local_date=local_date,
                client_id=client_id,
                coach_id=coach_id,
                start_instant=start,
                end_instant=end,
                timezone=tz_name,
                status=status,
                recurrence_group_id=group_id,
                dst_warning=dst_warning,
            )
        )

    for item in skipped:
        logger.warning(
            "lesson_instance_skipped",
            local_date=item.local_date.isoformat(),
            reason=item.reason.value,
            recurrence_group_id=group_id,
        )
    logger.debug(
        "lesson_batch_built",
        recurrence_group_id=group_id,
        created=len(drafts),
        skipped=len(skipped),
    )
    return LessonBatch(
        request=request,
        recurrence_group_id=group_id,
        drafts=tuple(drafts),
        skipped=tuple(skipped),
    )
