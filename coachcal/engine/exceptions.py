"""Exception hierarchy for the calendar engine.

Every engine error is a ``DomainError`` so the embedding application can map
``code``/``message``/``details`` onto its own transport without knowing the
concrete class.

Exception Hierarchy:
- CalendarException (base)
  - CalendarValidationError (malformed caller input)
    - InvalidRecurrence (cadence, interval or date range)
    - InvalidLessonDuration (duration outside allowed bounds)
    - InvalidDateRange (reversed or oversized calendar range)
    - InvalidComplianceWindow (unsupported rolling window)
    - UnknownTimezone (empty or unknown IANA zone name)
    - NaiveInstant (datetime without tzinfo where an instant is required)
  - SchedulingError (well-formed input that cannot be scheduled)
    - PastInstant (lesson instant at or before "now")
    - NonexistentLocalTime (wall-clock time skipped by a DST gap)
    - LessonConflict (overlaps a confirmed lesson or blocked time)

Example:
    try:
        batch = build_lessons(request, time(14, 0), now=now, client_id="c1", coach_id="k1")
    except InvalidRecurrence as e:
        logger.warning("recurrence_rejected", **e.details)
    except CalendarException as e:
        logger.error("calendar_error", code=e.code)
"""

from __future__ import annotations

from coachcal.core.exceptions import DomainError


# =============================================================================
# Base Exception
# =============================================================================

class CalendarException(DomainError):
    """Base exception for all calendar-engine errors.

    Attributes:
        code: Stable machine-readable error code
        message: Human-readable error message
        details: Dictionary with the offending values
    """

    default_code = "CAL_001"

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(code or self.default_code, message, details)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Validation Exceptions
# =============================================================================

class CalendarValidationError(CalendarException):
    """Base exception for malformed caller input.

    The caller must reject the request before any persistence attempt.
    """

    default_code = "VAL_CALENDAR_001"


class InvalidRecurrence(CalendarValidationError):
    """Raised when a recurrence request has a bad cadence, interval or range.

    Example:
        ```python
        if interval < 1:
            raise InvalidRecurrence(
                "Recurrence interval must be a positive integer",
                details={"interval": interval},
            )
        ```
    """

    default_code = "VAL_RECURRENCE_001"


class InvalidLessonDuration(CalendarValidationError):
    """Raised when a lesson duration falls outside the configured bounds."""

    default_code = "VAL_DURATION_001"


class InvalidDateRange(CalendarValidationError):
    """Raised when a calendar range is reversed or longer than allowed."""

    default_code = "VAL_DATE_RANGE_001"


class InvalidComplianceWindow(CalendarValidationError):
    """Raised when a compliance window is not one of the supported sizes."""

    default_code = "VAL_WINDOW_001"


class UnknownTimezone(CalendarValidationError):
    """Raised when a timezone name is empty or not a known IANA zone."""

    default_code = "VAL_TIMEZONE_001"


class NaiveInstant(CalendarValidationError):
    """Raised when a datetime without tzinfo is used as an absolute instant."""

    default_code = "VAL_INSTANT_001"


# =============================================================================
# Scheduling Exceptions
# =============================================================================

class SchedulingError(CalendarException):
    """Base exception for input that is well formed but cannot be scheduled."""

    default_code = "BR_SCHEDULING_001"


class PastInstant(SchedulingError):
    """Raised when a lesson instant is not strictly after the supplied "now".

    Reported per instance: a recurring batch records it against the offending
    date so the caller can choose partial creation or full rejection.
    """

    default_code = "BR_PAST_INSTANT"


class NonexistentLocalTime(SchedulingError):
    """Raised when a local wall-clock time falls in a DST gap.

    The engine fails closed instead of silently shifting the lesson by an hour.
    """

    default_code = "BR_LOCAL_TIME_GAP"


class LessonConflict(SchedulingError):
    """Raised when a lesson instance overlaps a confirmed lesson or blocked time
    of the same coach."""

    default_code = "BR_LESSON_CONFLICT"


# =============================================================================
# Utility Functions
# =============================================================================

def is_validation_error(exception: Exception) -> bool:
    """Check if exception is a caller-input validation error.

    Args:
        exception: The exception to check

    Returns:
        True if exception is a CalendarValidationError or subclass
    """
    return isinstance(exception, CalendarValidationError)


def is_scheduling_error(exception: Exception) -> bool:
    """Check if exception is a per-instance scheduling error.

    Args:
        exception: The exception to check

    Returns:
        True if exception is a SchedulingError or subclass
    """
    return isinstance(exception, SchedulingError)
