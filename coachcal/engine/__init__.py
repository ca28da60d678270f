"""Calendar composition and recurring-scheduling engine.

This package turns already-fetched coaching records into timezone-correct
lesson instants, per-day calendar views and compliance metrics. It performs no
I/O: the caller supplies records, the IANA timezone and "now".

Main exports:
    - expand: Expand a RecurrenceRequest into local calendar dates
    - build_instant: Absolute start/end of a single lesson
    - build_lessons: Plan a recurring request into a LessonBatch
    - resolve: Resolve a program assignment's cell for a date
    - filter_replaced: Drop program cells covered by replacement records
    - compose_day: Build the DayView of one client's date
    - compose_range: Build DayViews for a short date range
    - aggregate: Roll DayViews into a ComplianceWindow
    - client_compliance: Compose and aggregate a client's compliance
    - check_lesson: DST advisory for a lesson time
"""
from .clock import (
    UTC,
    Clock,
    FixedClock,
    SystemClock,
    current_instant,
    ensure_utc,
    resolve_zone,
    to_absolute,
    to_local_date,
    to_local_datetime,
    today,
)

from .recurrence import (
    RecurrenceRequest,
    add_months,
    expand,
)

from .lesson_builder import (
    LessonBatch,
    LessonDraft,
    SkippedInstance,
    build_instant,
    build_lessons,
    find_conflict,
)

from .program_days import (
    DayCell,
    Inactive,
    resolve,
    resolve_range,
)

from .overlay import (
    filter_replaced,
    replaced_keys,
)

from .composer import (
    CalendarInputs,
    DayView,
    LessonItem,
    ProgramItem,
    RoutineMarker,
    VideoMarker,
    compose_day,
    compose_range,
    iter_days,
)

from .compliance import (
    ComplianceWindow,
    aggregate,
    client_compliance,
    compliance_band,
    window_bounds,
)

from .dst import (
    DSTCheckResult,
    DSTTransition,
    check_lesson,
    is_dst,
    is_transition_date,
    offset_label,
    transition_kind,
    transitions_in_year,
)

from .exceptions import (
    CalendarException,
    CalendarValidationError,
    InvalidComplianceWindow,
    InvalidDateRange,
    InvalidLessonDuration,
    InvalidRecurrence,
    LessonConflict,
    NaiveInstant,
    NonexistentLocalTime,
    PastInstant,
    SchedulingError,
    UnknownTimezone,
    is_scheduling_error,
    is_validation_error,
)

from .base import (
    BaseValidationResult,
    ValidationMixin,
)

from .constants import (
    Cadence,
    ComplianceBand,
    ComplianceLimits,
    InactiveReason,
    LessonStatus,
    ProgramItemKind,
    SkipReason,
    DAYS_PER_WEEK,
)

__all__ = [
    # Clock
    "UTC",
    "Clock",
    "FixedClock",
    "SystemClock",
    "current_instant",
    "ensure_utc",
    "resolve_zone",
    "to_absolute",
    "to_local_date",
    "to_local_datetime",
    "today",
    # Recurrence
    "RecurrenceRequest",
    "add_months",
    "expand",
    # Lessons
    "LessonBatch",
    "LessonDraft",
    "SkippedInstance",
    "build_instant",
    "build_lessons",
    "find_conflict",
    # Program days
    "DayCell",
    "Inactive",
    "resolve",
    "resolve_range",
    "filter_replaced",
    "replaced_keys",
    # Composer
    "CalendarInputs",
    "DayView",
    "LessonItem",
    "ProgramItem",
    "RoutineMarker",
    "VideoMarker",
    "compose_day",
    "compose_range",
    "iter_days",
    # Compliance
    "ComplianceWindow",
    "aggregate",
    "client_compliance",
    "compliance_band",
    "window_bounds",
    # DST
    "DSTCheckResult",
    "DSTTransition",
    "check_lesson",
    "is_dst",
    "is_transition_date",
    "offset_label",
    "transition_kind",
    "transitions_in_year",
    # Exceptions
    "CalendarException",
    "CalendarValidationError",
    "InvalidComplianceWindow",
    "InvalidDateRange",
    "InvalidLessonDuration",
    "InvalidRecurrence",
    "LessonConflict",
    "NaiveInstant",
    "NonexistentLocalTime",
    "PastInstant",
    "SchedulingError",
    "UnknownTimezone",
    "is_scheduling_error",
    "is_validation_error",
    # Base classes and protocols
    "BaseValidationResult",
    "ValidationMixin",
    # Constants
    "Cadence",
    "ComplianceBand",
    "ComplianceLimits",
    "InactiveReason",
    "LessonStatus",
    "ProgramItemKind",
    "SkipReason",
    "DAYS_PER_WEEK",
]
