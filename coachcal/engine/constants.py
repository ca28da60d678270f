"""Constants and enumerations for the calendar engine.

Organized by functional area:
- Calendar arithmetic: days per week, weekday names
- Recurrence: cadences and their week steps
- Lessons: statuses, skip reasons
- Program days: inactive reasons, item kinds
- Compliance: rate bounds, bands
"""

from __future__ import annotations

from enum import Enum

from coachcal.schemas.enums import LessonStatus


# =============================================================================
# Calendar Arithmetic
# =============================================================================

DAYS_PER_WEEK = 7

WEEKDAY_NAMES: dict[str, int] = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
    "sunday": 7,
}


# =============================================================================
# Recurrence
# =============================================================================

class Cadence(str, Enum):
    """Recurrence unit controlling spacing between generated lesson dates."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    TRIWEEKLY = "triweekly"
    MONTHLY = "monthly"

    @property
    def weeks_per_step(self) -> int | None:
        """Weeks advanced per interval unit, or None for calendar-month cadence."""
        return _WEEKS_PER_STEP.get(self)


_WEEKS_PER_STEP: dict[Cadence, int] = {
    Cadence.WEEKLY: 1,
    Cadence.BIWEEKLY: 2,
    Cadence.TRIWEEKLY: 3,
}


# =============================================================================
# Lessons
# =============================================================================

class SkipReason(str, Enum):
    """Why a single expanded instance did not become a lesson draft."""

    PAST_INSTANT = "past_instant"
    NONEXISTENT_LOCAL_TIME = "nonexistent_local_time"
    NON_WORKING_DAY = "non_working_day"
    CONFLICT = "conflict"


# =============================================================================
# Program Days
# =============================================================================

class InactiveReason(str, Enum):
    BEFORE_START = "before_start"
    AFTER_END = "after_end"
    MISSING_CELL = "missing_cell"


class ProgramItemKind(str, Enum):
    WORKOUT = "workout"
    REST = "rest"


# =============================================================================
# Compliance
# =============================================================================

class ComplianceBand(str, Enum):
    """Coach-facing colour band for a compliance rate."""

    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


class ComplianceLimits:
    """Bounds for compliance rates.

    Window sizes and band thresholds are deployment settings.
    """

    MIN_RATE = 0.0
    MAX_RATE = 100.0
    RATE_DECIMALS = 1

    @staticmethod
    def clamp_rate(rate: float) -> float:
        """Clamp a percentage to [MIN_RATE, MAX_RATE].

        Args:
            rate: Raw percentage

        Returns:
            Percentage within bounds
        """
        return max(ComplianceLimits.MIN_RATE, min(ComplianceLimits.MAX_RATE, rate))
