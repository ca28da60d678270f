"""Recurrence expansion for recurring lessons.

Turns a RecurrenceRequest into the ordered local calendar dates its cadence
visits between the start and end dates (both inclusive). Expansion is pure local
date arithmetic; wall-clock times and zones are applied later by the lesson
builder.

Cadences:
- weekly: every 1 x interval weeks
- biweekly: every 2 x interval weeks
- triweekly: every 3 x interval weeks
- monthly: every interval calendar months, keeping the start's day-of-month
  and clamping to the last day of shorter months (Jan 31 -> Feb 29 -> Mar 31)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from coachcal.core.logging import get_logger
from coachcal.engine.constants import DAYS_PER_WEEK, Cadence
from coachcal.engine.exceptions import InvalidRecurrence

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecurrenceRequest:
    """Input to the expander; never persisted.

    ``cadence`` accepts a Cadence or its string value so that malformed input
    reaches ``expand`` and is reported as InvalidRecurrence.

    Attributes:
        start_local_date: First occurrence (always included)
        end_local_date: Last date an occurrence may fall on
        cadence: weekly, biweekly, triweekly or monthly
        interval: Positive multiplier applied to the cadence
        timezone: IANA zone the dates are local to
    """

    start_local_date: date
    end_local_date: date
    cadence: Cadence | str
    interval: int = 1
    timezone: str = ""

    def to_dict(self) -> dict[str, Any]:
        cadence = self.cadence.value if isinstance(self.cadence, Cadence) else self.cadence
        return {
            "start_local_date": self.start_local_date.isoformat(),
            "end_local_date": self.end_local_date.isoformat(),
            "cadence": cadence,
            "interval": self.interval,
            "timezone": self.timezone,
        }


def add_months(d: date, months: int) -> date:
    """Shift a date by calendar months, clamping the day to the target month's end.

    Args:
        d: Anchor date
        months: Number of months to add (may be negative)

    Returns:
        The shifted date
    """
    return d + relativedelta(months=months)


def parse_cadence(value: Cadence | str) -> Cadence:
    if isinstance(value, Cadence):
        return value
    try:
        return Cadence(str(value).strip().lower())
    except ValueError:
        raise InvalidRecurrence(
            f"Unknown recurrence cadence: {value!r}",
            details={"cadence": value, "allowed": [c.value for c in Cadence]},
        ) from None


def validate_request(request: RecurrenceRequest) -> Cadence:
    """Check a request and return its parsed cadence.

    Raises:
        InvalidRecurrence: On unknown cadence, non-positive interval or a
            reversed date range
    """
    cadence = parse_cadence(request.cadence)

    interval = request.interval
    if isinstance(interval, bool) or not isinstance(interval, int) or interval < 1:
        raise InvalidRecurrence(
            "Recurrence interval must be a positive integer",
            details={"interval": interval},
        )

    for name in ("start_local_date", "end_local_date"):
        value = getattr(request, name)
        if not isinstance(value, date) or isinstance(value, datetime):
            raise InvalidRecurrence(
                f"Recurrence {name} must be a calendar date",
                details={name: repr(value)},
            )

    if request.end_local_date < request.start_local_date:
        raise InvalidRecurrence(
            "Recurrence end date is before its start date",
            details={
                "start_local_date": request.start_local_date.isoformat(),
                "end_local_date": request.end_local_date.isoformat(),
            },
        )
    return cadence


def expand(request: RecurrenceRequest) -> tuple[date, ...]:
    """Expand a recurrence request into its local calendar dates.

    Args:
        request: The recurrence to expand

    Returns:
        Ordered, de-duplicated dates, starting with ``start_local_date`` and
        none later than ``end_local_date``

    Raises:
        InvalidRecurrence: If the request is malformed
    """
    cadence = validate_request(request)
    start = request.start_local_date
    end = request.end_local_date

    dates: list[date] = []
    weeks = cadence.weeks_per_step
    occurrence = 0
    while True:
        try:
            if weeks is not None:
                current = start + timedelta(days=DAYS_PER_WEEK * weeks * request.interval * occurrence)
            else:
                # Anchored on the start so month-end clamping never drifts the day
                current = start + relativedelta(months=request.interval * occurrence)
        except (OverflowError, ValueError):
            # Next step lies past date.max, so it is also past the end
            break
        if current > end:
            break
        if not dates or current > dates[-1]:
            dates.append(current)
        occurrence += 1

    logger.debug(
        "recurrence_expanded",
        cadence=cadence.value,
        interval=request.interval,
        start=start.isoformat(),
        end=end.isoformat(),
        occurrences=len(dates),
    )
    return tuple(dates)
