"""Compliance aggregation.

Rolls completed program workouts into a rolling-window compliance rate:

    rate = 0                                      if total == 0
    rate = clamp(round_half_up(completed / total * 100, 1), 0, 100)   otherwise

Only workout days count; rest days are neither owed nor completed. The window
covers ``[today - window_weeks * 7 days, today]`` inclusive, or everything up
to ``today`` for the all-time window.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from coachcal.config.settings import get_settings
from coachcal.core.logging import get_logger
from coachcal.engine.clock import Clock, today as local_today
from coachcal.engine.composer import CalendarInputs, DayView, iter_days
from coachcal.engine.constants import DAYS_PER_WEEK, ComplianceBand, ComplianceLimits, ProgramItemKind
from coachcal.engine.exceptions import InvalidComplianceWindow

logger = get_logger(__name__)


def compliance_band(rate: float) -> ComplianceBand:
    """Band a rate using the configured thresholds."""
    settings = get_settings()
    if rate >= settings.compliance_good_threshold:
        return ComplianceBand.GOOD
    if rate >= settings.compliance_fair_threshold:
        return ComplianceBand.FAIR
    return ComplianceBand.POOR


@dataclass(frozen=True)
class ComplianceWindow:
    """Compliance over one window.

    Attributes:
        window_weeks: 4, 6, 8 or None for all time
        start_date: First date counted (None when unbounded)
        end_date: Last date counted ("today")
        completed: Completed workouts, never more than ``total``
        total: Workouts due in the window
        rate: Percentage in [0, 100], one decimal
        band: good / fair / poor
    """

    window_weeks: int | None
    start_date: date | None
    end_date: date
    completed: int
    total: int
    rate: float
    band: ComplianceBand

    @classmethod
    def from_counts(
        cls,
        completed: int,
        total: int,
        *,
        end_date: date,
        window_weeks: int | None = None,
        start_date: date | None = None,
    ) -> "ComplianceWindow":
        """Build a window from raw counts, clamping inconsistent data.

        ``completed`` above ``total`` (for example 12/10) is clamped to
        ``total``; negative counts are treated as zero.
        """
        total = max(0, total)
        completed = max(0, min(completed, total))
        if total == 0:
            rate = ComplianceLimits.MIN_RATE
        else:
            exact = Decimal(completed) * 100 / Decimal(total)
            step = Decimal(1).scaleb(-ComplianceLimits.RATE_DECIMALS)
            rate = ComplianceLimits.clamp_rate(float(exact.quantize(step, rounding=ROUND_HALF_UP)))
        return cls(
            window_weeks=window_weeks,
            start_date=start_date,
            end_date=end_date,
            completed=completed,
            total=total,
            rate=rate,
            band=compliance_band(rate),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_weeks": self.window_weeks,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat(),
            "completed": self.completed,
            "total": self.total,
            "rate": self.rate,
            "band": self.band.value,
        }


def validate_window(window_weeks: int | None) -> None:
    """Accept only the configured window sizes or None (all time).

    Raises:
        InvalidComplianceWindow: For any other value
    """
    if window_weeks is None:
        return
    allowed = get_settings().compliance_window_weeks
    if isinstance(window_weeks, bool) or window_weeks not in allowed:
        raise InvalidComplianceWindow(
            f"Compliance window must be one of {allowed} weeks or all time",
            details={"window_weeks": window_weeks, "allowed": list(allowed)},
        )


def window_bounds(
    window_weeks: int | None,
    today: date,
    all_time_start: date | None = None,
) -> tuple[date | None, date]:
    """Inclusive (start, end) dates of a window ending today."""
    validate_window(window_weeks)
    if window_weeks is None:
        return all_time_start, today
    return today - timedelta(days=window_weeks * DAYS_PER_WEEK), today


def aggregate(
    window_weeks: int | None,
    views: Iterable[DayView],
    *,
    today: date,
    completions: Collection[tuple[str, date]],
    all_time_start: date | None = None,
) -> ComplianceWindow:
    """Aggregate composed day views into a compliance window.

    Args:
        window_weeks: 4, 6, 8 or None for all time
        views: Composed days; days outside the window are ignored
        today: Local "today" in the client's zone
        completions: ``(assignment_id, date)`` pairs of completed workouts
        all_time_start: Lower bound for the all-time window

    Returns:
        ComplianceWindow

    Raises:
        InvalidComplianceWindow: If the window size is not supported
    """
    start, end = window_bounds(window_weeks, today, all_time_start)
    completed_keys = set(completions)

    completed = 0
    total = 0
    for view in views:
        if view.date > end or (start is not None and view.date < start):
            continue
        for item in view.program_items:
            if item.kind != ProgramItemKind.WORKOUT:
                continue
            total += 1
            if (item.assignment_id, view.date) in completed_keys:
                completed += 1

    window = ComplianceWindow.from_counts(
        completed,
        total,
        end_date=end,
        window_weeks=window_weeks,
        start_date=start,
    )
    logger.debug(
        "compliance_aggregated",
        window_weeks=window_weeks,
        completed=window.completed,
        total=window.total,
        rate=window.rate,
    )
    return window


def client_compliance(
    window_weeks: int | None,
    inputs: CalendarInputs,
    *,
    client_id: str,
    timezone: str,
    now: datetime | Clock,
    completions: Collection[tuple[str, date]],
) -> ComplianceWindow:
    """Compose a client's days and aggregate them into a compliance window.

    "Today" is the local date of ``now`` (an aware datetime or a Clock) in
    ``timezone``; the all-time window
    starts at the client's earliest assignment.

    Raises:
        InvalidComplianceWindow: If the window size is not supported
        UnknownTimezone: If the zone name is invalid
        NaiveInstant: If ``now`` is naive
    """
    validate_window(window_weeks)
    current = local_today(timezone, now)
    starts = [a.start_date for a in inputs.assignments if a.client_id == client_id]
    all_time_start = min(starts) if starts else None

    start, end = window_bounds(window_weeks, current, all_time_start)
    if start is None:
        # No assignments: nothing is owed
        return aggregate(window_weeks, (), today=current, completions=completions)

    views = iter_days(client_id, start, end, inputs, timezone=timezone)
    return aggregate(
        window_weeks,
        views,
        today=current,
        completions=completions,
        all_time_start=all_time_start,
    )
