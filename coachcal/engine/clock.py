"""Clock and timezone adapter.

Single source of truth for converting between local wall-clock values in a
named IANA zone and absolute UTC instants, and for answering "what date is
today" in a zone. Nothing in the engine reads the process timezone or the wall
clock: zone names and "now" are always passed in, either as an aware
datetime or as a Clock the caller controls.

DST policy:
- Ambiguous local times (fall-back overlap) resolve to the first occurrence.
- Nonexistent local times (spring-forward gap) raise NonexistentLocalTime.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from coachcal.core.logging import get_logger
from coachcal.engine.exceptions import NaiveInstant, NonexistentLocalTime, UnknownTimezone

logger = get_logger(__name__)

UTC = timezone.utc


class Clock(Protocol):
    """Source of the current absolute instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock source for the outer edge of the embedding application."""

    def now(self) -> datetime:
        return datetime.now(UTC)


@dataclass(frozen=True)
class FixedClock:
    """Clock pinned to one instant, for tests and deterministic replays."""

    instant: datetime

    def now(self) -> datetime:
        return ensure_utc(self.instant)


def resolve_zone(tz_name: str) -> ZoneInfo:
    """Resolve an IANA zone name.

    Args:
        tz_name: Zone name such as "America/New_York"

    Returns:
        The ZoneInfo for the name

    Raises:
        UnknownTimezone: If the name is empty or not a known zone
    """
    if not isinstance(tz_name, str) or not tz_name.strip():
        raise UnknownTimezone("A timezone name is required", details={"timezone": tz_name})
    try:
        return ZoneInfo(tz_name.strip())
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise UnknownTimezone(
            f"Unknown timezone: {tz_name}",
            details={"timezone": tz_name},
        ) from exc


def ensure_utc(instant: datetime) -> datetime:
    """Return an aware instant normalized to UTC; naive values are rejected."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise NaiveInstant(
            "Absolute instants must carry timezone information",
            details={"instant": instant.isoformat()},
        )
    return instant.astimezone(UTC)


def current_instant(now: datetime | Clock) -> datetime:
    """Resolve a caller-supplied "now" to an aware UTC instant.

    Args:
        now: An aware datetime, or a Clock to read it from

    Raises:
        NaiveInstant: If the datetime (or the clock's reading) is naive
    """
    if isinstance(now, datetime):
        return ensure_utc(now)
    return ensure_utc(now.now())


def to_absolute(local_date: date, local_time: time, tz_name: str) -> datetime:
    """Convert a local date and wall-clock time in a zone to a UTC instant.

    Args:
        local_date: Calendar date in the zone
        local_time: Wall-clock time in the zone (any tzinfo on it is ignored)
        tz_name: IANA zone name

    Returns:
        Aware UTC datetime

    Raises:
        UnknownTimezone: If the zone name is invalid
        NonexistentLocalTime: If the wall-clock time is skipped by a DST gap
    """
    zone = resolve_zone(tz_name)
    wall = datetime.combine(local_date, local_time.replace(tzinfo=None, fold=0))
    instant = wall.replace(tzinfo=zone).astimezone(UTC)

    # A gap time does not survive the round trip back to the zone
    if instant.astimezone(zone).replace(tzinfo=None) != wall:
        logger.warning(
            "nonexistent_local_time",
            local_date=local_date.isoformat(),
            local_time=local_time.isoformat(),
            timezone=tz_name,
        )
        raise NonexistentLocalTime(
            f"{local_date.isoformat()} {local_time.strftime('%H:%M')} does not exist in {tz_name}",
            details={
                "local_date": local_date.isoformat(),
                "local_time": local_time.isoformat(),
                "timezone": tz_name,
            },
        )
    return instant


def to_local_datetime(instant: datetime, tz_name: str) -> datetime:
    """Express an absolute instant as an aware datetime in the zone."""
    return ensure_utc(instant).astimezone(resolve_zone(tz_name))


def to_local_date(instant: datetime, tz_name: str) -> date:
    """Calendar date of an absolute instant as seen in the zone."""
    return to_local_datetime(instant, tz_name).date()


def today(tz_name: str, now: datetime | Clock) -> date:
    """Local calendar date of the supplied "now" in the zone.

    Args:
        tz_name: IANA zone name
        now: Caller-supplied current instant (aware) or a Clock

    Returns:
        Today's date in the zone
    """
    return to_local_date(current_instant(now), tz_name)
