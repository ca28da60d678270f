"""Date and instant field types for input records.

Two kinds of time value reach the engine and they are never mixed:
- instants: absolute points in time, always timezone-aware, held in UTC
- local dates: calendar days in the client's zone, with no time and no zone
"""
from datetime import date, datetime, timezone
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO 8601 instant; a trailing ``Z`` means UTC."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO 8601 instant, got {type(value).__name__}")
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid instant: {value!r}") from None


def parse_date(value: Any) -> date:
    # datetime is a date subclass; a local day must not carry a time
    if isinstance(value, datetime):
        raise ValueError(f"Expected calendar date, got datetime {value.isoformat()}")
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO 8601 date, got {type(value).__name__}")
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid calendar date: {value!r}") from None


def require_utc(value: datetime) -> datetime:
    """Reject naive datetimes and normalize aware ones to UTC."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("Instant must be timezone-aware")
    return value.astimezone(timezone.utc)


UTCInstant = Annotated[datetime, BeforeValidator(parse_datetime), AfterValidator(require_utc)]
LocalDate = Annotated[date, BeforeValidator(parse_date)]
