"""
Conversion between a tenant's civil time and absolute instants.

All conversions go through the IANA time zone database (``zoneinfo``) and are
anchored to the specific date in question, so DST transitions are honoured.
The host process timezone is never consulted.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..exceptions import ValidationError


@dataclass(frozen=True)
class CivilTime:
    """Date and time of day as read on a wall clock in some timezone."""
    date: date
    hour: int
    minute: int

    def time_str(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def get_zone(tz_name: str) -> ZoneInfo:
    """Resolve an IANA timezone name, raising ValidationError if unknown."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError) as e:
        raise ValidationError(f"Unknown timezone: {tz_name!r}") from e


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def civil_to_instant(day: date, hour: int, minute: int = 0, tz_name: str = "UTC") -> datetime:
    """
    Convert a civil date and time in ``tz_name`` to a UTC instant.

    Wall times that do not exist (the spring-forward gap) are resolved with
    the offset in force before the transition, so 02:30 on a night that jumps
    from 02:00 to 03:00 lands on the instant that reads 03:30.
    """
    local = datetime.combine(day, time(hour, minute), tzinfo=get_zone(tz_name))
    return local.astimezone(timezone.utc)


def instant_to_civil(instant: datetime, tz_name: str) -> CivilTime:
    """Express an aware instant as civil time in ``tz_name``."""
    if instant.tzinfo is None:
        raise ValueError("instant must be timezone-aware")
    local = instant.astimezone(get_zone(tz_name))
    return CivilTime(date=local.date(), hour=local.hour, minute=local.minute)


def day_of_week(day: date, tz_name: str) -> int:
    """
    Day of week of ``day`` as observed in ``tz_name`` (0=Sunday .. 6=Saturday).

    The date is anchored at local noon in the tenant timezone before reading
    the weekday back, never at the host's midnight.
    """
    observed = instant_to_civil(civil_to_instant(day, 12, 0, tz_name), tz_name).date
    return (observed.weekday() + 1) % 7


def local_day_bounds(day: date, tz_name: str) -> Tuple[datetime, datetime]:
    """UTC instants of local midnight on ``day`` and on the following day."""
    return (
        civil_to_instant(day, 0, 0, tz_name),
        civil_to_instant(day + timedelta(days=1), 0, 0, tz_name),
    )


def today_in(tz_name: str, now: datetime = None) -> date:
    """The current civil date in ``tz_name``."""
    return instant_to_civil(now or utc_now(), tz_name).date


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Values without a UTC offset are rejected: they are ambiguous without a
    timezone anchor.
    """
    if not isinstance(value, str) or not value:
        raise ValidationError("Timestamp is required")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp {value!r}") from e
    if parsed.tzinfo is None:
        raise ValidationError(f"Timestamp {value!r} has no UTC offset")
    return parsed.astimezone(timezone.utc)


def format_instant(instant: datetime) -> str:
    """Format an aware datetime as a UTC ISO-8601 string with a ``Z`` suffix."""
    return instant.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
