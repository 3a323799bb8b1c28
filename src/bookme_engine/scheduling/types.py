from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from ..config import DEFAULT_TIMEZONE
from ..exceptions import ValidationError
from ..utils.timezone import format_instant, get_zone

# Wire (camelCase) key -> attribute name
SETTINGS_FIELDS = {
    "ownerName": "owner_name",
    "ownerEmail": "owner_email",
    "calendarId": "calendar_id",
    "duration": "duration",
    "startHour": "start_hour",
    "endHour": "end_hour",
    "timezone": "timezone",
    "maxDays": "max_days",
    "availableDays": "available_days",
}
INT_FIELDS = ("duration", "start_hour", "end_hour", "max_days")


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be an integer") from e


def _as_days(value: Any) -> Tuple[int, ...]:
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    if not isinstance(value, Iterable):
        raise ValidationError("availableDays must be a list of weekday numbers")
    return tuple(sorted({_as_int(day, "availableDays") for day in value}))


@dataclass(frozen=True)
class TenantSettings:
    """
    Booking configuration of one tenant.
    Args:
        owner_name: Display name shown on the booking page.
        owner_email: Address that receives booking notifications.
        calendar_id: Google Calendar id used for busy time and new events.
        duration: Slot length in minutes.
        start_hour: First bookable hour (0-23) in the tenant timezone.
        end_hour: Hour at which the bookable window closes (0-23).
        timezone: IANA timezone name the business hours are expressed in.
        max_days: How many days ahead bookings are accepted.
        available_days: Bookable weekdays, 0=Sunday .. 6=Saturday.
    """
    owner_name: str = "Owner"
    owner_email: str = ""
    calendar_id: str = ""
    duration: int = 60
    start_hour: int = 9
    end_hour: int = 17
    timezone: str = DEFAULT_TIMEZONE
    max_days: int = 30
    available_days: Tuple[int, ...] = field(default=(1, 2, 3, 4, 5))

    def __post_init__(self):
        for name in INT_FIELDS:
            object.__setattr__(self, name, _as_int(getattr(self, name), name))
        object.__setattr__(self, "available_days", _as_days(self.available_days))

        if self.duration <= 0:
            raise ValidationError("duration must be a positive number of minutes")
        if not (0 <= self.start_hour <= 23 and 0 <= self.end_hour <= 23):
            raise ValidationError("startHour and endHour must be between 0 and 23")
        if self.start_hour >= self.end_hour:
            raise ValidationError("startHour must be before endHour")
        if self.max_days < 1:
            raise ValidationError("maxDays must be at least 1")
        if any(day < 0 or day > 6 for day in self.available_days):
            raise ValidationError("availableDays must only contain 0 (Sunday) to 6 (Saturday)")
        get_zone(self.timezone)

    @classmethod
    def defaults(cls, owner_name: str = "Owner", owner_email: str = "",
                 timezone: str = DEFAULT_TIMEZONE) -> "TenantSettings":
        """Settings given to a tenant at onboarding."""
        return cls(owner_name=owner_name or "Owner", owner_email=owner_email or "", timezone=timezone)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TenantSettings":
        """Build settings from a camelCase mapping; missing keys take defaults."""
        kwargs = {attr: data[key] for key, attr in SETTINGS_FIELDS.items() if data.get(key) is not None}
        return cls(**kwargs)

    def apply_update(self, partial: Dict[str, Any]) -> "TenantSettings":
        """Return a validated copy with the allowed camelCase keys of ``partial`` replaced."""
        changes = {attr: partial[key] for key, attr in SETTINGS_FIELDS.items() if partial.get(key) is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        result = {key: getattr(self, attr) for key, attr in SETTINGS_FIELDS.items()}
        result["availableDays"] = list(self.available_days)
        return result

    def to_public_dict(self, slug: Optional[str] = None) -> Dict[str, Any]:
        """Settings safe to show on the public booking page."""
        result = self.to_dict()
        del result["ownerEmail"]
        del result["calendarId"]
        if slug is not None:
            result["slug"] = slug
        return result


@dataclass(frozen=True)
class TimeSlot:
    """
    A candidate appointment window.
    Args:
        start: Start instant (UTC).
        end: End instant (UTC).
        start_hour, start_minute: Start as civil time in the tenant timezone.
        end_hour, end_minute: End as civil time in the tenant timezone.
        is_busy: The slot overlaps a busy period or the day holds an all-day event.
        is_past: The slot starts before the evaluation instant.
    """
    start: datetime
    end: datetime
    start_hour: int
    start_minute: int
    end_hour: int
    end_minute: int
    is_busy: bool = False
    is_past: bool = False

    @property
    def available(self) -> bool:
        return not self.is_busy and not self.is_past

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": format_instant(self.start),
            "end": format_instant(self.end),
            "startHour": self.start_hour,
            "startMinute": self.start_minute,
            "endHour": self.end_hour,
            "endMinute": self.end_minute,
            "available": self.available,
            "isPast": self.is_past,
            "isBusy": self.is_busy,
        }
