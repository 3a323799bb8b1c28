from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..exceptions import ValidationError
from ..utils.timezone import format_instant, utc_now


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


@dataclass
class BookingRequest:
    """
    A booking request as submitted from the public page.
    Args:
        start_time: ISO-8601 start instant.
        end_time: ISO-8601 end instant.
        name: Booker's name.
        email: Booker's email address.
        message: Optional note for the owner.
    """
    start_time: str = ""
    end_time: str = ""
    name: str = ""
    email: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BookingRequest":
        payload = payload or {}
        if not isinstance(payload, Mapping):
            raise ValidationError("Booking request must be a JSON object")
        return cls(
            start_time=_text(payload.get("startTime")),
            end_time=_text(payload.get("endTime")),
            name=_text(payload.get("name")),
            email=_text(payload.get("email")),
            message=_text(payload.get("message")),
        )

    def missing_fields(self):
        """Names of required wire fields that are empty."""
        required = (("startTime", self.start_time), ("endTime", self.end_time),
                    ("name", self.name), ("email", self.email))
        return [key for key, value in required if not value]


@dataclass
class BookingRecord:
    """
    A persisted booking.
    Args:
        tenant_id: Owning tenant.
        date: Booking date in the tenant timezone (YYYY-MM-DD).
        start_time: Start as HH:MM in the tenant timezone.
        end_time: End as HH:MM in the tenant timezone.
        start_iso: Start instant (UTC ISO-8601).
        end_iso: End instant (UTC ISO-8601).
        name: Booker's name.
        email: Booker's email address.
        message: Booker's note.
        event_id: Id of the remote calendar event created for the booking.
        created_at: When the record was created.
    """
    tenant_id: str
    date: str
    start_time: str
    end_time: str
    start_iso: str
    end_iso: str
    name: str
    email: str
    message: str = ""
    event_id: str = ""
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Dashboard listing representation."""
        return {
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "name": self.name,
            "email": self.email,
            "message": self.message or "",
            "bookedAt": format_instant(self.created_at),
            "eventId": self.event_id or "",
        }
