from datetime import date, datetime
from typing import Any, Dict, Optional

from ...utils.timezone import civil_to_instant, format_instant, parse_instant
from .constants import MAX_DESCRIPTION_LENGTH, MAX_SUMMARY_LENGTH, SKIPPED_EVENT_STATUSES
from .types import BusyPeriod


def validate_datetime_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    """Validates that start time is before end time."""
    if not start or not end:
        raise ValueError("Both start and end times are required")
    if start.tzinfo is None or end.tzinfo is None:
        raise ValueError("Start and end times must be timezone-aware")
    if start >= end:
        raise ValueError("Start time must be before end time")


def validate_text_field(value: Optional[str], max_length: int, field_name: str) -> None:
    """Validates text field length."""
    if value and len(value) > max_length:
        raise ValueError(f"Event {field_name} cannot exceed {max_length} characters")


def parse_event_boundary(boundary: Dict[str, Any], tz_name: str) -> datetime:
    """
    Parse a ``start``/``end`` object from the Calendar API.

    Timed boundaries carry ``dateTime``; all-day boundaries carry only
    ``date`` and are anchored at local midnight in ``tz_name``.
    """
    if not boundary:
        raise ValueError("Event boundary is missing")
    if boundary.get("dateTime"):
        return parse_instant(boundary["dateTime"])
    if boundary.get("date"):
        return civil_to_instant(date.fromisoformat(boundary["date"]), 0, 0, tz_name)
    raise ValueError("Event boundary has neither dateTime nor date")


def busy_period_from_event(google_event: Dict[str, Any], tz_name: str = "UTC") -> Optional[BusyPeriod]:
    """
    Create a BusyPeriod from a Google Calendar API event.

    Returns:
        The busy period, or None when the event does not block time
        (cancelled instances and events marked as free).
    """
    if google_event.get("status") in SKIPPED_EVENT_STATUSES:
        return None
    if google_event.get("transparency") == "transparent":
        return None

    start_data = google_event.get("start") or {}
    end_data = google_event.get("end") or {}
    is_all_day = not start_data.get("dateTime")

    start = parse_event_boundary(start_data, tz_name)
    end = parse_event_boundary(end_data, tz_name)
    return BusyPeriod(start=start, end=end, is_all_day=is_all_day)


def create_event_body(
    title: str,
    description: Optional[str],
    start: datetime,
    end: datetime,
    timezone: str,
) -> Dict[str, Any]:
    """
    Create event body dictionary for the Calendar API insert call.

    Raises:
        ValueError: If required fields are invalid
    """
    validate_datetime_range(start, end)
    validate_text_field(title, MAX_SUMMARY_LENGTH, "summary")
    validate_text_field(description, MAX_DESCRIPTION_LENGTH, "description")

    event_body = {
        'summary': title or "New Booking",
        'start': {'dateTime': format_instant(start), 'timeZone': timezone},
        'end': {'dateTime': format_instant(end), 'timeZone': timezone},
    }
    if description:
        event_body['description'] = description
    return event_body
