from typing import Optional

from .base import ClientError, UpstreamError, ValidationError


class PastDateError(ValidationError):
    """Raised when a booking starts at or before the current instant."""
    code = "past_date"
    client_message = "Bookings cannot be made for past dates."


class SlotConflictError(ClientError):
    """Raised when the requested slot is already taken."""
    status_code = 409
    code = "slot_conflict"
    client_message = "This slot is already booked. Please choose another time."


class PersistenceError(UpstreamError):
    """Raised when a booking record cannot be stored after the calendar write."""
    status_code = 500
    code = "persistence_failure"
    client_message = "An error occurred while creating the booking. Please try again later."

    def __init__(self, message: str = None, event_id: Optional[str] = None):
        super().__init__(message)
        self.event_id = event_id
