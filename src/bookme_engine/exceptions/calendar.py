from typing import Optional

from .base import UpstreamError


class CalendarApiError(UpstreamError):
    """Raised when the Calendar API returns a non-success response."""
    code = "calendar_unavailable"
    client_message = "The calendar service is unavailable. Please try again later."

    def __init__(self, message: str = None, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
