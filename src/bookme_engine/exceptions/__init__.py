from .base import BookingEngineError, ClientError, ValidationError, TenantNotFoundError, CredentialError, UpstreamError
from .auth import TokenRefreshError, DecryptionError
from .calendar import CalendarApiError
from .booking import PastDateError, SlotConflictError, PersistenceError

__all__ = [
    "BookingEngineError",
    "ClientError",
    "ValidationError",
    "TenantNotFoundError",
    "CredentialError",
    "UpstreamError",
    "TokenRefreshError",
    "DecryptionError",
    "CalendarApiError",
    "PastDateError",
    "SlotConflictError",
    "PersistenceError",
]
