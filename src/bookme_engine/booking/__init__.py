from .types import BookingRequest, BookingRecord
from .transaction import BookingTransaction, BookingService, BookingState, BookingResult
from .locks import SlotLock, InProcessSlotLock
from .notifications import Notifier, NotificationDispatcher

__all__ = [
    "BookingRequest",
    "BookingRecord",
    "BookingTransaction",
    "BookingService",
    "BookingState",
    "BookingResult",
    "SlotLock",
    "InProcessSlotLock",
    "Notifier",
    "NotificationDispatcher",
]
