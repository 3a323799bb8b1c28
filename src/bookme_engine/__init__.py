"""Availability and booking engine for calendar-backed appointment pages."""

from .config import EngineConfig
from .tenant_client import BookingEngine, TenantClient
from .scheduling import TenantSettings, TimeSlot, generate_slots, AvailabilityService
from .booking import BookingRequest, BookingRecord, BookingService, BookingTransaction, BookingState
from .services.calendar import CalendarApiService, AsyncCalendarApiService, BusyPeriod

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "BookingEngine",
    "TenantClient",
    "TenantSettings",
    "TimeSlot",
    "generate_slots",
    "AvailabilityService",
    "BookingRequest",
    "BookingRecord",
    "BookingService",
    "BookingTransaction",
    "BookingState",
    "CalendarApiService",
    "AsyncCalendarApiService",
    "BusyPeriod",
]
