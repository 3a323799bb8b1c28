from .api_service import CalendarApiService, build_calendar_service
from .async_api_service import AsyncCalendarApiService
from .types import BusyPeriod

__all__ = [
    "CalendarApiService",
    "AsyncCalendarApiService",
    "BusyPeriod",
    "build_calendar_service",
]
