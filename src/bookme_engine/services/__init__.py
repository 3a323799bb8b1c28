from .calendar import CalendarApiService, AsyncCalendarApiService, BusyPeriod

__all__ = ["CalendarApiService", "AsyncCalendarApiService", "BusyPeriod"]
