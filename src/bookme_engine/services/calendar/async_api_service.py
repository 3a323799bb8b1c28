"""
Async Calendar gateway for asyncio callers.

Same contract as CalendarApiService, backed by aiogoogle. The engine's own
availability and booking paths are synchronous and use CalendarApiService;
this class is a standalone API for applications that serve tenants from an
event loop and call list_busy / create_event directly.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional
import logging

from aiogoogle import Aiogoogle
from aiogoogle.auth.creds import UserCreds
from aiogoogle.excs import HTTPError

from ...config import DEFAULT_HTTP_TIMEOUT
from ...exceptions import CalendarApiError, ValidationError
from ...utils.log_sanitizer import sanitize_for_logging
from ...utils.timezone import format_instant
from .types import BusyPeriod
from . import utils
from .constants import CALENDAR_API_NAME, CALENDAR_API_VERSION, DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT

logger = logging.getLogger(__name__)


@asynccontextmanager
async def async_calendar_service(access_token: str):
    """Async context manager yielding (aiogoogle, calendar_v3) for one access token."""
    user_creds = UserCreds(access_token=access_token)
    async with Aiogoogle(user_creds=user_creds) as aiogoogle:
        calendar_v3 = await aiogoogle.discover(CALENDAR_API_NAME, CALENDAR_API_VERSION)
        yield aiogoogle, calendar_v3


def _status_of(error: HTTPError) -> Optional[int]:
    res = getattr(error, "res", None)
    return getattr(res, "status_code", None)


class AsyncCalendarApiService:
    """
    Async version of CalendarApiService backed by aiogoogle.
    """

    def __init__(self, access_token: str, timeout: float = DEFAULT_HTTP_TIMEOUT):
        self._access_token = access_token
        self._timeout = timeout

    async def _execute(self, build_request, operation: str):
        try:
            async with async_calendar_service(self._access_token) as (aiogoogle, calendar_v3):
                return await aiogoogle.as_user(build_request(calendar_v3), timeout=self._timeout)
        except HTTPError as e:
            status = _status_of(e)
            logger.error("Calendar API error %s: status=%s", operation, status)
            raise CalendarApiError(f"Calendar API error {operation}", status=status) from e
        except CalendarApiError:
            raise
        except Exception as e:
            logger.error("Unexpected error %s: %s", operation, e)
            raise CalendarApiError(f"Unexpected error {operation}: {e}") from e

    async def list_busy(
            self,
            calendar_id: str,
            time_min: datetime,
            time_max: datetime,
            timezone: Optional[str] = None,
            max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[BusyPeriod]:
        """Async version of CalendarApiService.list_busy."""
        if not calendar_id:
            raise ValidationError("calendar_id is required")
        if max_results < 1 or max_results > MAX_RESULTS_LIMIT:
            raise ValueError(f"max_results must be between 1 and {MAX_RESULTS_LIMIT}")
        try:
            utils.validate_datetime_range(time_min, time_max)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        params = {
            'calendarId': calendar_id,
            'timeMin': format_instant(time_min),
            'timeMax': format_instant(time_max),
            'singleEvents': True,
            'orderBy': 'startTime',
            'maxResults': max_results,
        }
        if timezone:
            params['timeZone'] = timezone

        sanitized = sanitize_for_logging(calendar_id=calendar_id)
        logger.info("Fetching busy periods (async) with calendar_id=%s", sanitized['calendar_id'])

        result = await self._execute(lambda calendar_v3: calendar_v3.events.list(**params), "listing events")

        busy_periods = []
        for item in (result or {}).get('items', []):
            try:
                period = utils.busy_period_from_event(item, timezone or "UTC")
            except (ValueError, ValidationError) as e:
                logger.warning("Failed to parse event: %s", e)
                continue
            if period is not None:
                busy_periods.append(period)

        busy_periods.sort(key=lambda period: period.start)
        return busy_periods

    async def create_event(
            self,
            calendar_id: str,
            title: str,
            description: Optional[str],
            start: datetime,
            end: datetime,
            timezone: str,
    ) -> str:
        """Async version of CalendarApiService.create_event."""
        try:
            event_body = utils.create_event_body(title, description, start, end, timezone)
        except ValueError as e:
            raise ValidationError(f"Invalid event data: {e}") from e

        created = await self._execute(
            lambda calendar_v3: calendar_v3.events.insert(calendarId=calendar_id, json=event_body),
            "creating event",
        )
        event_id = created.get('id') if created else None
        if not event_id:
            raise CalendarApiError("Calendar API returned an event without an id")
        return event_id
