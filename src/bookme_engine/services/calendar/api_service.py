from datetime import datetime
from typing import Any, List, Optional
import logging

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ...config import DEFAULT_HTTP_TIMEOUT
from ...exceptions import CalendarApiError, ValidationError
from ...utils.log_sanitizer import sanitize_for_logging
from ...utils.timezone import format_instant
from .types import BusyPeriod
from . import utils
from .constants import (
    CALENDAR_API_NAME, CALENDAR_API_VERSION,
    DEFAULT_MAX_RESULTS, MAX_RESULTS_LIMIT
)

logger = logging.getLogger(__name__)


def build_calendar_service(access_token: str, timeout: float = DEFAULT_HTTP_TIMEOUT):
    """
    Build a Calendar v3 resource acting with a single tenant's access token.

    Args:
        access_token: Short-lived OAuth access token for the tenant.
        timeout: Socket timeout in seconds applied to every request.
    """
    credentials = Credentials(token=access_token)
    http = AuthorizedHttp(credentials, http=httplib2.Http(timeout=timeout))
    return build(CALENDAR_API_NAME, CALENDAR_API_VERSION, http=http, cache_discovery=False)


def _http_error_reason(error: HttpError) -> str:
    reason = getattr(error, "reason", None)
    return reason or "Calendar API request failed"


class CalendarApiService:
    """
    Service layer for the Calendar API operations the booking engine needs.
    Every call runs under one tenant's access token.
    """

    def __init__(self, service: Any):
        """
        Initialize Calendar service.

        Args:
            service: The Calendar API service instance
        """
        self._service = service

    @classmethod
    def for_access_token(cls, access_token: str, timeout: float = DEFAULT_HTTP_TIMEOUT) -> "CalendarApiService":
        return cls(build_calendar_service(access_token, timeout))

    def list_busy(
            self,
            calendar_id: str,
            time_min: datetime,
            time_max: datetime,
            timezone: Optional[str] = None,
            max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[BusyPeriod]:
        """
        Fetches the busy periods of a calendar inside a bounded window.

        Recurring events are expanded into instances and ordered by start
        time. Events without a time of day are reported as all-day periods.

        Args:
            calendar_id: Calendar to query.
            time_min: Window start (inclusive, timezone-aware).
            time_max: Window end (exclusive, timezone-aware).
            timezone: IANA name used to anchor all-day dates; UTC when omitted.
            max_results: Cap on returned events (1..2500).

        Returns:
            Busy periods sorted by start instant.
        """
        if not calendar_id:
            raise ValidationError("calendar_id is required")
        if max_results < 1 or max_results > MAX_RESULTS_LIMIT:
            raise ValueError(f"max_results must be between 1 and {MAX_RESULTS_LIMIT}")
        try:
            utils.validate_datetime_range(time_min, time_max)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        sanitized = sanitize_for_logging(calendar_id=calendar_id, time_min=time_min, time_max=time_max)
        logger.info(
            "Fetching busy periods with calendar_id=%s, time_min=%s, time_max=%s",
            sanitized['calendar_id'], sanitized['time_min'], sanitized['time_max']
        )

        request_params = {
            'calendarId': calendar_id,
            'timeMin': format_instant(time_min),
            'timeMax': format_instant(time_max),
            'singleEvents': True,
            'orderBy': 'startTime',
            'maxResults': max_results,
        }
        if timezone:
            request_params['timeZone'] = timezone

        try:
            result = self._service.events().list(**request_params).execute()
        except HttpError as e:
            logger.error("Calendar API error listing events: status=%s", e.resp.status)
            raise CalendarApiError(_http_error_reason(e), status=e.resp.status) from e
        except Exception as e:
            logger.error("An error occurred while fetching events: %s", e)
            raise CalendarApiError(f"Unexpected error listing events: {e}") from e

        items = result.get('items', [])
        logger.info("Found %d event items", len(items))

        busy_periods = []
        for item in items:
            try:
                period = utils.busy_period_from_event(item, timezone or "UTC")
            except (ValueError, ValidationError) as e:
                logger.warning("Failed to parse event: %s", e)
                continue
            if period is not None:
                busy_periods.append(period)

        busy_periods.sort(key=lambda period: period.start)
        return busy_periods

    def create_event(
            self,
            calendar_id: str,
            title: str,
            description: Optional[str],
            start: datetime,
            end: datetime,
            timezone: str,
    ) -> str:
        """
        Creates a calendar event and returns its remote id.

        Args:
            calendar_id: Calendar to write to.
            title: Event summary.
            description: Event body text.
            start: Event start instant.
            end: Event end instant.
            timezone: IANA timezone attached to start and end.

        Returns:
            The id Google assigned to the new event.
        """
        try:
            event_body = utils.create_event_body(title, description, start, end, timezone)
        except ValueError as e:
            raise ValidationError(f"Invalid event data: {e}") from e

        sanitized = sanitize_for_logging(calendar_id=calendar_id, start=start, end=end)
        logger.info("Creating event in calendar_id=%s, start=%s, end=%s",
                    sanitized['calendar_id'], sanitized['start'], sanitized['end'])

        try:
            created_event = self._service.events().insert(
                calendarId=calendar_id,
                body=event_body
            ).execute()
        except HttpError as e:
            logger.error("Calendar API error creating event: status=%s", e.resp.status)
            raise CalendarApiError(_http_error_reason(e), status=e.resp.status) from e
        except Exception as e:
            logger.error("Error creating event: %s", e)
            raise CalendarApiError(f"Unexpected error creating event: {e}") from e

        event_id = created_event.get('id') if created_event else None
        if not event_id:
            raise CalendarApiError("Calendar API returned an event without an id")

        logger.info("Event created successfully with ID: %s",
                    sanitize_for_logging(event_id=event_id)['event_id'])
        return event_id
