from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest
from aiogoogle.excs import HTTPError

from src.bookme_engine.services.calendar.async_api_service import AsyncCalendarApiService
from src.bookme_engine.exceptions import CalendarApiError, ValidationError

TIME_MIN = datetime(2026, 11, 3, 15, 0, tzinfo=timezone.utc)
TIME_MAX = datetime(2026, 11, 4, 15, 0, tzinfo=timezone.utc)


def _fake_service(aiogoogle, calendar_v3):
    @asynccontextmanager
    async def fake(access_token):
        yield aiogoogle, calendar_v3
    return fake


@pytest.fixture
def mock_aiogoogle():
    aiogoogle = Mock()
    aiogoogle.as_user = AsyncMock(return_value={"items": []})
    return aiogoogle


@pytest.fixture
def mock_calendar_v3():
    return Mock()


@pytest.mark.unit
@pytest.mark.calendar
class TestAsyncCalendarApiService:
    """Test cases for the aiogoogle-backed gateway."""

    @pytest.mark.asyncio
    async def test_list_busy(self, mock_aiogoogle, mock_calendar_v3, sample_timed_event):
        mock_aiogoogle.as_user.return_value = {"items": [sample_timed_event]}

        with patch('src.bookme_engine.services.calendar.async_api_service.async_calendar_service',
                   _fake_service(mock_aiogoogle, mock_calendar_v3)):
            service = AsyncCalendarApiService("ya29.token", timeout=4.0)
            periods = await service.list_busy("primary", TIME_MIN, TIME_MAX, timezone="Asia/Tokyo")

        assert len(periods) == 1
        assert periods[0].start == datetime(2026, 11, 4, 1, 0, tzinfo=timezone.utc)
        mock_calendar_v3.events.list.assert_called_once_with(
            calendarId="primary",
            timeMin="2026-11-03T15:00:00.000Z",
            timeMax="2026-11-04T15:00:00.000Z",
            singleEvents=True,
            orderBy="startTime",
            maxResults=250,
            timeZone="Asia/Tokyo",
        )
        assert mock_aiogoogle.as_user.call_args.kwargs["timeout"] == 4.0

    @pytest.mark.asyncio
    async def test_create_event(self, mock_aiogoogle, mock_calendar_v3):
        mock_aiogoogle.as_user.return_value = {"id": "evt_async_1"}
        start = datetime(2026, 11, 4, 1, 0, tzinfo=timezone.utc)
        end = datetime(2026, 11, 4, 2, 0, tzinfo=timezone.utc)

        with patch('src.bookme_engine.services.calendar.async_api_service.async_calendar_service',
                   _fake_service(mock_aiogoogle, mock_calendar_v3)):
            event_id = await AsyncCalendarApiService("ya29.token").create_event(
                "primary", "Booking: Ken", None, start, end, "Asia/Tokyo")

        assert event_id == "evt_async_1"
        kwargs = mock_calendar_v3.events.insert.call_args.kwargs
        assert kwargs["calendarId"] == "primary"
        assert kwargs["json"]["start"] == {"dateTime": "2026-11-04T01:00:00.000Z", "timeZone": "Asia/Tokyo"}

    @pytest.mark.asyncio
    async def test_http_error_is_mapped(self, mock_aiogoogle, mock_calendar_v3):
        mock_aiogoogle.as_user.side_effect = HTTPError("Forbidden", res=Mock(status_code=403))

        with patch('src.bookme_engine.services.calendar.async_api_service.async_calendar_service',
                   _fake_service(mock_aiogoogle, mock_calendar_v3)):
            with pytest.raises(CalendarApiError) as exc_info:
                await AsyncCalendarApiService("ya29.token").list_busy("primary", TIME_MIN, TIME_MAX)

        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_validation_happens_before_any_call(self, mock_aiogoogle, mock_calendar_v3):
        with patch('src.bookme_engine.services.calendar.async_api_service.async_calendar_service',
                   _fake_service(mock_aiogoogle, mock_calendar_v3)):
            with pytest.raises(ValidationError):
                await AsyncCalendarApiService("ya29.token").list_busy("", TIME_MIN, TIME_MAX)

        mock_aiogoogle.as_user.assert_not_called()
