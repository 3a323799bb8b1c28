import pytest
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def secret():
    """Operator encryption secret."""
    return "test-encryption-secret"


@pytest.fixture
def engine_config(secret):
    """Engine configuration with test credentials."""
    from src.bookme_engine.config import EngineConfig
    return EngineConfig(
        google_client_id="client-id.apps.googleusercontent.com",
        google_client_secret="client-secret",
        encryption_key=secret,
        base_url="https://bookme.example.com",
        http_timeout=5.0,
    )


@pytest.fixture
def tokyo_settings():
    """Weekday 09:00-17:00 hourly slots in Asia/Tokyo."""
    from src.bookme_engine.scheduling.types import TenantSettings
    return TenantSettings(
        owner_name="Hana Sato",
        owner_email="owner@example.com",
        calendar_id="owner@example.com",
        duration=60,
        start_hour=9,
        end_hour=17,
        timezone="Asia/Tokyo",
        max_days=30,
        available_days=[1, 2, 3, 4, 5],
    )


@pytest.fixture
def new_york_settings():
    """Every day, 09:00-17:00 half-hour slots in America/New_York."""
    from src.bookme_engine.scheduling.types import TenantSettings
    return TenantSettings(
        owner_name="Sam Rivera",
        owner_email="sam@example.com",
        calendar_id="primary",
        duration=30,
        start_hour=9,
        end_hour=17,
        timezone="America/New_York",
        max_days=60,
        available_days=[0, 1, 2, 3, 4, 5, 6],
    )


@pytest.fixture
def fixed_now():
    """Evaluation instant: Sunday 2026-11-01 00:00 UTC."""
    return datetime(2026, 11, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_calendar_service():
    """Mock Calendar v3 resource for testing."""
    mock_service = Mock()
    mock_events = Mock()
    mock_service.events.return_value = mock_events
    mock_events.list.return_value.execute.return_value = {"items": []}
    mock_events.insert.return_value.execute.return_value = {"id": "evt_created_123"}
    return mock_service


@pytest.fixture
def sample_timed_event():
    """Sample timed Google Calendar API event."""
    return {
        "id": "timed_event_1",
        "status": "confirmed",
        "summary": "Dentist",
        "start": {"dateTime": "2026-11-04T10:00:00+09:00"},
        "end": {"dateTime": "2026-11-04T11:00:00+09:00"},
    }


@pytest.fixture
def sample_all_day_event():
    """Sample all-day Google Calendar API event."""
    return {
        "id": "all_day_event_1",
        "status": "confirmed",
        "summary": "Holiday",
        "start": {"date": "2026-11-04"},
        "end": {"date": "2026-11-05"},
    }


@pytest.fixture
def fake_gateway():
    """Calendar gateway double with no busy periods and a fixed event id."""
    gateway = Mock()
    gateway.list_busy.return_value = []
    gateway.create_event.return_value = "evt_123"
    return gateway


@pytest.fixture
def token_provider():
    """Token provider double returning a fixed access token."""
    provider = Mock()
    provider.access_token_for.return_value = "access-token"
    return provider
