import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..auth.broker import call_with_fresh_token
from ..config import EngineConfig
from ..exceptions import ValidationError
from ..services.calendar.api_service import CalendarApiService
from ..utils.log_sanitizer import sanitize_for_logging
from ..utils.timezone import local_day_bounds, parse_date, today_in, utc_now
from .slots import generate_slots
from .types import TimeSlot

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Read path: computes the slots of one date for a tenant from its live
    calendar.

    Args:
        config: Engine configuration (timeouts).
        settings_store: Source of tenant settings.
        token_provider: Resolves a tenant's access token.
        gateway_factory: Builds a calendar gateway from an access token.
    """

    def __init__(self, config: EngineConfig, settings_store, token_provider,
                 gateway_factory: Callable[[str], CalendarApiService] = None):
        self._settings_store = settings_store
        self._token_provider = token_provider
        self._gateway_factory = gateway_factory or (
            lambda token: CalendarApiService.for_access_token(token, config.http_timeout)
        )

    def slots_for_date(self, tenant_id: str, date_str: str, now: Optional[datetime] = None) -> List[TimeSlot]:
        """
        Slots of ``date_str`` (YYYY-MM-DD, tenant-local) for ``tenant_id``.

        Dates before today in the tenant timezone yield no slots without
        touching the calendar; dates past the booking horizon are rejected.
        """
        if not date_str:
            raise ValidationError("date parameter is required (YYYY-MM-DD)")
        day = parse_date(date_str)
        now = now or utc_now()

        settings = self._settings_store.get(tenant_id)
        if not settings.calendar_id:
            raise ValidationError("Calendar is not configured for this user")

        today = today_in(settings.timezone, now)
        if day < today:
            return []
        if day > today + timedelta(days=settings.max_days):
            raise ValidationError(f"Dates can only be booked up to {settings.max_days} days ahead")

        day_start, day_end = local_day_bounds(day, settings.timezone)
        _, busy = call_with_fresh_token(
            self._token_provider, tenant_id, self._gateway_factory,
            lambda gateway: gateway.list_busy(settings.calendar_id, day_start, day_end, timezone=settings.timezone),
        )

        slots = generate_slots(day, busy, settings, now=now)
        logger.info("Computed %d slots (%d available) for tenant %s on %s in calendar %s",
                    len(slots), sum(1 for slot in slots if slot.available), tenant_id, day,
                    sanitize_for_logging(calendar_id=settings.calendar_id)['calendar_id'])
        return slots
