"""
Booking transaction.

A booking moves through::

    VALIDATING -> CONFLICT_CHECKING -> CALENDAR_WRITING -> PERSISTING -> COMPLETED

and can reach FAILED from any state. The conflict check is a live re-query
of the calendar immediately before the write. It is best-effort: two
requests that both pass the check before either writes will both succeed
unless a SlotLock or a unique booking store is configured.
"""

import logging
import re
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, List, Optional

from ..auth.broker import UNAUTHORIZED_STATUS, call_with_fresh_token
from ..config import EngineConfig
from ..exceptions import (
    CalendarApiError, PastDateError, PersistenceError, SlotConflictError, TokenRefreshError, ValidationError
)
from ..services.calendar.api_service import CalendarApiService
from ..scheduling.types import TenantSettings
from ..utils.log_sanitizer import sanitize_for_logging
from ..utils.timezone import format_instant, instant_to_civil, parse_instant, today_in, utc_now
from .locks import SlotLock
from .notifications import NotificationDispatcher
from .types import BookingRecord, BookingRequest

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class BookingState(Enum):
    VALIDATING = "validating"
    CONFLICT_CHECKING = "conflict_checking"
    CALENDAR_WRITING = "calendar_writing"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class BookingResult:
    record: BookingRecord
    state: BookingState = BookingState.COMPLETED


def event_title(request: BookingRequest) -> str:
    return f"Booking: {request.name}"


def event_description(request: BookingRequest) -> str:
    return (
        "Booking details\n"
        f"Name: {request.name}\n"
        f"Email: {request.email}\n"
        f"Message: {request.message or ''}\n"
        "\n---\nCreated by BookMe."
    )


class BookingTransaction:
    """
    One booking attempt for one tenant.

    Instances are single-use; ``state`` and ``history`` describe how far the
    attempt got and ``failure`` holds the error that stopped it.
    """

    def __init__(
        self,
        tenant_id: str,
        request: BookingRequest,
        settings_store,
        token_provider,
        booking_store,
        gateway_factory: Callable[[str], CalendarApiService],
        notifications: Optional[NotificationDispatcher] = None,
        slot_lock: Optional[SlotLock] = None,
    ):
        self.tenant_id = tenant_id
        self.request = request
        self._settings_store = settings_store
        self._token_provider = token_provider
        self._booking_store = booking_store
        self._gateway_factory = gateway_factory
        self._notifications = notifications
        self._slot_lock = slot_lock

        self.state = BookingState.VALIDATING
        self.history: List[BookingState] = [BookingState.VALIDATING]
        self.failure: Optional[Exception] = None
        self.event_id: Optional[str] = None

    def _advance(self, state: BookingState) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self, error: Exception) -> None:
        failed_in = self.state
        self.failure = error
        self._advance(BookingState.FAILED)
        logger.info("Booking for tenant %s failed in %s: %s",
                    self.tenant_id, failed_in.value, type(error).__name__)

    def run(self, now: Optional[datetime] = None) -> BookingResult:
        """
        Execute the transaction.

        Raises:
            ValidationError: Missing or malformed fields.
            PastDateError: The slot does not start in the future.
            SlotConflictError: The calendar already has something in the slot.
            TokenRefreshError: The calendar connection must be re-authorized.
            DecryptionError: The stored credential cannot be decrypted.
            CalendarApiError: Reading or writing the calendar failed.
            PersistenceError: The event was created but the record was not stored.
        """
        if self.state is not BookingState.VALIDATING or len(self.history) > 1:
            raise RuntimeError("BookingTransaction instances are single-use")

        now = now or utc_now()
        try:
            settings, start, end = self._validate(now)

            self._advance(BookingState.CONFLICT_CHECKING)
            guard = self._slot_lock.hold(self.tenant_id, start) if self._slot_lock else nullcontext()
            with guard:
                gateway = self._check_conflicts(settings, start, end)

                self._advance(BookingState.CALENDAR_WRITING)
                self.event_id = self._write_event(gateway, settings, start, end)

                self._advance(BookingState.PERSISTING)
                record = self._persist(settings, start, end)
        except Exception as e:
            self._fail(e)
            raise

        self._advance(BookingState.COMPLETED)
        self._notify(settings, record)
        return BookingResult(record=record, state=self.state)

    def _validate(self, now: datetime):
        missing = self.request.missing_fields()
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        start = parse_instant(self.request.start_time)
        end = parse_instant(self.request.end_time)
        if end <= start:
            raise ValidationError("endTime must be after startTime")
        if not EMAIL_PATTERN.match(self.request.email):
            raise ValidationError("Invalid email address")
        if start <= now:
            raise PastDateError()

        settings: TenantSettings = self._settings_store.get(self.tenant_id)
        if not settings.calendar_id:
            raise ValidationError("Calendar is not configured for this user")
        last_day = today_in(settings.timezone, now) + timedelta(days=settings.max_days)
        if instant_to_civil(start, settings.timezone).date > last_day:
            raise ValidationError(f"Bookings can only be made up to {settings.max_days} days ahead")
        return settings, start, end

    def _check_conflicts(self, settings: TenantSettings, start: datetime, end: datetime):
        gateway, busy = call_with_fresh_token(
            self._token_provider, self.tenant_id, self._gateway_factory,
            lambda gateway: gateway.list_busy(settings.calendar_id, start, end, timezone=settings.timezone),
        )
        if busy:
            logger.info("Slot %s-%s for tenant %s conflicts with %d busy period(s)",
                        format_instant(start), format_instant(end), self.tenant_id, len(busy))
            raise SlotConflictError()
        return gateway

    def _write_event(self, gateway, settings: TenantSettings, start: datetime, end: datetime) -> str:
        try:
            return gateway.create_event(
                settings.calendar_id,
                event_title(self.request),
                event_description(self.request),
                start,
                end,
                settings.timezone,
            )
        except CalendarApiError as e:
            if e.status != UNAUTHORIZED_STATUS:
                raise
            self._token_provider.invalidate(self.tenant_id)
            raise TokenRefreshError("Calendar rejected the access token while writing the event",
                                    status="unauthorized") from e

    def _persist(self, settings: TenantSettings, start: datetime, end: datetime) -> BookingRecord:
        start_civil = instant_to_civil(start, settings.timezone)
        end_civil = instant_to_civil(end, settings.timezone)
        record = BookingRecord(
            tenant_id=self.tenant_id,
            date=start_civil.date.isoformat(),
            start_time=start_civil.time_str(),
            end_time=end_civil.time_str(),
            start_iso=format_instant(start),
            end_iso=format_instant(end),
            name=self.request.name,
            email=self.request.email,
            message=self.request.message or "",
            event_id=self.event_id,
        )
        try:
            stored = self._booking_store.insert(self.tenant_id, record)
        except Exception as e:
            logger.error(
                "Booking record not stored after calendar write; orphaned event %s for tenant %s (%s)",
                self.event_id, self.tenant_id, e,
            )
            raise PersistenceError(
                f"Calendar event {self.event_id} was created but the booking could not be stored",
                event_id=self.event_id,
            ) from e
        return stored if stored is not None else record

    def _notify(self, settings: TenantSettings, record: BookingRecord) -> None:
        if self._notifications is None:
            return
        try:
            self._notifications.dispatch(settings, record)
        except Exception:
            logger.exception("Could not dispatch notifications for tenant %s", self.tenant_id)


class BookingService:
    """
    Creates and runs booking transactions with shared collaborators.

    Args:
        config: Engine configuration (timeouts).
        settings_store: Source of tenant settings.
        token_provider: Resolves a tenant's access token.
        booking_store: Booking persistence.
        gateway_factory: Builds a calendar gateway from an access token.
        notifications: Optional notification dispatcher.
        slot_lock: Optional per-slot lock closing the double-booking race.
    """

    def __init__(self, config: EngineConfig, settings_store, token_provider, booking_store,
                 gateway_factory: Callable[[str], CalendarApiService] = None,
                 notifications: Optional[NotificationDispatcher] = None,
                 slot_lock: Optional[SlotLock] = None):
        self._settings_store = settings_store
        self._token_provider = token_provider
        self._booking_store = booking_store
        self._gateway_factory = gateway_factory or (
            lambda token: CalendarApiService.for_access_token(token, config.http_timeout)
        )
        self._notifications = notifications
        self._slot_lock = slot_lock

    def transaction(self, tenant_id: str, request: BookingRequest) -> BookingTransaction:
        return BookingTransaction(
            tenant_id,
            request,
            self._settings_store,
            self._token_provider,
            self._booking_store,
            self._gateway_factory,
            notifications=self._notifications,
            slot_lock=self._slot_lock,
        )

    def book(self, tenant_id: str, request: BookingRequest, now: Optional[datetime] = None) -> BookingResult:
        sanitized = sanitize_for_logging(name=request.name, email=request.email)
        logger.info("Booking requested for tenant %s by %s <%s> from %s to %s",
                    tenant_id, sanitized['name'], sanitized['email'],
                    request.start_time, request.end_time)
        return self.transaction(tenant_id, request).run(now)

    def list_bookings(self, tenant_id: str, since: Optional[datetime] = None) -> List[BookingRecord]:
        return self._booking_store.list_since(tenant_id, since)
