"""
Tenant-centric entry point.

This module wires the engine's pieces together so that a routing layer can
serve one tenant's booking page with a handful of calls.

Usage Examples:
    engine = BookingEngine(EngineConfig.from_env(), settings_store,
                           credential_store, booking_store, notifier=mailer)

    tenant = engine.tenant("alice")
    status, body = tenant.slots("2026-11-04")
    status, body = tenant.book({"startTime": ..., "endTime": ..., "name": ..., "email": ...})
"""

import logging
import re
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple

from .auth.broker import TenantTokenProvider, TokenBroker
from .auth.cache import AccessTokenCache
from .auth.consent import ConsentService
from .booking.locks import SlotLock
from .booking.notifications import NotificationDispatcher, Notifier
from .booking.transaction import BookingService
from .booking.types import BookingRequest
from .config import EngineConfig
from .exceptions import ValidationError
from .responses import booking_success, error_response
from .scheduling.availability import AvailabilityService
from .services.calendar.api_service import CalendarApiService

logger = logging.getLogger(__name__)

RESERVED_SLUGS = ("dashboard", "auth", "api", "admin", "settings", "login", "logout")
MIN_SLUG_LENGTH = 3

Response = Tuple[int, Any]


def generate_slug(email: str, name: str) -> str:
    """Derive a URL slug from the email local part, falling back to the name."""
    prefix = re.sub(r'[^a-z0-9]', '', (email or "").split('@')[0].lower())
    if len(prefix) >= MIN_SLUG_LENGTH:
        return prefix
    return re.sub(r'[^a-z0-9]', '', (name or "").lower())[:20] or "user"


def ensure_unique_slug(base_slug: str, is_taken: Callable[[str], bool]) -> str:
    """Append 1, 2, ... to ``base_slug`` until ``is_taken`` says it is free."""
    slug = base_slug
    counter = 1
    while is_taken(slug):
        slug = f"{base_slug}{counter}"
        counter += 1
    return slug


def validate_slug(slug: str) -> str:
    """Normalize a requested slug and reject short or reserved ones."""
    normalized = re.sub(r'[^a-z0-9_-]', '', (slug or "").lower())
    if len(normalized) < MIN_SLUG_LENGTH:
        raise ValidationError(f"Slug must be at least {MIN_SLUG_LENGTH} characters")
    if normalized in RESERVED_SLUGS:
        raise ValidationError("This slug is reserved")
    return normalized


class BookingEngine:
    """
    Process-wide wiring of the availability and booking paths.

    Nothing here holds per-request state; every tenant call resolves a fresh
    access token unless a token cache is injected.
    """

    def __init__(
        self,
        config: EngineConfig,
        settings_store,
        credential_store,
        booking_store,
        notifier: Optional[Notifier] = None,
        token_cache: Optional[AccessTokenCache] = None,
        slot_lock: Optional[SlotLock] = None,
        gateway_factory: Callable[[str], CalendarApiService] = None,
        broker: Optional[TokenBroker] = None,
    ):
        self.config = config
        self.settings_store = settings_store
        self.credential_store = credential_store
        self.booking_store = booking_store

        self.token_provider = TenantTokenProvider(config, credential_store, broker=broker, cache=token_cache)
        notifications = NotificationDispatcher(notifier) if notifier is not None else None
        self.availability = AvailabilityService(config, settings_store, self.token_provider, gateway_factory)
        self.bookings = BookingService(
            config, settings_store, self.token_provider, booking_store,
            gateway_factory=gateway_factory, notifications=notifications, slot_lock=slot_lock,
        )
        self.consent = ConsentService(config, credential_store)

    def tenant(self, tenant_id: str) -> "TenantClient":
        return TenantClient(self, tenant_id)


class TenantClient:
    """Per-tenant facade returning ``(status_code, body)`` pairs."""

    def __init__(self, engine: BookingEngine, tenant_id: str):
        self._engine = engine
        self.tenant_id = tenant_id

    def slots(self, date_str: str, now: Optional[datetime] = None) -> Response:
        try:
            slots = self._engine.availability.slots_for_date(self.tenant_id, date_str, now=now)
        except Exception as e:
            return error_response(e)
        return 200, [slot.to_dict() for slot in slots]

    def book(self, payload: Dict[str, Any], now: Optional[datetime] = None) -> Response:
        try:
            request = BookingRequest.from_dict(payload)
            result = self._engine.bookings.book(self.tenant_id, request, now=now)
        except Exception as e:
            return error_response(e)
        return booking_success(result.record)

    def bookings(self, since: Optional[datetime] = None) -> Response:
        try:
            records = self._engine.bookings.list_bookings(self.tenant_id, since)
        except Exception as e:
            return error_response(e)
        return 200, [record.to_dict() for record in records]

    def public_settings(self, slug: Optional[str] = None) -> Response:
        try:
            settings = self._engine.settings_store.get(self.tenant_id)
        except Exception as e:
            return error_response(e)
        return 200, settings.to_public_dict(slug)

    def update_settings(self, partial: Dict[str, Any]) -> Response:
        try:
            settings = self._engine.settings_store.save(self.tenant_id, partial)
        except Exception as e:
            return error_response(e)
        logger.info("Updated settings for tenant %s: %s", self.tenant_id, sorted(partial))
        return 200, settings.to_dict()
