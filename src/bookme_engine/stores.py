"""
Contracts for the collaborators that own persistence, plus in-memory
implementations used in tests and local development.
"""

import itertools
import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from .booking.types import BookingRecord
from .exceptions import TenantNotFoundError
from .scheduling.types import TenantSettings

logger = logging.getLogger(__name__)


class SettingsStore(Protocol):
    def get(self, tenant_id: str) -> TenantSettings:
        ...

    def save(self, tenant_id: str, partial: Dict[str, Any]) -> TenantSettings:
        ...


class CredentialStore(Protocol):
    def get_encrypted_refresh_token(self, tenant_id: str) -> Optional[str]:
        ...

    def save_encrypted_refresh_token(self, tenant_id: str, blob: str) -> None:
        ...


class BookingStore(Protocol):
    def insert(self, tenant_id: str, record: BookingRecord) -> BookingRecord:
        ...

    def list_since(self, tenant_id: str, since: Optional[datetime] = None) -> List[BookingRecord]:
        ...


class InMemorySettingsStore:
    """Settings keyed by tenant id."""

    def __init__(self, initial: Optional[Dict[str, TenantSettings]] = None):
        self._settings: Dict[str, TenantSettings] = dict(initial or {})
        self._lock = threading.Lock()

    def create(self, tenant_id: str, settings: TenantSettings) -> TenantSettings:
        with self._lock:
            self._settings[tenant_id] = settings
        return settings

    def get(self, tenant_id: str) -> TenantSettings:
        with self._lock:
            settings = self._settings.get(tenant_id)
        if settings is None:
            raise TenantNotFoundError(f"Unknown tenant: {tenant_id}")
        return settings

    def save(self, tenant_id: str, partial: Dict[str, Any]) -> TenantSettings:
        with self._lock:
            current = self._settings.get(tenant_id)
            if current is None:
                raise TenantNotFoundError(f"Unknown tenant: {tenant_id}")
            updated = current.apply_update(partial)
            self._settings[tenant_id] = updated
        return updated


class InMemoryCredentialStore:
    """Encrypted refresh-token blobs keyed by tenant id."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def get_encrypted_refresh_token(self, tenant_id: str) -> Optional[str]:
        return self._blobs.get(tenant_id)

    def save_encrypted_refresh_token(self, tenant_id: str, blob: str) -> None:
        self._blobs[tenant_id] = blob


class InMemoryBookingStore:
    """
    Booking records keyed by tenant id.

    Args:
        unique_slots: Reject a second record for the same tenant, start and
            end, the way a unique index on ``(tenant, start, end)`` would.
    """

    def __init__(self, unique_slots: bool = False):
        self._records: Dict[str, List[BookingRecord]] = {}
        self._ids = itertools.count(1)
        self._unique_slots = unique_slots
        self._lock = threading.Lock()

    def insert(self, tenant_id: str, record: BookingRecord) -> BookingRecord:
        with self._lock:
            records = self._records.setdefault(tenant_id, [])
            if self._unique_slots and any(
                existing.start_iso == record.start_iso and existing.end_iso == record.end_iso
                for existing in records
            ):
                raise ValueError(f"Duplicate booking for {record.start_iso}-{record.end_iso}")
            record.id = next(self._ids)
            records.append(record)
        logger.info("Stored booking %s for tenant %s", record.id, tenant_id)
        return record

    def list_since(self, tenant_id: str, since: Optional[datetime] = None) -> List[BookingRecord]:
        """Records of a tenant, newest first, optionally created at or after ``since``."""
        with self._lock:
            records = list(self._records.get(tenant_id, []))
        if since is not None:
            records = [record for record in records if record.created_at >= since]
        return sorted(records, key=lambda record: (record.created_at, record.id or 0), reverse=True)
