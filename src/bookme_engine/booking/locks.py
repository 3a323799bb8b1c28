import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Protocol, Set, Tuple

from ..exceptions import SlotConflictError
from ..utils.timezone import format_instant


class SlotLock(Protocol):
    """Mutual exclusion for one tenant's slot while it is being booked."""

    def hold(self, tenant_id: str, start: datetime):
        ...


class InProcessSlotLock:
    """
    Per ``(tenant_id, start_instant)`` lock for a single process.

    Acquisition never waits: a second request for a slot that is currently
    being booked is rejected as a conflict.
    """

    def __init__(self):
        self._held: Set[Tuple[str, str]] = set()
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, tenant_id: str, start: datetime):
        key = (tenant_id, format_instant(start))
        with self._guard:
            if key in self._held:
                raise SlotConflictError()
            self._held.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._held.discard(key)

    def is_held(self, tenant_id: str, start: datetime) -> bool:
        with self._guard:
            return (tenant_id, format_instant(start)) in self._held
