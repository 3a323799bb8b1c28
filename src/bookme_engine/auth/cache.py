import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

# Access tokens are treated as expired this many seconds before their real expiry.
EXPIRY_MARGIN_SECONDS = 60
DEFAULT_TTL_SECONDS = 3600


class AccessTokenCache(Protocol):
    """Tenant-scoped access token cache."""

    def get(self, tenant_id: str) -> Optional[str]:
        ...

    def put(self, tenant_id: str, access_token: str, expires_in: Optional[float] = None) -> None:
        ...

    def invalidate(self, tenant_id: str) -> None:
        ...


class InMemoryAccessTokenCache:
    """
    Process-local access token cache keyed by tenant.

    Entries expire ``EXPIRY_MARGIN_SECONDS`` before the provider lifetime so
    a token is never handed out moments before Google stops accepting it.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, tenant_id: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(tenant_id)
            if entry is None:
                return None
            token, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[tenant_id]
                return None
            return token

    def put(self, tenant_id: str, access_token: str, expires_in: Optional[float] = None) -> None:
        lifetime = (expires_in if expires_in is not None else DEFAULT_TTL_SECONDS) - EXPIRY_MARGIN_SECONDS
        if lifetime <= 0:
            return
        with self._lock:
            self._entries[tenant_id] = (access_token, self._clock() + lifetime)

    def invalidate(self, tenant_id: str) -> None:
        with self._lock:
            self._entries.pop(tenant_id, None)
