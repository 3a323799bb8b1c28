"""
OAuth token broker.

Exchanges a tenant's long-lived refresh token for a short-lived access token
using google-auth. Nothing is cached here; callers that want caching inject an
``AccessTokenCache`` into :class:`TenantTokenProvider`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from ..config import EngineConfig
from ..exceptions import CalendarApiError, TokenRefreshError
from .cache import AccessTokenCache
from . import vault

logger = logging.getLogger(__name__)

UNAUTHORIZED_STATUS = 401


class TimeoutRequest(Request):
    """google-auth transport that applies a fixed timeout to every call."""

    def __init__(self, timeout: float, session=None):
        super().__init__(session)
        self._timeout = timeout

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url, method=method, body=body, headers=headers,
            timeout=timeout or self._timeout, **kwargs
        )


@dataclass
class AccessToken:
    """An access token together with its remaining lifetime in seconds."""
    token: str
    expires_in: Optional[float] = None


def _refresh_error_details(error: RefreshError):
    """Split a RefreshError into (message, provider error code)."""
    message = str(error.args[0]) if error.args else str(error)
    status = None
    if len(error.args) > 1 and isinstance(error.args[1], dict):
        status = error.args[1].get("error")
    return message, status


class TokenBroker:
    """
    Exchanges refresh tokens for access tokens at the Google token endpoint.

    Args:
        config: Engine configuration holding client id, secret and timeout.
    """

    def __init__(self, config: EngineConfig):
        self._config = config

    def _build_credentials(self, refresh_token: str) -> Credentials:
        return Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self._config.token_uri,
            client_id=self._config.google_client_id,
            client_secret=self._config.google_client_secret,
        )

    def refresh_access_token(self, refresh_token: str) -> AccessToken:
        """
        Refresh and return the access token with its lifetime.

        Raises:
            TokenRefreshError: The provider rejected the refresh token or could
                not be reached.
        """
        if not refresh_token:
            raise TokenRefreshError("No refresh token stored for this calendar", status="missing_token")

        credentials = self._build_credentials(refresh_token)
        try:
            credentials.refresh(TimeoutRequest(self._config.http_timeout))
        except RefreshError as e:
            message, status = _refresh_error_details(e)
            logger.error("Token refresh rejected by provider: status=%s", status)
            raise TokenRefreshError(f"Token refresh failed: {message}", status=status) from e
        except TransportError as e:
            logger.error("Token endpoint unreachable: %s", e)
            raise TokenRefreshError(f"Token refresh failed: {e}", status="transport_error") from e

        if not credentials.token:
            raise TokenRefreshError("Token refresh returned no access token", status="empty_response")

        expires_in = None
        if credentials.expiry:
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            expires_in = (credentials.expiry - now).total_seconds()

        logger.info("Access token refreshed")
        return AccessToken(token=credentials.token, expires_in=expires_in)

    def refresh(self, refresh_token: str) -> str:
        """Exchange ``refresh_token`` for an access token string."""
        return self.refresh_access_token(refresh_token).token


class TenantTokenProvider:
    """
    Resolves an access token for a tenant.

    Reads the encrypted refresh token from the credential store, decrypts it
    with the configured secret (read on every call) and exchanges it through
    the broker. An optional cache short-circuits the exchange per tenant.
    """

    def __init__(self, config: EngineConfig, credential_store, broker: TokenBroker = None,
                 cache: Optional[AccessTokenCache] = None):
        self._config = config
        self._credential_store = credential_store
        self._broker = broker or TokenBroker(config)
        self._cache = cache

    def access_token_for(self, tenant_id: str) -> str:
        if self._cache is not None:
            cached = self._cache.get(tenant_id)
            if cached:
                return cached

        blob = self._credential_store.get_encrypted_refresh_token(tenant_id)
        if not blob:
            raise TokenRefreshError("Calendar is not connected", status="missing_token")

        refresh_token = vault.decrypt(blob, self._config.encryption_key)
        access = self._broker.refresh_access_token(refresh_token)

        if self._cache is not None:
            self._cache.put(tenant_id, access.token, access.expires_in)
        return access.token

    def invalidate(self, tenant_id: str) -> None:
        """Drop any cached token for ``tenant_id``."""
        if self._cache is not None:
            self._cache.invalidate(tenant_id)


def call_with_fresh_token(token_provider, tenant_id: str, gateway_factory, operation):
    """
    Run ``operation(gateway)`` with a calendar gateway for the tenant.

    A 401 from the calendar means the access token was revoked or expired
    while cached. The cached token is dropped and the call is retried once
    with a freshly refreshed token; a second 401 is reported as a token
    failure so the owner is asked to reconnect.

    Returns:
        Tuple of (gateway, result); follow-up calls reuse the accepted gateway.
    """
    for attempt in range(2):
        gateway = gateway_factory(token_provider.access_token_for(tenant_id))
        try:
            return gateway, operation(gateway)
        except CalendarApiError as e:
            if e.status != UNAUTHORIZED_STATUS:
                raise
            token_provider.invalidate(tenant_id)
            if attempt:
                raise TokenRefreshError("Calendar rejected a freshly refreshed access token",
                                        status="unauthorized") from e
            logger.warning("Calendar rejected the access token for tenant %s; refreshing", tenant_id)
