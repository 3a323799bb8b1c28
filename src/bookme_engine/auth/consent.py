"""
OAuth consent handling.

Builds the Google consent URL and turns the returned authorization code into
a stored, encrypted refresh token for the tenant.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from google_auth_oauthlib.flow import Flow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from ..config import EngineConfig, GOOGLE_AUTH_URI, SCOPES
from ..exceptions import TokenRefreshError
from . import vault

logger = logging.getLogger(__name__)


@dataclass
class ConsentResult:
    """
    Outcome of a completed consent.

    Args:
        access_token: Access token issued with the consent.
        refresh_token_stored: Whether a new encrypted refresh token was saved.
            Google only reissues a refresh token on some consents; when it does
            not, the previously stored credential stays in place.
    """
    access_token: str
    refresh_token_stored: bool


class ConsentService:
    """Runs the web-server OAuth flow for a tenant's calendar."""

    def __init__(self, config: EngineConfig, credential_store):
        self._config = config
        self._credential_store = credential_store

    def _client_config(self) -> dict:
        return {
            "web": {
                "client_id": self._config.google_client_id,
                "client_secret": self._config.google_client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": self._config.token_uri,
                "redirect_uris": [self._config.redirect_uri],
            }
        }

    def _flow(self, state: Optional[str] = None) -> Flow:
        return Flow.from_client_config(
            self._client_config(),
            scopes=SCOPES,
            state=state,
            redirect_uri=self._config.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def authorization_url(self, state: Optional[str] = None) -> Tuple[str, str]:
        """
        Build the consent screen URL.

        Offline access with a forced consent prompt is requested so Google
        returns a refresh token.

        Returns:
            Tuple of (url, state).
        """
        return self._flow(state).authorization_url(
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )

    def complete(self, tenant_id: str, code: str, state: Optional[str] = None) -> ConsentResult:
        """
        Exchange an authorization code and store the refresh token.

        Raises:
            TokenRefreshError: The code exchange was rejected.
        """
        if not code:
            raise TokenRefreshError("Authorization code is missing", status="no_code")

        flow = self._flow(state)
        try:
            flow.fetch_token(code=code, timeout=self._config.http_timeout)
        except OAuth2Error as e:
            logger.error("Authorization code exchange failed for tenant %s: %s", tenant_id, e.error)
            raise TokenRefreshError(f"Token exchange failed: {e.description or e.error}", status=e.error) from e

        credentials = flow.credentials
        stored = False
        if credentials.refresh_token:
            blob = vault.encrypt(credentials.refresh_token, self._config.encryption_key)
            self._credential_store.save_encrypted_refresh_token(tenant_id, blob)
            stored = True
            logger.info("Stored new refresh token for tenant %s", tenant_id)
        else:
            logger.info("No refresh token reissued for tenant %s; keeping existing credential", tenant_id)

        return ConsentResult(access_token=credentials.token, refresh_token_stored=stored)
