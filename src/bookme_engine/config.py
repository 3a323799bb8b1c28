"""
Engine configuration.

Values are read from the environment so that secrets such as the encryption
key can be rotated by the operator without code changes.
"""

import os
from dataclasses import dataclass

SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/calendar",
]

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"

DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_TIMEZONE = "Asia/Tokyo"


@dataclass(frozen=True)
class EngineConfig:
    """
    Process-wide settings for the booking engine.

    Args:
        google_client_id: OAuth client id registered with Google.
        google_client_secret: OAuth client secret.
        encryption_key: Operator secret the refresh-token key is derived from.
        base_url: Public base URL; the OAuth redirect is ``{base_url}/auth/callback``.
        http_timeout: Per-call timeout in seconds for every upstream request.
        default_timezone: Timezone given to newly onboarded tenants.
        token_uri: OAuth token endpoint.
    """
    google_client_id: str = ""
    google_client_secret: str = ""
    encryption_key: str = ""
    base_url: str = "http://localhost:8787"
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    default_timezone: str = DEFAULT_TIMEZONE
    token_uri: str = GOOGLE_TOKEN_URI

    @property
    def redirect_uri(self) -> str:
        return f"{self.base_url.rstrip('/')}/auth/callback"

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config from ``GOOGLE_*`` and ``BOOKME_*`` environment variables."""
        timeout = os.getenv("BOOKME_HTTP_TIMEOUT")
        return cls(
            google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
            encryption_key=os.getenv("BOOKME_ENCRYPTION_KEY", ""),
            base_url=os.getenv("BOOKME_BASE_URL", "http://localhost:8787"),
            http_timeout=float(timeout) if timeout else DEFAULT_HTTP_TIMEOUT,
            default_timezone=os.getenv("BOOKME_DEFAULT_TIMEZONE", DEFAULT_TIMEZONE),
            token_uri=os.getenv("GOOGLE_TOKEN_URI", GOOGLE_TOKEN_URI),
        )
