from typing import Optional

from .base import CredentialError


class TokenRefreshError(CredentialError):
    """Raised when the provider rejects a refresh token; the owner must reconnect."""
    status_code = 401
    code = "calendar_reconnect_required"
    client_message = "The calendar connection has expired. Please reconnect your calendar."

    def __init__(self, message: str = None, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class DecryptionError(CredentialError):
    """Raised when an encrypted credential is malformed or fails authentication."""
    code = "credential_integrity"
