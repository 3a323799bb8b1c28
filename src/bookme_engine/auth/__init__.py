from .vault import encrypt, decrypt
from .broker import TokenBroker, TenantTokenProvider, AccessToken, call_with_fresh_token
from .cache import AccessTokenCache, InMemoryAccessTokenCache
from .consent import ConsentService, ConsentResult

__all__ = [
    "encrypt",
    "decrypt",
    "TokenBroker",
    "TenantTokenProvider",
    "AccessToken",
    "call_with_fresh_token",
    "AccessTokenCache",
    "InMemoryAccessTokenCache",
    "ConsentService",
    "ConsentResult",
]
