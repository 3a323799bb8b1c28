"""
Encryption and decryption of OAuth refresh tokens at rest.

Tokens are sealed with AES-256-GCM. The key is derived from the operator
secret with PBKDF2-HMAC-SHA256 and a fixed application salt; the nonce is
generated per encryption and stored in front of the ciphertext, so a blob is
``base64(nonce || ciphertext || tag)``.
"""

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import DecryptionError

SALT = b"bookme-salt-v1"
KDF_ITERATIONS = 100_000
KEY_LENGTH = 32
NONCE_LENGTH = 12
TAG_LENGTH = 16


def derive_key(secret: str) -> bytes:
    """
    Derive a 256-bit AES key from the operator secret.

    The key is recomputed on every call; secrets may rotate between calls.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=SALT,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt(plaintext: str, secret: str) -> str:
    """
    Encrypt a string with a key derived from ``secret``.

    Args:
        plaintext: Value to seal, typically a refresh token.
        secret: Operator-controlled secret.

    Returns:
        Base64 text holding nonce, ciphertext and authentication tag.
    """
    if not secret:
        raise ValueError("Encryption secret must not be empty")

    nonce = os.urandom(NONCE_LENGTH)
    sealed = AESGCM(derive_key(secret)).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + sealed).decode("ascii")


def decrypt(blob: str, secret: str) -> str:
    """
    Decrypt a blob produced by :func:`encrypt`.

    Raises:
        DecryptionError: The blob is malformed or truncated, the key is wrong,
            or the data was tampered with.
    """
    if not secret:
        raise DecryptionError("Decryption secret is not configured")
    if not blob:
        raise DecryptionError("Encrypted credential is empty")

    try:
        raw = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError("Encrypted credential is not valid base64") from e

    if len(raw) < NONCE_LENGTH + TAG_LENGTH:
        raise DecryptionError("Encrypted credential is truncated")

    nonce, sealed = raw[:NONCE_LENGTH], raw[NONCE_LENGTH:]
    try:
        plaintext = AESGCM(derive_key(secret)).decrypt(nonce, sealed, None)
    except InvalidTag as e:
        raise DecryptionError("Encrypted credential failed authentication") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Decrypted credential is not valid text") from e
