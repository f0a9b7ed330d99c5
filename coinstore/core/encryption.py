"""Fernet encryption for stored game-login passwords."""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from coinstore.core.config import get_settings
from coinstore.core.exceptions import BadRequestError


def _get_fernet() -> Fernet:
    settings = get_settings()
    key = settings.token_encryption_key
    if not key or len(key) != 44:
        # Derive from secret_key when TOKEN_ENCRYPTION_KEY is not set
        digest = hashlib.sha256(settings.secret_key.encode()).digest()
        key = base64.urlsafe_b64encode(digest).decode()
    try:
        return Fernet(key.encode())
    except ValueError as e:
        raise BadRequestError(f"Invalid encryption key: {e}") from e


def encrypt_secret(plain: str) -> str:
    if not plain:
        return ""
    return _get_fernet().encrypt(plain.encode()).decode()


def decrypt_secret(encrypted: str) -> str:
    """Return the plain secret, or "" if it was encrypted under another key."""
    if not encrypted:
        return ""
    try:
        return _get_fernet().decrypt(encrypted.encode()).decode()
    except InvalidToken:
        return ""
