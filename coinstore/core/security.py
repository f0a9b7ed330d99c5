import hashlib
from typing import Any

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from coinstore.core.config import get_settings


def get_session_serializer() -> URLSafeTimedSerializer:
    settings = get_settings()
    return URLSafeTimedSerializer(
        settings.secret_key,
        salt="coinstore-session",
        signer_kwargs={"key_derivation": "hmac", "digest_method": hashlib.sha256},
    )


def create_session_token(payload: dict[str, Any]) -> str:
    serializer = get_session_serializer()
    return serializer.dumps(payload)


def load_session_token(token: str) -> dict[str, Any] | None:
    serializer = get_session_serializer()
    try:
        return serializer.loads(token, max_age=get_settings().session_max_age_seconds)
    except (BadSignature, SignatureExpired):
        return None


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False
