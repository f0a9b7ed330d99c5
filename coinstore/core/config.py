from functools import lru_cache
from typing import Any, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["http://localhost:3000", "http://localhost:5173"]


def _parse_cors_origins(v: Any) -> List[str]:
    try:
        if v is None or v == "":
            return _DEFAULT_CORS.copy()
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str) and x.strip()]
        s = str(v).strip()
        if not s:
            return _DEFAULT_CORS.copy()
        if s.startswith("["):
            import json
            out = json.loads(s)
            return [x for x in out if isinstance(x, str) and x.strip()] or _DEFAULT_CORS.copy()
        return [x.strip() for x in s.split(",") if x.strip()] or _DEFAULT_CORS.copy()
    except ValueError:
        return _DEFAULT_CORS.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    env: str = Field(default="development", description="ENV")
    debug: bool = Field(default=False, description="DEBUG")
    secret_key: str = Field(default="change-me-in-production-min-32-chars")

    # MongoDB
    mongodb_uri: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="coin", alias="MONGODB_DB_NAME")

    # Redis (arq worker)
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")

    # Fernet key (base64) for stored game-login passwords
    token_encryption_key: str = Field(default="", alias="TOKEN_ENCRYPTION_KEY")

    # Seeded admin account
    admin_email: str = Field(default="admin@example.com", alias="ADMIN_EMAIL")
    admin_password: str = Field(default="change-me-admin", alias="ADMIN_PASSWORD")

    # Sessions
    session_max_age_seconds: int = Field(default=7 * 24 * 3600, alias="SESSION_MAX_AGE_SECONDS")

    # Sentry
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="CORS_ORIGINS",
        description="Comma-separated or JSON list",
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors_origins(getattr(self, "cors_origins_raw", None))

    # Ledger
    default_bonus_rate: float = Field(default=10.0, alias="DEFAULT_BONUS_RATE")
    reconcile_cron_minute: int = Field(default=0, alias="RECONCILE_CRON_MINUTE")


@lru_cache
def get_settings() -> Settings:
    return Settings()
