from datetime import datetime

from beanie import Document
from pydantic import Field


class GameLogin(Document):
    """Credentials staff use to sign in to a game's back office."""
    owner_type: str  # admin | user
    game_name: str
    login_username: str
    password_encrypted: str  # Fernet
    game_link: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "game_logins"
