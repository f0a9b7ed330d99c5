from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field


class Game(Document):
    name: Indexed(str, unique=True)
    coins_recharged: float = 0
    last_recharge_date: str | None = None  # YYYY-MM-DD
    total_coins: float = 0  # cached balance, adjusted by balance_sync, repaired by reconcile
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "games"
