from datetime import datetime

from beanie import Document, Indexed
from pydantic import Field

USER_STATUSES = ("pending", "active", "blocked")


class User(Document):
    name: str = "User"
    email: Indexed(str, unique=True)  # stored as typed; lookups are case-sensitive
    username: Indexed(str, unique=True)
    password_hash: str
    role: str = "user"  # "user" | "admin"
    is_admin: bool = False
    status: str = "pending"  # pending | active | blocked
    is_approved: bool = False
    session_version: int = 0
    last_sign_in_at: datetime | None = None
    last_sign_out_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"
