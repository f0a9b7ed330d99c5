from datetime import datetime

from beanie import Document, PydanticObjectId
from pydantic import Field


class LoginSession(Document):
    user_id: PydanticObjectId | None = None
    username: str
    email: str = ""
    sign_in_at: datetime = Field(default_factory=datetime.utcnow)
    sign_out_at: datetime | None = None

    class Settings:
        name = "login_sessions"
        indexes = [[("username", 1), ("sign_in_at", -1)]]
