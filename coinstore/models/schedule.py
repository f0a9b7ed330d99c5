from datetime import datetime

from beanie import Document
from pydantic import Field


class Schedule(Document):
    usernames: list[str]
    day: str  # Monday..Sunday
    start_time: str  # "09:00 AM"
    end_time: str
    title: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "schedules"
