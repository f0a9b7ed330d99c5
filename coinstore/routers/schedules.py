from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from coinstore.deps import get_current_user, parse_object_id, require_admin
from coinstore.models.schedule import Schedule
from coinstore.models.user import User
from coinstore.services import schedules as schedules_service

router = APIRouter()

Day = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class ScheduleBody(BaseModel):
    usernames: list[str]
    day: Day
    start_time: str
    end_time: str
    title: str

    @field_validator("usernames")
    @classmethod
    def _usernames(cls, v: list[str]) -> list[str]:
        v = [u.strip() for u in v if u and u.strip()]
        if not v:
            raise ValueError("usernames must be a non-empty list")
        return v

    @field_validator("start_time", "end_time", "title")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field is required")
        return v.strip()


def schedule_to_dict(s: Schedule) -> dict:
    return {
        "id": str(s.id),
        "usernames": s.usernames,
        "day": s.day,
        "start_time": s.start_time,
        "end_time": s.end_time,
        "title": s.title,
        "created_at": s.created_at.isoformat(),
        "updated_at": s.updated_at.isoformat(),
    }


@router.get("")
async def schedules_list(
    username: str | None = Query(None),
    user: User = Depends(get_current_user),
):
    items = await schedules_service.list_schedules(username)
    return {"schedules": [schedule_to_dict(s) for s in items]}


@router.post("", status_code=201)
async def schedule_create(body: ScheduleBody, user: User = Depends(require_admin)):
    s = await schedules_service.create_schedule(**body.model_dump())
    return schedule_to_dict(s)


@router.put("/{schedule_id}")
async def schedule_update(schedule_id: str, body: ScheduleBody, user: User = Depends(require_admin)):
    s = await schedules_service.update_schedule(parse_object_id(schedule_id, "Schedule"), **body.model_dump())
    return schedule_to_dict(s)


@router.delete("/{schedule_id}")
async def schedule_delete(schedule_id: str, user: User = Depends(require_admin)):
    await schedules_service.delete_schedule(parse_object_id(schedule_id, "Schedule"))
    return {"ok": True}
