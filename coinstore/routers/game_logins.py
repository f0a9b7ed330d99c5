from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_validator

from coinstore.deps import get_current_user, parse_object_id, require_admin
from coinstore.models.user import User
from coinstore.services import game_logins as game_logins_service

router = APIRouter()


class GameLoginCreate(BaseModel):
    owner_type: Literal["admin", "user"] = "admin"
    game_name: str
    login_username: str
    password: str
    game_link: str | None = None

    @field_validator("game_name", "login_username", "password")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("field is required")
        return v


@router.get("")
async def game_logins_list(
    owner_type: str | None = Query(None, description="admin | user"),
    user: User = Depends(get_current_user),
):
    # staff only see logins shared with users
    if user.role != "admin":
        owner_type = "user"
    items = await game_logins_service.list_game_logins(owner_type)
    return {"logins": [game_logins_service.game_login_to_dict(g) for g in items]}


@router.post("", status_code=201)
async def game_login_create(body: GameLoginCreate, user: User = Depends(require_admin)):
    g = await game_logins_service.create_game_login(
        body.owner_type, body.game_name, body.login_username, body.password, body.game_link
    )
    return game_logins_service.game_login_to_dict(g)


@router.delete("/{login_id}")
async def game_login_delete(login_id: str, user: User = Depends(require_admin)):
    await game_logins_service.delete_game_login(parse_object_id(login_id, "Game login"))
    return {"ok": True}
