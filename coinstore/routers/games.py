from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from coinstore.core.audit import log_event
from coinstore.core.dates import normalize_date_string
from coinstore.deps import get_current_user, parse_object_id, require_admin
from coinstore.models.game import Game
from coinstore.models.user import User
from coinstore.services import balance_sync
from coinstore.services import games as games_service

router = APIRouter()


class GameCreate(BaseModel):
    name: str
    coins_recharged: float = Field(default=0, ge=0)
    last_recharge_date: str | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Game name is required")
        return v

    @field_validator("last_recharge_date", mode="before")
    @classmethod
    def _date(cls, v):
        return normalize_date_string(v)


class GameUpdate(BaseModel):
    coins_recharged: float | None = Field(default=None, ge=0)
    last_recharge_date: str | None = None

    @field_validator("last_recharge_date", mode="before")
    @classmethod
    def _date(cls, v):
        return normalize_date_string(v)


def game_to_dict(g: Game) -> dict:
    return {
        "id": str(g.id),
        "name": g.name,
        "coins_recharged": g.coins_recharged,
        "last_recharge_date": g.last_recharge_date,
        "total_coins": g.total_coins,
        "created_at": g.created_at.isoformat(),
        "updated_at": g.updated_at.isoformat(),
    }


@router.get("")
async def games_list(
    q: str | None = Query(None, description="Name search; returns matching names only"),
    user: User = Depends(get_current_user),
):
    """With ?q= return matching game names, else every game with its totals."""
    if q and q.strip():
        return {"names": await games_service.search_names(q)}
    return {"games": await games_service.list_games_with_totals()}


@router.post("", status_code=201)
async def game_create(body: GameCreate, user: User = Depends(require_admin)):
    g = await games_service.create_game(body.name, body.coins_recharged, body.last_recharge_date)
    return game_to_dict(g)


@router.post("/reconcile")
async def games_reconcile(user: User = Depends(require_admin)):
    """Rebuild every cached balance from entry history; returns the games that had drifted."""
    drifted = await balance_sync.reconcile_all()
    await log_event(user.username, "balances_reconciled", "game", metadata={"drifted": len(drifted)})
    return {"drifted": [d.model_dump() for d in drifted]}


@router.put("/{game_id}")
async def game_update(game_id: str, body: GameUpdate, user: User = Depends(require_admin)):
    g = await games_service.update_game(
        parse_object_id(game_id, "Game"),
        coins_recharged=body.coins_recharged,
        last_recharge_date=body.last_recharge_date,
        clear_recharge_date="last_recharge_date" in body.model_fields_set and body.last_recharge_date is None,
    )
    return game_to_dict(g)


@router.delete("/{game_id}")
async def game_delete(game_id: str, user: User = Depends(require_admin)):
    g = await games_service.delete_game(parse_object_id(game_id, "Game"))
    return game_to_dict(g)


@router.post("/{game_id}/reset-recharge")
async def game_reset_recharge(game_id: str, user: User = Depends(require_admin)):
    g = await games_service.reset_recharge(parse_object_id(game_id, "Game"))
    return game_to_dict(g)
