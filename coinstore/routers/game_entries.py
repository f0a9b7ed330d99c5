from fastapi import APIRouter, Body, Depends, Query

from coinstore.core.dates import date_prefix, normalize_date_string
from coinstore.core.exceptions import BadRequestError
from coinstore.core.pagination import paginate
from coinstore.deps import get_current_user, parse_object_id
from coinstore.models.game_entry import GameEntry
from coinstore.models.user import User
from coinstore.schemas.game_entries import GameEntryCreate, GameEntryUpdate
from coinstore.services import game_entries as entries_service
from coinstore.services import ledger
from coinstore.services import pending as pending_service

router = APIRouter()


def entry_to_dict(e: GameEntry) -> dict:
    return {
        "id": str(e.id),
        "username": e.username,
        "created_by": e.created_by,
        "type": e.type,
        "method": e.method,
        "mode": e.mode,
        "player_name": e.player_name,
        "player_tag": e.player_tag,
        "game_name": e.game_name,
        "amount_base": e.amount_base,
        "amount": e.amount,
        "bonus_rate": e.bonus_rate,
        "bonus_amount": e.bonus_amount,
        "amount_final": e.amount_final,
        "total_paid": e.total_paid,
        "total_cashout": e.total_cashout,
        "remaining_pay": e.remaining_pay,
        "reduction": e.reduction,
        "extra_money": e.extra_money,
        "is_pending": e.is_pending,
        "date": e.date,
        "note": e.note,
        "created_at": e.created_at.isoformat(),
        "updated_at": e.updated_at.isoformat(),
    }


def build_filter(
    username: str | None = Query(None),
    type: str | None = Query(None),
    method: str | None = Query(None),
    game_name: str | None = Query(None),
    player_tag: str | None = Query(None),
    date_from: str | None = Query(None),
    date_to: str | None = Query(None),
    year: int | None = Query(None, ge=1970, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    day: int | None = Query(None, ge=1, le=31),
    is_pending: bool | None = Query(None),
) -> ledger.EntryFilter:
    """Query parameters -> EntryFilter. Unknown type/method values are ignored."""
    try:
        prefix = date_prefix(year, month if year else None, day if year and month else None)
        date_from = normalize_date_string(date_from)
        date_to = normalize_date_string(date_to)
    except ValueError as e:
        raise BadRequestError(str(e))

    def clean(v: str | None) -> str | None:
        return (v or "").strip() or None

    return ledger.EntryFilter(
        username=clean(username),
        type=type if type in ("freeplay", "deposit", "redeem") else None,
        method=method if method in ("cashapp", "paypal", "chime", "venmo") else None,
        game_name=clean(game_name),
        player_tag=clean(player_tag),
        date_from=date_from,
        date_to=date_to,
        date_prefix=prefix,
        is_pending=is_pending,
    )


@router.get("")
async def entries_list(
    entry_filter: ledger.EntryFilter = Depends(build_filter),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
):
    """List entries, newest first."""
    limit, offset = paginate(limit, offset, max_limit=1000)
    items = await entries_service.list_entries(entry_filter, limit=limit, offset=offset)
    return {"entries": [entry_to_dict(e) for e in items], "limit": limit, "offset": offset}


@router.post("", status_code=201)
async def entry_create(
    body: GameEntryCreate = Body(...),
    user: User = Depends(get_current_user),
):
    e = await entries_service.create_entry(body, user)
    return entry_to_dict(e)


@router.get("/summary")
async def entries_summary(
    entry_filter: ledger.EntryFilter = Depends(build_filter),
    user: User = Depends(get_current_user),
):
    """Totals by type, pending totals and deposit revenue per method."""
    return await entries_service.summary(entry_filter)


@router.get("/summary/by-game")
async def entries_summary_by_game(
    entry_filter: ledger.EntryFilter = Depends(build_filter),
    user: User = Depends(get_current_user),
):
    entries = await entries_service.fetch_entries(entry_filter)
    by_game = ledger.summarize_by_game(entries)
    return {"games": {name: t.model_dump() for name, t in by_game.items()}}


@router.get("/pending")
async def entries_pending(
    username: str | None = Query(None),
    user: User = Depends(get_current_user),
):
    """Entries still owing money to a player."""
    entries = await pending_service.fetch_pending_entries(username)
    items = pending_service.list_pending(entries, username=username)
    return {"items": [i.model_dump(mode="json") for i in items]}


@router.put("/{entry_id}")
async def entry_update(
    entry_id: str,
    body: GameEntryUpdate,
    user: User = Depends(get_current_user),
):
    e = await entries_service.update_entry(parse_object_id(entry_id, "Game entry"), body, user)
    return entry_to_dict(e)


@router.delete("/{entry_id}")
async def entry_delete(entry_id: str, user: User = Depends(get_current_user)):
    await entries_service.delete_entry(parse_object_id(entry_id, "Game entry"), user)
    return {"ok": True}


@router.patch("/{entry_id}/clear-pending")
async def entry_clear_pending(entry_id: str, user: User = Depends(get_current_user)):
    e = await pending_service.clear_pending(parse_object_id(entry_id, "Game entry"), actor=user)
    return entry_to_dict(e)


@router.get("/{entry_id}/history")
async def entry_history(entry_id: str, user: User = Depends(get_current_user)):
    items = await entries_service.list_history(parse_object_id(entry_id, "Game entry"))
    return {
        "history": [
            {
                "id": str(h.id),
                "entry_id": str(h.entry_id),
                "action": h.action,
                "username": h.username,
                "snapshot": h.snapshot,
                "created_at": h.created_at.isoformat(),
            }
            for h in items
        ]
    }
