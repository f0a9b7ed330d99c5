"""Game entries: create/update/delete with derived amounts, history and balance sync."""

from datetime import datetime
from typing import Any

from beanie import PydanticObjectId

from coinstore.core.config import get_settings
from coinstore.core.dates import today_str
from coinstore.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from coinstore.core.logging import get_logger
from coinstore.models.game_entry import (
    ENTRY_TYPES,
    METHOD_REQUIRED_TYPES,
    PAYMENT_METHODS,
    GameEntry,
    GameEntryHistory,
)
from coinstore.models.user import User
from coinstore.schemas.game_entries import (
    DepositEntryCreate,
    GameEntryCreate,
    GameEntryUpdate,
    RedeemEntryCreate,
)
from coinstore.services import balance_sync, ledger, pending

log = get_logger(__name__)


def derive_amounts(entry: GameEntry) -> None:
    """Recompute every derived amount from the entry's inputs, in place."""
    base = float(entry.amount_base or 0)
    if entry.type == "deposit":
        entry.bonus_amount = round(base * float(entry.bonus_rate or 0) / 100, 2)
        entry.amount_final = round(base + entry.bonus_amount, 2)
    else:
        entry.bonus_rate = 0
        entry.bonus_amount = 0
        entry.amount_final = base
    entry.amount = entry.amount_final

    if entry.type == "redeem":
        entry.remaining_pay = max(entry.total_cashout - entry.total_paid, 0)
        entry.reduction = 0
        entry.extra_money = 0
    elif entry.type == "deposit" and entry.mode == "player_tag":
        entry.reduction = max(base - entry.total_cashout, 0)
        entry.extra_money = max(entry.total_cashout - base, 0)
        entry.remaining_pay = 0
    else:
        entry.remaining_pay = 0
        entry.reduction = 0
        entry.extra_money = 0


def validate_entry(entry: GameEntry) -> None:
    if entry.type not in ENTRY_TYPES:
        raise BadRequestError("Invalid type")
    if entry.type in METHOD_REQUIRED_TYPES:
        if entry.method not in PAYMENT_METHODS:
            raise BadRequestError("Invalid or missing method")
    else:
        entry.method = None
    # player-tag flow only exists for deposits
    if entry.type != "deposit":
        entry.mode = "our_tag"


async def record_history(entry: GameEntry, action: str, actor: str | None = None) -> None:
    """Snapshot the entry. Never raises: history must not block the entry write."""
    try:
        await GameEntryHistory(
            entry_id=entry.id,
            action=action,
            username=actor or entry.username,
            snapshot=entry.model_dump(mode="json"),
        ).insert()
    except Exception:
        log.exception("entry_history_failed", entry_id=str(entry.id), action=action)


def check_owner(entry: GameEntry, actor: User) -> None:
    if actor.role != "admin" and entry.username != actor.username:
        raise ForbiddenError("Entry belongs to another user")


async def create_entry(body: GameEntryCreate, actor: User) -> GameEntry:
    username = actor.username
    if body.username and body.username.strip():
        if actor.role != "admin" and body.username.strip() != actor.username:
            raise ForbiddenError("Cannot create entries for another user")
        username = body.username.strip()

    entry = GameEntry(
        username=username,
        created_by=actor.username,
        type=body.type,
        game_name=body.game_name,
        player_name=body.player_name,
        player_tag=body.player_tag,
        amount_base=body.amount_base,
        date=body.date or today_str(),
        note=body.note,
    )
    is_pending = None
    if isinstance(body, DepositEntryCreate):
        entry.method = body.method
        entry.mode = body.mode
        rate = body.bonus_rate
        entry.bonus_rate = get_settings().default_bonus_rate if rate is None else rate
        if body.mode == "player_tag":
            entry.total_cashout = body.total_cashout
        is_pending = body.is_pending
    elif isinstance(body, RedeemEntryCreate):
        entry.method = body.method
        entry.total_cashout = body.total_cashout
        entry.total_paid = body.total_paid
        is_pending = body.is_pending

    validate_entry(entry)
    derive_amounts(entry)
    entry.is_pending = pending.pending_amount(entry) > 0 if is_pending is None else is_pending

    await entry.insert()
    log.info(
        "game_entry_created",
        entry_id=str(entry.id),
        type=entry.type,
        game_name=entry.game_name,
        amount_final=entry.amount_final,
    )
    await record_history(entry, "create", actor.username)
    await balance_sync.on_entry_created(entry)
    return entry


async def get_entry(entry_id: PydanticObjectId) -> GameEntry:
    entry = await GameEntry.get(entry_id)
    if not entry:
        raise NotFoundError("Game entry not found")
    return entry


async def update_entry(entry_id: PydanticObjectId, body: GameEntryUpdate, actor: User) -> GameEntry:
    entry = await get_entry(entry_id)
    check_owner(entry, actor)
    before = balance_sync.snapshot(entry)
    owed_before = pending.pending_amount(entry)

    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if "username" in changes and actor.role != "admin":
        raise ForbiddenError("Only admins can reassign entries")
    switching_to_deposit = changes.get("type") == "deposit" and entry.type != "deposit"
    for field, value in changes.items():
        setattr(entry, field, value.strip() if isinstance(value, str) and field != "date" else value)
    if switching_to_deposit and "bonus_rate" not in changes:
        entry.bonus_rate = get_settings().default_bonus_rate

    validate_entry(entry)
    derive_amounts(entry)
    if "is_pending" not in changes and owed_before <= 0 < pending.pending_amount(entry):
        entry.is_pending = True
    entry.updated_at = datetime.utcnow()
    await entry.save()
    log.info("game_entry_updated", entry_id=str(entry.id), fields=sorted(changes))
    await record_history(entry, "update", actor.username)
    await balance_sync.on_entry_updated(before, entry)
    return entry


async def delete_entry(entry_id: PydanticObjectId, actor: User) -> None:
    entry = await get_entry(entry_id)
    check_owner(entry, actor)
    await record_history(entry, "delete", actor.username)
    await entry.delete()
    log.info("game_entry_deleted", entry_id=str(entry_id), game_name=entry.game_name)
    await balance_sync.on_entry_deleted(entry)


async def list_entries(entry_filter: ledger.EntryFilter, limit: int = 100, offset: int = 0) -> list[GameEntry]:
    return (
        await GameEntry.find(entry_filter.to_query())
        .sort(-GameEntry.created_at)
        .skip(offset)
        .limit(limit)
        .to_list()
    )


async def fetch_entries(entry_filter: ledger.EntryFilter | None = None) -> list[GameEntry]:
    query = entry_filter.to_query() if entry_filter else {}
    return await GameEntry.find(query).to_list()


async def list_history(entry_id: PydanticObjectId) -> list[GameEntryHistory]:
    return (
        await GameEntryHistory.find(GameEntryHistory.entry_id == entry_id)
        .sort(-GameEntryHistory.created_at)
        .to_list()
    )


async def summary(entry_filter: ledger.EntryFilter) -> dict[str, Any]:
    entries = await fetch_entries(entry_filter)
    totals = ledger.summarize(entries)
    out: dict[str, Any] = totals.model_dump()
    out.update(pending.pending_totals(entries).model_dump())
    out["revenue_by_method"] = ledger.revenue_by_method(entries)
    out["count"] = len(entries)
    return out
