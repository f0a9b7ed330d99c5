"""Pending payouts owed to players.

Two distinct amounts can be owed, and they are never merged:

- ``remaining_pay`` on a redemption: cashout not yet paid (our-tag flow).
- ``reduction`` on a player-tag deposit: deposited money not yet cashed back.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from beanie import PydanticObjectId
from pydantic import BaseModel

from coinstore.core.exceptions import NotFoundError
from coinstore.core.logging import get_logger
from coinstore.models.game_entry import GameEntry
from coinstore.models.user import User

log = get_logger(__name__)


class PendingKind(str, Enum):
    REMAINING_PAY = "remaining_pay"
    REDUCTION = "reduction"


class PendingItem(BaseModel):
    id: str
    type: str
    pending_kind: PendingKind
    label: str
    game_name: str
    method: str | None
    total_cashout: float
    total_paid: float
    remaining_pay: float
    reduction: float
    pending_amount: float
    created_at: datetime


class PendingTotals(BaseModel):
    total_pending_remaining_pay: float = 0
    total_reduction: float = 0
    total_extra_money: float = 0


def pending_kind(entry: Any) -> PendingKind | None:
    if entry.type == "redeem":
        return PendingKind.REMAINING_PAY
    if entry.type == "deposit" and entry.mode == "player_tag":
        return PendingKind.REDUCTION
    return None


def pending_amount(entry: Any) -> float:
    kind = pending_kind(entry)
    if kind is PendingKind.REMAINING_PAY:
        return float(entry.remaining_pay or 0)
    if kind is PendingKind.REDUCTION:
        return float(entry.reduction or 0)
    return 0.0


def player_label(entry: Any) -> str:
    return (entry.player_name or "").strip() or (entry.player_tag or "").strip() or "Unknown"


def list_pending(records: Iterable[Any], username: str | None = None) -> list[PendingItem]:
    """Pending entries with something still owed, newest first."""
    items = []
    for e in records:
        if not e.is_pending:
            continue
        if username and e.username != username:
            continue
        amount = pending_amount(e)
        if amount <= 0:
            continue
        items.append(
            PendingItem(
                id=str(e.id),
                type=e.type,
                pending_kind=pending_kind(e),
                label=player_label(e),
                game_name=e.game_name,
                method=e.method,
                total_cashout=e.total_cashout,
                total_paid=e.total_paid,
                remaining_pay=e.remaining_pay,
                reduction=e.reduction,
                pending_amount=amount,
                created_at=e.created_at,
            )
        )
    items.sort(key=lambda i: i.created_at, reverse=True)
    return items


def pending_totals(records: Iterable[Any]) -> PendingTotals:
    out = PendingTotals()
    for e in records:
        if e.is_pending and e.type == "redeem":
            out.total_pending_remaining_pay += float(e.remaining_pay or 0)
        out.total_reduction += float(e.reduction or 0)
        out.total_extra_money += float(e.extra_money or 0)
    return out


async def fetch_pending_entries(username: str | None = None) -> list[GameEntry]:
    query: dict[str, Any] = {"is_pending": True}
    if username:
        query["username"] = username
    return await GameEntry.find(query).sort(-GameEntry.created_at).to_list()


async def clear_pending(entry_id: PydanticObjectId, actor: User | None = None) -> GameEntry:
    """Mark an entry as paid out. Clearing an already-cleared entry is a no-op.

    Player-tag deposits also zero their reduction. Coin amounts are untouched,
    so the game balance does not move.
    Staff may only clear their own entries; ``actor=None`` is a system call.
    """
    from coinstore.services.game_entries import check_owner, record_history

    entry = await GameEntry.get(entry_id)
    if not entry:
        raise NotFoundError("Game entry not found")
    if actor is not None:
        check_owner(entry, actor)
    if not entry.is_pending and not (pending_kind(entry) is PendingKind.REDUCTION and entry.reduction):
        return entry
    entry.is_pending = False
    if pending_kind(entry) is PendingKind.REDUCTION:
        entry.reduction = 0
    entry.updated_at = datetime.utcnow()
    await entry.save()
    username = actor.username if actor else None
    log.info("pending_cleared", entry_id=str(entry.id), actor=username)
    await record_history(entry, "update", username)
    return entry
