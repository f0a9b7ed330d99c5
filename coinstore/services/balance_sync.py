"""Keep Game.total_coins in step with the entries that reference the game.

Adjustments are best-effort: the entry write that triggers them has already
been committed and must stay committed, so failures are logged and swallowed
here. reconcile_all() rebuilds every cached balance from entry history and is
what repairs any drift left behind.
"""

from datetime import datetime
from typing import NamedTuple

from pydantic import BaseModel

from coinstore.core.logging import get_logger
from coinstore.models.game import Game
from coinstore.models.game_entry import GameEntry
from coinstore.services.ledger import GameTotals, entry_coin_effect, net_balance, summarize_by_game

log = get_logger(__name__)


class EntryEffect(NamedTuple):
    """Snapshot of what an entry contributes to its game, taken before a mutation."""
    game_name: str
    effect: float


def snapshot(entry: GameEntry) -> EntryEffect:
    return EntryEffect(entry.game_name, entry_coin_effect(entry))


async def adjust_game_coins(game_name: str, delta: float) -> bool:
    """Atomically add ``delta`` to the named game's cached balance.

    Returns False when no game has that name (renamed or deleted games are
    expected; the entry keeps its free-text name).
    """
    if not delta:
        return True
    result = await Game.get_motor_collection().update_one(
        {"name": game_name},
        {"$inc": {"total_coins": delta}, "$set": {"updated_at": datetime.utcnow()}},
    )
    if result.matched_count == 0:
        log.warning("balance_sync_game_missing", game_name=game_name, delta=delta)
        return False
    log.info("balance_sync_applied", game_name=game_name, delta=delta)
    return True


async def _safe_adjust(game_name: str, delta: float) -> None:
    try:
        await adjust_game_coins(game_name, delta)
    except Exception:
        log.exception("balance_sync_failed", game_name=game_name, delta=delta)


async def on_entry_created(entry: GameEntry) -> None:
    await _safe_adjust(entry.game_name, entry_coin_effect(entry))


async def on_entry_updated(before: EntryEffect, entry: GameEntry) -> None:
    after = snapshot(entry)
    if before.game_name == after.game_name:
        await _safe_adjust(after.game_name, after.effect - before.effect)
        return
    await _safe_adjust(before.game_name, -before.effect)
    await _safe_adjust(after.game_name, after.effect)


async def on_entry_deleted(entry: GameEntry) -> None:
    await _safe_adjust(entry.game_name, -entry_coin_effect(entry))


class DriftItem(BaseModel):
    game_name: str
    cached: float
    recomputed: float
    drift: float


async def recompute_game_balance(game: Game) -> DriftItem:
    """Overwrite a game's cached balance with the fold over its entry history."""
    entries = await GameEntry.find(GameEntry.game_name == game.name).to_list()
    totals = summarize_by_game(entries).get(game.name, GameTotals())
    recomputed = net_balance(totals)
    cached = float(game.total_coins or 0)
    drift = recomputed - cached
    if drift:
        await Game.get_motor_collection().update_one(
            {"_id": game.id},
            {"$set": {"total_coins": recomputed, "updated_at": datetime.utcnow()}},
        )
        log.warning("reconcile_drift", game_name=game.name, cached=cached, recomputed=recomputed)
    return DriftItem(game_name=game.name, cached=cached, recomputed=recomputed, drift=drift)


async def reconcile_all() -> list[DriftItem]:
    """Recompute every game's cached balance; returns only games that drifted."""
    drifted = []
    for game in await Game.find_all().sort(+Game.name).to_list():
        item = await recompute_game_balance(game)
        if item.drift:
            drifted.append(item)
    log.info("reconcile_done", drifted=len(drifted))
    return drifted
