"""Games CRUD and the enriched games table."""

import re
from datetime import datetime
from typing import Any

from beanie import PydanticObjectId

from coinstore.core.exceptions import ConflictError, NotFoundError
from coinstore.core.logging import get_logger
from coinstore.models.game import Game
from coinstore.models.game_entry import GameEntry
from coinstore.services.ledger import GameTotals, available_balance, net_balance, summarize_by_game

log = get_logger(__name__)


async def search_names(q: str) -> list[str]:
    """Game names containing ``q`` (case-insensitive), sorted."""
    pattern = re.escape(q.strip())
    games = await Game.find({"name": {"$regex": pattern, "$options": "i"}}).to_list()
    return sorted({g.name for g in games if g.name and g.name.strip()}, key=str.lower)


async def list_games_with_totals() -> list[dict[str, Any]]:
    """Every game with its per-type totals and both balance views.

    ``net_coins`` is the history-only balance (what ``total_coins`` caches);
    ``available_coins`` starts from the recharge and clamps at zero.
    """
    games = await Game.find_all().sort(+Game.created_at).to_list()
    names = [g.name for g in games]
    entries = await GameEntry.find({"game_name": {"$in": names}}).to_list() if names else []
    by_game = summarize_by_game(entries)
    out = []
    for g in games:
        t = by_game.get(g.name, GameTotals())
        out.append(
            {
                "id": str(g.id),
                "name": g.name,
                "coins_recharged": g.coins_recharged,
                "last_recharge_date": g.last_recharge_date,
                "freeplay": t.total_freeplay,
                "deposit": t.total_deposit,
                "redeem": t.total_redeem,
                "net_coins": net_balance(t),
                "available_coins": available_balance(t, g.coins_recharged),
                "total_coins": g.total_coins,
                "created_at": g.created_at.isoformat(),
                "updated_at": g.updated_at.isoformat(),
            }
        )
    return out


async def create_game(name: str, coins_recharged: float = 0, last_recharge_date: str | None = None) -> Game:
    name = name.strip()
    if await Game.find_one(Game.name == name):
        raise ConflictError("Game with this name already exists")
    # seed the cache from any entries recorded before the game existed
    entries = await GameEntry.find(GameEntry.game_name == name).to_list()
    t = summarize_by_game(entries).get(name, GameTotals())
    game = Game(
        name=name,
        coins_recharged=coins_recharged,
        last_recharge_date=last_recharge_date,
        total_coins=net_balance(t),
    )
    await game.insert()
    log.info("game_created", game_id=str(game.id), name=name)
    return game


async def get_game(game_id: PydanticObjectId) -> Game:
    game = await Game.get(game_id)
    if not game:
        raise NotFoundError("Game not found")
    return game


async def update_game(
    game_id: PydanticObjectId,
    coins_recharged: float | None = None,
    last_recharge_date: str | None = None,
    clear_recharge_date: bool = False,
) -> Game:
    game = await get_game(game_id)
    if coins_recharged is not None:
        game.coins_recharged = coins_recharged
    if last_recharge_date is not None or clear_recharge_date:
        game.last_recharge_date = last_recharge_date
    game.updated_at = datetime.utcnow()
    # total_coins is owned by balance_sync; a full save would overwrite concurrent $inc updates
    await Game.get_motor_collection().update_one(
        {"_id": game.id},
        {
            "$set": {
                "coins_recharged": game.coins_recharged,
                "last_recharge_date": game.last_recharge_date,
                "updated_at": game.updated_at,
            }
        },
    )
    return game


async def delete_game(game_id: PydanticObjectId) -> Game:
    game = await get_game(game_id)
    await game.delete()
    log.info("game_deleted", game_id=str(game_id), name=game.name)
    return game


async def reset_recharge(game_id: PydanticObjectId) -> Game:
    game = await get_game(game_id)
    game.coins_recharged = 0
    game.last_recharge_date = None
    game.updated_at = datetime.utcnow()
    await Game.get_motor_collection().update_one(
        {"_id": game.id},
        {"$set": {"coins_recharged": 0, "last_recharge_date": None, "updated_at": game.updated_at}},
    )
    return game
