"""Ledger aggregation: pure folds over game entries. No I/O.

A game's coin balance moves opposite to the money: deposits and freeplay hand
coins to players (balance goes down), redemptions take coins back (balance
goes up).
"""

from collections import defaultdict
from typing import Any, Iterable

from pydantic import BaseModel

from coinstore.models.game_entry import PAYMENT_METHODS


class LedgerTotals(BaseModel):
    total_deposit: float = 0
    total_freeplay: float = 0
    total_redeem: float = 0
    total_coin: float = 0


class GameTotals(BaseModel):
    total_freeplay: float = 0
    total_deposit: float = 0
    total_redeem: float = 0
    total_coins: float = 0


class EntryFilter(BaseModel):
    """Listing/summary filter. ``date_prefix`` is "YYYY", "YYYY-MM" or "YYYY-MM-DD"."""

    username: str | None = None
    game_name: str | None = None
    type: str | None = None
    method: str | None = None
    player_tag: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    date_prefix: str | None = None
    is_pending: bool | None = None

    def matches(self, entry: Any) -> bool:
        if self.username and entry.username != self.username:
            return False
        if self.game_name and entry.game_name != self.game_name:
            return False
        if self.type and entry.type != self.type:
            return False
        if self.method and entry.method != self.method:
            return False
        if self.player_tag and entry.player_tag != self.player_tag:
            return False
        if self.is_pending is not None and bool(entry.is_pending) != self.is_pending:
            return False
        if self.date_prefix or self.date_from or self.date_to:
            day = entry.date or ""
            if self.date_prefix and not day.startswith(self.date_prefix):
                return False
            if self.date_from and day < self.date_from:
                return False
            if self.date_to and day > self.date_to:
                return False
        return True

    def to_query(self) -> dict[str, Any]:
        """Same filter as a MongoDB query document."""
        q: dict[str, Any] = {}
        for field in ("username", "game_name", "type", "method", "player_tag"):
            value = getattr(self, field)
            if value:
                q[field] = value
        if self.is_pending is not None:
            q["is_pending"] = self.is_pending
        date_q: dict[str, Any] = {}
        if self.date_prefix:
            date_q["$regex"] = f"^{self.date_prefix}"
        if self.date_from:
            date_q["$gte"] = self.date_from
        if self.date_to:
            date_q["$lte"] = self.date_to
        if date_q:
            q["date"] = date_q
        return q


def entry_amount(entry: Any) -> float:
    """Amount that affects balances: amount_final, else amount, else 0."""
    for value in (entry.amount_final, entry.amount):
        if value is not None:
            return float(value)
    return 0.0


def coin_effect(entry_type: str, amount_final: float | None) -> float:
    """Signed contribution of one entry to its game's coin balance."""
    if not amount_final or amount_final <= 0:
        return 0.0
    if entry_type in ("deposit", "freeplay"):
        return -float(amount_final)
    if entry_type == "redeem":
        return float(amount_final)
    return 0.0


def entry_coin_effect(entry: Any) -> float:
    return coin_effect(entry.type, entry_amount(entry))


def _type_sums(records: Iterable[Any]) -> dict[str, float]:
    sums = {"freeplay": 0.0, "deposit": 0.0, "redeem": 0.0}
    for r in records:
        if r.type in sums:
            sums[r.type] += entry_amount(r)
    return sums


def summarize(records: Iterable[Any], entry_filter: EntryFilter | None = None) -> LedgerTotals:
    if entry_filter is not None:
        records = (r for r in records if entry_filter.matches(r))
    sums = _type_sums(records)
    return LedgerTotals(
        total_deposit=sums["deposit"],
        total_freeplay=sums["freeplay"],
        total_redeem=sums["redeem"],
        total_coin=sums["redeem"] - (sums["freeplay"] + sums["deposit"]),
    )


def _group(records: Iterable[Any], key) -> dict[str, list[Any]]:
    groups: dict[str, list[Any]] = defaultdict(list)
    for r in records:
        k = key(r)
        if k:
            groups[k].append(r)
    return groups


def summarize_by_game(records: Iterable[Any]) -> dict[str, GameTotals]:
    """Per-game totals keyed by game name, alphabetical."""
    out: dict[str, GameTotals] = {}
    groups = _group(records, lambda r: r.game_name)
    for name in sorted(groups):
        t = summarize(groups[name])
        out[name] = GameTotals(
            total_freeplay=t.total_freeplay,
            total_deposit=t.total_deposit,
            total_redeem=t.total_redeem,
            total_coins=t.total_coin,
        )
    return out


def summarize_by_user(records: Iterable[Any]) -> dict[str, LedgerTotals]:
    """Per-staff totals keyed by username (created_by when username is empty)."""
    groups = _group(records, lambda r: r.username or r.created_by)
    return {name: summarize(groups[name]) for name in sorted(groups)}


def revenue_by_method(records: Iterable[Any]) -> dict[str, float]:
    """Real money received per payment method: deposit amount_base, bonus excluded."""
    out = {m: 0.0 for m in PAYMENT_METHODS}
    for r in records:
        if r.type == "deposit" and r.method in out:
            out[r.method] += float(r.amount_base or 0)
    return out


def net_balance(totals: GameTotals) -> float:
    """Balance implied by entry history alone: redeem - deposit - freeplay, unclamped.

    This is the value Balance Sync maintains in Game.total_coins.
    """
    return totals.total_redeem - totals.total_deposit - totals.total_freeplay


def available_balance(totals: GameTotals, coins_recharged: float) -> float:
    """Coins left on a game's recharge: start from the recharge, add redeems,
    then take deposits and freeplay, never dropping below zero at either step.
    """
    coins = float(coins_recharged or 0) + totals.total_redeem
    coins = max(coins - totals.total_deposit, 0.0)
    return max(coins - totals.total_freeplay, 0.0)
