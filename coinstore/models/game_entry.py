from datetime import datetime
from typing import Any

from beanie import Document, PydanticObjectId
from pydantic import Field

ENTRY_TYPES = ("freeplay", "deposit", "redeem")
PAYMENT_METHODS = ("cashapp", "paypal", "chime", "venmo")
# methods are mandatory for money-moving entries; freeplay never carries one
METHOD_REQUIRED_TYPES = ("deposit", "redeem")
ENTRY_MODES = ("our_tag", "player_tag")


class GameEntry(Document):
    """One coin movement: a deposit, a freeplay grant or a redemption.

    ``type`` and ``method`` are plain strings on the stored document so that
    legacy rows with values outside the current enums still load; new rows are
    validated by the request schemas before they get here.
    """

    username: str
    created_by: str
    type: str  # freeplay | deposit | redeem
    method: str | None = None  # cashapp | paypal | chime | venmo
    mode: str = "our_tag"  # our_tag | player_tag

    player_name: str = ""
    player_tag: str = ""
    game_name: str

    amount_base: float = 0
    amount: float | None = None  # legacy display amount, mirrors amount_final
    bonus_rate: float = 0
    bonus_amount: float = 0
    amount_final: float | None = None

    # redeem payout tracking
    total_paid: float = 0
    total_cashout: float = 0
    remaining_pay: float = 0
    # player-tag deposit flow
    reduction: float = 0
    extra_money: float = 0

    is_pending: bool = False
    date: str | None = None  # YYYY-MM-DD, reporting date
    note: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "game_entries"
        indexes = [
            [("username", 1), ("created_at", -1)],
            [("game_name", 1)],
            [("date", 1)],
            [("is_pending", 1)],
        ]


class GameEntryHistory(Document):
    """Append-only snapshot of an entry taken on create/update/delete."""

    entry_id: PydanticObjectId
    action: str  # create | update | delete
    username: str | None = None
    snapshot: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "game_entry_history"
        indexes = [[("entry_id", 1), ("created_at", -1)]]
