"""Request schemas for game entries.

Create payloads are a union discriminated by ``type`` because the required
fields differ per entry type: deposits and redemptions must name a payment
method, freeplay grants never carry one.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from coinstore.core.dates import normalize_date_string

EntryType = Literal["freeplay", "deposit", "redeem"]
Method = Literal["cashapp", "paypal", "chime", "venmo"]
Mode = Literal["our_tag", "player_tag"]


def _clean_date(v):
    try:
        return normalize_date_string(v)
    except ValueError as e:
        raise ValueError(f"invalid date: {v!r}") from e


class _EntryCreateBase(BaseModel):
    username: str | None = None  # defaults to the authenticated staff member
    game_name: str
    player_name: str = ""
    player_tag: str = ""
    amount_base: float = Field(ge=0)
    date: str | None = None
    note: str = ""

    @field_validator("game_name")
    @classmethod
    def _game_name_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("game_name is required")
        return v

    @field_validator("player_name", "player_tag", "note")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        return _clean_date(v)


class FreeplayEntryCreate(_EntryCreateBase):
    type: Literal["freeplay"]


class DepositEntryCreate(_EntryCreateBase):
    type: Literal["deposit"]
    method: Method
    mode: Mode = "our_tag"
    bonus_rate: float | None = Field(default=None, ge=0)  # percent; configured default when omitted
    # player-tag flow: money cashed out back to the player against this deposit
    total_cashout: float = Field(default=0, ge=0)
    is_pending: bool | None = None


class RedeemEntryCreate(_EntryCreateBase):
    type: Literal["redeem"]
    method: Method
    total_cashout: float = Field(default=0, ge=0)
    total_paid: float = Field(default=0, ge=0)
    is_pending: bool | None = None


GameEntryCreate = Annotated[
    Union[FreeplayEntryCreate, DepositEntryCreate, RedeemEntryCreate],
    Field(discriminator="type"),
]


class GameEntryUpdate(BaseModel):
    """Partial update. Derived amounts are recomputed after merging."""

    username: str | None = None
    type: EntryType | None = None
    method: Method | None = None
    mode: Mode | None = None
    player_name: str | None = None
    player_tag: str | None = None
    game_name: str | None = None
    amount_base: float | None = Field(default=None, ge=0)
    bonus_rate: float | None = Field(default=None, ge=0)
    total_paid: float | None = Field(default=None, ge=0)
    total_cashout: float | None = Field(default=None, ge=0)
    is_pending: bool | None = None
    date: str | None = None
    note: str | None = None

    @field_validator("game_name")
    @classmethod
    def _game_name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("game_name cannot be empty")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        return _clean_date(v)
