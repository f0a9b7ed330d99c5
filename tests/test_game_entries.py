"""Entry derivation and validation, service level."""

import pytest
from pydantic import TypeAdapter, ValidationError

from coinstore.schemas.game_entries import GameEntryCreate, GameEntryUpdate

pytestmark = pytest.mark.asyncio

create_adapter = TypeAdapter(GameEntryCreate)


def _staff(username: str = "staff1", role: str = "user"):
    from coinstore.models.user import User
    return User(email=f"{username}@example.com", username=username, password_hash="x", role=role, status="active")


async def test_create_payload_requires_method_for_money_types():
    with pytest.raises(ValidationError):
        create_adapter.validate_python({"type": "deposit", "game_name": "G", "amount_base": 10})
    with pytest.raises(ValidationError):
        create_adapter.validate_python({"type": "redeem", "game_name": "G", "amount_base": 10, "method": "zelle"})
    body = create_adapter.validate_python({"type": "freeplay", "game_name": " G ", "amount_base": 5})
    assert body.game_name == "G"
    assert not hasattr(body, "method")


async def test_create_payload_normalizes_date():
    body = create_adapter.validate_python(
        {"type": "freeplay", "game_name": "G", "amount_base": 5, "date": "2024-08-03T10:11:12Z"}
    )
    assert body.date == "2024-08-03"
    with pytest.raises(ValidationError):
        create_adapter.validate_python({"type": "freeplay", "game_name": "G", "amount_base": 5, "date": "nope"})


async def test_default_bonus_rate_applied(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python({"type": "deposit", "game_name": "G", "amount_base": 200, "method": "chime"})
    e = await game_entries.create_entry(body, _staff())
    assert e.bonus_rate == 10
    assert e.bonus_amount == 20
    assert e.amount_final == 220
    assert e.amount == 220
    assert e.username == "staff1"
    assert e.date


async def test_redeem_remaining_pay_never_negative(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python(
        {"type": "redeem", "game_name": "G", "amount_base": 80, "method": "paypal", "total_cashout": 80, "total_paid": 30}
    )
    e = await game_entries.create_entry(body, _staff())
    assert e.remaining_pay == 50
    assert e.is_pending is True

    e = await game_entries.update_entry(e.id, GameEntryUpdate(total_paid=120), _staff())
    assert e.remaining_pay == 0


async def test_player_tag_deposit_tracks_reduction_and_extra(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python(
        {
            "type": "deposit",
            "game_name": "G",
            "amount_base": 100,
            "method": "cashapp",
            "mode": "player_tag",
            "total_cashout": 40,
        }
    )
    e = await game_entries.create_entry(body, _staff())
    assert (e.reduction, e.extra_money, e.remaining_pay) == (60, 0, 0)
    assert e.is_pending is True

    e = await game_entries.update_entry(e.id, GameEntryUpdate(total_cashout=130), _staff())
    assert (e.reduction, e.extra_money) == (0, 30)


async def test_switch_to_freeplay_clears_method(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python({"type": "deposit", "game_name": "G", "amount_base": 10, "method": "venmo"})
    e = await game_entries.create_entry(body, _staff())
    e = await game_entries.update_entry(e.id, GameEntryUpdate(type="freeplay"), _staff())
    assert e.method is None
    assert e.bonus_amount == 0
    assert e.amount_final == 10


async def test_non_admin_cannot_touch_other_entries(db):
    from coinstore.core.exceptions import ForbiddenError
    from coinstore.services import game_entries, pending

    body = create_adapter.validate_python({"type": "freeplay", "game_name": "G", "amount_base": 1})
    e = await game_entries.create_entry(body, _staff("staff1"))
    with pytest.raises(ForbiddenError):
        await pending.clear_pending(e.id, actor=_staff("staff2"))
    with pytest.raises(ForbiddenError):
        await game_entries.update_entry(e.id, GameEntryUpdate(amount_base=5), _staff("staff2"))
    with pytest.raises(ForbiddenError):
        await game_entries.delete_entry(e.id, _staff("staff2"))
    await game_entries.delete_entry(e.id, _staff("boss", role="admin"))


async def test_history_recorded_per_mutation(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python({"type": "freeplay", "game_name": "G", "amount_base": 1})
    actor = _staff()
    e = await game_entries.create_entry(body, actor)
    await game_entries.update_entry(e.id, GameEntryUpdate(amount_base=2), actor)
    await game_entries.delete_entry(e.id, actor)
    history = await game_entries.list_history(e.id)
    assert sorted(h.action for h in history) == ["create", "delete", "update"]


async def test_other_staff_cannot_clear_pending(db):
    from coinstore.core.exceptions import ForbiddenError
    from coinstore.models.game_entry import GameEntry
    from coinstore.services import game_entries, pending

    body = create_adapter.validate_python(
        {"type": "redeem", "game_name": "G", "amount_base": 50, "method": "cashapp", "total_cashout": 50}
    )
    e = await game_entries.create_entry(body, _staff("staff1"))
    with pytest.raises(ForbiddenError):
        await pending.clear_pending(e.id, actor=_staff("staff2"))
    assert (await GameEntry.get(e.id)).is_pending is True

    cleared = await pending.clear_pending(e.id, actor=_staff("boss", role="admin"))
    assert cleared.is_pending is False


async def test_edit_that_creates_a_payout_marks_entry_pending(db):
    from coinstore.services import game_entries, pending

    body = create_adapter.validate_python({"type": "redeem", "game_name": "G", "amount_base": 50, "method": "cashapp"})
    e = await game_entries.create_entry(body, _staff())
    assert e.is_pending is False

    e = await game_entries.update_entry(e.id, GameEntryUpdate(total_cashout=50), _staff())
    assert e.remaining_pay == 50
    assert e.is_pending is True
    items = pending.list_pending(await pending.fetch_pending_entries())
    assert [i.id for i in items] == [str(e.id)]


async def test_explicit_is_pending_wins_on_edit(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python({"type": "redeem", "game_name": "G", "amount_base": 50, "method": "cashapp"})
    e = await game_entries.create_entry(body, _staff())
    e = await game_entries.update_entry(e.id, GameEntryUpdate(total_cashout=50, is_pending=False), _staff())
    assert e.remaining_pay == 50
    assert e.is_pending is False


async def test_leaving_deposit_resets_player_tag_mode(db):
    from coinstore.services import game_entries

    body = create_adapter.validate_python(
        {
            "type": "deposit",
            "game_name": "G",
            "amount_base": 100,
            "method": "cashapp",
            "mode": "player_tag",
            "total_cashout": 40,
        }
    )
    e = await game_entries.create_entry(body, _staff())
    redeemed = await game_entries.update_entry(e.id, GameEntryUpdate(type="redeem"), _staff())
    assert redeemed.mode == "our_tag"
    assert redeemed.reduction == 0
    assert redeemed.method == "cashapp"

    e = await game_entries.create_entry(body, _staff())
    freeplay = await game_entries.update_entry(e.id, GameEntryUpdate(type="freeplay"), _staff())
    assert freeplay.mode == "our_tag"
    assert freeplay.method is None
