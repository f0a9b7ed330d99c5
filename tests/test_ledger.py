"""Pure ledger folds: no database needed."""

from conftest import record

from coinstore.services import ledger
from coinstore.services.ledger import EntryFilter, GameTotals


def test_coin_effect_signs():
    assert ledger.coin_effect("deposit", 110) == -110
    assert ledger.coin_effect("freeplay", 20) == -20
    assert ledger.coin_effect("redeem", 40) == 40
    assert ledger.coin_effect("redeem", 0) == 0
    assert ledger.coin_effect("deposit", -5) == 0
    assert ledger.coin_effect("deposit", None) == 0
    assert ledger.coin_effect("bogus", 10) == 0


def test_entry_amount_falls_back_to_legacy_amount():
    assert ledger.entry_amount(record(amount_final=12.5, amount=99)) == 12.5
    assert ledger.entry_amount(record(amount_final=None, amount=7)) == 7
    assert ledger.entry_amount(record(amount_final=None, amount=None)) == 0


def test_summarize_without_redeems_is_negative_outflow():
    rows = [
        record(type="deposit", amount_final=110),
        record(type="freeplay", method=None, amount_final=15),
        record(type="deposit", amount_final=55),
    ]
    t = ledger.summarize(rows)
    assert t.total_redeem == 0
    assert t.total_coin == -(t.total_freeplay + t.total_deposit)
    assert t.total_coin == -180


def test_summarize_mixed():
    rows = [
        record(type="deposit", amount_final=100),
        record(type="redeem", amount_final=40),
        record(type="freeplay", method=None, amount_final=10),
    ]
    t = ledger.summarize(rows)
    assert (t.total_deposit, t.total_redeem, t.total_freeplay) == (100, 40, 10)
    assert t.total_coin == -70


def test_summarize_empty():
    t = ledger.summarize([])
    assert t.total_coin == 0
    assert t.total_deposit == 0


def test_year_month_window_matches_prefix_only():
    rows = [
        record(date="2024-08-01", amount_final=10),
        record(date="2024-08-31", amount_final=20),
        record(date="2024-09-01", amount_final=40),
        record(date="2023-08-15", amount_final=80),
        record(date=None, amount_final=160),
    ]
    f = EntryFilter(date_prefix="2024-08")
    t = ledger.summarize(rows, f)
    assert t.total_deposit == 30
    assert f.to_query() == {"date": {"$regex": "^2024-08"}}


def test_filter_query_combines_fields():
    f = EntryFilter(username="staff1", type="redeem", date_from="2024-01-01", date_to="2024-01-31", is_pending=True)
    assert f.to_query() == {
        "username": "staff1",
        "type": "redeem",
        "is_pending": True,
        "date": {"$gte": "2024-01-01", "$lte": "2024-01-31"},
    }


def test_filter_matches_username_and_pending():
    f = EntryFilter(username="staff2", is_pending=True)
    assert f.matches(record(username="staff2", is_pending=True))
    assert not f.matches(record(username="staff2", is_pending=False))
    assert not f.matches(record(username="staff1", is_pending=True))


def test_summarize_by_game_alphabetical():
    rows = [
        record(game_name="Zeta", type="deposit", amount_final=10),
        record(game_name="Alpha", type="redeem", amount_final=5),
        record(game_name="Alpha", type="freeplay", method=None, amount_final=2),
        record(game_name="", type="deposit", amount_final=999),
    ]
    by_game = ledger.summarize_by_game(rows)
    assert list(by_game) == ["Alpha", "Zeta"]
    assert by_game["Alpha"].total_coins == 3
    assert by_game["Zeta"].total_coins == -10


def test_summarize_by_user_uses_created_by_when_username_missing():
    rows = [
        record(username="", created_by="staff9", type="deposit", amount_final=10),
        record(username="staff1", type="redeem", amount_final=4),
    ]
    by_user = ledger.summarize_by_user(rows)
    assert by_user["staff9"].total_deposit == 10
    assert by_user["staff1"].total_redeem == 4


def test_revenue_by_method_excludes_bonus():
    rows = [
        record(type="deposit", method="cashapp", amount_base=100, amount_final=110),
        record(type="deposit", method="venmo", amount_base=50, amount_final=55),
        record(type="redeem", method="cashapp", amount_base=30, amount_final=30),
    ]
    assert ledger.revenue_by_method(rows) == {"cashapp": 100, "paypal": 0, "chime": 0, "venmo": 50}


def test_balance_formulas_differ():
    t = GameTotals(total_deposit=300, total_freeplay=50, total_redeem=100)
    assert ledger.net_balance(t) == -250
    # 200 + 100 - 300 = 0, then freeplay cannot push below zero
    assert ledger.available_balance(t, 200) == 0
    assert ledger.available_balance(t, 1000) == 750
