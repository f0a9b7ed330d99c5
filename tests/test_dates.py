from datetime import date, datetime

import pytest

from coinstore.core.dates import date_prefix, normalize_date_string


def test_normalize_date_string():
    assert normalize_date_string(None) is None
    assert normalize_date_string("  ") is None
    assert normalize_date_string("2024-08-03") == "2024-08-03"
    assert normalize_date_string("2024-08-03T23:59:00.000Z") == "2024-08-03"
    assert normalize_date_string(date(2024, 1, 2)) == "2024-01-02"
    assert normalize_date_string(datetime(2024, 1, 2, 5, 6)) == "2024-01-02"


@pytest.mark.parametrize("bad", ["yesterday", "2024-13-01", "2024-02-30"])
def test_normalize_date_string_rejects(bad):
    with pytest.raises(ValueError):
        normalize_date_string(bad)


def test_date_prefix():
    assert date_prefix(None) is None
    assert date_prefix(2024) == "2024"
    assert date_prefix(2024, 8) == "2024-08"
    assert date_prefix(2024, 8, 5) == "2024-08-05"
    with pytest.raises(ValueError):
        date_prefix(2024, 2, 30)
