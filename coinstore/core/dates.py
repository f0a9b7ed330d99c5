"""Reporting-date helpers. Entry and payment dates are stored as YYYY-MM-DD strings."""

import re
from datetime import date, datetime

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}")


def today_str() -> str:
    return datetime.utcnow().strftime("%Y-%m-%d")


def normalize_date_string(value: str | date | datetime | None) -> str | None:
    """Normalize a date input to "YYYY-MM-DD"; None stays None.

    Strings that already start with a calendar day are sliced, anything else
    must parse as an ISO datetime. Raises ValueError when it does not.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    s = str(value).strip()
    if not s:
        return None
    if _ISO_DAY.match(s):
        datetime.strptime(s[:10], "%Y-%m-%d")
        return s[:10]
    return datetime.fromisoformat(s.replace("Z", "+00:00")).strftime("%Y-%m-%d")


def date_prefix(year: int | None, month: int | None = None, day: int | None = None) -> str | None:
    """Build the prefix a reporting window matches: "YYYY", "YYYY-MM" or "YYYY-MM-DD"."""
    if year is None:
        return None
    prefix = f"{year:04d}"
    if month is None:
        return prefix
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    prefix += f"-{month:02d}"
    if day is None:
        return prefix
    date(year, month, day)  # validates the calendar day
    return prefix + f"-{day:02d}"
