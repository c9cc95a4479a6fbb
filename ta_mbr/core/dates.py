# ta_mbr/core/dates.py
"""
Date Normalizer

Tracker sheets are filled by hand, so one column can mix "27-Jan-2025",
"2025/01/27" and whatever the spreadsheet UI produced. `normalize_date()` maps all
of them onto a naive `datetime` (or None) and never raises.

Formats, in priority order
1) D-Mon-YYYY / D/Mon/YYYY   (Mon in Jan..Dec, exact case)
2) YYYY-MM-DD / YYYY/MM/DD   (1–2 digit month/day)
3) pandas' generic parser (errors="coerce"); NaT -> None

A pattern that matches textually but names an unknown month or an impossible
calendar day is rejected and the next one is tried.
"""

from __future__ import annotations

import math
import re
import warnings
from datetime import date, datetime
from typing import Optional

import pandas as pd

from ta_mbr.core.sheet_columns import value_to_text

_MONTHS = {
    "Jan": 1,
    "Feb": 2,
    "Mar": 3,
    "Apr": 4,
    "May": 5,
    "Jun": 6,
    "Jul": 7,
    "Aug": 8,
    "Sep": 9,
    "Oct": 10,
    "Nov": 11,
    "Dec": 12,
}

_DAY_MON_YEAR_RE = re.compile(r"^(\d{1,2})[-/]([A-Za-z]{3})[-/](\d{4})$")
_YEAR_MONTH_DAY_RE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")

_SECONDS_PER_DAY = 24 * 60 * 60


def _build(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def _parse_day_mon_year(text: str) -> Optional[datetime]:
    m = _DAY_MON_YEAR_RE.match(text)
    if not m:
        return None
    month = _MONTHS.get(m.group(2))
    if month is None:
        return None
    return _build(int(m.group(3)), month, int(m.group(1)))


def _parse_year_month_day(text: str) -> Optional[datetime]:
    m = _YEAR_MONTH_DAY_RE.match(text)
    if not m:
        return None
    return _build(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _parse_generic(text: str) -> Optional[datetime]:
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    return ts.to_pydatetime()


def normalize_date(value: object) -> Optional[datetime]:
    """
    Parse a free-text (or numeric) cell into a naive datetime; None when unparseable.
    """
    text = value_to_text(value)
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None

    for parser in (_parse_day_mon_year, _parse_year_month_day, _parse_generic):
        parsed = parser(text)
        if parsed is not None:
            return parsed
    return None


def elapsed_days(start: object, end: object) -> Optional[int]:
    """
    Absolute difference in days between two date cells, fractional days rounded up.
    None if either side does not normalize.
    """
    a = normalize_date(start)
    b = normalize_date(end)
    if a is None or b is None:
        return None
    seconds = abs((b - a).total_seconds())
    return int(math.ceil(seconds / _SECONDS_PER_DAY))


def to_calendar_date(value: object) -> Optional[date]:
    parsed = normalize_date(value)
    return parsed.date() if parsed is not None else None


def month_key(value: datetime | date) -> str:
    """Zero-padded YYYY-MM key."""
    return f"{value.year:04d}-{value.month:02d}"


__all__ = ["normalize_date", "elapsed_days", "to_calendar_date", "month_key"]
