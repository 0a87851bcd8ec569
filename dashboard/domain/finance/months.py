"""Month keys ("YYYY-MM") and the free-text month labels found in the expense sheet"""

import calendar
import re
from datetime import date
from typing import Iterator, Optional

# Two-digit years below the pivot are 20xx, the rest 19xx
TWO_DIGIT_YEAR_PIVOT = 50

_MONTH_LOOKUP = {name.lower(): idx for idx, name in enumerate(calendar.month_name) if name}
_MONTH_LOOKUP.update({name.lower(): idx for idx, name in enumerate(calendar.month_abbr) if name})
_MONTH_LOOKUP["sept"] = 9

_ISO_MONTH = re.compile(r"^\d{4}-\d{2}$")
_NAME_YY = re.compile(r"^([A-Za-z]+)\.?\s+(\d{2})$")
_NAME_YYYY = re.compile(r"^([A-Za-z]+)\.?,?\s+(\d{4})$")
_NAME_ONLY = re.compile(r"^([A-Za-z]+)\.?$")


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def month_label(d: date) -> str:
    """e.g. "Jan 2026" """
    return f"{calendar.month_abbr[d.month]} {d.year}"


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_end(d: date) -> date:
    return date(d.year, d.month, days_in_month(d.year, d.month))


def add_months(d: date, months: int) -> date:
    """Shift to the first day of the month `months` away"""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def iter_months(start: date, end: date) -> Iterator[date]:
    """First day of every month touched by [start, end]"""
    cursor = start.replace(day=1)
    while cursor <= end:
        yield cursor
        cursor = add_months(cursor, 1)


def _month_number(name: str) -> Optional[int]:
    name = name.lower()
    if name in _MONTH_LOOKUP:
        return _MONTH_LOOKUP[name]
    if len(name) >= 3:
        for full, idx in _MONTH_LOOKUP.items():
            if len(full) > 3 and full.startswith(name):
                return idx
    return None


def expand_two_digit_year(yy: int) -> int:
    return 2000 + yy if yy < TWO_DIGIT_YEAR_PIVOT else 1900 + yy


def parse_sheet_month_to_key(raw: Optional[str], fallback_year: int) -> Optional[str]:
    """
    Convert a month label from the expense sheet into a "YYYY-MM" key.

    Supports:
        "2026-01", "Jan 26", "January 26", "Jan 2026", "January 2026",
        and a bare month name ("January"), which takes `fallback_year`.

    Returns None for empty or unrecognised labels.
    """
    s = (raw or "").strip()
    if not s:
        return None

    if _ISO_MONTH.match(s):
        month = int(s[5:7])
        return s if 1 <= month <= 12 else None

    m = _NAME_YY.match(s)
    if m:
        month = _month_number(m.group(1))
        if month:
            return f"{expand_two_digit_year(int(m.group(2))):04d}-{month:02d}"

    m = _NAME_YYYY.match(s)
    if m:
        month = _month_number(m.group(1))
        if month:
            return f"{int(m.group(2)):04d}-{month:02d}"

    m = _NAME_ONLY.match(s)
    if m:
        month = _month_number(m.group(1))
        if month:
            return f"{fallback_year:04d}-{month:02d}"

    return None
