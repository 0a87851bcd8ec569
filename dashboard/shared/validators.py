"""Shared validation utilities"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence, TypeVar
from zoneinfo import ZoneInfo

from fastapi import HTTPException

T = TypeVar("T")


@dataclass(frozen=True)
class DateWindow:
    """Inclusive local-time window: start at 00:00:00, end at 23:59:59"""

    start: datetime
    end: datetime

    @classmethod
    def for_dates(cls, start_date: date, end_date: date, tz: ZoneInfo) -> "DateWindow":
        return cls(
            start=datetime.combine(start_date, time(0, 0, 0), tzinfo=tz),
            end=datetime.combine(end_date, time(23, 59, 59), tzinfo=tz),
        )

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.start.tzinfo)
        return self.start <= moment <= self.end

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def previous(self) -> "DateWindow":
        """The same number of whole days immediately before this window"""
        span = timedelta(days=self.days)
        return DateWindow.for_dates(
            self.start_date - span, self.start_date - timedelta(days=1), self.start.tzinfo
        )


def parse_date_param(value: Optional[str], name: str) -> Optional[date]:
    """
    Parse a YYYY-MM-DD query parameter.

    Raises:
        HTTPException(400): if the value is present but malformed
    """
    if value is None or value.strip() == "":
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid '{name}' date, expected YYYY-MM-DD") from e


def resolve_window(
    from_date: Optional[str],
    to_date: Optional[str],
    tz: ZoneInfo,
    default_from: date,
    default_to: date,
) -> DateWindow:
    start = parse_date_param(from_date, "from") or default_from
    end = parse_date_param(to_date, "to") or default_to
    if start > end:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
    return DateWindow.for_dates(start, end, tz)


def optional_window(from_date: Optional[str], to_date: Optional[str], tz: ZoneInfo) -> Optional[DateWindow]:
    """Window only when both ends are given ("all time" otherwise)"""
    start = parse_date_param(from_date, "from")
    end = parse_date_param(to_date, "to")
    if not start or not end:
        return None
    if start > end:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
    return DateWindow.for_dates(start, end, tz)


def month_bounds(today: date) -> tuple[date, date]:
    """First and last day of the month containing `today`"""
    first = today.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return first, next_first - timedelta(days=1)


def paginate(items: Sequence[T], page: int, page_size: int) -> dict:
    """Slice a list into one page with the metadata the tables render"""
    total = len(items)
    total_pages = math.ceil(total / page_size) if page_size > 0 else 0
    page = max(page, 1)
    start = (page - 1) * page_size
    return {
        "items": list(items[start : start + page_size]),
        "page": page,
        "page_size": page_size,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def matches_search(term: str, *values) -> bool:
    """Case-insensitive substring match of `term` against the joined values"""
    term = (term or "").strip().lower()
    if not term:
        return True
    text = " ".join("" if v is None else str(v) for v in values).lower()
    return term in text
