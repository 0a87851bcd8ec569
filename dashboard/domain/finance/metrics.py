from collections import Counter
from typing import Iterable, Optional


def percent_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def change_direction(pct: float) -> str:
    if pct > 0:
        return "up"
    if pct < 0:
        return "down"
    return "flat"


def customers_with_exactly_one(customer_ids: Iterable[Optional[str]]) -> int:
    """Number of customers that appear exactly once (ids missing from a booking are ignored)"""
    counts = Counter(cid for cid in customer_ids if cid)
    return sum(1 for c in counts.values() if c == 1)


def compute_cac(marketing_expense: float, customers_with_one_booking: int) -> float:
    """Customer acquisition cost; 0 when nobody completed exactly one booking"""
    if customers_with_one_booking <= 0:
        return 0.0
    return marketing_expense / customers_with_one_booking


def completion_rate(completed: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(completed / total * 100, 1)
