"""Spread monthly expense totals over the calendar days a reporting window covers"""

from datetime import date

from .months import days_in_month, iter_months, month_end, month_key


def overlap_days(range_from: date, range_to: date, period_start: date, period_end: date) -> int:
    """Whole calendar days shared by two inclusive date ranges"""
    start = max(range_from, period_start)
    end = min(range_to, period_end)
    if start > end:
        return 0
    return (end - start).days + 1


def prorate_monthly_expense(
    month_total: float,
    month_first: date,
    month_last: date,
    range_from: date,
    range_to: date,
) -> float:
    """overlap_days × (month_total / days_in_month); 0 when the range misses the month"""
    dim = days_in_month(month_first.year, month_first.month)
    if dim <= 0 or not month_total:
        return 0.0
    days = overlap_days(range_from, range_to, month_first, month_last)
    return days * (month_total / dim)


def prorated_expense(expense_by_month: dict[str, float], range_from: date, range_to: date) -> float:
    """Prorated expense for the range, summed over every month it touches"""
    total = 0.0
    for first in iter_months(range_from, range_to):
        month_total = expense_by_month.get(month_key(first), 0.0)
        if month_total:
            total += prorate_monthly_expense(month_total, first, month_end(first), range_from, range_to)
    return total


def net_pnl(net_revenue: float, expense_by_month: dict[str, float], range_from: date, range_to: date) -> float:
    return net_revenue - prorated_expense(expense_by_month, range_from, range_to)
