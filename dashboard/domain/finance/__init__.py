"""Business arithmetic shared by the dashboard, CAC and P&L views"""

from .metrics import (
    change_direction,
    completion_rate,
    compute_cac,
    customers_with_exactly_one,
    percent_change,
)
from .months import (
    add_months,
    days_in_month,
    iter_months,
    month_end,
    month_key,
    month_label,
    parse_sheet_month_to_key,
)
from .profit import booking_profit, summarize_profit
from .proration import net_pnl, prorate_monthly_expense, prorated_expense

__all__ = [
    "add_months",
    "booking_profit",
    "change_direction",
    "completion_rate",
    "compute_cac",
    "customers_with_exactly_one",
    "days_in_month",
    "iter_months",
    "month_end",
    "month_key",
    "month_label",
    "net_pnl",
    "parse_sheet_month_to_key",
    "percent_change",
    "prorate_monthly_expense",
    "prorated_expense",
    "summarize_profit",
]
