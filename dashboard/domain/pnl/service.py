"""P&L service - Monthly expenses (sheet) against Razorpay settlements"""

import logging
from datetime import date, datetime, time
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

import httpx
from fastapi import HTTPException

from ...services.razorpay_service import RazorpayConfigError, RazorpayService
from ..finance import add_months, month_key, month_label
from ..sheets.service import SheetService

logger = logging.getLogger(__name__)

PNL_MONTHS = 12


def bucket_settlements(settlements: Iterable[dict[str, Any]], tz: ZoneInfo) -> dict[str, float]:
    """Settlement amounts in rupees (API reports paise), keyed by the month they were created in"""
    by_month: dict[str, float] = {}
    for s in settlements:
        created_at = s.get("created_at")
        if created_at is None:
            continue
        key = month_key(datetime.fromtimestamp(int(created_at), tz))
        by_month[key] = by_month.get(key, 0.0) + (s.get("amount") or 0) / 100
    return by_month


def build_pnl(
    expense_by_month: dict[str, float],
    settlement_by_month: dict[str, float],
    months: Iterable[date],
) -> list[dict]:
    """
    One P&L row per month.

    netPnL = expenses - settlements; a month is a "loss" when netPnL >= 0.
    """
    rows = []
    for first in months:
        key = month_key(first)
        expenses = expense_by_month.get(key, 0.0)
        settlements = settlement_by_month.get(key, 0.0)
        net = expenses - settlements
        rows.append(
            {
                "month": month_label(first),
                "expenses": round(expenses, 2),
                "settlements": round(settlements, 2),
                "netPnL": round(net, 2),
                "status": "loss" if net >= 0 else "profit",
            }
        )
    return rows


class PnLService:
    def __init__(self, sheets: SheetService, razorpay: RazorpayService, tz: ZoneInfo):
        self.sheets = sheets
        self.razorpay = razorpay
        self.tz = tz

    async def monthly_pnl(self, now: Optional[datetime] = None) -> list[dict]:
        """Trailing 12 months ending with the current month"""
        now = now or datetime.now(self.tz)
        first_month = add_months(now.date(), -(PNL_MONTHS - 1))
        months = [add_months(first_month, i) for i in range(PNL_MONTHS)]

        expense_by_month = await self.sheets.expense_by_month(fallback_year=now.year)

        start = datetime.combine(first_month, time(0, 0, 0), tzinfo=self.tz)
        try:
            settlements = await self.razorpay.list_settlements(start, now)
        except RazorpayConfigError as e:
            logger.error(f"❌ P&L unavailable: {e}")
            raise HTTPException(status_code=500, detail="Razorpay credentials not configured") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Razorpay settlements request failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to load settlements") from e

        return build_pnl(expense_by_month, bucket_settlements(settlements, self.tz), months)
