"""Sheet service - Booking and expense ledgers read from published Google Sheets"""

import logging
from collections import Counter
from datetime import date
from typing import Optional

from fastapi import HTTPException

from ...services.sheets_client import SheetFetchError, SheetsClient
from ...shared.validators import matches_search, paginate
from .parser import expense_breakdown, latest_month_total, parse_booking_ledger, parse_expense_ledger

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
EMPTY_LABEL = "—"


def _most_common(values) -> str:
    counts = Counter(v for v in values if v)
    if not counts:
        return EMPTY_LABEL
    return counts.most_common(1)[0][0]


class SheetService:
    """Service layer over the published sheets"""

    def __init__(self, sheets: SheetsClient):
        self.sheets = sheets

    # ------------------------------------------------------------------
    # Booking ledger
    # ------------------------------------------------------------------

    async def list_bookings(self, start: date, end: date) -> list[dict]:
        try:
            csv_text = await self.sheets.fetch_booking_csv()
        except SheetFetchError as e:
            raise HTTPException(status_code=500, detail="Failed to fetch sheet bookings") from e

        bookings = parse_booking_ledger(csv_text, start, end)
        logger.info(f"📊 {len(bookings)} sheet bookings between {start} and {end}")
        return bookings

    async def bookings_table(
        self,
        start: date,
        end: date,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> dict:
        """Search, latest-first ordering and pagination for the bookings table"""
        bookings = await self.list_bookings(start, end)
        filtered = [
            b
            for b in bookings
            if matches_search(search, b["customerName"])
            or matches_search(search, b["phone"])
            or matches_search(search, b["service"])
            or matches_search(search, b["source"])
        ]
        # Stable sort keeps sheet order within a day
        filtered.sort(key=lambda b: b["bookingDate"], reverse=True)
        return paginate(filtered, page, page_size)

    async def booking_stats(self, start: date, end: date) -> dict:
        bookings = await self.list_bookings(start, end)
        return {
            "totalBookings": len(bookings),
            "totalRevenue": sum(b["amount"] for b in bookings),
            "topPartner": _most_common(b["partnerName"].strip() for b in bookings),
            "topLeadSource": _most_common(b["source"].strip() for b in bookings),
        }

    # ------------------------------------------------------------------
    # Expense ledger
    # ------------------------------------------------------------------

    async def _expense_csv(self) -> str:
        try:
            return await self.sheets.fetch_expense_csv()
        except SheetFetchError as e:
            raise HTTPException(status_code=500, detail="Failed to fetch expense sheet") from e

    async def expense_by_month(self, fallback_year: int) -> dict[str, float]:
        return parse_expense_ledger(await self._expense_csv(), fallback_year)

    async def latest_month_total(self) -> float:
        return latest_month_total(await self._expense_csv())

    async def expense_breakdown(self, month: Optional[str] = None) -> dict:
        try:
            return expense_breakdown(await self._expense_csv(), month)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=f"Month '{month}' not found in expense sheet") from e
