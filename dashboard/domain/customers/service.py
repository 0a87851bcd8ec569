"""Customer service - Customer directory with booking counts, and referral tracking"""

import logging
from collections import Counter
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from google.api_core import exceptions as google_exceptions

from ...database import DashboardContext
from ...models import Booking, Customer
from ...shared.exports import csv_response, xlsx_response
from ...shared.validators import matches_search, paginate, resolve_window
from .repository import CustomerRepository

logger = logging.getLogger(__name__)

PAGE_SIZE = 20
REFERRAL_PAGE_SIZE = 5
# Customer accounts before this date are imports from the previous system
DIRECTORY_START = date(2025, 4, 1)

BOOKING_FILTERS = ("all", "0", "1", "2", "2plus")

CUSTOMER_EXPORT_HEADER = ["ID", "Name", "Email", "Phone", "Bookings", "Created"]
REFERRAL_EXPORT_HEADER = [
    "Customer ID",
    "Name",
    "Email",
    "Phone",
    "Joined Date",
    "Total Bookings",
    "Completed Bookings",
    "Total Spent (₹)",
]


def matches_booking_filter(count: int, booking_filter: str) -> bool:
    """'2plus' means three or more; '2' is exactly two"""
    if booking_filter == "0":
        return count == 0
    if booking_filter == "1":
        return count == 1
    if booking_filter == "2":
        return count == 2
    if booking_filter == "2plus":
        return count >= 3
    return True


def _local_text(moment: Optional[datetime], tz) -> str:
    if moment is None:
        return ""
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.strftime("%d/%m/%Y, %H:%M:%S")


class CustomerService:
    def __init__(self, ctx: DashboardContext, repo: Optional[CustomerRepository] = None):
        self.ctx = ctx
        self.repo = repo or CustomerRepository()

    @property
    def tz(self):
        return self.ctx.tz

    def today(self) -> date:
        return datetime.now(self.tz).date()

    # ========================================================================
    # DIRECTORY
    # ========================================================================

    def _directory_sync(self, window) -> list[dict]:
        customers = self.repo.customers_created_in(self.ctx, window)
        counts = Counter(b.customer_id for b in self.repo.bookings_in(self.ctx, window) if b.customer_id)
        return [self._row(c, counts.get(c.id, 0)) for c in customers]

    @staticmethod
    def _row(c: Customer, booking_count: int) -> dict:
        return {
            "id": c.id,
            "uid": c.uid,
            "name": c.display_name or c.customer_name,
            "displayName": c.display_name,
            "customerName": c.customer_name,
            "email": c.email,
            "phone": c.phone,
            "referralBy": c.referral_by,
            "referralCode": c.referral_code,
            "subscription": c.subscription,
            "createdTime": c.created_time,
            "bookingCount": booking_count,
        }

    async def customers(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search: Optional[str] = None,
        booking_filter: str = "all",
    ) -> list[dict]:
        """
        Customers created in [from, to] with the number of bookings they placed
        in the same window.

        The window defaults to DIRECTORY_START through today.
        """
        if booking_filter not in BOOKING_FILTERS:
            raise HTTPException(status_code=400, detail=f"Invalid bookings filter '{booking_filter}'")

        window = resolve_window(from_date, to_date, self.tz, DIRECTORY_START, self.today())
        rows = await run_in_threadpool(self._directory_sync, window)

        return [
            r
            for r in rows
            if matches_search(
                search,
                r["customerName"],
                r["displayName"],
                r["email"],
                r["phone"],
                r["uid"],
                r["referralBy"],
            )
            and matches_booking_filter(r["bookingCount"], booking_filter)
        ]

    async def customer_page(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search: Optional[str] = None,
        booking_filter: str = "all",
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> dict:
        rows = await self.customers(from_date, to_date, search, booking_filter)
        return paginate(rows, page, page_size)

    async def export_customers(self, export_format: str = "csv", **filters) -> StreamingResponse:
        """Export the filtered directory as CSV or XLSX"""
        try:
            rows = await self.customers(**filters)
            table = (
                [
                    r["id"],
                    r["displayName"] or "",
                    r["email"] or "",
                    r["phone"] or "",
                    r["bookingCount"],
                    _local_text(r["createdTime"], self.tz),
                ]
                for r in rows
            )
            if export_format == "xlsx":
                filename = f"customers_{self.today().isoformat()}.xlsx"
                response = xlsx_response("Customers", CUSTOMER_EXPORT_HEADER, table, filename)
            else:
                filename = f"customers_{self.today().isoformat()}.csv"
                response = csv_response(CUSTOMER_EXPORT_HEADER, table, filename)

            logger.info(f"✅ Customer export successful: {filename} ({len(rows)} customers)")
            return response

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Customer export failed: {str(e)}")
            logger.exception(e)
            raise HTTPException(status_code=500, detail="Failed to export customers. Please try again.")

    # ========================================================================
    # REFERRALS
    # ========================================================================

    def _referrals_sync(self, customer_id: str) -> list[tuple[Customer, list[Booking]]]:
        customer = self.repo.get_customer(self.ctx, customer_id)
        if customer is None:
            raise HTTPException(status_code=404, detail="Customer not found")
        if not customer.referral_code:
            return []

        referred = []
        for ref in self.repo.referred_customers(self.ctx, customer.referral_code):
            try:
                bookings = self.repo.customer_bookings(self.ctx, ref.id)
            except google_exceptions.GoogleAPICallError as e:
                logger.warning(f"⚠️ Could not load bookings for referred customer {ref.id}: {e}")
                bookings = []
            referred.append((ref, bookings))
        return referred

    @staticmethod
    def _referral_row(ref: Customer, bookings: list[Booking]) -> dict:
        completed = [b for b in bookings if b.is_completed]
        return {
            "id": ref.id,
            "name": ref.display_name or ref.customer_name,
            "displayName": ref.display_name,
            "customerName": ref.customer_name,
            "email": ref.email,
            "phone": ref.phone,
            "subscription": ref.subscription,
            "createdTime": ref.created_time,
            "totalBookings": len(bookings),
            "completedBookings": len(completed),
            "totalSpent": sum(b.amount_paid for b in completed),
            "bookings": [
                {
                    "id": b.id,
                    "status": b.status,
                    "date": b.date.isoformat() if b.date else None,
                    "amountPaid": b.amount_paid,
                }
                for b in bookings
            ],
        }

    async def _referral_rows(self, customer_id: str, search: Optional[str]) -> tuple[list[dict], list[dict]]:
        referred = await run_in_threadpool(self._referrals_sync, customer_id)
        rows = [self._referral_row(ref, bookings) for ref, bookings in referred]
        matching = [
            r
            for r in rows
            if matches_search(search, r["id"], r["displayName"], r["customerName"], r["email"], r["phone"])
        ]
        return rows, matching

    async def referrals(
        self,
        customer_id: str,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = REFERRAL_PAGE_SIZE,
    ) -> dict:
        """Customers who signed up with this customer's referral code; totals ignore the search"""
        rows, matching = await self._referral_rows(customer_id, search)
        summary = {
            "totalReferrals": len(rows),
            "totalReferralBookings": sum(r["totalBookings"] for r in rows),
            "totalReferralEarnings": sum(r["totalSpent"] for r in rows),
        }
        return {"summary": summary, **paginate(matching, page, page_size)}

    async def export_referrals(self, customer_id: str, search: Optional[str] = None) -> StreamingResponse:
        try:
            _, matching = await self._referral_rows(customer_id, search)
            filename = f"referrals_{customer_id}_{self.today().isoformat()}.xlsx"
            logger.info(f"✅ Referral export successful: {filename} ({len(matching)} referrals)")
            return xlsx_response(
                "Referrals",
                REFERRAL_EXPORT_HEADER,
                (
                    [
                        r["id"],
                        r["name"] or "",
                        r["email"] or "",
                        r["phone"] or "",
                        _local_text(r["createdTime"], self.tz),
                        r["totalBookings"],
                        r["completedBookings"],
                        r["totalSpent"],
                    ]
                    for r in matching
                ),
                filename,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Referral export failed for customer {customer_id}: {str(e)}")
            logger.exception(e)
            raise HTTPException(status_code=500, detail="Failed to export referrals. Please try again.")
