"""
Partner service - Partner directory, leaderboard and per-partner detail pages
(bookings, wallet earnings, fuel bills, attendance)
"""

import csv
import logging
import re
from datetime import date, datetime, time
from typing import Any, Optional

from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from google.api_core import exceptions as google_exceptions

from ...database import DashboardContext
from ...models import DEFAULT_PARTNER_STATUS, STATUS_COMPLETED, STATUS_PENDING, Booking, Customer, ref_id
from ...services.attendance_service import (
    AttendanceAPIError,
    AttendanceService,
    parse_attendance_date,
    parse_punch,
)
from ...shared.exports import csv_response
from ...shared.validators import (
    DateWindow,
    matches_search,
    optional_window,
    paginate,
    parse_date_param,
)
from ..analytics.service import DEFAULT_RATING, local_date
from ..finance import add_months, month_key, month_label, percent_change
from .repository import PartnerRepository

logger = logging.getLogger(__name__)

PAGE_SIZE = 10
CHART_MONTHS = 6
UNKNOWN_SERVICE = "Unknown Service"
_BATHROOM_JOBS = re.compile(r"(\d+)\s*Bathroom", re.IGNORECASE)


def count_jobs(services: list[str]) -> int:
    """A "3 Bathroom" line is three jobs, anything else is one"""
    total = 0
    for name in services:
        match = _BATHROOM_JOBS.search(name or "")
        total += int(match.group(1)) if match else 1
    return total


def _status_is(booking: Booking, status: str) -> bool:
    return (booking.status or "").lower() == status.lower()


def _within(moment: Optional[datetime], start: Optional[datetime], end: Optional[datetime]) -> bool:
    """Open-ended range check; undated records never match"""
    if moment is None:
        return False
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=(start or end).tzinfo)
    if start and moment < start:
        return False
    if end and moment > end:
        return False
    return True


def _iso(moment: Optional[datetime]) -> Optional[str]:
    return moment.isoformat() if moment else None


def _en_in_date(moment: Optional[datetime], tz) -> str:
    day = local_date(moment, tz)
    return day.strftime("%d/%m/%Y") if day else ""


def partner_type(partner: Customer) -> str:
    return "agency" if partner.is_agency_partner else "provider"


class PartnerService:
    def __init__(
        self,
        ctx: DashboardContext,
        repo: Optional[PartnerRepository] = None,
        attendance: Optional[AttendanceService] = None,
    ):
        self.ctx = ctx
        self.repo = repo or PartnerRepository()
        self.attendance_api = attendance or AttendanceService()

    @property
    def tz(self):
        return self.ctx.tz

    def today(self) -> date:
        return datetime.now(self.tz).date()

    async def _get_partner(self, partner_id: str) -> Customer:
        partner = await run_in_threadpool(self.repo.get_partner, self.ctx, partner_id)
        if partner is None:
            raise HTTPException(status_code=404, detail="Partner not found")
        return partner

    # ========================================================================
    # DIRECTORY
    # ========================================================================

    def _list_partners_sync(self) -> list[dict]:
        partners = self.repo.list_partners(self.ctx)

        option_ids = {ref_id(p.partner_service_opt_ref) for p in partners}
        option_ids.discard(None)
        names = self.repo.service_option_names(self.ctx, option_ids) if option_ids else {}

        rows = []
        for p in partners:
            option_id = ref_id(p.partner_service_opt_ref)
            rows.append(
                {
                    "id": p.id,
                    "name": p.display_name or "Unknown",
                    "phone": p.phone_number or "N/A",
                    "type": partner_type(p),
                    "serviceOptName": (names.get(option_id) or "Unknown") if option_id else None,
                    "joinDate": p.created_time,
                    "status": p.partner_status or DEFAULT_PARTNER_STATUS,
                }
            )
        return rows

    async def list_partners(
        self,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search: Optional[str] = None,
        type_filter: str = "all",
        scope: str = "all",
        status: str = "all",
    ) -> list[dict]:
        """Partners newest first, narrowed by join date, search, type, scope and status"""
        window = optional_window(from_date, to_date, self.tz)
        rows = await run_in_threadpool(self._list_partners_sync)

        allowlist = set(self.ctx.provider_ids)
        result = []
        for row in rows:
            if window and not window.contains(row["joinDate"]):
                continue
            if not matches_search(search, row["name"], row["phone"], row["serviceOptName"]):
                continue
            if type_filter != "all" and row["type"] != type_filter:
                continue
            if scope == "specific" and row["id"] not in allowlist:
                continue
            if status != "all" and row["status"] != status:
                continue
            result.append(row)

        result.sort(key=lambda r: r["joinDate"].timestamp() if r["joinDate"] else 0, reverse=True)
        return result

    async def export_partners_csv(self, **filters) -> StreamingResponse:
        try:
            rows = await self.list_partners(**filters)
            filename = f"partners_{self.today().isoformat()}.csv"
            logger.info(f"✅ Partner CSV export: {filename} ({len(rows)} partners)")
            return csv_response(
                ["Partner ID", "Name", "Phone", "Type", "Service Opt", "Join Date", "Status"],
                (
                    [
                        r["id"],
                        r["name"],
                        r["phone"],
                        r["type"],
                        r["serviceOptName"] or "",
                        _en_in_date(r["joinDate"], self.tz),
                        r["status"],
                    ]
                    for r in rows
                ),
                filename,
                quoting=csv.QUOTE_ALL,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Partner CSV export failed: {str(e)}")
            logger.exception(e)
            raise HTTPException(status_code=500, detail="Failed to export partners. Please try again.")

    # ========================================================================
    # LEADERBOARD
    # ========================================================================

    def _top_partners_sync(self, window: Optional[DateWindow]) -> list[dict]:
        result = []
        for partner_id in self.ctx.provider_ids:
            partner = self.repo.get_partner(self.ctx, partner_id)
            if partner is None:
                logger.warning(f"⚠️ Allowlisted partner {partner_id} has no customer document")
                continue

            bookings = self.repo.partner_bookings_in_window(self.ctx, partner_id, window)
            completed = [b for b in bookings if b.is_completed]
            ratings = [b.rating for b in completed if b.rating is not None]
            wallet = self.repo.wallet_overall(self.ctx, partner_id)

            result.append(
                {
                    "id": partner_id,
                    "name": partner.display_name or "Unknown",
                    "totalBookings": len(bookings),
                    "completedBookings": len(completed),
                    "avgRating": round(sum(ratings) / len(ratings), 1) if ratings else DEFAULT_RATING,
                    "earnings": wallet.total_amount_in if wallet else 0.0,
                    "pendingPayouts": wallet.pending_amount if wallet else 0.0,
                }
            )

        result.sort(key=lambda p: (p["completedBookings"], p["earnings"]), reverse=True)
        return result

    async def top_partners(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> list[dict]:
        """Allowlisted partners ranked by completed bookings, then wallet earnings"""
        window = optional_window(from_date, to_date, self.tz)
        return await run_in_threadpool(self._top_partners_sync, window)

    # ========================================================================
    # BOOKINGS
    # ========================================================================

    def _booking_services_sync(self, bookings: list[Booking]) -> dict[str, list[str]]:
        cache: dict[Any, list[str]] = {}
        services = {}
        for booking in bookings:
            names: list[str] = []
            for ref in booking.sub_category_cart_refs:
                key = getattr(ref, "path", ref)
                if key not in cache:
                    try:
                        cache[key] = self.repo.cart_service_names(self.ctx, ref)
                    except google_exceptions.GoogleAPICallError as e:
                        logger.warning(f"⚠️ Cart lookup failed for {key}: {e}")
                        cache[key] = []
                names.extend(cache[key])
            services[booking.id] = names or [UNKNOWN_SERVICE]
        return services

    def _customers_sync(self, bookings: list[Booking]) -> dict[str, Customer]:
        try:
            return self.repo.get_customers(self.ctx, [b.customer_id for b in bookings if b.customer_id])
        except google_exceptions.GoogleAPICallError as e:
            logger.warning(f"⚠️ Customer lookup failed for partner bookings: {e}")
            return {}

    async def partner_bookings(
        self,
        partner_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> dict:
        """
        The partner's booking history, newest first.

        Either end of the date range may be given alone. KPIs are computed on
        the date-filtered set; search and status only narrow the table.
        """
        start = parse_date_param(from_date, "from")
        end = parse_date_param(to_date, "to")
        start_at = datetime.combine(start, time(0, 0, 0), tzinfo=self.tz) if start else None
        end_at = datetime.combine(end, time(23, 59, 59), tzinfo=self.tz) if end else None

        bookings = await run_in_threadpool(self.repo.partner_bookings, self.ctx, partner_id)
        if start_at or end_at:
            bookings = [b for b in bookings if _within(b.date, start_at, end_at)]

        services = await run_in_threadpool(self._booking_services_sync, bookings)
        customers = await run_in_threadpool(self._customers_sync, bookings)

        rows = []
        for b in bookings:
            customer = customers.get(b.customer_id) if b.customer_id else None
            rows.append(
                {
                    "id": b.id,
                    "status": b.status,
                    "date": _iso(b.date),
                    "services": services[b.id],
                    "customerName": (customer and (customer.display_name or customer.customer_name)) or "Unknown",
                    "customerPhone": (customer and customer.phone) or "N/A",
                    "amountPaid": b.amount_paid,
                    "otp": b.otp,
                }
            )

        completed = [b for b in bookings if _status_is(b, STATUS_COMPLETED)]
        stats = {
            "total": len(bookings),
            "completed": len(completed),
            "pending": sum(1 for b in bookings if _status_is(b, STATUS_PENDING)),
            "revenue": sum(b.amount_paid for b in completed),
            "totalJobs": sum(count_jobs(services[b.id]) for b in completed),
        }

        status_filter = (status or "").strip().lower()
        table = [
            r
            for r in rows
            if (not status_filter or status_filter == "all" or (r["status"] or "").lower() == status_filter)
            and matches_search(
                search,
                r["id"],
                r["status"],
                " ".join(r["services"]),
                r["otp"],
                r["customerName"],
                r["customerPhone"],
            )
        ]

        return {"stats": stats, **paginate(table, page, page_size)}

    # ========================================================================
    # EARNINGS
    # ========================================================================

    def _earnings_sync(self, partner_id: str):
        wallet = self.repo.wallet_overall(self.ctx, partner_id)
        recovered = self.repo.loan_recovered(self.ctx, partner_id) if wallet else 0.0
        pay_ins = [t for t in self.repo.wallet_ins(self.ctx, partner_id) if t.amount > 0]
        pay_outs = [t for t in self.repo.wallet_outs(self.ctx, partner_id) if t.amount != 0]
        return wallet, recovered, pay_ins, pay_outs

    def _month_sum(self, pay_ins, month_first: date) -> float:
        key = month_key(month_first)
        return sum(
            t.amount
            for t in pay_ins
            if t.timestamp and month_key(local_date(t.timestamp, self.tz)) == key
        )

    def earnings_chart(self, pay_ins, months_offset: int = 0) -> list[dict]:
        """Six monthly pay-in totals ending `months_offset` months before the current one"""
        this_month = self.today().replace(day=1)
        chart = []
        for i in range(CHART_MONTHS - 1, -1, -1):
            first = add_months(this_month, -(i + months_offset))
            chart.append({"month": month_label(first), "amount": self._month_sum(pay_ins, first)})
        return chart

    async def earnings(
        self,
        partner_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        months_offset: int = 0,
    ) -> dict:
        window = optional_window(from_date, to_date, self.tz)
        wallet, recovered, pay_ins, pay_outs = await run_in_threadpool(self._earnings_sync, partner_id)

        total_overall = wallet.total_amount_in if wallet else 0.0

        this_month = self.today().replace(day=1)
        this_month_earnings = self._month_sum(pay_ins, this_month)
        last_month_earnings = self._month_sum(pay_ins, add_months(this_month, -1))
        # Chart ignores the date range
        chart = self.earnings_chart(pay_ins, months_offset)

        if window:
            pay_ins = [t for t in pay_ins if window.contains(t.timestamp)]
            pay_outs = [t for t in pay_outs if window.contains(t.spend_date)]
        filtered = sum(t.amount for t in pay_ins)

        return {
            "totalEarningsOverall": total_overall,
            "currentBalance": wallet.total_balance if wallet else 0.0,
            "pendingPayouts": wallet.pending_amount if wallet else 0.0,
            "loanRecoveredAmount": recovered,
            "netEarningsOverall": total_overall + recovered if wallet else 0.0,
            "thisMonthEarnings": this_month_earnings,
            "monthlyGrowth": round(percent_change(this_month_earnings, last_month_earnings), 1),
            "filteredEarnings": filtered,
            "filteredNetEarnings": filtered + recovered,
            "chart": chart,
            "payIns": [
                {
                    "id": t.id,
                    "amount": t.amount,
                    "date": _iso(t.timestamp),
                    "bookingId": t.booking_id,
                }
                for t in pay_ins
            ],
            "payOuts": [
                {
                    "id": t.id,
                    "amount": t.amount,
                    "date": _iso(t.spend_date),
                    "status": t.payment_status,
                    "note": t.note,
                    "deductionType": t.deduction_type,
                    "payoutIds": t.payout_ids,
                    "bookingId": t.booking_id,
                }
                for t in pay_outs
            ],
        }

    # ========================================================================
    # FUEL
    # ========================================================================

    async def fuel_bills(
        self, partner_id: str, from_date: Optional[str] = None, to_date: Optional[str] = None
    ) -> dict:
        """Fuel bills attached to the partner's bookings, newest booking first"""
        window = optional_window(from_date, to_date, self.tz)
        bookings = await run_in_threadpool(self.repo.partner_bookings, self.ctx, partner_id)

        entries = []
        for b in bookings:
            if not b.fuel_bills:
                continue
            if window and not window.contains(b.time_slot):
                continue
            for bill in b.fuel_bills:
                entries.append(
                    {
                        "bookingId": b.id,
                        "bookingDate": b.time_slot,
                        "partnerName": b.provider_name or "Unknown Partner",
                        "billNo": bill.bill_no,
                        "amount": bill.amount,
                        "note": bill.note,
                        "imageUrl": bill.image_url,
                    }
                )

        entries.sort(
            key=lambda e: e["bookingDate"].timestamp() if e["bookingDate"] else 0,
            reverse=True,
        )
        return {"total": sum(e["amount"] for e in entries), "count": len(entries), "bills": entries}

    async def export_fuel_csv(
        self, partner_id: str, from_date: Optional[str] = None, to_date: Optional[str] = None
    ) -> StreamingResponse:
        try:
            result = await self.fuel_bills(partner_id, from_date, to_date)
            filename = f"fuel_bills_{partner_id}_{self.today().isoformat()}.csv"
            logger.info(f"✅ Fuel CSV export: {filename} ({result['count']} bills)")
            return csv_response(
                ["Date", "Booking ID", "Partner Name", "Bill #", "Amount", "Note", "Bill Image URL"],
                (
                    [
                        _en_in_date(e["bookingDate"], self.tz),
                        e["bookingId"],
                        e["partnerName"],
                        e["billNo"],
                        e["amount"],
                        e["note"],
                        e["imageUrl"],
                    ]
                    for e in result["bills"]
                ),
                filename,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Fuel CSV export failed for partner {partner_id}: {str(e)}")
            logger.exception(e)
            raise HTTPException(status_code=500, detail="Failed to export fuel bills. Please try again.")

    # ========================================================================
    # ATTENDANCE
    # ========================================================================

    async def _attendance_records(
        self,
        partner_id: str,
        name: Optional[str],
        from_date: Optional[str],
        to_date: Optional[str],
    ) -> list[dict]:
        start = parse_date_param(from_date, "from")
        end = parse_date_param(to_date, "to")
        if not name:
            name = (await self._get_partner(partner_id)).display_name
        if not name:
            raise HTTPException(status_code=400, detail="Partner name is required for attendance")

        try:
            records = await self.attendance_api.fetch_records(start, end)
        except AttendanceAPIError as e:
            raise HTTPException(status_code=500, detail="Failed to load attendance") from e

        target = name.strip().lower()
        mine = [r for r in records if str(r.get("EmployeeName") or "").strip().lower() == target]
        mine.sort(key=lambda r: parse_attendance_date(r.get("AttendanceDate")) or date.min, reverse=True)
        return mine

    @staticmethod
    def attendance_kpis(records: list[dict]) -> dict:
        present = len(records)
        missing_out = sum(1 for r in records if not r.get("OutTime"))
        total_hours = 0.0
        for r in records:
            if not r.get("OutTime"):
                continue
            day = parse_attendance_date(r.get("AttendanceDate"))
            punch_in = parse_punch(day, r.get("InTime"))
            punch_out = parse_punch(day, r.get("OutTime"))
            if punch_in and punch_out:
                total_hours += (punch_out - punch_in).total_seconds() / 3600
        return {
            "present": present,
            "missingOut": missing_out,
            "avgHours": round(total_hours / ((present - missing_out) or 1), 2),
        }

    async def attendance(
        self,
        partner_id: str,
        name: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        page: int = 1,
        page_size: int = PAGE_SIZE,
    ) -> dict:
        records = await self._attendance_records(partner_id, name, from_date, to_date)
        return {"kpis": self.attendance_kpis(records), **paginate(records, page, page_size)}

    async def export_attendance_csv(
        self,
        partner_id: str,
        name: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> StreamingResponse:
        try:
            records = await self._attendance_records(partner_id, name, from_date, to_date)
            filename = f"attendance_{partner_id}_{self.today().isoformat()}.csv"
            logger.info(f"✅ Attendance CSV export: {filename} ({len(records)} records)")

            def row(r: dict) -> list:
                day = parse_attendance_date(r.get("AttendanceDate"))
                return [
                    day.strftime("%d/%m/%Y") if day else r.get("AttendanceDate") or "",
                    r.get("InTime") or "",
                    r.get("OutTime") or "-",
                    str(r.get("InAddress") or "").replace(",", " "),
                    str(r.get("OutAddress") or "-").replace(",", " "),
                ]

            return csv_response(
                ["Date", "In Time", "Out Time", "In Address", "Out Address"],
                (row(r) for r in records),
                filename,
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Attendance CSV export failed for partner {partner_id}: {str(e)}")
            logger.exception(e)
            raise HTTPException(status_code=500, detail="Failed to export attendance. Please try again.")
