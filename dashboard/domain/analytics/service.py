"""Analytics service - Dashboard KPIs, category mix, CAC and daily snapshots"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from fastapi.concurrency import run_in_threadpool
from google.api_core import exceptions as google_exceptions

from ...config import CAC_PROVIDER_LIMIT
from ...database import DashboardContext
from ...models import (
    STATUS_ACCEPTED,
    STATUS_CANCELLED,
    STATUS_CANCELLED_LEGACY,
    STATUS_COMPLETED,
    STATUS_PENDING,
    Booking,
)
from ...shared.validators import DateWindow, month_bounds, parse_date_param, resolve_window
from ..finance import (
    add_months,
    change_direction,
    completion_rate,
    compute_cac,
    customers_with_exactly_one,
    days_in_month,
    iter_months,
    month_end,
    month_key,
    month_label,
    net_pnl,
    percent_change,
    prorate_monthly_expense,
    prorated_expense,
    summarize_profit,
)
from ..sheets.service import SheetService
from .repository import AnalyticsRepository

logger = logging.getLogger(__name__)

CATEGORIES = ("Cleaning", "Electrical", "Security", "Driver")
CATEGORY_KEYWORDS = (
    ("Cleaning", ("cleaning", "clean")),
    ("Electrical", ("electrical", "elec")),
    ("Security", ("security",)),
    ("Driver", ("driver",)),
)
DEFAULT_RATING = 5.0


def categorize(category_name: Optional[str]) -> Optional[str]:
    """Map a free-text category name onto one of the reporting categories"""
    lowered = (category_name or "").lower()
    if not lowered:
        return None
    for label, keywords in CATEGORY_KEYWORDS:
        if any(k in lowered for k in keywords):
            return label
    return None


def local_date(moment: Optional[datetime], tz) -> Optional[date]:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


async def aggregate_bookings(
    ctx: DashboardContext,
    window: DateWindow,
    status: Optional[str] = None,
    provider_limit: Optional[int] = None,
    repo: Optional[AnalyticsRepository] = None,
) -> list[Booking]:
    """
    Provider-scoped bookings in a date window, optionally narrowed to one status.

    Every dashboard figure (KPIs, CAC, categories, daily metrics) is computed
    from this one query shape.
    """
    repo = repo or AnalyticsRepository()
    return await run_in_threadpool(repo.provider_bookings, ctx, window, status, provider_limit)


@dataclass
class BookingTotals:
    """Counts and money totals for one set of bookings"""

    total: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0
    revenue: float = 0.0
    wallet_used: float = 0.0
    discounts: float = 0.0
    ratings: list[float] = field(default_factory=list)
    completed_customer_ids: list[Optional[str]] = field(default_factory=list)

    @classmethod
    def from_bookings(cls, bookings: list[Booking]) -> "BookingTotals":
        totals = cls(total=len(bookings))
        for b in bookings:
            if b.status == STATUS_PENDING:
                totals.pending += 1
            elif b.status == STATUS_ACCEPTED:
                totals.confirmed += 1
            elif b.status == STATUS_CANCELLED:
                totals.cancelled += 1
            elif b.status == STATUS_COMPLETED:
                totals.completed += 1
                totals.revenue += b.amount_paid
                totals.wallet_used += b.wallet_amount_used
                totals.discounts += b.discount_amount
                totals.completed_customer_ids.append(b.customer_id)
                if b.rating is not None:
                    totals.ratings.append(b.rating)
        return totals

    @property
    def net_revenue(self) -> float:
        return self.revenue - self.wallet_used - self.discounts

    @property
    def offer_amount(self) -> float:
        return self.wallet_used + self.discounts

    @property
    def per_order_value(self) -> float:
        return self.revenue / self.completed if self.completed > 0 else 0.0

    @property
    def customers_with_one_booking(self) -> int:
        return customers_with_exactly_one(self.completed_customer_ids)


class AnalyticsService:
    """Service layer for dashboard analytics"""

    def __init__(
        self,
        ctx: DashboardContext,
        sheets: SheetService,
        repo: Optional[AnalyticsRepository] = None,
    ):
        self.ctx = ctx
        self.sheets = sheets
        self.repo = repo or AnalyticsRepository()

    def today(self) -> date:
        return datetime.now(self.ctx.tz).date()

    def _window(self, from_date: Optional[str], to_date: Optional[str]) -> DateWindow:
        first, last = month_bounds(self.today())
        return resolve_window(from_date, to_date, self.ctx.tz, first, last)

    async def _bookings(self, window: DateWindow, **kwargs) -> list[Booking]:
        return await aggregate_bookings(self.ctx, window, repo=self.repo, **kwargs)

    # ------------------------------------------------------------------
    # KPI cards
    # ------------------------------------------------------------------

    async def get_stats(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> dict:
        """Booking KPIs for the window (default: current month) against the previous equal window"""
        window = self._window(from_date, to_date)
        previous_window = window.previous()

        current = BookingTotals.from_bookings(await self._bookings(window))
        previous = BookingTotals.from_bookings(await self._bookings(previous_window))

        new_customers = await run_in_threadpool(self.repo.count_new_customers, self.ctx, window)
        previous_new_customers = await run_in_threadpool(
            self.repo.count_new_customers, self.ctx, previous_window
        )

        expense_by_month = await self.sheets.expense_by_month(fallback_year=window.start_date.year)
        expense = prorated_expense(expense_by_month, window.start_date, window.end_date)
        previous_expense = prorated_expense(
            expense_by_month, previous_window.start_date, previous_window.end_date
        )

        cac = compute_cac(expense, current.customers_with_one_booking)
        previous_cac = compute_cac(previous_expense, previous.customers_with_one_booking)
        pnl = net_pnl(current.net_revenue, expense_by_month, window.start_date, window.end_date)

        average_rating = (
            sum(current.ratings) / len(current.ratings) if current.ratings else DEFAULT_RATING
        )

        logger.info(
            f"📊 Stats {window.start_date}..{window.end_date}: {current.total} bookings, "
            f"{current.completed} completed, CAC {cac:.2f}"
        )

        def change(now: float, before: float) -> float:
            return round(percent_change(now, before), 1)

        return {
            "totalBookings": current.total,
            "totalBookingsChange": change(current.total, previous.total),
            "pendingBookings": current.pending,
            "confirmedBookings": current.confirmed,
            "completedBookings": current.completed,
            "completedBookingsChange": change(current.completed, previous.completed),
            "cancelledBookings": current.cancelled,
            "totalRevenue": round(current.revenue, 2),
            "totalRevenueChange": change(current.revenue, previous.revenue),
            "netRevenue": round(current.net_revenue, 2),
            "netRevenueChange": change(current.net_revenue, previous.net_revenue),
            "perOrderValue": round(current.per_order_value, 2),
            "perOrderValueChange": change(current.per_order_value, previous.per_order_value),
            "totalCustomers": new_customers,
            "totalCustomersChange": change(new_customers, previous_new_customers),
            "averageRating": round(average_rating, 1),
            "totalRatingsCount": len(current.ratings),
            "completionRate": completion_rate(current.completed, current.total),
            "totalOfferAmount": round(current.offer_amount, 2),
            "cac": round(cac, 2),
            "cacChange": change(cac, previous_cac),
            "netPnL": round(pnl, 2),
        }

    # ------------------------------------------------------------------
    # Category mix
    # ------------------------------------------------------------------

    def _category_counts_sync(self, bookings: list[Booking]) -> dict[str, int]:
        counts = {label: 0 for label in CATEGORIES}
        names: dict[str, Optional[str]] = {}

        for booking in bookings:
            if not booking.sub_category_cart_refs:
                continue
            ref = booking.sub_category_cart_refs[0]
            key = getattr(ref, "path", None) or str(ref)
            if key not in names:
                try:
                    names[key] = self.repo.category_name(self.ctx, ref)
                except google_exceptions.GoogleAPICallError as e:
                    logger.warning(f"⚠️ Could not resolve category for booking {booking.id}: {e}")
                    names[key] = None
            label = categorize(names[key])
            if label:
                counts[label] += 1
        return counts

    async def category_counts(self, bookings: list[Booking]) -> dict[str, int]:
        return await run_in_threadpool(self._category_counts_sync, bookings)

    async def get_categories(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> dict:
        window = self._window(from_date, to_date)
        return await self.category_counts(await self._bookings(window))

    # ------------------------------------------------------------------
    # Monthly CAC
    # ------------------------------------------------------------------

    async def monthly_cac(self, from_date: Optional[str] = None, to_date: Optional[str] = None) -> list[dict]:
        """One CAC point per calendar month touched by the window (default: last 6 months)"""
        today = self.today()
        window = resolve_window(from_date, to_date, self.ctx.tz, add_months(today, -5), today)
        start, end = window.start_date, window.end_date

        completed = await self._bookings(
            window, status=STATUS_COMPLETED, provider_limit=CAC_PROVIDER_LIMIT
        )
        customers_by_month: dict[str, list[str]] = {}
        for b in completed:
            booked_on = local_date(b.date, self.ctx.tz)
            if booked_on is None or not b.customer_id:
                continue
            customers_by_month.setdefault(month_key(booked_on), []).append(b.customer_id)

        expense_by_month = await self.sheets.expense_by_month(fallback_year=start.year)

        points: list[dict] = []
        for first in iter_months(start, end):
            key = month_key(first)
            expense = prorate_monthly_expense(
                expense_by_month.get(key, 0.0), first, month_end(first), start, end
            )
            ones = customers_with_exactly_one(customers_by_month.get(key, []))
            cac = round(compute_cac(expense, ones), 2)

            if points:
                pct = percent_change(cac, points[-1]["cac"])
                change_pct: Optional[float] = round(pct, 1)
                direction = change_direction(pct)
            else:
                change_pct, direction = None, "flat"

            points.append(
                {
                    "key": key,
                    "monthLabel": month_label(first),
                    "marketingExpense": round(expense, 2),
                    "customersWithOneBooking": ones,
                    "cac": cac,
                    "changePct": change_pct,
                    "changeDir": direction,
                }
            )
        return points

    # ------------------------------------------------------------------
    # Daily snapshots
    # ------------------------------------------------------------------

    async def daily_average_expense(self, on: Optional[date] = None) -> float:
        """Latest expense-sheet total spread evenly over the days of the month"""
        on = on or self.today()
        return await self.sheets.latest_month_total() / days_in_month(on.year, on.month)

    async def marketing_metrics(self, day: Optional[str] = None) -> dict:
        """Single-day snapshot feeding the WhatsApp report"""
        on = parse_date_param(day, "date") or self.today()
        window = DateWindow.for_dates(on, on, self.ctx.tz)

        bookings = await self._bookings(window)
        summary = summarize_profit(bookings)
        cancelled = await run_in_threadpool(
            self.repo.bookings_with_status, self.ctx, window, STATUS_CANCELLED_LEGACY
        )
        complaints = await run_in_threadpool(self.repo.complaints, self.ctx, window)
        categories = await self.category_counts(bookings)

        daily_expense = await self.daily_average_expense(on)
        ones = customers_with_exactly_one(b.customer_id for b in bookings if b.is_completed)
        cac = daily_expense / ones if ones > 0 else daily_expense

        return {
            "date": on.isoformat(),
            "completedBookings": summary.count,
            "cancelledBookings": len(cancelled),
            "totalAmountPaid": round(summary.amount_paid, 2),
            "totalBookingAmount": round(summary.booking_amount, 2),
            "netProfit": summary.net_profit,
            "marginPercentage": summary.margin_pct,
            "avgOrderValue": summary.avg_order_value,
            "customerAcquisitionCost": round(cac, 2),
            "categories": categories,
            "totalComplaints": len(complaints),
            "resolvedComplaints": sum(1 for c in complaints if c.is_resolved),
        }

    def _present_partners_sync(self, window: DateWindow) -> list[str]:
        entries = []
        for mark in self.repo.present_attendance(self.ctx):
            if not window.contains(mark.start_time):
                continue

            partner_name = "Unknown Partner"
            service_name = "N/A"
            if mark.partner_id:
                try:
                    partner = self.repo.get_customer(self.ctx, mark.partner_id)
                    if partner:
                        partner_name = partner.full_name or partner_name
                        if partner.partner_service_opt_ref:
                            service_name = (
                                self.repo.service_option_name(self.ctx, partner.partner_service_opt_ref)
                                or service_name
                            )
                except google_exceptions.GoogleAPICallError as e:
                    logger.warning(f"⚠️ Could not resolve partner {mark.partner_id}: {e}")

            entries.append(f"{partner_name} — {service_name}")
        return entries

    async def daily_overview(self) -> dict:
        today = self.today()
        window = DateWindow.for_dates(today, today, self.ctx.tz)
        partners = await run_in_threadpool(self._present_partners_sync, window)
        return {
            "date": today.strftime("%A, %d %b %Y"),
            "dailyAverageExpense": round(await self.daily_average_expense(today), 2),
            "totalPresent": len(partners),
            "partnersPresent": partners,
        }

    async def notification_counts(self) -> dict:
        pending_bookings = await run_in_threadpool(self.repo.count_pending_bookings, self.ctx)
        pending_complaints = await run_in_threadpool(self.repo.count_pending_complaints, self.ctx)
        return {
            "pendingBookings": pending_bookings,
            "pendingComplaints": pending_complaints,
            "total": pending_bookings + pending_complaints,
        }
