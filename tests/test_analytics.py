import asyncio
from datetime import date

import pytest

from dashboard.config import CAC_PROVIDER_LIMIT
from dashboard.domain.analytics.router import get_analytics_service
from dashboard.domain.analytics.service import AnalyticsService, categorize
from dashboard.domain.sheets.service import SheetService
from dashboard.models import Complaint
from dashboard.shared.validators import DateWindow
from tests.fakes import FakeAnalyticsRepository, FakeSheetsClient, at, booking

COMPLETED = "Service_Completed"


def _service(ctx, repo):
    return AnalyticsService(ctx, SheetService(FakeSheetsClient()), repo=repo)


def january_bookings():
    return [
        booking("b1", COMPLETED, at(2026, 1, 5), customer_id="c1", amount_paid=1000, rating=4.0),
        booking("b2", COMPLETED, at(2026, 1, 12), customer_id="c1", amount_paid=1000, discount_amount=100),
        booking("b3", COMPLETED, at(2026, 1, 20), customer_id="c2", amount_paid=1000, rating=5.0),
        booking("b4", "Pending", at(2026, 1, 21), customer_id="c3"),
        booking("b5", "Accepted", at(2026, 1, 22), customer_id="c4"),
        booking("b6", "Booking_Cancelled", at(2026, 1, 23), customer_id="c5"),
        # Previous window (December)
        booking("b7", COMPLETED, at(2025, 12, 10), customer_id="c6", amount_paid=1500),
    ]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Home Deep Cleaning", "Cleaning"),
        ("ELECTRICAL", "Electrical"),
        ("Elec work", "Electrical"),
        ("Security Guard", "Security"),
        ("Personal Driver", "Driver"),
        ("Plumbing", None),
        (None, None),
    ],
)
def test_categorize(name, expected):
    assert categorize(name) == expected


def test_previous_window_has_same_length(tz):
    window = DateWindow.for_dates(date(2026, 1, 1), date(2026, 1, 31), tz)
    previous = window.previous()
    assert previous.start_date == date(2025, 12, 1)
    assert previous.end_date == date(2025, 12, 31)
    assert previous.days == window.days


def test_dashboard_stats(ctx):
    repo = FakeAnalyticsRepository(
        bookings=january_bookings(),
        customer_signups=[at(2026, 1, 3), at(2026, 1, 9), at(2025, 12, 2)],
    )
    stats = asyncio.run(_service(ctx, repo).get_stats("2026-01-01", "2026-01-31"))

    assert stats["totalBookings"] == 6
    assert stats["pendingBookings"] == 1
    assert stats["confirmedBookings"] == 1
    assert stats["completedBookings"] == 3
    assert stats["cancelledBookings"] == 1
    assert stats["totalRevenue"] == 3000
    assert stats["netRevenue"] == 2900
    assert stats["totalOfferAmount"] == 100
    assert stats["perOrderValue"] == 1000
    assert stats["averageRating"] == 4.5
    assert stats["totalRatingsCount"] == 2
    assert stats["completionRate"] == 50.0
    assert stats["totalCustomers"] == 2
    assert stats["totalCustomersChange"] == 100.0
    # Jan expense 3100, only c2 has exactly one completed booking
    assert stats["cac"] == 3100
    assert stats["netPnL"] == -200
    # December: one completed booking of 1500
    assert stats["totalBookingsChange"] == 500.0
    assert stats["totalRevenueChange"] == 100.0
    # December CAC is also 3100 / 1
    assert stats["cacChange"] == 0.0


def test_dashboard_stats_rejects_inverted_range(ctx, client, override):
    override(get_analytics_service, lambda: _service(ctx, FakeAnalyticsRepository()))
    response = client.get("/api/dashboard/stats", params={"from": "2026-02-01", "to": "2026-01-01"})
    assert response.status_code == 400


def test_categories_endpoint(ctx, client, override):
    bookings = [
        booking("b1", COMPLETED, at(2026, 1, 5), sub_category_cart_refs=["cart/1"]),
        booking("b2", "Pending", at(2026, 1, 6), sub_category_cart_refs=["cart/1"]),
        booking("b3", COMPLETED, at(2026, 1, 7), sub_category_cart_refs=["cart/2"]),
        booking("b4", COMPLETED, at(2026, 1, 8), sub_category_cart_refs=["cart/3"]),
        booking("b5", COMPLETED, at(2026, 1, 9)),
    ]
    repo = FakeAnalyticsRepository(
        bookings=bookings,
        categories={"cart/1": "Deep Cleaning", "cart/2": "Electrical Repair", "cart/3": "Plumbing"},
    )
    override(get_analytics_service, lambda: _service(ctx, repo))

    response = client.get("/api/dashboard/categories", params={"from": "2026-01-01", "to": "2026-01-31"})
    assert response.json() == {"Cleaning": 2, "Electrical": 1, "Security": 0, "Driver": 0}


def test_monthly_cac(ctx):
    bookings = [
        booking("b1", COMPLETED, at(2026, 1, 5), customer_id="c1"),
        booking("b2", COMPLETED, at(2026, 1, 6), customer_id="c2"),
        booking("b3", "Pending", at(2026, 1, 7), customer_id="c9"),
        booking("b4", COMPLETED, at(2026, 2, 3), customer_id="c3"),
        booking("b5", COMPLETED, at(2026, 2, 4), customer_id="c3"),
    ]
    repo = FakeAnalyticsRepository(bookings=bookings)
    points = asyncio.run(_service(ctx, repo).monthly_cac("2026-01-01", "2026-02-28"))

    assert [p["key"] for p in points] == ["2026-01", "2026-02"]
    january, february = points
    assert january["monthLabel"] == "Jan 2026"
    assert january["marketingExpense"] == 3100
    assert january["customersWithOneBooking"] == 2
    assert january["cac"] == 1550
    assert january["changePct"] is None
    # Nobody with exactly one booking in February: CAC is 0, not a division error
    assert february["customersWithOneBooking"] == 0
    assert february["cac"] == 0
    assert february["changePct"] == -100.0
    assert february["changeDir"] == "down"
    assert repo.provider_limits == [CAC_PROVIDER_LIMIT]


def test_monthly_cac_prorates_partial_months(ctx):
    repo = FakeAnalyticsRepository(bookings=[booking("b1", COMPLETED, at(2026, 1, 20), customer_id="c1")])
    points = asyncio.run(_service(ctx, repo).monthly_cac("2026-01-22", "2026-01-31"))
    assert points[0]["marketingExpense"] == 1000
    assert points[0]["customersWithOneBooking"] == 0


def test_marketing_metrics(ctx):
    bookings = [
        booking(
            "b1",
            COMPLETED,
            at(2026, 1, 10),
            customer_id="c1",
            totalservice_price=1000,
            tax_amount=180,
            partner_fare=500,
            amount_paid=1180,
            sub_category_cart_refs=["cart/1"],
        ),
        booking("b2", "Cancelled", at(2026, 1, 10), customer_id="c2"),
        booking("b3", COMPLETED, at(2026, 1, 11), customer_id="c3"),
    ]
    complaints = [
        Complaint(id="k1", date_of_complaint=at(2026, 1, 10), complaint_status="Resolved"),
        Complaint(id="k2", date_of_complaint=at(2026, 1, 10), complaint_status="pending"),
    ]
    repo = FakeAnalyticsRepository(bookings=bookings, categories={"cart/1": "Cleaning"}, complaints=complaints)
    metrics = asyncio.run(_service(ctx, repo).marketing_metrics("2026-01-10"))

    assert metrics["date"] == "2026-01-10"
    assert metrics["completedBookings"] == 2
    assert metrics["cancelledBookings"] == 1
    assert metrics["totalBookingAmount"] == 1180
    assert metrics["netProfit"] == pytest.approx(612.06, abs=0.01)
    assert metrics["categories"]["Cleaning"] == 1
    assert metrics["totalComplaints"] == 2
    assert metrics["resolvedComplaints"] == 1
    # Latest sheet month (2800) over the 31 days of January, one first-time customer
    assert metrics["customerAcquisitionCost"] == pytest.approx(2800 / 31, abs=0.01)


def test_notification_count(ctx, client, override):
    repo = FakeAnalyticsRepository(pending_bookings=3, pending_complaints=2)
    override(get_analytics_service, lambda: _service(ctx, repo))
    assert client.get("/api/notifications/count").json() == {
        "pendingBookings": 3,
        "pendingComplaints": 2,
        "total": 5,
    }


def test_marketing_metrics_rejects_bad_date(ctx, client, override):
    override(get_analytics_service, lambda: _service(ctx, FakeAnalyticsRepository()))
    assert client.get("/api/marketing/metrics", params={"date": "10-01-2026"}).status_code == 400


def test_daily_overview_without_attendance(ctx):
    overview = asyncio.run(_service(ctx, FakeAnalyticsRepository()).daily_overview())
    assert overview["totalPresent"] == 0
    assert overview["partnersPresent"] == []
    assert overview["dailyAverageExpense"] > 0
