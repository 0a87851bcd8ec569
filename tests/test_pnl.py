import asyncio
from datetime import date, datetime
from zoneinfo import ZoneInfo

import httpx
import pytest
from fastapi import HTTPException

from dashboard.domain.pnl.service import PnLService, bucket_settlements, build_pnl
from dashboard.domain.sheets.service import SheetService
from dashboard.services.razorpay_service import SETTLEMENTS_PAGE_SIZE, RazorpayService, get_razorpay_service
from dashboard.services.sheets_client import get_sheets_client
from tests.fakes import FakeSheetsClient

IST = ZoneInfo("Asia/Kolkata")


def _epoch(year, month, day):
    return int(datetime(year, month, day, 12, tzinfo=IST).timestamp())


def test_bucket_settlements_converts_paise_by_local_month():
    settlements = [
        {"amount": 150000, "created_at": _epoch(2026, 1, 5)},
        {"amount": 50000, "created_at": _epoch(2026, 1, 28)},
        {"amount": 99900, "created_at": _epoch(2026, 2, 1)},
        {"amount": 100},
    ]
    assert bucket_settlements(settlements, IST) == {"2026-01": 2000.0, "2026-02": 999.0}


def test_build_pnl_rows():
    months = [date(2026, 1, 1), date(2026, 2, 1), date(2026, 3, 1)]
    rows = build_pnl({"2026-01": 5000, "2026-02": 1000}, {"2026-01": 2000, "2026-02": 2500}, months)
    assert rows[0] == {
        "month": "Jan 2026",
        "expenses": 5000,
        "settlements": 2000,
        "netPnL": 3000,
        "status": "loss",
    }
    assert rows[1]["netPnL"] == -1500
    assert rows[1]["status"] == "profit"
    # An empty month nets to zero, which counts as a loss
    assert rows[2]["status"] == "loss"


def test_build_pnl_net_is_additive():
    months = [date(2026, 1, 1), date(2026, 2, 1)]
    expenses = {"2026-01": 1234.5, "2026-02": 800}
    settlements = {"2026-01": 1000, "2026-02": 950.25}
    rows = build_pnl(expenses, settlements, months)
    assert sum(r["netPnL"] for r in rows) == pytest.approx(
        sum(expenses.values()) - sum(settlements.values())
    )


def _razorpay_transport(pages, seen):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        skip = int(request.url.params["skip"])
        return httpx.Response(200, json={"items": pages.get(skip, [])})

    return httpx.MockTransport(handler)


def test_razorpay_pages_until_short_page():
    seen = []
    pages = {
        0: [{"amount": 100, "created_at": _epoch(2026, 1, 2)}] * SETTLEMENTS_PAGE_SIZE,
        SETTLEMENTS_PAGE_SIZE: [{"amount": 100, "created_at": _epoch(2026, 1, 3)}] * 3,
    }
    service = RazorpayService("key", "secret", transport=_razorpay_transport(pages, seen))
    start = datetime(2026, 1, 1, tzinfo=IST)
    end = datetime(2026, 1, 31, 23, 59, 59, tzinfo=IST)

    settlements = asyncio.run(service.list_settlements(start, end))

    assert len(settlements) == SETTLEMENTS_PAGE_SIZE + 3
    assert len(seen) == 2
    assert seen[0].headers["authorization"].startswith("Basic ")
    assert seen[0].url.params["count"] == str(SETTLEMENTS_PAGE_SIZE)
    assert seen[0].url.params["from"] == str(int(start.timestamp()))


def test_razorpay_stops_on_error_status():
    service = RazorpayService(
        "key", "secret", transport=httpx.MockTransport(lambda request: httpx.Response(502))
    )
    now = datetime(2026, 1, 31, tzinfo=IST)
    assert asyncio.run(service.list_settlements(now, now)) == []


def test_monthly_pnl_trailing_year():
    settlements = {0: [{"amount": 200000, "created_at": _epoch(2026, 1, 10)}]}
    service = PnLService(
        SheetService(FakeSheetsClient()),
        RazorpayService("key", "secret", transport=_razorpay_transport(settlements, [])),
        IST,
    )
    rows = asyncio.run(service.monthly_pnl(now=datetime(2026, 2, 15, 10, tzinfo=IST)))

    assert len(rows) == 12
    assert rows[0]["month"] == "Mar 2025"
    assert rows[-1]["month"] == "Feb 2026"
    january = rows[-2]
    assert january["expenses"] == 3100
    assert january["settlements"] == 2000
    assert january["netPnL"] == 1100


def test_monthly_pnl_without_credentials():
    service = PnLService(SheetService(FakeSheetsClient()), RazorpayService(None, None), IST)
    with pytest.raises(HTTPException) as exc:
        asyncio.run(service.monthly_pnl())
    assert exc.value.status_code == 500


def test_pnl_endpoint(client, override):
    override(get_sheets_client, lambda: FakeSheetsClient())
    override(
        get_razorpay_service,
        lambda: RazorpayService("key", "secret", transport=_razorpay_transport({}, [])),
    )
    response = client.get("/api/pnl")
    assert response.status_code == 200
    assert len(response.json()["data"]) == 12
