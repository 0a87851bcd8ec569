import json
from datetime import date

import httpx
import pytest

from dashboard.domain.analytics.router import get_analytics_service
from dashboard.domain.analytics.service import AnalyticsService
from dashboard.domain.reports.router import get_report_service
from dashboard.domain.reports.schemas import WhatsAppReport
from dashboard.domain.reports.service import (
    ReportService,
    format_inr,
    report_body_values,
    report_from_metrics,
)
from dashboard.domain.sheets.service import SheetService
from dashboard.services.msg91_service import Msg91Service, build_template_payload
from tests.fakes import FakeAnalyticsRepository, FakeSheetsClient

RECIPIENTS = ["919800000001", "919800000002"]


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0, "₹0"),
        (345, "₹345"),
        (3450, "₹3,450"),
        (845000, "₹8,45,000"),
        (1234567, "₹12,34,567"),
        (999.6, "₹1,000"),
        (-1500, "-₹1,500"),
    ],
)
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_report_body_values_order():
    report = WhatsAppReport(
        completedBookings=12,
        cancelledBookings=2,
        cleaning=7,
        electrical=3,
        security=1,
        driver=1,
        totalBookingAmount="₹24,000",
        netProfit="₹9,800",
        marginPercentage="40.8",
        customerAcquisitionCost="₹310",
        avgOrderValue="₹2,000",
        totalComplaints=4,
        resolvedComplaints=3,
    )
    values = report_body_values(report, date(2026, 1, 10))
    assert values == [
        "10/01/2026",
        "12",
        "2",
        "7",
        "3",
        "1",
        "1",
        "₹24,000",
        "₹9,800",
        "40.8%",
        "₹310",
        "₹2,000",
        "4",
        "3",
    ]


def test_report_from_metrics_formats_money():
    report = report_from_metrics(
        {
            "completedBookings": 3,
            "cancelledBookings": 1,
            "totalAmountPaid": 3540,
            "totalBookingAmount": 3540,
            "netProfit": 1836.18,
            "marginPercentage": 51.87,
            "avgOrderValue": 1180,
            "customerAcquisitionCost": 90.32,
            "categories": {"Cleaning": 2, "Electrical": 1},
            "totalComplaints": 0,
            "resolvedComplaints": 0,
        }
    )
    assert report.netProfit == "₹1,836"
    assert report.marginPercentage == "51.9"
    assert report.cleaning == "2"
    assert report.security == "0"
    assert report.customerAcquisitionCost == "₹90"


def test_template_payload_shape():
    payload = build_template_payload(["a", "b"], ["911"], "daily", "ns", "9100")
    template = payload["payload"]["template"]
    assert payload["integrated_number"] == "9100"
    assert template["name"] == "daily"
    assert template["language"] == {"code": "en", "policy": "deterministic"}
    assert template["to_and_components"] == [
        {
            "to": ["911"],
            "components": {
                "body_1": {"type": "text", "value": "a"},
                "body_2": {"type": "text", "value": "b"},
            },
        }
    ]


# ----------------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------------


def _msg91(seen, status_code=200, body=None, auth_key="test-key"):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=body if body is not None else {"type": "success"})

    return Msg91Service(auth_key, "https://msg91.test/bulk/", transport=httpx.MockTransport(handler))


def _report_service(tz, msg91):
    return ReportService(msg91, tz, recipients=RECIPIENTS)


def _components(request):
    payload = json.loads(request.content)
    return payload["payload"]["template"]["to_and_components"][0]


def test_send_report(client, override, tz):
    seen = []
    override(get_report_service, lambda: _report_service(tz, _msg91(seen)))

    response = client.post("/api/whatsapp", json={"completedBookings": 12, "marginPercentage": "40.2"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "WhatsApp report sent successfully",
        "data": {"type": "success"},
    }
    request = seen[0]
    assert request.headers["authkey"] == "test-key"
    target = _components(request)
    assert target["to"] == RECIPIENTS
    assert len(target["components"]) == 14
    assert target["components"]["body_2"]["value"] == "12"
    assert target["components"]["body_3"]["value"] == "0"
    assert target["components"]["body_10"]["value"] == "40.2%"


def test_send_report_without_auth_key(client, override, tz):
    seen = []
    override(get_report_service, lambda: _report_service(tz, _msg91(seen, auth_key=None)))

    response = client.post("/api/whatsapp", json={})

    assert response.status_code == 500
    assert response.json() == {"error": "MSG91_AUTH_KEY not configured"}
    assert seen == []


def test_send_report_propagates_upstream_status(client, override, tz):
    seen = []
    msg91 = _msg91(seen, status_code=401, body={"message": "Unauthorized"})
    override(get_report_service, lambda: _report_service(tz, msg91))

    response = client.post("/api/whatsapp", json={})

    assert response.status_code == 401
    assert response.json() == {
        "error": "Failed to send WhatsApp report",
        "details": {"message": "Unauthorized"},
    }


def test_send_report_network_error(client, override, tz):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    msg91 = Msg91Service("test-key", "https://msg91.test/bulk/", transport=httpx.MockTransport(handler))
    override(get_report_service, lambda: _report_service(tz, msg91))

    response = client.post("/api/whatsapp", json={})

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_sample_report_goes_to_first_recipient(client, override, tz):
    seen = []
    override(get_report_service, lambda: _report_service(tz, _msg91(seen)))

    response = client.post("/api/whatsapp/sample")

    assert response.status_code == 200
    target = _components(seen[0])
    assert target["to"] == RECIPIENTS[:1]
    assert target["components"]["body_2"]["value"] == "2,450"
    assert target["components"]["body_8"]["value"] == "₹8,45,000"
    assert target["components"]["body_14"]["value"] == "38"


def test_daily_report_uses_todays_metrics(client, override, tz, ctx):
    seen = []
    override(get_report_service, lambda: _report_service(tz, _msg91(seen)))
    override(
        get_analytics_service,
        lambda: AnalyticsService(ctx, SheetService(FakeSheetsClient()), repo=FakeAnalyticsRepository()),
    )

    response = client.post("/api/whatsapp/daily")

    assert response.status_code == 200
    components = _components(seen[0])["components"]
    assert components["body_2"]["value"] == "0"
    assert components["body_8"]["value"] == "₹0"
    assert components["body_10"]["value"] == "0.0%"
    # No first-time customers: CAC falls back to the daily expense
    assert components["body_11"]["value"].startswith("₹")
    assert components["body_11"]["value"] != "₹0"
