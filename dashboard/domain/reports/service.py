"""Report service - Daily booking report delivered as a WhatsApp template"""

import logging
from datetime import date, datetime
from typing import Optional, Sequence

import httpx
from fastapi.responses import JSONResponse

from ...config import WHATSAPP_REPORT_RECIPIENTS
from ...services.msg91_service import Msg91ConfigError, Msg91Service, build_template_payload
from .schemas import WhatsAppReport

logger = logging.getLogger(__name__)

# Fixed values used to smoke-test the template
SAMPLE_REPORT_VALUES = (
    "2,450",
    "125",
    "850",
    "620",
    "520",
    "460",
    "₹8,45,000",
    "₹4,20,500",
    "49.7%",
    "₹345",
    "₹3,450",
    "45",
    "38",
)


def format_inr(amount: float) -> str:
    """Whole rupees with Indian digit grouping, e.g. 845000 -> "₹8,45,000" """
    rounded = int(round(amount))
    digits = str(abs(rounded))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    sign = "-" if rounded < 0 else ""
    return f"{sign}₹{digits}"


def report_date(today: date) -> str:
    return today.strftime("%d/%m/%Y")


def report_body_values(report: WhatsAppReport, today: date) -> list[str]:
    """Template parameters body_1..body_14 in template order"""
    return [
        report_date(today),
        report.completedBookings,
        report.cancelledBookings,
        report.cleaning,
        report.electrical,
        report.security,
        report.driver,
        report.totalBookingAmount,
        report.netProfit,
        f"{report.marginPercentage}%",
        report.customerAcquisitionCost,
        report.avgOrderValue,
        report.totalComplaints,
        report.resolvedComplaints,
    ]


def report_from_metrics(metrics: dict) -> WhatsAppReport:
    """Format a marketing-metrics snapshot for the WhatsApp template"""
    categories = metrics.get("categories") or {}
    return WhatsAppReport(
        completedBookings=str(metrics["completedBookings"]),
        cancelledBookings=str(metrics["cancelledBookings"]),
        totalAmountPaid=format_inr(metrics["totalAmountPaid"]),
        netProfit=format_inr(metrics["netProfit"]),
        marginPercentage=f"{metrics['marginPercentage']:.1f}",
        avgOrderValue=format_inr(metrics["avgOrderValue"]),
        customerAcquisitionCost=format_inr(metrics["customerAcquisitionCost"]),
        cleaning=str(categories.get("Cleaning", 0)),
        electrical=str(categories.get("Electrical", 0)),
        security=str(categories.get("Security", 0)),
        driver=str(categories.get("Driver", 0)),
        totalComplaints=str(metrics["totalComplaints"]),
        resolvedComplaints=str(metrics["resolvedComplaints"]),
        totalBookingAmount=format_inr(metrics["totalBookingAmount"]),
    )


class ReportService:
    def __init__(
        self,
        msg91: Msg91Service,
        tz,
        recipients: Optional[Sequence[str]] = None,
    ):
        self.msg91 = msg91
        self.tz = tz
        self.recipients = list(recipients if recipients is not None else WHATSAPP_REPORT_RECIPIENTS)

    def today(self) -> date:
        return datetime.now(self.tz).date()

    async def _send(self, body_values: Sequence[str], recipients: Sequence[str]):
        payload = build_template_payload(body_values, recipients)
        try:
            result = await self.msg91.send_template(payload)
        except Msg91ConfigError as e:
            logger.error(f"❌ WhatsApp report not sent: {e}")
            return JSONResponse(status_code=500, content={"error": "MSG91_AUTH_KEY not configured"})
        except httpx.HTTPError as e:
            logger.error(f"❌ Error sending WhatsApp report: {e}")
            return JSONResponse(status_code=500, content={"error": "Internal server error"})

        if not result.ok:
            return JSONResponse(
                status_code=result.status_code,
                content={"error": "Failed to send WhatsApp report", "details": result.data},
            )

        logger.info(f"📊 WhatsApp report delivered to {len(recipients)} recipient(s)")
        return {"success": True, "message": "WhatsApp report sent successfully", "data": result.data}

    async def send_report(self, report: WhatsAppReport):
        return await self._send(report_body_values(report, self.today()), self.recipients)

    async def send_sample(self):
        """Template smoke test to the first recipient only"""
        values = [report_date(self.today()), *SAMPLE_REPORT_VALUES]
        return await self._send(values, self.recipients[:1])
