"""Report router - WhatsApp daily report endpoints"""

import logging
from typing import Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Body, Depends

from ...config import TIMEZONE
from ...services.msg91_service import Msg91Service, get_msg91_service
from ..analytics.router import get_analytics_service
from ..analytics.service import AnalyticsService
from .schemas import WhatsAppReport, WhatsAppSendResult
from .service import ReportService, report_from_metrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/whatsapp", tags=["Reports"])


def get_report_service(msg91: Msg91Service = Depends(get_msg91_service)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(msg91, ZoneInfo(TIMEZONE))


@router.post("", response_model=WhatsAppSendResult)
async def send_whatsapp_report(
    report: Optional[WhatsAppReport] = Body(None),
    service: ReportService = Depends(get_report_service),
):
    """Send the daily booking report with caller-supplied values"""
    return await service.send_report(report or WhatsAppReport())


@router.post("/sample", response_model=WhatsAppSendResult)
async def send_sample_report(service: ReportService = Depends(get_report_service)):
    return await service.send_sample()


@router.post("/daily", response_model=WhatsAppSendResult)
async def send_daily_report(
    service: ReportService = Depends(get_report_service),
    analytics: AnalyticsService = Depends(get_analytics_service),
):
    """Build today's report from the marketing metrics and send it"""
    metrics = await analytics.marketing_metrics()
    return await service.send_report(report_from_metrics(metrics))
