"""Analytics router - FastAPI endpoints for the dashboard home page"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...database import DashboardContext, get_context
from ..sheets.router import get_sheet_service
from ..sheets.service import SheetService
from .schemas import (
    BookingStats,
    CategoryCounts,
    DailyOverview,
    MarketingMetrics,
    MonthlyCACPoint,
    NotificationCounts,
)
from .service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analytics"])


def get_analytics_service(
    ctx: DashboardContext = Depends(get_context),
    sheets: SheetService = Depends(get_sheet_service),
) -> AnalyticsService:
    """Dependency injection for AnalyticsService"""
    return AnalyticsService(ctx, sheets)


@router.get("/dashboard/stats", response_model=BookingStats)
async def get_dashboard_stats(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Booking KPIs for the range (default: current month)"""
    return await service.get_stats(from_date, to_date)


@router.get("/dashboard/categories", response_model=CategoryCounts)
async def get_category_bookings(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.get_categories(from_date, to_date)


@router.get("/cac/monthly", response_model=list[MonthlyCACPoint])
async def get_monthly_cac(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Monthly customer acquisition cost (default: the last 6 calendar months)"""
    return await service.monthly_cac(from_date, to_date)


@router.get("/marketing/metrics", response_model=MarketingMetrics)
async def get_marketing_metrics(
    day: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD, default today"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return await service.marketing_metrics(day)


@router.get("/daily-overview", response_model=DailyOverview)
async def get_daily_overview(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.daily_overview()


@router.get("/notifications/count", response_model=NotificationCounts)
async def get_notification_count(service: AnalyticsService = Depends(get_analytics_service)):
    """Pending bookings plus pending complaints, polled by the header bell"""
    return await service.notification_counts()
