"""Partner router - FastAPI endpoints for the partner directory and partner pages"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from ...database import DashboardContext, get_context
from ...services.attendance_service import AttendanceService, get_attendance_service
from .schemas import (
    PartnerAttendancePage,
    PartnerBookingPage,
    PartnerEarnings,
    PartnerFuel,
    PartnerRow,
    TopPartner,
)
from .service import PAGE_SIZE, PartnerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/partners", tags=["Partners"])

PartnerType = Literal["all", "provider", "agency"]
PartnerScope = Literal["all", "specific"]


def get_partner_service(
    ctx: DashboardContext = Depends(get_context),
    attendance: AttendanceService = Depends(get_attendance_service),
) -> PartnerService:
    """Dependency injection for PartnerService"""
    return PartnerService(ctx, attendance=attendance)


@router.get("", response_model=list[PartnerRow])
async def list_partners(
    from_date: Optional[str] = Query(None, alias="from", description="Join date from (YYYY-MM-DD)"),
    to_date: Optional[str] = Query(None, alias="to", description="Join date to (YYYY-MM-DD)"),
    search: Optional[str] = Query(None, description="Search name, phone or service"),
    type: PartnerType = Query("all"),
    scope: PartnerScope = Query("all", description="'specific' limits to the provider allowlist"),
    status: str = Query("all", description="Onboarding status"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.list_partners(from_date, to_date, search, type, scope, status)


@router.get("/export")
async def export_partners(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    search: Optional[str] = Query(None),
    type: PartnerType = Query("all"),
    scope: PartnerScope = Query("all"),
    status: str = Query("all"),
    service: PartnerService = Depends(get_partner_service),
):
    """Export the filtered partner list as CSV"""
    return await service.export_partners_csv(
        from_date=from_date,
        to_date=to_date,
        search=search,
        type_filter=type,
        scope=scope,
        status=status,
    )


@router.get("/top", response_model=list[TopPartner])
async def top_partners(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.top_partners(from_date, to_date)


@router.get("/{partner_id}/bookings", response_model=PartnerBookingPage)
async def partner_bookings(
    partner_id: str,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(PAGE_SIZE, ge=1, le=100),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.partner_bookings(partner_id, from_date, to_date, search, status, page, page_size)


@router.get("/{partner_id}/earnings", response_model=PartnerEarnings)
async def partner_earnings(
    partner_id: str,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    months_offset: int = Query(0, ge=0, description="Shift the 6-month chart back by this many months"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.earnings(partner_id, from_date, to_date, months_offset)


@router.get("/{partner_id}/fuel", response_model=PartnerFuel)
async def partner_fuel(
    partner_id: str,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.fuel_bills(partner_id, from_date, to_date)


@router.get("/{partner_id}/fuel/export")
async def export_partner_fuel(
    partner_id: str,
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.export_fuel_csv(partner_id, from_date, to_date)


@router.get("/{partner_id}/attendance", response_model=PartnerAttendancePage)
async def partner_attendance(
    partner_id: str,
    name: Optional[str] = Query(None, description="Employee name in the attendance system"),
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.attendance(partner_id, name, from_date, to_date, page)


@router.get("/{partner_id}/attendance/export")
async def export_partner_attendance(
    partner_id: str,
    name: Optional[str] = Query(None),
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: PartnerService = Depends(get_partner_service),
):
    return await service.export_attendance_csv(partner_id, name, from_date, to_date)
