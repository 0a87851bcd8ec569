"""Sheet router - FastAPI endpoints for the published booking and expense sheets"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...services.sheets_client import SheetsClient, get_sheets_client
from ...shared.validators import parse_date_param
from .schemas import ExpenseBreakdown, SheetBookingPage, SheetBookingsResponse, SheetBookingStats
from .service import PAGE_SIZE, SheetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Sheets"])


def get_sheet_service(sheets: SheetsClient = Depends(get_sheets_client)) -> SheetService:
    """Dependency injection for SheetService"""
    return SheetService(sheets)


def _required_range(from_date: Optional[str], to_date: Optional[str]):
    if not from_date or not to_date:
        raise HTTPException(status_code=400, detail="'from' and 'to' are required")
    start = parse_date_param(from_date, "from")
    end = parse_date_param(to_date, "to")
    if start is None or end is None:
        raise HTTPException(status_code=400, detail="'from' and 'to' are required")
    if start > end:
        raise HTTPException(status_code=400, detail="'from' must not be after 'to'")
    return start, end


@router.get("/bookings/sheet", response_model=SheetBookingsResponse)
async def get_sheet_bookings(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: SheetService = Depends(get_sheet_service),
):
    """Bookings recorded in the booking sheet within [from, to], in sheet order"""
    start, end = _required_range(from_date, to_date)
    return {"data": await service.list_bookings(start, end)}


@router.get("/bookings/sheet/table", response_model=SheetBookingPage)
async def get_sheet_booking_table(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(PAGE_SIZE, ge=1, le=100),
    service: SheetService = Depends(get_sheet_service),
):
    start, end = _required_range(from_date, to_date)
    return await service.bookings_table(start, end, search, page, page_size)


@router.get("/bookings/sheet/stats", response_model=SheetBookingStats)
async def get_sheet_booking_stats(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: SheetService = Depends(get_sheet_service),
):
    start, end = _required_range(from_date, to_date)
    return await service.booking_stats(start, end)


@router.get("/expenses/breakdown", response_model=ExpenseBreakdown)
async def get_expense_breakdown(
    month: Optional[str] = Query(None, description="Month label as written in the sheet"),
    service: SheetService = Depends(get_sheet_service),
):
    """Per-category expenses for one month of the expense sheet (default: latest)"""
    return await service.expense_breakdown(month)
