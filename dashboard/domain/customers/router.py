"""Customer router - FastAPI endpoints for the customer directory and referrals"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from ...database import DashboardContext, get_context
from .schemas import CustomerPage, ReferralPage
from .service import PAGE_SIZE, REFERRAL_PAGE_SIZE, CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"])

BookingFilter = Literal["all", "0", "1", "2", "2plus"]


def get_customer_service(ctx: DashboardContext = Depends(get_context)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(ctx)


@router.get("", response_model=CustomerPage)
async def list_customers(
    from_date: Optional[str] = Query(None, alias="from", description="Created from (default 2025-04-01)"),
    to_date: Optional[str] = Query(None, alias="to", description="Created to (default today)"),
    search: Optional[str] = Query(None, description="Search name, email, phone, uid or referral code"),
    bookings: BookingFilter = Query("all", description="Booking count filter; '2plus' means 3 or more"),
    page: int = Query(1, ge=1),
    page_size: int = Query(PAGE_SIZE, ge=1, le=100),
    service: CustomerService = Depends(get_customer_service),
):
    return await service.customer_page(from_date, to_date, search, bookings, page, page_size)


@router.get("/export")
async def export_customers(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    search: Optional[str] = Query(None),
    bookings: BookingFilter = Query("all"),
    format: Literal["csv", "xlsx"] = Query("csv"),
    service: CustomerService = Depends(get_customer_service),
):
    """Export the filtered customer list"""
    return await service.export_customers(
        format,
        from_date=from_date,
        to_date=to_date,
        search=search,
        booking_filter=bookings,
    )


@router.get("/{customer_id}/referrals", response_model=ReferralPage)
async def customer_referrals(
    customer_id: str,
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(REFERRAL_PAGE_SIZE, ge=1, le=100),
    service: CustomerService = Depends(get_customer_service),
):
    return await service.referrals(customer_id, search, page, page_size)


@router.get("/{customer_id}/referrals/export")
async def export_customer_referrals(
    customer_id: str,
    search: Optional[str] = Query(None),
    service: CustomerService = Depends(get_customer_service),
):
    """Referred customers as an Excel workbook"""
    return await service.export_referrals(customer_id, search)
