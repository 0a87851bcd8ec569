"""P&L router"""

import logging
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...config import TIMEZONE
from ...services.razorpay_service import RazorpayService, get_razorpay_service
from ..sheets.router import get_sheet_service
from ..sheets.service import SheetService
from .service import PnLService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["P&L"])


class PnLMonth(BaseModel):
    month: str
    expenses: float
    settlements: float
    netPnL: float
    status: str


class PnLResponse(BaseModel):
    data: list[PnLMonth]


def get_pnl_service(
    sheets: SheetService = Depends(get_sheet_service),
    razorpay: RazorpayService = Depends(get_razorpay_service),
) -> PnLService:
    """Dependency injection for PnLService"""
    return PnLService(sheets, razorpay, ZoneInfo(TIMEZONE))


@router.get("/pnl", response_model=PnLResponse)
async def get_pnl(service: PnLService = Depends(get_pnl_service)):
    """Monthly expenses vs settlements for the trailing 12 months"""
    return {"data": await service.monthly_pnl()}
