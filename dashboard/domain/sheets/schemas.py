"""Sheet domain schemas - Pydantic models for spreadsheet-backed responses"""

from typing import Optional

from pydantic import BaseModel


class SheetBooking(BaseModel):
    id: str
    bookingDate: str
    customerName: str = ""
    service: str = ""
    phone: str = ""
    address: str = ""
    partnerName: str = ""
    source: str = ""
    amount: float = 0
    arriveTime: str = ""
    status: str = ""
    feedback: str = ""


class SheetBookingsResponse(BaseModel):
    data: list[SheetBooking]


class SheetBookingPage(BaseModel):
    items: list[SheetBooking]
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class SheetBookingStats(BaseModel):
    totalBookings: int
    totalRevenue: float
    topPartner: str
    topLeadSource: str


class ExpenseItem(BaseModel):
    name: str
    value: float
    percentage: float


class ExpenseBreakdown(BaseModel):
    months: list[str]
    selectedMonth: Optional[str] = None
    total: float
    items: list[ExpenseItem]
