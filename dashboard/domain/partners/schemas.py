"""Partner domain schemas - Pydantic models for partner responses"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class PartnerRow(BaseModel):
    id: str
    name: str
    phone: str
    type: str
    serviceOptName: Optional[str] = None
    joinDate: Optional[datetime] = None
    status: str


class TopPartner(BaseModel):
    id: str
    name: str
    totalBookings: int
    completedBookings: int
    avgRating: float
    earnings: float
    pendingPayouts: float


class Page(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class PartnerBookingRow(BaseModel):
    id: str
    status: Optional[str] = None
    date: Optional[str] = None
    services: list[str]
    customerName: str
    customerPhone: str
    amountPaid: float
    otp: Optional[str] = None


class PartnerBookingStats(BaseModel):
    total: int
    completed: int
    pending: int
    revenue: float
    totalJobs: int


class PartnerBookingPage(Page):
    stats: PartnerBookingStats
    items: list[PartnerBookingRow]


class EarningsPoint(BaseModel):
    month: str
    amount: float


class PayIn(BaseModel):
    id: str
    amount: float
    date: Optional[str] = None
    bookingId: Optional[str] = None


class PayOut(BaseModel):
    id: str
    amount: float
    date: Optional[str] = None
    status: str
    note: Optional[str] = None
    deductionType: Optional[str] = None
    payoutIds: list[str] = []
    bookingId: Optional[str] = None


class PartnerEarnings(BaseModel):
    totalEarningsOverall: float
    currentBalance: float
    pendingPayouts: float
    loanRecoveredAmount: float
    netEarningsOverall: float
    thisMonthEarnings: float
    monthlyGrowth: float
    filteredEarnings: float
    filteredNetEarnings: float
    chart: list[EarningsPoint]
    payIns: list[PayIn]
    payOuts: list[PayOut]


class FuelBillRow(BaseModel):
    bookingId: str
    bookingDate: Optional[datetime] = None
    partnerName: str
    billNo: int
    amount: float
    note: Optional[str] = None
    imageUrl: Optional[str] = None


class PartnerFuel(BaseModel):
    total: float
    count: int
    bills: list[FuelBillRow]


class AttendanceKPIs(BaseModel):
    present: int
    missingOut: int
    avgHours: float


class PartnerAttendancePage(Page):
    kpis: AttendanceKPIs
    # Records are passed through as the attendance API returns them
    items: list[dict[str, Any]]
