"""Customer domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CustomerRow(BaseModel):
    id: str
    uid: Optional[str] = None
    name: Optional[str] = None
    displayName: Optional[str] = None
    customerName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    referralBy: Optional[str] = None
    referralCode: Optional[str] = None
    subscription: Optional[str] = None
    createdTime: Optional[datetime] = None
    bookingCount: int


class CustomerPage(BaseModel):
    items: list[CustomerRow]
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ReferralBooking(BaseModel):
    id: str
    status: Optional[str] = None
    date: Optional[str] = None
    amountPaid: float


class ReferralRow(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subscription: Optional[str] = None
    createdTime: Optional[datetime] = None
    totalBookings: int
    completedBookings: int
    totalSpent: float
    bookings: list[ReferralBooking]


class ReferralSummary(BaseModel):
    totalReferrals: int
    totalReferralBookings: int
    totalReferralEarnings: float


class ReferralPage(BaseModel):
    summary: ReferralSummary
    items: list[ReferralRow]
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool
