"""Analytics domain schemas - Pydantic models for dashboard responses"""

from typing import Optional

from pydantic import BaseModel


class BookingStats(BaseModel):
    totalBookings: int
    totalBookingsChange: float
    pendingBookings: int
    confirmedBookings: int
    completedBookings: int
    completedBookingsChange: float
    cancelledBookings: int
    totalRevenue: float
    totalRevenueChange: float
    netRevenue: float
    netRevenueChange: float
    perOrderValue: float
    perOrderValueChange: float
    totalCustomers: int
    totalCustomersChange: float
    averageRating: float
    totalRatingsCount: int
    completionRate: float
    totalOfferAmount: float
    cac: float
    cacChange: float
    netPnL: float


class CategoryCounts(BaseModel):
    Cleaning: int = 0
    Electrical: int = 0
    Security: int = 0
    Driver: int = 0


class MonthlyCACPoint(BaseModel):
    key: str
    monthLabel: str
    marketingExpense: float
    customersWithOneBooking: int
    cac: float
    changePct: Optional[float] = None
    changeDir: str = "flat"


class MarketingMetrics(BaseModel):
    date: str
    completedBookings: int
    cancelledBookings: int
    totalAmountPaid: float
    totalBookingAmount: float
    netProfit: float
    marginPercentage: float
    avgOrderValue: float
    customerAcquisitionCost: float
    categories: CategoryCounts
    totalComplaints: int
    resolvedComplaints: int


class DailyOverview(BaseModel):
    date: str
    dailyAverageExpense: float
    totalPresent: int
    partnersPresent: list[str]


class NotificationCounts(BaseModel):
    pendingBookings: int
    pendingComplaints: int
    total: int
