"""Report domain schemas"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class WhatsAppReport(BaseModel):
    """Daily report values, already formatted for display; numbers are accepted and stringified"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    completedBookings: str = "0"
    cancelledBookings: str = "0"
    totalAmountPaid: str = "0"
    netProfit: str = "0"
    marginPercentage: str = "0"
    avgOrderValue: str = "0"
    customerAcquisitionCost: str = "0"
    cleaning: str = "0"
    electrical: str = "0"
    security: str = "0"
    driver: str = "0"
    totalComplaints: str = "0"
    resolvedComplaints: str = "0"
    totalBookingAmount: str = "0"


class WhatsAppSendResult(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
