"""
Firestore document models

Documents in the booking app are loosely typed (numbers stored as strings,
references stored as DocumentReference or path strings, optional fields).
Everything is decoded here, at the repository boundary, so services only
ever see these models.
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# Booking status lifecycle
STATUS_PENDING = "Pending"
STATUS_ACCEPTED = "Accepted"
STATUS_COMPLETED = "Service_Completed"
STATUS_CANCELLED = "Booking_Cancelled"
STATUS_CANCELLED_LEGACY = "Cancelled"

# Partner onboarding status when none is recorded
DEFAULT_PARTNER_STATUS = "Information_Unverified"


# ============================================================================
# FIELD COERCION
# ============================================================================


def ref_id(value: Any) -> Optional[str]:
    """Document id of a DocumentReference or a "collection/id" path string"""
    if value is None:
        return None
    doc_id = getattr(value, "id", None)
    if isinstance(doc_id, str):
        return doc_id
    if isinstance(value, str):
        value = value.strip().strip("/")
        return value.rsplit("/", 1)[-1] or None
    return None


def as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None]
    return [value]


def to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", "").replace("₹", "").strip())
    except ValueError:
        return 0.0


def to_datetime(value: Any) -> Optional[datetime]:
    """Firestore timestamps arrive as datetime; older docs carry ISO strings or epoch seconds"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    to_dt = getattr(value, "to_datetime", None)
    if callable(to_dt):
        return to_dt()
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FirestoreModel(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


# ============================================================================
# BOOKINGS
# ============================================================================


class FuelBill(FirestoreModel):
    bill_no: int
    amount: float = 0.0
    note: Optional[str] = None
    image_url: Optional[str] = None


class Booking(FirestoreModel):
    id: str
    status: Optional[str] = None
    date: Optional[datetime] = None
    time_slot: Optional[datetime] = None
    customer_id: Optional[str] = None
    provider_id: Optional[str] = None
    provider_name: Optional[str] = None
    amount_paid: float = 0.0
    wallet_amount_used: float = 0.0
    discount_amount: float = 0.0
    totalservice_price: float = 0.0
    tax_amount: float = 0.0
    partner_fare: float = 0.0
    otp: Optional[str] = None
    rating: Optional[float] = None
    # Raw references, needed for equality queries against other collections
    sub_category_cart_refs: list[Any] = Field(default_factory=list)
    fuel_bills: list[FuelBill] = Field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return (self.status or "").lower() in ("completed", STATUS_COMPLETED.lower())

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "Booking":
        tax = data.get("taxAmount")
        if tax is None:
            tax = data.get("tax_amount")
        rating = data.get("rating")
        return cls(
            id=doc_id,
            status=_text(data.get("status")),
            date=to_datetime(data.get("date")),
            time_slot=to_datetime(data.get("timeSlot")),
            customer_id=ref_id(data.get("customer_id")),
            provider_id=ref_id(data.get("provider_id")),
            provider_name=_text(data.get("provider_name")),
            amount_paid=to_float(data.get("amount_paid")),
            wallet_amount_used=to_float(data.get("walletAmountUsed")),
            discount_amount=to_float(data.get("discount_amount")),
            totalservice_price=to_float(data.get("totalservice_price")),
            tax_amount=to_float(tax),
            partner_fare=to_float(data.get("partner_fare")),
            otp=_text(data.get("otp")),
            rating=to_float(rating) if rating not in (None, "") else None,
            sub_category_cart_refs=as_list(data.get("subCategoryCart_id")),
            fuel_bills=_fuel_bills(data.get("partnerFuel")),
        )


def _fuel_bills(raw: Any) -> list[FuelBill]:
    """Each partnerFuel entry carries up to two bills (First*/Second* fields)"""
    bills = []
    for entry in as_list(raw):
        if not isinstance(entry, dict):
            continue
        for bill_no, prefix in ((1, "First"), (2, "Second")):
            image = _text(entry.get(f"{prefix}Bill"))
            amount = to_float(entry.get(f"{prefix}BillAmount"))
            if image is None and not amount:
                continue
            bills.append(
                FuelBill(
                    bill_no=bill_no,
                    amount=amount,
                    note=_text(entry.get(f"{prefix}Note")),
                    image_url=image,
                )
            )
    return bills


# ============================================================================
# CUSTOMERS / PARTNERS
# ============================================================================


class Customer(FirestoreModel):
    id: str
    uid: Optional[str] = None
    display_name: Optional[str] = None
    customer_name: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    contact_no: Optional[str] = None
    created_time: Optional[datetime] = None
    is_customer: bool = False
    is_provider: bool = False
    is_agency_partner: bool = False
    referral_code: Optional[str] = None
    referral_by: Optional[str] = None
    subscription: Optional[str] = None
    partner_status: Optional[str] = None
    partner_service_opt_ref: Any = None

    @property
    def full_name(self) -> Optional[str]:
        return self.display_name or self.customer_name or self.name

    @property
    def phone(self) -> Optional[str]:
        return self.phone_number or self.contact_no

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "Customer":
        user_type = data.get("userType") or {}
        if not isinstance(user_type, dict):
            user_type = {}
        return cls(
            id=doc_id,
            uid=_text(data.get("uid")),
            display_name=_text(data.get("display_name")),
            customer_name=_text(data.get("customer_name")),
            name=_text(data.get("name")),
            email=_text(data.get("email")),
            phone_number=_text(data.get("phone_number")),
            contact_no=_text(data.get("contact_no")),
            created_time=to_datetime(data.get("created_time")),
            is_customer=bool(user_type.get("customer")),
            is_provider=bool(user_type.get("provider")),
            is_agency_partner=bool(user_type.get("AgencyPartner")),
            referral_code=_text(data.get("referralCode")),
            referral_by=_text(data.get("referralBy")),
            subscription=_text(data.get("Subscription") or data.get("subscription")),
            partner_status=_text(data.get("partner_status")),
            partner_service_opt_ref=data.get("partner_serviceOpt"),
        )


# ============================================================================
# WALLET LEDGER
# ============================================================================


class WalletOverall(FirestoreModel):
    total_amount_in: float = 0.0
    total_balance: float = 0.0
    pending_amount: float = 0.0

    @classmethod
    def from_doc(cls, data: dict) -> "WalletOverall":
        return cls(
            total_amount_in=to_float(data.get("TotalAmountComeIn_Wallet")),
            total_balance=to_float(data.get("total_balance")),
            pending_amount=to_float(data.get("pending_amount")),
        )


class WalletIn(FirestoreModel):
    id: str
    amount: float = 0.0
    timestamp: Optional[datetime] = None
    booking_id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "WalletIn":
        return cls(
            id=doc_id,
            amount=to_float(data.get("payment_in_wallet")),
            timestamp=to_datetime(data.get("Timestamp")),
            booking_id=ref_id(data.get("bookingId")),
        )


class WalletOut(FirestoreModel):
    id: str
    amount: float = 0.0
    spend_date: Optional[datetime] = None
    payment_status: str = "Completed"
    note: Optional[str] = None
    deduction_type: Optional[str] = None
    payout_ids: list[str] = Field(default_factory=list)
    booking_id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "WalletOut":
        return cls(
            id=doc_id,
            amount=abs(to_float(data.get("PAyment_out_fromWallet"))),
            spend_date=to_datetime(data.get("spend_date")),
            payment_status=_text(data.get("PaymentStatus")) or "Completed",
            note=_text(data.get("Note")),
            deduction_type=_text(data.get("DetuctionType")),
            payout_ids=[str(p) for p in as_list(data.get("payout_id"))],
            booking_id=ref_id(data.get("bookingId")),
        )


# ============================================================================
# COMPLAINTS / ATTENDANCE
# ============================================================================


class Complaint(FirestoreModel):
    id: str
    date_of_complaint: Optional[datetime] = None
    complaint_status: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return (self.complaint_status or "").lower() == "resolved"

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "Complaint":
        return cls(
            id=doc_id,
            date_of_complaint=to_datetime(data.get("date_of_complaint")),
            complaint_status=_text(data.get("complaint_status")),
        )


class AttendanceMark(FirestoreModel):
    """A `partner_attendence` document"""

    id: str
    status: Optional[str] = None
    start_time: Optional[datetime] = None
    partner_id: Optional[str] = None

    @classmethod
    def from_doc(cls, doc_id: str, data: dict) -> "AttendanceMark":
        return cls(
            id=doc_id,
            status=_text(data.get("status")),
            start_time=to_datetime(data.get("startTime") or data.get("date")),
            partner_id=ref_id(data.get("partnerid")),
        )
