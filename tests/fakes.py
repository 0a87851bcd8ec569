"""In-memory stand-ins for the Firestore repositories and upstream clients"""

from datetime import datetime, timezone
from typing import Optional

from dashboard.models import Booking, Complaint, Customer, WalletIn, WalletOut, WalletOverall
from dashboard.services.sheets_client import SheetFetchError

EXPENSE_CSV = """Month,Rent,Salaries,Marketing,Total
Dec 25,1000,2000,100,3100
Jan 26,1000,1500,600,3100
Feb 26,800,1500,500,2800
"""

BOOKING_CSV = """Date,Customer Name,Service,Contact Info,Address,Patner Name,Source,Service Pric,Arrive Time,Status,Feedback
01/15/2026,Asha,Deep Cleaning,9876500001,"12, MG Road",Ravi,Instagram,"₹1,200",10:00,Done,Good
20/01/2026,Vikram,Sofa Cleaning,9876500002,Indore,Ravi,Google,800,11:00,Done,
02/05/2026,Neha,Electrical Repair,9876500003,Bhopal,Sunil,Google,500,09:00,Done,
not a date,Ghost,Cleaning,0,Nowhere,Nobody,Walk-in,100,,,
"""


def at(year: int, month: int, day: int, hour: int = 6) -> datetime:
    """UTC timestamp; 06:00 UTC is 11:30 in India, safely inside the local day"""
    return datetime(year, month, day, hour, 0, tzinfo=timezone.utc)


def booking(booking_id: str, status: str, when: Optional[datetime], **fields) -> Booking:
    return Booking(id=booking_id, status=status, date=when, **fields)


class FakeSheetsClient:
    def __init__(self, expense_csv: str = EXPENSE_CSV, booking_csv: str = BOOKING_CSV, fail: bool = False):
        self.expense_csv = expense_csv
        self.booking_csv = booking_csv
        self.fail = fail

    async def fetch_expense_csv(self) -> str:
        if self.fail:
            raise SheetFetchError("sheet unavailable")
        return self.expense_csv

    async def fetch_booking_csv(self) -> str:
        if self.fail:
            raise SheetFetchError("sheet unavailable")
        return self.booking_csv


class FakeAnalyticsRepository:
    def __init__(
        self,
        bookings=(),
        categories: Optional[dict] = None,
        complaints=(),
        customer_signups=(),
        pending_bookings: int = 0,
        pending_complaints: int = 0,
    ):
        self.bookings = list(bookings)
        self.categories = categories or {}
        self.complaint_docs = list(complaints)
        self.customer_signups = list(customer_signups)
        self.pending_bookings = pending_bookings
        self.pending_complaints = pending_complaints
        self.provider_limits = []

    def provider_bookings(self, ctx, window, status=None, provider_limit=None):
        self.provider_limits.append(provider_limit)
        return [
            b
            for b in self.bookings
            if window.contains(b.date) and (status is None or b.status == status)
        ]

    def bookings_with_status(self, ctx, window, status):
        return [b for b in self.bookings if window.contains(b.date) and b.status == status]

    def count_new_customers(self, ctx, window):
        return sum(1 for created in self.customer_signups if window.contains(created))

    def category_name(self, ctx, sub_category_ref):
        return self.categories.get(sub_category_ref)

    def complaints(self, ctx, window):
        return [c for c in self.complaint_docs if window.contains(c.date_of_complaint)]

    def count_pending_bookings(self, ctx):
        return self.pending_bookings

    def count_pending_complaints(self, ctx):
        return self.pending_complaints

    def present_attendance(self, ctx):
        return []

    def get_customer(self, ctx, customer_id):
        return None

    def service_option_name(self, ctx, service_opt):
        return None


class FakePartnerRepository:
    def __init__(
        self,
        partners=(),
        option_names: Optional[dict] = None,
        bookings: Optional[dict] = None,
        cart: Optional[dict] = None,
        customers: Optional[dict] = None,
        wallets: Optional[dict] = None,
        loans: Optional[dict] = None,
        pay_ins: Optional[dict] = None,
        pay_outs: Optional[dict] = None,
    ):
        self.partners = {p.id: p for p in partners}
        self.option_names = option_names or {}
        self.bookings = bookings or {}
        self.cart = cart or {}
        self.customers = customers or {}
        self.wallets = wallets or {}
        self.loans = loans or {}
        self.pay_ins = pay_ins or {}
        self.pay_outs = pay_outs or {}

    def list_partners(self, ctx):
        return list(self.partners.values())

    def get_partner(self, ctx, partner_id):
        return self.partners.get(partner_id)

    def service_option_names(self, ctx, option_ids):
        return {i: self.option_names[i] for i in option_ids if i in self.option_names}

    def get_customers(self, ctx, customer_ids):
        return {cid: self.customers[cid] for cid in customer_ids if cid in self.customers}

    def partner_bookings(self, ctx, partner_id):
        return list(self.bookings.get(partner_id, []))

    def partner_bookings_in_window(self, ctx, partner_id, window):
        bookings = self.bookings.get(partner_id, [])
        if window is None:
            return list(bookings)
        return [b for b in bookings if window.contains(b.date)]

    def cart_service_names(self, ctx, sub_category_ref):
        return list(self.cart.get(sub_category_ref, []))

    def wallet_overall(self, ctx, partner_id):
        return self.wallets.get(partner_id)

    def loan_recovered(self, ctx, partner_id):
        return self.loans.get(partner_id, 0.0)

    def wallet_ins(self, ctx, partner_id):
        return list(self.pay_ins.get(partner_id, []))

    def wallet_outs(self, ctx, partner_id):
        return list(self.pay_outs.get(partner_id, []))


class FakeCustomerRepository:
    def __init__(self, customers=(), bookings=()):
        self.customers = {c.id: c for c in customers}
        self.bookings = list(bookings)

    def customers_created_in(self, ctx, window):
        rows = [c for c in self.customers.values() if c.is_customer and window.contains(c.created_time)]
        return sorted(rows, key=lambda c: c.created_time, reverse=True)

    def bookings_in(self, ctx, window):
        return [b for b in self.bookings if window.contains(b.date)]

    def get_customer(self, ctx, customer_id):
        return self.customers.get(customer_id)

    def referred_customers(self, ctx, referral_code):
        return [c for c in self.customers.values() if c.referral_by == referral_code]

    def customer_bookings(self, ctx, customer_id):
        return [b for b in self.bookings if b.customer_id == customer_id]


class FakeAttendanceService:
    def __init__(self, records=()):
        self.records = list(records)
        self.calls = []

    async def fetch_records(self, start=None, end=None):
        self.calls.append((start, end))
        return list(self.records)


__all__ = [
    "BOOKING_CSV",
    "EXPENSE_CSV",
    "Complaint",
    "Customer",
    "FakeAnalyticsRepository",
    "FakeAttendanceService",
    "FakeCustomerRepository",
    "FakePartnerRepository",
    "FakeSheetsClient",
    "WalletIn",
    "WalletOut",
    "WalletOverall",
    "at",
    "booking",
]
