"""Analytics repository - Firestore reads behind the dashboard KPIs"""

import logging
from typing import Any, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from ...database import DashboardContext, chunked, resolve_ref, snapshot_data
from ...models import AttendanceMark, Booking, Complaint, Customer, ref_id
from ...shared.validators import DateWindow

logger = logging.getLogger(__name__)


def _count(query) -> int:
    """Server-side COUNT aggregation"""
    result = query.count().get()
    return int(result[0][0].value)


class AnalyticsRepository:
    """Repository for dashboard Firestore queries"""

    @staticmethod
    def provider_bookings(
        ctx: DashboardContext,
        window: DateWindow,
        status: Optional[str] = None,
        provider_limit: Optional[int] = None,
    ) -> list[Booking]:
        """Bookings of allowlisted providers dated within the window"""
        bookings: list[Booking] = []
        for refs in chunked(ctx.provider_refs(provider_limit)):
            query = (
                ctx.db.collection("bookings")
                .where(filter=FieldFilter("provider_id", "in", refs))
                .where(filter=FieldFilter("date", ">=", window.start))
                .where(filter=FieldFilter("date", "<=", window.end))
            )
            if status:
                query = query.where(filter=FieldFilter("status", "==", status))
            bookings.extend(Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream())
        return bookings

    @staticmethod
    def bookings_with_status(ctx: DashboardContext, window: DateWindow, status: str) -> list[Booking]:
        """Bookings with a status in the window, regardless of provider"""
        query = (
            ctx.db.collection("bookings")
            .where(filter=FieldFilter("status", "==", status))
            .where(filter=FieldFilter("date", ">=", window.start))
            .where(filter=FieldFilter("date", "<=", window.end))
        )
        return [Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def count_new_customers(ctx: DashboardContext, window: DateWindow) -> int:
        query = (
            ctx.db.collection("customer")
            .where(filter=FieldFilter("userType.customer", "==", True))
            .where(filter=FieldFilter("created_time", ">=", window.start))
            .where(filter=FieldFilter("created_time", "<=", window.end))
        )
        return _count(query)

    @staticmethod
    def category_name(ctx: DashboardContext, sub_category_ref: Any) -> Optional[str]:
        """Category name behind a service sub-category (sub-category → service_subCategory → name)"""
        ref = resolve_ref(ctx.db, sub_category_ref, "service_subcategories")
        if ref is None:
            return None
        sub_data = snapshot_data(ref.get())
        if not sub_data:
            return None
        category_ref = resolve_ref(ctx.db, sub_data.get("service_subCategory"), "Service_Categories")
        if category_ref is None:
            return None
        category_data = snapshot_data(category_ref.get())
        return (category_data or {}).get("name")

    @staticmethod
    def complaints(ctx: DashboardContext, window: DateWindow) -> list[Complaint]:
        query = (
            ctx.db.collection("customer_complain")
            .where(filter=FieldFilter("date_of_complaint", ">=", window.start))
            .where(filter=FieldFilter("date_of_complaint", "<=", window.end))
        )
        return [Complaint.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def count_pending_bookings(ctx: DashboardContext) -> int:
        query = ctx.db.collection("bookings").where(filter=FieldFilter("bookingStatus", "==", "Pending"))
        return _count(query)

    @staticmethod
    def count_pending_complaints(ctx: DashboardContext) -> int:
        query = ctx.db.collection("customer_complain").where(
            filter=FieldFilter("complaint_status", "==", "pending")
        )
        return _count(query)

    @staticmethod
    def present_attendance(ctx: DashboardContext) -> list[AttendanceMark]:
        query = ctx.db.collection("partner_attendence").where(filter=FieldFilter("status", "==", "Present"))
        return [AttendanceMark.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def get_customer(ctx: DashboardContext, customer_id: str) -> Optional[Customer]:
        data = snapshot_data(ctx.customer_ref(customer_id).get())
        if data is None:
            return None
        return Customer.from_doc(customer_id, data)

    @staticmethod
    def service_option_name(ctx: DashboardContext, service_opt: Any) -> Optional[str]:
        option_id = ref_id(service_opt)
        if not option_id:
            return None
        data = snapshot_data(ctx.db.collection("service_subcategories").document(option_id).get())
        return (data or {}).get("name")
