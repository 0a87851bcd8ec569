"""Customer repository - Firestore reads for the customer directory and referrals"""

import logging
from typing import Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ...database import DashboardContext, snapshot_data, stream_with_index_fallback
from ...models import Booking, Customer
from ...shared.validators import DateWindow

logger = logging.getLogger(__name__)


class CustomerRepository:
    """Repository for customer Firestore queries"""

    @staticmethod
    def customers_created_in(ctx: DashboardContext, window: DateWindow) -> list[Customer]:
        """Customer accounts created in the window, newest first"""
        base = (
            ctx.db.collection("customer")
            .where(filter=FieldFilter("userType.customer", "==", True))
            .where(filter=FieldFilter("created_time", ">=", window.start))
            .where(filter=FieldFilter("created_time", "<=", window.end))
        )
        docs = stream_with_index_fallback(
            ordered=lambda: base.order_by("created_time", direction=firestore.Query.DESCENDING).stream(),
            unordered=base.stream,
            sort_key=lambda doc: (doc.to_dict() or {}).get("created_time") or window.start,
        )
        return [Customer.from_doc(doc.id, doc.to_dict() or {}) for doc in docs]

    @staticmethod
    def bookings_in(ctx: DashboardContext, window: DateWindow) -> list[Booking]:
        query = (
            ctx.db.collection("bookings")
            .where(filter=FieldFilter("date", ">=", window.start))
            .where(filter=FieldFilter("date", "<=", window.end))
        )
        return [Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def get_customer(ctx: DashboardContext, customer_id: str) -> Optional[Customer]:
        data = snapshot_data(ctx.customer_ref(customer_id).get())
        if data is None:
            return None
        return Customer.from_doc(customer_id, data)

    @staticmethod
    def referred_customers(ctx: DashboardContext, referral_code: str) -> list[Customer]:
        query = ctx.db.collection("customer").where(filter=FieldFilter("referralBy", "==", referral_code))
        return [Customer.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def customer_bookings(ctx: DashboardContext, customer_id: str) -> list[Booking]:
        query = ctx.db.collection("bookings").where(
            filter=FieldFilter("customer_id", "==", ctx.customer_ref(customer_id))
        )
        return [Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]
