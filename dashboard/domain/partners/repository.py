"""Partner repository - Firestore reads for partner pages"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from ...database import (
    DashboardContext,
    chunked,
    resolve_ref,
    snapshot_data,
    stream_with_index_fallback,
)
from ...models import Booking, Customer, WalletIn, WalletOut, WalletOverall, to_float
from ...shared.validators import DateWindow

logger = logging.getLogger(__name__)

LEDGER_LIMIT = 200
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _sort_moment(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return _EPOCH
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class PartnerRepository:
    """Repository for partner Firestore queries"""

    @staticmethod
    def list_partners(ctx: DashboardContext) -> list[Customer]:
        """Providers and agency partners, each document once"""
        partners: dict[str, Customer] = {}
        for flag in ("userType.provider", "userType.AgencyPartner"):
            query = ctx.db.collection("customer").where(filter=FieldFilter(flag, "==", True))
            for doc in query.stream():
                if doc.id not in partners:
                    partners[doc.id] = Customer.from_doc(doc.id, doc.to_dict() or {})
        return list(partners.values())

    @staticmethod
    def get_partner(ctx: DashboardContext, partner_id: str) -> Optional[Customer]:
        data = snapshot_data(ctx.customer_ref(partner_id).get())
        if data is None:
            return None
        return Customer.from_doc(partner_id, data)

    @staticmethod
    def service_option_names(ctx: DashboardContext, option_ids: Iterable[str]) -> dict[str, str]:
        """service_subcategories names by document id, fetched in batches of 10"""
        names: dict[str, str] = {}
        collection = ctx.db.collection("service_subcategories")
        for ids in chunked(sorted(set(option_ids))):
            refs = [collection.document(i) for i in ids]
            query = collection.where(filter=FieldFilter("__name__", "in", refs))
            for doc in query.stream():
                names[doc.id] = (doc.to_dict() or {}).get("name")
        return names

    @staticmethod
    def get_customers(ctx: DashboardContext, customer_ids: Iterable[str]) -> dict[str, Customer]:
        refs = [ctx.customer_ref(cid) for cid in set(customer_ids) if cid]
        if not refs:
            return {}
        customers = {}
        for snapshot in ctx.db.get_all(refs):
            if snapshot.exists:
                customers[snapshot.id] = Customer.from_doc(snapshot.id, snapshot.to_dict() or {})
        return customers

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    @staticmethod
    def partner_bookings(ctx: DashboardContext, partner_id: str) -> list[Booking]:
        """All bookings assigned to the partner, newest first"""
        base = ctx.db.collection("bookings").where(
            filter=FieldFilter("provider_id", "==", ctx.customer_ref(partner_id))
        )
        docs = stream_with_index_fallback(
            ordered=lambda: base.order_by("date", direction=firestore.Query.DESCENDING).stream(),
            unordered=base.stream,
            sort_key=lambda doc: _sort_moment((doc.to_dict() or {}).get("date")),
        )
        return [Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in docs]

    @staticmethod
    def partner_bookings_in_window(
        ctx: DashboardContext, partner_id: str, window: Optional[DateWindow]
    ) -> list[Booking]:
        query = ctx.db.collection("bookings").where(
            filter=FieldFilter("provider_id", "==", ctx.customer_ref(partner_id))
        )
        if window:
            query = query.where(filter=FieldFilter("date", ">=", window.start)).where(
                filter=FieldFilter("date", "<=", window.end)
            )
        return [Booking.from_doc(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def cart_service_names(ctx: DashboardContext, sub_category_ref: Any) -> list[str]:
        """Service names of the cart lines pointing at a sub-category cart entry"""
        ref = resolve_ref(ctx.db, sub_category_ref)
        if ref is None:
            return []
        query = ctx.db.collection("cart").where(filter=FieldFilter("subCategoryCartId", "==", ref))
        names = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            names.append(data.get("service_name") or data.get("serviceName") or "Unknown Service")
        return names

    # ------------------------------------------------------------------
    # Wallet ledger
    # ------------------------------------------------------------------

    @staticmethod
    def wallet_overall(ctx: DashboardContext, partner_id: str) -> Optional[WalletOverall]:
        query = (
            ctx.db.collection("Wallet_Overall")
            .where(filter=FieldFilter("service_partner_id", "==", ctx.customer_ref(partner_id)))
            .limit(1)
        )
        for doc in query.stream():
            return WalletOverall.from_doc(doc.to_dict() or {})
        return None

    @staticmethod
    def loan_recovered(ctx: DashboardContext, partner_id: str) -> float:
        query = (
            ctx.db.collection("PartnerKitLoan")
            .where(filter=FieldFilter("partnerId", "==", ctx.customer_ref(partner_id)))
            .limit(1)
        )
        for doc in query.stream():
            return to_float((doc.to_dict() or {}).get("loanRecoveredAmount"))
        return 0.0

    @staticmethod
    def _ledger(ctx: DashboardContext, collection: str, partner_id: str, date_field: str) -> list:
        base = ctx.db.collection(collection).where(
            filter=FieldFilter("partnerId", "==", ctx.customer_ref(partner_id))
        )
        return stream_with_index_fallback(
            ordered=lambda: base.order_by(date_field, direction=firestore.Query.DESCENDING)
            .limit(LEDGER_LIMIT)
            .stream(),
            unordered=lambda: base.limit(LEDGER_LIMIT).stream(),
            sort_key=lambda doc: _sort_moment((doc.to_dict() or {}).get(date_field)),
        )

    @classmethod
    def wallet_ins(cls, ctx: DashboardContext, partner_id: str) -> list[WalletIn]:
        docs = cls._ledger(ctx, "Wallet_In_record", partner_id, "Timestamp")
        return [WalletIn.from_doc(doc.id, doc.to_dict() or {}) for doc in docs]

    @classmethod
    def wallet_outs(cls, ctx: DashboardContext, partner_id: str) -> list[WalletOut]:
        docs = cls._ledger(ctx, "Wallet_Transaction_record", partner_id, "spend_date")
        return [WalletOut.from_doc(doc.id, doc.to_dict() or {}) for doc in docs]
