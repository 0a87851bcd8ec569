import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Optional, TypeVar
from zoneinfo import ZoneInfo

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from .config import FIREBASE_PROJECT_ID, PROVIDER_IDS, TIMEZONE

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Firestore "in" filters accept at most this many values per query
FIRESTORE_IN_LIMIT = 10

_init_lock = threading.Lock()


def init_firebase_admin() -> None:
    """Initialize Firebase Admin SDK exactly once."""
    if firebase_admin._apps:
        return

    with _init_lock:
        if firebase_admin._apps:
            return
        try:
            cred = credentials.ApplicationDefault()
            firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with default credentials")
        except Exception as e:
            logger.warning(f"Default credentials unavailable ({e}); initializing with project ID only")
            firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})


def get_firestore_client():
    init_firebase_admin()
    return firestore.client()


@dataclass
class DashboardContext:
    """Per-request handle on the data sources: Firestore client plus the provider allowlist."""

    db: Any
    provider_ids: list[str] = field(default_factory=lambda: list(PROVIDER_IDS))
    tz: ZoneInfo = field(default_factory=lambda: ZoneInfo(TIMEZONE))

    def customer_ref(self, customer_id: str):
        return self.db.collection("customer").document(customer_id)

    def provider_refs(self, limit: Optional[int] = None) -> list:
        ids = self.provider_ids[:limit] if limit else self.provider_ids
        return [self.customer_ref(pid) for pid in ids]


def get_context() -> DashboardContext:
    """FastAPI dependency for the dashboard data context"""
    return DashboardContext(db=get_firestore_client())


def chunked(items: Iterable[T], size: int = FIRESTORE_IN_LIMIT) -> Iterator[list[T]]:
    chunk: list[T] = []
    for item in items:
        chunk.append(item)
        if len(chunk) == size:
            yield chunk
            chunk = []
    if chunk:
        yield chunk


def stream_with_index_fallback(
    ordered: Callable[[], Iterable[T]],
    unordered: Callable[[], Iterable[T]],
    sort_key: Callable[[T], Any],
    reverse: bool = True,
) -> list[T]:
    """
    Run an ordered query; if Firestore rejects it for a missing composite index,
    rerun without ordering and sort in memory instead.
    """
    try:
        return list(ordered())
    except google_exceptions.FailedPrecondition as e:
        logger.warning(f"⚠️ Ordered query needs an index, falling back to in-memory sort: {e}")
        return sorted(unordered(), key=sort_key, reverse=reverse)


def resolve_ref(db, value: Any, collection: Optional[str] = None):
    """DocumentReference for a stored reference, a "collection/id" path or a bare id"""
    if value is None:
        return None
    if hasattr(value, "path") and hasattr(value, "get"):
        return value
    if isinstance(value, str):
        value = value.strip().strip("/")
        if not value:
            return None
        if "/" in value:
            return db.document(value)
        if collection:
            return db.collection(collection).document(value)
    return None


def snapshot_data(snapshot) -> Optional[dict]:
    if snapshot is None or not snapshot.exists:
        return None
    return snapshot.to_dict() or {}
