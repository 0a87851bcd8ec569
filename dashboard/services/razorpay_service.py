"""
Razorpay Service
Reads settlements (payouts to the business bank account) for the P&L report
"""

import logging
from datetime import datetime
from typing import Any, Optional

import httpx

from ..config import RAZORPAY_API_BASE, RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET

logger = logging.getLogger(__name__)

SETTLEMENTS_PAGE_SIZE = 100


class RazorpayConfigError(Exception):
    """Raised when Razorpay API credentials are not configured"""


class RazorpayService:
    """Minimal Razorpay REST client (Basic auth with key id / secret)"""

    def __init__(
        self,
        key_id: Optional[str] = RAZORPAY_KEY_ID,
        key_secret: Optional[str] = RAZORPAY_KEY_SECRET,
        base_url: str = RAZORPAY_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    async def list_settlements(self, start: datetime, end: datetime) -> list[dict[str, Any]]:
        """
        Fetch every settlement created between start and end.

        Pages through /settlements until a short page; a non-2xx response ends
        the scan with whatever was collected so far.
        """
        if not self.key_id or not self.key_secret:
            raise RazorpayConfigError("RAZORPAY_KEY_ID / RAZORPAY_KEY_SECRET not configured")

        settlements: list[dict[str, Any]] = []
        skip = 0
        async with httpx.AsyncClient(
            auth=(self.key_id, self.key_secret), transport=self.transport, timeout=30.0
        ) as client:
            while True:
                params = {
                    "count": SETTLEMENTS_PAGE_SIZE,
                    "skip": skip,
                    "from": int(start.timestamp()),
                    "to": int(end.timestamp()),
                }
                response = await client.get(f"{self.base_url}/settlements", params=params)
                if not response.is_success:
                    logger.warning(
                        f"⚠️ Razorpay settlements page (skip={skip}) failed: {response.status_code}"
                    )
                    break

                items = response.json().get("items") or []
                settlements.extend(items)
                if len(items) < SETTLEMENTS_PAGE_SIZE:
                    break
                skip += SETTLEMENTS_PAGE_SIZE

        logger.info(f"✅ Fetched {len(settlements)} Razorpay settlements")
        return settlements


def get_razorpay_service() -> RazorpayService:
    """Dependency injection for RazorpayService"""
    return RazorpayService()
