"""
Published Google Sheets client
Fetches the CSV export of a published sheet, with the response text cached in Redis
"""

import logging
from typing import Optional

import httpx

from ..cache import Cache, build_sheet_key, cache
from ..config import BOOKING_SHEET_CSV_URL, EXPENSE_SHEET_CSV_URL, SHEET_CACHE_TTL

logger = logging.getLogger(__name__)


class SheetFetchError(Exception):
    """Raised when a published sheet cannot be downloaded"""


class SheetsClient:
    """Reads the expense and booking ledgers published as CSV"""

    def __init__(
        self,
        expense_url: str = EXPENSE_SHEET_CSV_URL,
        booking_url: str = BOOKING_SHEET_CSV_URL,
        cache_ttl: int = SHEET_CACHE_TTL,
        cache_backend: Optional[Cache] = cache,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.expense_url = expense_url
        self.booking_url = booking_url
        self.cache_ttl = cache_ttl
        self.cache = cache_backend
        self.transport = transport

    async def fetch_csv(self, url: str) -> str:
        use_cache = self.cache is not None and self.cache_ttl > 0
        key = build_sheet_key(url)

        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        try:
            async with httpx.AsyncClient(
                transport=self.transport, timeout=30.0, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"❌ Failed to fetch published sheet: {e}")
            raise SheetFetchError(str(e)) from e

        text = response.text
        if use_cache:
            self.cache.set(key, text, ttl=self.cache_ttl)
        return text

    async def fetch_expense_csv(self) -> str:
        return await self.fetch_csv(self.expense_url)

    async def fetch_booking_csv(self) -> str:
        return await self.fetch_csv(self.booking_url)


def get_sheets_client() -> SheetsClient:
    """Dependency injection for SheetsClient"""
    return SheetsClient()
