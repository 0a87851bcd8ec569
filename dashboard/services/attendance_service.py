"""
Attendance API Service
Partner punch-in / punch-out records from the third-party attendance system
"""

import logging
from datetime import date, datetime
from typing import Any, Optional

import httpx

from ..config import ATTENDANCE_API_URL

logger = logging.getLogger(__name__)

_TIME_FORMATS = ("%H:%M:%S", "%H:%M", "%I:%M:%S %p", "%I:%M %p")


class AttendanceAPIError(Exception):
    """Raised when the attendance API is unreachable or reports a failure"""


def parse_attendance_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in ("%d-%m-%Y", "%d/%m/%Y", "%m/%d/%Y"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_punch(day: Optional[date], value: Optional[str]) -> Optional[datetime]:
    """Combine the attendance date with an In/Out time"""
    if day is None or not value:
        return None
    text = str(value).strip()
    for fmt in _TIME_FORMATS:
        try:
            return datetime.combine(day, datetime.strptime(text, fmt).time())
        except ValueError:
            continue
    try:
        # Some records carry a full timestamp instead of a bare time
        return datetime.fromisoformat(text.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


class AttendanceService:
    def __init__(
        self,
        api_url: str = ATTENDANCE_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.transport = transport

    async def fetch_records(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> list[dict[str, Any]]:
        """All attendance records, optionally restricted to [start, end] upstream"""
        params = {}
        if start and end:
            params = {"start": start.isoformat(), "end": end.isoformat()}

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=20.0) as client:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Attendance API request failed: {e}")
            raise AttendanceAPIError(str(e)) from e

        if payload.get("status") != "success":
            logger.error(f"❌ Attendance API returned an error payload: {payload}")
            raise AttendanceAPIError("Attendance API reported failure")

        return payload.get("data") or []


def get_attendance_service() -> AttendanceService:
    """Dependency injection for AttendanceService"""
    return AttendanceService()
