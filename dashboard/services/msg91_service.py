"""
MSG91 WhatsApp Service
Sends the daily booking report template through the MSG91 bulk outbound API
"""

import logging
from typing import Any, Optional, Sequence

import httpx

from ..config import (
    MSG91_API_URL,
    MSG91_AUTH_KEY,
    MSG91_INTEGRATED_NUMBER,
    MSG91_TEMPLATE_NAME,
    MSG91_TEMPLATE_NAMESPACE,
)

logger = logging.getLogger(__name__)


class Msg91ConfigError(Exception):
    """Raised when MSG91_AUTH_KEY is not configured"""


class Msg91Response:
    """Upstream status code plus decoded body"""

    def __init__(self, status_code: int, data: Any):
        self.status_code = status_code
        self.data = data

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def build_template_payload(
    body_values: Sequence[str],
    recipients: Sequence[str],
    template_name: str = MSG91_TEMPLATE_NAME,
    namespace: str = MSG91_TEMPLATE_NAMESPACE,
    integrated_number: str = MSG91_INTEGRATED_NUMBER,
) -> dict:
    """Bulk template message with positional text parameters body_1..body_N"""
    components = {
        f"body_{i}": {"type": "text", "value": str(value)}
        for i, value in enumerate(body_values, start=1)
    }
    return {
        "integrated_number": integrated_number,
        "content_type": "template",
        "payload": {
            "messaging_product": "whatsapp",
            "type": "template",
            "template": {
                "name": template_name,
                "language": {"code": "en", "policy": "deterministic"},
                "namespace": namespace,
                "to_and_components": [
                    {"to": list(recipients), "components": components},
                ],
            },
        },
    }


class Msg91Service:
    def __init__(
        self,
        auth_key: Optional[str] = MSG91_AUTH_KEY,
        api_url: str = MSG91_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth_key = auth_key
        self.api_url = api_url
        self.transport = transport

    async def send_template(self, payload: dict) -> Msg91Response:
        if not self.auth_key:
            raise Msg91ConfigError("MSG91_AUTH_KEY not configured")

        async with httpx.AsyncClient(transport=self.transport, timeout=30.0) as client:
            response = await client.post(
                self.api_url,
                json=payload,
                headers={"Content-Type": "application/json", "authkey": self.auth_key},
            )

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if response.is_success:
            logger.info("✅ WhatsApp report sent via MSG91")
        else:
            logger.error(f"❌ MSG91 rejected WhatsApp report: {response.status_code} - {data}")
        return Msg91Response(response.status_code, data)


def get_msg91_service() -> Msg91Service:
    """Dependency injection for Msg91Service"""
    return Msg91Service()
