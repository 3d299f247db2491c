"""
HTTP client for the Evolution-API-compatible WhatsApp gateway.

    POST {base_url}/message/sendText/{instance}
    apikey: {api_key}
    {"number": "...", "text": "..."}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from shared.config.settings import settings


class GatewayError(Exception):
    """The gateway could not be reached or rejected the message."""


@dataclass(frozen=True)
class GatewayCredentials:
    """Where and how to send: per-establishment or platform-wide."""

    base_url: str
    instance: Optional[str]
    api_key: Optional[str]

    @property
    def send_text_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/message/sendText/{self.instance or ''}"

    @classmethod
    def platform(cls) -> Optional["GatewayCredentials"]:
        """Credentials of the platform's own number, used for billing messages."""
        if not settings.platform_evolution_api_url:
            return None
        return cls(
            base_url=settings.platform_evolution_api_url,
            instance=settings.platform_evolution_instance,
            api_key=settings.platform_evolution_api_key,
        )


class WhatsAppGateway:
    """
    Thin async client. One call, one attempt; no retry.

    `transport` lets tests plug an httpx.MockTransport.
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout if timeout is not None else settings.notification_timeout_seconds
        self._transport = transport

    async def send_text(self, credentials: GatewayCredentials, number: str, text: str) -> int:
        """
        Send one text message.

        Returns:
            The gateway's HTTP status code.

        Raises:
            GatewayError: On network failure, timeout or a non-2xx answer.
        """
        headers = {"apikey": credentials.api_key or ""}
        payload = {"number": number, "text": text}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(credentials.send_text_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise GatewayError(f"{type(e).__name__}: {e}") from e

        if response.status_code >= 400:
            raise GatewayError(f"HTTP {response.status_code}")
        return response.status_code
