"""HTTP client for the WhatsApp gateway that owns the chat session."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from gemini_bridge.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A message could not be handed to the chat transport."""


class ChatTransport:
    async def send_message(self, chat_id: str, text: str) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class HttpGatewayTransport(ChatTransport):
    """Sends outgoing messages through the gateway's REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings = settings or get_settings()
        self._base_url = settings.gateway_url.rstrip("/")
        headers = {}
        if settings.gateway_token:
            headers["X-Gateway-Token"] = settings.gateway_token
        self._client = client or httpx.AsyncClient(
            timeout=settings.gateway_timeout, headers=headers
        )

    async def send_message(self, chat_id: str, text: str) -> None:
        url = f"{self._base_url}/messages"
        try:
            response = await self._client.post(url, json={"chatId": chat_id, "text": text})
            response.raise_for_status()
        except httpx.RequestError as exc:
            raise TransportError(f"Failed to reach gateway: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"gateway error {exc.response.status_code}: {exc.response.text}"
            ) from exc

    async def aclose(self) -> None:
        await self._client.aclose()
