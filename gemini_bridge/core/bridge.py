import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Optional

from gemini_bridge.core.config import DEFAULT_FOOTER
from gemini_bridge.core.history_store import HistoryStore
from gemini_bridge.core.prompt import assemble_prompt
from gemini_bridge.services.llm import LLMClient
from gemini_bridge.services.pairing import PairingPage
from gemini_bridge.services.transport import ChatTransport, TransportError

logger = logging.getLogger(__name__)


NO_RESPONSE_TEXT = "I couldn’t generate a response. Please try again."
ERROR_TEXT = "There was an error generating a response."


@dataclass
class ChatMessage:
    sender_id: str
    body: str
    type: str = "chat"


class ReplyDispatcher:
    """Relays outgoing text to the chat transport; failures are logged and dropped."""

    def __init__(self, transport: ChatTransport):
        self.transport = transport

    async def send(self, sender_id: str, text: str) -> bool:
        try:
            await self.transport.send_message(sender_id, text)
        except TransportError as e:
            logger.error("Error sending message to %s: %s", sender_id, e)
            return False

        logger.info("Response sent to %s", sender_id)
        return True


class MessageBridge:
    """
    Event handler between the chat transport and the completion API.

    Flow for an inbound message:
    1. prompt = stored turns + new message
    2. record user turn
    3. call the completion client
    4. record ai turn (success only)
    5. send reply (+ footer on success)

    Messages from one sender are handled one at a time, in arrival order.
    """

    def __init__(
        self,
        llm: LLMClient,
        transport: ChatTransport,
        history: Optional[HistoryStore] = None,
        pairing: Optional[PairingPage] = None,
        footer: str = DEFAULT_FOOTER,
    ):
        self.llm = llm
        self.history = history if history is not None else HistoryStore()
        self.pairing = pairing if pairing is not None else PairingPage()
        self.dispatcher = ReplyDispatcher(transport)
        self.footer = footer
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ============ completion ============
    async def get_ai_response(self, message: str, sender_id: str) -> str:
        async with self._locks[sender_id]:
            return await self._respond(message, sender_id)

    async def _respond(self, message: str, sender_id: str) -> str:
        prompt = assemble_prompt(self.history.get(sender_id), message)
        self.history.add_user_message(sender_id, message)

        try:
            ai_text = await self.llm.generate(prompt)
        except Exception:
            logger.exception("Error fetching AI response for %s", sender_id)
            return ERROR_TEXT

        if not ai_text:
            logger.warning("No valid response received from the completion API")
            return NO_RESPONSE_TEXT

        logger.debug("AI response for %s: %s", sender_id, ai_text)
        self.history.add_ai_message(sender_id, ai_text)
        return ai_text + self.footer

    # ============ transport events ============
    async def handle_message(self, msg: ChatMessage) -> Optional[bool]:
        if msg.type == "status":
            logger.info("Ignoring status update from %s", msg.sender_id)
            return None

        logger.info("Received message from %s: %s", msg.sender_id, msg.body)
        async with self._locks[msg.sender_id]:
            reply = await self._respond(msg.body, msg.sender_id)
            return await self.dispatcher.send(msg.sender_id, reply)

    def handle_qr(self, code: str) -> bool:
        return self.pairing.publish(code)

    def handle_ready(self) -> None:
        logger.info("WhatsApp client is ready!")

    def handle_authenticated(self) -> None:
        logger.info("Authenticated successfully!")

    def handle_auth_failure(self, message: str) -> None:
        logger.error("Authentication failed: %s", message)

    def handle_disconnected(self, reason: str) -> None:
        logger.error("Client disconnected: %s", reason)
