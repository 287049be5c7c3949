import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse

from gemini_bridge.app.events import router as events_router
from gemini_bridge.core.bridge import MessageBridge
from gemini_bridge.core.config import Settings, get_settings
from gemini_bridge.core.history_store import HistoryStore
from gemini_bridge.services.llm import build_llm_client
from gemini_bridge.services.transport import HttpGatewayTransport

logger = logging.getLogger(__name__)


def build_bridge(settings: Settings) -> MessageBridge:
    # fails fast when GEMINI_API_KEY is missing
    llm = build_llm_client(settings)
    return MessageBridge(
        llm=llm,
        transport=HttpGatewayTransport(settings),
        history=HistoryStore(max_turns=settings.history_max_turns),
        footer=settings.reply_footer,
    )


def create_app(
    bridge: Optional[MessageBridge] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if bridge is None:
        bridge = build_bridge(settings)

    # ============ app lifecycle ============
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            await bridge.dispatcher.transport.aclose()

    app = FastAPI(title="Gemini WhatsApp Bridge", lifespan=lifespan)
    app.state.bridge = bridge
    app.state.gateway_token = settings.gateway_token

    app.include_router(events_router)

    # ============ basic endpoints ============
    @app.get("/", response_class=HTMLResponse)
    def pairing_page():
        html = bridge.pairing.html
        if html is None:
            raise HTTPException(status_code=404, detail="QR code not generated yet")
        return HTMLResponse(content=html)

    @app.get("/health")
    def health():
        return {
            "ok": True,
            "senders": len(bridge.history),
            "qr_available": bridge.pairing.available,
        }

    return app


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )
    app = create_app(settings=settings)
    logger.info("Server is running on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
