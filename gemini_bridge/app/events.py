import hmac
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, Field

from gemini_bridge.core.bridge import ChatMessage, MessageBridge


# ============ schemas ============
class MessageEvent(BaseModel):
    sender: str = Field(..., alias="from")
    body: str = ""
    type: str = "chat"


class QrEvent(BaseModel):
    qr: str


class AuthFailureEvent(BaseModel):
    message: str = ""


class DisconnectedEvent(BaseModel):
    reason: str = ""


# ============ deps ============
def get_bridge(request: Request) -> MessageBridge:
    return request.app.state.bridge


def verify_gateway_token(
    request: Request,
    x_gateway_token: Optional[str] = Header(default=None),
) -> None:
    expected = request.app.state.gateway_token
    if not expected:
        return
    if x_gateway_token is None or not hmac.compare_digest(
        x_gateway_token.encode(), expected.encode()
    ):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid gateway token")


router = APIRouter(
    prefix="/events",
    tags=["events"],
    dependencies=[Depends(verify_gateway_token)],
)


@router.post("/message", status_code=status.HTTP_202_ACCEPTED)
async def on_message(
    event: MessageEvent,
    background_tasks: BackgroundTasks,
    bridge: MessageBridge = Depends(get_bridge),
):
    msg = ChatMessage(sender_id=event.sender, body=event.body, type=event.type)
    # reply is produced after the gateway gets its 202
    background_tasks.add_task(bridge.handle_message, msg)
    return {"accepted": True}


@router.post("/qr")
def on_qr(event: QrEvent, bridge: MessageBridge = Depends(get_bridge)):
    return {"rendered": bridge.handle_qr(event.qr)}


@router.post("/ready")
def on_ready(bridge: MessageBridge = Depends(get_bridge)):
    bridge.handle_ready()
    return {"ok": True}


@router.post("/authenticated")
def on_authenticated(bridge: MessageBridge = Depends(get_bridge)):
    bridge.handle_authenticated()
    return {"ok": True}


@router.post("/auth_failure")
def on_auth_failure(event: AuthFailureEvent, bridge: MessageBridge = Depends(get_bridge)):
    bridge.handle_auth_failure(event.message)
    return {"ok": True}


@router.post("/disconnected")
def on_disconnected(event: DisconnectedEvent, bridge: MessageBridge = Depends(get_bridge)):
    bridge.handle_disconnected(event.reason)
    return {"ok": True}
