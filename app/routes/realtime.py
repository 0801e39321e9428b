"""
Real-time Routes
WebSocket endpoint every client subscribes to for live updates
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from app.auth.dependencies import decode_access_token
from app.errors import Unauthorized

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_from_token(token: Optional[str]) -> Optional[str]:
    """Subscriptions are open to anyone; a token only labels the connection"""
    if not token:
        return None
    try:
        return decode_access_token(token).get("user_id")
    except Unauthorized:
        return None


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Receive every broadcast event as `{"event", "data", "timestamp"}`

    The client may send "ping" to check liveness; anything else is ignored.
    """
    hub = websocket.app.state.container.hub
    subscriber = await hub.connect(websocket, _user_from_token(token))
    try:
        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.debug("Client closed subscriber %s", subscriber.id)
    finally:
        await hub.disconnect(subscriber.id)
