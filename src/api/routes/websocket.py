"""
WebSocket endpoint for real-time updates.

Clients authenticate with ?token=<jwt> or an "Authorization: Bearer" header.
Invalid credentials close the socket with 1008 before it is accepted.
"""

import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from src.depends import actor_from_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


def _token(websocket: WebSocket) -> Optional[str]:
    token = websocket.query_params.get("token")
    if token:
        return token
    authorization = websocket.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


@router.websocket("/ws")
async def realtime(websocket: WebSocket):
    config = websocket.app.state.config
    gateway = websocket.app.state.gateway

    actor = actor_from_token(_token(websocket), config.JWT_SECRET)
    if actor is None:
        logger.warning("WebSocket rejected: invalid or missing token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    conn = await gateway.connect(websocket, actor)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            text = message.get("text")
            if text is None:
                await websocket.close(code=status.WS_1003_UNSUPPORTED_DATA)
                break
            if len(text.encode("utf-8")) > config.WS_MAX_MESSAGE_BYTES:
                logger.warning("WebSocket conn=%s sent an oversized frame", conn.id)
                await websocket.close(code=status.WS_1009_MESSAGE_TOO_BIG)
                break

            await gateway.handle_message(conn, text)
    except WebSocketDisconnect:
        logger.debug("WebSocket conn=%s went away", conn.id)
    finally:
        await gateway.disconnect(conn)
