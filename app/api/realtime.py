"""
FitMatch — Realtime WebSocket endpoint

``/ws?user_id=<uuid>`` opens the caller's duplex channel.  Frames are handed
to the ``RealtimeGateway``; the channel is unregistered when the socket goes
away.  Nothing is queued for delivery after a disconnect.
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from app.api.deps import get_realtime_gateway
from app.services.realtime_gateway import RealtimeGateway

logger = structlog.get_logger("fitmatch.api.realtime")

router = APIRouter()


@router.websocket("/ws")
async def realtime_channel(
    websocket: WebSocket,
    user_id: uuid.UUID | None = Query(None),
    gateway: RealtimeGateway = Depends(get_realtime_gateway),
) -> None:
    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="User ID required")
        return

    if not await gateway.authenticate(user_id):
        logger.warning("realtime_rejected", user_id=str(user_id))
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown or banned user")
        return

    await websocket.accept()
    await gateway.connect(user_id, websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE))
            # Text and binary frames both carry JSON
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await gateway.handle_raw(user_id, websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await gateway.disconnect(user_id, websocket)
