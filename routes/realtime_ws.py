"""WebSocket endpoint pushing conversation state and carrying playback acks."""

from __future__ import annotations

import asyncio
import contextlib
import json

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.realtime.ws_session import ConversationSocketHandler

router = APIRouter()


@router.websocket("/ws")
async def conversation_socket(websocket: WebSocket):
    """Stream state snapshots to the page and receive ``audio.ended`` acks."""
    await websocket.accept()
    state = websocket.app.state
    handler = ConversationSocketHandler(state.conversation, state.audio_sink)

    with state.hub.connect() as queue:
        await handler.send_state(websocket, "conversation.connected")
        pump = asyncio.create_task(handler.pump(websocket, queue))
        try:
            while True:
                try:
                    raw = await websocket.receive_text()
                except WebSocketDisconnect:
                    break
                except Exception:
                    await websocket.send_text(json.dumps({"type": "error", "detail": "Invalid websocket frame"}))
                    continue
                try:
                    payload = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
                    continue
                if not isinstance(payload, dict):
                    await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be an object"}))
                    continue
                await handler.handle(websocket, payload)
        finally:
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump
