"""Dispatch websocket events for the conversation page."""
from __future__ import annotations

import asyncio
import json
from typing import Any, Dict

from fastapi import WebSocket

from services.conversation.view import ConversationView
from services.realtime.audio_sink import WebSocketAudioSink


class ConversationSocketHandler:
    """Route inbound websocket messages and pump outbound events for one client."""

    def __init__(self, view: ConversationView, sink: WebSocketAudioSink) -> None:
        self.view = view
        self.sink = sink

    async def pump(self, websocket: WebSocket, queue: asyncio.Queue) -> None:
        """Forward queued hub events to the client until cancelled."""
        while True:
            payload = await queue.get()
            await self._send(websocket, payload)

    async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
        """Process a single inbound websocket payload."""
        message_type = payload.get("type")
        try:
            if message_type == "audio.ended":
                playback_id = (payload.get("playback_id") or "").strip()
                if not playback_id:
                    raise ValueError("playback_id is required.")
                self.sink.acknowledge(playback_id)
            elif message_type == "conversation.refresh":
                await self.send_state(websocket, "conversation.refresh")
            else:
                raise ValueError("Unsupported message type.")
        except Exception as exc:
            await self._send(websocket, {"type": "error", "detail": str(exc)})

    async def send_state(self, websocket: WebSocket, event: str) -> None:
        await self._send(websocket, {"type": "conversation.state", "event": event, "conversation": self.view.render()})

    async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
        await websocket.send_text(json.dumps(payload))
