"""Audio sink that plays narration in the connected browsers."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Dict
from uuid import uuid4

from services.realtime.hub import ConnectionHub

LOGGER = logging.getLogger(__name__)

# Extra seconds allowed past the clip length before giving up on an ack.
PLAYBACK_GRACE = 5.0


class WebSocketAudioSink:
    """Broadcast WAV clips to websocket clients and wait for the first ``audio.ended`` ack."""

    def __init__(self, hub: ConnectionHub, grace: float = PLAYBACK_GRACE) -> None:
        self.hub = hub
        self.grace = grace
        self._pending: Dict[str, asyncio.Future] = {}

    async def play(self, wav_bytes: bytes, duration: float) -> None:
        """Send the clip out and return when a client reports playback ended."""
        if not self.hub.client_count:
            LOGGER.warning("No connected client to play %.2fs of audio; skipping playback.", duration)
            return

        playback_id = uuid4().hex
        done = asyncio.get_running_loop().create_future()
        self._pending[playback_id] = done
        try:
            self.hub.broadcast(
                {
                    "type": "audio.play",
                    "playback_id": playback_id,
                    "mime_type": "audio/wav",
                    "duration": duration,
                    "audio_b64": base64.b64encode(wav_bytes).decode("ascii"),
                }
            )
            try:
                await asyncio.wait_for(done, timeout=duration + self.grace)
            except asyncio.TimeoutError:
                LOGGER.warning("No playback acknowledgement for %s; assuming it ended.", playback_id)
        finally:
            self._pending.pop(playback_id, None)

    def acknowledge(self, playback_id: str) -> bool:
        """Mark a playback as ended. Returns False for unknown or already finished ids."""
        done = self._pending.get(playback_id)
        if done is None or done.done():
            return False
        done.set_result(None)
        return True
