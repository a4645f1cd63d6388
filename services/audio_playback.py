"""Audio playback adapter for synthesized narration.

Decodes the base64 PCM payload returned by the speech service into a WAV
container and hands it to an ``AudioSink``. ``play`` resolves only once
the sink reports that playback has finished.

Example:
    player = AudioPlaybackAdapter(sink)
    await player.play(audio_b64)
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import time
import wave
from dataclasses import dataclass
from typing import Protocol

LOGGER = logging.getLogger(__name__)

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2  # bytes per sample, 16-bit PCM


@dataclass(frozen=True)
class PcmAudio:
    """Decoded raw PCM audio.

    Attributes:
        frames: Raw little-endian PCM bytes.
        sample_rate: Samples per second per channel.
        channels: Number of interleaved channels.
        sample_width: Bytes per sample.
    """

    frames: bytes
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS
    sample_width: int = SAMPLE_WIDTH

    @property
    def frame_count(self) -> int:
        return len(self.frames) // (self.channels * self.sample_width)

    @property
    def duration(self) -> float:
        """Playback length in seconds."""
        return self.frame_count / float(self.sample_rate)

    def to_wav(self) -> bytes:
        """Wrap the PCM frames in a WAV container."""
        out_io = io.BytesIO()
        with wave.open(out_io, "wb") as wav:
            wav.setnchannels(self.channels)
            wav.setsampwidth(self.sample_width)
            wav.setframerate(self.sample_rate)
            wav.writeframes(self.frames)
        return out_io.getvalue()


def decode_pcm(
    audio_b64: str,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    sample_width: int = SAMPLE_WIDTH,
) -> PcmAudio:
    """Decode a base64 PCM payload.

    Raises:
        ValueError: If the payload is not valid base64 or not frame aligned.
    """
    try:
        frames = base64.b64decode(audio_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Audio payload is not valid base64.") from exc

    if len(frames) % (channels * sample_width):
        raise ValueError(
            f"Audio payload of {len(frames)} bytes is not aligned to {channels * sample_width}-byte frames."
        )
    return PcmAudio(frames=frames, sample_rate=sample_rate, channels=channels, sample_width=sample_width)


class AudioSink(Protocol):
    """Destination that plays a WAV clip and returns when playback ends."""

    async def play(self, wav_bytes: bytes, duration: float) -> None:
        ...


class AudioPlaybackAdapter:
    """Decode narration audio and play it once through a sink."""

    def __init__(self, sink: AudioSink, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> None:
        self.sink = sink
        self.sample_rate = sample_rate
        self.channels = channels

    async def play(self, audio_b64: str) -> PcmAudio:
        """Play ``audio_b64`` to completion and return the decoded clip."""
        audio = decode_pcm(audio_b64, sample_rate=self.sample_rate, channels=self.channels)
        start_time = time.time()
        try:
            await self.sink.play(audio.to_wav(), audio.duration)
        finally:
            LOGGER.info(
                "Playback finished: %d frames (%.2fs of audio) in %.3fs",
                audio.frame_count,
                audio.duration,
                time.time() - start_time,
            )
        return audio
