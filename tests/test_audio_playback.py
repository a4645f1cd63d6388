import asyncio
import base64
import io
import wave

import pytest

from services.audio_playback import AudioPlaybackAdapter, decode_pcm
from services.realtime.audio_sink import WebSocketAudioSink
from services.realtime.hub import ConnectionHub


def pcm_b64(frames: int) -> str:
    return base64.b64encode(b"\x01\x00" * frames).decode()


def test_decode_pcm_duration_and_wav_header():
    audio = decode_pcm(pcm_b64(24000))
    assert audio.frame_count == 24000
    assert audio.duration == pytest.approx(1.0)

    with wave.open(io.BytesIO(audio.to_wav()), "rb") as wav:
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == 24000
        assert wav.getnframes() == 24000


def test_decode_pcm_rejects_bad_payloads():
    with pytest.raises(ValueError):
        decode_pcm("not base64!!")
    with pytest.raises(ValueError):
        decode_pcm(base64.b64encode(b"\x00\x00\x00").decode())


class RecordingSink:
    def __init__(self):
        self.clips = []

    async def play(self, wav_bytes, duration):
        self.clips.append((wav_bytes, duration))


@pytest.mark.asyncio
async def test_adapter_plays_once_through_sink():
    sink = RecordingSink()
    audio = await AudioPlaybackAdapter(sink).play(pcm_b64(12000))
    assert len(sink.clips) == 1
    wav_bytes, duration = sink.clips[0]
    assert wav_bytes.startswith(b"RIFF")
    assert duration == pytest.approx(0.5)
    assert audio.frame_count == 12000


@pytest.mark.asyncio
async def test_websocket_sink_without_clients_returns_immediately():
    hub = ConnectionHub()
    sink = WebSocketAudioSink(hub)
    await asyncio.wait_for(sink.play(b"RIFF", 30.0), timeout=1)


@pytest.mark.asyncio
async def test_websocket_sink_waits_for_ack():
    hub = ConnectionHub()
    sink = WebSocketAudioSink(hub, grace=5.0)
    with hub.connect() as queue:
        playing = asyncio.create_task(sink.play(b"RIFFdata", 10.0))
        event = await asyncio.wait_for(queue.get(), timeout=1)
        assert event["type"] == "audio.play"
        assert base64.b64decode(event["audio_b64"]) == b"RIFFdata"
        assert playing.done() is False

        assert sink.acknowledge("unknown") is False
        assert sink.acknowledge(event["playback_id"]) is True
        await asyncio.wait_for(playing, timeout=1)
        assert sink.acknowledge(event["playback_id"]) is False


@pytest.mark.asyncio
async def test_websocket_sink_gives_up_after_duration_and_grace():
    hub = ConnectionHub()
    sink = WebSocketAudioSink(hub, grace=0.01)
    with hub.connect():
        await asyncio.wait_for(sink.play(b"RIFF", 0.01), timeout=1)
