"""Story narration built on OpenAI's audio-capable chat models."""

import logging
import os

from openai import AsyncOpenAI, OpenAIError

from models.messages import Language
from services.openai.errors import NoAudioData, TransportFailure
from services.openai.response_parser import extract_audio_data
from services.openai.story_prompts import build_narration_prompt

LOGGER = logging.getLogger(__name__)
SPEECH_MODEL = os.getenv("OPENAI_SPEECH_MODEL", "gpt-4o-mini-audio-preview")
SPEECH_VOICE = os.getenv("OPENAI_SPEECH_VOICE", "alloy")
# pcm16 output is 16-bit little-endian PCM, mono, 24 kHz.
AUDIO_FORMAT = "pcm16"


class SpeechService:
    """Create narrated audio from story text."""

    def __init__(self, client: AsyncOpenAI, model: str = SPEECH_MODEL, voice: str = SPEECH_VOICE) -> None:
        """Initialize the service with a shared OpenAI client."""
        if client is None:
            raise ValueError("OpenAI client is required for speech.")
        self.client = client
        self.model = model
        self.voice = voice

    async def generate_speech(self, text: str, language: Language) -> str:
        """Return base64 PCM audio reading ``text`` aloud."""
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                modalities=["text", "audio"],
                audio={"voice": self.voice, "format": AUDIO_FORMAT},
                messages=[{"role": "user", "content": build_narration_prompt(text, language)}],
            )
        except OpenAIError as exc:
            LOGGER.error("OpenAI speech request failed: %s", exc)
            raise TransportFailure(str(exc)) from exc

        audio_data = extract_audio_data(completion)
        if not audio_data:
            raise NoAudioData("No audio data received from API.")
        return audio_data
