import io
from types import SimpleNamespace

import pytest
from PIL import Image

from services.openai.story_generator import StoryResult


def make_png(size=(8, 6), color=(200, 30, 30, 255)) -> bytes:
    out = io.BytesIO()
    Image.new("RGBA", size, color).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


class FakeGateway:
    """Stand-in for AIGateway that records calls and returns canned results."""

    def __init__(self, story=None, reply="hello", audio="AAAA", error=None):
        self.story = story or StoryResult(story="S", regenerate_prompt="P")
        self.reply = reply
        self.audio = audio
        self.error = error
        self.story_calls = []
        self.chat_calls = []
        self.speech_calls = []
        self.speech_gates = {}

    async def generate_story_and_prompt(self, image_bytes, mime_type, language):
        self.story_calls.append((image_bytes, mime_type, language))
        if self.error:
            raise self.error
        return self.story

    async def continue_chat(self, prompt, history, language):
        self.chat_calls.append((prompt, list(history), language))
        if self.error:
            raise self.error
        return self.reply

    async def generate_speech(self, text, language):
        self.speech_calls.append((text, language))
        gate = self.speech_gates.get(text)
        if gate is not None:
            await gate.wait()
        if self.error:
            raise self.error
        return self.audio


class RecordingPlayer:
    def __init__(self, error=None):
        self.played = []
        self.error = error

    async def play(self, audio_b64):
        if self.error:
            raise self.error
        self.played.append(audio_b64)


class DummyResponses:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


class DummyCompletions(DummyResponses):
    pass


def dummy_client(response=None, completion=None, error=None):
    """Build an object shaped like AsyncOpenAI for the parts the services touch."""
    return SimpleNamespace(
        responses=DummyResponses(response, error),
        chat=SimpleNamespace(completions=DummyCompletions(completion, error)),
    )


def text_response(text, input_tokens=10, output_tokens=20):
    return SimpleNamespace(
        output_text=text,
        output=[],
        usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def audio_completion(data):
    audio = SimpleNamespace(data=data, transcript="") if data is not None else None
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(audio=audio, content=None))])

