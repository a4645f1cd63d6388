"""Single entry point for the three provider calls the conversation needs."""

from typing import Optional, Sequence

from openai import AsyncOpenAI

from models.messages import Language, Message
from services.openai.chat_service import ChatService
from services.openai.speech_service import SpeechService
from services.openai.story_generator import StoryGenerator, StoryResult


class AIGateway:
    """Stateless facade over story generation, chat continuation and speech.

    Each call is one request/response round trip. Nothing is retried or
    cached; failures surface as ``GatewayError`` subclasses.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        *,
        story_generator: Optional[StoryGenerator] = None,
        chat_service: Optional[ChatService] = None,
        speech_service: Optional[SpeechService] = None,
    ) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.story_generator = story_generator or StoryGenerator(client)
        self.chat_service = chat_service or ChatService(client)
        self.speech_service = speech_service or SpeechService(client)

    async def generate_story_and_prompt(self, image_bytes: bytes, mime_type: str, language: Language) -> StoryResult:
        return await self.story_generator.generate(image_bytes, mime_type, language)

    async def continue_chat(self, prompt: str, history: Sequence[Message], language: Language) -> str:
        return await self.chat_service.continue_chat(prompt, history, language)

    async def generate_speech(self, text: str, language: Language) -> str:
        return await self.speech_service.generate_speech(text, language)
