"""Multi-turn chat continuation built on the OpenAI Responses API."""

import logging
import os
import time
from typing import Sequence

from openai import AsyncOpenAI, OpenAIError

from models.messages import Language, Message
from services.openai.errors import EmptyResponse, TransportFailure
from services.openai.media_inputs import build_chat_inputs
from services.openai.response_parser import extract_text, extract_usage
from services.openai.story_prompts import build_chat_instruction

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")


class ChatService:
    """Continue the conversation by replaying the whole log on each call.

    No provider-side session is kept: every call rebuilds the transcript
    from the message log, so the provider always sees the same context
    the user sees.
    """

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client
        self.model = model

    async def continue_chat(self, prompt: str, history: Sequence[Message], language: Language) -> str:
        """Return the model's reply to ``prompt`` given the prior log."""
        inputs = build_chat_inputs(build_chat_instruction(language), history, prompt)

        start = time.time()
        try:
            response = await self.client.responses.create(model=self.model, input=inputs)
        except OpenAIError as exc:
            LOGGER.error("OpenAI chat request failed: %s", exc)
            raise TransportFailure(str(exc)) from exc

        reply = extract_text(response)
        if not reply or not reply.strip():
            raise EmptyResponse("Chat response did not include text.")

        LOGGER.info(
            "Chat reply after %d turns in %.3fs (usage: %s)",
            len(inputs) - 1,
            time.time() - start,
            extract_usage(response),
        )
        return reply
