"""Description: Image-to-story generation using OpenAI's Responses API with structured output."""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, List, Dict

from openai import AsyncOpenAI, OpenAIError

from models.messages import Language
from services.openai.errors import MalformedResponse, TransportFailure
from services.openai.media_inputs import build_story_inputs, to_image_data_url
from services.openai.response_parser import extract_text, extract_usage, parse_story_payload
from services.openai.story_prompts import build_story_prompt, build_system_prompt
from services.openai.story_schema import TEXT_FORMAT

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4.1-mini")


@dataclass(frozen=True)
class StoryResult:
    """Opening story paragraph and a prompt to regenerate the source image."""

    story: str
    regenerate_prompt: str


class StoryGenerator:
    """Turn an uploaded image into an opening story paragraph and a regeneration prompt."""

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_MODEL) -> None:
        """Initialize the generator with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model
        self.system_prompt = build_system_prompt()

    async def generate(self, image_bytes: bytes, mime_type: str, language: Language) -> StoryResult:
        """Return the story and regeneration prompt for an image.

        Args:
            image_bytes: Raw or base64-encoded image bytes.
            mime_type: MIME type of the image, e.g. ``image/jpeg``.
            language: Language of the prose; the JSON keys stay in English.

        Raises:
            MalformedResponse: If the model output is not the expected JSON object.
            TransportFailure: If the provider call fails.
        """
        if not image_bytes:
            raise ValueError("Image content is required for story generation.")

        start_time = time.time()
        inputs = build_story_inputs(
            self.system_prompt,
            build_story_prompt(language),
            to_image_data_url(image_bytes, mime_type),
        )
        response = await self._create_response(inputs)
        result = self._parse_response(response)
        LOGGER.info(
            "Story generated in %.3fs (usage: %s)", time.time() - start_time, extract_usage(response)
        )
        return result

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the multimodal request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=self.model,
                input=inputs,
                text=TEXT_FORMAT,
            )
        except OpenAIError as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise TransportFailure(str(exc)) from exc

    def _parse_response(self, response: Any) -> StoryResult:
        """Parse the structured story output from the model."""
        text = extract_text(response)
        try:
            payload = parse_story_payload(text)
        except MalformedResponse:
            LOGGER.error("Failed to parse JSON response: %r", text)
            raise
        return StoryResult(story=payload["story"], regenerate_prompt=payload["regenerate_prompt"])
