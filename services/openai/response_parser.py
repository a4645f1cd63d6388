"""Helpers to parse provider outputs."""

import json
from typing import Any, Dict, Optional

from services.openai.errors import MalformedResponse
from services.openai.story_schema import STORY_KEYS


def extract_text(response: Any) -> str:
    """Return the assistant text from a Responses API payload."""
    text = getattr(response, "output_text", None)
    if text:
        return text

    parts = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "output_text":
                parts.append(getattr(content, "text", "") or "")
    return "".join(parts)


def parse_story_payload(text: str) -> Dict[str, str]:
    """Parse and validate the ``{story, regenerate_prompt}`` JSON object.

    Raises:
        MalformedResponse: If the text is not a JSON object carrying both keys as strings.
    """
    try:
        payload = json.loads(text.strip())
    except (json.JSONDecodeError, AttributeError) as exc:
        raise MalformedResponse("Received an invalid format from the AI.") from exc

    if not isinstance(payload, dict):
        raise MalformedResponse("Expected a JSON object from the AI.")

    missing = [key for key in STORY_KEYS if not isinstance(payload.get(key), str)]
    if missing:
        raise MalformedResponse(f"AI response is missing required fields: {', '.join(missing)}")
    return {key: payload[key] for key in STORY_KEYS}


def extract_audio_data(completion: Any) -> Optional[str]:
    """Return the first inline base64 audio payload of a chat completion, if any."""
    for choice in getattr(completion, "choices", None) or []:
        message = getattr(choice, "message", None)
        audio = getattr(message, "audio", None)
        data = getattr(audio, "data", None)
        if data:
            return data
    return None


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
