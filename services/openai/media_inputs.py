"""Utilities to build input payloads for the Responses API."""

from typing import Any, Dict, Iterable, List

from models.messages import Message
from utils.media_validation import ensure_base64_image


def to_image_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Convert raw or base64 image bytes into a data URL suitable for vision input."""
    b64_str = ensure_base64_image(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{b64_str}"


def _text_message(role: str, text: str) -> Dict[str, Any]:
    content_type = "output_text" if role == "assistant" else "input_text"
    return {"type": "message", "role": role, "content": [{"type": content_type, "text": text}]}


def build_story_inputs(system_prompt: str, user_prompt: str, image_url: str) -> List[Dict[str, Any]]:
    """Build the story request: system prompt, then image and instruction in one user turn."""
    return [
        _text_message("system", system_prompt),
        {
            "type": "message",
            "role": "user",
            "content": [
                {"type": "input_image", "image_url": image_url},
                {"type": "input_text", "text": user_prompt},
            ],
        },
    ]


def history_to_turns(history: Iterable[Message]) -> List[Dict[str, Any]]:
    """Flatten the message log into alternating user/assistant turns.

    Story messages contribute their story text; text messages their content.
    """
    return [
        _text_message("user" if msg.sender == "user" else "assistant", msg.transcript_text())
        for msg in history
    ]


def build_chat_inputs(instruction: str, history: Iterable[Message], prompt: str) -> List[Dict[str, Any]]:
    """Rebuild the full transcript from the log and append the new prompt."""
    inputs = [_text_message("system", instruction)]
    inputs.extend(history_to_turns(history))
    inputs.append(_text_message("user", prompt))
    return inputs
