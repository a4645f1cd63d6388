"""Message variants shown in the conversation log."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Literal, Optional, Union
from uuid import uuid4

Sender = Literal["user", "ai"]
Language = Literal["en", "fr"]

LANGUAGES = ("en", "fr")
SENDERS = ("user", "ai")


def new_message_id() -> str:
    """Return a fresh opaque message id."""
    return uuid4().hex


@dataclass(frozen=True)
class ImagePayload:
    """Base64 image data attached to a user message.

    Attributes:
        data: Base64-encoded image bytes (ASCII text, no data URL prefix).
        mime_type: MIME type of the original upload, e.g. ``image/png``.
    """

    data: str
    mime_type: str

    def decode(self) -> bytes:
        """Return the raw image bytes."""
        return base64.b64decode(self.data)


@dataclass(frozen=True)
class TextMessage:
    """Plain text message from either side of the conversation."""

    content: str
    sender: Sender
    id: str = field(default_factory=new_message_id)
    image: Optional[ImagePayload] = None
    kind: Literal["text"] = field(default="text", init=False)

    def __post_init__(self) -> None:
        if self.sender not in SENDERS:
            raise ValueError(f"Unknown sender '{self.sender}'.")

    def transcript_text(self) -> str:
        return self.content


@dataclass(frozen=True)
class StoryMessage:
    """AI reply bundling an opening story paragraph and an image regeneration prompt."""

    story: str
    regenerate_prompt: str
    sender: Sender = "ai"
    id: str = field(default_factory=new_message_id)
    image: Optional[ImagePayload] = None
    kind: Literal["story"] = field(default="story", init=False)

    def __post_init__(self) -> None:
        if self.sender != "ai":
            raise ValueError("Story messages are always sent by the AI.")

    def transcript_text(self) -> str:
        # The regeneration prompt never enters the chat transcript.
        return self.story


Message = Union[TextMessage, StoryMessage]
