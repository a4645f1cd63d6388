"""Session domain model for the single active conversation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from models.messages import Language, Message


@dataclass
class ConversationSession:
    """In-memory conversation state owned by the running view.

    Attributes:
        language: Language used for prompts, system instructions and UI copy.
        messages: Chronological, append-only message log.
        is_loading: True while one send round trip is outstanding.
        active_speech_message_id: Message currently being read aloud, if any.
    """

    language: Language = "fr"
    messages: List[Message] = field(default_factory=list)
    is_loading: bool = False
    active_speech_message_id: Optional[str] = None
