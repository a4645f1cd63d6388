"""Turn conversation state into the view model the browser draws."""

from __future__ import annotations

from typing import Any, Dict, Optional

from models.messages import Language, Message, StoryMessage
from models.session_models import ConversationSession
from utils.i18n import UI_COPY


def render_message(message: Message, language: Language, active_speech_id: Optional[str]) -> Dict[str, Any]:
    """Render one message according to its sender and variant."""
    copy = UI_COPY[language]
    if message.sender == "user":
        return {
            "id": message.id,
            "kind": "user",
            "text": message.transcript_text(),
            "image_url": f"/api/conversation/messages/{message.id}/image" if message.image else None,
        }

    if isinstance(message, StoryMessage):
        speaking = active_speech_id == message.id
        return {
            "id": message.id,
            "kind": "story",
            "title": copy["story_title"],
            "story": message.story,
            "read_aloud": {
                "label": copy["generating"] if speaking else copy["read_aloud"],
                "disabled": speaking,
                "in_progress": speaking,
            },
            "regenerate_prompt": {
                "title": copy["regenerate_title"],
                "text": message.regenerate_prompt,
                "copy_label": copy["copy_prompt"],
            },
        }

    return {"id": message.id, "kind": "ai_text", "text": message.content}


def render_conversation(session: ConversationSession, composer: Dict[str, Any]) -> Dict[str, Any]:
    """Render the full page state.

    ``scroll_to`` names the element the list should scroll to: the loading
    indicator while a round is outstanding, else the newest message.
    """
    language = session.language
    copy = UI_COPY[language]
    messages = [render_message(msg, language, session.active_speech_message_id) for msg in session.messages]

    if session.is_loading:
        scroll_to = "loading-indicator"
    else:
        scroll_to = messages[-1]["id"] if messages else None

    return {
        "title": copy["title"],
        "language": language,
        "messages": messages,
        "is_loading": session.is_loading,
        "loading_text": copy["thinking"] if session.is_loading else None,
        "active_speech_message_id": session.active_speech_message_id,
        "composer": composer,
        "scroll_to": scroll_to,
    }
