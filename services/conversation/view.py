"""Conversation view: relays user intents to the store, the gateway and the player."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models.messages import ImagePayload, Language, Message, StoryMessage
from services.audio_playback import AudioPlaybackAdapter
from services.conversation.composer import Composer
from services.conversation.preview_store import PreviewStore
from services.conversation.rendering import render_conversation
from services.conversation.session_store import ConversationStore
from services.openai.gateway import AIGateway
from utils.i18n import text as ui_text

LOGGER = logging.getLogger(__name__)


class ConversationView:
    """Own the active conversation for the lifetime of the app.

    Args:
        store: Conversation state store.
        gateway: AI gateway used for story, chat and speech.
        player: Audio playback adapter for read-aloud.
        composer: Optional composer; one bound to ``store`` is created when omitted.
    """

    def __init__(
        self,
        store: ConversationStore,
        gateway: AIGateway,
        player: AudioPlaybackAdapter,
        composer: Optional[Composer] = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.player = player
        self.composer = composer or Composer(
            PreviewStore(),
            language=lambda: self.store.language,
            is_disabled=lambda: self.store.is_loading,
        )

    async def submit(self, text: str = "") -> Optional[Message]:
        """Send whatever the composer holds; returns None when the send was a no-op."""
        self.composer.set_text(text)
        intent = self.composer.send()
        if intent is None:
            return None
        return await self.handle_send(intent.text, intent.image)

    async def handle_send(self, text: str, image: Optional[ImagePayload] = None) -> Message:
        """Run one round trip and return the AI message appended for it."""
        language = self.store.language
        history = self.store.history()
        self.store.append_user_message(text, image)
        try:
            if image is not None:
                result = await self.gateway.generate_story_and_prompt(
                    image.data.encode("ascii"), image.mime_type, language
                )
                return self.store.append_ai_story(result.story, result.regenerate_prompt)
            reply = await self.gateway.continue_chat(text, history, language)
            return self.store.append_ai_text(reply)
        except Exception as exc:
            LOGGER.error("Error processing message: %s", exc, exc_info=True)
            return self.store.append_ai_text(ui_text(language, "error"))
        finally:
            self.store.complete_round()

    async def handle_read_aloud(self, message_id: str) -> bool:
        """Read a story aloud. Returns True when playback completed.

        Raises:
            KeyError: If the message does not exist.
            ValueError: If the message is not a story.
        """
        message = self.store.get(message_id)
        if not isinstance(message, StoryMessage):
            raise ValueError("Only story messages can be read aloud.")
        if self.store.active_speech_message_id == message_id:
            return False

        self.store.begin_speech(message_id)
        try:
            audio_data = await self.gateway.generate_speech(message.story, self.store.language)
            await self.player.play(audio_data)
            return True
        except Exception as exc:
            LOGGER.error("Error generating or playing speech: %s", exc)
            return False
        finally:
            self.store.end_speech(message_id)

    def set_language(self, language: str) -> Language:
        return self.store.set_language(language)

    def render(self) -> Dict[str, Any]:
        """Return the current view model."""
        attachment = self.composer.attachment
        composer = {
            "state": self.composer.state,
            "placeholder": self.composer.placeholder,
            "disabled": self.composer.disabled,
            "can_send": self.composer.can_send,
            "preview_url": attachment.preview_url if attachment else None,
        }
        return render_conversation(self.store.session, composer)

    def close(self) -> None:
        """Tear down listeners and release composer resources."""
        self.store.clear_listeners()
        self.composer.reset()
        self.composer.previews.clear()
