"""In-memory store for the single active conversation."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from models.messages import ImagePayload, Language, Message, StoryMessage, TextMessage
from models.session_models import ConversationSession
from utils.i18n import ensure_language, text

LOGGER = logging.getLogger(__name__)

WELCOME_MESSAGE_ID = "initial-message"

Listener = Callable[[str, ConversationSession], None]


class ConversationStore:
    """Apply append-only mutations to the conversation and notify listeners.

    Every mutation calls each listener synchronously before returning, so a
    subscribed view sees the change before the next user action runs.
    """

    def __init__(self, language: Language = "fr", seed_welcome: bool = True) -> None:
        self._session = ConversationSession(language=ensure_language(language))
        self._listeners: List[Listener] = []
        if seed_welcome:
            self._session.messages.append(
                TextMessage(id=WELCOME_MESSAGE_ID, sender="ai", content=text(self._session.language, "welcome"))
            )

    @property
    def session(self) -> ConversationSession:
        return self._session

    @property
    def language(self) -> Language:
        return self._session.language

    @property
    def is_loading(self) -> bool:
        return self._session.is_loading

    @property
    def active_speech_message_id(self) -> Optional[str]:
        return self._session.active_speech_message_id

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._session.messages)

    def history(self) -> List[Message]:
        """Return a copy of the log in chronological order."""
        return list(self._session.messages)

    def get(self, message_id: str) -> Message:
        """Return a message or raise KeyError if missing."""
        for message in self._session.messages:
            if message.id == message_id:
                return message
        raise KeyError(f"Message {message_id} not found")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def clear_listeners(self) -> None:
        self._listeners.clear()

    def append_user_message(self, content: str, image: Optional[ImagePayload] = None) -> TextMessage:
        """Append the user's message and mark a round trip as outstanding."""
        message = TextMessage(sender="user", content=content, image=image)
        self._session.messages.append(message)
        self._session.is_loading = True
        self._emit("message.appended")
        return message

    def append_ai_text(self, content: str) -> TextMessage:
        """Append a plain AI reply."""
        message = TextMessage(sender="ai", content=content)
        self._session.messages.append(message)
        self._emit("message.appended")
        return message

    def append_ai_story(self, story: str, regenerate_prompt: str) -> StoryMessage:
        """Append an AI story card."""
        message = StoryMessage(story=story, regenerate_prompt=regenerate_prompt)
        self._session.messages.append(message)
        self._emit("message.appended")
        return message

    def complete_round(self) -> None:
        """Clear the loading flag, on success and failure alike."""
        self._session.is_loading = False
        self._emit("round.completed")

    def set_language(self, language: str) -> Language:
        """Switch the language used from the next operation on."""
        self._session.language = ensure_language(language)
        self._emit("language.changed")
        return self._session.language

    def begin_speech(self, message_id: str) -> None:
        """Track ``message_id`` as the message being read aloud, replacing any previous one."""
        self._session.active_speech_message_id = message_id
        self._emit("speech.started")

    def end_speech(self, message_id: Optional[str] = None) -> bool:
        """Clear the active speech marker.

        When ``message_id`` is given the marker is only cleared if it still
        names that message; a later read-aloud keeps its marker.
        """
        if message_id is not None and self._session.active_speech_message_id != message_id:
            return False
        self._session.active_speech_message_id = None
        self._emit("speech.ended")
        return True

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self._session)
            except Exception:
                LOGGER.exception("Conversation listener failed on %s", event)
