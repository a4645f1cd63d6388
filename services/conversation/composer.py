"""Message composer: typed text plus at most one staged image."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from models.messages import ImagePayload, Language
from services.conversation.preview_store import PreviewStore
from utils.i18n import text as ui_text
from utils.media_validation import is_image_mime, normalize_mime

LOGGER = logging.getLogger(__name__)

ComposerState = Literal["empty", "attached"]


@dataclass
class PendingAttachment:
    """Image selected in the composer but not sent yet."""

    data: bytes
    mime_type: str
    preview_handle: str
    filename: Optional[str] = None

    @property
    def preview_url(self) -> str:
        return PreviewStore.url_for(self.preview_handle)


@dataclass(frozen=True)
class SendIntent:
    """What the composer hands to the view when the user sends."""

    text: str
    image: Optional[ImagePayload] = None


class Composer:
    """Two-state composer (empty / attached).

    The staged image's preview handle is released on replacement, removal,
    send and reset, so repeated attach/detach cycles never accumulate
    previews.
    """

    def __init__(
        self,
        previews: PreviewStore,
        language: Callable[[], Language] = lambda: "fr",
        is_disabled: Callable[[], bool] = lambda: False,
    ) -> None:
        self.previews = previews
        self._language = language
        self._is_disabled = is_disabled
        self.text = ""
        self.attachment: Optional[PendingAttachment] = None

    @property
    def state(self) -> ComposerState:
        return "attached" if self.attachment is not None else "empty"

    @property
    def disabled(self) -> bool:
        return self._is_disabled()

    @property
    def can_send(self) -> bool:
        return not self.disabled and (bool(self.text.strip()) or self.attachment is not None)

    @property
    def placeholder(self) -> str:
        key = "placeholder_with_image" if self.attachment is not None else "placeholder"
        return ui_text(self._language(), key)

    def set_text(self, value: str) -> None:
        self.text = value or ""

    def select_image(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> Optional[PendingAttachment]:
        """Stage an image, replacing and releasing any previously staged one.

        Non-image MIME types are ignored and return None.

        Raises:
            ValueError: If the bytes are empty or cannot be decoded as an image.
        """
        if not is_image_mime(mime_type):
            LOGGER.info("Ignoring non-image selection of type %r", mime_type)
            return None

        handle = self.previews.create(data)
        previous = self.attachment
        self.attachment = PendingAttachment(
            data=data, mime_type=normalize_mime(mime_type), preview_handle=handle, filename=filename
        )
        if previous is not None:
            self.previews.revoke(previous.preview_handle)
        return self.attachment

    def remove_image(self) -> bool:
        """Drop the staged image. Returns False when nothing was staged."""
        if self.attachment is None:
            return False
        self._release_attachment()
        return True

    def send(self) -> Optional[SendIntent]:
        """Produce a send intent and reset, or return None if there is nothing to send."""
        if not self.can_send:
            return None

        message_text = self.text.strip()
        attachment = self.attachment
        if attachment is not None:
            caption = message_text or ui_text(self._language(), "default_caption")
            encoded = base64.b64encode(attachment.data).decode("ascii")
            intent = SendIntent(text=caption, image=ImagePayload(data=encoded, mime_type=attachment.mime_type))
        else:
            intent = SendIntent(text=message_text)

        self.reset()
        return intent

    def reset(self) -> None:
        """Clear typed text and release any staged image."""
        self.text = ""
        self._release_attachment()

    def _release_attachment(self) -> None:
        attachment, self.attachment = self.attachment, None
        if attachment is not None:
            self.previews.revoke(attachment.preview_handle)
