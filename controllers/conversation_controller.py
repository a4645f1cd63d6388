"""Conversation helpers behind the HTTP routes."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request
from fastapi.responses import Response

from services.conversation.view import ConversationView


def _view(request: Request) -> ConversationView:
    view = getattr(request.app.state, "conversation", None)
    if view is None:
        raise HTTPException(status_code=500, detail="Conversation not initialized.")
    return view


async def get_conversation(request: Request) -> Dict[str, Any]:
    """Return the rendered conversation."""
    return _view(request).render()


async def change_language(request: Request, language: str) -> Dict[str, Any]:
    """Switch the active language for subsequent prompts and UI copy."""
    view = _view(request)
    try:
        view.set_language(language)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return view.render()


async def send_message(request: Request, text: str) -> Dict[str, Any]:
    """Send the composer contents and wait for the AI reply.

    Returns ``sent: False`` when the send was a no-op (blank text with no
    staged image, or a round trip already in flight).
    """
    view = _view(request)
    reply = await view.submit(text)
    rendered = view.render()
    if reply is None:
        return {"sent": False, "message": None, "conversation": rendered}
    message = next(msg for msg in rendered["messages"] if msg["id"] == reply.id)
    return {"sent": True, "message": message, "conversation": rendered}


async def read_aloud(request: Request, message_id: str) -> Dict[str, Any]:
    """Synthesize and play a story, returning whether playback completed."""
    view = _view(request)
    try:
        played = await view.handle_read_aloud(message_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Message {message_id} not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"message_id": message_id, "played": played}


async def get_message_image(request: Request, message_id: str) -> Response:
    """Return the image sent with a user message.

    Raises:
        HTTPException(404) for unknown messages or messages without an image.
    """
    view = _view(request)
    try:
        message = view.store.get(message_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Message {message_id} not found") from exc
    if message.image is None:
        raise HTTPException(status_code=404, detail="Message has no image")
    return Response(content=message.image.decode(), media_type=message.image.mime_type)
