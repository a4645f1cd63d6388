"""Composer helpers: staging, removing and previewing the image attachment."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request, UploadFile
from fastapi.responses import Response

from services.conversation.composer import Composer
from utils.media_validation import read_image_bytes


def _composer(request: Request) -> Composer:
    view = getattr(request.app.state, "conversation", None)
    if view is None:
        raise HTTPException(status_code=500, detail="Conversation not initialized.")
    return view.composer


async def stage_image(request: Request, file: UploadFile) -> Dict[str, Any]:
    """Stage an uploaded image in the composer.

    Args:
        request: FastAPI Request (used to reach the conversation in app.state).
        file: Uploaded image; any ``image/*`` content type is accepted.

    Returns:
        The composer state with the preview URL of the staged image.

    Raises:
        HTTPException(409) while a round trip is outstanding, 415 for
        non-image uploads and 400 for empty or undecodable images.
    """
    composer = _composer(request)
    if composer.disabled:
        raise HTTPException(status_code=409, detail="A message is already being processed.")

    image_bytes = await read_image_bytes(file)
    try:
        attachment = composer.select_image(image_bytes, file.content_type or "", filename=file.filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if attachment is None:
        raise HTTPException(status_code=415, detail=f"Unsupported image content type: {file.content_type}")

    return {
        "state": composer.state,
        "preview_url": attachment.preview_url,
        "mime_type": attachment.mime_type,
        "filename": attachment.filename,
        "placeholder": composer.placeholder,
    }


async def remove_image(request: Request) -> Dict[str, Any]:
    """Drop the staged image, if any."""
    composer = _composer(request)
    removed = composer.remove_image()
    return {"state": composer.state, "removed": removed, "placeholder": composer.placeholder}


async def get_preview(request: Request, handle: str) -> Response:
    """Return the PNG preview for a staged image.

    Raises:
        HTTPException(404) once the preview has been released.
    """
    composer = _composer(request)
    try:
        png_bytes = composer.previews.get(handle)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Preview not found") from exc
    return Response(content=png_bytes, media_type="image/png")
