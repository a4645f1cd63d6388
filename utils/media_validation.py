"""Validation helpers for uploaded images."""

import base64
import binascii

from fastapi import HTTPException, UploadFile


def ensure_base64_image(raw: bytes) -> bytes:
    """Return base64-encoded image bytes, encoding binary input when necessary."""
    try:
        base64.b64decode(raw, validate=True)
        return raw
    except (binascii.Error, ValueError):
        return base64.b64encode(raw)


def normalize_mime(mime_type: str | None) -> str:
    """Lower-case a MIME type and strip any parameters."""
    return (mime_type or "").lower().split(";", 1)[0].strip()


def is_image_mime(mime_type: str | None) -> bool:
    """Return True for any ``image/*`` content type."""
    return normalize_mime(mime_type).startswith("image/")


def validate_image_file(image_file: UploadFile) -> str:
    """Validate that the upload declares an image content type and return it.

    The composer accepts any ``image/*`` type, the same filter the file
    picker applies in the browser. Uploads without a content type are
    rejected because the provider needs the MIME type for the data URL.
    """
    mime_type = normalize_mime(image_file.content_type)
    if not mime_type:
        raise HTTPException(status_code=415, detail="Missing image content type.")
    if not is_image_mime(mime_type):
        raise HTTPException(status_code=415, detail=f"Unsupported image content type: {image_file.content_type}")
    return mime_type


async def read_image_bytes(image_file: UploadFile) -> bytes:
    """Read validated image bytes, ensuring the upload is not empty."""
    validate_image_file(image_file)
    image_bytes = await image_file.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Uploaded image is empty.")
    return image_bytes
