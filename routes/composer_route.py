"""FastAPI routes for the composer's image attachment."""

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from controllers.composer_controller import get_preview, remove_image, stage_image

router = APIRouter(prefix="/api/composer", tags=["composer"])


@router.post("/image", summary="Stage an image for the next message")
async def stage_image_route(request: Request, image: UploadFile = File(...)):
    """Handle image upload and return the preview URL of the staged image.

    Args:
        request: The FastAPI request containing application state.
        image: Uploaded image to attach to the next message.

    Raises:
        HTTPException: If the upload is not an image, is empty, or cannot be decoded.
    """
    try:
        return await stage_image(request, image)
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-exception-caught
        raise HTTPException(status_code=500, detail="Failed to stage image.") from exc


@router.delete("/image", summary="Remove the staged image")
async def remove_image_route(request: Request):
    return await remove_image(request)


@router.get("/previews/{handle}")
async def get_preview_route(request: Request, handle: str):
    """Return the PNG preview of the staged image."""
    try:
        return await get_preview(request, handle)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
