"""FastAPI routes for the conversation log, language and read-aloud."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.conversation_controller import (
    change_language,
    get_conversation,
    get_message_image,
    read_aloud,
    send_message,
)

router = APIRouter(prefix="/api/conversation")


class LanguagePayload(BaseModel):
    language: str


class MessagePayload(BaseModel):
    text: str = ""


@router.get("")
async def get_conversation_route(request: Request):
    return await get_conversation(request)


@router.put("/language")
async def change_language_route(request: Request, payload: LanguagePayload):
    try:
        return await change_language(request, payload.language)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/messages")
async def send_message_route(request: Request, payload: MessagePayload):
    try:
        return await send_message(request, payload.text)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/messages/{message_id}/speech")
async def read_aloud_route(request: Request, message_id: str):
    try:
        return await read_aloud(request, message_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/messages/{message_id}/image")
async def get_message_image_route(request: Request, message_id: str):
    try:
        return await get_message_image(request, message_id)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
