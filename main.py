import inspect
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI
from dotenv import load_dotenv

# Load .env before importing services that read model settings at import time.
load_dotenv()

from routes.composer_route import router as composer_router
from routes.conversation_route import router as conversation_router
from routes.realtime_ws import router as realtime_router
from services.audio_playback import AudioPlaybackAdapter
from services.conversation.session_store import ConversationStore
from services.conversation.view import ConversationView
from services.openai.gateway import AIGateway
from services.realtime.audio_sink import WebSocketAudioSink
from services.realtime.hub import ConnectionHub

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the OpenAI async client
      - the single conversation (store, composer, gateway, audio playback)
      - the websocket hub that pushes conversation changes to the page
    and attach them to `app.state`.
    """
    openai_api_key = os.getenv("OPENAI_API_KEY")
    if not openai_api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    try:
        openai_client = AsyncOpenAI(api_key=openai_api_key)
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc

    app.state.openai_client = openai_client

    hub = ConnectionHub()
    audio_sink = WebSocketAudioSink(hub)
    store = ConversationStore(language=os.getenv("STORYTELLER_LANGUAGE", "fr"))
    conversation = ConversationView(store, AIGateway(openai_client), AudioPlaybackAdapter(audio_sink))
    hub.follow(store.subscribe, conversation.render)

    app.state.hub = hub
    app.state.audio_sink = audio_sink
    app.state.conversation = conversation
    LOGGER.info("Conversation ready (language=%s)", store.language)

    try:
        yield
    finally:
        conversation.close()
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    result = aclose()
                    if inspect.isawaitable(result):
                        await result
                except Exception as exc:
                    LOGGER.warning("Error while closing the OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Creative Storyteller AI", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the chat page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports the OpenAI client and conversation presence.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        has_conversation = getattr(request.app.state, "conversation", None) is not None
        return {"ok": True, "openai_available": has_openai, "conversation_ready": has_conversation}

    # Register application routers
    app.include_router(conversation_router)
    app.include_router(composer_router)
    app.include_router(realtime_router)

    return app


app = create_app()
