import asyncio
import base64

import pytest

from conftest import FakeGateway, RecordingPlayer

from models.messages import ImagePayload, StoryMessage, TextMessage
from services.conversation.session_store import ConversationStore
from services.conversation.view import ConversationView
from services.openai.errors import MalformedResponse, TransportFailure


def make_view(gateway=None, player=None, language="en"):
    store = ConversationStore(language=language)
    return ConversationView(store, gateway or FakeGateway(), player or RecordingPlayer())


@pytest.mark.asyncio
async def test_image_upload_produces_one_story_message(png_bytes):
    gateway = FakeGateway()
    view = make_view(gateway)
    view.composer.select_image(png_bytes, "image/png")

    reply = await view.submit("")

    messages = view.store.messages
    assert len(messages) == 3
    user, story = messages[1], messages[2]
    assert isinstance(user, TextMessage) and user.sender == "user"
    assert user.content == "Analyze this image and create a story."
    assert base64.b64decode(user.image.data) == png_bytes
    assert isinstance(story, StoryMessage)
    assert reply is story
    assert (story.story, story.regenerate_prompt, story.sender) == ("S", "P", "ai")
    assert gateway.story_calls[0][1:] == ("image/png", "en")
    assert gateway.chat_calls == []
    assert view.store.is_loading is False
    assert view.composer.previews.active_count == 0


@pytest.mark.asyncio
async def test_text_send_passes_prior_history_to_chat():
    gateway = FakeGateway(reply="hello back")
    view = make_view(gateway)

    await view.submit("hi")
    await view.submit("how are you?")

    prompt, history, language = gateway.chat_calls[1]
    assert prompt == "how are you?"
    assert [m.transcript_text() for m in history] == [view.store.messages[0].content, "hi", "hello back"]
    assert language == "en"
    assert [m.sender for m in view.store.messages] == ["ai", "user", "ai", "user", "ai"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [TransportFailure("down"), MalformedResponse("bad"), RuntimeError("boom")])
async def test_failed_send_appends_one_generic_error(error):
    view = make_view(FakeGateway(error=error), language="fr")

    await view.submit("bonjour")

    assert len(view.store.messages) == 3
    last = view.store.messages[-1]
    assert last.sender == "ai"
    assert last.content == "Désolé, j'ai rencontré une erreur. Veuillez réessayer."
    assert view.store.is_loading is False


@pytest.mark.asyncio
async def test_blank_send_is_noop():
    view = make_view()
    assert await view.submit("   ") is None
    assert len(view.store.messages) == 1
    assert view.store.is_loading is False


@pytest.mark.asyncio
async def test_loading_flag_spans_round_trip_and_blocks_second_send():
    gate = asyncio.Event()
    observed = []

    class SlowGateway(FakeGateway):
        async def continue_chat(self, prompt, history, language):
            observed.append(view.store.is_loading)
            await gate.wait()
            return "done"

    view = make_view(SlowGateway())
    assert view.store.is_loading is False

    first = asyncio.create_task(view.submit("first"))
    await asyncio.sleep(0)
    assert view.store.is_loading is True
    assert await view.submit("second") is None
    assert view.composer.disabled is True

    gate.set()
    await first
    assert observed == [True]
    assert view.store.is_loading is False
    assert [m.transcript_text() for m in view.store.messages[1:]] == ["first", "done"]


@pytest.mark.asyncio
async def test_language_switch_only_affects_later_messages():
    gateway = FakeGateway()
    view = make_view(gateway, language="en")
    await view.submit("hi")
    before = [(m.id, m.transcript_text()) for m in view.store.messages]

    view.set_language("fr")
    await view.submit("salut")

    assert [(m.id, m.transcript_text()) for m in view.store.messages[: len(before)]] == before
    assert gateway.chat_calls[0][2] == "en"
    assert gateway.chat_calls[1][2] == "fr"
    assert view.render()["messages"][0]["text"].startswith("Welcome!")


@pytest.mark.asyncio
async def test_read_aloud_plays_story_and_clears_marker():
    gateway = FakeGateway(audio="UENN")
    player = RecordingPlayer()
    view = make_view(gateway, player)
    story = view.store.append_ai_story("Once upon a time", "castle")

    assert await view.handle_read_aloud(story.id) is True

    assert gateway.speech_calls == [("Once upon a time", "en")]
    assert player.played == ["UENN"]
    assert view.store.active_speech_message_id is None


@pytest.mark.asyncio
async def test_failed_read_aloud_leaves_no_trace():
    view = make_view(FakeGateway(), RecordingPlayer(error=ValueError("bad audio")))
    story = view.store.append_ai_story("s", "p")
    count = len(view.store.messages)

    assert await view.handle_read_aloud(story.id) is False

    assert len(view.store.messages) == count
    assert view.store.active_speech_message_id is None


@pytest.mark.asyncio
async def test_read_aloud_rejects_text_and_unknown_messages():
    view = make_view()
    with pytest.raises(ValueError):
        await view.handle_read_aloud(view.store.messages[0].id)
    with pytest.raises(KeyError):
        await view.handle_read_aloud("missing")


@pytest.mark.asyncio
async def test_overlapping_read_aloud_keeps_latest_marker():
    gateway = FakeGateway()
    first_gate, second_gate = asyncio.Event(), asyncio.Event()
    gateway.speech_gates = {"first story": first_gate, "second story": second_gate}
    view = make_view(gateway)
    first = view.store.append_ai_story("first story", "p1")
    second = view.store.append_ai_story("second story", "p2")

    first_task = asyncio.create_task(view.handle_read_aloud(first.id))
    await asyncio.sleep(0)
    second_task = asyncio.create_task(view.handle_read_aloud(second.id))
    await asyncio.sleep(0)
    assert view.store.active_speech_message_id == second.id

    first_gate.set()
    assert await first_task is True
    assert view.store.active_speech_message_id == second.id

    second_gate.set()
    assert await second_task is True
    assert view.store.active_speech_message_id is None


@pytest.mark.asyncio
async def test_read_aloud_skipped_while_same_message_in_flight():
    gateway = FakeGateway()
    gate = asyncio.Event()
    gateway.speech_gates = {"story": gate}
    view = make_view(gateway)
    story = view.store.append_ai_story("story", "p")

    task = asyncio.create_task(view.handle_read_aloud(story.id))
    await asyncio.sleep(0)
    assert await view.handle_read_aloud(story.id) is False
    gate.set()
    await task
    assert len(gateway.speech_calls) == 1


def test_render_by_variant(png_bytes):
    view = make_view(language="en")
    image = ImagePayload(data=base64.b64encode(png_bytes).decode(), mime_type="image/png")
    user = view.store.append_user_message("look", image)
    story = view.store.append_ai_story("S", "P")
    view.store.begin_speech(story.id)

    rendered = view.render()

    kinds = [m["kind"] for m in rendered["messages"]]
    assert kinds == ["ai_text", "user", "story"]
    assert rendered["messages"][1]["image_url"] == f"/api/conversation/messages/{user.id}/image"
    assert "base64" not in rendered["messages"][1]["image_url"]
    card = rendered["messages"][-1]
    assert card["read_aloud"] == {"label": "Generating...", "disabled": True, "in_progress": True}
    assert card["regenerate_prompt"]["text"] == "P"
    assert rendered["is_loading"] is True
    assert rendered["loading_text"] == "AI is thinking..."
    assert rendered["scroll_to"] == "loading-indicator"

    view.store.complete_round()
    assert view.render()["scroll_to"] == story.id


def test_close_releases_preview(png_bytes):
    view = make_view()
    view.composer.select_image(png_bytes, "image/png")
    assert view.render()["composer"]["preview_url"].startswith("/api/composer/previews/")
    view.close()
    assert view.composer.previews.active_count == 0
    assert view.composer.state == "empty"
