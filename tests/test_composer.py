import base64
from io import BytesIO

import pytest
from PIL import Image

from conftest import make_png

from services.conversation.composer import Composer
from services.conversation.preview_store import PreviewStore


def make_composer(language="en", disabled=False):
    flags = {"disabled": disabled, "language": language}
    composer = Composer(
        PreviewStore(),
        language=lambda: flags["language"],
        is_disabled=lambda: flags["disabled"],
    )
    return composer, flags


def test_blank_send_without_image_is_noop():
    composer, _ = make_composer()
    composer.set_text("   ")
    assert composer.can_send is False
    assert composer.send() is None
    assert composer.text == "   "


def test_text_send_strips_and_clears():
    composer, _ = make_composer()
    composer.set_text("  hello there \n")
    intent = composer.send()
    assert intent.text == "hello there"
    assert intent.image is None
    assert composer.text == ""
    assert composer.state == "empty"


def test_send_is_noop_while_disabled():
    composer, _ = make_composer(disabled=True)
    composer.set_text("hi")
    assert composer.send() is None
    assert composer.text == "hi"


def test_image_send_uses_default_caption_per_language(png_bytes):
    composer, flags = make_composer(language="en")
    composer.select_image(png_bytes, "image/png")
    intent = composer.send()
    assert intent.text == "Analyze this image and create a story."
    assert base64.b64decode(intent.image.data) == png_bytes
    assert intent.image.mime_type == "image/png"

    flags["language"] = "fr"
    composer.select_image(png_bytes, "image/png")
    assert composer.send().text == "Analyse cette image et crée une histoire."


def test_image_send_keeps_typed_caption(png_bytes):
    composer, _ = make_composer()
    composer.select_image(png_bytes, "image/png")
    composer.set_text("A rainy harbour")
    assert composer.send().text == "A rainy harbour"


def test_preview_released_on_replace_remove_and_send(png_bytes):
    composer, _ = make_composer()
    previews = composer.previews

    first = composer.select_image(png_bytes, "image/png")
    assert composer.state == "attached"
    assert previews.active_count == 1

    second = composer.select_image(png_bytes, "image/jpeg", filename="b.jpg")
    assert previews.active_count == 1
    with pytest.raises(KeyError):
        previews.get(first.preview_handle)
    assert previews.get(second.preview_handle).startswith(b"\x89PNG")

    assert composer.remove_image() is True
    assert composer.state == "empty"
    assert previews.active_count == 0
    assert composer.remove_image() is False

    for _ in range(5):
        composer.select_image(png_bytes, "image/png")
        composer.send()
    assert previews.active_count == 0


def test_non_image_selection_is_ignored():
    composer, _ = make_composer()
    assert composer.select_image(b"%PDF-1.4", "application/pdf") is None
    assert composer.state == "empty"
    assert composer.previews.active_count == 0


def test_undecodable_image_keeps_prior_attachment(png_bytes):
    composer, _ = make_composer()
    staged = composer.select_image(png_bytes, "image/png")
    with pytest.raises(ValueError):
        composer.select_image(b"not an image", "image/png")
    assert composer.attachment is staged
    assert composer.previews.active_count == 1


def test_placeholder_follows_attachment(png_bytes):
    composer, _ = make_composer()
    assert composer.placeholder == "Type your message or upload an image..."
    composer.select_image(png_bytes, "image/png")
    assert composer.placeholder == "Add a message about the image..."


def test_thumbnail_fits_bounds():
    previews = PreviewStore()
    handle = previews.create(make_png(size=(1200, 800)))
    thumb = Image.open(BytesIO(previews.get(handle)))
    assert thumb.format == "PNG"
    assert thumb.size[0] == 320
    assert thumb.size[1] < 320
