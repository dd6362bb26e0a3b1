import asyncio
import base64

import httpx

from html2pptx.images import inline_remote_images, is_remote
from html2pptx.model import Background, ImageElement, Position, SlideModel

POS = Position(0, 0, 1, 1)
PNG = b"\x89PNG\r\n\x1a\nfake"


def handler(request):
    if request.url.path == "/missing.png":
        return httpx.Response(404)
    return httpx.Response(200, content=PNG, headers={"content-type": "image/png"})


def run(model):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await inline_remote_images(model, client=client)

    return asyncio.run(go())


def test_is_remote():
    assert is_remote("https://example.com/a.png")
    assert not is_remote("file:///tmp/a.png")
    assert not is_remote("data:image/png;base64,AAAA")


def test_remote_image_is_inlined():
    model = SlideModel(Background("color", "FFFFFF"), (ImageElement("https://cdn.test/logo.png", POS),))
    (image,) = run(model).elements

    assert image.src == "data:image/png;base64," + base64.b64encode(PNG).decode("ascii")
    assert not image.skip


def test_failed_download_is_skipped(caplog):
    local = ImageElement("images/local.png", POS)
    model = SlideModel(
        Background("color", "FFFFFF"),
        (ImageElement("https://cdn.test/missing.png", POS), local),
    )
    missing, kept = run(model).elements

    assert missing.skip
    assert missing.src == "https://cdn.test/missing.png"
    assert kept == local
    assert "Skipping this image" in caplog.text


def test_model_without_remote_images_is_returned_as_is():
    model = SlideModel(Background("color", "FFFFFF"), (ImageElement("a.png", POS),))
    assert asyncio.run(inline_remote_images(model)) is model
