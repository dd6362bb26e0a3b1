"""
Download remote images ahead of emission and inline them as data URIs.

A failed download never aborts the slide: the image is marked ``skip`` and
left out of the presentation.
"""

import base64
import logging
from dataclasses import replace
from typing import Optional

import httpx

from .model import ImageElement, SlideModel

logger = logging.getLogger(__name__)


def is_remote(src: str) -> bool:
    return src.startswith(("http://", "https://"))


async def fetch_image(client: httpx.AsyncClient, element: ImageElement) -> ImageElement:
    logger.info("Downloading image: %s", element.src)
    try:
        response = await client.get(element.src)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Failed to download image %s: %s. Skipping this image.", element.src, exc)
        return replace(element, skip=True)

    content_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
    encoded = base64.b64encode(response.content).decode("ascii")
    return replace(element, src=f"data:{content_type};base64,{encoded}")


async def inline_remote_images(
    model: SlideModel,
    timeout: float = 10.0,
    client: Optional[httpx.AsyncClient] = None,
) -> SlideModel:
    """Return a copy of *model* with remote images inlined or marked skipped.

    Downloads run one after another.
    """
    if not any(isinstance(e, ImageElement) and is_remote(e.src) for e in model.elements):
        return model

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
    try:
        elements = []
        for element in model.elements:
            if isinstance(element, ImageElement) and is_remote(element.src):
                element = await fetch_image(client, element)
            elements.append(element)
    finally:
        if own_client:
            await client.aclose()
    return replace(model, elements=tuple(elements))
