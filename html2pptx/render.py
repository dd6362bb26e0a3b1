"""
Headless rendering through Playwright.

The page is loaded from disk, the viewport is sized to the body's declared
size, then one ``page.evaluate`` serialises the body subtree with computed
styles and bounding boxes (see :mod:`html2pptx.dom`).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .dom import STYLE_PROPERTIES, RenderedDocument
from .errors import RenderError

logger = logging.getLogger(__name__)

BODY_DIMENSIONS_JS = """
() => {
  const body = document.body;
  const style = window.getComputedStyle(body);
  return {
    width: parseFloat(style.width),
    height: parseFloat(style.height),
    scrollWidth: body.scrollWidth,
    scrollHeight: body.scrollHeight,
  };
}
"""

SNAPSHOT_JS = """
(props) => {
  const OPAQUE = ["SCRIPT", "STYLE", "NOSCRIPT", "TEMPLATE"];
  const snap = (node) => {
    if (node.nodeType === Node.TEXT_NODE) return { text: node.textContent };
    if (node.nodeType !== Node.ELEMENT_NODE) return null;
    const computed = window.getComputedStyle(node);
    const style = {};
    for (const prop of props) style[prop] = computed.getPropertyValue(prop);
    const attrs = {};
    for (const attr of node.attributes) attrs[attr.name] = attr.value;
    const rect = node.getBoundingClientRect();
    const children = [];
    if (!OPAQUE.includes(node.tagName)) {
      for (const child of node.childNodes) {
        const snapped = snap(child);
        if (snapped) children.push(snapped);
      }
    }
    return {
      tag: node.tagName.toLowerCase(),
      attrs,
      style,
      rect: { left: rect.left, top: rect.top, width: rect.width, height: rect.height },
      offsetWidth: node.offsetWidth ?? null,
      offsetHeight: node.offsetHeight ?? null,
      src: node.tagName === "IMG" ? node.src : null,
      children,
    };
  };
  const body = document.body;
  const bodyStyle = window.getComputedStyle(body);
  return {
    width: parseFloat(bodyStyle.width),
    height: parseFloat(bodyStyle.height),
    scrollWidth: body.scrollWidth,
    scrollHeight: body.scrollHeight,
    body: snap(body),
  };
}
"""


async def render_html(html_file, tmp_dir: Optional[str] = None) -> RenderedDocument:
    """Render *html_file* in Chromium and return its snapshot."""
    path = Path(html_file).resolve()
    launch_options = {}
    if tmp_dir:
        launch_options["env"] = {"TMPDIR": tmp_dir}
    # Use Chrome on macOS, the bundled Chromium elsewhere.
    if sys.platform == "darwin":
        launch_options["channel"] = "chrome"

    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(**launch_options)
            try:
                page = await browser.new_page()
                page.on("console", lambda msg: logger.debug("Browser console: %s", msg.text))
                await page.goto(path.as_uri())

                dims = await page.evaluate(BODY_DIMENSIONS_JS)
                await page.set_viewport_size(
                    {"width": round(dims["width"]), "height": round(dims["height"])}
                )
                snapshot = await page.evaluate(SNAPSHOT_JS, list(STYLE_PROPERTIES))
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise RenderError(f"Failed to render {path}: {exc}") from exc

    return RenderedDocument.from_snapshot(snapshot)
