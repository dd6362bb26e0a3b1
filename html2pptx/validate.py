"""
Post-extraction validation: overflow, layout size and bottom margin.

All checks accumulate issues; :func:`validate_slide` merges them with the
extraction issues in reporting order and :func:`raise_for_issues` turns a
non-empty list into one :class:`~html2pptx.errors.SlideValidationError`.
"""

from typing import Optional, Sequence

from . import errors
from .config import DEFAULT_SETTINGS, PX_PER_IN, Settings
from .dom import RenderedDocument
from .model import ListElement, SlideModel, TextElement

BOTTOM_MARGIN_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "li")


def check_overflow(document: RenderedDocument, settings: Settings = DEFAULT_SETTINGS) -> list:
    tolerance = settings.overflow_tolerance_px
    overflow_x = max(0.0, document.scroll_width - document.width - tolerance)
    overflow_y = max(0.0, document.scroll_height - document.height - tolerance)
    if overflow_x <= 0 and overflow_y <= 0:
        return []
    return [
        errors.content_overflow(
            document.width,
            document.height,
            overflow_x,
            overflow_y,
            bottom_margin_px=settings.bottom_margin_px,
        )
    ]


def check_layout(
    document: RenderedDocument,
    page_size: Optional[tuple[float, float]],
    settings: Settings = DEFAULT_SETTINGS,
) -> list:
    """Compare the body size with the presentation page size (inches)."""
    if page_size is None:
        return []
    layout_width, layout_height = page_size
    width_in = document.width / PX_PER_IN
    height_in = document.height / PX_PER_IN
    tolerance = settings.layout_tolerance_in
    if abs(layout_width - width_in) <= tolerance and abs(layout_height - height_in) <= tolerance:
        return []
    return [
        errors.size_mismatch(
            document.width,
            document.height,
            round(layout_width * PX_PER_IN),
            round(layout_height * PX_PER_IN),
        )
    ]


def check_bottom_margin(
    model: SlideModel, page_height_px: float, settings: Settings = DEFAULT_SETTINGS
) -> list:
    found = []
    minimum = settings.bottom_margin_px
    for element in model.elements:
        if isinstance(element, TextElement):
            if element.tag not in BOTTOM_MARGIN_TAGS:
                continue
        elif not isinstance(element, ListElement):
            continue

        font_size = element.style.font_size or 0
        distance = page_height_px - element.position.bottom * PX_PER_IN
        if font_size > settings.bottom_margin_min_font_pt and distance < minimum:
            found.append(errors.text_too_close_to_bottom(element.plain_text, distance, minimum))
    return found


def validate_slide(
    model: SlideModel,
    document: RenderedDocument,
    page_size: Optional[tuple[float, float]] = None,
    settings: Settings = DEFAULT_SETTINGS,
) -> list:
    """Every issue for the slide: overflow, layout, margin, then extraction."""
    if page_size is None:
        page_size = (settings.page_width, settings.page_height)
    issues = []
    issues.extend(check_overflow(document, settings))
    issues.extend(check_layout(document, page_size, settings))
    issues.extend(check_bottom_margin(model, document.height, settings))
    issues.extend(model.errors)
    return issues


def raise_for_issues(issues: Sequence, source: Optional[str] = None):
    if issues:
        raise errors.SlideValidationError(issues, source=source)
