"""
Layout extraction engine.

Extraction runs in two passes over the rendered snapshot:

1. :func:`classify` walks the tree once in document order and assigns every
   element a :class:`Role`. A list claims all of its ``<li>`` descendants so
   they are not classified again as stray text.
2. :func:`extract_slide` builds Slide Model elements purely from that role
   map, collecting every validation issue instead of stopping at the first.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from . import errors
from .dom import ElementNode, RenderedDocument, TextNode
from .model import (
    Background,
    Bullet,
    ImageElement,
    LineElement,
    LineStyle,
    ListElement,
    Placeholder,
    Position,
    RunOptions,
    ShapeElement,
    SlideModel,
    TextElement,
    TextStyle,
)
from .runs import has_inline_formatting, parse_inline_runs, should_skip_bold
from .units import (
    apply_text_transform,
    border_radius_to_inches,
    extract_alpha,
    first_font_family,
    get_rotation,
    is_bold_weight,
    is_transparent,
    parse_box_shadow,
    pre_rotation_box,
    px,
    px_to_inch,
    px_to_pt,
    rgb_to_hex,
)

logger = logging.getLogger(__name__)

TEXT_TAGS = ("p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "li")
LIST_TAGS = ("ul", "ol")
PLACEHOLDER_CLASS = "placeholder"
BORDER_SIDES = ("top", "right", "bottom", "left")

# Manual bullet glyph followed by whitespace at the start of non-list text.
MANUAL_BULLET_RE = re.compile(r"^[•\-\*▪▸○●◆◇■□]\s")
# Glyph stripped from the first run of a list item.
LIST_GLYPH_RE = re.compile(r"^[•\-\*▪▸]\s*")
_URL_RE = re.compile(r"""url\(["']?([^"')]+)["']?\)""")


class Role(Enum):
    PAINTED_TEXT = "painted_text"
    PLACEHOLDER = "placeholder"
    IMAGE = "image"
    CONTAINER = "container"
    LIST = "list"
    LIST_ITEM = "list_item"
    TEXT = "text"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Claim:
    role: Role
    detail: Optional[str] = None  # paint kind for PAINTED_TEXT


# ── Pass 1: classification ────────────────────────────────────────────────────


def text_paint(element: ElementNode) -> Optional[str]:
    """Which paint a text tag carries, if any: background, border or shadow."""
    style = element.style
    if not is_transparent(style["background-color"]):
        return "background"
    if any(px(style[f"border-{side}-width"]) > 0 for side in BORDER_SIDES):
        return "border"
    if style["box-shadow"] and style["box-shadow"] != "none":
        return "shadow"
    return None


def classify(document: RenderedDocument) -> dict:
    """Map every element of *document* to a :class:`Claim`."""
    roles: dict = {}
    for element in document.iter_elements():
        if element in roles:
            continue
        roles[element] = _classify_one(element, roles)
    return roles


def _classify_one(element: ElementNode, roles: dict) -> Claim:
    tag = element.tag
    if tag in TEXT_TAGS:
        paint = text_paint(element)
        if paint:
            return Claim(Role.PAINTED_TEXT, paint)

    if PLACEHOLDER_CLASS in element.classes:
        return Claim(Role.PLACEHOLDER)

    if tag == "img" and element.rect.has_area:
        return Claim(Role.IMAGE)

    if tag == "div":
        return Claim(Role.CONTAINER)

    if tag in LIST_TAGS:
        if not element.rect.has_area:
            return Claim(Role.IGNORED)
        for item in element.find_all("li"):
            roles[item] = Claim(Role.LIST_ITEM)
        return Claim(Role.LIST)

    if tag in TEXT_TAGS:
        return Claim(Role.TEXT)
    return Claim(Role.IGNORED)


# ── Pass 2: building ──────────────────────────────────────────────────────────


def extract_slide(document: RenderedDocument, roles: Optional[dict] = None) -> SlideModel:
    """Build the Slide Model for *document*; issues land in ``model.errors``."""
    if roles is None:
        roles = classify(document)

    issues: list = []
    elements: list = []
    placeholders: list[Placeholder] = []
    background = extract_background(document.body, issues)

    for element in document.iter_elements():
        claim = roles.get(element)
        if claim is None:
            continue
        role = claim.role
        if role is Role.PAINTED_TEXT:
            issues.append(errors.text_paint(element.tag, claim.detail))
        elif role is Role.PLACEHOLDER:
            placeholder = build_placeholder(element, len(placeholders), issues)
            if placeholder is not None:
                placeholders.append(placeholder)
        elif role is Role.IMAGE:
            src = element.src or element.attrs.get("src", "")
            elements.append(ImageElement(src=src, position=_position(element)))
        elif role is Role.CONTAINER:
            elements.extend(build_container(element, issues))
        elif role is Role.LIST:
            elements.append(build_list(element, issues))
        elif role is Role.TEXT:
            text_element = build_text(element, issues)
            if text_element is not None:
                elements.append(text_element)

    logger.debug(
        "Extracted %d elements, %d placeholders, %d issues",
        len(elements),
        len(placeholders),
        len(issues),
    )
    return SlideModel(
        background=background,
        elements=tuple(elements),
        placeholders=tuple(placeholders),
        errors=tuple(issues),
    )


def _position(element: ElementNode) -> Position:
    r = element.rect
    return Position(px_to_inch(r.left), px_to_inch(r.top), px_to_inch(r.width), px_to_inch(r.height))


def _align(text_align: Optional[str]) -> str:
    if not text_align or text_align == "start":
        return "left"
    if text_align == "end":
        return "right"
    return text_align


def _line_spacing(line_height: Optional[str]) -> Optional[float]:
    if not line_height or line_height == "normal":
        return None
    return px_to_pt(line_height)


def extract_background(body: ElementNode, issues: list) -> Background:
    bg_image = body.style["background-image"]
    bg_color = body.style["background-color"]

    if bg_image and ("linear-gradient" in bg_image or "radial-gradient" in bg_image):
        issues.append(errors.gradient())

    if bg_image and bg_image != "none":
        url = _URL_RE.search(bg_image)
        if url:
            return Background(type="image", path=url.group(1))
    return Background(type="color", value=rgb_to_hex(bg_color))


def build_placeholder(element: ElementNode, index: int, issues: list) -> Optional[Placeholder]:
    if not element.rect.has_area:
        issues.append(errors.zero_size_placeholder(element.id))
        return None
    pos = _position(element)
    return Placeholder(id=element.id or f"placeholder-{index}", x=pos.x, y=pos.y, w=pos.w, h=pos.h)


def build_container(element: ElementNode, issues: list) -> list:
    """Shape and/or border lines for a ``<div>``."""
    for child in element.children:
        if isinstance(child, TextNode) and child.text.strip():
            issues.append(errors.unwrapped_text(child.text.strip()))

    style = element.style
    if style["background-image"] and style["background-image"] != "none":
        issues.append(errors.shape_background_image())
        return []

    has_bg = not is_transparent(style["background-color"])
    widths = [px(style[f"border-{side}-width"]) for side in BORDER_SIDES]
    has_border = any(w > 0 for w in widths)
    uniform_border = has_border and all(w == widths[0] for w in widths)

    rect = element.rect
    if not (has_bg or has_border) or not rect.has_area:
        return []

    position = _position(element)
    built: list = []
    if has_bg or uniform_border:
        built.append(
            ShapeElement(
                position=position,
                fill=rgb_to_hex(style["background-color"]) if has_bg else None,
                transparency=extract_alpha(style["background-color"]) if has_bg else None,
                line=LineStyle(
                    color=rgb_to_hex(style["border-top-color"]),
                    width=px_to_pt(widths[0]),
                )
                if uniform_border
                else None,
                rect_radius=border_radius_to_inches(style["border-radius"], rect.width, rect.height),
                shadow=parse_box_shadow(style["box-shadow"]),
            )
        )
    if has_border and not uniform_border:
        built.extend(border_lines(position, widths, style))
    return built


def border_lines(position: Position, widths: list, style) -> list[LineElement]:
    """One line per non-zero edge, centred on the edge (inset by half its width)."""
    x, y, w, h = position.x, position.y, position.w, position.h
    lines = []
    for side, width_px in zip(BORDER_SIDES, widths):
        if width_px <= 0:
            continue
        width_pt = px_to_pt(width_px)
        inset = width_pt / 72 / 2
        if side == "top":
            coords = (x, y + inset, x + w, y + inset)
        elif side == "right":
            coords = (x + w - inset, y, x + w - inset, y + h)
        elif side == "bottom":
            coords = (x, y + h - inset, x + w, y + h - inset)
        else:
            coords = (x + inset, y, x + inset, y + h)
        lines.append(
            LineElement(*coords, width=width_pt, color=rgb_to_hex(style[f"border-{side}-color"]))
        )
    return lines


def build_list(element: ElementNode, issues: list) -> ListElement:
    items = element.find_all("li")
    # margin-left (bullet position) + indent (text position) = ul padding-left
    padding_pt = px_to_pt(element.style["padding-left"])
    bullet_margin = padding_pt * 0.5
    text_indent = padding_pt * 0.5

    runs: list = []
    for idx, item in enumerate(items):
        item_runs = parse_inline_runs(
            item,
            issues,
            base=RunOptions(break_line=False),
            text_transform=item.style["text-transform"],
        )
        if item_runs:
            first = item_runs[0]
            item_runs[0] = replace(
                first,
                text=LIST_GLYPH_RE.sub("", first.text, count=1),
                options=replace(first.options, bullet=Bullet(indent=text_indent)),
            )
            if idx < len(items) - 1:
                last = item_runs[-1]
                item_runs[-1] = replace(last, options=replace(last.options, break_line=True))
        runs.extend(item_runs)

    style = (items[0] if items else element).style
    return ListElement(
        items=tuple(runs),
        position=_position(element),
        style=TextStyle(
            font_size=px_to_pt(style["font-size"]),
            font_face=first_font_family(style["font-family"]),
            color=rgb_to_hex(style["color"]),
            transparency=extract_alpha(style["color"]),
            align=_align(style["text-align"]),
            line_spacing=_line_spacing(style["line-height"]),
            para_space_before=0.0,
            para_space_after=px_to_pt(style["margin-bottom"]),
            margin=(bullet_margin, 0.0, 0.0, 0.0),
        ),
    )


def build_text(element: ElementNode, issues: list) -> Optional[TextElement]:
    rect = element.rect
    text = element.text_content.strip()
    if not rect.has_area or not text:
        return None

    if element.tag != "li" and MANUAL_BULLET_RE.match(text):
        issues.append(errors.manual_bullet(element.tag, text))
        return None

    style = element.style
    rotation = get_rotation(style["transform"], style["writing-mode"])
    x, y, w, h = pre_rotation_box(
        rect.left,
        rect.top,
        rect.width,
        rect.height,
        rotation,
        element.offset_width,
        element.offset_height,
    )
    position = Position(px_to_inch(x), px_to_inch(y), px_to_inch(w), px_to_inch(h))

    base = TextStyle(
        font_size=px_to_pt(style["font-size"]),
        font_face=first_font_family(style["font-family"]),
        color=rgb_to_hex(style["color"]),
        align=_align(style["text-align"]),
        line_spacing=_line_spacing(style["line-height"]),
        para_space_before=px_to_pt(style["margin-top"]),
        para_space_after=px_to_pt(style["margin-bottom"]),
        margin=(
            px_to_pt(style["padding-left"]),
            px_to_pt(style["padding-right"]),
            px_to_pt(style["padding-bottom"]),
            px_to_pt(style["padding-top"]),
        ),
        transparency=extract_alpha(style["color"]),
        rotate=rotation,
    )

    if has_inline_formatting(element):
        runs = parse_inline_runs(element, issues, text_transform=style["text-transform"])
        if base.line_spacing:
            max_size = max([base.font_size] + [r.options.font_size or 0 for r in runs])
            if max_size > base.font_size:
                multiplier = base.line_spacing / base.font_size
                base = replace(base, line_spacing=max_size * multiplier)
        return TextElement(tag=element.tag, text=tuple(runs), position=position, style=base)

    bold = is_bold_weight(style["font-weight"]) and not should_skip_bold(style["font-family"])
    return TextElement(
        tag=element.tag,
        text=apply_text_transform(text, style["text-transform"]),
        position=position,
        style=replace(
            base,
            bold=bold,
            italic=style["font-style"] == "italic",
            underline="underline" in (style["text-decoration"] or ""),
        ),
    )
