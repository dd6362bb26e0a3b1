"""
Inline run parser: flattens ``<b>/<i>/<u>/<span>/<br>`` markup into runs.
"""

import re
from dataclasses import replace
from typing import Optional

from . import errors
from .dom import ElementNode, TextNode
from .model import Run, RunOptions
from .units import (
    apply_text_transform,
    extract_alpha,
    first_font_family,
    is_bold_weight,
    px,
    px_to_pt,
    rgb_to_hex,
)

INLINE_CARRIERS = ("span", "b", "strong", "i", "em", "u")
FORMATTING_TAGS = ("b", "i", "u", "strong", "em", "span", "br")

# Single-weight fonts: PowerPoint would apply faux bold, which widens the text.
SINGLE_WEIGHT_FONTS = ("impact",)

_MARGIN_SIDES = ("margin-left", "margin-right", "margin-top", "margin-bottom")
_WHITESPACE_RE = re.compile(r"\s+")


def should_skip_bold(font_family: Optional[str]) -> bool:
    return first_font_family(font_family).lower() in SINGLE_WEIGHT_FONTS


def has_inline_formatting(element: ElementNode) -> bool:
    return element.has_descendant(*FORMATTING_TAGS)


def parse_inline_runs(
    element: ElementNode,
    issues: list,
    base: Optional[RunOptions] = None,
    text_transform: Optional[str] = None,
) -> list[Run]:
    """Return the run sequence for *element*'s children.

    Fragments whose options equal the previous run's are concatenated into
    it. Blank runs at either end are dropped, then only the first remaining
    run is left-trimmed and only the last one right-trimmed. Margins on inline
    carriers are appended to *issues*.
    """
    runs: list[Run] = []
    _walk(element, base or RunOptions(), runs, text_transform, issues)

    runs = [r for r in runs if r.text]
    while runs and not runs[0].text.strip():
        runs.pop(0)
    while runs and not runs[-1].text.strip():
        runs.pop()
    if runs:
        runs[0] = replace(runs[0], text=runs[0].text.lstrip())
        runs[-1] = replace(runs[-1], text=runs[-1].text.rstrip())
    return runs


def _append(runs: list[Run], text: str, options: RunOptions):
    if runs and runs[-1].options == options:
        runs[-1] = replace(runs[-1], text=runs[-1].text + text)
    else:
        runs.append(Run(text=text, options=options))


def _walk(element, options, runs, text_transform, issues):
    for node in element.children:
        if isinstance(node, TextNode):
            text = _WHITESPACE_RE.sub(" ", node.text)
            _append(runs, apply_text_transform(text, text_transform), options)
        elif node.tag == "br":
            _append(runs, "\n", options)
        elif node.tag in INLINE_CARRIERS and node.text_content.strip():
            child_options, child_transform = _carrier_options(
                node, options, text_transform, issues
            )
            _walk(node, child_options, runs, child_transform, issues)


def _carrier_options(node: ElementNode, options: RunOptions, text_transform, issues):
    style = node.style
    changes = {}

    if is_bold_weight(style["font-weight"]) and not should_skip_bold(style["font-family"]):
        changes["bold"] = True
    if style["font-style"] == "italic":
        changes["italic"] = True
    if "underline" in (style["text-decoration"] or ""):
        changes["underline"] = True

    color = style["color"]
    if color and color != "rgb(0, 0, 0)":
        changes["color"] = rgb_to_hex(color)
        transparency = extract_alpha(color)
        if transparency is not None:
            changes["transparency"] = transparency
    if style["font-size"]:
        changes["font_size"] = px_to_pt(style["font-size"])

    if style["text-transform"] and style["text-transform"] != "none":
        text_transform = style["text-transform"]

    # PowerPoint runs have no margins.
    for side in _MARGIN_SIDES:
        if px(style[side]) > 0:
            issues.append(errors.inline_margin(node.tag, side))

    return replace(options, **changes), text_transform
