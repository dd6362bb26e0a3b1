"""
Validation issue taxonomy.

Extraction and validation produce :class:`ValidationIssue` values that carry
structured payloads; the human readable message is only rendered at the
boundary (``issue.message`` / :class:`SlideValidationError`). Text-only
callers can turn a rendered report back into issues with :func:`parse_issues`,
which is how the auto-fixer accepts plain error text.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence


class Html2PptxError(Exception):
    """Base class for errors raised by html2pptx."""


class RenderError(Html2PptxError):
    """The headless browser could not be started or the page not rendered."""


class IssueKind(str, Enum):
    TEXT_PAINT = "text_paint"
    UNWRAPPED_TEXT = "unwrapped_text"
    MANUAL_BULLET = "manual_bullet"
    GRADIENT = "gradient"
    SHAPE_BACKGROUND_IMAGE = "shape_background_image"
    ZERO_SIZE_PLACEHOLDER = "zero_size_placeholder"
    INLINE_MARGIN = "inline_margin"
    SIZE_MISMATCH = "size_mismatch"
    CONTENT_OVERFLOW = "content_overflow"
    TEXT_TOO_CLOSE_TO_BOTTOM = "text_too_close_to_bottom"


def _num(value: float) -> str:
    """Format a measurement the way it reads naturally: 1600.0 -> 1600."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _preview(text: str, limit: int) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


@dataclass(frozen=True)
class ValidationIssue:
    kind: IssueKind
    payload: Mapping[str, Any] = field(default_factory=dict)

    def get(self, key: str, default=None):
        return self.payload.get(key, default)

    @property
    def message(self) -> str:
        return _RENDERERS[self.kind](self.payload)

    def __str__(self) -> str:
        return self.message


# ── Constructors ──────────────────────────────────────────────────────────────


def text_paint(tag: str, paint: str) -> ValidationIssue:
    """``paint`` is one of ``background``, ``border``, ``shadow``."""
    return ValidationIssue(IssueKind.TEXT_PAINT, {"tag": tag, "paint": paint})


def unwrapped_text(text: str) -> ValidationIssue:
    return ValidationIssue(IssueKind.UNWRAPPED_TEXT, {"text": _preview(text, 50)})


def manual_bullet(tag: str, text: str) -> ValidationIssue:
    return ValidationIssue(IssueKind.MANUAL_BULLET, {"tag": tag, "text": text[:20]})


def gradient() -> ValidationIssue:
    return ValidationIssue(IssueKind.GRADIENT)


def shape_background_image() -> ValidationIssue:
    return ValidationIssue(IssueKind.SHAPE_BACKGROUND_IMAGE)


def zero_size_placeholder(element_id: Optional[str]) -> ValidationIssue:
    return ValidationIssue(IssueKind.ZERO_SIZE_PLACEHOLDER, {"id": element_id or ""})


def inline_margin(tag: str, prop: str) -> ValidationIssue:
    return ValidationIssue(IssueKind.INLINE_MARGIN, {"tag": tag, "property": prop})


def size_mismatch(width_px, height_px, layout_width_px, layout_height_px) -> ValidationIssue:
    return ValidationIssue(
        IssueKind.SIZE_MISMATCH,
        {
            "width": width_px,
            "height": height_px,
            "layout_width": layout_width_px,
            "layout_height": layout_height_px,
        },
    )


def content_overflow(
    width_px, height_px, overflow_x_px, overflow_y_px, bottom_margin_px=48
) -> ValidationIssue:
    return ValidationIssue(
        IssueKind.CONTENT_OVERFLOW,
        {
            "width": width_px,
            "height": height_px,
            "overflow_x": overflow_x_px,
            "overflow_y": overflow_y_px,
            "bottom_margin": bottom_margin_px,
        },
    )


def text_too_close_to_bottom(text: str, distance_px: float, minimum_px: float) -> ValidationIssue:
    return ValidationIssue(
        IssueKind.TEXT_TOO_CLOSE_TO_BOTTOM,
        {"text": _preview(text, 50), "distance": round(distance_px), "minimum": minimum_px},
    )


# ── Rendering ─────────────────────────────────────────────────────────────────


def _render_overflow(p) -> str:
    directions = []
    if p["overflow_x"] > 0:
        directions.append(f"{_num(p['overflow_x'])}px horizontally")
    if p["overflow_y"] > 0:
        directions.append(f"{_num(p['overflow_y'])}px vertically")
    reminder = ""
    if p["overflow_y"] > 0:
        margin = p.get("bottom_margin", 48)
        reminder = f" (keep a {_num(margin)}px bottom margin on the slide)"
    return (
        f"HTML content overflows body ({_num(p['width'])}x{_num(p['height'])}): "
        f"{' and '.join(directions)}{reminder}"
    )


_RENDERERS = {
    IssueKind.TEXT_PAINT: lambda p: (
        f"Text element <{p['tag']}> has {p['paint']}. Only <div> elements "
        "support backgrounds, borders and shadows, text elements do not."
    ),
    IssueKind.UNWRAPPED_TEXT: lambda p: (
        f'DIV element contains unwrapped text "{p["text"]}". All text must be '
        "wrapped in <p>, <h1>-<h6>, <ul> or <ol> tags to appear in PowerPoint."
    ),
    IssueKind.MANUAL_BULLET: lambda p: (
        f'Text element <{p["tag"]}> starts with bullet symbol "{p["text"]}...". '
        "Use <ul> or <ol> lists instead of manual bullet symbols."
    ),
    IssueKind.GRADIENT: lambda p: (
        "CSS gradients are not supported. Render the gradient to a PNG image "
        "first and reference it with background-image: url(gradient.png)."
    ),
    IssueKind.SHAPE_BACKGROUND_IMAGE: lambda p: (
        "Background images on DIV elements are not supported. Use solid color "
        "or border as shape, or overlay the picture with an <img> element."
    ),
    IssueKind.ZERO_SIZE_PLACEHOLDER: lambda p: (
        f'Placeholder "{p["id"] or "unnamed"}" has zero width or height. '
        "Check the layout CSS."
    ),
    IssueKind.INLINE_MARGIN: lambda p: (
        f"Inline element <{p['tag']}> has {p['property']}, which PowerPoint "
        "does not support. Remove margins from inline elements."
    ),
    IssueKind.SIZE_MISMATCH: lambda p: (
        f"HTML dimensions ({_num(p['width'])}px x {_num(p['height'])}px) don't "
        f"match presentation layout ({_num(p['layout_width'])}px x "
        f"{_num(p['layout_height'])}px)"
    ),
    IssueKind.CONTENT_OVERFLOW: _render_overflow,
    IssueKind.TEXT_TOO_CLOSE_TO_BOTTOM: lambda p: (
        f'Text box "{p["text"]}" is too close to the bottom edge '
        f"({_num(p['distance'])}px, needs at least {_num(p['minimum'])}px)"
    ),
}


def format_issues(issues: Sequence[ValidationIssue]) -> str:
    """One issue verbatim, several as a numbered summary."""
    if len(issues) == 1:
        return issues[0].message
    lines = [f"  {i}. {issue.message}" for i, issue in enumerate(issues, 1)]
    return "Multiple validation errors found:\n" + "\n".join(lines)


class SlideValidationError(Html2PptxError):
    """Raised once per slide with every issue found during extraction."""

    def __init__(self, issues: Sequence[ValidationIssue], source: Optional[str] = None):
        self.issues = tuple(issues)
        self.source = source
        message = format_issues(self.issues)
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


# ── Parsing rendered text back into issues ────────────────────────────────────

_PARSERS = [
    (
        IssueKind.TEXT_PAINT,
        re.compile(r"[Tt]ext element <(\w+)> has (border|background|shadow)"),
        lambda m: {"tag": m.group(1), "paint": m.group(2)},
    ),
    (
        IssueKind.UNWRAPPED_TEXT,
        re.compile(r'DIV element contains unwrapped text "(.*?)"\. All text', re.S),
        lambda m: {"text": m.group(1)},
    ),
    (
        IssueKind.MANUAL_BULLET,
        re.compile(r'Text element <(\w+)> starts with bullet symbol "(.*?)\.\.\."', re.S),
        lambda m: {"tag": m.group(1), "text": m.group(2)},
    ),
    (IssueKind.GRADIENT, re.compile(r"CSS gradients are not supported"), lambda m: {}),
    (
        IssueKind.SHAPE_BACKGROUND_IMAGE,
        re.compile(r"[Uu]se solid color or border as shape"),
        lambda m: {},
    ),
    (
        IssueKind.ZERO_SIZE_PLACEHOLDER,
        re.compile(r'Placeholder "(.*?)" has zero width or height'),
        lambda m: {"id": "" if m.group(1) == "unnamed" else m.group(1)},
    ),
    (
        IssueKind.INLINE_MARGIN,
        re.compile(r"Inline element <(\w+)> has (margin-\w+)"),
        lambda m: {"tag": m.group(1), "property": m.group(2)},
    ),
    (
        IssueKind.SIZE_MISMATCH,
        re.compile(
            r"HTML dimensions \(([\d.]+)px x ([\d.]+)px\) don't match "
            r"presentation layout \(([\d.]+)px x ([\d.]+)px\)"
        ),
        lambda m: {
            "width": float(m.group(1)),
            "height": float(m.group(2)),
            "layout_width": float(m.group(3)),
            "layout_height": float(m.group(4)),
        },
    ),
    (
        IssueKind.CONTENT_OVERFLOW,
        re.compile(
            r"HTML content overflows body \(([\d.]+)x([\d.]+)\): "
            r"(?:([\d.]+)px horizontally)?(?: and )?(?:([\d.]+)px vertically)?"
        ),
        lambda m: {
            "width": float(m.group(1)),
            "height": float(m.group(2)),
            "overflow_x": float(m.group(3) or 0),
            "overflow_y": float(m.group(4) or 0),
        },
    ),
    (
        IssueKind.TEXT_TOO_CLOSE_TO_BOTTOM,
        re.compile(
            r'Text box "(.*?)" is too close to the bottom edge '
            r"\((-?[\d.]+)px, needs at least ([\d.]+)px\)",
            re.S,
        ),
        lambda m: {
            "text": m.group(1),
            "distance": float(m.group(2)),
            "minimum": float(m.group(3)),
        },
    ),
]


def parse_issues(text: str) -> list[ValidationIssue]:
    """Recover issues from a rendered error report, in order of appearance."""
    found = []
    for kind, pattern, build in _PARSERS:
        for m in pattern.finditer(text or ""):
            found.append((m.start(), ValidationIssue(kind, build(m))))
    found.sort(key=lambda item: item[0])
    return [issue for _, issue in found]


def as_issues(errors) -> list[ValidationIssue]:
    """Normalise error text, an exception or an iterable of issues."""
    if errors is None:
        return []
    if isinstance(errors, SlideValidationError):
        return list(errors.issues)
    if isinstance(errors, (str, BaseException)):
        return parse_issues(str(errors))
    return [e for e in _flatten(errors)]


def _flatten(errors: Iterable) -> Iterable[ValidationIssue]:
    for e in errors:
        if isinstance(e, ValidationIssue):
            yield e
        else:
            yield from parse_issues(str(e))
