"""
Rendered document snapshot.

The browser serialises the ``<body>`` subtree once (see ``render.py``): every
element carries its tag, attributes, bounding client rect, offset size and a
fixed set of computed style properties, every text node its raw text. The
extraction engine only ever reads this snapshot, which keeps it independent
of the browser and easy to drive from hand-built trees in tests.
"""

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Union

from .units import parse_length

# Computed properties captured for every element.
STYLE_PROPERTIES = (
    "background-color",
    "background-image",
    "border-top-width",
    "border-right-width",
    "border-bottom-width",
    "border-left-width",
    "border-top-color",
    "border-right-color",
    "border-bottom-color",
    "border-left-color",
    "border-radius",
    "box-shadow",
    "color",
    "font-family",
    "font-size",
    "font-style",
    "font-weight",
    "line-height",
    "margin-top",
    "margin-right",
    "margin-bottom",
    "margin-left",
    "padding-top",
    "padding-right",
    "padding-bottom",
    "padding-left",
    "text-align",
    "text-decoration",
    "text-transform",
    "transform",
    "writing-mode",
    "width",
    "height",
)

# Browser defaults for properties a hand-built or partial snapshot may omit.
STYLE_DEFAULTS = {
    "background-color": "rgba(0, 0, 0, 0)",
    "background-image": "none",
    "border-radius": "0px",
    "box-shadow": "none",
    "color": "rgb(0, 0, 0)",
    "font-family": "Arial",
    "font-size": "16px",
    "font-style": "normal",
    "font-weight": "400",
    "line-height": "normal",
    "text-align": "start",
    "text-decoration": "none",
    "text-transform": "none",
    "transform": "none",
    "writing-mode": "horizontal-tb",
}


class ComputedStyle(dict):
    """Computed style keyed by CSS property name, with browser defaults."""

    def __missing__(self, key):
        if key in STYLE_DEFAULTS:
            return STYLE_DEFAULTS[key]
        if key.endswith("-width") and key.startswith("border-"):
            return "0px"
        if key.startswith(("margin-", "padding-")):
            return "0px"
        if key.startswith("border-") and key.endswith("-color"):
            return self["color"]
        return ""

    def length(self, key: str) -> float:
        value = parse_length(self[key])
        return 0.0 if value is None else value


@dataclass
class Rect:
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0


@dataclass
class TextNode:
    text: str


@dataclass(eq=False)
class ElementNode:
    tag: str
    attrs: dict = field(default_factory=dict)
    style: ComputedStyle = field(default_factory=ComputedStyle)
    rect: Rect = field(default_factory=Rect)
    children: list = field(default_factory=list)
    offset_width: Optional[float] = None
    offset_height: Optional[float] = None
    src: Optional[str] = None  # resolved URL for <img>

    def __post_init__(self):
        self.tag = self.tag.lower()
        if not isinstance(self.style, ComputedStyle):
            self.style = ComputedStyle(self.style)

    @property
    def id(self) -> str:
        return self.attrs.get("id", "")

    @property
    def classes(self) -> list[str]:
        value = self.attrs.get("class", "")
        if isinstance(value, (list, tuple)):
            return list(value)
        return value.split()

    @property
    def text_content(self) -> str:
        parts = []
        for child in self.children:
            if isinstance(child, TextNode):
                parts.append(child.text)
            else:
                parts.append(child.text_content)
        return "".join(parts)

    def iter_elements(self) -> Iterator["ElementNode"]:
        """Descendant elements in document order, excluding self."""
        for child in self.children:
            if isinstance(child, ElementNode):
                yield child
                yield from child.iter_elements()

    def find_all(self, *tags: str) -> list["ElementNode"]:
        return [el for el in self.iter_elements() if el.tag in tags]

    def has_descendant(self, *tags: str) -> bool:
        return any(el.tag in tags for el in self.iter_elements())


Node = Union[ElementNode, TextNode]


@dataclass
class RenderedDocument:
    """Snapshot of a rendered slide plus the body's declared and scroll sizes."""

    body: ElementNode
    width: float  # body computed width, px
    height: float
    scroll_width: float
    scroll_height: float

    def iter_elements(self) -> Iterator[ElementNode]:
        """Body and every element below it, in document order."""
        yield self.body
        yield from self.body.iter_elements()

    @classmethod
    def from_snapshot(cls, data: Mapping) -> "RenderedDocument":
        body = node_from_snapshot(data["body"])
        width = data.get("width")
        height = data.get("height")
        if width is None:
            width = body.style.length("width") or body.rect.width
        if height is None:
            height = body.style.length("height") or body.rect.height
        return cls(
            body=body,
            width=float(width),
            height=float(height),
            scroll_width=float(data.get("scrollWidth", width)),
            scroll_height=float(data.get("scrollHeight", height)),
        )


def node_from_snapshot(data: Mapping) -> Node:
    """Build a node tree from the JSON produced by the snapshot script."""
    if "text" in data and "tag" not in data:
        return TextNode(data["text"])
    rect = data.get("rect") or {}
    return ElementNode(
        tag=data["tag"],
        attrs=dict(data.get("attrs") or {}),
        style=ComputedStyle(data.get("style") or {}),
        rect=Rect(
            left=float(rect.get("left", 0)),
            top=float(rect.get("top", 0)),
            width=float(rect.get("width", 0)),
            height=float(rect.get("height", 0)),
        ),
        children=[node_from_snapshot(c) for c in data.get("children") or []],
        offset_width=data.get("offsetWidth"),
        offset_height=data.get("offsetHeight"),
        src=data.get("src"),
    )
