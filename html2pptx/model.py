"""
Slide Model: the structured result of extracting one rendered HTML slide.

All geometry is in inches, font sizes and spacing in points, colors are six
digit hex strings with a separate 0-100 transparency, rotation is an integer
degree in [0, 360) or None.
"""

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass(frozen=True)
class Position:
    x: float
    y: float
    w: float
    h: float

    @property
    def bottom(self) -> float:
        return self.y + self.h


@dataclass(frozen=True)
class Background:
    """Slide background: ``type`` is ``"color"`` (``value``) or ``"image"`` (``path``)."""

    type: str
    value: Optional[str] = None
    path: Optional[str] = None


@dataclass(frozen=True)
class Placeholder:
    """Empty region reserved for externally inserted content such as charts."""

    id: str
    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class Bullet:
    indent: float  # points


@dataclass(frozen=True)
class RunOptions:
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    color: Optional[str] = None
    font_size: Optional[float] = None
    transparency: Optional[int] = None
    bullet: Optional[Bullet] = None
    break_line: Optional[bool] = None


@dataclass(frozen=True)
class Run:
    text: str
    options: RunOptions = field(default_factory=RunOptions)


@dataclass(frozen=True)
class Shadow:
    angle: int  # degrees, 0 = right, 90 = down
    blur: float  # points
    color: str
    offset: float  # points
    opacity: float


@dataclass(frozen=True)
class LineStyle:
    color: str
    width: float  # points


@dataclass(frozen=True)
class TextStyle:
    font_size: float
    font_face: str
    color: str
    align: str = "left"
    line_spacing: Optional[float] = None
    para_space_before: float = 0.0
    para_space_after: float = 0.0
    # (left, right, bottom, top) in points
    margin: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    transparency: Optional[int] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    rotate: Optional[int] = None


@dataclass(frozen=True)
class TextElement:
    """A paragraph, heading or stray list item (``tag`` is the HTML tag)."""

    tag: str
    text: Union[str, tuple[Run, ...]]
    position: Position
    style: TextStyle
    type: str = "text"

    @property
    def plain_text(self) -> str:
        if isinstance(self.text, str):
            return self.text
        return next((r.text for r in self.text if r.text), "")


@dataclass(frozen=True)
class ImageElement:
    src: str
    position: Position
    skip: bool = False
    type: str = "image"


@dataclass(frozen=True)
class ShapeElement:
    position: Position
    fill: Optional[str] = None
    transparency: Optional[int] = None
    line: Optional[LineStyle] = None
    rect_radius: float = 0.0  # inches, 1 = full ellipse
    shadow: Optional[Shadow] = None
    text: str = ""
    type: str = "shape"


@dataclass(frozen=True)
class LineElement:
    """One edge of a non-uniform border."""

    x1: float
    y1: float
    x2: float
    y2: float
    width: float  # points
    color: str
    type: str = "line"


@dataclass(frozen=True)
class ListElement:
    items: tuple[Run, ...]
    position: Position
    style: TextStyle
    type: str = "list"

    @property
    def plain_text(self) -> str:
        return next((r.text for r in self.items if r.text), "")


Element = Union[TextElement, ImageElement, ShapeElement, LineElement, ListElement]


@dataclass(frozen=True)
class SlideModel:
    background: Background
    elements: tuple[Element, ...] = ()
    placeholders: tuple[Placeholder, ...] = ()
    errors: tuple = ()  # ValidationIssue, see errors.py
