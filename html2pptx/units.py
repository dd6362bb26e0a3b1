"""
Unit and geometry helpers shared by extraction, validation and emission.

Browser computed styles always come back in ``px`` and ``rgb()/rgba()``
notation, so the parsers here only need to understand that vocabulary.
"""

import math
import re
from typing import Optional

from .config import PT_PER_IN, PT_PER_PX, PX_PER_IN
from .model import Shadow

_NUMBER_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?|-?\.\d+)")
_RGB_RE = re.compile(r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)")
_RGBA_RE = re.compile(r"rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([\d.]+)\s*\)")
_ROTATE_RE = re.compile(r"rotate\((-?\d+(?:\.\d+)?)deg\)")
_MATRIX_RE = re.compile(r"matrix\(([^)]+)\)")
_SHADOW_COLOR_RE = re.compile(r"rgba?\([^)]+\)")
_SHADOW_LENGTH_RE = re.compile(r"(-?[\d.]+)(px|pt)")

TRANSPARENT_COLORS = ("rgba(0, 0, 0, 0)", "rgba(0,0,0,0)", "transparent")


def parse_length(value) -> Optional[float]:
    """Leading number of a CSS length (``"12.5px"`` -> 12.5), None if absent."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = _NUMBER_RE.match(str(value))
    if not m:
        return None
    return float(m.group(1))


def px(value) -> float:
    """Like :func:`parse_length` but 0.0 for missing values (``auto``, ``""``)."""
    parsed = parse_length(value)
    return 0.0 if parsed is None else parsed


def px_to_inch(value: float) -> float:
    return value / PX_PER_IN


def px_to_pt(value) -> float:
    """Convert a px number or CSS length string to points."""
    return px(value) * PT_PER_PX


def is_transparent(color: Optional[str]) -> bool:
    return not color or color.strip() in TRANSPARENT_COLORS


# ── Colors ────────────────────────────────────────────────────────────────────


def rgb_to_hex(color: Optional[str]) -> str:
    """``rgb(10, 20, 30)`` -> ``0A141E``. Transparent or unknown -> white."""
    if is_transparent(color):
        return "FFFFFF"
    m = _RGB_RE.search(color)
    if not m:
        return "FFFFFF"
    return "".join(f"{min(int(c), 255):02X}" for c in m.groups())


def extract_alpha(color: Optional[str]) -> Optional[int]:
    """Transparency percentage (0-100) of an ``rgba()`` color.

    Colors without an alpha channel and fully transparent colors (which map
    to white) have no transparency.
    """
    if is_transparent(color):
        return None
    m = _RGBA_RE.search(color)
    if not m:
        return None
    alpha = float(m.group(4))
    return round((1 - alpha) * 100)


def apply_text_transform(text: str, text_transform: Optional[str]) -> str:
    if text_transform == "uppercase":
        return text.upper()
    if text_transform == "lowercase":
        return text.lower()
    if text_transform == "capitalize":
        return re.sub(r"\b\w", lambda m: m.group(0).upper(), text)
    return text


def first_font_family(font_family: Optional[str]) -> str:
    """``'"Segoe UI", Arial'`` -> ``Segoe UI``."""
    if not font_family:
        return ""
    return font_family.split(",")[0].replace('"', "").replace("'", "").strip()


def is_bold_weight(font_weight: Optional[str]) -> bool:
    if not font_weight:
        return False
    if font_weight == "bold":
        return True
    weight = parse_length(font_weight)
    return weight is not None and weight >= 600


# ── Rotation ──────────────────────────────────────────────────────────────────


def get_rotation(transform: Optional[str], writing_mode: Optional[str]) -> Optional[int]:
    """Net clockwise rotation in degrees within [0, 360), None when unrotated.

    Vertical writing modes map onto PowerPoint rotations (vertical-rl reads
    top to bottom = 90, vertical-lr reads bottom to top = 270) and any CSS
    transform rotation is added on top.
    """
    angle = 0.0
    if writing_mode == "vertical-rl":
        angle = 90.0
    elif writing_mode == "vertical-lr":
        angle = 270.0

    if transform and transform != "none":
        rotate = _ROTATE_RE.search(transform)
        if rotate:
            angle += float(rotate.group(1))
        else:
            matrix = _MATRIX_RE.search(transform)
            if matrix:
                values = [float(v) for v in matrix.group(1).split(",")]
                angle += round(math.degrees(math.atan2(values[1], values[0])))

    normalized = round(angle % 360) % 360
    return None if normalized == 0 else normalized


def pre_rotation_box(
    left: float,
    top: float,
    width: float,
    height: float,
    rotation: Optional[int],
    offset_width: Optional[float] = None,
    offset_height: Optional[float] = None,
) -> tuple[float, float, float, float]:
    """Return the unrotated ``(x, y, w, h)`` box, in px, around the visual center.

    The browser reports the bounding box of the rotated element while
    PowerPoint rotates an unrotated box, so for quarter turns width and
    height are swapped; other angles fall back to the layout (offset) size.
    """
    if rotation is None:
        return left, top, width, height

    center_x = left + width / 2
    center_y = top + height / 2
    if rotation in (90, 270):
        return center_x - height / 2, center_y - width / 2, height, width

    w = width if offset_width is None else offset_width
    h = height if offset_height is None else offset_height
    return center_x - w / 2, center_y - h / 2, w, h


# ── Box shadow & border radius ────────────────────────────────────────────────


def parse_box_shadow(box_shadow: Optional[str]) -> Optional[Shadow]:
    """Parse a computed ``box-shadow`` into an outer :class:`Shadow`.

    Computed form is ``rgba(0, 0, 0, 0.3) 2px 2px 8px 0px [inset]``. Inset
    shadows are dropped since PowerPoint cannot represent them safely.
    """
    if not box_shadow or box_shadow == "none":
        return None
    if "inset" in box_shadow:
        return None

    color_match = _SHADOW_COLOR_RE.search(box_shadow)
    # Strip the color so its channels are not mistaken for lengths.
    lengths_part = _SHADOW_COLOR_RE.sub(" ", box_shadow)
    parts = _SHADOW_LENGTH_RE.findall(lengths_part)
    if len(parts) < 2:
        return None

    offset_x = float(parts[0][0])
    offset_y = float(parts[1][0])
    blur = float(parts[2][0]) if len(parts) > 2 else 0.0

    angle = 0.0
    if offset_x != 0 or offset_y != 0:
        angle = math.degrees(math.atan2(offset_y, offset_x))
        if angle < 0:
            angle += 360

    opacity = 0.5
    if color_match:
        rgba = _RGBA_RE.search(color_match.group(0))
        if rgba:
            opacity = float(rgba.group(4))
        else:
            opacity = 1.0

    return Shadow(
        angle=round(angle) % 360,
        blur=blur * PT_PER_PX,
        color=rgb_to_hex(color_match.group(0)) if color_match else "000000",
        offset=math.hypot(offset_x, offset_y) * PT_PER_PX,
        opacity=opacity,
    )


def border_radius_to_inches(radius: Optional[str], width_px: float, height_px: float) -> float:
    """Convert a computed ``border-radius`` into PowerPoint's corner radius.

    Percentages of 50% or more mean a full ellipse (factor 1); smaller
    percentages are a fraction of the shorter side. Absolute values are
    converted from pt or px to inches.
    """
    value = parse_length(radius)
    if not value:
        return 0.0
    if "%" in radius:
        if value >= 50:
            return 1.0
        return (value / 100) * px_to_inch(min(width_px, height_px))
    if "pt" in radius:
        return value / PT_PER_IN
    return value / PX_PER_IN
