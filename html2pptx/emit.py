"""
Emit a Slide Model onto a python-pptx slide.

One scene object per element: pictures for images, connectors for border
lines, auto shapes for container shapes and text boxes for text and lists.
Features python-pptx has no API for (fill/text alpha, outer shadows,
bullets) are written straight into the DrawingML.
"""

import base64
import io
import logging
from typing import Optional
from urllib.parse import unquote, urlparse

from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from .config import DEFAULT_SETTINGS, Settings
from .model import (
    Background,
    ImageElement,
    LineElement,
    ListElement,
    Position,
    Run,
    RunOptions,
    ShapeElement,
    SlideModel,
    TextElement,
    TextStyle,
)

logger = logging.getLogger(__name__)

ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}
BULLET_CHAR = "•"
LINE_HEIGHT_FACTOR = 1.2
# rect_radius value meaning "border-radius >= 50%".
FULL_ELLIPSE = 1.0


# ── Low-level helpers ─────────────────────────────────────────────────────────


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.upper())


def _set_alpha(parent, transparency: Optional[int]):
    """Add ``<a:alpha>`` to the solid fill directly under *parent*."""
    if transparency is None:
        return
    solid = parent.find(qn("a:solidFill"))
    if solid is None:
        return
    clr = solid.find(qn("a:srgbClr"))
    if clr is None:
        return
    alpha = OxmlElement("a:alpha")
    alpha.set("val", str(int(round((100 - transparency) * 1000))))
    clr.append(alpha)


def _local_path(src: str) -> str:
    if src.startswith("file://"):
        return unquote(urlparse(src).path)
    return src


def _image_source(src: str):
    """A path or an in-memory stream for ``add_picture``."""
    if src.startswith("data:"):
        _, _, payload = src.partition(",")
        return io.BytesIO(base64.b64decode(payload))
    return _local_path(src)


def set_slide_background(slide, background: Background, prs=None):
    """Solid color fill, or a full-bleed picture added first so it stays behind."""
    if background.type == "image" and background.path:
        width = prs.slide_width if prs is not None else Inches(DEFAULT_SETTINGS.page_width)
        height = prs.slide_height if prs is not None else Inches(DEFAULT_SETTINGS.page_height)
        slide.shapes.add_picture(_image_source(background.path), 0, 0, width, height)
    elif background.type == "color" and background.value:
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _rgb(background.value)


def _set_font(run, style: TextStyle, options: RunOptions):
    """Apply run options on top of the element's base style."""
    font = run.font
    font.name = style.font_face or None
    font.size = Pt(options.font_size or style.font_size)
    font.bold = options.bold if options.bold is not None else style.bold
    font.italic = options.italic if options.italic is not None else style.italic
    font.underline = options.underline if options.underline is not None else style.underline
    font.color.rgb = _rgb(options.color or style.color)
    transparency = options.transparency if options.color else style.transparency
    _set_alpha(run._r.get_or_add_rPr(), transparency)


def _format_paragraph(paragraph, style: TextStyle):
    paragraph.alignment = ALIGNMENTS.get(style.align, PP_ALIGN.LEFT)
    if style.line_spacing:
        paragraph.line_spacing = Pt(style.line_spacing)
    paragraph.space_before = Pt(style.para_space_before or 0)
    paragraph.space_after = Pt(style.para_space_after or 0)


def _add_runs(paragraph, runs, style: TextStyle):
    for r in runs:
        for i, line in enumerate(r.text.split("\n")):
            if i > 0:
                paragraph.add_line_break()
            if line:
                run = paragraph.add_run()
                run.text = line
                _set_font(run, style, r.options)


def _new_text_box(slide, x: float, y: float, w: float, h: float, style: TextStyle):
    box = slide.shapes.add_textbox(Inches(x), Inches(y), Inches(w), Inches(h))
    tf = box.text_frame
    tf.word_wrap = True
    tf.auto_size = MSO_AUTO_SIZE.NONE
    tf.vertical_anchor = MSO_ANCHOR.TOP
    left, right, bottom, top = style.margin
    tf.margin_left = Pt(left)
    tf.margin_right = Pt(right)
    tf.margin_bottom = Pt(bottom)
    tf.margin_top = Pt(top)
    return box


# ── Element emitters ──────────────────────────────────────────────────────────


def add_image(slide, element: ImageElement):
    pos = element.position
    return slide.shapes.add_picture(
        _image_source(element.src), Inches(pos.x), Inches(pos.y), Inches(pos.w), Inches(pos.h)
    )


def add_line(slide, element: LineElement):
    connector = slide.shapes.add_connector(
        MSO_CONNECTOR.STRAIGHT,
        Inches(element.x1),
        Inches(element.y1),
        Inches(element.x2),
        Inches(element.y2),
    )
    connector.line.color.rgb = _rgb(element.color)
    connector.line.width = Pt(element.width)
    return connector


def _add_shadow(shape, element: ShapeElement):
    shadow = element.shadow
    effects = OxmlElement("a:effectLst")
    outer = OxmlElement("a:outerShdw")
    outer.set("blurRad", str(Pt(shadow.blur)))
    outer.set("dist", str(Pt(shadow.offset)))
    outer.set("dir", str(int(shadow.angle * 60000)))
    outer.set("rotWithShape", "0")
    clr = OxmlElement("a:srgbClr")
    clr.set("val", shadow.color.upper())
    alpha = OxmlElement("a:alpha")
    alpha.set("val", str(int(round(shadow.opacity * 100000))))
    clr.append(alpha)
    outer.append(clr)
    effects.append(outer)
    shape._element.spPr.append(effects)


def add_shape(slide, element: ShapeElement):
    """Filled and/or stroked rectangle, rounded when a corner radius is set.

    A full-ellipse radius becomes an oval inscribed in the box.
    """
    pos = element.position
    if element.rect_radius >= FULL_ELLIPSE:
        shape_type = MSO_SHAPE.OVAL
    elif element.rect_radius > 0:
        shape_type = MSO_SHAPE.ROUNDED_RECTANGLE
    else:
        shape_type = MSO_SHAPE.RECTANGLE
    shape = slide.shapes.add_shape(
        shape_type, Inches(pos.x), Inches(pos.y), Inches(pos.w), Inches(pos.h)
    )

    if element.fill:
        shape.fill.solid()
        shape.fill.fore_color.rgb = _rgb(element.fill)
        _set_alpha(shape._element.spPr, element.transparency)
    else:
        shape.fill.background()

    if element.line:
        shape.line.color.rgb = _rgb(element.line.color)
        shape.line.width = Pt(element.line.width)
    else:
        shape.line.fill.background()

    if shape_type == MSO_SHAPE.ROUNDED_RECTANGLE:
        # Adjustment is radius / shorter side, 0.5 being a full semicircle.
        shorter = min(pos.w, pos.h) or 1
        shape.adjustments[0] = min(element.rect_radius / shorter, 0.5)

    if element.shadow:
        _add_shadow(shape, element)

    if element.text:
        shape.text_frame.text = element.text
    return shape


def widen_single_line(position: Position, style: TextStyle, widen: float) -> tuple[float, float]:
    """Return ``(x, w)``, widening single-line boxes by *widen* of their width.

    PowerPoint measures text slightly wider than the browser, so a one-line
    box sized exactly to its text would wrap. The box grows away from its
    alignment edge.
    """
    line_height_pt = style.line_spacing or style.font_size * LINE_HEIGHT_FACTOR
    if position.h * 72 > line_height_pt * 1.5:
        return position.x, position.w

    increase = position.w * widen
    if style.align == "center":
        return position.x - increase / 2, position.w + increase
    if style.align == "right":
        return position.x - increase, position.w + increase
    return position.x, position.w + increase


def add_text(slide, element: TextElement, settings: Settings = DEFAULT_SETTINGS):
    style = element.style
    pos = element.position
    x, w = widen_single_line(pos, style, settings.single_line_widen)
    box = _new_text_box(slide, x, pos.y, w, pos.h, style)
    if style.rotate is not None:
        box.rotation = float(style.rotate)

    p = box.text_frame.paragraphs[0]
    _format_paragraph(p, style)
    if isinstance(element.text, str):
        _add_runs(p, [Run(element.text)], style)
    else:
        _add_runs(p, element.text, style)
    return box


def _set_bullet(paragraph, indent_pt: float):
    # The list's left padding is already the text box inset.
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(Pt(indent_pt)))
    pPr.set("indent", str(-Pt(indent_pt)))
    bullet = OxmlElement("a:buChar")
    bullet.set("char", BULLET_CHAR)
    pPr.append(bullet)


def add_list(slide, element: ListElement):
    """One paragraph per item; items end at runs flagged ``break_line``."""
    style = element.style
    pos = element.position
    box = _new_text_box(slide, pos.x, pos.y, pos.w, pos.h, style)
    tf = box.text_frame

    paragraphs: list[list[Run]] = [[]]
    for r in element.items:
        paragraphs[-1].append(r)
        if r.options.break_line:
            paragraphs.append([])
    if not paragraphs[-1] and len(paragraphs) > 1:
        paragraphs.pop()

    for idx, item_runs in enumerate(paragraphs):
        p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
        _format_paragraph(p, style)
        bullet = next((r.options.bullet for r in item_runs if r.options.bullet), None)
        if bullet is not None:
            _set_bullet(p, bullet.indent)
        _add_runs(p, item_runs, style)
    return box


def emit_slide(model: SlideModel, slide, prs=None, settings: Settings = DEFAULT_SETTINGS):
    """Draw *model* onto *slide*. Images marked ``skip`` are left out."""
    set_slide_background(slide, model.background, prs)
    for element in model.elements:
        if isinstance(element, ImageElement):
            if element.skip:
                logger.debug("Skipping image %s", element.src[:60])
                continue
            add_image(slide, element)
        elif isinstance(element, LineElement):
            add_line(slide, element)
        elif isinstance(element, ShapeElement):
            add_shape(slide, element)
        elif isinstance(element, ListElement):
            add_list(slide, element)
        elif isinstance(element, TextElement):
            add_text(slide, element, settings)
