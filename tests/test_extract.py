import pytest
from helpers import doc, el

from html2pptx.errors import IssueKind
from html2pptx.extract import Role, classify, extract_slide
from html2pptx.model import (
    Bullet,
    ImageElement,
    LineElement,
    ListElement,
    Position,
    ShapeElement,
    TextElement,
)


def borders(**widths):
    style = {"color": "rgb(255, 0, 0)"}
    for side, width in widths.items():
        style[f"border-{side}-width"] = width
    return style


def kinds(model):
    return [issue.kind for issue in model.errors]


class TestClassify:
    def test_list_claims_its_items(self):
        li = el("li", "one", rect=(0, 0, 100, 20))
        ul = el("ul", li, rect=(0, 0, 100, 20))
        roles = classify(doc(ul))
        assert roles[ul].role is Role.LIST
        assert roles[li].role is Role.LIST_ITEM

    def test_painted_text_beats_other_roles(self):
        p = el("p", "x", rect=(0, 0, 10, 10), style={"box-shadow": "rgb(0, 0, 0) 1px 1px 2px 0px"})
        claim = classify(doc(p))[p]
        assert claim.role is Role.PAINTED_TEXT
        assert claim.detail == "shadow"

    def test_zero_size_image_is_ignored(self):
        img = el("img", src="a.png")
        assert classify(doc(img))[img].role is Role.IGNORED


class TestContainers:
    def test_uniform_border_is_one_shape(self):
        div = el("div", rect=(96, 96, 192, 96), style=borders(top="2px", right="2px", bottom="2px", left="2px"))
        model = extract_slide(doc(div))

        assert model.errors == ()
        (shape,) = model.elements
        assert isinstance(shape, ShapeElement)
        assert shape.position == Position(1, 1, 2, 1)
        assert shape.fill is None
        assert shape.line.color == "FF0000"
        assert shape.line.width == 1.5

    def test_partial_border_becomes_inset_lines(self):
        div = el("div", rect=(96, 96, 192, 96), style=borders(left="4px"))
        (line,) = extract_slide(doc(div)).elements

        inset = 3 / 72 / 2
        assert isinstance(line, LineElement)
        assert (line.x1, line.y1, line.x2, line.y2) == pytest.approx((1 + inset, 1, 1 + inset, 2))
        assert line.width == 3
        assert line.color == "FF0000"

    def test_background_with_partial_border(self):
        style = borders(top="1px", bottom="3px")
        style["background-color"] = "rgba(0, 0, 255, 0.5)"
        model = extract_slide(doc(el("div", rect=(0, 0, 96, 96), style=style)))

        shape, top, bottom = model.elements
        assert shape.fill == "0000FF"
        assert shape.transparency == 50
        assert shape.line is None
        assert isinstance(top, LineElement) and isinstance(bottom, LineElement)
        assert bottom.y1 == pytest.approx(1 - 2.25 / 72 / 2)

    def test_rounded_shadowed_shape(self):
        style = {
            "background-color": "rgb(240, 240, 240)",
            "border-radius": "50%",
            "box-shadow": "rgba(0, 0, 0, 0.2) 0px 2px 4px 0px",
        }
        (shape,) = extract_slide(doc(el("div", rect=(0, 0, 96, 96), style=style))).elements
        assert shape.rect_radius == 1.0
        assert shape.shadow.opacity == pytest.approx(0.2)

    def test_unpainted_div_emits_nothing(self):
        model = extract_slide(doc(el("div", rect=(0, 0, 96, 96))))
        assert model.elements == ()

    def test_unwrapped_text(self):
        model = extract_slide(doc(el("div", "Quarterly revenue", rect=(0, 0, 96, 96))))
        assert kinds(model) == [IssueKind.UNWRAPPED_TEXT]
        assert model.errors[0].get("text") == "Quarterly revenue"

    def test_background_image_on_div(self):
        style = {"background-image": 'url("photo.png")', "background-color": "rgb(1, 2, 3)"}
        model = extract_slide(doc(el("div", rect=(0, 0, 96, 96), style=style)))
        assert kinds(model) == [IssueKind.SHAPE_BACKGROUND_IMAGE]
        assert model.elements == ()


class TestLists:
    def test_glyphs_are_stripped_and_bullets_set(self):
        ul = el(
            "ul",
            el("li", "• Item one", rect=(0, 0, 480, 24)),
            el("li", "Item two", rect=(0, 24, 480, 24)),
            rect=(0, 0, 480, 96),
            style={"padding-left": "40px"},
        )
        model = extract_slide(doc(ul))

        assert model.errors == ()
        (lst,) = model.elements
        assert isinstance(lst, ListElement)
        first, second = lst.items
        assert first.text == "Item one"
        assert first.options.bullet == Bullet(indent=15)
        assert first.options.break_line is True
        assert second.text == "Item two"
        assert second.options.break_line is False
        assert lst.style.margin == (15, 0, 0, 0)
        assert lst.style.font_size == 12

    def test_list_items_are_not_text_elements(self):
        ul = el("ul", el("li", "only", rect=(0, 0, 10, 10)), rect=(0, 0, 10, 10))
        model = extract_slide(doc(ul))
        assert [type(e) for e in model.elements] == [ListElement]


class TestText:
    def test_plain_paragraph(self):
        p = el(
            "p",
            "  Hello  ",
            rect=(96, 192, 480, 48),
            style={"font-weight": "700", "text-align": "center", "font-family": "Georgia, serif"},
        )
        (text,) = extract_slide(doc(p)).elements

        assert isinstance(text, TextElement)
        assert text.text == "Hello"
        assert text.position == Position(1, 2, 5, 0.5)
        assert text.style.bold is True
        assert text.style.align == "center"
        assert text.style.font_face == "Georgia"
        assert text.style.rotate is None

    def test_manual_bullet(self):
        model = extract_slide(doc(el("p", "• not a list", rect=(0, 0, 96, 24))))
        assert kinds(model) == [IssueKind.MANUAL_BULLET]
        assert model.errors[0].get("text") == "• not a list"
        assert model.elements == ()

    def test_painted_text(self):
        p = el("p", "x", rect=(0, 0, 96, 24), style={"background-color": "rgb(255, 255, 0)"})
        model = extract_slide(doc(p))
        assert kinds(model) == [IssueKind.TEXT_PAINT]
        assert model.errors[0].get("paint") == "background"
        assert model.elements == ()

    def test_rotated_text_uses_unrotated_box(self):
        p = el("p", "Side", rect=(100, 100, 20, 200), style={"transform": "rotate(90deg)"})
        (text,) = extract_slide(doc(p)).elements
        assert text.style.rotate == 90
        assert text.position == Position(10 / 96, 190 / 96, 200 / 96, 20 / 96)

    def test_runs_scale_line_spacing(self):
        p = el(
            "p",
            "Big ",
            el("span", "number", style={"font-size": "32px"}),
            rect=(0, 0, 400, 60),
            style={"line-height": "24px"},
        )
        (text,) = extract_slide(doc(p)).elements
        assert [r.text for r in text.text] == ["Big ", "number"]
        assert text.style.line_spacing == pytest.approx(36)

    def test_empty_or_zero_size_text_is_dropped(self):
        model = extract_slide(doc(el("p", "   ", rect=(0, 0, 10, 10)), el("h1", "x")))
        assert model.elements == ()


class TestPlaceholdersAndImages:
    def test_placeholder(self):
        div = el("div", rect=(96, 96, 96, 96), class_="placeholder chart", id="sales")
        model = extract_slide(doc(div))
        (ph,) = model.placeholders
        assert (ph.id, ph.x, ph.y, ph.w, ph.h) == ("sales", 1, 1, 1, 1)
        assert model.elements == ()

    def test_unnamed_placeholder_gets_index_id(self):
        model = extract_slide(doc(el("div", rect=(0, 0, 10, 10), class_="placeholder")))
        assert model.placeholders[0].id == "placeholder-0"

    def test_zero_size_placeholder(self):
        model = extract_slide(doc(el("div", class_="placeholder", id="chart")))
        assert kinds(model) == [IssueKind.ZERO_SIZE_PLACEHOLDER]
        assert model.placeholders == ()

    def test_image(self):
        img = el("img", rect=(0, 0, 192, 96), src="logo.png")
        (image,) = extract_slide(doc(img)).elements
        assert isinstance(image, ImageElement)
        assert image.src == "logo.png"
        assert image.position == Position(0, 0, 2, 1)


class TestBackground:
    def test_color(self):
        model = extract_slide(doc(style={"background-color": "rgb(16, 32, 48)"}))
        assert model.background.type == "color"
        assert model.background.value == "102030"

    def test_image(self):
        model = extract_slide(doc(style={"background-image": 'url("file:///tmp/bg.png")'}))
        assert model.background.type == "image"
        assert model.background.path == "file:///tmp/bg.png"

    def test_gradient_is_reported(self):
        model = extract_slide(doc(style={"background-image": "linear-gradient(red, blue)"}))
        assert kinds(model) == [IssueKind.GRADIENT]
        assert model.background.type == "color"

    def test_all_issues_are_collected(self):
        model = extract_slide(
            doc(
                el("div", "loose", rect=(0, 0, 10, 10)),
                el("p", "- dash", rect=(0, 20, 10, 10)),
                el("h2", "boxed", rect=(0, 40, 10, 10), style={"border-top-width": "1px"}),
                style={"background-image": "radial-gradient(red, blue)"},
            )
        )
        assert kinds(model) == [
            IssueKind.GRADIENT,
            IssueKind.UNWRAPPED_TEXT,
            IssueKind.MANUAL_BULLET,
            IssueKind.TEXT_PAINT,
        ]
