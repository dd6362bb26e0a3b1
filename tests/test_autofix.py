from bs4 import BeautifulSoup

from html2pptx import errors
from html2pptx.autofix import (
    CssGradientFixer,
    TextElementPaintFixer,
    UnwrappedTextFixer,
    auto_fix_html,
    auto_fix_markup,
    extract_first_color,
)

PAINTED_P = """<html><head><style>
.box{border:1px solid #000;color:#111}
</style></head><body><p class="box" id="intro">Hello</p></body></html>"""


def soup_of(markup):
    return BeautifulSoup(markup, "lxml")


class TestTextElementPaintFixer:
    def test_rule_is_split_and_element_wrapped(self):
        result = auto_fix_markup([errors.text_paint("p", "border")], PAINTED_P)

        assert result.fixed
        assert result.applied == ["TextElementPaintFixer"]
        soup = soup_of(result.markup)
        css = soup.style.string
        assert ".box {\n    border: 1px solid #000;\n}" in css
        assert ".box p {\n    color: #111;\n}" in css
        assert "color:#111}" not in css

        wrapper = soup.body.find("div", class_="box")
        p = wrapper.find("p")
        assert p.get("class") is None
        assert p["id"] == "intro"
        assert p.get_text() == "Hello"

    def test_accepts_error_text(self):
        report = str(errors.SlideValidationError([errors.text_paint("p", "border")]))
        assert auto_fix_markup(report, PAINTED_P).fixed

    def test_rule_without_paint_is_left_alone(self):
        markup = "<style>.box{color:#111}</style><p class='box'>Hi</p>"
        result = TextElementPaintFixer().fix([errors.text_paint("p", "border")], markup)
        assert not result.fixed
        assert result.markup == markup

    def test_every_element_of_the_tag_is_wrapped(self):
        markup = (
            "<style>.card{background:#eee;font-size:14px}</style>"
            "<h2 class='card'>A</h2><h2 class='card'>B</h2>"
        )
        result = TextElementPaintFixer().fix([errors.text_paint("h2", "background")], markup)
        soup = soup_of(result.markup)

        assert len(soup.find_all("div", class_="card")) == 2
        assert soup.style.string.count(".card h2") == 1
        assert result.description == "Moved background styles of 2 <h2> to a wrapping <div>"


class TestUnwrappedTextFixer:
    def test_text_becomes_paragraph(self):
        markup = '<div class="content">Hello</div>'
        result = auto_fix_markup([errors.unwrapped_text("Hello")], markup)

        assert result.fixed
        assert '<div class="content"><p>Hello</p></div>' in result.markup

    def test_multi_line_text_from_error_report(self):
        text = "Hello\n    world"
        markup = f'<div class="content">{text}</div>'
        result = auto_fix_markup(errors.unwrapped_text(text).message, markup)

        assert result.fixed
        assert result.applied == ["UnwrappedTextFixer"]
        assert soup_of(result.markup).div.p.get_text() == text

    def test_title_divs_get_headings(self):
        fixer = UnwrappedTextFixer()
        out = fixer.fix([], '<div class="card-title">Revenue</div>').markup
        assert "<h3>Revenue</h3>" in out

        out = fixer.fix([], '<div class="page-title">Revenue</div>').markup
        assert "<p>Revenue</p>" in out

    def test_children_keep_their_order(self):
        markup = "<div>Lead <span>mid</span> tail</div>"
        div = soup_of(UnwrappedTextFixer().fix([], markup).markup).div
        assert [c.name for c in div.children if c.name] == ["p", "span", "p"]
        assert div.get_text() == "Leadmidtail"


class TestCssGradientFixer:
    def test_gradient_becomes_first_color(self):
        markup = "<style>.hero { background: linear-gradient(to right, #ff0000, #0000ff); }</style>"
        result = auto_fix_markup([], markup)

        assert result.fixed
        assert "background: #ff0000;" in result.markup
        assert "linear-gradient" not in result.markup

    def test_second_run_changes_nothing(self):
        markup = "<style>.hero { background: radial-gradient(circle, rgb(1, 2, 3), white); }</style>"
        once = auto_fix_markup([], markup)
        twice = auto_fix_markup([], once.markup)

        assert once.fixed
        assert "background: rgb(1, 2, 3);" in once.markup
        assert not twice.fixed
        assert twice.markup == once.markup

    def test_background_image_and_inline_styles(self):
        markup = (
            "<div style=\"background-image: url('bg.png')\">x</div>"
            "<div style='background: linear-gradient(red, blue);'>y</div>"
        )
        result = CssGradientFixer().fix([errors.shape_background_image()], markup)
        divs = soup_of(result.markup).find_all("div")

        assert divs[0]["style"] == "background-color: #f5f5f5;"
        assert divs[1]["style"] == "background: red;"

    def test_can_fix_from_issue_or_markup(self):
        fixer = CssGradientFixer()
        assert fixer.can_fix([errors.shape_background_image()], "<p>plain</p>")
        assert fixer.can_fix([], "<style>a{background:linear-gradient(red,blue);}</style>")
        assert not fixer.can_fix([], "<p>plain</p>")

    def test_extract_first_color(self):
        assert extract_first_color("linear-gradient(90deg, #abc 0%, red 100%)") == "#abc"
        assert extract_first_color("linear-gradient(rgba(0, 0, 0, 0.5), red)") == "rgba(0, 0, 0, 0.5)"
        assert extract_first_color("linear-gradient(to right, Orange, red)") == "Orange"
        assert extract_first_color("linear-gradient(to right, papayawhip, tan)") == "#000000"


class TestChain:
    def test_fixers_chain_on_previous_output(self):
        markup = (
            "<style>.box{border:2px solid red;color:#222}"
            ".hero{background: linear-gradient(#123456, #000);}</style>"
            "<p class='box'>A</p><div class='hero'>Loose</div>"
        )
        issues = [errors.text_paint("p", "border"), errors.unwrapped_text("Loose")]
        result = auto_fix_markup(issues, markup)

        assert result.applied == ["TextElementPaintFixer", "UnwrappedTextFixer", "CssGradientFixer"]
        soup = soup_of(result.markup)
        assert soup.find("div", class_="box").p.get_text() == "A"
        assert soup.find("div", class_="hero").p.get_text() == "Loose"
        assert "background: #123456;" in soup.style.string

    def test_nothing_to_fix(self):
        result = auto_fix_markup([errors.size_mismatch(1280, 720, 1600, 900)], "<p>x</p>")
        assert not result.fixed
        assert result.markup == "<p>x</p>"
        assert result.description == "No applicable fixer found"


class TestAutoFixHtml:
    def test_writes_fix_and_backs_up_once(self, tmp_path):
        slide = tmp_path / "slide.html"
        slide.write_text('<div class="content">Hello</div>', encoding="utf-8")
        report = errors.unwrapped_text("Hello").message

        result = auto_fix_html(slide, report, backup=True)

        backup = tmp_path / "slide.html.backup"
        assert result.fixed
        assert "<p>Hello</p>" in slide.read_text(encoding="utf-8")
        assert backup.read_text(encoding="utf-8") == '<div class="content">Hello</div>'

        slide.write_text('<div class="content">Again</div>', encoding="utf-8")
        auto_fix_html(slide, errors.unwrapped_text("Again").message, backup=True)
        assert backup.read_text(encoding="utf-8") == '<div class="content">Hello</div>'

    def test_unfixable_file_is_untouched(self, tmp_path):
        slide = tmp_path / "slide.html"
        slide.write_text("<p>fine</p>", encoding="utf-8")

        result = auto_fix_html(slide, "HTML dimensions (1px x 1px) don't match", backup=True)

        assert not result.fixed
        assert slide.read_text(encoding="utf-8") == "<p>fine</p>"
        assert not (tmp_path / "slide.html.backup").exists()
