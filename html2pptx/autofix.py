"""
Rule-based repair of HTML slides that failed validation.

Each fixer is a pure transform: it parses its own BeautifulSoup copy of the
markup it is handed and returns new markup. :func:`auto_fix_markup` runs
every applicable fixer in order, feeding each one the output of the last
successful fixer, so several independent problems are repaired in one pass.
:func:`auto_fix_html` adds persistence (and an optional one-time backup).
"""

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from bs4 import BeautifulSoup, NavigableString

from .errors import IssueKind, as_issues
from .styles import Stylesheet, format_rule, split_declarations

logger = logging.getLogger(__name__)

HTML_PARSER = "lxml"


@dataclass
class FixResult:
    fixed: bool
    markup: str
    description: str = ""


@dataclass
class AutoFixResult:
    fixed: bool
    description: str
    markup: str
    applied: list = field(default_factory=list)


def _kinds(issues) -> set:
    return {issue.kind for issue in issues}


class ErrorFixer:
    """Base fixer. Subclasses decide applicability and return new markup."""

    description = ""

    def can_fix(self, issues: Sequence, markup: str) -> bool:
        return False

    def fix(self, issues: Sequence, markup: str) -> FixResult:
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__


# ── Paint on text elements ────────────────────────────────────────────────────


class TextElementPaintFixer(ErrorFixer):
    """Move background/border/shadow off text tags onto a wrapping ``<div>``.

    The class rule ``.box { ... }`` is split into ``.box { <paint> }`` and
    ``.box p { <text styles> }`` and ``<p class="box">`` becomes
    ``<div class="box"><p>...</p></div>``.
    """

    description = "Move container paint from text elements onto a wrapping <div>"

    def can_fix(self, issues, markup):
        return IssueKind.TEXT_PAINT in _kinds(issues)

    def fix(self, issues, markup):
        paint_issues = [i for i in issues if i.kind is IssueKind.TEXT_PAINT]
        tags = list(dict.fromkeys(i.get("tag") for i in paint_issues))
        paint = paint_issues[0].get("paint") if paint_issues else "paint"

        soup = BeautifulSoup(markup, HTML_PARSER)
        sheets = [(tag, Stylesheet(tag.string or "")) for tag in soup.find_all("style")]
        splits: dict = {}  # class name -> _RuleSplit
        fixed_counts = []

        for tag_name in tags:
            count = 0
            for element in soup.find_all(tag_name):
                split = self._split_for(element.get("class") or [], sheets, splits)
                if split is None:
                    continue
                split.tags.setdefault(tag_name, None)
                self._wrap(soup, element)
                count += 1
            if count:
                fixed_counts.append(f"{count} <{tag_name}>")

        if not fixed_counts:
            return FixResult(False, markup)

        for split in splits.values():
            if split.tags:
                split.sheet.replace_rule(split.rule, split.render())
        for style_tag, sheet in sheets:
            if sheet.changed:
                style_tag.string = sheet.serialize()

        description = f"Moved {paint} styles of {', '.join(fixed_counts)} to a wrapping <div>"
        return FixResult(True, str(soup), description)

    @staticmethod
    def _split_for(classes, sheets, splits) -> Optional["_RuleSplit"]:
        for class_name in classes:
            if class_name in splits:
                return splits[class_name]
            for _, sheet in sheets:
                rule = sheet.find_rule(f".{class_name}")
                if rule is None:
                    continue
                container, text = split_declarations(sheet.declarations(rule))
                if not container:
                    break
                splits[class_name] = _RuleSplit(class_name, sheet, rule, container, text)
                return splits[class_name]
        return None

    @staticmethod
    def _wrap(soup, element):
        wrapper = soup.new_tag("div")
        wrapper["class"] = element["class"]
        element.wrap(wrapper)
        del element["class"]


@dataclass
class _RuleSplit:
    class_name: str
    sheet: Stylesheet
    rule: object
    container: list
    text: list
    tags: dict = field(default_factory=dict)  # ordered set of wrapped tag names

    def render(self) -> str:
        parts = [format_rule(f".{self.class_name}", self.container)]
        if self.text:
            for tag in self.tags:
                parts.append(format_rule(f".{self.class_name} {tag}", self.text))
        return "\n".join(parts)


# ── Unwrapped text in containers ──────────────────────────────────────────────


class UnwrappedTextFixer(ErrorFixer):
    """Wrap bare text directly inside a ``<div>`` in ``<p>`` (or ``<h3>`` for titles)."""

    description = "Wrap bare text inside <div> elements in text tags"

    def can_fix(self, issues, markup):
        return IssueKind.UNWRAPPED_TEXT in _kinds(issues)

    def fix(self, issues, markup):
        soup = BeautifulSoup(markup, HTML_PARSER)
        fix_count = 0
        for div in soup.find_all("div"):
            if not self.has_direct_text(div):
                continue
            wrap_tag = self.wrap_tag_for(div)
            for child in list(div.children):
                if type(child) is NavigableString and child.strip():
                    wrapper = soup.new_tag(wrap_tag)
                    wrapper.string = child.strip()
                    child.replace_with(wrapper)
            fix_count += 1

        if not fix_count:
            return FixResult(False, markup)
        return FixResult(True, str(soup), f"Wrapped text of {fix_count} <div> elements in tags")

    @staticmethod
    def has_direct_text(div) -> bool:
        return any(type(child) is NavigableString and child.strip() for child in div.children)

    @staticmethod
    def wrap_tag_for(div) -> str:
        class_name = " ".join(div.get("class") or [])
        if (
            "title" in class_name
            and "report-title" not in class_name
            and "page-title" not in class_name
        ):
            return "h3"
        return "p"


# ── Gradients and background images ───────────────────────────────────────────

_LINEAR_GRADIENT_RE = re.compile(r"background:\s*linear-gradient\([^;]+\);")
_RADIAL_GRADIENT_RE = re.compile(r"background:\s*radial-gradient\([^;]+\);")
_BACKGROUND_IMAGE_RE = re.compile(r"background-image:\s*url\([^)]*\);")
_BACKGROUND_IMAGE_MARKER_RE = re.compile(r"background-image:\s*url\(")
_HEX_COLOR_RE = re.compile(r"#[0-9a-fA-F]{3,6}")
_RGB_COLOR_RE = re.compile(r"rgba?\([^)]+\)")
_COLOR_NAME_RE = re.compile(
    r"\b(red|blue|green|yellow|purple|orange|pink|black|white|gray|grey)\b", re.IGNORECASE
)

FALLBACK_COLOR = "#000000"
BACKGROUND_IMAGE_REPLACEMENT = "background-color: #f5f5f5;"


def extract_first_color(gradient: str) -> str:
    """First color of a gradient: hex, then rgb()/rgba(), then a color name."""
    for pattern in (_HEX_COLOR_RE, _RGB_COLOR_RE, _COLOR_NAME_RE):
        m = pattern.search(gradient)
        if m:
            return m.group(0)
    return FALLBACK_COLOR


def flatten_gradients(css: str) -> str:
    """Replace gradient backgrounds with their first color and drop url() images."""
    css = _LINEAR_GRADIENT_RE.sub(lambda m: f"background: {extract_first_color(m.group(0))};", css)
    css = _RADIAL_GRADIENT_RE.sub(lambda m: f"background: {extract_first_color(m.group(0))};", css)
    return _BACKGROUND_IMAGE_RE.sub(BACKGROUND_IMAGE_REPLACEMENT, css)


class CssGradientFixer(ErrorFixer):
    """Turn CSS gradients into their first color and background images into gray."""

    description = "Replace CSS gradients and background images with solid colors"

    def can_fix(self, issues, markup):
        if IssueKind.SHAPE_BACKGROUND_IMAGE in _kinds(issues):
            return True
        return (
            "linear-gradient" in markup
            or "radial-gradient" in markup
            or bool(_BACKGROUND_IMAGE_MARKER_RE.search(markup))
        )

    def fix(self, issues, markup):
        soup = BeautifulSoup(markup, HTML_PARSER)
        fix_count = 0

        for style_tag in soup.find_all("style"):
            css = style_tag.string or ""
            fixed_css = flatten_gradients(css)
            if fixed_css != css:
                style_tag.string = fixed_css
                fix_count += 1

        for element in soup.find_all(style=True):
            inline = element["style"]
            # Inline styles often omit the final semicolon.
            terminated = inline if inline.rstrip().endswith(";") else inline.rstrip() + ";"
            fixed_inline = flatten_gradients(terminated)
            if fixed_inline != terminated:
                element["style"] = fixed_inline
                fix_count += 1

        if not fix_count:
            return FixResult(False, markup)
        description = f"Converted gradients and background images in {fix_count} style blocks to solid colors"
        return FixResult(True, str(soup), description)


DEFAULT_FIXERS = (TextElementPaintFixer, UnwrappedTextFixer, CssGradientFixer)


def auto_fix_markup(errors, markup: str, fixers: Optional[Sequence[ErrorFixer]] = None) -> AutoFixResult:
    """Run every applicable fixer over *markup*, chaining their output.

    *errors* may be issues, a :class:`SlideValidationError` or rendered
    error text.
    """
    issues = as_issues(errors)
    if fixers is None:
        fixers = [cls() for cls in DEFAULT_FIXERS]

    current = markup
    applied, descriptions = [], []
    for fixer in fixers:
        logger.debug("Checking fixer %s", fixer.name)
        if not fixer.can_fix(issues, current):
            continue
        logger.info("Applying fixer %s", fixer.name)
        result = fixer.fix(issues, current)
        if result.fixed:
            current = result.markup
            applied.append(fixer.name)
            descriptions.append(result.description)

    if not applied:
        return AutoFixResult(False, "No applicable fixer found", markup)
    return AutoFixResult(True, "; ".join(descriptions), current, applied)


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".backup")


def auto_fix_html(path, errors, backup: bool = False) -> AutoFixResult:
    """Fix the HTML file at *path* in place; never raises for "nothing to fix"."""
    path = Path(path)
    original = path.read_text(encoding="utf-8")
    result = auto_fix_markup(errors, original)

    if not result.fixed:
        logger.info("%s: no fixer could repair the reported errors", path.name)
        return result

    if backup:
        backup_path = backup_path_for(path)
        if not backup_path.exists():
            shutil.copyfile(path, backup_path)
            logger.info("Backed up original to %s", backup_path.name)

    path.write_text(result.markup, encoding="utf-8")
    logger.info("%s: applied %s (%s)", path.name, ", ".join(result.applied), result.description)
    return result
