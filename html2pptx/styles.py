"""
Style classifier and a small structured stylesheet model.

Declarations are parsed with tinycss2 into :class:`Declaration` values and
split into container-only paint (background, border, shadow) versus
text-safe properties. :class:`Stylesheet` keeps every other node of the
sheet untouched so a rule can be replaced and the sheet serialised back.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import tinycss2
from tinycss2.ast import ParseError, QualifiedRule

# Properties only a shape can carry in PowerPoint. Any longhand of these
# (``border-top-color``, ``background-position-x`` ...) is container-only too.
CONTAINER_PROPERTIES = (
    "background",
    "background-color",
    "background-image",
    "background-size",
    "background-position",
    "background-repeat",
    "background-attachment",
    "border",
    "border-top",
    "border-right",
    "border-bottom",
    "border-left",
    "border-width",
    "border-style",
    "border-color",
    "border-radius",
    "box-shadow",
)


def is_container_property(name: str) -> bool:
    name = name.strip().lower()
    return any(name == prop or name.startswith(prop + "-") for prop in CONTAINER_PROPERTIES)


@dataclass(frozen=True)
class Declaration:
    name: str
    value: str
    important: bool = False

    def serialize(self) -> str:
        suffix = " !important" if self.important else ""
        return f"{self.name}: {self.value}{suffix}"


def parse_declarations(css: str) -> list[Declaration]:
    """Parse a declaration block body (``color: red; margin: 0``)."""
    return _declarations(tinycss2.parse_declaration_list(css, skip_comments=True, skip_whitespace=True))


def _declarations(nodes) -> list[Declaration]:
    result = []
    for node in nodes:
        if node.type != "declaration":
            continue
        value = tinycss2.serialize(node.value).strip()
        result.append(Declaration(node.lower_name, value, node.important))
    return result


def split_declarations(
    declarations: Iterable[Declaration],
) -> tuple[list[Declaration], list[Declaration]]:
    """Return ``(container_only, text_safe)`` preserving declaration order."""
    container, text = [], []
    for decl in declarations:
        (container if is_container_property(decl.name) else text).append(decl)
    return container, text


def format_rule(selector: str, declarations: Iterable[Declaration], indent: str = "    ") -> str:
    body = "".join(f"{indent}{decl.serialize()};\n" for decl in declarations)
    return f"{selector} {{\n{body}}}"


def _normalize_selector(selector: str) -> str:
    return " ".join(selector.split())


class Stylesheet:
    """A parsed ``<style>`` block whose rules can be replaced in place."""

    def __init__(self, css: str):
        self.source = css
        self.nodes = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
        self._replacements: dict = {}

    def rules(self) -> list[QualifiedRule]:
        return [n for n in self.nodes if n.type == "qualified-rule"]

    def find_rule(self, selector: str) -> Optional[QualifiedRule]:
        """First qualified rule whose whole selector equals *selector*."""
        wanted = _normalize_selector(selector)
        for rule in self.rules():
            if _normalize_selector(tinycss2.serialize(rule.prelude)) == wanted:
                return rule
        return None

    def declarations(self, rule: QualifiedRule) -> list[Declaration]:
        return _declarations(
            tinycss2.parse_declaration_list(rule.content, skip_comments=True, skip_whitespace=True)
        )

    def replace_rule(self, rule: QualifiedRule, css: str):
        self._replacements[id(rule)] = css

    @property
    def changed(self) -> bool:
        return bool(self._replacements)

    def serialize(self) -> str:
        if not self._replacements:
            return self.source
        parts = []
        for node in self.nodes:
            if id(node) in self._replacements:
                parts.append(self._replacements[id(node)])
            elif isinstance(node, ParseError):
                # Invalid fragments are ignored by browsers as well.
                continue
            else:
                parts.append(node.serialize())
        return "".join(parts)
