"""
html2pptx: convert browser-rendered HTML slides into PowerPoint slides.

The engine extracts a Slide Model from a rendered snapshot, validates that
PowerPoint can represent it and, when it cannot, repairs the HTML with a
small set of rule-based fixers.
"""

from .autofix import AutoFixResult, auto_fix_html, auto_fix_markup
from .config import DEFAULT_SETTINGS, Settings
from .convert import convert_file, convert_folder, html2pptx, new_presentation, try_convert_with_auto_fix
from .dom import RenderedDocument
from .emit import emit_slide
from .errors import Html2PptxError, IssueKind, RenderError, SlideValidationError, ValidationIssue
from .extract import classify, extract_slide
from .model import SlideModel
from .render import render_html
from .validate import validate_slide

__version__ = "0.1.0"

__all__ = [
    "AutoFixResult",
    "DEFAULT_SETTINGS",
    "Html2PptxError",
    "IssueKind",
    "RenderError",
    "RenderedDocument",
    "Settings",
    "SlideModel",
    "SlideValidationError",
    "ValidationIssue",
    "auto_fix_html",
    "auto_fix_markup",
    "classify",
    "convert_file",
    "convert_folder",
    "emit_slide",
    "extract_slide",
    "html2pptx",
    "new_presentation",
    "render_html",
    "try_convert_with_auto_fix",
    "validate_slide",
]
