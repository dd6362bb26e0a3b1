"""
Conversion orchestration: one HTML file to one slide, and batch decks.

:func:`html2pptx` renders, extracts and validates a single file and only
then adds a slide, so a failed file never leaves a half-built slide in the
deck. :func:`try_convert_with_auto_fix` gives every file exactly one
auto-fix retry; :func:`convert_file` and :func:`convert_folder` drive the
sequential pipeline and save the presentation.
"""

import logging
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pptx import Presentation
from pptx.util import Inches

from .autofix import auto_fix_html
from .config import DEFAULT_SETTINGS, Settings
from .emit import emit_slide
from .errors import Html2PptxError
from .extract import extract_slide
from .images import inline_remote_images
from .render import render_html
from .validate import raise_for_issues, validate_slide

logger = logging.getLogger(__name__)

BLANK_LAYOUT = 6
SKIP_PREFIX = "_skip_"


def new_presentation(settings: Settings = DEFAULT_SETTINGS):
    """Empty presentation sized to the configured page (1600x900 px by default)."""
    prs = Presentation()
    prs.slide_width = Inches(settings.page_width)
    prs.slide_height = Inches(settings.page_height)
    return prs


def page_size_of(prs) -> tuple[float, float]:
    return prs.slide_width.inches, prs.slide_height.inches


async def html2pptx(
    html_file,
    prs,
    slide=None,
    settings: Optional[Settings] = None,
    fetch_images: bool = True,
    tmp_dir: Optional[str] = None,
):
    """Convert *html_file* onto *slide* (a new blank slide by default).

    Returns ``(slide, placeholders)``. Raises
    :class:`~html2pptx.errors.SlideValidationError` carrying every issue
    when the slide cannot be represented.
    """
    settings = settings or DEFAULT_SETTINGS
    document = await render_html(html_file, tmp_dir=tmp_dir)
    model = extract_slide(document)

    issues = validate_slide(model, document, page_size_of(prs), settings)
    raise_for_issues(issues, source=str(html_file))

    if fetch_images:
        model = await inline_remote_images(model, timeout=settings.image_fetch_timeout)

    if slide is None:
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
    emit_slide(model, slide, prs, settings)
    return slide, list(model.placeholders)


# ── Retry with auto-fix ───────────────────────────────────────────────────────


@dataclass
class ConvertOutcome:
    success: bool
    result: Optional[tuple] = None  # (slide, placeholders)
    method: str = "failed"  # "direct", "auto_fix" or "failed"
    error: Optional[str] = None


async def try_convert_with_auto_fix(html_file, prs, settings: Optional[Settings] = None) -> ConvertOutcome:
    """Convert directly; on failure repair the file once and retry."""
    try:
        result = await html2pptx(html_file, prs, settings=settings)
        return ConvertOutcome(True, result, "direct")
    except Html2PptxError as exc:
        last_error = exc
        print(f"  ✗ Direct conversion failed: {exc}")

    print("  🔧 Trying auto-fix...")
    try:
        fix = auto_fix_html(html_file, last_error, backup=True)
    except OSError as exc:
        print(f"  ✗ Auto-fix failed: {exc}")
        return ConvertOutcome(False, error=str(last_error))

    if not fix.fixed:
        print("  ⚠️  Auto-fix could not repair this file")
        return ConvertOutcome(False, error=str(last_error))

    print(f"  ✓ Auto-fix applied ({fix.description}), converting again...")
    try:
        result = await html2pptx(html_file, prs, settings=settings)
        return ConvertOutcome(True, result, "auto_fix")
    except Html2PptxError as exc:
        print(f"  ✗ Still failing after auto-fix: {exc}")
        return ConvertOutcome(False, error=str(exc))


# ── Batch pipeline ────────────────────────────────────────────────────────────


@dataclass
class BatchResults:
    success: int = 0
    failed: int = 0
    direct: int = 0
    auto_fixed: int = 0
    failed_files: list = field(default_factory=list)  # (name, error)

    def record(self, name: str, outcome: ConvertOutcome):
        if outcome.success:
            self.success += 1
            if outcome.method == "auto_fix":
                self.auto_fixed += 1
            else:
                self.direct += 1
        else:
            self.failed += 1
            self.failed_files.append((name, outcome.error))


def list_html_files(folder) -> list[Path]:
    """Sorted ``*.html`` files, leaving out backups and ``_skip_`` files."""
    folder = Path(folder)
    return sorted(
        (
            p
            for p in folder.iterdir()
            if p.is_file()
            and p.name.endswith(".html")
            and not p.name.endswith(".backup")
            and not p.name.startswith(SKIP_PREFIX)
        ),
        key=lambda p: p.name,
    )


async def convert_file(html_file, output_file, settings: Optional[Settings] = None) -> bool:
    settings = settings or DEFAULT_SETTINGS
    print(f"Converting: {html_file}")
    prs = new_presentation(settings)

    outcome = await try_convert_with_auto_fix(html_file, prs, settings)
    if not outcome.success:
        print(f"✗ Conversion failed: {outcome.error}")
        return False

    _, placeholders = outcome.result
    print(f"✓ Converted ({outcome.method}): {html_file}")
    if placeholders:
        print(f"  {len(placeholders)} placeholder(s): {', '.join(p.id for p in placeholders)}")

    prs.save(str(output_file))
    print(f"Done! Created {output_file}")
    return True


async def convert_folder(folder, output_file, settings: Optional[Settings] = None) -> BatchResults:
    """Convert every slide file in *folder* into one deck, in name order."""
    settings = settings or DEFAULT_SETTINGS
    html_files = list_html_files(folder)
    results = BatchResults()
    if not html_files:
        warnings.warn(f"No HTML files found in {folder}")
        return results

    print(f"Found {len(html_files)} HTML files:")
    for index, path in enumerate(html_files, 1):
        print(f"  {index}. {path.name}")

    prs = new_presentation(settings)
    for index, path in enumerate(html_files, 1):
        print(f"\n[{index}/{len(html_files)}] {path.name}")
        outcome = await try_convert_with_auto_fix(path, prs, settings)
        results.record(path.name, outcome)
        if outcome.success:
            print(f"  ✓ Converted ({outcome.method})")
        else:
            logger.info("Skipping %s: %s", path.name, outcome.error)

    if results.success > 0:
        prs.save(str(output_file))
        print(f"\nDone! Created {output_file} ({results.success} slides)")
        print(f"  Direct: {results.direct}, after auto-fix: {results.auto_fixed}")
        if results.failed:
            print(f"  Skipped: {results.failed} file(s)")
            for name, error in results.failed_files:
                print(f"    - {name}: {error}")
    else:
        print("\n✗ No slide could be converted, nothing saved")
        for name, error in results.failed_files:
            print(f"    - {name}: {error}")
    return results
