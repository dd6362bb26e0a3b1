"""
Conversion settings and unit constants.

Thresholds that were picked empirically (bottom margin, single-line
widening) live here so callers can tune them without touching the engine.
Every field of :class:`Settings` can be overridden from the environment
with an ``HTML2PPTX_`` prefixed variable, e.g. ``HTML2PPTX_BOTTOM_MARGIN_PX=36``.
"""

import os
from dataclasses import dataclass, fields

# ── Units ─────────────────────────────────────────────────────────────────────
PX_PER_IN = 96
PT_PER_IN = 72
PT_PER_PX = 0.75

# ── Default page layout (1600x900 px) ────────────────────────────────────────
LAYOUT_WIDTH = 16.67  # inches
LAYOUT_HEIGHT = 9.38  # inches

ENV_PREFIX = "HTML2PPTX_"


@dataclass(frozen=True)
class Settings:
    """Tunable thresholds used by validation and emission."""

    page_width: float = LAYOUT_WIDTH  # inches
    page_height: float = LAYOUT_HEIGHT  # inches
    bottom_margin_px: float = 48.0
    bottom_margin_min_font_pt: float = 12.0
    overflow_tolerance_px: float = 1.0
    layout_tolerance_in: float = 0.1
    single_line_widen: float = 0.02
    image_fetch_timeout: float = 10.0  # seconds

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings, letting ``HTML2PPTX_*`` variables override defaults."""
        environ = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            try:
                overrides[f.name] = float(raw)
            except ValueError as exc:
                raise ValueError(
                    f"{ENV_PREFIX}{f.name.upper()} must be a number, got {raw!r}"
                ) from exc
        return cls(**overrides)


DEFAULT_SETTINGS = Settings()
