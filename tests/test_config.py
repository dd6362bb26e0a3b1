import pytest

from html2pptx.config import DEFAULT_SETTINGS, LAYOUT_HEIGHT, LAYOUT_WIDTH, Settings


def test_defaults():
    assert (DEFAULT_SETTINGS.page_width, DEFAULT_SETTINGS.page_height) == (LAYOUT_WIDTH, LAYOUT_HEIGHT)
    assert DEFAULT_SETTINGS.bottom_margin_px == 48
    assert DEFAULT_SETTINGS.single_line_widen == 0.02


def test_env_overrides():
    settings = Settings.from_env(
        {"HTML2PPTX_BOTTOM_MARGIN_PX": "36", "HTML2PPTX_SINGLE_LINE_WIDEN": "", "OTHER": "1"}
    )
    assert settings.bottom_margin_px == 36
    assert settings.single_line_widen == 0.02


def test_env_rejects_non_numbers():
    with pytest.raises(ValueError, match="HTML2PPTX_PAGE_WIDTH"):
        Settings.from_env({"HTML2PPTX_PAGE_WIDTH": "wide"})
