import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.fonts import FontBook  # noqa: E402


@pytest.fixture
def fonts(tmp_path):
    """FontBook pointed at an empty dir; unknown families fall back to Pillow's default font."""
    return FontBook(fonts_dir=tmp_path / "fonts")


class FakeFonts:
    """Stands in for FontBook where only measurement is needed."""

    def __init__(self, char_ratio: float = 0.6):
        self.char_ratio = char_ratio

    def measurer(self, family, size, bold=False):
        return lambda text: len(text) * size * self.char_ratio


@pytest.fixture
def fake_fonts():
    return FakeFonts()
