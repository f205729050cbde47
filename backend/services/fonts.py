"""
Font lookup and text measurement for the review renderer.

A FontBook resolves a family name (or a direct .ttf/.otf path) to a Pillow
font at a given pixel size and caches the result. The same FontBook must be
used for pagination and drawing so measured widths match what is drawn.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple

from PIL import ImageFont

from settings import settings

logger = logging.getLogger(__name__)

FONT_SUFFIXES = (".ttf", ".otf", ".ttc")

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


class FontBook:
    def __init__(self, fonts_dir: Optional[Path] = None):
        self.fonts_dir = Path(fonts_dir) if fonts_dir else settings.FONTS_DIR
        self._cache: Dict[Tuple[str, int, bool], FontType] = {}
        self._warned: set[Tuple[str, bool]] = set()
        self._lock = threading.Lock()

    def _candidates(self, family: str, bold: bool) -> Iterable[str]:
        path = Path(family)
        if path.suffix.lower() in FONT_SUFFIXES:
            yield str(path)
            if self.fonts_dir and not path.is_absolute():
                yield str(self.fonts_dir / path)
            return

        stems = [f"{family}-Bold", f"{family}Bold", family, f"{family}-Regular"] if bold else [
            family,
            f"{family}-Regular",
            f"{family}Regular",
        ]
        for stem in stems:
            for suffix in FONT_SUFFIXES:
                if self.fonts_dir:
                    yield str(self.fonts_dir / f"{stem}{suffix}")
                # bare file names are looked up in the system font dirs by FreeType
                yield f"{stem}{suffix}"

    def _load(self, family: str, size: int, bold: bool) -> FontType:
        for candidate in self._candidates(family, bold):
            try:
                font = ImageFont.truetype(candidate, size)
            except OSError:
                continue
            logger.debug("font %r size=%s bold=%s -> %s", family, size, bold, candidate)
            return font

        key = (family, bold)
        if key not in self._warned:
            self._warned.add(key)
            logger.warning("Font %r (bold=%s) not found. Using Pillow default font.", family, bold)
        return ImageFont.load_default(size=size)

    def get(self, family: str, size: int, bold: bool = False) -> FontType:
        size = max(1, int(size))
        key = (family, size, bold)
        with self._lock:
            font = self._cache.get(key)
            if font is None:
                font = self._load(family, size, bold)
                self._cache[key] = font
        return font

    def measurer(self, family: str, size: int, bold: bool = False) -> Callable[[str], float]:
        """`measure(text) -> advance width in px` for the given font."""
        font = self.get(family, size, bold)
        return font.getlength
