"""
Region redaction (pixelate / blur) over a rendered frame.

Regions are independent: each one reads the current surface pixels under
its rectangle and writes them back processed. Effects are destructive; to
change a region the caller re-renders from the original photo.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from PIL import Image, ImageFilter

from domain.models import DEFAULT_MASK_STRENGTH, MaskKind, MaskRegion
from services.layout_metrics import round_half_up

logger = logging.getLogger(__name__)

MIN_PIXEL_BLOCK = 6
MAX_PIXEL_BLOCK = 60
MIN_BLUR_RADIUS = 2
MAX_BLUR_RADIUS = 25


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _strength_fraction(strength: Optional[float]) -> float:
    if strength is None:
        strength = DEFAULT_MASK_STRENGTH
    return _clamp(strength, 0, 100) / 100


def pixel_block_size(strength: Optional[float]) -> int:
    return max(MIN_PIXEL_BLOCK, round_half_up(_strength_fraction(strength) * MAX_PIXEL_BLOCK))


def blur_radius(strength: Optional[float]) -> int:
    return max(MIN_BLUR_RADIUS, round_half_up(_strength_fraction(strength) * MAX_BLUR_RADIUS))


def region_box(region: MaskRegion, width: int, height: int) -> Optional[tuple[int, int, int, int]]:
    """Pixel box (l, t, r, b) for a region, or None when it is inert."""
    if region.width <= 0 or region.height <= 0:
        return None
    x = _clamp(region.x, 0, 1) * width
    y = _clamp(region.y, 0, 1) * height
    w = _clamp(region.width, 0, 1) * width
    h = _clamp(region.height, 0, 1) * height
    if w < 1 or h < 1:
        return None
    left = round_half_up(x)
    top = round_half_up(y)
    right = min(width, round_half_up(x + w))
    bottom = min(height, round_half_up(y + h))
    if right - left < 1 or bottom - top < 1:
        return None
    return (left, top, right, bottom)


def _pixelate(surface: Image.Image, box: tuple[int, int, int, int], strength: Optional[float]) -> None:
    block = pixel_block_size(strength)
    region = surface.crop(box)
    w, h = region.size
    steps_x = max(1, round_half_up(w / block))
    steps_y = max(1, round_half_up(h / block))
    small = region.resize((steps_x, steps_y), Image.Resampling.NEAREST)
    surface.paste(small.resize((w, h), Image.Resampling.NEAREST), box[:2])


def _blur(surface: Image.Image, box: tuple[int, int, int, int], strength: Optional[float]) -> None:
    region = surface.crop(box)
    blurred = region.filter(ImageFilter.GaussianBlur(radius=blur_radius(strength)))
    # paste without a mask replaces the pixels, alpha included
    surface.paste(blurred, box[:2])


def apply_masks(surface: Image.Image, regions: Optional[Iterable[MaskRegion]]) -> None:
    """Apply every region to `surface` in place. Inert regions are skipped silently."""
    if not regions:
        return
    width, height = surface.size
    for region in regions:
        box = region_box(region, width, height)
        if box is None:
            logger.debug("apply_masks: skipping inert region %s", getattr(region, "id", "?"))
            continue
        if region.kind == MaskKind.BLUR:
            _blur(surface, box, region.strength)
        else:
            _pixelate(surface, box, region.strength)
        logger.debug("apply_masks: %s %s box=%s strength=%s", region.kind.value, region.id, box, region.strength)
