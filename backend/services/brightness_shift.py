"""
Vertical recentering heuristic for photos drawn without an explicit crop.

Compares the mean brightness of the top and bottom halves. When
top - bottom drops below the threshold the photo is nudged upward so the
content clears the caption band. Note the sign: the trigger fires when the
top half is the darker one. The thresholds below are empirical and are a
behavioral contract; do not re-derive them.
"""
from __future__ import annotations

import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

# --- Tunable thresholds (empirical) ---
ANALYSIS_MAX_DIM = 200
DARKER_BOTTOM_THRESHOLD = -10.0
SHIFT_MULTIPLIER = 2.5
MAX_UPWARD_SHIFT = -50.0


def _downsample(image: Image.Image) -> Image.Image:
    w, h = image.size
    size = (min(w, ANALYSIS_MAX_DIM), min(h, ANALYSIS_MAX_DIM))
    rgb = image.convert("RGB")
    if size == rgb.size:
        return rgb
    return rgb.resize(size, Image.Resampling.BILINEAR)


def detect_vertical_shift(image: Image.Image) -> float:
    """
    Return a vertical shift in percent (negative = move content up), or 0.

    Only the mean brightness of the top half vs. the bottom half of a small
    copy of the image is compared; the caller's image is not modified.
    """
    w, h = image.size
    if w <= 0 or h <= 0:
        raise ValueError(f"cannot analyze empty image {w}x{h}")

    small = _downsample(image)
    arr = np.asarray(small, dtype=np.float64)
    brightness = arr.mean(axis=2)
    mid_y = brightness.shape[0] // 2
    top = brightness[:mid_y]
    bottom = brightness[mid_y:]
    if top.size == 0 or bottom.size == 0:
        # single-row image: no halves to compare
        return 0.0

    diff = float(top.mean() - bottom.mean())
    shift = 0.0
    if diff < DARKER_BOTTOM_THRESHOLD:
        shift = max(MAX_UPWARD_SHIFT, diff * SHIFT_MULTIPLIER)
    logger.debug("detect_vertical_shift size=%sx%s diff=%.2f shift=%.2f", w, h, diff, shift)
    return shift
