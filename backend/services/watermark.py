"""
Top-right watermark: a translucent rounded pill holding an optional logo
glyph and a fixed label.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw

from domain.models import FRAME_WIDTH, RenderOptions
from services.drawing import composite_with_shadow, new_layer, scale_alpha
from services.fonts import FontBook
from services.layout_metrics import round_half_up
from settings import settings

logger = logging.getLogger(__name__)

LABEL_FONT_SIZE = 36
LOGO_SIZE = 45
LOGO_GAP = 5
PILL_PAD_X = 10
PILL_PAD_Y = 6
PILL_MIN_CONTENT_HEIGHT = 40
PILL_RADIUS = 12
PILL_ALPHA = 0.35
LABEL_Y_NUDGE = 4
MIN_OPACITY = 0.5
SHADOW_ALPHA = 0.6
SHADOW_BLUR = 3
# 0.5px stroke at 40% black, approximated as a 1px line at 20%
OUTLINE_COLOR = (0, 0, 0, 51)
SILHOUETTE_THRESHOLD = 240

DEFAULT_X_RIGHT = FRAME_WIDTH - 30
DEFAULT_Y_TOP = 30


def white_silhouette(logo: Image.Image, size: int = LOGO_SIZE) -> Image.Image:
    """
    Flat white version of `logo` scaled to size x size.

    Near-white pixels (all channels >= 240) become transparent; every other
    pixel turns solid white with its original alpha. Works on a scaled copy.
    """
    scaled = logo.convert("RGBA").resize((size, size), Image.Resampling.LANCZOS)
    arr = np.array(scaled)
    near_white = (arr[..., :3] >= SILHOUETTE_THRESHOLD).all(axis=2)
    out = np.empty_like(arr)
    out[..., :3] = 255
    out[..., 3] = np.where(near_white, 0, arr[..., 3])
    return Image.fromarray(out)


def _logo_glyph(logo: Image.Image, white: bool) -> Image.Image:
    if white:
        return white_silhouette(logo, LOGO_SIZE)
    return logo.convert("RGBA").resize((LOGO_SIZE, LOGO_SIZE), Image.Resampling.LANCZOS)


def draw_watermark(
    canvas: Image.Image,
    options: RenderOptions,
    logo: Optional[Image.Image],
    fonts: FontBook,
    text: Optional[str] = None,
    x_right: float = DEFAULT_X_RIGHT,
    y_top: float = DEFAULT_Y_TOP,
) -> None:
    """Draw the watermark onto `canvas` in place, right-aligned at x_right."""
    label = settings.WATERMARK_TEXT if text is None else text
    opacity = min(1.0, max(MIN_OPACITY, options.watermark_opacity))
    font = fonts.get(options.font_family, LABEL_FONT_SIZE, bold=True)
    text_w = font.getlength(label)

    total_w = (LOGO_SIZE + LOGO_GAP if logo is not None else 0) + text_w
    x = x_right - total_w
    y = y_top

    pill_w = total_w + PILL_PAD_X * 2
    pill_h = max(LOGO_SIZE, PILL_MIN_CONTENT_HEIGHT) + PILL_PAD_Y * 2
    pill = new_layer(canvas.size)
    left = round_half_up(x - PILL_PAD_X)
    top = round_half_up(y - PILL_PAD_Y)
    ImageDraw.Draw(pill).rounded_rectangle(
        (left, top, left + round_half_up(pill_w) - 1, top + pill_h - 1),
        radius=int(min(PILL_RADIUS, pill_h / 2, pill_w / 2)),
        fill=(0, 0, 0, int(255 * PILL_ALPHA + 0.5)),
    )
    canvas.alpha_composite(pill)

    content = new_layer(canvas.size)
    logo_xy = (round_half_up(x), round_half_up(y))
    if logo is not None:
        content.alpha_composite(_logo_glyph(logo, options.logo_white), dest=logo_xy)
    text_x = x + LOGO_SIZE + LOGO_GAP if logo is not None else x
    ImageDraw.Draw(content).text((text_x, y + LABEL_Y_NUDGE), label, font=font, fill=(255, 255, 255, 255))
    composite_with_shadow(canvas, scale_alpha(content, opacity), SHADOW_ALPHA, SHADOW_BLUR)

    if logo is not None and options.logo_white:
        outline = new_layer(canvas.size)
        ImageDraw.Draw(outline).rectangle(
            (logo_xy[0], logo_xy[1], logo_xy[0] + LOGO_SIZE - 1, logo_xy[1] + LOGO_SIZE - 1),
            outline=OUTLINE_COLOR,
            width=1,
        )
        canvas.alpha_composite(scale_alpha(outline, opacity))

    logger.debug(
        "draw_watermark x=%.1f y=%.1f width=%.1f logo=%s opacity=%.2f",
        x,
        y,
        total_w,
        logo is not None,
        opacity,
    )
