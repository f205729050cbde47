"""
Caption band geometry.

Everything here is a pure function of the body font size so the same
numbers can be used upstream (how many lines fit a page) and at draw time.
"""
import math
from typing import Optional

from domain.models import FRAME_HEIGHT, ReviewLayoutMetrics

DEFAULT_BODY_FONT_SIZE = 52
OVERLAY_HEIGHT_RATIO = 0.30
PADDING_X = 30
PADDING_Y = 22
BASE_NAME_FONT_SIZE = 56
DATE_FONT_RATIO = 0.6
LINE_HEIGHT_RATIO = 1.5


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def compute_review_layout(body_font_size: Optional[float] = None) -> ReviewLayoutMetrics:
    base_body = DEFAULT_BODY_FONT_SIZE if body_font_size is None else body_font_size
    scale = base_body / DEFAULT_BODY_FONT_SIZE
    body = round_half_up(base_body)
    return ReviewLayoutMetrics(
        padding_x=PADDING_X,
        padding_y=PADDING_Y,
        name_font_size=round_half_up(BASE_NAME_FONT_SIZE * scale),
        date_font_size=round_half_up(DEFAULT_BODY_FONT_SIZE * scale * DATE_FONT_RATIO),
        body_font_size=body,
        line_height=round_half_up(body * LINE_HEIGHT_RATIO),
        overlay_height=round_half_up(FRAME_HEIGHT * OVERLAY_HEIGHT_RATIO),
    )
