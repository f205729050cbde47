"""
Choose a body font size and paginate the review text before rendering.

Page capacity comes from the same layout metrics the renderer uses, with a
little extra headroom below the divider, so a planned page always fits the
caption band.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from domain.models import FRAME_WIDTH, Page, ReviewLayoutMetrics
from services.layout_metrics import DEFAULT_BODY_FONT_SIZE, compute_review_layout
from services.text_paginator import Measure, paginate_review

logger = logging.getLogger(__name__)

# Reserved space above the body: divider margin plus breathing room under it.
DIVIDER_MARGIN = 14
BODY_TOP_HEADROOM = 18

AUTO_FIT_MAX_BODY_SIZE = 68
AUTO_FIT_MIN_BODY_SIZE = 18
AUTO_FIT_STEP = 2

MeasurerFactory = Callable[[int], Measure]


@dataclass
class ReviewPlan:
    pages: List[Page]
    metrics: ReviewLayoutMetrics


def lines_per_page(metrics: ReviewLayoutMetrics) -> int:
    reserved_top = (
        metrics.padding_y
        + max(metrics.name_font_size, metrics.date_font_size)
        + DIVIDER_MARGIN
        + BODY_TOP_HEADROOM
    )
    reserved_bottom = metrics.padding_y
    available = metrics.overlay_height - reserved_top - reserved_bottom
    return max(1, math.floor(available / metrics.line_height))


def max_line_width(metrics: ReviewLayoutMetrics) -> int:
    return FRAME_WIDTH - metrics.padding_x * 2


def _paginate_at(text: str, body_size: int, measurer_factory: MeasurerFactory) -> ReviewPlan:
    metrics = compute_review_layout(body_size)
    pages = paginate_review(
        text,
        lines_per_page(metrics),
        max_line_width(metrics),
        measurer_factory(metrics.body_font_size),
    )
    return ReviewPlan(pages=pages, metrics=metrics)


def plan_review_pages(
    text: str,
    measurer_factory: MeasurerFactory,
    target_pages: Optional[int] = None,
) -> ReviewPlan:
    """
    Paginate `text` for rendering.

    Without a target the default body size is used. With a target, body
    sizes from 68 down to 18 are tried (step 2) and the first one producing
    at most `target_pages` pages wins; if none does, the smallest is used.
    """
    if target_pages is None:
        return _paginate_at(text, DEFAULT_BODY_FONT_SIZE, measurer_factory)

    target = max(1, target_pages)
    plan = None
    for size in range(AUTO_FIT_MAX_BODY_SIZE, AUTO_FIT_MIN_BODY_SIZE - 1, -AUTO_FIT_STEP):
        plan = _paginate_at(text, size, measurer_factory)
        if len(plan.pages) <= target:
            logger.info("auto-fit: body size %s gives %d page(s) for %d photo(s)", size, len(plan.pages), target)
            return plan

    logger.info(
        "auto-fit: text needs %d page(s) even at body size %s; extra pages are dropped",
        len(plan.pages),
        AUTO_FIT_MIN_BODY_SIZE,
    )
    return plan
