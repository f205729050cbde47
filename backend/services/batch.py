"""
Batch driver: plan the caption pages once, then render every output image.

Renders are independent and run on a thread pool; results come back in a
deterministic order regardless of which worker finishes first.
"""
from __future__ import annotations

import datetime as dt
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence

from PIL import Image

from domain.models import CropSpec, MaskRegion, Page, RenderOptions
from services.fonts import FontBook
from services.review_planner import ReviewPlan, plan_review_pages
from services.review_renderer import encode_png, render_review_image
from settings import settings

logger = logging.getLogger(__name__)

MAX_PHOTOS = 10

_WHITESPACE_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"\D")


@dataclass
class PhotoInput:
    image: Image.Image
    crop: Optional[CropSpec] = None
    masks: Sequence[MaskRegion] = field(default_factory=tuple)
    name: str = ""


@dataclass
class RenderedImage:
    filename: str
    png_bytes: bytes


@dataclass
class _RenderJob:
    index: int
    photo: PhotoInput
    lines: Page


def normalize_review_date(raw: Optional[str], today: Optional[dt.date] = None) -> str:
    """
    Empty -> today as YYYY.MM.DD; exactly eight digits (separators ignored)
    -> YYYY.MM.DD; anything else is returned trimmed but otherwise as typed.
    """
    text = (raw or "").strip()
    if not text:
        day = today or dt.date.today()
        return day.strftime("%Y.%m.%d")
    digits = _NON_DIGIT_RE.sub("", text)
    if len(digits) == 8:
        return f"{digits[:4]}.{digits[4:6]}.{digits[6:]}"
    return text


def output_filename(options: RenderOptions, index: int) -> str:
    location = _WHITESPACE_RE.sub("_", options.location.strip()) or "location"
    store = _WHITESPACE_RE.sub("_", options.store_name.strip()) or "store"
    date = _NON_DIGIT_RE.sub("", options.date) or "date"
    return f"{location}_{store}_{date}_{index + 1}.png"


def _build_jobs(photos: Sequence[PhotoInput], plan: ReviewPlan, auto_fit: bool) -> List[_RenderJob]:
    jobs: List[_RenderJob] = []
    if auto_fit:
        for i, photo in enumerate(photos):
            # photos past the last page get the header-only placeholder band
            lines = plan.pages[i] if i < len(plan.pages) else []
            jobs.append(_RenderJob(index=i, photo=photo, lines=lines))
        return jobs

    pages = plan.pages or [[]]
    for photo in photos:
        for lines in pages:
            jobs.append(_RenderJob(index=len(jobs), photo=photo, lines=lines))
    return jobs


def render_batch(
    photos: Sequence[PhotoInput],
    review_text: str,
    options: RenderOptions,
    fonts: Optional[FontBook] = None,
    logo: Optional[Image.Image] = None,
    auto_fit: bool = True,
    max_workers: Optional[int] = None,
) -> List[RenderedImage]:
    """
    Render the whole set of review images.

    auto_fit=True: one image per photo, body size chosen so the text fits the
    photo count. auto_fit=False: every photo is rendered with every page at
    the default body size.
    """
    if not photos:
        raise ValueError("at least one photo is required")
    if len(photos) > MAX_PHOTOS:
        raise ValueError(f"too many photos: {len(photos)} (max {MAX_PHOTOS})")

    fonts = fonts or FontBook()
    options = replace(
        options,
        store_name=options.store_name.strip(),
        location=options.location.strip(),
        date=options.date.strip(),
    )

    def measurer_factory(body_size: int):
        return fonts.measurer(options.font_family, body_size)

    plan = plan_review_pages(
        review_text,
        measurer_factory,
        target_pages=len(photos) if auto_fit else None,
    )
    render_options = replace(options, body_font_size=plan.metrics.body_font_size)
    render_logo = logo if options.use_logo else None
    # lazy file-backed images must be decoded before threads share them
    for photo in photos:
        photo.image.load()
    if render_logo is not None:
        render_logo.load()
    jobs = _build_jobs(photos, plan, auto_fit)
    logger.info(
        "render_batch: %d photo(s), %d page(s), %d image(s), body size %s",
        len(photos),
        len(plan.pages),
        len(jobs),
        plan.metrics.body_font_size,
    )

    def _run(job: _RenderJob) -> RenderedImage:
        image = render_review_image(
            job.photo.image,
            render_logo,
            job.lines,
            render_options,
            crop=job.photo.crop,
            masks=job.photo.masks,
            fonts=fonts,
        )
        filename = output_filename(render_options, job.index)
        logger.info("rendered %s (%d line(s))", filename, len(job.lines))
        return RenderedImage(filename=filename, png_bytes=encode_png(image))

    workers = max_workers or settings.RENDER_WORKERS
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        # map() yields in submission order and re-raises the first failure
        return list(pool.map(_run, jobs))
