"""
Review image compositor.

Builds one 1080x1350 RGBA frame per call:
  white background -> photo (explicit crop, or contain-fit with an automatic
  vertical shift) -> mask effects -> watermark -> caption band.

Every surface is allocated inside the call; nothing is shared between
renders, so independent renders can run on separate threads.
"""
from __future__ import annotations

import io
import logging
import math
import uuid
from pathlib import Path
from typing import Iterable, Optional, Sequence

from PIL import Image, ImageDraw

from domain.models import (
    FRAME_HEIGHT,
    FRAME_WIDTH,
    CropSpec,
    MaskRegion,
    RenderOptions,
    ReviewLayoutMetrics,
    SourceRect,
)
from services.brightness_shift import detect_vertical_shift
from services.crop_geometry import contain_placement, cover_crop, source_box_for_placement
from services.drawing import composite_with_shadow, new_layer
from services.fonts import FontBook
from services.layout_metrics import compute_review_layout
from services.mask_effects import apply_masks
from services.watermark import draw_watermark
from settings import settings

logger = logging.getLogger(__name__)

FRAME_SIZE = (FRAME_WIDTH, FRAME_HEIGHT)
BACKGROUND = (255, 255, 255, 255)

BAND_ALPHA = 0.9
TEXT_SHADOW_ALPHA = 0.5
TEXT_SHADOW_BLUR = 3
HEADER_GAP = 20
MIN_NAME_FONT_SIZE = 24
NAME_FONT_STEP = 2
DIVIDER_MARGIN = 14
DIVIDER_ALPHA = 0.5
MIN_BODY_OFFSET = 8
WHITE = (255, 255, 255, 255)


def _save_debug(image: Image.Image, render_id: str, stage: str) -> None:
    if not settings.DEBUG_ARTIFACTS:
        return
    debug_dir = Path(settings.DEBUG_DIR)
    path = debug_dir / f"{render_id}_{stage}.png"
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        image.save(path)
    except OSError:
        logger.warning("[debug-artifacts] failed to save %s", path, exc_info=True)


def _source_rect(photo: Image.Image, crop: Optional[CropSpec]) -> SourceRect:
    src_w, src_h = photo.size
    if crop is not None:
        return cover_crop(src_w, src_h, FRAME_WIDTH, FRAME_HEIGHT, crop)
    shift = detect_vertical_shift(photo)
    placement = contain_placement(src_w, src_h, FRAME_WIDTH, FRAME_HEIGHT, shift)
    logger.debug("contain placement shift=%.2f -> %s", shift, placement)
    return source_box_for_placement(src_w, src_h, FRAME_WIDTH, FRAME_HEIGHT, placement)


def draw_photo_layer(photo: Image.Image, crop: Optional[CropSpec] = None) -> Image.Image:
    """
    Frame-sized RGBA layer with the photo mapped in. Parts of the frame the
    photo does not cover are transparent.
    """
    rect = _source_rect(photo, crop)
    src = photo if photo.mode == "RGBA" else photo.convert("RGBA")

    # EXTENT sampling does not antialias, so pre-shrink large downscales
    factor = int(min(rect.sw / FRAME_WIDTH, rect.sh / FRAME_HEIGHT))
    box = rect.box
    if factor >= 2:
        reduced = src.reduce(factor)
        sx = reduced.width / src.width
        sy = reduced.height / src.height
        box = (box[0] * sx, box[1] * sy, box[2] * sx, box[3] * sy)
        src = reduced

    return src.transform(
        FRAME_SIZE,
        Image.Transform.EXTENT,
        data=box,
        resample=Image.Resampling.BICUBIC,
        fillcolor=(0, 0, 0, 0),
    )


def _fit_name_font_size(
    name_text: str,
    family: str,
    start_size: int,
    available_width: float,
    fonts: FontBook,
) -> int:
    size = start_size
    width = fonts.get(family, size, bold=True).getlength(name_text)
    while width > available_width and size > MIN_NAME_FONT_SIZE:
        size -= NAME_FONT_STEP
        width = fonts.get(family, size, bold=True).getlength(name_text)
    return size


def draw_review_overlay(
    canvas: Image.Image,
    caption_lines: Sequence[str],
    options: RenderOptions,
    metrics: ReviewLayoutMetrics,
    fonts: FontBook,
) -> None:
    """
    Bottom caption band: header (name left, date right), divider, then as
    many body lines as fit, vertically centered in what is left of the band.
    """
    width, height = canvas.size
    band_h = metrics.overlay_height
    band_top = height - band_h
    pad_x = metrics.padding_x
    family = options.font_family

    band = new_layer(canvas.size)
    ImageDraw.Draw(band).rectangle(
        (0, band_top, width - 1, height - 1),
        fill=(0, 0, 0, int(255 * BAND_ALPHA + 0.5)),
    )
    canvas.alpha_composite(band)

    header_y = band_top + metrics.padding_y
    date_font = fonts.get(family, metrics.date_font_size)
    date_text = options.date
    date_w = date_font.getlength(date_text)

    name_text = options.header_text
    available_w = width - pad_x * 2 - date_w - HEADER_GAP
    name_size = _fit_name_font_size(name_text, family, metrics.name_font_size, available_w, fonts)
    name_font = fonts.get(family, name_size, bold=True)

    text_layer = new_layer(canvas.size)
    draw = ImageDraw.Draw(text_layer)
    draw.text((pad_x, header_y), name_text, font=name_font, fill=WHITE)
    # bottom-align the smaller date with the name
    date_y = header_y + (name_size - metrics.date_font_size)
    draw.text((width - pad_x - date_w, date_y), date_text, font=date_font, fill=WHITE)

    line_y = header_y + max(name_size, metrics.date_font_size) + DIVIDER_MARGIN
    draw.line(
        ((pad_x, line_y), (width - pad_x, line_y)),
        fill=(255, 255, 255, int(255 * DIVIDER_ALPHA + 0.5)),
        width=1,
    )

    line_height = metrics.line_height
    available_h = band_h - (line_y - band_top) - metrics.padding_y
    allowed = max(1, math.floor(available_h / line_height))
    count = min(allowed, len(caption_lines))
    block_h = (count - 1) * line_height + metrics.body_font_size if count > 0 else 0
    start_y = line_y + max(MIN_BODY_OFFSET, (available_h - block_h) / 2)

    body_font = fonts.get(family, metrics.body_font_size)
    for i in range(count):
        draw.text((pad_x, start_y + i * line_height), caption_lines[i], font=body_font, fill=WHITE)

    composite_with_shadow(canvas, text_layer, TEXT_SHADOW_ALPHA, TEXT_SHADOW_BLUR)
    logger.debug(
        "caption overlay name_size=%s allowed=%s drawn=%s of %s",
        name_size,
        allowed,
        count,
        len(caption_lines),
    )


def render_review_image(
    photo: Image.Image,
    logo: Optional[Image.Image],
    caption_lines: Sequence[str],
    options: RenderOptions,
    crop: Optional[CropSpec] = None,
    masks: Optional[Iterable[MaskRegion]] = None,
    fonts: Optional[FontBook] = None,
) -> Image.Image:
    """
    Composite one review image and return it as a 1080x1350 RGBA image.

    `photo` and `logo` are only read. An empty `caption_lines` renders the
    header-only placeholder band.
    """
    src_w, src_h = photo.size
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"photo has no pixels ({src_w}x{src_h})")
    fonts = fonts or FontBook()
    render_id = uuid.uuid4().hex[:8]

    canvas = Image.new("RGBA", FRAME_SIZE, BACKGROUND)
    canvas.alpha_composite(draw_photo_layer(photo, crop))
    _save_debug(canvas, render_id, "photo")

    masks = list(masks or ())
    if masks:
        apply_masks(canvas, masks)
        _save_debug(canvas, render_id, "masked")

    if options.show_watermark:
        draw_watermark(canvas, options, logo if options.use_logo else None, fonts)

    metrics = compute_review_layout(options.body_font_size)
    draw_review_overlay(canvas, caption_lines, options, metrics, fonts)
    _save_debug(canvas, render_id, "final")

    logger.debug(
        "render_review_image %s src=%sx%s crop=%s masks=%d lines=%d",
        render_id,
        src_w,
        src_h,
        crop,
        len(masks),
        len(caption_lines),
    )
    return canvas


def encode_png(image: Image.Image, compress_level: Optional[int] = None) -> bytes:
    level = settings.PNG_COMPRESS_LEVEL if compress_level is None else compress_level
    buf = io.BytesIO()
    image.save(buf, format="PNG", compress_level=level)
    return buf.getvalue()


def render_review_png(
    photo: Image.Image,
    logo: Optional[Image.Image],
    caption_lines: Sequence[str],
    options: RenderOptions,
    crop: Optional[CropSpec] = None,
    masks: Optional[Iterable[MaskRegion]] = None,
    fonts: Optional[FontBook] = None,
) -> bytes:
    """render_review_image followed by PNG encoding."""
    image = render_review_image(photo, logo, caption_lines, options, crop=crop, masks=masks, fonts=fonts)
    return encode_png(image)
