"""
Crop/cover geometry for placing a photo in the fixed output frame.

Two ways a photo lands in the frame:
- cover_crop: an explicit CropSpec selects a source rectangle (aspect of the
  frame) that is stretched over the whole frame.
- contain_placement: no crop; the full photo is scaled to fit, centered and
  shifted vertically by a percentage.

Neither path clamps against the photo bounds. Users may pan past the photo
edge; the uncovered part of the frame is simply left transparent.
"""
import logging
from typing import Optional

from domain.models import CropSpec, Placement, SourceRect

logger = logging.getLogger(__name__)


def cover_crop(
    src_w: float,
    src_h: float,
    dst_w: float,
    dst_h: float,
    crop: Optional[CropSpec] = None,
) -> SourceRect:
    """
    Return the source rectangle that should fill a dst_w x dst_h frame.

    Algorithm:
    - Take the largest rectangle with the frame's aspect that fits the source,
      divided by zoom.
    - Center it.
    - Shift by offset_x percent of the horizontal slack (src_w - sw).
    - Shift by offset_y percent of the vertical slack; past +/-100 the extra
      percentage is applied to the full source height.
    """
    target_ratio = dst_w / dst_h
    zoom = (crop.zoom if crop else None) or 1.0
    if src_w / src_h > target_ratio:
        sh = src_h / zoom
        sw = sh * target_ratio
    else:
        sw = src_w / zoom
        sh = sw / target_ratio

    sx = (src_w - sw) / 2
    sy = (src_h - sh) / 2
    extra_x = src_w - sw
    extra_y = src_h - sh
    if crop is not None:
        sx += extra_x * crop.offset_x / 100
        if crop.offset_y < -100:
            sy += -extra_y + src_h * (crop.offset_y + 100) / 100
        elif crop.offset_y > 100:
            sy += extra_y + src_h * (crop.offset_y - 100) / 100
        else:
            sy += extra_y * crop.offset_y / 100

    rect = SourceRect(sx=sx, sy=sy, sw=sw, sh=sh)
    logger.debug("cover_crop src=%sx%s crop=%s -> %s", src_w, src_h, crop, rect)
    return rect


def contain_placement(
    src_w: float,
    src_h: float,
    dst_w: float,
    dst_h: float,
    vertical_shift: float = 0.0,
) -> Placement:
    """
    Scale the whole photo into the frame, center it, then apply vertical_shift
    (percent, negative moves up). With letterbox space above/below, the shift
    is a share of that space; otherwise it is a share of the drawn height.
    """
    scale = min(dst_w / src_w, dst_h / src_h)
    dw = src_w * scale
    dh = src_h * scale
    dx = (dst_w - dw) / 2
    dy = (dst_h - dh) / 2
    if dst_h > dh:
        dy += (dst_h - dh) * vertical_shift / 100
    else:
        dy += dh * vertical_shift / 100
    return Placement(dx=dx, dy=dy, dw=dw, dh=dh)


def source_box_for_placement(
    src_w: float,
    src_h: float,
    dst_w: float,
    dst_h: float,
    placement: Placement,
) -> SourceRect:
    """
    Invert a placement: the source-space rectangle that maps onto the whole
    destination frame when the photo is drawn at `placement`.
    """
    scale_x = placement.dw / src_w
    scale_y = placement.dh / src_h
    return SourceRect(
        sx=-placement.dx / scale_x,
        sy=-placement.dy / scale_y,
        sw=dst_w / scale_x,
        sh=dst_h / scale_y,
    )
