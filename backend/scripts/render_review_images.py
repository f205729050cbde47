"""Render review images for a set of photos.

Usage:
    python -m scripts.render_review_images PHOTO [PHOTO ...] --store "가게 이름" --review-file review.txt \
        [--location 성수] [--date 20250101] [--logo logo.png] [--crops crops.json] [--out out/]

crops.json maps a photo file name to its crop and masks, e.g.
    {"IMG_0001.jpg": {"zoom": 1.4, "offsetX": 0, "offsetY": -30,
                      "masks": [{"type": "blur", "x": 0.1, "y": 0.2, "width": 0.2, "height": 0.1, "strength": 70}]}}
Photos without an entry are drawn contain-fit with the automatic vertical shift.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image, ImageOps

from domain.models import CropSpec, MaskRegion, RenderOptions
from services.batch import MAX_PHOTOS, PhotoInput, normalize_review_date, render_batch
from services.fonts import FontBook
from settings import settings

logger = logging.getLogger("render_review_images")

_CROP_KEYS = ("zoom", "offsetX", "offsetY", "offset_x", "offset_y")


def _open_image(path: Path) -> Image.Image:
    with Image.open(path) as img:
        return ImageOps.exif_transpose(img).copy()


def _load_crops(path: Optional[Path]) -> Dict[str, Dict[str, Any]]:
    if path is None:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected an object keyed by photo file name")
    return data


def _photo_input(path: Path, crops: Dict[str, Dict[str, Any]]) -> PhotoInput:
    entry = crops.get(path.name) or {}
    crop = CropSpec.from_dict(entry) if any(k in entry for k in _CROP_KEYS) else None
    masks = [MaskRegion.from_dict(m) for m in entry.get("masks") or []]
    return PhotoInput(image=_open_image(path), crop=crop, masks=masks, name=path.name)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render 1080x1350 review images with a caption band.")
    parser.add_argument("photos", nargs="+", type=Path, help=f"Photo files (max {MAX_PHOTOS}).")
    parser.add_argument("--store", required=True, help="Store name shown in the header.")
    review = parser.add_mutually_exclusive_group(required=True)
    review.add_argument("--review", help="Review text.")
    review.add_argument("--review-file", type=Path, help="UTF-8 file with the review text.")
    parser.add_argument("--location", default="", help="Location appended to the header.")
    parser.add_argument("--date", default="", help="Visit date; 8 digits become YYYY.MM.DD, empty means today.")
    parser.add_argument("--logo", type=Path, default=None, help="Logo image for the watermark.")
    parser.add_argument("--font", default=settings.DEFAULT_FONT_FAMILY, help="Font family name or .ttf/.otf path.")
    parser.add_argument("--crops", type=Path, default=None, help="JSON file with per-photo crop and masks.")
    parser.add_argument("--no-auto-fit", action="store_true", help="Render every photo with every page.")
    parser.add_argument("--no-watermark", action="store_true")
    parser.add_argument("--no-logo", action="store_true", help="Text-only watermark even if --logo is given.")
    parser.add_argument("--logo-original", action="store_true", help="Draw the logo as-is instead of a white silhouette.")
    parser.add_argument("--watermark-opacity", type=float, default=0.8)
    parser.add_argument("--out", type=Path, default=Path("review_images"))
    parser.add_argument("--workers", type=int, default=None, help=f"Render threads (default {settings.RENDER_WORKERS}).")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    if len(args.photos) > MAX_PHOTOS:
        parser.error(f"at most {MAX_PHOTOS} photos are supported (got {len(args.photos)})")

    review_text = args.review if args.review is not None else args.review_file.read_text(encoding="utf-8")
    crops = _load_crops(args.crops)
    photos: List[PhotoInput] = [_photo_input(p, crops) for p in args.photos]
    logo = _open_image(args.logo) if args.logo else None

    options = RenderOptions(
        store_name=args.store,
        location=args.location,
        date=normalize_review_date(args.date),
        font_family=args.font,
        watermark_opacity=args.watermark_opacity,
        show_watermark=not args.no_watermark,
        use_logo=not args.no_logo,
        logo_white=not args.logo_original,
    )

    results = render_batch(
        photos,
        review_text,
        options,
        fonts=FontBook(),
        logo=logo,
        auto_fit=not args.no_auto_fit,
        max_workers=args.workers,
    )

    out_dir: Path = args.out
    out_dir.mkdir(parents=True, exist_ok=True)
    for rendered in results:
        path = out_dir / rendered.filename
        path.write_bytes(rendered.png_bytes)
        logger.info("  wrote %s (%d bytes)", path, len(rendered.png_bytes))
    logger.info("Rendered %d review image(s) into %s", len(results), out_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
