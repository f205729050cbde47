"""
Core domain models for the review image generator.
These are framework-agnostic and are shared by all render services.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import uuid


# Output frame (4:5 portrait)
FRAME_WIDTH = 1080
FRAME_HEIGHT = 1350

# Editor ranges for crop values
ZOOM_MIN = 0.5
ZOOM_MAX = 3.0
OFFSET_X_LIMIT = 100.0
OFFSET_Y_LIMIT = 200.0

DEFAULT_MASK_STRENGTH = 50

# A page is one output image's worth of caption lines.
Page = List[str]


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


class MaskKind(str, Enum):
    """Redaction effect applied to a mask region."""
    PIXELATE = "pixelate"
    BLUR = "blur"


@dataclass(frozen=True)
class SourceRect:
    """Sub-rectangle of a source photo, in source pixels. May extend past the photo bounds."""
    sx: float
    sy: float
    sw: float
    sh: float

    @property
    def box(self) -> tuple[float, float, float, float]:
        return (self.sx, self.sy, self.sx + self.sw, self.sy + self.sh)


@dataclass(frozen=True)
class Placement:
    """Where a scaled photo lands on the output frame (destination pixels)."""
    dx: float
    dy: float
    dw: float
    dh: float


@dataclass
class CropSpec:
    """
    Declarative viewport into a photo, relative to a cover-fit baseline.

    - zoom: 0.5..3.0, values above 1 magnify
    - offset_x: -100..100, percent of horizontal slack
    - offset_y: -200..200, beyond +/-100 it keeps travelling by photo height
    """
    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def clamped(self) -> "CropSpec":
        return CropSpec(
            zoom=_clamp(self.zoom or 1.0, ZOOM_MIN, ZOOM_MAX),
            offset_x=_clamp(self.offset_x, -OFFSET_X_LIMIT, OFFSET_X_LIMIT),
            offset_y=_clamp(self.offset_y, -OFFSET_Y_LIMIT, OFFSET_Y_LIMIT),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CropSpec":
        return cls(
            zoom=float(data.get("zoom") or 1.0),
            offset_x=float(data.get("offsetX", data.get("offset_x", 0.0)) or 0.0),
            offset_y=float(data.get("offsetY", data.get("offset_y", 0.0)) or 0.0),
        ).clamped()


@dataclass
class MaskRegion:
    """
    A rectangle to redact, in fractions (0..1) of the output frame.

    Zero or negative width/height makes the region inert.
    """
    kind: MaskKind
    x: float
    y: float
    width: float
    height: float
    strength: int = DEFAULT_MASK_STRENGTH
    id: str = field(default_factory=lambda: MaskRegion.generate_id())

    @staticmethod
    def generate_id() -> str:
        return f"mask-{uuid.uuid4().hex[:8]}"

    @classmethod
    def from_corners(
        cls,
        start: tuple[float, float],
        end: tuple[float, float],
        kind: MaskKind = MaskKind.PIXELATE,
        strength: int = DEFAULT_MASK_STRENGTH,
    ) -> "MaskRegion":
        """Build a region from two dragged corner points (any order)."""
        left = min(start[0], end[0])
        top = min(start[1], end[1])
        return cls(
            kind=kind,
            x=_clamp(left, 0.0, 1.0),
            y=_clamp(top, 0.0, 1.0),
            width=_clamp(abs(end[0] - start[0]), 0.0, 1.0),
            height=_clamp(abs(end[1] - start[1]), 0.0, 1.0),
            strength=strength,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MaskRegion":
        strength = data.get("strength")
        kwargs: Dict[str, Any] = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        return cls(
            kind=MaskKind(data.get("type") or data.get("kind") or MaskKind.PIXELATE.value),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            strength=int(strength) if strength is not None else DEFAULT_MASK_STRENGTH,
            **kwargs,
        )


@dataclass(frozen=True)
class ReviewLayoutMetrics:
    """Geometry of the caption band; derived from the body font size, never stored."""
    padding_x: int
    padding_y: int
    name_font_size: int
    date_font_size: int
    body_font_size: int
    line_height: int
    overlay_height: int


@dataclass
class RenderOptions:
    """Caller-validated text and toggles for one render."""
    store_name: str
    date: str
    location: str = ""
    font_family: str = "NanumSquareRound"
    watermark_opacity: float = 0.8
    show_watermark: bool = True
    use_logo: bool = True
    logo_white: bool = True
    body_font_size: Optional[int] = None

    @property
    def header_text(self) -> str:
        if self.location:
            return f"{self.store_name} - {self.location}"
        return self.store_name
