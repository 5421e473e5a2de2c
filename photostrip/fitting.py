"""Aspect-preserving fit calculations.

Both helpers work in floating point and return the rectangle to read from
(cover) or to draw into (contain).  Rendering code decides how to round.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FitMode(str, Enum):
    """How an image is placed into a target rectangle."""

    COVER = "cover"
    CONTAIN = "contain"
    STRETCH = "stretch"


@dataclass(frozen=True)
class CropRect:
    """Sub-rectangle of a source image."""

    x: float
    y: float
    width: float
    height: float

    @property
    def aspect(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class PlacedRect:
    """Rectangle inside a target area, relative to its top-left corner."""

    x: float
    y: float
    width: float
    height: float


def _require_positive(*values: float) -> None:
    if any(value <= 0 for value in values):
        raise ValueError("Fit dimensions must be positive")


def cover_fit(src_width: float, src_height: float, dst_width: float, dst_height: float) -> CropRect:
    """Return the centred source crop that fills the target exactly.

    The crop has the target's aspect ratio, so scaling it onto the target
    never distorts the image.
    """

    _require_positive(src_width, src_height, dst_width, dst_height)
    src_ratio = src_width / src_height
    dst_ratio = dst_width / dst_height
    if src_ratio > dst_ratio:
        # Source is wider: trim the sides.
        crop_height = float(src_height)
        crop_width = crop_height * dst_ratio
        return CropRect((src_width - crop_width) / 2, 0.0, crop_width, crop_height)
    crop_width = float(src_width)
    crop_height = crop_width / dst_ratio
    return CropRect(0.0, (src_height - crop_height) / 2, crop_width, crop_height)


def contain_fit(src_width: float, src_height: float, dst_width: float, dst_height: float) -> PlacedRect:
    """Return where the whole source lands when scaled to fit inside the target."""

    _require_positive(src_width, src_height, dst_width, dst_height)
    src_ratio = src_width / src_height
    dst_ratio = dst_width / dst_height
    if src_ratio > dst_ratio:
        width = float(dst_width)
        height = dst_width / src_ratio
    else:
        height = float(dst_height)
        width = dst_height * src_ratio
    return PlacedRect((dst_width - width) / 2, (dst_height - height) / 2, width, height)


__all__ = ["FitMode", "CropRect", "PlacedRect", "cover_fit", "contain_fit"]
