"""Reusable image manipulation operations.

Photo filters and the fit helpers the compositor uses to turn a decoded
asset into a tile of exactly the size it will be painted at.  Everything
except :func:`pil_to_qimage` is pure Pillow and safe to run on worker
threads.
"""

from __future__ import annotations

import logging
import math
from typing import Callable

from PIL import Image, ImageChops, ImageEnhance, ImageOps
from PySide6.QtGui import QImage

from photostrip.fitting import FitMode, contain_fit, cover_fit

Offset = tuple[int, int]

SEPIA_MATRIX = (
    0.393, 0.769, 0.189, 0,
    0.349, 0.686, 0.168, 0,
    0.272, 0.534, 0.131, 0,
)


def _clip(value: float) -> int:
    return max(0, min(255, int(value + 0.5)))


def _channel_lut(func: Callable[[int], float]) -> list[int]:
    return [_clip(func(value)) for value in range(256)]


def adjust_brightness(image: Image.Image, factor: float) -> Image.Image:
    """Multiply every channel by ``factor``."""
    return image.point(_channel_lut(lambda v: v * factor) * 3)


def adjust_contrast(image: Image.Image, factor: float) -> Image.Image:
    """Scale channel distance from mid-grey (128) by ``factor``."""
    return image.point(_channel_lut(lambda v: (v - 128) * factor + 128) * 3)


def adjust_saturation(image: Image.Image, factor: float) -> Image.Image:
    return ImageEnhance.Color(image).enhance(factor)


def scale_channels(image: Image.Image, red: float, green: float, blue: float) -> Image.Image:
    return image.point(
        _channel_lut(lambda v: v * red)
        + _channel_lut(lambda v: v * green)
        + _channel_lut(lambda v: v * blue)
    )


def vignette(image: Image.Image, strength: float) -> Image.Image:
    """Darken towards the corners; corners keep ``1 - strength`` of their value."""

    gradient = Image.radial_gradient("L")
    # Crop so the corners of the crop sit on the gradient's unit circle.
    inset = round(128 - 128 / math.sqrt(2))
    gradient = gradient.crop((inset, inset, 256 - inset, 256 - inset))
    mask = gradient.resize(image.size, Image.Resampling.BILINEAR)
    mask = mask.point(_channel_lut(lambda v: 255 - v * strength))
    return ImageChops.multiply(image, Image.merge("RGB", (mask, mask, mask)))


def grayscale(image: Image.Image) -> Image.Image:
    return ImageOps.grayscale(image).convert("RGB")


def sepia(image: Image.Image) -> Image.Image:
    return image.convert("RGB", SEPIA_MATRIX)


def vintage(image: Image.Image) -> Image.Image:
    return vignette(adjust_contrast(sepia(image), 0.9), 0.5)


def high_contrast(image: Image.Image) -> Image.Image:
    return adjust_saturation(adjust_contrast(image, 1.5), 1.2)


def soft_glow(image: Image.Image) -> Image.Image:
    return adjust_contrast(adjust_brightness(image, 1.05), 0.95)


def warm(image: Image.Image) -> Image.Image:
    return scale_channels(image, 1.1, 1.05, 0.9)


def cool(image: Image.Image) -> Image.Image:
    return scale_channels(image, 0.9, 1.0, 1.1)


def dramatic(image: Image.Image) -> Image.Image:
    return adjust_saturation(adjust_contrast(adjust_brightness(image, 0.9), 1.3), 1.1)


_FILTER_DISPATCH: dict[str, Callable[[Image.Image], Image.Image]] = {
    "grayscale": grayscale,
    "sepia": sepia,
    "vintage": vintage,
    "highContrast": high_contrast,
    "softGlow": soft_glow,
    "warm": warm,
    "cool": cool,
    "dramatic": dramatic,
}

FILTER_NAMES = ("none", *_FILTER_DISPATCH)


def apply_photo_filter(image: Image.Image, filter_name: str) -> Image.Image:
    """Apply a named photo filter, keeping any alpha channel intact.

    ``"none"`` and unknown names return the image unchanged; unknown names
    are logged.
    """

    if not filter_name or filter_name == "none":
        return image
    func = _FILTER_DISPATCH.get(filter_name)
    if func is None:
        logging.warning("Unknown photo filter: %s", filter_name)
        return image
    if image.mode == "RGBA":
        alpha = image.getchannel("A")
        filtered = func(image.convert("RGB"))
        filtered.putalpha(alpha)
        return filtered
    return func(image.convert("RGB"))


def render_tile(
    image: Image.Image,
    width: int,
    height: int,
    fit: FitMode,
    photo_filter: str = "none",
) -> tuple[Image.Image, Offset]:
    """Scale ``image`` for a ``width`` x ``height`` target.

    Returns the tile and its offset inside the target.  Cover and stretch
    tiles fill the target exactly; contain tiles are smaller and centred.
    """

    if width <= 0 or height <= 0:
        raise ValueError("Tile dimensions must be positive")
    if fit is FitMode.COVER:
        crop = cover_fit(image.width, image.height, width, height)
        box = (crop.x, crop.y, crop.x + crop.width, crop.y + crop.height)
        tile = image.resize((width, height), Image.Resampling.LANCZOS, box=box)
        offset = (0, 0)
    elif fit is FitMode.CONTAIN:
        placed = contain_fit(image.width, image.height, width, height)
        size = (max(1, round(placed.width)), max(1, round(placed.height)))
        tile = image.resize(size, Image.Resampling.LANCZOS)
        offset = (int(placed.x + 0.5), int(placed.y + 0.5))
    else:
        tile = image.resize((width, height), Image.Resampling.LANCZOS)
        offset = (0, 0)
    return apply_photo_filter(tile, photo_filter), offset


def pil_to_qimage(image: Image.Image) -> QImage:
    """Copy a Pillow image into a detached ``QImage``."""

    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    data = rgba.tobytes("raw", "RGBA")
    qimage = QImage(data, rgba.width, rgba.height, rgba.width * 4, QImage.Format_RGBA8888)
    return qimage.copy()


__all__ = [
    "FILTER_NAMES",
    "adjust_brightness",
    "adjust_contrast",
    "adjust_saturation",
    "scale_channels",
    "vignette",
    "apply_photo_filter",
    "render_tile",
    "pil_to_qimage",
]
