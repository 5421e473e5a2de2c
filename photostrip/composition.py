"""Value types passed into and returned from the print compositor.

Requests are immutable snapshots: the compositor never mutates caller state
and two equal requests always produce the same output bytes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from PySide6.QtGui import QImage

from . import config
from .fitting import FitMode
from .geometry import Box
from .print_formats import PrintSpec

# Raw bytes, a filesystem path, or a ``data:`` URL.
AssetSource = Union[bytes, bytearray, str, "os.PathLike[str]"]


@dataclass(frozen=True)
class Photo:
    """A captured photo, matched to a box by position in the photo list."""

    id: str
    data: AssetSource
    timestamp: float = 0.0


@dataclass(frozen=True)
class BorderStyle:
    color: str = "#000000"
    width: int = 2
    dashed: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise ValueError("Border width must be positive")


@dataclass(frozen=True)
class PrintAssets:
    """Background, frame and styling applied around the photos."""

    background_color: str = config.DEFAULT_BACKGROUND_COLOR
    background_image: Optional[AssetSource] = None
    background_fit: FitMode = FitMode.COVER
    frame_image: Optional[AssetSource] = None
    photo_filter: str = "none"
    border: Optional[BorderStyle] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "background_fit", FitMode(self.background_fit))


@dataclass(frozen=True)
class CompositionRequest:
    boxes: Tuple[Box, ...]
    photos: Tuple[Photo, ...] = ()
    assets: PrintAssets = field(default_factory=PrintAssets)
    spec: PrintSpec = field(default_factory=PrintSpec)
    show_placeholders: bool = True
    show_cut_marks: bool = False
    quality: float = config.QUALITY_DEFAULT
    image_format: str = config.OUTPUT_FORMAT

    def __post_init__(self) -> None:
        object.__setattr__(self, "boxes", tuple(self.boxes))
        object.__setattr__(self, "photos", tuple(self.photos))
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError("quality must be between 0 and 1")
        image_format = self.image_format.upper()
        if image_format == "JPG":
            image_format = "JPEG"
        if image_format not in config.SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {self.image_format}")
        object.__setattr__(self, "image_format", image_format)


@dataclass(frozen=True)
class ComposedOutput:
    """A rendered print: the bitmap, its encoded bytes and physical size."""

    image: QImage
    width: int
    height: int
    data: bytes
    image_format: str
    dpi: int

    @property
    def width_inches(self) -> float:
        return self.width / self.dpi

    @property
    def height_inches(self) -> float:
        return self.height / self.dpi

    @property
    def physical_size_inches(self) -> Tuple[float, float]:
        return self.width_inches, self.height_inches


def make_photos(sources: Sequence[AssetSource]) -> Tuple[Photo, ...]:
    """Wrap raw sources as photos numbered in capture order."""

    return tuple(Photo(id=f"photo-{index}", data=source, timestamp=float(index))
                 for index, source in enumerate(sources, start=1))


__all__ = [
    "AssetSource",
    "Photo",
    "BorderStyle",
    "PrintAssets",
    "CompositionRequest",
    "ComposedOutput",
    "make_photos",
]
