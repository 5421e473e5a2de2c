"""Paper formats and the pixel geometry of a print canvas.

All pixel constants in :mod:`photostrip.config` are defined at 300 DPI and
scale linearly with :attr:`PrintSpec.dpi`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from . import config
from .geometry import PixelRect


class PaperFormat(str, Enum):
    STRIP = "strip"
    FOUR_R = "4r"

    @classmethod
    def parse(cls, value: "PaperFormat | str") -> "PaperFormat":
        if isinstance(value, PaperFormat):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown paper format '{value}'") from None


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"

    @classmethod
    def parse(cls, value: "Orientation | str") -> "Orientation":
        if isinstance(value, Orientation):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown orientation '{value}'") from None


@dataclass(frozen=True)
class PrintSpec:
    """Physical target of a composition."""

    paper_format: PaperFormat = PaperFormat.STRIP
    orientation: Orientation = Orientation.PORTRAIT
    dpi: int = config.PRINT_DPI

    def __post_init__(self) -> None:
        object.__setattr__(self, "paper_format", PaperFormat.parse(self.paper_format))
        object.__setattr__(self, "orientation", Orientation.parse(self.orientation))
        if not isinstance(self.dpi, int) or self.dpi <= 0:
            raise ValueError("dpi must be a positive integer")

    @property
    def is_strip(self) -> bool:
        return self.paper_format is PaperFormat.STRIP

    @property
    def effective_orientation(self) -> Orientation:
        """Strips print portrait whatever orientation was requested."""
        if self.is_strip:
            return Orientation.PORTRAIT
        return self.orientation

    @property
    def canvas_size(self) -> Tuple[int, int]:
        width = round(config.PAPER_WIDTH_IN * self.dpi)
        height = round(config.PAPER_HEIGHT_IN * self.dpi)
        if self.effective_orientation is Orientation.LANDSCAPE:
            return height, width
        return width, height

    @property
    def physical_size_inches(self) -> Tuple[float, float]:
        width, height = self.canvas_size
        return width / self.dpi, height / self.dpi

    def scale_px(self, value_at_300_dpi: int) -> int:
        return round(value_at_300_dpi * self.dpi / config.PRINT_DPI)


@dataclass(frozen=True)
class CanvasLayout:
    """Where content regions sit on the output canvas.

    Strip canvases have two regions of identical size; 4R canvases have one.
    """

    width: int
    height: int
    regions: Tuple[PixelRect, ...]
    cut_mark_x: int | None = None

    @property
    def region_size(self) -> Tuple[int, int]:
        first = self.regions[0]
        return first.width, first.height


def canvas_layout(spec: PrintSpec) -> CanvasLayout:
    width, height = spec.canvas_size
    margin = spec.scale_px(config.SAFE_MARGIN_PX)
    if spec.is_strip:
        gap = spec.scale_px(config.STRIP_GAP_PX)
        strip_width = (width - margin * 2 - gap) // 2
        strip_height = height - margin * 2
        regions = (
            PixelRect(margin, margin, strip_width, strip_height),
            PixelRect(margin + strip_width + gap, margin, strip_width, strip_height),
        )
        return CanvasLayout(width, height, regions, cut_mark_x=width // 2)
    region = PixelRect(margin, margin, width - margin * 2, height - margin * 2)
    return CanvasLayout(width, height, (region,))


__all__ = ["PaperFormat", "Orientation", "PrintSpec", "CanvasLayout", "canvas_layout"]
