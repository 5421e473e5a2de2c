"""Ordered drawing plans for print and preview canvases.

A :class:`LayerPlan` is plain data: the list of paint operations for one
content region plus where that region is stamped on the canvas.  Strip
prints stamp the same region operations twice; 4R prints stamp them once.
The renderer in :mod:`photostrip.compositor` executes a plan without
knowing which paper format produced it.

Layer order inside a region:

1. background colour
2. background image
3. photos (or placeholders), each followed by its border
4. frame overlay
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from . import config
from .composition import AssetSource, CompositionRequest, Photo
from .fitting import FitMode
from .geometry import Box, PixelRect, box_to_pixels
from .print_formats import canvas_layout

LOGGER = logging.getLogger(__name__)

BACKGROUND_KEY = "background"
FRAME_KEY = "frame"


@dataclass(frozen=True)
class FillOp:
    rect: PixelRect
    color: str
    layer: str


@dataclass(frozen=True)
class ImageOp:
    rect: PixelRect
    asset_key: str
    fit: FitMode
    layer: str
    photo_filter: str = "none"


@dataclass(frozen=True)
class PlaceholderOp:
    rect: PixelRect
    rgba: Tuple[int, int, int, int] = config.PLACEHOLDER_RGBA
    layer: str = "placeholder"


@dataclass(frozen=True)
class BorderOp:
    rect: PixelRect
    color: str
    width: int
    dash: Optional[Tuple[int, int]] = None
    layer: str = "border"


@dataclass(frozen=True)
class CutMarksOp:
    x: int
    height: int
    color: str = config.CUT_MARK_COLOR
    width: int = config.CUT_MARK_WIDTH
    dash: Tuple[int, int] = config.CUT_MARK_DASH
    tick_length: int = config.CUT_MARK_TICK_LENGTH
    tick_inset: int = config.CUT_MARK_TICK_INSET
    layer: str = "cut-marks"


LayerOp = Union[FillOp, ImageOp, PlaceholderOp, BorderOp, CutMarksOp]


@dataclass(frozen=True)
class LayerPlan:
    width: int
    height: int
    canvas_ops: Tuple[LayerOp, ...]
    region_ops: Tuple[LayerOp, ...]
    region_origins: Tuple[Tuple[int, int], ...]
    region_size: Tuple[int, int]
    finish_ops: Tuple[LayerOp, ...] = ()
    assets: Dict[str, AssetSource] = field(default_factory=dict)

    def image_ops(self) -> List[ImageOp]:
        return [op for op in self.region_ops if isinstance(op, ImageOp)]


def photo_key(index: int) -> str:
    return f"photo:{index}"


def pair_photos(
    boxes: Sequence[Box],
    photos: Sequence[Photo],
) -> List[Tuple[Box, Optional[Photo]]]:
    """Pair boxes with photos by position.

    Boxes beyond the photo count get ``None``; surplus photos are dropped.
    The layout is never regenerated to fit the photo count.
    """

    if len(photos) > len(boxes):
        LOGGER.debug(
            "Dropping %d photo(s) without a matching box", len(photos) - len(boxes)
        )
    return [
        (box, photos[index] if index < len(photos) else None)
        for index, box in enumerate(boxes)
    ]


def build_layer_plan(request: CompositionRequest) -> LayerPlan:
    """Compute the paint operations for ``request``."""

    layout = canvas_layout(request.spec)
    region_width, region_height = layout.region_size
    region = PixelRect(0, 0, region_width, region_height)
    assets = request.assets
    referenced: Dict[str, AssetSource] = {}

    canvas_ops: List[LayerOp] = [
        FillOp(PixelRect(0, 0, layout.width, layout.height), config.PAPER_COLOR, "paper"),
    ]

    region_ops: List[LayerOp] = [FillOp(region, assets.background_color, "background")]
    if assets.background_image is not None:
        region_ops.append(ImageOp(region, BACKGROUND_KEY, assets.background_fit, "background-image"))
        referenced[BACKGROUND_KEY] = assets.background_image

    for index, (box, photo) in enumerate(pair_photos(request.boxes, request.photos)):
        rect = box_to_pixels(box, region_width, region_height)
        if rect.is_empty:
            LOGGER.debug("Skipping %s: empty pixel rectangle %s", box.id, rect)
            continue
        if photo is not None:
            key = photo_key(index)
            region_ops.append(ImageOp(rect, key, FitMode.COVER, "photo", assets.photo_filter))
            referenced[key] = photo.data
        elif request.show_placeholders:
            region_ops.append(PlaceholderOp(rect))
        else:
            continue
        if assets.border is not None:
            dash = config.BORDER_DASH if assets.border.dashed else None
            region_ops.append(BorderOp(rect, assets.border.color, assets.border.width, dash))

    if assets.frame_image is not None:
        region_ops.append(ImageOp(region, FRAME_KEY, FitMode.STRETCH, "frame"))
        referenced[FRAME_KEY] = assets.frame_image

    finish_ops: List[LayerOp] = []
    if request.spec.is_strip and request.show_cut_marks and layout.cut_mark_x is not None:
        finish_ops.append(CutMarksOp(layout.cut_mark_x, layout.height))

    return LayerPlan(
        width=layout.width,
        height=layout.height,
        canvas_ops=tuple(canvas_ops),
        region_ops=tuple(region_ops),
        region_origins=tuple((rect.x, rect.y) for rect in layout.regions),
        region_size=(region_width, region_height),
        finish_ops=tuple(finish_ops),
        assets=referenced,
    )


__all__ = [
    "FillOp",
    "ImageOp",
    "PlaceholderOp",
    "BorderOp",
    "CutMarksOp",
    "LayerOp",
    "LayerPlan",
    "BACKGROUND_KEY",
    "FRAME_KEY",
    "photo_key",
    "pair_photos",
    "build_layer_plan",
]
