"""Print compositor.

:class:`PrintCompositor` turns a :class:`CompositionRequest` into a
print-ready bitmap.  It builds a layer plan, decodes the referenced assets
concurrently on worker threads, then paints strictly in plan order onto a
``QImage`` with a single ``QPainter``.  Strip prints repeat the same region
operations at two x offsets, so both halves are pixel-identical.

A broken asset costs only its own layer.  Failing to get a drawing surface
aborts the composition with :class:`ContextUnavailableError`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Tuple

from PySide6.QtCore import QBuffer, QIODevice, QLine, QPoint, QRect, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from utils.image_operations import pil_to_qimage, render_tile
from utils.image_processor import ImageProcessor

from . import config
from .composition import ComposedOutput, CompositionRequest
from .errors import AssetDecodeError, ContextUnavailableError, PhotostripError
from .layer_plan import (
    BorderOp,
    CutMarksOp,
    FillOp,
    ImageOp,
    LayerOp,
    LayerPlan,
    PlaceholderOp,
    build_layer_plan,
)
from .managers.memory import MemoryGuard

LOGGER = logging.getLogger(__name__)

Tile = Tuple[QImage, Tuple[int, int]]


def quality_to_percent(quality: float) -> int:
    """Map a 0..1 encoder quality onto Qt's 1..100 scale."""

    return max(1, min(100, int(round(quality * 100))))


def encode_image(image: QImage, image_format: str, quality: float) -> bytes:
    """Encode ``image`` with Qt's image writers."""

    buffer = QBuffer()
    if not buffer.open(QIODevice.WriteOnly):
        raise PhotostripError("Unable to open buffer for image encoding")
    try:
        source = image
        if image_format == "JPEG":
            source = image.convertToFormat(QImage.Format_RGB32)
        if not source.save(buffer, image_format, quality_to_percent(quality)):
            raise PhotostripError(f"Failed to encode composed image as {image_format}")
        return bytes(buffer.data())
    finally:
        buffer.close()


def _color(value: str) -> QColor:
    color = QColor(value)
    if not color.isValid():
        LOGGER.warning("Invalid colour %r, using white", value)
        return QColor(Qt.white)
    return color


class PrintCompositor:
    """Render print canvases from layouts, photos and assets."""

    def __init__(
        self,
        processor: Optional[ImageProcessor] = None,
        *,
        memory_guard: Optional[MemoryGuard] = None,
    ) -> None:
        self._processor = processor or ImageProcessor()
        self._memory_guard = memory_guard

    async def compose(self, request: CompositionRequest) -> ComposedOutput:
        """Render and encode ``request``."""

        plan = build_layer_plan(request)
        image = self._new_image(plan.width, plan.height)
        painter = QPainter()
        if image.isNull() or not painter.begin(image):
            raise ContextUnavailableError(
                f"Cannot open a {plan.width}x{plan.height} drawing surface"
            )
        try:
            tiles = await self._realize_tiles(plan)
            self._paint_plan(painter, plan, tiles)
        finally:
            painter.end()

        data = encode_image(image, request.image_format, request.quality)
        LOGGER.debug(
            "Composed %s print %dx%d (%d bytes)",
            request.spec.paper_format.value, plan.width, plan.height, len(data),
        )
        if self._memory_guard is not None:
            self._memory_guard.check()
        return ComposedOutput(
            image=image,
            width=plan.width,
            height=plan.height,
            data=data,
            image_format=request.image_format,
            dpi=request.spec.dpi,
        )

    async def compose_preview(
        self,
        request: CompositionRequest,
        height: int = config.PREVIEW_HEIGHT,
    ) -> ComposedOutput:
        """Render ``request`` and scale it down to ``height`` pixels tall."""

        if height <= 0:
            raise ValueError("Preview height must be positive")
        full = await self.compose(request)
        scaled = full.image.scaledToHeight(height, Qt.SmoothTransformation)
        return ComposedOutput(
            image=scaled,
            width=scaled.width(),
            height=scaled.height(),
            data=encode_image(scaled, request.image_format, request.quality),
            image_format=request.image_format,
            dpi=max(1, round(full.dpi * scaled.height() / full.height)),
        )

    def _new_image(self, width: int, height: int) -> QImage:
        return QImage(width, height, QImage.Format_ARGB32)

    # ------------------------------------------------------------------
    # Asset decoding
    # ------------------------------------------------------------------
    async def _realize_tiles(self, plan: LayerPlan) -> Dict[int, Optional[Tile]]:
        """Decode every referenced asset and scale it for its layer.

        Decodes start together; each layer still waits for its own asset in
        plan order.
        """

        decodes = {
            key: asyncio.ensure_future(asyncio.to_thread(self._processor.decode, source, key))
            for key, source in plan.assets.items()
        }
        tiles: Dict[int, Optional[Tile]] = {}
        try:
            for index, op in enumerate(plan.region_ops):
                if isinstance(op, ImageOp):
                    tiles[index] = await self._realize(op, decodes[op.asset_key])
        finally:
            for task in decodes.values():
                if not task.done():
                    task.cancel()
        return tiles

    async def _realize(self, op: ImageOp, decode: "asyncio.Future") -> Optional[Tile]:
        try:
            source = await decode
        except AssetDecodeError as exc:
            LOGGER.warning("Skipping %s layer: %s", op.layer, exc)
            return None
        tile, offset = await asyncio.to_thread(
            render_tile, source, op.rect.width, op.rect.height, op.fit, op.photo_filter
        )
        return pil_to_qimage(tile), offset

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def _paint_plan(
        self,
        painter: QPainter,
        plan: LayerPlan,
        tiles: Dict[int, Optional[Tile]],
    ) -> None:
        painter.setRenderHint(QPainter.Antialiasing, False)
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        for op in plan.canvas_ops:
            self._paint(painter, op, None)

        region_width, region_height = plan.region_size
        for origin_x, origin_y in plan.region_origins:
            painter.save()
            painter.translate(origin_x, origin_y)
            painter.setClipRect(QRect(0, 0, region_width, region_height))
            for index, op in enumerate(plan.region_ops):
                self._paint(painter, op, tiles.get(index))
            painter.restore()

        for op in plan.finish_ops:
            self._paint(painter, op, None)

    def _paint(self, painter: QPainter, op: LayerOp, tile: Optional[Tile]) -> None:
        if isinstance(op, FillOp):
            painter.fillRect(QRect(op.rect.x, op.rect.y, op.rect.width, op.rect.height), _color(op.color))
        elif isinstance(op, PlaceholderOp):
            painter.fillRect(QRect(op.rect.x, op.rect.y, op.rect.width, op.rect.height), QColor(*op.rgba))
        elif isinstance(op, ImageOp):
            if tile is None:
                return
            qimage, (offset_x, offset_y) = tile
            painter.drawImage(QPoint(op.rect.x + offset_x, op.rect.y + offset_y), qimage)
        elif isinstance(op, BorderOp):
            self._paint_border(painter, op)
        elif isinstance(op, CutMarksOp):
            self._paint_cut_marks(painter, op)
        else:
            raise TypeError(f"Unsupported layer operation: {type(op).__name__}")

    @staticmethod
    def _pen(color: str, width: int, dash: Optional[Tuple[int, int]]) -> QPen:
        pen = QPen(_color(color))
        pen.setWidth(width)
        pen.setJoinStyle(Qt.MiterJoin)
        pen.setCapStyle(Qt.FlatCap)
        if dash:
            # Qt dash patterns are measured in pen widths.
            pen.setDashPattern([length / width for length in dash])
        return pen

    def _paint_border(self, painter: QPainter, op: BorderOp) -> None:
        inset = op.width / 2
        painter.save()
        painter.setPen(self._pen(op.color, op.width, op.dash))
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(
            QRectF(
                op.rect.x + inset,
                op.rect.y + inset,
                op.rect.width - op.width,
                op.rect.height - op.width,
            )
        )
        painter.restore()

    def _paint_cut_marks(self, painter: QPainter, op: CutMarksOp) -> None:
        half_tick = op.tick_length // 2
        painter.save()
        painter.setPen(self._pen(op.color, op.width, op.dash))
        painter.drawLine(QLine(op.x, 0, op.x, op.height))
        painter.setPen(self._pen(op.color, op.width, None))
        top = op.tick_inset
        bottom = op.height - op.tick_inset
        painter.drawLine(QLine(op.x - half_tick, top, op.x + half_tick, top))
        painter.drawLine(QLine(op.x - half_tick, bottom, op.x + half_tick, bottom))
        painter.restore()


async def compose_print(request: CompositionRequest, processor: Optional[ImageProcessor] = None) -> ComposedOutput:
    """Compose ``request`` with a throwaway :class:`PrintCompositor`."""

    return await PrintCompositor(processor).compose(request)


__all__ = [
    "PrintCompositor",
    "compose_print",
    "encode_image",
    "quality_to_percent",
]
