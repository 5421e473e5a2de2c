"""Percentage based box geometry.

Every photo box is stored as a rectangle expressed in percent (0-100) of a
reference canvas.  The helpers in this module convert those rectangles to
pixels and keep them inside the canvas while they are being edited.  They
never raise for out-of-range input; they always hand back a usable
rectangle.  :func:`check_geometry` is the one strict entry point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from . import config
from .errors import InvalidGeometryError

EdgeAdjuster = Callable[[str, float], float]

_EDGE_NUDGE_STEPS = 4


@dataclass(frozen=True)
class Box:
    """A photo placement in percentage space."""

    id: str
    label: str
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def moved_to(self, x: float, y: float) -> "Box":
        return replace(self, x=x, y=y)

    def resized_to(self, x: float, y: float, width: float, height: float) -> "Box":
        return replace(self, x=x, y=y, width=width, height=height)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Box":
        missing = {"id", "x", "y", "width", "height"} - data.keys()
        if missing:
            raise ValueError(f"Missing required keys: {sorted(missing)}")
        box_id = str(data["id"])
        return cls(
            id=box_id,
            label=str(data.get("label") or box_id),
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle on a pixel canvas."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


class ResizeHandle(str, Enum):
    """The eight grab points around a selected box."""

    TOP_LEFT = "top-left"
    TOP = "top"
    TOP_RIGHT = "top-right"
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"

    @property
    def moves_left(self) -> bool:
        return "left" in self.value

    @property
    def moves_right(self) -> bool:
        return "right" in self.value

    @property
    def moves_top(self) -> bool:
        return "top" in self.value

    @property
    def moves_bottom(self) -> bool:
        return "bottom" in self.value

    @property
    def cursor(self) -> str:
        return _HANDLE_CURSORS[self]


_HANDLE_CURSORS = {
    ResizeHandle.TOP_LEFT: "nwse-resize",
    ResizeHandle.TOP: "ns-resize",
    ResizeHandle.TOP_RIGHT: "nesw-resize",
    ResizeHandle.RIGHT: "ew-resize",
    ResizeHandle.BOTTOM_RIGHT: "nwse-resize",
    ResizeHandle.BOTTOM: "ns-resize",
    ResizeHandle.BOTTOM_LEFT: "nesw-resize",
    ResizeHandle.LEFT: "ew-resize",
}


# ----------------------------------------------------------------------
# Conversions
# ----------------------------------------------------------------------
def percent_to_pixels(value: float, dimension: int) -> int:
    """Return ``round(value / 100 * dimension)`` rounding halves up."""

    return int(math.floor(value / 100.0 * dimension + 0.5))


def pixels_to_percent(delta_px: float, dimension: float) -> float:
    """Convert a pixel distance on a canvas ``dimension`` wide into percent."""

    if dimension <= 0:
        return 0.0
    return delta_px * 100.0 / dimension


def box_to_pixels(box: Box, width: int, height: int) -> PixelRect:
    """Scale ``box`` onto a ``width`` x ``height`` pixel region.

    Edges are rounded individually so boxes that touch in percentage space
    also touch on the pixel grid.
    """

    left = percent_to_pixels(box.x, width)
    top = percent_to_pixels(box.y, height)
    right = percent_to_pixels(box.x + box.width, width)
    bottom = percent_to_pixels(box.y + box.height, height)
    return PixelRect(left, top, right - left, bottom - top)


# ----------------------------------------------------------------------
# Clamping
# ----------------------------------------------------------------------
def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(value, upper))


def _solve_addend(fixed: float, edge: float) -> Optional[float]:
    """Return ``value`` with ``fixed + value == edge`` or ``None``."""

    value = edge - fixed
    for _ in range(_EDGE_NUDGE_STEPS):
        total = fixed + value
        if total == edge:
            return value
        value = math.nextafter(value, math.inf if total < edge else -math.inf)
    return None


def _start_below(edge: float, span: float) -> float:
    start = _solve_addend(span, edge)
    if start is not None:
        return start
    start = edge - span
    while start + span > edge:
        start = math.nextafter(start, -math.inf)
    return start


def align_to_edge(edge: float, span: float) -> Tuple[float, float]:
    """Return ``(start, span)`` whose sum is exactly ``edge``.

    ``edge - span`` can miss by an ulp once added back, which leaves a
    snapped edge a hair past its guide.  The start is solved for first; when
    float spacing rules that out the span moves by a few ulps instead.
    """

    start = _solve_addend(span, edge)
    if start is not None:
        return start, span
    start = edge - span
    adjusted = _solve_addend(start, edge)
    if adjusted is not None:
        return start, adjusted
    return _start_below(edge, span), span


def span_to_edge(start: float, edge: float) -> Tuple[float, float]:
    """Return ``(start, span)`` reaching ``edge`` exactly, keeping ``start`` if possible."""

    span = _solve_addend(start, edge)
    if span is not None:
        return start, span
    span = edge - start
    adjusted = _solve_addend(span, edge)
    if adjusted is not None:
        return adjusted, span
    return start, _start_below(edge, start)


def clamp_position(box: Box) -> Box:
    """Keep ``box`` inside the canvas by moving it, never by resizing."""

    x = max(0.0, min(box.x, _start_below(100.0, box.width)))
    y = max(0.0, min(box.y, _start_below(100.0, box.height)))
    if x == box.x and y == box.y:
        return box
    return box.moved_to(x, y)


def normalize_box(box: Box, min_size: float = config.MIN_BOX_SIZE) -> Box:
    """Return a copy of ``box`` with a legal size and position."""

    if not 0 < min_size <= 100:
        raise ValueError("min_size must be within (0, 100]")
    width = clamp(_finite(box.width, min_size), min_size, 100.0)
    height = clamp(_finite(box.height, min_size), min_size, 100.0)
    x = _finite(box.x, 0.0)
    y = _finite(box.y, 0.0)
    return clamp_position(box.resized_to(x, y, width, height))


def apply_drag(start: Box, dx: float, dy: float) -> Box:
    """Translate ``start`` by a percentage delta and clamp to the canvas."""

    return clamp_position(start.moved_to(start.x + dx, start.y + dy))


def apply_resize(
    start: Box,
    handle: ResizeHandle,
    dx: float,
    dy: float,
    min_size: float = config.MIN_BOX_SIZE,
    *,
    adjust_edge: Optional[EdgeAdjuster] = None,
) -> Box:
    """Move the edges grabbed by ``handle`` by ``(dx, dy)`` percent.

    ``adjust_edge`` receives ``("left"|"right"|"top"|"bottom", value)`` for
    each moving edge before it is constrained, which is where snapping hooks
    in.  Moving edges stay on the canvas and keep at least ``min_size``
    between themselves and the opposite edge.
    """

    start = normalize_box(start, min_size)
    x, width = _resize_axis(
        start.x, start.width, dx, handle.moves_left, handle.moves_right,
        min_size, adjust_edge, ("left", "right"),
    )
    y, height = _resize_axis(
        start.y, start.height, dy, handle.moves_top, handle.moves_bottom,
        min_size, adjust_edge, ("top", "bottom"),
    )
    return start.resized_to(x, y, width, height)


def _resize_axis(
    position: float,
    size: float,
    delta: float,
    moves_lead: bool,
    moves_trail: bool,
    min_size: float,
    adjust_edge: Optional[EdgeAdjuster],
    edge_names: Tuple[str, str],
) -> Tuple[float, float]:
    lead = position
    trail = position + size
    if moves_lead:
        candidate = lead + delta
        if adjust_edge is not None:
            candidate = adjust_edge(edge_names[0], candidate)
        lead = clamp(candidate, 0.0, trail - min_size)
        lead, size = span_to_edge(lead, trail)
        if size < min_size:
            return _start_below(trail, min_size), min_size
        return lead, size
    if moves_trail:
        candidate = trail + delta
        if adjust_edge is not None:
            candidate = adjust_edge(edge_names[1], candidate)
        trail = clamp(candidate, lead + min_size, 100.0)
        lead, size = span_to_edge(lead, trail)
        return lead, max(size, min_size)
    return position, size


def _finite(value: float, fallback: float) -> float:
    return value if math.isfinite(value) else fallback


def check_geometry(box: Box, min_size: float = 0.0) -> Box:
    """Return ``box`` unchanged or raise :class:`InvalidGeometryError`."""

    values = (box.x, box.y, box.width, box.height)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        raise InvalidGeometryError(f"{box.label} has non-numeric geometry")
    if box.width <= 0 or box.height <= 0:
        raise InvalidGeometryError(f"{box.label} has a non-positive size")
    if box.x < 0 or box.y < 0 or box.right > 100 or box.bottom > 100:
        raise InvalidGeometryError(f"{box.label} lies outside the canvas")
    if box.width < min_size or box.height < min_size:
        raise InvalidGeometryError(f"{box.label} is smaller than {min_size:g}%")
    return box


__all__ = [
    "Box",
    "PixelRect",
    "ResizeHandle",
    "percent_to_pixels",
    "pixels_to_percent",
    "box_to_pixels",
    "clamp",
    "align_to_edge",
    "span_to_edge",
    "clamp_position",
    "normalize_box",
    "apply_drag",
    "apply_resize",
    "check_geometry",
]
