"""Snap-to-guide alignment for boxes being moved or resized.

Guides are regenerated from the current box set on every call; nothing is
cached between interactions.  All functions are pure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from . import config
from .geometry import Box, align_to_edge


class GuideType(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class GuideSource(str, Enum):
    BOX_EDGE = "box-edge"
    BOX_CENTER = "box-center"
    MARGIN = "margin"
    CANVAS_CENTER = "canvas-center"


@dataclass(frozen=True)
class Guide:
    type: GuideType
    position: float
    source: GuideSource
    source_box_id: Optional[str] = None


@dataclass(frozen=True)
class SnapSettings:
    enabled: bool = True
    threshold: float = config.SNAP_THRESHOLD
    margin_guides: Tuple[float, ...] = config.MARGIN_GUIDES


@dataclass(frozen=True)
class SnapResult:
    """Committed position and size of a snapped box.

    ``width`` and ``height`` only differ from the proposed size by float
    spacing, when that is what lands a snapped edge exactly on its guide.
    """

    x: float
    y: float
    width: float
    height: float
    snapped_x: bool = False
    snapped_y: bool = False
    active_guides: Tuple[Guide, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EdgeSnap:
    value: float
    guide: Optional[Guide] = None


_EDGE_AXES = {
    "left": GuideType.VERTICAL,
    "right": GuideType.VERTICAL,
    "top": GuideType.HORIZONTAL,
    "bottom": GuideType.HORIZONTAL,
}


def generate_guides(
    boxes: Iterable[Box],
    active_box_id: Optional[str],
    margin_guides: Sequence[float] = config.MARGIN_GUIDES,
) -> List[Guide]:
    """Build the guide list used for a single interaction.

    The order is fixed (canvas centre, margins, then each other box's
    edges and centre) because it decides which guide wins a tie.
    """

    guides = [
        Guide(GuideType.VERTICAL, 50.0, GuideSource.CANVAS_CENTER),
        Guide(GuideType.HORIZONTAL, 50.0, GuideSource.CANVAS_CENTER),
    ]
    for margin in margin_guides:
        guides.append(Guide(GuideType.VERTICAL, margin, GuideSource.MARGIN))
        guides.append(Guide(GuideType.VERTICAL, 100 - margin, GuideSource.MARGIN))
        guides.append(Guide(GuideType.HORIZONTAL, margin, GuideSource.MARGIN))
        guides.append(Guide(GuideType.HORIZONTAL, 100 - margin, GuideSource.MARGIN))

    for box in boxes:
        if box.id == active_box_id:
            continue
        guides.extend(
            [
                Guide(GuideType.VERTICAL, box.x, GuideSource.BOX_EDGE, box.id),
                Guide(GuideType.VERTICAL, box.right, GuideSource.BOX_EDGE, box.id),
                Guide(GuideType.VERTICAL, box.center_x, GuideSource.BOX_CENTER, box.id),
                Guide(GuideType.HORIZONTAL, box.y, GuideSource.BOX_EDGE, box.id),
                Guide(GuideType.HORIZONTAL, box.bottom, GuideSource.BOX_EDGE, box.id),
                Guide(GuideType.HORIZONTAL, box.center_y, GuideSource.BOX_CENTER, box.id),
            ]
        )
    return guides


def find_snap_position(
    value: float,
    guides: Iterable[Guide],
    guide_type: GuideType,
    threshold: float = config.SNAP_THRESHOLD,
) -> EdgeSnap:
    """Return the nearest ``guide_type`` guide within ``threshold`` of ``value``.

    On equal distance the guide listed first wins.  Without a match the
    input value is returned with ``guide=None``.
    """

    nearest: Optional[Guide] = None
    nearest_distance = float("inf")
    for guide in guides:
        if guide.type is not guide_type:
            continue
        distance = abs(guide.position - value)
        if distance < nearest_distance and distance <= threshold:
            nearest_distance = distance
            nearest = guide
    if nearest is None:
        return EdgeSnap(value)
    return EdgeSnap(nearest.position, nearest)


def _snap_axis(
    position: float,
    size: float,
    guides: Sequence[Guide],
    guide_type: GuideType,
    threshold: float,
) -> Tuple[float, float, Optional[Guide]]:
    # Leading edge, trailing edge, then centre; the first hit wins.
    lead = find_snap_position(position, guides, guide_type, threshold)
    if lead.guide is not None:
        return lead.value, size, lead.guide
    trail = find_snap_position(position + size, guides, guide_type, threshold)
    if trail.guide is not None:
        start, size = align_to_edge(trail.value, size)
        return start, size, trail.guide
    centre = find_snap_position(position + size / 2, guides, guide_type, threshold)
    if centre.guide is not None:
        start, half = align_to_edge(centre.value, size / 2)
        return start, half * 2, centre.guide
    return position, size, None


def snap_position(
    boxes: Sequence[Box],
    active_box_id: Optional[str],
    x: float,
    y: float,
    width: float,
    height: float,
    settings: SnapSettings = SnapSettings(),
) -> SnapResult:
    """Snap a box of ``width`` x ``height`` proposed at ``(x, y)``."""

    if not settings.enabled:
        return SnapResult(x, y, width, height)

    guides = generate_guides(boxes, active_box_id, settings.margin_guides)
    active: List[Guide] = []

    final_x, final_width, guide_x = _snap_axis(x, width, guides, GuideType.VERTICAL, settings.threshold)
    if guide_x is not None:
        active.append(guide_x)
    final_y, final_height, guide_y = _snap_axis(y, height, guides, GuideType.HORIZONTAL, settings.threshold)
    if guide_y is not None:
        active.append(guide_y)

    return SnapResult(
        x=final_x,
        y=final_y,
        width=final_width,
        height=final_height,
        snapped_x=guide_x is not None,
        snapped_y=guide_y is not None,
        active_guides=tuple(active),
    )


def snap_resize(
    boxes: Sequence[Box],
    active_box_id: Optional[str],
    edge: str,
    value: float,
    settings: SnapSettings = SnapSettings(),
) -> EdgeSnap:
    """Snap a single moving ``edge`` (``left``/``right``/``top``/``bottom``)."""

    try:
        guide_type = _EDGE_AXES[edge]
    except KeyError:
        raise ValueError(f"Unknown edge '{edge}'") from None
    if not settings.enabled:
        return EdgeSnap(value)
    guides = generate_guides(boxes, active_box_id, settings.margin_guides)
    return find_snap_position(value, guides, guide_type, settings.threshold)


__all__ = [
    "GuideType",
    "GuideSource",
    "Guide",
    "SnapSettings",
    "SnapResult",
    "EdgeSnap",
    "generate_guides",
    "find_snap_position",
    "snap_position",
    "snap_resize",
]
