"""Advisory checks over a set of photo boxes.

Nothing here raises for a bad layout: problems come back as
:class:`LayoutViolation` records so an editor can highlight them while the
compositor keeps rendering whatever it is given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Sequence, Set, Tuple

from . import config
from .geometry import Box


class ViolationType(str, Enum):
    OVERLAP = "overlap"
    BOUNDARY = "boundary"
    SIZE = "size"


@dataclass(frozen=True)
class LayoutViolation:
    """A single problem found in a layout."""

    type: ViolationType
    box_ids: Tuple[str, ...]
    message: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "boxIds": list(self.box_ids),
            "message": self.message,
        }


@dataclass(frozen=True)
class LayoutValidationResult:
    violations: Tuple[LayoutViolation, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def error_box_ids(self) -> Set[str]:
        """Return every box id mentioned by at least one violation."""
        return {box_id for violation in self.violations for box_id in violation.box_ids}

    def messages(self) -> List[str]:
        return [violation.message for violation in self.violations]


def boxes_overlap(a: Box, b: Box) -> bool:
    """Return ``True`` when ``a`` and ``b`` share interior area.

    Touching edges do not count as an overlap.
    """

    return not (
        a.x >= b.right
        or b.x >= a.right
        or a.y >= b.bottom
        or b.y >= a.bottom
    )


def is_within_bounds(box: Box) -> bool:
    return box.x >= 0 and box.y >= 0 and box.right <= 100 and box.bottom <= 100


def meets_min_size(box: Box, min_box_size: float = config.MIN_BOX_SIZE) -> bool:
    return box.width >= min_box_size and box.height >= min_box_size


def validate_layout(
    boxes: Sequence[Box],
    min_box_size: float = config.MIN_BOX_SIZE,
) -> LayoutValidationResult:
    """Check every box pair for overlap, then each box for bounds and size.

    Violations are reported in that order: overlaps for pairs ``(i, j)`` with
    ``i < j``, boundary problems, then size problems.
    """

    violations: List[LayoutViolation] = []

    for i, first in enumerate(boxes):
        for second in boxes[i + 1:]:
            if boxes_overlap(first, second):
                violations.append(
                    LayoutViolation(
                        ViolationType.OVERLAP,
                        (first.id, second.id),
                        "Photo boxes cannot overlap",
                    )
                )

    for box in boxes:
        if not is_within_bounds(box):
            violations.append(
                LayoutViolation(
                    ViolationType.BOUNDARY,
                    (box.id,),
                    f"{box.label} is outside the canvas boundary",
                )
            )

    for box in boxes:
        if not meets_min_size(box, min_box_size):
            violations.append(
                LayoutViolation(
                    ViolationType.SIZE,
                    (box.id,),
                    f"{box.label} is too small (minimum {min_box_size:g}%)",
                )
            )

    return LayoutValidationResult(tuple(violations))


def validate_box(
    box: Box,
    others: Iterable[Box],
    min_box_size: float = config.MIN_BOX_SIZE,
) -> List[str]:
    """Return the problems affecting ``box`` alone, as short messages."""

    errors: List[str] = []
    if not is_within_bounds(box):
        errors.append("Box is outside canvas boundary")
    if not meets_min_size(box, min_box_size):
        errors.append(f"Box is too small (minimum {min_box_size:g}%)")
    if any(other.id != box.id and boxes_overlap(box, other) for other in others):
        errors.append("Boxes cannot overlap")
    return errors


def overlapping_box_ids(boxes: Sequence[Box]) -> Set[str]:
    ids: Set[str] = set()
    for i, first in enumerate(boxes):
        for second in boxes[i + 1:]:
            if boxes_overlap(first, second):
                ids.add(first.id)
                ids.add(second.id)
    return ids


def correct_boundary(box: Box, min_box_size: float = config.MIN_BOX_SIZE) -> Box:
    """Grow ``box`` to the minimum size and push it back inside the canvas.

    Overlaps with other boxes are left alone.
    """

    width = max(box.width, min_box_size)
    height = max(box.height, min_box_size)
    x, y = box.x, box.y
    if x < 0:
        x = 0.0
    if x + width > 100:
        x = 100.0 - width
    if y < 0:
        y = 0.0
    if y + height > 100:
        y = 100.0 - height
    return box.resized_to(x, y, width, height)


def validate_print_layout(boxes: Sequence[Box]) -> List[str]:
    """Sanity checks run before a print job; an empty list means printable."""

    errors: List[str] = []
    for box in boxes:
        name = f'Box "{box.label}"'
        if box.x < 0 or box.x > 100:
            errors.append(f"{name}: X position out of bounds ({box.x:g}%)")
        if box.y < 0 or box.y > 100:
            errors.append(f"{name}: Y position out of bounds ({box.y:g}%)")
        if box.right > 100:
            errors.append(f"{name}: Exceeds right edge ({box.right:g}%)")
        if box.bottom > 100:
            errors.append(f"{name}: Exceeds bottom edge ({box.bottom:g}%)")
        if box.width <= 0 or box.height <= 0:
            errors.append(f"{name}: Invalid dimensions")
    return errors


__all__ = [
    "ViolationType",
    "LayoutViolation",
    "LayoutValidationResult",
    "boxes_overlap",
    "is_within_bounds",
    "meets_min_size",
    "validate_layout",
    "validate_box",
    "overlapping_box_ids",
    "correct_boundary",
    "validate_print_layout",
]
