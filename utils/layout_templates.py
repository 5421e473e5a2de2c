from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple
import json
import logging
import math
from functools import lru_cache

from photostrip import config
from photostrip.geometry import Box, check_geometry
from photostrip.print_formats import PaperFormat


def _numbered_box(index: int, x: float, y: float, width: float, height: float) -> Box:
    return Box(f"photo-{index}", f"Photo {index}", x, y, width, height)


def strip_grid_boxes(count: int) -> Tuple[Box, ...]:
    """
    Stack ``count`` full-width boxes down a strip.

    Box height is ``floor(85 / count)`` and the leftover height, minus a
    10% reserve, is split evenly into ``count + 1`` gaps.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    box_height = math.floor(85 / count)
    spacing = math.floor((100 - box_height * count - 10) / (count + 1))
    return tuple(
        _numbered_box(i + 1, 5, spacing + i * (box_height + spacing), 90, box_height)
        for i in range(count)
    )


def grid_boxes(
    rows: int,
    columns: int = 1,
    *,
    margins: Tuple[float, float, float, float] = (5, 5, 5, 5),
    spacing: float = 3,
) -> Tuple[Box, ...]:
    """
    Lay out a ``rows`` x ``columns`` grid inside the given margins.

    Args:
        rows (int): Number of rows
        columns (int): Number of columns
        margins (tuple): Top, right, bottom and left margins in percent
        spacing (float): Gap between neighbouring boxes in percent

    Returns:
        Tuple[Box, ...]: Boxes numbered row by row
    """
    if rows <= 0 or columns <= 0:
        raise ValueError("Grid must have positive dimensions")
    top, right, bottom, left = margins
    available_width = 100 - left - right
    available_height = 100 - top - bottom
    box_width = (available_width - spacing * (columns - 1)) / columns
    box_height = (available_height - spacing * (rows - 1)) / rows
    if box_width <= 0 or box_height <= 0:
        raise ValueError("Margins and spacing leave no room for boxes")

    boxes = []
    for row in range(rows):
        for column in range(columns):
            boxes.append(
                _numbered_box(
                    len(boxes) + 1,
                    left + column * (box_width + spacing),
                    top + row * (box_height + spacing),
                    box_width,
                    box_height,
                )
            )
    return tuple(boxes)


def stacked_strip_boxes(
    count: int,
    strip_width_px: int = 570,
    strip_height_px: int = 1760,
    spacing_px: int = 10,
) -> Tuple[Box, ...]:
    """
    Fill a strip edge to edge with ``count`` photos separated by ``spacing_px``.

    Geometry is computed in strip pixels and converted to percent of the
    strip, so it lines up with the print canvas exactly.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    photo_height = (strip_height_px - spacing_px * (count - 1)) // count
    return tuple(
        _numbered_box(
            i + 1,
            0.0,
            i * (photo_height + spacing_px) / strip_height_px * 100,
            100.0,
            photo_height / strip_height_px * 100,
        )
        for i in range(count)
    )


@dataclass(slots=True)
class LayoutTemplate:
    """Represents a reusable photo box arrangement."""

    id: str
    name: str
    paper_format: PaperFormat
    boxes: Tuple[Box, ...]
    description: str = ""
    background_color: str = config.DEFAULT_BACKGROUND_COLOR
    built_in: bool = False
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.paper_format = PaperFormat.parse(self.paper_format)
        self.boxes = tuple(self.boxes)
        self._validate()

    def _validate(self) -> None:
        """
        Validate the template.

        Raises:
            ValueError: If the template has no id, no boxes, duplicate box
                ids or a box outside the canvas
        """
        if not self.id:
            raise ValueError("Template id must not be empty")
        if not self.boxes:
            raise ValueError("Template must contain at least one box")
        ids = [box.id for box in self.boxes]
        if len(set(ids)) != len(ids):
            raise ValueError("Template box ids must be unique")
        for box in self.boxes:
            check_geometry(box)

    @property
    def photo_count(self) -> int:
        return len(self.boxes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the template to a dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "paperFormat": self.paper_format.value,
            "boxes": [box.to_dict() for box in self.boxes],
            "description": self.description,
            "backgroundColor": self.background_color,
            "tags": list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutTemplate':
        """Create a template from a dictionary representation."""
        required_keys = {"id", "name", "paperFormat", "boxes"}
        if not all(key in data for key in required_keys):
            raise ValueError(f"Missing required keys: {required_keys - data.keys()}")

        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            paper_format=data["paperFormat"],
            boxes=tuple(Box.from_dict(entry) for entry in data["boxes"]),
            description=data.get("description", ""),
            background_color=data.get("backgroundColor", config.DEFAULT_BACKGROUND_COLOR),
            tags=list(data.get("tags", [])),
        )


def _built_in(
    template_id: str,
    name: str,
    paper_format: PaperFormat,
    geometry: Sequence[Tuple[float, float, float, float]],
    description: str,
    tags: List[str],
) -> LayoutTemplate:
    boxes = tuple(_numbered_box(i + 1, *rect) for i, rect in enumerate(geometry))
    return LayoutTemplate(
        template_id, name, paper_format, boxes, description, built_in=True, tags=tags
    )


class LayoutTemplates:
    """Manages built-in and custom layout templates."""

    TEMPLATES: Dict[str, LayoutTemplate] = {
        template.id: template
        for template in (
            _built_in(
                "strip-4", "Classic 4 Photos", PaperFormat.STRIP,
                [(5, 3, 90, 22), (5, 27, 90, 22), (5, 51, 90, 22), (5, 75, 90, 22)],
                "Four stacked photos", ["strip", "classic"],
            ),
            _built_in(
                "strip-3", "3 Photos", PaperFormat.STRIP,
                [(5, 5, 90, 28), (5, 36, 90, 28), (5, 67, 90, 28)],
                "Three stacked photos", ["strip"],
            ),
            _built_in(
                "strip-2", "2 Photos", PaperFormat.STRIP,
                [(5, 5, 90, 43), (5, 52, 90, 43)],
                "Two stacked photos", ["strip"],
            ),
            _built_in(
                "4r-grid", "2x2 Grid", PaperFormat.FOUR_R,
                [(3, 3, 46, 45), (51, 3, 46, 45), (3, 52, 46, 45), (51, 52, 46, 45)],
                "Four photos in a grid", ["4r", "grid"],
            ),
            _built_in(
                "4r-single", "Single Photo", PaperFormat.FOUR_R,
                [(5, 5, 90, 90)],
                "One large photo", ["4r"],
            ),
            _built_in(
                "4r-2col", "2 Columns", PaperFormat.FOUR_R,
                [(3, 5, 46, 90), (51, 5, 46, 90)],
                "Two tall photos side by side", ["4r", "columns"],
            ),
            _built_in(
                "4r-3col", "3 Columns", PaperFormat.FOUR_R,
                [(2, 10, 31, 80), (35, 10, 31, 80), (68, 10, 30, 80)],
                "Three tall photos side by side", ["4r", "columns"],
            ),
        )
    }

    @classmethod
    def get_template(cls, template_id: str) -> LayoutTemplate:
        """Get a template by id."""
        try:
            return cls.TEMPLATES[template_id]
        except KeyError:
            logging.error("Template '%s' not found", template_id)
            raise ValueError(f"Template '{template_id}' not found") from None

    @classmethod
    @lru_cache(maxsize=None)
    def template_ids(cls) -> Tuple[str, ...]:
        """Get all template ids, sorted."""
        return tuple(sorted(cls.TEMPLATES.keys()))

    @classmethod
    @lru_cache(maxsize=None)
    def templates_for(cls, paper_format: PaperFormat) -> Tuple[LayoutTemplate, ...]:
        """Get the templates designed for ``paper_format``, in registration order."""
        paper_format = PaperFormat.parse(paper_format)
        return tuple(
            template for template in cls.TEMPLATES.values()
            if template.paper_format is paper_format
        )

    @classmethod
    def _invalidate_caches(cls) -> None:
        """Clear cached template lookups."""
        cls.template_ids.cache_clear()
        cls.templates_for.cache_clear()

    @classmethod
    def add_custom_template(cls, template: LayoutTemplate) -> None:
        """Register a user-defined template."""
        if template.id in cls.TEMPLATES:
            raise ValueError(f"Template '{template.id}' already exists")
        template.built_in = False
        cls.TEMPLATES[template.id] = template
        logging.info("Added custom template: %s", template.id)
        cls._invalidate_caches()

    @classmethod
    def remove_template(cls, template_id: str) -> None:
        """Remove a custom template; built-ins cannot be removed."""
        template = cls.get_template(template_id)
        if template.built_in:
            raise ValueError(f"Template '{template_id}' is built in")
        del cls.TEMPLATES[template_id]
        logging.info("Removed template: %s", template_id)
        cls._invalidate_caches()

    @classmethod
    def export_templates(cls, *, include_built_in: bool = False) -> str:
        """Serialize templates to JSON text."""
        payload = [
            template.to_dict()
            for template in cls.TEMPLATES.values()
            if include_built_in or not template.built_in
        ]
        return json.dumps({"templates": payload}, indent=2)

    @classmethod
    def import_templates(cls, text: str, *, replace: bool = False) -> List[str]:
        """
        Register templates from JSON text produced by :meth:`export_templates`.

        Existing custom templates with the same id are replaced only when
        ``replace`` is set; built-ins are never overwritten.

        Returns:
            List[str]: Ids of the templates that were registered
        """
        try:
            data = json.loads(text)
            entries = data["templates"]
        except (ValueError, KeyError, TypeError) as e:
            logging.error("Failed to import templates: %s", e)
            raise ValueError(f"Invalid template data: {e}") from e

        imported: List[str] = []
        for entry in entries:
            template = LayoutTemplate.from_dict(entry)
            existing = cls.TEMPLATES.get(template.id)
            if existing is not None:
                if existing.built_in or not replace:
                    logging.warning("Skipping template '%s': id already in use", template.id)
                    continue
                del cls.TEMPLATES[template.id]
            cls.TEMPLATES[template.id] = template
            imported.append(template.id)

        cls._invalidate_caches()
        logging.info("Imported %d template(s)", len(imported))
        return imported


__all__ = [
    "LayoutTemplate",
    "LayoutTemplates",
    "strip_grid_boxes",
    "grid_boxes",
    "stacked_strip_boxes",
]
