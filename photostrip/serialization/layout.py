"""Layout document payloads exchanged with the event store."""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .. import config
from ..composition import AssetSource, BorderStyle, CompositionRequest, Photo, PrintAssets
from ..errors import InvalidGeometryError
from ..fitting import FitMode
from ..geometry import Box, check_geometry
from ..print_formats import Orientation, PaperFormat, PrintSpec

LOGGER = logging.getLogger(__name__)

PAYLOAD_VERSION = 1


def serialize_boxes(boxes: Sequence[Box]) -> List[Dict[str, Any]]:
    return [box.to_dict() for box in boxes]


def deserialize_boxes(
    payload: Sequence[Mapping[str, Any]],
    *,
    strict: bool = False,
    min_box_size: float = 0.0,
) -> Tuple[Box, ...]:
    """Parse box entries.

    In strict mode any malformed or out-of-range entry raises
    :class:`InvalidGeometryError`; otherwise unreadable entries are logged
    and skipped and readable ones are kept as-is.
    """
    boxes: List[Box] = []
    for index, entry in enumerate(payload):
        try:
            box = Box.from_dict(dict(entry))
        except (TypeError, ValueError) as exc:
            if strict:
                raise InvalidGeometryError(f"Box entry {index} is malformed: {exc}") from exc
            LOGGER.warning("Skipping malformed box entry %d: %s", index, exc)
            continue
        if strict:
            check_geometry(box, min_box_size)
        boxes.append(box)
    return tuple(boxes)


def border_to_payload(border: Optional[BorderStyle]) -> Optional[Dict[str, Any]]:
    if border is None:
        return None
    return {"color": border.color, "width": border.width, "dashed": border.dashed}


def border_from_payload(payload: Optional[Mapping[str, Any]]) -> Optional[BorderStyle]:
    if not payload:
        return None
    try:
        return BorderStyle(
            color=str(payload.get("color", "#000000")),
            width=int(payload.get("width", 2)),
            dashed=bool(payload.get("dashed", False)),
        )
    except (TypeError, ValueError) as exc:
        LOGGER.warning("Ignoring invalid border payload %s: %s", payload, exc)
        return None


@dataclass(eq=True, frozen=True)
class LayoutDocument:
    """Everything needed to reproduce a print apart from the photos."""

    boxes: Tuple[Box, ...]
    paper_format: PaperFormat = PaperFormat.STRIP
    orientation: Orientation = Orientation.PORTRAIT
    dpi: int = config.PRINT_DPI
    background_color: str = config.DEFAULT_BACKGROUND_COLOR
    background_image: Optional[str] = None
    background_fit: FitMode = FitMode.COVER
    frame_template: Optional[str] = None
    photo_filter: str = "none"
    border: Optional[BorderStyle] = None
    show_cut_marks: bool = False
    quality: float = config.QUALITY_DEFAULT
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def spec(self) -> PrintSpec:
        return PrintSpec(self.paper_format, self.orientation, self.dpi)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": PAYLOAD_VERSION,
            "boxes": serialize_boxes(self.boxes),
            "paper_format": self.paper_format.value,
            "orientation": self.orientation.value,
            "dpi": self.dpi,
            "background_color": self.background_color,
            "background_image": self.background_image,
            "background_fit": self.background_fit.value,
            "frame_template": self.frame_template,
            "photo_filter": self.photo_filter,
            "border": border_to_payload(self.border),
            "show_cut_marks": self.show_cut_marks,
            "quality": self.quality,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, strict: bool = False) -> "LayoutDocument":
        version = payload.get("version", PAYLOAD_VERSION)
        if version != PAYLOAD_VERSION:
            LOGGER.warning("Layout payload version %s differs from %s", version, PAYLOAD_VERSION)
        return cls(
            boxes=deserialize_boxes(payload.get("boxes", []), strict=strict),
            paper_format=PaperFormat.parse(payload.get("paper_format", PaperFormat.STRIP.value)),
            orientation=Orientation.parse(payload.get("orientation", Orientation.PORTRAIT.value)),
            dpi=int(payload.get("dpi", config.PRINT_DPI)),
            background_color=str(payload.get("background_color", config.DEFAULT_BACKGROUND_COLOR)),
            background_image=payload.get("background_image"),
            background_fit=FitMode(payload.get("background_fit", FitMode.COVER.value)),
            frame_template=payload.get("frame_template"),
            photo_filter=str(payload.get("photo_filter", "none")),
            border=border_from_payload(payload.get("border")),
            show_cut_marks=bool(payload.get("show_cut_marks", False)),
            quality=float(payload.get("quality", config.QUALITY_DEFAULT)),
            metadata=dict(payload.get("metadata", {})),
        )

    def to_request(
        self,
        photos: Sequence[Photo] = (),
        *,
        show_placeholders: bool = True,
        image_format: str = config.OUTPUT_FORMAT,
        background_image: Optional[AssetSource] = None,
        frame_image: Optional[AssetSource] = None,
    ) -> CompositionRequest:
        """Build a compositor request; asset overrides replace the stored references."""
        assets = PrintAssets(
            background_color=self.background_color,
            background_image=background_image if background_image is not None else self.background_image,
            background_fit=self.background_fit,
            frame_image=frame_image if frame_image is not None else self.frame_template,
            photo_filter=self.photo_filter,
            border=self.border,
        )
        return CompositionRequest(
            boxes=self.boxes,
            photos=tuple(photos),
            assets=assets,
            spec=self.spec,
            show_placeholders=show_placeholders,
            show_cut_marks=self.show_cut_marks,
            quality=self.quality,
            image_format=image_format,
        )
