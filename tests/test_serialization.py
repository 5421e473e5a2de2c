"""Tests for layout document payloads."""
from __future__ import annotations

import json
import logging

import pytest

from photostrip.composition import BorderStyle, make_photos
from photostrip.errors import InvalidGeometryError
from photostrip.fitting import FitMode
from photostrip.geometry import Box
from photostrip.print_formats import Orientation, PaperFormat
from photostrip.serialization import (
    PAYLOAD_VERSION,
    LayoutDocument,
    border_from_payload,
    border_to_payload,
    deserialize_boxes,
    serialize_boxes,
)


def _document() -> LayoutDocument:
    return LayoutDocument(
        boxes=(Box("photo-1", "Photo 1", 5, 3, 90, 22), Box("photo-2", "Photo 2", 5, 27, 90, 22)),
        paper_format=PaperFormat.FOUR_R,
        orientation=Orientation.LANDSCAPE,
        background_color="#112233",
        background_fit=FitMode.CONTAIN,
        frame_template="frames/gold.png",
        photo_filter="sepia",
        border=BorderStyle("#ffffff", 4, dashed=True),
        show_cut_marks=True,
        quality=0.8,
        metadata={"event": "wedding"},
    )


def test_document_payload_roundtrip_through_json():
    document = _document()
    payload = json.loads(json.dumps(document.to_payload()))
    assert payload["version"] == PAYLOAD_VERSION
    assert payload["paper_format"] == "4r"
    restored = LayoutDocument.from_payload(payload)
    assert restored == document
    assert restored.metadata == {"event": "wedding"}


def test_from_payload_defaults():
    document = LayoutDocument.from_payload({"boxes": []})
    assert document.boxes == ()
    assert document.paper_format is PaperFormat.STRIP
    assert document.quality == 0.95
    assert document.border is None


def test_lenient_deserialize_skips_malformed_entries(caplog):
    payload = [
        {"id": "a", "x": 1, "y": 2, "width": 30, "height": 30},
        {"id": "b", "x": "left"},
        {"id": "c", "x": 90, "y": 0, "width": 30, "height": 30},
    ]
    with caplog.at_level(logging.WARNING):
        boxes = deserialize_boxes(payload)
    assert [box.id for box in boxes] == ["a", "c"]
    assert "Skipping malformed box entry 1" in caplog.text


def test_strict_deserialize_raises():
    with pytest.raises(InvalidGeometryError):
        deserialize_boxes([{"id": "b", "x": 1}], strict=True)
    with pytest.raises(InvalidGeometryError):
        deserialize_boxes([{"id": "c", "x": 90, "y": 0, "width": 30, "height": 30}], strict=True)
    with pytest.raises(InvalidGeometryError):
        deserialize_boxes([{"id": "d", "x": 0, "y": 0, "width": 5, "height": 5}], strict=True, min_box_size=10)


def test_serialize_boxes_uses_box_dicts():
    boxes = [Box("a", "A", 1, 2, 3, 4)]
    assert serialize_boxes(boxes) == [{"id": "a", "label": "A", "x": 1, "y": 2, "width": 3, "height": 4}]


def test_border_payload_helpers(caplog):
    border = BorderStyle("#000000", 2, dashed=False)
    assert border_from_payload(border_to_payload(border)) == border
    assert border_to_payload(None) is None
    assert border_from_payload(None) is None
    with caplog.at_level(logging.WARNING):
        assert border_from_payload({"width": 0}) is None
    assert "Ignoring invalid border payload" in caplog.text


def test_to_request_carries_print_settings():
    document = _document()
    request = document.to_request(make_photos([b"x"]), show_placeholders=False, image_format="png")
    assert request.spec.paper_format is PaperFormat.FOUR_R
    assert request.spec.orientation is Orientation.LANDSCAPE
    assert request.assets.frame_image == "frames/gold.png"
    assert request.assets.background_fit is FitMode.CONTAIN
    assert request.show_cut_marks
    assert not request.show_placeholders
    assert request.image_format == "PNG"
    assert request.quality == 0.8

    overridden = document.to_request(frame_image=b"frame")
    assert overridden.assets.frame_image == b"frame"
