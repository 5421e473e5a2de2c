"""Serialization helpers for photostrip layouts."""

from .layout import (
    PAYLOAD_VERSION,
    LayoutDocument,
    border_from_payload,
    border_to_payload,
    deserialize_boxes,
    serialize_boxes,
)

__all__ = [
    "PAYLOAD_VERSION",
    "LayoutDocument",
    "serialize_boxes",
    "deserialize_boxes",
    "border_to_payload",
    "border_from_payload",
]
