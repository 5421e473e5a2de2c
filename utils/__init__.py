"""Utility package for photostrip: image operations, decoding and templates."""

from . import image_operations, image_processor, layout_templates, validation

__all__ = ["image_operations", "image_processor", "layout_templates", "validation"]
