"""Exception types raised by the photostrip engine.

Validation problems are not exceptions; see
:class:`photostrip.layout_validation.LayoutViolation`.
"""

from __future__ import annotations

from typing import Optional


class PhotostripError(Exception):
    """Base class for engine errors."""


class AssetDecodeError(PhotostripError):
    """Raised when an image asset cannot be loaded or decoded.

    The compositor treats this as recoverable: the affected layer is skipped.
    """

    def __init__(self, message: str, *, asset_key: Optional[str] = None) -> None:
        super().__init__(message)
        self.asset_key = asset_key


class ContextUnavailableError(PhotostripError, RuntimeError):
    """Raised when no 2D drawing surface can be created for a composition."""


class InvalidGeometryError(PhotostripError, ValueError):
    """Raised when a box lies outside ``[0, 100]`` or has a non-positive size."""


__all__ = [
    "PhotostripError",
    "AssetDecodeError",
    "ContextUnavailableError",
    "InvalidGeometryError",
]
