from pathlib import Path
from typing import Optional, Tuple, Union
from dataclasses import dataclass
from urllib.parse import unquote_to_bytes
import base64
import binascii
import hashlib
import io
import logging
import os

from PIL import Image, ImageOps, UnidentifiedImageError

from photostrip.cache import ImageCache, get_cache
from photostrip.errors import AssetDecodeError
from .validation import validate_image_path

LOGGER = logging.getLogger(__name__)

AssetSource = Union[bytes, bytearray, memoryview, str, "os.PathLike[str]"]


@dataclass(slots=True)
class DecodedInfo:
    """
    Metadata recorded next to each cached decode.

    Attributes:
        format (Optional[str]): Container format reported by Pillow
        size (Tuple[int, int]): Pixel size after EXIF orientation
        source_bytes (int): Length of the encoded input
    """
    format: Optional[str]
    size: Tuple[int, int]
    source_bytes: int


class ImageProcessor:
    """Loads and decodes image assets with caching and validation."""

    VALID_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp', '.tiff', '.gif'}

    def __init__(self, cache: Optional[ImageCache] = None):
        """Initialize the processor; the shared cache is used by default."""
        self._cache = cache

    @property
    def cache(self) -> ImageCache:
        return self._cache if self._cache is not None else get_cache()

    def load_bytes(self, source: AssetSource, key: Optional[str] = None) -> bytes:
        """
        Resolve an asset source to its encoded bytes.

        Args:
            source: Raw bytes, a ``data:`` URL or a filesystem path
            key: Asset name used in error messages

        Returns:
            bytes: Encoded image data

        Raises:
            AssetDecodeError: If the source cannot be read
        """
        label = key or "asset"
        if isinstance(source, (bytes, bytearray, memoryview)):
            return bytes(source)
        if isinstance(source, str) and source.startswith("data:"):
            return self._decode_data_url(source, label)
        if isinstance(source, (str, os.PathLike)):
            try:
                path = validate_image_path(source, self.VALID_EXTENSIONS)
                return path.read_bytes()
            except (ValueError, OSError) as e:
                raise AssetDecodeError(f"Cannot read {label} from {source}: {e}", asset_key=key) from e
        raise AssetDecodeError(
            f"Unsupported source type for {label}: {type(source).__name__}", asset_key=key
        )

    @staticmethod
    def _decode_data_url(url: str, label: str) -> bytes:
        header, separator, payload = url.partition(",")
        if not separator:
            raise AssetDecodeError(f"Malformed data URL for {label}", asset_key=label)
        if header.endswith(";base64"):
            try:
                return base64.b64decode(payload, validate=True)
            except (binascii.Error, ValueError) as e:
                raise AssetDecodeError(f"Invalid base64 payload for {label}: {e}", asset_key=label) from e
        return unquote_to_bytes(payload)

    def decode(self, source: AssetSource, key: Optional[str] = None) -> Image.Image:
        """
        Decode an asset into an upright RGBA image.

        Results are cached by content hash, so the same bytes decode once.
        Callers must treat the returned image as read-only.

        Raises:
            AssetDecodeError: If the data is missing, truncated or not an image
        """
        data = self.load_bytes(source, key)
        cache_key = self._generate_cache_key(data)
        cached, _ = self.cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format
                # Normalize orientation once
                upright = ImageOps.exif_transpose(img)
                result = upright.convert("RGBA")
                result.load()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            LOGGER.debug("Decode failed for %s: %s", key or "asset", e)
            raise AssetDecodeError(f"Failed to decode {key or 'asset'}: {e}", asset_key=key) from e

        info = DecodedInfo(format=fmt, size=result.size, source_bytes=len(data))
        self.cache.put(cache_key, result, {"info": info})
        return result

    @staticmethod
    def _generate_cache_key(data: bytes) -> str:
        """Generate a cache key from the encoded content."""
        return hashlib.md5(data).hexdigest()

    @staticmethod
    def is_valid_image(file_path: Union[str, Path]) -> bool:
        """
        Check if the given file is a readable image with an allowed extension.

        Args:
            file_path: Path to the image file

        Returns:
            bool: True if the file is a valid image
        """
        try:
            path = validate_image_path(file_path, ImageProcessor.VALID_EXTENSIONS)
            with Image.open(path) as img:
                img.verify()
            return True
        except (ValueError, UnidentifiedImageError, OSError) as e:
            LOGGER.warning("Invalid image file %s: %s", file_path, e)
            return False
