"""Input validation helpers for files handed to the command line tools."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union
from urllib.parse import urlparse

PathLike = Union[str, Path]

LAYOUT_EXTENSIONS = {".json"}


def _has_url_scheme(path_str: str) -> bool:
    """Return True if *path_str* looks like a URL with a scheme.

    Single-letter schemes such as ``"C"`` are Windows drive letters, not URLs.
    """
    parsed = urlparse(path_str)
    return bool(parsed.scheme and len(parsed.scheme) > 1)


def _check_extension(path: Path, allowed_exts: Iterable[str]) -> None:
    if path.suffix.lower() not in {ext.lower() for ext in allowed_exts}:
        raise ValueError(f"Unsupported file extension: {path.suffix or '<none>'}")


def _local_path(path: PathLike) -> Path:
    path_str = str(path)
    if _has_url_scheme(path_str):
        raise ValueError("URLs are not allowed")
    return Path(path_str).expanduser()


def validate_image_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Return the resolved path of an existing image file.

    Raises ``ValueError`` for URLs, missing files, directories and
    extensions outside *allowed_exts*.
    """
    candidate = _local_path(path)
    try:
        resolved = candidate.resolve(strict=True)
    except FileNotFoundError as exc:
        raise ValueError(f"File does not exist: {path}") from exc
    if not resolved.is_file():
        raise ValueError(f"Not a file: {path}")
    _check_extension(resolved, allowed_exts)
    return resolved


def validate_layout_path(path: PathLike) -> Path:
    """Return the resolved path of an existing layout document (``.json``)."""
    return validate_image_path(path, LAYOUT_EXTENSIONS)


def validate_output_path(path: PathLike, allowed_exts: Iterable[str]) -> Path:
    """Return the resolved path for a file about to be written.

    The parent directory must already exist; the file itself may not.
    """
    resolved = _local_path(path).resolve()
    if not resolved.parent.is_dir():
        raise ValueError(f"Directory does not exist: {resolved.parent}")
    _check_extension(resolved, allowed_exts)
    return resolved
