"""Controllers that turn editing input into layout state changes."""

from .editor import EditorMode, LayoutEditor
from .session import (
    LayoutSessionController,
    LayoutStateAdapter,
    RedoUnavailableError,
    UndoUnavailableError,
)

__all__ = [
    "EditorMode",
    "LayoutEditor",
    "LayoutSessionController",
    "LayoutStateAdapter",
    "UndoUnavailableError",
    "RedoUnavailableError",
]
