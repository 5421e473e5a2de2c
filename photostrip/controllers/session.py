"""Undo/redo history for layout editing sessions.

:class:`LayoutSessionController` keeps immutable snapshots of the box list.
It reads and applies state through a :class:`LayoutStateAdapter`, so the
editor controller, a CLI tool or a test can drive it without any widget
code.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Tuple

from ..geometry import Box

Snapshot = Tuple[Box, ...]


class UndoUnavailableError(RuntimeError):
    """Raised when an undo operation is requested with no history."""


class RedoUnavailableError(RuntimeError):
    """Raised when a redo operation is requested with no history."""


@dataclass(frozen=True)
class LayoutStateAdapter:
    """Adapter encapsulating how to read and apply the box list."""

    read_boxes: Callable[[], Snapshot]
    apply_boxes: Callable[[Snapshot], None]


class LayoutSessionController:
    """Track committed layout states independently of the editor UI."""

    def __init__(self, adapter: LayoutStateAdapter, *, history_limit: int = 50) -> None:
        if history_limit <= 0:
            raise ValueError("history_limit must be greater than zero")
        self._adapter = adapter
        self._undo_stack: Deque[Snapshot] = deque(maxlen=history_limit)
        self._redo_stack: Deque[Snapshot] = deque(maxlen=history_limit)
        self._is_restoring = False
        self._baseline: Snapshot = tuple(adapter.read_boxes())

    @property
    def is_restoring(self) -> bool:
        return self._is_restoring

    @property
    def baseline(self) -> Snapshot:
        """The most recently committed box list."""
        return self._baseline

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def record(self) -> bool:
        """Commit the adapter's current boxes as a new history entry.

        Returns ``False`` when nothing changed since the last entry or while
        a snapshot is being restored.
        """

        if self._is_restoring:
            return False
        current = tuple(self._adapter.read_boxes())
        if current == self._baseline:
            return False
        self._undo_stack.append(self._baseline)
        self._redo_stack.clear()
        self._baseline = current
        return True

    def reset_history(self) -> None:
        """Clear both stacks and resync the baseline from the adapter."""

        self._undo_stack.clear()
        self._redo_stack.clear()
        self._baseline = tuple(self._adapter.read_boxes())

    def undo(self) -> Snapshot:
        """Restore the previous entry and return it."""

        if not self._undo_stack:
            raise UndoUnavailableError("No undo history is available")
        snapshot = self._undo_stack.pop()
        self._redo_stack.append(self._baseline)
        self._restore(snapshot)
        return snapshot

    def redo(self) -> Snapshot:
        """Reapply the most recently undone entry and return it."""

        if not self._redo_stack:
            raise RedoUnavailableError("No redo history is available")
        snapshot = self._redo_stack.pop()
        self._undo_stack.append(self._baseline)
        self._restore(snapshot)
        return snapshot

    def _restore(self, snapshot: Snapshot) -> None:
        self._is_restoring = True
        try:
            self._adapter.apply_boxes(snapshot)
        finally:
            self._is_restoring = False
        self._baseline = snapshot
