"""Interactive layout editing.

:class:`LayoutEditor` is the state machine behind the layout canvas.  It
receives pointer and keyboard events in canvas pixels and turns them into
box updates through the geometry and snapping helpers, so mouse and touch
input end up with identical results.  It has no Qt dependency; a widget
forwards its events here and repaints from :attr:`LayoutEditor.boxes`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .. import config
from ..geometry import (
    Box,
    ResizeHandle,
    apply_resize,
    clamp_position,
    normalize_box,
    pixels_to_percent,
)
from ..layout_validation import LayoutValidationResult, validate_layout
from ..snapping import Guide, SnapSettings, snap_position, snap_resize
from .session import LayoutSessionController, LayoutStateAdapter

BoxesListener = Callable[[Tuple[Box, ...]], None]

DELETE_KEYS = frozenset({"Delete", "Backspace"})
ESCAPE_KEY = "Escape"
BODY_CURSOR = "move"

_EDITABLE_FIELDS = {"label", "x", "y", "width", "height"}


class EditorMode(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


@dataclass(frozen=True)
class _Gesture:
    mode: EditorMode
    box_id: str
    start_x: float
    start_y: float
    snapshot: Box
    handle: Optional[ResizeHandle] = None


class LayoutEditor:
    """Edit an ordered list of photo boxes."""

    def __init__(
        self,
        boxes: Iterable[Box] = (),
        *,
        canvas_width: float = 400,
        canvas_height: float = 600,
        min_box_size: float = config.MIN_BOX_SIZE,
        max_boxes: int = config.MAX_BOXES,
        snap: Optional[SnapSettings] = None,
        history_limit: int = 50,
    ) -> None:
        if max_boxes <= 0:
            raise ValueError("max_boxes must be greater than zero")
        self._boxes: List[Box] = list(boxes)
        self._selected_id: Optional[str] = None
        self._gesture: Optional[_Gesture] = None
        self._active_guides: Tuple[Guide, ...] = ()
        self._listeners: List[BoxesListener] = []
        self.min_box_size = min_box_size
        self.max_boxes = max_boxes
        self.snap = snap or SnapSettings(
            threshold=config.EDITOR_SNAP_THRESHOLD,
            margin_guides=config.EDITOR_MARGIN_GUIDES,
        )
        self.set_canvas_size(canvas_width, canvas_height)
        self._history = LayoutSessionController(
            LayoutStateAdapter(read_boxes=lambda: self.boxes, apply_boxes=self._apply_snapshot),
            history_limit=history_limit,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def boxes(self) -> Tuple[Box, ...]:
        return tuple(self._boxes)

    @property
    def mode(self) -> EditorMode:
        return self._gesture.mode if self._gesture else EditorMode.IDLE

    @property
    def active_handle(self) -> Optional[ResizeHandle]:
        return self._gesture.handle if self._gesture else None

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_box(self) -> Optional[Box]:
        if self._selected_id is None:
            return None
        return self._find(self._selected_id)

    @property
    def active_guides(self) -> Tuple[Guide, ...]:
        """Guides that fired on the latest move, for highlighting."""
        return self._active_guides

    @property
    def canvas_size(self) -> Tuple[float, float]:
        return self._canvas_width, self._canvas_height

    @property
    def validation(self) -> LayoutValidationResult:
        return validate_layout(self._boxes, self.min_box_size)

    @property
    def can_confirm(self) -> bool:
        """Whether the layout is clean enough to enable a save/confirm action."""
        return bool(self._boxes) and self.validation.is_valid

    @property
    def can_add_box(self) -> bool:
        return len(self._boxes) < self.max_boxes

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def add_listener(self, listener: BoxesListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: BoxesListener) -> None:
        self._listeners.remove(listener)

    def set_canvas_size(self, width: float, height: float) -> None:
        """Record the on-screen canvas size used to convert pointer deltas."""

        if width <= 0 or height <= 0:
            raise ValueError("Canvas dimensions must be positive")
        self._canvas_width = float(width)
        self._canvas_height = float(height)

    @staticmethod
    def cursor_for(handle: Optional[ResizeHandle]) -> str:
        return handle.cursor if handle is not None else BODY_CURSOR

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select(self, box_id: str) -> Box:
        box = self._require(box_id)
        self._selected_id = box_id
        return box

    def clear_selection(self) -> None:
        if self._gesture is None:
            self._selected_id = None

    # ------------------------------------------------------------------
    # Pointer gestures
    # ------------------------------------------------------------------
    def pointer_down(
        self,
        box_id: str,
        x: float,
        y: float,
        handle: Optional[ResizeHandle | str] = None,
    ) -> bool:
        """Start dragging ``box_id`` or, with ``handle``, resizing it.

        Returns ``False`` when a gesture is already in progress.
        """

        if self._gesture is not None:
            return False
        box = self.select(box_id)
        snapshot = normalize_box(box, self.min_box_size)
        if handle is None:
            self._gesture = _Gesture(EditorMode.DRAGGING, box_id, x, y, snapshot)
        else:
            self._gesture = _Gesture(
                EditorMode.RESIZING, box_id, x, y, snapshot, ResizeHandle(handle)
            )
        return True

    def pointer_move(self, x: float, y: float) -> Optional[Box]:
        """Apply the pointer position to the active gesture."""

        gesture = self._gesture
        if gesture is None:
            return None
        dx = pixels_to_percent(x - gesture.start_x, self._canvas_width)
        dy = pixels_to_percent(y - gesture.start_y, self._canvas_height)
        if gesture.handle is None:
            updated, guides = self._drag(gesture, dx, dy)
        else:
            updated, guides = self._resize(gesture, gesture.handle, dx, dy)
        self._active_guides = guides
        self._replace(updated)
        return updated

    def pointer_up(self) -> Optional[Box]:
        """Finish the gesture and commit it to history."""

        gesture = self._gesture
        if gesture is None:
            return None
        self._gesture = None
        self._active_guides = ()
        self._history.record()
        return self._find(gesture.box_id)

    def pointer_cancel(self) -> None:
        """Abort the gesture and put the box back where it started."""

        gesture = self._gesture
        if gesture is None:
            return
        self._gesture = None
        self._active_guides = ()
        original = next(
            (box for box in self._history.baseline if box.id == gesture.box_id),
            gesture.snapshot,
        )
        self._replace(original)

    def _drag(self, gesture: _Gesture, dx: float, dy: float) -> Tuple[Box, Tuple[Guide, ...]]:
        start = gesture.snapshot
        result = snap_position(
            self._boxes,
            gesture.box_id,
            start.x + dx,
            start.y + dy,
            start.width,
            start.height,
            self.snap,
        )
        committed = start.resized_to(result.x, result.y, result.width, result.height)
        return clamp_position(committed), result.active_guides

    def _resize(
        self, gesture: _Gesture, handle: ResizeHandle, dx: float, dy: float
    ) -> Tuple[Box, Tuple[Guide, ...]]:
        fired: List[Guide] = []

        def snap_edge(edge: str, value: float) -> float:
            snapped = snap_resize(self._boxes, gesture.box_id, edge, value, self.snap)
            if snapped.guide is not None:
                fired.append(snapped.guide)
            return snapped.value

        updated = apply_resize(
            gesture.snapshot,
            handle,
            dx,
            dy,
            self.min_box_size,
            adjust_edge=snap_edge,
        )
        return updated, tuple(fired)

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------
    def key_press(self, key: str) -> bool:
        """Handle a key name as reported by the host toolkit."""

        if key in DELETE_KEYS:
            if self._selected_id is None or self._gesture is not None:
                return False
            self.remove_box(self._selected_id)
            return True
        if key == ESCAPE_KEY:
            if self._gesture is not None:
                self.pointer_cancel()
            else:
                self._selected_id = None
            return True
        return False

    # ------------------------------------------------------------------
    # Box list edits
    # ------------------------------------------------------------------
    def add_box(self) -> Box:
        """Append a default box and select it."""

        if not self.can_add_box:
            raise ValueError(f"A layout holds at most {self.max_boxes} boxes")
        number = len(self._boxes) + 1
        existing = {box.id for box in self._boxes}
        while f"photo-{number}" in existing:
            number += 1
        x, y, width, height = config.NEW_BOX_GEOMETRY
        box = Box(f"photo-{number}", f"Photo {number}", x, y, width, height)
        self._boxes.append(box)
        self._selected_id = box.id
        self._commit()
        return box

    def remove_box(self, box_id: str) -> Box:
        box = self._require(box_id)
        self._boxes = [item for item in self._boxes if item.id != box_id]
        if self._selected_id == box_id:
            self._selected_id = None
        self._commit()
        return box

    def update_box(self, box_id: str, **changes: Any) -> Box:
        """Apply property edits (label or numeric fields) to one box."""

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown box fields: {sorted(unknown)}")
        box = self._require(box_id)
        numeric = {key: float(value) for key, value in changes.items() if key != "label"}
        updated = replace(box, **numeric)
        if "label" in changes:
            updated = replace(updated, label=str(changes["label"]))
        updated = normalize_box(updated, self.min_box_size)
        self._replace(updated)
        self._history.record()
        return updated

    def load_boxes(self, boxes: Iterable[Box]) -> None:
        """Replace the whole layout, e.g. when a template is applied."""

        loaded = list(boxes)
        self._gesture = None
        self._active_guides = ()
        self._selected_id = None
        self._boxes = loaded
        self._notify()
        self._history.reset_history()

    def undo(self) -> None:
        self.pointer_cancel()
        self._history.undo()

    def redo(self) -> None:
        self.pointer_cancel()
        self._history.redo()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _find(self, box_id: str) -> Optional[Box]:
        return next((box for box in self._boxes if box.id == box_id), None)

    def _require(self, box_id: str) -> Box:
        box = self._find(box_id)
        if box is None:
            raise ValueError(f"Box '{box_id}' not found")
        return box

    def _replace(self, updated: Box) -> None:
        self._boxes = [updated if box.id == updated.id else box for box in self._boxes]
        self._notify()

    def _commit(self) -> None:
        self._notify()
        self._history.record()

    def _apply_snapshot(self, snapshot: Tuple[Box, ...]) -> None:
        self._boxes = list(snapshot)
        if self._selected_id is not None and self._find(self._selected_id) is None:
            self._selected_id = None
        self._notify()

    def _notify(self) -> None:
        snapshot = self.boxes
        for listener in list(self._listeners):
            listener(snapshot)


__all__ = ["EditorMode", "LayoutEditor", "BODY_CURSOR", "DELETE_KEYS"]
