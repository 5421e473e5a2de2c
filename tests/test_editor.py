"""Tests for the interactive layout editor state machine."""
from __future__ import annotations

import pytest

from photostrip.controllers import EditorMode, LayoutEditor
from photostrip.geometry import Box, ResizeHandle
from photostrip.snapping import GuideSource


def _editor(**kwargs) -> LayoutEditor:
    boxes = kwargs.pop("boxes", [Box("a", "Photo A", 10, 10, 40, 20)])
    return LayoutEditor(boxes, canvas_width=400, canvas_height=600, **kwargs)


def test_drag_converts_pixels_to_percent_and_records_history():
    editor = _editor()
    assert editor.pointer_down("a", 100, 100)
    assert editor.mode is EditorMode.DRAGGING
    moved = editor.pointer_move(140, 160)
    assert (moved.x, moved.y) == (20, 20)

    committed = editor.pointer_up()
    assert committed == moved
    assert editor.mode is EditorMode.IDLE
    assert editor.can_undo

    editor.undo()
    assert (editor.boxes[0].x, editor.boxes[0].y) == (10, 10)
    assert editor.can_redo
    editor.redo()
    assert (editor.boxes[0].x, editor.boxes[0].y) == (20, 20)


def test_drag_snaps_and_reports_active_guides():
    editor = _editor()
    editor.pointer_down("a", 100, 100)
    moved = editor.pointer_move(104, 100)
    assert moved.x == 10  # right edge 51 snaps to the canvas centre
    assert [g.source for g in editor.active_guides] == [GuideSource.CANVAS_CENTER]
    editor.pointer_up()
    assert editor.active_guides == ()


def test_drag_is_clamped_inside_canvas():
    editor = _editor()
    editor.pointer_down("a", 0, 0)
    moved = editor.pointer_move(-400, 1200)
    assert (moved.x, moved.y) == (0, 80)


def test_resize_from_handle():
    editor = _editor()
    editor.pointer_down("a", 0, 0, handle="bottom-right")
    assert editor.mode is EditorMode.RESIZING
    assert editor.active_handle is ResizeHandle.BOTTOM_RIGHT
    resized = editor.pointer_move(40, 60)
    assert (resized.width, resized.height) == (50, 30)
    editor.pointer_up()
    assert editor.boxes[0].width == 50


def test_pointer_down_is_ignored_during_gesture():
    editor = _editor(boxes=[Box("a", "A", 10, 10, 20, 20), Box("b", "B", 60, 60, 20, 20)])
    assert editor.pointer_down("a", 0, 0)
    assert not editor.pointer_down("b", 0, 0)
    assert editor.selected_id == "a"


def test_pointer_move_without_gesture_returns_none():
    assert _editor().pointer_move(10, 10) is None
    assert _editor().pointer_up() is None


def test_escape_cancels_gesture_and_restores_box():
    editor = _editor()
    editor.pointer_down("a", 0, 0)
    editor.pointer_move(120, 120)
    assert editor.key_press("Escape")
    assert editor.mode is EditorMode.IDLE
    assert editor.boxes[0] == Box("a", "Photo A", 10, 10, 40, 20)
    assert not editor.can_undo

    assert editor.key_press("Escape")
    assert editor.selected_id is None


def test_delete_key_removes_selected_box():
    editor = _editor()
    assert not editor.key_press("Delete")
    editor.select("a")
    assert editor.key_press("Backspace")
    assert editor.boxes == ()
    assert editor.selected_id is None
    assert not editor.key_press("Enter")


def test_add_box_numbers_and_caps():
    editor = _editor(max_boxes=2)
    box = editor.add_box()
    assert box == Box("photo-2", "Photo 2", 10, 10, 40, 20)
    assert editor.selected_id == "photo-2"
    assert not editor.can_add_box
    with pytest.raises(ValueError):
        editor.add_box()


def test_add_box_skips_ids_in_use():
    editor = _editor(boxes=[Box("photo-2", "Photo 2", 0, 0, 20, 20)])
    assert editor.add_box().id == "photo-3"


def test_update_box_normalizes_and_validates_fields():
    editor = _editor()
    updated = editor.update_box("a", width=5, label="Hero")
    assert updated.width == 10
    assert updated.label == "Hero"
    assert editor.can_undo
    with pytest.raises(ValueError):
        editor.update_box("a", colour="red")
    with pytest.raises(ValueError):
        editor.update_box("missing", x=1)


def test_can_confirm_follows_validation():
    assert not LayoutEditor().can_confirm
    editor = _editor()
    assert editor.can_confirm
    editor.load_boxes([Box("a", "A", 0, 0, 60, 40), Box("b", "B", 40, 0, 60, 40)])
    assert not editor.can_confirm
    assert editor.validation.error_box_ids() == {"a", "b"}


def test_listeners_receive_box_snapshots():
    editor = _editor()
    received = []
    editor.add_listener(received.append)
    editor.update_box("a", x=20)
    assert received[-1][0].x == 20
    editor.remove_listener(received.append)
    editor.update_box("a", x=30)
    assert len(received) == 1


def test_load_boxes_resets_history():
    editor = _editor()
    editor.update_box("a", x=20)
    editor.load_boxes([Box("z", "Z", 0, 0, 50, 50)])
    assert not editor.can_undo
    assert editor.selected_id is None


def test_cursor_and_canvas_size():
    editor = _editor()
    assert editor.cursor_for(None) == "move"
    assert editor.cursor_for(ResizeHandle.TOP_RIGHT) == "nesw-resize"
    editor.set_canvas_size(800, 1200)
    assert editor.canvas_size == (800.0, 1200.0)
    with pytest.raises(ValueError):
        editor.set_canvas_size(0, 100)
    with pytest.raises(ValueError):
        editor.select("missing")


@pytest.mark.parametrize(
    "neighbour_x,width",
    [(31.48, 12.1), (47.13, 11.4), (83.21, 17.3), (30.37, 11.4)],
)
def test_drag_flush_against_neighbour_stays_valid(neighbour_x, width):
    neighbour = Box("n", "N", neighbour_x, 10, 10, 20)
    editor = LayoutEditor(
        [Box("a", "A", 0, 10, width, 20), neighbour], canvas_width=1000, canvas_height=1000
    )
    target = neighbour_x - width - 0.5
    editor.pointer_down("a", 0, 0)
    moved = editor.pointer_move(target * 10, 0)
    editor.pointer_up()

    assert moved.right == neighbour_x
    assert editor.validation.is_valid
    assert editor.can_confirm


def test_resize_edges_snap_exactly_without_overlap():
    neighbour = Box("n", "N", 31.48, 10, 10, 20)
    editor = LayoutEditor(
        [Box("a", "A", 5, 10, 12.1, 20), neighbour, Box("b", "B", 60.3, 10, 20.3, 20)],
        canvas_width=1000,
        canvas_height=1000,
    )
    editor.pointer_down("a", 0, 0, handle="right")
    grown = editor.pointer_move(139, 0)
    editor.pointer_up()
    assert grown.right == 31.48

    right = editor.boxes[2].right
    editor.pointer_down("b", 0, 0, handle="left")
    shrunk = editor.pointer_move(-184, 0)
    editor.pointer_up()
    assert shrunk.x == neighbour.right
    assert shrunk.right == right
    assert editor.can_confirm


@pytest.mark.parametrize("handle", [None] + list(ResizeHandle))
@pytest.mark.parametrize("dx,dy", [(-900, -900), (900, 900), (-900, 900), (900, -900), (37.3, -53.9), (-250.7, 410.1)])
def test_gestures_keep_every_box_inside_canvas(handle, dx, dy):
    editor = _editor(
        boxes=[Box("a", "A", 12.3, 17.7, 33.3, 21.9), Box("b", "B", 61.7, 55.1, 27.9, 31.3)]
    )
    editor.pointer_down("a", 200, 300, handle=handle)
    editor.pointer_move(200 + dx, 300 + dy)
    editor.pointer_up()

    for box in editor.boxes:
        assert 0 <= box.x and 0 <= box.y
        assert box.x + box.width <= 100 and box.y + box.height <= 100
        assert box.width >= editor.min_box_size and box.height >= editor.min_box_size
