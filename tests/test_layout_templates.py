import json

import pytest

from photostrip.geometry import Box
from photostrip.layout_validation import validate_layout
from photostrip.print_formats import PaperFormat
from utils.layout_templates import (
    LayoutTemplate,
    LayoutTemplates,
    grid_boxes,
    stacked_strip_boxes,
    strip_grid_boxes,
)


@pytest.fixture
def custom_template():
    template = LayoutTemplate(
        "custom-duo", "Duo", "strip",
        (Box("photo-1", "Photo 1", 5, 5, 90, 40), Box("photo-2", "Photo 2", 5, 50, 90, 40)),
    )
    yield template
    LayoutTemplates.TEMPLATES.pop(template.id, None)
    LayoutTemplates._invalidate_caches()


def test_built_in_templates_are_valid_layouts():
    for template_id in LayoutTemplates.template_ids():
        template = LayoutTemplates.get_template(template_id)
        assert template.built_in
        assert validate_layout(template.boxes).is_valid, template_id


def test_classic_strip_geometry():
    template = LayoutTemplates.get_template("strip-4")
    assert template.paper_format is PaperFormat.STRIP
    assert [box.y for box in template.boxes] == [3, 27, 51, 75]
    assert {(box.x, box.width, box.height) for box in template.boxes} == {(5, 90, 22)}


def test_templates_for_filters_by_format():
    strip_ids = [t.id for t in LayoutTemplates.templates_for(PaperFormat.STRIP)]
    assert strip_ids == ["strip-4", "strip-3", "strip-2"]
    assert all(t.paper_format is PaperFormat.FOUR_R for t in LayoutTemplates.templates_for("4r"))


def test_unknown_template_raises():
    with pytest.raises(ValueError):
        LayoutTemplates.get_template("nope")


def test_template_validation():
    with pytest.raises(ValueError):
        LayoutTemplate("empty", "Empty", "strip", ())
    with pytest.raises(ValueError):
        LayoutTemplate("dupe", "Dupe", "strip", (Box("a", "A", 0, 0, 10, 10), Box("a", "A", 20, 0, 10, 10)))
    with pytest.raises(ValueError):
        LayoutTemplate("out", "Out", "strip", (Box("a", "A", 95, 0, 10, 10),))
    with pytest.raises(ValueError):
        LayoutTemplate("fmt", "Fmt", "a4", (Box("a", "A", 0, 0, 10, 10),))


def test_add_and_remove_custom_template(custom_template):
    LayoutTemplates.add_custom_template(custom_template)
    assert "custom-duo" in LayoutTemplates.template_ids()
    assert custom_template in LayoutTemplates.templates_for(PaperFormat.STRIP)
    with pytest.raises(ValueError):
        LayoutTemplates.add_custom_template(custom_template)

    LayoutTemplates.remove_template("custom-duo")
    assert "custom-duo" not in LayoutTemplates.template_ids()
    with pytest.raises(ValueError):
        LayoutTemplates.remove_template("strip-4")


def test_export_import_roundtrip(custom_template):
    LayoutTemplates.add_custom_template(custom_template)
    exported = LayoutTemplates.export_templates()
    assert [entry["id"] for entry in json.loads(exported)["templates"]] == ["custom-duo"]

    LayoutTemplates.remove_template("custom-duo")
    assert LayoutTemplates.import_templates(exported) == ["custom-duo"]
    assert LayoutTemplates.get_template("custom-duo").boxes == custom_template.boxes

    assert LayoutTemplates.import_templates(exported) == []
    assert LayoutTemplates.import_templates(exported, replace=True) == ["custom-duo"]


def test_import_rejects_garbage():
    with pytest.raises(ValueError):
        LayoutTemplates.import_templates("not json")
    with pytest.raises(ValueError):
        LayoutTemplates.import_templates("{}")


def test_import_never_overwrites_built_ins():
    payload = LayoutTemplates.export_templates(include_built_in=True)
    assert LayoutTemplates.import_templates(payload, replace=True) == []
    assert LayoutTemplates.get_template("strip-4").built_in


def test_strip_grid_boxes_matches_presets():
    boxes = strip_grid_boxes(4)
    assert [(b.x, b.y, b.width, b.height) for b in boxes] == [
        (5, 1, 90, 21), (5, 23, 90, 21), (5, 45, 90, 21), (5, 67, 90, 21),
    ]
    assert [b.id for b in boxes] == ["photo-1", "photo-2", "photo-3", "photo-4"]
    with pytest.raises(ValueError):
        strip_grid_boxes(0)


def test_grid_boxes_two_by_two():
    boxes = grid_boxes(2, 2, margins=(5, 5, 5, 5), spacing=4)
    assert len(boxes) == 4
    assert (boxes[0].x, boxes[0].y, boxes[0].width, boxes[0].height) == (5, 5, 43, 43)
    assert (boxes[3].x, boxes[3].y) == (52, 52)
    assert validate_layout(boxes).is_valid
    with pytest.raises(ValueError):
        grid_boxes(2, margins=(50, 5, 50, 5))


def test_stacked_strip_boxes_fill_strip():
    boxes = stacked_strip_boxes(4, strip_height_px=1760, spacing_px=10)
    assert len(boxes) == 4
    assert boxes[0].y == 0
    assert all(b.x == 0 and b.width == 100 for b in boxes)
    assert validate_layout(boxes, min_box_size=1).is_valid
    assert boxes[-1].bottom <= 100
