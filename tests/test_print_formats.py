"""Tests for paper formats and canvas geometry."""
from __future__ import annotations

import pytest

from photostrip.geometry import PixelRect
from photostrip.print_formats import Orientation, PaperFormat, PrintSpec, canvas_layout


def test_strip_canvas_has_two_identical_regions():
    layout = canvas_layout(PrintSpec())
    assert (layout.width, layout.height) == (1200, 1800)
    assert layout.regions == (
        PixelRect(20, 20, 570, 1760),
        PixelRect(610, 20, 570, 1760),
    )
    assert layout.cut_mark_x == 600
    assert layout.region_size == (570, 1760)


def test_strip_ignores_landscape():
    spec = PrintSpec("strip", "landscape")
    assert spec.effective_orientation is Orientation.PORTRAIT
    assert spec.canvas_size == (1200, 1800)


def test_four_r_portrait_and_landscape():
    portrait = canvas_layout(PrintSpec(PaperFormat.FOUR_R))
    assert portrait.regions == (PixelRect(20, 20, 1160, 1760),)
    assert portrait.cut_mark_x is None

    landscape = canvas_layout(PrintSpec("4R", Orientation.LANDSCAPE))
    assert (landscape.width, landscape.height) == (1800, 1200)
    assert landscape.region_size == (1760, 1160)


def test_pixel_constants_scale_with_dpi():
    spec = PrintSpec("strip", dpi=600)
    layout = canvas_layout(spec)
    assert (layout.width, layout.height) == (2400, 3600)
    assert layout.regions[0] == PixelRect(40, 40, 1140, 3520)
    assert spec.physical_size_inches == (4.0, 6.0)


def test_print_spec_rejects_bad_values():
    with pytest.raises(ValueError):
        PrintSpec("poster")
    with pytest.raises(ValueError):
        PrintSpec(orientation="sideways")
    with pytest.raises(ValueError):
        PrintSpec(dpi=0)
