from PIL import Image, ImageDraw
import logging

import pytest


def assert_color_close(actual, expected, tolerance=30):
    assert len(actual) == len(expected)
    for component_actual, component_expected in zip(actual, expected, strict=True):
        assert abs(component_actual - component_expected) <= tolerance

from photostrip.fitting import FitMode
from utils.image_operations import (
    FILTER_NAMES,
    adjust_contrast,
    apply_photo_filter,
    grayscale,
    render_tile,
    scale_channels,
    sepia,
    vignette,
)


def test_render_tile_cover_crops_centre():
    img = Image.new("RGBA", (30, 10), color=(0, 0, 255, 255))
    draw = ImageDraw.Draw(img)
    draw.rectangle((10, 0, 19, 9), fill=(255, 0, 0, 255))

    tile, offset = render_tile(img, 10, 10, FitMode.COVER)

    assert tile.size == (10, 10)
    assert offset == (0, 0)
    assert_color_close(tile.getpixel((0, 5)), (255, 0, 0, 255))
    assert_color_close(tile.getpixel((9, 5)), (255, 0, 0, 255))


def test_render_tile_contain_centres_tile():
    img = Image.new("RGBA", (20, 10), color="green")
    tile, offset = render_tile(img, 10, 10, FitMode.CONTAIN)
    assert tile.size == (10, 5)
    assert offset == (0, 3)  # 2.5 rounds half up


def test_render_tile_stretch_fills_target():
    img = Image.new("RGBA", (20, 10), color="green")
    tile, offset = render_tile(img, 7, 13, FitMode.STRETCH)
    assert tile.size == (7, 13)
    assert offset == (0, 0)


def test_render_tile_rejects_empty_target():
    with pytest.raises(ValueError):
        render_tile(Image.new("RGBA", (4, 4)), 0, 4, FitMode.COVER)


def test_grayscale_and_sepia():
    img = Image.new("RGB", (2, 2), color=(200, 100, 50))
    gray = grayscale(img).getpixel((0, 0))
    assert gray[0] == gray[1] == gray[2]
    r, g, b = sepia(img).getpixel((0, 0))
    assert r >= g >= b


def test_contrast_pivots_on_mid_grey():
    img = Image.new("RGB", (1, 1), color=(128, 200, 56))
    assert adjust_contrast(img, 1.5).getpixel((0, 0)) == (128, 236, 20)


def test_scale_channels_clamps():
    img = Image.new("RGB", (1, 1), color=(250, 100, 100))
    assert scale_channels(img, 1.1, 1.0, 0.9).getpixel((0, 0)) == (255, 100, 90)


def test_vignette_darkens_corners_more_than_centre():
    img = Image.new("RGB", (41, 41), color=(200, 200, 200))
    result = vignette(img, 0.5)
    assert result.getpixel((20, 20))[0] > result.getpixel((0, 0))[0]


def test_every_filter_preserves_size_and_alpha():
    img = Image.new("RGBA", (8, 8), color=(120, 80, 40, 100))
    for name in FILTER_NAMES:
        result = apply_photo_filter(img, name)
        assert result.size == (8, 8)
        assert result.mode == "RGBA"
        assert result.getpixel((4, 4))[3] == 100


def test_unknown_filter_warns_and_passes_through(caplog):
    img = Image.new("RGB", (2, 2), color="red")
    with caplog.at_level(logging.WARNING):
        result = apply_photo_filter(img, "lomo")
    assert result is img
    assert "Unknown photo filter" in caplog.text
