import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from photostrip.cache import ImageCache
from photostrip.errors import AssetDecodeError
from utils.image_processor import ImageProcessor


def create_temp_image(tmp_path: Path, size=(10, 10), name="img.png") -> Path:
    img = Image.new("RGB", size, color="red")
    path = tmp_path / name
    img.save(path)
    return path


def test_decode_uses_cache(tmp_path):
    image_path = create_temp_image(tmp_path)
    cache = ImageCache(max_size=4)
    processor = ImageProcessor(cache)

    first = processor.decode(image_path, "photo:0")
    second = processor.decode(str(image_path), "photo:1")

    assert first is second  # same bytes, cached object returned
    assert cache.hits == 1
    assert first.mode == "RGBA"


def test_decode_accepts_bytes_and_data_urls(tmp_path):
    data = create_temp_image(tmp_path, size=(6, 3)).read_bytes()
    processor = ImageProcessor(ImageCache())

    assert processor.decode(data).size == (6, 3)
    url = "data:image/png;base64," + base64.b64encode(data).decode("ascii")
    assert processor.decode(url).size == (6, 3)


def test_decode_applies_exif_orientation():
    img = Image.new("RGB", (8, 4), color="blue")
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 degrees clockwise
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", exif=exif)

    decoded = ImageProcessor(ImageCache()).decode(buffer.getvalue())
    assert decoded.size == (4, 8)


@pytest.mark.parametrize(
    "source",
    [
        b"not an image",
        b"",
        "data:image/png;base64,@@@",
        "data:image/png;base64",
        12345,
    ],
)
def test_decode_failures_raise_asset_decode_error(source):
    with pytest.raises(AssetDecodeError) as excinfo:
        ImageProcessor(ImageCache()).decode(source, "photo:3")
    assert excinfo.value.asset_key in ("photo:3", None)


def test_truncated_image_raises(tmp_path):
    data = create_temp_image(tmp_path, size=(64, 64), name="big.png").read_bytes()
    with pytest.raises(AssetDecodeError):
        ImageProcessor(ImageCache()).decode(data[: len(data) // 2])


def test_missing_file_raises(tmp_path):
    with pytest.raises(AssetDecodeError):
        ImageProcessor(ImageCache()).decode(tmp_path / "missing.png", "frame")


def test_is_valid_image(tmp_path):
    good = create_temp_image(tmp_path)
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"junk")
    assert ImageProcessor.is_valid_image(good)
    assert not ImageProcessor.is_valid_image(bad)
    assert not ImageProcessor.is_valid_image(tmp_path / "notes.txt")
