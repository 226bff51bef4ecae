from io import BytesIO

import pytest
from PIL import Image

from utils.image_tools import MAX_SIDE, compress_image_bytes


def _image_bytes(fmt, size=(40, 30), mode="RGB"):
    buf = BytesIO()
    Image.new(mode, size, color=(200, 10, 10, 255)[: len(mode)]).save(buf, fmt)
    return buf.getvalue()


def test_png_with_alpha_becomes_jpeg():
    data, ext = compress_image_bytes(_image_bytes("PNG", mode="RGBA"))

    assert ext == "jpg"
    assert Image.open(BytesIO(data)).format == "JPEG"


def test_webp_stays_webp():
    data, ext = compress_image_bytes(_image_bytes("WEBP"))

    assert ext == "webp"
    assert Image.open(BytesIO(data)).format == "WEBP"


def test_large_photo_is_downscaled():
    data, _ = compress_image_bytes(_image_bytes("JPEG", size=(4000, 1000)))

    width, height = Image.open(BytesIO(data)).size
    assert width == MAX_SIDE
    assert height == 400


def test_not_an_image():
    with pytest.raises(ValueError):
        compress_image_bytes(b"definitely not a picture")
