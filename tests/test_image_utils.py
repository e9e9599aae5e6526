import base64
from io import BytesIO

import pytest
from PIL import Image

from attendance_app.utils.image_utils import (
    InvalidImageError,
    decode_data_url,
    split_data_url,
    to_data_url,
)


def png_bytes(size=(40, 20), color=(200, 30, 30)):
    buffer = BytesIO()
    Image.new("RGBA", size, color + (255,)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_to_data_url_reencodes_as_jpeg():
    url = to_data_url(png_bytes())

    assert url.startswith("data:image/jpeg;base64,")
    img = Image.open(BytesIO(decode_data_url(url)))
    assert img.format == "JPEG"
    assert img.size == (40, 20)


def test_to_data_url_shrinks_large_images():
    url = to_data_url(png_bytes(size=(1600, 400)), max_side=800)
    img = Image.open(BytesIO(decode_data_url(url)))
    assert img.size == (800, 200)


def test_to_data_url_accepts_file_objects():
    assert to_data_url(BytesIO(png_bytes())).startswith("data:image/jpeg;base64,")


def test_to_data_url_rejects_garbage():
    with pytest.raises(InvalidImageError):
        to_data_url(b"definitely not an image")


def test_split_data_url():
    assert split_data_url("data:image/png;base64,QUJD") == ("image/png", "QUJD")
    assert split_data_url("QUJD") == ("image/jpeg", "QUJD")
    assert split_data_url("data:;base64,QUJD") == ("image/jpeg", "QUJD")


def test_decode_data_url():
    encoded = base64.b64encode(b"raw").decode()
    assert decode_data_url(f"data:image/jpeg;base64,{encoded}") == b"raw"
    with pytest.raises(InvalidImageError):
        decode_data_url("data:image/jpeg;base64,@@@")
