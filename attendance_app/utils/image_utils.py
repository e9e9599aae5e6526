import base64
import binascii
from io import BytesIO
from typing import Tuple, Union

from PIL import Image, UnidentifiedImageError

# -----------------------------
# CONSTANTS
# -----------------------------
DEFAULT_MIME = "image/jpeg"
MAX_SIDE = 800        # longest edge kept for stored / sent images
JPEG_QUALITY = 80

ImageSource = Union[bytes, bytearray, BytesIO]


class InvalidImageError(ValueError):
    pass


# -----------------------------
# DATA URL UTILITIES
# -----------------------------

def to_data_url(image: ImageSource, max_side: int = MAX_SIDE, quality: int = JPEG_QUALITY) -> str:
    """
    Re-encodes an uploaded or captured image as a self-contained JPEG data URL.

    Accepts raw bytes or a file-like object (Streamlit's UploadedFile works).
    The image is converted to RGB and shrunk so its longest edge is at most
    `max_side` pixels, which keeps stored rosters and API requests small.

    Raises InvalidImageError if the bytes aren't a readable image.
    """
    source = BytesIO(image) if isinstance(image, (bytes, bytearray)) else image
    try:
        img = Image.open(source).convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Could not read image: {e}") from e

    img.thumbnail((max_side, max_side))
    buffer = BytesIO()
    img.save(buffer, format="JPEG", quality=quality)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:{DEFAULT_MIME};base64,{encoded}"


def split_data_url(data_url: str) -> Tuple[str, str]:
    """
    Returns (mime_type, base64_data) for a data URL.
    A bare base64 string is treated as JPEG.
    """
    if not data_url.startswith("data:") or "," not in data_url:
        return DEFAULT_MIME, data_url

    header, data = data_url.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0] or DEFAULT_MIME
    return mime, data


def decode_data_url(data_url: str) -> bytes:
    _, data = split_data_url(data_url)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 image data: {e}") from e
