"""
Image input/output for the DCT coder.

Raw 8-bit netpbm images are handled natively:
- P6: interleaved RGB samples
- P5: single-channel samples

Header: magic, width, height, maxval separated by whitespace ('#' starts a
comment running to end of line), then exactly one whitespace byte before
the raw samples. maxval must be 1-255.

Any other format is handed to Pillow, which plays the role of the external
image decoder and yields interleaved RGB.
"""

import logging
from typing import NamedTuple, Tuple

import numpy as np
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from compengine.errors import UnsupportedInputError

logger = logging.getLogger(__name__)

_CHANNELS = {b"P5": 1, b"P6": 3}
_WHITESPACE = b" \t\n\r\v\f"


class Image(NamedTuple):
    """Decoded 8-bit image, samples shaped (height, width, channels)."""

    width: int
    height: int
    channels: int
    samples: np.ndarray


def is_netpbm(blob: bytes) -> bool:
    """Check for a raw P5/P6 magic."""
    return blob[:2] in _CHANNELS


def _next_token(blob: bytes, pos: int) -> Tuple[bytes, int]:
    """Return the next header token and the position just after it."""
    n = len(blob)
    while pos < n:
        if blob[pos : pos + 1] == b"#":
            while pos < n and blob[pos : pos + 1] not in (b"\n", b"\r"):
                pos += 1
        elif blob[pos : pos + 1] in _WHITESPACE:
            pos += 1
        else:
            break

    start = pos
    while pos < n and blob[pos : pos + 1] not in _WHITESPACE and blob[pos : pos + 1] != b"#":
        pos += 1

    if start == pos:
        raise UnsupportedInputError("Netpbm header ends early")
    return blob[start:pos], pos


def parse_netpbm(blob: bytes) -> Image:
    """
    Decode a raw P5 or P6 image.

    Args:
        blob: File contents

    Returns:
        Decoded image

    Raises:
        UnsupportedInputError: Unknown magic, malformed header or short data
    """
    magic = blob[:2]
    if magic not in _CHANNELS:
        raise UnsupportedInputError(f"Not a raw netpbm image (magic {magic!r})")
    channels = _CHANNELS[magic]

    pos = 2
    fields = []
    for name in ("width", "height", "maxval"):
        token, pos = _next_token(blob, pos)
        if not token.isdigit():
            raise UnsupportedInputError(f"Netpbm {name} is not a number: {token!r}")
        fields.append(int(token))
    width, height, maxval = fields

    if width <= 0 or height <= 0:
        raise UnsupportedInputError(f"Invalid netpbm size {width}x{height}")
    if not 1 <= maxval <= 255:
        raise UnsupportedInputError(f"Unsupported netpbm maxval {maxval}")

    if blob[pos : pos + 1] not in _WHITESPACE or pos >= len(blob):
        raise UnsupportedInputError("Missing separator before netpbm samples")
    pos += 1

    expected = width * height * channels
    if len(blob) - pos < expected:
        raise UnsupportedInputError(
            f"Netpbm samples truncated: need {expected} bytes, have {len(blob) - pos}"
        )

    samples = np.frombuffer(blob, dtype=np.uint8, count=expected, offset=pos)
    return Image(width, height, channels, samples.reshape(height, width, channels))


def decode_with_pillow(path: str) -> Image:
    """
    Decode any Pillow-supported image to interleaved RGB.

    Raises:
        UnsupportedInputError: Pillow cannot identify or decode the file
    """
    try:
        with PILImage.open(path) as img:
            rgb = np.asarray(img.convert("RGB"), dtype=np.uint8)
    except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError, ValueError) as e:
        raise UnsupportedInputError(f"Cannot decode image {path}: {e}") from e

    height, width, _ = rgb.shape
    return Image(width, height, 3, rgb)


def read_image(path: str, blob: bytes) -> Image:
    """
    Decode an image file whose contents have already been read.

    Raw netpbm is parsed natively; anything else goes through Pillow.
    """
    if is_netpbm(blob):
        return parse_netpbm(blob)

    logger.debug("Delegating %s to Pillow", path)
    return decode_with_pillow(path)


def encode_pgm(pixels: np.ndarray) -> bytes:
    """
    Encode a (height, width) uint8 array as a raw P5 image.

    Args:
        pixels: Grayscale samples

    Returns:
        P5 file contents
    """
    height, width = pixels.shape
    header = f"P5\n{width} {height}\n255\n".encode("ascii")
    return header + np.ascontiguousarray(pixels, dtype=np.uint8).tobytes()


def encode_ppm(samples: np.ndarray) -> bytes:
    """Encode a (height, width, 3) uint8 array as a raw P6 image."""
    height, width, _ = samples.shape
    header = f"P6\n{width} {height}\n255\n".encode("ascii")
    return header + np.ascontiguousarray(samples, dtype=np.uint8).tobytes()
