"""
Lossy 8x8 block-transform image coder.

Pipeline:
    image -> luma -> pad to 8x8 blocks -> forward DCT -> quantize -> file
    file -> dequantize -> inverse DCT -> reassemble -> crop -> clamp/round

File layout (little-endian):
    [4B]  MAGIC "DCT1"
    [2B]  width    (uint16, unpadded)
    [2B]  height   (uint16, unpadded)
    [1B]  channels (uint8, always 1)
    ceil(width/8) * ceil(height/8) blocks in raster order, each
    64 x int16 row-major, row = vertical frequency v, column = horizontal u

All blocks are transformed at once as a (rows, cols, 8, 8) array.
"""

import math
import struct
from typing import Tuple

import numpy as np

from compengine.errors import (
    FormatError,
    InputError,
    TruncatedStreamError,
    UnsupportedInputError,
)
from compengine.netpbm import Image, encode_pgm, read_image

MAGIC = b"DCT1"
BLOCK = 8
CHANNELS = 1

_HEADER = struct.Struct("<4sHHB")
HEADER_SIZE = _HEADER.size
BLOCK_BYTES = BLOCK * BLOCK * 2

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# JPEG luminance table (ITU-T T.81 Annex K)
QUANT_MATRIX = np.array(
    [
        [16, 11, 10, 16, 24, 40, 51, 61],
        [12, 12, 14, 19, 26, 58, 60, 55],
        [14, 13, 16, 24, 40, 57, 69, 56],
        [14, 17, 22, 29, 51, 87, 80, 62],
        [18, 22, 37, 56, 68, 109, 103, 77],
        [24, 35, 55, 64, 81, 104, 113, 92],
        [49, 64, 78, 87, 103, 121, 120, 101],
        [72, 92, 95, 98, 112, 100, 103, 99],
    ],
    dtype=np.float64,
)

_INT16_MIN = -32768
_INT16_MAX = 32767


def _cosine_basis() -> np.ndarray:
    """basis[k, n] = cos((2n + 1) k pi / 16)."""
    k = np.arange(BLOCK).reshape(-1, 1)
    n = np.arange(BLOCK).reshape(1, -1)
    return np.cos((2 * n + 1) * k * math.pi / (2 * BLOCK))


_BASIS = _cosine_basis()
_ALPHA = np.array([1.0 / math.sqrt(2.0)] + [1.0] * (BLOCK - 1))
# 0.25 * alpha(v) * alpha(u), indexed [v, u]
_SCALE = 0.25 * np.outer(_ALPHA, _ALPHA)


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, halves away from zero."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def to_luma(image: Image) -> np.ndarray:
    """
    Convert samples to a float (height, width) luma plane.

    RGB uses 0.299 R + 0.587 G + 0.114 B, unrounded. Single-channel
    images are taken as they are.
    """
    samples = image.samples.astype(np.float64)
    if image.channels == 1:
        return samples[:, :, 0]
    if image.channels == 3:
        return samples @ LUMA_WEIGHTS
    raise UnsupportedInputError(f"Cannot take luma of a {image.channels}-channel image")


def block_grid(width: int, height: int) -> Tuple[int, int]:
    """Number of block (rows, cols) covering width x height."""
    return -(-height // BLOCK), -(-width // BLOCK)


def pad_to_blocks(plane: np.ndarray) -> np.ndarray:
    """Zero-pad right and bottom up to multiples of 8."""
    height, width = plane.shape
    rows, cols = block_grid(width, height)
    return np.pad(plane, ((0, rows * BLOCK - height), (0, cols * BLOCK - width)))


def split_blocks(plane: np.ndarray) -> np.ndarray:
    """(H, W) with H, W multiples of 8 -> (rows, cols, 8, 8)."""
    height, width = plane.shape
    rows, cols = height // BLOCK, width // BLOCK
    return plane.reshape(rows, BLOCK, cols, BLOCK).swapaxes(1, 2)


def merge_blocks(blocks: np.ndarray) -> np.ndarray:
    """(rows, cols, 8, 8) -> (rows*8, cols*8)."""
    rows, cols = blocks.shape[:2]
    return blocks.swapaxes(1, 2).reshape(rows * BLOCK, cols * BLOCK)


def forward_dct(blocks: np.ndarray) -> np.ndarray:
    """
    Forward 2-D DCT of spatial blocks (samples in 0-255).

    F[v, u] = 0.25 a(u) a(v) sum_y sum_x (f[y, x] - 128)
              cos((2x + 1) u pi / 16) cos((2y + 1) v pi / 16)

    with a(0) = 1/sqrt(2), a(k > 0) = 1.
    """
    centered = blocks - 128.0
    return _SCALE * (_BASIS @ centered @ _BASIS.T)


def inverse_dct(coeffs: np.ndarray) -> np.ndarray:
    """
    Inverse of forward_dct, returning samples biased back by +128.

    f[y, x] = 0.25 sum_u sum_v a(u) a(v) F[v, u]
              cos((2x + 1) u pi / 16) cos((2y + 1) v pi / 16) + 128
    """
    return _BASIS.T @ (_SCALE * coeffs) @ _BASIS + 128.0


def quantize(coeffs: np.ndarray) -> np.ndarray:
    """Divide by the quantization matrix, round and clamp to int16."""
    quantized = round_half_away(coeffs / QUANT_MATRIX)
    return np.clip(quantized, _INT16_MIN, _INT16_MAX).astype(np.int16)


def dequantize(quantized: np.ndarray) -> np.ndarray:
    """Multiply quantized coefficients back by the quantization matrix."""
    return quantized.astype(np.float64) * QUANT_MATRIX


def encode_image(image: Image) -> bytes:
    """
    Compress a decoded image.

    Args:
        image: Decoded 8-bit image (1 or 3 channels)

    Returns:
        DCT file contents

    Raises:
        UnsupportedInputError: Image too large for the 16-bit size fields
    """
    if image.width > 0xFFFF or image.height > 0xFFFF:
        raise UnsupportedInputError(
            f"Image {image.width}x{image.height} exceeds 65535 in a dimension"
        )

    padded = pad_to_blocks(to_luma(image))
    quantized = quantize(forward_dct(split_blocks(padded)))

    header = _HEADER.pack(MAGIC, image.width, image.height, CHANNELS)
    return header + quantized.astype("<i2").tobytes()


def encode_file(path: str, blob: bytes) -> bytes:
    """
    Compress the contents of an image file.

    Args:
        path: Image file path (used for the Pillow fallback)
        blob: Raw file contents

    Raises:
        InputError: Empty file
        UnsupportedInputError: Image cannot be decoded
    """
    if not blob:
        raise InputError(f"Image file is empty: {path}")
    return encode_image(read_image(path, blob))


def parse_header(blob: bytes) -> Tuple[int, int, int]:
    """
    Parse a DCT header.

    Returns:
        (width, height, channels)

    Raises:
        FormatError: Short header, bad magic or zero dimension
        UnsupportedInputError: More than one channel
    """
    if len(blob) < HEADER_SIZE:
        raise FormatError(f"DCT header needs {HEADER_SIZE} bytes, got {len(blob)}")

    magic, width, height, channels = _HEADER.unpack_from(blob, 0)
    if magic != MAGIC:
        raise FormatError(f"Bad DCT magic {magic!r}")
    if width == 0 or height == 0:
        raise FormatError(f"Invalid DCT image size {width}x{height}")
    if channels != CHANNELS:
        raise UnsupportedInputError(f"Only single-channel DCT files are supported, got {channels}")

    return width, height, channels


def decode(blob: bytes) -> np.ndarray:
    """
    Decompress a DCT file.

    Args:
        blob: DCT file contents

    Returns:
        (height, width) uint8 grayscale pixels

    Raises:
        FormatError: Bad header or trailing data
        TruncatedStreamError: Fewer coefficient blocks than the header implies
        UnsupportedInputError: Not a single-channel file
    """
    width, height, _ = parse_header(blob)
    rows, cols = block_grid(width, height)

    expected = rows * cols * BLOCK_BYTES
    available = len(blob) - HEADER_SIZE
    if available < expected:
        raise TruncatedStreamError(
            f"Coefficient stream truncated: {available // BLOCK_BYTES} of "
            f"{rows * cols} blocks present"
        )
    if available > expected:
        raise FormatError(f"{available - expected} unexpected bytes after the last block")

    quantized = np.frombuffer(blob, dtype="<i2", count=rows * cols * BLOCK * BLOCK, offset=HEADER_SIZE)
    spatial = inverse_dct(dequantize(quantized.reshape(rows, cols, BLOCK, BLOCK)))

    cropped = merge_blocks(spatial)[:height, :width]
    return round_half_away(np.clip(cropped, 0.0, 255.0)).astype(np.uint8)


def decode_to_pgm(blob: bytes) -> bytes:
    """Decompress a DCT file straight to raw P5 bytes."""
    return encode_pgm(decode(blob))
