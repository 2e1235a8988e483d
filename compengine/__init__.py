"""
compengine: on-board data reduction codecs

Whole-buffer Huffman, LZSS and lossy 8x8 DCT codecs for bandwidth- and
storage-constrained platforms, behind a uniform file-level dispatch that
reports {bytes_in, bytes_out, error} results.
"""

__version__ = "1.0.0"

from compengine.engine import (
    Algorithm,
    Result,
    compress,
    compress_folder,
    decompress,
)
from compengine.errors import CodecError, ErrorCode

__all__ = [
    "Algorithm",
    "CodecError",
    "ErrorCode",
    "Result",
    "compress",
    "compress_folder",
    "decompress",
    "__version__",
]
