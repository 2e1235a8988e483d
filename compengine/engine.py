"""
File-level dispatch surface.

compress() and decompress() read the whole input file, run the selected
codec on the buffer and write the whole output file. Codec failures are
never raised: they come back as a negative ErrorCode in the Result.

Output paths are an explicit parameter. When omitted they are derived
from the input path:

    HUFFMAN  compress  <in>.huff
             decompress  notes.txt.huff -> notes_DC.txt (no .huff: <in>_DC)
    LZSS     compress  <in>.lzss
             decompress  strip .lzss (no .lzss: <in>.orig)
    DCT      compress  <in>.dct
             decompress  <in>.pgm
"""

import logging
import os
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple, Union

from compengine import dct, huffman, lzss
from compengine.errors import (
    CodecError,
    ErrorCode,
    InputError,
    OutputError,
    UnknownAlgorithmError,
)

if TYPE_CHECKING:
    from compengine.config import EngineConfig

logger = logging.getLogger(__name__)


class Algorithm(IntEnum):
    """Codec selector."""

    HUFFMAN = 0
    LZSS = 1
    DCT = 2

    @classmethod
    def parse(cls, value: Union[str, int, "Algorithm"]) -> "Algorithm":
        """
        Resolve a name (case-insensitive) or numeric value.

        Raises:
            UnknownAlgorithmError: Nothing matches
        """
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                value = int(name)
            else:
                raise UnknownAlgorithmError(f"Unknown algorithm {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise UnknownAlgorithmError(f"Unknown algorithm {value!r}") from None


@dataclass
class Result:
    """Outcome of a dispatch call."""

    bytes_in: int = 0
    bytes_out: int = 0
    error: int = ErrorCode.OK
    output_path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error == ErrorCode.OK

    @property
    def ratio(self) -> float:
        """bytes_out / bytes_in, 0 for an empty input."""
        return self.bytes_out / self.bytes_in if self.bytes_in > 0 else 0.0


# ---------------------------------------------------------------------
# Output naming
# ---------------------------------------------------------------------

HUFFMAN_SUFFIX = ".huff"
LZSS_SUFFIX = ".lzss"
DCT_SUFFIX = ".dct"
PGM_SUFFIX = ".pgm"
HUFFMAN_DECODED_MARK = "_DC"
LZSS_FALLBACK_SUFFIX = ".orig"

_COMPRESS_SUFFIX = {
    Algorithm.HUFFMAN: HUFFMAN_SUFFIX,
    Algorithm.LZSS: LZSS_SUFFIX,
    Algorithm.DCT: DCT_SUFFIX,
}


def compressed_path(algorithm: Algorithm, input_path: str) -> str:
    """Default output path for compress()."""
    return input_path + _COMPRESS_SUFFIX[algorithm]


def decompressed_path(algorithm: Algorithm, input_path: str) -> str:
    """Default output path for decompress()."""
    if algorithm == Algorithm.HUFFMAN:
        if not input_path.endswith(HUFFMAN_SUFFIX):
            return input_path + HUFFMAN_DECODED_MARK
        base, ext = os.path.splitext(input_path[: -len(HUFFMAN_SUFFIX)])
        return base + HUFFMAN_DECODED_MARK + ext

    if algorithm == Algorithm.LZSS:
        if input_path.endswith(LZSS_SUFFIX) and len(input_path) > len(LZSS_SUFFIX):
            return input_path[: -len(LZSS_SUFFIX)]
        return input_path + LZSS_FALLBACK_SUFFIX

    return input_path + PGM_SUFFIX


# ---------------------------------------------------------------------
# Buffer-level codecs
# ---------------------------------------------------------------------


def _huffman_compress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    return huffman.encode(blob)


def _huffman_decompress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    return huffman.decode(blob)


def _lzss_compress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    return lzss.encode(blob, config.lzss)


def _lzss_decompress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    return lzss.decode(blob)


def _dct_compress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    return dct.encode_file(path, blob)


def _dct_decompress(path: str, blob: bytes, config: "EngineConfig") -> bytes:
    if not blob:
        raise InputError(f"DCT file is empty: {path}")
    return dct.decode_to_pgm(blob)


Codec = Callable[[str, bytes, "EngineConfig"], bytes]

_CODECS: Dict[Algorithm, Tuple[Codec, Codec]] = {
    Algorithm.HUFFMAN: (_huffman_compress, _huffman_decompress),
    Algorithm.LZSS: (_lzss_compress, _lzss_decompress),
    Algorithm.DCT: (_dct_compress, _dct_decompress),
}


# ---------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------


def read_input(path: str) -> bytes:
    """Read a whole input file, raising InputError on failure."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise InputError(f"Cannot read input file: {path} ({e})") from e


def write_output(path: str, data: bytes) -> None:
    """
    Write a whole output file.

    A partially written file is removed before OutputError is raised.
    """
    try:
        f = open(path, "wb")
    except OSError as e:
        raise OutputError(f"Cannot open output file: {path} ({e})") from e

    try:
        with f:
            f.write(data)
    except OSError as e:
        os.remove(path)
        raise OutputError(f"Cannot write output file: {path} ({e})") from e


# ---------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------


def _run(
    operation: str,
    algorithm: Union[str, int, Algorithm],
    path: str,
    output_path: Optional[str],
    config: Optional["EngineConfig"],
) -> Result:
    from compengine.config import EngineConfig

    result = Result()
    try:
        algo = Algorithm.parse(algorithm)
        if config is None:
            config = EngineConfig()

        logger.debug("%s %s: %s", operation, algo.name, path)

        blob = read_input(path)
        result.bytes_in = len(blob)

        if operation == "compress":
            codec = _CODECS[algo][0]
            target = output_path or compressed_path(algo, path)
        else:
            codec = _CODECS[algo][1]
            target = output_path or decompressed_path(algo, path)

        data = codec(path, blob, config)
        write_output(target, data)
    except CodecError as e:
        result.error = e.code
        logger.warning("%s failed for %s: %s (%s)", operation, path, e, e.code.name)
        return result

    result.bytes_out = len(data)
    result.output_path = target
    logger.debug(
        "%s %s: %d -> %d bytes (%s)",
        operation,
        algo.name,
        result.bytes_in,
        result.bytes_out,
        target,
    )
    return result


def compress(
    algorithm: Union[str, int, Algorithm],
    path: str,
    output_path: Optional[str] = None,
    config: Optional["EngineConfig"] = None,
) -> Result:
    """
    Compress a file.

    Args:
        algorithm: Codec selector
        path: Input file
        output_path: Destination (None = derived from path)
        config: Engine configuration (None = defaults)

    Returns:
        Result with byte counts and error code
    """
    return _run("compress", algorithm, path, output_path, config)


def decompress(
    algorithm: Union[str, int, Algorithm],
    path: str,
    output_path: Optional[str] = None,
    config: Optional["EngineConfig"] = None,
) -> Result:
    """
    Decompress a file.

    Args:
        algorithm: Codec selector
        path: Compressed input file
        output_path: Destination (None = derived from path)
        config: Engine configuration (None = defaults)

    Returns:
        Result with byte counts and error code
    """
    return _run("decompress", algorithm, path, output_path, config)


def compress_folder(algorithm: Union[str, int, Algorithm], folder: str) -> Result:
    """Folder compression is not supported; always NOT_IMPLEMENTED."""
    logger.warning("Folder compression requested for %s: not implemented", folder)
    return Result(error=ErrorCode.NOT_IMPLEMENTED)
