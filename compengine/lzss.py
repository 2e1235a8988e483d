"""
LZSS sliding-window dictionary coder.

Stream layout (no header):
    repeat:
        [1B] flag byte, bit i (LSB first) describes token i of the group
        up to 8 tokens:
            bit 0 -> [1B] literal
            bit 1 -> [2B] offset (uint16 LE), [1B] length (uint8)

A match copies `length` bytes starting `offset` bytes behind the end of
the output produced so far. length may exceed offset, in which case the
copy reads bytes it has just written.
"""

import struct
from dataclasses import dataclass
from typing import NamedTuple

from compengine.errors import CorruptStreamError, TruncatedStreamError

# Defaults
WINDOW_SIZE = 4096
LOOKAHEAD = 18
MIN_MATCH = 3

GROUP_SIZE = 8

_MATCH = struct.Struct("<HB")


@dataclass(frozen=True)
class LzssParams:
    """
    Encoder parameters. The decoder needs none of them.

    Attributes:
        window_size: How far back a match may start (1-65535)
        lookahead: Maximum match length (1-255)
        min_match: Shortest match worth a 3-byte token
    """

    window_size: int = WINDOW_SIZE
    lookahead: int = LOOKAHEAD
    min_match: int = MIN_MATCH

    def __post_init__(self) -> None:
        """
        Validate encoder parameters.

        Raises:
            ValueError: If a parameter cannot be represented in the stream
        """
        if not 1 <= self.window_size <= 0xFFFF:
            raise ValueError(f"window_size {self.window_size} out of range [1, 65535]")
        if not 1 <= self.lookahead <= 0xFF:
            raise ValueError(f"lookahead {self.lookahead} out of range [1, 255]")
        if not 1 <= self.min_match <= self.lookahead:
            raise ValueError(f"min_match {self.min_match} out of range [1, {self.lookahead}]")


class Match(NamedTuple):
    """Back-reference; length 0 means no usable match."""

    offset: int
    length: int


NO_MATCH = Match(0, 0)


def find_best_match(data: bytes, pos: int, params: LzssParams) -> Match:
    """
    Find the longest earlier match for the bytes at pos.

    Candidates are scanned left to right across the window and the first
    match of maximal length is kept; a later candidate replaces it only
    when strictly longer. The compared region may run past pos.

    Each step asks bytes.find for the next candidate that beats the current
    best by at least one byte, which selects the same match as checking
    every candidate in turn.

    Args:
        data: Whole input buffer
        pos: Position to encode
        params: Window, lookahead and minimum match length

    Returns:
        Best match, or NO_MATCH if none reaches params.min_match
    """
    max_len = min(params.lookahead, len(data) - pos)
    candidate = max(0, pos - params.window_size)
    best = NO_MATCH

    while best.length < max_len:
        needle_len = best.length + 1
        # Any hit must start before pos.
        candidate = data.find(data[pos : pos + needle_len], candidate, pos + needle_len - 1)
        if candidate < 0:
            break

        length = needle_len
        while length < max_len and data[candidate + length] == data[pos + length]:
            length += 1

        best = Match(pos - candidate, length)
        candidate += 1

    if best.length < params.min_match:
        return NO_MATCH
    return best


def encode(data: bytes, params: "LzssParams | None" = None) -> bytes:
    """
    Compress a buffer into a token stream.

    Args:
        data: Input bytes
        params: Encoder parameters (None = defaults)

    Returns:
        Token stream bytes
    """
    if params is None:
        params = LzssParams()

    data = bytes(data)
    output = bytearray()
    pos = 0

    while pos < len(data):
        # Reserve the flag byte, backpatch once the group is complete
        flag_index = len(output)
        output.append(0)
        flags = 0

        for bit in range(GROUP_SIZE):
            if pos >= len(data):
                break

            match = find_best_match(data, pos, params)
            if match.length:
                flags |= 1 << bit
                output += _MATCH.pack(match.offset, match.length)
                pos += match.length
            else:
                output.append(data[pos])
                pos += 1

        output[flag_index] = flags

    return bytes(output)


def decode(stream: bytes) -> bytes:
    """
    Decompress a token stream.

    Args:
        stream: Token stream bytes

    Returns:
        Original bytes

    Raises:
        TruncatedStreamError: A match record is cut short
        CorruptStreamError: Offset or length outside the produced output
    """
    output = bytearray()
    pos = 0
    n = len(stream)

    while pos < n:
        flags = stream[pos]
        pos += 1

        for bit in range(GROUP_SIZE):
            if pos >= n:
                break

            if not (flags >> bit) & 1:
                output.append(stream[pos])
                pos += 1
                continue

            if pos + _MATCH.size > n:
                raise TruncatedStreamError(
                    f"Match record at byte {pos} needs {_MATCH.size} bytes, "
                    f"{n - pos} left"
                )
            offset, length = _MATCH.unpack_from(stream, pos)
            pos += _MATCH.size

            if offset == 0 or length == 0 or offset > len(output):
                raise CorruptStreamError(
                    f"Invalid back-reference offset={offset} length={length} "
                    f"with {len(output)} bytes decoded"
                )

            start = len(output) - offset
            for k in range(length):
                output.append(output[start + k])

    return bytes(output)
