"""
Sequential bit reader over a packed code payload.

Bit Ordering:
Bits are read MSB-first within each byte (matching BitBuffer output):
- First bit read is bit position 7 (MSB)
- Last bit read is bit position 0 (LSB)

Zero bits padding the final byte are indistinguishable from code bits,
so a decoder stops on its own symbol count rather than on remaining().
"""

from compengine.errors import TruncatedStreamError


class BitReader:
    """Sequential bit reader from bytes."""

    def __init__(self, data: bytes) -> None:
        """
        Initialize a bit reader.

        Args:
            data: Bytes to read from
        """
        self._data = data
        self._total_bits = len(data) * 8
        self.position = 0

    @property
    def remaining(self) -> int:
        """Number of bits remaining to read."""
        return self._total_bits - self.position

    def peek_bit(self) -> int:
        """
        Peek at the next bit without consuming it.

        Raises:
            EOFError: If no more bits available
        """
        if self.position >= self._total_bits:
            raise EOFError("No more bits to read")

        byte_index = self.position // 8
        bit_index = self.position % 8

        return (self._data[byte_index] >> (7 - bit_index)) & 1

    def read_bit(self) -> int:
        """
        Read and consume a single bit.

        Raises:
            EOFError: If no more bits available
        """
        bit = self.peek_bit()
        self.position += 1
        return bit

    def next_code_bit(self) -> int:
        """
        Read one bit of a code the payload is required to contain.

        Raises:
            TruncatedStreamError: Payload ends in the middle of the codes
        """
        try:
            return self.read_bit()
        except EOFError:
            raise TruncatedStreamError(
                f"Code payload exhausted after {self._total_bits} bits"
            ) from None
