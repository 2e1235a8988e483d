"""
Variable-length bit buffer for building compressed output.

This module provides a dynamically-growing bit buffer used by the Huffman
coder to pack variable-length codes into a byte stream.

Bit Ordering:
Bits are appended MSB-first within each byte:
- First bit appended goes to bit position 7
- Second bit goes to position 6, etc.

The final partial byte is padded with zero bits by to_bytes().
"""


class BitBuffer:
    """Variable-length bit buffer for building compressed output."""

    def __init__(self) -> None:
        """Initialize an empty bit buffer."""
        self._data = bytearray()
        self.num_bits = 0

    def clear(self) -> None:
        """Clear the buffer."""
        self._data = bytearray()
        self.num_bits = 0

    def append_bit(self, bit: int) -> None:
        """
        Append a single bit to the buffer.

        Args:
            bit: Bit value (0 or non-zero for 1)
        """
        byte_index = self.num_bits // 8
        bit_index = self.num_bits % 8

        if byte_index >= len(self._data):
            self._data.append(0)

        if bit:
            self._data[byte_index] |= 1 << (7 - bit_index)

        self.num_bits += 1

    def append_bits(self, value: int, num_bits: int) -> None:
        """
        Append the low num_bits of an integer, MSB first.

        Args:
            value: Source value
            num_bits: Number of bits to append

        Raises:
            ValueError: If num_bits is negative or value does not fit
        """
        if num_bits < 0:
            raise ValueError(f"num_bits must be non-negative, got {num_bits}")
        if value < 0 or value >> num_bits:
            raise ValueError(f"Value {value} does not fit in {num_bits} bits")

        for i in range(num_bits - 1, -1, -1):
            self.append_bit((value >> i) & 1)

    def to_bytes(self) -> bytes:
        """
        Convert buffer contents to bytes.

        Returns:
            Bytes representation of the buffer, zero-padded to a whole byte
        """
        if self.num_bits == 0:
            return b""

        num_bytes = (self.num_bits + 7) // 8
        return bytes(self._data[:num_bytes])
