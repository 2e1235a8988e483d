"""Tests for BitBuffer class."""

import pytest

from compengine.bitbuffer import BitBuffer


class TestBitBufferInit:
    """Test BitBuffer initialization."""

    def test_init(self) -> None:
        """Test creating an empty BitBuffer."""
        bb = BitBuffer()
        assert bb.num_bits == 0

    def test_init_empty_to_bytes(self) -> None:
        """Test that empty buffer produces empty bytes."""
        bb = BitBuffer()
        assert bb.to_bytes() == b""


class TestBitBufferAppendBit:
    """Test append_bit method."""

    def test_append_byte_worth_of_bits(self) -> None:
        """Test appending 8 bits."""
        bb = BitBuffer()
        # Append 10110100 (MSB first)
        for bit in [1, 0, 1, 1, 0, 1, 0, 0]:
            bb.append_bit(bit)

        assert bb.num_bits == 8
        assert bb.to_bytes() == bytes([0b10110100])

    def test_append_bits_msb_first(self) -> None:
        """Test that bits are appended MSB-first."""
        bb = BitBuffer()
        bb.append_bit(1)  # Goes to bit 7 (MSB)
        for _ in range(6):
            bb.append_bit(0)
        bb.append_bit(1)  # Goes to bit 0 (LSB)

        assert bb.to_bytes() == bytes([0b10000001])

    def test_nonzero_counts_as_one(self) -> None:
        """Test that any non-zero value appends a 1 bit."""
        bb = BitBuffer()
        bb.append_bit(5)
        assert bb.to_bytes() == bytes([0b10000000])


class TestBitBufferAppendBits:
    """Test append_bits method."""

    def test_append_bits_single_byte(self) -> None:
        """Test appending a full byte value."""
        bb = BitBuffer()
        bb.append_bits(0xAB, 8)

        assert bb.num_bits == 8
        assert bb.to_bytes() == bytes([0xAB])

    def test_append_bits_cross_byte_boundary(self) -> None:
        """Test appending codes that cross a byte boundary."""
        bb = BitBuffer()
        bb.append_bits(0b101, 3)
        bb.append_bits(0b11001, 5)
        bb.append_bits(0b01, 2)

        assert bb.num_bits == 10
        assert bb.to_bytes() == bytes([0b10111001, 0b01000000])

    def test_append_zero_length(self) -> None:
        """Test that a zero-length append is a no-op."""
        bb = BitBuffer()
        bb.append_bits(0, 0)
        assert bb.num_bits == 0

    def test_append_bits_value_too_wide(self) -> None:
        """Test that a value wider than num_bits is rejected."""
        bb = BitBuffer()
        with pytest.raises(ValueError):
            bb.append_bits(0b100, 2)


class TestBitBufferToBytes:
    """Test to_bytes method."""

    def test_to_bytes_partial_byte_zero_padded(self) -> None:
        """Test converting with trailing partial byte."""
        bb = BitBuffer()
        bb.append_bits(0b1111, 4)

        result = bb.to_bytes()
        assert len(result) == 1
        # First 4 bits are 1111, remaining should be 0
        assert result == bytes([0b11110000])


class TestBitBufferClear:
    """Test clear method."""

    def test_clear(self) -> None:
        """Test clearing a buffer."""
        bb = BitBuffer()
        bb.append_bits(0xFFFF, 16)
        assert bb.num_bits == 16

        bb.clear()
        assert bb.num_bits == 0
        assert bb.to_bytes() == b""
