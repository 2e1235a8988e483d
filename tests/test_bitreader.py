"""Tests for BitReader class."""

import pytest

from compengine.bitbuffer import BitBuffer
from compengine.bitreader import BitReader
from compengine.errors import TruncatedStreamError


class TestBitReaderInit:
    """Test BitReader initialization."""

    def test_init(self) -> None:
        """Test creating a BitReader."""
        br = BitReader(bytes([0xFF, 0x00]))
        assert br.position == 0
        assert br.remaining == 16

    def test_init_empty(self) -> None:
        """Test creating a BitReader with empty data."""
        br = BitReader(b"")
        assert br.position == 0
        assert br.remaining == 0


class TestBitReaderReadBit:
    """Test read_bit method."""

    def test_read_bits_msb_first(self) -> None:
        """Test that bits are read MSB-first."""
        br = BitReader(bytes([0b10110100]))
        bits = [br.read_bit() for _ in range(8)]
        assert bits == [1, 0, 1, 1, 0, 1, 0, 0]

    def test_read_across_byte_boundary(self) -> None:
        """Test reading across byte boundary."""
        br = BitReader(bytes([0xFF, 0x00]))

        for _ in range(8):
            assert br.read_bit() == 1
        for _ in range(8):
            assert br.read_bit() == 0

    def test_read_bit_underflow(self) -> None:
        """Test reading past end of data raises error."""
        br = BitReader(bytes([0xFF]))
        for _ in range(8):
            br.read_bit()

        with pytest.raises(EOFError):
            br.read_bit()
        assert br.position == 8

    def test_reads_what_bitbuffer_wrote(self) -> None:
        """Test that the reader consumes BitBuffer output in order."""
        bb = BitBuffer()
        bits = [1, 1, 0, 1, 0, 0, 0, 1, 1, 0, 1]
        for bit in bits:
            bb.append_bit(bit)

        br = BitReader(bb.to_bytes())
        assert [br.read_bit() for _ in bits] == bits
        # Padding bits are zero
        assert br.remaining == 5
        assert all(br.read_bit() == 0 for _ in range(5))


class TestBitReaderPeek:
    """Test peek_bit method."""

    def test_peek_bit(self) -> None:
        """Test peeking at next bit without consuming."""
        br = BitReader(bytes([0b10000000]))
        assert br.peek_bit() == 1
        assert br.position == 0

    def test_peek_empty_raises(self) -> None:
        """Test peek on empty reader raises error."""
        br = BitReader(b"")
        with pytest.raises(EOFError):
            br.peek_bit()


class TestBitReaderCodeBit:
    """Test next_code_bit method."""

    def test_reads_like_read_bit(self) -> None:
        """Test code bits come out MSB-first."""
        br = BitReader(bytes([0b01000000]))
        assert br.next_code_bit() == 0
        assert br.next_code_bit() == 1
        assert br.position == 2

    def test_exhausted_is_truncation(self) -> None:
        """Test running out of code bits is a truncated stream."""
        br = BitReader(bytes([0x00]))
        for _ in range(8):
            br.next_code_bit()

        with pytest.raises(TruncatedStreamError, match="8 bits"):
            br.next_code_bit()
        assert br.position == 8
