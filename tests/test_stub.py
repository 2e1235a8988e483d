"""Smoke test of the package surface."""

import compengine


def test_version() -> None:
    """Test that version is defined."""
    assert compengine.__version__ == "1.0.0"


def test_compress_works(tmp_path) -> None:
    """Test that compress produces output."""
    source = tmp_path / "zeros.bin"
    source.write_bytes(b"\x00" * 8)
    result = compengine.compress("lzss", str(source))
    assert result.ok
    assert result.bytes_out > 0


def test_decompress_works(tmp_path) -> None:
    """Test that decompress round-trips with compress."""
    source = tmp_path / "zeros.bin"
    original = b"\x00" * 8
    source.write_bytes(original)
    packed = compengine.compress("huffman", str(source))
    unpacked = compengine.decompress("huffman", packed.output_path)
    assert unpacked.ok
    assert (tmp_path / "zeros_DC.bin").read_bytes() == original
