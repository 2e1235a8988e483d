"""Pytest configuration and fixtures."""

import struct
import zlib

import numpy as np
import pytest


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--fast",
        action="store_true",
        default=False,
        help="Skip slow tests (large buffers, exhaustive truncation sweeps)",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests when --fast flag is used."""
    if config.getoption("--fast"):
        skip_slow = pytest.mark.skip(reason="skipped with --fast flag")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


@pytest.fixture
def rng():
    """Deterministic random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def text_sample() -> bytes:
    """Repetitive ASCII text, the typical log/telemetry payload."""
    line = b"T+0042 BUS_V=28.1 BUS_I=1.92 TEMP_PANEL=-12.5 MODE=NOMINAL\n"
    return line * 40 + b"END OF DUMP\n"


@pytest.fixture
def oversized_png(tmp_path):
    """PNG with only a signature and an IHDR chunk declaring 20000x20000 RGB."""
    ihdr = struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0)
    chunk = struct.pack(">I", len(ihdr)) + b"IHDR" + ihdr
    chunk += struct.pack(">I", zlib.crc32(b"IHDR" + ihdr))
    path = tmp_path / "huge.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk)
    return path
