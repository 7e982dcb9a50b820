"""
Pytest configuration and shared fixtures for the AVI writer tests.
"""

import pytest

JPEG_SOI = b"\xff\xd8"
JPEG_EOI = b"\xff\xd9"


def pytest_configure(config):
    config.addinivalue_line("markers", "pyav: test needs a working PyAV/FFmpeg build")


@pytest.fixture
def make_jpeg():
    """
    Factory fixture returning JPEG-looking payloads of an exact length.

    Usage:
        def test_something(make_jpeg):
            payload = make_jpeg(101)
    """

    def _make(length: int, fill: int = 0x5A) -> bytes:
        if length < 4:
            raise ValueError("payload must hold the SOI and EOI markers")
        return JPEG_SOI + bytes([fill]) * (length - 4) + JPEG_EOI

    return _make


@pytest.fixture
def avi_path(tmp_path):
    return tmp_path / "capture.avi"
