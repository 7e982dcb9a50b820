import struct

import pytest

from mjpeg_avi.remuxer.byte_codec import fourcc, read_u16, read_u32, swap16, swap32, u16, u32


@pytest.mark.parametrize("value", [0, 1, 3, 255, 256, 100_000, 65552, 10_000_000, 0x12345678, 0xFFFFFFFF])
def test_swap32_is_an_involution(value):
    assert swap32(swap32(value)) == value


@pytest.mark.parametrize("value", [0, 1, 24, 0x00FF, 0x1234, 0xFFFF])
def test_swap16_is_an_involution(value):
    assert swap16(swap16(value)) == value


def test_swap_reverses_bytes():
    assert swap32(0x12345678) == 0x78563412
    assert swap32(0x000000FF) == 0xFF000000
    assert swap16(0x1234) == 0x3412


def test_negative_values_wrap_to_unsigned():
    assert swap32(-1) == 0xFFFFFFFF
    assert u32(-1) == b"\xff\xff\xff\xff"
    assert u16(-1) == b"\xff\xff"


def test_fields_are_little_endian_at_rest():
    assert u32(56) == struct.pack("<I", 56)
    assert u32(1808) == b"\x10\x07\x00\x00"
    assert u16(24) == struct.pack("<H", 24)


def test_read_back_at_offset():
    data = b"junk" + u32(100_000) + u16(1)
    assert read_u32(data, 4) == 100_000
    assert read_u16(data, 8) == 1


def test_fourcc_validation():
    assert fourcc("00db") == b"00db"
    assert fourcc(b"AVI ") == b"AVI "
    with pytest.raises(ValueError):
        fourcc("AVI")
    with pytest.raises(ValueError):
        fourcc(b"movie")
