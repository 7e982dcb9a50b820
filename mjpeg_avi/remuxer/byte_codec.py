"""
Fixed-width integer codec for RIFF/AVI fields.

AVI stores every multi-byte integer little-endian. Values are composed as
plain Python ints and passed through an explicit byte swap before being
emitted with a big-endian ``struct`` format, which yields the little-endian
representation at rest.
"""

import struct

U32_MASK = 0xFFFFFFFF
U16_MASK = 0xFFFF


def swap32(value: int) -> int:
    """Reverse the byte order of an unsigned 32-bit value (negatives wrap modulo 2**32)."""
    v = value & U32_MASK
    return ((v & 0xFF) << 24) | ((v & 0xFF00) << 8) | ((v >> 8) & 0xFF00) | (v >> 24)


def swap16(value: int) -> int:
    """Reverse the byte order of an unsigned 16-bit value (negatives wrap modulo 2**16)."""
    v = value & U16_MASK
    return ((v & 0xFF) << 8) | (v >> 8)


def u32(value: int) -> bytes:
    """Encode a 32-bit field as it is stored in the file."""
    return struct.pack(">I", swap32(value))


def u16(value: int) -> bytes:
    """Encode a 16-bit field as it is stored in the file."""
    return struct.pack(">H", swap16(value))


def read_u32(data: bytes, offset: int = 0) -> int:
    """Decode a 32-bit field written by :func:`u32`."""
    (raw,) = struct.unpack_from(">I", data, offset)
    return swap32(raw)


def read_u16(data: bytes, offset: int = 0) -> int:
    """Decode a 16-bit field written by :func:`u16`."""
    (raw,) = struct.unpack_from(">H", data, offset)
    return swap16(raw)


def fourcc(tag: str | bytes) -> bytes:
    """Return a validated 4-byte ASCII chunk identifier."""
    raw = tag.encode("ascii") if isinstance(tag, str) else bytes(tag)
    if len(raw) != 4:
        raise ValueError(f"FourCC must be exactly 4 bytes, got {raw!r}")
    return raw
