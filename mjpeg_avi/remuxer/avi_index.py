"""
idx1 index accumulated while frames are written.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from mjpeg_avi.remuxer.avi_chunks import CHUNK_HEADER_SIZE, FCC_FRAME, FCC_IDX1, build_chunk_header
from mjpeg_avi.remuxer.byte_codec import u32

AVIIF_KEYFRAME = 0x10
INDEX_ENTRY_SIZE = 16


@dataclass(frozen=True)
class AviIndexEntry:
    """Location of one frame chunk in the file."""

    offset: int  # Running byte position when the chunk tag was written
    size: int  # Unpadded payload length
    flags: int = AVIIF_KEYFRAME

    def to_bytes(self) -> bytes:
        return FCC_FRAME + u32(self.flags) + u32(self.offset) + u32(self.size)


@dataclass
class AviIndex:
    """Index entries in write order."""

    entries: list[AviIndexEntry] = field(default_factory=list)

    def append(self, offset: int, size: int) -> None:
        if offset < 0 or size < 0:
            raise ValueError(f"Index entry needs non-negative offset and size, got offset={offset} size={size}")
        self.entries.append(AviIndexEntry(offset, size))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[AviIndexEntry]:
        return iter(self.entries)

    @property
    def payload_size(self) -> int:
        return INDEX_ENTRY_SIZE * len(self.entries)

    @property
    def serialized_size(self) -> int:
        return CHUNK_HEADER_SIZE + self.payload_size

    def serialize(self) -> bytes:
        """Build the idx1 chunk: [idx1][u32 16*N] followed by N 16-byte entries."""
        payload = b"".join(entry.to_bytes() for entry in self.entries)
        return build_chunk_header(FCC_IDX1, self.payload_size) + payload
