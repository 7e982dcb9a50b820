"""
RIFF/AVI header records for a single Motion-JPEG video stream.

File layout produced by the writer:

    RIFF 'AVI '
      LIST 'hdrl'
        avih                    main header
        LIST 'strl'
          strh                  stream header
          strf                  stream format (BITMAPINFOHEADER)
      JUNK                      fixed filler
      LIST 'movi'
        00db ...                one chunk per frame
      idx1                      index

Each record is a plain dataclass holding the values it serializes, with a
``build_*`` function producing its exact bytes. Records with fields derived
from the session (frame count, dimensions, frame rate) are created through
``for_stream`` so the provisional and the final header are built from the
same code path and differ only in those fields.
"""

from dataclasses import dataclass, field

from mjpeg_avi.remuxer.byte_codec import U32_MASK, fourcc, u16, u32


# =============================================================================
# Identifiers and structural constants
# =============================================================================

FCC_RIFF = fourcc("RIFF")
FCC_AVI = fourcc("AVI ")
FCC_LIST = fourcc("LIST")
FCC_HDRL = fourcc("hdrl")
FCC_AVIH = fourcc("avih")
FCC_STRL = fourcc("strl")
FCC_STRH = fourcc("strh")
FCC_STRF = fourcc("strf")
FCC_VIDS = fourcc("vids")
FCC_MJPG = fourcc("MJPG")
FCC_JUNK = fourcc("JUNK")
FCC_MOVI = fourcc("movi")
FCC_FRAME = fourcc("00db")
FCC_IDX1 = fourcc("idx1")

CHUNK_HEADER_SIZE = 8  # fourcc + u32 size

HDRL_LIST_SIZE = 200  # 'hdrl' + avih chunk + strl list
STRL_LIST_SIZE = 124  # 'strl' + strh chunk + strf chunk
AVIH_SIZE = 56
STRH_SIZE = 64
STRF_SIZE = 40
JUNK_SIZE = 1808

MAX_BYTES_PER_SEC = 10_000_000
AVIF_FLAGS = 65552  # AVIF_HASINDEX | AVIF_ISINTERLEAVED
STREAM_RATE = 1_000_000
STREAM_QUALITY_DEFAULT = -1
BIT_COUNT = 24

RIFF_HEADER_SIZE = 24
LIST_HEADER_SIZE = 12  # 'LIST' + u32 size + list type
HEADER_BLOCK_SIZE = (
    RIFF_HEADER_SIZE
    + (CHUNK_HEADER_SIZE + AVIH_SIZE)
    + LIST_HEADER_SIZE
    + (CHUNK_HEADER_SIZE + STRH_SIZE)
    + (CHUNK_HEADER_SIZE + STRF_SIZE)
    + (CHUNK_HEADER_SIZE + JUNK_SIZE)
)


def microseconds_per_frame(frame_rate: float) -> int:
    """Frame duration in microseconds, rounded to the nearest integer."""
    return round(1_000_000 / frame_rate)


@dataclass(frozen=True)
class StreamParams:
    """Session values baked into the header before any frame is written."""

    width: int
    height: int
    frame_rate: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame dimensions must be positive, got {self.width}x{self.height}")
        if not self.frame_rate > 0:
            raise ValueError(f"Frame rate must be positive, got {self.frame_rate}")
        # Both values land in u32 header fields; scale must also stay non-zero
        if not 1 <= self.microseconds_per_frame <= U32_MASK:
            raise ValueError(
                f"Frame rate {self.frame_rate} gives {self.microseconds_per_frame} us/frame, "
                f"outside 1..{U32_MASK}"
            )
        if self.width * self.height > U32_MASK:
            raise ValueError(f"Frame size {self.width}x{self.height} does not fit the 32-bit image size field")

    @property
    def microseconds_per_frame(self) -> int:
        return microseconds_per_frame(self.frame_rate)


# =============================================================================
# Records
# =============================================================================


@dataclass
class RiffHeader:
    """'RIFF' size 'AVI ' followed by the opening of the 'hdrl' list."""

    riff_size: int = 0
    hdrl_size: int = HDRL_LIST_SIZE


@dataclass
class AviMainHeader:
    """avih: AVIMAINHEADER."""

    micro_sec_per_frame: int = 0
    max_bytes_per_sec: int = MAX_BYTES_PER_SEC
    padding_granularity: int = 0
    flags: int = AVIF_FLAGS
    total_frames: int = 0
    initial_frames: int = 0
    streams: int = 1
    suggested_buffer_size: int = 0
    width: int = 0
    height: int = 0
    reserved: tuple[int, int, int, int] = (0, 0, 0, 0)

    @classmethod
    def for_stream(cls, params: StreamParams, total_frames: int) -> "AviMainHeader":
        return cls(
            micro_sec_per_frame=params.microseconds_per_frame,
            total_frames=total_frames,
            width=params.width,
            height=params.height,
        )


@dataclass
class AviStreamList:
    """LIST 'strl' opener."""

    size: int = STRL_LIST_SIZE


@dataclass
class AviStreamHeader:
    """strh: AVISTREAMHEADER for the video stream."""

    fcc_type: bytes = FCC_VIDS
    fcc_handler: bytes = FCC_MJPG
    flags: int = 0
    priority: int = 0
    language: int = 0
    initial_frames: int = 0
    scale: int = 0  # microseconds per frame; rate / scale = fps
    rate: int = STREAM_RATE
    start: int = 0
    length: int = 0  # frames
    suggested_buffer_size: int = 0
    quality: int = STREAM_QUALITY_DEFAULT
    sample_size: int = 0
    frame_rect: tuple[int, int, int, int] = (0, 0, 0, 0)

    @classmethod
    def for_stream(cls, params: StreamParams, total_frames: int) -> "AviStreamHeader":
        return cls(scale=params.microseconds_per_frame, length=total_frames)


@dataclass
class AviStreamFormat:
    """strf: BITMAPINFOHEADER describing MJPEG frames."""

    header_size: int = STRF_SIZE
    width: int = 0
    height: int = 0
    planes: int = 1
    bit_count: int = BIT_COUNT
    compression: bytes = FCC_MJPG
    size_image: int = 0
    x_pels_per_meter: int = 0
    y_pels_per_meter: int = 0
    clr_used: int = 0
    clr_important: int = 0

    @classmethod
    def for_stream(cls, params: StreamParams) -> "AviStreamFormat":
        return cls(width=params.width, height=params.height, size_image=params.width * params.height)


@dataclass
class AviJunk:
    """Zero-filled JUNK chunk reserving header space."""

    size: int = JUNK_SIZE


@dataclass
class AviMovieList:
    """LIST 'movi' opener; size covers 'movi' and every frame chunk."""

    list_size: int = 0


@dataclass
class HeaderRecords:
    """Every record of the header block, in file order."""

    riff: RiffHeader
    main: AviMainHeader
    stream_list: AviStreamList = field(default_factory=AviStreamList)
    stream: AviStreamHeader = field(default_factory=AviStreamHeader)
    stream_format: AviStreamFormat = field(default_factory=AviStreamFormat)
    junk: AviJunk = field(default_factory=AviJunk)

    @classmethod
    def for_stream(cls, params: StreamParams, total_frames: int = 0, file_size: int = 0) -> "HeaderRecords":
        """
        Build the header records for the current session state.

        Args:
            params: Fixed session values.
            total_frames: Frame count written into avih and strh.
            file_size: Length of the complete file, 0 while still unknown.
        """
        return cls(
            riff=RiffHeader(riff_size=max(file_size - CHUNK_HEADER_SIZE, 0)),
            main=AviMainHeader.for_stream(params, total_frames),
            stream=AviStreamHeader.for_stream(params, total_frames),
            stream_format=AviStreamFormat.for_stream(params),
        )


# =============================================================================
# Serialization
# =============================================================================


def build_chunk_header(tag: bytes, size: int) -> bytes:
    """Build a RIFF chunk header: [fourcc][u32 size]."""
    return tag + u32(size)


def build_list_header(list_type: bytes, size: int) -> bytes:
    """Build a RIFF list header: 'LIST' [u32 size] [fourcc list type]."""
    return FCC_LIST + u32(size) + list_type


def build_riff_header(record: RiffHeader) -> bytes:
    return FCC_RIFF + u32(record.riff_size) + FCC_AVI + build_list_header(FCC_HDRL, record.hdrl_size)


def build_avih(record: AviMainHeader) -> bytes:
    payload = bytearray()
    payload.extend(u32(record.micro_sec_per_frame))
    payload.extend(u32(record.max_bytes_per_sec))
    payload.extend(u32(record.padding_granularity))
    payload.extend(u32(record.flags))
    payload.extend(u32(record.total_frames))
    payload.extend(u32(record.initial_frames))
    payload.extend(u32(record.streams))
    payload.extend(u32(record.suggested_buffer_size))
    payload.extend(u32(record.width))
    payload.extend(u32(record.height))
    for word in record.reserved:
        payload.extend(u32(word))
    return build_chunk_header(FCC_AVIH, AVIH_SIZE) + bytes(payload)


def build_stream_list(record: AviStreamList) -> bytes:
    return build_list_header(FCC_STRL, record.size)


def build_strh(record: AviStreamHeader) -> bytes:
    payload = bytearray()
    payload.extend(record.fcc_type)
    payload.extend(record.fcc_handler)
    payload.extend(u32(record.flags))
    payload.extend(u16(record.priority))
    payload.extend(u16(record.language))
    payload.extend(u32(record.initial_frames))
    payload.extend(u32(record.scale))
    payload.extend(u32(record.rate))
    payload.extend(u32(record.start))
    payload.extend(u32(record.length))
    payload.extend(u32(record.suggested_buffer_size))
    payload.extend(u32(record.quality))
    payload.extend(u32(record.sample_size))
    # rcFrame stored as four 32-bit words so the body stays at 64 bytes
    for edge in record.frame_rect:
        payload.extend(u32(edge))
    return build_chunk_header(FCC_STRH, STRH_SIZE) + bytes(payload)


def build_strf(record: AviStreamFormat) -> bytes:
    payload = bytearray()
    payload.extend(u32(record.header_size))
    payload.extend(u32(record.width))
    payload.extend(u32(record.height))
    payload.extend(u16(record.planes))
    payload.extend(u16(record.bit_count))
    payload.extend(record.compression)
    payload.extend(u32(record.size_image))
    payload.extend(u32(record.x_pels_per_meter))
    payload.extend(u32(record.y_pels_per_meter))
    payload.extend(u32(record.clr_used))
    payload.extend(u32(record.clr_important))
    return build_chunk_header(FCC_STRF, STRF_SIZE) + bytes(payload)


def build_junk(record: AviJunk) -> bytes:
    return build_chunk_header(FCC_JUNK, record.size) + b"\x00" * record.size


def build_movie_list(record: AviMovieList) -> bytes:
    """Build the LIST 'movi' opener."""
    return build_list_header(FCC_MOVI, record.list_size)


def build_frame_chunk_header(padded_size: int) -> bytes:
    """Build the '00db' header that precedes each JPEG payload."""
    return build_chunk_header(FCC_FRAME, padded_size)


def serialize_header_records(records: HeaderRecords) -> bytes:
    """Serialize every header record in file order."""
    return b"".join(
        (
            build_riff_header(records.riff),
            build_avih(records.main),
            build_stream_list(records.stream_list),
            build_strh(records.stream),
            build_strf(records.stream_format),
            build_junk(records.junk),
        )
    )


def build_header_block(params: StreamParams, total_frames: int = 0, file_size: int = 0) -> bytes:
    """
    Build the complete header block that precedes the 'movi' list.

    The result is always HEADER_BLOCK_SIZE bytes long; only the derived
    fields change between the provisional and the final write.
    """
    block = serialize_header_records(HeaderRecords.for_stream(params, total_frames, file_size))
    if len(block) != HEADER_BLOCK_SIZE:
        raise AssertionError(f"Header block is {len(block)} bytes, expected {HEADER_BLOCK_SIZE}")
    return block
