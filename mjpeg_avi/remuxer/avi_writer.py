"""
Streaming Motion-JPEG AVI writer.

Frames are appended to the file as they arrive; the frame count and the
file size are only known once the stream ends. The writer therefore works
in two passes:

1. Forward pass: a provisional header block (zero sizes, expected frame
   count) and an empty 'movi' list opener are written, then one '00db'
   chunk per frame, then the idx1 index.
2. Patch pass: the file is reopened, and the header block and 'movi'
   opener are rewritten in place with the final totals. Both writes have
   the same length so the frame data behind them is untouched.

The file is only a valid AVI after :meth:`MjpegAviWriter.finish` returns.
"""

import logging
import os
from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from mjpeg_avi.remuxer.avi_chunks import (
    CHUNK_HEADER_SIZE,
    AviMovieList,
    StreamParams,
    build_frame_chunk_header,
    build_header_block,
    build_movie_list,
)
from mjpeg_avi.remuxer.avi_index import AviIndex, AviIndexEntry

logger = logging.getLogger(__name__)

BYTES_TYPES = (bytes, bytearray, memoryview)


class WriterStateError(RuntimeError):
    """Raised when the writer is used after it was finalized or aborted."""

    pass


class WriterState(Enum):
    CREATED = "created"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    FAILED = "failed"


def frame_padding(payload_size: int, position: int) -> int:
    """
    Number of zero bytes appended after a frame payload.

    Computed from the payload length and the running position before the
    chunk header, modulo 4.
    """
    return (payload_size + position) % 4


class MjpegAviWriter:
    """
    Write JPEG frames into a single-stream MJPEG AVI file.

    Usage::

        with MjpegAviWriter("out.avi", 640, 480, 25.0) as writer:
            for jpeg in frames:
                writer.write_frame(jpeg)

    Leaving the ``with`` block normally finalizes the file. If the block
    raises, the file is closed without patching the header.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        width: int,
        height: int,
        frame_rate: float,
        expected_frames: int = 0,
    ) -> None:
        """
        Open ``path`` and write the provisional header.

        Args:
            path: Output file, truncated if it exists.
            width: Frame width in pixels.
            height: Frame height in pixels.
            frame_rate: Frames per second.
            expected_frames: Frame count stored in the provisional header.
        """
        if expected_frames < 0:
            raise ValueError(f"expected_frames must be non-negative, got {expected_frames}")

        self._params = StreamParams(width, height, float(frame_rate))
        self._path = Path(path)
        self._index = AviIndex()
        self._frame_count = 0
        self._position = 0
        self._movie_origin = 0
        self._file: BinaryIO | None = None
        self._state = WriterState.CREATED

        self._start(expected_frames)

    # -------------------------------------------------------------------------
    # Read-only session state
    # -------------------------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def width(self) -> int:
        return self._params.width

    @property
    def height(self) -> int:
        return self._params.height

    @property
    def frame_rate(self) -> float:
        return self._params.frame_rate

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def position(self) -> int:
        """Number of bytes written so far in the forward pass."""
        return self._position

    @property
    def movie_origin(self) -> int:
        """File offset of the 'movi' list opener."""
        return self._movie_origin

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def index(self) -> AviIndex:
        return self._index

    # -------------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------------

    def _start(self, expected_frames: int) -> None:
        """CREATED -> STREAMING: write the provisional header block and 'movi' opener."""
        header = build_header_block(self._params, total_frames=expected_frames)
        movie_list = build_movie_list(AviMovieList())

        self._file = open(self._path, "wb")
        try:
            self._file.write(header)
            self._file.write(movie_list)
        except OSError:
            logger.error("[avi_writer] Failed to write provisional header to %s", self._path)
            self._abort()
            raise

        self._movie_origin = len(header)
        self._position = len(header) + len(movie_list)
        self._state = WriterState.STREAMING
        logger.info(
            "[avi_writer] Opened %s: %dx%d @%.3f fps",
            self._path,
            self._params.width,
            self._params.height,
            self._params.frame_rate,
        )

    def write_frame(self, payload: bytes) -> AviIndexEntry:
        """
        Append one JPEG frame as a '00db' chunk.

        Args:
            payload: Compressed frame bytes.

        Returns:
            The index entry recorded for the frame.

        Raises:
            WriterStateError: If the writer is no longer streaming.
            TypeError: If ``payload`` is not bytes-like.
            OSError: If the file write fails. The writer is unusable afterwards.
        """
        self._require_streaming("write_frame")

        if not isinstance(payload, BYTES_TYPES):
            raise TypeError(f"Frame payload must be bytes-like, got {type(payload).__name__}")
        data = bytes(payload)
        size = len(data)
        extra = frame_padding(size, self._position)
        chunk = build_frame_chunk_header(size + extra) + data + b"\x00" * extra

        try:
            self._file.write(chunk)
        except OSError:
            logger.error("[avi_writer] Write failed at frame %d (offset %d)", self._frame_count, self._position)
            self._abort()
            raise

        self._index.append(self._position, size)
        entry = self._index.entries[-1]
        self._position += len(chunk)
        self._frame_count += 1
        logger.debug("[avi_writer] Frame %d: offset=%d size=%d pad=%d", self._frame_count, entry.offset, size, extra)
        return entry

    def write_frames(self, payloads: Iterable[bytes]) -> int:
        """Append every payload in order. Returns the number of frames written."""
        written = 0
        for payload in payloads:
            self.write_frame(payload)
            written += 1
        return written

    def finish(self) -> int:
        """
        STREAMING -> FINALIZED: write the index and patch the header in place.

        Returns:
            Final file size in bytes.

        Raises:
            WriterStateError: If called twice or after a failure.
            OSError: If the index write or the header patch fails.
        """
        self._require_streaming("finish")

        index_block = self._index.serialize()
        try:
            self._file.write(index_block)
            self._file.close()
            self._file = None

            file_size = self._path.stat().st_size
            list_size = file_size - CHUNK_HEADER_SIZE - self._movie_origin - len(index_block)
            header = build_header_block(self._params, total_frames=self._frame_count, file_size=file_size)

            with open(self._path, "r+b") as f:
                f.seek(0)
                f.write(header)
                f.write(build_movie_list(AviMovieList(list_size)))
        except OSError:
            logger.error("[avi_writer] Finalize failed for %s", self._path)
            self._abort()
            raise

        self._state = WriterState.FINALIZED
        logger.info(
            "[avi_writer] Finalized %s: %d frames, %d bytes (movi=%d, idx1=%d)",
            self._path,
            self._frame_count,
            file_size,
            list_size,
            len(index_block),
        )
        return file_size

    def close(self) -> None:
        """Finalize the file if it is still streaming; otherwise do nothing."""
        if self._state is WriterState.STREAMING:
            self.finish()

    def _abort(self) -> None:
        self._state = WriterState.FAILED
        file, self._file = self._file, None
        if file is not None:
            file.close()

    def _require_streaming(self, operation: str) -> None:
        if self._state is not WriterState.STREAMING:
            raise WriterStateError(f"Cannot {operation}: writer is {self._state.value}")

    def __enter__(self) -> "MjpegAviWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        elif self._state is WriterState.STREAMING:
            logger.warning("[avi_writer] Aborting %s after %d frames: %s", self._path, self._frame_count, exc)
            self._abort()
