"""
Normalizes submitted frames into JPEG payloads for the AVI writer.

A frame is either already-compressed JPEG bytes, passed through as-is, or
pixel data handed to a :class:`JpegEncoder` together with a quality value.
The adapter never resizes or converts pixels; the encoder output must
already match the writer's frame size.
"""

import logging
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from mjpeg_avi.configs import settings
from mjpeg_avi.remuxer.avi_index import AviIndexEntry
from mjpeg_avi.remuxer.avi_writer import BYTES_TYPES, MjpegAviWriter

logger = logging.getLogger(__name__)


class FrameEncodeError(OSError):
    """Raised when a frame could not be compressed to JPEG."""

    pass


@runtime_checkable
class JpegEncoder(Protocol):
    """Compresses pixel data into a JPEG byte string."""

    def encode(self, pixels: Any, quality: float) -> bytes:
        """
        Args:
            pixels: Pixel buffer in whatever layout the encoder accepts.
            quality: Compression quality in (0.0, 1.0], 1.0 being best.
        """
        ...


def validate_quality(quality: float) -> float:
    if not 0.0 < quality <= 1.0:
        raise ValueError(f"JPEG quality must be in (0.0, 1.0], got {quality}")
    return float(quality)


class FrameSourceAdapter:
    """Feeds JPEG bytes or encoded pixel frames into a :class:`MjpegAviWriter`."""

    def __init__(
        self,
        writer: MjpegAviWriter,
        encoder: JpegEncoder | None = None,
        quality: float | None = None,
    ) -> None:
        self._writer = writer
        self._encoder = encoder
        self._quality = validate_quality(settings.jpeg_quality if quality is None else quality)

    @property
    def writer(self) -> MjpegAviWriter:
        return self._writer

    @property
    def quality(self) -> float:
        return self._quality

    def to_payload(self, frame: Any, quality: float | None = None) -> bytes:
        """
        Return the JPEG payload for ``frame``.

        Raises:
            FrameEncodeError: If the encoder is missing, fails, or returns nothing.
            ValueError: If ``quality`` is outside (0.0, 1.0].
        """
        if isinstance(frame, BYTES_TYPES):
            return bytes(frame)

        q = self._quality if quality is None else validate_quality(quality)
        if self._encoder is None:
            raise FrameEncodeError(f"No JPEG encoder configured for {type(frame).__name__} frame")

        try:
            data = self._encoder.encode(frame, q)
        except FrameEncodeError:
            raise
        except (OSError, ValueError, TypeError) as e:
            raise FrameEncodeError(f"JPEG encoding failed: {e}") from e

        if not data:
            raise FrameEncodeError("JPEG encoder returned no data")
        logger.debug("[frame_source] Encoded frame at quality %.2f: %d bytes", q, len(data))
        return bytes(data)

    def submit(self, frame: Any, quality: float | None = None) -> AviIndexEntry:
        """Normalize ``frame`` and write it. The writer is untouched if encoding fails."""
        return self._writer.write_frame(self.to_payload(frame, quality))

    def submit_many(self, frames: Iterable[Any], quality: float | None = None) -> int:
        written = 0
        for frame in frames:
            self.submit(frame, quality)
            written += 1
        return written
