"""
JPEG frame encoder backed by PyAV's ``mjpeg`` codec.

Each call builds a fresh encoder context sized from the incoming frame, so
frames are independent and no state is kept between calls.
"""

import logging
from fractions import Fraction
from typing import Any

import av
import numpy as np

from mjpeg_avi.const import MJPEG_QSCALE_BEST, MJPEG_QSCALE_WORST
from mjpeg_avi.remuxer.frame_source import FrameEncodeError, validate_quality

logger = logging.getLogger(__name__)

MJPEG_PIX_FMT = "yuvj420p"


def quality_to_qscale(quality: float) -> int:
    """Map quality in (0.0, 1.0] onto the mjpeg qscale range (1.0 -> 2, near 0 -> 31)."""
    q = validate_quality(quality)
    return MJPEG_QSCALE_BEST + round((1.0 - q) * (MJPEG_QSCALE_WORST - MJPEG_QSCALE_BEST))


class PyAVJpegEncoder:
    """
    Encode pixel frames to baseline JPEG with PyAV.

    Accepts ``av.VideoFrame`` objects or array-likes of shape (height, width, 3)
    in ``pixel_format`` (rgb24 by default).
    """

    def __init__(self, pixel_format: str = "rgb24") -> None:
        self._pixel_format = pixel_format
        self._frames_encoded = 0

    @property
    def frames_encoded(self) -> int:
        return self._frames_encoded

    def _to_video_frame(self, pixels: Any) -> av.VideoFrame:
        if isinstance(pixels, av.VideoFrame):
            return pixels
        array = np.ascontiguousarray(pixels, dtype=np.uint8)
        return av.VideoFrame.from_ndarray(array, format=self._pixel_format)

    def encode(self, pixels: Any, quality: float) -> bytes:
        qscale = quality_to_qscale(quality)
        try:
            frame = self._to_video_frame(pixels)

            encoder = av.CodecContext.create("mjpeg", "w")
            encoder.width = frame.width
            encoder.height = frame.height
            encoder.pix_fmt = MJPEG_PIX_FMT
            encoder.time_base = Fraction(1, 25)
            encoder.options = {"qmin": str(qscale), "qmax": str(qscale)}

            if frame.format.name != encoder.pix_fmt:
                frame = frame.reformat(format=encoder.pix_fmt)
            frame.pts = 0

            packets = list(encoder.encode(frame))
            packets.extend(encoder.encode(None))
        except (av.error.FFmpegError, ValueError) as e:
            raise FrameEncodeError(f"mjpeg encode failed: {e}") from e

        data = b"".join(bytes(packet) for packet in packets)
        self._frames_encoded += 1
        logger.debug("[jpeg_encoder] %dx%d qscale=%d -> %d bytes", frame.width, frame.height, qscale, len(data))
        return data
