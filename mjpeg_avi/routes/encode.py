import asyncio
import logging
import os
import tempfile
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from mjpeg_avi.configs import settings
from mjpeg_avi.const import AVI_FILE_SUFFIX, AVI_MEDIA_TYPE, DEFAULT_OUTPUT_FILENAME
from mjpeg_avi.remuxer.avi_writer import MjpegAviWriter
from mjpeg_avi.remuxer.frame_source import FrameEncodeError, FrameSourceAdapter
from mjpeg_avi.schemas import EncodeAviRequest
from mjpeg_avi.utils.base64_utils import decode_base64_frame, looks_like_jpeg

logger = logging.getLogger(__name__)

encode_router = APIRouter()


def _decode_frames(frames: list[str], require_jpeg: bool) -> list[bytes]:
    payloads = []
    for number, encoded in enumerate(frames):
        data = decode_base64_frame(encoded)
        if data is None:
            raise HTTPException(status_code=400, detail=f"Frame {number} is not valid base64")
        if require_jpeg and not looks_like_jpeg(data):
            raise HTTPException(status_code=400, detail=f"Frame {number} is not a JPEG image")
        payloads.append(data)
    return payloads


def _write_avi(path: Path, width: int, height: int, frame_rate: float, payloads: list[bytes]) -> int:
    """Blocking encode of ``payloads`` into ``path``. Returns the file size."""
    with MjpegAviWriter(path, width, height, frame_rate, expected_frames=len(payloads)) as writer:
        FrameSourceAdapter(writer).submit_many(payloads)
    return path.stat().st_size


@encode_router.post("/encode", summary="Encode JPEG frames into an MJPEG AVI file")
async def encode_avi(request: EncodeAviRequest):
    """Build an AVI from base64 JPEG frames and return it as a file download."""
    if len(request.frames) > settings.max_frames_per_request:
        raise HTTPException(
            status_code=413,
            detail=f"Too many frames: {len(request.frames)} > {settings.max_frames_per_request}",
        )

    payloads = _decode_frames(request.frames, request.require_jpeg)
    frame_rate = request.frame_rate or settings.default_frame_rate

    fd, tmp_name = tempfile.mkstemp(suffix=AVI_FILE_SUFFIX)
    os.close(fd)
    path = Path(tmp_name)

    try:
        file_size = await asyncio.to_thread(_write_avi, path, request.width, request.height, frame_rate, payloads)
    except FrameEncodeError as e:
        path.unlink(missing_ok=True)
        logger.warning(f"AVI encode rejected a frame: {e}")
        raise HTTPException(status_code=400, detail=f"Frame could not be encoded: {e}")
    except OSError as e:
        path.unlink(missing_ok=True)
        logger.error(f"AVI encode failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to write AVI file")

    logger.info(f"Encoded {len(payloads)} frames into {file_size} byte AVI")
    return FileResponse(
        path,
        media_type=AVI_MEDIA_TYPE,
        filename=request.filename or DEFAULT_OUTPUT_FILENAME,
        background=BackgroundTask(path.unlink, missing_ok=True),
    )
