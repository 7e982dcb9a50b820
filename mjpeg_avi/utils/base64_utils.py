import base64
import binascii
import logging
from typing import Optional

logger = logging.getLogger(__name__)

JPEG_SOI = b"\xff\xd8"


def decode_base64_frame(encoded_frame: str) -> Optional[bytes]:
    """
    Decode a base64 encoded frame.

    Accepts standard and URL-safe alphabets, with or without padding.

    Args:
        encoded_frame (str): The base64 encoded frame.

    Returns:
        Optional[bytes]: The decoded bytes if successful, None if decoding fails.
    """
    try:
        url_safe_encoded = encoded_frame.strip().replace("-", "+").replace("_", "/")

        missing_padding = len(url_safe_encoded) % 4
        if missing_padding:
            url_safe_encoded += "=" * (4 - missing_padding)

        return base64.b64decode(url_safe_encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Failed to decode base64 frame '{encoded_frame[:50]}...': {e}")
        return None


def encode_frame_to_base64(data: bytes, url_safe: bool = False) -> str:
    """
    Encode frame bytes to base64.

    Args:
        data (bytes): The frame bytes.
        url_safe (bool): Whether to use URL-safe base64 encoding.

    Returns:
        str: The base64 encoded frame.
    """
    if url_safe:
        return base64.urlsafe_b64encode(data).decode("ascii")
    return base64.b64encode(data).decode("ascii")


def looks_like_jpeg(data: bytes) -> bool:
    """Check for the JPEG start-of-image marker."""
    return data[:2] == JPEG_SOI
