"""Video dimension probing and the aspect-ratio gate applied before upload."""

import io
import logging

import av
from av.error import FFmpegError

logger = logging.getLogger(__name__)

# Accepted long-side / short-side ratio: square up to 16:9, either orientation.
MIN_ASPECT_RATIO = 1.0
MAX_ASPECT_RATIO = 16 / 9
ASPECT_TOLERANCE = 0.01


def probe_dimensions(data: bytes) -> tuple[int, int] | None:
    """
    Return (width, height) of the first video stream, or None when the payload
    cannot be demuxed or has no video stream.
    """
    try:
        with av.open(io.BytesIO(data), "r") as container:
            if not container.streams.video:
                return None
            codec = container.streams.video[0].codec_context
            if codec.width <= 0 or codec.height <= 0:
                return None
            return codec.width, codec.height
    except (FFmpegError, ValueError) as exc:
        logger.info("[media_probe] Could not probe payload (%d bytes): %s", len(data), exc)
        return None


def aspect_ratio_accepted(width: int, height: int) -> bool:
    if width <= 0 or height <= 0:
        return False
    ratio = max(width, height) / min(width, height)
    return MIN_ASPECT_RATIO - ASPECT_TOLERANCE <= ratio <= MAX_ASPECT_RATIO + ASPECT_TOLERANCE
