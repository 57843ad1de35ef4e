"""
JPEG encoding for HTTP responses.

Either the complete encoded image is returned or EncodeError is raised;
callers never see partial bytes.
"""

import numpy as np
import cv2

from faceoverlay.errors import EncodeError


def encode_jpeg(frame: np.ndarray, quality: int = 95) -> bytes:
    """Encode a BGR frame as JPEG.

    Args:
        frame: Annotated BGR image.
        quality: JPEG quality in [1, 100].

    Returns:
        The encoded image bytes.

    Raises:
        EncodeError: If OpenCV rejects the frame or produces no data.
    """
    try:
        ok, buf = cv2.imencode(".jpg", frame, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
    except cv2.error as e:
        raise EncodeError(f"Failed to encode frame as JPEG: {e}") from e

    if not ok or buf is None or buf.size == 0:
        raise EncodeError("Failed to encode frame as JPEG: encoder returned no data.")

    return buf.tobytes()
