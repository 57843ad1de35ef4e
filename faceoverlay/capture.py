"""
Frame acquisition for the face overlay server.

Responsibility:
    Own the camera device and hand out one frame per request. Reads are
    serialized with a lock: the device has a single internal frame
    buffer and concurrent request threads must not interleave on it.

Non-goals:
    - No detection, drawing, or encoding.
    - No retry on failed reads; a failed read aborts only its request.
    - No image, video file, or directory sources.
"""

import logging
import threading
from typing import Optional, Protocol

import cv2
import numpy as np

from faceoverlay.errors import DeviceUnavailableError

logger = logging.getLogger(__name__)


class CaptureSource(Protocol):
    """Anything that yields BGR frames on demand."""

    def read(self) -> np.ndarray:
        ...

    def release(self) -> None:
        ...


class CameraCapture:
    """Thread-safe wrapper around a cv2.VideoCapture device.

    Usage:
        camera = CameraCapture(device_index=0)
        try:
            frame = camera.read()
        finally:
            camera.release()

    The returned frame belongs to the caller; it is never reused by a
    later read.
    """

    def __init__(self, device_index: int = 0) -> None:
        """Open the capture device.

        Raises:
            RuntimeError: If the device cannot be opened.
        """
        self._device_index = device_index
        self._lock = threading.Lock()
        self._cap: Optional[cv2.VideoCapture] = cv2.VideoCapture(device_index)

        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise RuntimeError(
                f"Failed to open webcam device {device_index}. "
                f"Ensure the device exists and is accessible."
            )

        logger.info("Capture device %d opened.", device_index)

    @property
    def device_index(self) -> int:
        return self._device_index

    def read(self) -> np.ndarray:
        """Grab the next frame from the device.

        Returns:
            A BGR numpy array of shape (H, W, 3).

        Raises:
            DeviceUnavailableError: If the device was released or the
                                    read produced no frame.
        """
        with self._lock:
            if self._cap is None:
                raise DeviceUnavailableError(
                    f"Capture device {self._device_index} is closed."
                )
            ok, frame = self._cap.read()

        if not ok or frame is None:
            raise DeviceUnavailableError(
                f"Capture device {self._device_index} returned no frame."
            )
        return frame

    def release(self) -> None:
        """Release the device handle. Safe to call more than once."""
        with self._lock:
            if self._cap is not None:
                self._cap.release()
                self._cap = None
                logger.info("Capture device %d released.", self._device_index)

    def __enter__(self) -> "CameraCapture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
