"""
Per-request failure types.

Each error carries the HTTP status the request handler answers with.
Startup failures use the builtin FileNotFoundError / RuntimeError /
ValueError instead and terminate the process.
"""

from typing import Optional


class OverlayError(RuntimeError):
    """Base class for failures that abort a single request."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class DeviceUnavailableError(OverlayError):
    """The capture device is closed, disconnected, or returned no frame."""

    status_code = 503


class EncodeError(OverlayError):
    """An annotated frame could not be serialized to image bytes."""

    status_code = 500
