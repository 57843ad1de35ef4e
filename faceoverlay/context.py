"""
Application context: everything created once at startup.

open_context() opens the camera and loads the classifiers inside an
ExitStack, so whatever was acquired before a failure is released, and
everything is released again on shutdown.
"""

import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from typing import Iterator

from faceoverlay.capture import CameraCapture, CaptureSource
from faceoverlay.config import AppConfig
from faceoverlay.detector import ClassifierSet, load_classifiers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContext:
    """Process-lifetime resources handed to the request handler."""

    config: AppConfig
    capture: CaptureSource
    classifiers: ClassifierSet


@contextmanager
def open_context(config: AppConfig) -> Iterator[AppContext]:
    """Acquire the capture device and classifiers for the process lifetime.

    Raises:
        RuntimeError: If the device cannot be opened or a cascade
                      cannot be parsed.
        FileNotFoundError: If a cascade file is missing.
    """
    with ExitStack() as stack:
        capture = CameraCapture(config.camera.device_index)
        stack.callback(capture.release)

        classifiers = load_classifiers(config.classifiers)

        logger.info("Application context ready.")
        yield AppContext(config=config, capture=capture, classifiers=classifiers)

        logger.info("Shutting down application context.")
