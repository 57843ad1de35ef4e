"""
Shared fakes for pipeline and server tests.
"""

from typing import List, Optional, Sequence

import numpy as np
import pytest

from faceoverlay.config import AppConfig
from faceoverlay.context import AppContext
from faceoverlay.detection import Box
from faceoverlay.detector import ClassifierSet
from faceoverlay.errors import DeviceUnavailableError


class FakeDetector:
    """Returns a fixed list of boxes and records every image it sees."""

    def __init__(self, boxes: Sequence[Box] = ()) -> None:
        self.boxes = list(boxes)
        self.seen: List[np.ndarray] = []

    @property
    def calls(self) -> int:
        return len(self.seen)

    def detect(self, image: np.ndarray) -> List[Box]:
        self.seen.append(image)
        return list(self.boxes)


class FakeCapture:
    """Capture source serving a copy of one frame, or failing on demand."""

    def __init__(self, frame: Optional[np.ndarray] = None, fail: bool = False) -> None:
        self.frame = frame if frame is not None else blank_frame()
        self.fail = fail
        self.released = False

    def read(self) -> np.ndarray:
        if self.fail:
            raise DeviceUnavailableError("device 0 closed")
        return self.frame.copy()

    def release(self) -> None:
        self.released = True


def blank_frame(height: int = 720, width: int = 1280) -> np.ndarray:
    return np.zeros((height, width, 3), dtype=np.uint8)


def make_classifiers(haar=(), eye=(), lbp=()) -> ClassifierSet:
    return ClassifierSet(
        haar_face=FakeDetector(haar),
        eye=FakeDetector(eye),
        lbp_face=FakeDetector(lbp),
    )


@pytest.fixture
def classifiers() -> ClassifierSet:
    """One 250px Haar face with one eye inside it, no LBP faces."""
    return make_classifiers(
        haar=[Box.from_xywh(100, 150, 250, 250)],
        eye=[Box.from_xywh(40, 60, 50, 30)],
    )


@pytest.fixture
def context(classifiers) -> AppContext:
    return AppContext(config=AppConfig(), capture=FakeCapture(), classifiers=classifiers)
