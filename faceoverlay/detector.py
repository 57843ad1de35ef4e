"""
Detectors — the object-detection capability used by the pipeline.

Public contract:
    Detector.detect(image: np.ndarray) -> list[Box]

The pipeline only depends on the Detector protocol, so tests can pass
deterministic fakes. CascadeDetector is the production implementation
backed by cv2.CascadeClassifier.

Constraints:
    - Input must be a single-channel intensity image (H, W).
    - A loaded ClassifierSet is never mutated and may be shared across
      concurrent requests.

Non-goals:
    - No camera access, drawing, or encoding.
    - No size filtering (that policy belongs to the pipeline).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

import cv2
import numpy as np

from faceoverlay.config import ClassifierConfig
from faceoverlay.detection import Box
from faceoverlay.model_loader import load_cascade

logger = logging.getLogger(__name__)


class Detector(Protocol):
    """Anything that finds boxes in a grayscale image."""

    def detect(self, image: np.ndarray) -> List[Box]:
        ...


class CascadeDetector:
    """Detector backed by an OpenCV cascade classifier.

    Usage:
        detector = CascadeDetector(load_cascade("haarcascade_eye.xml"))
        boxes = detector.detect(gray)
    """

    def __init__(
        self,
        classifier: cv2.CascadeClassifier,
        scale_factor: float = 1.1,
        min_neighbors: int = 3,
        name: str = "cascade",
    ) -> None:
        self._classifier = classifier
        self._scale_factor = scale_factor
        self._min_neighbors = min_neighbors
        self.name = name

    @classmethod
    def from_file(
        cls,
        path: str,
        config: Optional[ClassifierConfig] = None,
        name: Optional[str] = None,
    ) -> "CascadeDetector":
        """Load a cascade from disk and wrap it.

        Raises:
            FileNotFoundError: If the model file is missing.
            RuntimeError: If the model file cannot be parsed.
        """
        config = config or ClassifierConfig()
        return cls(
            load_cascade(path),
            scale_factor=config.scale_factor,
            min_neighbors=config.min_neighbors,
            name=name or path,
        )

    def detect(self, image: np.ndarray) -> List[Box]:
        """Detect objects in a grayscale image.

        Args:
            image: A uint8 numpy array with shape (H, W).

        Returns:
            Boxes in the image's own coordinate space, in the order the
            classifier reports them. Empty if nothing is found.

        Raises:
            TypeError: If image is not a numpy ndarray.
            ValueError: If image is empty or not single-channel.
        """
        self._validate_image(image)

        rects = self._classifier.detectMultiScale(
            image,
            scaleFactor=self._scale_factor,
            minNeighbors=self._min_neighbors,
        )
        return [Box.from_xywh(x, y, w, h) for (x, y, w, h) in rects]

    @staticmethod
    def _validate_image(image: np.ndarray) -> None:
        """Validate that the input meets the detector contract.

        Raises:
            TypeError: If image is not a numpy ndarray.
            ValueError: If image is empty or has wrong dimensions.
        """
        if not isinstance(image, np.ndarray):
            raise TypeError(
                f"Expected image to be a numpy ndarray, "
                f"got {type(image).__name__}."
            )

        if image.size == 0:
            raise ValueError(
                "Image is empty (zero size). "
                "Ensure the capture source is providing valid frames."
            )

        if image.ndim != 2:
            raise ValueError(
                f"Expected a 2-dimensional grayscale image (H, W), "
                f"got {image.ndim} dimensions with shape {image.shape}. "
                f"Convert color frames with cv2.cvtColor first."
            )


@dataclass(frozen=True)
class ClassifierSet:
    """The three detectors used per request; read-only after load."""

    haar_face: Detector
    eye: Detector
    lbp_face: Detector


def load_classifiers(config: ClassifierConfig) -> ClassifierSet:
    """Load the Haar face, eye, and LBP face cascades.

    Raises:
        FileNotFoundError: If any model file is missing.
        RuntimeError: If any model file cannot be parsed.
    """
    classifiers = ClassifierSet(
        haar_face=CascadeDetector.from_file(config.haar_face_path, config, "haar_face"),
        eye=CascadeDetector.from_file(config.eye_path, config, "eye"),
        lbp_face=CascadeDetector.from_file(config.lbp_face_path, config, "lbp_face"),
    )
    logger.info(
        "Classifiers loaded (scale_factor=%.2f, min_neighbors=%d)",
        config.scale_factor,
        config.min_neighbors,
    )
    return classifiers
