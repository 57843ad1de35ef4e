"""
Detection pipeline — one frame in, one annotated frame out.

Sequence per frame:
    1. Convert the BGR frame to grayscale once.
    2. Run the Haar face detector; keep faces whose width passes the
       size filter, and search each kept face for eyes.
    3. Run the LBP face detector over the same grayscale image,
       unconditionally and without a size filter.
    4. Draw every result onto the frame.

Results are ordered: each Haar face followed by its eyes, then all LBP
faces. Nothing is merged or deduplicated across detectors, so one face
may be reported by both.

Constraints:
    - The frame is mutated in place and returned.
    - Detectors only ever see grayscale data.
    - No state survives between calls.
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from faceoverlay.config import SizeFilterPolicy, VisualizationConfig
from faceoverlay.detection import Box, DetectionResult, DetectionSource
from faceoverlay.detector import ClassifierSet, Detector
from faceoverlay.visualizer import annotate

logger = logging.getLogger(__name__)


def to_gray(frame: np.ndarray) -> np.ndarray:
    """Convert a BGR frame to a single-channel intensity image.

    Raises:
        TypeError: If frame is not a numpy ndarray.
        ValueError: If frame is empty or not 3-channel.
    """
    if not isinstance(frame, np.ndarray):
        raise TypeError(
            f"Expected frame to be a numpy ndarray, got {type(frame).__name__}."
        )

    if frame.size == 0:
        raise ValueError("Frame is empty (zero size).")

    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(
            f"Expected a BGR frame with shape (H, W, 3), got {frame.shape}."
        )

    return cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)


def find_eyes(gray: np.ndarray, face: Box, eye_detector: Detector) -> List[Box]:
    """Search a face region for eyes.

    The detector sees a view of ``gray`` bounded by ``face``; its boxes
    are local to that region and are shifted back to frame coordinates
    by the face's origin.
    """
    roi = gray[face.y1:face.y2, face.x1:face.x2]
    if roi.size == 0:
        return []
    return [eye.offset(face.x1, face.y1) for eye in eye_detector.detect(roi)]


def detect_all(
    gray: np.ndarray,
    classifiers: ClassifierSet,
    policy: SizeFilterPolicy,
) -> List[DetectionResult]:
    """Run both face passes and the nested eye search over one image."""
    results: List[DetectionResult] = []

    for face in classifiers.haar_face.detect(gray):
        if not policy.accepts(face.width):
            logger.debug("Dropping Haar face of width %d", face.width)
            continue

        results.append(DetectionResult.for_box(face, DetectionSource.HAAR_FACE))
        for eye in find_eyes(gray, face, classifiers.eye):
            results.append(DetectionResult.for_box(eye, DetectionSource.EYE))

    # Independent pass; LBP faces are never size filtered.
    for face in classifiers.lbp_face.detect(gray):
        results.append(DetectionResult.for_box(face, DetectionSource.LBP_FACE))

    return results


def run_pipeline(
    frame: np.ndarray,
    classifiers: ClassifierSet,
    policy: SizeFilterPolicy,
    visualization: Optional[VisualizationConfig] = None,
) -> Tuple[np.ndarray, List[DetectionResult]]:
    """Detect faces and eyes in ``frame`` and annotate it.

    Args:
        frame: BGR image, mutated in place.
        classifiers: Haar face, eye, and LBP face detectors.
        policy: Width bounds for Haar faces.
        visualization: Rendering parameters; defaults if None.

    Returns:
        The annotated frame and the ordered list of detections.
    """
    gray = to_gray(frame)
    detections = detect_all(gray, classifiers, policy)
    annotate(frame, detections, visualization)

    logger.debug(
        "Pipeline produced %d detections (%d haar, %d eye, %d lbp)",
        len(detections),
        sum(d.source is DetectionSource.HAAR_FACE for d in detections),
        sum(d.source is DetectionSource.EYE for d in detections),
        sum(d.source is DetectionSource.LBP_FACE for d in detections),
    )
    return frame, detections
