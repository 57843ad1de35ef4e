"""
Visualization for the face overlay pipeline.

Responsibility:
    Draw bounding boxes and size labels onto a frame in place. The
    stroke color is a pure function of the detection source.

Non-goals:
    - No file writing, window management, or display logic.
    - No detection or model logic.
"""

from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from faceoverlay.config import VisualizationConfig
from faceoverlay.detection import DetectionResult, DetectionSource

# BGR
GREEN = (0, 255, 0)
BLUE = (255, 0, 0)
RED = (0, 0, 255)

SOURCE_COLORS: Dict[DetectionSource, Tuple[int, int, int]] = {
    DetectionSource.HAAR_FACE: GREEN,
    DetectionSource.EYE: BLUE,
    DetectionSource.LBP_FACE: RED,
}

_FONT = cv2.FONT_HERSHEY_PLAIN


def color_for(source: DetectionSource) -> Tuple[int, int, int]:
    """Return the stroke color for a detection source."""
    return SOURCE_COLORS[source]


def label_anchor(
    result: DetectionResult,
    config: VisualizationConfig,
) -> Tuple[int, int]:
    """Return the text origin (bottom-left) for a detection's label.

    The label sits ``label_offset`` pixels above the box's top-left
    corner. Near the top edge the baseline is clamped so the whole text
    height stays inside the frame.
    """
    (_, text_h), _ = cv2.getTextSize(
        result.label, _FONT, config.font_scale, config.thickness
    )
    x = result.box.x1
    y = max(result.box.y1 - config.label_offset, text_h)
    return x, y


def annotate(
    frame: np.ndarray,
    detections: List[DetectionResult],
    config: Optional[VisualizationConfig] = None,
) -> None:
    """Draw every detection onto ``frame`` (modified in place).

    Args:
        frame: BGR image to draw on.
        detections: Results in frame-global coordinates.
        config: Stroke width, font scale and label offset.
    """
    config = config or VisualizationConfig()

    for det in detections:
        color = color_for(det.source)

        cv2.rectangle(
            frame,
            (det.box.x1, det.box.y1),
            (det.box.x2, det.box.y2),
            color=color,
            thickness=config.thickness,
        )

        cv2.putText(
            frame,
            det.label,
            label_anchor(det, config),
            _FONT,
            config.font_scale,
            color,
            config.thickness,
        )
