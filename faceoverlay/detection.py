"""
Detection data types.

Defines the axis-aligned box used throughout the pipeline, the detection
source tags, and the DetectionResult produced per request. These are
frozen containers; coordinate remapping is the only behavior they carry.

Non-goals:
    - No rendering logic.
    - No detector invocation.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class Box:
    """An axis-aligned box in pixel coordinates.

    Attributes:
        x1: Left edge (min x).
        y1: Top edge (min y).
        x2: Right edge (max x).
        y2: Bottom edge (max y).

    Invariant: x1 <= x2 and y1 <= y2.
    """

    x1: int
    y1: int
    x2: int
    y2: int

    def __post_init__(self) -> None:
        if self.x2 < self.x1 or self.y2 < self.y1:
            raise ValueError(
                f"Inverted box: ({self.x1}, {self.y1}) -> ({self.x2}, {self.y2})."
            )

    @classmethod
    def from_xywh(cls, x: int, y: int, w: int, h: int) -> "Box":
        """Build a box from an origin and size, as cascades report them."""
        x, y, w, h = int(x), int(y), int(w), int(h)
        return cls(x1=x, y1=y, x2=x + w, y2=y + h)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    def offset(self, dx: int, dy: int) -> "Box":
        """Return this box translated by (dx, dy), both corners included."""
        return Box(
            x1=self.x1 + dx,
            y1=self.y1 + dy,
            x2=self.x2 + dx,
            y2=self.y2 + dy,
        )


class DetectionSource(Enum):
    """Which detector produced a result."""

    HAAR_FACE = "haar_face"
    EYE = "eye"
    LBP_FACE = "lbp_face"


def size_label(box: Box) -> str:
    """Return the annotation label for a box, e.g. ``Size: 250x250``."""
    return f"Size: {box.width}x{box.height}"


@dataclass(frozen=True, slots=True)
class DetectionResult:
    """A single annotated detection in frame-global coordinates."""

    box: Box
    label: str
    source: DetectionSource

    @classmethod
    def for_box(cls, box: Box, source: DetectionSource) -> "DetectionResult":
        return cls(box=box, label=size_label(box), source=source)
