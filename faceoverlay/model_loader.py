"""
Cascade model loading for the face overlay server.

Responsibility:
    Resolve cascade model files on disk and return loaded
    cv2.CascadeClassifier objects.

Non-goals:
    - No detection or frame-level logic.
    - No automatic model downloading.
    - No fallback to alternative models.

Failure behavior:
    - Missing model files raise FileNotFoundError listing every
      location that was searched.
    - Files that OpenCV cannot parse raise RuntimeError.
"""

import logging
import sys
from pathlib import Path
from typing import List

import cv2

from faceoverlay.config import get_project_root

logger = logging.getLogger(__name__)

# Install prefixes whose share/opencv4 holds the haarcascades/ and
# lbpcascades/ data directories of a system or Homebrew OpenCV build.
_SYSTEM_PREFIXES = ("/usr", "/usr/local", "/opt/homebrew", "/opt/local")
_CASCADE_SUBDIRS = ("haarcascades", "lbpcascades")


def _bundled_cascade_dir() -> Path:
    """Return OpenCV's bundled haarcascades directory."""
    return Path(cv2.data.haarcascades)


def cascade_search_dirs() -> List[Path]:
    """Return the OpenCV data directories searched for relative names.

    Order: the wheel's bundled directory, then the interpreter prefix,
    then common system and Homebrew prefixes. The wheel only ships Haar
    cascades; LBP cascades come from a system OpenCV install.
    """
    dirs = [_bundled_cascade_dir()]

    prefixes = [sys.prefix] + list(_SYSTEM_PREFIXES)
    for prefix in prefixes:
        for sub in _CASCADE_SUBDIRS:
            dirs.append(Path(prefix) / "share" / "opencv4" / sub)

    unique: List[Path] = []
    for d in dirs:
        if d not in unique:
            unique.append(d)
    return unique


def resolve_cascade_path(path: str) -> Path:
    """Locate a cascade file.

    Absolute paths are used as given. Relative paths are tried against
    the project root, then against every OpenCV data directory from
    cascade_search_dirs().

    Raises:
        FileNotFoundError: If no candidate exists.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        candidates: List[Path] = [candidate]
    else:
        candidates = [get_project_root() / candidate]
        candidates += [d / candidate.name for d in cascade_search_dirs()]

    for resolved in candidates:
        if resolved.is_file():
            return resolved

    searched = "\n".join(f"  - {c}" for c in candidates)
    raise FileNotFoundError(
        f"Cascade model not found: '{path}'.\n"
        f"  Searched:\n{searched}\n"
        f"  Provide the file or update the 'classifiers' section of your config."
    )


def load_cascade(path: str) -> cv2.CascadeClassifier:
    """Load a cascade classifier from disk.

    Args:
        path: Model file path (absolute, project-relative, or the name
              of a cascade bundled with OpenCV).

    Returns:
        A loaded, non-empty cv2.CascadeClassifier.

    Raises:
        FileNotFoundError: If the model file does not exist.
        RuntimeError: If OpenCV fails to parse the model file.
    """
    resolved = resolve_cascade_path(path)

    logger.info("Loading cascade: %s", resolved)
    classifier = cv2.CascadeClassifier()
    try:
        loaded = classifier.load(str(resolved))
    except cv2.error as e:
        raise RuntimeError(
            f"Failed to parse cascade classifier {resolved}.\n"
            f"  OpenCV error: {e}"
        ) from e

    if not loaded or classifier.empty():
        raise RuntimeError(
            f"Failed to load cascade classifier from {resolved}. "
            f"Ensure the file is a valid OpenCV cascade XML."
        )

    return classifier
