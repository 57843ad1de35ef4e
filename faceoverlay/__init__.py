"""
Face Overlay — live face and eye detection served over HTTP.

Public API:
    - run_pipeline: Detect, filter, remap, and annotate one frame.
    - ClassifierSet / CascadeDetector: The detectors the pipeline uses.
    - DetectionResult / Box / DetectionSource: Pipeline output types.
    - create_app / open_context: HTTP server wiring.

Usage:
    from faceoverlay import load_config, open_context, create_app

    config = load_config()
    with open_context(config) as context:
        create_app(context).run(host=config.server.host, port=config.server.port)
"""

from faceoverlay.config import AppConfig, SizeFilterPolicy, load_config
from faceoverlay.context import AppContext, open_context
from faceoverlay.detection import Box, DetectionResult, DetectionSource
from faceoverlay.detector import CascadeDetector, ClassifierSet, Detector
from faceoverlay.pipeline import run_pipeline
from faceoverlay.server import create_app

__all__ = [
    "AppConfig",
    "AppContext",
    "Box",
    "CascadeDetector",
    "ClassifierSet",
    "DetectionResult",
    "DetectionSource",
    "Detector",
    "SizeFilterPolicy",
    "create_app",
    "load_config",
    "open_context",
    "run_pipeline",
]
