"""
Configuration management for the face overlay server.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The server MUST start with zero configuration (safe defaults only)
      on a host where OpenCV's cascade data is installed.
    - Missing or invalid values fail early and loudly.
    - No detection logic, I/O, or model loading belongs here.

Non-goals:
    - No dynamic reloading.
    - No database-backed or remote configuration.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: faceoverlay/config.py → project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CameraConfig:
    """Capture device configuration.

    Attributes:
        device_index: Index of the video device to open.
        jpeg_quality: JPEG quality (1-100) used when encoding responses.
    """

    device_index: int = 0
    jpeg_quality: int = 95


@dataclass(frozen=True)
class ClassifierConfig:
    """Cascade model files and detection parameters.

    Attributes:
        haar_face_path: Primary (Haar) frontal face cascade.
        eye_path: Haar eye cascade, searched inside accepted faces.
        lbp_face_path: Secondary (LBP) frontal face cascade.
        scale_factor: Image pyramid step passed to detectMultiScale.
        min_neighbors: Neighbour count a candidate needs to be kept.

    Relative paths are resolved against the project root first and then
    against the OpenCV data directories (the wheel's bundled Haar
    cascades, then system and Homebrew share/opencv4 installs).
    """

    haar_face_path: str = "haarcascade_frontalface_default.xml"
    eye_path: str = "haarcascade_eye.xml"
    lbp_face_path: str = "models/lbpcascade_frontalface_improved.xml"
    scale_factor: float = 1.1
    min_neighbors: int = 3


@dataclass(frozen=True)
class SizeFilterPolicy:
    """Width bounds applied to Haar face detections only.

    A face is accepted when ``min_side < width < max_side``; boxes exactly
    on either bound are rejected. LBP detections are never filtered.
    """

    min_side: int = 200
    max_side: int = 600

    def accepts(self, width: int) -> bool:
        return self.min_side < width < self.max_side


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listen address."""

    host: str = "127.0.0.1"
    port: int = 8888


@dataclass(frozen=True)
class VisualizationConfig:
    """Annotation rendering parameters.

    Attributes:
        thickness: Stroke width for rectangles and label text.
        font_scale: Scale factor for label text.
        label_offset: Distance in pixels between the label baseline and
                      the top edge of its box.
    """

    thickness: int = 2
    font_scale: float = 1.0
    label_offset: int = 10


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    camera: CameraConfig = field(default_factory=CameraConfig)
    classifiers: ClassifierConfig = field(default_factory=ClassifierConfig)
    size_filter: SizeFilterPolicy = field(default_factory=SizeFilterPolicy)
    server: ServerConfig = field(default_factory=ServerConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    if config.camera.device_index < 0:
        raise ValueError(
            f"camera.device_index must be non-negative, "
            f"got {config.camera.device_index}."
        )

    if not (1 <= config.camera.jpeg_quality <= 100):
        raise ValueError(
            f"camera.jpeg_quality must be in [1, 100], "
            f"got {config.camera.jpeg_quality}."
        )

    if config.classifiers.scale_factor <= 1.0:
        raise ValueError(
            f"classifiers.scale_factor must be greater than 1.0, "
            f"got {config.classifiers.scale_factor}."
        )

    if config.classifiers.min_neighbors < 0:
        raise ValueError(
            f"classifiers.min_neighbors must be non-negative, "
            f"got {config.classifiers.min_neighbors}."
        )

    if config.size_filter.min_side < 0:
        raise ValueError(
            f"size_filter.min_side must be non-negative, "
            f"got {config.size_filter.min_side}."
        )

    if config.size_filter.min_side >= config.size_filter.max_side:
        raise ValueError(
            f"size_filter.min_side ({config.size_filter.min_side}) must be "
            f"less than size_filter.max_side ({config.size_filter.max_side})."
        )

    if not (1 <= config.server.port <= 65535):
        raise ValueError(
            f"server.port must be in [1, 65535], got {config.server.port}."
        )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )

    if config.visualization.font_scale <= 0:
        raise ValueError(
            f"visualization.font_scale must be positive, "
            f"got {config.visualization.font_scale}."
        )

    if config.visualization.label_offset < 0:
        raise ValueError(
            f"visualization.label_offset must be non-negative, "
            f"got {config.visualization.label_offset}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _build_camera_config(raw: dict) -> CameraConfig:
    """Build CameraConfig from a raw YAML dict."""
    kwargs = {}
    if "device_index" in raw:
        kwargs["device_index"] = int(raw["device_index"])
    if "jpeg_quality" in raw:
        kwargs["jpeg_quality"] = int(raw["jpeg_quality"])
    return CameraConfig(**kwargs)


def _build_classifier_config(raw: dict) -> ClassifierConfig:
    """Build ClassifierConfig from a raw YAML dict."""
    kwargs = {}
    for key in ("haar_face_path", "eye_path", "lbp_face_path"):
        if key in raw:
            kwargs[key] = str(raw[key])
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "min_neighbors" in raw:
        kwargs["min_neighbors"] = int(raw["min_neighbors"])
    return ClassifierConfig(**kwargs)


def _build_size_filter(raw: dict) -> SizeFilterPolicy:
    """Build SizeFilterPolicy from a raw YAML dict."""
    kwargs = {}
    if "min_side" in raw:
        kwargs["min_side"] = int(raw["min_side"])
    if "max_side" in raw:
        kwargs["max_side"] = int(raw["max_side"])
    return SizeFilterPolicy(**kwargs)


def _build_server_config(raw: dict) -> ServerConfig:
    """Build ServerConfig from a raw YAML dict."""
    kwargs = {}
    if "host" in raw:
        kwargs["host"] = str(raw["host"])
    if "port" in raw:
        kwargs["port"] = int(raw["port"])
    return ServerConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "font_scale" in raw:
        kwargs["font_scale"] = float(raw["font_scale"])
    if "label_offset" in raw:
        kwargs["label_offset"] = int(raw["label_offset"])
    return VisualizationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACE_OVERLAY_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACE_OVERLAY_CAMERA_DEVICE_INDEX=1
        FACE_OVERLAY_SIZE_FILTER_MIN_SIDE=150
    """
    env_map = {
        f"{_ENV_PREFIX}CAMERA_DEVICE_INDEX": ("camera", "device_index"),
        f"{_ENV_PREFIX}CAMERA_JPEG_QUALITY": ("camera", "jpeg_quality"),
        f"{_ENV_PREFIX}CLASSIFIERS_HAAR_FACE_PATH": ("classifiers", "haar_face_path"),
        f"{_ENV_PREFIX}CLASSIFIERS_EYE_PATH": ("classifiers", "eye_path"),
        f"{_ENV_PREFIX}CLASSIFIERS_LBP_FACE_PATH": ("classifiers", "lbp_face_path"),
        f"{_ENV_PREFIX}CLASSIFIERS_SCALE_FACTOR": ("classifiers", "scale_factor"),
        f"{_ENV_PREFIX}CLASSIFIERS_MIN_NEIGHBORS": ("classifiers", "min_neighbors"),
        f"{_ENV_PREFIX}SIZE_FILTER_MIN_SIDE": ("size_filter", "min_side"),
        f"{_ENV_PREFIX}SIZE_FILTER_MAX_SIDE": ("size_filter", "max_side"),
        f"{_ENV_PREFIX}SERVER_HOST": ("server", "host"),
        f"{_ENV_PREFIX}SERVER_PORT": ("server", "port"),
        f"{_ENV_PREFIX}VISUALIZATION_THICKNESS": ("visualization", "thickness"),
        f"{_ENV_PREFIX}VISUALIZATION_FONT_SCALE": ("visualization", "font_scale"),
        f"{_ENV_PREFIX}VISUALIZATION_LABEL_OFFSET": ("visualization", "label_offset"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Environment variables > YAML file > Hard-coded defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the server runs entirely on defaults.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Build typed configs ---
    config = AppConfig(
        camera=_build_camera_config(raw.get("camera", {})),
        classifiers=_build_classifier_config(raw.get("classifiers", {})),
        size_filter=_build_size_filter(raw.get("size_filter", {})),
        server=_build_server_config(raw.get("server", {})),
        visualization=_build_visualization_config(raw.get("visualization", {})),
    )

    # --- Validate ---
    validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
