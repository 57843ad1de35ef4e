"""
HTTP surface for the face overlay server.

A single route, ``GET /``, captures one frame, runs the detection
pipeline over it, and answers with the annotated JPEG.

Failure mapping:
    - DeviceUnavailableError → 503, empty body, pipeline not run.
    - EncodeError            → 500, empty body.
"""

import logging

from flask import Flask, Response

from faceoverlay.context import AppContext
from faceoverlay.encoder import encode_jpeg
from faceoverlay.errors import OverlayError
from faceoverlay.pipeline import run_pipeline

logger = logging.getLogger(__name__)

JPEG_MIMETYPE = "image/jpeg"


def render_frame(context: AppContext) -> bytes:
    """Capture, detect, annotate, and encode one frame.

    Raises:
        DeviceUnavailableError: If the capture source has no frame.
        EncodeError: If the annotated frame cannot be encoded.
    """
    config = context.config

    frame = context.capture.read()
    frame, detections = run_pipeline(
        frame,
        context.classifiers,
        config.size_filter,
        config.visualization,
    )
    logger.debug("Annotated %d detections", len(detections))

    return encode_jpeg(frame, config.camera.jpeg_quality)


def create_app(context: AppContext) -> Flask:
    """Build the Flask application bound to a started AppContext."""
    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def overlay() -> Response:
        try:
            body = render_frame(context)
        except OverlayError as e:
            logger.error("Request failed (%d): %s", e.status_code, e)
            return Response(status=e.status_code)

        return Response(body, status=200, mimetype=JPEG_MIMETYPE)

    return app
