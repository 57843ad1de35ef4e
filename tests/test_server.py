"""
Tests for the HTTP surface, using Flask's test client and fakes.
"""

import logging

import cv2
import numpy as np
import pytest

from conftest import FakeCapture
from faceoverlay import server as server_module
from faceoverlay.context import AppContext
from faceoverlay.errors import EncodeError
from faceoverlay.server import create_app


@pytest.fixture
def client(context):
    return create_app(context).test_client()


def test_get_returns_annotated_jpeg(client, context):
    response = client.get("/")

    assert response.status_code == 200
    assert response.mimetype == "image/jpeg"
    assert response.data[:2] == b"\xff\xd8"

    image = cv2.imdecode(np.frombuffer(response.data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert image.shape == (720, 1280, 3)
    assert context.classifiers.haar_face.calls == 1
    assert context.classifiers.eye.calls == 1
    assert context.classifiers.lbp_face.calls == 1


def test_device_unavailable_returns_503(context, caplog):
    """The pipeline never runs and no body is written."""
    failing = AppContext(
        config=context.config,
        capture=FakeCapture(fail=True),
        classifiers=context.classifiers,
    )
    client = create_app(failing).test_client()

    with caplog.at_level(logging.ERROR, logger="faceoverlay.server"):
        response = client.get("/")

    assert response.status_code == 503
    assert response.data == b""
    assert context.classifiers.haar_face.calls == 0
    assert context.classifiers.lbp_face.calls == 0
    assert "device 0 closed" in caplog.text


def test_encode_failure_returns_500(client, monkeypatch, caplog):
    def fail(frame, quality):
        raise EncodeError("encoder rejected frame")

    monkeypatch.setattr(server_module, "encode_jpeg", fail)

    with caplog.at_level(logging.ERROR, logger="faceoverlay.server"):
        response = client.get("/")

    assert response.status_code == 500
    assert response.data == b""
    assert "encoder rejected frame" in caplog.text


def test_each_request_reads_a_fresh_frame(client, context):
    client.get("/")
    client.get("/")

    # Drawing on one response's frame never leaks into the source frame.
    assert not context.capture.frame.any()
    assert context.classifiers.haar_face.calls == 2


def test_only_get_is_routed(client):
    assert client.post("/").status_code == 405
    assert client.get("/other").status_code == 404
