"""
Tests for JPEG encoding.
"""

import cv2
import numpy as np
import pytest

from faceoverlay import encoder as encoder_module
from faceoverlay.encoder import encode_jpeg
from faceoverlay.errors import EncodeError


def test_encode_produces_decodable_jpeg():
    frame = np.zeros((48, 64, 3), dtype=np.uint8)
    frame[:, :, 1] = 255

    data = encode_jpeg(frame)

    assert data[:2] == b"\xff\xd8"
    decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (48, 64, 3)


def test_encoder_failure_raises(monkeypatch):
    monkeypatch.setattr(encoder_module.cv2, "imencode", lambda *a, **k: (False, None))

    with pytest.raises(EncodeError) as excinfo:
        encode_jpeg(np.zeros((8, 8, 3), dtype=np.uint8))
    assert excinfo.value.status_code == 500


def test_opencv_error_wrapped(monkeypatch):
    def boom(*args, **kwargs):
        raise cv2.error("bad frame")

    monkeypatch.setattr(encoder_module.cv2, "imencode", boom)

    with pytest.raises(EncodeError, match="bad frame"):
        encode_jpeg(np.zeros((8, 8, 3), dtype=np.uint8))
