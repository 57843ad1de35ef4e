"""
Tests for startup and shutdown of the application context.
"""

import pytest

from conftest import FakeCapture, make_classifiers
from faceoverlay import context as context_module
from faceoverlay.config import AppConfig, CameraConfig
from faceoverlay.context import open_context


@pytest.fixture
def fake_camera(monkeypatch):
    opened = []

    def factory(device_index):
        camera = FakeCapture()
        camera.device_index = device_index
        opened.append(camera)
        return camera

    monkeypatch.setattr(context_module, "CameraCapture", factory)
    return opened


def test_context_releases_camera_on_exit(fake_camera, monkeypatch):
    classifiers = make_classifiers()
    monkeypatch.setattr(context_module, "load_classifiers", lambda config: classifiers)
    config = AppConfig(camera=CameraConfig(device_index=2))

    with open_context(config) as ctx:
        assert ctx.classifiers is classifiers
        assert ctx.capture.device_index == 2
        assert not fake_camera[0].released

    assert fake_camera[0].released


def test_classifier_failure_releases_camera(fake_camera, monkeypatch):
    """A cascade failing to load after the camera opened still frees it."""
    def fail(config):
        raise FileNotFoundError("haarcascade_eye.xml")

    monkeypatch.setattr(context_module, "load_classifiers", fail)

    with pytest.raises(FileNotFoundError):
        with open_context(AppConfig()):
            pass

    assert fake_camera[0].released


def test_camera_failure_skips_classifier_load(monkeypatch):
    loaded = []

    def no_camera(device_index):
        raise RuntimeError(f"Failed to open webcam device {device_index}.")

    monkeypatch.setattr(context_module, "CameraCapture", no_camera)
    monkeypatch.setattr(context_module, "load_classifiers", loaded.append)

    with pytest.raises(RuntimeError, match="webcam device 0"):
        with open_context(AppConfig()):
            pass

    assert loaded == []
