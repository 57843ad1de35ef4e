"""
Tests for the camera capture wrapper.

cv2.VideoCapture is replaced with a fake so no device is needed.
"""

import threading
import time

import numpy as np
import pytest

from faceoverlay import capture as capture_module
from faceoverlay.capture import CameraCapture
from faceoverlay.errors import DeviceUnavailableError


class FakeVideoCapture:
    instances = []

    def __init__(self, index, opened=True, ok=True):
        self.index = index
        self.opened = opened
        self.ok = ok
        self.released = False
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()
        FakeVideoCapture.instances.append(self)

    def isOpened(self):
        return self.opened

    def read(self):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(0.01)
        with self._guard:
            self.active -= 1
        if not self.ok:
            return False, None
        return True, np.zeros((4, 4, 3), dtype=np.uint8)

    def release(self):
        self.released = True


@pytest.fixture
def fake_cv2(monkeypatch):
    FakeVideoCapture.instances = []

    def install(**kwargs):
        monkeypatch.setattr(
            capture_module.cv2,
            "VideoCapture",
            lambda index: FakeVideoCapture(index, **kwargs),
        )
        return FakeVideoCapture.instances

    return install


def test_open_failure_raises_and_releases(fake_cv2):
    instances = fake_cv2(opened=False)

    with pytest.raises(RuntimeError, match="device 3"):
        CameraCapture(3)

    assert instances[0].released


def test_read_returns_frame(fake_cv2):
    fake_cv2()
    camera = CameraCapture(0)

    frame = camera.read()

    assert frame.shape == (4, 4, 3)


def test_failed_read_raises_device_unavailable(fake_cv2):
    fake_cv2(ok=False)
    camera = CameraCapture(0)

    with pytest.raises(DeviceUnavailableError) as excinfo:
        camera.read()
    assert excinfo.value.status_code == 503


def test_read_after_release_raises(fake_cv2):
    instances = fake_cv2()
    with CameraCapture(0) as camera:
        pass

    assert instances[0].released
    with pytest.raises(DeviceUnavailableError, match="closed"):
        camera.read()


def test_release_is_idempotent(fake_cv2):
    fake_cv2()
    camera = CameraCapture(0)
    camera.release()
    camera.release()


def test_concurrent_reads_are_serialized(fake_cv2):
    """Only one thread touches the device at a time."""
    instances = fake_cv2()
    camera = CameraCapture(0)

    threads = [threading.Thread(target=camera.read) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert instances[0].max_active == 1
