"""
Tests for camera discovery with OpenCV's VideoCapture replaced
"""

import cv2
import pytest

from face_picking import camera_utils
from face_picking.camera_utils import CameraInfo, initialize_camera, list_cameras, select_camera_index


class FakeVideoCapture:
    """Stands in for cv2.VideoCapture; ``devices`` maps index -> (width, height, fps, readable)."""

    devices = {}
    opened = []

    def __init__(self, index):
        self.index = index
        self.device = self.devices.get(index)
        self.released = False
        self.settings = {}
        FakeVideoCapture.opened.append(self)

    def isOpened(self):
        return self.device is not None

    def read(self):
        if self.device and self.device[3]:
            return True, object()
        return False, None

    def get(self, prop):
        width, height, fps, _ = self.device
        return {cv2.CAP_PROP_FRAME_WIDTH: width, cv2.CAP_PROP_FRAME_HEIGHT: height, cv2.CAP_PROP_FPS: fps}[prop]

    def set(self, prop, value):
        self.settings[prop] = value
        return True

    def release(self):
        self.released = True


@pytest.fixture
def fake_cameras(monkeypatch):
    FakeVideoCapture.devices = {}
    FakeVideoCapture.opened = []
    monkeypatch.setattr(camera_utils.cv2, "VideoCapture", FakeVideoCapture)
    return FakeVideoCapture


def test_list_cameras_skips_unreadable_devices(fake_cameras):
    fake_cameras.devices = {0: (640, 480, 30, True), 1: (1280, 720, 0, False), 3: (1920, 1080, 60, True)}
    cameras = list_cameras(max_index=5)
    assert cameras == [CameraInfo(0, 640, 480, 30), CameraInfo(3, 1920, 1080, 60)]
    assert all(cap.released for cap in fake_cameras.opened)


def test_unknown_fps_defaults_to_30(fake_cameras):
    fake_cameras.devices = {0: (640, 480, 0, True)}
    assert list_cameras(max_index=1)[0].fps == 30


def test_select_prefers_resolution_then_lower_index():
    cameras = [CameraInfo(2, 1280, 720, 30), CameraInfo(0, 1280, 720, 30), CameraInfo(1, 640, 480, 30)]
    assert select_camera_index(cameras) == 0


def test_select_with_no_cameras(fake_cameras):
    assert select_camera_index() is None


def test_initialize_camera_applies_resolution(fake_cameras):
    fake_cameras.devices = {1: (640, 480, 30, True)}
    cap = initialize_camera(camera_index=1, width=800, height=600)
    assert cap.settings[cv2.CAP_PROP_FRAME_WIDTH] == 800
    assert cap.settings[cv2.CAP_PROP_FRAME_HEIGHT] == 600


def test_initialize_camera_releases_unopened_device(fake_cameras):
    assert initialize_camera(camera_index=4) is None
    assert fake_cameras.opened[-1].released is True


def test_initialize_camera_auto_selects(fake_cameras):
    fake_cameras.devices = {0: (640, 480, 30, True), 2: (1280, 720, 30, True)}
    cap = initialize_camera()
    assert cap.index == 2
