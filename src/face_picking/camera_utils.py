"""
Camera utilities for dynamic camera detection
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class MockCamera:
    """Mock camera for CI/testing environments without hardware camera

    Mimics the subset of ``cv2.VideoCapture`` the scheduler uses. Each frame
    can be delivered ``repeat`` times with the same position, the way some
    capture backends hand out a decoded frame more than once.
    """

    def __init__(self, width=640, height=480, fps=30, repeat=1, max_frames=None):
        self.width = width
        self.height = height
        self.fps = fps
        self.repeat = max(1, repeat)
        self.max_frames = max_frames
        self.frame_count = 0
        self._reads = 0
        self._frame = None
        self._opened = True
        logger.info(f"MockCamera initialized: {width}x{height}")

    def isOpened(self):
        return self._opened

    def read(self):
        """Generate a mock frame with some dynamic content"""
        if not self._opened:
            return False, None

        if self._reads % self.repeat == 0:
            if self.max_frames is not None and self.frame_count >= self.max_frames:
                return False, None
            self.frame_count += 1
            self._frame = self._render(self.frame_count)
        self._reads += 1
        return True, self._frame.copy()

    def _render(self, frame_number):
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        gradient = np.linspace(0, 1, self.height)[:, None]
        frame[:, :, 0] = (50 + gradient * 100).astype(np.uint8)
        frame[:, :, 1] = (30 + gradient * 80).astype(np.uint8)
        frame[:, :, 2] = (20 + gradient * 60).astype(np.uint8)

        # Face-like blob and a moving hand-like blob
        face_x = self.width // 2 + int(50 * np.sin(frame_number * 0.1))
        cv2.circle(frame, (face_x, self.height // 3), 80, (100, 150, 200), -1)
        hand_x = self.width // 3 + int(30 * np.cos(frame_number * 0.08))
        hand_y = self.height // 2 + int(20 * np.sin(frame_number * 0.12))
        cv2.circle(frame, (hand_x, hand_y), 40, (150, 100, 100), -1)
        return frame

    def get(self, prop):
        if prop == cv2.CAP_PROP_POS_MSEC:
            return self.frame_count * 1000.0 / self.fps
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return float(self.width)
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return float(self.height)
        if prop == cv2.CAP_PROP_FPS:
            return float(self.fps)
        return 0.0

    def set(self, prop, value):
        return False

    def release(self):
        self._opened = False


@dataclass(frozen=True)
class CameraInfo:
    """What a working camera reports about itself."""

    index: int
    width: int
    height: int
    fps: int

    @property
    def pixels(self) -> int:
        return self.width * self.height


def _describe_camera(index: int) -> Optional[CameraInfo]:
    cap = cv2.VideoCapture(index)
    try:
        if not cap.isOpened():
            return None
        # Some backends open devices they cannot actually read from
        ret, _ = cap.read()
        if not ret:
            logger.debug(f"Camera {index} opened but returned no frame")
            return None
        fps = cap.get(cv2.CAP_PROP_FPS)
        return CameraInfo(
            index=index,
            width=int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            height=int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            fps=int(fps) if fps > 0 else 30,
        )
    finally:
        cap.release()


def list_cameras(max_index: int = 10) -> List[CameraInfo]:
    """Return every camera index below ``max_index`` that delivers frames."""
    return [info for info in map(_describe_camera, range(max_index)) if info is not None]


def select_camera_index(cameras: Optional[List[CameraInfo]] = None) -> Optional[int]:
    """Pick the camera with the most pixels; the lower index wins a tie."""
    if cameras is None:
        cameras = list_cameras()
    if not cameras:
        logger.warning("No cameras found")
        return None

    best = max(cameras, key=lambda info: (info.pixels, -info.index))
    logger.info(f"Selected camera {best.index}: {best.width}x{best.height} @ {best.fps}fps")
    return best.index


def initialize_camera(camera_index=None, width=640, height=480):
    """Initialize camera with given or auto-detected index"""
    if camera_index is None:
        camera_index = select_camera_index()
        if camera_index is None:
            return None

    cap = cv2.VideoCapture(camera_index)
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
    cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

    if not cap.isOpened():
        logger.error(f"Could not open camera {camera_index}")
        cap.release()
        return None

    return cap
