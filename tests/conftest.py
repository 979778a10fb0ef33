"""
Pytest configuration and shared fixtures for face picking tests
"""

import logging

import numpy as np
import pytest

from face_picking.landmarks import FACE_LANDMARK_COUNT, HAND_LANDMARK_COUNT, INDEX_FINGER_TIP, FrameLandmarks

# Configure logging for all tests
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

FAR_AWAY = (5.0, 5.0)


def make_face(points=None, count=FACE_LANDMARK_COUNT):
    """Face landmark array with every point far off-screen except ``points``."""
    face = np.zeros((count, 3))
    face[:, :2] = FAR_AWAY
    for index, (x, y) in (points or {}).items():
        face[index, :2] = (x, y)
    return face


def make_hand(tip, count=HAND_LANDMARK_COUNT):
    """Hand landmark array with only the index fingertip placed."""
    hand = np.zeros((count, 3))
    hand[:, :2] = (-5.0, -5.0)
    hand[INDEX_FINGER_TIP, :2] = tip
    return hand


def make_frame(faces=(), hands=(), frame_time_ms=None):
    return FrameLandmarks.from_points(faces=faces, hands=hands, frame_time_ms=frame_time_ms)


@pytest.fixture
def face_factory():
    return make_face


@pytest.fixture
def hand_factory():
    return make_hand


@pytest.fixture
def frame_factory():
    return make_frame


def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line("markers", "websocket: marks tests that test websocket functionality")
    config.addinivalue_line("markers", "slow: marks tests as slow (may take more than 10 seconds)")
