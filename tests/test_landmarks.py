"""
Tests for landmark conversion and the MediaPipe landmark source
"""

from types import SimpleNamespace

import numpy as np
import pytest

from face_picking.errors import MalformedLandmarkData
from face_picking.landmarks import FrameLandmarks, Landmark, as_landmark_set, landmark_at


def test_from_mediapipe_like_objects():
    points = [SimpleNamespace(x=0.1, y=0.2, z=-0.05), SimpleNamespace(x=0.3, y=0.4, z=0.0)]
    array = as_landmark_set(points)
    assert array.shape == (2, 3)
    assert array[0].tolist() == pytest.approx([0.1, 0.2, -0.05])


def test_from_tuples_pads_missing_depth():
    array = as_landmark_set([(0.1, 0.2), (0.3, 0.4)])
    assert array.shape == (2, 3)
    assert array[:, 2].tolist() == [0.0, 0.0]


def test_from_landmark_objects():
    array = as_landmark_set([Landmark(0.5, 0.5, 0.1)])
    assert landmark_at(array, 0) == Landmark(0.5, 0.5, 0.1)


def test_result_is_read_only_copy():
    source = np.zeros((3, 3))
    array = as_landmark_set(source)
    source[0, 0] = 1.0
    assert array[0, 0] == 0.0
    with pytest.raises(ValueError):
        array[0, 0] = 1.0


def test_empty_sequence():
    assert as_landmark_set([]).shape == (0, 3)


@pytest.mark.parametrize("bad", [np.zeros(5), np.zeros((4, 1)), np.zeros((2, 2, 2))])
def test_bad_shapes(bad):
    with pytest.raises(MalformedLandmarkData):
        as_landmark_set(bad)


def test_frame_landmarks_counts():
    frame = FrameLandmarks.from_points(faces=[[(0.1, 0.1)]], hands=[[(0.2, 0.2)], [(0.3, 0.3)]], frame_time_ms=12.0)
    assert frame.face_detected is True
    assert frame.hands_detected == 2
    assert frame.frame_time_ms == 12.0
    assert FrameLandmarks().face_detected is False


def test_mediapipe_source_on_blank_frame():
    pytest.importorskip("mediapipe")
    from face_picking.landmark_source import LandmarkSource

    try:
        source = LandmarkSource()
    except FileNotFoundError:
        pytest.skip("MediaPipe Tasks models not downloaded")

    with source:
        frame = np.zeros((240, 320, 3), dtype=np.uint8)
        landmarks = source.detect(frame, 0)
        assert landmarks.faces == ()
        assert landmarks.hands == ()
        assert source.detect_hands(frame, 0) == ()
