"""Landmark data model shared by the landmark source and the evaluator."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Tuple

import numpy as np

from .errors import MalformedLandmarkData

# MediaPipe topology sizes
FACE_LANDMARK_COUNT = 478  # face mesh with refined iris points
HAND_LANDMARK_COUNT = 21
INDEX_FINGER_TIP = 8


@dataclass(frozen=True)
class Landmark:
    """A single normalized point. x and y are relative to the frame, z is unused."""

    x: float
    y: float
    z: float = 0.0


def as_landmark_set(points: Any) -> np.ndarray:
    """Convert a sequence of points into a read-only (N, 3) float array.

    Accepts numpy arrays, sequences of (x, y[, z]) tuples, Landmark objects or
    anything exposing ``.x``/``.y``/``.z`` attributes (MediaPipe landmarks).
    """
    if isinstance(points, np.ndarray):
        array = np.array(points, dtype=np.float64)
    else:
        rows = []
        for point in points:
            if hasattr(point, "x") and hasattr(point, "y"):
                rows.append((point.x, point.y, getattr(point, "z", 0.0)))
            else:
                rows.append(tuple(point))
        array = np.array(rows, dtype=np.float64) if rows else np.zeros((0, 3))

    if array.ndim != 2 or array.shape[1] < 2:
        raise MalformedLandmarkData(f"Expected an (N, 2) or (N, 3) landmark array, got shape {array.shape}")
    if array.shape[1] == 2:
        array = np.hstack([array, np.zeros((array.shape[0], 1))])

    array = array[:, :3]
    array.flags.writeable = False
    return array


def landmark_at(landmark_set: np.ndarray, index: int) -> Landmark:
    """Return one point of a landmark set as a Landmark."""
    x, y, z = landmark_set[index]
    return Landmark(float(x), float(y), float(z))


@dataclass(frozen=True)
class FrameLandmarks:
    """Everything the landmark source detected in one video frame."""

    faces: Tuple[np.ndarray, ...] = ()
    hands: Tuple[np.ndarray, ...] = ()
    frame_time_ms: Optional[float] = field(default=None, compare=False)

    @classmethod
    def from_points(
        cls,
        faces: Iterable[Any] = (),
        hands: Iterable[Any] = (),
        frame_time_ms: Optional[float] = None,
    ) -> "FrameLandmarks":
        return cls(
            faces=tuple(as_landmark_set(face) for face in faces),
            hands=tuple(as_landmark_set(hand) for hand in hands),
            frame_time_ms=frame_time_ms,
        )

    @property
    def face_detected(self) -> bool:
        return len(self.faces) > 0

    @property
    def hands_detected(self) -> int:
        return len(self.hands)
