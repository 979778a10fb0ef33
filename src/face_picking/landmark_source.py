"""MediaPipe face and hand landmark source.

Uses the legacy ``mp.solutions`` models when the installed MediaPipe still
ships them, otherwise the Tasks ``FaceLandmarker``/``HandLandmarker`` API,
which needs ``.task`` model files on disk.
"""

import logging
import os
from typing import Any, Optional, Tuple

import cv2
import numpy as np

from .config import DetectionConfig, ModelConfig
from .landmarks import FrameLandmarks, as_landmark_set

logger = logging.getLogger(__name__)

FACE_LANDMARKER_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/face_landmarker/float16/1/face_landmarker.task"
)
HAND_LANDMARKER_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
)


class _SolutionsBackend:
    def __init__(self, mp: Any, config: DetectionConfig):
        self.face_mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=config.max_num_faces,
            refine_landmarks=True,
            min_detection_confidence=config.confidence_threshold,
            min_tracking_confidence=config.confidence_threshold,
        )
        self.hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=config.max_num_hands,
            model_complexity=1,
            min_detection_confidence=config.confidence_threshold,
            min_tracking_confidence=config.confidence_threshold,
        )

    def detect_faces(self, rgb_frame: np.ndarray, timestamp_ms: int) -> list:
        results = self.face_mesh.process(rgb_frame)
        return [face.landmark for face in results.multi_face_landmarks or []]

    def detect_hands(self, rgb_frame: np.ndarray, timestamp_ms: int) -> list:
        results = self.hands.process(rgb_frame)
        return [hand.landmark for hand in results.multi_hand_landmarks or []]

    def close(self) -> None:
        self.face_mesh.close()
        self.hands.close()


class _TasksBackend:
    def __init__(self, mp: Any, config: DetectionConfig, models: ModelConfig):
        from mediapipe.tasks.python import BaseOptions
        from mediapipe.tasks.python.vision import (
            FaceLandmarker,
            FaceLandmarkerOptions,
            HandLandmarker,
            HandLandmarkerOptions,
            RunningMode,
        )

        face_path = _require_model(models.face_landmarker_path, FACE_LANDMARKER_URL)
        hand_path = _require_model(models.hand_landmarker_path, HAND_LANDMARKER_URL)

        self.mp = mp
        self.face_landmarker = FaceLandmarker.create_from_options(
            FaceLandmarkerOptions(
                base_options=BaseOptions(model_asset_path=face_path),
                running_mode=RunningMode.VIDEO,
                num_faces=config.max_num_faces,
                min_face_detection_confidence=config.confidence_threshold,
                min_tracking_confidence=config.confidence_threshold,
            )
        )
        self.hand_landmarker = HandLandmarker.create_from_options(
            HandLandmarkerOptions(
                base_options=BaseOptions(model_asset_path=hand_path),
                running_mode=RunningMode.VIDEO,
                num_hands=config.max_num_hands,
                min_hand_detection_confidence=config.confidence_threshold,
                min_tracking_confidence=config.confidence_threshold,
            )
        )

    def _image(self, rgb_frame: np.ndarray) -> Any:
        return self.mp.Image(image_format=self.mp.ImageFormat.SRGB, data=rgb_frame)

    def detect_faces(self, rgb_frame: np.ndarray, timestamp_ms: int) -> list:
        result = self.face_landmarker.detect_for_video(self._image(rgb_frame), timestamp_ms)
        return list(result.face_landmarks or [])

    def detect_hands(self, rgb_frame: np.ndarray, timestamp_ms: int) -> list:
        result = self.hand_landmarker.detect_for_video(self._image(rgb_frame), timestamp_ms)
        return list(result.hand_landmarks or [])

    def close(self) -> None:
        self.face_landmarker.close()
        self.hand_landmarker.close()


def _require_model(path: str, url: str) -> str:
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"MediaPipe model not found at {path}. Download it with:\n"
            f'  mkdir -p "{os.path.dirname(path) or "."}" && curl -L -o "{path}" "{url}"'
        )
    return path


class LandmarkSource:
    """Runs MediaPipe on BGR frames and returns normalized landmark sets."""

    def __init__(self, detection_config: Optional[DetectionConfig] = None, model_config: Optional[ModelConfig] = None):
        import mediapipe as mp

        detection_config = detection_config or DetectionConfig()
        model_config = model_config or ModelConfig()

        if hasattr(mp, "solutions"):
            logger.debug("Using MediaPipe solutions backend")
            self._backend = _SolutionsBackend(mp, detection_config)
        else:
            logger.debug("mp.solutions unavailable, using MediaPipe Tasks backend")
            self._backend = _TasksBackend(mp, detection_config, model_config)

        self._last_timestamp_ms = -1

    def _next_timestamp(self, timestamp_ms: float) -> int:
        # Tasks VIDEO mode rejects non-increasing timestamps.
        ts = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = ts
        return ts

    def _to_rgb(self, frame: np.ndarray) -> np.ndarray:
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        rgb_frame.flags.writeable = False
        return rgb_frame

    def detect_faces(self, frame: np.ndarray, timestamp_ms: float) -> Tuple[np.ndarray, ...]:
        ts = self._next_timestamp(timestamp_ms)
        return tuple(as_landmark_set(face) for face in self._backend.detect_faces(self._to_rgb(frame), ts))

    def detect_hands(self, frame: np.ndarray, timestamp_ms: float) -> Tuple[np.ndarray, ...]:
        ts = self._next_timestamp(timestamp_ms)
        return tuple(as_landmark_set(hand) for hand in self._backend.detect_hands(self._to_rgb(frame), ts))

    def detect(self, frame: np.ndarray, timestamp_ms: float) -> FrameLandmarks:
        """Detect faces and hands in one BGR frame."""
        rgb_frame = self._to_rgb(frame)
        ts = self._next_timestamp(timestamp_ms)
        faces = tuple(as_landmark_set(face) for face in self._backend.detect_faces(rgb_frame, ts))
        hands = tuple(as_landmark_set(hand) for hand in self._backend.detect_hands(rgb_frame, ts))
        return FrameLandmarks(faces=faces, hands=hands, frame_time_ms=timestamp_ms)

    def close(self) -> None:
        """Release MediaPipe resources."""
        self._backend.close()

    def __enter__(self) -> "LandmarkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
