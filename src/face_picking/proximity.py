"""Proximity evaluation between the index fingertip and face regions."""

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .errors import MalformedLandmarkData
from .landmarks import INDEX_FINGER_TIP, FrameLandmarks, Landmark, landmark_at
from .regions import RegionCatalog


@dataclass(frozen=True)
class Contact:
    """The first (face, hand, region, landmark) pair found within threshold."""

    region: str
    face_index: int
    hand_index: int
    landmark_index: int
    distance: float
    fingertip: Landmark


class ProximityEvaluator:
    """Decides whether any fingertip is touching any face region in a frame.

    Distances are measured in normalized 2D screen space. Depth is ignored
    because MediaPipe's z is not on the same scale as x and y.
    """

    def __init__(self, catalog: RegionCatalog, probe_index: int = INDEX_FINGER_TIP):
        self.catalog = catalog
        self.probe_index = probe_index
        # Index arrays are built once; the catalog never changes.
        self._region_indices: Dict[str, np.ndarray] = {
            region.name: np.array(region.sorted_indices, dtype=np.intp) for region in catalog.regions()
        }
        self._watched_indices = np.unique(np.concatenate(list(self._region_indices.values())))

    def evaluate(self, frame: FrameLandmarks) -> bool:
        """Return True if any fingertip is within any region's threshold."""
        return self.find_contact(frame) is not None

    def find_contact(self, frame: FrameLandmarks) -> Optional[Contact]:
        """Return the first contact found, or None. Stops at the first match."""
        if not frame.faces or not frame.hands:
            return None

        for face in frame.faces:
            self._check_face(face)
        for hand in frame.hands:
            self._check_hand(hand)

        for face_index, face in enumerate(frame.faces):
            for hand_index, hand in enumerate(frame.hands):
                tip = hand[self.probe_index, :2]
                for region in self.catalog.regions():
                    indices = self._region_indices[region.name]
                    distances = np.hypot(*(face[indices, :2] - tip).T)
                    hits = np.flatnonzero(distances < region.threshold)
                    if hits.size:
                        hit = hits[0]
                        return Contact(
                            region=region.name,
                            face_index=face_index,
                            hand_index=hand_index,
                            landmark_index=int(indices[hit]),
                            distance=float(distances[hit]),
                            fingertip=landmark_at(hand, self.probe_index),
                        )
        return None

    def _check_face(self, face: np.ndarray) -> None:
        if face.ndim != 2 or face.shape[1] < 2:
            raise MalformedLandmarkData(f"Face landmarks must be an (N, 2+) array, got shape {face.shape}")
        if face.shape[0] <= self.catalog.max_index:
            raise MalformedLandmarkData(
                f"Face landmark set has {face.shape[0]} points, regions reference index {self.catalog.max_index}"
            )
        if not np.isfinite(face[self._watched_indices, :2]).all():
            raise MalformedLandmarkData("Face landmarks contain non-finite coordinates")

    def _check_hand(self, hand: np.ndarray) -> None:
        if hand.ndim != 2 or hand.shape[1] < 2:
            raise MalformedLandmarkData(f"Hand landmarks must be an (N, 2+) array, got shape {hand.shape}")
        if hand.shape[0] <= self.probe_index:
            raise MalformedLandmarkData(
                f"Hand landmark set has {hand.shape[0]} points, fingertip index is {self.probe_index}"
            )
        if not np.isfinite(hand[self.probe_index, :2]).all():
            raise MalformedLandmarkData("Fingertip has non-finite coordinates")
