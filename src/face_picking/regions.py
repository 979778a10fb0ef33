"""Face region catalog.

Region indices refer to the MediaPipe face mesh topology (478 points with
refined iris landmarks). Anatomical meaning of each index is defined by that
model; the groups below were picked by hand for the areas people tend to pick
at:

    CHEEK_INNER      inner cheekbones, both sides
    NOSE             tip, bridge and alae
    MOUTH            upper lip contour, corner to corner
    CHIN_CENTER      chin and lower jaw corners
    FOREHEAD_CENTER  glabella up to mid forehead
    NECK             jawline contour down to the neck
    EAR_LEFT         left tragus / side of face
    EAR_RIGHT        right tragus / side of face

Thresholds are normalized screen distances tuned empirically per region; treat
them as configuration, not derived constants.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from .errors import RegionCatalogError
from .landmarks import FACE_LANDMARK_COUNT

# (name, indices, threshold)
DEFAULT_REGION_TABLE: Tuple[Tuple[str, Tuple[int, ...], float], ...] = (
    ("CHEEK_INNER", (116, 123, 147, 352, 376, 433), 0.08),
    ("NOSE", (4, 6, 168, 49, 64, 97, 2), 0.07),
    ("MOUTH", (61, 185, 40, 39, 37, 0, 267, 269, 270, 409, 291), 0.07),
    ("CHIN_CENTER", (200, 429, 436, 365, 397), 0.07),
    ("FOREHEAD_CENTER", (10, 151, 338), 0.1),
    ("NECK", (152, 148, 176, 150, 149, 377, 400, 378, 379, 365, 397, 288, 435, 367), 0.08),
    ("EAR_LEFT", (234, 227, 93, 132, 58), 0.07),
    ("EAR_RIGHT", (454, 447, 356, 323, 288), 0.07),
)


@dataclass(frozen=True)
class Region:
    """A named face area: landmark indices plus a proximity threshold."""

    name: str
    indices: FrozenSet[int]
    threshold: float

    @property
    def sorted_indices(self) -> Tuple[int, ...]:
        return tuple(sorted(self.indices))


class RegionCatalog:
    """Immutable, validated table of face regions."""

    def __init__(
        self,
        table: Iterable[Tuple[str, Iterable[int], float]] = DEFAULT_REGION_TABLE,
        face_landmark_count: int = FACE_LANDMARK_COUNT,
    ):
        regions = []
        seen = set()
        for name, indices, threshold in table:
            if name in seen:
                raise RegionCatalogError(f"Region '{name}' is defined more than once")
            seen.add(name)
            regions.append(self._build_region(name, indices, threshold, face_landmark_count))

        if not regions:
            raise RegionCatalogError("Region catalog is empty")

        self._regions: Tuple[Region, ...] = tuple(regions)
        self._face_landmark_count = face_landmark_count
        self._max_index = max(max(region.indices) for region in self._regions)

    @staticmethod
    def _build_region(name: str, indices: Iterable[int], threshold: float, face_landmark_count: int) -> Region:
        index_set = frozenset(int(i) for i in indices)
        if not index_set:
            raise RegionCatalogError(f"Region '{name}' has no landmark indices")
        if not threshold > 0:
            raise RegionCatalogError(f"Region '{name}' threshold must be positive, got {threshold}")

        out_of_range = sorted(i for i in index_set if not 0 <= i < face_landmark_count)
        if out_of_range:
            raise RegionCatalogError(
                f"Region '{name}' references landmarks {out_of_range} outside 0..{face_landmark_count - 1}"
            )
        return Region(name=name, indices=index_set, threshold=float(threshold))

    @classmethod
    def from_config(cls, region_configs: Sequence, face_landmark_count: int = FACE_LANDMARK_COUNT) -> "RegionCatalog":
        """Build a catalog from ``RegionConfig`` models."""
        return cls(
            ((rc.name, rc.indices, rc.threshold) for rc in region_configs),
            face_landmark_count=face_landmark_count,
        )

    def regions(self) -> Tuple[Region, ...]:
        return self._regions

    def get(self, name: str) -> Optional[Region]:
        for region in self._regions:
            if region.name == name:
                return region
        return None

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(region.name for region in self._regions)

    @property
    def max_index(self) -> int:
        """Largest face landmark index referenced by any region."""
        return self._max_index

    @property
    def face_landmark_count(self) -> int:
        return self._face_landmark_count

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self):
        return iter(self._regions)

    def __repr__(self) -> str:
        return f"RegionCatalog({', '.join(self.names)})"
