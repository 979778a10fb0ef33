"""Error types raised by the picking detection core."""


class FacePickingError(Exception):
    """Base class for all detector errors."""


class RegionCatalogError(FacePickingError, ValueError):
    """The region table is inconsistent (bad threshold, empty or out-of-range indices)."""


class MalformedLandmarkData(FacePickingError, ValueError):
    """A landmark set is too short or has the wrong shape for evaluation."""
