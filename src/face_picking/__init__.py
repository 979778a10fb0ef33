"""Face Picking Detector - alerts when a fingertip touches the face."""

__version__ = "0.1.0"

from .config import AppConfig, get_config, get_config_manager
from .debouncer import AlertDebouncer, DebounceResult, DebounceState, debounce
from .detector import PickingDetector, PickingState
from .errors import FacePickingError, MalformedLandmarkData, RegionCatalogError
from .landmarks import FrameLandmarks, Landmark
from .proximity import Contact, ProximityEvaluator
from .regions import Region, RegionCatalog
from .scheduler import FrameGate, FrameScheduler

__all__ = [
    "AlertDebouncer",
    "AppConfig",
    "Contact",
    "DebounceResult",
    "DebounceState",
    "FacePickingError",
    "FrameGate",
    "FrameLandmarks",
    "FrameScheduler",
    "Landmark",
    "MalformedLandmarkData",
    "PickingDetector",
    "PickingState",
    "ProximityEvaluator",
    "Region",
    "RegionCatalog",
    "RegionCatalogError",
    "debounce",
    "get_config",
    "get_config_manager",
]
