"""Long-lived picking detector: proximity evaluation plus alert debouncing."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .config import AppConfig
from .debouncer import DEFAULT_COOLDOWN_MS, AlertDebouncer
from .landmarks import INDEX_FINGER_TIP, FrameLandmarks
from .proximity import Contact, ProximityEvaluator
from .regions import RegionCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PickingState:
    """Verdict for the most recently evaluated frame."""

    is_picking: bool = False
    alert_fired: bool = False
    timestamp_ms: Optional[float] = None
    face_detected: bool = False
    hands_detected: int = 0
    contact: Optional[Contact] = None
    cooldown_remaining_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view for the UI layer."""
        return {
            "is_picking": self.is_picking,
            "alert_fired": self.alert_fired,
            "timestamp_ms": self.timestamp_ms,
            "face_detected": self.face_detected,
            "hands_detected": self.hands_detected,
            "region": self.contact.region if self.contact else None,
            "distance": self.contact.distance if self.contact else None,
            "cooldown_remaining_ms": self.cooldown_remaining_ms,
        }


AlertHook = Callable[[PickingState], None]


class PickingDetector:
    """Evaluates frames and fires alert hooks on debounced rising edges.

    Callers must not pass the same video frame twice; see ``FrameGate`` in
    ``scheduler``. Calls are serialised so the debounce state is never mutated
    concurrently.
    """

    def __init__(
        self,
        catalog: Optional[RegionCatalog] = None,
        cooldown_ms: float = DEFAULT_COOLDOWN_MS,
        probe_index: int = INDEX_FINGER_TIP,
    ):
        self.catalog = catalog if catalog is not None else RegionCatalog()
        self.evaluator = ProximityEvaluator(self.catalog, probe_index=probe_index)
        self.debouncer = AlertDebouncer(cooldown_ms)
        self._alert_hooks: List[AlertHook] = []
        self._state = PickingState()
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "PickingDetector":
        return cls(
            catalog=RegionCatalog.from_config(config.regions),
            cooldown_ms=config.detection.cooldown_ms,
            probe_index=config.detection.probe_landmark_index,
        )

    def add_alert_hook(self, hook: AlertHook) -> None:
        self._alert_hooks.append(hook)

    def remove_alert_hook(self, hook: AlertHook) -> None:
        self._alert_hooks.remove(hook)

    @property
    def state(self) -> PickingState:
        return self._state

    @property
    def is_picking(self) -> bool:
        return self._state.is_picking

    def evaluate(self, frame: FrameLandmarks, now_ms: float) -> PickingState:
        """Evaluate one distinct frame at monotonic time ``now_ms``."""
        with self._lock:
            contact = self.evaluator.find_contact(frame)
            result = self.debouncer.on_frame_result(contact is not None, now_ms)
            state = PickingState(
                is_picking=result.new_state,
                alert_fired=result.should_fire_alert,
                timestamp_ms=now_ms,
                face_detected=frame.face_detected,
                hands_detected=frame.hands_detected,
                contact=contact,
                cooldown_remaining_ms=self.debouncer.cooldown_remaining_ms(now_ms),
            )
            if state.is_picking != self._state.is_picking:
                logger.debug(f"Picking state changed to {state.is_picking} at {now_ms:.0f}ms")
            self._state = state

        if state.alert_fired:
            logger.info(f"Picking detected at {contact.region} (distance {contact.distance:.3f})")
            for hook in list(self._alert_hooks):
                try:
                    hook(state)
                except Exception as e:
                    logger.error(f"Alert hook {getattr(hook, '__name__', hook)} failed: {e}")
                    logger.exception("Detailed exception info:")

        return state

    def reset(self) -> None:
        """Forget debounce history, e.g. after the camera restarts."""
        with self._lock:
            self.debouncer.reset()
            self._state = PickingState()
