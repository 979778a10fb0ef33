"""Rising-edge alert debouncing with a cooldown window."""

from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_COOLDOWN_MS = 1000.0


@dataclass(frozen=True)
class DebounceState:
    """Memory carried between frames.

    ``last_alert_ms`` is None until the first alert fires.
    """

    last_alert_ms: Optional[float] = None
    previous_is_picking: bool = False


@dataclass(frozen=True)
class DebounceResult:
    should_fire_alert: bool
    new_state: bool


def debounce(
    state: DebounceState, is_picking: bool, now_ms: float, cooldown_ms: float = DEFAULT_COOLDOWN_MS
) -> Tuple[DebounceState, bool]:
    """Advance the debounce state by one frame.

    An alert fires only on a false -> true transition, and only when more than
    ``cooldown_ms`` has passed since the previous alert. Sustained picking
    never re-fires.
    """
    rising_edge = is_picking and not state.previous_is_picking
    cooled_down = state.last_alert_ms is None or now_ms - state.last_alert_ms > cooldown_ms
    should_fire = rising_edge and cooled_down

    new_state = DebounceState(
        last_alert_ms=now_ms if should_fire else state.last_alert_ms,
        previous_is_picking=is_picking,
    )
    return new_state, should_fire


class AlertDebouncer:
    """Owns a DebounceState and advances it once per evaluated frame."""

    def __init__(self, cooldown_ms: float = DEFAULT_COOLDOWN_MS):
        if cooldown_ms < 0:
            raise ValueError(f"cooldown_ms must be non-negative, got {cooldown_ms}")
        self.cooldown_ms = cooldown_ms
        self._state = DebounceState()

    @property
    def state(self) -> DebounceState:
        return self._state

    def on_frame_result(self, is_picking: bool, now_ms: float) -> DebounceResult:
        self._state, should_fire = debounce(self._state, is_picking, now_ms, self.cooldown_ms)
        return DebounceResult(should_fire_alert=should_fire, new_state=is_picking)

    def cooldown_remaining_ms(self, now_ms: float) -> float:
        """Milliseconds until a new rising edge could fire again."""
        if self._state.last_alert_ms is None:
            return 0.0
        return max(0.0, self.cooldown_ms - (now_ms - self._state.last_alert_ms))

    def reset(self) -> None:
        self._state = DebounceState()
