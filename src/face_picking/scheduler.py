"""Frame-driven evaluation loop.

The scheduler reads frames from a capture, drops frames it has already seen,
asks the landmark source for landmarks and hands them to the detector. It is
the only place that knows about cameras or timing.
"""

import logging
import threading
import time
from typing import Any, Callable, Hashable, Optional

import cv2

from .detector import PickingDetector, PickingState

logger = logging.getLogger(__name__)


class FrameGate:
    """Admits a frame only if its identity differs from the last admitted one.

    Evaluating the same frame twice would count one touch as two frames and
    skew the debouncer's cooldown arithmetic.
    """

    def __init__(self) -> None:
        self._last_key: Optional[Hashable] = None

    def admit(self, frame_key: Hashable) -> bool:
        if frame_key == self._last_key:
            return False
        self._last_key = frame_key
        return True

    def reset(self) -> None:
        self._last_key = None


class FrameScheduler:
    """Drives ``PickingDetector.evaluate`` once per distinct video frame."""

    def __init__(
        self,
        capture: Any,
        source: Any,
        detector: PickingDetector,
        clock: Callable[[], float] = time.monotonic,
        on_state: Optional[Callable[[PickingState], None]] = None,
    ):
        self.capture = capture
        self.source = source
        self.detector = detector
        self.clock = clock
        self.on_state = on_state

        self.gate = FrameGate()
        self.frames_read = 0
        self.frames_evaluated = 0
        self.frames_skipped = 0
        self._stop_event = threading.Event()
        self._closed = False

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def _frame_key(self) -> Hashable:
        # Cameras that do not report a position get one key per read.
        position_ms = self.capture.get(cv2.CAP_PROP_POS_MSEC)
        if position_ms and position_ms > 0:
            return ("pos", position_ms)
        return ("seq", self.frames_read)

    def step(self) -> Optional[PickingState]:
        """Read one frame and evaluate it if it is new.

        Returns the new state, or None when the frame was a duplicate, the
        landmark source failed, or the capture ran out of frames.
        """
        ret, frame = self.capture.read()
        if not ret:
            logger.warning("Could not read frame from capture, stopping")
            self.stop()
            return None
        self.frames_read += 1

        if not self.gate.admit(self._frame_key()):
            self.frames_skipped += 1
            logger.debug(f"Skipping repeated frame {self.frames_read}")
            return None

        now_ms = self.clock() * 1000.0
        try:
            landmarks = self.source.detect(frame, now_ms)
        except Exception as e:
            logger.error(f"Landmark detection failed, skipping frame: {e}")
            return None

        state = self.detector.evaluate(landmarks, now_ms)
        self.frames_evaluated += 1

        if self.on_state:
            self.on_state(state)
        return state

    def run(self, max_frames: Optional[int] = None) -> None:
        """Evaluate frames until stopped, the capture ends or ``max_frames`` were read."""
        logger.info("Frame scheduler started")
        try:
            while not self._stop_event.is_set():
                if max_frames is not None and self.frames_read >= max_frames:
                    break
                self.step()
        finally:
            self._stop_event.set()
            logger.info(
                f"Frame scheduler stopped: {self.frames_evaluated} evaluated, {self.frames_skipped} repeated frames skipped"
            )

    def run_in_thread(self, max_frames: Optional[int] = None) -> threading.Thread:
        thread = threading.Thread(target=self.run, kwargs={"max_frames": max_frames}, name="frame_scheduler", daemon=True)
        thread.start()
        return thread

    def stop(self) -> None:
        """Request the loop to stop after the current frame."""
        self._stop_event.set()

    def close(self) -> None:
        """Stop and release the capture and the landmark source."""
        self.stop()
        if self._closed:
            return
        self._closed = True
        self.capture.release()
        self.source.close()

    def __enter__(self) -> "FrameScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
