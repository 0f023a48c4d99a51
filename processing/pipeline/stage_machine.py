"""
Stage tracking for one conversion session.
"""
import logging
from typing import Callable, List, Optional

from processing.pipeline.types import Stage
from utils.exceptions import InvalidStageTransition

StageListener = Callable[[Stage], None]

# Forward transitions only; reset is handled separately
_ALLOWED_TRANSITIONS = {
    Stage.IDLE: {Stage.UPLOADING, Stage.ERROR},
    Stage.UPLOADING: {Stage.PROCESSING, Stage.ERROR},
    Stage.PROCESSING: {Stage.COMPLETE, Stage.ERROR},
    Stage.COMPLETE: set(),
    Stage.ERROR: set(),
}


class StageMachine:
    """
    Tracks idle -> uploading -> processing -> complete | error.

    The only way back is ``reset()``, which returns to idle, releases any
    resources held for the session and bumps ``generation`` so that results
    of runs started before the reset can be recognised as stale.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._stage = Stage.IDLE
        self._generation = 0
        self._listeners: List[StageListener] = []
        self._held_releases: List[Callable[[], None]] = []

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def accepts_submission(self) -> bool:
        return self._stage in (Stage.IDLE, Stage.ERROR)

    def subscribe(self, listener: StageListener) -> Callable[[], None]:
        """Register a stage listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def hold(self, release: Callable[[], None]) -> None:
        """Keep a resource release callback until the next reset."""
        self._held_releases.append(release)

    def transition(self, target: Stage) -> None:
        target = Stage(target)
        if target not in _ALLOWED_TRANSITIONS[self._stage]:
            raise InvalidStageTransition(
                f"Cannot move from {self._stage.value} to {target.value}"
            )
        self._set(target)

    def reset(self) -> None:
        """Return to idle from any stage and release held resources."""
        releases, self._held_releases = self._held_releases, []
        for release in releases:
            try:
                release()
            except Exception as e:
                self.logger.warning(f"Error releasing session resource: {e}")
        self._generation += 1
        if self._stage is not Stage.IDLE:
            self._set(Stage.IDLE)

    def _set(self, stage: Stage) -> None:
        previous, self._stage = self._stage, stage
        self.logger.debug(f"Stage {previous.value} -> {stage.value}")
        for listener in list(self._listeners):
            try:
                listener(stage)
            except Exception as e:
                self.logger.warning(f"Stage listener failed: {e}")
