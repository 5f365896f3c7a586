"""
Frame snapshots for rollback and replay.
"""

import copy
import logging
from typing import Any, List

from .timer import Timer
from .tween import Tween

logger = logging.getLogger(__name__)


def clone_model(model: Any) -> Any:
    """Clone a model through its clone() method, deep-copying plain objects."""
    if model is None:
        return None
    clone = getattr(model, "clone", None)
    if callable(clone):
        return clone()
    return copy.deepcopy(model)


class Snapshot:
    """
    Immutable capture of a frame's playhead, model and active timers.

    Accessors hand out fresh clones so restoring the same snapshot twice
    replays from identical state.
    """

    def __init__(self, frame):
        self._playhead: int = frame.playhead
        self._model = clone_model(frame.model)
        self._timers: List[Timer] = [timer.clone() for timer in frame.timers]
        self._tweens: List[Tween] = frame.tweens
        logger.debug(f"Snapshot at {self._playhead} with {len(self._timers)} timer(s)")

    def __repr__(self) -> str:
        return f"Snapshot(playhead={self._playhead}, timers={len(self._timers)})"

    @property
    def playhead(self) -> int:
        return self._playhead

    def model(self) -> Any:
        """Return a clone of the captured model."""
        return clone_model(self._model)

    def timers(self, frame=None) -> List[Timer]:
        """Return clones of the captured timers, bound to ``frame`` if given."""
        return [timer.clone(frame) for timer in self._timers]

    def tweens(self) -> List[Tween]:
        return list(self._tweens)
