"""
Frames: independent virtual timelines.

A frame owns a playhead, the timers and tweens scheduled against it, an
optional model and a stack of snapshots. Moving the playhead forward runs
every timer boundary in between, in time order, with ties broken by
timer id.
"""

import logging
import weakref
from typing import Any, Callable, List, Optional, Set, Union

from .events import Event, EventDispatcher
from .snapshot import Snapshot
from .timer import INDEFINITE, Timer
from .tween import Tween

logger = logging.getLogger(__name__)


class Frame:
    """
    A single timeline in a player's sequence.

    Args:
        fn: Setup callback invoked as fn(frame) on every init().
        name: Optional label used in logs and player status.
    """

    def __init__(self, fn: Callable[["Frame"], Any], name: Optional[str] = None):
        if not callable(fn):
            raise TypeError(f"Frame setup function must be callable, got {type(fn).__name__}")

        self._fn = fn
        self._name = name
        self._player_ref = None
        self._model: Any = None

        self._playhead: int = 0
        self._duration: int = 0
        self._timers: List[Timer] = []
        self._tweens: List[Tween] = []
        self._snapshots: List[Snapshot] = []

        # Ids of timers that already ran at the current playhead
        self._fired: Set[int] = set()

        self.events = EventDispatcher(self)

    def __repr__(self) -> str:
        return f"Frame(name={self._name!r}, playhead={self._playhead}, timers={len(self._timers)})"

    # === Accessors ===

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def player(self):
        return self._player_ref() if self._player_ref is not None else None

    def set_player(self, player) -> "Frame":
        self._player_ref = weakref.ref(player) if player is not None else None
        return self

    @property
    def model(self) -> Any:
        return self._model

    def set_model(self, model: Any) -> "Frame":
        self._model = model
        return self

    @property
    def playhead(self) -> int:
        return self._playhead

    @property
    def duration(self) -> int:
        """Highest playhead seen since the last reset."""
        return self._duration

    @property
    def timers(self) -> List[Timer]:
        return [timer for timer in self._timers if timer.running]

    @property
    def tweens(self) -> List[Tween]:
        return list(self._tweens)

    @property
    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshots)

    # === Events ===

    def add_event_listener(self, type: str, listener) -> "Frame":
        self.events.add_event_listener(type, listener)
        return self

    def remove_event_listener(self, type: str, listener) -> "Frame":
        self.events.remove_event_listener(type, listener)
        return self

    def dispatch_event(self, event: Event) -> None:
        self.events.dispatch_event(event)

    # === Lifecycle ===

    def init(self) -> "Frame":
        """Reset the frame and run its setup function."""
        self.reset()
        logger.info(f"Initializing frame {self._name!r}")
        self._fn(self)
        self.events.dispatch_event(Event("init"))
        return self

    def end(self) -> "Frame":
        """Reset the frame and notify listeners that it has ended."""
        self.reset()
        logger.info(f"Frame {self._name!r} ended")
        self.events.dispatch_event(Event("end"))
        return self

    def reset(self) -> "Frame":
        """Clear the playhead, duration, timers, tweens and snapshots."""
        for timer in self._timers:
            timer._release_gate()
        self._playhead = 0
        self._duration = 0
        self._timers = []
        self._tweens = []
        self._snapshots = []
        self._fired.clear()
        return self

    # === Scheduling ===

    def timer(self, fn: Callable[[Timer], Any]) -> Timer:
        """Create a one-shot timer at the current playhead."""
        timer = Timer(self, fn).set_start_time(self._playhead)
        self._add_timer(timer)
        return timer

    def after(self, delay: float, fn: Callable[[Timer], Any]) -> Timer:
        """Create a one-shot timer ``delay`` after the current playhead."""
        return self.timer(fn).delay(delay)

    def at(self, target, event_type: str, fn: Callable[[Event], Any]) -> Timer:
        """Create a timer that waits for ``event_type`` on ``target``. See Timer.at."""
        timer = Timer(self, fn).set_start_time(self._playhead)
        timer._set_gate(target, event_type)
        self._add_timer(timer)
        return timer

    def tween(
        self,
        fn: Optional[Callable[[Any], Any]],
        start_value: Any,
        end_value: Any,
        duration: float,
        delay: float = 0,
    ) -> Tween:
        """Create a tween starting ``delay`` after the current playhead."""
        start_time = self._playhead + max(0, int(round(delay)))
        tween = Tween(fn, start_value, end_value, start_time, start_time + max(0, int(round(duration))))
        self._tweens.append(tween)
        return tween

    def clear_timer(self, timer: Union[Timer, int]) -> "Frame":
        """Stop the active timer with the same id as ``timer`` (a timer, clone or id)."""
        timer_id = timer.id if isinstance(timer, Timer) else timer
        for active in list(self._timers):
            if active.id == timer_id:
                self._timers.remove(active)
                active.stop()
                return self
        logger.debug(f"clear_timer: no active timer with id {timer_id}")
        return self

    def _add_timer(self, timer: Timer) -> None:
        if timer not in self._timers:
            self._timers.append(timer)
        timer._activate()

    # === Playhead ===

    def set_playhead(self, value: float) -> "Frame":
        """
        Advance the playhead to ``value``, running every timer boundary in
        (playhead, value] in order.

        Values at or behind the current playhead are ignored. If the
        attached player pauses during the advance, the playhead stops at
        the instant where the pause happened.
        """
        value = int(round(value))
        if value <= self._playhead:
            return self

        while True:
            due = self._next_boundary()
            if due is None or due > value:
                break

            if due > self._playhead:
                self._move_to(due)
            self._run_due()

            if self._paused():
                logger.debug(f"Frame {self._name!r} paused at {self._playhead}")
                self._update_tweens()
                return self

        self._move_to(value)
        self._update_tweens()
        return self

    def _next_boundary(self) -> Optional[float]:
        """Drop finished timers and return the earliest upcoming boundary."""
        self._prune()
        boundaries = [self._until(timer) for timer in self._timers]
        finite = [b for b in boundaries if b is not None and b != INDEFINITE]
        return min(finite) if finite else None

    def _prune(self) -> None:
        # Stopping a timer can release dependents that finish immediately
        while True:
            finished = [timer for timer in self._timers if self._until(timer) is None]
            if not finished:
                return
            for timer in finished:
                self._timers.remove(timer)
                timer.stop()

    def _until(self, timer: Timer) -> Optional[float]:
        if timer.id in self._fired:
            return timer.until(self._playhead + 1)
        return timer.until(self._playhead)

    def _run_due(self) -> None:
        now = self._playhead
        due = [timer for timer in self._timers
               if timer.id not in self._fired and timer.until(now) == now]
        for timer in sorted(due, key=lambda t: t.id):
            # Earlier callbacks may have stopped this timer or advanced the
            # frame past this instant with a nested set_playhead()
            if not timer.running or self._playhead != now or timer.id in self._fired:
                continue
            self._fired.add(timer.id)
            logger.debug(
                f"Running timer {timer.id} at {now}",
                extra={"frame": self._name, "playhead": now, "timer_id": timer.id},
            )
            timer.run()

    def _move_to(self, playhead: int) -> None:
        if playhead != self._playhead:
            self._fired.clear()
        self._playhead = playhead
        self._duration = max(self._duration, playhead)

    def _update_tweens(self) -> None:
        now = self._playhead
        for tween in list(self._tweens):
            tween.update(now)
        self._tweens = [tween for tween in self._tweens if tween.end_time > now]

    def _paused(self) -> bool:
        player = self.player
        return player is not None and player.rate == 0

    # === Snapshots ===

    def snapshot(self) -> Snapshot:
        """Capture the current state and push it onto the snapshot stack."""
        snapshot = Snapshot(self)
        self._snapshots.append(snapshot)
        self.events.dispatch_event(Event("snapshot", value=snapshot))
        return snapshot

    def restore(self, snapshot: Snapshot) -> "Frame":
        """
        Rewind to ``snapshot``.

        The snapshot and every later one are dropped. The playhead is set
        one before the snapshot's so the next advance replays that instant.
        The setup function is not re-run. Unknown snapshots are ignored.
        """
        index = next((i for i, s in enumerate(self._snapshots) if s is snapshot), None)
        if index is None:
            logger.debug(f"Ignoring restore of unknown snapshot {snapshot!r}")
            return self

        del self._snapshots[index:]
        for timer in self._timers:
            timer._release_gate()

        self._playhead = snapshot.playhead - 1
        self._fired.clear()
        self._model = snapshot.model()
        self._timers = []
        for timer in snapshot.timers(self):
            self._add_timer(timer)
        self._tweens = snapshot.tweens()

        logger.info(f"Frame {self._name!r} restored to {snapshot.playhead}")
        self.events.dispatch_event(Event("restore", value=snapshot))
        return self

    def rollback(self, count: int = 1) -> "Frame":
        """Restore the snapshot ``count`` steps back, clamped to the oldest."""
        if not self._snapshots:
            return self
        count = max(1, min(count, len(self._snapshots)))
        return self.restore(self._snapshots[-count])

    def rollbackable(self, count: int = 1) -> bool:
        return len(self._snapshots) >= max(1, count)
