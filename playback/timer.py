"""
Virtual-time timers.

A Timer only answers "when do I run next?" through until(). Moving time
forward and deciding what runs is the owning Frame's job.
"""

import copy
import itertools
import logging
import math
import weakref
from typing import Any, Callable, List, Optional, Tuple

from .events import Event, EventDispatcher

logger = logging.getLogger(__name__)

# Next boundary of an event-gated timer. The frame keeps such timers but
# never advances to this instant.
INDEFINITE = math.inf


class Timer:
    """
    A callback scheduled on a frame's virtual timeline.

    Timers start at the frame playhead they were created on and run once
    unless given an interval. Builder-style mutators return the timer:

        frame.timer(fn).delay(200).set_interval(100).times(3)

    Args:
        frame: Owning frame. Only a weak reference is kept.
        fn: Callback invoked as fn(timer).
    """

    _ids = itertools.count(1)

    def __init__(self, frame, fn: Callable[["Timer"], Any]):
        if not callable(fn):
            raise TypeError(f"Timer callback must be callable, got {type(fn).__name__}")

        self._id: int = next(Timer._ids)
        self._frame_ref = weakref.ref(frame) if frame is not None else None
        self._fn = fn

        self._start_time: Optional[int] = None
        self._interval: Optional[float] = None
        self._duration: Optional[int] = None
        self._running: bool = True

        # (anchor playhead, timer) pairs activated when this timer stops
        self._dependents: List[Tuple[int, "Timer"]] = []

        # Event gate: (target, event type) plus the registered listener
        self._gate: Optional[Tuple[Any, str]] = None
        self._listener: Optional[Callable[[Event], None]] = None

        self.events = EventDispatcher(self)

    def __repr__(self) -> str:
        return (f"Timer(id={self._id}, start_time={self._start_time}, "
                f"interval={self._interval}, duration={self._duration}, "
                f"running={self._running})")

    # === Accessors ===

    @property
    def id(self) -> int:
        return self._id

    @property
    def frame(self):
        return self._frame_ref() if self._frame_ref is not None else None

    @property
    def start_time(self) -> Optional[int]:
        return self._start_time

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def duration(self) -> Optional[int]:
        return self._duration

    @property
    def end_time(self) -> Optional[int]:
        """Last valid execution instant, or None when unbounded."""
        if self._duration is None or self._start_time is None:
            return None
        return self._start_time + self._duration

    @property
    def running(self) -> bool:
        return self._running

    @property
    def gated(self) -> bool:
        return self._gate is not None

    @property
    def dependents(self) -> List[Tuple[int, "Timer"]]:
        return list(self._dependents)

    def add_event_listener(self, type: str, listener) -> "Timer":
        self.events.add_event_listener(type, listener)
        return self

    def remove_event_listener(self, type: str, listener) -> "Timer":
        self.events.remove_event_listener(type, listener)
        return self

    # === Mutators ===

    def set_start_time(self, value: Optional[float]) -> "Timer":
        self._start_time = None if value is None else int(round(value))
        return self

    def set_interval(self, value: Optional[float]) -> "Timer":
        """
        Set the repeat period. Periods that round to zero or below make the
        timer one-shot.
        """
        if value is None:
            self._interval = None
        elif value == INDEFINITE:
            self._interval = INDEFINITE
        else:
            rounded = int(round(value))
            self._interval = rounded if rounded > 0 else None
        return self

    def set_duration(self, value: Optional[float]) -> "Timer":
        """Bound the last repeat to start_time + value."""
        if value is None:
            self._duration = None
        else:
            self._duration = max(0, int(round(value)))
        return self

    def delay(self, value: float) -> "Timer":
        """Push the start time back. Non-positive delays are ignored."""
        if value is None or value <= 0:
            return self
        self._start_time = (self._start_time or 0) + int(round(value))
        return self

    def times(self, count: int) -> "Timer":
        """Limit the timer to ``count`` executions."""
        if count <= 1:
            self._interval = None
            self._duration = None
        elif self._interval is not None and self._interval != INDEFINITE:
            self._duration = int(self._interval * (count - 1))
        else:
            logger.debug(f"Ignoring times({count}) on timer {self._id} without an interval")
        return self

    # === Scheduling ===

    def until(self, t: int) -> Optional[float]:
        """
        Return the next execution instant at or after ``t``.

        Returns None once the timer has nothing left to run, and
        INDEFINITE for a running event-gated timer.
        """
        if not self._running or self._start_time is None:
            return None

        if self._interval == INDEFINITE:
            return INDEFINITE

        start = self._start_time
        if t <= start:
            return start

        interval = self._interval
        if interval is None:
            return None

        end = self.end_time
        if end is not None and t > end:
            return None

        offset = t - start
        if offset % interval == 0:
            return t

        boundary = start + (offset // interval + 1) * interval
        if end is not None and boundary > end:
            return None
        return boundary

    def run(self) -> None:
        """Invoke the callback. Scheduling state is left untouched."""
        self._fn(self)

    def stop(self) -> "Timer":
        """
        Stop the timer for good.

        The first call releases any event gate, moves chained timers onto
        the frame relative to the frame's current playhead and dispatches
        "end". Later calls do nothing.
        """
        if not self._running:
            return self
        self._running = False
        self._release_gate()

        frame = self.frame
        dependents, self._dependents = self._dependents, []
        for anchor, timer in dependents:
            if frame is not None:
                timer._shift(frame.playhead - anchor)
                frame._add_timer(timer)

        logger.debug(f"Timer {self._id} stopped, {len(dependents)} dependent(s) released")
        self.events.dispatch_event(Event("end"))
        return self

    # === Chaining ===

    def then(self, fn: Callable[["Timer"], Any]) -> "Timer":
        """Create a timer that starts when this one stops."""
        return self._chain(Timer(self.frame, fn))

    def after(self, delay: float, fn: Callable[["Timer"], Any]) -> "Timer":
        """Create a timer that starts ``delay`` after this one stops."""
        return self.then(fn).delay(delay)

    def at(self, target, event_type: str, fn: Callable[[Event], Any]) -> "Timer":
        """
        Create a timer that, once this one stops, waits for ``event_type``
        on ``target``.

        ``fn`` receives the event. Returning False keeps the timer
        listening; any other result stops it, releasing whatever was
        chained after it.
        """
        timer = Timer(self.frame, fn)
        timer._set_gate(target, event_type)
        return self._chain(timer)

    def _chain(self, timer: "Timer") -> "Timer":
        frame = self.frame
        anchor = frame.playhead if frame is not None else 0
        timer.set_start_time(anchor)
        if self._running or frame is None:
            self._dependents.append((anchor, timer))
        else:
            frame._add_timer(timer)
        return timer

    def _shift(self, delta: int) -> None:
        if self._start_time is not None:
            self._start_time += delta

    # === Event gate ===

    def _set_gate(self, target, event_type: str) -> None:
        self._gate = (target, event_type)
        self._interval = INDEFINITE

    def _activate(self) -> None:
        """Register the event gate once the timer joins a frame's active set."""
        if self._gate is None or self._listener is not None or not self._running:
            return
        target, event_type = self._gate

        def listener(event: Event) -> None:
            if self._fn(event) is False:
                return
            self.stop()

        self._listener = listener
        target.add_event_listener(event_type, listener)

    def _release_gate(self) -> None:
        if self._listener is None:
            return
        target, event_type = self._gate
        target.remove_event_listener(event_type, self._listener)
        self._listener = None

    # === Cloning ===

    def clone(self, frame=None) -> "Timer":
        """
        Copy the timer, keeping its id.

        Dependents are cloned recursively. The copy is inert: an event
        gate is only registered once the copy is activated on a frame.
        """
        clone = copy.copy(self)
        if frame is not None:
            clone._frame_ref = weakref.ref(frame)
        clone._listener = None
        clone._dependents = [(anchor, timer.clone(frame)) for anchor, timer in self._dependents]
        clone.events = EventDispatcher(clone)
        return clone
