"""
Player for frame sequences.

Translates wall-clock time into frame playhead advances and handles
moving between frames.
"""

import time
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .config import PlayerConfig
from .events import Event, EventDispatcher
from .frame import Frame
from .snapshot import clone_model

logger = logging.getLogger(__name__)


class PlayerState(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


class Player:
    """
    Drives a sequence of frames.

    Call update() regularly (e.g., every tick of the host loop) to advance
    the current frame by the elapsed wall-clock time scaled by the rate.
    Each frame starts from its own clone of the player's model.
    """

    def __init__(self, config: Optional[PlayerConfig] = None):
        self.config = config or PlayerConfig()
        self.state: PlayerState = PlayerState.STOPPED

        self._frames: List[Frame] = []
        self._current_index: Optional[int] = None
        self._model: Any = None
        self._rate: float = self.config.rate

        # Playback timing
        self._last_tick: float = 0      # Real time of the previous update
        self._position: float = 0       # Virtual position incl. fractional ms

        self.events = EventDispatcher(self)

    # === Frames ===

    @property
    def frames(self) -> List[Frame]:
        return list(self._frames)

    def frame(self, fn: Callable[[Frame], Any], name: Optional[str] = None) -> Frame:
        """Create a frame from a setup function and append it to the sequence."""
        return self.add_frame(Frame(fn, name))

    def add_frame(self, frame: Frame) -> Frame:
        frame.set_player(self)
        self._frames.append(frame)
        self.events.dispatch_event(Event("change"))
        return frame

    @property
    def current(self) -> Optional[Frame]:
        if self._current_index is None:
            return None
        return self._frames[self._current_index]

    @property
    def current_index(self) -> Optional[int]:
        return self._current_index

    def goto(self, index: int) -> bool:
        """
        Switch to the frame at ``index``.

        The current frame is ended and the new one is initialized with a
        fresh clone of the player's model.
        """
        if not 0 <= index < len(self._frames):
            logger.debug(f"Ignoring goto({index}) with {len(self._frames)} frame(s)")
            return False

        previous = self._current_index
        if self.current is not None:
            self.current.end()

        self._current_index = index
        frame = self._frames[index]
        frame.set_model(clone_model(self._model))
        frame.init()

        self._position = frame.playhead
        self._last_tick = time.time()

        logger.info(f"Moved to frame {index} ({frame.name!r})")
        self.events.dispatch_event(Event("framechange", value=index, prev_value=previous))
        return True

    def next(self) -> bool:
        if self._current_index is None:
            return self.goto(0)
        return self.goto(self._current_index + 1)

    def prev(self) -> bool:
        if self._current_index is None:
            return False
        return self.goto(self._current_index - 1)

    # === Model ===

    @property
    def model(self) -> Any:
        return self._model

    def set_model(self, model: Any) -> "Player":
        self._model = model
        if hasattr(model, "set_player"):
            model.set_player(self)
        return self

    # === Rate & state ===

    @property
    def rate(self) -> float:
        """Effective playback rate. Always 0 while paused."""
        if self.state == PlayerState.PAUSED:
            return 0
        return self._rate

    def set_rate(self, value: float) -> "Player":
        self._rate = max(0.0, float(value))
        return self

    @property
    def playing(self) -> bool:
        return self.state == PlayerState.PLAYING

    def play(self) -> bool:
        """Start or resume playback."""
        if not self._frames:
            logger.warning("No frames to play")
            return False

        if self.state == PlayerState.PLAYING:
            return True

        if self.current is None:
            self.goto(0)

        self._last_tick = time.time()
        self._position = self.current.playhead
        self._set_state(PlayerState.PLAYING)
        logger.info(f"Playing from {self.current.playhead}ms")
        return True

    def pause(self) -> None:
        """Pause playback. Also stops a frame advance that is in progress."""
        if self.state != PlayerState.PLAYING:
            return
        self._set_state(PlayerState.PAUSED)
        logger.info(f"Paused at {self.current.playhead if self.current else 0}ms")

    def stop(self) -> None:
        """Stop playback and end the current frame."""
        if self.current is not None:
            self.current.end()
        self._current_index = None
        self._position = 0
        self._set_state(PlayerState.STOPPED)
        logger.info("Stopped")

    # === Ticking ===

    def update(self, now: Optional[float] = None) -> None:
        """
        Advance the current frame by the wall-clock time since the last
        update, scaled by the rate.

        Args:
            now: Current real time in seconds. Defaults to time.time().
        """
        if now is None:
            now = time.time()

        frame = self.current
        if self.state != PlayerState.PLAYING or frame is None:
            self._last_tick = now
            return

        elapsed = max(0.0, now - self._last_tick)
        self._last_tick = now

        # Frame was rewound or stopped short since the last tick
        if int(self._position) != frame.playhead:
            self._position = frame.playhead

        self._position += elapsed * 1000 * self._rate
        frame.set_playhead(int(self._position))

        if frame.playhead != int(self._position):
            self._position = frame.playhead

        self.events.dispatch_event(Event("update", value=frame.playhead))

    def run(self, max_ticks: Optional[int] = None, sleep: Callable[[float], None] = time.sleep) -> int:
        """
        Blocking host loop: update() every 1/fps seconds while playing.

        Returns:
            Number of ticks processed.
        """
        interval = 1.0 / self.config.fps
        ticks = 0
        while self.playing and (max_ticks is None or ticks < max_ticks):
            self.update()
            ticks += 1
            sleep(interval)
        return ticks

    def get_status(self) -> Dict[str, Any]:
        """Get current player status for observers."""
        frame = self.current
        return {
            "state": self.state.value,
            "frame_index": self._current_index,
            "frame_name": frame.name if frame else None,
            "playhead": frame.playhead if frame else 0,
            "duration": frame.duration if frame else 0,
            "rate": self.rate,
            "configured_rate": self._rate,
        }

    # === Events ===

    def add_event_listener(self, type: str, listener) -> "Player":
        self.events.add_event_listener(type, listener)
        return self

    def remove_event_listener(self, type: str, listener) -> "Player":
        self.events.remove_event_listener(type, listener)
        return self

    def dispatch_event(self, event: Event) -> None:
        self.events.dispatch_event(event)

    # === Private Methods ===

    def _set_state(self, state: PlayerState) -> None:
        previous = self.state
        self.state = state
        if previous != state:
            self.events.dispatch_event(Event("statechange", value=state, prev_value=previous))
