"""
Event dispatch for playback objects.

Frames, timers, players and data objects each hold an EventDispatcher
rather than inheriting from one. Anything exposing add_event_listener()
and remove_event_listener() can gate a timer (see Timer.at).
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional


Listener = Callable[["Event"], Any]


@dataclass
class Event:
    """A named notification with optional value payload."""
    type: str
    value: Any = None
    prev_value: Any = None
    target: Any = None


class EventDispatcher:
    """
    Registry of listeners keyed by event type.

    Args:
        owner: Object reported as the event target. Defaults to the
            dispatcher itself.
    """

    def __init__(self, owner: Any = None):
        self._owner = owner
        self._listeners: Dict[str, List[Listener]] = {}

    def add_event_listener(self, type: str, listener: Listener) -> "EventDispatcher":
        """Register a listener. Registering the same listener twice is ignored."""
        listeners = self._listeners.setdefault(type, [])
        if listener not in listeners:
            listeners.append(listener)
        return self

    def remove_event_listener(self, type: str, listener: Listener) -> "EventDispatcher":
        """Deregister a listener. Unknown listeners are ignored."""
        listeners = self._listeners.get(type)
        if listeners and listener in listeners:
            listeners.remove(listener)
        return self

    def has_event_listener(self, type: str, listener: Optional[Listener] = None) -> bool:
        listeners = self._listeners.get(type, [])
        if listener is None:
            return bool(listeners)
        return listener in listeners

    def dispatch_event(self, event: Event) -> None:
        """
        Deliver an event to every listener registered for its type.

        The target is only assigned on the first dispatch so an event
        re-dispatched by another object keeps its origin.
        """
        if event.target is None:
            event.target = self._owner if self._owner is not None else self

        # Copy so listeners may deregister themselves mid-dispatch
        for listener in list(self._listeners.get(event.type, ())):
            listener(event)
