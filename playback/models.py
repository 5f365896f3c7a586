"""
Model helpers for frame state.

Frames only require their model to expose clone(). These classes give
host applications a starting point: a Model base class, data objects
that know their model, and an id-unique set of data objects.
"""

import copy
import weakref
from typing import Any, Callable, Iterator, List, Optional, Type, Union

from .events import Event, EventDispatcher


class Model:
    """
    Base class for state shared across a player's frames.

    Only a weak reference to the player is kept, so clone() deep-copies
    the model while the copy still points at the same player.
    """

    def __init__(self):
        self._player_ref = None

    @property
    def player(self):
        return self._player_ref() if self._player_ref is not None else None

    def set_player(self, player) -> "Model":
        self._player_ref = weakref.ref(player) if player is not None else None
        return self

    @property
    def frame(self):
        """The player's current frame, if any."""
        player = self.player
        return player.current if player is not None else None

    @property
    def playhead(self) -> Optional[int]:
        frame = self.frame
        return frame.playhead if frame is not None else None

    def clone(self) -> "Model":
        return copy.deepcopy(self)


class DataObject:
    """An object that belongs to a model and can dispatch events."""

    def __init__(self, model: Optional[Model] = None):
        self._model = model
        self.events = EventDispatcher(self)

    @property
    def model(self) -> Optional[Model]:
        return self._model

    def set_model(self, model: Optional[Model]) -> "DataObject":
        self._model = model
        return self

    @property
    def player(self):
        return self._model.player if self._model is not None else None

    @property
    def frame(self):
        return self._model.frame if self._model is not None else None

    def add_event_listener(self, type: str, listener) -> "DataObject":
        self.events.add_event_listener(type, listener)
        return self

    def remove_event_listener(self, type: str, listener) -> "DataObject":
        self.events.remove_event_listener(type, listener)
        return self

    def dispatch_event(self, event: Event) -> None:
        self.events.dispatch_event(event)


class ModelSet(DataObject):
    """
    Collection of elements that are unique by their ``id`` attribute.

    Every change dispatches a "change" event.

    Args:
        model: Model the set and its elements belong to.
        cls: Element class used by create(), called as cls(model, id).
    """

    def __init__(self, model: Optional[Model] = None, cls: Optional[Type] = None):
        super().__init__(model)
        self._cls = cls if callable(cls) else None
        self._elements: List[Any] = []

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._elements))

    @property
    def cls(self) -> Optional[Type]:
        return self._cls

    @property
    def empty(self) -> bool:
        return not self._elements

    def set_model(self, model: Optional[Model]) -> "ModelSet":
        """Set the model on the set and on every element that supports it."""
        self._model = model
        for element in self._elements:
            if hasattr(element, "set_model"):
                element.set_model(model)
        return self

    def create(self, id: Any) -> Any:
        """Return the element with ``id``, creating and adding it if missing."""
        if self._cls is None:
            raise TypeError("ModelSet has no element class; unable to create elements")

        element = self.find(id)
        if element is not None:
            return element

        element = self._cls(self._model, id)
        self.add(element)
        return element

    def find(self, value: Union[Any, Callable[[Any], bool]]) -> Any:
        """Find an element by id or by predicate."""
        for element in self._elements:
            if callable(value):
                if value(element):
                    return element
            elif element.id == value:
                return element
        return None

    def contains(self, element: Any) -> bool:
        return any(e.id == element.id for e in self._elements)

    def add(self, element: Any) -> "ModelSet":
        if not self.contains(element):
            self._elements.append(element)
            self.dispatch_event(Event("change"))
        return self

    def remove(self, element: Any) -> "ModelSet":
        for i, existing in enumerate(self._elements):
            if existing.id == element.id:
                self._elements.pop(i)
                self.dispatch_event(Event("change"))
                break
        return self

    def remove_all(self) -> "ModelSet":
        if self._elements:
            self._elements = []
            self.dispatch_event(Event("change"))
        return self

    def filter(self, fn: Callable[[Any], bool]) -> "ModelSet":
        """Keep only the elements for which ``fn`` returns True."""
        self._elements = [e for e in self._elements if fn(e)]
        self.dispatch_event(Event("change"))
        return self

    def to_list(self) -> List[Any]:
        return list(self._elements)

    def clone(self, model: Optional[Model] = None) -> "ModelSet":
        """Clone the set, cloning each element onto ``model``."""
        clone = ModelSet(model, self._cls)
        clone._elements = [_clone_element(e, model) for e in self._elements]
        return clone


def _clone_element(element: Any, model: Optional[Model]) -> Any:
    clone = getattr(element, "clone", None)
    if callable(clone):
        return clone(model)
    return copy.deepcopy(element)
