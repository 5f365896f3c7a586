"""
Time-based value interpolation.
"""

from typing import Any, Callable, Optional, Union

from .easing import EasingFunction, get_easing
from .interpolate import interpolate


def _functor(value: Any) -> Callable[[], Any]:
    """Wrap a constant so endpoints can always be evaluated lazily."""
    if callable(value):
        return value
    return lambda: value


class Tween:
    """
    Interpolates between two values over [start_time, end_time].

    Endpoint values may be constants or zero-argument callables evaluated
    on every query, so they can follow mutable state.

    Args:
        fn: Optional callback receiving the interpolated value on update().
        start_value: Value at (and before) start_time.
        end_value: Value at (and after) end_time.
        start_time: First instant of the tween.
        end_time: Last instant of the tween, clamped to >= start_time.
    """

    def __init__(
        self,
        fn: Optional[Callable[[Any], Any]],
        start_value: Any,
        end_value: Any,
        start_time: int,
        end_time: int,
    ):
        if fn is not None and not callable(fn):
            raise TypeError(f"Tween callback must be callable or None, got {type(fn).__name__}")
        self._fn = fn
        self._start_value = _functor(start_value)
        self._end_value = _functor(end_value)
        self._start_time = start_time
        self._end_time = max(start_time, end_time)
        self._ease: EasingFunction = get_easing("linear")

    def __repr__(self) -> str:
        return f"Tween(start_time={self._start_time}, end_time={self._end_time})"

    @property
    def start_time(self) -> int:
        return self._start_time

    @property
    def end_time(self) -> int:
        return self._end_time

    @property
    def start_value(self) -> Any:
        return self._start_value()

    @property
    def end_value(self) -> Any:
        return self._end_value()

    @property
    def ease(self) -> EasingFunction:
        return self._ease

    def set_ease(self, ease: Union[str, EasingFunction]) -> "Tween":
        self._ease = get_easing(ease)
        return self

    def value(self, t: float) -> Any:
        """Return the interpolated value at ``t``."""
        end_value = self.end_value
        if self._start_time == self._end_time:
            return end_value

        k = (t - self._start_time) / (self._end_time - self._start_time)
        k = max(0.0, min(1.0, k))
        return interpolate(self.start_value, end_value, self._ease(k))

    def update(self, t: float) -> Any:
        """Pass the value at ``t`` to the callback. No-op before start_time."""
        if self._fn is None or t < self._start_time:
            return None
        return self._fn(self.value(t))
