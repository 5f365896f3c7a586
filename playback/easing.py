"""
Easing curves for tweens.

Every curve maps progress in [0, 1] to eased progress with f(0) == 0
and f(1) == 1.
"""

import math
from typing import Callable, Dict, Union

EasingFunction = Callable[[float], float]


def _ease_linear(t: float) -> float:
    return t


def _ease_in_quad(t: float) -> float:
    return t * t


def _ease_out_quad(t: float) -> float:
    return t * (2 - t)


def _ease_in_out_quad(t: float) -> float:
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


def _ease_in_out_sine(t: float) -> float:
    return 0.5 * (1 - math.cos(math.pi * t))


def _ease_in_cubic(t: float) -> float:
    return t * t * t


def _ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2


EASING_FUNCTIONS: Dict[str, EasingFunction] = {
    "linear": _ease_linear,
    "ease_in": _ease_in_quad,
    "ease_out": _ease_out_quad,
    "ease_in_out": _ease_in_out_quad,
    "sine": _ease_in_out_sine,
    "cubic": _ease_in_cubic,
    "cubic_in_out": _ease_in_out_cubic,
}


def get_easing(ease: Union[str, EasingFunction, None]) -> EasingFunction:
    """Resolve a callable or curve name. Unknown names fall back to linear."""
    if callable(ease):
        return ease
    if ease is None:
        return _ease_linear
    return EASING_FUNCTIONS.get(ease.lower(), _ease_linear)
