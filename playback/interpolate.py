"""
Value interpolation used by tweens.

Numbers interpolate linearly, numeric sequences interpolate elementwise
through numpy, and mappings interpolate key by key. Anything else holds
its start value until progress reaches 1.
"""

from numbers import Number
from typing import Any, Mapping

import numpy as np


def interpolate(start: Any, end: Any, k: float) -> Any:
    """Return the value ``k`` of the way from ``start`` to ``end``."""
    if k <= 0:
        return start
    if k >= 1:
        return end
    if isinstance(start, bool) or isinstance(end, bool):
        return start

    if isinstance(start, Number) and isinstance(end, Number):
        return start + (end - start) * k

    if isinstance(start, Mapping) and isinstance(end, Mapping):
        result = dict(end)
        for key, value in start.items():
            if key in end:
                result[key] = interpolate(value, end[key], k)
            else:
                result[key] = value
        return result

    if _is_numeric_sequence(start) and _is_numeric_sequence(end):
        a = np.asarray(start, dtype=float)
        b = np.asarray(end, dtype=float)
        if a.shape == b.shape:
            return (a + (b - a) * k).tolist()

    return start


def _is_numeric_sequence(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return np.issubdtype(value.dtype, np.number)
    if not isinstance(value, (list, tuple)) or not value:
        return False
    return all(isinstance(v, Number) and not isinstance(v, bool) for v in value)
