"""Internal ordering and rendering helpers.

Floating point cells are compared with the IEEE-754 ``totalOrder`` predicate
so that NaN has a place in the order and equality stays reflexive::

    -NaN < -inf < ... < -0.0 < +0.0 < ... < +inf < +NaN
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import numpy as np

# Buffers and masks longer than this render only their head and tail.
ELIDE_THRESHOLD = 10
_ELIDE_EDGE = 5


def total_order_keys(values: np.ndarray) -> np.ndarray:
    """Map ``values`` to an array whose natural order is the total order.

    Integer arrays are returned unchanged. Float arrays are reinterpreted as
    same-width signed integers with the magnitude bits of negative numbers
    flipped.
    """
    if values.dtype.kind != "f":
        return values
    int_type = np.dtype(f"i{values.dtype.itemsize}")
    bits = np.ascontiguousarray(values).view(int_type)
    sign = np.right_shift(bits, int_type.itemsize * 8 - 1)
    return bits ^ (sign & np.iinfo(int_type).max)


def total_order_key(value: np.generic) -> int:
    """Scalar form of :func:`total_order_keys`."""
    return int(total_order_keys(np.asarray([value]))[0])


def elided(items: Iterable[Any]) -> str:
    """Render ``items`` comma separated, eliding the middle of long sequences."""
    rendered = [str(item) for item in items]
    if len(rendered) > ELIDE_THRESHOLD:
        rendered = [*rendered[:_ELIDE_EDGE], "...", *rendered[-_ELIDE_EDGE:]]
    return ", ".join(rendered)
