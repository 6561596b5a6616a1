"""Binding between native numeric primitives and ``CellType`` tags.

A native primitive is a numpy scalar (``np.uint8(3)``, ``np.float32(0.5)``...)
or a plain Python ``int`` / ``float``. numpy scalars carry their own encoding;
Python ints bind to ``Int64`` (``UInt64`` above the ``Int64`` range) and Python
floats to ``Float64``. Booleans are not numeric cells and are rejected.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from erased_cells.dtypes import CellType

_INT64_MAX = int(np.iinfo(np.int64).max)
_INT64_MIN = int(np.iinfo(np.int64).min)
_UINT64_MAX = int(np.iinfo(np.uint64).max)


def cell_type_of(value: Any) -> CellType:
    """Return the ``CellType`` a native primitive ``value`` is encoded with.

    Raises ``TypeError`` for booleans and non-numeric objects, and
    ``UnsupportedEncodingError`` for numpy scalars outside the closed set
    (e.g. ``np.float16``).
    """
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("Booleans are not numeric cell values")
    if isinstance(value, np.generic):
        return CellType.from_dtype(value.dtype)
    if isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            return CellType.Int64
        if 0 <= value <= _UINT64_MAX:
            return CellType.UInt64
        raise ValueError(f"Integer {value} is out of range for every cell encoding")
    if isinstance(value, float):
        return CellType.Float64
    raise TypeError(f"Expected a numeric primitive, got {type(value).__name__} value {value!r}")


def encoding_of(kind: Any) -> CellType:
    """Resolve a type-level description of an encoding to its ``CellType``.

    Accepts a ``CellType``, a numpy scalar type or dtype (``np.uint8``,
    ``np.dtype("f4")``), a dtype/tag name, or the Python ``int`` / ``float``
    types (bound to ``Int64`` / ``Float64``).
    """
    if isinstance(kind, CellType):
        return kind
    if kind is bool:
        raise TypeError("Booleans are not numeric cell values")
    if kind is int:
        return CellType.Int64
    if kind is float:
        return CellType.Float64
    if isinstance(kind, str):
        return CellType.parse(kind)
    return CellType.from_dtype(kind)


def native_type(cell_type: CellType) -> type[np.generic]:
    """Return the numpy scalar type encoding ``cell_type``."""
    return cell_type.dtype.type


def static_cast(value: Any, cell_type: CellType) -> np.generic | None:
    """Re-type ``value`` as ``cell_type``'s native scalar when they share a tag.

    Returns ``None`` when ``value`` is encoded with any other tag. This never
    widens or narrows; it only strips the dynamic/static type distinction when
    the encoding is already known to match.
    """
    if cell_type_of(value) is not cell_type:
        return None
    return native_type(cell_type)(value)
