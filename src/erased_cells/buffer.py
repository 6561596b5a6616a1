"""Homogeneous cell buffers.

``CellBuffer`` is a flat, one-dimensional sequence of cells sharing one
``CellType``, backed by a numpy array of that encoding. Construction adopts a
copy of the caller's data, so buffers behave as independent values.

Arithmetic is elementwise. Two buffers need not share a cell type: each
pair of cells is unified independently and the operation is computed in IEEE
binary64, so results are ``Float64`` buffers. A scalar operand is broadcast
to every cell::

    >>> red = CellBuffer.from_vec(np.array([10, 20], dtype=np.uint16))
    >>> nir = CellBuffer.from_vec(np.array([30, 60], dtype=np.uint16))
    >>> (nir - red) / (nir + red)
    Float64CellBuffer(0.5, 0.5)

Buffers are totally ordered: first by cell type, then element by element
(floats by IEEE total order), then by length.
"""

from __future__ import annotations

import copy as _copy
import logging
import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np

from erased_cells._order import elided, total_order_keys
from erased_cells.dtypes import CellType
from erased_cells.encoding import encoding_of
from erased_cells.errors import NarrowingError
from erased_cells.validation import check_lengths
from erased_cells.value import CellValue, _operand, coerce_literal

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Ingest helpers
# ---------------------------------------------------------------------------


def _from_ndarray(values: np.ndarray, cell_type: CellType | None) -> np.ndarray:
    if values.ndim != 1:
        raise ValueError(f"Cell buffers are one-dimensional, got array of shape {values.shape}")
    own = CellType.from_dtype(values.dtype)
    data = values.astype(own.dtype, copy=True)
    if cell_type is None or cell_type is own:
        return data
    if not own.can_fit_into(cell_type):
        raise NarrowingError(own, cell_type)
    return data.astype(cell_type.dtype)


def _from_sequence(items: list[Any], cell_type: CellType | None) -> np.ndarray:
    if any(isinstance(item, CellValue) for item in items):
        return _from_cell_values(
            [CellValue.new(item) for item in items], cell_type
        )
    if cell_type is None:
        if not items:
            return np.empty(0, dtype=CellType.Float64.dtype)
        data = np.asarray(items)
        return data.astype(CellType.from_dtype(data.dtype).dtype, copy=False)
    natives = [coerce_literal(item, cell_type, context=f"{cell_type}CellBuffer") for item in items]
    return np.array(natives, dtype=cell_type.dtype)


def _from_cell_values(values: list[CellValue], cell_type: CellType | None) -> np.ndarray:
    if cell_type is None:
        if not values:
            return np.empty(0, dtype=CellType.Float64.dtype)
        cell_type = values[0].cell_type
        for value in values[1:]:
            cell_type = cell_type.union(value.cell_type)
    natives = [value.convert(cell_type).value for value in values]
    return np.array(natives, dtype=cell_type.dtype)


def _as_float64(operand: CellBuffer | CellValue) -> Any:
    # Widening straight to binary64 gives the same result as unifying first.
    if isinstance(operand, CellBuffer):
        return operand._data.astype(np.float64)
    return np.float64(operand.value)


# ---------------------------------------------------------------------------
# CellBuffer
# ---------------------------------------------------------------------------


class CellBuffer:
    """A one-dimensional buffer of cells sharing a single ``CellType``."""

    __slots__ = ("_data",)

    # Left-hand numpy scalars defer to our reflected operators.
    __array_ufunc__ = None

    def __init__(self, values: Iterable[Any] = (), cell_type: CellType | None = None) -> None:
        """Build a buffer from a numpy array, another buffer, or any iterable.

        Without ``cell_type`` the encoding is taken from the data: an array's
        dtype, the union of ``CellValue`` tags, or numpy's inference for
        plain Python numbers (``Float64`` for an empty sequence). With
        ``cell_type``, arrays and ``CellValue``s are widened into it (raising
        ``NarrowingError`` when they cannot fit) and Python literals are checked
        one by one (``TypeError`` for a float literal in an integral
        encoding, ``NarrowingError`` for one out of range).
        """
        if isinstance(values, CellBuffer):
            data = values._data.copy()
            if cell_type is not None and cell_type is not values.cell_type:
                data = values.convert(cell_type)._data
        elif isinstance(values, np.ndarray):
            data = _from_ndarray(values, cell_type)
        else:
            data = _from_sequence(list(values), cell_type)
        self._data: np.ndarray = data

    @classmethod
    def _wrap(cls, data: np.ndarray) -> CellBuffer:
        """Adopt ``data`` without copying; it must be a native-order 1-D array."""
        buf = cls.__new__(cls)
        buf._data = data
        return buf

    # --- Construction ---

    @classmethod
    def from_vec(cls, values: Iterable[Any], cell_type: CellType | None = None) -> CellBuffer:
        """Build a buffer from native values. See ``CellBuffer.__init__``."""
        return cls(values, cell_type)

    @classmethod
    def from_values(cls, values: Iterable[CellValue]) -> CellBuffer:
        """Collect ``CellValue``s into a buffer of the union of their cell types."""
        return cls._wrap(_from_cell_values(list(values), None))

    @classmethod
    def with_defaults(cls, length: int, cell_type: CellType) -> CellBuffer:
        """A buffer of ``length`` zeros of ``cell_type``."""
        return cls._wrap(np.zeros(length, dtype=cell_type.dtype))

    @classmethod
    def fill(cls, length: int, value: Any) -> CellBuffer:
        """A buffer of ``length`` copies of ``value``, in ``value``'s encoding."""
        cv = CellValue.new(value)
        return cls._wrap(np.full(length, cv.value, dtype=cv.cell_type.dtype))

    @classmethod
    def fill_via(
        cls,
        length: int,
        f: Callable[[int], Any],
        cell_type: CellType | None = None,
    ) -> CellBuffer:
        """A buffer whose cell ``i`` is ``f(i)``."""
        return cls([f(i) for i in range(length)], cell_type)

    # --- Basic properties ---

    @property
    def cell_type(self) -> CellType:
        return CellType.from_dtype(self._data.dtype)

    def __len__(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return len(self._data) == 0

    def __repr__(self) -> str:
        return f"{self.cell_type}CellBuffer({elided(self._data)})"

    # --- Indexed access ---

    def _check_index(self, index: int) -> int:
        index = operator.index(index)
        if not 0 <= index < len(self._data):
            raise IndexError(f"Cell index {index} out of range for buffer of length {len(self)}")
        return index

    def get(self, index: int) -> CellValue:
        """Return the cell at ``index``. Raises ``IndexError`` outside ``[0, len)``."""
        index = self._check_index(index)
        return CellValue._wrap(self.cell_type, self._data[index])

    def put(self, index: int, value: Any) -> None:
        """Store ``value`` at ``index``, converting it to this buffer's cell type.

        Raises ``NarrowingError`` if ``value``'s encoding does not fit, and
        ``IndexError`` outside ``[0, len)``.
        """
        index = self._check_index(index)
        self._data[index] = CellValue.new(value).convert(self.cell_type).value

    def __getitem__(self, index: int) -> CellValue:
        return self.get(index)

    def __setitem__(self, index: int, value: Any) -> None:
        self.put(index, value)

    def __iter__(self) -> Iterator[CellValue]:
        cell_type = self.cell_type
        for native in self._data:
            yield CellValue._wrap(cell_type, native)

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> CellBuffer:
        """Return a copy of this buffer converted to ``cell_type``.

        Fails atomically with ``NarrowingError`` if ``cell_type`` cannot hold
        every value of this buffer's cell type.
        """
        own = self.cell_type
        if not own.can_fit_into(cell_type):
            logger.debug("Refusing narrowing buffer conversion %s -> %s", own, cell_type)
            raise NarrowingError(own, cell_type)
        if own is not cell_type:
            logger.debug("Converting %d cells %s -> %s", len(self), own, cell_type)
        return CellBuffer._wrap(self._data.astype(cell_type.dtype))

    def to_vec(self, kind: Any) -> np.ndarray:
        """Return the cells as a new numpy array of ``kind``'s encoding.

        ``kind`` is anything ``encoding_of`` accepts. Raises
        ``NarrowingError`` like ``convert``.
        """
        return self.convert(encoding_of(kind))._data

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the cells in this buffer's own encoding."""
        return self._data.copy()

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if dtype is None:
            return self._data.copy()
        return self._data.astype(dtype)

    def copy(self) -> CellBuffer:
        return CellBuffer._wrap(self._data.copy())

    def __copy__(self) -> CellBuffer:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> CellBuffer:
        return self.copy()

    # --- Growth ---

    def append(self, value: Any) -> None:
        """Append one value, converted to this buffer's cell type."""
        self.extend((value,))

    def extend(self, values: Iterable[Any]) -> None:
        """Append values, each converted into this buffer's cell type.

        All values are converted before any is appended, so a
        ``NarrowingError`` leaves the buffer unchanged.
        """
        cell_type = self.cell_type
        if isinstance(values, CellBuffer):
            incoming = values.convert(cell_type)._data
        else:
            natives = [CellValue.new(v).convert(cell_type).value for v in values]
            incoming = np.array(natives, dtype=cell_type.dtype)
        self._data = np.concatenate((self._data, incoming))

    # --- Aggregation ---

    def min_max(self) -> tuple[CellValue, CellValue]:
        """Return ``(min, max)`` over all cells.

        The fold is seeded with the cell type's ``(max_value, min_value)``, so
        an empty buffer yields that inverted pair.
        """
        lo, hi = self.cell_type.max_value(), self.cell_type.min_value()
        if len(self._data):
            keys = total_order_keys(self._data)
            lo = min(lo, self.get(int(np.argmin(keys))))
            hi = max(hi, self.get(int(np.argmax(keys))))
        return lo, hi

    # --- Arithmetic ---

    def _binary(self, other: Any, op: Callable[[Any, Any], Any], reflected: bool = False) -> Any:
        if isinstance(other, CellBuffer):
            n = check_lengths(len(self), len(other), "CellBuffer arithmetic")
            lhs, rhs = self._data[:n].astype(np.float64), other._data[:n].astype(np.float64)
        else:
            scalar = _operand(other)
            if scalar is None:
                return NotImplemented
            lhs, rhs = _as_float64(self), _as_float64(scalar)
        if reflected:
            lhs, rhs = rhs, lhs
        with np.errstate(all="ignore"):
            return CellBuffer._wrap(np.asarray(op(lhs, rhs), dtype=np.float64))

    def __add__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.add)

    def __radd__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.add, reflected=True)

    def __sub__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.sub)

    def __rsub__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.sub, reflected=True)

    def __mul__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.mul)

    def __rmul__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.mul, reflected=True)

    def __truediv__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other: Any) -> CellBuffer:
        return self._binary(other, operator.truediv, reflected=True)

    def __neg__(self) -> CellBuffer:
        # Same promotion as CellValue.__neg__: unsigned widens to signed.
        target = self.cell_type
        if not target.is_signed:
            target = target.union(CellType.Int8)
        return CellBuffer._wrap(np.negative(self._data.astype(target.dtype)))

    # --- Ordering ---

    def _compare(self, other: CellBuffer) -> int:
        own, theirs = self.cell_type, other.cell_type
        if own is not theirs:
            return -1 if own < theirs else 1
        n = min(len(self), len(other))
        left = total_order_keys(self._data[:n])
        right = total_order_keys(other._data[:n])
        differ = np.flatnonzero(left != right)
        if differ.size:
            i = differ[0]
            return -1 if left[i] < right[i] else 1
        return (len(self) > len(other)) - (len(self) < len(other))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) == 0

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) != 0

    def __lt__(self, other: CellBuffer) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) < 0

    def __le__(self, other: CellBuffer) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) <= 0

    def __gt__(self, other: CellBuffer) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) > 0

    def __ge__(self, other: CellBuffer) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return self._compare(other) >= 0

    __hash__ = None  # type: ignore[assignment]
