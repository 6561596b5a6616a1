"""Cell buffers with a companion validity mask.

A ``MaskedCellBuffer`` pairs a ``CellBuffer`` with an equal-length ``Mask``.
Validity propagates through arithmetic: a result cell is valid only when
every operand cell it was computed from was valid. Scalars, and plain
``CellBuffer`` operands, count as valid everywhere.

Example::

    >>> buf = MaskedCellBuffer.fill_with_mask_via(4, float, lambda i: i % 2 == 0)
    >>> buf.counts()
    (2, 2)
    >>> ((buf + MaskedCellBuffer.from_vec([1.0] * 4)) * 2.0).mask
    Mask(True, False, True, False)
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np

from erased_cells._order import total_order_keys
from erased_cells.buffer import CellBuffer
from erased_cells.dtypes import CellType
from erased_cells.encoding import encoding_of
from erased_cells.mask import Mask
from erased_cells.nodata import NoData
from erased_cells.validation import check_lengths
from erased_cells.value import CellValue, _operand

logger = logging.getLogger(__name__)


class MaskedCellBuffer:
    """A ``CellBuffer`` with a parallel validity ``Mask``."""

    __slots__ = ("_buffer", "_mask")

    __array_ufunc__ = None

    def __init__(self, buffer: CellBuffer, mask: Mask) -> None:
        """Pair copies of ``buffer`` and ``mask``.

        Raises ``ValueError`` if their lengths differ.
        """
        if len(buffer) != len(mask):
            raise ValueError(
                f"Mask and buffer must have the same length: {len(buffer)} != {len(mask)}"
            )
        self._buffer = buffer.copy()
        self._mask = mask.copy()

    @classmethod
    def _wrap(cls, buffer: CellBuffer, mask: Mask) -> MaskedCellBuffer:
        """Adopt ``buffer`` and ``mask`` without copying; their lengths must match."""
        masked = cls.__new__(cls)
        masked._buffer = buffer
        masked._mask = mask
        return masked

    # --- Construction ---

    @classmethod
    def from_buffer(cls, buffer: CellBuffer) -> MaskedCellBuffer:
        """Wrap ``buffer`` with an all-valid mask."""
        return cls(buffer, Mask.fill(len(buffer), True))

    @classmethod
    def from_vec(cls, values: Iterable[Any], cell_type: CellType | None = None) -> MaskedCellBuffer:
        """All-valid buffer of ``values``. See ``CellBuffer.from_vec``."""
        return cls.from_buffer(CellBuffer.from_vec(values, cell_type))

    @classmethod
    def from_vec_with_nodata(
        cls,
        values: Iterable[Any],
        nodata: NoData,
        cell_type: CellType | None = None,
    ) -> MaskedCellBuffer:
        """Build a buffer whose mask is ``False`` wherever a value matches ``nodata``."""
        buffer = CellBuffer.from_vec(values, cell_type)
        mask = Mask._wrap(~nodata.matches(buffer._data, buffer.cell_type))
        return cls._wrap(buffer, mask)

    @classmethod
    def with_defaults(cls, length: int, cell_type: CellType) -> MaskedCellBuffer:
        return cls.from_buffer(CellBuffer.with_defaults(length, cell_type))

    @classmethod
    def fill(cls, length: int, value: Any) -> MaskedCellBuffer:
        return cls.from_buffer(CellBuffer.fill(length, value))

    @classmethod
    def fill_via(
        cls,
        length: int,
        f: Callable[[int], Any],
        cell_type: CellType | None = None,
    ) -> MaskedCellBuffer:
        return cls.from_buffer(CellBuffer.fill_via(length, f, cell_type))

    @classmethod
    def fill_with_mask_via(
        cls,
        length: int,
        value_fn: Callable[[int], Any],
        mask_fn: Callable[[int], bool] | None = None,
        cell_type: CellType | None = None,
    ) -> MaskedCellBuffer:
        """Build values and validity from index generators.

        With ``mask_fn``, cell ``i`` is ``value_fn(i)`` and its validity
        ``mask_fn(i)``. Without it, ``value_fn(i)`` returns a
        ``(value, valid)`` pair.
        """
        if mask_fn is None:
            return cls.from_pairs((value_fn(i) for i in range(length)), cell_type)
        buffer = CellBuffer.fill_via(length, value_fn, cell_type)
        return cls._wrap(buffer, Mask.fill_via(length, mask_fn))

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[Any, bool]],
        cell_type: CellType | None = None,
    ) -> MaskedCellBuffer:
        """Collect ``(value, valid)`` pairs into a masked buffer."""
        values: list[Any] = []
        valid: list[bool] = []
        for value, is_valid in pairs:
            values.append(value)
            valid.append(is_valid)
        return cls._wrap(CellBuffer.from_vec(values, cell_type), Mask(valid))

    # --- Components ---

    @property
    def buffer(self) -> CellBuffer:
        return self._buffer

    @property
    def mask(self) -> Mask:
        return self._mask

    @property
    def cell_type(self) -> CellType:
        return self._buffer.cell_type

    def __len__(self) -> int:
        return len(self._buffer)

    def is_empty(self) -> bool:
        return self._buffer.is_empty()

    def counts(self) -> tuple[int, int]:
        """Return ``(valid, invalid)`` cell counts."""
        return self._mask.counts()

    def __repr__(self) -> str:
        return f"{self.cell_type}MaskedCellBuffer({self._buffer!r}, {self._mask!r})"

    # --- Indexed access ---

    def get(self, index: int) -> CellValue:
        """Return the cell at ``index`` regardless of its validity."""
        return self._buffer.get(index)

    def get_masked(self, index: int) -> CellValue | None:
        """Return the cell at ``index``, or ``None`` if it is invalid."""
        if self._mask.get(index):
            return self._buffer.get(index)
        return None

    def get_with_mask(self, index: int) -> tuple[CellValue, bool]:
        return self._buffer.get(index), self._mask.get(index)

    def put(self, index: int, value: Any) -> None:
        """Store ``value`` at ``index`` leaving its validity unchanged."""
        self._buffer.put(index, value)

    def put_with_mask(self, index: int, value: Any, valid: bool) -> None:
        """Store ``value`` and its validity at ``index``.

        Raises ``NarrowingError`` before touching the mask if ``value`` does not
        fit this buffer's cell type.
        """
        self._buffer.put(index, value)
        self._mask.put(index, valid)

    def __getitem__(self, index: int) -> CellValue | None:
        return self.get_masked(index)

    def __iter__(self) -> Iterator[tuple[CellValue, bool]]:
        return zip(self._buffer, self._mask)

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> MaskedCellBuffer:
        """Convert the values to ``cell_type``, carrying the mask forward unchanged."""
        return MaskedCellBuffer._wrap(self._buffer.convert(cell_type), self._mask.copy())

    def take(self) -> tuple[CellBuffer, Mask]:
        """Split into independent copies of the buffer and the mask."""
        return self._buffer.copy(), self._mask.copy()

    def to_vec(self, kind: Any) -> np.ndarray:
        """Return all values as a numpy array of ``kind``'s encoding, ignoring the mask."""
        return self._buffer.to_vec(kind)

    def to_vec_with_nodata(self, kind: Any, nodata: NoData | None = None) -> np.ndarray:
        """Return the values as ``kind``'s encoding with invalid cells set to the sentinel.

        ``nodata`` defaults to ``NoData.default()``. With ``NoData.none()`` no
        substitution happens. Raises ``NarrowingError`` if this buffer's cell
        type does not fit ``kind``.
        """
        if nodata is None:
            nodata = NoData.default()
        cell_type = encoding_of(kind)
        out = self._buffer.to_vec(cell_type)
        sentinel = nodata.value(cell_type)
        if sentinel is not None:
            out[~self._mask._bits] = sentinel
        return out

    def copy(self) -> MaskedCellBuffer:
        return MaskedCellBuffer._wrap(self._buffer.copy(), self._mask.copy())

    def __copy__(self) -> MaskedCellBuffer:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> MaskedCellBuffer:
        return self.copy()

    # --- Growth ---

    def append(self, value: Any, valid: bool = True) -> None:
        self.extend(((value, valid),))

    def extend(self, pairs: Iterable[tuple[Any, bool]]) -> None:
        """Append ``(value, valid)`` pairs, converting values into this cell type.

        A ``MaskedCellBuffer`` argument contributes its own values and mask.
        The buffer is left unchanged if any value fails to convert.
        """
        if isinstance(pairs, MaskedCellBuffer):
            self._buffer.extend(pairs._buffer)
            self._mask.extend(pairs._mask)
            return
        values: list[Any] = []
        valid: list[bool] = []
        for value, is_valid in pairs:
            values.append(value)
            valid.append(is_valid)
        self._buffer.extend(values)
        self._mask.extend(valid)

    # --- Aggregation ---

    def min_max(self) -> tuple[CellValue, CellValue]:
        """Return ``(min, max)`` over valid cells only.

        With no valid cells the result is the inverted pair
        ``(cell_type.max_value(), cell_type.min_value())``.
        """
        lo, hi = self.cell_type.max_value(), self.cell_type.min_value()
        valid = np.flatnonzero(self._mask._bits)
        if valid.size:
            keys = total_order_keys(self._buffer._data[valid])
            lo = min(lo, self._buffer.get(int(valid[np.argmin(keys)])))
            hi = max(hi, self._buffer.get(int(valid[np.argmax(keys)])))
        return lo, hi

    # --- Arithmetic ---

    def _binary(self, other: Any, op: Callable[[Any, Any], Any], reflected: bool = False) -> Any:
        if isinstance(other, MaskedCellBuffer):
            n = check_lengths(len(self), len(other), "MaskedCellBuffer arithmetic")
            other_buffer = other._buffer
            mask = Mask._wrap(self._mask._bits[:n] & other._mask._bits[:n])
        elif isinstance(other, CellBuffer):
            n = check_lengths(len(self), len(other), "MaskedCellBuffer arithmetic")
            other_buffer = other
            mask = Mask._wrap(self._mask._bits[:n].copy())
        else:
            if _operand(other) is None:
                return NotImplemented
            result = self._buffer._binary(other, op, reflected)
            return MaskedCellBuffer._wrap(result, self._mask.copy())
        result = self._buffer._binary(other_buffer, op, reflected)
        return MaskedCellBuffer._wrap(result, mask)

    def __add__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.add)

    def __radd__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.add, reflected=True)

    def __sub__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.sub)

    def __rsub__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.sub, reflected=True)

    def __mul__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.mul)

    def __rmul__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.mul, reflected=True)

    def __truediv__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.truediv)

    def __rtruediv__(self, other: Any) -> MaskedCellBuffer:
        return self._binary(other, operator.truediv, reflected=True)

    def __neg__(self) -> MaskedCellBuffer:
        return MaskedCellBuffer._wrap(-self._buffer, self._mask.copy())

    # --- Ordering (buffer first, then mask) ---

    def _key(self, other: object) -> tuple[CellBuffer, Mask] | None:
        if isinstance(other, MaskedCellBuffer):
            return other._buffer, other._mask
        return None

    def __eq__(self, other: object) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) == key

    def __ne__(self, other: object) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) != key

    def __lt__(self, other: MaskedCellBuffer) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) < key

    def __le__(self, other: MaskedCellBuffer) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) <= key

    def __gt__(self, other: MaskedCellBuffer) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) > key

    def __ge__(self, other: MaskedCellBuffer) -> bool:
        key = self._key(other)
        if key is None:
            return NotImplemented
        return (self._buffer, self._mask) >= key

    __hash__ = None  # type: ignore[assignment]
