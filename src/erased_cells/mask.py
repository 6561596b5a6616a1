"""Validity masks.

A ``Mask`` is a plain boolean vector parallel to a cell buffer: ``True``
marks a valid cell, ``False`` an invalid (no-data) one. It has no numeric
semantics of its own.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import numpy as np

from erased_cells._order import elided
from erased_cells.validation import check_lengths


class Mask:
    """A boolean validity vector."""

    __slots__ = ("_bits",)

    __array_ufunc__ = None

    def __init__(self, values: Iterable[bool] = ()) -> None:
        if isinstance(values, Mask):
            bits = values._bits.copy()
        elif isinstance(values, np.ndarray):
            if values.ndim != 1:
                raise ValueError(f"Masks are one-dimensional, got array of shape {values.shape}")
            bits = values.astype(np.bool_, copy=True)
        else:
            bits = np.array([bool(v) for v in values], dtype=np.bool_)
        self._bits: np.ndarray = bits

    @classmethod
    def _wrap(cls, bits: np.ndarray) -> Mask:
        mask = cls.__new__(cls)
        mask._bits = bits
        return mask

    @classmethod
    def fill(cls, length: int, value: bool) -> Mask:
        """A mask of ``length`` copies of ``value``."""
        return cls._wrap(np.full(length, bool(value), dtype=np.bool_))

    @classmethod
    def fill_via(cls, length: int, f: Callable[[int], bool]) -> Mask:
        """A mask whose entry ``i`` is ``f(i)``."""
        return cls._wrap(np.array([bool(f(i)) for i in range(length)], dtype=np.bool_))

    # --- Basic properties ---

    def __len__(self) -> int:
        return len(self._bits)

    def is_empty(self) -> bool:
        return len(self._bits) == 0

    def all(self, value: bool) -> bool:
        """Return whether every entry equals ``value`` (vacuously true when empty)."""
        return bool(np.all(self._bits == bool(value)))

    def counts(self) -> tuple[int, int]:
        """Return ``(valid, invalid)`` entry counts."""
        valid = int(np.count_nonzero(self._bits))
        return valid, len(self._bits) - valid

    def __repr__(self) -> str:
        return f"Mask({elided(bool(b) for b in self._bits)})"

    # --- Indexed access ---

    def _check_index(self, index: int) -> int:
        index = operator.index(index)
        if not 0 <= index < len(self._bits):
            raise IndexError(f"Mask index {index} out of range for mask of length {len(self)}")
        return index

    def get(self, index: int) -> bool:
        return bool(self._bits[self._check_index(index)])

    def put(self, index: int, value: bool) -> None:
        self._bits[self._check_index(index)] = bool(value)

    def __getitem__(self, index: int) -> bool:
        return self.get(index)

    def __setitem__(self, index: int, value: bool) -> None:
        self.put(index, value)

    def __iter__(self) -> Iterator[bool]:
        return (bool(b) for b in self._bits)

    # --- Export & growth ---

    def to_numpy(self) -> np.ndarray:
        return self._bits.copy()

    def __array__(self, dtype: Any = None, copy: bool | None = None) -> np.ndarray:
        if dtype is None:
            return self._bits.copy()
        return self._bits.astype(dtype)

    def copy(self) -> Mask:
        return Mask._wrap(self._bits.copy())

    def __copy__(self) -> Mask:
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Mask:
        return self.copy()

    def append(self, value: bool) -> None:
        self._bits = np.append(self._bits, bool(value))

    def extend(self, values: Iterable[bool]) -> None:
        incoming = values._bits if isinstance(values, Mask) else [bool(v) for v in values]
        self._bits = np.concatenate((self._bits, np.asarray(incoming, dtype=np.bool_)))

    # --- Boolean algebra ---

    def _zip(self, other: Mask, context: str) -> tuple[np.ndarray, np.ndarray]:
        n = check_lengths(len(self), len(other), context)
        return self._bits[:n], other._bits[:n]

    def __and__(self, other: Mask) -> Mask:
        if not isinstance(other, Mask):
            return NotImplemented
        lhs, rhs = self._zip(other, "Mask &")
        return Mask._wrap(lhs & rhs)

    def __or__(self, other: Mask) -> Mask:
        if not isinstance(other, Mask):
            return NotImplemented
        lhs, rhs = self._zip(other, "Mask |")
        return Mask._wrap(lhs | rhs)

    def __iand__(self, other: Mask) -> Mask:
        if not isinstance(other, Mask):
            return NotImplemented
        lhs, rhs = self._zip(other, "Mask &=")
        self._bits = lhs & rhs
        return self

    def __ior__(self, other: Mask) -> Mask:
        if not isinstance(other, Mask):
            return NotImplemented
        lhs, rhs = self._zip(other, "Mask |=")
        self._bits = lhs | rhs
        return self

    def __invert__(self) -> Mask:
        return Mask._wrap(~self._bits)

    # --- Ordering ---

    def _compare(self, other: Mask) -> int:
        n = min(len(self), len(other))
        differ = np.flatnonzero(self._bits[:n] != other._bits[:n])
        if differ.size:
            return 1 if self._bits[differ[0]] else -1
        return (len(self) > len(other)) - (len(self) < len(other))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mask):
            return self._compare(other) == 0
        if isinstance(other, (list, tuple)):
            return self._compare(Mask(other)) == 0
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __lt__(self, other: Mask) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return self._compare(other) < 0

    def __le__(self, other: Mask) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return self._compare(other) <= 0

    def __gt__(self, other: Mask) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return self._compare(other) > 0

    def __ge__(self, other: Mask) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return self._compare(other) >= 0

    __hash__ = None  # type: ignore[assignment]
