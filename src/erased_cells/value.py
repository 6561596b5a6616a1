"""Scalar cell values.

``CellValue`` pairs one ``CellType`` with one native numpy scalar of that
encoding. Values are immutable; every conversion and arithmetic operation
returns a new ``CellValue``.

Binary operators first ``unify`` both operands (promote them to the union of
their tags) and then compute in IEEE binary64, producing ``Float64`` results::

    >>> CellValue(CellType.UInt8, 1) / CellValue(CellType.UInt8, 2)
    Float64(0.5)

Comparison uses the same promotion, with floats ordered by the IEEE total
order so that NaN compares equal to itself.
"""

from __future__ import annotations

import logging
import math
import operator
from collections.abc import Callable
from typing import Any

import numpy as np

from erased_cells._order import total_order_key
from erased_cells.dtypes import CellType
from erased_cells.encoding import cell_type_of, encoding_of, native_type, static_cast
from erased_cells.errors import NarrowingError

logger = logging.getLogger(__name__)

_INT64_MAX = int(np.iinfo(np.int64).max)


# ---------------------------------------------------------------------------
# Literal coercion
# ---------------------------------------------------------------------------


def _literal_type(value: Any) -> CellType:
    if isinstance(value, np.generic):
        return CellType.from_dtype(value.dtype)
    if isinstance(value, int):
        return CellType.Int64 if value <= _INT64_MAX else CellType.UInt64
    return CellType.Float64


def coerce_literal(value: Any, cell_type: CellType, context: str = "") -> np.generic:
    """Represent a Python/numpy literal as ``cell_type``'s native scalar.

    Integral encodings accept integral literals within range only. Floating
    point encodings accept any real literal, rounded to the encoding; a finite
    literal beyond the encoding's range is refused rather than rounded to
    infinity.

    Raises ``TypeError`` for a literal of the wrong kind and
    ``NarrowingError`` for a literal outside the encoding's range.
    """
    ctx = f" in {context}" if context else ""
    if isinstance(value, (bool, np.bool_)) or not isinstance(
        value, (int, float, np.integer, np.floating)
    ):
        msg = (
            f"Type mismatch{ctx}: got {type(value).__name__} value {value!r}, "
            f"expected a number for cell type {cell_type}"
        )
        raise TypeError(msg)
    if cell_type.is_integral:
        if not isinstance(value, (int, np.integer)):
            msg = (
                f"Type mismatch{ctx}: got {type(value).__name__} value {value!r}, "
                f"expected int for cell type {cell_type}"
            )
            raise TypeError(msg)
        info = np.iinfo(cell_type.dtype)
        if not info.min <= int(value) <= info.max:
            raise NarrowingError(_literal_type(value), cell_type, value=value)
        return native_type(cell_type)(int(value))
    try:
        as_float = float(value)
    except OverflowError:
        raise NarrowingError(_literal_type(value), cell_type, value=value) from None
    if math.isfinite(as_float) and abs(as_float) > float(np.finfo(cell_type.dtype).max):
        raise NarrowingError(_literal_type(value), cell_type, value=value)
    return native_type(cell_type)(value)


def _operand(value: Any) -> CellValue | None:
    """Coerce a binary-operator operand, or return None if it is not a scalar."""
    if isinstance(value, CellValue):
        return value
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        return CellValue.new(value)
    return None


def _arith(lhs: CellValue, rhs: CellValue, op: Callable[[Any, Any], Any]) -> CellValue:
    lhs, rhs = lhs.unify(rhs)
    with np.errstate(all="ignore"):
        result = op(np.float64(lhs._value), np.float64(rhs._value))
    return CellValue._wrap(CellType.Float64, np.float64(result))


# ---------------------------------------------------------------------------
# CellValue
# ---------------------------------------------------------------------------


class CellValue:
    """A single numeric value tagged with its ``CellType``.

    Construct from a literal with ``CellValue(CellType.UInt16, 7)`` or bind a
    native primitive to its own encoding with ``CellValue.new(np.uint16(7))``.
    """

    __slots__ = ("_cell_type", "_value")

    # Left-hand numpy scalars defer to our reflected operators.
    __array_ufunc__ = None

    def __init__(self, cell_type: CellType, value: Any) -> None:
        self._cell_type = cell_type
        self._value = coerce_literal(value, cell_type, context=f"CellValue({cell_type})")

    @classmethod
    def _wrap(cls, cell_type: CellType, native: np.generic) -> CellValue:
        """Build without literal checks; ``native`` must already match ``cell_type``."""
        cv = cls.__new__(cls)
        cv._cell_type = cell_type
        cv._value = native
        return cv

    @classmethod
    def new(cls, value: Any) -> CellValue:
        """Bind a native primitive to its own encoding. Never converts."""
        if isinstance(value, CellValue):
            return value
        cell_type = cell_type_of(value)
        native = static_cast(value, cell_type)
        assert native is not None
        return cls._wrap(cell_type, native)

    @classmethod
    def zero(cls) -> CellValue:
        return cls._wrap(CellType.UInt8, np.uint8(0))

    @classmethod
    def one(cls) -> CellValue:
        return cls._wrap(CellType.UInt8, np.uint8(1))

    # --- Accessors ---

    @property
    def cell_type(self) -> CellType:
        return self._cell_type

    @property
    def value(self) -> np.generic:
        """The native numpy scalar."""
        return self._value

    def is_zero(self) -> bool:
        return bool(self._value == 0)

    def __float__(self) -> float:
        return float(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __repr__(self) -> str:
        return f"{self._cell_type.name}({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> CellValue:
        """Convert to ``cell_type``, which must be the same as or wider than ours.

        Raises ``NarrowingError`` if ``cell_type`` cannot hold every value of
        this value's encoding.
        """
        if not self._cell_type.can_fit_into(cell_type):
            logger.debug("Refusing narrowing conversion of %r to %s", self, cell_type)
            raise NarrowingError(self._cell_type, cell_type, value=self)
        if cell_type is self._cell_type:
            return self
        with np.errstate(over="ignore"):
            return CellValue._wrap(cell_type, native_type(cell_type)(self._value))

    def get(self, kind: Any) -> np.generic:
        """Return the value as the native scalar of ``kind``'s encoding.

        ``kind`` is anything ``encoding_of`` accepts (``np.float64``, ``int``,
        ``CellType.Int32``...). Raises ``NarrowingError`` like ``convert``.
        """
        return self.convert(encoding_of(kind))._value

    def unify(self, other: CellValue) -> tuple[CellValue, CellValue]:
        """Convert ``self`` and ``other`` to the union of their cell types."""
        dest = self._cell_type.union(other._cell_type)
        return self.convert(dest), other.convert(dest)

    # --- Arithmetic ---

    def __add__(self, other: Any) -> CellValue:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return _arith(self, rhs, operator.add)

    def __radd__(self, other: Any) -> CellValue:
        lhs = _operand(other)
        if lhs is None:
            return NotImplemented
        return _arith(lhs, self, operator.add)

    def __sub__(self, other: Any) -> CellValue:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return _arith(self, rhs, operator.sub)

    def __rsub__(self, other: Any) -> CellValue:
        lhs = _operand(other)
        if lhs is None:
            return NotImplemented
        return _arith(lhs, self, operator.sub)

    def __mul__(self, other: Any) -> CellValue:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return _arith(self, rhs, operator.mul)

    def __rmul__(self, other: Any) -> CellValue:
        lhs = _operand(other)
        if lhs is None:
            return NotImplemented
        return _arith(lhs, self, operator.mul)

    def __truediv__(self, other: Any) -> CellValue:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return _arith(self, rhs, operator.truediv)

    def __rtruediv__(self, other: Any) -> CellValue:
        lhs = _operand(other)
        if lhs is None:
            return NotImplemented
        return _arith(lhs, self, operator.truediv)

    def __neg__(self) -> CellValue:
        # Unsigned encodings widen to the next signed encoding first.
        target = self._cell_type
        if not target.is_signed:
            target = target.union(CellType.Int8)
        with np.errstate(over="ignore"):
            return CellValue._wrap(target, -native_type(target)(self._value))

    # --- Ordering ---

    def _compare(self, other: CellValue) -> int:
        lhs, rhs = self.unify(other)
        if lhs._cell_type.is_integral:
            left, right = int(lhs._value), int(rhs._value)
        else:
            left, right = total_order_key(lhs._value), total_order_key(rhs._value)
        return (left > right) - (left < right)

    def __eq__(self, other: object) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) == 0

    def __ne__(self, other: object) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) != 0

    def __lt__(self, other: Any) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) < 0

    def __le__(self, other: Any) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) <= 0

    def __gt__(self, other: Any) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) > 0

    def __ge__(self, other: Any) -> bool:
        rhs = _operand(other)
        if rhs is None:
            return NotImplemented
        return self._compare(rhs) >= 0

    def __hash__(self) -> int:
        # Integral values hash like the equal Python int; integral floats agree.
        if self._cell_type.is_integral:
            return hash(int(self._value))
        as_float = float(self._value)
        if math.isnan(as_float):
            return hash(("nan", math.copysign(1.0, as_float)))
        return hash(as_float)
