"""No-data policies.

A ``NoData`` names the sentinel that stands in for invalid cells when
validity cannot travel out of band (in a plain array written to a raster
band, say). There are three policies:

- ``NoData.none()``: there is no sentinel. Nothing is flagged on ingest and
  nothing is substituted on egress.
- ``NoData.default()``: the encoding's canonical sentinel, the type minimum
  for integers and NaN for floats.
- ``NoData.new(v)``: an explicit sentinel ``v``.

The policy itself is encoding-agnostic. ``value(cell_type)`` resolves it to a
native scalar of a given encoding.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import math
from typing import TYPE_CHECKING, Any

import numpy as np

from erased_cells.dtypes import CellType
from erased_cells.errors import NarrowingError
from erased_cells.value import CellValue, coerce_literal

if TYPE_CHECKING:
    from erased_cells.buffer import CellBuffer

logger = logging.getLogger(__name__)


class NoDataKind(enum.Enum):
    NONE = "none"
    DEFAULT = "default"
    VALUE = "value"


@dataclasses.dataclass(frozen=True, slots=True, repr=False)
class NoData:
    """A no-data sentinel policy. Build with ``none()``, ``default()`` or ``new(v)``."""

    kind: NoDataKind = NoDataKind.DEFAULT
    sentinel: Any = None

    def __post_init__(self) -> None:
        if self.kind is NoDataKind.VALUE:
            if isinstance(self.sentinel, (bool, np.bool_)) or not isinstance(
                self.sentinel, (int, float, np.integer, np.floating)
            ):
                raise TypeError(f"No-data sentinel must be a number, got {self.sentinel!r}")
        elif self.sentinel is not None:
            raise ValueError(f"NoData.{self.kind.value}() takes no sentinel")

    @classmethod
    def none(cls) -> NoData:
        return cls(NoDataKind.NONE)

    @classmethod
    def default(cls) -> NoData:
        return cls(NoDataKind.DEFAULT)

    @classmethod
    def new(cls, value: Any) -> NoData:
        return cls(NoDataKind.VALUE, value)

    @classmethod
    def from_sentinel(cls, sentinel: float | None, cell_type: CellType) -> NoData:
        """Convert a raster band's optional ``float`` sentinel into a policy for ``cell_type``.

        ``None`` becomes ``NoData.none()``. Integral encodings truncate the
        sentinel toward zero. A sentinel outside ``cell_type``'s range raises
        ``NarrowingError``.
        """
        if sentinel is None:
            return cls.none()
        as_float = float(sentinel)
        if cell_type.is_integral:
            if math.isfinite(as_float):
                truncated = math.trunc(as_float)
                info = np.iinfo(cell_type.dtype)
                if info.min <= truncated <= info.max:
                    return cls.new(truncated)
        elif math.isnan(as_float) or math.isinf(as_float):
            return cls.new(as_float)
        elif abs(as_float) <= float(np.finfo(cell_type.dtype).max):
            return cls.new(as_float)
        logger.debug("No-data sentinel %r does not fit %s", sentinel, cell_type)
        raise NarrowingError(
            CellType.Float64, cell_type, value=CellValue._wrap(CellType.Float64, np.float64(as_float))
        )

    def __repr__(self) -> str:
        if self.kind is NoDataKind.VALUE:
            return f"NoData.new({self.sentinel!r})"
        return f"NoData.{self.kind.value}()"

    # --- Resolution ---

    def is_none(self) -> bool:
        return self.kind is NoDataKind.NONE

    def value(self, cell_type: CellType) -> np.generic | None:
        """Return the sentinel as a native scalar of ``cell_type``, or ``None``.

        An explicit sentinel is checked like a ``CellValue`` literal: a
        fractional sentinel for an integral encoding raises ``TypeError`` and
        an out-of-range one raises ``NarrowingError``.
        """
        if self.kind is NoDataKind.NONE:
            return None
        if self.kind is NoDataKind.DEFAULT:
            if cell_type.is_integral:
                return cell_type.min_value().value
            return cell_type.dtype.type(np.nan)
        return coerce_literal(self.sentinel, cell_type, context="NoData sentinel")

    def matches(self, values: np.ndarray | CellBuffer, cell_type: CellType | None = None) -> np.ndarray:
        """Return a boolean array that is ``True`` wherever ``values`` holds the sentinel.

        ``cell_type`` defaults to the encoding of ``values``. A NaN sentinel
        matches every NaN. With ``NoData.none()`` nothing matches.
        """
        data = np.asarray(values)
        if cell_type is None:
            cell_type = CellType.from_dtype(data.dtype)
        sentinel = self.value(cell_type)
        if sentinel is None:
            return np.zeros(len(data), dtype=np.bool_)
        if not cell_type.is_integral and np.isnan(sentinel):
            return np.isnan(data)
        return data == sentinel

    def is_nodata(self, value: Any) -> bool:
        """Return whether the scalar ``value`` is this policy's sentinel.

        ``value`` is a ``CellValue`` or native primitive. The default sentinel
        is resolved in ``value``'s own encoding; an explicit sentinel is
        compared across encodings the way ``CellValue`` equality does. A NaN
        sentinel matches every NaN.
        """
        cv = CellValue.new(value)
        if self.kind is NoDataKind.NONE:
            return False
        if self.kind is NoDataKind.DEFAULT:
            sentinel = CellValue._wrap(cv.cell_type, self.value(cv.cell_type))
        else:
            sentinel = CellValue.new(self.sentinel)
        if math.isnan(float(sentinel)):
            return math.isnan(float(cv))
        return sentinel == cv
