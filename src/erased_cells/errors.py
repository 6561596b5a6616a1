"""Exceptions raised by erased-cells.

Only two recoverable failure kinds exist:

- ``NarrowingError``: a value or buffer would have to be represented in an
  encoding that cannot hold every value of its source encoding.
- ``UnsupportedEncodingError``: a foreign type tag (numpy dtype, Arrow type,
  GDAL data type, ...) has no counterpart in the closed ``CellType`` set.

Index-out-of-range and buffer/mask length mismatches are programmer errors and
surface as the builtin ``IndexError`` / ``ValueError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from erased_cells.dtypes import CellType


class CellError(Exception):
    """Base class for all erased-cells errors."""


class NarrowingError(CellError, ValueError):
    """Raised when converting from ``src`` to ``dst`` could lose information."""

    def __init__(self, src: CellType, dst: CellType, *, value: Any | None = None) -> None:
        self.src = src
        self.dst = dst
        self.value = value
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        msg = f"Invalid narrowing from cell type {self.src} to {self.dst}"
        if self.value is not None:
            msg += f" (value {self.value!r})"
        return msg


class UnsupportedEncodingError(CellError, TypeError):
    """Raised when a foreign type cannot be mapped onto a ``CellType``."""

    def __init__(self, description: Any) -> None:
        self.description = str(description)
        super().__init__(f"Unsupported cell encoding: {self.description}")
