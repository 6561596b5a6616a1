"""Buffer protocol (what every buffer kind implements)."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import numpy as np

    from erased_cells.dtypes import CellType
    from erased_cells.value import CellValue


@runtime_checkable
class BufferOps(Protocol):
    """Operations shared by ``CellBuffer`` and ``MaskedCellBuffer``.

    Code that only reads or writes cell values can accept either buffer kind
    through this protocol.
    """

    # --- Construction ---

    @classmethod
    def from_vec(cls, values: Iterable[Any], cell_type: CellType | None = None) -> Any: ...

    @classmethod
    def with_defaults(cls, length: int, cell_type: CellType) -> Any: ...

    @classmethod
    def fill(cls, length: int, value: Any) -> Any: ...

    @classmethod
    def fill_via(
        cls,
        length: int,
        f: Callable[[int], Any],
        cell_type: CellType | None = None,
    ) -> Any: ...

    # --- Inspection ---

    @property
    def cell_type(self) -> CellType: ...

    def __len__(self) -> int: ...

    def is_empty(self) -> bool: ...

    def get(self, index: int) -> CellValue: ...

    def put(self, index: int, value: Any) -> None: ...

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> Any: ...

    def min_max(self) -> tuple[CellValue, CellValue]: ...

    def to_vec(self, kind: Any) -> np.ndarray: ...
