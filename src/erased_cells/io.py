"""External boundary: raster bands, Arrow, pandas and Polars.

A raster connector reads a band as a plain native array plus an optional
``float`` no-data sentinel and hands both to ``from_band``; ``to_band`` gives
it a plain array back, with invalid cells replaced by a sentinel.

The columnar converters carry validity out of band: invalid cells become
nulls (Arrow, Polars) or ``pd.NA`` (pandas), and nulls come back as invalid
cells holding the encoding's zero value. pyarrow, pandas and Polars are
imported lazily so the core works without them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from erased_cells.buffer import CellBuffer
from erased_cells.conversion import (
    map_arrow_type,
    map_cell_type_to_arrow,
    map_pandas_dtype,
    map_polars_dtype,
)
from erased_cells.dtypes import CellType
from erased_cells.mask import Mask
from erased_cells.masked import MaskedCellBuffer
from erased_cells.nodata import NoData

if TYPE_CHECKING:
    import pandas as pd
    import polars as pl
    import pyarrow as pa

logger = logging.getLogger(__name__)


def _split(cells: CellBuffer | MaskedCellBuffer) -> tuple[CellBuffer, np.ndarray]:
    """Return the buffer of ``cells`` and its validity as a bool array."""
    if isinstance(cells, MaskedCellBuffer):
        return cells.buffer, cells.mask.to_numpy()
    if isinstance(cells, CellBuffer):
        return cells, np.ones(len(cells), dtype=np.bool_)
    raise TypeError(f"Expected CellBuffer or MaskedCellBuffer, got {type(cells).__name__}")


# ---------------------------------------------------------------------------
# Raster bands
# ---------------------------------------------------------------------------


def from_band(data: Any, nodata: float | None = None) -> MaskedCellBuffer:
    """Build a ``MaskedCellBuffer`` from a band's native array and optional sentinel.

    The encoding comes from the array's dtype (``UnsupportedEncodingError``
    outside the supported set). A sentinel that does not fit the encoding
    raises ``NarrowingError``. Multi-dimensional arrays are flattened in C
    order.
    """
    array = np.asarray(data)
    cell_type = CellType.from_dtype(array.dtype)
    policy = NoData.from_sentinel(nodata, cell_type)
    masked = MaskedCellBuffer.from_vec_with_nodata(array.reshape(-1), policy)
    logger.debug(
        "Read %d %s cells from band (sentinel %r, %d invalid)",
        len(masked),
        cell_type,
        nodata,
        masked.counts()[1],
    )
    return masked


def to_band(
    cells: CellBuffer | MaskedCellBuffer,
    kind: Any,
    nodata: NoData | None = None,
) -> np.ndarray:
    """Materialize ``cells`` as a plain array of ``kind``'s encoding for writing to a band.

    Invalid cells are replaced with ``nodata`` (``NoData.default()`` when not
    given). Raises ``NarrowingError`` if the cells do not fit ``kind``.
    """
    if isinstance(cells, CellBuffer):
        cells = MaskedCellBuffer.from_buffer(cells)
    out = cells.to_vec_with_nodata(kind, nodata)
    logger.debug("Writing %d %s cells to band (nodata %r)", len(out), out.dtype, nodata)
    return out


# ---------------------------------------------------------------------------
# Arrow
# ---------------------------------------------------------------------------


def to_arrow(cells: CellBuffer | MaskedCellBuffer) -> pa.Array:
    """Convert to a ``pyarrow.Array`` whose nulls are the invalid cells."""
    import pyarrow as pa

    buffer, valid = _split(cells)
    arrow_type = map_cell_type_to_arrow(buffer.cell_type)
    mask = None if valid.all() else ~valid
    return pa.array(buffer.to_numpy(), type=arrow_type, mask=mask)


def from_arrow(array: pa.Array | pa.ChunkedArray) -> MaskedCellBuffer:
    """Convert a numeric ``pyarrow.Array`` (or ``ChunkedArray``) into a ``MaskedCellBuffer``."""
    import pyarrow as pa

    if isinstance(array, pa.ChunkedArray):
        array = array.combine_chunks()
    cell_type = map_arrow_type(array.type)
    valid = array.is_valid().to_numpy(zero_copy_only=False).astype(np.bool_)
    filled = array.fill_null(pa.scalar(0, type=array.type)) if array.null_count else array
    values = filled.to_numpy(zero_copy_only=False).astype(cell_type.dtype)
    logger.debug("Ingested %d %s cells from Arrow (%d null)", len(array), cell_type, array.null_count)
    return MaskedCellBuffer(CellBuffer._wrap(values), Mask._wrap(valid))


# ---------------------------------------------------------------------------
# pandas
# ---------------------------------------------------------------------------


def to_pandas(cells: CellBuffer | MaskedCellBuffer, name: str | None = None) -> pd.Series:
    """Convert to a pandas ``Series`` with a nullable dtype; invalid cells are ``pd.NA``."""
    import pandas as pd

    buffer, valid = _split(cells)
    values = buffer.to_numpy()
    if buffer.cell_type.is_integral:
        array = pd.arrays.IntegerArray(values, ~valid)
    else:
        array = pd.arrays.FloatingArray(values, ~valid)
    return pd.Series(array, name=name)


def from_pandas(series: pd.Series) -> MaskedCellBuffer:
    """Convert a numeric pandas ``Series`` into a ``MaskedCellBuffer``.

    For nullable extension dtypes ``pd.NA`` marks invalid cells. Plain numpy
    dtypes are taken as all valid, NaN included.
    """
    import pandas as pd

    cell_type = map_pandas_dtype(series.dtype)
    if isinstance(series.dtype, pd.api.extensions.ExtensionDtype):
        valid = ~series.isna().to_numpy(dtype=np.bool_)
        values = series.to_numpy(dtype=cell_type.dtype, na_value=0)
    else:
        valid = np.ones(len(series), dtype=np.bool_)
        values = series.to_numpy(dtype=cell_type.dtype, copy=True)
    return MaskedCellBuffer(CellBuffer._wrap(values), Mask._wrap(valid))


# ---------------------------------------------------------------------------
# Polars (through Arrow)
# ---------------------------------------------------------------------------


def to_polars(cells: CellBuffer | MaskedCellBuffer, name: str = "") -> pl.Series:
    """Convert to a Polars ``Series``; invalid cells are nulls."""
    import polars as pl

    series = pl.from_arrow(to_arrow(cells))
    return series.alias(name)


def from_polars(series: pl.Series) -> MaskedCellBuffer:
    """Convert a numeric Polars ``Series`` into a ``MaskedCellBuffer`` (nulls are invalid)."""
    map_polars_dtype(series.dtype)
    return from_arrow(series.to_arrow())
