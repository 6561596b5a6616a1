"""Type-tag mapping between ``CellType`` and foreign type systems.

Each table maps the ten supported encodings one-to-one. Anything a foreign
system offers beyond them (booleans, strings, half floats, decimals,
timestamps...) raises ``UnsupportedEncodingError`` naming the foreign type.

pyarrow, pandas and Polars are optional; their tables are built on first use.
"""

from __future__ import annotations

import functools
from typing import Any

import numpy as np

from erased_cells.dtypes import CellType
from erased_cells.errors import UnsupportedEncodingError

# ---------------------------------------------------------------------------
# GDAL data types (GDALDataType ordinals)
# ---------------------------------------------------------------------------

# UInt64, Int64 and Int8 are hard-coded ordinals so that GDAL < 3.5 builds,
# which lack the named constants, still map them.
GDAL_TO_CELL_TYPE: dict[int, CellType] = {
    1: CellType.UInt8,  # GDT_Byte
    2: CellType.UInt16,  # GDT_UInt16
    3: CellType.Int16,  # GDT_Int16
    4: CellType.UInt32,  # GDT_UInt32
    5: CellType.Int32,  # GDT_Int32
    6: CellType.Float32,  # GDT_Float32
    7: CellType.Float64,  # GDT_Float64
    12: CellType.UInt64,  # GDT_UInt64 (GDAL >= 3.5)
    13: CellType.Int64,  # GDT_Int64 (GDAL >= 3.5)
    14: CellType.Int8,  # GDT_Int8 (GDAL >= 3.7)
}

CELL_TYPE_TO_GDAL: dict[CellType, int] = {ct: code for code, ct in GDAL_TO_CELL_TYPE.items()}


def cell_type_from_gdal(code: int) -> CellType:
    """Map a GDAL data type ordinal to a ``CellType``."""
    ct = GDAL_TO_CELL_TYPE.get(int(code))
    if ct is None:
        raise UnsupportedEncodingError(f"GDAL data type {code}")
    return ct


def cell_type_to_gdal(cell_type: CellType) -> int:
    """Map a ``CellType`` to its GDAL data type ordinal."""
    return CELL_TYPE_TO_GDAL[cell_type]


# ---------------------------------------------------------------------------
# numpy
# ---------------------------------------------------------------------------


def map_numpy_dtype(dtype: Any) -> CellType:
    """Map a numpy dtype to a ``CellType``. Alias of ``CellType.from_dtype``."""
    return CellType.from_dtype(dtype)


def map_cell_type_to_numpy(cell_type: CellType) -> np.dtype[Any]:
    return cell_type.dtype


# ---------------------------------------------------------------------------
# Arrow
# ---------------------------------------------------------------------------


@functools.cache
def _arrow_table() -> dict[CellType, Any]:
    import pyarrow as pa

    return {
        CellType.UInt8: pa.uint8(),
        CellType.UInt16: pa.uint16(),
        CellType.UInt32: pa.uint32(),
        CellType.UInt64: pa.uint64(),
        CellType.Int8: pa.int8(),
        CellType.Int16: pa.int16(),
        CellType.Int32: pa.int32(),
        CellType.Int64: pa.int64(),
        CellType.Float32: pa.float32(),
        CellType.Float64: pa.float64(),
    }


def map_cell_type_to_arrow(cell_type: CellType) -> Any:
    """Map a ``CellType`` to a ``pyarrow.DataType``."""
    return _arrow_table()[cell_type]


def map_arrow_type(arrow_type: Any) -> CellType:
    """Map a ``pyarrow.DataType`` to a ``CellType``."""
    for ct, pa_type in _arrow_table().items():
        if arrow_type == pa_type:
            return ct
    raise UnsupportedEncodingError(f"Arrow type {arrow_type}")


# ---------------------------------------------------------------------------
# pandas (nullable extension dtypes)
# ---------------------------------------------------------------------------


@functools.cache
def _pandas_table() -> dict[CellType, Any]:
    import pandas as pd

    return {
        CellType.UInt8: pd.UInt8Dtype(),
        CellType.UInt16: pd.UInt16Dtype(),
        CellType.UInt32: pd.UInt32Dtype(),
        CellType.UInt64: pd.UInt64Dtype(),
        CellType.Int8: pd.Int8Dtype(),
        CellType.Int16: pd.Int16Dtype(),
        CellType.Int32: pd.Int32Dtype(),
        CellType.Int64: pd.Int64Dtype(),
        CellType.Float32: pd.Float32Dtype(),
        CellType.Float64: pd.Float64Dtype(),
    }


def map_cell_type_to_pandas(cell_type: CellType) -> Any:
    """Map a ``CellType`` to a pandas nullable extension dtype."""
    return _pandas_table()[cell_type]


def map_pandas_dtype(pd_dtype: Any) -> CellType:
    """Map a pandas dtype (nullable extension or plain numpy) to a ``CellType``."""
    if isinstance(pd_dtype, np.dtype):
        return CellType.from_dtype(pd_dtype)
    for ct, dtype in _pandas_table().items():
        if pd_dtype == dtype:
            return ct
    raise UnsupportedEncodingError(f"pandas dtype {pd_dtype}")


# ---------------------------------------------------------------------------
# Polars (keyed by DataType class, not instance)
# ---------------------------------------------------------------------------


@functools.cache
def _polars_table() -> dict[CellType, Any]:
    import polars as pl

    return {
        CellType.UInt8: pl.UInt8,
        CellType.UInt16: pl.UInt16,
        CellType.UInt32: pl.UInt32,
        CellType.UInt64: pl.UInt64,
        CellType.Int8: pl.Int8,
        CellType.Int16: pl.Int16,
        CellType.Int32: pl.Int32,
        CellType.Int64: pl.Int64,
        CellType.Float32: pl.Float32,
        CellType.Float64: pl.Float64,
    }


def map_cell_type_to_polars(cell_type: CellType) -> Any:
    """Map a ``CellType`` to a Polars DataType instance."""
    return _polars_table()[cell_type]()


def map_polars_dtype(pl_dtype: Any) -> CellType:
    """Map a Polars DataType (class or instance) to a ``CellType``."""
    dtype_cls = pl_dtype if isinstance(pl_dtype, type) else type(pl_dtype)
    for ct, cls in _polars_table().items():
        if dtype_cls is cls:
            return ct
    raise UnsupportedEncodingError(f"Polars dtype {pl_dtype}")
