"""Unit tests for erased_cells.errors."""

from __future__ import annotations

import pytest

from erased_cells import (
    CellError,
    CellType,
    CellValue,
    NarrowingError,
    UnsupportedEncodingError,
)


class TestNarrowingError:
    def test_fields_and_message(self) -> None:
        err = NarrowingError(CellType.Float32, CellType.Int64)
        assert err.src is CellType.Float32
        assert err.dst is CellType.Int64
        assert err.value is None
        assert str(err) == "Invalid narrowing from cell type Float32 to Int64"

    def test_message_with_value(self) -> None:
        err = NarrowingError(CellType.Int16, CellType.UInt8, value=CellValue(CellType.Int16, -1))
        assert str(err).endswith("(value Int16(-1))")

    def test_hierarchy(self) -> None:
        err = NarrowingError(CellType.Int16, CellType.UInt8)
        assert isinstance(err, CellError)
        assert isinstance(err, ValueError)

    def test_raised_by_convert(self) -> None:
        with pytest.raises(CellError):
            CellValue(CellType.Float64, 1.0).convert(CellType.Float32)


class TestUnsupportedEncodingError:
    def test_fields_and_message(self) -> None:
        err = UnsupportedEncodingError("GDAL data type 15")
        assert err.description == "GDAL data type 15"
        assert str(err) == "Unsupported cell encoding: GDAL data type 15"

    def test_hierarchy(self) -> None:
        err = UnsupportedEncodingError("x")
        assert isinstance(err, CellError)
        assert isinstance(err, TypeError)
