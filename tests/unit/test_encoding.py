"""Unit tests for erased_cells.encoding (native primitive binding)."""

from __future__ import annotations

import numpy as np
import pytest

from erased_cells import (
    CellType,
    UnsupportedEncodingError,
    cell_type_of,
    encoding_of,
    native_type,
    static_cast,
)


class TestCellTypeOf:
    @pytest.mark.parametrize("ct", list(CellType))
    def test_numpy_scalars_bind_to_their_tag(self, ct: CellType) -> None:
        assert cell_type_of(ct.dtype.type(1)) is ct

    def test_python_int(self) -> None:
        assert cell_type_of(3) is CellType.Int64
        assert cell_type_of(-(2**63)) is CellType.Int64

    def test_python_int_above_int64(self) -> None:
        assert cell_type_of(2**63) is CellType.UInt64
        assert cell_type_of(2**64 - 1) is CellType.UInt64

    def test_python_int_out_of_every_range(self) -> None:
        with pytest.raises(ValueError, match="out of range"):
            cell_type_of(2**64)

    def test_python_float(self) -> None:
        assert cell_type_of(0.5) is CellType.Float64

    @pytest.mark.parametrize("value", [True, np.bool_(False)])
    def test_bool_rejected(self, value: object) -> None:
        with pytest.raises(TypeError, match="Booleans"):
            cell_type_of(value)

    def test_non_numeric_rejected(self) -> None:
        with pytest.raises(TypeError, match="str"):
            cell_type_of("3")

    def test_float16_unsupported(self) -> None:
        with pytest.raises(UnsupportedEncodingError):
            cell_type_of(np.float16(1))


class TestEncodingOf:
    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (CellType.Int8, CellType.Int8),
            (np.uint16, CellType.UInt16),
            (np.dtype("f4"), CellType.Float32),
            ("int32", CellType.Int32),
            ("UInt64", CellType.UInt64),
            (int, CellType.Int64),
            (float, CellType.Float64),
        ],
    )
    def test_resolves(self, kind: object, expected: CellType) -> None:
        assert encoding_of(kind) is expected

    def test_bool_type_rejected(self) -> None:
        with pytest.raises(TypeError):
            encoding_of(bool)

    def test_unknown_name(self) -> None:
        with pytest.raises(UnsupportedEncodingError):
            encoding_of("complex128")


class TestStaticCast:
    def test_native_type(self) -> None:
        assert native_type(CellType.UInt8) is np.uint8
        assert native_type(CellType.Float64) is np.float64

    def test_same_tag(self) -> None:
        out = static_cast(np.int16(-7), CellType.Int16)
        assert out == -7
        assert type(out) is np.int16

    def test_python_int_binds_to_int64(self) -> None:
        out = static_cast(5, CellType.Int64)
        assert type(out) is np.int64

    def test_other_tag_returns_none(self) -> None:
        assert static_cast(np.uint8(1), CellType.UInt16) is None
        assert static_cast(1.5, CellType.Float32) is None
