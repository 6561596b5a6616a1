"""Unit tests for erased_cells.dtypes (CellType tags and widening)."""

from __future__ import annotations

import itertools

import numpy as np
import pytest

from erased_cells import CellType, CellValue, UnsupportedEncodingError

ALL_TYPES = list(CellType)
ALL_PAIRS = list(itertools.product(ALL_TYPES, ALL_TYPES))

# ---------------------------------------------------------------------------
# Encoding attributes
# ---------------------------------------------------------------------------


class TestAttributes:
    def test_closed_set_of_ten(self) -> None:
        assert [ct.name for ct in CellType] == [
            "UInt8",
            "UInt16",
            "UInt32",
            "UInt64",
            "Int8",
            "Int16",
            "Int32",
            "Int64",
            "Float32",
            "Float64",
        ]

    def test_str_is_member_name(self) -> None:
        assert str(CellType.UInt16) == "UInt16"
        assert f"{CellType.Float32}" == "Float32"

    @pytest.mark.parametrize(
        ("ct", "nbytes", "integral", "signed"),
        [
            (CellType.UInt8, 1, True, False),
            (CellType.UInt16, 2, True, False),
            (CellType.UInt32, 4, True, False),
            (CellType.UInt64, 8, True, False),
            (CellType.Int8, 1, True, True),
            (CellType.Int16, 2, True, True),
            (CellType.Int32, 4, True, True),
            (CellType.Int64, 8, True, True),
            (CellType.Float32, 4, False, True),
            (CellType.Float64, 8, False, True),
        ],
    )
    def test_layout(self, ct: CellType, nbytes: int, integral: bool, signed: bool) -> None:
        assert ct.nbytes == nbytes
        assert ct.is_integral is integral
        assert ct.is_signed is signed

    def test_dtype(self) -> None:
        assert CellType.Int32.dtype == np.dtype(np.int32)
        assert CellType.Float64.dtype == np.dtype(np.float64)

    def test_integer_limits(self) -> None:
        assert CellType.UInt8.min_value() == CellValue(CellType.UInt8, 0)
        assert CellType.UInt8.max_value() == CellValue(CellType.UInt8, 255)
        assert CellType.Int16.min_value() == CellValue(CellType.Int16, -32768)
        assert CellType.UInt64.max_value().value == np.iinfo(np.uint64).max

    def test_float_limits_are_finite(self) -> None:
        lo, hi = CellType.Float32.min_value(), CellType.Float32.max_value()
        assert lo.cell_type is CellType.Float32
        assert float(hi) == float(np.finfo(np.float32).max)
        assert float(lo) == -float(hi)

    def test_ordering_is_declaration_order(self) -> None:
        assert CellType.UInt64 < CellType.Int8
        assert CellType.Int64 < CellType.Float32
        assert CellType.Float64 >= CellType.Float64
        assert sorted(reversed(ALL_TYPES)) == ALL_TYPES


# ---------------------------------------------------------------------------
# union / can_fit_into
# ---------------------------------------------------------------------------


class TestUnion:
    @pytest.mark.parametrize(("a", "b"), ALL_PAIRS)
    def test_commutative(self, a: CellType, b: CellType) -> None:
        assert a.union(b) is b.union(a)

    @pytest.mark.parametrize("a", ALL_TYPES)
    def test_idempotent(self, a: CellType) -> None:
        assert a.union(a) is a

    @pytest.mark.parametrize(("a", "b"), ALL_PAIRS)
    def test_widening(self, a: CellType, b: CellType) -> None:
        assert a.union(b).nbytes >= max(a.nbytes, b.nbytes)

    @pytest.mark.parametrize(("a", "b"), ALL_PAIRS)
    def test_both_fit_into_union(self, a: CellType, b: CellType) -> None:
        u = a.union(b)
        assert a.can_fit_into(u)
        assert b.can_fit_into(u)

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            (CellType.UInt8, CellType.Int8, CellType.Int16),
            (CellType.UInt16, CellType.Int8, CellType.Int32),
            (CellType.UInt32, CellType.Int32, CellType.Int64),
            (CellType.UInt64, CellType.Int64, CellType.Float64),
            (CellType.UInt8, CellType.Float32, CellType.Float32),
            (CellType.Int16, CellType.Float32, CellType.Float32),
            (CellType.UInt32, CellType.Float32, CellType.Float64),
            (CellType.Int64, CellType.Float64, CellType.Float64),
            (CellType.UInt16, CellType.UInt32, CellType.UInt32),
            (CellType.Int8, CellType.Int32, CellType.Int32),
            (CellType.Float32, CellType.Float64, CellType.Float64),
        ],
    )
    def test_known_unions(self, a: CellType, b: CellType, expected: CellType) -> None:
        assert a.union(b) is expected

    def test_can_fit_into(self) -> None:
        assert CellType.UInt8.can_fit_into(CellType.Int16)
        assert CellType.UInt16.can_fit_into(CellType.Float32)
        assert CellType.Int32.can_fit_into(CellType.Float64)
        assert not CellType.Float32.can_fit_into(CellType.Int64)
        assert not CellType.Int8.can_fit_into(CellType.UInt8)
        assert not CellType.Int64.can_fit_into(CellType.Int32)

    @pytest.mark.parametrize("a", ALL_TYPES)
    def test_everything_fits_into_itself(self, a: CellType) -> None:
        assert a.can_fit_into(a)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


class TestLookup:
    @pytest.mark.parametrize("name", ["UInt8", "uint8", "UINT8", " uint8 "])
    def test_parse(self, name: str) -> None:
        assert CellType.parse(name) is CellType.UInt8

    def test_parse_unknown(self) -> None:
        with pytest.raises(UnsupportedEncodingError, match="bool"):
            CellType.parse("bool")

    @pytest.mark.parametrize("ct", ALL_TYPES)
    def test_from_dtype_round_trip(self, ct: CellType) -> None:
        assert CellType.from_dtype(ct.dtype) is ct

    def test_from_dtype_ignores_byte_order(self) -> None:
        assert CellType.from_dtype(np.dtype(">u2")) is CellType.UInt16
        assert CellType.from_dtype("<f8") is CellType.Float64

    @pytest.mark.parametrize("dtype", [np.bool_, np.float16, np.complex64, "datetime64[s]", object])
    def test_from_dtype_unsupported(self, dtype: object) -> None:
        with pytest.raises(UnsupportedEncodingError):
            CellType.from_dtype(dtype)

    def test_from_dtype_not_a_dtype(self) -> None:
        with pytest.raises(UnsupportedEncodingError):
            CellType.from_dtype("not-a-dtype")

    def test_unsupported_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            CellType.from_dtype(np.float16)
