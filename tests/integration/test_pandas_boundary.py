"""Integration tests for the pandas boundary (to_pandas / from_pandas)."""

from __future__ import annotations

import numpy as np
import pytest

from erased_cells import CellBuffer, CellType, Mask, MaskedCellBuffer, UnsupportedEncodingError
from erased_cells.io import from_pandas, to_pandas

pd = pytest.importorskip("pandas")


def _masked() -> MaskedCellBuffer:
    return MaskedCellBuffer(
        CellBuffer.from_vec(np.array([10, 20, 30], dtype=np.uint16)),
        Mask([True, True, False]),
    )


class TestToPandas:
    def test_nullable_dtype(self) -> None:
        s = to_pandas(_masked(), name="red")
        assert s.dtype == pd.UInt16Dtype()
        assert s.name == "red"
        assert s.isna().tolist() == [False, False, True]
        assert s.iloc[1] == 20

    def test_float(self) -> None:
        s = to_pandas(CellBuffer.from_vec(np.array([0.5], dtype=np.float32)))
        assert s.dtype == pd.Float32Dtype()
        assert not s.isna().any()


class TestFromPandas:
    def test_na_becomes_invalid(self) -> None:
        s = pd.Series([1, None, 3], dtype="Int32")
        m = from_pandas(s)
        assert m.cell_type is CellType.Int32
        assert m.mask == [True, False, True]
        assert m.get(1).is_zero()

    def test_numpy_backed_series_is_all_valid(self) -> None:
        s = pd.Series([1.0, np.nan], dtype=np.float64)
        m = from_pandas(s)
        assert m.cell_type is CellType.Float64
        assert m.counts() == (2, 0)

    def test_unsupported(self) -> None:
        with pytest.raises(UnsupportedEncodingError):
            from_pandas(pd.Series([True, False], dtype="boolean"))

    def test_round_trip(self) -> None:
        original = _masked()
        restored = from_pandas(to_pandas(original))
        assert restored.cell_type is CellType.UInt16
        assert restored.mask == original.mask
        assert restored.get_masked(0) == 10
