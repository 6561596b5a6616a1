"""Unit tests for erased_cells.mask (Mask)."""

from __future__ import annotations

import numpy as np
import pytest

from erased_cells import Mask, set_validation


class TestConstruction:
    def test_from_list(self) -> None:
        mask = Mask([True, False, True])
        assert len(mask) == 3
        assert list(mask) == [True, False, True]

    def test_from_ndarray_copies(self) -> None:
        bits = np.array([1, 0], dtype=np.uint8)
        mask = Mask(bits)
        bits[1] = 1
        assert mask.get(1) is False

    def test_fill(self) -> None:
        assert Mask.fill(4, True).counts() == (4, 0)
        assert Mask.fill(3, False).counts() == (0, 3)

    def test_fill_via(self) -> None:
        assert list(Mask.fill_via(4, lambda i: i % 2 == 0)) == [True, False, True, False]

    def test_empty(self) -> None:
        mask = Mask()
        assert mask.is_empty()
        assert mask.all(True)
        assert mask.all(False)


class TestAccess:
    def test_get_put(self) -> None:
        mask = Mask.fill(3, True)
        mask.put(1, False)
        mask[2] = False
        assert mask.get(0) is True
        assert mask[1] is False
        assert mask.counts() == (1, 2)

    @pytest.mark.parametrize("index", [3, -1])
    def test_out_of_range(self, index: int) -> None:
        mask = Mask.fill(3, True)
        with pytest.raises(IndexError):
            mask.get(index)
        with pytest.raises(IndexError):
            mask.put(index, True)

    def test_all(self) -> None:
        assert Mask.fill(2, True).all(True)
        assert not Mask([True, False]).all(True)
        assert not Mask([True, False]).all(False)

    def test_append_extend(self) -> None:
        mask = Mask([True])
        mask.append(False)
        mask.extend([True, True])
        mask.extend(Mask([False]))
        assert list(mask) == [True, False, True, True, False]

    def test_to_numpy(self) -> None:
        out = Mask([True, False]).to_numpy()
        assert out.dtype == np.bool_
        assert np.asarray(Mask([True])).dtype == np.bool_


class TestLogic:
    def test_and_or_not(self) -> None:
        a = Mask([True, False, True])
        b = Mask([True, True, False])
        assert a & b == Mask([True, False, False])
        assert a | b == Mask([True, True, True])
        assert ~a == Mask([False, True, False])

    def test_operands_unchanged(self) -> None:
        a = Mask([True, False])
        b = Mask([False, False])
        _ = a & b
        assert list(a) == [True, False]

    def test_in_place(self) -> None:
        a = Mask([True, False, True])
        a &= Mask([True, True, False])
        assert list(a) == [True, False, False]
        a |= Mask([False, True, False])
        assert list(a) == [True, True, False]

    def test_length_mismatch_zips(self) -> None:
        assert len(Mask([True, True]) & Mask([True])) == 1

    def test_length_mismatch_structural(self) -> None:
        set_validation(True)
        with pytest.raises(ValueError, match="Length mismatch"):
            Mask([True, True]) | Mask([True])


class TestOrdering:
    def test_equality(self) -> None:
        assert Mask([True, False]) == Mask([True, False])
        assert Mask([True, False]) == [True, False]
        assert Mask([True]) != Mask([True, True])

    def test_lexicographic(self) -> None:
        assert Mask([False, True]) < Mask([True, False])
        assert Mask([True]) < Mask([True, False])
        assert Mask([True, True]) > Mask([True, False, True])

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(Mask([True]))


class TestRepr:
    def test_short(self) -> None:
        assert repr(Mask([True, False])) == "Mask(True, False)"

    def test_long_is_elided(self) -> None:
        text = repr(Mask.fill(12, True))
        assert text.startswith("Mask(True, True, True, True, True, ...")
        assert text.count("True") == 10
