"""Cell type tags for erased-cells.

``CellType`` is the closed set of primitive numeric encodings a cell may use.
Every scalar (``CellValue``) and buffer (``CellBuffer``) carries exactly one
``CellType``; all promotion decisions are made here, on tags alone, before any
value is touched.

Each member's value is the corresponding numpy dtype name, so byte width,
signedness, integrality and range all derive from numpy's metadata. Adding an
encoding is a one-line change to the enum.

Declaration order is significant: it is the total order over tags, used as
the first key when comparing buffers.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any

import numpy as np

from erased_cells.errors import UnsupportedEncodingError

if TYPE_CHECKING:
    from erased_cells.value import CellValue

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CellType
# ---------------------------------------------------------------------------


class CellType(enum.Enum):
    """Runtime discriminator selecting a primitive numeric encoding."""

    # Unsigned integers
    UInt8 = "uint8"
    UInt16 = "uint16"
    UInt32 = "uint32"
    UInt64 = "uint64"
    # Signed integers
    Int8 = "int8"
    Int16 = "int16"
    Int32 = "int32"
    Int64 = "int64"
    # Floating point
    Float32 = "float32"
    Float64 = "float64"

    def __str__(self) -> str:
        return self.name

    # --- Ordering (declaration order) ---

    @property
    def ordinal(self) -> int:
        """Position of this tag in declaration order."""
        return _ORDINALS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CellType):
            return NotImplemented
        return self.ordinal < other.ordinal

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CellType):
            return NotImplemented
        return self.ordinal <= other.ordinal

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CellType):
            return NotImplemented
        return self.ordinal > other.ordinal

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CellType):
            return NotImplemented
        return self.ordinal >= other.ordinal

    # --- Encoding attributes ---

    @property
    def dtype(self) -> np.dtype[Any]:
        """The native-byte-order numpy dtype of this encoding."""
        return np.dtype(self.value)

    @property
    def nbytes(self) -> int:
        """Width of one cell in bytes."""
        return self.dtype.itemsize

    @property
    def is_integral(self) -> bool:
        return self.dtype.kind in "ui"

    @property
    def is_signed(self) -> bool:
        """True for signed integers and for floating point encodings."""
        return self.dtype.kind in "if"

    def min_value(self) -> CellValue:
        """Smallest value of this encoding (lowest finite value for floats)."""
        from erased_cells.value import CellValue

        return CellValue(self, _limits(self.dtype).min)

    def max_value(self) -> CellValue:
        """Largest value of this encoding (highest finite value for floats)."""
        from erased_cells.value import CellValue

        return CellValue(self, _limits(self.dtype).max)

    # --- Promotion ---

    def union(self, other: CellType) -> CellType:
        """Select the smallest ``CellType`` able to hold every value of ``self`` and ``other``.

        Mixing floating point with integers requires twice the integer's width
        (IEEE-754 mantissas are roughly half the word); mixing signed with
        unsigned integers requires twice the unsigned width. Anything needing
        more than eight bytes falls back to ``Float64``.
        """
        if self is other:
            return self
        if self.is_integral != other.is_integral:
            floating, integral = (other, self) if self.is_integral else (self, other)
            nbytes = max(floating.nbytes, 2 * integral.nbytes)
        elif self.is_integral and self.is_signed != other.is_signed:
            signed, unsigned = (self, other) if self.is_signed else (other, self)
            nbytes = max(signed.nbytes, 2 * unsigned.nbytes)
        else:
            nbytes = max(self.nbytes, other.nbytes)
        return _from_layout(
            nbytes,
            signed=self.is_signed or other.is_signed,
            integral=self.is_integral and other.is_integral,
        )

    def can_fit_into(self, other: CellType) -> bool:
        """Return True if every value of ``self`` can be represented by ``other``."""
        return self.union(other) is other

    # --- Lookup ---

    @classmethod
    def parse(cls, name: str) -> CellType:
        """Look up a tag by member name (``"UInt8"``) or numpy name (``"uint8"``).

        Matching is case-insensitive. Raises ``UnsupportedEncodingError`` for
        anything outside the closed set.
        """
        tag = _BY_LOWER_NAME.get(name.strip().lower())
        if tag is None:
            raise UnsupportedEncodingError(repr(name))
        return tag

    @classmethod
    def from_dtype(cls, dtype: Any) -> CellType:
        """Map a numpy dtype (or anything ``np.dtype`` accepts) onto a tag.

        Byte order is ignored. Raises ``UnsupportedEncodingError`` for kinds
        outside the closed set (bool, float16, complex, datetime, object...).
        """
        try:
            resolved = np.dtype(dtype)
        except TypeError as e:
            raise UnsupportedEncodingError(repr(dtype)) from e
        tag = _BY_LOWER_NAME.get(resolved.name) if resolved.kind in "uif" else None
        if tag is None:
            raise UnsupportedEncodingError(f"numpy dtype {resolved.name}")
        return tag


# ---------------------------------------------------------------------------
# Lookup tables (derived from the enum, never edited by hand)
# ---------------------------------------------------------------------------

_ORDINALS: dict[CellType, int] = {ct: i for i, ct in enumerate(CellType)}

_BY_LOWER_NAME: dict[str, CellType] = {
    **{ct.name.lower(): ct for ct in CellType},
    **{ct.value: ct for ct in CellType},
}


def _limits(dtype: np.dtype[Any]) -> Any:
    return np.iinfo(dtype) if dtype.kind in "ui" else np.finfo(dtype)


def _from_layout(nbytes: int, *, signed: bool, integral: bool) -> CellType:
    """Map a required ``(bytes, signed, integral)`` layout onto the narrowest tag."""
    if integral:
        for ct in CellType:
            if ct.is_integral and ct.is_signed == signed and ct.nbytes >= nbytes:
                return ct
        logger.debug("No %d-byte integral encoding; promoting to Float64", nbytes)
        return CellType.Float64
    for ct in CellType:
        if not ct.is_integral and ct.nbytes >= nbytes:
            return ct
    return CellType.Float64
