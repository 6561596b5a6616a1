"""erased-cells: runtime type-erased numeric cells, buffers and validity masks."""

import logging
from importlib.metadata import version as _version

from erased_cells._protocols import BufferOps
from erased_cells.buffer import CellBuffer
from erased_cells.dtypes import CellType
from erased_cells.encoding import cell_type_of, encoding_of, native_type, static_cast
from erased_cells.errors import CellError, NarrowingError, UnsupportedEncodingError
from erased_cells.mask import Mask
from erased_cells.masked import MaskedCellBuffer
from erased_cells.nodata import NoData, NoDataKind
from erased_cells.validation import (
    ValidationLevel,
    get_validation_level,
    is_validation_enabled,
    set_validation,
)
from erased_cells.value import CellValue

__version__: str = _version("erased-cells")

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Type tags
    "CellType",
    # Native encodings
    "cell_type_of",
    "encoding_of",
    "native_type",
    "static_cast",
    # Scalars
    "CellValue",
    # Buffers
    "BufferOps",
    "CellBuffer",
    "Mask",
    "MaskedCellBuffer",
    # No-data policies
    "NoData",
    "NoDataKind",
    # Errors
    "CellError",
    "NarrowingError",
    "UnsupportedEncodingError",
    # Validation
    "ValidationLevel",
    "set_validation",
    "is_validation_enabled",
    "get_validation_level",
    "__version__",
]
