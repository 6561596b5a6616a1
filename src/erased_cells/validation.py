"""Runtime validation toggle.

Validation is **off** by default for zero overhead in production.
Enable it via environment variable (ideal for CI) or programmatically::

    # Environment variable
    ERASED_CELLS_VALIDATE=structural pytest tests/
    ERASED_CELLS_VALIDATE=full pytest tests/

    # Programmatic
    from erased_cells import ValidationLevel, set_validation
    set_validation(ValidationLevel.STRUCTURAL)
    set_validation(ValidationLevel.FULL)

Three validation levels are supported (see ``ValidationLevel``):

- ``OFF``: No optional checks. Elementwise operations between buffers or
  masks of different lengths zip to the shorter length.
- ``STRUCTURAL``: Elementwise operations require equal lengths.
- ``FULL``: Accepted for forward compatibility; currently the same checks as
  ``STRUCTURAL``.

``set_validation()`` also accepts strings (``"off"``, ``"structural"``,
``"full"``) and booleans (``True`` → ``STRUCTURAL``, ``False`` → ``OFF``).

Checks that protect invariants (narrowing, index bounds, buffer/mask length
at ``MaskedCellBuffer`` construction, literal range checks on ingest) always
run regardless of this toggle.
"""

from __future__ import annotations

import enum
import logging
import os

logger = logging.getLogger(__name__)

ENV_VAR = "ERASED_CELLS_VALIDATE"


class ValidationLevel(enum.Enum):
    """Validation level for optional runtime checks.

    - ``OFF``: No optional checks. Zero overhead.
    - ``STRUCTURAL``: Equal lengths required for elementwise operations.
    - ``FULL``: Same checks as ``STRUCTURAL``.
    """

    OFF = "off"
    STRUCTURAL = "structural"
    FULL = "full"


_validation_level: ValidationLevel | None = None

_STR_TO_LEVEL = {v.value: v for v in ValidationLevel}


def get_validation_level() -> ValidationLevel:
    """Return the current validation level."""
    if _validation_level is not None:
        return _validation_level
    env = os.environ.get(ENV_VAR, "").lower()
    level = _STR_TO_LEVEL.get(env)
    if level is not None:
        return level
    if env in ("1", "true", "yes"):
        return ValidationLevel.STRUCTURAL
    return ValidationLevel.OFF


def is_validation_enabled() -> bool:
    """Return whether optional validation is enabled.

    Returns ``True`` when the validation level is ``STRUCTURAL`` or ``FULL``.
    """
    return get_validation_level() is not ValidationLevel.OFF


def set_validation(level: ValidationLevel | bool | str | None) -> None:
    """Set the validation level.

    Accepts a ``ValidationLevel`` enum, a level string
    (``"off"``, ``"structural"``, ``"full"``), or a boolean
    (``True`` → ``STRUCTURAL``, ``False`` → ``OFF``). ``None`` clears the
    programmatic setting so the environment variable applies again.
    """
    global _validation_level
    if level is None:
        _validation_level = None
    elif isinstance(level, ValidationLevel):
        _validation_level = level
    elif isinstance(level, bool):
        _validation_level = ValidationLevel.STRUCTURAL if level else ValidationLevel.OFF
    elif isinstance(level, str):
        parsed = _STR_TO_LEVEL.get(level)
        if parsed is None:
            raise ValueError(
                f"Invalid validation level: {level!r}. "
                f"Use ValidationLevel.OFF / STRUCTURAL / FULL, a string, or a bool."
            )
        _validation_level = parsed
    else:
        raise TypeError(f"Expected ValidationLevel, str, or bool, got {type(level).__name__}")
    logger.debug("Validation level set to %s", _validation_level)


# ---------------------------------------------------------------------------
# Checks used by buffers and masks
# ---------------------------------------------------------------------------


def check_lengths(left: int, right: int, context: str) -> int:
    """Return the common length of two elementwise operands.

    Mismatched lengths zip to the shorter operand unless validation is
    enabled, in which case ``ValueError`` is raised.
    """
    if left != right:
        if is_validation_enabled():
            raise ValueError(f"Length mismatch in {context}: {left} != {right}")
        logger.debug("Length mismatch in %s: truncating %d/%d", context, left, right)
    return min(left, right)
