"""Checked arithmetic over one fixed-width integer type.

Every operation validates its operands, computes the exact result with
Python's unbounded integers, and returns ``Ok`` only when that result is
representable in the type.  Anything else becomes ``Err(MathError)``
after a call-site diagnostic is emitted.  Nothing is wrapped, clamped or
truncated on the failure path.

Decision branches are annotated with their branch-IDs (see spec.py
``BRANCHES``) so white-box tests can trace coverage back to them.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import diagnostics
from int_types import IntType, U32_TYPE
from outcome import Err, MathError, Ok, Result

diagnostics.register_internal(__file__)


def _require_int(v: object) -> None:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"expected int, got {type(v).__name__}")


def truncdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero (not floor division)."""
    q, r = divmod(a, b)
    # divmod rounds toward -inf; adjust when the quotient is negative
    # and there is a remainder.
    if r != 0 and (a < 0) != (b < 0):
        q += 1
    return q


@dataclass(frozen=True)
class CheckedMath:
    """The seven checked operations for ``int_type``.

    Shift amounts are values of ``shift_type``, which must be unsigned.
    """

    int_type: IntType
    shift_type: IntType = U32_TYPE

    def __post_init__(self) -> None:
        if self.shift_type.signed:
            raise ValueError(f"shift type {self.shift_type} must be unsigned")

    # -- internal helpers ---------------------------------------------------

    def _validate(self, *values: int) -> None:
        """Reject operands that are not values of ``int_type``.

        Branches: INPUT-VALID, INPUT-INVALID
        """
        for v in values:
            _require_int(v)
            if not self.int_type.contains(v):                     # INPUT-INVALID
                raise ValueError(
                    f"{v} is outside {self.int_type} range "
                    f"[{self.int_type.min}, {self.int_type.max}]"
                )
        # (falls through) INPUT-VALID

    def _validate_shift(self, offset: int) -> None:
        """Branches: SHIFT-INPUT-INVALID"""
        _require_int(offset)
        if not self.shift_type.contains(offset):                  # SHIFT-INPUT-INVALID
            raise ValueError(
                f"shift amount {offset} is outside {self.shift_type} range"
            )

    def _fail(self, operation: str) -> Err[MathError]:
        location = diagnostics.caller_site()
        diagnostics.emit(
            diagnostics.MathErrorRecord(
                location=location,
                operation=operation,
                int_type=self.int_type.name,
            )
        )
        return Err(MathError(operation, self.int_type, location))

    def _check(self, operation: str, raw: int) -> Result[int, MathError]:
        """Branches: RANGE-OK, RANGE-OVERFLOW"""
        if self.int_type.contains(raw):                           # RANGE-OK
            return Ok(raw)
        return self._fail(operation)                              # RANGE-OVERFLOW

    # -- public operations --------------------------------------------------

    def safe_add(self, a: int, b: int) -> Result[int, MathError]:
        self._validate(a, b)
        return self._check("safe_add", a + b)

    def safe_sub(self, a: int, b: int) -> Result[int, MathError]:
        self._validate(a, b)
        return self._check("safe_sub", a - b)

    def safe_mul(self, a: int, b: int) -> Result[int, MathError]:
        self._validate(a, b)
        return self._check("safe_mul", a * b)

    def safe_div(self, a: int, b: int) -> Result[int, MathError]:
        """Division truncating toward zero.

        Branches: DIV-ZERO, DIV-NORMAL; ``MIN / -1`` on a signed type
        falls into RANGE-OVERFLOW.
        """
        self._validate(a, b)
        if b == 0:                                                # DIV-ZERO
            return self._fail("safe_div")
        return self._check("safe_div", truncdiv(a, b))            # DIV-NORMAL

    def safe_rem(self, a: int, b: int) -> Result[int, MathError]:
        """Remainder with the sign of the dividend.

        Branches: REM-ZERO, REM-OVERFLOW, REM-NORMAL
        """
        self._validate(a, b)
        if b == 0:                                                # REM-ZERO
            return self._fail("safe_rem")
        if a == self.int_type.min and b == -1:                    # REM-OVERFLOW
            # The paired quotient MIN / -1 overflows.
            return self._fail("safe_rem")
        return Ok(a - b * truncdiv(a, b))                         # REM-NORMAL

    def safe_shl(self, a: int, offset: int) -> Result[int, MathError]:
        """Left shift; bits moved past the top of the type are dropped.

        Branches: SHIFT-OVERFLOW, SHL-NORMAL
        """
        self._validate(a)
        self._validate_shift(offset)
        if offset >= self.int_type.bits:                          # SHIFT-OVERFLOW
            return self._fail("safe_shl")
        return Ok(self.int_type.wrap(a << offset))                # SHL-NORMAL

    def safe_shr(self, a: int, offset: int) -> Result[int, MathError]:
        """Right shift, arithmetic for signed types and logical otherwise.

        Branches: SHIFT-OVERFLOW, SHR-NORMAL
        """
        self._validate(a)
        self._validate_shift(offset)
        if offset >= self.int_type.bits:                          # SHIFT-OVERFLOW
            return self._fail("safe_shr")
        return Ok(a >> offset)                                    # SHR-NORMAL

    # -- conversion ---------------------------------------------------------

    def try_from(self, v: int) -> Result[int, MathError]:
        """Checked conversion of any integer into ``int_type``."""
        _require_int(v)
        return self._check("try_from", v)


@lru_cache(maxsize=None)
def safe_math(int_type: IntType, shift_type: IntType = U32_TYPE) -> CheckedMath:
    """Shared ``CheckedMath`` instance for a type."""
    return CheckedMath(int_type, shift_type)
