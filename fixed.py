"""Fixed-width integer value classes.

One ``FixedInt`` subclass exists per integer type, so the operand's
class selects the checked implementation::

    >>> U32(6).safe_mul(U32(7))
    Ok(value=U32(42))
    >>> U32(10).safe_sub(U32(20)).is_err()
    True

Values are immutable.  Plain ``int`` operands are accepted and checked
against the receiver's range; mixing two different ``FixedInt`` classes
is a ``TypeError``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, TypeVar, Union

import diagnostics
from checked import CheckedMath, safe_math
from int_types import (
    IntType,
    I8_TYPE,
    I16_TYPE,
    I32_TYPE,
    I64_TYPE,
    I128_TYPE,
    U8_TYPE,
    U16_TYPE,
    U32_TYPE,
    U64_TYPE,
    U128_TYPE,
    USIZE_TYPE,
)
from outcome import MathError, Result

diagnostics.register_internal(__file__)

F = TypeVar("F", bound="FixedInt")


@dataclass(frozen=True, order=True, repr=False)
class FixedInt:
    """Base class of the fixed-width integer value types."""

    value: int

    INT_TYPE: ClassVar[IntType]
    BITS: ClassVar[int]
    MIN: ClassVar[FixedInt]
    MAX: ClassVar[FixedInt]

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        cls.BITS = cls.INT_TYPE.bits
        cls.MIN = cls(cls.INT_TYPE.min)
        cls.MAX = cls(cls.INT_TYPE.max)
        FIXED_TYPES[cls.INT_TYPE] = cls

    def __post_init__(self) -> None:
        int_type = getattr(type(self), "INT_TYPE", None)
        if int_type is None:
            raise TypeError("FixedInt is abstract; use U32, I64, ...")
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise TypeError(f"expected int, got {type(self.value).__name__}")
        if not int_type.contains(self.value):
            raise ValueError(
                f"{self.value} is outside {int_type} range "
                f"[{int_type.min}, {int_type.max}]"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    # -- internal helpers ---------------------------------------------------

    @classmethod
    def _math(cls) -> CheckedMath:
        return safe_math(cls.INT_TYPE)

    def _operand(self, other: Union[FixedInt, int]) -> int:
        if isinstance(other, FixedInt):
            if type(other) is not type(self):
                raise TypeError(
                    f"operand type mismatch: {type(self).__name__} "
                    f"and {type(other).__name__}"
                )
            return other.value
        return other

    @staticmethod
    def _shift_amount(offset: Union[FixedInt, int]) -> int:
        if isinstance(offset, FixedInt):
            if offset.INT_TYPE.signed:
                raise TypeError(
                    f"shift amount must be unsigned, got {type(offset).__name__}"
                )
            return offset.value
        return offset

    # -- checked operations -------------------------------------------------

    def safe_add(self: F, other: Union[F, int]) -> Result[F, MathError]:
        return self._math().safe_add(self.value, self._operand(other)).map(type(self))

    def safe_sub(self: F, other: Union[F, int]) -> Result[F, MathError]:
        return self._math().safe_sub(self.value, self._operand(other)).map(type(self))

    def safe_mul(self: F, other: Union[F, int]) -> Result[F, MathError]:
        return self._math().safe_mul(self.value, self._operand(other)).map(type(self))

    def safe_div(self: F, other: Union[F, int]) -> Result[F, MathError]:
        return self._math().safe_div(self.value, self._operand(other)).map(type(self))

    def safe_rem(self: F, other: Union[F, int]) -> Result[F, MathError]:
        return self._math().safe_rem(self.value, self._operand(other)).map(type(self))

    def safe_shl(self: F, offset: Union[FixedInt, int]) -> Result[F, MathError]:
        return self._math().safe_shl(self.value, self._shift_amount(offset)).map(type(self))

    def safe_shr(self: F, offset: Union[FixedInt, int]) -> Result[F, MathError]:
        return self._math().safe_shr(self.value, self._shift_amount(offset)).map(type(self))

    @classmethod
    def try_from(cls: type[F], value: Union[FixedInt, int]) -> Result[F, MathError]:
        """Checked conversion from any integer or ``FixedInt``."""
        raw = value.value if isinstance(value, FixedInt) else value
        return cls._math().try_from(raw).map(cls)


FIXED_TYPES: dict[IntType, type[FixedInt]] = {}


class U8(FixedInt):
    INT_TYPE = U8_TYPE


class U16(FixedInt):
    INT_TYPE = U16_TYPE


class U32(FixedInt):
    INT_TYPE = U32_TYPE


class U64(FixedInt):
    INT_TYPE = U64_TYPE


class U128(FixedInt):
    INT_TYPE = U128_TYPE


class I8(FixedInt):
    INT_TYPE = I8_TYPE


class I16(FixedInt):
    INT_TYPE = I16_TYPE


class I32(FixedInt):
    INT_TYPE = I32_TYPE


class I64(FixedInt):
    INT_TYPE = I64_TYPE


class I128(FixedInt):
    INT_TYPE = I128_TYPE


class Usize(FixedInt):
    INT_TYPE = USIZE_TYPE


def fixed_type(int_type: IntType) -> type[FixedInt]:
    """Return the ``FixedInt`` class bound to ``int_type``."""
    try:
        return FIXED_TYPES[int_type]
    except KeyError:
        raise ValueError(f"No value class for {int_type}") from None
