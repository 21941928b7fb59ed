"""Fixed-width integer type family.

An ``IntType`` describes the representable range of one machine integer
type: its bit width and whether it is two's-complement signed.  The
checked operations in ``checked.py`` use it as their bounds.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass


@dataclass(frozen=True)
class IntType:
    """A fixed-width integer type, e.g. ``u32`` or ``i128``."""

    name: str
    bits: int
    signed: bool

    def __post_init__(self) -> None:
        if self.bits <= 0:
            raise ValueError(f"bits ({self.bits}) must be positive")

    def __str__(self) -> str:
        return self.name

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        if self.signed:
            return (1 << (self.bits - 1)) - 1
        return (1 << self.bits) - 1

    @property
    def width(self) -> int:
        """Total number of representable values."""
        return 1 << self.bits

    def contains(self, v: int) -> bool:
        return self.min <= v <= self.max

    def all_values(self) -> range:
        return range(self.min, self.max + 1)

    def wrap(self, v: int) -> int:
        """Reinterpret the low ``bits`` bits of ``v`` as this type."""
        return self.min + (v - self.min) % self.width


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

U8_TYPE = IntType("u8", 8, signed=False)
U16_TYPE = IntType("u16", 16, signed=False)
U32_TYPE = IntType("u32", 32, signed=False)
U64_TYPE = IntType("u64", 64, signed=False)
U128_TYPE = IntType("u128", 128, signed=False)

I8_TYPE = IntType("i8", 8, signed=True)
I16_TYPE = IntType("i16", 16, signed=True)
I32_TYPE = IntType("i32", 32, signed=True)
I64_TYPE = IntType("i64", 64, signed=True)
I128_TYPE = IntType("i128", 128, signed=True)

# Pointer-sized index type of the running interpreter.
USIZE_TYPE = IntType("usize", struct.calcsize("P") * 8, signed=False)

INT_TYPES: dict[str, IntType] = {
    t.name: t
    for t in (
        U8_TYPE, U16_TYPE, U32_TYPE, U64_TYPE, U128_TYPE,
        I8_TYPE, I16_TYPE, I32_TYPE, I64_TYPE, I128_TYPE,
        USIZE_TYPE,
    )
}


def lookup(name: str) -> IntType:
    """Return the preset type called ``name`` (``"u32"``, ``"i64"``, ...)."""
    try:
        return INT_TYPES[name]
    except KeyError:
        raise ValueError(f"Unknown integer type: {name!r}") from None
