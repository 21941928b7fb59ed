"""Formal contract for the checked arithmetic operations.

Each operation is specified as a collection of:
- postconditions: what a successful result must satisfy
- error conditions: inputs for which the operation must return ``Err``
- algebraic properties: relationships between operations that must hold

The contract is machine-readable.  ``factory.py`` and the conformance
tests iterate over it instead of restating expectations by hand.  The
expected values are computed with an independent oracle (sign and
magnitude for division, masking for shifts) rather than with the
helpers the implementation uses.

Layers
------
OperationSpec   per-operation contract (post/error/properties)
BranchSpec      every decision point white-box tests must cover
MathSpec        the full contract for one integer type
build_spec()    constructs a MathSpec for a given integer type
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from int_types import IntType, U32_TYPE


# ---------------------------------------------------------------------------
# Spec building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[[int, int, int], bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[[int, int], bool]


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many free input values the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    rhs: str            # "value" or "shift": the domain of the second operand
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]

    def expects_error(self, a: int, b: int) -> bool:
        return any(ec.trigger(a, b) for ec in self.error_conditions)


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which operation / helper this belongs to


@dataclass(frozen=True)
class MathSpec:
    """Complete contract for one integer type."""

    int_type: IntType
    shift_type: IntType
    operations: dict[str, OperationSpec]

    @property
    def all_properties(self) -> list[tuple[str, AlgebraicProperty]]:
        out: list[tuple[str, AlgebraicProperty]] = []
        for name, op in self.operations.items():
            for prop in op.properties:
                out.append((name, prop))
        return out

    def shift_values(self) -> list[int]:
        """Shift amounts worth checking: every valid one and a few beyond."""
        bits = self.int_type.bits
        values = list(range(0, bits + 2))
        values += [2 * bits, self.shift_type.max]
        return sorted(set(v for v in values if self.shift_type.contains(v)))


# ---------------------------------------------------------------------------
# Oracle helpers
# ---------------------------------------------------------------------------

def exact_quotient(a: int, b: int) -> int:
    """Quotient rounded toward zero, from sign and magnitude."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def exact_remainder(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    r = abs(a) % abs(b)
    return -r if a < 0 else r


def fixed_shl(int_type: IntType, a: int, s: int) -> int:
    """Left shift as the hardware does it: keep the low bits only."""
    mask = (1 << int_type.bits) - 1
    raw = (a << s) & mask
    if int_type.signed and raw >> (int_type.bits - 1):
        raw -= 1 << int_type.bits
    return raw


def fixed_shr(int_type: IntType, a: int, s: int) -> int:
    """Arithmetic right shift for signed types, logical for unsigned."""
    if a >= 0:
        return a >> s
    # Sign fill: shifting the complement keeps the bit pattern.
    return ~(~a >> s)


# ---------------------------------------------------------------------------
# Branch catalogue
# ---------------------------------------------------------------------------

BRANCHES = [
    BranchSpec("INPUT-VALID", "Operands within type range",
               "int_type.contains(a) and int_type.contains(b)", "validation"),
    BranchSpec("INPUT-INVALID", "Operand outside type range raises ValueError",
               "not int_type.contains(v)", "validation"),
    BranchSpec("SHIFT-INPUT-INVALID", "Shift amount outside shift type raises",
               "not shift_type.contains(s)", "validation"),
    BranchSpec("RANGE-OK", "Exact result representable, returned as Ok",
               "int_type.contains(raw)", "range"),
    BranchSpec("RANGE-OVERFLOW", "Exact result outside range, returned as Err",
               "not int_type.contains(raw)", "range"),
    BranchSpec("DIV-ZERO", "Division by zero returns Err", "b == 0", "safe_div"),
    BranchSpec("DIV-NORMAL", "Truncating division", "b != 0", "safe_div"),
    BranchSpec("REM-ZERO", "Remainder by zero returns Err", "b == 0", "safe_rem"),
    BranchSpec("REM-OVERFLOW", "Remainder of MIN / -1 returns Err",
               "a == int_type.min and b == -1", "safe_rem"),
    BranchSpec("REM-NORMAL", "Remainder with sign of dividend", "b != 0", "safe_rem"),
    BranchSpec("SHIFT-OVERFLOW", "Shift amount >= bit width returns Err",
               "s >= int_type.bits", "shift"),
    BranchSpec("SHL-NORMAL", "Left shift keeping the low bits",
               "s < int_type.bits", "safe_shl"),
    BranchSpec("SHR-NORMAL", "Right shift", "s < int_type.bits", "safe_shr"),
]


# ---------------------------------------------------------------------------
# Spec builder
# ---------------------------------------------------------------------------

def _arith_spec(
    name: str,
    int_type: IntType,
    exact: Callable[[int, int], int],
    properties: list[AlgebraicProperty],
    zero_divisor: bool = False,
) -> OperationSpec:
    """Contract shared by add/sub/mul/div: Ok(exact) iff representable."""
    def out_of_range(a: int, b: int) -> bool:
        if zero_divisor and b == 0:
            return False
        return not int_type.contains(exact(a, b))

    error_conditions = []
    if zero_divisor:
        error_conditions.append(ErrorCondition(
            "zero_divisor", "Err when the divisor is zero",
            lambda a, b: b == 0,
        ))
    error_conditions.append(ErrorCondition(
        "out_of_range", "Err when the exact result is not representable",
        out_of_range,
    ))
    return OperationSpec(
        name=name,
        rhs="value",
        postconditions=[
            Postcondition(
                "result_in_range", "Result is a value of the type",
                lambda a, b, result: int_type.contains(result),
            ),
            Postcondition(
                "result_exact", "Result equals the unbounded result",
                lambda a, b, result: result == exact(a, b),
            ),
        ],
        error_conditions=error_conditions,
        properties=properties,
    )


def build_spec(int_type: IntType, shift_type: IntType = U32_TYPE) -> MathSpec:
    """Construct the full checked-math contract for ``int_type``."""
    t = int_type

    add_spec = _arith_spec(
        "safe_add", t, lambda a, b: a + b,
        [
            AlgebraicProperty(
                "commutativity", "add(a, b) == add(b, a)", 2,
                lambda m, a, b: m.safe_add(a, b) == m.safe_add(b, a),
            ),
            AlgebraicProperty(
                "identity", "add(a, 0) == Ok(a)", 1,
                lambda m, a: m.safe_add(a, 0).unwrap() == a,
            ),
        ],
    )

    sub_spec = _arith_spec(
        "safe_sub", t, lambda a, b: a - b,
        [
            AlgebraicProperty(
                "self_inverse", "sub(a, a) == Ok(0)", 1,
                lambda m, a: m.safe_sub(a, a).unwrap() == 0,
            ),
            AlgebraicProperty(
                "add_inverse", "sub(add(a, b), b) == a when add succeeds", 2,
                lambda m, a, b: m.safe_add(a, b).is_err()
                or m.safe_sub(m.safe_add(a, b).unwrap(), b).unwrap() == a,
            ),
        ],
    )

    mul_spec = _arith_spec(
        "safe_mul", t, lambda a, b: a * b,
        [
            AlgebraicProperty(
                "commutativity", "mul(a, b) == mul(b, a)", 2,
                lambda m, a, b: m.safe_mul(a, b) == m.safe_mul(b, a),
            ),
            AlgebraicProperty(
                "zero", "mul(a, 0) == Ok(0)", 1,
                lambda m, a: m.safe_mul(a, 0).unwrap() == 0,
            ),
        ],
    )

    div_spec = _arith_spec(
        "safe_div", t, exact_quotient,
        [
            AlgebraicProperty(
                "identity", "div(a, 1) == Ok(a)", 1,
                lambda m, a: m.safe_div(a, 1).unwrap() == a,
            ),
            AlgebraicProperty(
                "zero_divisor", "div(a, 0) is Err", 1,
                lambda m, a: m.safe_div(a, 0).is_err(),
            ),
        ],
        zero_divisor=True,
    )

    rem_spec = OperationSpec(
        name="safe_rem",
        rhs="value",
        postconditions=[
            Postcondition(
                "result_exact", "Remainder has the sign of the dividend",
                lambda a, b, result: result == exact_remainder(a, b),
            ),
            Postcondition(
                "magnitude", "abs(result) < abs(b)",
                lambda a, b, result: abs(result) < abs(b),
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "zero_divisor", "Err when the divisor is zero",
                lambda a, b: b == 0,
            ),
            ErrorCondition(
                "min_over_minus_one", "Err for MIN % -1, whose quotient overflows",
                lambda a, b: t.signed and a == t.min and b == -1,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "euclid", "a == b * (a / b) + a % b when both succeed", 2,
                lambda m, a, b: m.safe_div(a, b).is_err()
                or b * m.safe_div(a, b).unwrap() + m.safe_rem(a, b).unwrap() == a,
            ),
        ],
    )

    def _shift_spec(name: str, oracle: Callable[[IntType, int, int], int]) -> OperationSpec:
        return OperationSpec(
            name=name,
            rhs="shift",
            postconditions=[
                Postcondition(
                    "result_in_range", "Result is a value of the type",
                    lambda a, s, result: t.contains(result),
                ),
                Postcondition(
                    "result_exact", "Result equals the fixed-width shift",
                    lambda a, s, result: result == oracle(t, a, s),
                ),
            ],
            error_conditions=[
                ErrorCondition(
                    "shift_overflow", "Err when shift amount >= bit width",
                    lambda a, s: s >= t.bits,
                ),
            ],
            properties=[
                AlgebraicProperty(
                    "zero_shift", "shift by 0 returns the operand", 1,
                    lambda m, a: getattr(m, name)(a, 0).unwrap() == a,
                ),
                AlgebraicProperty(
                    "width_shift", "shift by bit width is Err", 1,
                    lambda m, a: getattr(m, name)(a, t.bits).is_err(),
                ),
            ],
        )

    return MathSpec(
        int_type=t,
        shift_type=shift_type,
        operations={
            "safe_add": add_spec,
            "safe_sub": sub_spec,
            "safe_mul": mul_spec,
            "safe_div": div_spec,
            "safe_rem": rem_spec,
            "safe_shl": _shift_spec("safe_shl", fixed_shl),
            "safe_shr": _shift_spec("safe_shr", fixed_shr),
        },
    )
