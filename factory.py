"""Verifying factory for checked arithmetic capabilities.

The factory does not just construct a ``CheckedMath``: it checks it
against the contract in ``spec.py`` before handing it out.

Flow:
  1. Caller requests a capability for an integer type.
  2. Factory builds the implementation.
  3. Factory runs every operation's contract and algebraic properties.
  4. If verification passes  -> return the capability.
     If verification fails   -> raise, never hand out a broken instance.

For types with at most ``EXHAUSTIVE_THRESHOLD`` values every operand
pair is checked.  Wider types get the edge values (MIN, MAX, 0, +-1 and
their neighbours) plus a seeded random sample.
"""
from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Callable

import diagnostics
from checked import CheckedMath
from int_types import IntType, U32_TYPE
from outcome import MathError
from spec import AlgebraicProperty, MathSpec, OperationSpec, build_spec

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of verifying one contract or property."""

    name: str
    passed: bool
    counterexample: tuple | None = None
    tests_run: int = 0

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        ce = f"  counterexample={self.counterexample}" if self.counterexample else ""
        return f"[{status}] {self.name} ({self.tests_run} tests){ce}"


@dataclass
class VerificationReport:
    """Aggregate result of verifying one operation."""

    operation: str
    int_type: str
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    def summary(self) -> str:
        lines = [f"--- {self.operation} on {self.int_type} ---"]
        for r in self.results:
            lines.append(f"  {r}")
        status = "ALL PASSED" if self.passed else "FAILED"
        lines.append(f"  => {status}")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when an implementation fails its contract."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(f"Verification failed:\n{report.summary()}")


# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class CheckedMathFactory:
    """Produces ``CheckedMath`` instances that have passed their contract."""

    EXHAUSTIVE_THRESHOLD = 256  # max type width for brute-force check
    SAMPLE_COUNT = 2_000

    @classmethod
    def create(
        cls,
        int_type: IntType,
        shift_type: IntType = U32_TYPE,
        seed: int = 0,
    ) -> CheckedMath:
        """Build, verify, and return a ``CheckedMath`` for ``int_type``."""
        math = CheckedMath(int_type, shift_type)
        cls.verify(math, seed=seed)
        return math

    @classmethod
    def verify(cls, math: CheckedMath, seed: int = 0) -> list[VerificationReport]:
        """Verify every operation of ``math``; raise on the first failure."""
        spec = build_spec(math.int_type, math.shift_type)
        reports = []
        # Expected failures are not reported to the diagnostic sink.
        with diagnostics.suppressed():
            for op_spec in spec.operations.values():
                report = cls._verify_operation(math, spec, op_spec, seed)
                if not report.passed:
                    raise VerificationError(report)
                reports.append(report)
        logger.debug(
            "verified %s: %d checks",
            math.int_type,
            sum(r.tests_run for report in reports for r in report.results),
        )
        return reports

    # -- internal ---------------------------------------------------------

    @classmethod
    def _verify_operation(
        cls,
        math: CheckedMath,
        spec: MathSpec,
        op_spec: OperationSpec,
        seed: int,
    ) -> VerificationReport:
        report = VerificationReport(
            operation=op_spec.name, int_type=spec.int_type.name,
        )
        op = getattr(math, op_spec.name)
        rhs = spec.shift_values() if op_spec.rhs == "shift" else None
        inputs = cls._inputs(spec.int_type, rhs, seed)
        report.results.append(cls._verify_contract(op_spec, op, inputs))
        for prop in op_spec.properties:
            report.results.append(
                cls._verify_property(prop, math, spec.int_type, seed)
            )
        return report

    @classmethod
    def _verify_contract(
        cls,
        op_spec: OperationSpec,
        op: Callable,
        inputs: list[tuple[int, int]],
    ) -> VerificationResult:
        name = f"{op_spec.name}.contract"
        tests_run = 0
        for a, b in inputs:
            tests_run += 1
            outcome = op(a, b)
            if op_spec.expects_error(a, b):
                if not outcome.is_err():
                    return VerificationResult(name, False, (a, b), tests_run)
                continue
            if outcome.is_err() or not all(
                post.check(a, b, outcome.value) for post in op_spec.postconditions
            ):
                return VerificationResult(name, False, (a, b), tests_run)
        return VerificationResult(name, True, tests_run=tests_run)

    @classmethod
    def _verify_property(
        cls,
        prop: AlgebraicProperty,
        math: CheckedMath,
        int_type: IntType,
        seed: int,
    ) -> VerificationResult:
        if prop.arity == 1:
            combos = [(v,) for v in cls._values(int_type)]
        else:
            combos = cls._inputs(int_type, None, seed)

        tests_run = 0
        for combo in combos:
            tests_run += 1
            try:
                holds = prop.check(math, *combo)
            except MathError:
                # An unexpected Err was unwrapped.
                holds = False
            if not holds:
                return VerificationResult(prop.name, False, combo, tests_run)
        return VerificationResult(prop.name, True, tests_run=tests_run)

    @classmethod
    def _values(cls, int_type: IntType) -> list[int]:
        if int_type.width <= cls.EXHAUSTIVE_THRESHOLD:
            return list(int_type.all_values())
        return _edge_values(int_type)

    @classmethod
    def _inputs(
        cls,
        int_type: IntType,
        rhs: list[int] | None,
        seed: int,
    ) -> list[tuple[int, int]]:
        """Operand pairs; ``rhs`` fixes the second operand's domain."""
        lhs = cls._values(int_type)
        pairs = list(itertools.product(lhs, lhs if rhs is None else rhs))
        if int_type.width <= cls.EXHAUSTIVE_THRESHOLD:
            return pairs

        rng = random.Random(seed)
        while len(pairs) < cls.SAMPLE_COUNT:
            a = rng.randint(int_type.min, int_type.max)
            if rhs is None:
                b = rng.randint(int_type.min, int_type.max)
            else:
                b = rng.choice(rhs)
            pairs.append((a, b))
        return pairs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _edge_values(int_type: IntType) -> list[int]:
    """Values where overflow behaviour changes."""
    lo, hi = int_type.min, int_type.max
    half = 1 << (int_type.bits // 2)
    candidates = [
        lo, lo + 1, -2, -1, 0, 1, 2, hi - 1, hi,
        half - 1, half, half + 1, -half, hi // 2, hi // 2 + 1,
    ]
    return sorted(set(v for v in candidates if int_type.contains(v)))
