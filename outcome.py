"""Result type for checked arithmetic.

Every checked operation returns either ``Ok(value)`` or ``Err(error)``.
Callers branch on the outcome instead of catching exceptions::

    match U32(6).safe_mul(U32(7)):
        case Ok(value):
            ...
        case Err(error):
            ...

Chains short-circuit on the first failure::

    a.safe_add(b).and_then(lambda v: v.safe_mul(c))
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar, Union

import diagnostics

if TYPE_CHECKING:
    from diagnostics import CallSite
    from int_types import IntType

diagnostics.register_internal(__file__)

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound=Exception)


class MathError(ArithmeticError):
    """The single failure kind of the checked operations.

    Overflow, underflow, division by zero and shift overflow are all
    reported as this one error.  ``operation``, ``int_type`` and
    ``location`` are diagnostic annotations only; two ``MathError``
    values always compare equal.
    """

    def __init__(
        self,
        operation: str = "",
        int_type: IntType | None = None,
        location: CallSite | None = None,
    ) -> None:
        self.operation = operation
        self.int_type = int_type
        self.location = location
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = ["arithmetic error"]
        if self.operation:
            parts.append(f"in {self.operation}")
        if self.int_type is not None:
            parts.append(f"on {self.int_type}")
        if self.location is not None:
            parts.append(f"at {self.location}")
        return " ".join(parts)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MathError)

    def __hash__(self) -> int:
        return hash(MathError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        return fn(self.value)


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        """Raise the carried error."""
        raise self.error

    def unwrap_or(self, default: U) -> U:
        return default

    def map(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self

    def and_then(self, fn: Callable[[Any], Any]) -> Err[E]:
        return self


Result = Union[Ok[T], Err[E]]
