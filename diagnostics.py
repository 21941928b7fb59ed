"""Call-site diagnostics for failed checked operations.

When a checked operation fails it emits one ``MathErrorRecord`` to the
configured sink before returning ``Err``.  The record names the caller's
source position, found by walking the stack past this library's own
frames, so every call site is attributable on its own.

The default sink logs ``Math error thrown at <file>:<line>`` through the
``safemath`` logger.  Applications redirect it once at startup::

    diagnostics.configure(sink=my_sink)

Diagnostics are observability only: nothing here changes a returned
value or error.
"""
from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Callable, Iterator

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LOGGER_NAME = "safemath"

# Source files whose frames are skipped when locating the caller.
_internal_files: set[str] = set()


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


def register_internal(path: str) -> None:
    """Skip frames from the source file ``path`` when locating callers."""
    _internal_files.add(_normalize(path))


register_internal(__file__)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class CallSite(BaseModel):
    """Source position of the code that invoked a checked operation."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = Field(..., ge=0)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


class MathErrorRecord(BaseModel):
    """One diagnostic emitted for a failed checked operation."""

    model_config = ConfigDict(frozen=True)

    location: CallSite
    operation: str = ""
    int_type: str = ""

    @property
    def message(self) -> str:
        return f"Math error thrown at {self.location}"

    def __str__(self) -> str:
        return self.message


Sink = Callable[[MathErrorRecord], None]


class LoggingSink:
    """Sink that writes each record's message to a stdlib logger."""

    def __init__(
        self,
        logger_name: str = DEFAULT_LOGGER_NAME,
        level: int = logging.WARNING,
    ) -> None:
        self.logger = logging.getLogger(logger_name)
        self.level = level

    def __call__(self, record: MathErrorRecord) -> None:
        self.logger.log(
            self.level,
            record.message,
            extra={
                "math_operation": record.operation,
                "math_int_type": record.int_type,
            },
        )


# Module-level configuration, set once at application startup.
_sink: Sink = LoggingSink()


def configure(
    sink: Sink | None = None,
    logger_name: str | None = None,
    level: int | None = None,
) -> None:
    """Configure where diagnostics go.

    Passing ``sink`` installs it as is.  Otherwise a ``LoggingSink`` is
    built from ``logger_name`` and ``level`` (defaults: ``safemath`` at
    WARNING).
    """
    global _sink
    if sink is not None:
        _sink = sink
        return
    _sink = LoggingSink(
        logger_name=logger_name or DEFAULT_LOGGER_NAME,
        level=logging.WARNING if level is None else level,
    )


def get_sink() -> Sink:
    return _sink


def reset() -> None:
    """Restore the default logging sink."""
    configure()


def emit(record: MathErrorRecord) -> None:
    _sink(record)


def caller_site() -> CallSite:
    """Return the position of the nearest frame outside this library."""
    frame = sys._getframe(1)
    while frame is not None:
        if _normalize(frame.f_code.co_filename) not in _internal_files:
            return CallSite(file=frame.f_code.co_filename, line=frame.f_lineno)
        frame = frame.f_back
    return CallSite(file="<unknown>", line=0)


@contextmanager
def suppressed() -> Iterator[None]:
    """Discard emitted records for the duration of the block."""
    previous = _sink
    configure(sink=lambda record: None)
    try:
        yield
    finally:
        configure(sink=previous)


@contextmanager
def capture() -> Iterator[list[MathErrorRecord]]:
    """Collect emitted records in a list for the duration of the block.

    Swaps the process-wide sink, so it is meant for tests and
    single-threaded embedding code.
    """
    records: list[MathErrorRecord] = []
    previous = _sink
    configure(sink=records.append)
    try:
        yield records
    finally:
        configure(sink=previous)
