"""Tests for call-site diagnostics.

A failed operation emits exactly one record naming the line that called
it.  Successful operations emit nothing.
"""
from __future__ import annotations

import inspect
import logging
import os

import pytest
from pydantic import ValidationError

import diagnostics
from checked import CheckedMath
from diagnostics import CallSite, LoggingSink, MathErrorRecord
from fixed import I8, U32
from int_types import U32_TYPE
from outcome import Ok


def _here() -> int:
    """Line number of the caller."""
    return inspect.currentframe().f_back.f_lineno


def _same_file(path: str) -> bool:
    return os.path.basename(path) == os.path.basename(__file__)


class TestEmission:

    def test_success_emits_nothing(self):
        with diagnostics.capture() as records:
            assert U32(6).safe_mul(U32(7)) == Ok(U32(42))
        assert records == []

    def test_failure_emits_one_record(self):
        with diagnostics.capture() as records:
            U32(1).safe_shl(U32(32))
        assert len(records) == 1
        assert records[0].operation == "safe_shl"
        assert records[0].int_type == "u32"

    def test_message_format(self):
        with diagnostics.capture() as records:
            result, line = U32(10).safe_sub(U32(20)), _here()
        record = records[0]
        assert _same_file(record.location.file)
        assert record.location.line == line
        assert record.message == f"Math error thrown at {record.location.file}:{line}"
        assert str(record) == record.message

    def test_error_carries_same_location(self):
        with diagnostics.capture() as records:
            result, line = I8(-128).safe_div(I8(-1)), _here()
        assert result.error.location == records[0].location
        assert result.error.location.line == line

    def test_plain_capability_reports_caller(self):
        math = CheckedMath(U32_TYPE)
        with diagnostics.capture() as records:
            _, line = math.safe_rem(1, 0), _here()
        assert _same_file(records[0].location.file)
        assert records[0].location.line == line


class TestCallSiteAttribution:

    def test_distinct_call_sites_are_distinct(self):
        with diagnostics.capture() as records:
            _, first = U32.MAX.safe_add(U32(1)), _here()
            _, second = U32.MAX.safe_add(U32(1)), _here()
        assert [r.location.line for r in records] == [first, second]
        assert first != second

    def test_shared_helper_reports_helper_line(self):
        """A caller's own helper is a call site like any other."""

        def add_one(v):
            return v.safe_add(U32(1)), _here()

        with diagnostics.capture() as records:
            _, line = add_one(U32.MAX)
        assert records[0].location.line == line

    def test_chained_failure_reports_chain_line(self):
        with diagnostics.capture() as records:
            result, line = U32(2).safe_add(U32(2)).and_then(lambda v: v.safe_shl(U32(40))), _here()
        assert result.is_err()
        assert records[0].location.line == line

    def test_caller_module_named_like_library_module(self):
        """Only the library's own source files are skipped, not module names."""
        path = os.path.join("ledger", "checked.py")
        code = compile("result = U32.MAX.safe_add(U32(1))\n", path, "exec")
        with diagnostics.capture() as records:
            exec(code, {"__name__": "checked", "U32": U32})
        assert records[0].location.file == path
        assert records[0].location.line == 1

    def test_registered_wrapper_is_skipped(self, monkeypatch):
        monkeypatch.setattr(
            diagnostics, "_internal_files", set(diagnostics._internal_files)
        )
        path = os.path.join("wallet", "money.py")
        namespace = {}
        exec(
            compile("def add_one(v):\n    return v.safe_add(1)\n", path, "exec"),
            namespace,
        )
        diagnostics.register_internal(path)
        with diagnostics.capture() as records:
            _, line = namespace["add_one"](U32.MAX), _here()
        assert _same_file(records[0].location.file)
        assert records[0].location.line == line


class TestDiagnosticsDoNotAlterOutcome:

    def test_failing_sink_propagates(self):
        def broken(record):
            raise RuntimeError("sink down")

        previous = diagnostics.get_sink()
        diagnostics.configure(sink=broken)
        try:
            with pytest.raises(RuntimeError, match="sink down"):
                U32(1).safe_div(U32(0))
            assert U32(1).safe_add(U32(1)) == Ok(U32(2))
        finally:
            diagnostics.configure(sink=previous)

    def test_outcome_same_with_and_without_sink(self):
        with diagnostics.suppressed():
            quiet = U32(7).safe_div(U32(0))
        with diagnostics.capture():
            loud = U32(7).safe_div(U32(0))
        assert quiet == loud


class TestLoggingSink:

    def test_default_sink_logs_warning(self, caplog):
        diagnostics.reset()
        with caplog.at_level(logging.WARNING, logger="safemath"):
            U32(10).safe_sub(U32(20))
        records = [r for r in caplog.records if r.name == "safemath"]
        assert len(records) == 1
        assert records[0].getMessage().startswith("Math error thrown at ")
        assert records[0].levelno == logging.WARNING
        assert records[0].math_operation == "safe_sub"

    def test_configure_logger_name_and_level(self, caplog):
        diagnostics.configure(logger_name="ledger.math", level=logging.ERROR)
        try:
            with caplog.at_level(logging.ERROR, logger="ledger.math"):
                U32(1).safe_shr(U32(99))
            records = [r for r in caplog.records if r.name == "ledger.math"]
            assert len(records) == 1
            assert records[0].levelno == logging.ERROR
        finally:
            diagnostics.reset()

    def test_reset_restores_logging_sink(self):
        diagnostics.configure(sink=lambda record: None)
        diagnostics.reset()
        assert isinstance(diagnostics.get_sink(), LoggingSink)

    def test_capture_restores_previous_sink(self):
        previous = diagnostics.get_sink()
        with diagnostics.capture():
            pass
        assert diagnostics.get_sink() is previous


class TestModels:

    def test_call_site_str(self):
        assert str(CallSite(file="ledger.py", line=12)) == "ledger.py:12"

    def test_call_site_rejects_negative_line(self):
        with pytest.raises(ValidationError):
            CallSite(file="ledger.py", line=-1)

    def test_record_is_frozen(self):
        record = MathErrorRecord(location=CallSite(file="a.py", line=1))
        with pytest.raises(ValidationError):
            record.operation = "safe_add"

    def test_caller_site_points_here(self):
        site, line = diagnostics.caller_site(), _here()
        assert site.line == line
        assert _same_file(site.file)
