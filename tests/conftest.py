"""Shared fixtures for checked arithmetic tests."""
from __future__ import annotations

import pytest

from checked import CheckedMath
from int_types import I8_TYPE, U8_TYPE, U32_TYPE


@pytest.fixture
def u8() -> CheckedMath:
    return CheckedMath(U8_TYPE)


@pytest.fixture
def i8() -> CheckedMath:
    return CheckedMath(I8_TYPE)


@pytest.fixture
def u32() -> CheckedMath:
    return CheckedMath(U32_TYPE)

