"""Property-based tests using Hypothesis.

Every operation is compared against Python's unbounded integers: the
result must be the exact value when it fits and ``Err`` otherwise, for
every type in the family.
"""
from __future__ import annotations

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

import diagnostics
from checked import safe_math
from int_types import INT_TYPES, IntType
from outcome import Ok

ALL_TYPES = sorted(INT_TYPES.values(), key=lambda t: (t.signed, t.bits, t.name))
SIGNED_TYPES = [t for t in ALL_TYPES if t.signed]


@pytest.fixture(autouse=True, scope="module")
def _quiet_diagnostics():
    with diagnostics.suppressed():
        yield


def values_of(t: IntType) -> st.SearchStrategy[int]:
    return st.integers(min_value=t.min, max_value=t.max)


def _expect(t: IntType, result, raw: int) -> None:
    if t.contains(raw):
        assert result == Ok(raw)
    else:
        assert result.is_err()


# ===================================================================
# ADD / SUB / MUL
# ===================================================================

@pytest.mark.parametrize("t", ALL_TYPES, ids=str)
class TestRingOperations:

    @given(data=st.data())
    def test_add(self, t, data):
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        _expect(t, safe_math(t).safe_add(a, b), a + b)

    @given(data=st.data())
    def test_sub(self, t, data):
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        _expect(t, safe_math(t).safe_sub(a, b), a - b)

    @given(data=st.data())
    def test_mul(self, t, data):
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        _expect(t, safe_math(t).safe_mul(a, b), a * b)

    @given(data=st.data())
    def test_add_commutes(self, t, data):
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        m = safe_math(t)
        assert m.safe_add(a, b) == m.safe_add(b, a)

    @given(data=st.data())
    def test_max_plus_positive_fails(self, t, data):
        b = data.draw(st.integers(min_value=1, max_value=t.max))
        assert safe_math(t).safe_add(t.max, b).is_err()

    @given(data=st.data())
    def test_min_minus_positive_fails(self, t, data):
        b = data.draw(st.integers(min_value=1, max_value=t.max))
        assert safe_math(t).safe_sub(t.min, b).is_err()


# ===================================================================
# DIV / REM
# ===================================================================

@pytest.mark.parametrize("t", ALL_TYPES, ids=str)
class TestDivisionOperations:

    @given(data=st.data())
    def test_div_by_zero_fails(self, t, data):
        a = data.draw(values_of(t))
        assert safe_math(t).safe_div(a, 0).is_err()

    @given(data=st.data())
    def test_rem_by_zero_fails(self, t, data):
        a = data.draw(values_of(t))
        assert safe_math(t).safe_rem(a, 0).is_err()

    @given(data=st.data())
    @settings(max_examples=200)
    def test_div_rem_identity(self, t, data):
        """a == b * (a / b) + a % b whenever the quotient fits."""
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        assume(b != 0)
        m = safe_math(t)
        q = m.safe_div(a, b)
        r = m.safe_rem(a, b)
        assume(q.is_ok())
        assert r.is_ok()
        assert b * q.unwrap() + r.unwrap() == a
        assert abs(r.unwrap()) < abs(b)
        assert abs(q.unwrap()) <= abs(a)

    @given(data=st.data())
    def test_remainder_sign_follows_dividend(self, t, data):
        a, b = data.draw(values_of(t)), data.draw(values_of(t))
        assume(b != 0)
        assume(not (a == t.min and b == -1))
        r = safe_math(t).safe_rem(a, b).unwrap()
        assert r == 0 or (r < 0) == (a < 0)


@pytest.mark.parametrize("t", SIGNED_TYPES, ids=str)
def test_signed_min_div_minus_one_fails(t):
    assert safe_math(t).safe_div(t.min, -1).is_err()


@pytest.mark.parametrize("t", SIGNED_TYPES, ids=str)
def test_signed_min_rem_minus_one_fails(t):
    assert safe_math(t).safe_rem(t.min, -1).is_err()


# ===================================================================
# SHIFTS
# ===================================================================

@pytest.mark.parametrize("t", ALL_TYPES, ids=str)
class TestShiftOperations:

    @given(data=st.data())
    def test_shl_matches_fixed_width_shift(self, t, data):
        a = data.draw(values_of(t))
        s = data.draw(st.integers(min_value=0, max_value=t.bits - 1))
        assert safe_math(t).safe_shl(a, s) == Ok(t.wrap(a << s))

    @given(data=st.data())
    def test_shr_matches_unbounded_shift(self, t, data):
        a = data.draw(values_of(t))
        s = data.draw(st.integers(min_value=0, max_value=t.bits - 1))
        assert safe_math(t).safe_shr(a, s) == Ok(a >> s)

    @given(data=st.data())
    def test_shift_at_or_beyond_width_fails(self, t, data):
        a = data.draw(values_of(t))
        s = data.draw(st.integers(min_value=t.bits, max_value=2**32 - 1))
        m = safe_math(t)
        assert m.safe_shl(a, s).is_err()
        assert m.safe_shr(a, s).is_err()


# ===================================================================
# DETERMINISM
# ===================================================================

@pytest.mark.parametrize("t", ALL_TYPES, ids=str)
@given(data=st.data())
def test_repeated_calls_agree(t, data):
    a, b = data.draw(values_of(t)), data.draw(values_of(t))
    m = safe_math(t)
    for op in ("safe_add", "safe_sub", "safe_mul", "safe_div", "safe_rem"):
        assert getattr(m, op)(a, b) == getattr(m, op)(a, b)
