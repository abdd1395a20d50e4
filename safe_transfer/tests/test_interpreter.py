"""
Success-rule classification over the four response shapes a token can produce:
empty return, a 1-word, any other payload, and a revert.
"""

from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from safe_transfer.host import word
from safe_transfer.interpreter import OutcomeClass, classify, is_successful, read_uint
from safe_transfer.types import CallOutcome


@pytest.mark.parametrize(
    "outcome, expected",
    [
        (CallOutcome.ok(b""), OutcomeClass.OK_EMPTY),
        (CallOutcome.ok(word(1)), OutcomeClass.OK_TRUE),
        (CallOutcome.ok(word(0)), OutcomeClass.BAD_RETURN),
        (CallOutcome.ok(word(2)), OutcomeClass.BAD_RETURN),
        (CallOutcome.ok(b"\x01"), OutcomeClass.BAD_RETURN),
        (CallOutcome.ok(b"\x00" * 31), OutcomeClass.BAD_RETURN),
        (CallOutcome.reverted(b""), OutcomeClass.REVERTED),
        (CallOutcome.reverted(word(1)), OutcomeClass.REVERTED),
    ],
)
def test_classification(outcome, expected):
    cls = classify(outcome)
    assert cls is expected
    assert is_successful(outcome) is expected.is_success


def test_only_true_and_empty_succeed():
    assert {c for c in OutcomeClass if c.is_success} == {OutcomeClass.OK_TRUE, OutcomeClass.OK_EMPTY}


def test_longer_payload_is_judged_by_its_first_word():
    assert is_successful(CallOutcome.ok(word(1) + word(0)))
    assert not is_successful(CallOutcome.ok(word(0) + word(1)))


@given(st.binary(min_size=1, max_size=31))
def test_short_payloads_always_fail(data):
    assert not is_successful(CallOutcome.ok(data))


@given(st.binary(max_size=96))
def test_reverts_always_fail(data):
    assert classify(CallOutcome.reverted(data)) is OutcomeClass.REVERTED


@given(st.integers(min_value=0, max_value=2**256 - 1), st.binary(max_size=64))
def test_full_word_succeeds_iff_it_is_one(n, tail):
    assert is_successful(CallOutcome.ok(word(n) + tail)) is (n == 1)


def test_read_uint():
    assert read_uint(CallOutcome.ok(word(42))) == 42
    assert read_uint(CallOutcome.ok(word(7) + b"\xff")) == 7
    assert read_uint(CallOutcome.ok(b"")) is None
    assert read_uint(CallOutcome.ok(b"\x05" * 31)) is None
    assert read_uint(CallOutcome.reverted(word(42))) is None
