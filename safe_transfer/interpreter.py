"""
safe_transfer.interpreter — classify raw call outcomes.

Token contracts disagree on how to report success. Strictly compliant ones
return an ABI-encoded boolean; a large population of deployed contracts return
nothing at all on success. The rule applied to every call expected to report
boolean success:

    success  ⇔  the call did not revert
                AND (no bytes came back OR the first returned word == 1)

An empty return is accepted on purpose, so non-compliant tokens work. A
revert, a returned word of anything other than 1 (including 0 / "false"),
or a payload shorter than one word is a failure.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .types.outcome import WORD_SIZE, CallOutcome


class OutcomeClass(str, Enum):
    OK_TRUE = "ok_true"          # returned a word equal to 1
    OK_EMPTY = "ok_empty"        # returned nothing (non-compliant token)
    REVERTED = "reverted"        # call aborted
    BAD_RETURN = "bad_return"    # returned something other than a leading 1-word

    @property
    def is_success(self) -> bool:
        return self in (OutcomeClass.OK_TRUE, OutcomeClass.OK_EMPTY)


def classify(outcome: CallOutcome) -> OutcomeClass:
    if not outcome.success:
        return OutcomeClass.REVERTED
    if outcome.size == 0:
        return OutcomeClass.OK_EMPTY
    if outcome.word == 1:
        return OutcomeClass.OK_TRUE
    return OutcomeClass.BAD_RETURN


def is_successful(outcome: CallOutcome) -> bool:
    return classify(outcome).is_success


def read_uint(outcome: CallOutcome) -> Optional[int]:
    """
    Value of a read-only uint query (e.g. balanceOf), or None when the call
    failed or returned fewer than 32 bytes.
    """
    if not outcome.success or outcome.size < WORD_SIZE:
        return None
    return outcome.word


__all__ = ["OutcomeClass", "classify", "is_successful", "read_uint"]
