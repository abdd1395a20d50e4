"""
safe_transfer.types.outcome — the raw result of invoking an external target.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

WORD_SIZE = 32


@dataclass(frozen=True)
class CallOutcome:
    """
    What a host reports after running an external call.

    Fields
    ------
    success:      False if the target reverted/aborted.
    return_data:  Raw returned bytes (revert data when success is False).
    """

    success: bool
    return_data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "return_data", bytes(self.return_data))

    @classmethod
    def ok(cls, data: bytes = b"") -> "CallOutcome":
        return cls(True, data)

    @classmethod
    def reverted(cls, data: bytes = b"") -> "CallOutcome":
        return cls(False, data)

    @property
    def size(self) -> int:
        return len(self.return_data)

    @property
    def word(self) -> Optional[int]:
        """First returned 256-bit word, or None if less than a full word came back."""
        if len(self.return_data) < WORD_SIZE:
            return None
        return int.from_bytes(self.return_data[:WORD_SIZE], "big")


__all__ = ["WORD_SIZE", "CallOutcome"]
