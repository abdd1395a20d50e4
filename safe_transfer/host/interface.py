"""
safe_transfer.host.interface — what the transfer layer needs from its host.

The host is the execution environment the operations run in: it knows which
account is executing (`context`), can tell whether an address has code, can
invoke a contract and hand back the raw outcome, can send native value and
can read native balances. The transfer layer never assumes anything richer
(no typed decoding, no cached balances), so any ledger client that can
provide these primitives can back it.

Contract: a call to an address without code *succeeds* with empty return
data, as on a real ledger. Every contract path that moves value or sets an
allowance therefore checks `code_size` before calling; `balance_of` does not
need to, an empty answer already reads as 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from ..types.address import to_address, to_hex
from ..types.amount import require_amount
from ..types.outcome import CallOutcome


@dataclass(frozen=True)
class CallContext:
    """
    The frame an operation executes in.

    Fields
    ------
    address: The executing account ("self": whose balances a push moves).
    caller:  The account that invoked the executing account (msg sender).
    value:   Native value attached to the invocation; it has already been
             credited to `address` by the time the frame runs.
    """

    address: bytes
    caller: bytes
    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", to_address(self.address))
        object.__setattr__(self, "caller", to_address(self.caller))
        object.__setattr__(self, "value", require_amount(self.value, name="value"))

    def to_dict(self) -> dict:
        return {
            "address": to_hex(self.address),
            "caller": to_hex(self.caller),
            "value": self.value,
        }


@runtime_checkable
class Host(Protocol):
    @property
    def context(self) -> CallContext:
        ...

    def code_size(self, address: bytes) -> int:
        ...

    def call(
        self,
        target: bytes,
        data: bytes,
        *,
        value: int = 0,
        gas: Optional[int] = None,
    ) -> CallOutcome:
        ...

    def static_call(self, target: bytes, data: bytes) -> CallOutcome:
        ...

    def send_native(self, to: bytes, amount: int, *, gas: Optional[int] = None) -> bool:
        ...

    def native_balance(self, address: bytes) -> int:
        ...


__all__ = ["CallContext", "Host"]
