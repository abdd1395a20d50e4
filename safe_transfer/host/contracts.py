"""
safe_transfer.host.contracts — contract behaviours for the in-memory host.

A contract here is a plain Python object deployed at an address on an
`InMemoryHost`. The host calls `handle(env, data)` with raw call data and
expects raw return bytes back; raising `Revert` aborts the frame, and the host
discards everything the frame wrote. Native value arriving through a plain
send goes to `receive(env, amount)`.

`ContractEnv` is the contract's only window onto the ledger: its own
storage, events, and the identity of the frame it runs in.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from ..errors import Revert
from ..types.outcome import CallOutcome

if TYPE_CHECKING:
    from .memory import InMemoryHost


class ContractEnv:
    """Per-frame view handed to a contract by the host."""

    def __init__(
        self,
        host: "InMemoryHost",
        *,
        address: bytes,
        caller: bytes,
        value: int = 0,
        static: bool = False,
    ) -> None:
        self._host = host
        self.address = address
        self.caller = caller
        self.value = value
        self.static = static

    @property
    def timestamp(self) -> int:
        return self._host.block_timestamp

    def sload(self, key: bytes) -> bytes:
        return self._host.journal.storage_get(self.address, key)

    def sstore(self, key: bytes, value: bytes) -> None:
        if self.static:
            raise Revert("state write in static call")
        self._host.journal.storage_set(self.address, key, value)

    def emit(self, name: bytes, args: Optional[Mapping[str, Any]] = None) -> None:
        if self.static:
            raise Revert("event in static call")
        self._host.emit(self.address, name, args or {})


class Contract:
    """
    Base behaviour: has code, rejects unknown calls, accepts plain value.

    `receive_gas` is the gas a plain native send must forward for `receive`
    to complete; hosts fail the send when less is forwarded.
    """

    code: bytes = b"\xfe"
    receive_gas: int = 0
    address: Optional[bytes] = None  # set by the host on deploy

    def handle(self, env: ContractEnv, data: bytes) -> bytes:
        raise Revert("no fallback")

    def receive(self, env: ContractEnv, amount: int) -> None:
        return None


Response = Union[CallOutcome, Sequence[CallOutcome]]


class ScriptedContract(Contract):
    """
    Answers each selector with a fixed outcome.

    A sequence of outcomes is consumed one per call; the last one repeats.
    Unknown selectors fall back to `default`, or revert when it is None.

        ScriptedContract({SEL_TRANSFER: CallOutcome.ok(b"")})      # non-compliant success
        ScriptedContract({SEL_APPROVE: [CallOutcome.ok(word(0)),   # first approve: false
                                        CallOutcome.ok(word(1))]}) # then true
    """

    def __init__(
        self,
        responses: Mapping[bytes, Response],
        *,
        default: Optional[CallOutcome] = None,
    ) -> None:
        self._responses: Dict[bytes, List[CallOutcome]] = {}
        for sel, resp in responses.items():
            seq = [resp] if isinstance(resp, CallOutcome) else list(resp)
            if not seq:
                raise ValueError("empty response sequence")
            self._responses[bytes(sel)] = seq
        self._default = default

    def handle(self, env: ContractEnv, data: bytes) -> bytes:
        seq = self._responses.get(bytes(data[:4]))
        if seq is None:
            out = self._default
            if out is None:
                raise Revert("unknown selector")
        else:
            out = seq.pop(0) if len(seq) > 1 else seq[0]
        if not out.success:
            raise Revert("scripted revert", out.return_data)
        return out.return_data


class RejectingReceiver(Contract):
    """Refuses every plain native transfer."""

    def receive(self, env: ContractEnv, amount: int) -> None:
        raise Revert("native value rejected")


class GasHungryReceiver(Contract):
    """Accepts native value only when at least `receive_gas` is forwarded."""

    def __init__(self, receive_gas: int) -> None:
        self.receive_gas = int(receive_gas)


def word(n: int) -> bytes:
    """A single ABI word, handy for scripting return data."""
    return int(n).to_bytes(32, "big")


__all__ = [
    "ContractEnv",
    "Contract",
    "ScriptedContract",
    "RejectingReceiver",
    "GasHungryReceiver",
    "word",
]
