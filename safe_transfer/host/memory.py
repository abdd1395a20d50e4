"""
safe_transfer.host.memory — a deterministic, single-threaded in-memory host.

`InMemoryHost` implements the `Host` primitives over a `Journal`:

- Contracts are Python objects deployed at addresses (`deploy`); any address
  without one is a plain account with no code.
- Every external call and every native send runs in its own journal
  checkpoint. A `Revert` raised inside it discards that frame's writes and is
  reported as a failed outcome; nothing else leaks out.
- `unit_of_work()` is the all-or-nothing scope an operation runs in. Any
  exception escaping it reverts every effect made inside it, including those
  of earlier, successful operations in the same scope, and is re-raised.
- `calls` records every external invocation in order, so a caller can check
  that an operation touched nothing.

This is a simulation host for tests, the CLI and embedding applications that
want to dry-run transfer logic. Real ledgers provide the same primitives
natively.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..errors import Revert
from ..logging import get_logger
from ..types.address import AddressLike, is_zero, to_address, to_hex
from ..types.amount import require_amount
from ..types.outcome import CallOutcome
from .contracts import Contract, ContractEnv
from .interface import CallContext
from .journal import Journal, LogEvent

log = get_logger(__name__)


@dataclass(frozen=True)
class CallRecord:
    """One external invocation as seen by the host."""

    kind: str  # "call" | "static" | "send"
    caller: bytes
    target: bytes
    data: bytes
    value: int
    success: bool

    @property
    def selector(self) -> bytes:
        return self.data[:4]


class InMemoryHost:
    def __init__(self, *, block_timestamp: int = 0) -> None:
        self.journal = Journal()
        self.block_timestamp = int(block_timestamp)
        self.calls: List[CallRecord] = []
        self._contracts: Dict[bytes, Contract] = {}
        self._frames: List[CallContext] = []

    # ------------------------------------------------------------------ #
    # Setup helpers
    # ------------------------------------------------------------------ #

    def deploy(self, address: AddressLike, contract: Contract) -> bytes:
        addr = to_address(address)
        if not contract.code:
            raise ValueError("contract must have non-empty code")
        if is_zero(addr):
            raise ValueError("cannot deploy at the zero address")
        contract.address = addr
        self._contracts[addr] = contract
        return addr

    def set_native_balance(self, address: AddressLike, amount: int) -> None:
        self.journal.set_balance(to_address(address), require_amount(amount))

    def env_for(self, address: AddressLike, *, caller: Optional[AddressLike] = None) -> ContractEnv:
        """A writable environment for `address`, for admin/test setup outside any call."""
        addr = to_address(address)
        return ContractEnv(self, address=addr, caller=to_address(caller) if caller else addr)

    # ------------------------------------------------------------------ #
    # Host protocol
    # ------------------------------------------------------------------ #

    @property
    def context(self) -> CallContext:
        if not self._frames:
            raise RuntimeError("no active frame; use host.frame() or host.transaction()")
        return self._frames[-1]

    def code_size(self, address: bytes) -> int:
        c = self._contracts.get(to_address(address))
        return len(c.code) if c is not None else 0

    def native_balance(self, address: bytes) -> int:
        return self.journal.get_balance(to_address(address))

    def call(
        self,
        target: bytes,
        data: bytes,
        *,
        value: int = 0,
        gas: Optional[int] = None,
    ) -> CallOutcome:
        return self._invoke(to_address(target), bytes(data), value=require_amount(value), static=False)

    def static_call(self, target: bytes, data: bytes) -> CallOutcome:
        return self._invoke(to_address(target), bytes(data), value=0, static=True)

    def send_native(self, to: bytes, amount: int, *, gas: Optional[int] = None) -> bool:
        to = to_address(to)
        require_amount(amount)
        frm = self.context.address
        marker = self.journal.begin()
        try:
            self._move(frm, to, amount)
            contract = self._contracts.get(to)
            if contract is not None:
                if gas is not None and contract.receive_gas > gas:
                    raise Revert("out of gas in receive")
                env = ContractEnv(self, address=to, caller=frm, value=amount)
                with self.frame(to, caller=frm, value=amount):
                    contract.receive(env, amount)
        except Revert as exc:
            self.journal.revert_to(marker - 1)
            log.debug("native send reverted", extra={"to": to_hex(to), "reason": exc.reason})
            ok = False
        except BaseException:
            self.journal.revert_to(marker - 1)
            raise
        else:
            self.journal.commit_to(marker - 1)
            ok = True
        self.calls.append(CallRecord("send", frm, to, b"", amount, ok))
        return ok

    # ------------------------------------------------------------------ #
    # Frames & units of work
    # ------------------------------------------------------------------ #

    @contextmanager
    def frame(
        self,
        address: AddressLike,
        *,
        caller: AddressLike,
        value: int = 0,
    ) -> Iterator[CallContext]:
        """Run the body as `address`, invoked by `caller` with `value` attached (value is not moved)."""
        ctx = CallContext(to_address(address), to_address(caller), value)
        self._frames.append(ctx)
        try:
            yield ctx
        finally:
            self._frames.pop()

    @contextmanager
    def unit_of_work(self) -> Iterator["InMemoryHost"]:
        """All-or-nothing scope: commit on normal exit, revert everything on any exception."""
        marker = self.journal.begin()
        try:
            yield self
        except BaseException:
            self.journal.revert_to(marker - 1)
            raise
        else:
            self.journal.commit_to(marker - 1)

    @contextmanager
    def transaction(
        self,
        *,
        sender: AddressLike,
        to: AddressLike,
        value: int = 0,
    ) -> Iterator[CallContext]:
        """
        A unit of work in which `sender` invokes `to` with `value` attached.

        The attached value moves from sender to `to` before the body runs,
        and moves back if the body fails.
        """
        frm, dst = to_address(sender), to_address(to)
        require_amount(value)
        with self.unit_of_work():
            if self.journal.get_balance(frm) < value:
                raise ValueError(f"sender {to_hex(frm)} cannot cover attached value {value}")
            self._move(frm, dst, value)
            with self.frame(dst, caller=frm, value=value) as ctx:
                yield ctx

    # ------------------------------------------------------------------ #
    # Events & introspection
    # ------------------------------------------------------------------ #

    def emit(self, address: bytes, name: bytes, args: Mapping[str, Any]) -> None:
        self.journal.emit(LogEvent(address=address, name=bytes(name), args=dict(args)))

    @property
    def events(self) -> List[LogEvent]:
        return self.journal.events()

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _move(self, frm: bytes, to: bytes, amount: int) -> None:
        if amount == 0:
            return
        bal = self.journal.get_balance(frm)
        if bal < amount:
            raise Revert("insufficient native balance")
        self.journal.set_balance(frm, bal - amount)
        self.journal.set_balance(to, self.journal.get_balance(to) + amount)

    def _invoke(self, target: bytes, data: bytes, *, value: int, static: bool) -> CallOutcome:
        caller = self.context.address
        marker = self.journal.begin()
        try:
            self._move(caller, target, value)
            contract = self._contracts.get(target)
            if contract is None:
                out = CallOutcome.ok(b"")
            else:
                env = ContractEnv(self, address=target, caller=caller, value=value, static=static)
                with self.frame(target, caller=caller, value=value):
                    ret = contract.handle(env, data)
                out = CallOutcome.ok(ret or b"")
        except Revert as exc:
            self.journal.revert_to(marker - 1)
            log.debug("call reverted", extra={"target": to_hex(target), "reason": exc.reason})
            out = CallOutcome.reverted(exc.data)
        except BaseException:
            self.journal.revert_to(marker - 1)
            raise
        else:
            self.journal.commit_to(marker - 1)
        self.calls.append(
            CallRecord("static" if static else "call", caller, target, data, value, out.success)
        )
        return out


__all__ = ["CallRecord", "InMemoryHost"]
