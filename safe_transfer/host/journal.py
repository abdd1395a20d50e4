"""
safe_transfer.host.journal — journaling writes, checkpoints, revert/commit.

A deterministic, in-memory write journal over native balances, per-account
contract storage and emitted log events. Nested checkpoints are a stack of
overlays: writes go to the top overlay; reads consult overlays from top →
base. `commit()` merges the top overlay into the next layer (or the base
state if it is the last layer). `revert()` discards the top overlay.

This is what gives a host the all-or-nothing unit of work: the whole
operation runs inside one checkpoint, every external call inside a nested
one, and a failure anywhere reverts exactly the effects made at or above
that level.

Intended usage
--------------
    j = Journal()
    j.begin()
    j.set_balance(addr, 123)
    j.storage_set(token, b"tok:bal:" + addr, (5).to_bytes(32, "big"))
    j.revert()                      # or j.commit()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (Any, Dict, List, Mapping, MutableMapping, Optional,
                    Tuple)


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


@dataclass(frozen=True)
class LogEvent:
    """An event emitted by a contract during a call."""

    address: bytes
    name: bytes
    args: Mapping[str, Any] = field(default_factory=dict)


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `balances`: native balances written in this layer.
    - `storage`:  staged storage changes. `None` means deletion for that key.
    - `events`:   events emitted in this layer, in order.
    """

    balances: Dict[bytes, int] = field(default_factory=dict)
    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)
    events: List[LogEvent] = field(default_factory=list)

    def storage_get_local(self, addr: bytes, key: bytes) -> Tuple[bool, Optional[bytes]]:
        m = self.storage.get(addr)
        if m is None or key not in m:
            return False, None
        return True, m[key]

    def storage_set_local(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        self.storage.setdefault(addr, {})[key] = value


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    A copy-on-write journal with nested checkpoints.

    Parameters
    ----------
    balances : MutableMapping[bytes, int] | None
        The base (committed) native balances.
    storage : MutableMapping[bytes, Dict[bytes, bytes]] | None
        The base (committed) storage, keyed by account address.

    Reads consult overlays from top to bottom and then the base. Writes always
    target the top overlay.
    """

    def __init__(
        self,
        balances: Optional[MutableMapping[bytes, int]] = None,
        storage: Optional[MutableMapping[bytes, Dict[bytes, bytes]]] = None,
    ) -> None:
        self._base_balances: MutableMapping[bytes, int] = {} if balances is None else balances
        self._base_storage: MutableMapping[bytes, Dict[bytes, bytes]] = (
            {} if storage is None else storage
        )
        self._base_events: List[LogEvent] = []
        # Start with a single empty overlay for convenience.
        self._layers: List[_Overlay] = [_Overlay()]

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of overlays (>= 1)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """
        Commit the top overlay into its parent, or into the base state when
        only the root layer remains.
        """
        top = self._layers.pop()
        if self._layers:
            self._merge_layers(self._layers[-1], top)
        else:
            self._apply_to_base(top)
            self._layers.append(_Overlay())

    def revert(self) -> None:
        """Discard the top overlay (or clear it if it's the root)."""
        if len(self._layers) > 1:
            self._layers.pop()
        else:
            self._layers[0] = _Overlay()

    def commit_to(self, marker: int) -> None:
        """
        Commit repeatedly until the current depth equals `marker`.
        Committing to depth==1 leaves only the root layer pending.
        """
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) > marker:
            self.commit()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until the current depth equals `marker`."""
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) > marker:
            self.revert()

    # --------------------------------------------------------------------- #
    # Balances
    # --------------------------------------------------------------------- #

    def get_balance(self, address: bytes | bytearray | memoryview) -> int:
        addr = _b(address, name="address")
        for layer in reversed(self._layers):
            if addr in layer.balances:
                return layer.balances[addr]
        return int(self._base_balances.get(addr, 0))

    def set_balance(self, address: bytes | bytearray | memoryview, value: int) -> None:
        addr = _b(address, name="address")
        if not isinstance(value, int) or value < 0:
            raise ValueError("balance must be a non-negative int")
        self._layers[-1].balances[addr] = value

    # --------------------------------------------------------------------- #
    # Storage
    # --------------------------------------------------------------------- #

    def storage_get(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
        default: bytes = b"",
    ) -> bytes:
        """Read storage with overlay precedence. Returns `default` if absent."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            found, local = layer.storage_get_local(addr, key_b)
            if found:
                return default if local is None else local
        return self._base_storage.get(addr, {}).get(key_b, default)

    def storage_set(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
        value: bytes | bytearray | memoryview,
    ) -> None:
        """Stage a storage write in the top overlay. Empty value is a deletion."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b = _b(value, name="value")
        self._layers[-1].storage_set_local(addr, key_b, val_b or None)

    # --------------------------------------------------------------------- #
    # Events
    # --------------------------------------------------------------------- #

    def emit(self, event: LogEvent) -> None:
        self._layers[-1].events.append(event)

    def events(self) -> List[LogEvent]:
        """Committed events followed by pending ones, oldest first."""
        out = list(self._base_events)
        for layer in self._layers:
            out.extend(layer.events)
        return out

    # --------------------------------------------------------------------- #
    # Internal merge/apply
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        dst.balances.update(src.balances)
        for addr, writes in src.storage.items():
            dst.storage.setdefault(addr, {}).update(writes)
        dst.events.extend(src.events)

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, bal in layer.balances.items():
            self._base_balances[addr] = bal
        for addr, writes in layer.storage.items():
            acct = self._base_storage.setdefault(addr, {})
            for k, v in writes.items():
                if v is None:
                    acct.pop(k, None)
                else:
                    acct[k] = v
        self._base_events.extend(layer.events)


__all__ = ["Journal", "LogEvent"]
