"""
safe_transfer.host — the execution environment the operations run against.

`Host` (interface) is the seam: any ledger client providing its primitives can
back the transfer layer. `InMemoryHost` is the bundled deterministic
implementation with journaled, all-or-nothing units of work.
"""

from .contracts import (Contract, ContractEnv, GasHungryReceiver,
                        RejectingReceiver, ScriptedContract, word)
from .interface import CallContext, Host
from .journal import Journal, LogEvent
from .memory import CallRecord, InMemoryHost
from .tokens import (PRESETS, FailStyle, FungibleToken, ReturnStyle,
                     TokenQuirks, permit_digest)

__all__ = [
    "CallContext",
    "Host",
    "Journal",
    "LogEvent",
    "CallRecord",
    "InMemoryHost",
    "Contract",
    "ContractEnv",
    "ScriptedContract",
    "RejectingReceiver",
    "GasHungryReceiver",
    "word",
    "PRESETS",
    "FailStyle",
    "ReturnStyle",
    "TokenQuirks",
    "FungibleToken",
    "permit_digest",
]
