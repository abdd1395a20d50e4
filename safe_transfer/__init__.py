"""
safe_transfer — defensive value movement for native assets and fungible-token contracts.

One small set of operations moves either the ledger's native asset or any
external fungible-token contract, tolerating the many deployed tokens that
deviate from the nominal interface (no return value, `false` instead of a
revert, reverts on zero amounts, refusal to change a non-zero allowance).

    from safe_transfer import InMemoryHost, FungibleToken, transfer_from_self

Operations take a `Host` (the execution environment) as their first argument;
`safe_transfer.host.InMemoryHost` is the bundled deterministic one.
"""

from .errors import (ApproveFailed, ETHTransferFailed, InvalidNativeTransferAmount,
                     InvalidToken, PermitOnNativeToken, SafeTransferError,
                     TransferFailed, TransferFromFailed)
from .host import FungibleToken, Host, InMemoryHost
from .interpreter import OutcomeClass, classify, is_successful
from .transfers import (approve, approve_with_retry, balance_of, permit,
                        transfer_all, transfer_from_caller, transfer_from_self)
from .types import NATIVE, ZERO_ADDRESS, CallOutcome, Token, TokenKind, resolve_token
from .version import __version__

__all__ = [
    "__version__",
    # operations
    "transfer_from_caller",
    "transfer_from_self",
    "transfer_all",
    "approve",
    "approve_with_retry",
    "permit",
    "balance_of",
    # types
    "NATIVE",
    "ZERO_ADDRESS",
    "Token",
    "TokenKind",
    "resolve_token",
    "CallOutcome",
    "OutcomeClass",
    "classify",
    "is_successful",
    # hosts
    "Host",
    "InMemoryHost",
    "FungibleToken",
    # errors
    "SafeTransferError",
    "InvalidNativeTransferAmount",
    "InvalidToken",
    "TransferFromFailed",
    "TransferFailed",
    "ETHTransferFailed",
    "ApproveFailed",
    "PermitOnNativeToken",
]
