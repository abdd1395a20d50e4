"""
safe_transfer.transfers — uniform, defensive value movement.

One operation set for the native asset and for external fungible-token
contracts whose implementations cannot be trusted to follow the nominal
interface. Every operation:

1. dispatches on the token (native vs contract) before doing anything else;
2. treats a zero amount as an immediate success that never reaches a contract
   (some tokens revert on zero-value calls);
3. on the contract path, refuses addresses without code (`InvalidToken`),
   since a call to a plain account "succeeds" with no return data;
4. classifies each call outcome with the tolerant rule in
   `safe_transfer.interpreter` and raises the matching error on failure.

Errors abort the caller's unit of work; the layer keeps no state between calls
and never caches balances. Reentrancy protection is the caller's job.

Operations
----------
transfer_from_caller(host, token, to, amount)   pull from the invoking account
transfer_from_self(host, token, to, amount)     push from the executing account
transfer_all(host, token, to) -> int            push the entire current balance
approve(host, token, spender, amount)
approve_with_retry(host, token, spender, amount)
balance_of(host, token, account) -> int         never raises on unreadable tokens
permit(host, token, owner, spender, value, deadline, v, r, s)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .abi import (approve_calldata, balance_of_calldata, permit_calldata,
                  transfer_calldata, transfer_from_calldata)
from .config import get_config
from .errors import (ApproveFailed, ETHTransferFailed, InvalidNativeTransferAmount,
                     InvalidToken, PermitOnNativeToken, SafeTransferError,
                     TransferFailed, TransferFromFailed)
from .host.interface import Host
from .interpreter import classify, is_successful, read_uint
from .logging import get_logger
from .metrics import observe_op, observe_retry
from .types.address import AddressLike, to_address, to_hex
from .types.amount import require_amount
from .types.outcome import CallOutcome
from .types.token import Token, TokenLike, resolve_token

log = get_logger(__name__)


# ------------------------------------------------------------------------------
# Internals
# ------------------------------------------------------------------------------


@contextmanager
def _observed(op: str, token: Token) -> Iterator[None]:
    try:
        yield
    except SafeTransferError as err:
        observe_op(op=op, token=token.kind.value, result=err.code)
        log.info("%s aborted", op, extra={"token": str(token), "code": err.code})
        raise
    else:
        observe_op(op=op, token=token.kind.value, result="success")


def _require_code(host: Host, token: Token) -> bytes:
    addr = token.to_address()
    if host.code_size(addr) == 0:
        raise InvalidToken(token=addr)
    return addr


def _send_native(host: Host, to: bytes, amount: int) -> None:
    if not host.send_native(to, amount, gas=get_config().native_transfer_gas):
        raise ETHTransferFailed(to=to, amount=amount)


def _push_token(host: Host, token_addr: bytes, to: bytes, amount: int) -> None:
    out = host.call(token_addr, transfer_calldata(to, amount))
    if not is_successful(out):
        raise TransferFailed(token=token_addr, return_data=out.return_data)


def _call_approve(host: Host, token_addr: bytes, spender: bytes, amount: int) -> CallOutcome:
    return host.call(token_addr, approve_calldata(spender, amount))


# ------------------------------------------------------------------------------
# Transfers
# ------------------------------------------------------------------------------


def transfer_from_caller(host: Host, token: TokenLike, to: AddressLike, amount: int) -> None:
    """
    Pull `amount` from the invoking account to `to`.

    Native: the value must already be attached to the invocation, exactly
    `amount` of it (`InvalidNativeTransferAmount` otherwise); nothing else
    moves, the value arrived with the invocation itself.
    Contract: `transferFrom(caller, to, amount)` on the token, using the
    allowance the caller granted to the executing account.
    """
    tok = resolve_token(token)
    dst = to_address(to)
    require_amount(amount)
    with _observed("transfer_from_caller", tok):
        if amount == 0:
            return
        ctx = host.context
        if tok.is_native:
            if ctx.value != amount:
                raise InvalidNativeTransferAmount(expected=amount, attached=ctx.value)
            return
        addr = _require_code(host, tok)
        out = host.call(addr, transfer_from_calldata(ctx.caller, dst, amount))
        if not is_successful(out):
            raise TransferFromFailed(token=addr, return_data=out.return_data)
        log.debug("pulled %d from %s", amount, to_hex(ctx.caller), extra={"token": str(tok)})


def transfer_from_self(host: Host, token: TokenLike, to: AddressLike, amount: int) -> None:
    """Push `amount` from the executing account to `to`."""
    tok = resolve_token(token)
    dst = to_address(to)
    require_amount(amount)
    with _observed("transfer_from_self", tok):
        if amount == 0:
            return
        if tok.is_native:
            _send_native(host, dst, amount)
        else:
            _push_token(host, _require_code(host, tok), dst, amount)
        log.debug("pushed %d to %s", amount, to_hex(dst), extra={"token": str(tok)})


def transfer_all(host: Host, token: TokenLike, to: AddressLike) -> int:
    """
    Push the executing account's entire balance to `to`; return the amount moved.

    The balance is read at the moment of the transfer, never taken from an
    earlier read: rebasing tokens, airdrops and plain incoming sends change it
    without going through this layer.
    """
    tok = resolve_token(token)
    dst = to_address(to)
    with _observed("transfer_all", tok):
        me = host.context.address
        if tok.is_native:
            amount = host.native_balance(me)
            _send_native(host, dst, amount)
            return amount

        addr = _require_code(host, tok)
        amount = read_uint(host.static_call(addr, balance_of_calldata(me)))
        if amount is None:
            raise TransferFailed("balance read failed", token=addr)
        if amount == 0:
            return 0
        _push_token(host, addr, dst, amount)
        log.debug("pushed entire balance %d to %s", amount, to_hex(dst), extra={"token": str(tok)})
        return amount


# ------------------------------------------------------------------------------
# Approvals
# ------------------------------------------------------------------------------


def approve(host: Host, token: TokenLike, spender: AddressLike, amount: int) -> None:
    """Set the executing account's allowance for `spender`. No-op for the native asset."""
    tok = resolve_token(token)
    sp = to_address(spender)
    require_amount(amount)
    with _observed("approve", tok):
        if tok.is_native or amount == 0:
            return
        addr = _require_code(host, tok)
        out = _call_approve(host, addr, sp, amount)
        if not is_successful(out):
            raise ApproveFailed(token=addr, return_data=out.return_data)
        log.debug("approved %d for %s", amount, to_hex(sp), extra={"token": str(tok)})


def approve_with_retry(host: Host, token: TokenLike, spender: AddressLike, amount: int) -> None:
    """
    `approve`, tolerating tokens that refuse to change a non-zero allowance.

    On a failed approval the allowance is first reset to zero (that call's
    result is ignored), then the approval is attempted exactly once more.
    """
    tok = resolve_token(token)
    sp = to_address(spender)
    require_amount(amount)
    with _observed("approve_with_retry", tok):
        if tok.is_native or amount == 0:
            return
        addr = _require_code(host, tok)
        first = _call_approve(host, addr, sp, amount)
        if is_successful(first):
            return
        observe_retry()
        log.warning(
            "approve failed, resetting allowance and retrying",
            extra={"token": str(tok), "outcome": classify(first).value},
        )
        _call_approve(host, addr, sp, 0)
        retry = _call_approve(host, addr, sp, amount)
        if not is_successful(retry):
            raise ApproveFailed(token=addr, return_data=retry.return_data)


def permit(
    host: Host,
    token: TokenLike,
    owner: AddressLike,
    spender: AddressLike,
    value: int,
    deadline: int,
    v: int,
    r: bytes,
    s: bytes,
) -> None:
    """
    Submit a signed (gasless) approval to the token.

    The native asset has no approvals at all, so it is rejected with
    `PermitOnNativeToken` before anything else happens. A failed permit call
    raises `ApproveFailed`.
    """
    tok = resolve_token(token)
    with _observed("permit", tok):
        if tok.is_native:
            raise PermitOnNativeToken()
        addr = _require_code(host, tok)
        out = host.call(addr, permit_calldata(owner, spender, value, deadline, v, r, s))
        if not is_successful(out):
            raise ApproveFailed("token permit failed", token=addr, return_data=out.return_data)
        log.debug("permit relayed", extra={"token": str(tok)})


# ------------------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------------------


def balance_of(host: Host, token: TokenLike, account: AddressLike) -> int:
    """
    Balance of `account`. An unreadable token (call failed, too little data,
    no code at the address) reads as 0 instead of raising.
    """
    tok = resolve_token(token)
    who = to_address(account)
    with _observed("balance_of", tok):
        if tok.is_native:
            return host.native_balance(who)
        bal = read_uint(host.static_call(tok.to_address(), balance_of_calldata(who)))
        return 0 if bal is None else bal


__all__ = [
    "transfer_from_caller",
    "transfer_from_self",
    "transfer_all",
    "approve",
    "approve_with_retry",
    "permit",
    "balance_of",
]
