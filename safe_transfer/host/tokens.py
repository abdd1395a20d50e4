# -*- coding: utf-8 -*-
"""
Fungible token for the in-memory host
=====================================

Deterministic, storage-backed token contract that speaks the conventional
four-method interface (`transfer`, `transferFrom`, `approve`, `balanceOf`,
plus `allowance` and a `permit` extension) over raw call data.

Deployed tokens rarely agree on the details, so behaviour is tunable through
`TokenQuirks`:

- return_style         BOOL: return an ABI `true` word on success.
                       NONE: return nothing on success (non-compliant).
- fail_style           REVERT: abort the call on failure.
                       FALSE:  return an ABI `false` word on failure.
- revert_on_zero       zero-value transfers/approvals fail.
- approval_race_guard  changing a non-zero allowance to another non-zero value fails;
                       the allowance must be reset to zero first.
- balance_of_reverts   `balanceOf` always reverts.

Storage layout (prefixed bytes keys, u256 values as 32-byte big-endian):
  - balances:   b"tok:bal:"   || <addr>
  - allowances: b"tok:allow:" || <owner> || b"|" || <spender>
  - nonces:     b"tok:nonce:" || <owner>
  - supply:     b"tok:meta:total"

Events:
  - b"Transfer" { "from": bytes, "to": bytes, "value": int }
  - b"Approval" { "owner": bytes, "spender": bytes, "value": int }

Permit
------
Signature verification is host business on a real ledger. Here `r` must equal
`permit_digest(...)` for the current nonce (`v` and `s` are carried but not
checked), which is enough to exercise nonce consumption, deadlines and the
allowance update.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Final, List, Optional

from ..abi import (SEL_APPROVE, SEL_BALANCE_OF, SEL_PERMIT, SEL_TRANSFER,
                   SEL_TRANSFER_FROM, decode_address, encode_address,
                   encode_uint256, function_selector, keccak256, split_call)
from ..errors import Revert
from ..types.address import AddressLike, to_address
from ..types.amount import U256_MAX
from .contracts import Contract, ContractEnv, word

if TYPE_CHECKING:
    from .memory import InMemoryHost

# ------------------------------------------------------------------------------
# Storage keys & tags
# ------------------------------------------------------------------------------

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"
NONCE_PREFIX: Final[bytes] = b"tok:nonce:"
K_TOTAL: Final[bytes] = b"tok:meta:total"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"

SEL_ALLOWANCE: Final[bytes] = function_selector("allowance(address,address)")

PERMIT_DOMAIN_TAG: Final[bytes] = b"\x19\x01safe_transfer.permit/v1"


def key_balance(addr: bytes) -> bytes:
    return BAL_PREFIX + addr


def key_allow(owner: bytes, spender: bytes) -> bytes:
    return ALLOW_PREFIX + owner + b"|" + spender


def key_nonce(owner: bytes) -> bytes:
    return NONCE_PREFIX + owner


def _get_u256(env: ContractEnv, k: bytes) -> int:
    v = env.sload(k)
    return int.from_bytes(v, "big") if v else 0


def _set_u256(env: ContractEnv, k: bytes, n: int) -> None:
    if n < 0 or n > U256_MAX:
        raise Revert("TOKEN:U256_RANGE")
    env.sstore(k, n.to_bytes(32, "big") if n else b"")


# ------------------------------------------------------------------------------
# Quirks
# ------------------------------------------------------------------------------


class ReturnStyle(str, Enum):
    BOOL = "bool"
    NONE = "none"


class FailStyle(str, Enum):
    REVERT = "revert"
    FALSE = "false"


@dataclass(frozen=True)
class TokenQuirks:
    return_style: ReturnStyle = ReturnStyle.BOOL
    fail_style: FailStyle = FailStyle.REVERT
    revert_on_zero: bool = False
    approval_race_guard: bool = False
    balance_of_reverts: bool = False


# Named behaviours seen in the wild; the CLI exposes these by name.
PRESETS: Dict[str, TokenQuirks] = {
    "standard": TokenQuirks(),
    "no-return": TokenQuirks(return_style=ReturnStyle.NONE),
    "returns-false": TokenQuirks(fail_style=FailStyle.FALSE),
    "zero-reverting": TokenQuirks(revert_on_zero=True),
    "approval-race": TokenQuirks(return_style=ReturnStyle.NONE, approval_race_guard=True),
    "broken-balance": TokenQuirks(balance_of_reverts=True),
}


class _Failed(Exception):
    """Internal: a token-level check failed; rendered per `fail_style`."""


def permit_digest(
    token: AddressLike,
    owner: AddressLike,
    spender: AddressLike,
    value: int,
    nonce: int,
    deadline: int,
) -> bytes:
    """Deterministic 32-byte message a permit's `r` must match."""
    return keccak256(
        PERMIT_DOMAIN_TAG
        + encode_address(token)
        + encode_address(owner)
        + encode_address(spender)
        + encode_uint256(value)
        + encode_uint256(nonce)
        + encode_uint256(deadline)
    )


# ------------------------------------------------------------------------------
# Contract
# ------------------------------------------------------------------------------


class FungibleToken(Contract):
    code = b"\x60\x80\x60\x40"

    def __init__(
        self,
        quirks: Optional[TokenQuirks] = None,
        *,
        name: bytes = b"Token",
        symbol: bytes = b"TKN",
        decimals: int = 18,
    ) -> None:
        self.quirks = quirks or TokenQuirks()
        self.name = name
        self.symbol = symbol
        self.decimals = decimals

    # ---- dispatch ---- #

    def handle(self, env: ContractEnv, data: bytes) -> bytes:
        try:
            sel, args = split_call(data)
        except ValueError:
            raise Revert("TOKEN:BAD_CALLDATA")

        if sel == SEL_BALANCE_OF:
            (who,) = self._arity(args, 1)
            if self.quirks.balance_of_reverts:
                raise Revert("TOKEN:BALANCE_UNAVAILABLE")
            return word(_get_u256(env, key_balance(decode_address(who))))
        if sel == SEL_ALLOWANCE:
            owner, spender = self._arity(args, 2)
            return word(_get_u256(env, key_allow(decode_address(owner), decode_address(spender))))

        try:
            if sel == SEL_TRANSFER:
                to, amount = self._arity(args, 2)
                self._transfer(env, env.caller, decode_address(to), amount)
            elif sel == SEL_TRANSFER_FROM:
                frm, to, amount = self._arity(args, 3)
                self._transfer_from(env, decode_address(frm), decode_address(to), amount)
            elif sel == SEL_APPROVE:
                spender, amount = self._arity(args, 2)
                self._approve(env, decode_address(spender), amount)
            elif sel == SEL_PERMIT:
                owner, spender, value, deadline, _v, r, _s = self._arity(args, 7)
                self._permit(env, decode_address(owner), decode_address(spender), value, deadline, r)
                return b""
            else:
                raise Revert("TOKEN:UNKNOWN_SELECTOR")
        except _Failed as exc:
            if self.quirks.fail_style is FailStyle.FALSE:
                return word(0)
            raise Revert(str(exc)) from None

        if self.quirks.return_style is ReturnStyle.NONE:
            return b""
        return word(1)

    @staticmethod
    def _arity(args: List[int], n: int) -> List[int]:
        if len(args) != n:
            raise Revert("TOKEN:BAD_ARITY")
        return args

    # ---- mutations (all checks precede all writes) ---- #

    def _transfer(self, env: ContractEnv, frm: bytes, to: bytes, amount: int) -> None:
        if amount == 0 and self.quirks.revert_on_zero:
            raise _Failed("TOKEN:ZERO_AMOUNT")
        from_bal = _get_u256(env, key_balance(frm))
        if from_bal < amount:
            raise _Failed("TOKEN:INSUFFICIENT_BALANCE")
        _set_u256(env, key_balance(frm), from_bal - amount)
        _set_u256(env, key_balance(to), _get_u256(env, key_balance(to)) + amount)
        env.emit(EVT_TRANSFER, {"from": frm, "to": to, "value": amount})

    def _transfer_from(self, env: ContractEnv, owner: bytes, to: bytes, amount: int) -> None:
        spender = env.caller
        current_allow = _get_u256(env, key_allow(owner, spender))
        if current_allow < amount:
            raise _Failed("TOKEN:ALLOWANCE_LOW")
        if amount == 0 and self.quirks.revert_on_zero:
            raise _Failed("TOKEN:ZERO_AMOUNT")
        if _get_u256(env, key_balance(owner)) < amount:
            raise _Failed("TOKEN:INSUFFICIENT_BALANCE")
        if current_allow != U256_MAX:
            _set_u256(env, key_allow(owner, spender), current_allow - amount)
        self._transfer(env, owner, to, amount)

    def _approve(self, env: ContractEnv, spender: bytes, amount: int) -> None:
        owner = env.caller
        if amount == 0 and self.quirks.revert_on_zero:
            raise _Failed("TOKEN:ZERO_AMOUNT")
        current = _get_u256(env, key_allow(owner, spender))
        if self.quirks.approval_race_guard and current != 0 and amount != 0:
            raise _Failed("TOKEN:APPROVE_FROM_NON_ZERO")
        _set_u256(env, key_allow(owner, spender), amount)
        env.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": amount})

    def _permit(
        self,
        env: ContractEnv,
        owner: bytes,
        spender: bytes,
        value: int,
        deadline: int,
        r: int,
    ) -> None:
        if deadline < env.timestamp:
            raise _Failed("PERMIT:EXPIRED")
        nonce = _get_u256(env, key_nonce(owner))
        expected = permit_digest(env.address, owner, spender, value, nonce, deadline)
        if r.to_bytes(32, "big") != expected:
            raise _Failed("PERMIT:BAD_SIGNATURE")
        _set_u256(env, key_nonce(owner), nonce + 1)
        _set_u256(env, key_allow(owner, spender), value)
        env.emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "value": value})

    # ---- admin / inspection helpers (run outside any call) ---- #

    def _env(self, host: "InMemoryHost") -> ContractEnv:
        if self.address is None:
            raise RuntimeError("token is not deployed")
        return host.env_for(self.address)

    def mint(self, host: "InMemoryHost", to: AddressLike, amount: int) -> None:
        env = self._env(host)
        dst = to_address(to)
        _set_u256(env, K_TOTAL, _get_u256(env, K_TOTAL) + amount)
        _set_u256(env, key_balance(dst), _get_u256(env, key_balance(dst)) + amount)
        env.emit(EVT_TRANSFER, {"from": b"\x00" * 20, "to": dst, "value": amount})

    def set_allowance(
        self, host: "InMemoryHost", owner: AddressLike, spender: AddressLike, amount: int
    ) -> None:
        _set_u256(self._env(host), key_allow(to_address(owner), to_address(spender)), amount)

    def balance(self, host: "InMemoryHost", who: AddressLike) -> int:
        return _get_u256(self._env(host), key_balance(to_address(who)))

    def allowance(self, host: "InMemoryHost", owner: AddressLike, spender: AddressLike) -> int:
        return _get_u256(self._env(host), key_allow(to_address(owner), to_address(spender)))

    def nonce(self, host: "InMemoryHost", owner: AddressLike) -> int:
        return _get_u256(self._env(host), key_nonce(to_address(owner)))

    def total_supply(self, host: "InMemoryHost") -> int:
        return _get_u256(self._env(host), K_TOTAL)


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "NONCE_PREFIX",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "SEL_ALLOWANCE",
    "ReturnStyle",
    "FailStyle",
    "TokenQuirks",
    "PRESETS",
    "permit_digest",
    "FungibleToken",
]
