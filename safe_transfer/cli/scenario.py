"""
safe_transfer.cli.scenario — canned single-operation dry runs on an in-memory host.

Three accounts take part in every scenario:

    ALICE   the invoking account (caller of the vault)
    VAULT   the executing account the operations run as
    BOB     the recipient / spender

`run_scenario` funds them, deploys the requested token flavour, invokes one
operation inside a unit of work and reports what happened. Balances are read
after the unit of work finishes, so a failed run shows the untouched state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..errors import error_to_status
from ..host import PRESETS, FungibleToken, InMemoryHost, permit_digest
from ..transfers import (approve, approve_with_retry, balance_of, permit,
                         transfer_all, transfer_from_caller, transfer_from_self)
from ..types import NATIVE, Token, to_hex

ALICE = bytes.fromhex("a1" * 20)
VAULT = bytes.fromhex("7a" * 20)
BOB = bytes.fromhex("b0" * 20)
TOKEN = bytes.fromhex("70" * 20)

OPS = (
    "transfer_from_caller",
    "transfer_from_self",
    "transfer_all",
    "approve",
    "approve_with_retry",
    "balance_of",
    "permit",
)
TOKEN_STYLES = ("native",) + tuple(PRESETS)

_PERMIT_DEADLINE = 2_000_000_000


@dataclass
class ScenarioResult:
    op: str
    token_style: str
    status: str
    result: Any = None
    error: Optional[Dict[str, Any]] = None
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[str, int] = field(default_factory=dict)
    calls: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op,
            "token_style": self.token_style,
            "status": self.status,
            "result": self.result,
            "error": self.error,
            "balances": dict(self.balances),
            "allowances": dict(self.allowances),
            "calls": list(self.calls),
        }


def _setup(host: InMemoryHost, style: str, amount: int) -> Optional[FungibleToken]:
    if style == "native":
        host.set_native_balance(ALICE, amount)
        host.set_native_balance(VAULT, amount)
        return None
    tok = FungibleToken(PRESETS[style])
    host.deploy(TOKEN, tok)
    tok.mint(host, ALICE, amount)
    tok.mint(host, VAULT, amount)
    tok.set_allowance(host, ALICE, VAULT, amount)
    # a standing allowance makes approval-race tokens refuse a direct change
    tok.set_allowance(host, VAULT, BOB, 1)
    return tok


def run_scenario(
    op: str,
    token_style: str,
    amount: int,
    *,
    attach: Optional[int] = None,
) -> ScenarioResult:
    """
    Run `op` against a fresh host.

    `attach` is the native value ALICE sends along with the invocation; it
    defaults to `amount` for a native `transfer_from_caller` and 0 otherwise.
    """
    if op not in OPS:
        raise ValueError(f"unknown operation {op!r}; expected one of {', '.join(OPS)}")
    if token_style not in TOKEN_STYLES:
        raise ValueError(f"unknown token style {token_style!r}; expected one of {', '.join(TOKEN_STYLES)}")

    host = InMemoryHost(block_timestamp=1)
    tok = _setup(host, token_style, amount)
    token: Token = NATIVE if tok is None else Token.contract(TOKEN)

    if attach is None:
        attach = amount if (op == "transfer_from_caller" and tok is None) else 0

    actions: Dict[str, Callable[[], Any]] = {
        "transfer_from_caller": lambda: transfer_from_caller(host, token, VAULT, amount),
        "transfer_from_self": lambda: transfer_from_self(host, token, BOB, amount),
        "transfer_all": lambda: transfer_all(host, token, BOB),
        "approve": lambda: approve(host, token, BOB, amount),
        "approve_with_retry": lambda: approve_with_retry(host, token, BOB, amount),
        "balance_of": lambda: balance_of(host, token, VAULT),
        "permit": lambda: _permit(host, token, amount),
    }

    out = ScenarioResult(op=op, token_style=token_style, status="OK")
    try:
        with host.transaction(sender=ALICE, to=VAULT, value=attach):
            out.result = actions[op]()
    except Exception as exc:  # reported, not re-raised: this is a dry run
        status = error_to_status(exc)
        out.status = status["status"]
        out.error = status["error"]

    out.balances = _balances(host, tok)
    if tok is not None:
        out.allowances = {
            "alice->vault": tok.allowance(host, ALICE, VAULT),
            "vault->bob": tok.allowance(host, VAULT, BOB),
            "alice->bob": tok.allowance(host, ALICE, BOB),
        }
    out.calls = [
        {
            "kind": c.kind,
            "target": to_hex(c.target),
            "selector": "0x" + c.selector.hex() if c.data else None,
            "value": c.value,
            "success": c.success,
        }
        for c in host.calls
    ]
    return out


def _permit(host: InMemoryHost, token: Token, amount: int) -> None:
    # ALICE signs an approval for BOB, VAULT relays it
    addr = token.to_address()
    r = permit_digest(addr, ALICE, BOB, amount, 0, _PERMIT_DEADLINE)
    permit(host, token, ALICE, BOB, amount, _PERMIT_DEADLINE, 27, r, b"\x00" * 32)


def _balances(host: InMemoryHost, tok: Optional[FungibleToken]) -> Dict[str, int]:
    accounts = {"alice": ALICE, "vault": VAULT, "bob": BOB}
    if tok is None:
        return {k: host.native_balance(v) for k, v in accounts.items()}
    return {k: tok.balance(host, v) for k, v in accounts.items()}


__all__ = [
    "ALICE",
    "VAULT",
    "BOB",
    "TOKEN",
    "OPS",
    "TOKEN_STYLES",
    "ScenarioResult",
    "run_scenario",
]
