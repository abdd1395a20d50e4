"""
safe-transfer — inspect and dry-run the safe transfer layer.

Commands:
  selectors   Token method and error selectors (keccak-256 of the signatures)
  classify    Apply the success rule to a raw call outcome
  simulate    Run one operation against a quirky in-memory token
  version     Print version information

Examples:
  safe-transfer selectors
  safe-transfer classify --data 0x
  safe-transfer classify --data 0x...01 --reverted
  safe-transfer simulate transfer_from_self --token-style no-return --amount 100
  safe-transfer simulate approve_with_retry --token-style approval-race --amount 5 --json
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import errors as _errors
from ..abi import (SIG_APPROVE, SIG_BALANCE_OF, SIG_PERMIT, SIG_TRANSFER,
                   SIG_TRANSFER_FROM, function_selector)
from ..interpreter import classify as _classify
from ..logging import configure as configure_logging
from ..types.outcome import CallOutcome
from ..version import version_metadata
from .scenario import OPS, TOKEN_STYLES, run_scenario

app = typer.Typer(
    name="safe-transfer",
    help="Inspect and dry-run native/token transfers against quirky token contracts.",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()

_ERROR_TYPES = (
    _errors.InvalidNativeTransferAmount,
    _errors.InvalidToken,
    _errors.TransferFromFailed,
    _errors.TransferFailed,
    _errors.ETHTransferFailed,
    _errors.ApproveFailed,
    _errors.PermitOnNativeToken,
)


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, sort_keys=True))


def _parse_hex(s: str) -> bytes:
    h = s.strip()
    if h.startswith(("0x", "0X")):
        h = h[2:]
    try:
        return bytes.fromhex(h)
    except ValueError as e:
        raise typer.BadParameter(f"not valid hex: {s!r}") from e


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
        envvar="SAFE_TRANSFER_LOG_LEVEL",
    ),
    log_json: bool = typer.Option(False, "--log-json", help="Emit logs as JSON lines"),
) -> None:
    """Logs go to stderr; command output goes to stdout."""
    try:
        configure_logging(json=log_json or None, level=log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="SAFE_TRANSFER_LOG_* / --log-level") from e


@app.command("selectors")
def selectors_cmd(
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List the 4-byte selectors of the token methods and the error identities."""
    methods = [SIG_TRANSFER, SIG_TRANSFER_FROM, SIG_APPROVE, SIG_BALANCE_OF, SIG_PERMIT]
    rows: List[Dict[str, str]] = [
        {"kind": "method", "signature": sig, "selector": "0x" + function_selector(sig).hex()}
        for sig in methods
    ]
    for cls in _ERROR_TYPES:
        sig = f"{cls.__name__}()"
        rows.append({"kind": "error", "signature": sig, "selector": "0x" + function_selector(sig).hex()})

    if json_out:
        _print_json(rows)
        return
    table = Table(title="selectors")
    table.add_column("kind")
    table.add_column("signature")
    table.add_column("selector", style="cyan")
    for r in rows:
        table.add_row(r["kind"], r["signature"], r["selector"])
    console.print(table)


@app.command("classify")
def classify_cmd(
    data: str = typer.Option("0x", "--data", "-d", help="Returned (or revert) bytes as hex"),
    reverted: bool = typer.Option(False, "--reverted", help="The call reverted"),
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Classify a call outcome with the tolerant success rule."""
    raw = _parse_hex(data)
    outcome = CallOutcome(success=not reverted, return_data=raw)
    cls = _classify(outcome)
    res = {
        "class": cls.value,
        "success": cls.is_success,
        "size": outcome.size,
        "word": outcome.word,
    }
    if json_out:
        _print_json(res)
        return
    color = "green" if cls.is_success else "red"
    console.print(f"[{color}]{cls.value}[/{color}] success={cls.is_success} size={outcome.size}")


@app.command("simulate")
def simulate_cmd(
    op: str = typer.Argument(..., help=f"Operation: {', '.join(OPS)}"),
    token_style: str = typer.Option(
        "standard", "--token-style", "-t", help=f"Token flavour: {', '.join(TOKEN_STYLES)}"
    ),
    amount: int = typer.Option(100, "--amount", "-a", min=0, help="Amount to move/approve"),
    attach: Optional[int] = typer.Option(
        None, "--attach", min=0, help="Native value attached by the caller (default: per operation)"
    ),
    json_out: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Run one operation on a fresh in-memory host; exit 1 if it aborted."""
    try:
        res = run_scenario(op, token_style, amount, attach=attach)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    if json_out:
        _print_json(res.to_dict())
    else:
        status_color = "green" if res.ok else "red"
        console.print(f"[bold]{res.op}[/bold] on [bold]{res.token_style}[/bold]: "
                      f"[{status_color}]{res.status}[/{status_color}]")
        if res.result is not None:
            console.print(f"result: {res.result}")
        if res.error:
            console.print(f"error: {res.error['error']} ({res.error.get('message', '')})")

        bal = Table(title="balances after")
        bal.add_column("account")
        bal.add_column("balance", justify="right")
        for who, n in res.balances.items():
            bal.add_row(who, str(n))
        console.print(bal)

        if res.calls:
            calls = Table(title="external calls")
            for col in ("kind", "target", "selector", "value", "success"):
                calls.add_column(col)
            for c in res.calls:
                calls.add_row(c["kind"], c["target"], c["selector"] or "-", str(c["value"]), str(c["success"]))
            console.print(calls)

    if not res.ok:
        raise typer.Exit(code=1)


@app.command("version")
def version_cmd() -> None:
    """Print version information."""
    _print_json(version_metadata())


def main() -> None:
    """Entry point for the safe-transfer CLI."""
    app()


if __name__ == "__main__":
    main()
