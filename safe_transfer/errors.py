"""
safe_transfer.errors — the abort conditions raised by the transfer layer.

Every failure is surfaced to the caller's unit of work as a typed exception;
raising any of them aborts the enclosing unit of work, which discards all of
its effects. The layer never recovers locally, with the single exception of
`approve_with_retry` (one reset-then-retry before `ApproveFailed`).

Hierarchy
---------
SafeTransferError (base)
 ├─ InvalidNativeTransferAmount : native pull with attached value ≠ amount
 ├─ InvalidToken                : contract-path target has no executable code
 ├─ TransferFromFailed          : token pull-transfer classified as failure
 ├─ TransferFailed              : token push-transfer failed, or the transfer_all balance read failed
 ├─ ETHTransferFailed           : native push (direct send or transfer_all) failed
 ├─ ApproveFailed               : token approval failed (after the retry, for approve_with_retry)
 └─ PermitOnNativeToken         : permit-style approval requested for the native asset

`Revert` is separate: contracts running on a host raise it to abort their own
frame, and the host turns it into a failed call outcome.

Each taxonomy error carries a 4-byte `selector` (keccak of "Name()"), the
identity a ledger-side caller would see in revert data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .abi import function_selector


@dataclass
class SafeTransferError(Exception):
    """
    Base transfer-layer error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INVALID_TOKEN').
        data:    Optional structured details (kept JSON-serializable).
    """

    message: str = "safe transfer error"
    code: str = "SAFE_TRANSFER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    @property
    def selector(self) -> bytes:
        return function_selector(f"{type(self).__name__}()")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs/CLI output."""
        out: Dict[str, Any] = {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "selector": "0x" + self.selector.hex(),
        }
        if self.data is not None:
            out["data"] = self.data
        return out


def _details(data: Optional[Dict[str, Any]], **fields: Any) -> Optional[Dict[str, Any]]:
    d: Dict[str, Any] = {}
    if data:
        d.update(data)
    for k, v in fields.items():
        if v is None:
            continue
        d.setdefault(k, v.hex() if isinstance(v, (bytes, bytearray)) else v)
    return d or None


class InvalidNativeTransferAmount(SafeTransferError):
    """Attached native value does not match the requested pull amount."""

    def __init__(
        self,
        message: str = "attached value does not match amount",
        *,
        expected: Optional[int] = None,
        attached: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="INVALID_NATIVE_TRANSFER_AMOUNT",
            data=_details(data, expected=expected, attached=attached),
        )


class InvalidToken(SafeTransferError):
    """Contract path targeted an address with no executable code."""

    def __init__(
        self,
        message: str = "token address has no code",
        *,
        token: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="INVALID_TOKEN", data=_details(data, token=token))


class TransferFromFailed(SafeTransferError):
    def __init__(
        self,
        message: str = "token transferFrom failed",
        *,
        token: Optional[bytes] = None,
        return_data: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="TRANSFER_FROM_FAILED",
            data=_details(data, token=token, return_data=return_data),
        )


class TransferFailed(SafeTransferError):
    def __init__(
        self,
        message: str = "token transfer failed",
        *,
        token: Optional[bytes] = None,
        return_data: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="TRANSFER_FAILED",
            data=_details(data, token=token, return_data=return_data),
        )


class ETHTransferFailed(SafeTransferError):
    """Native value could not be delivered (recipient rejected it or ran out of gas)."""

    def __init__(
        self,
        message: str = "native transfer failed",
        *,
        to: Optional[bytes] = None,
        amount: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="ETH_TRANSFER_FAILED",
            data=_details(data, to=to, amount=amount),
        )


class ApproveFailed(SafeTransferError):
    def __init__(
        self,
        message: str = "token approve failed",
        *,
        token: Optional[bytes] = None,
        return_data: Optional[bytes] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="APPROVE_FAILED",
            data=_details(data, token=token, return_data=return_data),
        )


class PermitOnNativeToken(SafeTransferError):
    """The native asset has no approval concept; permits against it are rejected."""

    def __init__(
        self,
        message: str = "permit is not supported for the native asset",
        *,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="PERMIT_ON_NATIVE_TOKEN", data=data)


class Revert(Exception):
    """
    Raised by a contract executing on a host to abort its own frame.

    `data` becomes the revert payload of the failed call outcome.
    """

    def __init__(self, reason: str = "revert", data: bytes = b""):
        super().__init__(reason)
        self.reason = reason
        self.data = bytes(data)


# -------- helper utilities ---------------------------------------------------


def error_to_status(err: BaseException) -> Dict[str, Any]:
    """
    Map an exception escaping a unit of work to a receipt-like status.

    Returns:
        {"status": "REVERT" | "ERROR", "error": {...}}
    Taxonomy errors are deterministic aborts ("REVERT"); anything else is a bug.
    """
    if isinstance(err, SafeTransferError):
        return {"status": "REVERT", "error": err.to_dict()}
    return {
        "status": "ERROR",
        "error": {"error": type(err).__name__, "message": str(err)},
    }


__all__ = [
    "SafeTransferError",
    "InvalidNativeTransferAmount",
    "InvalidToken",
    "TransferFromFailed",
    "TransferFailed",
    "ETHTransferFailed",
    "ApproveFailed",
    "PermitOnNativeToken",
    "Revert",
    "error_to_status",
]
