"""
safe_transfer.types.address — account addresses as raw bytes.

Addresses are fixed-width raw `bytes` (20 bytes, the account-ledger
convention the token contracts speak). Hex strings (with or without "0x")
are accepted by `to_address` and normalized to bytes; nothing is padded
implicitly, a wrong width is a caller bug.
"""

from __future__ import annotations

from typing import Final, Union

ADDRESS_LEN: Final[int] = 20
ZERO_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN

AddressLike = Union[bytes, bytearray, memoryview, str]


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_address(value: AddressLike) -> bytes:
    """
    Coerce `value` to a 20-byte address.

    - str: interpreted as hex (with or without '0x').
    - bytes-like: copied to immutable bytes.
    Raises ValueError on malformed hex or a wrong length, TypeError on other types.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        out = bytes(value)
    elif isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ValueError(f"hex address must have even length, got {len(h)}")
        try:
            out = bytes.fromhex(h)
        except ValueError as e:
            raise ValueError(f"invalid hex address: {value!r}") from e
    else:
        raise TypeError(f"cannot convert {type(value).__name__} to address")
    if len(out) != ADDRESS_LEN:
        raise ValueError(f"address must be exactly {ADDRESS_LEN} bytes, got {len(out)}")
    return out


def to_hex(addr: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(addr).hex()


def is_zero(addr: bytes) -> bool:
    return not any(addr)


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "AddressLike",
    "to_address",
    "to_hex",
    "is_zero",
]
