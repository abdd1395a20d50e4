"""
safe_transfer.types.token — which asset an operation moves.

A token is either the ledger's native asset or an external fungible-token
contract. Callers that integrate by address keep the stable sentinel
convention: the all-zero address always means "native asset" and is never
treated as a contract. Inside the library the distinction is an explicit
variant (`TokenKind`), so the sentinel cannot leak into a contract call.

    >>> resolve_token(ZERO_ADDRESS).is_native
    True
    >>> resolve_token("0x" + "11" * 20).kind
    <TokenKind.CONTRACT: 'contract'>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .address import ZERO_ADDRESS, AddressLike, is_zero, to_address, to_hex


class TokenKind(str, Enum):
    NATIVE = "native"
    CONTRACT = "contract"


@dataclass(frozen=True)
class Token:
    """
    Tagged token identifier.

    Fields
    ------
    kind:     NATIVE or CONTRACT.
    address:  Contract address for CONTRACT tokens; None for NATIVE.
    """

    kind: TokenKind
    address: Optional[bytes] = None

    def __post_init__(self) -> None:
        # plain strings ("native", "contract") are accepted and normalized
        object.__setattr__(self, "kind", TokenKind(self.kind))
        if self.kind is TokenKind.NATIVE:
            if self.address is not None:
                raise ValueError("native token carries no address")
            return
        if self.address is None:
            raise ValueError("contract token requires an address")
        addr = to_address(self.address)
        if is_zero(addr):
            raise ValueError("zero address is reserved for the native asset")
        object.__setattr__(self, "address", addr)

    # ---- constructors ---- #

    @classmethod
    def native(cls) -> "Token":
        return cls(TokenKind.NATIVE)

    @classmethod
    def contract(cls, address: AddressLike) -> "Token":
        return cls(TokenKind.CONTRACT, to_address(address))

    @classmethod
    def from_address(cls, address: AddressLike) -> "Token":
        """Apply the sentinel convention: zero address → native, else contract."""
        addr = to_address(address)
        if is_zero(addr):
            return cls.native()
        return cls(TokenKind.CONTRACT, addr)

    # ---- views ---- #

    @property
    def is_native(self) -> bool:
        return self.kind is TokenKind.NATIVE

    def to_address(self) -> bytes:
        """The on-ledger identifier (zero address for native)."""
        return ZERO_ADDRESS if self.address is None else self.address

    def __str__(self) -> str:
        if self.is_native:
            return "native"
        return to_hex(self.to_address())


NATIVE = Token.native()

TokenLike = Union[Token, bytes, bytearray, memoryview, str]


def resolve_token(token: TokenLike) -> Token:
    """
    Route a token identifier to the native or contract path.

    Pure: no I/O. Raw addresses follow the sentinel convention.
    """
    if isinstance(token, Token):
        return token
    return Token.from_address(token)


__all__ = ["TokenKind", "Token", "NATIVE", "TokenLike", "resolve_token"]
