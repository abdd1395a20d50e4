"""
safe_transfer.types — value descriptors shared by every operation.

Nothing here holds state: addresses, amounts, token identifiers and call
outcomes are produced and consumed within a single operation.
"""

from .address import (ADDRESS_LEN, ZERO_ADDRESS, AddressLike, is_zero,
                      to_address, to_hex)
from .amount import U256_MAX, is_u256, require_amount
from .outcome import WORD_SIZE, CallOutcome
from .token import NATIVE, Token, TokenKind, TokenLike, resolve_token

__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "AddressLike",
    "is_zero",
    "to_address",
    "to_hex",
    "U256_MAX",
    "is_u256",
    "require_amount",
    "WORD_SIZE",
    "CallOutcome",
    "NATIVE",
    "Token",
    "TokenKind",
    "TokenLike",
    "resolve_token",
]
