"""
safe_transfer.abi — call data for the four conventional token methods.

Token contracts speak the 32-byte word ABI: a call is a 4-byte selector
(first bytes of Keccak-256 over the canonical signature) followed by one
big-endian word per static argument. Only the static types the token methods
use are supported here: address, uint256, uint8 and bytes32.

Keccak-256 comes from pycryptodome (`Crypto.Hash.keccak`); Python's
`hashlib.sha3_256` is the NIST variant and yields different selectors.

    >>> function_selector("transfer(address,uint256)").hex()
    'a9059cbb'
"""

from __future__ import annotations

from typing import Final, List, Tuple

from Crypto.Hash import keccak

from .types.address import ADDRESS_LEN, AddressLike, to_address
from .types.amount import U256_MAX
from .types.outcome import WORD_SIZE

__all__ = [
    "keccak256",
    "function_selector",
    "SIG_TRANSFER",
    "SIG_TRANSFER_FROM",
    "SIG_APPROVE",
    "SIG_BALANCE_OF",
    "SIG_PERMIT",
    "SEL_TRANSFER",
    "SEL_TRANSFER_FROM",
    "SEL_APPROVE",
    "SEL_BALANCE_OF",
    "SEL_PERMIT",
    "encode_uint256",
    "encode_address",
    "encode_bytes32",
    "encode_call",
    "decode_word",
    "decode_address",
    "split_call",
    "transfer_calldata",
    "transfer_from_calldata",
    "approve_calldata",
    "balance_of_calldata",
    "permit_calldata",
]


def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def function_selector(signature: str) -> bytes:
    """First 4 bytes of keccak256(signature). `signature` must be canonical (no spaces)."""
    if not isinstance(signature, str) or "(" not in signature or " " in signature:
        raise ValueError(f"not a canonical signature: {signature!r}")
    return keccak256(signature.encode("ascii"))[:4]


# ──────────────────────────────────────────────────────────────────────────────
# Token method selectors
# ──────────────────────────────────────────────────────────────────────────────

SIG_TRANSFER: Final[str] = "transfer(address,uint256)"
SIG_TRANSFER_FROM: Final[str] = "transferFrom(address,address,uint256)"
SIG_APPROVE: Final[str] = "approve(address,uint256)"
SIG_BALANCE_OF: Final[str] = "balanceOf(address)"
SIG_PERMIT: Final[str] = (
    "permit(address,address,uint256,uint256,uint8,bytes32,bytes32)"
)

SEL_TRANSFER: Final[bytes] = function_selector(SIG_TRANSFER)
SEL_TRANSFER_FROM: Final[bytes] = function_selector(SIG_TRANSFER_FROM)
SEL_APPROVE: Final[bytes] = function_selector(SIG_APPROVE)
SEL_BALANCE_OF: Final[bytes] = function_selector(SIG_BALANCE_OF)
SEL_PERMIT: Final[bytes] = function_selector(SIG_PERMIT)


# ──────────────────────────────────────────────────────────────────────────────
# Word codec
# ──────────────────────────────────────────────────────────────────────────────

def encode_uint256(n: int) -> bytes:
    if not isinstance(n, int) or isinstance(n, bool) or n < 0 or n > U256_MAX:
        raise ValueError(f"uint256 out of range: {n!r}")
    return n.to_bytes(WORD_SIZE, "big")


def encode_address(addr: AddressLike) -> bytes:
    return to_address(addr).rjust(WORD_SIZE, b"\x00")


def encode_bytes32(b: bytes) -> bytes:
    if not isinstance(b, (bytes, bytearray)) or len(b) != WORD_SIZE:
        raise ValueError("bytes32 value must be exactly 32 bytes")
    return bytes(b)


def encode_call(selector: bytes, *words: bytes) -> bytes:
    if len(selector) != 4:
        raise ValueError("selector must be 4 bytes")
    for w in words:
        if len(w) != WORD_SIZE:
            raise ValueError("arguments must be pre-encoded 32-byte words")
    return bytes(selector) + b"".join(words)


def decode_word(data: bytes, index: int = 0) -> int:
    """Read the `index`-th 32-byte word of `data` as an unsigned int."""
    start = index * WORD_SIZE
    chunk = data[start:start + WORD_SIZE]
    if len(chunk) != WORD_SIZE:
        raise ValueError(f"data too short for word {index}")
    return int.from_bytes(chunk, "big")


def decode_address(word: int) -> bytes:
    """Interpret a word as an address; upper bytes must be clean."""
    if word >> (8 * ADDRESS_LEN):
        raise ValueError("dirty upper bytes in address word")
    return word.to_bytes(ADDRESS_LEN, "big")


def split_call(data: bytes) -> Tuple[bytes, List[int]]:
    """Split call data into (selector, argument words). Trailing partial words are rejected."""
    if len(data) < 4:
        raise ValueError("call data shorter than a selector")
    body = data[4:]
    if len(body) % WORD_SIZE:
        raise ValueError("call data is not word-aligned")
    words = [decode_word(body, i) for i in range(len(body) // WORD_SIZE)]
    return bytes(data[:4]), words


# ──────────────────────────────────────────────────────────────────────────────
# Call builders
# ──────────────────────────────────────────────────────────────────────────────

def transfer_calldata(to: AddressLike, amount: int) -> bytes:
    return encode_call(SEL_TRANSFER, encode_address(to), encode_uint256(amount))


def transfer_from_calldata(frm: AddressLike, to: AddressLike, amount: int) -> bytes:
    return encode_call(
        SEL_TRANSFER_FROM,
        encode_address(frm),
        encode_address(to),
        encode_uint256(amount),
    )


def approve_calldata(spender: AddressLike, amount: int) -> bytes:
    return encode_call(SEL_APPROVE, encode_address(spender), encode_uint256(amount))


def balance_of_calldata(account: AddressLike) -> bytes:
    return encode_call(SEL_BALANCE_OF, encode_address(account))


def permit_calldata(
    owner: AddressLike,
    spender: AddressLike,
    value: int,
    deadline: int,
    v: int,
    r: bytes,
    s: bytes,
) -> bytes:
    if not isinstance(v, int) or not 0 <= v <= 0xFF:
        raise ValueError("v must be a uint8")
    return encode_call(
        SEL_PERMIT,
        encode_address(owner),
        encode_address(spender),
        encode_uint256(value),
        encode_uint256(deadline),
        encode_uint256(v),
        encode_bytes32(r),
        encode_bytes32(s),
    )
