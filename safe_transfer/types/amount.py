"""
safe_transfer.types.amount — u256 amount bounds.
"""

from __future__ import annotations

from typing import Final

U256_MAX: Final[int] = (1 << 256) - 1


def is_u256(n: int) -> bool:
    return isinstance(n, int) and not isinstance(n, bool) and 0 <= n <= U256_MAX


def require_amount(n: int, *, name: str = "amount") -> int:
    """Ensure `n` is an integer in [0, 2**256-1]; return it unchanged."""
    if not isinstance(n, int) or isinstance(n, bool):
        raise ValueError(f"{name} must be int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"{name} must be non-negative, got {n}")
    if n > U256_MAX:
        raise ValueError(f"{name} exceeds u256")
    return n


__all__ = ["U256_MAX", "is_u256", "require_amount"]
