"""
safe_transfer.config — runtime knobs for the transfer layer.

The operations themselves have no configuration surface; these settings cover
the ambient concerns around them:
  • Gas forwarded with native sends (None = forward everything available)
  • Metrics on/off
  • Logging level and format

Environment variables (all optional):
  SAFE_TRANSFER_NATIVE_GAS    -> integer gas allowance for native sends (default: unset)
  SAFE_TRANSFER_METRICS       -> 0/1/true/false (default: 1)
  SAFE_TRANSFER_LOG_LEVEL     -> DEBUG|INFO|WARNING|ERROR (default: WARNING)
  SAFE_TRANSFER_LOG_FORMAT    -> json|text (default: text)

Programmatic usage:
    from safe_transfer.config import get_config
    cfg = get_config()
    if cfg.native_transfer_gas is not None:
        ...
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Dict, Mapping, Optional, Union

# ----------------------------- helpers -------------------------------------

_BOOL_TRUE = {"1", "true", "t", "yes", "y", "on"}
_BOOL_FALSE = {"0", "false", "f", "no", "n", "off"}

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
_LOG_FORMATS = ("json", "text")


def _bool_env(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in _BOOL_TRUE:
        return True
    if v in _BOOL_FALSE:
        return False
    # Be forgiving: non-empty → True, empty → default
    return bool(v) if v != "" else default


def _optional_gas(value: Union[str, int, None]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        s = value.strip().replace("_", "")
        if s == "" or s.lower() in ("none", "all"):
            return None
        try:
            value = int(s, 10)
        except ValueError as e:
            raise ValueError(f"invalid gas amount: {value!r}") from e
    n = int(value)
    if n < 0:
        raise ValueError("native_transfer_gas must be ≥ 0")
    return n


# ------------------------------ dataclass ----------------------------------


@dataclass(frozen=True)
class SafeTransferConfig:
    native_transfer_gas: Optional[int] = None
    metrics_enabled: bool = True
    log_level: str = "WARNING"
    log_format: str = "text"

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _validate(cfg: SafeTransferConfig) -> SafeTransferConfig:
    if cfg.log_level not in _LOG_LEVELS:
        raise ValueError(f"log_level must be one of {_LOG_LEVELS}")
    if cfg.log_format not in _LOG_FORMATS:
        raise ValueError(f"log_format must be one of {_LOG_FORMATS}")
    return cfg


# ------------------------------ loader --------------------------------------


def load_config(
    env: Optional[Mapping[str, str]] = None,
    *,
    overrides: Optional[Mapping[str, Union[str, int, bool, None]]] = None,
) -> SafeTransferConfig:
    """
    Build a SafeTransferConfig from environment and optional overrides.

    Args:
        env: mapping to read variables from (default: os.environ)
        overrides: explicit field overrides; keys: 'native_transfer_gas',
          'metrics_enabled', 'log_level', 'log_format'. Overrides win over env.
    """
    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    if "native_transfer_gas" in overrides:
        gas = _optional_gas(overrides["native_transfer_gas"])  # type: ignore[arg-type]
    else:
        gas = _optional_gas(env.get("SAFE_TRANSFER_NATIVE_GAS"))

    if "metrics_enabled" in overrides:
        metrics_enabled = bool(overrides["metrics_enabled"])
    else:
        metrics_enabled = _bool_env(env.get("SAFE_TRANSFER_METRICS"), True)

    level = str(overrides.get("log_level", env.get("SAFE_TRANSFER_LOG_LEVEL", "WARNING")))
    fmt = str(overrides.get("log_format", env.get("SAFE_TRANSFER_LOG_FORMAT", "text")))

    return _validate(
        SafeTransferConfig(
            native_transfer_gas=gas,
            metrics_enabled=metrics_enabled,
            log_level=level.strip().upper(),
            log_format=fmt.strip().lower(),
        )
    )


@lru_cache(maxsize=1)
def get_config() -> SafeTransferConfig:
    """Process-wide config, read once from the environment."""
    return load_config()


def reset_config_cache() -> None:
    """Forget the cached config (tests, or after changing env vars)."""
    get_config.cache_clear()


__all__ = [
    "SafeTransferConfig",
    "load_config",
    "get_config",
    "reset_config_cache",
]
