"""
safe_transfer.metrics — Prometheus counters for the transfer layer.

Exposed metrics (names are prefixed with `safe_transfer_`):
  - ops_total{op,token,result}   : Counter — operations by outcome
  - approve_retries_total        : Counter — reset-then-retry sequences started

Labels:
  - op     ∈ {transfer_from_caller, transfer_from_self, transfer_all, approve,
              approve_with_retry, balance_of, permit}
  - token  ∈ {native, contract}
  - result ∈ {success, <error code lowercased>}

Metrics live in a module-level registry (not the global default one) so that
embedding applications decide whether and where to expose them. Recording is
skipped when `SafeTransferConfig.metrics_enabled` is false.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest

from .config import get_config

_PREFIX = "safe_transfer_"

_registry: Optional[CollectorRegistry] = None
OPS_TOTAL: Counter
APPROVE_RETRIES_TOTAL: Counter


def get_registry() -> CollectorRegistry:
    """Return the metrics registry, creating one on first use."""
    global _registry
    if _registry is None:
        _registry = CollectorRegistry()
        _build_metrics(_registry)
    return _registry


def _build_metrics(reg: CollectorRegistry) -> None:
    global OPS_TOTAL, APPROVE_RETRIES_TOTAL
    OPS_TOTAL = Counter(
        _PREFIX + "ops_total",
        "Transfer-layer operations (by op, token kind and result).",
        labelnames=("op", "token", "result"),
        registry=reg,
    )
    APPROVE_RETRIES_TOTAL = Counter(
        _PREFIX + "approve_retries_total",
        "approve_with_retry reset-then-retry sequences started.",
        registry=reg,
    )


def observe_op(*, op: str, token: str, result: str) -> None:
    if not get_config().metrics_enabled:
        return
    get_registry()
    OPS_TOTAL.labels(op=op, token=token, result=result.lower()).inc()


def observe_retry() -> None:
    if not get_config().metrics_enabled:
        return
    get_registry()
    APPROVE_RETRIES_TOTAL.inc()


def generate_latest_text() -> bytes:
    """Prometheus exposition text for the module registry."""
    return generate_latest(get_registry())


__all__ = [
    "get_registry",
    "observe_op",
    "observe_retry",
    "generate_latest_text",
]
