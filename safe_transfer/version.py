"""
safe_transfer.version — the installed distribution's version and a
diagnostics snapshot for the CLI.

The version comes from the package metadata written at install time, so it
always matches `pyproject.toml`.
"""

from __future__ import annotations

import platform
from importlib.metadata import PackageNotFoundError, version as _dist_version
from typing import Any, Dict

from .config import get_config

DIST_NAME = "safe-transfer"

try:
    __version__ = _dist_version(DIST_NAME)
except PackageNotFoundError:
    # imported from a source tree that was never installed
    __version__ = "0.0.0+unknown"


def version_metadata() -> Dict[str, Any]:
    """Version, interpreter and the effective package config."""
    return {
        "name": DIST_NAME,
        "version": __version__,
        "python": platform.python_version(),
        "config": get_config().to_dict(),
    }


__all__ = ["DIST_NAME", "__version__", "version_metadata"]
