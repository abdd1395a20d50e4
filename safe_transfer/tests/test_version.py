from __future__ import annotations

from importlib.metadata import version as dist_version

import safe_transfer
from safe_transfer.config import reset_config_cache
from safe_transfer.version import DIST_NAME, __version__, version_metadata


def test_version_matches_installed_distribution():
    assert __version__ == dist_version(DIST_NAME)
    assert safe_transfer.__version__ == __version__


def test_metadata_reports_effective_config(monkeypatch):
    monkeypatch.setenv("SAFE_TRANSFER_NATIVE_GAS", "2300")
    reset_config_cache()
    meta = version_metadata()
    assert meta["name"] == "safe-transfer"
    assert meta["version"] == __version__
    assert meta["python"]
    assert meta["config"]["native_transfer_gas"] == 2300
    assert meta["config"]["metrics_enabled"] is True
