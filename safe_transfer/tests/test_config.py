from __future__ import annotations

import pytest

from safe_transfer.config import (SafeTransferConfig, get_config, load_config,
                                  reset_config_cache)


def test_defaults():
    cfg = load_config({})
    assert cfg == SafeTransferConfig()
    assert cfg.to_dict() == {
        "native_transfer_gas": None,
        "metrics_enabled": True,
        "log_level": "WARNING",
        "log_format": "text",
    }


def test_env_parsing():
    cfg = load_config(
        {
            "SAFE_TRANSFER_NATIVE_GAS": "2_300",
            "SAFE_TRANSFER_METRICS": "off",
            "SAFE_TRANSFER_LOG_LEVEL": "debug",
            "SAFE_TRANSFER_LOG_FORMAT": "JSON",
        }
    )
    assert cfg.native_transfer_gas == 2300
    assert cfg.metrics_enabled is False
    assert cfg.log_level == "DEBUG"
    assert cfg.log_format == "json"


@pytest.mark.parametrize("raw", ["", "none", "ALL", "  "])
def test_gas_can_mean_forward_everything(raw):
    assert load_config({"SAFE_TRANSFER_NATIVE_GAS": raw}).native_transfer_gas is None


@pytest.mark.parametrize(
    "env",
    [
        {"SAFE_TRANSFER_NATIVE_GAS": "lots"},
        {"SAFE_TRANSFER_NATIVE_GAS": "-1"},
        {"SAFE_TRANSFER_LOG_LEVEL": "chatty"},
        {"SAFE_TRANSFER_LOG_FORMAT": "xml"},
    ],
)
def test_invalid_values_rejected(env):
    with pytest.raises(ValueError):
        load_config(env)


def test_overrides_win_over_env():
    cfg = load_config(
        {"SAFE_TRANSFER_NATIVE_GAS": "100", "SAFE_TRANSFER_METRICS": "1"},
        overrides={"native_transfer_gas": None, "metrics_enabled": False, "log_level": "info"},
    )
    assert cfg.native_transfer_gas is None
    assert cfg.metrics_enabled is False
    assert cfg.log_level == "INFO"


def test_get_config_is_cached_until_reset(monkeypatch):
    assert get_config().native_transfer_gas is None
    monkeypatch.setenv("SAFE_TRANSFER_NATIVE_GAS", "50")
    assert get_config().native_transfer_gas is None
    reset_config_cache()
    assert get_config().native_transfer_gas == 50
