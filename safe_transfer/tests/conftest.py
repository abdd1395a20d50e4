from __future__ import annotations

import logging
from typing import Callable, Iterator, Union

import pytest

from safe_transfer.cli.scenario import TOKEN
from safe_transfer.config import reset_config_cache
from safe_transfer.host import PRESETS, FungibleToken, InMemoryHost, TokenQuirks
from safe_transfer.types import Token


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in (
        "SAFE_TRANSFER_NATIVE_GAS",
        "SAFE_TRANSFER_METRICS",
        "SAFE_TRANSFER_LOG_LEVEL",
        "SAFE_TRANSFER_LOG_FORMAT",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    # CLI runs attach a handler to a stream that is gone after the run
    logger = logging.getLogger("safe_transfer")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def host() -> InMemoryHost:
    return InMemoryHost(block_timestamp=1_000)


@pytest.fixture
def deploy_token(host: InMemoryHost) -> Callable[..., FungibleToken]:
    """Deploy a FungibleToken with the given preset name or quirks (default address: TOKEN)."""

    def _deploy(quirks: Union[str, TokenQuirks] = "standard", *, at: bytes = TOKEN) -> FungibleToken:
        q = PRESETS[quirks] if isinstance(quirks, str) else quirks
        tok = FungibleToken(q)
        host.deploy(at, tok)
        return tok

    return _deploy


@pytest.fixture
def token(deploy_token: Callable[..., FungibleToken]) -> FungibleToken:
    return deploy_token("standard")


@pytest.fixture
def tok() -> Token:
    """Contract token identifier for TOKEN."""
    return Token.contract(TOKEN)
