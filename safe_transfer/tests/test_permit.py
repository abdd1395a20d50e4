from __future__ import annotations

import pytest

from safe_transfer import (NATIVE, ZERO_ADDRESS, ApproveFailed, InvalidToken,
                           PermitOnNativeToken, permit)
from safe_transfer.cli.scenario import ALICE, BOB, TOKEN, VAULT
from safe_transfer.host import permit_digest
from safe_transfer.types import Token

EOA = bytes.fromhex("e0" * 20)
DEADLINE = 5_000
S = b"\x00" * 32


def _sig(value: int, nonce: int = 0, deadline: int = DEADLINE) -> bytes:
    return permit_digest(TOKEN, ALICE, BOB, value, nonce, deadline)


@pytest.mark.parametrize("native", [NATIVE, ZERO_ADDRESS])
def test_native_is_rejected_first(host, native):
    # no frame and no token: the native check comes before anything else
    with pytest.raises(PermitOnNativeToken):
        permit(host, native, ALICE, BOB, 1, DEADLINE, 27, _sig(1), S)
    assert host.calls == []


def test_address_without_code_is_invalid(host):
    with host.frame(VAULT, caller=ALICE):
        with pytest.raises(InvalidToken):
            permit(host, Token.contract(EOA), ALICE, BOB, 1, DEADLINE, 27, _sig(1), S)


def test_valid_permit_sets_allowance(host, token, tok):
    with host.transaction(sender=BOB, to=VAULT):
        permit(host, tok, ALICE, BOB, 50, DEADLINE, 27, _sig(50), S)
    assert token.allowance(host, ALICE, BOB) == 50
    assert token.nonce(host, ALICE) == 1


def test_permit_cannot_be_replayed(host, token, tok):
    with host.transaction(sender=BOB, to=VAULT):
        permit(host, tok, ALICE, BOB, 50, DEADLINE, 27, _sig(50), S)
    with pytest.raises(ApproveFailed):
        with host.transaction(sender=BOB, to=VAULT):
            permit(host, tok, ALICE, BOB, 50, DEADLINE, 27, _sig(50), S)
    assert token.nonce(host, ALICE) == 1


def test_expired_permit_fails(host, token, tok):
    expired = host.block_timestamp - 1
    with pytest.raises(ApproveFailed):
        with host.transaction(sender=BOB, to=VAULT):
            permit(host, tok, ALICE, BOB, 50, expired, 27, _sig(50, deadline=expired), S)
    assert token.allowance(host, ALICE, BOB) == 0


@pytest.mark.parametrize("style", ["standard", "returns-false"])
def test_bad_signature_fails(host, deploy_token, tok, style):
    token = deploy_token(style)
    with pytest.raises(ApproveFailed) as ei:
        with host.transaction(sender=BOB, to=VAULT):
            permit(host, tok, ALICE, BOB, 50, DEADLINE, 27, _sig(49), S)
    assert ei.value.message == "token permit failed"
    assert token.nonce(host, ALICE) == 0
