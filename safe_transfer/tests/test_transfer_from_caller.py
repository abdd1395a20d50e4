from __future__ import annotations

import pytest

from safe_transfer import (NATIVE, InvalidNativeTransferAmount, InvalidToken,
                           TransferFromFailed, transfer_from_caller)
from safe_transfer.abi import SEL_TRANSFER_FROM
from safe_transfer.cli.scenario import ALICE, BOB, TOKEN, VAULT
from safe_transfer.host import ScriptedContract, word
from safe_transfer.types import CallOutcome, Token

EOA = bytes.fromhex("e0" * 20)


# ---------------------------------------------------------------- native ----


def test_native_pull_with_exact_value(host):
    host.set_native_balance(ALICE, 10)
    with host.transaction(sender=ALICE, to=VAULT, value=5):
        transfer_from_caller(host, NATIVE, VAULT, 5)
    assert host.calls == []
    assert host.native_balance(VAULT) == 5
    assert host.native_balance(ALICE) == 5


def test_native_pull_with_short_value_aborts(host):
    host.set_native_balance(ALICE, 10)
    with pytest.raises(InvalidNativeTransferAmount) as ei:
        with host.transaction(sender=ALICE, to=VAULT, value=4):
            transfer_from_caller(host, NATIVE, VAULT, 5)
    assert ei.value.data == {"expected": 5, "attached": 4}
    # the attached value went back with the aborted unit of work
    assert host.native_balance(ALICE) == 10
    assert host.native_balance(VAULT) == 0


def test_native_pull_with_excess_value_aborts(host):
    host.set_native_balance(ALICE, 10)
    with pytest.raises(InvalidNativeTransferAmount):
        with host.transaction(sender=ALICE, to=VAULT, value=6):
            transfer_from_caller(host, NATIVE, VAULT, 5)


def test_native_zero_amount_is_noop(host):
    with host.transaction(sender=ALICE, to=VAULT):
        transfer_from_caller(host, NATIVE, VAULT, 0)
    assert host.calls == []


# -------------------------------------------------------------- contract ----


@pytest.mark.parametrize("style", ["standard", "no-return", "returns-false", "approval-race"])
def test_contract_pull_moves_balance_and_spends_allowance(host, deploy_token, tok, style):
    token = deploy_token(style)
    token.mint(host, ALICE, 100)
    token.set_allowance(host, ALICE, VAULT, 80)

    with host.transaction(sender=ALICE, to=VAULT):
        transfer_from_caller(host, tok, BOB, 60)

    assert token.balance(host, ALICE) == 40
    assert token.balance(host, BOB) == 60
    assert token.allowance(host, ALICE, VAULT) == 20
    assert [c.selector for c in host.calls] == [SEL_TRANSFER_FROM]


@pytest.mark.parametrize("style", ["standard", "returns-false"])
def test_contract_pull_without_allowance_fails(host, deploy_token, tok, style):
    token = deploy_token(style)
    token.mint(host, ALICE, 100)

    with pytest.raises(TransferFromFailed):
        with host.transaction(sender=ALICE, to=VAULT):
            transfer_from_caller(host, tok, VAULT, 1)
    assert token.balance(host, ALICE) == 100
    assert token.balance(host, VAULT) == 0


def test_contract_pull_beyond_balance_fails(host, token, tok):
    token.mint(host, ALICE, 3)
    token.set_allowance(host, ALICE, VAULT, 10)
    with pytest.raises(TransferFromFailed):
        with host.transaction(sender=ALICE, to=VAULT):
            transfer_from_caller(host, tok, VAULT, 4)


def test_infinite_allowance_is_not_spent(host, token, tok):
    token.mint(host, ALICE, 10)
    token.set_allowance(host, ALICE, VAULT, 2**256 - 1)
    with host.transaction(sender=ALICE, to=VAULT):
        transfer_from_caller(host, tok, VAULT, 10)
    assert token.allowance(host, ALICE, VAULT) == 2**256 - 1


def test_address_without_code_is_invalid(host):
    with pytest.raises(InvalidToken) as ei:
        with host.transaction(sender=ALICE, to=VAULT):
            transfer_from_caller(host, Token.contract(EOA), VAULT, 1)
    assert ei.value.data == {"token": EOA.hex()}
    assert host.calls == []


def test_zero_amount_never_reaches_the_token(host, deploy_token, tok):
    deploy_token("zero-reverting")
    with host.transaction(sender=ALICE, to=VAULT):
        transfer_from_caller(host, tok, VAULT, 0)
        # zero is checked before code existence too
        transfer_from_caller(host, Token.contract(EOA), VAULT, 0)
    assert host.calls == []


@pytest.mark.parametrize(
    "response, ok",
    [
        (CallOutcome.ok(b""), True),
        (CallOutcome.ok(word(1)), True),
        (CallOutcome.ok(word(1) + word(9)), True),
        (CallOutcome.ok(word(0)), False),
        (CallOutcome.ok(word(2)), False),
        (CallOutcome.ok(b"\x01"), False),
        (CallOutcome.reverted(word(1)), False),
    ],
)
def test_scripted_responses(host, response, ok):
    host.deploy(TOKEN, ScriptedContract({SEL_TRANSFER_FROM: response}))
    with host.frame(VAULT, caller=ALICE):
        if ok:
            transfer_from_caller(host, TOKEN, VAULT, 1)
        else:
            with pytest.raises(TransferFromFailed):
                transfer_from_caller(host, TOKEN, VAULT, 1)
    assert len(host.calls) == 1
