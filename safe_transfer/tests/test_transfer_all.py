from __future__ import annotations

import pytest

from safe_transfer import (NATIVE, ETHTransferFailed, InvalidToken, TransferFailed,
                           balance_of, transfer_all)
from safe_transfer.abi import SEL_BALANCE_OF, SEL_TRANSFER
from safe_transfer.cli.scenario import ALICE, BOB, TOKEN, VAULT
from safe_transfer.host import RejectingReceiver, ScriptedContract, word
from safe_transfer.types import CallOutcome, Token

EOA = bytes.fromhex("e0" * 20)


def test_native_sweeps_entire_balance(host):
    host.set_native_balance(VAULT, 70)
    with host.transaction(sender=ALICE, to=VAULT):
        moved = transfer_all(host, NATIVE, BOB)
    assert moved == 70
    assert host.native_balance(VAULT) == 0
    assert host.native_balance(BOB) == 70


def test_native_sweep_includes_attached_value(host):
    host.set_native_balance(ALICE, 5)
    host.set_native_balance(VAULT, 10)
    with host.transaction(sender=ALICE, to=VAULT, value=5):
        assert transfer_all(host, NATIVE, BOB) == 15


def test_native_sweep_of_empty_balance_still_sends(host):
    with host.transaction(sender=ALICE, to=VAULT):
        assert transfer_all(host, NATIVE, BOB) == 0
    assert [(c.kind, c.value) for c in host.calls] == [("send", 0)]


def test_native_sweep_to_rejecting_recipient(host):
    host.set_native_balance(VAULT, 3)
    host.deploy(BOB, RejectingReceiver())
    with pytest.raises(ETHTransferFailed):
        with host.transaction(sender=ALICE, to=VAULT):
            transfer_all(host, NATIVE, BOB)
    assert host.native_balance(VAULT) == 3


@pytest.mark.parametrize("style", ["standard", "no-return", "returns-false"])
def test_contract_sweep(host, deploy_token, tok, style):
    token = deploy_token(style)
    token.mint(host, VAULT, 55)
    with host.transaction(sender=ALICE, to=VAULT):
        assert transfer_all(host, tok, BOB) == 55
    assert token.balance(host, VAULT) == 0
    assert token.balance(host, BOB) == 55
    assert [(c.kind, c.selector) for c in host.calls] == [
        ("static", SEL_BALANCE_OF),
        ("call", SEL_TRANSFER),
    ]


def test_contract_sweep_of_empty_balance_makes_no_transfer(host, deploy_token, tok):
    deploy_token("zero-reverting")
    with host.transaction(sender=ALICE, to=VAULT):
        assert transfer_all(host, tok, BOB) == 0
    assert [c.selector for c in host.calls] == [SEL_BALANCE_OF]


def test_balance_is_read_at_transfer_time(host, token, tok):
    token.mint(host, VAULT, 10)
    with host.transaction(sender=ALICE, to=VAULT):
        assert balance_of(host, tok, VAULT) == 10
        token.mint(host, VAULT, 5)  # e.g. a rebase or an airdrop
        assert transfer_all(host, tok, BOB) == 15
    assert token.balance(host, BOB) == 15


def test_unreadable_balance_fails(host, deploy_token, tok):
    deploy_token("broken-balance")
    with pytest.raises(TransferFailed) as ei:
        with host.transaction(sender=ALICE, to=VAULT):
            transfer_all(host, tok, BOB)
    assert ei.value.message == "balance read failed"
    assert [c.selector for c in host.calls] == [SEL_BALANCE_OF]


def test_short_balance_answer_fails(host):
    host.deploy(TOKEN, ScriptedContract({SEL_BALANCE_OF: CallOutcome.ok(b"\x05")}))
    with host.frame(VAULT, caller=ALICE):
        with pytest.raises(TransferFailed):
            transfer_all(host, TOKEN, BOB)


def test_failed_push_after_read(host):
    host.deploy(
        TOKEN,
        ScriptedContract({
            SEL_BALANCE_OF: CallOutcome.ok(word(9)),
            SEL_TRANSFER: CallOutcome.ok(word(0)),
        }),
    )
    with host.frame(VAULT, caller=ALICE):
        with pytest.raises(TransferFailed) as ei:
            transfer_all(host, TOKEN, BOB)
    assert ei.value.message == "token transfer failed"


def test_address_without_code_is_invalid(host):
    with host.frame(VAULT, caller=ALICE):
        with pytest.raises(InvalidToken):
            transfer_all(host, Token.contract(EOA), BOB)
    assert host.calls == []
