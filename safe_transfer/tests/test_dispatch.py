from __future__ import annotations

import pytest

from safe_transfer import (NATIVE, ZERO_ADDRESS, Token, TokenKind, approve,
                           approve_with_retry, resolve_token, transfer_from_self)
from safe_transfer.cli.scenario import BOB, TOKEN, VAULT
from safe_transfer.types import U256_MAX, is_u256, require_amount, to_address, to_hex


def test_zero_address_resolves_to_native():
    assert resolve_token(ZERO_ADDRESS).is_native
    assert resolve_token("0x" + "00" * 20) == NATIVE
    assert resolve_token(bytearray(20)).kind is TokenKind.NATIVE


def test_nonzero_address_resolves_to_contract():
    t = resolve_token("0x" + "70" * 20)
    assert t.kind is TokenKind.CONTRACT
    assert t.address == TOKEN
    assert t.to_address() == TOKEN
    assert str(t) == to_hex(TOKEN)


def test_token_instances_pass_through():
    t = Token.contract(TOKEN)
    assert resolve_token(t) is t
    assert resolve_token(NATIVE) is NATIVE


def test_contract_variant_cannot_hold_the_sentinel():
    with pytest.raises(ValueError):
        Token.contract(ZERO_ADDRESS)
    with pytest.raises(ValueError):
        Token(TokenKind.CONTRACT)
    with pytest.raises(ValueError):
        Token(TokenKind.NATIVE, TOKEN)


def test_native_identifier_is_the_zero_address():
    assert NATIVE.to_address() == ZERO_ADDRESS
    assert str(NATIVE) == "native"


@pytest.mark.parametrize("bad", ["0x1234", "0x" + "zz" * 20, b"\x01" * 19, b"\x01" * 32])
def test_malformed_addresses_are_rejected(bad):
    with pytest.raises(ValueError):
        to_address(bad)


def test_non_address_types_are_rejected():
    with pytest.raises(TypeError):
        to_address(12345)  # type: ignore[arg-type]


def test_amount_bounds():
    assert require_amount(0) == 0
    assert require_amount(U256_MAX) == U256_MAX
    assert is_u256(5) and not is_u256(-1) and not is_u256(True)
    for bad in (-1, U256_MAX + 1, True, 1.0):
        with pytest.raises(ValueError):
            require_amount(bad)  # type: ignore[arg-type]


def test_native_approvals_never_touch_the_host(host):
    # no frame is active: a native approval must not even ask for the context
    approve(host, ZERO_ADDRESS, BOB, 123)
    approve_with_retry(host, NATIVE, BOB, U256_MAX)
    assert host.calls == []


def test_invalid_amount_fails_before_any_call(host, token, tok):
    with host.frame(VAULT, caller=VAULT):
        with pytest.raises(ValueError):
            transfer_from_self(host, tok, BOB, -5)
    assert host.calls == []


def test_string_kinds_are_normalized():
    assert Token("native") == NATIVE
    assert Token("native").is_native
    t = Token("contract", TOKEN)
    assert t.kind is TokenKind.CONTRACT
    assert t == Token.contract(TOKEN)
    with pytest.raises(ValueError):
        Token("erc20", TOKEN)  # type: ignore[arg-type]


def test_string_kind_token_moves_and_is_counted(host, token):
    token.mint(host, VAULT, 5)
    with host.frame(VAULT, caller=VAULT):
        transfer_from_self(host, Token("contract", TOKEN), BOB, 1)
    assert token.balance(host, BOB) == 1
    assert token.balance(host, VAULT) == 4
