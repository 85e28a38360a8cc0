"""
Unit tests for the TokenAccount credited by the vesting ledger.
"""

import pytest

from vestledger.contracts.token_account import ZERO_ADDRESS, TokenAccount
from vestledger.core.config_manager import TokenConfig
from vestledger.core.manager_interfaces import CreditTarget
from vestledger.core.vesting_exceptions import TokenAccountError

OWNER = "0x" + "a1" * 20
VESTING = "0x" + "ee" * 20
HOLDER = "0x" + "b1" * 20
OTHER = "0x" + "c1" * 20


@pytest.fixture
def bound_token():
    token = TokenAccount(name="LifeCoin", symbol="LIFC", owner=OWNER)
    token.set_vesting_address(OWNER, VESTING)
    return token


def test_token_satisfies_credit_protocol(bound_token):
    assert isinstance(bound_token, CreditTarget)


def test_address_is_generated():
    token = TokenAccount(name="LifeCoin", symbol="LIFC", owner=OWNER)
    assert token.address.startswith("0x")
    assert len(token.address) == 42


def test_only_owner_sets_vesting_address():
    token = TokenAccount(name="LifeCoin", symbol="LIFC", owner=OWNER)
    with pytest.raises(TokenAccountError):
        token.set_vesting_address(OTHER, VESTING)
    with pytest.raises(TokenAccountError):
        token.set_vesting_address(OWNER, ZERO_ADDRESS)
    assert token.vesting_address == ""


def test_credit_requires_vesting_address():
    token = TokenAccount(name="LifeCoin", symbol="LIFC", owner=OWNER)
    with pytest.raises(TokenAccountError):
        token.credit(HOLDER, 10, minter=VESTING)


def test_credit_by_wrong_minter_is_refused(bound_token):
    with pytest.raises(TokenAccountError):
        bound_token.credit(HOLDER, 10, minter=OTHER)
    with pytest.raises(TokenAccountError):
        bound_token.credit(HOLDER, 10)
    assert bound_token.total_supply == 0


def test_credit_mints_and_emits_transfer(bound_token):
    assert bound_token.credit(HOLDER.upper().replace("0X", "0x"), 250, minter=VESTING.upper().replace("0X", "0x"))

    assert bound_token.balance_of(HOLDER) == 250
    assert bound_token.total_supply == 250
    event = bound_token.events[-1]
    assert event.event_type == "Transfer"
    assert event.from_address == ZERO_ADDRESS
    assert event.to_address == HOLDER
    assert event.value == 250


def test_credit_zero_is_accepted(bound_token):
    assert bound_token.credit(HOLDER, 0, minter=VESTING)
    assert bound_token.balance_of(HOLDER) == 0


@pytest.mark.parametrize("amount", [-1, 2**256, 1.5, True])
def test_credit_rejects_invalid_amounts(bound_token, amount):
    with pytest.raises(TokenAccountError):
        bound_token.credit(HOLDER, amount, minter=VESTING)


def test_credit_rejects_zero_address(bound_token):
    with pytest.raises(TokenAccountError):
        bound_token.credit(ZERO_ADDRESS, 1, minter=VESTING)


def test_credit_respects_max_supply():
    token = TokenAccount(name="LifeCoin", symbol="LIFC", owner=OWNER, max_supply=100)
    token.set_vesting_address(OWNER, VESTING)
    token.credit(HOLDER, 100, minter=VESTING)
    with pytest.raises(TokenAccountError):
        token.credit(HOLDER, 1, minter=VESTING)
    assert token.total_supply == 100


def test_transfer(bound_token):
    bound_token.credit(HOLDER, 900, minter=VESTING)
    bound_token.transfer(HOLDER, OTHER, 200)
    assert bound_token.balance_of(HOLDER) == 700
    assert bound_token.balance_of(OTHER) == 200
    assert bound_token.total_supply == 900


def test_transfer_exceeding_balance(bound_token):
    bound_token.credit(HOLDER, 10, minter=VESTING)
    with pytest.raises(TokenAccountError):
        bound_token.transfer(HOLDER, OTHER, 11)
    assert bound_token.balance_of(HOLDER) == 10


def test_from_config():
    token = TokenAccount.from_config(TokenConfig(name="Vest", symbol="VST", max_supply=5), owner=OWNER)
    assert (token.name, token.symbol, token.max_supply, token.owner) == ("Vest", "VST", 5, OWNER)


def test_to_dict(bound_token):
    bound_token.credit(HOLDER, 5, minter=VESTING)
    data = bound_token.to_dict()
    assert data["vesting_address"] == VESTING
    assert data["balances"] == {HOLDER: 5}
