"""
Unit Tests for the Token Ledger and Funding Asset

Tests cover:
1. Amount validation on every balance change
2. Per-account snapshots and restore
"""

import pytest

from lockup.errors import InsufficientBalanceError, InvalidAmountError
from lockup.token import FundingAsset, TokenLedger

ALICE = "0xalice"
BOB = "0xbob"


def make_token() -> TokenLedger:
    token = TokenLedger(name="Lockup Token", symbol="LCK", supply_cap=1000)
    token.mint(ALICE, 500)
    return token


class TestAmountValidation:
    """Tests that no operation accepts a zero or negative amount."""

    def test_negative_transfer(self):
        token = make_token()

        with pytest.raises(InvalidAmountError):
            token.transfer(BOB, ALICE, -500, 0)

        assert token.balance_of(ALICE) == 500
        assert token.balance_of(BOB) == 0

    def test_negative_transfer_skips_guard(self):
        """The guard never sees a negative amount."""
        calls = []
        token = make_token()
        token.transfer_guard = lambda *args: calls.append(args)

        with pytest.raises(InvalidAmountError):
            token.transfer(ALICE, BOB, -1, 0)
        assert calls == []

    def test_zero_and_negative_mint(self):
        token = make_token()

        for amount in (0, -10):
            with pytest.raises(InvalidAmountError):
                token.mint(BOB, amount)
        assert token.total_supply == 500

    def test_negative_burn(self):
        token = make_token()

        with pytest.raises(InvalidAmountError):
            token.burn(ALICE, -100)
        assert token.total_supply == 500

    def test_negative_allowance(self):
        token = make_token()

        with pytest.raises(InvalidAmountError):
            token.approve(ALICE, BOB, -1)
        token.approve(ALICE, BOB, 0)
        assert token.allowance(ALICE, BOB) == 0

    def test_negative_transfer_from(self):
        token = make_token()
        token.approve(BOB, ALICE, 100)

        with pytest.raises(InvalidAmountError):
            token.transfer_from(ALICE, BOB, ALICE, -100, 0)
        assert token.allowance(BOB, ALICE) == 100

    def test_funding_amounts(self):
        funding = FundingAsset("0xusdt", "USDT")
        funding.deposit(ALICE, 100)

        with pytest.raises(InvalidAmountError):
            funding.deposit(ALICE, 0)
        with pytest.raises(InvalidAmountError):
            funding.pull_funds(ALICE, BOB, -100)
        assert funding.balance_of(ALICE) == 100
        assert funding.balance_of(BOB) == 0


class TestSnapshots:
    """Tests for per-account snapshots used to undo failed operations."""

    def test_restore_touched_accounts(self):
        token = make_token()
        state = token.snapshot([ALICE, BOB])

        token.transfer(ALICE, BOB, 200, 0)
        token.approve(ALICE, BOB, 50)
        token.mint(BOB, 10)
        token.restore(state)

        assert token.balance_of(ALICE) == 500
        assert token.balance_of(BOB) == 0
        assert BOB not in token.balances
        assert token.allowance(ALICE, BOB) == 0
        assert token.total_supply == 500

    def test_untouched_accounts_not_copied(self):
        token = make_token()
        token.mint(BOB, 10)

        state = token.snapshot([BOB])

        assert ALICE not in state["balances"]

    def test_funding_restore(self):
        funding = FundingAsset("0xusdt", "USDT")
        funding.deposit(ALICE, 100)
        state = funding.snapshot([ALICE, BOB])

        assert funding.pull_funds(ALICE, BOB, 60)
        funding.restore(state)

        assert funding.balance_of(ALICE) == 100
        assert BOB not in funding.balances

    def test_insufficient_balance_untouched(self):
        token = make_token()

        with pytest.raises(InsufficientBalanceError):
            token.transfer(BOB, ALICE, 1, 0)
        assert token.balance_of(ALICE) == 500
