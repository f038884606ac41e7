"""
In-memory token balances.

TokenLedger holds the reward-bearing token (supply, balances, allowances).
Every user-initiated move out of an account goes through ``transfer_guard``,
which the service wires to the lock gate. FundingAsset is the stable asset
buyers pay with.

Both keep per-account snapshots so a failed operation can put back exactly
the accounts it touched.
"""

from typing import Callable, Iterable, Optional

from .errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAmountError,
    SupplyCapExceededError,
)

TransferGuard = Callable[[str, int, int, int], None]


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")


class TokenLedger:
    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = 18,
        supply_cap: Optional[int] = None,
        transfer_guard: Optional[TransferGuard] = None,
    ):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.supply_cap = supply_cap
        self.transfer_guard = transfer_guard
        self.balances: dict[str, int] = {}
        self.allowances: dict[str, dict[str, int]] = {}
        self.total_supply = 0

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(owner, {}).get(spender, 0)

    def mint(self, to: str, amount: int) -> None:
        _require_positive(amount)
        if self.supply_cap is not None and self.total_supply + amount > self.supply_cap:
            raise SupplyCapExceededError(
                f"Minting {amount} would exceed supply cap {self.supply_cap} (supply {self.total_supply})"
            )
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def burn(self, account: str, amount: int) -> None:
        self._debit(account, amount)
        self.total_supply -= amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(f"Allowance cannot be negative, got {amount}")
        self.allowances.setdefault(owner, {})[spender] = amount

    def transfer(self, sender: str, recipient: str, amount: int, now: int) -> None:
        _require_positive(amount)
        self._check_guard(sender, amount, now)
        self._move(sender, recipient, amount)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int, now: int) -> None:
        _require_positive(amount)
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise InsufficientAllowanceError(
                f"{spender} may move {allowed} from {owner}, requested {amount}"
            )
        self._check_guard(owner, amount, now)
        self._move(owner, recipient, amount)
        self.allowances[owner][spender] = allowed - amount

    def credit_reward(self, pool: str, to: str, amount: int) -> None:
        self._move(pool, to, amount)

    def snapshot(self, accounts: Iterable[str]) -> dict:
        return {
            "balances": {a: self.balances.get(a) for a in accounts},
            "allowances": {a: dict(self.allowances[a]) if a in self.allowances else None for a in accounts},
            "total_supply": self.total_supply,
        }

    def restore(self, state: dict) -> None:
        for account, balance in state["balances"].items():
            if balance is None:
                self.balances.pop(account, None)
            else:
                self.balances[account] = balance
        for account, allowed in state["allowances"].items():
            if allowed is None:
                self.allowances.pop(account, None)
            else:
                self.allowances[account] = allowed
        self.total_supply = state["total_supply"]

    def _check_guard(self, account: str, amount: int, now: int) -> None:
        if self.transfer_guard:
            self.transfer_guard(account, amount, self.balance_of(account), now)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        self._debit(sender, amount)
        self.balances[recipient] = self.balance_of(recipient) + amount

    def _debit(self, account: str, amount: int) -> None:
        _require_positive(amount)
        balance = self.balance_of(account)
        if amount > balance:
            raise InsufficientBalanceError(f"{account} holds {balance} {self.symbol}, needs {amount}")
        self.balances[account] = balance - amount


class FundingAsset:
    def __init__(self, address: str, symbol: str):
        self.address = address
        self.symbol = symbol
        self.balances: dict[str, int] = {}

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def deposit(self, account: str, amount: int) -> None:
        _require_positive(amount)
        self.balances[account] = self.balance_of(account) + amount

    def pull_funds(self, buyer: str, treasury: str, amount: int) -> bool:
        _require_positive(amount)
        if amount > self.balance_of(buyer):
            return False
        self.balances[buyer] -= amount
        self.balances[treasury] = self.balance_of(treasury) + amount
        return True

    def snapshot(self, accounts: Iterable[str]) -> dict:
        return {a: self.balances.get(a) for a in accounts}

    def restore(self, state: dict) -> None:
        for account, balance in state.items():
            if balance is None:
                self.balances.pop(account, None)
            else:
                self.balances[account] = balance
