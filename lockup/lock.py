from .errors import ExceedsUnlockedBalanceError
from .ledger import InvestmentLedger
from .schedule import RewardSchedule


class LockGate:
    """Keeps each investment's full amount out of transferable balance for
    ``lock_duration`` after it was made. Claim state plays no part here."""

    def __init__(self, ledger: InvestmentLedger, schedule: RewardSchedule):
        self.ledger = ledger
        self.schedule = schedule

    def unlock_time(self, start_time: int) -> int:
        return start_time + self.schedule.lock_duration

    def is_locked(self, start_time: int, now: int) -> bool:
        return now < self.unlock_time(start_time)

    def locked_balance(self, account: str, now: int) -> int:
        return sum(
            r.amount for r in self.ledger.list_records(account)
            if self.is_locked(r.start_time, now)
        )

    def available_balance(self, account: str, total_balance: int, now: int) -> int:
        return max(0, total_balance - self.locked_balance(account, now))

    def guard_transfer(self, account: str, amount: int, total_balance: int, now: int) -> None:
        available = self.available_balance(account, total_balance, now)
        if amount > available:
            raise ExceedsUnlockedBalanceError(
                f"Transfer of {amount} from {account} exceeds unlocked balance {available}"
            )
