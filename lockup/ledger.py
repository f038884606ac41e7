from typing import Iterable, Optional

from .errors import IndexOutOfRangeError, InvalidClaimUpdateError
from .models import HistoryAction, HistoryEntry, InvestmentRecord


class InMemoryStorage:
    def __init__(self):
        self.investments: dict[str, list[dict]] = {}
        self.history: dict[str, list[dict]] = {}

    def snapshot(self, accounts: Iterable[str]) -> dict:
        # History entries are never mutated, so a shallow list copy is enough.
        return {
            account: (
                [dict(r) for r in self.investments[account]] if account in self.investments else None,
                list(self.history[account]) if account in self.history else None,
            )
            for account in accounts
        }

    def restore(self, state: dict) -> None:
        for account, (records, history) in state.items():
            for table, rows in ((self.investments, records), (self.history, history)):
                if rows is None:
                    table.pop(account, None)
                else:
                    table[account] = rows


class InvestmentLedger:
    """Per-account append-only investment records.

    Records are addressed by ``(account, index)``; ``index`` equals the
    record id. Only ``update_claim`` may change a stored record, and only
    its claim counters.
    """

    def __init__(self, max_months: int, storage: Optional[InMemoryStorage] = None):
        self.max_months = max_months
        self.storage = storage or InMemoryStorage()

    def record_investment(self, account: str, amount: int, now: int) -> int:
        records = self.storage.investments.setdefault(account, [])
        record_id = len(records)
        records.append({
            "id": record_id,
            "account": account,
            "amount": amount,
            "start_time": now,
            "claimed_months": 0,
            "reward_finished": False,
        })
        return record_id

    def get_record(self, account: str, index: int) -> InvestmentRecord:
        return InvestmentRecord(**self._get_data(account, index))

    def update_claim(self, account: str, index: int, new_claimed_months: int) -> InvestmentRecord:
        data = self._get_data(account, index)
        if new_claimed_months <= data["claimed_months"]:
            raise InvalidClaimUpdateError(
                f"Claimed months must increase (current {data['claimed_months']}, got {new_claimed_months})"
            )
        if new_claimed_months > self.max_months:
            raise InvalidClaimUpdateError(
                f"Claimed months cannot exceed {self.max_months} (got {new_claimed_months})"
            )

        data["claimed_months"] = new_claimed_months
        data["reward_finished"] = new_claimed_months == self.max_months
        return InvestmentRecord(**data)

    def list_records(self, account: str) -> list[InvestmentRecord]:
        return [InvestmentRecord(**data) for data in self.storage.investments.get(account, [])]

    def count(self, account: str) -> int:
        return len(self.storage.investments.get(account, []))

    def append_history(
        self, account: str, action: HistoryAction, amount: int, currency: str, timestamp: int
    ) -> HistoryEntry:
        entry = {"action": action, "amount": amount, "currency": currency, "timestamp": timestamp}
        self.storage.history.setdefault(account, []).append(entry)
        return HistoryEntry(**entry)

    def history(self, account: str) -> list[HistoryEntry]:
        return [HistoryEntry(**e) for e in self.storage.history.get(account, [])]

    def _get_data(self, account: str, index: int) -> dict:
        records = self.storage.investments.get(account, [])
        if index < 0 or index >= len(records):
            raise IndexOutOfRangeError(f"Investment {index} not found for {account}")
        return records[index]
