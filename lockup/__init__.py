"""
Time-locked token investments with monthly vesting rewards.

This package provides:
- An append-only investment ledger per account
- Reward accrual on a fixed monthly schedule after a start delay
- A lock gate that keeps recent investments out of transferable balance
- Per-investment and per-account views of claimed and pending rewards
"""

from .models import (
    Variant,
    HistoryAction,
    InvestmentRecord,
    HistoryEntry,
    InvestmentView,
)
from .schedule import RewardSchedule, PRIMARY_SCHEDULE, SIMPLIFIED_SCHEDULE
from .service import LockupService

__all__ = [
    "Variant",
    "HistoryAction",
    "InvestmentRecord",
    "HistoryEntry",
    "InvestmentView",
    "RewardSchedule",
    "PRIMARY_SCHEDULE",
    "SIMPLIFIED_SCHEDULE",
    "LockupService",
]
