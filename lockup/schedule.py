"""
Reward accrual rules.

An investment starts earning after ``reward_start_delay``. From then on one
reward month vests every ``reward_interval`` until ``max_months`` have vested.
Each vested month is worth ``reward_percent_per_month`` basis points of the
invested amount. All arithmetic is integer and rounds down.

Nothing here mutates a record: callers quote a claim, then apply it through
the ledger.
"""

from pydantic import BaseModel, ConfigDict

from .errors import AlreadyFinishedError, NothingToClaimError, TooEarlyError
from .models import ClaimQuote, InvestmentRecord, Variant

BASIS_POINT = 10_000
DAY = 24 * 60 * 60
MONTH = 30 * DAY
YEAR = 365 * DAY


class RewardSchedule(BaseModel):
    variant: Variant
    reward_start_delay: int
    reward_interval: int
    max_months: int
    reward_percent_per_month: int
    lock_duration: int
    basis_point: int = BASIS_POINT

    model_config = ConfigDict(frozen=True)

    @property
    def full_schedule(self) -> int:
        return self.reward_start_delay + self.max_months * self.reward_interval


PRIMARY_SCHEDULE = RewardSchedule(
    variant=Variant.PRIMARY,
    reward_start_delay=12 * MONTH,
    reward_interval=MONTH,
    max_months=24,
    reward_percent_per_month=100,
    lock_duration=3 * YEAR,
)

SIMPLIFIED_SCHEDULE = RewardSchedule(
    variant=Variant.SIMPLIFIED,
    reward_start_delay=6 * MONTH,
    reward_interval=MONTH,
    max_months=12,
    reward_percent_per_month=150,
    lock_duration=3 * YEAR,
)


def schedule_for(variant: Variant) -> RewardSchedule:
    if variant == Variant.SIMPLIFIED:
        return SIMPLIFIED_SCHEDULE
    return PRIMARY_SCHEDULE


def compute_vested_months(schedule: RewardSchedule, start_time: int, now: int) -> int:
    elapsed = now - start_time
    if elapsed < schedule.reward_start_delay:
        return 0
    elapsed = min(elapsed, schedule.full_schedule)
    months = (elapsed - schedule.reward_start_delay) // schedule.reward_interval
    return min(months, schedule.max_months)


def reward_for_months(schedule: RewardSchedule, amount: int, months: int) -> int:
    return amount * schedule.reward_percent_per_month * months // schedule.basis_point


def evaluate_claim(schedule: RewardSchedule, record: InvestmentRecord, now: int) -> ClaimQuote:
    """Quote a claim against ``record`` at ``now``.

    Raises:
        AlreadyFinishedError: every month has already been paid out.
        TooEarlyError: the start delay has not elapsed yet.
        NothingToClaimError: no month vested since the last claim.
    """
    if record.reward_finished:
        raise AlreadyFinishedError(f"Investment {record.id} of {record.account} has no reward left")

    if now - record.start_time < schedule.reward_start_delay:
        raise TooEarlyError(
            f"Reward for investment {record.id} starts at {record.start_time + schedule.reward_start_delay}"
        )

    vested = compute_vested_months(schedule, record.start_time, now)
    if vested <= record.claimed_months:
        raise NothingToClaimError(
            f"No new month vested for investment {record.id} (claimed {record.claimed_months})"
        )

    newly_vested = vested - record.claimed_months
    return ClaimQuote(
        vested_months=vested,
        newly_vested_months=newly_vested,
        reward=reward_for_months(schedule, record.amount, newly_vested),
    )


def pending_reward(schedule: RewardSchedule, record: InvestmentRecord, now: int) -> int:
    try:
        return evaluate_claim(schedule, record, now).reward
    except (AlreadyFinishedError, TooEarlyError, NothingToClaimError):
        return 0
