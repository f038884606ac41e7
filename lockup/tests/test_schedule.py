"""
Unit Tests for reward accrual

Tests cover:
1. Vested month computation and clamping
2. Claim quotes and their failure modes
3. Pending reward as a non-failing view
4. Variant presets
"""

import pytest
from pydantic import ValidationError

from lockup.errors import AlreadyFinishedError, NothingToClaimError, TooEarlyError
from lockup.models import InvestmentRecord, Variant
from lockup.schedule import (
    PRIMARY_SCHEDULE,
    SIMPLIFIED_SCHEDULE,
    MONTH,
    YEAR,
    compute_vested_months,
    evaluate_claim,
    pending_reward,
    reward_for_months,
    schedule_for,
)

from .conftest import SCENARIO_SCHEDULE, T


def make_record(claimed_months: int = 0, amount: int = 1000) -> InvestmentRecord:
    return InvestmentRecord(
        id=0,
        account="0xalice",
        amount=amount,
        start_time=T,
        claimed_months=claimed_months,
        reward_finished=claimed_months == SCENARIO_SCHEDULE.max_months,
    )


class TestVestedMonths:
    """Tests for compute_vested_months."""

    def test_zero_before_start_delay(self):
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T) == 0
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 11) == 0

    def test_zero_exactly_at_start_delay(self):
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 12) == 0

    def test_one_month_per_interval(self):
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 13) == 1
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 20) == 8

    def test_clamped_to_max_months(self):
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 36) == 24
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T + 10_000) == 24

    def test_now_before_start_time(self):
        assert compute_vested_months(SCENARIO_SCHEDULE, T, T - 100) == 0

    def test_monotonic_and_bounded(self):
        """Vested months never decrease with time and stay in [0, max_months]."""
        previous = 0
        for now in range(T - 5, T + 60):
            vested = compute_vested_months(SCENARIO_SCHEDULE, T, now)
            assert 0 <= vested <= SCENARIO_SCHEDULE.max_months
            assert vested >= previous
            previous = vested

    def test_partial_interval_rounds_down(self):
        vested = compute_vested_months(PRIMARY_SCHEDULE, T, T + 12 * MONTH + 2 * MONTH - 1)
        assert vested == 1


class TestEvaluateClaim:
    """Tests for claim quotes."""

    def test_too_early(self):
        with pytest.raises(TooEarlyError):
            evaluate_claim(SCENARIO_SCHEDULE, make_record(), T + 11)

    def test_first_month(self):
        quote = evaluate_claim(SCENARIO_SCHEDULE, make_record(), T + 13)

        assert quote.vested_months == 1
        assert quote.newly_vested_months == 1
        assert quote.reward == 10

    def test_nothing_to_claim_at_start_delay(self):
        with pytest.raises(NothingToClaimError):
            evaluate_claim(SCENARIO_SCHEDULE, make_record(), T + 12)

    def test_nothing_new_since_last_claim(self):
        with pytest.raises(NothingToClaimError):
            evaluate_claim(SCENARIO_SCHEDULE, make_record(claimed_months=1), T + 13)

    def test_only_new_months_are_paid(self):
        quote = evaluate_claim(SCENARIO_SCHEDULE, make_record(claimed_months=1), T + 36)

        assert quote.newly_vested_months == 23
        assert quote.reward == 230

    def test_finished_record(self):
        with pytest.raises(AlreadyFinishedError):
            evaluate_claim(SCENARIO_SCHEDULE, make_record(claimed_months=24), T + 100)

    def test_reward_rounds_down(self):
        # 333 * 100 / 10000 = 3.33
        quote = evaluate_claim(SCENARIO_SCHEDULE, make_record(amount=333), T + 13)
        assert quote.reward == 3


class TestPendingReward:
    """Tests for the read-only pending reward."""

    def test_zero_instead_of_errors(self):
        assert pending_reward(SCENARIO_SCHEDULE, make_record(), T + 5) == 0
        assert pending_reward(SCENARIO_SCHEDULE, make_record(claimed_months=1), T + 13) == 0
        assert pending_reward(SCENARIO_SCHEDULE, make_record(claimed_months=24), T + 100) == 0

    def test_matches_claim_quote(self):
        record = make_record(claimed_months=3)
        assert pending_reward(SCENARIO_SCHEDULE, record, T + 20) == evaluate_claim(
            SCENARIO_SCHEDULE, record, T + 20
        ).reward

    def test_idempotent(self):
        record = make_record()
        values = {pending_reward(SCENARIO_SCHEDULE, record, T + 17) for _ in range(5)}
        assert values == {50}

    def test_full_schedule_total(self):
        assert reward_for_months(SCENARIO_SCHEDULE, 1000, 24) == 240


class TestPresets:
    """Tests for the variant schedules."""

    def test_primary(self):
        schedule = schedule_for(Variant.PRIMARY)

        assert schedule is PRIMARY_SCHEDULE
        assert schedule.max_months == 24
        assert schedule.lock_duration == 3 * YEAR

    def test_simplified(self):
        schedule = schedule_for(Variant.SIMPLIFIED)

        assert schedule is SIMPLIFIED_SCHEDULE
        assert schedule.max_months == 12
        assert schedule.lock_duration == 3 * YEAR

    def test_schedule_is_frozen(self):
        with pytest.raises(ValidationError):
            PRIMARY_SCHEDULE.max_months = 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
