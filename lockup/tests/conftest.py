import pytest

from lockup.config import Settings
from lockup.models import Variant
from lockup.schedule import RewardSchedule
from lockup.service import LockupService

# One "period" is one second so scenarios read in whole periods.
T = 1_000_000

SCENARIO_SCHEDULE = RewardSchedule(
    variant=Variant.PRIMARY,
    reward_start_delay=12,
    reward_interval=1,
    max_months=24,
    reward_percent_per_month=100,
    lock_duration=36,
)


def build_settings(**overrides) -> Settings:
    values = {
        "owner_address": "0xowner",
        "treasury_address": "0xtreasury",
        "funding_asset_address": "0xusdt",
        "min_contribution": 1,
        "reward_reserve": 1_000_000,
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def scenario_schedule() -> RewardSchedule:
    return SCENARIO_SCHEDULE


@pytest.fixture
def service() -> LockupService:
    """Primary-variant service on the one-second scenario schedule."""
    return LockupService(build_settings(), schedule=SCENARIO_SCHEDULE)


@pytest.fixture
def simplified_service() -> LockupService:
    return LockupService(build_settings(variant=Variant.SIMPLIFIED))
