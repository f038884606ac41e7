import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from .config import ZERO_ADDRESS, Settings, get_settings
from .errors import (
    BelowMinimumContributionError,
    ConfigurationError,
    ExceedsUnlockedBalanceError,
    FundingTransferError,
    InvalidAmountError,
    ReentrancyError,
    SaleInactiveError,
    UnauthorizedError,
)
from .ledger import InMemoryStorage, InvestmentLedger
from .lock import LockGate
from .models import (
    AdminResponse,
    BalanceResponse,
    ClaimResponse,
    FundingBalanceResponse,
    HistoryAction,
    HistoryResponse,
    InvestmentListResponse,
    InvestmentRecord,
    InvestmentView,
    InvestResponse,
    LockedBalanceResponse,
    PendingRewardResponse,
    TokenInfo,
    TransferResponse,
    Variant,
)
from .schedule import (
    RewardSchedule,
    compute_vested_months,
    evaluate_claim,
    pending_reward,
    reward_for_months,
    schedule_for,
)
from .token import FundingAsset, TokenLedger

logger = logging.getLogger(__name__)


def _check_address(name: str, address: str) -> str:
    if not address or address.lower() == ZERO_ADDRESS:
        raise ConfigurationError(f"{name} must be a non-zero address")
    return address


class SaleConfig:
    """Mutable sale state. Changed only through the service's admin operations."""

    def __init__(self, owner: str, treasury: str, funding_asset: str, sale_active: bool):
        self.owner = owner
        self.treasury = _check_address("treasury_address", treasury)
        self.funding_asset = _check_address("funding_asset_address", funding_asset)
        self.sale_active = sale_active


class LockupService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        schedule: Optional[RewardSchedule] = None,
        storage: Optional[InMemoryStorage] = None,
        token: Optional[TokenLedger] = None,
        funding: Optional[FundingAsset] = None,
    ):
        self.settings = settings or get_settings()
        self.schedule = schedule or schedule_for(self.settings.variant)
        self._validate_settings()

        self.config = SaleConfig(
            owner=_check_address("owner_address", self.settings.owner_address),
            treasury=self.settings.treasury_address,
            funding_asset=self.settings.funding_asset_address,
            sale_active=self.settings.sale_active,
        )
        self.ledger = InvestmentLedger(self.schedule.max_months, storage)
        self.gate = LockGate(self.ledger, self.schedule)

        supply_cap = self.settings.total_supply_cap if self.is_primary else None
        self.token = token or TokenLedger(
            name=self.settings.token_name,
            symbol=self.settings.token_symbol,
            decimals=self.settings.token_decimals,
            supply_cap=supply_cap,
        )
        self.token.transfer_guard = self._guard_transfer
        self.funding = funding or FundingAsset(self.config.funding_asset, self.settings.funding_symbol)
        self.pool = self.settings.reward_pool_address

        # One operation at a time; _owner is the thread currently holding _lock.
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

        if self.settings.reward_reserve:
            self.token.mint(self.pool, self.settings.reward_reserve)

    @property
    def is_primary(self) -> bool:
        return self.schedule.variant == Variant.PRIMARY

    @property
    def tracks_history(self) -> bool:
        return self.schedule.variant == Variant.SIMPLIFIED

    # Investment flows

    def invest(self, account: str, amount: int, now: Optional[int] = None) -> InvestResponse:
        now = self._now(now)
        if amount <= 0:
            raise InvalidAmountError(f"Investment amount must be positive, got {amount}")

        with self._transaction(account, self.config.treasury):
            if self.is_primary and not self.config.sale_active:
                raise SaleInactiveError("The sale is not active")
            if amount < self.settings.min_contribution:
                raise BelowMinimumContributionError(
                    f"Minimum contribution is {self.settings.min_contribution}, got {amount}"
                )

            cost = amount * self.settings.token_price
            if not self.funding.pull_funds(account, self.config.treasury, cost):
                raise FundingTransferError(
                    f"Could not collect {cost} {self.funding.symbol} from {account}"
                )

            record_id = self.ledger.record_investment(account, amount, now)
            self.token.mint(account, amount)
            if self.tracks_history:
                self.ledger.append_history(account, HistoryAction.SEED, cost, self.funding.symbol, now)
            record = self.ledger.get_record(account, record_id)

        logger.info(
            f"Investment {record_id} recorded for {account}: {amount} {self.token.symbol}",
            extra={"account": account, "record_id": record_id, "amount": amount},
        )
        return InvestResponse(record=record, cost=cost, message="Investment recorded successfully")

    def claim(self, account: str, record_id: int, now: Optional[int] = None) -> ClaimResponse:
        now = self._now(now)
        with self._transaction(account, self.pool):
            record = self.ledger.get_record(account, record_id)
            quote = evaluate_claim(self.schedule, record, now)

            updated = self.ledger.update_claim(
                account, record_id, record.claimed_months + quote.newly_vested_months
            )
            if self.tracks_history:
                self.ledger.append_history(account, HistoryAction.CLAIM, quote.reward, self.token.symbol, now)

            # Ledger state is committed before value leaves the pool.
            # Tiny investments can vest a month worth less than one unit.
            if quote.reward:
                self.token.credit_reward(self.pool, account, quote.reward)

        logger.info(
            f"Claimed {quote.reward} {self.token.symbol} on investment {record_id} for {account} "
            f"({updated.claimed_months}/{self.schedule.max_months} months)",
            extra={"account": account, "record_id": record_id, "amount": quote.reward},
        )
        return ClaimResponse(
            record=updated,
            reward=quote.reward,
            newly_vested_months=quote.newly_vested_months,
            message="Reward finished" if updated.reward_finished else "Reward claimed successfully",
        )

    # Read-only views

    def pending_reward(self, account: str, record_id: int, now: Optional[int] = None) -> PendingRewardResponse:
        now = self._now(now)
        with self._reading():
            record = self.ledger.get_record(account, record_id)
        return PendingRewardResponse(
            account=account,
            record_id=record_id,
            pending_reward=pending_reward(self.schedule, record, now),
            vested_months=compute_vested_months(self.schedule, record.start_time, now),
            claimed_months=record.claimed_months,
        )

    def locked_balance(self, account: str, now: Optional[int] = None) -> LockedBalanceResponse:
        now = self._now(now)
        with self._reading():
            locked = self.gate.locked_balance(account, now)
        return LockedBalanceResponse(account=account, locked_balance=locked, now=now)

    def get_balance(self, account: str, now: Optional[int] = None) -> BalanceResponse:
        now = self._now(now)
        with self._reading():
            total = self.token.balance_of(account)
            locked = self.gate.locked_balance(account, now)
        return BalanceResponse(
            account=account,
            total_balance=total,
            locked_balance=locked,
            unlocked_balance=max(0, total - locked),
            now=now,
        )

    def list_investments(self, account: str, now: Optional[int] = None) -> InvestmentListResponse:
        now = self._now(now)
        with self._reading():
            records = self.ledger.list_records(account)
        views = [self._view(record, now) for record in records]
        return InvestmentListResponse(
            account=account,
            investments=views,
            count=len(views),
            total_amount=sum(v.amount for v in views),
            total_claimed_value=sum(v.claimed_value for v in views),
            total_unclaimed_value=sum(v.unclaimed_value for v in views),
            total_pending_reward=sum(v.pending_reward for v in views),
            locked_amount=sum(v.amount for v in views if v.is_locked),
            unlocked_amount=sum(v.amount for v in views if not v.is_locked),
            now=now,
        )

    def history(self, account: str) -> HistoryResponse:
        with self._reading():
            entries = self.ledger.history(account)
        return HistoryResponse(account=account, entries=entries, total_count=len(entries))

    def token_info(self) -> TokenInfo:
        with self._reading():
            return TokenInfo(
                name=self.token.name,
                symbol=self.token.symbol,
                decimals=self.token.decimals,
                total_supply=self.token.total_supply,
                supply_cap=self.token.supply_cap,
                variant=self.schedule.variant,
                sale_active=self.config.sale_active,
                treasury_address=self.config.treasury,
                owner_address=self.config.owner,
                reward_pool_balance=self.token.balance_of(self.pool),
            )

    # Funding asset

    def deposit_funding(self, account: str, amount: int) -> FundingBalanceResponse:
        with self._transaction(account):
            self.funding.deposit(account, amount)
        return self.funding_balance(account)

    def funding_balance(self, account: str) -> FundingBalanceResponse:
        with self._reading():
            balance = self.funding.balance_of(account)
        return FundingBalanceResponse(account=account, symbol=self.funding.symbol, balance=balance)

    # Token transfers

    def transfer(self, sender: str, recipient: str, amount: int, now: Optional[int] = None) -> TransferResponse:
        now = self._now(now)
        with self._transaction(sender, recipient):
            self.token.transfer(sender, recipient, amount, now)
            sender_balance = self.token.balance_of(sender)
        return TransferResponse(sender=sender, recipient=recipient, amount=amount, sender_balance=sender_balance)

    def approve(self, owner: str, spender: str, amount: int) -> int:
        with self._transaction(owner):
            self.token.approve(owner, spender, amount)
            return self.token.allowance(owner, spender)

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int, now: Optional[int] = None
    ) -> TransferResponse:
        now = self._now(now)
        with self._transaction(owner, recipient):
            self.token.transfer_from(spender, owner, recipient, amount, now)
            owner_balance = self.token.balance_of(owner)
        return TransferResponse(sender=owner, recipient=recipient, amount=amount, sender_balance=owner_balance)

    # Administration

    def set_treasury(self, caller: str, address: str) -> AdminResponse:
        with self._transaction():
            self._require_owner(caller)
            self.config.treasury = _check_address("treasury_address", address)
        logger.info(f"Treasury changed to {address}")
        return AdminResponse(message="Treasury updated", token=self.token_info())

    def set_sale_active(self, caller: str, active: bool) -> AdminResponse:
        with self._transaction():
            self._require_owner(caller)
            self.config.sale_active = active
        logger.info(f"Sale {'opened' if active else 'closed'}")
        return AdminResponse(message="Sale status updated", token=self.token_info())

    def mint(self, caller: str, account: str, amount: int) -> AdminResponse:
        with self._transaction(account):
            self._require_owner(caller)
            self.token.mint(account, amount)
        logger.info(f"Minted {amount} {self.token.symbol} to {account}", extra={"account": account, "amount": amount})
        return AdminResponse(message="Tokens minted", token=self.token_info())

    def burn(self, caller: str, account: str, amount: int, now: Optional[int] = None) -> AdminResponse:
        now = self._now(now)
        with self._transaction(account):
            self._require_owner(caller)
            if amount <= 0:
                raise InvalidAmountError(f"Burn amount must be positive, got {amount}")
            self._guard_transfer(account, amount, self.token.balance_of(account), now)
            self.token.burn(account, amount)
        logger.info(f"Burned {amount} {self.token.symbol} from {account}", extra={"account": account, "amount": amount})
        return AdminResponse(message="Tokens burned", token=self.token_info())

    def transfer_ownership(self, caller: str, new_owner: str) -> AdminResponse:
        with self._transaction():
            self._require_owner(caller)
            self.config.owner = _check_address("owner_address", new_owner)
        logger.info(f"Ownership transferred from {caller} to {new_owner}")
        return AdminResponse(message="Ownership transferred", token=self.token_info())

    # Internals

    def _validate_settings(self) -> None:
        settings = self.settings
        if settings.token_price <= 0:
            raise ConfigurationError("token_price must be positive")
        if settings.min_contribution < 0:
            raise ConfigurationError("min_contribution cannot be negative")
        if settings.reward_reserve < 0:
            raise ConfigurationError("reward_reserve cannot be negative")
        if self.is_primary and settings.reward_reserve > settings.total_supply_cap:
            raise ConfigurationError(
                f"reward_reserve {settings.reward_reserve} exceeds total_supply_cap {settings.total_supply_cap}"
            )

    def _view(self, record: InvestmentRecord, now: int) -> InvestmentView:
        claimed_value = reward_for_months(self.schedule, record.amount, record.claimed_months)
        total_reward = reward_for_months(self.schedule, record.amount, self.schedule.max_months)
        return InvestmentView(
            id=record.id,
            amount=record.amount,
            start_time=record.start_time,
            end_time=self.gate.unlock_time(record.start_time),
            claimed_months=record.claimed_months,
            reward_finished=record.reward_finished,
            claimed_value=claimed_value,
            total_reward=total_reward,
            unclaimed_value=max(0, total_reward - claimed_value),
            pending_reward=pending_reward(self.schedule, record, now),
            progress=record.claimed_months * 10_000 // self.schedule.max_months,
            is_locked=self.gate.is_locked(record.start_time, now),
        )

    def _guard_transfer(self, account: str, amount: int, total_balance: int, now: int) -> None:
        try:
            self.gate.guard_transfer(account, amount, total_balance, now)
        except ExceedsUnlockedBalanceError as e:
            logger.warning(str(e), extra={"account": account, "amount": amount, "error_code": e.code})
            raise

    def _require_owner(self, caller: str) -> None:
        if caller != self.config.owner:
            raise UnauthorizedError(f"{caller} is not the owner")

    @contextmanager
    def _transaction(self, *accounts: str):
        """Run one state-changing operation under the service lock.

        Calls from other threads wait for the lock. A call from the thread
        already inside an operation raises ReentrancyError. On failure the
        touched accounts are put back as they were.
        """
        if self._owner == threading.get_ident():
            raise ReentrancyError("Another operation is already in progress")
        with self._lock:
            self._owner = threading.get_ident()
            state = (
                self.ledger.storage.snapshot(accounts),
                self.token.snapshot(accounts),
                self.funding.snapshot(accounts),
            )
            try:
                yield
            except Exception:
                self.ledger.storage.restore(state[0])
                self.token.restore(state[1])
                self.funding.restore(state[2])
                raise
            finally:
                self._owner = None

    @contextmanager
    def _reading(self):
        if self._owner == threading.get_ident():
            yield
            return
        with self._lock:
            yield

    @staticmethod
    def _now(now: Optional[int]) -> int:
        if now is not None:
            return now
        return int(datetime.now(timezone.utc).timestamp())
