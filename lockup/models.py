from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class Variant(str, Enum):
    PRIMARY = "primary"
    SIMPLIFIED = "simplified"


class HistoryAction(str, Enum):
    SEED = "seed"
    CLAIM = "claim"


class InvestmentRecord(BaseModel):
    id: int
    account: str
    amount: int
    start_time: int
    claimed_months: int = 0
    reward_finished: bool = False

    model_config = ConfigDict(from_attributes=True)


class HistoryEntry(BaseModel):
    action: HistoryAction
    amount: int
    currency: str
    timestamp: int

    model_config = ConfigDict(from_attributes=True)


class ClaimQuote(BaseModel):
    vested_months: int
    newly_vested_months: int
    reward: int


class InvestRequest(BaseModel):
    account: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Tokens to purchase")
    now: Optional[int] = Field(default=None, description="Unix timestamp, defaults to current time")

    model_config = ConfigDict(json_schema_extra={
        "example": {"account": "0xalice", "amount": 1000}
    })


class ClaimRequest(BaseModel):
    now: Optional[int] = None


class TransferRequest(BaseModel):
    sender: str
    recipient: str
    amount: int = Field(..., gt=0)
    now: Optional[int] = None


class ApproveRequest(BaseModel):
    owner: str
    spender: str
    amount: int = Field(..., ge=0)


class TransferFromRequest(BaseModel):
    spender: str
    owner: str
    recipient: str
    amount: int = Field(..., gt=0)
    now: Optional[int] = None


class FundingDepositRequest(BaseModel):
    account: str
    amount: int = Field(..., gt=0)


class SetTreasuryRequest(BaseModel):
    caller: str
    address: str


class SetSaleActiveRequest(BaseModel):
    caller: str
    active: bool


class SupplyChangeRequest(BaseModel):
    caller: str
    account: str
    amount: int = Field(..., gt=0)


class TransferOwnershipRequest(BaseModel):
    caller: str
    new_owner: str


class InvestResponse(BaseModel):
    record: InvestmentRecord
    cost: int
    message: str


class ClaimResponse(BaseModel):
    record: InvestmentRecord
    reward: int
    newly_vested_months: int
    message: str


class PendingRewardResponse(BaseModel):
    account: str
    record_id: int
    pending_reward: int
    vested_months: int
    claimed_months: int


class LockedBalanceResponse(BaseModel):
    account: str
    locked_balance: int
    now: int


class BalanceResponse(BaseModel):
    account: str
    total_balance: int
    locked_balance: int
    unlocked_balance: int
    now: int


class FundingBalanceResponse(BaseModel):
    account: str
    symbol: str
    balance: int


class TransferResponse(BaseModel):
    sender: str
    recipient: str
    amount: int
    sender_balance: int


class InvestmentView(BaseModel):
    id: int
    amount: int
    start_time: int
    end_time: int
    claimed_months: int
    reward_finished: bool
    claimed_value: int
    total_reward: int
    unclaimed_value: int
    pending_reward: int
    progress: int = Field(..., description="Schedule completion in basis points")
    is_locked: bool


class InvestmentListResponse(BaseModel):
    account: str
    investments: list[InvestmentView]
    count: int
    total_amount: int
    total_claimed_value: int
    total_unclaimed_value: int
    total_pending_reward: int
    locked_amount: int
    unlocked_amount: int
    now: int


class HistoryResponse(BaseModel):
    account: str
    entries: list[HistoryEntry]
    total_count: int


class TokenInfo(BaseModel):
    name: str
    symbol: str
    decimals: int
    total_supply: int
    supply_cap: Optional[int] = None
    variant: Variant
    sale_active: bool
    treasury_address: str
    owner_address: str
    reward_pool_balance: int


class AdminResponse(BaseModel):
    message: str
    token: TokenInfo
