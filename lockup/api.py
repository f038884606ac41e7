from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .errors import LockupError
from .models import (
    AdminResponse, ApproveRequest, BalanceResponse, ClaimRequest, ClaimResponse,
    FundingBalanceResponse, FundingDepositRequest, HistoryResponse, InvestmentListResponse, InvestRequest, InvestResponse,
    LockedBalanceResponse, PendingRewardResponse, SetSaleActiveRequest,
    SetTreasuryRequest, SupplyChangeRequest, TokenInfo, TransferFromRequest,
    TransferOwnershipRequest, TransferRequest, TransferResponse,
)
from .observability import setup_logging
from .service import LockupService


def _http_error(e: LockupError) -> HTTPException:
    return HTTPException(status_code=e.http_status, detail={"code": e.code, "message": str(e)})


def create_app(service: Optional[LockupService] = None) -> FastAPI:
    settings = service.settings if service else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        yield

    app = FastAPI(
        title="Lockup API",
        description="Time-locked token investments with linearly vesting monthly rewards",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    lockup_service = service or LockupService(settings)
    app.state.service = lockup_service

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "healthy", "service": "lockup", "variant": lockup_service.schedule.variant.value}

    @app.get("/token", response_model=TokenInfo, tags=["System"])
    def get_token() -> TokenInfo:
        return lockup_service.token_info()

    @app.post("/investments", response_model=InvestResponse, status_code=status.HTTP_201_CREATED, tags=["Investments"])
    def invest(request: InvestRequest) -> InvestResponse:
        try:
            return lockup_service.invest(request.account, request.amount, request.now)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/accounts/{account}/investments/{record_id}/claim", response_model=ClaimResponse, tags=["Investments"])
    def claim(account: str, record_id: int, request: Optional[ClaimRequest] = None) -> ClaimResponse:
        try:
            return lockup_service.claim(account, record_id, request.now if request else None)
        except LockupError as e:
            raise _http_error(e)

    @app.get("/accounts/{account}/investments/{record_id}/pending", response_model=PendingRewardResponse, tags=["Investments"])
    def get_pending_reward(account: str, record_id: int, now: Optional[int] = None) -> PendingRewardResponse:
        try:
            return lockup_service.pending_reward(account, record_id, now)
        except LockupError as e:
            raise _http_error(e)

    @app.get("/accounts/{account}/investments", response_model=InvestmentListResponse, tags=["Accounts"])
    def list_investments(account: str, now: Optional[int] = None) -> InvestmentListResponse:
        return lockup_service.list_investments(account, now)

    @app.get("/accounts/{account}/locked", response_model=LockedBalanceResponse, tags=["Accounts"])
    def get_locked_balance(account: str, now: Optional[int] = None) -> LockedBalanceResponse:
        return lockup_service.locked_balance(account, now)

    @app.get("/accounts/{account}/balance", response_model=BalanceResponse, tags=["Accounts"])
    def get_balance(account: str, now: Optional[int] = None) -> BalanceResponse:
        return lockup_service.get_balance(account, now)

    @app.get("/accounts/{account}/history", response_model=HistoryResponse, tags=["Accounts"])
    def get_history(account: str) -> HistoryResponse:
        return lockup_service.history(account)

    @app.post("/funding/deposits", response_model=FundingBalanceResponse, tags=["Funding"])
    def deposit_funding(request: FundingDepositRequest) -> FundingBalanceResponse:
        return lockup_service.deposit_funding(request.account, request.amount)

    @app.get("/funding/{account}", response_model=FundingBalanceResponse, tags=["Funding"])
    def get_funding_balance(account: str) -> FundingBalanceResponse:
        return lockup_service.funding_balance(account)

    @app.post("/transfers", response_model=TransferResponse, tags=["Transfers"])
    def transfer(request: TransferRequest) -> TransferResponse:
        try:
            return lockup_service.transfer(request.sender, request.recipient, request.amount, request.now)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/approvals", tags=["Transfers"])
    def approve(request: ApproveRequest):
        allowance = lockup_service.approve(request.owner, request.spender, request.amount)
        return {"owner": request.owner, "spender": request.spender, "allowance": allowance}

    @app.post("/transfers/from", response_model=TransferResponse, tags=["Transfers"])
    def transfer_from(request: TransferFromRequest) -> TransferResponse:
        try:
            return lockup_service.transfer_from(
                request.spender, request.owner, request.recipient, request.amount, request.now
            )
        except LockupError as e:
            raise _http_error(e)

    @app.post("/admin/treasury", response_model=AdminResponse, tags=["Admin"])
    def set_treasury(request: SetTreasuryRequest) -> AdminResponse:
        try:
            return lockup_service.set_treasury(request.caller, request.address)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/admin/sale", response_model=AdminResponse, tags=["Admin"])
    def set_sale_active(request: SetSaleActiveRequest) -> AdminResponse:
        try:
            return lockup_service.set_sale_active(request.caller, request.active)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/admin/mint", response_model=AdminResponse, tags=["Admin"])
    def mint(request: SupplyChangeRequest) -> AdminResponse:
        try:
            return lockup_service.mint(request.caller, request.account, request.amount)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/admin/burn", response_model=AdminResponse, tags=["Admin"])
    def burn(request: SupplyChangeRequest) -> AdminResponse:
        try:
            return lockup_service.burn(request.caller, request.account, request.amount)
        except LockupError as e:
            raise _http_error(e)

    @app.post("/admin/owner", response_model=AdminResponse, tags=["Admin"])
    def transfer_ownership(request: TransferOwnershipRequest) -> AdminResponse:
        try:
            return lockup_service.transfer_ownership(request.caller, request.new_owner)
        except LockupError as e:
            raise _http_error(e)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
