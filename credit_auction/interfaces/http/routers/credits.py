"""Wallet and credit catalog endpoints for the calling broker."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from credit_auction.core.container import ApplicationContainer
from credit_auction.interfaces.http.deps import (
    get_catalog_service,
    get_container,
    get_current_broker,
    get_wallet_service,
)
from credit_auction.interfaces.http.errors import http_error
from credit_auction.modules.catalog import CatalogService
from credit_auction.modules.common import DomainError
from credit_auction.modules.wallets import WalletService
from credit_auction.schemas import (
    BalanceCheckResponse,
    BalanceResponse,
    CreditPackListResponse,
    CreditPackResponse,
    DeductRequest,
    PricesResponse,
    TokenData,
    TransactionListResponse,
    TransactionResponse,
)

router = APIRouter()


@router.get("/balance", response_model=BalanceResponse, summary="Current credit balance")
async def get_balance(
    principal: TokenData = Depends(get_current_broker),
    wallets: WalletService = Depends(get_wallet_service),
) -> BalanceResponse:
    snapshot = await wallets.ensure_wallet(principal.broker_id)
    return BalanceResponse(balance=snapshot.balance, wallet_id=snapshot.wallet_id)


@router.get("/transactions", response_model=TransactionListResponse, summary="Paged transaction history")
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    type: Optional[str] = Query(None, max_length=32),
    principal: TokenData = Depends(get_current_broker),
    wallets: WalletService = Depends(get_wallet_service),
    container: ApplicationContainer = Depends(get_container),
) -> TransactionListResponse:
    credits = container.settings.credits
    limit = min(limit or credits.default_page_size, credits.max_page_size)
    await wallets.ensure_wallet(principal.broker_id)
    result = await wallets.list_transactions(principal.broker_id, page, limit, type)
    return TransactionListResponse.model_validate(result)


@router.get("/check", response_model=BalanceCheckResponse, summary="Check whether the balance covers an amount")
async def check_balance(
    amount: int = Query(...),
    principal: TokenData = Depends(get_current_broker),
    wallets: WalletService = Depends(get_wallet_service),
) -> BalanceCheckResponse:
    try:
        result = await wallets.check_balance(principal.broker_id, amount)
    except DomainError as exc:
        raise http_error(exc) from exc
    return BalanceCheckResponse.model_validate(result)


@router.post("/deduct", response_model=TransactionResponse, summary="Spend credits on an action")
async def deduct_credits(
    payload: DeductRequest,
    principal: TokenData = Depends(get_current_broker),
    wallets: WalletService = Depends(get_wallet_service),
    catalog: CatalogService = Depends(get_catalog_service),
) -> TransactionResponse:
    if payload.action is None and payload.amount is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Either action or amount is required")
    try:
        if payload.action is not None:
            action = payload.action.upper()
            amount = await catalog.get_price(action)
            description = payload.description or f"Credits used for {action}"
        else:
            amount = payload.amount
            description = payload.description
        record = await wallets.debit(principal.broker_id, amount, description=description)
    except DomainError as exc:
        raise http_error(exc) from exc
    return TransactionResponse.model_validate(record)


@router.get("/prices", response_model=PricesResponse, summary="Credit price for each action")
async def get_prices(catalog: CatalogService = Depends(get_catalog_service)) -> PricesResponse:
    return PricesResponse(prices=await catalog.get_prices())


@router.get("/packs", response_model=CreditPackListResponse, summary="Credit packs on sale")
async def list_packs(catalog: CatalogService = Depends(get_catalog_service)) -> CreditPackListResponse:
    packs = await catalog.list_packs()
    return CreditPackListResponse(packs=[CreditPackResponse.model_validate(pack) for pack in packs])
