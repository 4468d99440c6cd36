"""Administrative endpoints for enquiries, wallets and the credit catalog."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, status

from credit_auction.interfaces.http.deps import (
    get_catalog_service,
    get_coordinator,
    get_current_admin,
    get_enquiry_service,
    get_wallet_service,
)
from credit_auction.interfaces.http.errors import http_error
from credit_auction.modules.auction import AuctionCoordinator
from credit_auction.modules.catalog import CatalogService
from credit_auction.modules.common import DomainError
from credit_auction.modules.enquiries import EnquiryService
from credit_auction.modules.wallets import PaymentCorrelation, WalletService
from credit_auction.schemas import (
    AdjustRequest,
    CancellationResponse,
    CreditPackCreateRequest,
    CreditPackResponse,
    EnquiryCreateRequest,
    EnquiryResponse,
    PriceUpdateRequest,
    PricesResponse,
    PurchaseRequest,
    TokenData,
    TransactionResponse,
    WalletAuditResponse,
)

router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.post(
    "/enquiries",
    response_model=EnquiryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open an enquiry for bidding",
)
async def register_enquiry(
    payload: EnquiryCreateRequest,
    enquiries: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    try:
        enquiry = await enquiries.register(
            enquiry_id=payload.id,
            owner_id=payload.owner_id,
            bidding_closes_at=payload.bidding_closes_at,
            top_n=payload.top_n,
        )
    except DomainError as exc:
        raise http_error(exc) from exc
    return EnquiryResponse.model_validate(enquiry)

@router.post("/enquiries/{enquiry_id}/close", response_model=EnquiryResponse, summary="Stop accepting bids")
async def close_enquiry(
    enquiry_id: str = Path(..., min_length=1, max_length=64),
    coordinator: AuctionCoordinator = Depends(get_coordinator),
) -> EnquiryResponse:
    try:
        enquiry = await coordinator.close_enquiry(enquiry_id)
    except DomainError as exc:
        raise http_error(exc) from exc
    return EnquiryResponse.model_validate(enquiry)

@router.post(
    "/enquiries/{enquiry_id}/cancel",
    response_model=CancellationResponse,
    summary="Cancel an enquiry and apply the cancellation policy to its bids",
)
async def cancel_enquiry(
    enquiry_id: str = Path(..., min_length=1, max_length=64),
    coordinator: AuctionCoordinator = Depends(get_coordinator),
) -> CancellationResponse:
    try:
        outcome = await coordinator.cancel_enquiry(enquiry_id)
    except DomainError as exc:
        raise http_error(exc) from exc
    return CancellationResponse.model_validate(outcome)

@router.post("/wallets/{broker_id}/adjust", response_model=TransactionResponse, summary="Adjust a broker's balance")
async def adjust_wallet(
    payload: AdjustRequest,
    broker_id: str = Path(..., min_length=1, max_length=64),
    admin: TokenData = Depends(get_current_admin),
    wallets: WalletService = Depends(get_wallet_service),
) -> TransactionResponse:
    description = payload.description or f"Adjusted by {admin.broker_id}"
    try:
        record = await wallets.adjust(broker_id, payload.amount, description=description)
    except DomainError as exc:
        raise http_error(exc) from exc
    return TransactionResponse.model_validate(record)

@router.post(
    "/wallets/{broker_id}/purchases",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Credit a confirmed pack purchase",
)
async def confirm_purchase(
    payload: PurchaseRequest,
    broker_id: str = Path(..., min_length=1, max_length=64),
    wallets: WalletService = Depends(get_wallet_service),
    catalog: CatalogService = Depends(get_catalog_service),
) -> TransactionResponse:
    try:
        pack = await catalog.get_pack(payload.pack_id)
        record = await wallets.credit(
            broker_id,
            pack.credits,
            type="purchase",
            description=f"Purchased {pack.name}",
            correlation=PaymentCorrelation(
                order_id=payload.order_id,
                payment_id=payload.payment_id,
                pack_id=pack.id,
                amount_paid_inr=payload.amount_paid_inr if payload.amount_paid_inr is not None else pack.price_inr,
            ),
        )
    except DomainError as exc:
        raise http_error(exc) from exc
    return TransactionResponse.model_validate(record)

@router.get("/wallets/{broker_id}/audit", response_model=WalletAuditResponse, summary="Replay a wallet's ledger")
async def audit_wallet(
    broker_id: str = Path(..., min_length=1, max_length=64),
    wallets: WalletService = Depends(get_wallet_service),
) -> WalletAuditResponse:
    try:
        audit = await wallets.audit(broker_id)
    except DomainError as exc:
        raise http_error(exc) from exc
    return WalletAuditResponse.model_validate(audit)

@router.put("/credits/prices/{action}", response_model=PricesResponse, summary="Override an action's credit price")
async def set_price(
    payload: PriceUpdateRequest,
    action: str = Path(..., min_length=1, max_length=64),
    catalog: CatalogService = Depends(get_catalog_service),
) -> PricesResponse:
    prices = await catalog.set_price(action, payload.price)
    return PricesResponse(prices=prices)

@router.post(
    "/credits/packs",
    response_model=CreditPackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a credit pack",
)
async def create_pack(
    payload: CreditPackCreateRequest,
    catalog: CatalogService = Depends(get_catalog_service),
) -> CreditPackResponse:
    try:
        pack = await catalog.create_pack(
            name=payload.name,
            credits=payload.credits,
            price_inr=payload.price_inr,
            description=payload.description,
            flag_text=payload.flag_text,
            sort_order=payload.sort_order,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CreditPackResponse.model_validate(pack)
