"""Broker-facing bidding endpoints for a single enquiry."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from credit_auction.interfaces.http.deps import get_coordinator, get_current_broker
from credit_auction.interfaces.http.errors import http_error
from credit_auction.modules.auction import AuctionCoordinator
from credit_auction.modules.common import DomainError
from credit_auction.schemas import (
    BidInfoResponse,
    MyBidResponse,
    PlaceBidRequest,
    PlaceBidResponse,
    TokenData,
)

router = APIRouter()


@router.get("/{enquiry_id}/bids", response_model=BidInfoResponse, summary="Leaderboard and bid thresholds")
async def get_bid_info(
    enquiry_id: str = Path(..., min_length=1, max_length=64),
    amount: Optional[int] = Query(None, ge=1, description="Report the rank a bid of this size would take"),
    principal: TokenData = Depends(get_current_broker),
    coordinator: AuctionCoordinator = Depends(get_coordinator),
) -> BidInfoResponse:
    try:
        info = await coordinator.bid_info(enquiry_id, principal.broker_id, amount)
    except DomainError as exc:
        raise http_error(exc) from exc
    return BidInfoResponse.model_validate(info)

@router.post(
    "/{enquiry_id}/bids",
    response_model=PlaceBidResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place or raise a bid",
)
async def place_bid(
    payload: PlaceBidRequest,
    enquiry_id: str = Path(..., min_length=1, max_length=64),
    principal: TokenData = Depends(get_current_broker),
    coordinator: AuctionCoordinator = Depends(get_coordinator),
) -> PlaceBidResponse:
    try:
        result = await coordinator.place_bid(principal.broker_id, enquiry_id, payload.credits_used)
    except DomainError as exc:
        raise http_error(exc) from exc
    return PlaceBidResponse.model_validate(result)

@router.get("/{enquiry_id}/bids/mine", response_model=MyBidResponse, summary="Caller's bid on the enquiry")
async def get_my_bid(
    enquiry_id: str = Path(..., min_length=1, max_length=64),
    principal: TokenData = Depends(get_current_broker),
    coordinator: AuctionCoordinator = Depends(get_coordinator),
) -> MyBidResponse:
    try:
        result = await coordinator.my_bid(principal.broker_id, enquiry_id)
    except DomainError as exc:
        raise http_error(exc) from exc
    return MyBidResponse.model_validate(result)
