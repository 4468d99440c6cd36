"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

import math

from fastapi import HTTPException, status

from credit_auction.modules.auction import (
    AuctionPlacementFailed,
    BidNotHigherThanCurrent,
    EnquiryClosed,
    InvalidBidAmount,
)
from credit_auction.modules.bids import BidNotFound
from credit_auction.modules.catalog import CreditPackNotFound, UnknownCreditAction
from credit_auction.modules.common import AuctionBusy, DomainError
from credit_auction.modules.enquiries import EnquiryAlreadyExists, EnquiryNotFound
from credit_auction.modules.wallets import (
    AlreadyRefunded,
    IdempotencyConflict,
    InsufficientFunds,
    InvalidAmount,
    WalletNotFound,
)

STATUS_CODES: dict[type[DomainError], int] = {
    InsufficientFunds: status.HTTP_402_PAYMENT_REQUIRED,
    BidNotHigherThanCurrent: status.HTTP_409_CONFLICT,
    EnquiryClosed: status.HTTP_409_CONFLICT,
    EnquiryAlreadyExists: status.HTTP_409_CONFLICT,
    AlreadyRefunded: status.HTTP_409_CONFLICT,
    IdempotencyConflict: status.HTTP_409_CONFLICT,
    EnquiryNotFound: status.HTTP_404_NOT_FOUND,
    WalletNotFound: status.HTTP_404_NOT_FOUND,
    BidNotFound: status.HTTP_404_NOT_FOUND,
    CreditPackNotFound: status.HTTP_404_NOT_FOUND,
    InvalidBidAmount: status.HTTP_400_BAD_REQUEST,
    InvalidAmount: status.HTTP_400_BAD_REQUEST,
    UnknownCreditAction: status.HTTP_400_BAD_REQUEST,
    AuctionBusy: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuctionPlacementFailed: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        code = STATUS_CODES.get(cls)
        if code is not None:
            return code
    return status.HTTP_400_BAD_REQUEST


def http_error(exc: DomainError) -> HTTPException:
    detail: dict[str, object] = {"code": exc.code, "message": exc.message}
    headers = None
    if isinstance(exc, InsufficientFunds):
        detail.update(balance=exc.balance, required=exc.required, shortfall=exc.shortfall)
    elif isinstance(exc, BidNotHigherThanCurrent):
        detail.update(currentBid=exc.current, requested=exc.requested)
    elif isinstance(exc, AuctionPlacementFailed):
        detail.update(compensated=exc.compensated)
    elif isinstance(exc, AuctionBusy):
        headers = {"Retry-After": str(max(1, math.ceil(exc.timeout)))}
    return HTTPException(status_code=status_for(exc), detail=detail, headers=headers)


__all__ = ["STATUS_CODES", "http_error", "status_for"]
