"""Pydantic schemas used across the project.

Request and response bodies are camelCase on the wire; Python code keeps
snake_case attribute names.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from credit_auction.modules.bids.models import BidStatus


class TokenData(BaseModel):
    broker_id: str
    role: str = "broker"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class LeaderboardEntryResponse(CamelModel):
    rank: int
    broker_id: str
    credits_used: int
    bid_id: str
    created_at: datetime


class MyBidSummaryResponse(CamelModel):
    credits_used: int
    status: BidStatus
    rank: Optional[int] = None


class BidInfoResponse(CamelModel):
    leaderboard: list[LeaderboardEntryResponse]
    total_bids: int
    min_bid_to_enter_leaderboard: int
    min_bid_to_top_leaderboard: int
    my_bid: Optional[MyBidSummaryResponse] = None
    top_n: int
    simulated_rank: Optional[int] = None


class PlaceBidRequest(CamelModel):
    credits_used: int


class BidResponse(CamelModel):
    id: str
    broker_id: str
    enquiry_id: str
    credits_used: int
    status: BidStatus
    rank: Optional[int] = None
    is_on_leaderboard: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None


class PlaceBidResponse(CamelModel):
    bid: BidResponse
    refunded_brokers: int
    debited: int


class MyBidResponse(CamelModel):
    has_bid: bool
    bid: Optional[BidResponse] = None


class BalanceResponse(CamelModel):
    balance: int
    wallet_id: str


class TransactionResponse(CamelModel):
    id: str
    wallet_id: str
    type: str
    amount: int
    balance_after: int
    status: str
    description: Optional[str] = None
    reference: Optional[str] = None
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    pack_id: Optional[str] = None
    amount_paid_inr: Optional[int] = None
    created_at: datetime


class TransactionListResponse(CamelModel):
    transactions: list[TransactionResponse]
    total: int
    page: int
    total_pages: int


class BalanceCheckResponse(CamelModel):
    has_enough: bool
    required_amount: int
    balance: int


class DeductRequest(CamelModel):
    action: Optional[str] = None
    amount: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=255)


class PricesResponse(CamelModel):
    prices: dict[str, int]


class PriceUpdateRequest(CamelModel):
    price: int = Field(..., ge=0)


class CreditPackResponse(CamelModel):
    id: str
    name: str
    credits: int
    price_inr: int
    description: Optional[str] = None
    flag_text: Optional[str] = None
    sort_order: int = 0


class CreditPackListResponse(CamelModel):
    packs: list[CreditPackResponse]


class CreditPackCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    credits: int = Field(..., gt=0)
    price_inr: int = Field(..., ge=0)
    description: Optional[str] = None
    flag_text: Optional[str] = None
    sort_order: int = 0


class EnquiryCreateRequest(CamelModel):
    id: Optional[str] = Field(default=None, max_length=64)
    owner_id: Optional[str] = None
    bidding_closes_at: Optional[datetime] = None
    top_n: Optional[int] = Field(default=None, ge=1)


class EnquiryResponse(CamelModel):
    id: str
    status: str
    owner_id: Optional[str] = None
    bidding_closes_at: Optional[datetime] = None
    top_n: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CancellationResponse(CamelModel):
    enquiry: EnquiryResponse
    refunded_bids: int
    retained_bids: int


class AdjustRequest(CamelModel):
    amount: int
    description: Optional[str] = Field(default=None, max_length=255)


class PurchaseRequest(CamelModel):
    pack_id: str
    order_id: str = Field(..., min_length=1)
    payment_id: Optional[str] = None
    amount_paid_inr: Optional[int] = Field(default=None, ge=0)


class WalletAuditResponse(CamelModel):
    broker_id: str
    balance: int
    replayed_balance: int
    transaction_count: int
    mismatched_sequences: list[int]
    consistent: bool


class HealthResponse(BaseModel):
    status: str
    version: str
