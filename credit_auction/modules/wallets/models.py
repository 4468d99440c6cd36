"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

TRANSACTION_TYPES = frozenset(
    {"signup_bonus", "purchase", "debit", "bid_debit", "refund", "admin_adjustment"}
)


@dataclass(slots=True)
class WalletSnapshot:
    wallet_id: str
    broker_id: str
    balance: int
    updated_at: Optional[datetime]


@dataclass(slots=True)
class CreditTransactionRecord:
    id: str
    wallet_id: str
    broker_id: str
    sequence: int
    type: str
    amount: int
    balance_after: int
    status: str
    description: Optional[str]
    created_at: datetime
    reference: Optional[str] = None
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    pack_id: Optional[str] = None
    amount_paid_inr: Optional[int] = None


@dataclass(slots=True)
class PaymentCorrelation:
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    pack_id: Optional[str] = None
    amount_paid_inr: Optional[int] = None


@dataclass(slots=True)
class TransactionPage:
    transactions: list[CreditTransactionRecord]
    total: int
    page: int
    total_pages: int


@dataclass(slots=True)
class BalanceCheck:
    has_enough: bool
    required_amount: int
    balance: int


@dataclass(slots=True)
class WalletAudit:
    broker_id: str
    balance: int
    replayed_balance: int
    transaction_count: int
    mismatched_sequences: list[int] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return self.balance == self.replayed_balance and not self.mismatched_sequences
