"""Wallet ledger exports"""

from .exceptions import (
    AlreadyRefunded,
    IdempotencyConflict,
    InsufficientFunds,
    InvalidAmount,
    WalletError,
    WalletNotFound,
)
from .models import (
    BalanceCheck,
    CreditTransactionRecord,
    PaymentCorrelation,
    TransactionPage,
    WalletAudit,
    WalletSnapshot,
)
from .service import WalletService

__all__ = [
    "AlreadyRefunded",
    "BalanceCheck",
    "CreditTransactionRecord",
    "IdempotencyConflict",
    "InsufficientFunds",
    "InvalidAmount",
    "PaymentCorrelation",
    "TransactionPage",
    "WalletAudit",
    "WalletError",
    "WalletNotFound",
    "WalletService",
    "WalletSnapshot",
]
