"""Repository protocol for wallet operations."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol, Sequence

from credit_auction.db.models import CreditTransaction as CreditTransactionModel, CreditWallet as CreditWalletModel


class WalletRepository(Protocol):
    def savepoint(self) -> AbstractAsyncContextManager:
        ...

    async def get_wallet(self, broker_id: str, *, for_update: bool = False) -> CreditWalletModel | None:
        ...

    async def create_wallet(self, broker_id: str, opening_balance: int) -> tuple[CreditWalletModel, bool]:
        ...

    async def apply_delta(self, broker_id: str, delta: int) -> tuple[str, int, int] | None:
        ...

    async def add_transaction(
        self,
        *,
        wallet_id: str,
        broker_id: str,
        sequence: int,
        type: str,
        amount: int,
        balance_after: int,
        description: str | None,
        reference: str | None = None,
        idempotency_key: str | None = None,
        order_id: str | None = None,
        payment_id: str | None = None,
        pack_id: str | None = None,
        amount_paid_inr: int | None = None,
    ) -> CreditTransactionModel:
        ...

    async def get_transaction_by_key(self, idempotency_key: str) -> CreditTransactionModel | None:
        ...

    async def list_transactions(
        self, broker_id: str, limit: int, offset: int, type: str | None = None
    ) -> Sequence[CreditTransactionModel]:
        ...

    async def count_transactions(self, broker_id: str, type: str | None = None) -> int:
        ...

    async def replay_transactions(self, broker_id: str) -> Sequence[CreditTransactionModel]:
        ...
