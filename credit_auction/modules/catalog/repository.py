"""Repository protocol for the credit catalog."""

from __future__ import annotations

from typing import Protocol, Sequence

from credit_auction.db.models import CreditPack as CreditPackModel, CreditPrice as CreditPriceModel


class CatalogRepository(Protocol):
    async def list_prices(self) -> Sequence[CreditPriceModel]:
        ...

    async def upsert_price(self, action: str, price: int) -> CreditPriceModel:
        ...

    async def list_packs(self, active_only: bool = True) -> Sequence[CreditPackModel]:
        ...

    async def get_pack(self, pack_id: str) -> CreditPackModel | None:
        ...

    async def create_pack(
        self,
        *,
        name: str,
        credits: int,
        price_inr: int,
        description: str | None,
        flag_text: str | None,
        sort_order: int,
    ) -> CreditPackModel:
        ...
