"""Credit catalog domain service.

Prices for auxiliary actions start from the configured defaults; rows stored
in ``credit_prices`` override them so operators can reprice without a deploy.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.core.config import get_settings
from credit_auction.db.models import CreditPack as CreditPackModel
from credit_auction.infrastructure.database.repositories.catalog_repository import SqlCatalogRepository

from .exceptions import CreditPackNotFound, UnknownCreditAction
from .models import CreditPackRecord
from .repository import CatalogRepository


@dataclass(slots=True)
class CatalogService:
    repository: CatalogRepository
    default_prices: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CatalogService":
        return cls(SqlCatalogRepository(session), default_prices=get_settings().credits.default_prices)

    async def get_prices(self) -> dict[str, int]:
        prices = dict(self.default_prices)
        for row in await self.repository.list_prices():
            prices[row.action] = row.price
        return prices

    async def get_price(self, action: str) -> int:
        prices = await self.get_prices()
        try:
            return prices[action]
        except KeyError:
            raise UnknownCreditAction(f"No credit price configured for {action}") from None

    async def set_price(self, action: str, price: int) -> dict[str, int]:
        if price < 0:
            raise ValueError("price must not be negative")
        await self.repository.upsert_price(action.upper(), price)
        return await self.get_prices()

    async def list_packs(self, active_only: bool = True) -> list[CreditPackRecord]:
        rows = await self.repository.list_packs(active_only)
        return [self._to_domain(row) for row in rows]

    async def get_pack(self, pack_id: str) -> CreditPackRecord:
        pack = await self.repository.get_pack(pack_id)
        if pack is None or not pack.is_active:
            raise CreditPackNotFound(f"Credit pack not found: {pack_id}")
        return self._to_domain(pack)

    async def create_pack(
        self,
        *,
        name: str,
        credits: int,
        price_inr: int,
        description: Optional[str] = None,
        flag_text: Optional[str] = None,
        sort_order: int = 0,
    ) -> CreditPackRecord:
        if credits <= 0 or price_inr < 0:
            raise ValueError("pack credits must be positive and price non-negative")
        pack = await self.repository.create_pack(
            name=name,
            credits=credits,
            price_inr=price_inr,
            description=description,
            flag_text=flag_text,
            sort_order=sort_order,
        )
        return self._to_domain(pack)

    @staticmethod
    def _to_domain(model: CreditPackModel) -> CreditPackRecord:
        return CreditPackRecord(
            id=model.id,
            name=model.name,
            credits=model.credits,
            price_inr=model.price_inr,
            description=model.description,
            flag_text=model.flag_text,
            is_active=bool(model.is_active),
            sort_order=model.sort_order,
        )
