"""SQLAlchemy implementation for credit prices and packs"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import CreditPack, CreditPrice


class SqlCatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_prices(self) -> Sequence[CreditPrice]:
        result = await self.session.execute(select(CreditPrice).order_by(CreditPrice.action))
        return result.scalars().all()

    async def upsert_price(self, action: str, price: int) -> CreditPrice:
        record = await self.session.get(CreditPrice, action)
        if record is None:
            record = CreditPrice(action=action, price=price)
            self.session.add(record)
        else:
            record.price = price
        await self.session.flush()
        return record

    async def list_packs(self, active_only: bool = True) -> Sequence[CreditPack]:
        stmt = select(CreditPack)
        if active_only:
            stmt = stmt.where(CreditPack.is_active.is_(True))
        stmt = stmt.order_by(asc(CreditPack.sort_order), asc(CreditPack.credits))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_pack(self, pack_id: str) -> CreditPack | None:
        return await self.session.get(CreditPack, pack_id)

    async def create_pack(
        self,
        *,
        name: str,
        credits: int,
        price_inr: int,
        description: str | None,
        flag_text: str | None,
        sort_order: int,
    ) -> CreditPack:
        pack = CreditPack(
            name=name,
            credits=credits,
            price_inr=price_inr,
            description=description,
            flag_text=flag_text,
            is_active=True,
            sort_order=sort_order,
        )
        self.session.add(pack)
        await self.session.flush()
        return pack
