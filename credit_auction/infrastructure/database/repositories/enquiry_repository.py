"""SQLAlchemy implementation for enquiry repository"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import Enquiry
from credit_auction.modules.common.clock import utcnow
from credit_auction.modules.common.exceptions import DuplicateKeyError


class SqlEnquiryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, enquiry_id: str) -> Enquiry | None:
        stmt = select(Enquiry).where(Enquiry.id == enquiry_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create(
        self,
        *,
        enquiry_id: str | None,
        owner_id: str | None,
        bidding_closes_at: datetime | None,
        top_n: int | None,
    ) -> Enquiry:
        enquiry = Enquiry(
            owner_id=owner_id,
            status="open",
            bidding_closes_at=bidding_closes_at,
            top_n=top_n,
        )
        if enquiry_id:
            enquiry.id = enquiry_id
        try:
            async with self.session.begin_nested():
                self.session.add(enquiry)
                await self.session.flush()
        except IntegrityError as exc:
            raise DuplicateKeyError(enquiry_id or "") from exc
        return enquiry

    async def update_status(self, enquiry_id: str, status: str) -> Enquiry | None:
        stmt = (
            update(Enquiry)
            .where(Enquiry.id == enquiry_id)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get(enquiry_id)
