"""Repository protocol for enquiries."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from credit_auction.db.models import Enquiry as EnquiryModel


class EnquiryRepository(Protocol):
    async def get(self, enquiry_id: str) -> EnquiryModel | None:
        ...

    async def create(
        self,
        *,
        enquiry_id: str | None,
        owner_id: str | None,
        bidding_closes_at: datetime | None,
        top_n: int | None,
    ) -> EnquiryModel:
        ...

    async def update_status(self, enquiry_id: str, status: str) -> EnquiryModel | None:
        ...
