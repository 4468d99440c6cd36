"""Enquiry registry domain service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import Enquiry as EnquiryModel
from credit_auction.infrastructure.database.repositories.enquiry_repository import SqlEnquiryRepository
from credit_auction.modules.common.exceptions import DuplicateKeyError

from .exceptions import EnquiryAlreadyExists, EnquiryNotFound
from .models import CANCELLED, CLOSED, OPEN, EnquiryRecord
from .repository import EnquiryRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EnquiryService:
    repository: EnquiryRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "EnquiryService":
        return cls(SqlEnquiryRepository(session))

    async def register(
        self,
        *,
        enquiry_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        bidding_closes_at: Optional[datetime] = None,
        top_n: Optional[int] = None,
    ) -> EnquiryRecord:
        if top_n is not None and top_n < 1:
            raise ValueError("top_n must be at least 1")
        if enquiry_id and await self.repository.get(enquiry_id) is not None:
            raise EnquiryAlreadyExists(f"Enquiry already registered: {enquiry_id}")
        try:
            enquiry = await self.repository.create(
                enquiry_id=enquiry_id,
                owner_id=owner_id,
                bidding_closes_at=bidding_closes_at,
                top_n=top_n,
            )
        except DuplicateKeyError as exc:
            raise EnquiryAlreadyExists(f"Enquiry already registered: {enquiry_id}") from exc
        return self._to_domain(enquiry)

    async def get(self, enquiry_id: str) -> EnquiryRecord | None:
        enquiry = await self.repository.get(enquiry_id)
        return self._to_domain(enquiry) if enquiry else None

    async def require(self, enquiry_id: str) -> EnquiryRecord:
        enquiry = await self.get(enquiry_id)
        if enquiry is None:
            raise EnquiryNotFound(f"Enquiry not found: {enquiry_id}")
        return enquiry

    async def close(self, enquiry_id: str) -> EnquiryRecord:
        return await self._transition(enquiry_id, CLOSED)

    async def cancel(self, enquiry_id: str) -> EnquiryRecord:
        return await self._transition(enquiry_id, CANCELLED)

    async def _transition(self, enquiry_id: str, status: str) -> EnquiryRecord:
        current = await self.require(enquiry_id)
        if current.status == status:
            return current
        if current.status != OPEN and status == CLOSED:
            # a cancelled enquiry stays cancelled
            return current
        updated = await self.repository.update_status(enquiry_id, status)
        if updated is None:
            raise EnquiryNotFound(f"Enquiry not found: {enquiry_id}")
        logger.info("Enquiry %s moved from %s to %s", enquiry_id, current.status, status)
        return self._to_domain(updated)

    @staticmethod
    def _to_domain(model: EnquiryModel) -> EnquiryRecord:
        return EnquiryRecord(
            id=model.id,
            status=model.status,
            owner_id=model.owner_id,
            bidding_closes_at=model.bidding_closes_at,
            top_n=model.top_n,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
