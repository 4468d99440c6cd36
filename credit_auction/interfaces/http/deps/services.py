"""Service providers bound to the request session and the shared container."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.core.container import ApplicationContainer, get_container
from credit_auction.modules.auction import AuctionCoordinator
from credit_auction.modules.catalog import CatalogService
from credit_auction.modules.enquiries import EnquiryService
from credit_auction.modules.wallets import WalletService

from .database import get_db_session


def get_wallet_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> WalletService:
    return container.wallet_service(db)


def get_coordinator(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> AuctionCoordinator:
    return container.coordinator(db)


def get_catalog_service(db: AsyncSession = Depends(get_db_session)) -> CatalogService:
    return CatalogService.with_session(db)


def get_enquiry_service(db: AsyncSession = Depends(get_db_session)) -> EnquiryService:
    return EnquiryService.with_session(db)


__all__ = [
    "get_catalog_service",
    "get_coordinator",
    "get_enquiry_service",
    "get_wallet_service",
]
