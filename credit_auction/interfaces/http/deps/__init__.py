"""Reusable FastAPI dependencies."""

from credit_auction.core.container import get_container
from credit_auction.core.security import get_current_admin, get_current_broker

from .database import get_db_session
from .services import get_catalog_service, get_coordinator, get_enquiry_service, get_wallet_service

__all__ = [
    "get_catalog_service",
    "get_container",
    "get_coordinator",
    "get_current_admin",
    "get_current_broker",
    "get_db_session",
    "get_enquiry_service",
    "get_wallet_service",
]
