"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.core.config import Settings, get_settings
from credit_auction.core.locks import AuctionLocks
from credit_auction.infrastructure.database.session import get_engine
from credit_auction.modules.auction import AuctionCoordinator, CancellationHook, resolve_cancellation_hook
from credit_auction.modules.wallets import WalletService


@dataclass(slots=True)
class ApplicationContainer:
    """Process-wide state shared by every request: settings, lock registries, cancellation policy."""

    settings: Settings
    locks: AuctionLocks = field(init=False)
    cancellation_hook: CancellationHook = field(init=False)

    def __post_init__(self) -> None:
        self.locks = AuctionLocks.create(self.settings.auction.lock_timeout_seconds)
        self.cancellation_hook = resolve_cancellation_hook(self.settings.auction.cancellation_policy)

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    def wallet_service(self, session: AsyncSession) -> WalletService:
        return WalletService.with_session(
            session,
            locks=self.locks.wallets,
            signup_bonus=self.settings.credits.signup_bonus,
        )

    def coordinator(self, session: AsyncSession) -> AuctionCoordinator:
        return AuctionCoordinator.with_session(
            session,
            locks=self.locks,
            cancellation_hook=self.cancellation_hook,
            top_n=self.settings.auction.top_n,
            signup_bonus=self.settings.credits.signup_bonus,
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer(settings=get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
