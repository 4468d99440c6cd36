"""In-process keyed locks with bounded waits.

Every wallet and every enquiry gets its own ``asyncio.Lock``; acquisition is
bounded by a timeout so a stuck holder surfaces as ``AuctionBusy`` instead of a
hung request. Entries are dropped as soon as nobody holds or waits on them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from credit_auction.modules.common.exceptions import AuctionBusy

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedLocks:
    def __init__(self, namespace: str, timeout: float = 5.0) -> None:
        self.namespace = namespace
        self.timeout = timeout
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def hold(self, key: str, timeout: float | None = None) -> AsyncIterator[None]:
        wait = self.timeout if timeout is None else timeout
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _LockEntry()
        entry.users += 1
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout=wait)
            except asyncio.TimeoutError:
                logger.warning("Timed out after %.2fs waiting for %s lock %s", wait, self.namespace, key)
                raise AuctionBusy(f"{self.namespace}:{key}", wait) from None
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]


@dataclass(slots=True)
class AuctionLocks:
    """Lock registries shared by every request handled in this process."""

    enquiries: KeyedLocks
    wallets: KeyedLocks

    @classmethod
    def create(cls, timeout: float) -> "AuctionLocks":
        return cls(
            enquiries=KeyedLocks("enquiry", timeout),
            wallets=KeyedLocks("wallet", timeout),
        )


__all__ = ["AuctionLocks", "KeyedLocks"]
