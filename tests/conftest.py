"""
Shared fixtures for the credit auction test suite.

Every test gets its own SQLite file so sessions opened by concurrent tasks see
real transaction isolation, plus a fresh set of lock registries.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from credit_auction.core.config import get_settings
from credit_auction.core.container import ApplicationContainer, get_container
from credit_auction.core.locks import AuctionLocks
from credit_auction.core.security import create_access_token
from credit_auction.infrastructure.database import build_engine, init_db
from credit_auction.interfaces.http.deps import get_db_session
from credit_auction.modules.auction import AuctionCoordinator, RetainActiveBids
from credit_auction.modules.bids import BidService
from credit_auction.modules.enquiries import EnquiryService
from credit_auction.modules.wallets import WalletService


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'credit_auction.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks():
    return AuctionLocks.create(timeout=2.0)


@pytest.fixture
def wallets(session, locks):
    return WalletService.with_session(session, locks=locks.wallets, signup_bonus=0)


@pytest.fixture
def bids(session):
    return BidService.with_session(session)


@pytest.fixture
def enquiries(session):
    return EnquiryService.with_session(session)


@pytest.fixture
def make_coordinator(locks):
    def factory(session, *, top_n=4, hook=None, coordinator_locks=None):
        return AuctionCoordinator.with_session(
            session,
            locks=coordinator_locks or locks,
            cancellation_hook=hook or RetainActiveBids(),
            top_n=top_n,
            signup_bonus=0,
        )

    return factory


@pytest.fixture
def coordinator(session, make_coordinator):
    return make_coordinator(session)


@pytest.fixture
def fund(wallets):
    async def _fund(broker_id: str, amount: int):
        return await wallets.credit(broker_id, amount, description="Test funding")

    return _fund


@pytest.fixture
def open_enquiry(enquiries, session):
    async def _open(enquiry_id: str = "enq-1", **kwargs):
        enquiry = await enquiries.register(enquiry_id=enquiry_id, **kwargs)
        await session.commit()
        return enquiry

    return _open


@pytest_asyncio.fixture
async def client(session_factory):
    from credit_auction.main import create_app

    app = create_app()
    container = ApplicationContainer(settings=get_settings())

    async def override_db_session():
        async with session_factory() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_container] = lambda: container

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def auth_headers():
    def _headers(broker_id: str, role: str = "broker") -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(broker_id, role=role)}"}

    return _headers
