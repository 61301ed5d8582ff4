import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
import src.domain  # noqa: F401
from src.depends import get_ledger_locks, get_session
from src.adapter.repositories import (
    SqlAlchemyAccountDirectory,
    SqlAlchemyTokenLedgerRepository,
    SqlAlchemyTokenTransactionRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.account_lock import AccountLockManager
from src.domain.account import Account


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    test_db_url = f"sqlite+aiosqlite:///{tmp_path / 'ledger_test.db'}"

    engine = create_async_engine(test_db_url, echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
def locks():
    return AccountLockManager(timeout=5.0)


@pytest_asyncio.fixture
async def accounts(db_session):
    """acct_alice and acct_bob exist in the directory"""
    db_session.add(Account(id="acct_alice", display_name="Alice", wallet_address="0xalice"))
    db_session.add(Account(id="acct_bob", display_name="Bob"))
    await db_session.commit()
    return ["acct_alice", "acct_bob"]


@pytest_asyncio.fixture
def build(locks):
    """Build a use case wired to SQLAlchemy adapters on the given session"""
    def _build(use_case_class, session, **kwargs):
        return use_case_class(
            SqlAlchemyUnitOfWork(session),
            locks,
            SqlAlchemyAccountDirectory(session),
            SqlAlchemyTokenLedgerRepository(session),
            SqlAlchemyTokenTransactionRepository(session),
            **kwargs,
        )
    return _build


@pytest_asyncio.fixture
async def client(db_session, locks):
    """Create test client with database session override"""
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_ledger_locks] = lambda: locks

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
