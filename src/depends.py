from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.app.services.account_lock import AccountLockManager

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# One lock table per process, shared by every request
ledger_locks = AccountLockManager(timeout=ApplicationConfig.LEDGER_LOCK_TIMEOUT_SECONDS)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


def get_ledger_locks() -> AccountLockManager:
    return ledger_locks
