import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.repositories.account_directory import AccountIdentityDTO
from src.app.services.account_lock import AccountLockManager


@pytest.fixture
def mock_uow():
    """Mock unit of work"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock()
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def locks():
    """Real lock manager; it has no I/O"""
    return AccountLockManager(timeout=1.0)


@pytest.fixture
def mock_account_directory():
    """Directory that knows acct_alice and acct_bob"""
    identities = {
        "acct_alice": AccountIdentityDTO(display_name="Alice", wallet_address="0xalice"),
        "acct_bob": AccountIdentityDTO(display_name="Bob", wallet_address=None),
    }
    directory = MagicMock()
    directory.account_exists = AsyncMock(side_effect=lambda account_id: account_id in identities)
    directory.get_account_identity = AsyncMock(side_effect=lambda account_id: identities.get(account_id))
    directory.update_wallet_address = AsyncMock()
    return directory


@pytest.fixture
def mock_ledger_repo():
    """Mock token ledger repository"""
    return MagicMock()


@pytest.fixture
def mock_transaction_repo():
    """Mock token transaction repository; create() assigns ids in order"""
    repo = MagicMock()
    counter = {"next_id": 1}

    async def _create(transaction):
        transaction.id = counter["next_id"]
        counter["next_id"] += 1
        return transaction

    repo.create = AsyncMock(side_effect=_create)
    repo.get_by_idempotency_key = AsyncMock(return_value=None)
    repo.get_history = AsyncMock(return_value=[])
    return repo
