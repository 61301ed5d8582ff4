"""Get Ledger Use Case

Returns an account's token ledger with its full history, creating an empty
ledger on first access.
"""

import logging
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return
from src.app.repositories.account_directory import AccountDirectory
from src.app.repositories.token_ledger_repository import TokenLedgerRepository
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.app.services.account_lock import AccountLockManager, LockTimeoutError
from src.app.services.unit_of_work import UnitOfWork
from .dtos import LedgerDTO
from .errors import account_not_found, persistence_failure
from .ledger_access import load_or_create_ledger
from .mappers import to_ledger_dto

logger = logging.getLogger(__name__)


class GetLedger:
    """
    Get Ledger Use Case

    Business Rules:
    1. The account must exist in the Account Directory (checked first)
    2. A missing ledger is created with balance 0 and no history
    3. Reading an existing ledger has no side effects
    4. The balance shown is the one recorded by the newest history entry,
       so balance == sum(transactions) even while writers commit

    Errors:
        ACCOUNT_NOT_FOUND: Unknown account
        PERSISTENCE_FAILURE: Storage error or lock timeout
    """

    def __init__(
        self,
        uow: UnitOfWork,
        locks: AccountLockManager,
        account_directory: AccountDirectory,
        ledger_repo: TokenLedgerRepository,
        transaction_repo: TokenTransactionRepository,
    ):
        self.uow = uow
        self.locks = locks
        self.account_directory = account_directory
        self.ledger_repo = ledger_repo
        self.transaction_repo = transaction_repo

    async def execute(self, account_id: str) -> Result[LedgerDTO]:
        """
        Execute get ledger operation

        Args:
            account_id: The account identifier

        Returns:
            Result[LedgerDTO]: Ledger with chronological history or error
        """
        try:
            if not await self.account_directory.account_exists(account_id):
                return Return.err(account_not_found(account_id))

            ledger = await self.ledger_repo.get_by_account_id(account_id)
            if ledger is None:
                ledger = await self._create_ledger(account_id)

            # Balance comes from this read, not from the row above
            history = await self.transaction_repo.get_history(account_id)
            return Return.ok(to_ledger_dto(ledger, history))

        except LockTimeoutError as e:
            return Return.err(persistence_failure("Account is busy, try again", e))
        except Exception as e:
            logger.error(f"Failed to load ledger for account {account_id}: {e}")
            await self.uow.rollback()
            return Return.err(persistence_failure("Failed to load token ledger", e))

    async def _create_ledger(self, account_id: str):
        async with self.locks.hold(account_id):
            try:
                ledger = await load_or_create_ledger(self.ledger_repo, account_id)
                await self.uow.commit()
                return ledger
            except IntegrityError:
                # Another process created it first
                await self.uow.rollback()
                return await self.ledger_repo.get_by_account_id(account_id)
            except Exception:
                await self.uow.rollback()
                raise
