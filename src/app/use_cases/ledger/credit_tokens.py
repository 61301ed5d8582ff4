"""CreditTokens Use Case

Credits tokens to an account (airdrop, purchase, reward, payment). The ledger
is created on first use and every credit appends exactly one transaction.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from libs.result import Result, Return, Error
from src.app.repositories.account_directory import AccountDirectory
from src.app.repositories.token_ledger_repository import TokenLedgerRepository
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.app.services.account_lock import AccountLockManager, LockTimeoutError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.token_transaction import CREDIT_TYPES, TokenTransaction
from .dtos import CreditCommandDTO, CreditResponseDTO
from .errors import (
    IDEMPOTENCY_CONFLICT,
    INVALID_TRANSACTION_TYPE,
    account_not_found,
    persistence_failure,
    validate_amount,
)
from .ledger_access import load_or_create_ledger
from .mappers import to_ledger_dto, to_transaction_dto

logger = logging.getLogger(__name__)


class CreditTokens:
    """
    Use Case: Credit tokens to an account

    Business Rules:
    1. Amount must be positive and finite (INVALID_AMOUNT otherwise)
    2. Only credit kinds are accepted; transfer legs come from TransferTokens
    3. The account lock is held from the balance read until commit
    4. A supplied wallet address is stored on the ledger and on the account profile
    5. Idempotency: a repeated idempotency_key returns the original transaction

    Flow:
    1. Validate amount and kind
    2. Check the account exists
    3. Lock the account, replay if the idempotency key is known
    4. Load or create the ledger (SELECT FOR UPDATE)
    5. Append transaction, update balance, commit
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

    async def execute(self, command: CreditCommandDTO) -> Result[CreditResponseDTO]:
        """
        Execute token credit

        Args:
            command: CreditCommandDTO with account_id, amount, description, kind

        Returns:
            Result[CreditResponseDTO]: Updated ledger and new transaction, or error
        """
        amount_error = validate_amount(command.amount)
        if amount_error:
            return Return.err(amount_error)

        if command.kind not in CREDIT_TYPES:
            return Return.err(
                Error(
                    code=INVALID_TRANSACTION_TYPE,
                    message=f"Cannot credit tokens as '{command.kind.value}'",
                    reason=f"allowed: {sorted(t.value for t in CREDIT_TYPES)}",
                )
            )

        try:
            if not await self.account_directory.account_exists(command.account_id):
                return Return.err(account_not_found(command.account_id))

            async with self.locks.hold(command.account_id):
                try:
                    result = await self._credit(command, Decimal(command.amount))
                except Exception:
                    await self.uow.rollback()
                    raise
                if result.is_err():
                    await self.uow.rollback()
                return result

        except LockTimeoutError as e:
            return Return.err(persistence_failure("Account is busy, try again", e))
        except Exception as e:
            logger.error(f"Credit of {command.amount} to account {command.account_id} failed: {e}")
            return Return.err(persistence_failure("Failed to credit tokens", e))

    async def _credit(self, command: CreditCommandDTO, amount: Decimal) -> Result[CreditResponseDTO]:
        if command.idempotency_key:
            existing = await self.transaction_repo.get_by_idempotency_key(command.idempotency_key)
            if existing:
                return await self._replay(command, existing)

        ledger = await load_or_create_ledger(self.ledger_repo, command.account_id, for_update=True)

        balance_before = ledger.balance
        balance_after = balance_before + amount

        transaction = TokenTransaction(
            account_id=command.account_id,
            ledger_id=ledger.id,
            transaction_type=command.kind,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            description=command.description,
            to_address=command.wallet_address,
            idempotency_key=command.idempotency_key,
        )
        created_transaction = await self.transaction_repo.create(transaction)

        await self.ledger_repo.update_balance(
            ledger.id, balance_after, wallet_address=command.wallet_address
        )

        if command.wallet_address:
            identity = await self.account_directory.get_account_identity(command.account_id)
            if identity is not None and identity.wallet_address != command.wallet_address:
                await self.account_directory.update_wallet_address(
                    command.account_id, command.wallet_address
                )

        await self.uow.commit()

        logger.info(
            f"Credited {amount} ({command.kind.value}) to account {command.account_id}: "
            f"balance {balance_before} -> {balance_after}"
        )

        history = await self.transaction_repo.get_history(command.account_id)
        return Return.ok(
            CreditResponseDTO(
                ledger=to_ledger_dto(
                    ledger,
                    history,
                    balance=balance_after,
                    last_updated=datetime.now(timezone.utc),
                ),
                transaction=to_transaction_dto(created_transaction),
            )
        )

    async def _replay(self, command: CreditCommandDTO, existing: TokenTransaction) -> Result[CreditResponseDTO]:
        if existing.account_id != command.account_id or existing.transaction_type not in CREDIT_TYPES:
            return Return.err(
                Error(
                    code=IDEMPOTENCY_CONFLICT,
                    message="Idempotency key already used for a different operation",
                    reason=f"key={command.idempotency_key}",
                )
            )

        ledger = await self.ledger_repo.get_by_account_id(command.account_id)
        history = await self.transaction_repo.get_history(command.account_id)
        logger.info(f"Replayed credit {existing.id} for idempotency key {command.idempotency_key}")
        return Return.ok(
            CreditResponseDTO(
                ledger=to_ledger_dto(ledger, history),
                transaction=to_transaction_dto(existing),
            )
        )
