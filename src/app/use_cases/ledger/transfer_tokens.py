"""TransferTokens Use Case

Moves tokens from one account to another. Both ledgers and both transaction
legs are written in a single unit of work: the transfer is committed whole or
rolled back whole.
"""

import logging
from decimal import Decimal
from typing import Dict
from libs.result import Result, Return, Error
from src.app.repositories.account_directory import AccountDirectory, AccountIdentityDTO
from src.app.repositories.token_ledger_repository import TokenLedgerRepository
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.app.services.account_lock import AccountLockManager, LockTimeoutError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import generate_uuid
from src.domain.token_ledger import TokenLedger
from src.domain.token_transaction import TokenTransaction, TransactionType
from .dtos import TransferCommandDTO, TransferResponseDTO
from .errors import (
    IDEMPOTENCY_CONFLICT,
    INSUFFICIENT_BALANCE,
    SAME_ACCOUNT,
    account_not_found,
    persistence_failure,
    validate_amount,
)
from .ledger_access import load_or_create_ledger
from .mappers import to_transaction_dto

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_DESCRIPTION = "Token transfer"


class TransferTokens:
    """
    Use Case: Transfer tokens between two accounts

    Business Rules:
    1. Amount must be positive and finite (INVALID_AMOUNT)
    2. Sender and recipient must differ (SAME_ACCOUNT)
    3. Sender, then recipient, must exist (ACCOUNT_NOT_FOUND)
    4. Sender balance >= amount, checked while both locks are held (INSUFFICIENT_BALANCE)
    5. Debit, credit and both legs commit together or not at all
    6. Idempotency: a repeated idempotency_key returns the original transfer

    Flow:
    1. Validate input and resolve both identities
    2. Lock both accounts in sorted order
    3. Load or create both ledgers with SELECT FOR UPDATE (sorted order)
    4. Check balance, append transfer_out and transfer_in legs, update balances
    5. Commit once; any failure rolls back every write
    """

    def __init__(
        self,
        uow: UnitOfWork,
        locks: AccountLockManager,
        account_directory: AccountDirectory,
        ledger_repo: TokenLedgerRepository,
        transaction_repo: TokenTransactionRepository,
        default_description: str = DEFAULT_TRANSFER_DESCRIPTION,
    ):
        self.uow = uow
        self.locks = locks
        self.account_directory = account_directory
        self.ledger_repo = ledger_repo
        self.transaction_repo = transaction_repo
        self.default_description = default_description

    async def execute(self, command: TransferCommandDTO) -> Result[TransferResponseDTO]:
        """
        Execute token transfer

        Args:
            command: TransferCommandDTO with sender_id, recipient_id, amount

        Returns:
            Result[TransferResponseDTO]: Both balances and both legs, or error
        """
        amount_error = validate_amount(command.amount)
        if amount_error:
            return Return.err(amount_error)

        if command.sender_id == command.recipient_id:
            return Return.err(
                Error(
                    code=SAME_ACCOUNT,
                    message="Cannot transfer tokens to the same account",
                    reason=f"sender_id == recipient_id == {command.sender_id}",
                )
            )

        try:
            sender = await self.account_directory.get_account_identity(command.sender_id)
            if sender is None:
                return Return.err(account_not_found(command.sender_id, role="Sender"))

            recipient = await self.account_directory.get_account_identity(command.recipient_id)
            if recipient is None:
                return Return.err(account_not_found(command.recipient_id, role="Recipient"))

            async with self.locks.hold(command.sender_id, command.recipient_id):
                try:
                    result = await self._transfer(command, Decimal(command.amount), sender, recipient)
                except Exception:
                    await self.uow.rollback()
                    raise
                if result.is_err():
                    await self.uow.rollback()
                return result

        except LockTimeoutError as e:
            return Return.err(persistence_failure("Account is busy, try again", e))
        except Exception as e:
            logger.error(
                f"Transfer of {command.amount} from {command.sender_id} to "
                f"{command.recipient_id} failed and was rolled back: {e}"
            )
            return Return.err(persistence_failure("Transfer failed and was rolled back", e))

    async def _transfer(
        self,
        command: TransferCommandDTO,
        amount: Decimal,
        sender: AccountIdentityDTO,
        recipient: AccountIdentityDTO,
    ) -> Result[TransferResponseDTO]:
        if command.idempotency_key:
            existing = await self.transaction_repo.get_by_idempotency_key(command.idempotency_key)
            if existing:
                return await self._replay(command, existing)

        # Row locks follow the same order as the account locks
        ledgers: Dict[str, TokenLedger] = {}
        for account_id in sorted((command.sender_id, command.recipient_id)):
            ledgers[account_id] = await load_or_create_ledger(
                self.ledger_repo, account_id, for_update=True
            )
        sender_ledger = ledgers[command.sender_id]
        recipient_ledger = ledgers[command.recipient_id]

        if sender_ledger.balance < amount:
            logger.warning(
                f"Transfer rejected: account {command.sender_id} has {sender_ledger.balance}, "
                f"needs {amount}"
            )
            return Return.err(
                Error(
                    code=INSUFFICIENT_BALANCE,
                    message=f"Insufficient balance for transfer. Required: {amount}, Available: {sender_ledger.balance}",
                    reason=f"balance={sender_ledger.balance}, required={amount}",
                )
            )

        transfer_id = generate_uuid()
        description = command.description or self.default_description

        sender_before = sender_ledger.balance
        sender_after = sender_before - amount
        recipient_before = recipient_ledger.balance
        recipient_after = recipient_before + amount

        outbound = await self.transaction_repo.create(
            TokenTransaction(
                account_id=command.sender_id,
                ledger_id=sender_ledger.id,
                transaction_type=TransactionType.TRANSFER_OUT,
                amount=-amount,
                balance_before=sender_before,
                balance_after=sender_after,
                description=description,
                from_address=sender.wallet_address,
                to_address=recipient.wallet_address,
                counterparty_id=command.recipient_id,
                counterparty_name=recipient.display_name,
                transfer_id=transfer_id,
                idempotency_key=command.idempotency_key,
            )
        )
        await self.ledger_repo.update_balance(sender_ledger.id, sender_after)

        inbound = await self.transaction_repo.create(
            TokenTransaction(
                account_id=command.recipient_id,
                ledger_id=recipient_ledger.id,
                transaction_type=TransactionType.TRANSFER_IN,
                amount=amount,
                balance_before=recipient_before,
                balance_after=recipient_after,
                description=description,
                from_address=sender.wallet_address,
                to_address=recipient.wallet_address,
                counterparty_id=command.sender_id,
                counterparty_name=sender.display_name,
                transfer_id=transfer_id,
            )
        )
        await self.ledger_repo.update_balance(recipient_ledger.id, recipient_after)

        await self.uow.commit()

        logger.info(
            f"Transfer {transfer_id}: {amount} from {command.sender_id} "
            f"({sender_before} -> {sender_after}) to {command.recipient_id} "
            f"({recipient_before} -> {recipient_after})"
        )

        return Return.ok(
            TransferResponseDTO(
                transfer_id=transfer_id,
                sender_balance=sender_after,
                recipient_balance=recipient_after,
                transaction=to_transaction_dto(outbound),
                recipient_transaction=to_transaction_dto(inbound),
            )
        )

    async def _replay(self, command: TransferCommandDTO, existing: TokenTransaction) -> Result[TransferResponseDTO]:
        if (
            existing.account_id != command.sender_id
            or existing.counterparty_id != command.recipient_id
            or existing.transfer_id is None
        ):
            return Return.err(
                Error(
                    code=IDEMPOTENCY_CONFLICT,
                    message="Idempotency key already used for a different operation",
                    reason=f"key={command.idempotency_key}",
                )
            )

        legs = await self.transaction_repo.get_by_transfer_id(existing.transfer_id)
        inbound = next(leg for leg in legs if leg.account_id == command.recipient_id)
        logger.info(f"Replayed transfer {existing.transfer_id} for idempotency key {command.idempotency_key}")
        return Return.ok(
            TransferResponseDTO(
                transfer_id=existing.transfer_id,
                sender_balance=existing.balance_after,
                recipient_balance=inbound.balance_after,
                transaction=to_transaction_dto(existing),
                recipient_transaction=to_transaction_dto(inbound),
            )
        )
