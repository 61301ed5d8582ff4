"""Token Transaction Repository Interface

Defines the contract for token transaction persistence operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional, Tuple
from src.domain.token_transaction import TokenTransaction


class TokenTransactionRepository(ABC):
    """
    Repository interface for TokenTransaction persistence

    Transactions are immutable and append-only; there is no update or delete.
    """

    @abstractmethod
    async def create(self, transaction: TokenTransaction) -> TokenTransaction:
        """
        Append a new transaction

        Raises:
            IntegrityError: If idempotency_key already exists
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[TokenTransaction]:
        """Retrieve transaction by idempotency key"""
        pass

    @abstractmethod
    async def get_by_transfer_id(self, transfer_id: str) -> List[TokenTransaction]:
        """Retrieve both legs of a transfer"""
        pass

    @abstractmethod
    async def get_history(self, account_id: str) -> List[TokenTransaction]:
        """
        Retrieve the full history of an account in chronological order

        Args:
            account_id: Account identifier

        Returns:
            Transactions ordered by insertion (oldest first)
        """
        pass

    @abstractmethod
    async def get_by_account_id(
        self, account_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[TokenTransaction], int]:
        """
        Retrieve a page of an account's history, most recent first

        Returns:
            Tuple of (transactions, total count)
        """
        pass

    @abstractmethod
    async def get_transaction_sum_by_ledger(self, ledger_id: int) -> Decimal:
        """Sum of all transaction amounts of a ledger (0 when empty)"""
        pass
