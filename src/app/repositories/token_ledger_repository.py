"""Token Ledger Repository Interface

Defines the contract for token ledger persistence operations.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel
from src.domain.token_ledger import TokenLedger


class LedgerTotalsDTO(BaseModel):
    """A ledger balance and its transaction sum, read together"""
    ledger_id: int
    account_id: str
    balance: Decimal
    transaction_sum: Decimal


class TokenLedgerRepository(ABC):
    """
    Repository interface for TokenLedger persistence

    Mutating callers read ledgers with for_update=True (SELECT FOR UPDATE)
    while holding the account lock.
    """

    @abstractmethod
    async def get_by_account_id(self, account_id: str, for_update: bool = False) -> Optional[TokenLedger]:
        """
        Retrieve ledger by account ID

        Args:
            account_id: Account identifier
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            TokenLedger if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, ledger: TokenLedger) -> TokenLedger:
        """
        Create a new token ledger

        Raises:
            IntegrityError: If a ledger already exists for the account
        """
        pass

    @abstractmethod
    async def update_balance(
        self,
        ledger_id: int,
        new_balance: Decimal,
        wallet_address: Optional[str] = None,
    ) -> None:
        """
        Update ledger balance (and wallet address when given)

        Args:
            ledger_id: Ledger ID
            new_balance: New balance value
            wallet_address: Optional new wallet address
        """
        pass

    @abstractmethod
    async def get_totals(self) -> List[LedgerTotalsDTO]:
        """
        Every ledger balance next to the sum of its transaction amounts

        Both values of a row come from one statement, so a write committing
        during the scan cannot show up as a mismatch.
        """
        pass
