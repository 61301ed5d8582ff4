"""SQLAlchemy implementation of TokenTransactionRepository

Provides persistence for TokenTransaction entities with idempotency enforcement
via unique constraint on idempotency_key.
"""

from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import func, type_coerce
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.domain.base import TokenAmount
from src.domain.token_transaction import TokenTransaction


class SqlAlchemyTokenTransactionRepository(TokenTransactionRepository):
    """
    SQLAlchemy implementation of TokenTransactionRepository

    Ids are assigned in insertion order, so ordering by id gives the exact
    append order even when two rows share a created_at timestamp.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transaction: TokenTransaction) -> TokenTransaction:
        """
        Append a new token transaction

        Raises:
            IntegrityError: If idempotency_key already exists (duplicate attempt)
        """
        self.session.add(transaction)
        await self.session.flush()
        await self.session.refresh(transaction)
        return transaction

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[TokenTransaction]:
        stmt = select(TokenTransaction).where(
            TokenTransaction.idempotency_key == idempotency_key
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_transfer_id(self, transfer_id: str) -> List[TokenTransaction]:
        stmt = (
            select(TokenTransaction)
            .where(TokenTransaction.transfer_id == transfer_id)
            .order_by(TokenTransaction.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_history(self, account_id: str) -> List[TokenTransaction]:
        stmt = (
            select(TokenTransaction)
            .where(TokenTransaction.account_id == account_id)
            .order_by(TokenTransaction.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_account_id(
        self, account_id: str, limit: int = 20, offset: int = 0
    ) -> Tuple[List[TokenTransaction], int]:
        """
        Retrieve transactions for an account with pagination

        Args:
            account_id: Account identifier
            limit: Maximum number of transactions to return
            offset: Number of transactions to skip

        Returns:
            Tuple of (list of TokenTransaction, total count)
        """
        count_stmt = select(func.count()).select_from(TokenTransaction).where(
            TokenTransaction.account_id == account_id
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar()

        # Most recent first
        stmt = (
            select(TokenTransaction)
            .where(TokenTransaction.account_id == account_id)
            .order_by(TokenTransaction.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        transactions = list(result.scalars().all())

        return transactions, total

    async def get_transaction_sum_by_ledger(self, ledger_id: int) -> Decimal:
        stmt = select(
            type_coerce(func.coalesce(func.sum(TokenTransaction.amount), 0), TokenAmount())
        ).where(TokenTransaction.ledger_id == ledger_id)
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar()))
