"""SQLAlchemy implementation of TokenLedgerRepository

Provides persistence for TokenLedger entities with pessimistic locking support
to prevent race conditions during concurrent balance mutations.
"""

from typing import List, Optional
from decimal import Decimal
from datetime import datetime, timezone
from sqlalchemy import func, type_coerce
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.token_ledger_repository import LedgerTotalsDTO, TokenLedgerRepository
from src.domain.base import TokenAmount
from src.domain.token_ledger import TokenLedger
from src.domain.token_transaction import TokenTransaction


class SqlAlchemyTokenLedgerRepository(TokenLedgerRepository):
    """
    SQLAlchemy implementation of TokenLedgerRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE (ignored by SQLite)
    - Balance and last_updated written together
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_account_id(self, account_id: str, for_update: bool = False) -> Optional[TokenLedger]:
        """
        Retrieve ledger by account ID with optional row-level locking

        Args:
            account_id: Account identifier
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            TokenLedger if found, None otherwise
        """
        stmt = select(TokenLedger).where(TokenLedger.account_id == account_id)

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, ledger_id: int) -> Optional[TokenLedger]:
        stmt = select(TokenLedger).where(TokenLedger.id == ledger_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, ledger: TokenLedger) -> TokenLedger:
        """
        Create a new token ledger

        Returns:
            Created TokenLedger with generated ID
        """
        self.session.add(ledger)
        await self.session.flush()
        await self.session.refresh(ledger)
        return ledger

    async def update_balance(
        self,
        ledger_id: int,
        new_balance: Decimal,
        wallet_address: Optional[str] = None,
    ) -> None:
        """
        Update ledger balance and last_updated timestamp

        Note:
            Should be called within a transaction with the account lock held
        """
        ledger = await self.get_by_id(ledger_id)
        if ledger:
            ledger.balance = new_balance
            if wallet_address:
                ledger.wallet_address = wallet_address
            ledger.last_updated = datetime.now(timezone.utc)
            self.session.add(ledger)
            await self.session.flush()

    async def get_totals(self) -> List[LedgerTotalsDTO]:
        transaction_sum = (
            select(type_coerce(func.coalesce(func.sum(TokenTransaction.amount), 0), TokenAmount()))
            .where(TokenTransaction.ledger_id == TokenLedger.id)
            .correlate(TokenLedger)
            .scalar_subquery()
        )
        stmt = select(
            TokenLedger.id,
            TokenLedger.account_id,
            TokenLedger.balance,
            transaction_sum.label("transaction_sum"),
        ).order_by(TokenLedger.id)

        result = await self.session.execute(stmt)
        return [
            LedgerTotalsDTO(
                ledger_id=row.id,
                account_id=row.account_id,
                balance=row.balance,
                transaction_sum=Decimal(str(row.transaction_sum)),
            )
            for row in result.all()
        ]
