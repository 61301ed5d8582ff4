"""SQLAlchemy implementation of AccountDirectory

Reads the accounts table owned by the user service.
"""

from typing import Optional
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.account_directory import AccountDirectory, AccountIdentityDTO
from src.domain.account import Account


class SqlAlchemyAccountDirectory(AccountDirectory):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, account_id: str) -> Optional[Account]:
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def account_exists(self, account_id: str) -> bool:
        return await self._get(account_id) is not None

    async def get_account_identity(self, account_id: str) -> Optional[AccountIdentityDTO]:
        account = await self._get(account_id)
        if account is None:
            return None
        return AccountIdentityDTO(
            display_name=account.display_name,
            wallet_address=account.wallet_address,
        )

    async def update_wallet_address(self, account_id: str, wallet_address: str) -> None:
        """Store the wallet address on the account profile (flushed, not committed)"""
        account = await self._get(account_id)
        if account:
            account.wallet_address = wallet_address
            self.session.add(account)
            await self.session.flush()
