"""Account Directory Interface

The ledger's view of the user store: existence checks and the identity used
to annotate transfer counterparties.
"""

from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel


class AccountIdentityDTO(BaseModel):
    display_name: str
    wallet_address: Optional[str] = None


class AccountDirectory(ABC):

    @abstractmethod
    async def account_exists(self, account_id: str) -> bool:
        pass

    @abstractmethod
    async def get_account_identity(self, account_id: str) -> Optional[AccountIdentityDTO]:
        """Identity of the account, or None when it does not exist"""
        pass

    @abstractmethod
    async def update_wallet_address(self, account_id: str, wallet_address: str) -> None:
        """Remember the last wallet address seen for the account"""
        pass
