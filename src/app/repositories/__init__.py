from .token_ledger_repository import LedgerTotalsDTO, TokenLedgerRepository
from .token_transaction_repository import TokenTransactionRepository
from .account_directory import AccountDirectory, AccountIdentityDTO

__all__ = [
    "LedgerTotalsDTO",
    "TokenLedgerRepository",
    "TokenTransactionRepository",
    "AccountDirectory",
    "AccountIdentityDTO",
]
