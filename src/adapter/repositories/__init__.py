from .token_ledger_repository import SqlAlchemyTokenLedgerRepository
from .token_transaction_repository import SqlAlchemyTokenTransactionRepository
from .account_directory import SqlAlchemyAccountDirectory

__all__ = [
    "SqlAlchemyTokenLedgerRepository",
    "SqlAlchemyTokenTransactionRepository",
    "SqlAlchemyAccountDirectory",
]
