from .base import BaseModel, generate_uuid
from .account import Account
from .token_ledger import TokenLedger, recompute_balance
from .token_transaction import TokenTransaction, TransactionType, CREDIT_TYPES

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Account",
    "TokenLedger",
    "recompute_balance",
    "TokenTransaction",
    "TransactionType",
    "CREDIT_TYPES",
]
