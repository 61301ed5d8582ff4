"""Token Ledger Domain Entity

Holds the token balance of one account. Each account has at most one ledger,
created lazily on first access. The balance is a cache of the sum of the
account's TokenTransactions and must never go negative.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, DateTime, String
from src.domain.base import BaseModel, BigIntegerId, TokenAmount, utc_now


class TokenLedger(BaseModel, table=True):
    """
    Token Ledger - Balance cache for one account

    Domain Rules:
    - One ledger per account (account_id is unique)
    - Balance must be non-negative
    - Balance changes only together with an appended TokenTransaction
    - balance == sum(transaction.amount) for the account
    """

    __tablename__ = "token_ledgers"
    __table_args__ = (
        CheckConstraint('balance >= 0', name='token_balance_non_negative'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique ledger identifier (auto-increment)"
    )

    account_id: str = Field(
        index=True,
        unique=True,
        description="Account ID (unique - one ledger per account)"
    )

    wallet_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
        description="External wallet address associated with the account"
    )

    balance: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(TokenAmount(), nullable=False, default=0),
        description="Current token balance (must be >= 0, precision: 18,6)"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Ledger creation timestamp"
    )

    last_updated: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Timestamp of the last balance mutation"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 1,
                "account_id": "acct_alice",
                "wallet_address": "0x1234567890abcdef1234567890abcdef12345678",
                "balance": "750.000000",
                "created_at": "2024-01-01T00:00:00Z",
                "last_updated": "2024-01-02T00:00:00Z"
            }
        }


def recompute_balance(transactions: Iterable) -> Decimal:
    """Balance implied by a transaction history (the ground truth)."""
    return sum((Decimal(t.amount) for t in transactions), Decimal("0"))
