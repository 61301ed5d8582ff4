"""Token Transaction Domain Entity

Immutable append-only history of every balance change of a TokenLedger.
Insertion order (auto-increment id) is chronological order.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import DateTime, ForeignKey, String
from src.domain.base import BaseModel, BigIntegerId, TokenAmount, utc_now


class TransactionType(str, Enum):
    """Token transaction types"""
    AIRDROP = "airdrop"            # One-way issue with no debit elsewhere
    TRANSFER_IN = "transfer_in"    # Inbound leg of a transfer
    TRANSFER_OUT = "transfer_out"  # Outbound leg of a transfer (negative)
    PURCHASE = "purchase"
    REWARD = "reward"
    PAYMENT = "payment"


CREDIT_TYPES = frozenset({
    TransactionType.AIRDROP,
    TransactionType.PURCHASE,
    TransactionType.REWARD,
    TransactionType.PAYMENT,
})


class TokenTransaction(BaseModel, table=True):
    """
    Token Transaction - Immutable record of one balance change

    Domain Rules:
    - Never updated or deleted once appended
    - amount is signed: transfer_out is negative, everything else positive
    - Both legs of a transfer share a transfer_id
    - idempotency_key, when present, is unique
    """

    __tablename__ = "token_transactions"
    __table_args__ = (
        Index('ix_token_transactions_account_created', 'account_id', 'created_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerId, primary_key=True, autoincrement=True),
        description="Unique transaction identifier (auto-increment)"
    )

    account_id: str = Field(
        index=True,
        description="Account owning the ledger this record belongs to"
    )

    ledger_id: int = Field(
        sa_column=Column(BigIntegerId, ForeignKey("token_ledgers.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to TokenLedger"
    )

    transaction_type: TransactionType = Field(
        description="Type of transaction"
    )

    amount: Decimal = Field(
        sa_column=Column(TokenAmount(), nullable=False),
        description="Signed token amount (precision: 18,6)"
    )

    balance_before: Decimal = Field(
        sa_column=Column(TokenAmount(), nullable=False),
        description="Ledger balance before this record"
    )

    balance_after: Decimal = Field(
        sa_column=Column(TokenAmount(), nullable=False),
        description="Ledger balance after this record"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Free-text annotation"
    )

    from_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
        description="Source wallet address, when known"
    )

    to_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
        description="Destination wallet address, when known"
    )

    counterparty_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="Account on the other side of a transfer"
    )

    counterparty_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Display name of the counterparty at transfer time"
    )

    transfer_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(36), nullable=True, index=True),
        description="Shared by both legs of one transfer"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, unique=True),
        description="Client supplied key for idempotent credits and transfers"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Transaction timestamp (immutable)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": 7,
                "account_id": "acct_alice",
                "ledger_id": 1,
                "transaction_type": "transfer_out",
                "amount": "-250.000000",
                "balance_before": "1000.000000",
                "balance_after": "750.000000",
                "description": "Lunch",
                "counterparty_id": "acct_bob",
                "counterparty_name": "Bob",
                "transfer_id": "5f1c1a52-3a55-4c7e-9f0b-2b8a2f7f4a10",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }
