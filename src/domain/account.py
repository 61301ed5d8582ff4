"""Account Domain Entity

Minimal user record backing the Account Directory. The ledger only needs to
know whether an account exists and how to label it as a counterparty.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import DateTime, String
from src.domain.base import BaseModel, utc_now


class Account(BaseModel, table=True):
    """
    Account - Directory entry for a platform user

    Domain Rules:
    - id is an opaque identifier shared with the ledger (token_ledgers.account_id)
    - wallet_address is informational, never validated on-chain
    """

    __tablename__ = "accounts"

    id: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Opaque account identifier"
    )

    display_name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Name shown to counterparties"
    )

    email: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True, unique=True),
        description="Login email"
    )

    wallet_address: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
        description="Last known external wallet address"
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Account creation timestamp"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": "acct_alice",
                "display_name": "Alice",
                "email": "alice@example.com",
                "wallet_address": "0x1234567890abcdef1234567890abcdef12345678",
                "created_at": "2024-01-01T00:00:00Z"
            }
        }
