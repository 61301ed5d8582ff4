"""Request and response schemas for the Tokens API

Bodies use camelCase on the wire. Amounts are not range-checked here: the
use cases own that rule and report it as INVALID_AMOUNT.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from src.app.use_cases.ledger.dtos import TransactionDTO
from src.domain.token_transaction import TransactionType


class _CamelSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AirdropRequestSchema(_CamelSchema):
    """
    Request schema for the airdrop

    Used for POST /tokens/{account_id}/airdrop endpoint.
    """

    wallet_address: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Wallet address to associate with the account"
    )

    @field_validator('wallet_address')
    @classmethod
    def strip_wallet_address(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None


class CreditRequestSchema(_CamelSchema):
    """
    Request schema for crediting tokens

    Used for POST /tokens/{account_id}/credit endpoint.
    """

    amount: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Token amount to credit (must be > 0)"
    )

    description: str = Field(
        default="",
        max_length=500,
        description="Free-text annotation"
    )

    kind: TransactionType = Field(
        default=TransactionType.PURCHASE,
        description="Credit kind (airdrop, purchase, reward, payment)"
    )

    wallet_address: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Wallet address to associate with the account"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Unique key for idempotent operations"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "amount": "500",
                "description": "Token purchase",
                "kind": "purchase",
                "idempotencyKey": "order_123",
            }
        },
    )


class TransferRequestSchema(_CamelSchema):
    """
    Request schema for transferring tokens

    Used for POST /tokens/{account_id}/transfer endpoint; the path account
    is the sender.
    """

    recipient_id: str = Field(
        ...,
        min_length=1,
        description="Recipient account identifier (required, non-empty)"
    )

    amount: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Token amount to transfer (must be > 0)"
    )

    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free-text annotation stored on both legs"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Unique key for idempotent operations"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "recipientId": "acct_bob",
                "amount": "250",
                "description": "Lunch",
            }
        },
    )


class AirdropResponseSchema(_CamelSchema):
    transaction: TransactionDTO
    current_balance: Decimal


class TransferResponseSchema(_CamelSchema):
    current_balance: Decimal
    recipient_balance: Decimal
    transaction: TransactionDTO
    transfer_id: str
