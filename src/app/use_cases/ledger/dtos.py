"""Data Transfer Objects for Ledger Use Cases

Command DTOs are plain Pydantic models. Response DTOs serialize with camelCase
aliases, which is the wire shape the PRISM front-end consumes.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from src.domain.token_transaction import TransactionType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreditCommandDTO(BaseModel):
    """
    Command DTO for crediting tokens

    Used as input to CreditTokens use case. The amount is validated by the
    use case so that bad amounts come back as INVALID_AMOUNT.
    """

    account_id: str = Field(
        ...,
        description="Account to credit"
    )

    amount: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Token amount to credit (must be > 0)"
    )

    description: str = Field(
        default="",
        description="Free-text annotation stored on the transaction"
    )

    kind: TransactionType = Field(
        default=TransactionType.AIRDROP,
        description="Credit kind (airdrop, purchase, reward, payment)"
    )

    wallet_address: Optional[str] = Field(
        default=None,
        description="Wallet address to associate with the account"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Optional key making retries of the same credit safe"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "account_id": "acct_alice",
                "amount": "100",
                "description": "Initial airdrop tokens",
                "kind": "airdrop",
                "wallet_address": "0x1234567890abcdef1234567890abcdef12345678",
            }
        }


class TransferCommandDTO(BaseModel):
    """
    Command DTO for transferring tokens between two accounts

    Used as input to TransferTokens use case.
    """

    sender_id: str = Field(
        ...,
        description="Account debited"
    )

    recipient_id: str = Field(
        ...,
        description="Account credited"
    )

    amount: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Token amount to move (must be > 0)"
    )

    description: Optional[str] = Field(
        default=None,
        description="Free-text annotation stored on both legs"
    )

    idempotency_key: Optional[str] = Field(
        default=None,
        description="Optional key making retries of the same transfer safe"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "sender_id": "acct_alice",
                "recipient_id": "acct_bob",
                "amount": "250",
                "description": "Lunch",
            }
        }


class TransactionDTO(CamelModel):
    """One ledger history entry as seen by callers"""

    id: int
    type: str
    amount: Decimal
    balance_after: Decimal
    timestamp: datetime
    description: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    counterparty_id: Optional[str] = None
    counterparty_name: Optional[str] = None
    transfer_id: Optional[str] = None


class LedgerDTO(CamelModel):
    """
    Response DTO for an account ledger

    Returned by GetLedger and embedded in CreditResponseDTO.
    """

    account_id: str
    wallet_address: Optional[str] = None
    balance: Decimal
    transactions: List[TransactionDTO]
    last_updated: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "accountId": "acct_alice",
                "walletAddress": None,
                "balance": "100.000000",
                "transactions": [
                    {
                        "id": 1,
                        "type": "airdrop",
                        "amount": "100.000000",
                        "balanceAfter": "100.000000",
                        "timestamp": "2024-01-01T00:00:00Z",
                        "description": "Initial airdrop tokens",
                    }
                ],
                "lastUpdated": "2024-01-01T00:00:00Z",
            }
        }
    )


class CreditResponseDTO(CamelModel):
    """Updated ledger plus the transaction a credit appended"""

    ledger: LedgerDTO
    transaction: TransactionDTO


class TransferResponseDTO(CamelModel):
    """
    Response DTO for a completed transfer

    transaction is the sender's transfer_out leg, recipient_transaction the
    recipient's transfer_in leg.
    """

    transfer_id: str
    sender_balance: Decimal
    recipient_balance: Decimal
    transaction: TransactionDTO
    recipient_transaction: TransactionDTO


class ListTransactionsResponseDTO(CamelModel):
    """Paginated history, most recent first"""

    account_id: str
    transactions: List[TransactionDTO]
    total: int
    limit: int
    offset: int


class LedgerDiscrepancyDTO(BaseModel):
    """A ledger whose cached balance disagrees with its transaction sum"""

    account_id: str
    ledger_id: int
    ledger_balance: Decimal
    calculated_balance: Decimal
    discrepancy: Decimal
    repaired: bool = False


class ReconciliationResultDTO(BaseModel):
    """Outcome of one reconciliation run"""

    total_ledgers_checked: int
    discrepancies_found: int
    discrepancies: List[LedgerDiscrepancyDTO]
    repaired_count: int = 0
    reconciliation_time: datetime
    execution_time_ms: int
