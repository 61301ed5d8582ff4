"""Entity to DTO conversion shared by the ledger use cases"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional
from src.domain.token_ledger import TokenLedger
from src.domain.token_transaction import TokenTransaction
from .dtos import LedgerDTO, TransactionDTO


def to_transaction_dto(transaction: TokenTransaction) -> TransactionDTO:
    transaction_type = transaction.transaction_type
    return TransactionDTO(
        id=transaction.id,
        type=transaction_type.value if hasattr(transaction_type, "value") else transaction_type,
        amount=transaction.amount,
        balance_after=transaction.balance_after,
        timestamp=transaction.created_at,
        description=transaction.description,
        from_address=transaction.from_address,
        to_address=transaction.to_address,
        counterparty_id=transaction.counterparty_id,
        counterparty_name=transaction.counterparty_name,
        transfer_id=transaction.transfer_id,
    )


def to_ledger_dto(
    ledger: TokenLedger,
    history: Iterable[TokenTransaction],
    balance: Optional[Decimal] = None,
    last_updated: Optional[datetime] = None,
) -> LedgerDTO:
    """
    Build the ledger view from its row and its history

    Without an explicit balance, the balance is the one recorded by the newest
    history entry. The history is a single read, while the ledger row was read
    separately and may be older than it.
    """
    history = list(history)
    if balance is None:
        balance = history[-1].balance_after if history else ledger.balance
    return LedgerDTO(
        account_id=ledger.account_id,
        wallet_address=ledger.wallet_address,
        balance=balance,
        transactions=[to_transaction_dto(t) for t in history],
        last_updated=ledger.last_updated if last_updated is None else last_updated,
    )
