"""Token ledger use cases"""
from .get_ledger import GetLedger
from .credit_tokens import CreditTokens
from .transfer_tokens import TransferTokens
from .list_transactions import ListTransactions
from .reconcile_ledger import ReconcileLedger
from .dtos import (
    CreditCommandDTO,
    TransferCommandDTO,
    TransactionDTO,
    LedgerDTO,
    CreditResponseDTO,
    TransferResponseDTO,
    ListTransactionsResponseDTO,
    LedgerDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "GetLedger",
    "CreditTokens",
    "TransferTokens",
    "ListTransactions",
    "ReconcileLedger",
    "CreditCommandDTO",
    "TransferCommandDTO",
    "TransactionDTO",
    "LedgerDTO",
    "CreditResponseDTO",
    "TransferResponseDTO",
    "ListTransactionsResponseDTO",
    "LedgerDiscrepancyDTO",
    "ReconciliationResultDTO",
]
