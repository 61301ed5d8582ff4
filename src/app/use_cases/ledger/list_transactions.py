"""
List Transactions Use Case

Retrieves token transaction history for an account with pagination.
"""
from libs.result import Result, Return
from src.app.repositories.account_directory import AccountDirectory
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from .dtos import ListTransactionsResponseDTO
from .errors import account_not_found
from .mappers import to_transaction_dto

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class ListTransactions:
    """
    Use case: View Token Transactions

    Retrieves paginated transaction history for an account.
    Transactions are ordered most recent first. Reading never creates a ledger.
    """

    def __init__(
        self,
        account_directory: AccountDirectory,
        transaction_repo: TokenTransactionRepository,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        self.account_directory = account_directory
        self.transaction_repo = transaction_repo
        self.max_page_size = max_page_size

    async def execute(
        self, account_id: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> Result[ListTransactionsResponseDTO]:
        """
        List transactions for an account with pagination.

        Args:
            account_id: Account identifier
            limit: Maximum number of transactions to return, clamped to [1, max_page_size]
            offset: Number of transactions to skip (negative values become 0)

        Returns:
            Result[ListTransactionsResponseDTO]: Paginated transaction list
        """
        if not await self.account_directory.account_exists(account_id):
            return Return.err(account_not_found(account_id))

        limit = max(1, min(limit, self.max_page_size))
        offset = max(0, offset)

        transactions, total = await self.transaction_repo.get_by_account_id(
            account_id=account_id,
            limit=limit,
            offset=offset,
        )

        return Return.ok(
            ListTransactionsResponseDTO(
                account_id=account_id,
                transactions=[to_transaction_dto(txn) for txn in transactions],
                total=total,
                limit=limit,
                offset=offset,
            )
        )
