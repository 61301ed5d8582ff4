"""Unit tests for ListTransactions use case"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.use_cases.ledger.list_transactions import ListTransactions
from src.domain.token_transaction import TokenTransaction, TransactionType


@pytest.fixture
def list_use_case(mock_account_directory, mock_transaction_repo):
    return ListTransactions(mock_account_directory, mock_transaction_repo, max_page_size=50)


@pytest.mark.asyncio
class TestListTransactions:

    async def test_returns_page_with_total(self, list_use_case, mock_transaction_repo):
        txn = TokenTransaction(
            id=3,
            account_id="acct_alice",
            ledger_id=1,
            transaction_type=TransactionType.REWARD,
            amount=Decimal("5"),
            balance_before=Decimal("10"),
            balance_after=Decimal("15"),
            created_at=datetime(2024, 1, 1),
        )
        mock_transaction_repo.get_by_account_id = AsyncMock(return_value=([txn], 3))

        result = await list_use_case.execute("acct_alice", limit=1, offset=0)

        assert result.is_ok()
        page = result.value
        assert page.total == 3
        assert page.limit == 1
        assert page.transactions[0].type == "reward"
        mock_transaction_repo.get_by_account_id.assert_called_once_with(
            account_id="acct_alice", limit=1, offset=0
        )

    async def test_limit_is_clamped(self, list_use_case, mock_transaction_repo):
        mock_transaction_repo.get_by_account_id = AsyncMock(return_value=([], 0))

        result = await list_use_case.execute("acct_alice", limit=1000, offset=-3)

        assert result.value.limit == 50
        assert result.value.offset == 0

    async def test_unknown_account(self, list_use_case, mock_transaction_repo):
        mock_transaction_repo.get_by_account_id = AsyncMock()

        result = await list_use_case.execute("acct_ghost")

        assert result.is_err()
        assert result.error.code == "ACCOUNT_NOT_FOUND"
        mock_transaction_repo.get_by_account_id.assert_not_called()
