"""Concurrency tests for the ledger use cases

In-memory repositories yield to the event loop between every read and write,
so any unserialized read-modify-write would lose updates.
"""

import asyncio
import pytest
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from src.app.repositories.token_ledger_repository import LedgerTotalsDTO, TokenLedgerRepository
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.app.services.account_lock import AccountLockManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.ledger import (
    CreditCommandDTO,
    CreditTokens,
    GetLedger,
    ReconcileLedger,
    TransferCommandDTO,
    TransferTokens,
)
from src.domain.token_ledger import TokenLedger, recompute_balance
from src.domain.token_transaction import TokenTransaction


class InMemoryLedgerRepository(TokenLedgerRepository):
    def __init__(self, transactions: List[TokenTransaction]):
        self.rows: Dict[str, TokenLedger] = {}
        self.transactions = transactions

    async def get_by_account_id(self, account_id: str, for_update: bool = False) -> Optional[TokenLedger]:
        await asyncio.sleep(0)
        return self.rows.get(account_id)

    async def create(self, ledger: TokenLedger) -> TokenLedger:
        await asyncio.sleep(0)
        ledger.id = len(self.rows) + 1
        self.rows[ledger.account_id] = ledger
        return ledger

    async def update_balance(self, ledger_id: int, new_balance: Decimal, wallet_address: Optional[str] = None) -> None:
        await asyncio.sleep(0)
        for ledger in self.rows.values():
            if ledger.id == ledger_id:
                ledger.balance = new_balance

    async def get_totals(self) -> List[LedgerTotalsDTO]:
        return [
            LedgerTotalsDTO(
                ledger_id=ledger.id,
                account_id=ledger.account_id,
                balance=ledger.balance,
                transaction_sum=recompute_balance(t for t in self.transactions if t.ledger_id == ledger.id),
            )
            for ledger in self.rows.values()
        ]


class InMemoryTransactionRepository(TokenTransactionRepository):
    def __init__(self):
        self.rows: List[TokenTransaction] = []

    async def create(self, transaction: TokenTransaction) -> TokenTransaction:
        await asyncio.sleep(0)
        transaction.id = len(self.rows) + 1
        self.rows.append(transaction)
        return transaction

    async def get_by_idempotency_key(self, idempotency_key: str) -> Optional[TokenTransaction]:
        return next((t for t in self.rows if t.idempotency_key == idempotency_key), None)

    async def get_by_transfer_id(self, transfer_id: str) -> List[TokenTransaction]:
        return [t for t in self.rows if t.transfer_id == transfer_id]

    async def get_history(self, account_id: str) -> List[TokenTransaction]:
        return [t for t in self.rows if t.account_id == account_id]

    async def get_by_account_id(self, account_id: str, limit: int = 20, offset: int = 0) -> Tuple[List[TokenTransaction], int]:
        history = list(reversed(await self.get_history(account_id)))
        return history[offset:offset + limit], len(history)

    async def get_transaction_sum_by_ledger(self, ledger_id: int) -> Decimal:
        return sum((t.amount for t in self.rows if t.ledger_id == ledger_id), Decimal("0"))


class NoopUnitOfWork(UnitOfWork):
    async def commit(self):
        pass

    async def rollback(self):
        pass


@pytest.fixture
def store(mock_account_directory):
    locks = AccountLockManager(timeout=5.0)
    transaction_repo = InMemoryTransactionRepository()
    ledger_repo = InMemoryLedgerRepository(transaction_repo.rows)
    args = (NoopUnitOfWork(), locks, mock_account_directory, ledger_repo, transaction_repo)
    return {
        "credit": CreditTokens(*args),
        "transfer": TransferTokens(*args),
        "get": GetLedger(*args),
        "reconcile": ReconcileLedger(NoopUnitOfWork(), locks, ledger_repo, transaction_repo),
        "locks": locks,
    }


@pytest.mark.asyncio
class TestLedgerConcurrency:

    async def test_concurrent_credits_do_not_lose_updates(self, store):
        n = 50
        results = await asyncio.gather(
            *(store["credit"].execute(CreditCommandDTO(account_id="acct_alice", amount=Decimal("1"))) for _ in range(n))
        )

        assert all(r.is_ok() for r in results)
        ledger = (await store["get"].execute("acct_alice")).value
        assert ledger.balance == Decimal(n)
        assert len(ledger.transactions) == n
        assert ledger.balance == recompute_balance(ledger.transactions)

    async def test_opposing_transfers_keep_totals(self, store):
        await store["credit"].execute(CreditCommandDTO(account_id="acct_alice", amount=Decimal("100")))
        await store["credit"].execute(CreditCommandDTO(account_id="acct_bob", amount=Decimal("100")))

        commands = []
        for i in range(40):
            sender, recipient = ("acct_alice", "acct_bob") if i % 2 else ("acct_bob", "acct_alice")
            commands.append(TransferCommandDTO(sender_id=sender, recipient_id=recipient, amount=Decimal("7")))

        await asyncio.gather(*(store["transfer"].execute(c) for c in commands))

        alice = (await store["get"].execute("acct_alice")).value
        bob = (await store["get"].execute("acct_bob")).value
        assert alice.balance + bob.balance == Decimal("200")
        assert alice.balance >= 0 and bob.balance >= 0
        assert alice.balance == recompute_balance(alice.transactions)
        assert bob.balance == recompute_balance(bob.transactions)
        assert store["locks"].active_accounts == 0

        reconciliation = (await store["reconcile"].execute()).value
        assert reconciliation.total_ledgers_checked == 2
        assert reconciliation.discrepancies_found == 0

    async def test_overspend_race_never_goes_negative(self, store):
        """Ten concurrent transfers of 30 from a balance of 100: exactly three succeed"""
        await store["credit"].execute(CreditCommandDTO(account_id="acct_alice", amount=Decimal("100")))

        results = await asyncio.gather(
            *(
                store["transfer"].execute(
                    TransferCommandDTO(sender_id="acct_alice", recipient_id="acct_bob", amount=Decimal("30"))
                )
                for _ in range(10)
            )
        )

        succeeded = [r for r in results if r.is_ok()]
        rejected = [r for r in results if r.is_err()]
        assert len(succeeded) == 3
        assert all(r.error.code == "INSUFFICIENT_BALANCE" for r in rejected)
        alice = (await store["get"].execute("acct_alice")).value
        assert alice.balance == Decimal("10")
