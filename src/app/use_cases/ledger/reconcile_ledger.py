"""ReconcileLedger Use Case

Checks every token ledger balance against the sum of its transactions and,
when asked, rewrites drifted balances from the history.
"""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from libs.result import Result, Return, Error
from src.app.repositories.token_ledger_repository import TokenLedgerRepository
from src.app.repositories.token_transaction_repository import TokenTransactionRepository
from src.app.services.account_lock import AccountLockManager
from src.app.services.unit_of_work import UnitOfWork
from .dtos import LedgerDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)

RECONCILIATION_FAILED = "RECONCILIATION_FAILED"


class ReconcileLedger:
    """
    Use Case: Reconcile token ledgers against transactions

    Business Rules:
    1. The transaction history is the source of truth
    2. A ledger whose balance differs from its transaction sum, both read in
       one statement, is a discrepancy
    3. Without repair the run is read-only
    4. With repair, the balance is recomputed under the account lock and
       rewritten; a negative sum is reported but never written
    5. A ledger that agrees with its history when re-read under the lock is
       not reported

    Flow:
    1. Read every ledger balance with its transaction sum
    2. Keep the ledgers where the two differ
    3. Optionally repair each discrepancy in its own unit of work
    4. Return reconciliation result with all discrepancies
    """

    def __init__(
        self,
        uow: UnitOfWork,
        locks: AccountLockManager,
        ledger_repo: TokenLedgerRepository,
        transaction_repo: TokenTransactionRepository,
    ):
        self.uow = uow
        self.locks = locks
        self.ledger_repo = ledger_repo
        self.transaction_repo = transaction_repo

    async def execute(self, repair: bool = False) -> Result[ReconciliationResultDTO]:
        """
        Execute ledger reconciliation

        Args:
            repair: Rewrite drifted balances from the transaction history

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.now(timezone.utc)

        try:
            logger.info(f"Starting token ledger reconciliation (repair={repair})")

            totals = await self.ledger_repo.get_totals()
            total_ledgers = len(totals)

            logger.info(f"Found {total_ledgers} ledgers to reconcile")

            discrepancies: List[LedgerDiscrepancyDTO] = []

            for row in totals:
                ledger_id, account_id = row.ledger_id, row.account_id
                balance, transaction_sum = row.balance, row.transaction_sum
                if balance == transaction_sum:
                    continue

                discrepancy_amount = balance - transaction_sum
                discrepancy = LedgerDiscrepancyDTO(
                    account_id=account_id,
                    ledger_id=ledger_id,
                    ledger_balance=balance,
                    calculated_balance=transaction_sum,
                    discrepancy=discrepancy_amount,
                )
                logger.warning(
                    f"Discrepancy found for account {account_id} "
                    f"(ledger_id={ledger_id}): "
                    f"ledger_balance={balance}, "
                    f"transaction_sum={transaction_sum}, "
                    f"discrepancy={discrepancy_amount}"
                )

                if repair:
                    repaired = await self._repair(account_id)
                    if repaired is None:
                        logger.info(f"Ledger for account {account_id} matches its history on re-read")
                        continue
                    discrepancy.repaired = repaired

                discrepancies.append(discrepancy)

            execution_time_ms = int((time.time() - start_time) * 1000)
            repaired_count = sum(1 for d in discrepancies if d.repaired)

            response = ReconciliationResultDTO(
                total_ledgers_checked=total_ledgers,
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                repaired_count=repaired_count,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"out of {total_ledgers} ledgers, repaired {repaired_count}, "
                    f"in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_ledgers} ledgers balanced "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=RECONCILIATION_FAILED,
                    message="Failed to reconcile token ledger",
                    reason=str(e),
                )
            )

    async def _repair(self, account_id: str) -> Optional[bool]:
        """True when rewritten, False when refused, None when nothing was wrong"""
        async with self.locks.hold(account_id):
            try:
                # Re-read under the lock; a credit may have landed since the scan
                current = await self.ledger_repo.get_by_account_id(account_id, for_update=True)
                transaction_sum = await self.transaction_repo.get_transaction_sum_by_ledger(current.id)

                if transaction_sum < Decimal("0"):
                    logger.error(
                        f"Refusing to repair account {current.account_id}: "
                        f"transaction sum {transaction_sum} is negative"
                    )
                    await self.uow.rollback()
                    return False

                previous_balance = current.balance
                if previous_balance == transaction_sum:
                    await self.uow.rollback()
                    return None

                await self.ledger_repo.update_balance(current.id, transaction_sum)
                await self.uow.commit()
            except Exception:
                await self.uow.rollback()
                raise

        logger.warning(
            f"Repaired ledger for account {account_id}: "
            f"{previous_balance} -> {transaction_sum}"
        )
        return True
