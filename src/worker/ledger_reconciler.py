"""Token ledger reconciler

Background job that compares every cached balance with its transaction
history. Discrepancies are sent to the alert channel and, with auto-repair on,
rewritten from the history under the account lock.

    python -m src.worker.ledger_reconciler --once --repair
"""

import argparse
import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.token_ledger_repository import SqlAlchemyTokenLedgerRepository
from src.adapter.repositories.token_transaction_repository import SqlAlchemyTokenTransactionRepository
from src.adapter.services.notification_service import create_notification_service
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.account_lock import AccountLockManager
from src.app.services.notification_service import NotificationService
from src.app.use_cases.ledger import ReconcileLedger, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class LedgerReconcilerWorker:
    """
    Runs ReconcileLedger on its own engine

    Account locks here are local to the worker process; across processes a
    repair is serialized by the SELECT FOR UPDATE row lock alone.
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        auto_repair: Optional[bool] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.auto_repair = (
            ApplicationConfig.RECONCILIATION_AUTO_REPAIR if auto_repair is None else auto_repair
        )
        self.notification_service = notification_service or create_notification_service(
            ApplicationConfig.RECONCILIATION_ALERT_WEBHOOK
        )
        self.locks = AccountLockManager(timeout=ApplicationConfig.LEDGER_LOCK_TIMEOUT_SECONDS)

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def run_once(self) -> ReconciliationResultDTO:
        """
        Reconcile all ledgers once and alert on what was found

        Raises:
            RuntimeError: The reconciliation itself failed
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Ledger reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_ledgers_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=datetime.now(timezone.utc),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            use_case = ReconcileLedger(
                uow=SqlAlchemyUnitOfWork(session),
                locks=self.locks,
                ledger_repo=SqlAlchemyTokenLedgerRepository(session),
                transaction_repo=SqlAlchemyTokenTransactionRepository(session),
            )
            result = await use_case.execute(repair=self.auto_repair)

        if result.is_err():
            raise RuntimeError(f"Reconciliation failed: {result.error.message}")

        response = result.value
        if response.discrepancies_found:
            await self._alert(response)
        return response

    async def _alert(self, response: ReconciliationResultDTO) -> None:
        logger.error(
            f"{response.discrepancies_found} ledger discrepancies found, "
            f"{response.repaired_count} repaired"
        )
        if not await self.notification_service.send_discrepancy_alert(response.discrepancies):
            logger.error("Discrepancy alert could not be delivered")

    async def run_forever(self, interval_seconds: int = 86400):
        """Reconcile every interval_seconds; a failed cycle is logged and retried next time"""
        while True:
            try:
                log_summary(await self.run_once())
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()


def log_summary(response: ReconciliationResultDTO) -> None:
    logger.info(
        f"Checked {response.total_ledgers_checked} ledgers in {response.execution_time_ms}ms: "
        f"{response.discrepancies_found} discrepancies, {response.repaired_count} repaired"
    )
    for d in response.discrepancies:
        logger.info(
            f"  {d.account_id}: ledger={d.ledger_balance} history={d.calculated_balance} "
            f"diff={d.discrepancy} repaired={d.repaired}"
        )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile token ledgers against their history")
    parser.add_argument("--once", action="store_true", help="reconcile once and exit")
    parser.add_argument(
        "--repair", action="store_true", default=None,
        help="rewrite drifted balances (default: RECONCILIATION_AUTO_REPAIR)",
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="seconds between runs",
    )
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)
    worker = LedgerReconcilerWorker(auto_repair=args.repair)
    try:
        if args.once:
            log_summary(await worker.run_once())
        else:
            await worker.run_forever(interval_seconds=args.interval)
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
