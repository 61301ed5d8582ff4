"""Read-or-create path for token ledgers

This is the only place a TokenLedger is ever created.
"""

import logging
from decimal import Decimal
from src.app.repositories.token_ledger_repository import TokenLedgerRepository
from src.domain.token_ledger import TokenLedger

logger = logging.getLogger(__name__)


async def load_or_create_ledger(
    ledger_repo: TokenLedgerRepository,
    account_id: str,
    for_update: bool = False,
) -> TokenLedger:
    """
    Fetch the ledger of an account, creating an empty one when absent

    Callers must hold the account lock. The new row is flushed but not
    committed; the caller's unit of work decides whether it survives.
    """
    ledger = await ledger_repo.get_by_account_id(account_id, for_update=for_update)
    if ledger is not None:
        return ledger

    ledger = await ledger_repo.create(
        TokenLedger(account_id=account_id, balance=Decimal("0"))
    )
    logger.info(f"Created token ledger for account {account_id}")
    return ledger
