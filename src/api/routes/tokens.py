"""Tokens API Routes

FastAPI routes for the PRISM token ledger.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError
from src.api.schemas.token_request import (
    AirdropRequestSchema,
    AirdropResponseSchema,
    CreditRequestSchema,
    TransferRequestSchema,
    TransferResponseSchema,
)
from src.adapter.repositories import (
    SqlAlchemyAccountDirectory,
    SqlAlchemyTokenLedgerRepository,
    SqlAlchemyTokenTransactionRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.account_lock import AccountLockManager
from src.app.use_cases.ledger import (
    CreditCommandDTO,
    CreditResponseDTO,
    CreditTokens,
    GetLedger,
    LedgerDTO,
    ListTransactions,
    ListTransactionsResponseDTO,
    TransferCommandDTO,
    TransferTokens,
)
from src.app.use_cases.ledger import errors
from src.depends import get_ledger_locks, get_session
from src.domain.token_transaction import TransactionType

router = APIRouter(prefix="/tokens", tags=["Tokens"])

ERROR_STATUS = {
    errors.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
    errors.INVALID_TRANSACTION_TYPE: status.HTTP_400_BAD_REQUEST,
    errors.SAME_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    errors.INSUFFICIENT_BALANCE: status.HTTP_400_BAD_REQUEST,
    errors.IDEMPOTENCY_CONFLICT: status.HTTP_409_CONFLICT,
    errors.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    400: {
        "description": "Invalid amount, same account, or insufficient balance",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INSUFFICIENT_BALANCE",
                        "message": "Insufficient balance for transfer. Required: 150, Available: 100"
                    }
                }
            }
        }
    },
    404: {
        "description": "Account not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "ACCOUNT_NOT_FOUND",
                        "message": "Account acct_ghost not found"
                    }
                }
            }
        }
    },
}


def _raise_for(error: Error):
    raise ClientError(
        error,
        status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def _collaborators(session: AsyncSession):
    return (
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyAccountDirectory(session),
        SqlAlchemyTokenLedgerRepository(session),
        SqlAlchemyTokenTransactionRepository(session),
    )


@router.get(
    "/{account_id}",
    response_model=LedgerDTO,
    response_model_by_alias=True,
    responses={404: ERROR_RESPONSES[404]},
)
async def get_ledger(
    account_id: str,
    session: AsyncSession = Depends(get_session),
    locks: AccountLockManager = Depends(get_ledger_locks),
):
    """
    Get the token ledger of an account.

    The first call for a known account creates an empty ledger (balance 0).
    The response carries the full transaction history, oldest first.

    **Returns:**
    - 200: Ledger with balance and transactions
    - 404: Account not found
    """
    uow, directory, ledger_repo, transaction_repo = _collaborators(session)

    use_case = GetLedger(uow, locks, directory, ledger_repo, transaction_repo)
    result = await use_case.execute(account_id)

    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.get(
    "/{account_id}/transactions",
    response_model=ListTransactionsResponseDTO,
    response_model_by_alias=True,
    responses={404: ERROR_RESPONSES[404]},
)
async def list_transactions(
    account_id: str,
    limit: int = Query(default=ApplicationConfig.TRANSACTIONS_DEFAULT_PAGE_SIZE, ge=1),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    """
    List an account's transactions, most recent first.

    **Query parameters:**
    - `limit`: page size (capped at the configured maximum)
    - `offset`: number of transactions to skip
    """
    directory = SqlAlchemyAccountDirectory(session)
    transaction_repo = SqlAlchemyTokenTransactionRepository(session)

    use_case = ListTransactions(
        directory,
        transaction_repo,
        max_page_size=ApplicationConfig.TRANSACTIONS_MAX_PAGE_SIZE,
    )
    result = await use_case.execute(account_id, limit=limit, offset=offset)

    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/{account_id}/airdrop",
    response_model=AirdropResponseSchema,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
)
async def airdrop_tokens(
    account_id: str,
    request: AirdropRequestSchema,
    session: AsyncSession = Depends(get_session),
    locks: AccountLockManager = Depends(get_ledger_locks),
):
    """
    Credit the configured airdrop amount to an account.

    **Request body:**
    - `walletAddress` (optional): stored on the ledger and the account profile

    **Returns:**
    - 200: `{transaction, currentBalance}`
    - 404: Account not found
    """
    uow, directory, ledger_repo, transaction_repo = _collaborators(session)

    command = CreditCommandDTO(
        account_id=account_id,
        amount=ApplicationConfig.AIRDROP_AMOUNT,
        description=ApplicationConfig.AIRDROP_DESCRIPTION,
        kind=TransactionType.AIRDROP,
        wallet_address=request.wallet_address,
    )

    use_case = CreditTokens(uow, locks, directory, ledger_repo, transaction_repo)
    result = await use_case.execute(command)

    if result.is_err():
        _raise_for(result.error)

    return AirdropResponseSchema(
        transaction=result.value.transaction,
        current_balance=result.value.ledger.balance,
    )


@router.post(
    "/{account_id}/credit",
    response_model=CreditResponseDTO,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
)
async def credit_tokens(
    account_id: str,
    request: CreditRequestSchema,
    session: AsyncSession = Depends(get_session),
    locks: AccountLockManager = Depends(get_ledger_locks),
):
    """
    Credit tokens to an account (purchase, reward, payment or airdrop).

    Repeated requests with the same `idempotencyKey` return the original
    transaction without crediting twice.
    """
    uow, directory, ledger_repo, transaction_repo = _collaborators(session)

    command = CreditCommandDTO(
        account_id=account_id,
        amount=request.amount,
        description=request.description,
        kind=request.kind,
        wallet_address=request.wallet_address,
        idempotency_key=request.idempotency_key,
    )

    use_case = CreditTokens(uow, locks, directory, ledger_repo, transaction_repo)
    result = await use_case.execute(command)

    if result.is_err():
        _raise_for(result.error)
    return result.value


@router.post(
    "/{account_id}/transfer",
    response_model=TransferResponseSchema,
    response_model_by_alias=True,
    responses=ERROR_RESPONSES,
)
async def transfer_tokens(
    account_id: str,
    request: TransferRequestSchema,
    session: AsyncSession = Depends(get_session),
    locks: AccountLockManager = Depends(get_ledger_locks),
):
    """
    Transfer tokens from the path account to `recipientId`.

    Both balances and both transaction records change together or not at all.

    **Returns:**
    - 200: `{currentBalance, recipientBalance, transaction, transferId}`
    - 400: Invalid amount, same account, or insufficient balance
    - 404: Sender or recipient not found
    """
    uow, directory, ledger_repo, transaction_repo = _collaborators(session)

    command = TransferCommandDTO(
        sender_id=account_id,
        recipient_id=request.recipient_id,
        amount=request.amount,
        description=request.description,
        idempotency_key=request.idempotency_key,
    )

    use_case = TransferTokens(
        uow,
        locks,
        directory,
        ledger_repo,
        transaction_repo,
        default_description=ApplicationConfig.TRANSFER_DEFAULT_DESCRIPTION,
    )
    result = await use_case.execute(command)

    if result.is_err():
        _raise_for(result.error)

    return TransferResponseSchema(
        current_balance=result.value.sender_balance,
        recipient_balance=result.value.recipient_balance,
        transaction=result.value.transaction,
        transfer_id=result.value.transfer_id,
    )
