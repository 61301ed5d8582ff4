"""Error codes returned by the ledger use cases

The API layer maps these codes to HTTP statuses (see src/api/routes/tokens.py).
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from libs.result import Error

ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
INVALID_AMOUNT = "INVALID_AMOUNT"
INVALID_TRANSACTION_TYPE = "INVALID_TRANSACTION_TYPE"
SAME_ACCOUNT = "SAME_ACCOUNT"
INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
IDEMPOTENCY_CONFLICT = "IDEMPOTENCY_CONFLICT"

# Matches the TokenAmount columns: 18 digits, 6 of them decimals
AMOUNT_QUANTUM = Decimal("0.000001")
MAX_AMOUNT = Decimal("1000000000000")


def account_not_found(account_id: str, role: str = "Account") -> Error:
    return Error(
        code=ACCOUNT_NOT_FOUND,
        message=f"{role} {account_id} not found",
        reason="Account Directory does not recognize this id",
    )


def persistence_failure(message: str, exc: BaseException) -> Error:
    return Error(code=PERSISTENCE_FAILURE, message=message, reason=str(exc))


def validate_amount(amount: Any) -> Optional[Error]:
    """
    Check that an amount is a positive, finite number with at most 6 decimals

    Returns:
        Error with code INVALID_AMOUNT, or None when the amount is acceptable
    """
    if isinstance(amount, bool):
        return Error(code=INVALID_AMOUNT, message="Amount must be a number", reason=repr(amount))
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        return Error(code=INVALID_AMOUNT, message="Amount must be a number", reason=repr(amount))

    if not value.is_finite():
        return Error(code=INVALID_AMOUNT, message="Amount must be finite", reason=str(value))
    if value <= 0:
        return Error(code=INVALID_AMOUNT, message="Amount must be greater than 0", reason=str(value))
    if value >= MAX_AMOUNT:
        return Error(code=INVALID_AMOUNT, message=f"Amount must be less than {MAX_AMOUNT}", reason=str(value))
    if value.quantize(AMOUNT_QUANTUM) != value:
        return Error(
            code=INVALID_AMOUNT,
            message="Amount supports at most 6 decimal places",
            reason=str(value),
        )
    return None
