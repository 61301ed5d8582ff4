from .unit_of_work import UnitOfWork
from .account_lock import AccountLockManager, LockTimeoutError

__all__ = [
    "UnitOfWork",
    "AccountLockManager",
    "LockTimeoutError",
]
