"""
Bank Ledger

An account ledger with overdraft fees, interest tiering, statements,
transfer-style transactions and loan/interest calculators, plus a CLI.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

from .models import (
    AccountStatus,
    LedgerEntry,
    TransactionCategory,
    TransactionStatus,
    TransactionType,
)
from .config import DEFAULT_CONFIG, FeeSettings, InterestSettings, LedgerConfig, TransactionSettings
from .exceptions import InsufficientFundsError, InvalidStateError, LedgerError, ValidationError
from .account import Account
from .transaction import Transaction
from .database import DatabaseManager
from .account_manager import AccountManager
from .cli import main


def create_account_manager(db_path: str = "bank.db",
                           config: LedgerConfig = DEFAULT_CONFIG) -> AccountManager:
    """
    Create an AccountManager instance with database.

    Args:
        db_path: Path to the database file
        config: Ledger configuration

    Returns:
        AccountManager instance
    """
    db_manager = DatabaseManager(db_path)
    return AccountManager(db_manager, config)


__all__ = [
    "Account",
    "AccountStatus",
    "LedgerEntry",
    "Transaction",
    "TransactionCategory",
    "TransactionStatus",
    "TransactionType",
    "LedgerConfig",
    "InterestSettings",
    "FeeSettings",
    "TransactionSettings",
    "DEFAULT_CONFIG",
    "LedgerError",
    "ValidationError",
    "InsufficientFundsError",
    "InvalidStateError",
    "DatabaseManager",
    "AccountManager",
    "create_account_manager",
    "main"
]
