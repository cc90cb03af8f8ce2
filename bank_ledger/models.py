"""
Data models for the bank ledger.

This module contains the enumerations and the immutable ledger entry record
used throughout the application.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class AccountStatus(Enum):
    """Lifecycle states of an account."""
    ACTIVE = "active"
    FROZEN = "frozen"
    CLOSED = "closed"


class TransactionType(Enum):
    """Types of ledger movements."""
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER = "transfer"
    INTEREST = "interest"
    FEE = "fee"


class TransactionStatus(Enum):
    """Lifecycle states of a standalone transaction."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REVERSED = "reversed"


class TransactionCategory(Enum):
    """Reporting categories for transactions."""
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"
    INTEREST = "Interest"
    FEE = "Fee"
    INVESTMENT = "Investment"
    SAVINGS = "Savings"
    BILLS = "Bills"


DEFAULT_CATEGORIES = {
    TransactionType.DEPOSIT: TransactionCategory.INCOME,
    TransactionType.WITHDRAWAL: TransactionCategory.EXPENSE,
    TransactionType.TRANSFER: TransactionCategory.TRANSFER,
    TransactionType.INTEREST: TransactionCategory.INTEREST,
    TransactionType.FEE: TransactionCategory.FEE,
}


@dataclass(frozen=True)
class LedgerEntry:
    """One recorded balance-affecting event on an account."""

    entry_id: str
    transaction_type: TransactionType
    amount: Decimal  # Signed: negative for outflows
    description: str
    timestamp: datetime
    balance_after: Decimal

    def to_dict(self) -> dict:
        """Serialize the entry for a snapshot."""
        return {
            'id': self.entry_id,
            'type': self.transaction_type.value,
            'amount': str(self.amount),
            'description': self.description,
            'timestamp': self.timestamp.isoformat(),
            'balance_after': str(self.balance_after),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerEntry":
        """Rebuild an entry from its snapshot form."""
        return cls(
            entry_id=data['id'],
            transaction_type=TransactionType(data['type']),
            amount=Decimal(data['amount']),
            description=data['description'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            balance_after=Decimal(data['balance_after']),
        )
