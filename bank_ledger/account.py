"""
Account ledger for the bank ledger.

An Account owns a balance, a status and an append-only log of entries. All
mutations go through its public operations.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from .config import DEFAULT_CONFIG, FeeSettings, InterestSettings, LedgerConfig
from .exceptions import InsufficientFundsError, InvalidStateError, ValidationError
from .models import AccountStatus, LedgerEntry, TransactionType
from .utils import compound_amount, generate_id, round_money, to_decimal, validate_interest_params

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_PATTERN = re.compile(r'[0-9]{5,}')
OWNER_PATTERN = re.compile(r"[a-zA-Z\s\-']+")


class Account:
    """A single bank account and its ledger."""

    def __init__(self, account_number: str, owner: str, initial_balance=0,
                 config: LedgerConfig = DEFAULT_CONFIG,
                 clock: Callable[[], datetime] = datetime.now,
                 id_factory: Callable[[], str] = generate_id):
        """
        Create a new account.

        Args:
            account_number: Numeric string of at least five digits
            owner: Owner name (letters, spaces, hyphens, apostrophes)
            initial_balance: Opening balance, recorded as a deposit when positive
            config: Interest and fee settings to fix on the account
            clock: Source of timestamps
            id_factory: Source of entry ids

        Raises:
            ValidationError: If any argument is malformed
        """
        self._validate_account_number(account_number)
        self._validate_owner(owner)
        initial_balance = self._validate_amount(initial_balance)

        self._account_number = account_number
        self._owner = owner
        self._balance = initial_balance
        self._status = AccountStatus.ACTIVE
        self._entries: List[LedgerEntry] = []
        self._interest_settings = config.interest
        self._fees = config.fees
        self._clock = clock
        self._id_factory = id_factory
        self._created_at = clock()
        self._last_updated = self._created_at

        if initial_balance > 0:
            self._record_entry(TransactionType.DEPOSIT, initial_balance, "Initial deposit")

    @property
    def account_number(self) -> str:
        return self._account_number

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def status(self) -> AccountStatus:
        return self._status

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def last_updated(self) -> datetime:
        return self._last_updated

    @property
    def interest_settings(self) -> InterestSettings:
        return self._interest_settings

    @property
    def fees(self) -> FeeSettings:
        return self._fees

    @property
    def entries(self) -> List[LedgerEntry]:
        """Copy of the log in chronological order."""
        return list(self._entries)

    def deposit(self, amount, description: str = "Deposit") -> dict:
        """
        Deposit money into the account.

        Returns:
            Dictionary with the new balance and the recorded entry

        Raises:
            InvalidStateError: If the account is not active
            ValidationError: If the amount is invalid
        """
        self._validate_active()
        amount = self._validate_amount(amount)

        self._balance += amount
        self._last_updated = self._clock()
        entry = self._record_entry(TransactionType.DEPOSIT, amount, description)

        logger.debug(f"Deposited {amount} to {self._account_number}, balance {self._balance}")
        return {'success': True, 'entry': entry, 'new_balance': self._balance}

    def withdraw(self, amount, description: str = "Withdrawal") -> dict:
        """
        Withdraw money from the account.

        If the balance drops below the fee threshold an overdraft fee is
        charged and logged before the withdrawal entry itself.

        Returns:
            Dictionary with the new balance and the withdrawal entry

        Raises:
            InvalidStateError: If the account is not active
            ValidationError: If the amount is invalid
            InsufficientFundsError: If the amount exceeds the balance
        """
        self._validate_active()
        amount = self._validate_amount(amount)
        if amount > self._balance:
            raise InsufficientFundsError("Insufficient funds")

        self._balance -= amount
        self._last_updated = self._clock()

        if self._balance < self._fees.minimum_balance:
            self._apply_fee("Overdraft fee", self._fees.overdraft)

        entry = self._record_entry(TransactionType.WITHDRAWAL, -amount, description)

        logger.debug(f"Withdrew {amount} from {self._account_number}, balance {self._balance}")
        return {'success': True, 'entry': entry, 'new_balance': self._balance}

    def calculate_compound_interest(self, rate, years, compounding_frequency: int = 12) -> dict:
        """
        Project the current balance forward under compound interest.

        The high-balance bonus is added to ``rate`` when the balance is at or
        above the threshold. Nothing is mutated.
        """
        rate, years, compounding_frequency = validate_interest_params(rate, years, compounding_frequency)

        effective_rate = rate
        if self._balance >= self._interest_settings.high_balance_threshold:
            effective_rate += self._interest_settings.bonus_rate

        final_amount = compound_amount(self._balance, effective_rate, years, compounding_frequency)

        return {
            'initial_balance': self._balance,
            'final_amount': round_money(final_amount),
            'interest_earned': round_money(final_amount - self._balance),
            'effective_rate': effective_rate,
            'years': years,
            'compounding_frequency': compounding_frequency,
        }

    def get_statement(self, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> dict:
        """Account statement for the inclusive date window (both bounds optional)."""
        entries = [
            entry for entry in self._entries
            if (start_date is None or entry.timestamp >= start_date)
            and (end_date is None or entry.timestamp <= end_date)
        ]

        return {
            'account_number': self._account_number,
            'owner': self._owner,
            'current_balance': self._balance,
            'status': self._status,
            'transactions': entries,
            'created_at': self._created_at,
            'last_updated': self._last_updated,
            'interest_rate': self.current_interest_rate(),
            'statistics': self._calculate_statistics(entries),
        }

    def current_interest_rate(self) -> Decimal:
        """Base rate plus the bonus when the balance qualifies."""
        rate = self._interest_settings.base_rate
        if self._balance >= self._interest_settings.high_balance_threshold:
            rate += self._interest_settings.bonus_rate
        return rate

    def freeze(self, reason: str = "") -> None:
        """Freeze an active account."""
        if self._status != AccountStatus.ACTIVE:
            raise InvalidStateError("Account must be active to freeze")

        self._status = AccountStatus.FROZEN
        self._last_updated = self._clock()
        self._record_entry(TransactionType.FEE, Decimal('0'), f"Account frozen: {reason}")
        logger.info(f"Account {self._account_number} frozen: {reason}")

    def unfreeze(self, reason: str = "") -> None:
        """Return a frozen account to active."""
        if self._status != AccountStatus.FROZEN:
            raise InvalidStateError("Account must be frozen to unfreeze")

        self._status = AccountStatus.ACTIVE
        self._last_updated = self._clock()
        self._record_entry(TransactionType.FEE, Decimal('0'), f"Account unfrozen: {reason}")
        logger.info(f"Account {self._account_number} unfrozen: {reason}")

    def close(self, reason: str = "") -> None:
        """Close an account with a zero balance. Closed is terminal."""
        if self._status == AccountStatus.CLOSED:
            raise InvalidStateError("Account is already closed")
        if self._balance != 0:
            raise InvalidStateError("Account must have zero balance to close")

        self._status = AccountStatus.CLOSED
        self._last_updated = self._clock()
        self._record_entry(TransactionType.FEE, Decimal('0'), f"Account closed: {reason}")
        logger.info(f"Account {self._account_number} closed: {reason}")

    def to_dict(self) -> dict:
        """Serialize the full account state for a snapshot."""
        return {
            'account_number': self._account_number,
            'owner': self._owner,
            'balance': str(self._balance),
            'status': self._status.value,
            'created_at': self._created_at.isoformat(),
            'last_updated': self._last_updated.isoformat(),
            'interest_settings': self._interest_settings.to_dict(),
            'fees': self._fees.to_dict(),
            'transactions': [entry.to_dict() for entry in self._entries],
        }

    @classmethod
    def from_dict(cls, data: dict,
                  clock: Callable[[], datetime] = datetime.now,
                  id_factory: Callable[[], str] = generate_id) -> "Account":
        """Restore an account from a snapshot without replaying its log."""
        account = cls.__new__(cls)
        account._account_number = data['account_number']
        account._owner = data['owner']
        account._balance = Decimal(data['balance'])
        account._status = AccountStatus(data['status'])
        account._created_at = datetime.fromisoformat(data['created_at'])
        account._last_updated = datetime.fromisoformat(data['last_updated'])
        account._interest_settings = InterestSettings.from_dict(data['interest_settings'])
        account._fees = FeeSettings.from_dict(data['fees'])
        account._entries = [LedgerEntry.from_dict(item) for item in data['transactions']]
        account._clock = clock
        account._id_factory = id_factory
        return account

    def __repr__(self) -> str:
        return (f"Account(account_number={self._account_number!r}, owner={self._owner!r}, "
                f"balance={self._balance}, status={self._status.value})")

    def _record_entry(self, transaction_type: TransactionType, amount: Decimal,
                      description: str) -> LedgerEntry:
        entry = LedgerEntry(
            entry_id=self._id_factory(),
            transaction_type=transaction_type,
            amount=amount,
            description=description,
            timestamp=self._clock(),
            balance_after=self._balance,
        )
        self._entries.append(entry)
        return entry

    def _apply_fee(self, description: str, amount: Decimal) -> None:
        self._balance -= amount
        self._record_entry(TransactionType.FEE, -amount, description)
        logger.info(f"{description} of {amount} charged to {self._account_number}")

    @staticmethod
    def _calculate_statistics(entries: List[LedgerEntry]) -> dict:
        stats = {
            'total_deposits': Decimal('0'),
            'total_withdrawals': Decimal('0'),
            'largest_deposit': Decimal('0'),
            'largest_withdrawal': Decimal('0'),
            'average_transaction': Decimal('0'),
            'total_fees': Decimal('0'),
        }

        if not entries:
            return stats

        for entry in entries:
            amount = abs(entry.amount)
            if entry.transaction_type == TransactionType.DEPOSIT:
                stats['total_deposits'] += amount
                stats['largest_deposit'] = max(stats['largest_deposit'], amount)
            elif entry.transaction_type == TransactionType.WITHDRAWAL:
                stats['total_withdrawals'] += amount
                stats['largest_withdrawal'] = max(stats['largest_withdrawal'], amount)
            elif entry.transaction_type == TransactionType.FEE:
                stats['total_fees'] += amount

        total = sum((abs(entry.amount) for entry in entries), Decimal('0'))
        stats['average_transaction'] = total / len(entries)

        return stats

    # Validation

    @staticmethod
    def _validate_account_number(account_number) -> None:
        if not isinstance(account_number, str) or not ACCOUNT_NUMBER_PATTERN.fullmatch(account_number):
            raise ValidationError("Invalid account number format")

    @staticmethod
    def _validate_owner(owner) -> None:
        if (not isinstance(owner, str) or len(owner.strip()) < 2
                or not OWNER_PATTERN.fullmatch(owner)):
            raise ValidationError("Invalid owner name format")

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        amount = to_decimal(amount)
        if amount < 0:
            raise ValidationError("Invalid amount")
        return amount

    def _validate_active(self) -> None:
        if self._status != AccountStatus.ACTIVE:
            raise InvalidStateError(f"Account is {self._status.value}")
