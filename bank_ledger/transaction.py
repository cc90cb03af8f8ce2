"""
Standalone transactions for the bank ledger.

A Transaction records a transfer-style movement and walks its own status
machine: pending -> completed/failed/cancelled, completed -> reversed.
"""

import copy
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Union

from .config import DEFAULT_CONFIG, LedgerConfig
from .exceptions import InvalidStateError, ValidationError
from .models import DEFAULT_CATEGORIES, TransactionCategory, TransactionStatus, TransactionType
from .utils import generate_id, to_decimal

logger = logging.getLogger(__name__)


class Transaction:
    """A money movement with a pending/completed/failed/cancelled/reversed lifecycle."""

    def __init__(self, transaction_type: Union[TransactionType, str], amount,
                 from_account: str, to_account: Optional[str] = None,
                 description: str = "",
                 category: Union[TransactionCategory, str, None] = None,
                 metadata: Optional[Dict[str, Any]] = None,
                 config: LedgerConfig = DEFAULT_CONFIG,
                 clock: Callable[[], datetime] = datetime.now,
                 id_factory: Callable[[], str] = generate_id):
        """
        Create a pending transaction.

        Raises:
            ValidationError: If the type is not recognized, the amount is not
                positive or above the configured maximum, or the source
                account is missing
        """
        self._config = config
        self._type = self._parse_type(transaction_type)
        self._amount = self._validate_amount(amount)
        if not from_account:
            raise ValidationError("Source account is required")

        self._from_account = from_account
        self._to_account = to_account
        self._description = description
        self._category = self._determine_category(category, self._type)
        self._clock = clock
        self._id_factory = id_factory
        self._id = id_factory()
        self._timestamp = clock()
        self._status = TransactionStatus.PENDING
        self._metadata = copy.deepcopy(metadata or {})

    @property
    def transaction_id(self) -> str:
        return self._id

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    @property
    def status(self) -> TransactionStatus:
        return self._status

    @property
    def transaction_type(self) -> TransactionType:
        return self._type

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def from_account(self) -> str:
        return self._from_account

    @property
    def to_account(self) -> Optional[str]:
        return self._to_account

    @property
    def description(self) -> str:
        return self._description

    @property
    def category(self) -> Optional[TransactionCategory]:
        return self._category

    @property
    def metadata(self) -> Dict[str, Any]:
        return copy.deepcopy(self._metadata)

    def get_details(self) -> dict:
        """All transaction fields as a dictionary."""
        return {
            'id': self._id,
            'timestamp': self._timestamp,
            'status': self._status,
            'type': self._type,
            'amount': self._amount,
            'from_account': self._from_account,
            'to_account': self._to_account,
            'description': self._description,
            'category': self._category,
            'metadata': self.metadata,
        }

    def is_modifiable(self) -> bool:
        return self._status == TransactionStatus.PENDING

    def complete(self, result: Optional[dict] = None) -> bool:
        """Mark a pending transaction completed."""
        self._require_status(TransactionStatus.PENDING, "completed")

        self._status = TransactionStatus.COMPLETED
        self._metadata['completed_at'] = self._clock().isoformat()
        self._metadata['result'] = result or {}
        logger.debug(f"Transaction {self._id} completed")
        return True

    def fail(self, reason: str, details: Optional[dict] = None) -> None:
        """Mark a pending transaction failed."""
        self._require_status(TransactionStatus.PENDING, "failed")

        self._status = TransactionStatus.FAILED
        self._metadata['failed_at'] = self._clock().isoformat()
        self._metadata['failure_reason'] = reason
        self._metadata['failure_details'] = details or {}
        logger.info(f"Transaction {self._id} failed: {reason}")

    def cancel(self, reason: str) -> None:
        """Cancel a pending transaction."""
        self._require_status(TransactionStatus.PENDING, "cancelled")

        self._status = TransactionStatus.CANCELLED
        self._metadata['cancelled_at'] = self._clock().isoformat()
        self._metadata['cancellation_reason'] = reason
        logger.info(f"Transaction {self._id} cancelled: {reason}")

    def reverse(self, reason: str) -> "Transaction":
        """
        Reverse a completed transaction.

        The original is marked reversed and a new pending transaction moving
        the same amount the other way is returned.
        """
        self._require_status(TransactionStatus.COMPLETED, "reversed")

        self._status = TransactionStatus.REVERSED
        self._metadata['reversed_at'] = self._clock().isoformat()
        self._metadata['reversal_reason'] = reason
        logger.info(f"Transaction {self._id} reversed: {reason}")

        return Transaction(
            self._type,
            self._amount,
            from_account=self._to_account or self._from_account,
            to_account=self._from_account,
            description=f"Reversal: {self._description} - {reason}",
            category=self._category,
            metadata={
                'original_transaction': self._id,
                'reversal_reason': reason,
            },
            config=self._config,
            clock=self._clock,
            id_factory=self._id_factory,
        )

    def add_note(self, note: str) -> None:
        self._metadata.setdefault('notes', []).append({
            'text': note,
            'timestamp': self._clock().isoformat(),
        })

    def add_attachment(self, attachment: dict) -> None:
        attachments: List[dict] = self._metadata.setdefault('attachments', [])
        attachments.append({**attachment, 'uploaded_at': self._clock().isoformat()})

    def to_dict(self) -> dict:
        """Serialize the transaction for a snapshot."""
        return {
            'id': self._id,
            'timestamp': self._timestamp.isoformat(),
            'status': self._status.value,
            'type': self._type.value,
            'amount': str(self._amount),
            'from_account': self._from_account,
            'to_account': self._to_account,
            'description': self._description,
            'category': self._category.value if self._category else None,
            'metadata': self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict, config: LedgerConfig = DEFAULT_CONFIG,
                  clock: Callable[[], datetime] = datetime.now,
                  id_factory: Callable[[], str] = generate_id) -> "Transaction":
        """Restore a transaction, including its status, from a snapshot."""
        transaction = cls(
            data['type'],
            data['amount'],
            from_account=data['from_account'],
            to_account=data['to_account'],
            description=data['description'],
            category=data['category'],
            metadata=data['metadata'],
            config=config,
            clock=clock,
            id_factory=lambda: data['id'],
        )
        transaction._timestamp = datetime.fromisoformat(data['timestamp'])
        transaction._status = TransactionStatus(data['status'])
        transaction._id_factory = id_factory
        return transaction

    def __repr__(self) -> str:
        return (f"Transaction(id={self._id!r}, type={self._type.value}, amount={self._amount}, "
                f"status={self._status.value})")

    def _require_status(self, expected: TransactionStatus, action: str) -> None:
        if self._status != expected:
            raise InvalidStateError(
                f"Transaction cannot be {action}. Current status: {self._status.value}"
            )

    def _parse_type(self, transaction_type) -> TransactionType:
        parsed = None
        if isinstance(transaction_type, TransactionType):
            parsed = transaction_type
        elif isinstance(transaction_type, str):
            try:
                parsed = TransactionType(transaction_type)
            except ValueError:
                parsed = TransactionType.__members__.get(transaction_type.upper())

        if parsed is None or parsed not in self._config.transactions.allowed_types:
            raise ValidationError("Invalid transaction type")
        return parsed

    def _validate_amount(self, amount) -> Decimal:
        try:
            amount = to_decimal(amount)
        except ValidationError:
            raise ValidationError("Invalid transaction amount")
        if amount <= 0:
            raise ValidationError("Invalid transaction amount")
        if amount > self._config.transactions.max_amount:
            raise ValidationError("Transaction amount exceeds maximum limit")
        return amount

    @staticmethod
    def _determine_category(category, transaction_type: TransactionType) -> Optional[TransactionCategory]:
        if isinstance(category, TransactionCategory):
            return category
        if isinstance(category, str):
            for member in TransactionCategory:
                if category in (member.value, member.name):
                    return member
        return DEFAULT_CATEGORIES.get(transaction_type)
