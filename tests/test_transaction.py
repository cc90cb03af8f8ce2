"""
Tests for the transaction module.

This module contains tests for Transaction validation, categories and the
pending/completed/failed/cancelled/reversed status machine.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from bank_ledger.config import LedgerConfig, TransactionSettings
from bank_ledger.exceptions import InvalidStateError, ValidationError
from bank_ledger.models import TransactionCategory, TransactionStatus, TransactionType
from bank_ledger.transaction import Transaction


@pytest.fixture
def make_transaction(clock, id_factory):
    """Build transfers with the deterministic clock and ids."""
    def _make(**overrides):
        params = {
            'transaction_type': TransactionType.TRANSFER,
            'amount': Decimal('250'),
            'from_account': "1111111111",
            'to_account': "2222222222",
            'description': "Rent share",
        }
        params.update(overrides)
        return Transaction(clock=clock, id_factory=id_factory, **params)
    return _make


class TestTransactionCreation:
    """Test construction and validation."""

    def test_defaults(self, make_transaction):
        """New transactions are pending with generated id and timestamp."""
        txn = make_transaction()

        assert txn.transaction_id == "TXN-000001"
        assert txn.timestamp == datetime(2024, 1, 1, 9, 0)
        assert txn.status == TransactionStatus.PENDING
        assert txn.transaction_type == TransactionType.TRANSFER
        assert txn.amount == Decimal('250')
        assert txn.from_account == "1111111111"
        assert txn.to_account == "2222222222"
        assert txn.description == "Rent share"
        assert txn.category == TransactionCategory.TRANSFER
        assert txn.metadata == {}
        assert txn.is_modifiable() is True

    @pytest.mark.parametrize("transaction_type, expected", [
        (TransactionType.DEPOSIT, TransactionCategory.INCOME),
        (TransactionType.WITHDRAWAL, TransactionCategory.EXPENSE),
        (TransactionType.TRANSFER, TransactionCategory.TRANSFER),
        (TransactionType.INTEREST, TransactionCategory.INTEREST),
        (TransactionType.FEE, TransactionCategory.FEE),
    ])
    def test_category_inferred_from_type(self, make_transaction, transaction_type, expected):
        """Category defaults from the type."""
        assert make_transaction(transaction_type=transaction_type).category == expected

    def test_explicit_category(self, make_transaction):
        """A recognized category overrides the default."""
        assert make_transaction(category=TransactionCategory.BILLS).category == TransactionCategory.BILLS
        assert make_transaction(category="Savings").category == TransactionCategory.SAVINGS
        assert make_transaction(category="INVESTMENT").category == TransactionCategory.INVESTMENT

    def test_unknown_category_falls_back(self, make_transaction):
        """An unrecognized category is replaced by the default."""
        assert make_transaction(category="Lottery").category == TransactionCategory.TRANSFER

    def test_type_from_string(self, make_transaction):
        """Types may be given by value or by name."""
        assert make_transaction(transaction_type="deposit").transaction_type == TransactionType.DEPOSIT
        assert make_transaction(transaction_type="FEE").transaction_type == TransactionType.FEE

    @pytest.mark.parametrize("transaction_type", ["refund", "", None, 42])
    def test_invalid_type(self, make_transaction, transaction_type):
        """Unrecognized types are rejected."""
        with pytest.raises(ValidationError, match="Invalid transaction type"):
            make_transaction(transaction_type=transaction_type)

    def test_type_not_allowed_by_config(self, clock, id_factory):
        """Only configured types are accepted."""
        config = LedgerConfig(transactions=TransactionSettings(
            allowed_types=frozenset({TransactionType.DEPOSIT})
        ))
        with pytest.raises(ValidationError, match="Invalid transaction type"):
            Transaction(TransactionType.TRANSFER, 10, "1111111111", config=config)

    @pytest.mark.parametrize("amount", [0, -1, float('nan'), float('inf'), "abc", None])
    def test_invalid_amount(self, make_transaction, amount):
        """Amounts must be positive and finite."""
        with pytest.raises(ValidationError, match="Invalid transaction amount"):
            make_transaction(amount=amount)

    def test_amount_limit(self, make_transaction):
        """Amounts above the configured maximum are rejected."""
        assert make_transaction(amount=1000000).amount == Decimal('1000000')
        with pytest.raises(ValidationError, match="exceeds maximum"):
            make_transaction(amount=Decimal('1000000.01'))

    @pytest.mark.parametrize("from_account", ["", None])
    def test_source_required(self, make_transaction, from_account):
        """Source account must be given."""
        with pytest.raises(ValidationError, match="Source account is required"):
            make_transaction(from_account=from_account)

    def test_metadata_is_copied(self, make_transaction):
        """Caller's metadata dict is not shared."""
        metadata = {'channel': "mobile"}
        txn = make_transaction(metadata=metadata)
        metadata['channel'] = "web"

        assert txn.metadata == {'channel': "mobile"}
        txn.metadata['channel'] = "atm"
        assert txn.metadata == {'channel': "mobile"}


class TestTransactionLifecycle:
    """Test status transitions."""

    def test_complete(self, make_transaction):
        """Pending -> completed records the result."""
        txn = make_transaction()

        assert txn.complete({'reference': "ABC"}) is True
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.metadata['result'] == {'reference': "ABC"}
        assert 'completed_at' in txn.metadata
        assert txn.is_modifiable() is False

    @pytest.mark.parametrize("action", ["complete", "fail", "cancel"])
    def test_completed_is_terminal_for_pending_events(self, make_transaction, action):
        """complete/fail/cancel after completion all fail."""
        txn = make_transaction()
        txn.complete()

        with pytest.raises(InvalidStateError, match="Current status: completed"):
            if action == "complete":
                txn.complete()
            else:
                getattr(txn, action)("late")
        assert txn.status == TransactionStatus.COMPLETED

    def test_fail(self, make_transaction):
        """Pending -> failed records the reason and details."""
        txn = make_transaction()
        txn.fail("Insufficient funds", {'balance': "10"})

        assert txn.status == TransactionStatus.FAILED
        assert txn.metadata['failure_reason'] == "Insufficient funds"
        assert txn.metadata['failure_details'] == {'balance': "10"}
        with pytest.raises(InvalidStateError, match="Current status: failed"):
            txn.complete()

    def test_cancel(self, make_transaction):
        """Pending -> cancelled records the reason."""
        txn = make_transaction()
        txn.cancel("Customer request")

        assert txn.status == TransactionStatus.CANCELLED
        assert txn.metadata['cancellation_reason'] == "Customer request"
        with pytest.raises(InvalidStateError, match="Current status: cancelled"):
            txn.reverse("no")

    def test_reverse_requires_completed(self, make_transaction):
        """Pending transactions cannot be reversed."""
        txn = make_transaction()
        with pytest.raises(InvalidStateError, match="cannot be reversed. Current status: pending"):
            txn.reverse("oops")
        assert txn.status == TransactionStatus.PENDING

    def test_reverse(self, make_transaction):
        """Reversal marks the original and returns a linked, swapped transaction."""
        txn = make_transaction(category=TransactionCategory.BILLS)
        txn.complete()

        reversal = txn.reverse("Duplicate")

        assert txn.status == TransactionStatus.REVERSED
        assert txn.metadata['reversal_reason'] == "Duplicate"
        assert reversal is not txn
        assert reversal.status == TransactionStatus.PENDING
        assert reversal.transaction_id != txn.transaction_id
        assert reversal.from_account == "2222222222"
        assert reversal.to_account == "1111111111"
        assert reversal.amount == txn.amount
        assert reversal.transaction_type == txn.transaction_type
        assert reversal.category == TransactionCategory.BILLS
        assert reversal.description == "Reversal: Rent share - Duplicate"
        assert reversal.metadata == {
            'original_transaction': txn.transaction_id,
            'reversal_reason': "Duplicate",
        }

    def test_reverse_without_destination(self, make_transaction):
        """Single-account transactions reverse onto the same account."""
        txn = make_transaction(transaction_type=TransactionType.FEE, to_account=None)
        txn.complete()

        reversal = txn.reverse("waived")

        assert reversal.from_account == "1111111111"
        assert reversal.to_account == "1111111111"

    def test_reversed_is_terminal(self, make_transaction):
        """A reversed transaction cannot be reversed again."""
        txn = make_transaction()
        txn.complete()
        txn.reverse("first")

        with pytest.raises(InvalidStateError, match="Current status: reversed"):
            txn.reverse("second")


class TestTransactionExtras:
    """Test notes, attachments and serialization."""

    def test_notes_and_attachments(self, make_transaction):
        """Notes and attachments accumulate in metadata."""
        txn = make_transaction()
        txn.add_note("Called customer")
        txn.add_note("Confirmed")
        txn.add_attachment({'name': "receipt.pdf"})

        metadata = txn.metadata
        assert [note['text'] for note in metadata['notes']] == ["Called customer", "Confirmed"]
        assert metadata['attachments'][0]['name'] == "receipt.pdf"
        assert 'uploaded_at' in metadata['attachments'][0]

    def test_nested_metadata_is_copied(self, make_transaction):
        """Notes read back from metadata cannot be edited in place."""
        txn = make_transaction()
        txn.add_note("a")

        txn.metadata['notes'].append({'text': "forged"})
        txn.to_dict()['metadata']['notes'].clear()
        txn.get_details()['metadata']['notes'].clear()

        assert [note['text'] for note in txn.metadata['notes']] == ["a"]

    def test_get_details(self, make_transaction):
        """Details expose every field."""
        details = make_transaction().get_details()

        assert details['id'] == "TXN-000001"
        assert details['status'] == TransactionStatus.PENDING
        assert details['type'] == TransactionType.TRANSFER
        assert details['amount'] == Decimal('250')
        assert details['category'] == TransactionCategory.TRANSFER

    def test_round_trip(self, make_transaction):
        """Status, id, timestamp and metadata survive to_dict/from_dict."""
        txn = make_transaction()
        txn.complete({'ok': True})

        restored = Transaction.from_dict(txn.to_dict())

        assert restored.transaction_id == txn.transaction_id
        assert restored.timestamp == txn.timestamp
        assert restored.status == TransactionStatus.COMPLETED
        assert restored.amount == txn.amount
        assert restored.category == txn.category
        assert restored.metadata == txn.metadata

    def test_restored_transaction_continues_lifecycle(self, make_transaction):
        """A restored completed transaction can still be reversed."""
        txn = make_transaction()
        txn.complete()

        restored = Transaction.from_dict(txn.to_dict())
        reversal = restored.reverse("late dispute")

        assert restored.status == TransactionStatus.REVERSED
        assert reversal.transaction_id != restored.transaction_id
