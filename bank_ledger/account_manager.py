"""
Account manager for the bank ledger.

This module keeps the registry of accounts and transfers, runs transfers
between accounts, and snapshots the whole state after every mutation.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .account import Account
from .config import DEFAULT_CONFIG, LedgerConfig
from .database import DatabaseManager
from .exceptions import InsufficientFundsError, InvalidStateError, LedgerError, ValidationError
from .models import AccountStatus, TransactionStatus, TransactionType
from .transaction import Transaction
from .utils import generate_id

logger = logging.getLogger(__name__)


class AccountManager:
    """Manages bank account operations and business logic."""

    def __init__(self, db_manager: DatabaseManager, config: LedgerConfig = DEFAULT_CONFIG,
                 clock: Callable[[], datetime] = datetime.now,
                 id_factory: Callable[[], str] = generate_id):
        """Initialize account manager and reload the last snapshot."""
        self.db = db_manager
        self.config = config
        self.clock = clock
        self.id_factory = id_factory
        self.accounts: Dict[str, Account] = {}
        self.transfers: Dict[str, Transaction] = {}
        self._load()

    def create_account(self, account_number: str, owner: str, initial_balance=0) -> Account:
        """Open a new account."""
        if account_number in self.accounts:
            raise ValidationError(f"Account {account_number} already exists")

        account = Account(
            account_number,
            owner,
            initial_balance,
            config=self.config,
            clock=self.clock,
            id_factory=self.id_factory
        )
        self.accounts[account_number] = account
        self._persist()

        logger.info(f"Opened account {account_number} for {owner}")
        return account

    def get_account(self, account_number: str) -> Optional[Account]:
        """Get account by account number."""
        return self.accounts.get(account_number)

    def get_all_accounts(self) -> List[Account]:
        """Get all accounts in creation order."""
        return list(self.accounts.values())

    def deposit(self, account_number: str, amount, description: str = "Deposit") -> dict:
        """Deposit money to an account."""
        result = self._require_account(account_number).deposit(amount, description)
        self._persist()
        return result

    def withdraw(self, account_number: str, amount, description: str = "Withdrawal") -> dict:
        """Withdraw money from an account."""
        result = self._require_account(account_number).withdraw(amount, description)
        self._persist()
        return result

    def transfer(self, from_number: str, to_number: str, amount,
                 description: str = "") -> Transaction:
        """
        Transfer money between two accounts.

        The transfer is tracked as a Transaction. If either ledger rejects
        the movement the transaction is marked failed, kept for the record,
        and the error is raised to the caller.

        Returns:
            The completed transfer transaction
        """
        if from_number == to_number:
            raise ValidationError("Cannot transfer to the same account")

        source = self._require_account(from_number, "Source account not found")
        destination = self._require_account(to_number, "Destination account not found")

        transaction = Transaction(
            TransactionType.TRANSFER,
            amount,
            from_account=from_number,
            to_account=to_number,
            description=description or f"Transfer to account {to_number}",
            config=self.config,
            clock=self.clock,
            id_factory=self.id_factory
        )

        try:
            if destination.status != AccountStatus.ACTIVE:
                raise InvalidStateError(f"Destination account is {destination.status.value}")

            source.withdraw(transaction.amount, description or f"Transfer to account {to_number}")
            destination.deposit(transaction.amount, description or f"Transfer from account {from_number}")
        except LedgerError as e:
            transaction.fail(str(e), {'error_type': type(e).__name__})
            self.transfers[transaction.transaction_id] = transaction
            self._persist()
            raise

        transaction.complete({
            'from_balance': str(source.balance),
            'to_balance': str(destination.balance),
        })
        self.transfers[transaction.transaction_id] = transaction
        self._persist()

        logger.info(f"Transferred {transaction.amount} from {from_number} to {to_number}")
        return transaction

    def reverse_transfer(self, transaction_id: str, reason: str) -> Transaction:
        """
        Reverse a completed transfer.

        Moves the amount back from the destination to the source and returns
        the completed reversal transaction. The original is marked reversed.
        """
        original = self.get_transfer(transaction_id)
        if original is None:
            raise ValidationError(f"Transfer {transaction_id} not found")

        if original.status != TransactionStatus.COMPLETED:
            raise InvalidStateError(
                f"Transaction cannot be reversed. Current status: {original.status.value}"
            )

        payer = self._require_account(original.to_account, "Destination account not found")
        payee = self._require_account(original.from_account, "Source account not found")

        for account in (payer, payee):
            if account.status != AccountStatus.ACTIVE:
                raise InvalidStateError(f"Account {account.account_number} is {account.status.value}")
        if original.amount > payer.balance:
            raise InsufficientFundsError("Insufficient funds")

        reversal = original.reverse(reason)
        payer.withdraw(reversal.amount, reversal.description)
        payee.deposit(reversal.amount, reversal.description)
        reversal.complete({
            'from_balance': str(payer.balance),
            'to_balance': str(payee.balance),
        })

        self.transfers[reversal.transaction_id] = reversal
        self._persist()

        logger.info(f"Reversed transfer {transaction_id}: {reason}")
        return reversal

    def get_transfer(self, transaction_id: str) -> Optional[Transaction]:
        """Get a transfer by id."""
        return self.transfers.get(transaction_id)

    def get_transfers(self, account_number: Optional[str] = None) -> List[Transaction]:
        """Get transfers, optionally only those touching one account."""
        return [
            txn for txn in self.transfers.values()
            if account_number is None or account_number in (txn.from_account, txn.to_account)
        ]

    def freeze_account(self, account_number: str, reason: str = "") -> None:
        """Freeze an account to block deposits and withdrawals."""
        self._require_account(account_number).freeze(reason)
        self._persist()

    def unfreeze_account(self, account_number: str, reason: str = "") -> None:
        """Unfreeze an account."""
        self._require_account(account_number).unfreeze(reason)
        self._persist()

    def close_account(self, account_number: str, reason: str = "") -> None:
        """Close an account with a zero balance."""
        self._require_account(account_number).close(reason)
        self._persist()

    def get_statement(self, account_number: str, start_date: Optional[datetime] = None,
                      end_date: Optional[datetime] = None) -> dict:
        """Get an account statement for a date window."""
        return self._require_account(account_number).get_statement(start_date, end_date)

    def calculate_compound_interest(self, account_number: str, rate, years,
                                    compounding_frequency: int = 12) -> dict:
        """Project an account balance under compound interest."""
        return self._require_account(account_number).calculate_compound_interest(
            rate, years, compounding_frequency
        )

    def _require_account(self, account_number: str, message: str = "Account not found") -> Account:
        account = self.accounts.get(account_number)
        if account is None:
            raise ValidationError(message)
        return account

    def _persist(self) -> bool:
        payload = {
            'accounts': [account.to_dict() for account in self.accounts.values()],
            'transfers': [txn.to_dict() for txn in self.transfers.values()],
        }
        saved = self.db.save_snapshot(self.config.storage_key, payload)
        if not saved:
            logger.warning("Ledger snapshot was not saved")
        return saved

    def _load(self) -> None:
        snapshot = self.db.load_snapshot(self.config.storage_key)
        if not snapshot:
            return

        for data in snapshot.get('accounts', []):
            account = Account.from_dict(data, clock=self.clock, id_factory=self.id_factory)
            self.accounts[account.account_number] = account

        for data in snapshot.get('transfers', []):
            transaction = Transaction.from_dict(
                data, config=self.config, clock=self.clock, id_factory=self.id_factory
            )
            self.transfers[transaction.transaction_id] = transaction

        logger.info(f"Loaded {len(self.accounts)} accounts and {len(self.transfers)} transfers")
