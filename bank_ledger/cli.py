"""
CLI interface for the bank ledger.

This module provides a command-line interface for managing accounts, transfers
and the interest/loan calculators.
"""

import click
import logging
from decimal import Decimal, InvalidOperation

from .config import DEFAULT_CONFIG
from .database import DatabaseManager
from .account_manager import AccountManager
from .utils import amortization_schedule, compound_interest, format_currency, format_percentage, loan_monthly_payment


class BankCLI:
    """CLI wrapper for ledger operations."""

    def __init__(self, db_path: str = "bank.db", config=DEFAULT_CONFIG):
        """Initialize CLI with database."""
        self.config = config
        self.db_manager = DatabaseManager(db_path)
        self.account_manager = AccountManager(self.db_manager, config)

    def format_currency(self, amount: Decimal) -> str:
        """Format currency for display."""
        return format_currency(amount, self.config.currency)

    def parse_currency(self, amount_str: str) -> Decimal:
        """Parse currency input."""
        try:
            clean_str = amount_str.replace('$', '').replace(',', '').strip()
            return Decimal(clean_str)
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {amount_str}")


@click.group()
@click.option('--db-path', default='bank.db', help='Database file path')
@click.option('--log-level', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.pass_context
def cli(ctx, db_path, log_level):
    """Bank Ledger CLI"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    )
    ctx.ensure_object(dict)
    ctx.obj['cli'] = BankCLI(db_path)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Numeric account number')
@click.option('--owner', prompt='Owner name', help='Account owner full name')
@click.option('--initial-balance', default='0.00',
              prompt='Initial balance', help='Opening balance')
@click.pass_context
def create_account(ctx, account_number, owner, initial_balance):
    """Open a new account."""
    bank_cli = ctx.obj['cli']

    try:
        amount = bank_cli.parse_currency(initial_balance)
        account = bank_cli.account_manager.create_account(account_number, owner, amount)

        click.echo(f"✅ Account created successfully!")
        click.echo(f"Account Number: {account.account_number}")
        click.echo(f"Owner: {account.owner}")
        click.echo(f"Balance: {bank_cli.format_currency(account.balance)}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--amount', prompt='Deposit amount', help='Amount to deposit')
@click.option('--description', default='Deposit', help='Transaction description')
@click.pass_context
def deposit(ctx, account_number, amount, description):
    """Deposit money to an account."""
    bank_cli = ctx.obj['cli']

    try:
        deposit_amount = bank_cli.parse_currency(amount)
        result = bank_cli.account_manager.deposit(account_number, deposit_amount, description)

        click.echo(f"✅ Deposit successful!")
        click.echo(f"Amount: {bank_cli.format_currency(deposit_amount)}")
        click.echo(f"New Balance: {bank_cli.format_currency(result['new_balance'])}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--amount', prompt='Withdrawal amount', help='Amount to withdraw')
@click.option('--description', default='Withdrawal', help='Transaction description')
@click.pass_context
def withdraw(ctx, account_number, amount, description):
    """Withdraw money from an account."""
    bank_cli = ctx.obj['cli']

    try:
        withdraw_amount = bank_cli.parse_currency(amount)
        result = bank_cli.account_manager.withdraw(account_number, withdraw_amount, description)

        click.echo(f"✅ Withdrawal successful!")
        click.echo(f"Amount: {bank_cli.format_currency(withdraw_amount)}")
        click.echo(f"New Balance: {bank_cli.format_currency(result['new_balance'])}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--from-account', prompt='From account number', help='Source account number')
@click.option('--to-account', prompt='To account number', help='Destination account number')
@click.option('--amount', prompt='Transfer amount', help='Amount to transfer')
@click.option('--description', default='', help='Transfer description')
@click.pass_context
def transfer(ctx, from_account, to_account, amount, description):
    """Transfer money between accounts."""
    bank_cli = ctx.obj['cli']

    try:
        transfer_amount = bank_cli.parse_currency(amount)
        txn = bank_cli.account_manager.transfer(from_account, to_account, transfer_amount, description)

        from_balance = bank_cli.account_manager.get_account(from_account).balance
        to_balance = bank_cli.account_manager.get_account(to_account).balance

        click.echo(f"✅ Transfer successful!")
        click.echo(f"Transaction ID: {txn.transaction_id}")
        click.echo(f"Amount: {bank_cli.format_currency(transfer_amount)}")
        click.echo(f"From Account {from_account} Balance: {bank_cli.format_currency(from_balance)}")
        click.echo(f"To Account {to_account} Balance: {bank_cli.format_currency(to_balance)}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--transaction-id', prompt='Transaction ID', help='Transfer to reverse')
@click.option('--reason', prompt='Reason', help='Reason for the reversal')
@click.pass_context
def reverse_transfer(ctx, transaction_id, reason):
    """Reverse a completed transfer."""
    bank_cli = ctx.obj['cli']

    try:
        reversal = bank_cli.account_manager.reverse_transfer(transaction_id, reason)

        click.echo(f"✅ Transfer reversed!")
        click.echo(f"Reversal ID: {reversal.transaction_id}")
        click.echo(f"Amount: {bank_cli.format_currency(reversal.amount)}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.pass_context
def balance(ctx, account_number):
    """Check account balance."""
    bank_cli = ctx.obj['cli']

    account = bank_cli.account_manager.get_account(account_number)
    if not account:
        click.echo("❌ Account not found", err=True)
        return

    click.echo(f"\n💰 Account Balance")
    click.echo(f"Account: {account.account_number}")
    click.echo(f"Owner: {account.owner}")
    click.echo(f"Status: {account.status.value}")
    click.echo(f"Current Balance: {bank_cli.format_currency(account.balance)}")
    click.echo(f"Interest Rate: {format_percentage(account.current_interest_rate())}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--start', type=click.DateTime(), default=None, help='Include entries from this time')
@click.option('--end', type=click.DateTime(), default=None, help='Include entries up to this time')
@click.pass_context
def statement(ctx, account_number, start, end):
    """Print an account statement."""
    bank_cli = ctx.obj['cli']

    try:
        stmt = bank_cli.account_manager.get_statement(account_number, start, end)
        stats = stmt['statistics']

        click.echo(f"\n📄 Statement - {stmt['account_number']} ({stmt['owner']})")
        click.echo(f"{'='*60}")
        click.echo(f"Status: {stmt['status'].value}")
        click.echo(f"Current Balance: {bank_cli.format_currency(stmt['current_balance'])}")
        click.echo(f"Interest Rate: {format_percentage(stmt['interest_rate'])}")
        click.echo(f"Opened: {stmt['created_at'].strftime('%Y-%m-%d %H:%M:%S')}")

        click.echo(f"\n📊 Transaction Summary")
        click.echo(f"Total Transactions: {len(stmt['transactions'])}")
        click.echo(f"Deposits: {bank_cli.format_currency(stats['total_deposits'])}")
        click.echo(f"Withdrawals: {bank_cli.format_currency(stats['total_withdrawals'])}")
        click.echo(f"Fees: {bank_cli.format_currency(stats['total_fees'])}")
        click.echo(f"Largest Deposit: {bank_cli.format_currency(stats['largest_deposit'])}")
        click.echo(f"Largest Withdrawal: {bank_cli.format_currency(stats['largest_withdrawal'])}")
        click.echo(f"Average Transaction: {bank_cli.format_currency(stats['average_transaction'])}")

        if stmt['transactions']:
            click.echo(f"\n📋 Transaction Details")
            click.echo(f"{'Date':<18} {'Type':<12} {'Amount':<15} {'Balance':<15} {'Description'}")
            click.echo(f"{'-'*85}")
            for entry in stmt['transactions']:
                click.echo(
                    f"{entry.timestamp.strftime('%Y-%m-%d %H:%M'):<18} "
                    f"{entry.transaction_type.value:<12} "
                    f"{bank_cli.format_currency(entry.amount):<15} "
                    f"{bank_cli.format_currency(entry.balance_after):<15} "
                    f"{entry.description}"
                )

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--reason', default='', help='Reason for freezing')
@click.pass_context
def freeze_account(ctx, account_number, reason):
    """Freeze an account to prevent transactions."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.account_manager.freeze_account(account_number, reason)
        click.echo(f"✅ Account {account_number} has been frozen")
        if reason:
            click.echo(f"Reason: {reason}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--reason', default='', help='Reason for unfreezing')
@click.pass_context
def unfreeze_account(ctx, account_number, reason):
    """Unfreeze an account to allow transactions."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.account_manager.unfreeze_account(account_number, reason)
        click.echo(f"✅ Account {account_number} has been unfrozen")
        if reason:
            click.echo(f"Reason: {reason}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--reason', default='', help='Reason for closing')
@click.pass_context
def close_account(ctx, account_number, reason):
    """Close an account with a zero balance."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.account_manager.close_account(account_number, reason)
        click.echo(f"✅ Account {account_number} has been closed")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command('compound-interest')
@click.option('--account-number', default=None, help='Project this account balance')
@click.option('--principal', default=None, help='Starting amount when no account is given')
@click.option('--rate', prompt='Annual rate (e.g. 0.05)', help='Annual interest rate as a fraction')
@click.option('--years', prompt='Years', help='Number of years')
@click.option('--frequency', default=12, type=int, help='Compounding periods per year')
@click.pass_context
def interest_projection(ctx, account_number, principal, rate, years, frequency):
    """Project a balance under compound interest."""
    bank_cli = ctx.obj['cli']

    try:
        if account_number:
            result = bank_cli.account_manager.calculate_compound_interest(
                account_number, rate, years, frequency
            )
        elif principal is not None:
            result = compound_interest(bank_cli.parse_currency(principal), rate, years, frequency)
        else:
            click.echo("❌ Error: give --account-number or --principal", err=True)
            return

        click.echo(f"\n📈 Compound Interest")
        click.echo(f"Initial Balance: {bank_cli.format_currency(result['initial_balance'])}")
        click.echo(f"Effective Rate: {format_percentage(result['effective_rate'])}")
        click.echo(f"Final Amount: {bank_cli.format_currency(result['final_amount'])}")
        click.echo(f"Interest Earned: {bank_cli.format_currency(result['interest_earned'])}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--principal', prompt='Loan amount', help='Loan principal')
@click.option('--rate', prompt='Annual rate (e.g. 0.05)', help='Annual interest rate as a fraction')
@click.option('--years', prompt='Years', help='Loan term in years')
@click.pass_context
def loan_payment(ctx, principal, rate, years):
    """Calculate the monthly payment of a loan."""
    bank_cli = ctx.obj['cli']

    try:
        payment = loan_monthly_payment(bank_cli.parse_currency(principal), rate, years)
        click.echo(f"Monthly Payment: {bank_cli.format_currency(payment)}")

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--principal', prompt='Loan amount', help='Loan principal')
@click.option('--rate', prompt='Annual rate (e.g. 0.05)', help='Annual interest rate as a fraction')
@click.option('--years', prompt='Years', help='Loan term in years')
@click.pass_context
def amortization(ctx, principal, rate, years):
    """Print a loan amortization schedule."""
    bank_cli = ctx.obj['cli']

    try:
        rows = amortization_schedule(bank_cli.parse_currency(principal), rate, years)

        click.echo(f"{'#':<5} {'Payment':<15} {'Principal':<15} {'Interest':<15} {'Balance'}")
        click.echo(f"{'-'*65}")
        for row in rows:
            click.echo(
                f"{row.payment:<5} "
                f"{bank_cli.format_currency(row.monthly_payment):<15} "
                f"{bank_cli.format_currency(row.principal):<15} "
                f"{bank_cli.format_currency(row.interest):<15} "
                f"{bank_cli.format_currency(row.balance)}"
            )

    except ValueError as e:
        click.echo(f"❌ Error: {e}", err=True)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
