"""
CLI interface for the account ledger.

This module provides a command-line interface for managing accounts and
moving money. Each ledger error exits with its own status code.
"""

import logging
from decimal import Decimal
from typing import Optional

import click

from .account_manager import AccountManager
from .config import LedgerConfig, get_config
from .database import DatabaseManager
from .errors import LedgerError
from .models import to_decimal


LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class BankCLI:
    """CLI wrapper for ledger operations."""

    def __init__(self, db_path: Optional[str] = None, config: Optional[LedgerConfig] = None):
        """Initialize CLI with database."""
        self.config = config or get_config()
        self.db_manager = DatabaseManager(db_path or self.config.db_path,
                                          timeout=self.config.store_timeout)
        self.account_manager = AccountManager.from_config(self.db_manager, self.config)

    def format_currency(self, amount: Decimal) -> str:
        """Format currency for display."""
        return f"{amount:,.2f}"

    def parse_currency(self, amount_str: str) -> Decimal:
        """Parse currency input."""
        # Remove thousands separators
        return to_decimal(amount_str.replace(',', '').strip())


def fail(ctx, error: LedgerError):
    """Report a ledger error and exit with its status code."""
    click.echo(f"❌ Error: {error}", err=True)
    ctx.exit(error.exit_code)


@click.group()
@click.option('--db-path', default=None, help='Database file path')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False),
              default=None, help='Logging level')
@click.pass_context
def cli(ctx, db_path, log_level):
    """Account Ledger CLI"""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, (log_level or config.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    ctx.ensure_object(dict)
    try:
        ctx.obj['cli'] = BankCLI(db_path, config)
    except LedgerError as e:
        fail(ctx, e)


@cli.command()
@click.option('--name', prompt='Holder name', help='Account holder full name')
@click.pass_context
def create_account(ctx, name):
    """Create a new account."""
    bank_cli = ctx.obj['cli']

    try:
        account = bank_cli.account_manager.create_account(name)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("✅ Account created successfully!")
    click.echo(f"Account Number: {account.account_number}")
    click.echo(f"Holder: {account.holder_name}")
    click.echo(f"Balance: {bank_cli.format_currency(account.balance)}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.pass_context
def show_account(ctx, account_number):
    """Show account details."""
    bank_cli = ctx.obj['cli']

    try:
        account = bank_cli.account_manager.get_account(account_number)
        transactions = bank_cli.account_manager.transactions_for(account_number)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("\n📊 Account Details")
    click.echo(f"{'='*50}")
    click.echo(f"Account Number: {account.account_number}")
    click.echo(f"Holder: {account.holder_name}")
    click.echo(f"Balance: {bank_cli.format_currency(account.balance)}")
    click.echo(f"Created: {account.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
    click.echo(f"Transactions: {len(transactions)}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.pass_context
def balance(ctx, account_number):
    """Check account balance."""
    bank_cli = ctx.obj['cli']

    try:
        account_balance = bank_cli.account_manager.get_balance(account_number)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("\n💰 Account Balance")
    click.echo(f"Account: {account_number}")
    click.echo(f"Current Balance: {bank_cli.format_currency(account_balance)}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--amount', prompt='Deposit amount', help='Amount to deposit')
@click.pass_context
def deposit(ctx, account_number, amount):
    """Deposit money to an account."""
    bank_cli = ctx.obj['cli']

    try:
        deposit_amount = bank_cli.parse_currency(amount)
        account = bank_cli.account_manager.deposit(account_number, deposit_amount)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("✅ Deposit successful!")
    click.echo(f"Amount: {bank_cli.format_currency(deposit_amount)}")
    click.echo(f"New Balance: {bank_cli.format_currency(account.balance)}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--amount', prompt='Withdrawal amount', help='Amount to withdraw')
@click.pass_context
def withdraw(ctx, account_number, amount):
    """Withdraw money from an account."""
    bank_cli = ctx.obj['cli']

    try:
        withdraw_amount = bank_cli.parse_currency(amount)
        account = bank_cli.account_manager.withdraw(account_number, withdraw_amount)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("✅ Withdrawal successful!")
    click.echo(f"Amount: {bank_cli.format_currency(withdraw_amount)}")
    click.echo(f"New Balance: {bank_cli.format_currency(account.balance)}")


@cli.command()
@click.option('--from-account', prompt='From account number', help='Source account number')
@click.option('--to-account', prompt='To account number', help='Destination account number')
@click.option('--amount', prompt='Transfer amount', help='Amount to transfer')
@click.pass_context
def transfer(ctx, from_account, to_account, amount):
    """Transfer money between accounts."""
    bank_cli = ctx.obj['cli']

    try:
        transfer_amount = bank_cli.parse_currency(amount)
        bank_cli.account_manager.transfer(from_account, to_account, transfer_amount)
        from_balance = bank_cli.account_manager.get_balance(from_account)
        to_balance = bank_cli.account_manager.get_balance(to_account)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo("✅ Transfer successful!")
    click.echo(f"Amount: {bank_cli.format_currency(transfer_amount)}")
    click.echo(f"From Account {from_account} Balance: {bank_cli.format_currency(from_balance)}")
    click.echo(f"To Account {to_account} Balance: {bank_cli.format_currency(to_balance)}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.option('--name', prompt='New holder name', help='New account holder name')
@click.pass_context
def rename(ctx, account_number, name):
    """Change the holder name of an account."""
    bank_cli = ctx.obj['cli']

    try:
        account = bank_cli.account_manager.update_holder_name(account_number, name)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo(f"✅ Account {account.account_number} now belongs to {account.holder_name}")


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.confirmation_option(prompt='Delete this account? Its history is kept.')
@click.pass_context
def delete_account(ctx, account_number):
    """Delete an account."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.account_manager.delete_account(account_number)
    except LedgerError as e:
        fail(ctx, e)
        return

    click.echo(f"✅ Account {account_number} deleted")


@cli.command()
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    bank_cli = ctx.obj['cli']

    try:
        accounts = bank_cli.account_manager.list_accounts()
    except LedgerError as e:
        fail(ctx, e)
        return

    if not accounts:
        click.echo("No accounts")
        return

    click.echo(f"{'Account':<12} {'Balance':>15}  {'Holder'}")
    click.echo(f"{'-'*50}")
    for account in accounts:
        click.echo(
            f"{account.account_number:<12} "
            f"{bank_cli.format_currency(account.balance):>15}  "
            f"{account.holder_name}"
        )


@cli.command()
@click.option('--account-number', prompt='Account number', help='Account number')
@click.pass_context
def history(ctx, account_number):
    """Show the transactions of an account, including deleted ones."""
    bank_cli = ctx.obj['cli']

    try:
        transactions = bank_cli.account_manager.transactions_for(account_number)
    except LedgerError as e:
        fail(ctx, e)
        return

    if not transactions:
        click.echo(f"No transactions for {account_number}")
        return

    click.echo(f"\n📋 Transactions for {account_number}")
    click.echo(f"{'Date':<17} {'Type':<9} {'Amount':>15}  {'From':<8} {'To':<8} {'ID'}")
    click.echo(f"{'-'*85}")
    for txn in transactions:
        click.echo(
            f"{txn.timestamp.strftime('%Y-%m-%d %H:%M'):<17} "
            f"{txn.transaction_type.value:<9} "
            f"{bank_cli.format_currency(txn.amount):>15}  "
            f"{txn.source_account or '-':<8} "
            f"{txn.destination_account or '-':<8} "
            f"{txn.transaction_id}"
        )


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
