"""Account management commands."""

import click
from budgetmatch.cli.date_filters import parse_amount_or_exit
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.account import AccountService
from budgetmatch.domain.entities import ACCOUNT_TYPES
from budgetmatch.domain.errors import DomainError


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    default="checking",
    help="Account type (default: checking)",
)
@click.option("--balance", default="0", help="Opening balance (default: 0)")
@click.option("--currency", default="USD", help="Three-letter currency code (default: USD)")
@click.pass_context
def create_account(ctx, name: str, account_type: str, balance: str, currency: str):
    """Create a new account.

    Examples:
        budgetmatch account create "Everyday"
        budgetmatch account create "Visa" --type credit_card
        budgetmatch account create "Savings" --type savings --balance 2500
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    opening_balance = parse_amount_or_exit(ctx, balance, "balance", allow_zero=True)

    try:
        account_id = service.create_account(
            user_id=ctx.obj["user_id"],
            name=name,
            account_type=account_type.lower(),
            balance=opening_balance,
            currency=currency,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(ctx.obj["user_id"])
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:12s} | "
            f"{acc.currency} {acc.balance:,.2f}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
