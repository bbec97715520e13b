"""Transaction management commands."""

import click
from budgetmatch.cli.account_resolution import resolve_account_or_exit
from budgetmatch.cli.date_filters import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_cli_date_range,
)
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.account import AccountService
from budgetmatch.domain.category import CategoryService
from budgetmatch.domain.entities import EntryType
from budgetmatch.domain.errors import DomainError
from budgetmatch.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--amount", required=True, help="Transaction amount (positive)")
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in EntryType]), default="expense", help="Transaction type (default: expense)")
@click.option("--date", "txn_date", default="today", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name")
@click.option("--notes", help="Notes")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    amount: str,
    transaction_type: str,
    txn_date: str,
    description: str | None,
    category: str | None,
    notes: str | None,
):
    """Record a transaction.

    Examples:
        budgetmatch transaction add --account Everyday --amount 15.99 --description "NETFLIX.COM"
        budgetmatch transaction add --account 1 --amount 4200 --type income --date 2025-01-25
    """
    db = ctx.obj["db"]
    user_id = ctx.obj["user_id"]
    service = TransactionService(db)

    account_id = resolve_account_or_exit(ctx, AccountService(db), user_id, account)
    parsed_amount = parse_amount_or_exit(ctx, amount)
    parsed_date = parse_date_or_exit(ctx, txn_date, "date")

    try:
        category_id = None
        if category is not None:
            category_id = CategoryService(db).require_category_by_name(user_id, category).id
        transaction_id = service.create_transaction(
            user_id=user_id,
            account_id=account_id,
            amount=parsed_amount,
            transaction_type=transaction_type,
            transaction_date=parsed_date,
            description=description,
            category_id=category_id,
            notes=notes,
        )
        click.echo(f"Added transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--account", help="Account name or ID")
@click.option("--unmatched", is_flag=True, help="Show only transactions not linked to a budget entry")
@click.pass_context
def list_transactions(ctx, start_date: str | None, end_date: str | None, account: str | None, unmatched: bool):
    """View transactions with optional filters, newest first."""
    db = ctx.obj["db"]
    user_id = ctx.obj["user_id"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)
    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, account_service, user_id, account)

    transactions = service.list_transactions(
        user_id=user_id,
        start_date=start,
        end_date=end,
        account_id=account_id,
        unmatched_only=unmatched,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(user_id)}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Date':<12} {'Type':<8} {'Amount':>12}  {'Account':<16} {'Match':<16} {'Description':<30}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        match = txn.match_confidence.value
        if txn.budget_entry_id is not None:
            match = f"{match}:{txn.budget_entry_id}"
        click.echo(
            f"{txn.id:<6} {str(txn.transaction_date):<12} {txn.transaction_type.value:<8} "
            f"{txn.amount:>12,.2f}  {accounts.get(txn.account_id, 'Unknown')[:16]:<16} "
            f"{match:<16} {(txn.description or '')[:30]:<30}"
        )

    total_expenses = sum(t.amount for t in transactions if t.transaction_type == EntryType.EXPENSE)
    total_income = sum(t.amount for t in transactions if t.transaction_type == EntryType.INCOME)
    click.echo("-" * 110)
    click.echo(
        f"{'TOTAL':<6} Expenses: ${total_expenses:,.2f} | "
        f"Income: ${total_income:,.2f} | Count: {len(transactions)}"
    )


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category", required=False)
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category: str | None):
    """Assign a category to a transaction, or clear it when CATEGORY is omitted."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.categorize(transaction_id, ctx.obj["user_id"], category)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if category is None:
        click.echo(f"Cleared category of transaction {transaction_id}")
    else:
        click.echo(f"Categorized transaction {transaction_id} as '{category}'")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        budgetmatch transaction delete 1
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn = service.require_transaction(transaction_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Delete transaction {transaction_id} ({txn.transaction_date}, {txn.amount:,.2f})?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_transaction(transaction_id, ctx.obj["user_id"])
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
