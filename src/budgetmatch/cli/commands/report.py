"""Projection and report commands."""

import click
from budgetmatch.cli.date_filters import (
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_cli_date_range,
)
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.errors import DomainError
from budgetmatch.domain.projection import DEFAULT_UPCOMING_DAYS, ProjectionService
from budgetmatch.domain.spending import DEFAULT_TOP_LIMIT, MAX_TOP_LIMIT, SpendingService
from budgetmatch.utils.date_parser import parse_month


@click.group()
def report_group():
    """Projections and budget reports."""
    pass


@report_group.command("project")
@click.option("--days", type=int, help="Days to project (default: 90, maximum: 365)")
@click.option("--balance", default="0", help="Starting balance (default: 0)")
@click.option("--start-date", help="First projected day (default: today)")
@click.option("--daily", is_flag=True, help="Show every day instead of the monthly breakdown")
@click.pass_context
def project(ctx, days: int | None, balance: str, start_date: str | None, daily: bool):
    """Project cash flow from the active budget.

    Examples:
        budgetmatch report project
        budgetmatch report project --days 180 --balance 2500
    """
    db = ctx.obj["db"]
    service = ProjectionService(db)
    starting_balance = parse_amount_or_exit(ctx, balance, "balance", allow_zero=True)
    start = parse_date_or_exit(ctx, start_date, "start date")

    projection = service.project_cash_flow(
        ctx.obj["user_id"], days=days, starting_balance=starting_balance, start_date=start
    )

    if not projection.daily:
        click.echo("No active budget to project.")
        return

    click.echo(f"\nCash flow {projection.start_date} to {projection.end_date}")
    click.echo("-" * 72)
    if daily:
        click.echo(f"{'Date':<12} {'Income':>14} {'Expenses':>14} {'Net':>14} {'Balance':>14}")
        click.echo("-" * 72)
        for day in projection.daily:
            if not day.income and not day.expenses:
                continue
            click.echo(
                f"{str(day.date):<12} {day.income:>14,.2f} {day.expenses:>14,.2f} "
                f"{day.net:>14,.2f} {day.balance:>14,.2f}"
            )
    else:
        click.echo(f"{'Month':<12} {'Income':>14} {'Expenses':>14} {'Net':>14} {'Balance':>14}")
        click.echo("-" * 72)
        for month in projection.monthly:
            click.echo(
                f"{month.month:<12} {month.income:>14,.2f} {month.expenses:>14,.2f} "
                f"{month.net:>14,.2f} {month.ending_balance:>14,.2f}"
            )
    click.echo("-" * 72)
    click.echo(
        f"Income: {projection.total_income:,.2f} | Expenses: {projection.total_expenses:,.2f} | "
        f"Net: {projection.net_cash_flow:,.2f}"
    )
    click.echo(
        f"Balance: {projection.starting_balance:,.2f} -> {projection.ending_balance:,.2f}"
    )


@report_group.command("occurrences")
@click.option("--start-date", required=True, help="Range start (YYYY-MM-DD or relative)")
@click.option("--end-date", required=True, help="Range end, at most 365 days after the start")
@click.pass_context
def occurrences(ctx, start_date: str, end_date: str):
    """List when each active entry occurs in a date range."""
    db = ctx.obj["db"]
    service = ProjectionService(db)
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    try:
        listing = service.list_occurrences(ctx.obj["user_id"], start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not listing:
        click.echo("No active budget entries.")
        return

    for item in listing:
        click.echo(f"\n{item.entry.name} (ID: {item.entry.id}): {len(item.dates)} occurrence(s)")
        for d in item.dates:
            click.echo(f"  {d}")


@report_group.command("upcoming")
@click.option("--days", type=int, default=DEFAULT_UPCOMING_DAYS, show_default=True, help="Horizon in days")
@click.pass_context
def upcoming(ctx, days: int):
    """List expense entries due within the horizon."""
    db = ctx.obj["db"]
    service = ProjectionService(db)

    try:
        bills = service.upcoming_bills(ctx.obj["user_id"], days=days)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not bills:
        click.echo("No upcoming bills.")
        return

    click.echo(f"\nUpcoming bills (next {days} days):")
    click.echo("-" * 60)
    for bill in bills:
        click.echo(f"{str(bill.due_date):<12} {bill.name[:30]:<30} {bill.amount:>14,.2f}")
    click.echo("-" * 60)
    click.echo(f"Total: {sum(b.amount for b in bills):,.2f}")


@report_group.command("variance")
@click.option("--month", default="this-month", show_default=True, help="Month as YYYY-MM, this-month or last-month")
@click.pass_context
def variance(ctx, month: str):
    """Compare budgeted and linked actual amounts for a month."""
    db = ctx.obj["db"]
    service = ProjectionService(db)

    try:
        month_key = parse_month(month)
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        rows = service.budget_variance(ctx.obj["user_id"], month_key)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No active budget entries.")
        return

    click.echo(f"\nBudget vs actual for {month_key}")
    click.echo("-" * 84)
    click.echo(f"{'Entry':<30} {'Budgeted':>12} {'Actual':>12} {'Variance':>12} {'%':>8}")
    click.echo("-" * 84)
    for row in rows:
        click.echo(
            f"{row.entry_name[:30]:<30} {row.budgeted:>12,.2f} {row.actual:>12,.2f} "
            f"{row.variance:>12,.2f} {row.variance_pct:>8,.2f}"
        )


def _echo_category_rows(rows, show_count: bool = False):
    click.echo("-" * 72)
    for row in rows:
        line = f"{row.category_name[:30]:<30} {row.total:>14,.2f} {row.percentage:>7,.2f}%"
        if show_count:
            line += f" {row.count:>6}"
        click.echo(line)
    click.echo("-" * 72)
    click.echo(f"Total: {sum(r.total for r in rows):,.2f}")


@report_group.command("by-category")
@click.option("--start-date", help="Range start (default: first day of this month)")
@click.option("--end-date", help="Range end (default: last day of this month)")
@click.pass_context
def by_category(ctx, start_date: str | None, end_date: str | None):
    """Show expense spending grouped by category."""
    db = ctx.obj["db"]
    service = SpendingService(db)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)

    try:
        rows = service.spending_by_category(ctx.obj["user_id"], start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No expenses found.")
        return

    click.echo("\nSpending by category")
    _echo_category_rows(rows)


@report_group.command("top")
@click.option("--start-date", help="Range start (default: first day of this month)")
@click.option("--end-date", help="Range end (default: today)")
@click.option(
    "--limit",
    type=int,
    default=DEFAULT_TOP_LIMIT,
    show_default=True,
    help=f"Number of categories, at most {MAX_TOP_LIMIT}",
)
@click.pass_context
def top(ctx, start_date: str | None, end_date: str | None, limit: int):
    """Show the categories with the highest spending."""
    db = ctx.obj["db"]
    service = SpendingService(db)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)

    try:
        rows = service.top_expenses(ctx.obj["user_id"], start_date=start, end_date=end, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No expenses found.")
        return

    click.echo(f"\nTop {len(rows)} expense categories")
    _echo_category_rows(rows, show_count=True)


@report_group.command("trends")
@click.option("--start-date", help="Range start (default: six months ago)")
@click.option("--end-date", help="Range end (default: today)")
@click.pass_context
def trends(ctx, start_date: str | None, end_date: str | None):
    """Show monthly expense totals per category."""
    db = ctx.obj["db"]
    service = SpendingService(db)
    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date)

    try:
        rows = service.spending_trends(ctx.obj["user_id"], start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No expenses found.")
        return

    current_month = None
    for row in rows:
        if row.month != current_month:
            current_month = row.month
            click.echo(f"\n{current_month}")
        click.echo(f"  {row.category_name[:30]:<30} {row.amount:>14,.2f}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
