"""Budget and budget entry commands."""

import json

import click
from budgetmatch.cli.date_filters import parse_amount_or_exit, parse_date_or_exit
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.budget import BudgetService
from budgetmatch.domain.category import CategoryService
from budgetmatch.domain.entities import EntryType, Frequency
from budgetmatch.domain.errors import DomainError, ValidationError
from budgetmatch.domain.projection import ProjectionService


def format_schedule(entry) -> str:
    """Short human description of an entry's recurrence."""
    frequency = entry.frequency.value if isinstance(entry.frequency, Frequency) else str(entry.frequency)
    if entry.day_of_month is not None:
        return f"{frequency} (day {entry.day_of_month})"
    if entry.day_of_week is not None:
        weekday = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"][entry.day_of_week]
        return f"{frequency} ({weekday})"
    return frequency


def resolve_budget_id(ctx, service: BudgetService, budget_id: int | None) -> int:
    """Use the given budget ID or fall back to the active budget."""
    if budget_id is not None:
        return budget_id
    active = service.get_active_budget(ctx.obj["user_id"])
    if active is None:
        click.echo("Error: No active budget. Pass --budget or run 'budget activate'.", err=True)
        ctx.exit(1)
    return active.id


@click.group()
def budget_group():
    """Manage budgets."""
    pass


@budget_group.command("create")
@click.argument("name")
@click.option("--description", help="Budget description")
@click.option("--activate", is_flag=True, help="Make this the active budget")
@click.pass_context
def create_budget(ctx, name: str, description: str | None, activate: bool):
    """Create a new budget.

    Examples:
        budgetmatch budget create "2025 Household" --activate
    """
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        budget_id = service.create_budget(
            user_id=ctx.obj["user_id"], name=name, description=description, activate=activate
        )
        suffix = " and set it active" if activate else ""
        click.echo(f"Created budget '{name}' (ID: {budget_id}){suffix}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("list")
@click.pass_context
def list_budgets(ctx):
    """List budgets, newest first."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    budgets = service.list_budgets(ctx.obj["user_id"])
    if not budgets:
        click.echo("No budgets found.")
        return

    click.echo("\nBudgets:")
    click.echo("-" * 60)
    for b in budgets:
        marker = "*" if b.is_active else " "
        click.echo(f"{marker} ID: {b.id:3d} | {b.name:30s} | {b.description or ''}")


@budget_group.command("activate")
@click.argument("budget_id", type=int)
@click.pass_context
def activate_budget(ctx, budget_id: int):
    """Make a budget the active one (deactivates the others)."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.activate_budget(budget_id, ctx.obj["user_id"])
        click.echo(f"Budget {budget_id} is now active")
    except DomainError as e:
        handle_domain_error(ctx, e)


@budget_group.command("show")
@click.option("--budget", "budget_id", type=int, help="Budget ID (default: active budget)")
@click.pass_context
def show_budget(ctx, budget_id: int | None):
    """Show a budget and its active entries."""
    db = ctx.obj["db"]
    service = BudgetService(db)
    user_id = ctx.obj["user_id"]
    budget_id = resolve_budget_id(ctx, service, budget_id)

    try:
        budget = service.require_budget(budget_id, user_id)
        entries = service.list_entries(budget_id, user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    status = "active" if budget.is_active else "inactive"
    click.echo(f"\n{budget.name} (ID: {budget.id}, {status})")
    if budget.description:
        click.echo(budget.description)
    _print_entries(entries)


@budget_group.command("summary")
@click.option("--budget", "budget_id", type=int, help="Budget ID (default: active budget)")
@click.pass_context
def budget_summary(ctx, budget_id: int | None):
    """Show monthly and annual totals and the budget health rating."""
    db = ctx.obj["db"]
    service = ProjectionService(db)
    budget_id = resolve_budget_id(ctx, BudgetService(db), budget_id)

    try:
        summary = service.budget_summary(budget_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    health = service.budget_health(summary)

    click.echo(f"\nBudget {budget_id} summary")
    click.echo("-" * 50)
    click.echo(f"{'':<12} {'Monthly':>16} {'Annual':>16}")
    click.echo(f"{'Income':<12} {summary.total_monthly_income:>16,.2f} {summary.total_annual_income:>16,.2f}")
    click.echo(f"{'Expenses':<12} {summary.total_monthly_expenses:>16,.2f} {summary.total_annual_expenses:>16,.2f}")
    click.echo(f"{'Net':<12} {summary.monthly_surplus_deficit:>16,.2f} {summary.annual_surplus_deficit:>16,.2f}")
    click.echo("-" * 50)
    click.echo(
        f"Entries: {summary.income_entries_count} income, {summary.expense_entries_count} expense"
    )
    click.echo(f"Health: {health.score}/100 ({health.status}) - {health.message}")


def _print_entries(entries) -> None:
    if not entries:
        click.echo("No entries.")
        return
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Type':<8} {'Name':<28} {'Amount':>12}  {'Schedule':<22} {'Start':<12} Rules")
    click.echo("-" * 100)
    for entry in entries:
        rules = json.dumps(entry.matching_rules.to_dict()) if entry.matching_rules else ""
        click.echo(
            f"{entry.id:<6} {entry.entry_type.value:<8} {entry.name[:28]:<28} "
            f"{entry.amount:>12,.2f}  {format_schedule(entry):<22} {str(entry.start_date):<12} {rules}"
        )


@click.group()
def entry_group():
    """Manage budget entries."""
    pass


@entry_group.command("add")
@click.argument("name")
@click.option("--amount", required=True, help="Planned amount (positive)")
@click.option("--type", "entry_type", type=click.Choice([t.value for t in EntryType]), default="expense", help="Entry type (default: expense)")
@click.option("--frequency", type=click.Choice([f.value for f in Frequency]), default="monthly", help="Recurrence (default: monthly)")
@click.option("--start-date", default="today", help="First date the entry can occur (default: today)")
@click.option("--end-date", help="Last date the entry can occur")
@click.option("--day-of-month", type=int, help="Anchor day 1-31 for monthly entries")
@click.option("--day-of-week", type=int, help="Anchor weekday 0-6, Sunday is 0, for weekly and fortnightly entries")
@click.option("--category", help="Category name")
@click.option("--description", help="Entry description")
@click.option("--rules", "rules_json", help="Matching rules as a JSON object")
@click.option("--budget", "budget_id", type=int, help="Budget ID (default: active budget)")
@click.pass_context
def add_entry(
    ctx,
    name: str,
    amount: str,
    entry_type: str,
    frequency: str,
    start_date: str,
    end_date: str | None,
    day_of_month: int | None,
    day_of_week: int | None,
    category: str | None,
    description: str | None,
    rules_json: str | None,
    budget_id: int | None,
):
    """Add a planned income or expense entry.

    Examples:
        budgetmatch entry add "Rent" --amount 1500 --day-of-month 1
        budgetmatch entry add "Salary" --amount 4200 --type income --day-of-month 25
        budgetmatch entry add "Netflix" --amount 15.99 --day-of-month 5 \\
            --rules '{"merchant_name": "NETFLIX"}'
    """
    db = ctx.obj["db"]
    service = BudgetService(db)
    user_id = ctx.obj["user_id"]
    budget_id = resolve_budget_id(ctx, service, budget_id)

    parsed_amount = parse_amount_or_exit(ctx, amount)
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    try:
        rules = parse_rules_json(rules_json)
        category_id = None
        if category is not None:
            category_id = CategoryService(db).require_category_by_name(user_id, category).id
        entry_id = service.add_entry(
            user_id=user_id,
            budget_id=budget_id,
            name=name,
            amount=parsed_amount,
            entry_type=entry_type,
            frequency=frequency,
            start_date=start,
            category_id=category_id,
            description=description,
            day_of_month=day_of_month,
            day_of_week=day_of_week,
            end_date=end,
            matching_rules=rules,
        )
        click.echo(f"Added entry '{name}' (ID: {entry_id}) to budget {budget_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def parse_rules_json(rules_json: str | None) -> dict | None:
    """Parse a matching-rules JSON option; the payload must be an object."""
    if rules_json is None:
        return None
    try:
        payload = json.loads(rules_json)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid rules JSON: {e}") from None
    if not isinstance(payload, dict):
        raise ValidationError("Rules must be a JSON object")
    return payload


@entry_group.command("list")
@click.option("--budget", "budget_id", type=int, help="Budget ID (default: active budget)")
@click.pass_context
def list_entries(ctx, budget_id: int | None):
    """List active entries of a budget."""
    db = ctx.obj["db"]
    service = BudgetService(db)
    budget_id = resolve_budget_id(ctx, service, budget_id)

    try:
        entries = service.list_entries(budget_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    _print_entries(entries)


@entry_group.command("remove")
@click.argument("entry_id", type=int)
@click.pass_context
def remove_entry(ctx, entry_id: int):
    """Deactivate a budget entry. Linked transactions keep their link."""
    db = ctx.obj["db"]
    service = BudgetService(db)

    try:
        service.remove_entry(entry_id, ctx.obj["user_id"])
        click.echo(f"Removed entry {entry_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register budget and entry commands with main CLI."""
    cli.add_command(budget_group, name="budget")
    cli.add_command(entry_group, name="entry")
