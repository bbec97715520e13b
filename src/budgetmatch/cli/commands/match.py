"""Transaction matching commands."""

import json

import click
from budgetmatch.cli.date_filters import parse_amount_or_exit
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.cli.commands.budget import parse_rules_json
from budgetmatch.domain.budget import BudgetService
from budgetmatch.domain.errors import DomainError
from budgetmatch.domain.matching import MatchingService


@click.group()
def match_group():
    """Match transactions to budget entries."""
    pass


@match_group.command("suggest")
@click.argument("transaction_id", type=int)
@click.option("--limit", type=int, default=5, show_default=True, help="Maximum suggestions to show")
@click.pass_context
def suggest(ctx, transaction_id: int, limit: int):
    """Rank budget entries that could match a transaction."""
    db = ctx.obj["db"]
    service = MatchingService(db)

    try:
        suggestions = service.suggest_for_transaction(transaction_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not suggestions:
        click.echo("No matching budget entries found.")
        return

    for suggestion in suggestions[:limit]:
        entry = suggestion.budget_entry
        click.echo(
            f"[{suggestion.confidence_score:3d}] {suggestion.confidence_level.value:<9} "
            f"Entry {entry.id}: {entry.name} ({entry.amount:,.2f})"
        )
        for reason in suggestion.match_reasons:
            click.echo(f"        - {reason}")


@match_group.command("auto")
@click.argument("transaction_id", type=int)
@click.pass_context
def auto(ctx, transaction_id: int):
    """Link a transaction to its best entry if the match is confident."""
    db = ctx.obj["db"]
    service = MatchingService(db)

    try:
        txn = service.auto_match(transaction_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)

    if txn.is_linked:
        click.echo(
            f"Transaction {transaction_id} linked to entry {txn.budget_entry_id} "
            f"({txn.match_confidence.value})"
        )
    else:
        click.echo(f"Transaction {transaction_id} left unmatched")


@match_group.command("auto-all")
@click.pass_context
def auto_all(ctx):
    """Auto-match every unmatched transaction."""
    db = ctx.obj["db"]
    service = MatchingService(db)

    count = service.bulk_auto_match(ctx.obj["user_id"])
    click.echo(f"Matched {count} transaction(s)")


@match_group.command("teach")
@click.argument("transaction_id", type=int)
@click.argument("entry_id", type=int)
@click.option("--rules/--no-rules", "create_rules", default=True, help="Save a matching rule from the transaction (default: on)")
@click.option("--tolerance", help="Amount tolerance for the saved rule (default: 2.00)")
@click.pass_context
def teach(ctx, transaction_id: int, entry_id: int, create_rules: bool, tolerance: str | None):
    """Confirm that a transaction belongs to a budget entry.

    Examples:
        budgetmatch match teach 12 3
        budgetmatch match teach 12 3 --tolerance 5
        budgetmatch match teach 12 3 --no-rules
    """
    db = ctx.obj["db"]
    service = MatchingService(db)
    amount_tolerance = parse_amount_or_exit(ctx, tolerance, "tolerance", allow_zero=True)

    try:
        service.teach_match(
            transaction_id,
            entry_id,
            ctx.obj["user_id"],
            create_rules=create_rules,
            amount_tolerance=amount_tolerance,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} linked to entry {entry_id} (manual)")


@match_group.command("unlink")
@click.argument("transaction_id", type=int)
@click.pass_context
def unlink(ctx, transaction_id: int):
    """Remove a transaction's link to its budget entry."""
    db = ctx.obj["db"]
    service = MatchingService(db)

    try:
        service.unlink(transaction_id, ctx.obj["user_id"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Transaction {transaction_id} unlinked")


@match_group.command("rules")
@click.argument("entry_id", type=int)
@click.option("--json", "rules_json", help="Replacement rules as a JSON object")
@click.option("--clear", is_flag=True, help="Remove all rules")
@click.pass_context
def rules(ctx, entry_id: int, rules_json: str | None, clear: bool):
    """Show, replace or clear an entry's matching rules.

    Examples:
        budgetmatch match rules 3
        budgetmatch match rules 3 --json '{"description_contains": ["SPOTIFY"]}'
        budgetmatch match rules 3 --clear
    """
    db = ctx.obj["db"]
    service = MatchingService(db)
    user_id = ctx.obj["user_id"]

    if rules_json is not None and clear:
        click.echo("Error: --json and --clear cannot be combined", err=True)
        ctx.exit(1)

    try:
        if clear:
            entry = service.update_matching_rules(entry_id, user_id, None)
        elif rules_json is not None:
            entry = service.update_matching_rules(entry_id, user_id, parse_rules_json(rules_json))
        else:
            entry = BudgetService(db).require_entry(entry_id, user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if entry.matching_rules is None:
        click.echo(f"Entry {entry_id} has no matching rules")
    else:
        click.echo(json.dumps(entry.matching_rules.to_dict(), indent=2))


def register_commands(cli):
    """Register matching commands with main CLI."""
    cli.add_command(match_group, name="match")
