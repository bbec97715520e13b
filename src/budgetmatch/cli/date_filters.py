"""CLI helpers for parsing date and amount options."""

from datetime import date
from decimal import Decimal

import click

from budgetmatch.utils.amount_parser import parse_amount
from budgetmatch.utils.date_parser import parse_date


def parse_date_or_exit(ctx, value: str | None, label: str) -> date | None:
    """Parse an optional date option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(
    ctx, value: str | None, label: str = "amount", allow_zero: bool = False
) -> Decimal | None:
    """Parse an optional amount option, or exit with a CLI error."""
    if value is None:
        return None
    try:
        return parse_amount(value, allow_zero=allow_zero)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve an optional start/end pair, falling back to ``default_range``."""
    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")

    if start is None and end is None and default_range is not None:
        start, end = default_range

    if start is not None and end is not None and end < start:
        click.echo("Error: End date cannot be before start date", err=True)
        ctx.exit(1)

    return start, end
