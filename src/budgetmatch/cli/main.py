"""Main CLI entry point."""

import click
from budgetmatch.database.factories import create_sqlite_database
from budgetmatch.logger import configure_logging

# Import and register all commands at module level
from budgetmatch.cli.commands import (
    account,
    category,
    budget,
    transaction,
    match,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides BUDGETMATCH_DB_PATH environment variable)",
    envvar="BUDGETMATCH_DB_PATH",
)
@click.option(
    "--user-id",
    type=int,
    default=1,
    show_default=True,
    envvar="BUDGETMATCH_USER_ID",
    help="User whose data the command acts on",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="BUDGETMATCH_LOG_LEVEL",
    help="Log level for messages written to stderr (default: WARNING)",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=None,
    envvar="BUDGETMATCH_LOG_JSON",
    help="Write log lines as JSON",
)
@click.pass_context
def cli(ctx, db_path: str | None, user_id: int, log_level: str | None, log_json: bool | None):
    """Budgetmatch - Budget planning and transaction matching.

    Plan recurring income and expenses, record transactions and link each
    transaction to the budget entry it pays for.
    """
    ctx.ensure_object(dict)
    configure_logging(level=log_level, json_output=log_json)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["user_id"] = user_id
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
budget.register_commands(cli)
transaction.register_commands(cli)
match.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
