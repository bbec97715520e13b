"""CLI helper for resolving account names and IDs."""

from __future__ import annotations

import click
from budgetmatch.cli.error_handling import handle_domain_error
from budgetmatch.domain.account import AccountService
from budgetmatch.domain.errors import DomainError


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, user_id: int, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return account_service.resolve_account(user_id, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)
