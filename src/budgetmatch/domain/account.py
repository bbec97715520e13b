"""Account domain service."""

from decimal import Decimal
from typing import Optional
from budgetmatch.database.base import Database
from budgetmatch.domain.entities import ACCOUNT_TYPES, Account as AccountEntity
from budgetmatch.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    duplicate_name,
    invalid_choice,
)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        user_id: int,
        name: str,
        account_type: str = "checking",
        balance: Decimal = Decimal("0"),
        currency: str = "USD",
    ) -> int:
        """Create a new account.

        Args:
            user_id: Owner user ID
            name: Account name
            account_type: One of checking, savings, credit_card, cash, investment
            balance: Opening balance
            currency: Three-letter currency code

        Returns:
            Account ID

        Raises:
            ValidationError: If the type or currency is invalid
            ConflictError: If the user already has an account with this name
        """
        if not name or not name.strip():
            raise ValidationError("Account name cannot be empty")
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError(invalid_choice("account type", account_type, ACCOUNT_TYPES))
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError(f"Invalid currency code '{currency}'")

        # Check if account with same name exists
        for acc in self.db.list_accounts(user_id):
            if acc.name == name:
                raise ConflictError(duplicate_name("Account", name))

        return self.db.create_account(
            user_id=user_id,
            name=name,
            account_type=account_type,
            balance=balance,
            currency=currency.upper(),
        )

    def get_account(self, account_id: int, user_id: int) -> Optional[AccountEntity]:
        """Get account by ID, or None if not found."""
        return self.db.get_account(account_id, user_id)

    def require_account(self, account_id: int, user_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id, user_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, user_id: int) -> list[AccountEntity]:
        """List all accounts of a user."""
        return self.db.list_accounts(user_id)

    def resolve_account(self, user_id: int, account: str | int) -> int:
        """Resolve an account name or ID to an account ID.

        Args:
            user_id: Owner user ID
            account: Account name, or ID as int or numeric string

        Returns:
            Account ID

        Raises:
            NotFoundError: If no matching account exists
        """
        # Try to parse as integer (handles string IDs like "1")
        try:
            account_id = int(account)
        except (ValueError, TypeError):
            account_id = None

        if account_id is not None:
            return self.require_account(account_id, user_id).id

        for acc in self.db.list_accounts(user_id):
            if acc.name == account:
                return acc.id

        raise NotFoundError(f"Account '{account}' not found")
