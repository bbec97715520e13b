"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from budgetmatch.domain.entities import (
    Account,
    Budget,
    BudgetEntry,
    Category,
    EntryType,
    Frequency,
    MatchConfidence,
    MatchingRules,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for budgetmatch.

    Every read and write is scoped to a user id; an entity owned by another
    user is reported exactly like a missing one.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        user_id: int,
        name: str,
        account_type: str,
        balance: Decimal = Decimal("0"),
        currency: str = "USD",
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int, user_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: int) -> list[Account]:
        """List all accounts of a user."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        user_id: int,
        name: str,
        category_type: EntryType,
        parent_id: Optional[int] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int, user_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, user_id: int, name: str) -> Optional[Category]:
        """Get category by exact name."""
        pass

    @abstractmethod
    def list_categories(
        self, user_id: int, category_type: Optional[EntryType] = None
    ) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Budget operations
    @abstractmethod
    def create_budget(self, user_id: int, name: str, description: Optional[str] = None) -> int:
        """Create an inactive budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int, user_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, user_id: int) -> list[Budget]:
        """List budgets of a user, newest first."""
        pass

    @abstractmethod
    def set_active_budget(self, budget_id: int, user_id: int) -> None:
        """Make a budget the user's only active budget."""
        pass

    @abstractmethod
    def get_active_budget(self, user_id: int) -> Optional[Budget]:
        """Get the user's active budget, or None if there is none."""
        pass

    # Budget entry operations
    @abstractmethod
    def create_budget_entry(
        self,
        budget_id: int,
        name: str,
        amount: Decimal,
        entry_type: EntryType,
        frequency: Frequency,
        start_date: date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        day_of_month: Optional[int] = None,
        day_of_week: Optional[int] = None,
        end_date: Optional[date] = None,
        matching_rules: Optional[MatchingRules] = None,
    ) -> int:
        """Create a budget entry. Returns entry ID."""
        pass

    @abstractmethod
    def get_budget_entry(self, entry_id: int, user_id: int) -> Optional[BudgetEntry]:
        """Get a budget entry by ID, checking ownership through its budget."""
        pass

    @abstractmethod
    def get_active_entries(self, budget_id: int) -> list[BudgetEntry]:
        """List active entries of a budget.

        Ordered by entry type descending, amount descending, then ID.
        """
        pass

    @abstractmethod
    def deactivate_budget_entry(self, entry_id: int, user_id: int) -> None:
        """Soft-delete a budget entry."""
        pass

    @abstractmethod
    def update_matching_rules(
        self, entry_id: int, user_id: int, rules: Optional[MatchingRules]
    ) -> BudgetEntry:
        """Replace an entry's matching rules wholesale."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: int,
        account_id: int,
        amount: Decimal,
        transaction_type: EntryType,
        transaction_date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create an unmatched transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int, user_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        budget_entry_id: Optional[int] = None,
        match_confidence: Optional[MatchConfidence] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first."""
        pass

    @abstractmethod
    def get_unmatched_transactions(self, user_id: int) -> list[Transaction]:
        """List the user's unmatched transactions, newest first."""
        pass

    @abstractmethod
    def update_transaction_category(
        self, transaction_id: int, user_id: int, category_id: Optional[int]
    ) -> Transaction:
        """Update transaction category."""
        pass

    @abstractmethod
    def link_transaction(
        self,
        transaction_id: int,
        user_id: int,
        budget_entry_id: int,
        confidence: MatchConfidence,
    ) -> Transaction:
        """Link a transaction to a budget entry with a confidence tag."""
        pass

    @abstractmethod
    def unlink_transaction(self, transaction_id: int, user_id: int) -> Transaction:
        """Clear a transaction's link and mark it unmatched."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int, user_id: int) -> None:
        """Hard-delete a transaction."""
        pass
