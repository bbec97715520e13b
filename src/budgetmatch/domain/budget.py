"""Budget and budget entry domain service."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from budgetmatch.database.base import Database
from budgetmatch.domain.category import parse_entry_type
from budgetmatch.domain.entities import (
    Budget,
    BudgetEntry,
    EntryType,
    Frequency,
    MatchingRules,
)
from budgetmatch.domain.errors import (
    NotFoundError,
    ValidationError,
    budget_entry_not_found,
    budget_not_found,
    category_not_found,
    invalid_choice,
)

# Anchor fields each frequency accepts
WEEKDAY_ANCHORED = (Frequency.WEEKLY, Frequency.FORTNIGHTLY)
DAY_OF_MONTH_ANCHORED = (Frequency.MONTHLY,)


def parse_frequency(value: str | Frequency) -> Frequency:
    """Parse a frequency name into a Frequency."""
    try:
        return Frequency(value)
    except ValueError:
        raise ValidationError(
            invalid_choice("frequency", value, tuple(f.value for f in Frequency))
        ) from None


class BudgetService:
    """Service for managing budgets and their entries."""

    def __init__(self, db: Database):
        """Initialize budget service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_budget(
        self,
        user_id: int,
        name: str,
        description: Optional[str] = None,
        activate: bool = False,
    ) -> int:
        """Create a budget, optionally making it the active one.

        Returns:
            Budget ID
        """
        if not name or not name.strip():
            raise ValidationError("Budget name cannot be empty")
        budget_id = self.db.create_budget(user_id=user_id, name=name, description=description)
        if activate:
            self.db.set_active_budget(budget_id, user_id)
        return budget_id

    def require_budget(self, budget_id: int, user_id: int) -> Budget:
        """Get budget by ID or raise NotFoundError."""
        budget = self.db.get_budget(budget_id, user_id)
        if budget is None:
            raise NotFoundError(budget_not_found(budget_id))
        return budget

    def list_budgets(self, user_id: int) -> list[Budget]:
        return self.db.list_budgets(user_id)

    def activate_budget(self, budget_id: int, user_id: int) -> None:
        """Make a budget the user's single active budget."""
        self.require_budget(budget_id, user_id)
        self.db.set_active_budget(budget_id, user_id)

    def get_active_budget(self, user_id: int) -> Optional[Budget]:
        return self.db.get_active_budget(user_id)

    def add_entry(
        self,
        user_id: int,
        budget_id: int,
        name: str,
        amount: Decimal,
        entry_type: str | EntryType,
        frequency: str | Frequency,
        start_date: date,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
        day_of_month: Optional[int] = None,
        day_of_week: Optional[int] = None,
        end_date: Optional[date] = None,
        matching_rules: Optional[dict[str, Any]] = None,
    ) -> int:
        """Add a planned entry to a budget.

        Args:
            user_id: Owner user ID
            budget_id: Budget to add the entry to
            name: Display name, also used for description matching
            amount: Positive planned amount
            entry_type: 'income' or 'expense'
            frequency: once_off, daily, weekly, fortnightly, monthly or annually
            start_date: First date the entry can occur (inclusive)
            category_id: Optional category ID
            description: Optional free-text description
            day_of_month: Anchor day 1-31 for monthly entries
            day_of_week: Anchor weekday 0-6 (Sunday first) for weekly/fortnightly entries
            end_date: Optional last date the entry can occur (inclusive)
            matching_rules: Optional matching-rules payload

        Returns:
            Budget entry ID

        Raises:
            NotFoundError: If the budget or category doesn't exist
            ValidationError: If any field is out of range
        """
        self.require_budget(budget_id, user_id)

        if not name or not name.strip():
            raise ValidationError("Entry name cannot be empty")
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Entry amount must be greater than zero")
        parsed_type = parse_entry_type(entry_type)
        parsed_frequency = parse_frequency(frequency)

        if day_of_month is not None:
            if not 1 <= day_of_month <= 31:
                raise ValidationError("Day of month must be between 1 and 31")
            if parsed_frequency not in DAY_OF_MONTH_ANCHORED:
                raise ValidationError(
                    f"Day of month does not apply to {parsed_frequency.value} entries"
                )
        if day_of_week is not None:
            if not 0 <= day_of_week <= 6:
                raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
            if parsed_frequency not in WEEKDAY_ANCHORED:
                raise ValidationError(
                    f"Day of week does not apply to {parsed_frequency.value} entries"
                )
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        if category_id is not None and self.db.get_category(category_id, user_id) is None:
            raise NotFoundError(category_not_found(category_id))

        return self.db.create_budget_entry(
            budget_id=budget_id,
            name=name,
            amount=Decimal(amount),
            entry_type=parsed_type,
            frequency=parsed_frequency,
            start_date=start_date,
            category_id=category_id,
            description=description,
            day_of_month=day_of_month,
            day_of_week=day_of_week,
            end_date=end_date,
            matching_rules=MatchingRules.from_dict(matching_rules),
        )

    def require_entry(self, entry_id: int, user_id: int) -> BudgetEntry:
        """Get budget entry by ID or raise NotFoundError."""
        entry = self.db.get_budget_entry(entry_id, user_id)
        if entry is None:
            raise NotFoundError(budget_entry_not_found(entry_id))
        return entry

    def list_entries(self, budget_id: int, user_id: int) -> list[BudgetEntry]:
        """List active entries of a budget."""
        self.require_budget(budget_id, user_id)
        return self.db.get_active_entries(budget_id)

    def remove_entry(self, entry_id: int, user_id: int) -> None:
        """Soft-delete an entry; linked transactions keep their link."""
        self.require_entry(entry_id, user_id)
        self.db.deactivate_budget_entry(entry_id, user_id)
