"""Category domain service."""

from typing import Optional
from budgetmatch.database.base import Database
from budgetmatch.domain.entities import Category, EntryType
from budgetmatch.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_name_not_found,
    category_not_found,
    duplicate_name,
    invalid_choice,
)

# Default category set seeded for a new user
DEFAULT_CATEGORIES: list[tuple[str, EntryType]] = [
    ("Housing", EntryType.EXPENSE),
    ("Transportation", EntryType.EXPENSE),
    ("Food & Groceries", EntryType.EXPENSE),
    ("Utilities", EntryType.EXPENSE),
    ("Healthcare", EntryType.EXPENSE),
    ("Entertainment", EntryType.EXPENSE),
    ("Shopping", EntryType.EXPENSE),
    ("Personal Care", EntryType.EXPENSE),
    ("Education", EntryType.EXPENSE),
    ("Insurance", EntryType.EXPENSE),
    ("Subscriptions", EntryType.EXPENSE),
    ("Dining Out", EntryType.EXPENSE),
    ("Other Expenses", EntryType.EXPENSE),
    ("Salary", EntryType.INCOME),
    ("Freelance", EntryType.INCOME),
    ("Investments", EntryType.INCOME),
    ("Gifts", EntryType.INCOME),
    ("Other Income", EntryType.INCOME),
]


def parse_entry_type(value: str | EntryType) -> EntryType:
    """Parse 'income' or 'expense' into an EntryType."""
    try:
        return EntryType(value)
    except ValueError:
        raise ValidationError(
            invalid_choice("type", value, tuple(t.value for t in EntryType))
        ) from None


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        user_id: int,
        name: str,
        category_type: str | EntryType = EntryType.EXPENSE,
        parent_name: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            user_id: Owner user ID
            name: Category name, unique per user
            category_type: 'income' or 'expense'
            parent_name: Optional parent category name

        Returns:
            Category ID

        Raises:
            ValidationError: If the type is invalid or differs from the parent's
            ConflictError: If the name is taken
            NotFoundError: If the parent category doesn't exist
        """
        if not name or not name.strip():
            raise ValidationError("Category name cannot be empty")
        entry_type = parse_entry_type(category_type)

        if self.db.get_category_by_name(user_id, name) is not None:
            raise ConflictError(duplicate_name("Category", name))

        parent_id = None
        if parent_name is not None:
            parent = self.db.get_category_by_name(user_id, parent_name)
            if parent is None:
                raise NotFoundError(f"Parent category '{parent_name}' not found")
            if parent.category_type != entry_type:
                raise ValidationError(
                    f"Category type '{entry_type.value}' does not match parent type "
                    f"'{parent.category_type.value}'"
                )
            parent_id = parent.id

        return self.db.create_category(
            user_id=user_id, name=name, category_type=entry_type, parent_id=parent_id
        )

    def get_category(self, category_id: int, user_id: int) -> Optional[Category]:
        return self.db.get_category(category_id, user_id)

    def require_category(self, category_id: int, user_id: int) -> Category:
        """Get category by ID or raise NotFoundError."""
        category = self.db.get_category(category_id, user_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def require_category_by_name(self, user_id: int, name: str) -> Category:
        """Get category by name or raise NotFoundError."""
        category = self.db.get_category_by_name(user_id, name)
        if category is None:
            raise NotFoundError(category_name_not_found(name))
        return category

    def list_categories(
        self, user_id: int, category_type: Optional[str | EntryType] = None
    ) -> list[Category]:
        """List categories, optionally filtered by 'income' or 'expense'."""
        entry_type = parse_entry_type(category_type) if category_type is not None else None
        return self.db.list_categories(user_id, category_type=entry_type)

    def seed_default_categories(self, user_id: int) -> list[int]:
        """Create the default category set, skipping names that already exist.

        Returns:
            IDs of the categories created
        """
        created = []
        for name, category_type in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(user_id, name) is not None:
                continue
            created.append(
                self.db.create_category(user_id=user_id, name=name, category_type=category_type)
            )
        return created
