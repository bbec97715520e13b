"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal
from budgetmatch.database.base import Database
from budgetmatch.domain.category import parse_entry_type
from budgetmatch.domain.entities import EntryType, Transaction as TransactionEntity
from budgetmatch.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_name_not_found,
    category_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        user_id: int,
        account_id: int,
        amount: Decimal,
        transaction_type: str | EntryType,
        transaction_date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a transaction.

        Amounts are positive; the direction is carried by ``transaction_type``.
        New transactions start unmatched.

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account or category doesn't exist
            ValidationError: If the amount or type is invalid
        """
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Transaction amount must be greater than zero")
        parsed_type = parse_entry_type(transaction_type)

        # Verify account exists
        if self.db.get_account(account_id, user_id) is None:
            raise NotFoundError(account_not_found(account_id))

        # Verify category if provided
        if category_id is not None and self.db.get_category(category_id, user_id) is None:
            raise NotFoundError(category_not_found(category_id))

        return self.db.create_transaction(
            user_id=user_id,
            account_id=account_id,
            amount=Decimal(amount),
            transaction_type=parsed_type,
            transaction_date=transaction_date,
            description=description,
            category_id=category_id,
            notes=notes,
        )

    def get_transaction(self, transaction_id: int, user_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id, user_id)

    def require_transaction(self, transaction_id: int, user_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id, user_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def categorize(
        self, transaction_id: int, user_id: int, category_name: Optional[str]
    ) -> TransactionEntity:
        """Assign a category by name, or clear it with None.

        Raises:
            NotFoundError: If transaction or category doesn't exist
        """
        self.require_transaction(transaction_id, user_id)

        category_id = None
        if category_name is not None:
            category = self.db.get_category_by_name(user_id, category_name)
            if category is None:
                raise NotFoundError(category_name_not_found(category_name))
            category_id = category.id

        return self.db.update_transaction_category(transaction_id, user_id, category_id)

    def delete_transaction(self, transaction_id: int, user_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self.require_transaction(transaction_id, user_id)
        self.db.delete_transaction(transaction_id, user_id)

    def list_transactions(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        unmatched_only: bool = False,
    ) -> list[TransactionEntity]:
        """List transactions with filters, newest first."""
        if unmatched_only:
            transactions = self.db.get_unmatched_transactions(user_id)
            return [
                t
                for t in transactions
                if (start_date is None or t.transaction_date >= start_date)
                and (end_date is None or t.transaction_date <= end_date)
                and (account_id is None or t.account_id == account_id)
            ]
        return self.db.list_transactions(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
        )
