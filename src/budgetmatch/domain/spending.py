"""Spending reports over recorded expense transactions."""

from calendar import monthrange
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from dateutil.relativedelta import relativedelta

from budgetmatch.database.base import Database
from budgetmatch.domain.entities import (
    CategorySpending,
    EntryType,
    SpendingTrend,
    Transaction,
)
from budgetmatch.domain.errors import ValidationError

UNCATEGORIZED = "Uncategorized"
DEFAULT_TOP_LIMIT = 10
MAX_TOP_LIMIT = 50
DEFAULT_TREND_MONTHS = 6

CENT = Decimal("0.01")
ZERO = Decimal("0")


def resolve_top_limit(limit: Optional[int]) -> int:
    """Limits outside ``1..MAX_TOP_LIMIT`` fall back to the default."""
    if limit is None or limit < 1 or limit > MAX_TOP_LIMIT:
        return DEFAULT_TOP_LIMIT
    return limit


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if not whole:
        return ZERO
    return (part / whole * 100).quantize(CENT, rounding=ROUND_HALF_UP)


class SpendingService:
    """Service for grouping expense transactions by category and month."""

    def __init__(self, db: Database):
        """Initialize spending service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_expenses(self, user_id: int, start_date: date, end_date: date) -> list[Transaction]:
        """Expense transactions dated within ``[start_date, end_date]``.

        Raises:
            ValidationError: If the range is reversed
        """
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        transactions = self.db.list_transactions(user_id, start_date=start_date, end_date=end_date)
        return [t for t in transactions if t.transaction_type == EntryType.EXPENSE]

    def category_names(self, user_id: int) -> dict[int, str]:
        return {cat.id: cat.name for cat in self.db.list_categories(user_id)}

    def aggregate_by_category(
        self, user_id: int, transactions: list[Transaction]
    ) -> list[CategorySpending]:
        """Sum transactions per category, largest total first.

        Percentages are relative to the total of ``transactions``.
        """
        names = self.category_names(user_id)
        totals: dict[Optional[int], Decimal] = {}
        counts: dict[Optional[int], int] = {}
        for txn in transactions:
            totals[txn.category_id] = totals.get(txn.category_id, ZERO) + Decimal(txn.amount)
            counts[txn.category_id] = counts.get(txn.category_id, 0) + 1

        overall = sum(totals.values(), ZERO)
        results = [
            CategorySpending(
                category_id=category_id,
                category_name=self._name(names, category_id),
                total=total,
                count=counts[category_id],
                percentage=_percentage(total, overall),
            )
            for category_id, total in totals.items()
        ]
        results.sort(key=lambda row: (-row.total, row.category_name))
        return results

    @staticmethod
    def _name(names: dict[int, str], category_id: Optional[int]) -> str:
        if category_id is None:
            return UNCATEGORIZED
        return names.get(category_id, f"Category {category_id}")

    def spending_by_category(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> list[CategorySpending]:
        """Expense breakdown by category, defaulting to the current calendar month."""
        today = today or date.today()
        start = start_date or today.replace(day=1)
        end = end_date or today.replace(day=monthrange(today.year, today.month)[1])
        return self.aggregate_by_category(user_id, self.get_expenses(user_id, start, end))

    def top_expenses(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[CategorySpending]:
        """Highest-spending categories, defaulting to month to date.

        Percentages stay relative to all expenses in the range, not only the
        categories returned.
        """
        today = today or date.today()
        start = start_date or today.replace(day=1)
        end = end_date or today
        breakdown = self.aggregate_by_category(user_id, self.get_expenses(user_id, start, end))
        return breakdown[: resolve_top_limit(limit)]

    def spending_trends(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> list[SpendingTrend]:
        """Monthly expense totals per category, newest month first.

        Defaults to the last six months up to today. Within a month the
        largest amount comes first.
        """
        today = today or date.today()
        start = start_date or today - relativedelta(months=DEFAULT_TREND_MONTHS)
        end = end_date or today

        names = self.category_names(user_id)
        totals: dict[tuple[str, Optional[int]], Decimal] = {}
        for txn in self.get_expenses(user_id, start, end):
            key = (txn.transaction_date.strftime("%Y-%m"), txn.category_id)
            totals[key] = totals.get(key, ZERO) + Decimal(txn.amount)

        trends = [
            SpendingTrend(
                month=month,
                category_id=category_id,
                category_name=self._name(names, category_id),
                amount=amount,
            )
            for (month, category_id), amount in totals.items()
        ]
        # Stable sorts: amount desc within month, then month desc
        trends.sort(key=lambda t: (-t.amount, t.category_name))
        trends.sort(key=lambda t: t.month, reverse=True)
        return trends
