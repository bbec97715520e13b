"""Budget projections and reports built on the recurrence evaluator."""

from calendar import monthrange
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from budgetmatch.database.base import Database
from budgetmatch.domain import recurrence
from budgetmatch.domain.entities import (
    BudgetEntry,
    BudgetHealth,
    BudgetSummary,
    BudgetVariance,
    CashFlowProjection,
    DailyProjection,
    EntryOccurrences,
    EntryType,
    Frequency,
    MonthlyBreakdown,
    UpcomingBill,
)
from budgetmatch.domain.errors import NotFoundError, ValidationError, budget_not_found

DEFAULT_PROJECTION_DAYS = 90
MAX_PROJECTION_DAYS = 365
DEFAULT_UPCOMING_DAYS = 30

# Multipliers to a monthly-equivalent amount
MONTHLY_FACTORS = {
    Frequency.ONCE_OFF: Decimal("0"),
    Frequency.DAILY: Decimal("30.44"),
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.FORTNIGHTLY: Decimal("2.17"),
    Frequency.MONTHLY: Decimal("1"),
    Frequency.ANNUALLY: Decimal("1") / Decimal("12"),
}

# (minimum score, status, message), highest first
HEALTH_STATUSES = (
    (80, "excellent", "Your budget is in excellent shape! You're saving well."),
    (60, "good", "Your budget looks good. You have a healthy surplus."),
    (40, "fair", "Your budget is balanced, but there's room for improvement."),
    (20, "poor", "Your expenses are close to or exceeding your income. Consider adjustments."),
    (0, "critical", "Your expenses significantly exceed your income. Immediate action needed."),
)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_projection_days(days: Optional[int]) -> int:
    """Normalize a requested projection length.

    Missing or non-positive values give the default; values above the cap
    are clamped to it.
    """
    if days is None or days < 1:
        return DEFAULT_PROJECTION_DAYS
    return min(days, MAX_PROJECTION_DAYS)


def monthly_amount(entry: BudgetEntry) -> Decimal:
    """Monthly-equivalent amount of an entry; unknown frequencies count as 0."""
    try:
        factor = MONTHLY_FACTORS[Frequency(entry.frequency)]
    except ValueError:
        return ZERO
    return Decimal(entry.amount) * factor


def parse_month(month: str) -> tuple[date, date]:
    """Parse ``YYYY-MM`` into the first and last day of that month.

    Raises:
        ValidationError: If the month is malformed
    """
    try:
        year_str, month_str = month.split("-")
        year, month_num = int(year_str), int(month_str)
        first = date(year, month_num, 1)
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid month '{month}'. Expected YYYY-MM") from None
    last = date(year, month_num, monthrange(year, month_num)[1])
    return first, last


class ProjectionService:
    """Service for cash-flow projections, occurrence listings and budget reports."""

    def __init__(self, db: Database):
        """Initialize projection service.

        Args:
            db: Database instance
        """
        self.db = db

    def _active_entries(self, user_id: int) -> list[BudgetEntry]:
        budget = self.db.get_active_budget(user_id)
        if budget is None:
            return []
        return self.db.get_active_entries(budget.id)

    def project_cash_flow(
        self,
        user_id: int,
        days: Optional[int] = None,
        starting_balance: Decimal = ZERO,
        start_date: Optional[date] = None,
    ) -> CashFlowProjection:
        """Project the balance day by day from the active budget's entries.

        Args:
            user_id: Owner user ID
            days: Number of days to project, normalized by ``resolve_projection_days``
            starting_balance: Balance before the first projected day
            start_date: First projected day, defaults to today

        Returns:
            Projection with daily rows and a per-month breakdown sorted by month.
            Without an active budget both are empty and the balance is unchanged.
        """
        days = resolve_projection_days(days)
        start = start_date or date.today()
        balance = Decimal(starting_balance)

        budget = self.db.get_active_budget(user_id)
        if budget is None:
            return CashFlowProjection(
                start_date=start,
                end_date=start + timedelta(days=days - 1),
                starting_balance=balance,
                ending_balance=balance,
                total_income=ZERO,
                total_expenses=ZERO,
                net_cash_flow=ZERO,
            )
        entries = self.db.get_active_entries(budget.id)

        total_income = ZERO
        total_expenses = ZERO
        daily = []
        months: dict[str, dict[str, Decimal]] = {}

        for offset in range(days):
            on = start + timedelta(days=offset)
            income = ZERO
            expenses = ZERO
            for entry in entries:
                if not recurrence.occurs(entry, on):
                    continue
                if entry.entry_type == EntryType.INCOME:
                    income += Decimal(entry.amount)
                else:
                    expenses += Decimal(entry.amount)

            net = income - expenses
            balance += net
            total_income += income
            total_expenses += expenses
            daily.append(
                DailyProjection(date=on, income=income, expenses=expenses, net=net, balance=balance)
            )

            bucket = months.setdefault(
                on.strftime("%Y-%m"), {"income": ZERO, "expenses": ZERO, "net": ZERO}
            )
            bucket["income"] += income
            bucket["expenses"] += expenses
            bucket["net"] += net
            bucket["ending_balance"] = balance

        monthly = tuple(
            MonthlyBreakdown(
                month=month,
                income=totals["income"],
                expenses=totals["expenses"],
                net=totals["net"],
                ending_balance=totals["ending_balance"],
            )
            for month, totals in sorted(months.items())
        )

        return CashFlowProjection(
            start_date=start,
            end_date=start + timedelta(days=days - 1),
            starting_balance=Decimal(starting_balance),
            ending_balance=balance,
            total_income=total_income,
            total_expenses=total_expenses,
            net_cash_flow=total_income - total_expenses,
            daily=tuple(daily),
            monthly=monthly,
        )

    def list_occurrences(
        self, user_id: int, start_date: date, end_date: date
    ) -> list[EntryOccurrences]:
        """List occurrence dates of every active entry in ``[start_date, end_date]``.

        Raises:
            ValidationError: If the range is reversed or longer than a year
        """
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        if (end_date - start_date).days + 1 > MAX_PROJECTION_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_PROJECTION_DAYS} days")

        return [
            EntryOccurrences(
                entry=entry,
                dates=tuple(recurrence.occurrences(entry, start_date, end_date)),
            )
            for entry in self._active_entries(user_id)
        ]

    def upcoming_bills(
        self, user_id: int, days: int = DEFAULT_UPCOMING_DAYS, today: Optional[date] = None
    ) -> list[UpcomingBill]:
        """Next due date of each expense entry within ``days`` from today."""
        if days < 1:
            raise ValidationError("Days must be at least 1")
        start = today or date.today()
        end = start + timedelta(days=min(days, MAX_PROJECTION_DAYS) - 1)

        bills = []
        for entry in self._active_entries(user_id):
            if entry.entry_type != EntryType.EXPENSE:
                continue
            due = recurrence.next_occurrence(entry, start, end)
            if due is None:
                continue
            bills.append(
                UpcomingBill(
                    entry_id=entry.id,
                    name=entry.name,
                    amount=Decimal(entry.amount),
                    due_date=due,
                    category_id=entry.category_id,
                )
            )
        bills.sort(key=lambda bill: (bill.due_date, bill.name))
        return bills

    def budget_summary(self, budget_id: int, user_id: int) -> BudgetSummary:
        """Monthly and annual totals of a budget's active entries.

        Raises:
            NotFoundError: If the budget doesn't exist
        """
        if self.db.get_budget(budget_id, user_id) is None:
            raise NotFoundError(budget_not_found(budget_id))

        income = ZERO
        expenses = ZERO
        income_count = 0
        expense_count = 0
        for entry in self.db.get_active_entries(budget_id):
            if entry.entry_type == EntryType.INCOME:
                income += monthly_amount(entry)
                income_count += 1
            else:
                expenses += monthly_amount(entry)
                expense_count += 1

        return BudgetSummary(
            budget_id=budget_id,
            total_monthly_income=_round(income),
            total_monthly_expenses=_round(expenses),
            monthly_surplus_deficit=_round(income - expenses),
            total_annual_income=_round(income * 12),
            total_annual_expenses=_round(expenses * 12),
            annual_surplus_deficit=_round((income - expenses) * 12),
            income_entries_count=income_count,
            expense_entries_count=expense_count,
        )

    @staticmethod
    def budget_health(summary: BudgetSummary) -> BudgetHealth:
        """Rate a budget summary on a 0-100 scale.

        Break-even scores 50, saving half of income scores 100 and spending
        double the income scores 0. A budget without entries is neutral and
        one without income scores 0.
        """
        if summary.income_entries_count == 0 and summary.expense_entries_count == 0:
            score = 50
        elif summary.total_monthly_income == 0:
            score = 0
        else:
            ratio = summary.monthly_surplus_deficit / summary.total_monthly_income
            score = int(max(Decimal(0), min(Decimal(100), 50 + ratio * 100)))

        status, message = next(
            (status, message)
            for minimum, status, message in HEALTH_STATUSES
            if score >= minimum
        )
        return BudgetHealth(score=score, status=status, message=message)

    def budget_variance(self, user_id: int, month: str) -> list[BudgetVariance]:
        """Compare budgeted against linked actual amounts for one month.

        The budgeted amount is the entry amount times its occurrences in the
        month. A positive variance means under budget.

        Raises:
            ValidationError: If the month is malformed
        """
        first, last = parse_month(month)
        variances = []
        for entry in self._active_entries(user_id):
            budgeted = Decimal(entry.amount) * len(recurrence.occurrences(entry, first, last))
            linked = self.db.list_transactions(
                user_id, start_date=first, end_date=last, budget_entry_id=entry.id
            )
            actual = sum((Decimal(t.amount) for t in linked), ZERO)
            variance = budgeted - actual
            pct = _round(variance / budgeted * 100) if budgeted else ZERO
            variances.append(
                BudgetVariance(
                    entry_id=entry.id,
                    entry_name=entry.name,
                    budgeted=budgeted,
                    actual=actual,
                    variance=variance,
                    variance_pct=pct,
                )
            )
        return variances
