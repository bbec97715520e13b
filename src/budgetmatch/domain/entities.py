"""Domain model entities for budgetmatch.

These are pure data classes representing business concepts, independent of
database schema. Services and the matching engine only ever see these types;
the ORM layer converts to and from them in ``budgetmatch.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from budgetmatch.logger import get_logger

logger = get_logger(__name__)


class EntryType(str, Enum):
    """Direction of a cash flow, shared by budget entries and transactions."""

    INCOME = "income"
    EXPENSE = "expense"


class Frequency(str, Enum):
    """Recurrence frequency of a budget entry."""

    ONCE_OFF = "once_off"
    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    ANNUALLY = "annually"


class MatchConfidence(str, Enum):
    """How a transaction became linked to a budget entry."""

    UNMATCHED = "unmatched"
    AUTO_LOW = "auto_low"
    AUTO_HIGH = "auto_high"
    MANUAL = "manual"


ACCOUNT_TYPES = ("checking", "savings", "credit_card", "cash", "investment")


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: int
    user_id: int
    name: str
    account_type: str
    balance: Decimal
    currency: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Income or expense category, optionally nested under a parent."""

    id: int
    user_id: int
    name: str
    category_type: EntryType
    parent_id: Optional[int]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Budget:
    """Budget plan owning a set of budget entries."""

    id: int
    user_id: int
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class MatchingRules:
    """Per-entry heuristic parameters used to boost match scoring.

    The wire format is a JSON object with the keys ``description_contains``
    (list of substrings), ``merchant_name`` (substring) and
    ``amount_tolerance`` (number). Malformed fields are dropped on parse so a
    bad payload degrades to "no rule" instead of breaking scoring.
    """

    description_contains: tuple[str, ...] = ()
    merchant_name: Optional[str] = None
    amount_tolerance: Optional[Decimal] = None

    def is_empty(self) -> bool:
        return (
            not self.description_contains
            and not self.merchant_name
            and self.amount_tolerance is None
        )

    @classmethod
    def from_dict(cls, payload: Optional[dict[str, Any]]) -> Optional["MatchingRules"]:
        """Build rules from a wire payload, or None when there is nothing usable."""
        if not isinstance(payload, dict):
            return None

        patterns: tuple[str, ...] = ()
        raw_patterns = payload.get("description_contains")
        if isinstance(raw_patterns, (list, tuple)):
            patterns = tuple(p for p in raw_patterns if isinstance(p, str) and p)
        elif raw_patterns is not None:
            logger.debug("Dropping malformed description_contains", value=repr(raw_patterns))

        merchant = payload.get("merchant_name")
        if not isinstance(merchant, str) or not merchant:
            if merchant is not None:
                logger.debug("Dropping malformed merchant_name", value=repr(merchant))
            merchant = None

        tolerance = None
        raw_tolerance = payload.get("amount_tolerance")
        # bool is an int subclass; it is never a meaningful tolerance
        if isinstance(raw_tolerance, (int, float, str, Decimal)) and not isinstance(raw_tolerance, bool):
            try:
                tolerance = Decimal(str(raw_tolerance))
            except InvalidOperation:
                tolerance = None
            if tolerance is not None and (not tolerance.is_finite() or tolerance < 0):
                tolerance = None
        if tolerance is None and raw_tolerance is not None:
            logger.debug("Dropping malformed amount_tolerance", value=repr(raw_tolerance))

        rules = cls(
            description_contains=patterns,
            merchant_name=merchant,
            amount_tolerance=tolerance,
        )
        if rules.is_empty():
            return None
        return rules

    def to_dict(self) -> dict[str, Any]:
        """Render rules in the wire format, omitting unset fields."""
        payload: dict[str, Any] = {}
        if self.description_contains:
            payload["description_contains"] = list(self.description_contains)
        if self.merchant_name:
            payload["merchant_name"] = self.merchant_name
        if self.amount_tolerance is not None:
            payload["amount_tolerance"] = float(self.amount_tolerance)
        return payload


@dataclass(frozen=True)
class BudgetEntry:
    """Planned recurring income or expense line item.

    ``start_date`` and ``end_date`` are calendar dates. Entries built from
    external payloads may carry ISO strings instead; the recurrence evaluator
    treats an unparseable value as "never occurs".
    """

    id: int
    budget_id: int
    name: str
    amount: Decimal
    entry_type: EntryType
    frequency: Frequency
    start_date: date
    category_id: Optional[int] = None
    description: Optional[str] = None
    day_of_month: Optional[int] = None
    day_of_week: Optional[int] = None
    end_date: Optional[date] = None
    matching_rules: Optional[MatchingRules] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Observed, dated financial movement in an account."""

    id: int
    user_id: int
    account_id: int
    amount: Decimal
    transaction_type: EntryType
    transaction_date: date
    description: Optional[str] = None
    category_id: Optional[int] = None
    budget_entry_id: Optional[int] = None
    notes: Optional[str] = None
    match_confidence: MatchConfidence = MatchConfidence.UNMATCHED
    created_at: Optional[datetime] = None

    @property
    def is_linked(self) -> bool:
        return self.budget_entry_id is not None


@dataclass(frozen=True)
class MatchSuggestion:
    """Candidate budget entry for a transaction; never persisted."""

    budget_entry: BudgetEntry
    confidence_score: int
    confidence_level: MatchConfidence
    match_reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class BudgetSummary:
    """Monthly and annual equivalents of a budget's planned entries."""

    budget_id: int
    total_monthly_income: Decimal
    total_monthly_expenses: Decimal
    monthly_surplus_deficit: Decimal
    total_annual_income: Decimal
    total_annual_expenses: Decimal
    annual_surplus_deficit: Decimal
    income_entries_count: int
    expense_entries_count: int


@dataclass(frozen=True)
class BudgetHealth:
    """Coarse health rating derived from a budget summary."""

    score: int
    status: str
    message: str


@dataclass(frozen=True)
class DailyProjection:
    """Projected cash flow for one day."""

    date: date
    income: Decimal
    expenses: Decimal
    net: Decimal
    balance: Decimal


@dataclass(frozen=True)
class MonthlyBreakdown:
    """Projected cash flow aggregated over one calendar month."""

    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class CashFlowProjection:
    """Day-by-day balance projection over a bounded window."""

    start_date: date
    end_date: date
    starting_balance: Decimal
    ending_balance: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_cash_flow: Decimal
    daily: tuple[DailyProjection, ...] = ()
    monthly: tuple[MonthlyBreakdown, ...] = ()


@dataclass(frozen=True)
class UpcomingBill:
    """Next due date of an expense entry within a horizon."""

    entry_id: int
    name: str
    amount: Decimal
    due_date: date
    category_id: Optional[int] = None


@dataclass(frozen=True)
class BudgetVariance:
    """Budgeted versus actual linked spending for one entry in one month."""

    entry_id: int
    entry_name: str
    budgeted: Decimal
    actual: Decimal
    variance: Decimal
    variance_pct: Decimal


@dataclass(frozen=True)
class EntryOccurrences:
    """All occurrence dates of one entry in a range."""

    entry: BudgetEntry
    dates: tuple[date, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CategorySpending:
    """Expense total of one category over a date range."""

    category_id: Optional[int]
    category_name: str
    total: Decimal
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class SpendingTrend:
    """Expense total of one category in one calendar month."""

    month: str
    category_id: Optional[int]
    category_name: str
    amount: Decimal
