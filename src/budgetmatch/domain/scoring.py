"""Heuristic scoring of a transaction against a budget entry.

Each heuristic is a pure function ``(transaction, entry) -> HeuristicResult``.
``score_match`` runs them in a fixed order, sums their points, clamps the
total to 0..100 and keeps the reasons in heuristic order.

Shared-word credit counts distinct words: a word repeated in the description
or the entry name is counted once, and the "N common words" reason reports
that distinct count.

Type compatibility (income vs expense) is the caller's job; nothing here
checks it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional

from budgetmatch.domain.entities import (
    BudgetEntry,
    Frequency,
    MatchConfidence,
    Transaction,
)
from budgetmatch.domain.recurrence import (
    anchor_day_of_month,
    anchor_weekday,
    is_fortnight_week,
    to_date,
    weekday_sunday_first,
    within_window,
)

MAX_SCORE = 100
AUTO_HIGH_THRESHOLD = 70

RULE_DESCRIPTION_POINTS = 30
RULE_MERCHANT_POINTS = 25
RULE_AMOUNT_POINTS = 20

DESCRIPTION_EXACT_POINTS = 40
DESCRIPTION_PARTIAL_POINTS = 25
DESCRIPTION_WORDS_POINTS = 15
MIN_SHARED_WORDS = 2
MIN_WORD_LENGTH = 4

CATEGORY_POINTS = 20

TIMING_EXACT_POINTS = 15
TIMING_NEAR_POINTS = 10
MONTHLY_NEAR_DAYS = 3

AMOUNT_EXACT = Decimal("0.01")
AMOUNT_CLOSE = Decimal("2.00")
AMOUNT_PERCENT = Decimal("0.05")
AMOUNT_LOOSE = Decimal("10.00")
AMOUNT_EXACT_POINTS = 30
AMOUNT_CLOSE_POINTS = 20
AMOUNT_PERCENT_POINTS = 15
AMOUNT_LOOSE_POINTS = 5


@dataclass(frozen=True)
class HeuristicResult:
    """Points awarded by one heuristic and the reason shown to the user."""

    points: int = 0
    reason: Optional[str] = None


NO_MATCH = HeuristicResult()

Heuristic = Callable[[Transaction, BudgetEntry], HeuristicResult]


def _money(value: Decimal) -> str:
    return f"${value:,.2f}"


def _amount_difference(transaction: Transaction, entry: BudgetEntry) -> Decimal:
    return abs(Decimal(transaction.amount) - Decimal(entry.amount))


def rule_description_contains(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Award points when the description contains any configured pattern."""
    rules = entry.matching_rules
    if rules is None or not rules.description_contains or not transaction.description:
        return NO_MATCH
    description = transaction.description.lower()
    for pattern in rules.description_contains:
        if pattern.lower() in description:
            return HeuristicResult(RULE_DESCRIPTION_POINTS, f"Description contains '{pattern}'")
    return NO_MATCH


def rule_merchant_name(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Award points when the description contains the configured merchant."""
    rules = entry.matching_rules
    if rules is None or not rules.merchant_name or not transaction.description:
        return NO_MATCH
    if rules.merchant_name.lower() in transaction.description.lower():
        return HeuristicResult(RULE_MERCHANT_POINTS, f"Merchant name: {rules.merchant_name}")
    return NO_MATCH


def rule_amount_tolerance(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Award points when the amount is within the configured tolerance."""
    rules = entry.matching_rules
    if rules is None or rules.amount_tolerance is None:
        return NO_MATCH
    if _amount_difference(transaction, entry) <= rules.amount_tolerance:
        return HeuristicResult(RULE_AMOUNT_POINTS, f"Amount within {_money(rules.amount_tolerance)}")
    return NO_MATCH


def _significant_words(text: str) -> set[str]:
    return {word for word in text.split() if len(word) >= MIN_WORD_LENGTH}


def description_similarity(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Compare the transaction description with the entry name.

    Tiers, first hit wins: exact match, substring either way, shared words.
    Shared words are compared as sets of lower-cased words of at least
    ``MIN_WORD_LENGTH`` characters, so duplicates count once.
    """
    if not transaction.description:
        return NO_MATCH
    description = transaction.description.lower().strip()
    name = (entry.name or "").lower().strip()
    if not description or not name:
        return NO_MATCH

    if description == name:
        return HeuristicResult(DESCRIPTION_EXACT_POINTS, "Exact description match")
    if name in description or description in name:
        return HeuristicResult(DESCRIPTION_PARTIAL_POINTS, "Partial description match")

    shared = _significant_words(description) & _significant_words(name)
    if len(shared) >= MIN_SHARED_WORDS:
        return HeuristicResult(DESCRIPTION_WORDS_POINTS, f"{len(shared)} common words")
    return NO_MATCH


def amount_proximity(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Score how close the amounts are; first satisfied tier wins."""
    difference = _amount_difference(transaction, entry)

    if difference < AMOUNT_EXACT:
        return HeuristicResult(AMOUNT_EXACT_POINTS, "Exact amount match")
    if difference <= AMOUNT_CLOSE:
        return HeuristicResult(AMOUNT_CLOSE_POINTS, f"Amount within {_money(difference)}")
    if difference <= Decimal(entry.amount) * AMOUNT_PERCENT:
        return HeuristicResult(AMOUNT_PERCENT_POINTS, "Amount within 5%")
    if difference <= AMOUNT_LOOSE:
        return HeuristicResult(AMOUNT_LOOSE_POINTS, "Amount within $10")
    return NO_MATCH


def category_match(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    if transaction.category_id is None or entry.category_id is None:
        return NO_MATCH
    if transaction.category_id == entry.category_id:
        return HeuristicResult(CATEGORY_POINTS, "Same category")
    return NO_MATCH


def timing_alignment(transaction: Transaction, entry: BudgetEntry) -> HeuristicResult:
    """Score how well the transaction date fits the entry's schedule.

    Only dates inside the entry's active window count. Monthly entries get
    partial credit within a few days of their anchor day; the comparison is
    on day numbers and does not wrap across month boundaries.

    Entries without ``day_of_month`` or ``day_of_week`` are timed against
    the start date's day or weekday, the same anchor the recurrence
    evaluator uses, so a schedule that projects on a day also scores on it.
    """
    try:
        frequency = Frequency(entry.frequency)
    except ValueError:
        return NO_MATCH
    if frequency in (Frequency.ONCE_OFF, Frequency.DAILY):
        return NO_MATCH

    on = to_date(transaction.transaction_date)
    start = to_date(entry.start_date)
    if on is None or start is None or not within_window(entry, on):
        return NO_MATCH

    if frequency is Frequency.MONTHLY:
        anchor = anchor_day_of_month(entry, start)
        if on.day == anchor:
            return HeuristicResult(TIMING_EXACT_POINTS, "Matches monthly schedule")
        if abs(on.day - anchor) <= MONTHLY_NEAR_DAYS:
            return HeuristicResult(TIMING_NEAR_POINTS, "Close to monthly schedule")
        return NO_MATCH

    if frequency is Frequency.WEEKLY:
        if weekday_sunday_first(on) == anchor_weekday(entry, start):
            return HeuristicResult(TIMING_EXACT_POINTS, "Matches weekly schedule")
        return NO_MATCH

    if frequency is Frequency.FORTNIGHTLY:
        if is_fortnight_week(start, on) and weekday_sunday_first(on) == anchor_weekday(entry, start):
            return HeuristicResult(TIMING_EXACT_POINTS, "Matches fortnightly schedule")
        return NO_MATCH

    if (on.month, on.day) == (start.month, start.day):
        return HeuristicResult(TIMING_EXACT_POINTS, "Matches annual schedule")
    return NO_MATCH


HEURISTICS: tuple[Heuristic, ...] = (
    rule_description_contains,
    rule_merchant_name,
    rule_amount_tolerance,
    description_similarity,
    amount_proximity,
    category_match,
    timing_alignment,
)


def score_match(
    transaction: Transaction,
    entry: BudgetEntry,
    heuristics: tuple[Heuristic, ...] = HEURISTICS,
) -> tuple[int, list[str]]:
    """Score a (transaction, entry) pair.

    Returns:
        Tuple of (score clamped to 0..100, reasons in heuristic order)
    """
    total = 0
    reasons: list[str] = []
    for heuristic in heuristics:
        result = heuristic(transaction, entry)
        total += result.points
        if result.reason:
            reasons.append(result.reason)
    return max(0, min(total, MAX_SCORE)), reasons


def confidence_level(score: int) -> Optional[MatchConfidence]:
    """Map a score to a confidence bucket; None means "not a candidate"."""
    if score >= AUTO_HIGH_THRESHOLD:
        return MatchConfidence.AUTO_HIGH
    if score > 0:
        return MatchConfidence.AUTO_LOW
    return None
