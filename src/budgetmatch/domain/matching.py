"""Transaction to budget entry matching service.

Ranks the active budget's entries against a transaction, auto-links
confident matches and records user-confirmed matches as matching rules.
"""

from decimal import Decimal
from typing import Any, Optional

from budgetmatch.database.base import Database
from budgetmatch.domain.entities import (
    BudgetEntry,
    MatchConfidence,
    MatchingRules,
    MatchSuggestion,
    Transaction,
)
from budgetmatch.domain.errors import (
    NotFoundError,
    budget_entry_not_found,
    transaction_not_found,
)
from budgetmatch.domain.scoring import AUTO_HIGH_THRESHOLD, confidence_level, score_match
from budgetmatch.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TEACH_TOLERANCE = Decimal("2.00")


class MatchingService:
    """Service for suggesting, auto-linking and teaching matches."""

    def __init__(self, db: Database):
        """Initialize matching service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_transaction(self, transaction_id: int, user_id: int) -> Transaction:
        transaction = self.db.get_transaction(transaction_id, user_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def _require_entry(self, entry_id: int, user_id: int) -> BudgetEntry:
        entry = self.db.get_budget_entry(entry_id, user_id)
        if entry is None:
            raise NotFoundError(budget_entry_not_found(entry_id))
        return entry

    def suggest(self, transaction: Transaction, user_id: int) -> list[MatchSuggestion]:
        """Rank the active budget's entries against a transaction.

        Only entries of the transaction's type are scored, and zero scores
        are dropped. Results are sorted by score descending; equal scores
        keep the order in which the entries were fetched.

        Args:
            transaction: Transaction to match
            user_id: Owner user ID

        Returns:
            Suggestions, best first. Empty when the user has no active budget.
        """
        budget = self.db.get_active_budget(user_id)
        if budget is None:
            return []

        suggestions = []
        for entry in self.db.get_active_entries(budget.id):
            if entry.entry_type != transaction.transaction_type:
                continue
            score, reasons = score_match(transaction, entry)
            level = confidence_level(score)
            if level is None:
                continue
            suggestions.append(
                MatchSuggestion(
                    budget_entry=entry,
                    confidence_score=score,
                    confidence_level=level,
                    match_reasons=tuple(reasons),
                )
            )

        # list.sort is stable
        suggestions.sort(key=lambda s: s.confidence_score, reverse=True)
        return suggestions

    def suggest_for_transaction(self, transaction_id: int, user_id: int) -> list[MatchSuggestion]:
        """Look up a transaction and rank entries against it.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        return self.suggest(self._require_transaction(transaction_id, user_id), user_id)

    def auto_match(self, transaction_id: int, user_id: int) -> Transaction:
        """Link a transaction to its best entry when the score is high enough.

        Already linked or manually matched transactions are returned
        unchanged. Otherwise the top suggestion is linked with ``auto_high``
        confidence if it scores at least the auto-link threshold.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        transaction = self._require_transaction(transaction_id, user_id)
        if transaction.is_linked or transaction.match_confidence == MatchConfidence.MANUAL:
            return transaction

        suggestions = self.suggest(transaction, user_id)
        if not suggestions or suggestions[0].confidence_score < AUTO_HIGH_THRESHOLD:
            logger.debug(
                "Transaction left unmatched",
                transaction_id=transaction_id,
                top_score=suggestions[0].confidence_score if suggestions else 0,
            )
            return transaction

        best = suggestions[0]
        linked = self.db.link_transaction(
            transaction_id, user_id, best.budget_entry.id, MatchConfidence.AUTO_HIGH
        )
        logger.info(
            "Transaction auto-linked",
            transaction_id=transaction_id,
            budget_entry_id=best.budget_entry.id,
            score=best.confidence_score,
        )
        return linked

    def bulk_auto_match(self, user_id: int) -> int:
        """Auto-match every unmatched transaction of a user.

        A failure on one transaction is logged and the batch carries on.

        Returns:
            Number of transactions that ended up linked
        """
        transactions = self.db.get_unmatched_transactions(user_id)
        matched = 0
        failed = 0
        for transaction in transactions:
            try:
                result = self.auto_match(transaction.id, user_id)
            except Exception as e:
                failed += 1
                logger.warning(
                    "Auto-match failed",
                    transaction_id=transaction.id,
                    error=str(e),
                    exc_info=True,
                )
                continue
            if result.is_linked:
                matched += 1

        logger.info(
            "Bulk auto-match finished",
            user_id=user_id,
            processed=len(transactions),
            matched=matched,
            failed=failed,
        )
        return matched

    def teach_match(
        self,
        transaction_id: int,
        budget_entry_id: int,
        user_id: int,
        create_rules: bool = True,
        amount_tolerance: Optional[Decimal] = None,
    ) -> Transaction:
        """Link a transaction to an entry as a manual match.

        With ``create_rules`` and a transaction description, the entry's
        matching rules are replaced by the description plus an amount
        tolerance (``amount_tolerance`` if positive, else 2.00). Failing to
        save the rules is logged; the link itself still stands.

        Args:
            transaction_id: Transaction to link
            budget_entry_id: Entry the user confirmed
            user_id: Owner user ID
            create_rules: Whether to derive matching rules from the transaction
            amount_tolerance: Optional tolerance for the derived rule

        Returns:
            The linked transaction

        Raises:
            NotFoundError: If the transaction or entry doesn't exist
        """
        self._require_transaction(transaction_id, user_id)
        self._require_entry(budget_entry_id, user_id)

        linked = self.db.link_transaction(
            transaction_id, user_id, budget_entry_id, MatchConfidence.MANUAL
        )

        if create_rules and linked.description:
            tolerance = DEFAULT_TEACH_TOLERANCE
            if amount_tolerance is not None and Decimal(amount_tolerance) > 0:
                tolerance = Decimal(amount_tolerance)
            rules = MatchingRules(
                description_contains=(linked.description,),
                amount_tolerance=tolerance,
            )
            try:
                self.db.update_matching_rules(budget_entry_id, user_id, rules)
            except Exception as e:
                logger.warning(
                    "Could not save matching rules",
                    budget_entry_id=budget_entry_id,
                    transaction_id=transaction_id,
                    error=str(e),
                )

        return linked

    def unlink(self, transaction_id: int, user_id: int) -> Transaction:
        """Clear a transaction's link, returning it to unmatched.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        self._require_transaction(transaction_id, user_id)
        return self.db.unlink_transaction(transaction_id, user_id)

    def update_matching_rules(
        self, budget_entry_id: int, user_id: int, payload: Optional[dict[str, Any]]
    ) -> BudgetEntry:
        """Replace an entry's matching rules from a wire payload.

        A None or empty payload clears the rules.

        Raises:
            NotFoundError: If the entry doesn't exist
        """
        self._require_entry(budget_entry_id, user_id)
        return self.db.update_matching_rules(
            budget_entry_id, user_id, MatchingRules.from_dict(payload)
        )
