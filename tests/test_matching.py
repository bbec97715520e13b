"""Tests for MatchingService: suggestions, auto-match and teaching."""

import pytest
from datetime import date
from decimal import Decimal

from budgetmatch.domain.entities import MatchConfidence
from budgetmatch.domain.errors import NotFoundError
from budgetmatch.domain.matching import MatchingService

USER_ID = 1
OTHER_USER_ID = 2


@pytest.fixture
def add_txn(transaction_service, sample_account):
    """Create a transaction on the sample account and return its ID."""

    def _add(description, amount, on, transaction_type="expense", category_id=None):
        return transaction_service.create_transaction(
            user_id=USER_ID,
            account_id=sample_account.id,
            amount=Decimal(amount),
            transaction_type=transaction_type,
            transaction_date=on,
            description=description,
            category_id=category_id,
        )

    return _add


class TestSuggest:
    def test_netflix_suggestion(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))

        suggestions = matching_service.suggest_for_transaction(txn_id, USER_ID)

        assert len(suggestions) == 1
        best = suggestions[0]
        assert best.budget_entry.id == sample_budget["entries"]["Netflix"]
        assert best.confidence_score == 70
        assert best.confidence_level == MatchConfidence.AUTO_HIGH
        assert best.match_reasons == (
            "Partial description match",
            "Exact amount match",
            "Matches monthly schedule",
        )

    def test_only_same_type_entries_are_scored(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("Salary", "4000.00", date(2024, 3, 25), transaction_type="income")

        suggestions = matching_service.suggest_for_transaction(txn_id, USER_ID)

        assert [s.budget_entry.name for s in suggestions] == ["Salary"]
        assert suggestions[0].confidence_score == 85

    def test_zero_scores_are_excluded(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("Grocery Store", "52.10", date(2024, 3, 12))
        assert matching_service.suggest_for_transaction(txn_id, USER_ID) == []

    def test_no_active_budget_gives_empty_list(self, temp_db, budget_service, add_txn):
        budget_service.create_budget(user_id=USER_ID, name="Draft")
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        assert MatchingService(temp_db).suggest_for_transaction(txn_id, USER_ID) == []

    def test_sorted_descending_and_stable_on_ties(
        self, matching_service, budget_service, add_txn
    ):
        budget_id = budget_service.create_budget(user_id=USER_ID, name="Ties", activate=True)
        common = dict(
            user_id=USER_ID,
            budget_id=budget_id,
            entry_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 20),
        )
        first = budget_service.add_entry(name="Gym North", amount=Decimal("50.00"), **common)
        second = budget_service.add_entry(name="Gym South", amount=Decimal("50.00"), **common)
        phone = budget_service.add_entry(name="Phone", amount=Decimal("49.00"), **common)
        txn_id = add_txn("PHONE CO", "50.00", date(2024, 3, 2))

        suggestions = matching_service.suggest_for_transaction(txn_id, USER_ID)

        # Phone: partial description 25 + within $1.00 20; gyms: exact amount 30
        assert [s.budget_entry.id for s in suggestions] == [phone, first, second]
        assert [s.confidence_score for s in suggestions] == [45, 30, 30]

    def test_inactive_entries_are_ignored(
        self, matching_service, budget_service, sample_budget, add_txn
    ):
        budget_service.remove_entry(sample_budget["entries"]["Netflix"], USER_ID)
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        assert matching_service.suggest_for_transaction(txn_id, USER_ID) == []

    def test_unknown_transaction(self, matching_service, sample_budget):
        with pytest.raises(NotFoundError):
            matching_service.suggest_for_transaction(999, USER_ID)


class TestAutoMatch:
    def test_links_confident_match(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))

        txn = matching_service.auto_match(txn_id, USER_ID)

        assert txn.budget_entry_id == sample_budget["entries"]["Netflix"]
        assert txn.match_confidence == MatchConfidence.AUTO_HIGH

    def test_leaves_weak_match_unmatched(self, matching_service, sample_budget, add_txn):
        # Partial description and exact amount but off schedule: 55
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 20))

        txn = matching_service.auto_match(txn_id, USER_ID)

        assert txn.budget_entry_id is None
        assert txn.match_confidence == MatchConfidence.UNMATCHED

    def test_manual_match_is_not_overridden(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        rent_id = sample_budget["entries"]["Rent"]
        matching_service.teach_match(txn_id, rent_id, USER_ID, create_rules=False)

        txn = matching_service.auto_match(txn_id, USER_ID)

        assert txn.budget_entry_id == rent_id
        assert txn.match_confidence == MatchConfidence.MANUAL

    def test_other_users_transaction_is_not_found(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        with pytest.raises(NotFoundError):
            matching_service.auto_match(txn_id, OTHER_USER_ID)


class TestBulkAutoMatch:
    def test_counts_only_linked_transactions(
        self, matching_service, transaction_service, sample_budget, add_txn
    ):
        strong = add_txn("Netflix", "15.99", date(2024, 3, 5))
        weak = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 20))
        unrelated = add_txn("Coffee Shop", "4.50", date(2024, 3, 12))
        assert matching_service.suggest_for_transaction(strong, USER_ID)[0].confidence_score == 85

        count = matching_service.bulk_auto_match(USER_ID)

        assert count == 1
        confidences = {
            t.id: t.match_confidence for t in transaction_service.list_transactions(USER_ID)
        }
        assert confidences == {
            strong: MatchConfidence.AUTO_HIGH,
            weak: MatchConfidence.UNMATCHED,
            unrelated: MatchConfidence.UNMATCHED,
        }

    def test_failure_does_not_abort_batch(
        self, matching_service, sample_budget, add_txn, monkeypatch
    ):
        broken = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        good = add_txn("NETFLIX.COM", "15.99", date(2024, 4, 5))
        original = matching_service.auto_match

        def flaky_auto_match(transaction_id, user_id):
            if transaction_id == broken:
                raise RuntimeError("database hiccup")
            return original(transaction_id, user_id)

        monkeypatch.setattr(matching_service, "auto_match", flaky_auto_match)

        assert matching_service.bulk_auto_match(USER_ID) == 1
        assert matching_service.db.get_transaction(good, USER_ID).is_linked
        assert not matching_service.db.get_transaction(broken, USER_ID).is_linked

    def test_nothing_to_match(self, matching_service, sample_budget):
        assert matching_service.bulk_auto_match(USER_ID) == 0


class TestTeachMatch:
    def test_teach_links_and_creates_rules(
        self, matching_service, budget_service, sample_budget, add_txn
    ):
        entry_id = sample_budget["entries"]["Netflix"]
        txn_id = add_txn("Amazon Prime 4.99", "4.99", date(2024, 3, 17))

        txn = matching_service.teach_match(txn_id, entry_id, USER_ID, create_rules=True)

        assert txn.match_confidence == MatchConfidence.MANUAL
        assert txn.budget_entry_id == entry_id
        rules = budget_service.require_entry(entry_id, USER_ID).matching_rules
        assert rules.to_dict() == {
            "description_contains": ["Amazon Prime 4.99"],
            "amount_tolerance": 2.0,
        }

    def test_custom_tolerance(self, matching_service, budget_service, sample_budget, add_txn):
        entry_id = sample_budget["entries"]["Rent"]
        txn_id = add_txn("LANDLORD", "1500.00", date(2024, 3, 1))

        matching_service.teach_match(
            txn_id, entry_id, USER_ID, amount_tolerance=Decimal("25")
        )

        rules = budget_service.require_entry(entry_id, USER_ID).matching_rules
        assert rules.amount_tolerance == Decimal("25")

    def test_non_positive_tolerance_uses_default(
        self, matching_service, budget_service, sample_budget, add_txn
    ):
        entry_id = sample_budget["entries"]["Rent"]
        txn_id = add_txn("LANDLORD", "1500.00", date(2024, 3, 1))

        matching_service.teach_match(txn_id, entry_id, USER_ID, amount_tolerance=Decimal("0"))

        rules = budget_service.require_entry(entry_id, USER_ID).matching_rules
        assert rules.amount_tolerance == Decimal("2.00")

    def test_teach_overwrites_existing_rules(
        self, matching_service, budget_service, sample_budget, add_txn
    ):
        entry_id = sample_budget["entries"]["Rent"]
        matching_service.update_matching_rules(entry_id, USER_ID, {"merchant_name": "OLD AGENT"})
        txn_id = add_txn("NEW AGENT", "1500.00", date(2024, 3, 1))

        matching_service.teach_match(txn_id, entry_id, USER_ID)

        rules = budget_service.require_entry(entry_id, USER_ID).matching_rules
        assert rules.merchant_name is None
        assert rules.description_contains == ("NEW AGENT",)

    def test_without_rules(self, matching_service, budget_service, sample_budget, add_txn):
        entry_id = sample_budget["entries"]["Rent"]
        txn_id = add_txn("LANDLORD", "1500.00", date(2024, 3, 1))

        txn = matching_service.teach_match(txn_id, entry_id, USER_ID, create_rules=False)

        assert txn.match_confidence == MatchConfidence.MANUAL
        assert budget_service.require_entry(entry_id, USER_ID).matching_rules is None

    def test_no_description_no_rules(
        self, matching_service, budget_service, sample_budget, add_txn
    ):
        entry_id = sample_budget["entries"]["Rent"]
        txn_id = add_txn(None, "1500.00", date(2024, 3, 1))

        matching_service.teach_match(txn_id, entry_id, USER_ID, create_rules=True)

        assert budget_service.require_entry(entry_id, USER_ID).matching_rules is None

    def test_rule_save_failure_keeps_the_link(
        self, matching_service, temp_db, sample_budget, add_txn, monkeypatch
    ):
        entry_id = sample_budget["entries"]["Netflix"]
        txn_id = add_txn("Amazon Prime 4.99", "4.99", date(2024, 3, 17))

        def fail(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(temp_db, "update_matching_rules", fail)

        txn = matching_service.teach_match(txn_id, entry_id, USER_ID, create_rules=True)

        assert txn.match_confidence == MatchConfidence.MANUAL
        assert temp_db.get_transaction(txn_id, USER_ID).budget_entry_id == entry_id

    def test_unknown_entry(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("LANDLORD", "1500.00", date(2024, 3, 1))
        with pytest.raises(NotFoundError):
            matching_service.teach_match(txn_id, 999, USER_ID)

    def test_other_users_entry(self, matching_service, budget_service, add_txn):
        foreign_budget = budget_service.create_budget(user_id=OTHER_USER_ID, name="Theirs")
        foreign_entry = budget_service.add_entry(
            user_id=OTHER_USER_ID,
            budget_id=foreign_budget,
            name="Rent",
            amount=Decimal("900"),
            entry_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 1),
        )
        txn_id = add_txn("LANDLORD", "900.00", date(2024, 3, 1))

        with pytest.raises(NotFoundError):
            matching_service.teach_match(txn_id, foreign_entry, USER_ID)


class TestUnlinkAndRules:
    def test_unlink(self, matching_service, sample_budget, add_txn):
        txn_id = add_txn("NETFLIX.COM", "15.99", date(2024, 3, 5))
        matching_service.auto_match(txn_id, USER_ID)

        txn = matching_service.unlink(txn_id, USER_ID)

        assert txn.budget_entry_id is None
        assert txn.match_confidence == MatchConfidence.UNMATCHED

    def test_rules_are_replaced_not_merged(self, matching_service, sample_budget):
        entry_id = sample_budget["entries"]["Netflix"]
        matching_service.update_matching_rules(entry_id, USER_ID, {"merchant_name": "NETFLIX"})

        entry = matching_service.update_matching_rules(
            entry_id, USER_ID, {"description_contains": ["NFLX"]}
        )

        assert entry.matching_rules.to_dict() == {"description_contains": ["NFLX"]}

    def test_clear_rules(self, matching_service, sample_budget):
        entry_id = sample_budget["entries"]["Netflix"]
        matching_service.update_matching_rules(entry_id, USER_ID, {"merchant_name": "NETFLIX"})

        entry = matching_service.update_matching_rules(entry_id, USER_ID, None)

        assert entry.matching_rules is None

    def test_rules_feed_later_scoring(self, matching_service, sample_budget, add_txn):
        entry_id = sample_budget["entries"]["Rent"]
        matching_service.update_matching_rules(
            entry_id, USER_ID, {"merchant_name": "ACME PROPERTY", "amount_tolerance": 5}
        )
        txn_id = add_txn("ACME PROPERTY MGMT", "1503.00", date(2024, 3, 1))

        txn = matching_service.auto_match(txn_id, USER_ID)

        # merchant 25 + tolerance 20 + within 5% 15 + monthly schedule 15
        assert txn.budget_entry_id == entry_id
        assert txn.match_confidence == MatchConfidence.AUTO_HIGH
