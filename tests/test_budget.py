"""Tests for budget service and commands."""

import pytest
from datetime import date
from decimal import Decimal

from budgetmatch.cli.main import cli
from budgetmatch.domain.entities import Frequency, MatchingRules
from budgetmatch.domain.errors import NotFoundError, ValidationError

USER_ID = 1
OTHER_USER_ID = 2


@pytest.fixture
def budget_id(budget_service):
    return budget_service.create_budget(user_id=USER_ID, name="Household", activate=True)


def _add(budget_service, budget_id, **overrides):
    values = {
        "user_id": USER_ID,
        "budget_id": budget_id,
        "name": "Gym",
        "amount": Decimal("30"),
        "entry_type": "expense",
        "frequency": "weekly",
        "start_date": date(2024, 1, 1),
    }
    values.update(overrides)
    return budget_service.add_entry(**values)


class TestBudgets:
    def test_create_is_inactive_by_default(self, budget_service):
        budget_service.create_budget(user_id=USER_ID, name="Draft")
        assert budget_service.get_active_budget(USER_ID) is None

    def test_activate_switches_active_budget(self, budget_service, budget_id):
        other = budget_service.create_budget(user_id=USER_ID, name="Lean")

        budget_service.activate_budget(other, USER_ID)

        assert budget_service.get_active_budget(USER_ID).id == other
        assert [b.id for b in budget_service.list_budgets(USER_ID) if b.is_active] == [other]

    def test_activate_unknown_budget(self, budget_service):
        with pytest.raises(NotFoundError):
            budget_service.activate_budget(42, USER_ID)

    def test_empty_name(self, budget_service):
        with pytest.raises(ValidationError):
            budget_service.create_budget(user_id=USER_ID, name="  ")

    def test_budgets_are_private(self, budget_service, budget_id):
        with pytest.raises(NotFoundError):
            budget_service.require_budget(budget_id, OTHER_USER_ID)


class TestEntries:
    def test_add_with_rules(self, budget_service, budget_id):
        entry_id = _add(
            budget_service,
            budget_id,
            day_of_week=1,
            matching_rules={"description_contains": ["CITY GYM"], "amount_tolerance": 5},
        )

        entry = budget_service.require_entry(entry_id, USER_ID)
        assert entry.frequency is Frequency.WEEKLY
        assert entry.day_of_week == 1
        assert entry.matching_rules == MatchingRules(
            description_contains=("CITY GYM",), amount_tolerance=Decimal("5")
        )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"amount": Decimal("0")},
            {"amount": Decimal("-10")},
            {"entry_type": "transfer"},
            {"frequency": "hourly"},
            {"day_of_week": 7},
            {"day_of_week": -1},
            {"frequency": "monthly", "day_of_month": 0},
            {"frequency": "monthly", "day_of_month": 32},
            {"frequency": "monthly", "day_of_week": 1},
            {"frequency": "weekly", "day_of_month": 5},
            {"frequency": "daily", "day_of_week": 2},
            {"end_date": date(2023, 12, 31)},
        ],
    )
    def test_validation(self, budget_service, budget_id, overrides):
        with pytest.raises(ValidationError):
            _add(budget_service, budget_id, **overrides)

    def test_fortnightly_accepts_weekday(self, budget_service, budget_id):
        entry_id = _add(budget_service, budget_id, frequency="fortnightly", day_of_week=5)
        assert budget_service.require_entry(entry_id, USER_ID).day_of_week == 5

    def test_unknown_category(self, budget_service, budget_id):
        with pytest.raises(NotFoundError):
            _add(budget_service, budget_id, category_id=99)

    def test_foreign_budget(self, budget_service, budget_id):
        with pytest.raises(NotFoundError):
            _add(budget_service, budget_id, user_id=OTHER_USER_ID)

    def test_remove_hides_entry(self, budget_service, budget_id):
        entry_id = _add(budget_service, budget_id)

        budget_service.remove_entry(entry_id, USER_ID)

        assert budget_service.list_entries(budget_id, USER_ID) == []
        with pytest.raises(NotFoundError):
            budget_service.remove_entry(entry_id + 1, USER_ID)


class TestBudgetCommands:
    def test_create_and_list(self, cli_runner, temp_db):
        db_path = temp_db.database_path
        result = cli_runner.invoke(
            cli, ["--db-path", db_path, "budget", "create", "Household", "--activate"]
        )
        assert result.exit_code == 0
        assert "Created budget 'Household' (ID: 1) and set it active" in result.output

        result = cli_runner.invoke(cli, ["--db-path", db_path, "budget", "list"])
        assert "* ID:   1 | Household" in result.output

    def test_activate(self, cli_runner, temp_db, budget_service, budget_id):
        other = budget_service.create_budget(user_id=USER_ID, name="Lean")

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "budget", "activate", str(other)]
        )

        assert result.exit_code == 0
        assert f"Budget {other} is now active" in result.output

    def test_activate_unknown(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "budget", "activate", "9"])
        assert result.exit_code == 1
        assert "Budget 9 not found" in result.output

    def test_show_without_active_budget(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "budget", "show"])
        assert result.exit_code == 1
        assert "No active budget" in result.output

    def test_show_and_summary(self, cli_runner, temp_db, sample_budget):
        db_path = temp_db.database_path

        result = cli_runner.invoke(cli, ["--db-path", db_path, "budget", "show"])
        assert result.exit_code == 0
        assert "Household" in result.output
        assert "monthly (day 25)" in result.output

        result = cli_runner.invoke(cli, ["--db-path", db_path, "budget", "summary"])
        assert result.exit_code == 0
        assert "4,000.00" in result.output
        assert "1,515.99" in result.output
        assert "Health: 100/100 (excellent)" in result.output


class TestEntryCommands:
    def test_add_entry(self, cli_runner, temp_db, budget_id):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path", temp_db.database_path,
                "entry", "add", "Netflix",
                "--amount", "15.99",
                "--day-of-month", "5",
                "--start-date", "2024-01-05",
                "--rules", '{"merchant_name": "NETFLIX"}',
            ],
        )

        assert result.exit_code == 0
        assert f"Added entry 'Netflix' (ID: 1) to budget {budget_id}" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "entry", "list"])
        assert "Netflix" in result.output
        assert '"merchant_name": "NETFLIX"' in result.output

    @pytest.mark.parametrize("rules", ["{not json", "[1, 2]"])
    def test_add_entry_bad_rules(self, cli_runner, temp_db, budget_id, rules):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "entry", "add", "Gym", "--amount", "30", "--rules", rules],
        )
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_add_entry_wrong_anchor(self, cli_runner, temp_db, budget_id):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path", temp_db.database_path,
                "entry", "add", "Gym", "--amount", "30", "--frequency", "weekly", "--day-of-month", "3",
            ],
        )
        assert result.exit_code == 1
        assert "Day of month does not apply to weekly entries" in result.output

    def test_add_entry_unknown_category(self, cli_runner, temp_db, budget_id):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "entry", "add", "Gym", "--amount", "30", "--category", "Fitness"],
        )
        assert result.exit_code == 1
        assert "Category 'Fitness' not found" in result.output

    def test_remove_entry(self, cli_runner, temp_db, sample_budget):
        entry_id = sample_budget["entries"]["Netflix"]
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "entry", "remove", str(entry_id)]
        )
        assert result.exit_code == 0
        assert f"Removed entry {entry_id}" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "entry", "list"])
        assert "Netflix" not in result.output
