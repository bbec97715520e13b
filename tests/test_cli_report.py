"""Tests for projection and report commands."""

from datetime import date
from decimal import Decimal

from budgetmatch.cli.main import cli

USER_ID = 1


def _run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "report", *args])


def test_project_monthly(cli_runner, temp_db, sample_budget):
    result = _run(
        cli_runner, temp_db, "project", "--days", "31", "--balance", "1000", "--start-date", "2024-03-01"
    )

    assert result.exit_code == 0
    assert "Cash flow 2024-03-01 to 2024-03-31" in result.output
    assert "2024-03" in result.output
    assert "Balance: 1,000.00 -> 3,484.01" in result.output


def test_project_daily_skips_quiet_days(cli_runner, temp_db, sample_budget):
    result = _run(cli_runner, temp_db, "project", "--days", "10", "--start-date", "2024-03-01", "--daily")

    assert result.exit_code == 0
    assert "2024-03-01" in result.output
    assert "2024-03-05" in result.output
    assert "2024-03-02 " not in result.output


def test_project_without_budget(cli_runner, temp_db):
    result = _run(cli_runner, temp_db, "project", "--days", "5", "--start-date", "2024-03-01")

    assert result.exit_code == 0
    assert "No active budget to project." in result.output
    assert "Balance:" not in result.output


def test_occurrences(cli_runner, temp_db, sample_budget):
    result = _run(cli_runner, temp_db, "occurrences", "--start-date", "2024-03-01", "--end-date", "2024-03-31")

    assert result.exit_code == 0
    assert f"Salary (ID: {sample_budget['entries']['Salary']}): 1 occurrence(s)" in result.output
    assert "  2024-03-25" in result.output


def test_occurrences_range_errors(cli_runner, temp_db, sample_budget):
    result = _run(cli_runner, temp_db, "occurrences", "--start-date", "2024-03-31", "--end-date", "2024-03-01")
    assert result.exit_code == 1
    assert "End date cannot be before start date" in result.output

    result = _run(cli_runner, temp_db, "occurrences", "--start-date", "2024-01-01", "--end-date", "2025-01-01")
    assert result.exit_code == 1
    assert "cannot exceed 365 days" in result.output


def test_upcoming(cli_runner, temp_db, sample_budget):
    # Day 1 and day 5 both fall in any 62-day window
    result = _run(cli_runner, temp_db, "upcoming", "--days", "62")

    assert result.exit_code == 0
    assert "Netflix" in result.output
    assert "Rent" in result.output
    assert "Salary" not in result.output


def test_upcoming_invalid_days(cli_runner, temp_db, sample_budget):
    result = _run(cli_runner, temp_db, "upcoming", "--days", "0")
    assert result.exit_code == 1
    assert "Days must be at least 1" in result.output


def test_variance(cli_runner, temp_db, transaction_service, matching_service, sample_account, sample_budget):
    txn_id = transaction_service.create_transaction(
        user_id=USER_ID,
        account_id=sample_account.id,
        amount=Decimal("1450.00"),
        transaction_type="expense",
        transaction_date=date(2024, 3, 1),
        description="Landlord",
    )
    matching_service.teach_match(txn_id, sample_budget["entries"]["Rent"], USER_ID, create_rules=False)

    result = _run(cli_runner, temp_db, "variance", "--month", "2024-03")

    assert result.exit_code == 0
    assert "Budget vs actual for 2024-03" in result.output
    rent_line = next(line for line in result.output.splitlines() if line.startswith("Rent"))
    assert "1,500.00" in rent_line
    assert "1,450.00" in rent_line
    assert "3.33" in rent_line


def test_variance_invalid_month(cli_runner, temp_db, sample_budget):
    result = _run(cli_runner, temp_db, "variance", "--month", "2024-13")
    assert result.exit_code == 1
    assert "Error:" in result.output


def _add_expenses(transaction_service, category_service, sample_account):
    groceries = category_service.create_category(USER_ID, "Groceries")
    for amount, on, category_id in [
        ("52.10", date(2024, 3, 2), groceries),
        ("47.90", date(2024, 3, 15), groceries),
        ("25.00", date(2024, 3, 20), None),
        ("60.00", date(2024, 2, 10), groceries),
    ]:
        transaction_service.create_transaction(
            user_id=USER_ID,
            account_id=sample_account.id,
            amount=Decimal(amount),
            transaction_type="expense",
            transaction_date=on,
            category_id=category_id,
        )


def test_by_category(cli_runner, temp_db, transaction_service, category_service, sample_account):
    _add_expenses(transaction_service, category_service, sample_account)

    result = _run(
        cli_runner, temp_db, "by-category", "--start-date", "2024-03-01", "--end-date", "2024-03-31"
    )

    assert result.exit_code == 0
    lines = result.output.splitlines()
    groceries = next(line for line in lines if line.startswith("Groceries"))
    assert "100.00" in groceries
    assert "80.00%" in groceries
    assert any(line.startswith("Uncategorized") and "20.00%" in line for line in lines)
    assert "Total: 125.00" in result.output


def test_by_category_reversed_range(cli_runner, temp_db):
    result = _run(
        cli_runner, temp_db, "by-category", "--start-date", "2024-03-31", "--end-date", "2024-03-01"
    )
    assert result.exit_code == 1
    assert "End date cannot be before start date" in result.output


def test_top(cli_runner, temp_db, transaction_service, category_service, sample_account):
    _add_expenses(transaction_service, category_service, sample_account)

    result = _run(
        cli_runner, temp_db, "top", "--start-date", "2024-02-01", "--end-date", "2024-03-31", "--limit", "1"
    )

    assert result.exit_code == 0
    assert "Top 1 expense categories" in result.output
    assert "Groceries" in result.output
    assert "Uncategorized" not in result.output


def test_top_without_expenses(cli_runner, temp_db):
    result = _run(cli_runner, temp_db, "top", "--start-date", "2024-03-01", "--end-date", "2024-03-31")
    assert result.exit_code == 0
    assert "No expenses found." in result.output


def test_trends(cli_runner, temp_db, transaction_service, category_service, sample_account):
    _add_expenses(transaction_service, category_service, sample_account)

    result = _run(
        cli_runner, temp_db, "trends", "--start-date", "2024-02-01", "--end-date", "2024-03-31"
    )

    assert result.exit_code == 0
    output = result.output
    assert output.index("2024-03") < output.index("2024-02")
    assert "  Groceries" in output
    assert "60.00" in output
