"""Shared pytest fixtures for budgetmatch tests."""

import logging
import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from budgetmatch.database.factories import create_sqlite_database
from budgetmatch.domain.account import AccountService
from budgetmatch.domain.budget import BudgetService
from budgetmatch.domain.category import CategoryService
from budgetmatch.domain.entities import (
    BudgetEntry,
    EntryType,
    Frequency,
    MatchConfidence,
    Transaction,
)
from budgetmatch.domain.matching import MatchingService
from budgetmatch.domain.projection import ProjectionService
from budgetmatch.domain.transaction import TransactionService

USER_ID = 1
OTHER_USER_ID = 2


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService with a temporary database."""
    return BudgetService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def matching_service(temp_db):
    """Create a MatchingService with a temporary database."""
    return MatchingService(temp_db)


@pytest.fixture
def projection_service(temp_db):
    """Create a ProjectionService with a temporary database."""
    return ProjectionService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample checking account for testing."""
    account_id = account_service.create_account(user_id=USER_ID, name="Everyday")
    return account_service.get_account(account_id, USER_ID)


@pytest.fixture
def sample_budget(budget_service):
    """Create an active budget with salary, rent and Netflix entries.

    Returns a dict with the budget ID and entry IDs keyed by entry name.
    """
    budget_id = budget_service.create_budget(user_id=USER_ID, name="Household", activate=True)
    entries = {
        "Salary": budget_service.add_entry(
            user_id=USER_ID,
            budget_id=budget_id,
            name="Salary",
            amount=Decimal("4000.00"),
            entry_type="income",
            frequency="monthly",
            start_date=date(2024, 1, 25),
            day_of_month=25,
        ),
        "Rent": budget_service.add_entry(
            user_id=USER_ID,
            budget_id=budget_id,
            name="Rent",
            amount=Decimal("1500.00"),
            entry_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 1),
            day_of_month=1,
        ),
        "Netflix": budget_service.add_entry(
            user_id=USER_ID,
            budget_id=budget_id,
            name="Netflix",
            amount=Decimal("15.99"),
            entry_type="expense",
            frequency="monthly",
            start_date=date(2024, 1, 5),
            day_of_month=5,
        ),
    }
    return {"budget_id": budget_id, "entries": entries}


@pytest.fixture
def make_entry():
    """Build an in-memory BudgetEntry with sensible defaults."""

    def _make(**overrides):
        values = {
            "id": 1,
            "budget_id": 1,
            "name": "Netflix",
            "amount": Decimal("15.99"),
            "entry_type": EntryType.EXPENSE,
            "frequency": Frequency.MONTHLY,
            "start_date": date(2024, 1, 5),
        }
        values.update(overrides)
        return BudgetEntry(**values)

    return _make


@pytest.fixture
def make_transaction():
    """Build an in-memory Transaction with sensible defaults."""

    def _make(**overrides):
        values = {
            "id": 1,
            "user_id": USER_ID,
            "account_id": 1,
            "amount": Decimal("15.99"),
            "transaction_type": EntryType.EXPENSE,
            "transaction_date": date(2024, 3, 5),
            "description": "NETFLIX.COM",
            "match_confidence": MatchConfidence.UNMATCHED,
        }
        values.update(overrides)
        return Transaction(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture(autouse=True)
def reset_log_handlers():
    """Drop root handlers bound to streams a CliRunner has closed."""
    yield
    logging.getLogger().handlers.clear()
