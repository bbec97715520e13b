"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the JSON matching-rules
payload, so the engine never sees ORM objects.
"""

from budgetmatch.domain import entities as domain
from budgetmatch.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    BudgetEntry as ORMBudgetEntry,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        balance=orm_account.balance,
        currency=orm_account.currency,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        category_type=domain.EntryType(orm_category.category_type),
        parent_id=orm_category.parent_id,
        is_active=orm_category.is_active,
        created_at=orm_category.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        user_id=orm_budget.user_id,
        name=orm_budget.name,
        description=orm_budget.description,
        is_active=orm_budget.is_active,
        created_at=orm_budget.created_at,
    )


def budget_entry_to_domain(orm_entry: ORMBudgetEntry) -> domain.BudgetEntry:
    """Convert SQLAlchemy BudgetEntry model to domain BudgetEntry entity.

    Frequency is passed through as stored so an unknown value reaches the
    recurrence evaluator (which treats it as "never occurs") instead of
    failing the whole query.
    """
    try:
        frequency = domain.Frequency(orm_entry.frequency)
    except ValueError:
        frequency = orm_entry.frequency
    return domain.BudgetEntry(
        id=orm_entry.id,
        budget_id=orm_entry.budget_id,
        category_id=orm_entry.category_id,
        name=orm_entry.name,
        description=orm_entry.description,
        amount=orm_entry.amount,
        entry_type=domain.EntryType(orm_entry.entry_type),
        frequency=frequency,
        day_of_month=orm_entry.day_of_month,
        day_of_week=orm_entry.day_of_week,
        start_date=orm_entry.start_date,
        end_date=orm_entry.end_date,
        matching_rules=domain.MatchingRules.from_dict(orm_entry.matching_rules),
        is_active=orm_entry.is_active,
        created_at=orm_entry.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        budget_entry_id=orm_transaction.budget_entry_id,
        amount=orm_transaction.amount,
        transaction_type=domain.EntryType(orm_transaction.transaction_type),
        description=orm_transaction.description,
        transaction_date=orm_transaction.transaction_date,
        notes=orm_transaction.notes,
        match_confidence=domain.MatchConfidence(orm_transaction.match_confidence),
        created_at=orm_transaction.created_at,
    )


def matching_rules_to_orm(rules: domain.MatchingRules | None) -> dict | None:
    """Convert domain MatchingRules to the JSON column payload."""
    if rules is None or rules.is_empty():
        return None
    return rules.to_dict()
