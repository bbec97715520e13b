"""Database layer for budgetmatch application."""

from budgetmatch.database.base import Database
from budgetmatch.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
