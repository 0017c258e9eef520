"""Database layer for budgetflow application."""

from budgetflow.database.base import Database
from budgetflow.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
