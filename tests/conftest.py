"""Shared pytest fixtures for budgetflow tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
from typing import Optional
import pytest

from budgetflow.database.factories import create_sqlite_database
from budgetflow.domain.account import AccountService
from budgetflow.domain.category import CategoryService
from budgetflow.domain.csv_import import CSVImportService
from budgetflow.domain.entities import ProviderCategory
from budgetflow.domain.transaction import TransactionService
from budgetflow.providers.base import AggregationClient, ProviderTransaction, SyncPage


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

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
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def import_service(temp_db):
    """Create a CSVImportService with a temporary database."""
    return CSVImportService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(name="Test Account", institution_name="Test Bank")
    return account_service.get_account(account_id)


@pytest.fixture
def sample_categories(category_service):
    """Seed the default categories and return name -> ID."""
    category_service.ensure_default_categories()
    return {cat.name: cat.id for cat in category_service.list_categories()}


@pytest.fixture
def insert_transaction(temp_db, sample_account):
    """Insert a stored transaction with sensible defaults."""

    def _insert(**overrides):
        values = {
            "account_id": sample_account.id,
            "date": date(2024, 1, 5),
            "amount": Decimal("42.00"),
            "merchant_name": "SOME SHOP",
            "original_description": "SOME SHOP",
            "merchant_display_name": "Some Shop",
            "category_id": None,
            "transaction_type": "expense",
        }
        values.update(overrides)
        return temp_db.insert_transaction(**values)

    return _insert


def _provider_txn(
    transaction_id: str,
    amount: str = "10.00",
    name: str = "COFFEE SHOP",
    txn_date: date = date(2024, 3, 1),
    merchant_name: Optional[str] = None,
    category: Optional[ProviderCategory] = None,
    account_id: str = "plaid-acc-1",
) -> ProviderTransaction:
    """Build a provider transaction record for sync tests."""
    return ProviderTransaction(
        transaction_id=transaction_id,
        account_id=account_id,
        amount=Decimal(amount),
        date=txn_date,
        name=name,
        merchant_name=merchant_name,
        personal_finance_category=category,
    )


@pytest.fixture
def provider_txn():
    """Return a builder for provider transaction records."""
    return _provider_txn


class FakeAggregationClient(AggregationClient):
    """In-memory aggregation client returning queued pages per access token."""

    def __init__(self, pages: Optional[dict[str, list]] = None):
        self.pages = pages or {}
        self.calls: list[tuple[str, Optional[str]]] = []

    def sync_transactions(self, access_token, cursor):
        self.calls.append((access_token, cursor))
        queue = self.pages.get(access_token, [])
        if not queue:
            return SyncPage(next_cursor=cursor, has_more=False)
        page = queue.pop(0)
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def fake_client():
    """Create an empty fake aggregation client."""
    return FakeAggregationClient()


@pytest.fixture
def linked_account(temp_db, account_service):
    """Create an account linked to a provider item."""
    account_id = account_service.create_account(name="Linked Checking", institution_name="Plaid Bank")
    account_service.link_account(account_id, "access-token-1", "item-1", "plaid-acc-1")
    return temp_db.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file and return its path."""

    def _write(text: str, name: str = "statement.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
