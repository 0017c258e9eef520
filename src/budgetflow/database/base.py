"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid pulling in domain services
from budgetflow.domain.entities import (
    Account,
    Category,
    Transaction,
    MerchantMapping,
    RecurringTransaction,
    CsvImportBatch,
    ProviderCategory,
    TransactionType,
    Frequency,
)

# Columns callers may change through update_transaction
UPDATABLE_TRANSACTION_FIELDS = frozenset(
    {
        "date",
        "amount",
        "merchant_name",
        "original_description",
        "merchant_display_name",
        "category_id",
        "transaction_type",
        "needs_review",
        "is_split",
        "is_recurring",
        "pending",
        "external_reference",
        "provider_category",
    }
)


class Database(ABC):
    """Abstract database interface for budgetflow.

    Upserts keyed by a natural key (merchant mappings by original name,
    recurring transactions by merchant display name) are last-write-wins:
    the stored row is replaced by the new values, never merged.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        institution_name: str,
        access_token: Optional[str] = None,
        provider_item_id: Optional[str] = None,
    ) -> str:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def link_account(
        self,
        account_id: str,
        access_token: str,
        provider_item_id: str,
        provider_account_id: Optional[str] = None,
    ) -> None:
        """Store provider credentials for an account."""
        pass

    @abstractmethod
    def get_account_sync_cursor(self, account_id: str) -> Optional[str]:
        """Get the provider sync cursor for an account."""
        pass

    @abstractmethod
    def set_account_sync_cursor(self, account_id: str, cursor: Optional[str]) -> None:
        """Persist the provider sync cursor for an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[Category]:
        """List all categories."""
        pass

    # Transaction operations
    @abstractmethod
    def insert_transaction(
        self,
        account_id: str,
        date: date,
        amount: Decimal,
        merchant_name: str,
        original_description: Optional[str],
        merchant_display_name: Optional[str],
        category_id: Optional[str],
        transaction_type: TransactionType,
        needs_review: bool = False,
        is_split: bool = False,
        is_recurring: bool = False,
        pending: bool = False,
        external_reference: Optional[str] = None,
        provider_transaction_id: Optional[str] = None,
        provider_category: Optional[ProviderCategory] = None,
        csv_import_id: Optional[str] = None,
    ) -> str:
        """Insert a transaction. Returns the generated transaction ID.

        Raises:
            StorageError: If the row violates a constraint or the write fails
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_provider_id(self, provider_transaction_id: str) -> Optional[Transaction]:
        """Get transaction by the provider-assigned transaction ID."""
        pass

    @abstractmethod
    def list_transactions(self, account_id: Optional[str] = None) -> list[Transaction]:
        """List transactions, optionally for one account, newest first."""
        pass

    @abstractmethod
    def list_transactions_by_merchant(self, merchant_name: str) -> list[Transaction]:
        """List transactions sharing a raw merchant name."""
        pass

    @abstractmethod
    def list_expense_transactions(self, since: Optional[date] = None) -> list[Transaction]:
        """List expense-type transactions on or after ``since``, oldest first."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: str, **fields: Any) -> None:
        """Overwrite the given fields of one transaction.

        Only names in UPDATABLE_TRANSACTION_FIELDS are accepted; a value of
        None clears the column.
        """
        pass

    @abstractmethod
    def update_transaction_by_provider_id(self, provider_transaction_id: str, **fields: Any) -> bool:
        """Overwrite fields of the transaction with a provider ID. Returns False if absent."""
        pass

    @abstractmethod
    def update_transactions_by_merchant(self, merchant_name: str, **fields: Any) -> int:
        """Overwrite fields of every transaction sharing a raw merchant name.

        A ``category_id`` is not written to transfer rows; their other
        fields are still updated.

        Returns:
            Number of rows touched
        """
        pass

    @abstractmethod
    def delete_transactions_by_provider_id(self, provider_transaction_id: str) -> int:
        """Delete transactions with the given provider ID. Returns row count."""
        pass

    @abstractmethod
    def set_transactions_recurring(self, transaction_ids: Iterable[str], is_recurring: bool) -> None:
        """Set the recurring flag on the given transactions."""
        pass

    # Merchant mapping operations
    @abstractmethod
    def list_merchant_mappings(self) -> list[MerchantMapping]:
        """List all merchant mappings."""
        pass

    @abstractmethod
    def get_merchant_mapping(self, original_name: str) -> Optional[MerchantMapping]:
        """Get the mapping for an exact raw merchant name."""
        pass

    @abstractmethod
    def upsert_merchant_mapping(
        self, original_name: str, display_name: str, category_id: Optional[str]
    ) -> None:
        """Insert or replace the mapping keyed by ``original_name``."""
        pass

    # Recurring transaction operations
    @abstractmethod
    def upsert_recurring_transaction(
        self,
        merchant_display_name: str,
        average_amount: Decimal,
        frequency: Frequency,
        last_seen_date: date,
    ) -> None:
        """Insert or replace the active recurring charge keyed by merchant display name."""
        pass

    @abstractmethod
    def list_recurring_transactions(self, active_only: bool = True) -> list[RecurringTransaction]:
        """List recurring charges, largest average amount first."""
        pass

    @abstractmethod
    def deactivate_recurring_transaction(self, merchant_display_name: str) -> None:
        """Mark a recurring charge inactive without deleting it."""
        pass

    # CSV import batch operations
    @abstractmethod
    def create_csv_import_batch(self, account_id: str, file_name: str) -> str:
        """Create an import batch with a zero count. Returns batch ID."""
        pass

    @abstractmethod
    def update_csv_import_batch(self, import_id: str, transaction_count: int) -> None:
        """Record the final transaction count of an import batch."""
        pass

    @abstractmethod
    def delete_csv_import_batch(self, import_id: str) -> None:
        """Delete an import batch and every transaction it wrote."""
        pass

    @abstractmethod
    def get_csv_import_batch(self, import_id: str) -> Optional[CsvImportBatch]:
        """Get import batch by ID."""
        pass

    @abstractmethod
    def list_csv_import_batches(self, account_id: str) -> list[CsvImportBatch]:
        """List import batches for an account, newest first."""
        pass
