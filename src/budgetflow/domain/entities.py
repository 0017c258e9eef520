"""Domain model entities for budgetflow.

These are pure data classes representing business concepts, independent of
database schema. Storage and provider adapters convert into these shapes at
the boundary so that classification code never sees ORM rows or raw
provider payloads.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Closed set of transaction types."""

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    INVESTMENT = "investment"
    RETURN = "return"


class Frequency(str, Enum):
    """Cadence of a recurring charge."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Types whose category comes from the classifier
CATEGORIZED_TYPES = frozenset({TransactionType.EXPENSE, TransactionType.RETURN})


@dataclass(frozen=True)
class ProviderCategory:
    """Personal finance category hint supplied by the aggregation provider."""

    primary: str
    detailed: str = ""


@dataclass(frozen=True)
class RawTransactionInput:
    """Ingestion-time transaction record.

    Amount sign convention: positive is money leaving the account, negative
    is money arriving.
    """

    date: date
    description: str
    amount: Decimal
    extended_details: Optional[str] = None
    external_reference: Optional[str] = None
    provider_category: Optional[ProviderCategory] = None
    provider_transaction_id: Optional[str] = None
    pending: bool = False


@dataclass(frozen=True)
class Account:
    """Bank or brokerage account domain entity."""

    id: str
    name: str
    institution_name: str
    created_at: datetime
    access_token: Optional[str] = None
    provider_item_id: Optional[str] = None
    provider_account_id: Optional[str] = None
    sync_cursor: Optional[str] = None

    @property
    def is_linked(self) -> bool:
        return self.access_token is not None


@dataclass(frozen=True)
class Category:
    """Spending category domain entity."""

    id: str
    name: str


@dataclass(frozen=True)
class Transaction:
    """Persisted transaction domain entity.

    ``merchant_name`` holds the raw statement description and
    ``original_description`` the extended details (or the raw description
    again when none were supplied).
    """

    id: str
    account_id: str
    date: date
    amount: Decimal
    merchant_name: str
    original_description: Optional[str]
    merchant_display_name: Optional[str]
    category_id: Optional[str]
    transaction_type: TransactionType
    needs_review: bool = False
    is_split: bool = False
    is_recurring: bool = False
    pending: bool = False
    external_reference: Optional[str] = None
    provider_transaction_id: Optional[str] = None
    provider_category: Optional[ProviderCategory] = None
    csv_import_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class MerchantMapping:
    """User-taught display name and default category for a raw merchant string."""

    original_name: str
    display_name: str
    default_category_id: Optional[str] = None


@dataclass(frozen=True)
class RecurringTransaction:
    """Recurring charge keyed by merchant display name."""

    id: str
    merchant_display_name: str
    average_amount: Decimal
    frequency: Frequency
    last_seen_date: date
    is_active: bool = True


@dataclass(frozen=True)
class CsvImportBatch:
    """Group of transactions written by one CSV import."""

    id: str
    account_id: str
    file_name: str
    transaction_count: int
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryResult:
    """Outcome of category classification."""

    category_name: str
    needs_review: bool
    category_id: Optional[str] = None


@dataclass(frozen=True)
class ParsedTransaction:
    """A CSV row after parsing, type detection, classification and dedup."""

    date: date
    description: str
    amount: Decimal
    transaction_type: TransactionType
    category_name: Optional[str]
    needs_review: bool
    hash: str
    is_duplicate: bool
    merchant_display_name: str
    extended_details: Optional[str] = None
    external_reference: Optional[str] = None
    category_id: Optional[str] = None
