"""Abstract aggregation provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from budgetflow.domain.entities import ProviderCategory


@dataclass(frozen=True)
class ProviderTransaction:
    """One transaction record as delivered by the provider.

    Amount follows the ingestion sign convention: positive is money out.
    """

    transaction_id: str
    account_id: str
    amount: Decimal
    date: date
    name: str
    merchant_name: Optional[str] = None
    original_description: Optional[str] = None
    personal_finance_category: Optional[ProviderCategory] = None
    pending: bool = False
    legacy_categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class SyncPage:
    """One page of transaction deltas plus the cursor to resume from."""

    added: list[ProviderTransaction] = field(default_factory=list)
    modified: list[ProviderTransaction] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False


class AggregationClient(ABC):
    """Pull source for linked-account transactions."""

    @abstractmethod
    def sync_transactions(self, access_token: str, cursor: Optional[str]) -> SyncPage:
        """Fetch the next page of deltas after ``cursor``.

        Args:
            access_token: Item access token
            cursor: Cursor from the previous page, or None for a full sync

        Returns:
            SyncPage of added, modified and removed transactions

        Raises:
            ProviderError: If the provider rejects the request or cannot be reached
        """
        pass
