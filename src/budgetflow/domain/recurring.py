"""Recurring charge detection."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from budgetflow.config import RECURRING_LOOKBACK_MONTHS
from budgetflow.database.base import Database
from budgetflow.domain.entities import Frequency, RecurringTransaction, Transaction
from budgetflow.domain.rules import SUBSCRIPTIONS_CATEGORY

logger = logging.getLogger(__name__)

# Allowed relative deviation of each amount from the group average
AMOUNT_TOLERANCE = Decimal("0.1")

# Average gap in days (inclusive bounds) for each cadence, checked in order
FREQUENCY_BANDS = (
    (Frequency.WEEKLY, 5, 10),
    (Frequency.MONTHLY, 25, 35),
    (Frequency.YEARLY, 350, 380),
)


@dataclass(frozen=True)
class RecurringPattern:
    """A merchant whose charges recur at a stable cadence."""

    merchant_display_name: str
    average_amount: Decimal
    frequency: Frequency
    last_seen_date: date
    transaction_ids: tuple[str, ...]


def classify_frequency(dates: list[date]) -> Optional[Frequency]:
    """Map the average gap between sorted dates onto a cadence, or None."""
    if len(dates) < 2:
        return None
    gaps = [(later - earlier).days for earlier, later in zip(dates, dates[1:])]
    average_gap = sum(gaps) / len(gaps)
    for frequency, low, high in FREQUENCY_BANDS:
        if low <= average_gap <= high:
            return frequency
    return None


def _amounts_stable(amounts: list[Decimal], average: Decimal) -> bool:
    if average == 0:
        return all(amount == 0 for amount in amounts)
    return all(abs(amount - average) / average < AMOUNT_TOLERANCE for amount in amounts)


def detect_recurring_patterns(
    transactions: Iterable[Transaction],
    subscription_category_id: Optional[str] = None,
) -> list[RecurringPattern]:
    """Find merchants with stable, regularly spaced charges.

    Transactions are grouped by display name (raw merchant name when there
    is none). A group needs two or more charges within 10% of their average
    absolute amount and an average gap that falls in a weekly, monthly or
    yearly band. A group containing a transaction in the Subscriptions
    category is accepted with a single charge, skips the amount check and
    defaults to monthly when no band matches.

    Args:
        transactions: Expense transactions to scan
        subscription_category_id: ID of the Subscriptions category, if it exists

    Returns:
        One RecurringPattern per qualifying merchant, in first-seen order
    """
    groups: dict[str, list[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.merchant_display_name or txn.merchant_name, []).append(txn)

    patterns = []
    for merchant, txns in groups.items():
        is_subscription = subscription_category_id is not None and any(
            txn.category_id == subscription_category_id for txn in txns
        )
        if len(txns) < 2 and not is_subscription:
            continue

        amounts = [abs(Decimal(txn.amount)) for txn in txns]
        average = sum(amounts) / len(amounts)
        if not is_subscription and not _amounts_stable(amounts, average):
            continue

        dates = sorted(txn.date for txn in txns)
        frequency = classify_frequency(dates)
        if frequency is None and is_subscription:
            frequency = Frequency.MONTHLY
        if frequency is None:
            continue

        patterns.append(
            RecurringPattern(
                merchant_display_name=merchant,
                average_amount=average,
                frequency=frequency,
                last_seen_date=dates[-1],
                transaction_ids=tuple(txn.id for txn in txns),
            )
        )

    return patterns


class RecurringService:
    """Service for detecting and listing recurring charges."""

    def __init__(self, db: Database):
        """Initialize recurring service.

        Args:
            db: Database instance
        """
        self.db = db

    def detect_recurring(self, today: Optional[date] = None) -> list[RecurringTransaction]:
        """Recompute recurring charges from the trailing twelve months of expenses.

        Every detected merchant's RecurringTransaction is replaced and its
        contributing transactions are flagged recurring.

        Args:
            today: Reference date for the lookback window (defaults to today)

        Returns:
            Active recurring transactions after the update
        """
        since = (today or date.today()) - relativedelta(months=RECURRING_LOOKBACK_MONTHS)
        subscriptions = self.db.get_category_by_name(SUBSCRIPTIONS_CATEGORY)
        patterns = detect_recurring_patterns(
            self.db.list_expense_transactions(since=since),
            subscriptions.id if subscriptions else None,
        )

        for pattern in patterns:
            self.db.upsert_recurring_transaction(
                pattern.merchant_display_name,
                pattern.average_amount,
                pattern.frequency,
                pattern.last_seen_date,
            )
            self.db.set_transactions_recurring(pattern.transaction_ids, True)

        logger.info("Detected %d recurring merchants since %s", len(patterns), since)
        return self.db.list_recurring_transactions()

    def list_recurring(self, include_inactive: bool = False) -> list[RecurringTransaction]:
        """List recurring charges, largest average amount first."""
        return self.db.list_recurring_transactions(active_only=not include_inactive)
