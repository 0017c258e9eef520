"""Duplicate detection for incoming transactions.

Three strategies run in order and the first positive match wins:

1. Reference: the candidate's external reference equals a stored one.
2. Content hash: ``date|description|amount`` equals the hash of a stored
   row's raw merchant name, original description or display name.
3. Fuzzy: same date and amount. Each stored row with a given
   ``date|amount`` key absorbs one candidate with that key; candidates
   beyond the stored count are new.

A detector instance holds the per-batch counters, so one instance must be
used per ingestion call and rows must be checked in file order.
"""

from collections import Counter
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from budgetflow.domain.entities import Transaction

CENT = Decimal("0.01")


def _cents(amount: Decimal) -> str:
    return str(Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP))


def transaction_hash(txn_date: date, description: str, amount: Decimal) -> str:
    """Build the content hash key for a transaction."""
    return f"{txn_date.isoformat()}|{description.lower().strip()}|{_cents(amount)}"


def loose_hash(txn_date: date, amount: Decimal) -> str:
    """Build the date + amount key used for fuzzy matching."""
    return f"{txn_date.isoformat()}|{_cents(amount)}"


class DuplicateDetector:
    """Flags candidates that already exist in storage or earlier in the batch."""

    def __init__(self, stored: Iterable[Transaction]):
        """Snapshot the stored transactions of one account.

        Args:
            stored: Transactions already stored for the target account
        """
        self.references: set[str] = set()
        self.hashes: set[str] = set()
        self.stored_loose_counts: Counter[str] = Counter()
        self.batch_loose_counts: Counter[str] = Counter()

        for txn in stored:
            for variant in (txn.merchant_name, txn.original_description, txn.merchant_display_name):
                if variant:
                    self.hashes.add(transaction_hash(txn.date, variant, txn.amount))
            if txn.external_reference:
                self.references.add(txn.external_reference)
            self.stored_loose_counts[loose_hash(txn.date, txn.amount)] += 1

    def is_duplicate(
        self,
        txn_date: date,
        description: str,
        amount: Decimal,
        external_reference: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> bool:
        """Check one candidate and advance the in-batch fuzzy counters.

        Args:
            txn_date: Candidate date
            description: Candidate raw description
            amount: Candidate amount
            external_reference: Optional bank/provider reference
            display_name: Candidate's normalized merchant name

        Returns:
            True if the candidate duplicates a stored or already-accepted row
        """
        if external_reference and external_reference in self.references:
            return True

        candidate_hashes = {transaction_hash(txn_date, description, amount)}
        if display_name:
            candidate_hashes.add(transaction_hash(txn_date, display_name, amount))
        if not candidate_hashes.isdisjoint(self.hashes):
            return True

        key = loose_hash(txn_date, amount)
        seen_in_batch = self.batch_loose_counts[key]
        self.batch_loose_counts[key] = seen_in_batch + 1
        return self.stored_loose_counts[key] > seen_in_batch

    def remember(
        self,
        txn_date: date,
        description: str,
        amount: Decimal,
        external_reference: Optional[str] = None,
    ) -> None:
        """Record an accepted candidate so later identical rows in the batch match it."""
        self.hashes.add(transaction_hash(txn_date, description, amount))
        if external_reference:
            self.references.add(external_reference)
