"""Transaction editing domain service."""

import logging
from decimal import Decimal
from typing import Any, Optional

from budgetflow.database.base import Database
from budgetflow.domain.categorizer import auto_category_name
from budgetflow.domain.entities import Frequency, Transaction, TransactionType
from budgetflow.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)

logger = logging.getLogger(__name__)


class TransactionService:
    """Service for listing and correcting stored transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_transaction(self, transaction_id: str) -> Transaction:
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[str] = None,
        needs_review: Optional[bool] = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            account_id: Optional account filter
            needs_review: If set, only return rows whose review flag matches

        Raises:
            NotFoundError: If ``account_id`` is given and does not exist
        """
        if account_id is not None and self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        transactions = self.db.list_transactions(account_id)
        if needs_review is not None:
            transactions = [txn for txn in transactions if txn.needs_review == needs_review]
        return transactions

    def update_transaction(
        self,
        transaction_id: str,
        category_id: Optional[str] = None,
        merchant_display_name: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        apply_to_all: bool = False,
    ) -> Transaction:
        """Apply a user correction to a transaction.

        Changing the type to income or investment without a category assigns
        the Income or Investment category; changing it to transfer clears the
        category. Setting a category or display name clears the review flag
        and teaches a merchant mapping for the raw merchant name, so future
        imports of that merchant get the same treatment.

        Args:
            transaction_id: Transaction to update
            category_id: New category ID
            merchant_display_name: New display name
            transaction_type: New transaction type
            apply_to_all: Also apply the category/display name to every
                transaction with the same raw merchant name

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction or category does not exist
            ValidationError: If a transfer is given a category
        """
        txn = self._require_transaction(transaction_id)
        updates: dict[str, Any] = {}

        if category_id is not None and category_id not in {c.id for c in self.db.list_categories()}:
            raise NotFoundError(category_not_found(category_id))

        if transaction_type is not None:
            transaction_type = TransactionType(transaction_type)
            updates["transaction_type"] = transaction_type
            if transaction_type == TransactionType.TRANSFER:
                if category_id is not None:
                    raise ValidationError("Transfers cannot have a category")
                updates["category_id"] = None
            elif category_id is None:
                fixed = auto_category_name(transaction_type)
                category = self.db.get_category_by_name(fixed) if fixed else None
                if category is not None:
                    updates["category_id"] = category.id

        if category_id is not None:
            if transaction_type is None and txn.transaction_type == TransactionType.TRANSFER:
                raise ValidationError("Transfers cannot have a category")
            updates["category_id"] = category_id
        if merchant_display_name is not None:
            updates["merchant_display_name"] = merchant_display_name

        if updates.get("category_id") or merchant_display_name:
            updates["needs_review"] = False
            self._learn_mapping(txn, updates.get("category_id"), merchant_display_name)

            if apply_to_all:
                bulk: dict[str, Any] = {"needs_review": False}
                if updates.get("category_id"):
                    bulk["category_id"] = updates["category_id"]
                if merchant_display_name:
                    bulk["merchant_display_name"] = merchant_display_name
                count = self.db.update_transactions_by_merchant(txn.merchant_name, **bulk)
                logger.info("Applied edit to %d transactions from %s", count, txn.merchant_name)

        if updates:
            self.db.update_transaction(transaction_id, **updates)
        return self._require_transaction(transaction_id)

    def _learn_mapping(
        self,
        txn: Transaction,
        category_id: Optional[str],
        display_name: Optional[str],
    ) -> None:
        existing = self.db.get_merchant_mapping(txn.merchant_name)
        resolved_name = (
            display_name
            or (existing.display_name if existing else None)
            or txn.merchant_display_name
            or txn.merchant_name
        )
        resolved_category = category_id or (existing.default_category_id if existing else None)
        self.db.upsert_merchant_mapping(txn.merchant_name, resolved_name, resolved_category)

    def set_recurring(
        self,
        transaction_id: str,
        is_recurring: bool,
        amount_override: Optional[Decimal] = None,
        apply_to_all: bool = False,
    ) -> Transaction:
        """Manually flag or unflag a transaction as recurring.

        Flagging records a monthly RecurringTransaction for the merchant using
        the average of its flagged rows (or ``amount_override``). Unflagging
        deactivates that record once no flagged rows remain.

        Args:
            transaction_id: Transaction to flag
            is_recurring: New flag value
            amount_override: Amount to record instead of the computed average
            apply_to_all: Flag every transaction with the same raw merchant name

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction does not exist
        """
        txn = self._require_transaction(transaction_id)
        merchant_txns = self.db.list_transactions_by_merchant(txn.merchant_name)

        if apply_to_all:
            targets = [t.id for t in merchant_txns]
        else:
            targets = [txn.id]
        self.db.set_transactions_recurring(targets, is_recurring)

        display_name = txn.merchant_display_name or txn.merchant_name
        flagged = [
            t for t in self.db.list_transactions_by_merchant(txn.merchant_name) if t.is_recurring
        ]

        if flagged:
            if amount_override is not None:
                average = abs(Decimal(amount_override))
            else:
                average = sum(abs(t.amount) for t in flagged) / len(flagged)
            self.db.upsert_recurring_transaction(
                display_name,
                average,
                Frequency.MONTHLY,
                max(t.date for t in flagged),
            )
        else:
            self.db.deactivate_recurring_transaction(display_name)

        return self._require_transaction(transaction_id)
