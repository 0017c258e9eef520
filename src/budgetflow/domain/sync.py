"""Provider sync domain service."""

import logging
from typing import Any

from budgetflow.database.base import Database
from budgetflow.domain.classification import ClassificationContext
from budgetflow.domain.entities import Account, TransactionType
from budgetflow.domain.errors import (
    DomainError,
    NotFoundError,
    ProviderError,
    ValidationError,
    account_not_found,
    account_not_linked,
)
from budgetflow.domain.rules import ClassificationRules, DEFAULT_RULES
from budgetflow.providers.base import AggregationClient, ProviderTransaction

logger = logging.getLogger(__name__)


def _raw_name(record: ProviderTransaction) -> str:
    return record.merchant_name or record.name


class ProviderSyncService:
    """Service for pulling linked-account transactions from the aggregation provider."""

    def __init__(
        self,
        db: Database,
        client: AggregationClient,
        rules: ClassificationRules = DEFAULT_RULES,
    ):
        """Initialize provider sync service.

        Args:
            db: Database instance
            client: Aggregation client used to fetch deltas
            rules: Classification lookup tables
        """
        self.db = db
        self.client = client
        self.rules = rules

    def _item_accounts(self, account: Account) -> list[Account]:
        """Accounts that share the provider item (and so the access token) of ``account``."""
        if account.provider_item_id is None:
            return [account]
        siblings = [
            acc
            for acc in self.db.list_accounts()
            if acc.provider_item_id == account.provider_item_id and acc.id != account.id
        ]
        return [account] + siblings

    def _fields(self, record: ProviderTransaction, context: ClassificationContext) -> dict[str, Any]:
        raw_name = _raw_name(record)
        classification = context.classify(
            record.amount,
            raw_name,
            extended_details=record.original_description,
            texts=[record.merchant_name, record.name, record.original_description],
            provider_category=record.personal_finance_category,
            legacy_categories=record.legacy_categories,
        )
        return {
            "date": record.date,
            "amount": record.amount,
            "merchant_name": raw_name,
            "original_description": record.original_description or record.name,
            "merchant_display_name": context.display_name(raw_name),
            "category_id": classification.category_id,
            "transaction_type": classification.transaction_type,
            "needs_review": classification.needs_review,
            "pending": record.pending,
            "provider_category": record.personal_finance_category,
        }

    def sync_account(self, account_id: str) -> dict[str, Any]:
        """Pull all pending deltas for an account's provider item.

        Pages are fetched until the provider reports no more, and only then
        are the deltas applied and the final cursor saved. A provider failure
        on any page writes nothing, so the next sync restarts from the
        cursor this one started with. Records are routed to the local
        account linked to their provider account ID, falling back to
        ``account_id``.

        Args:
            account_id: ID of a linked account

        Returns:
            Dict with added, modified and removed counts and a list of
            per-record error messages

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the account is not linked
            ProviderError: If the provider request fails
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if not account.is_linked:
            raise ValidationError(account_not_linked(account_id))

        item_accounts = self._item_accounts(account)
        routes = {acc.provider_account_id: acc.id for acc in item_accounts if acc.provider_account_id}
        context = ClassificationContext.load(self.db, self.rules)

        added = 0
        modified = 0
        removed = 0
        errors: list[str] = []
        cursor = account.sync_cursor

        logger.info("Syncing account %s (%s)", account.name, "incremental" if cursor else "initial")

        pages = []
        while True:
            page = self.client.sync_transactions(account.access_token, cursor)
            pages.append(page)
            cursor = page.next_cursor
            if not page.has_more:
                break

        for page in pages:
            for record in page.added:
                try:
                    if self.db.get_transaction_by_provider_id(record.transaction_id) is not None:
                        logger.debug("Transaction %s already stored", record.transaction_id)
                        continue
                    self.db.insert_transaction(
                        account_id=routes.get(record.account_id, account.id),
                        provider_transaction_id=record.transaction_id,
                        **self._fields(record, context),
                    )
                    added += 1
                except DomainError as e:
                    logger.warning("Could not add transaction %s: %s", record.transaction_id, e)
                    errors.append(f"{record.transaction_id}: {e}")

            for record in page.modified:
                fields = self._fields(record, context)
                # Keep user-assigned categories unless the row became a transfer
                if fields["transaction_type"] != TransactionType.TRANSFER:
                    del fields["category_id"], fields["needs_review"]
                try:
                    if self.db.update_transaction_by_provider_id(record.transaction_id, **fields):
                        modified += 1
                except DomainError as e:
                    logger.warning("Could not update transaction %s: %s", record.transaction_id, e)
                    errors.append(f"{record.transaction_id}: {e}")

            for transaction_id in page.removed:
                try:
                    removed += self.db.delete_transactions_by_provider_id(transaction_id)
                except DomainError as e:
                    logger.warning("Could not remove transaction %s: %s", transaction_id, e)
                    errors.append(f"{transaction_id}: {e}")

        for acc in item_accounts:
            self.db.set_account_sync_cursor(acc.id, cursor)

        logger.info("Sync complete: +%d added, ~%d modified, -%d removed", added, modified, removed)
        return {"added": added, "modified": modified, "removed": removed, "errors": errors}

    def sync_all_accounts(self) -> dict[str, Any]:
        """Sync every linked provider item once.

        Items that need additional consent are skipped quietly. Any other
        provider failure is recorded for that account and the remaining
        items are still synced.

        Returns:
            Dict with:
            - results: account ID -> sync_account result
            - skipped: account IDs skipped for missing consent
            - failed: account ID -> error message
        """
        results: dict[str, dict[str, Any]] = {}
        skipped: list[str] = []
        failed: dict[str, str] = {}
        seen_items: set[str] = set()

        for account in self.db.list_accounts():
            if not account.is_linked:
                continue
            item_key = account.provider_item_id or account.id
            if item_key in seen_items:
                continue
            seen_items.add(item_key)

            try:
                results[account.id] = self.sync_account(account.id)
            except ProviderError as e:
                if e.requires_additional_consent:
                    logger.info("Skipping %s: additional consent required", account.name)
                    skipped.append(account.id)
                else:
                    logger.error("Sync failed for %s: %s", account.name, e)
                    failed[account.id] = str(e)

        return {"results": results, "skipped": skipped, "failed": failed}
