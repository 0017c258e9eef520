"""Tests for the SQLAlchemy storage implementation."""

from datetime import date
from decimal import Decimal

import pytest

from budgetflow.domain.entities import Frequency
from budgetflow.domain.errors import NotFoundError, StorageError


def test_merchant_mapping_upsert_is_last_write_wins(temp_db, sample_categories):
    """Upserting by original name replaces the previous mapping."""
    temp_db.upsert_merchant_mapping("SBUX 123", "Starbucks", sample_categories["Dining"])
    temp_db.upsert_merchant_mapping("SBUX 123", "Coffee", None)

    (mapping,) = temp_db.list_merchant_mappings()
    assert mapping.display_name == "Coffee"
    assert mapping.default_category_id is None


def test_recurring_upsert_replaces_and_reactivates(temp_db):
    """Upserting a recurring charge replaces its values and reactivates it."""
    temp_db.upsert_recurring_transaction("Gym", Decimal("30"), Frequency.MONTHLY, date(2024, 1, 1))
    temp_db.deactivate_recurring_transaction("Gym")
    temp_db.upsert_recurring_transaction("Gym", Decimal("35.5"), Frequency.YEARLY, date(2024, 2, 1))

    (record,) = temp_db.list_recurring_transactions()
    assert record.average_amount == Decimal("35.50")
    assert record.frequency == Frequency.YEARLY
    assert record.last_seen_date == date(2024, 2, 1)
    assert record.is_active is True


def test_recurring_listed_largest_first(temp_db):
    """Recurring charges are ordered by average amount, descending."""
    temp_db.upsert_recurring_transaction("Small", Decimal("5"), Frequency.MONTHLY, date(2024, 1, 1))
    temp_db.upsert_recurring_transaction("Large", Decimal("500"), Frequency.MONTHLY, date(2024, 1, 1))

    assert [r.merchant_display_name for r in temp_db.list_recurring_transactions()] == ["Large", "Small"]


def test_external_reference_unique_per_account(temp_db, sample_account, account_service, insert_transaction):
    """The same reference cannot be stored twice for one account."""
    insert_transaction(external_reference="REF1")
    with pytest.raises(StorageError):
        insert_transaction(external_reference="REF1", date=date(2024, 2, 2))

    # The session is usable again and other accounts may reuse the reference
    other_id = account_service.create_account("Other", "Bank")
    insert_transaction(external_reference="REF1", account_id=other_id)


def test_update_rejects_unknown_fields(temp_db, insert_transaction):
    """Only whitelisted transaction fields can be updated."""
    txn_id = insert_transaction()
    with pytest.raises(ValueError):
        temp_db.update_transaction(txn_id, account_id="elsewhere")


def test_update_missing_transaction(temp_db):
    """Updating a missing transaction raises NotFoundError."""
    with pytest.raises(NotFoundError):
        temp_db.update_transaction("missing", needs_review=False)


def test_update_by_provider_id_reports_absence(temp_db):
    """Updating an unknown provider ID returns False."""
    assert temp_db.update_transaction_by_provider_id("nope", amount=Decimal("1")) is False


def test_delete_batch_cascades(temp_db, sample_account, insert_transaction):
    """Deleting an import batch deletes its transactions only."""
    batch_id = temp_db.create_csv_import_batch(sample_account.id, "jan.csv")
    insert_transaction(csv_import_id=batch_id)
    keep = insert_transaction(date=date(2024, 3, 3))

    temp_db.delete_csv_import_batch(batch_id)

    assert [txn.id for txn in temp_db.list_transactions(sample_account.id)] == [keep]
    assert temp_db.get_csv_import_batch(batch_id) is None


def test_sync_cursor_round_trip(temp_db, sample_account):
    """The sync cursor is stored per account."""
    assert temp_db.get_account_sync_cursor(sample_account.id) is None
    temp_db.set_account_sync_cursor(sample_account.id, "cursor-1")
    assert temp_db.get_account_sync_cursor(sample_account.id) == "cursor-1"


def test_list_expense_transactions_since(temp_db, insert_transaction):
    """Only expenses on or after the cut-off are listed, oldest first."""
    insert_transaction(date=date(2023, 1, 1))
    newer = insert_transaction(date=date(2024, 2, 1))
    older = insert_transaction(date=date(2024, 1, 1))
    insert_transaction(date=date(2024, 1, 15), transaction_type="transfer")

    result = temp_db.list_expense_transactions(since=date(2024, 1, 1))

    assert [txn.id for txn in result] == [older, newer]


def test_merchant_bulk_update_skips_category_on_transfers(temp_db, sample_categories, insert_transaction):
    """Bulk category writes never reach transfer rows."""
    expense = insert_transaction(merchant_name="ACME")
    transfer = insert_transaction(merchant_name="ACME", transaction_type="transfer")

    count = temp_db.update_transactions_by_merchant(
        "ACME", category_id=sample_categories["Shopping"], needs_review=False
    )

    assert count == 2
    assert temp_db.get_transaction(expense).category_id == sample_categories["Shopping"]
    assert temp_db.get_transaction(transfer).category_id is None
