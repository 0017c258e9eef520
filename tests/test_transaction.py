"""Tests for transaction edits."""

from datetime import date
from decimal import Decimal

import pytest

from budgetflow.domain.entities import Frequency, TransactionType
from budgetflow.domain.errors import NotFoundError, ValidationError


@pytest.fixture
def review_txn(insert_transaction):
    """A fallback-categorized transaction waiting for review."""
    return insert_transaction(
        merchant_name="ZQXJ 123",
        merchant_display_name="Zqxj",
        needs_review=True,
    )


def test_category_edit_clears_review_and_learns_mapping(
    transaction_service, temp_db, sample_categories, review_txn
):
    """Editing the category clears review and teaches a mapping."""
    updated = transaction_service.update_transaction(review_txn, category_id=sample_categories["Dining"])

    assert updated.category_id == sample_categories["Dining"]
    assert updated.needs_review is False
    mapping = temp_db.get_merchant_mapping("ZQXJ 123")
    assert mapping.display_name == "Zqxj"
    assert mapping.default_category_id == sample_categories["Dining"]


def test_display_name_edit_keeps_mapped_category(transaction_service, temp_db, sample_categories, review_txn):
    """A later display-name edit keeps the category already learned."""
    transaction_service.update_transaction(review_txn, category_id=sample_categories["Dining"])
    transaction_service.update_transaction(review_txn, merchant_display_name="Zqxj Deli")

    mapping = temp_db.get_merchant_mapping("ZQXJ 123")
    assert mapping.display_name == "Zqxj Deli"
    assert mapping.default_category_id == sample_categories["Dining"]


def test_learned_mapping_applies_to_next_import(
    transaction_service, import_service, sample_account, sample_categories, temp_db, review_txn
):
    """Future imports of the merchant use the learned category and name."""
    transaction_service.update_transaction(
        review_txn, category_id=sample_categories["Groceries"], merchant_display_name="Corner Store"
    )

    import_service.import_csv(
        sample_account.id, b"Date,Description,Amount\n03/01/2024,ZQXJ 123,8.00\n", "mar.csv"
    )

    imported = [t for t in temp_db.list_transactions(sample_account.id) if t.date == date(2024, 3, 1)]
    assert imported[0].merchant_display_name == "Corner Store"
    assert imported[0].category_id == sample_categories["Groceries"]
    assert imported[0].needs_review is False


def test_apply_to_all(transaction_service, temp_db, sample_categories, insert_transaction):
    """Every row with the same raw merchant gets the edit."""
    ids = [
        insert_transaction(date=date(2024, 1, day), merchant_name="ZQXJ 123", needs_review=True)
        for day in (1, 2, 3)
    ]
    other = insert_transaction(merchant_name="ELSEWHERE", needs_review=True)

    transaction_service.update_transaction(
        ids[0], category_id=sample_categories["Shopping"], apply_to_all=True
    )

    for txn_id in ids:
        txn = temp_db.get_transaction(txn_id)
        assert txn.category_id == sample_categories["Shopping"]
        assert txn.needs_review is False
    assert temp_db.get_transaction(other).needs_review is True


def test_type_change_to_transfer_clears_category(transaction_service, sample_categories, insert_transaction):
    """Transfers never keep a category."""
    txn_id = insert_transaction(category_id=sample_categories["Dining"])

    updated = transaction_service.update_transaction(txn_id, transaction_type=TransactionType.TRANSFER)

    assert updated.transaction_type == TransactionType.TRANSFER
    assert updated.category_id is None


def test_transfer_cannot_get_category(transaction_service, sample_categories, insert_transaction):
    """Assigning a category to a transfer is rejected."""
    txn_id = insert_transaction(transaction_type="transfer")
    with pytest.raises(ValidationError):
        transaction_service.update_transaction(txn_id, category_id=sample_categories["Dining"])


@pytest.mark.parametrize(
    "new_type, category",
    [(TransactionType.INCOME, "Income"), (TransactionType.INVESTMENT, "Investment")],
)
def test_type_change_assigns_fixed_category(
    transaction_service, sample_categories, insert_transaction, new_type, category
):
    """Income and investment rows get their category automatically."""
    txn_id = insert_transaction(amount=Decimal("-100"), transaction_type="return")

    updated = transaction_service.update_transaction(txn_id, transaction_type=new_type)

    assert updated.category_id == sample_categories[category]


def test_unknown_transaction_or_category(transaction_service, sample_categories, insert_transaction):
    """Missing targets raise NotFoundError."""
    with pytest.raises(NotFoundError):
        transaction_service.update_transaction("missing", category_id=sample_categories["Dining"])
    txn_id = insert_transaction()
    with pytest.raises(NotFoundError):
        transaction_service.update_transaction(txn_id, category_id="no-such-category")


def test_set_recurring_upserts_monthly_record(transaction_service, temp_db, insert_transaction):
    """Flagging records a monthly charge averaged over flagged rows."""
    first = insert_transaction(date=date(2024, 1, 1), amount=Decimal("10.00"), merchant_name="GYM",
                               merchant_display_name="Gym")
    second = insert_transaction(date=date(2024, 2, 1), amount=Decimal("12.00"), merchant_name="GYM",
                                merchant_display_name="Gym")

    transaction_service.set_recurring(first, True, apply_to_all=True)

    (record,) = temp_db.list_recurring_transactions()
    assert record.merchant_display_name == "Gym"
    assert record.frequency == Frequency.MONTHLY
    assert record.average_amount == Decimal("11.00")
    assert record.last_seen_date == date(2024, 2, 1)
    assert temp_db.get_transaction(second).is_recurring is True


def test_set_recurring_amount_override(transaction_service, temp_db, insert_transaction):
    """An explicit amount replaces the computed average."""
    txn_id = insert_transaction(merchant_name="GYM", merchant_display_name="Gym")

    transaction_service.set_recurring(txn_id, True, amount_override=Decimal("29.99"))

    (record,) = temp_db.list_recurring_transactions()
    assert record.average_amount == Decimal("29.99")


def test_unflagging_last_row_deactivates(transaction_service, temp_db, insert_transaction):
    """The recurring record goes inactive once no flagged rows remain."""
    txn_id = insert_transaction(merchant_name="GYM", merchant_display_name="Gym")
    transaction_service.set_recurring(txn_id, True)

    updated = transaction_service.set_recurring(txn_id, False)

    assert updated.is_recurring is False
    assert temp_db.list_recurring_transactions() == []
    (inactive,) = temp_db.list_recurring_transactions(active_only=False)
    assert inactive.is_active is False


def test_list_needs_review(transaction_service, sample_account, insert_transaction):
    """Listing can be limited to rows awaiting review."""
    flagged = insert_transaction(needs_review=True)
    insert_transaction(needs_review=False, date=date(2024, 1, 6))

    result = transaction_service.list_transactions(sample_account.id, needs_review=True)

    assert [txn.id for txn in result] == [flagged]


def test_apply_to_all_leaves_transfers_uncategorized(
    transaction_service, temp_db, sample_categories, insert_transaction
):
    """A bulk category edit skips transfer rows but still renames them."""
    expense = insert_transaction(merchant_name="ACME", needs_review=True)
    transfer = insert_transaction(
        merchant_name="ACME", transaction_type="transfer", date=date(2024, 1, 6)
    )

    transaction_service.update_transaction(
        expense,
        category_id=sample_categories["Shopping"],
        merchant_display_name="Acme",
        apply_to_all=True,
    )

    assert temp_db.get_transaction(expense).category_id == sample_categories["Shopping"]
    stored_transfer = temp_db.get_transaction(transfer)
    assert stored_transfer.category_id is None
    assert stored_transfer.merchant_display_name == "Acme"
