"""Mapper functions to convert between domain models and SQLAlchemy models."""

from budgetflow.domain import entities as domain
from budgetflow.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    MerchantMapping as ORMMerchantMapping,
    RecurringTransaction as ORMRecurringTransaction,
    CsvImportBatch as ORMCsvImportBatch,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        institution_name=orm_account.institution_name,
        created_at=orm_account.created_at,
        access_token=orm_account.access_token,
        provider_item_id=orm_account.provider_item_id,
        provider_account_id=orm_account.provider_account_id,
        sync_cursor=orm_account.sync_cursor,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(id=orm_category.id, name=orm_category.name)


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    provider_category = None
    if orm_transaction.provider_category_primary:
        provider_category = domain.ProviderCategory(
            primary=orm_transaction.provider_category_primary,
            detailed=orm_transaction.provider_category_detailed or "",
        )
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        date=orm_transaction.date,
        amount=orm_transaction.amount,
        merchant_name=orm_transaction.merchant_name,
        original_description=orm_transaction.original_description,
        merchant_display_name=orm_transaction.merchant_display_name,
        category_id=orm_transaction.category_id,
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        needs_review=orm_transaction.needs_review,
        is_split=orm_transaction.is_split,
        is_recurring=orm_transaction.is_recurring,
        pending=orm_transaction.pending,
        external_reference=orm_transaction.external_reference,
        provider_transaction_id=orm_transaction.provider_transaction_id,
        provider_category=provider_category,
        csv_import_id=orm_transaction.csv_import_id,
        created_at=orm_transaction.created_at,
    )


def merchant_mapping_to_domain(orm_mapping: ORMMerchantMapping) -> domain.MerchantMapping:
    """Convert SQLAlchemy MerchantMapping model to domain MerchantMapping entity."""
    return domain.MerchantMapping(
        original_name=orm_mapping.original_name,
        display_name=orm_mapping.display_name,
        default_category_id=orm_mapping.default_category_id,
    )


def recurring_to_domain(orm_recurring: ORMRecurringTransaction) -> domain.RecurringTransaction:
    """Convert SQLAlchemy RecurringTransaction model to domain entity."""
    return domain.RecurringTransaction(
        id=orm_recurring.id,
        merchant_display_name=orm_recurring.merchant_display_name,
        average_amount=orm_recurring.average_amount,
        frequency=domain.Frequency(orm_recurring.frequency),
        last_seen_date=orm_recurring.last_seen,
        is_active=orm_recurring.is_active,
    )


def csv_import_to_domain(orm_batch: ORMCsvImportBatch) -> domain.CsvImportBatch:
    """Convert SQLAlchemy CsvImportBatch model to domain entity."""
    return domain.CsvImportBatch(
        id=orm_batch.id,
        account_id=orm_batch.account_id,
        file_name=orm_batch.file_name,
        transaction_count=orm_batch.transaction_count,
        created_at=orm_batch.created_at,
    )
