"""CSV import domain service."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from budgetflow.config import MAX_CSV_BYTES, MAX_REPORTED_ERRORS
from budgetflow.database.base import Database
from budgetflow.domain.classification import ClassificationContext
from budgetflow.domain.csv_format import ColumnMapping, CsvRecord, detect_format, read_csv_records
from budgetflow.domain.duplicates import DuplicateDetector, loose_hash, transaction_hash
from budgetflow.domain.entities import CsvImportBatch, ParsedTransaction
from budgetflow.domain.errors import (
    DomainError,
    EmptyFileError,
    FileTooLargeError,
    NotFoundError,
    UnrecognizedFormatError,
    ValidationError,
    account_not_found,
    import_batch_not_found,
    row_error,
)
from budgetflow.domain.merchant import normalize_merchant_name
from budgetflow.domain.rules import ClassificationRules, DEFAULT_RULES
from budgetflow.utils.amount_parser import parse_amount
from budgetflow.utils.date_parser import parse_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CsvRow:
    """Typed values read from one CSV record."""

    date: date
    description: str
    amount: Decimal
    extended_details: Optional[str] = None
    reference: Optional[str] = None


def decode_csv(content: bytes) -> str:
    """Check the size limit and decode uploaded bytes as UTF-8.

    Raises:
        FileTooLargeError: If the content exceeds MAX_CSV_BYTES
        EmptyFileError: If the content is empty
        ValidationError: If the content is not UTF-8 text
    """
    if len(content) > MAX_CSV_BYTES:
        raise FileTooLargeError(len(content), MAX_CSV_BYTES)
    if not content.strip():
        raise EmptyFileError()
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError(f"CSV file is not valid UTF-8 text: {e.reason}") from e


def read_row(record: dict[str, str], columns: ColumnMapping) -> CsvRow:
    """Parse one CSV record using the detected column mapping.

    Raises:
        UnparsableDateError: If the date cell cannot be parsed
        UnparsableAmountError: If the amount cell cannot be parsed
    """
    reference = None
    if columns.reference:
        # Some banks export references wrapped in quotes to keep them textual
        reference = record.get(columns.reference, "").replace("'", "").strip() or None

    extended_details = None
    if columns.extended_details:
        extended_details = record.get(columns.extended_details) or None

    return CsvRow(
        date=parse_date(record.get(columns.date, "")),
        description=record.get(columns.description, ""),
        amount=parse_amount(record.get(columns.amount, "")),
        extended_details=extended_details,
        reference=reference,
    )


class CSVImportService:
    """Service for previewing and importing bank CSV exports."""

    def __init__(self, db: Database, rules: ClassificationRules = DEFAULT_RULES):
        """Initialize CSV import service.

        Args:
            db: Database instance
            rules: Classification lookup tables
        """
        self.db = db
        self.rules = rules

    def _require_account(self, account_id: str) -> None:
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

    def _load(self, content: bytes) -> tuple[ColumnMapping, list[CsvRecord]]:
        headers, records = read_csv_records(decode_csv(content))
        return detect_format(headers), records

    def _parse(
        self,
        row: CsvRow,
        context: ClassificationContext,
        detector: DuplicateDetector,
    ) -> ParsedTransaction:
        normalized = normalize_merchant_name(row.description, self.rules)
        is_duplicate = detector.is_duplicate(
            row.date,
            row.description,
            row.amount,
            external_reference=row.reference,
            display_name=normalized,
        )
        classification = context.classify(row.amount, row.description, row.extended_details)

        return ParsedTransaction(
            date=row.date,
            description=row.description,
            amount=row.amount,
            transaction_type=classification.transaction_type,
            category_name=classification.category_name,
            needs_review=classification.needs_review,
            hash=row.reference or transaction_hash(row.date, row.description, row.amount),
            is_duplicate=is_duplicate,
            merchant_display_name=context.display_name(row.description),
            extended_details=row.extended_details,
            external_reference=row.reference,
            category_id=classification.category_id,
        )

    def preview_csv(self, account_id: str, content: bytes) -> dict[str, Any]:
        """Parse and classify a CSV without writing anything.

        Args:
            account_id: Target account ID
            content: Raw file bytes

        Returns:
            Dict with:
            - transactions: list of ParsedTransaction in file order
            - duplicate_count: rows flagged as duplicates
            - new_count: rows not flagged
            - total_rows: data rows in the file
            - errors: "Row N: reason" messages for rows that could not be parsed

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the file is empty, too large, or has unknown columns
        """
        self._require_account(account_id)
        columns, records = self._load(content)
        context = ClassificationContext.load(self.db, self.rules)
        detector = DuplicateDetector(self.db.list_transactions(account_id))

        transactions = []
        errors = []
        for record in records:
            row_num = record.line
            try:
                row = read_row(record.values, columns)
            except ValidationError as e:
                logger.warning("Preview skipped row %d: %s", row_num, e)
                errors.append(row_error(row_num, e))
                continue
            transactions.append(self._parse(row, context, detector))

        duplicate_count = sum(1 for txn in transactions if txn.is_duplicate)
        return {
            "transactions": transactions,
            "duplicate_count": duplicate_count,
            "new_count": len(transactions) - duplicate_count,
            "total_rows": len(records),
            "errors": errors[:MAX_REPORTED_ERRORS],
        }

    def import_csv(
        self,
        account_id: str,
        content: bytes,
        file_name: str,
        skip_duplicates: bool = True,
    ) -> dict[str, Any]:
        """Import transactions from CSV bytes into an account.

        Rows are processed in file order. A row that cannot be parsed or
        stored is skipped and reported; it never aborts the rest of the file.

        Args:
            account_id: Target account ID
            content: Raw file bytes
            file_name: Original file name, recorded on the import batch
            skip_duplicates: If False, rows flagged as duplicates are stored too

        Returns:
            Dict with import statistics:
            - imported: number of transactions imported
            - skipped: number of transactions skipped (duplicates)
            - errors: list of error messages (at most MAX_REPORTED_ERRORS)
            - error_count: total number of failed rows
            - import_id: batch ID, or None if nothing was imported

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the file is empty, too large, or has unknown columns
            StorageError: If the import batch cannot be created
        """
        self._require_account(account_id)
        columns, records = self._load(content)
        context = ClassificationContext.load(self.db, self.rules)
        detector = DuplicateDetector(self.db.list_transactions(account_id))

        import_id = self.db.create_csv_import_batch(account_id, file_name)

        imported = 0
        skipped = 0
        errors = []

        for record in records:
            row_num = record.line
            try:
                row = read_row(record.values, columns)
                parsed = self._parse(row, context, detector)

                if parsed.is_duplicate and skip_duplicates:
                    logger.debug("Row %d is a duplicate, skipping", row_num)
                    skipped += 1
                    continue

                self.db.insert_transaction(
                    account_id=account_id,
                    date=parsed.date,
                    amount=parsed.amount,
                    merchant_name=parsed.description,
                    original_description=parsed.extended_details or parsed.description,
                    merchant_display_name=parsed.merchant_display_name,
                    category_id=parsed.category_id,
                    transaction_type=parsed.transaction_type,
                    needs_review=parsed.needs_review,
                    external_reference=parsed.external_reference,
                    csv_import_id=import_id,
                )
            except DomainError as e:
                logger.warning("Import skipped row %d: %s", row_num, e)
                errors.append(row_error(row_num, e))
                continue

            imported += 1
            detector.remember(row.date, row.description, row.amount, row.reference)

        if imported == 0:
            self.db.delete_csv_import_batch(import_id)
            import_id = None
        else:
            self.db.update_csv_import_batch(import_id, imported)

        logger.info(
            "Imported %d transactions from %s (%d skipped, %d errors)",
            imported,
            file_name,
            skipped,
            len(errors),
        )
        return {
            "imported": imported,
            "skipped": skipped,
            "errors": errors[:MAX_REPORTED_ERRORS],
            "error_count": len(errors),
            "import_id": import_id,
        }

    def backfill_references(self, account_id: str, content: bytes) -> dict[str, int]:
        """Attach CSV references to stored transactions of an account that lack one.

        Each row is matched to a stored transaction with the same date and
        amount, preferring one whose raw, original or display name matches
        the row's description. Otherwise the first unmatched candidate is used.

        Args:
            account_id: Account whose transactions are updated
            content: Raw file bytes of a CSV with a reference column

        Returns:
            Dict with updated, skipped and total row counts

        Raises:
            NotFoundError: If the account does not exist
            UnrecognizedFormatError: If the CSV has no reference column
        """
        self._require_account(account_id)
        headers, records = read_csv_records(decode_csv(content))
        columns = detect_format(headers)
        if columns.reference is None:
            raise UnrecognizedFormatError(headers)

        candidates_by_key: dict[str, list] = {}
        for txn in self.db.list_transactions(account_id):
            if txn.external_reference:
                continue
            candidates_by_key.setdefault(loose_hash(txn.date, txn.amount), []).append(txn)

        updated = 0
        skipped = 0
        matched: set[str] = set()

        for record in records:
            row_num = record.line
            try:
                row = read_row(record.values, columns)
            except ValidationError as e:
                logger.warning("Backfill skipped row %d: %s", row_num, e)
                skipped += 1
                continue

            candidates = [
                txn
                for txn in candidates_by_key.get(loose_hash(row.date, row.amount), [])
                if txn.id not in matched
            ]
            if not row.reference or not candidates:
                skipped += 1
                continue

            description = row.description.lower().strip()
            cleaned = normalize_merchant_name(row.description, self.rules).lower().strip()

            def same_merchant(txn) -> bool:
                merchant = (txn.merchant_name or "").lower().strip()
                original = (txn.original_description or "").lower().strip()
                display = (txn.merchant_display_name or "").lower().strip()
                return description in (merchant, original) or cleaned in (display, merchant)

            match = next((txn for txn in candidates if same_merchant(txn)), candidates[0])
            try:
                self.db.update_transaction(match.id, external_reference=row.reference)
            except DomainError as e:
                logger.warning("Backfill could not update row %d: %s", row_num, e)
                skipped += 1
                continue

            matched.add(match.id)
            updated += 1

        logger.info("Backfill complete: %d updated, %d skipped", updated, skipped)
        return {"updated": updated, "skipped": skipped, "total": len(records)}

    def list_imports(self, account_id: str) -> list[CsvImportBatch]:
        """List import batches for an account, newest first."""
        self._require_account(account_id)
        return self.db.list_csv_import_batches(account_id)

    def delete_import(self, import_id: str) -> int:
        """Delete an import batch together with the transactions it created.

        Returns:
            Number of transactions the batch held

        Raises:
            NotFoundError: If the batch does not exist
        """
        batch = self.db.get_csv_import_batch(import_id)
        if batch is None:
            raise NotFoundError(import_batch_not_found(import_id))
        self.db.delete_csv_import_batch(import_id)
        return batch.transaction_count
