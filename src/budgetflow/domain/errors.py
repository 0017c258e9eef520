"""Shared domain error messages and error types."""

from typing import Optional

from budgetflow.config import ADDITIONAL_CONSENT_REQUIRED


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class UnrecognizedFormatError(ValidationError):
    """CSV headers do not match any known column layout."""

    def __init__(self, headers: list[str]):
        self.headers = list(headers)
        super().__init__(
            "Unable to detect CSV format. Expected columns: Date, Description, Amount "
            f"(found: {', '.join(self.headers) or 'none'})"
        )


class UnparsableDateError(ValidationError):
    """A date cell could not be parsed."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Unable to parse date: {raw}")


class UnparsableAmountError(ValidationError):
    """An amount cell could not be parsed."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Unable to parse amount: {raw}")


class EmptyFileError(ValidationError):
    """The uploaded file has no data rows."""

    def __init__(self, message: str = "CSV file is empty"):
        super().__init__(message)


class FileTooLargeError(ValidationError):
    """The uploaded file exceeds the configured size limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"CSV file is {size} bytes; the limit is {limit} bytes")


class StorageError(DomainError):
    """A write to the persistence layer failed."""


class ProviderError(DomainError):
    """The aggregation provider returned an error or could not be reached."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message)

    @property
    def requires_additional_consent(self) -> bool:
        return self.error_code == ADDITIONAL_CONSENT_REQUIRED


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_not_linked(account_id: str) -> str:
    """Return message for an account without provider credentials."""
    return f"Account {account_id} is not linked to a provider"


def category_not_found(category_id: str) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_name_not_found(name: str) -> str:
    """Return message for missing category by name."""
    return f"Category '{name}' not found"


def transaction_not_found(transaction_id: str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def import_batch_not_found(import_id: str) -> str:
    """Return message for missing CSV import batch."""
    return f"Import {import_id} not found"


def row_error(row_num: int, reason: object) -> str:
    """Return the user-facing message for a skipped CSV row."""
    return f"Row {row_num}: {reason}"
