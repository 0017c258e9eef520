"""CSV column layout detection and row reading."""

import csv
import io
import re
from dataclasses import dataclass
from typing import Optional

from budgetflow.domain.errors import EmptyFileError, UnrecognizedFormatError

_DATE_HEADER = re.compile(r"^(date|trans(action)?[\s_-]?date|posted[\s_-]?date)$", re.IGNORECASE)
_DESCRIPTION_HEADER = re.compile(r"^(description|merchant|payee|memo|name)$", re.IGNORECASE)
_AMOUNT_HEADER = re.compile(r"^(amount|debit|credit|charge)$", re.IGNORECASE)
_REFERENCE_HEADER = re.compile(r"^(reference|ref|transaction[\s_-]?id|confirmation)$", re.IGNORECASE)


@dataclass(frozen=True)
class ColumnMapping:
    """Which CSV header holds each transaction field."""

    date: str
    description: str
    amount: str
    extended_details: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class CsvRecord:
    """One non-empty CSV row and the file line it ends on (header is line 1)."""

    line: int
    values: dict[str, str]


def _find_header(headers: list[str], pattern: re.Pattern[str]) -> Optional[str]:
    for header in headers:
        if pattern.match(header.strip()):
            return header
    return None


def detect_format(headers: list[str]) -> ColumnMapping:
    """Infer the column mapping from a CSV header row.

    Headers named exactly Date, Description and Amount (any case) are used
    directly, along with Extended Details and Reference when present.
    Otherwise common alternates are tried ("Posted Date", "Payee", "Debit",
    "Transaction ID", ...).

    Args:
        headers: Header row as read from the file

    Returns:
        ColumnMapping naming the original header strings

    Raises:
        UnrecognizedFormatError: If no date, description and amount columns can be found
    """
    normalized = {header.lower().strip(): header for header in reversed(headers)}

    if {"date", "description", "amount"} <= normalized.keys():
        return ColumnMapping(
            date=normalized["date"],
            description=normalized["description"],
            amount=normalized["amount"],
            extended_details=normalized.get("extended details"),
            reference=normalized.get("reference"),
        )

    date_col = _find_header(headers, _DATE_HEADER)
    description_col = _find_header(headers, _DESCRIPTION_HEADER)
    amount_col = _find_header(headers, _AMOUNT_HEADER)
    if date_col and description_col and amount_col:
        return ColumnMapping(
            date=date_col,
            description=description_col,
            amount=amount_col,
            reference=_find_header(headers, _REFERENCE_HEADER),
        )

    raise UnrecognizedFormatError(headers)


def read_csv_records(text: str) -> tuple[list[str], list[CsvRecord]]:
    """Read CSV text into a header list and one record per non-empty row.

    Cell values are stripped and each record keeps the line number the
    reader reported for it, so blank lines do not shift row numbers. The
    delimiter is sniffed from the first kilobyte, falling back to a comma.

    Raises:
        EmptyFileError: If the file has no header row or no data rows
    """
    sample = text[:1024]
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        delimiter = ","

    reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
    if reader.fieldnames is None:
        raise EmptyFileError()
    headers = [name.strip() for name in reader.fieldnames]

    records = []
    for row in reader:
        values = [value for key, value in row.items() if key is not None]
        if not any(value and value.strip() for value in values):
            continue
        records.append(
            CsvRecord(
                line=reader.line_num,
                values={
                    header: (row.get(original) or "").strip()
                    for header, original in zip(headers, reader.fieldnames)
                },
            )
        )

    if not records:
        raise EmptyFileError()
    return headers, records
