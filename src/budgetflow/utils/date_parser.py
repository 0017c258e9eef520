"""Date parsing utilities."""

import re
from datetime import date

from dateutil import parser as date_parser

from budgetflow.domain.errors import UnparsableDateError

_US_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_date(date_str: str) -> date:
    """Parse a statement date into a date object.

    Supports:
    - "01/15/2024" and "1-15-2024" (month first)
    - "2024-01-15" (ISO)
    - anything else dateutil understands, e.g. "Jan 15, 2024"

    Args:
        date_str: Date string

    Returns:
        Date object; use ``.isoformat()`` for the canonical YYYY-MM-DD form

    Raises:
        UnparsableDateError: If date string cannot be parsed
    """
    if date_str is None:
        raise UnparsableDateError("")
    cleaned = date_str.strip()

    try:
        us_match = _US_DATE.match(cleaned)
        if us_match:
            month, day, year = (int(part) for part in us_match.groups())
            return date(year, month, day)

        iso_match = _ISO_DATE.match(cleaned)
        if iso_match:
            year, month, day = (int(part) for part in iso_match.groups())
            return date(year, month, day)

        if not cleaned:
            raise ValueError("empty date")
        return date_parser.parse(cleaned).date()
    except (ValueError, OverflowError):
        raise UnparsableDateError(date_str)
