"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from budgetflow.domain.errors import UnparsableAmountError


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    A value is negative when it is parenthesized, carries a leading minus
    sign, or both.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        UnparsableAmountError: If amount string cannot be parsed
    """
    if amount_str is None or not amount_str.strip():
        raise UnparsableAmountError(amount_str or "")

    cleaned = amount_str.strip()

    # Handle parentheses notation (negative)
    in_parentheses = cleaned.startswith("(") and cleaned.endswith(")")
    if in_parentheses:
        cleaned = cleaned[1:-1]

    # Remove currency symbols and thousands separators
    cleaned = re.sub(r"[$€£¥,\s]", "", cleaned)

    has_minus = cleaned.startswith("-")
    if has_minus:
        cleaned = cleaned[1:]

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise UnparsableAmountError(amount_str)
    if not amount.is_finite() or cleaned.startswith("-"):
        raise UnparsableAmountError(amount_str)

    if in_parentheses or has_minus:
        amount = -amount
    return amount
