"""Transaction type detection."""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from budgetflow.domain.entities import ProviderCategory, TransactionType
from budgetflow.domain.rules import (
    ClassificationRules,
    DEFAULT_RULES,
    INCOME_PROVIDER_CATEGORY,
)


def _matches_any(texts: Sequence[str], patterns) -> bool:
    return any(pattern.search(text) for text in texts for pattern in patterns)


def detect_transaction_type(
    amount: Decimal,
    texts: Iterable[Optional[str]],
    provider_category: Optional[ProviderCategory] = None,
    legacy_categories: Optional[Sequence[str]] = None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> TransactionType:
    """Classify a transaction as expense, income, transfer, investment or return.

    Priority: transfer text > investment text > provider detailed category
    (investment) > provider primary category (transfer, income) > legacy
    provider categories (transfer) > amount sign.

    Transfer text is checked before investment text, so a brokerage row that
    also carries payment boilerplate ("Robinhood Card Payment") is a transfer.

    Args:
        amount: Signed amount (positive is money out)
        texts: Merchant name, description, extended details; None entries are ignored
        provider_category: Optional provider personal finance category
        legacy_categories: Optional legacy provider category strings
        rules: Lookup tables to use

    Returns:
        The detected TransactionType
    """
    candidates = [text for text in texts if text]

    if _matches_any(candidates, rules.transfer_patterns):
        return TransactionType.TRANSFER

    if _matches_any(candidates, rules.investment_patterns):
        return TransactionType.INVESTMENT

    primary = provider_category.primary if provider_category else None
    detailed = provider_category.detailed if provider_category else None

    if detailed and any(marker in detailed for marker in rules.investment_provider_markers):
        return TransactionType.INVESTMENT

    if primary:
        if primary.startswith(rules.transfer_provider_prefixes):
            return TransactionType.TRANSFER
        if primary == INCOME_PROVIDER_CATEGORY:
            return TransactionType.INCOME

    if legacy_categories and any(
        marker in category
        for category in legacy_categories
        for marker in rules.transfer_legacy_categories
    ):
        return TransactionType.TRANSFER

    if amount < 0:
        return TransactionType.RETURN
    return TransactionType.EXPENSE
