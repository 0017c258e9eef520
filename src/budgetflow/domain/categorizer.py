"""Spending category classification."""

from typing import Mapping, Optional

from budgetflow.domain.entities import CategoryResult, MerchantMapping, ProviderCategory, TransactionType
from budgetflow.domain.rules import (
    ClassificationRules,
    DEFAULT_RULES,
    INCOME_CATEGORY,
    INVESTMENT_CATEGORY,
)

# Types that carry a fixed category instead of a classified one
AUTO_CATEGORIES = {
    TransactionType.INCOME: INCOME_CATEGORY,
    TransactionType.INVESTMENT: INVESTMENT_CATEGORY,
}


def category_from_provider(
    provider_category: Optional[ProviderCategory], rules: ClassificationRules = DEFAULT_RULES
) -> Optional[str]:
    """Map a provider category hint onto a category name, detailed value first."""
    if provider_category is None:
        return None
    for key in (provider_category.detailed, provider_category.primary):
        if key and key in rules.provider_category_map:
            return rules.provider_category_map[key]
    return None


def category_from_keywords(
    description: str,
    extended_details: Optional[str] = None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> Optional[str]:
    """Return the first category in table order whose keyword occurs in either text."""
    texts = [description.lower(), (extended_details or "").lower()]
    for category_name, keywords in rules.category_keywords.items():
        for keyword in keywords:
            if any(keyword in text for text in texts):
                return category_name
    return None


def categorize_transaction(
    description: str,
    extended_details: Optional[str] = None,
    provider_category: Optional[ProviderCategory] = None,
    mapping: Optional[MerchantMapping] = None,
    category_names: Optional[Mapping[str, str]] = None,
    rules: ClassificationRules = DEFAULT_RULES,
) -> CategoryResult:
    """Pick a spending category for an expense or return.

    Priority: user merchant mapping > provider category hint > keyword
    table > fallback "Other" flagged for review.

    Args:
        description: Raw merchant/description text
        extended_details: Optional extended statement details
        provider_category: Optional provider category hint
        mapping: Merchant mapping already looked up for ``description``
        category_names: Category id -> name, used to name a mapped category
        rules: Lookup tables to use

    Returns:
        CategoryResult; ``category_id`` is only set for mapping matches
    """
    if mapping is not None and mapping.default_category_id:
        names = category_names or {}
        return CategoryResult(
            category_name=names.get(mapping.default_category_id, rules.fallback_category),
            needs_review=False,
            category_id=mapping.default_category_id,
        )

    provider_match = category_from_provider(provider_category, rules)
    if provider_match is not None:
        return CategoryResult(category_name=provider_match, needs_review=False)

    keyword_match = category_from_keywords(description, extended_details, rules)
    if keyword_match is not None:
        return CategoryResult(category_name=keyword_match, needs_review=False)

    return CategoryResult(category_name=rules.fallback_category, needs_review=True)


def auto_category_name(transaction_type: TransactionType) -> Optional[str]:
    """Return the fixed category for income and investment rows, else None."""
    return AUTO_CATEGORIES.get(TransactionType(transaction_type))
