"""Per-call classification snapshot shared by CSV import and provider sync."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from budgetflow.domain.categorizer import auto_category_name, categorize_transaction
from budgetflow.domain.entities import (
    CATEGORIZED_TYPES,
    Category,
    MerchantMapping,
    ProviderCategory,
    TransactionType,
)
from budgetflow.domain.merchant import normalize_merchant_name
from budgetflow.domain.rules import ClassificationRules, DEFAULT_RULES
from budgetflow.domain.transaction_type import detect_transaction_type


@dataclass(frozen=True)
class Classification:
    """Type and category decided for one incoming transaction."""

    transaction_type: TransactionType
    category_name: Optional[str]
    category_id: Optional[str]
    needs_review: bool


class ClassificationContext:
    """Categories and merchant mappings fetched once for one ingestion call.

    Merchant mappings are matched on the raw merchant string, ignoring case.
    """

    def __init__(
        self,
        categories: Iterable[Category],
        mappings: Iterable[MerchantMapping],
        rules: ClassificationRules = DEFAULT_RULES,
    ):
        self.rules = rules
        self.category_ids: dict[str, str] = {}
        self.category_names: dict[str, str] = {}
        for category in categories:
            self.category_ids[category.name] = category.id
            self.category_names[category.id] = category.name
        self.mappings = {m.original_name.lower(): m for m in mappings}

    @classmethod
    def load(cls, db, rules: ClassificationRules = DEFAULT_RULES) -> "ClassificationContext":
        """Snapshot categories and merchant mappings from the database."""
        return cls(db.list_categories(), db.list_merchant_mappings(), rules)

    def mapping_for(self, raw_name: str) -> Optional[MerchantMapping]:
        return self.mappings.get(raw_name.lower())

    def display_name(self, raw_name: str) -> str:
        """User-taught display name if one exists, else the normalized name."""
        mapping = self.mapping_for(raw_name)
        if mapping is not None and mapping.display_name:
            return mapping.display_name
        return normalize_merchant_name(raw_name, self.rules)

    def classify(
        self,
        amount: Decimal,
        description: str,
        extended_details: Optional[str] = None,
        texts: Optional[Sequence[Optional[str]]] = None,
        provider_category: Optional[ProviderCategory] = None,
        legacy_categories: Optional[Sequence[str]] = None,
    ) -> Classification:
        """Detect the type, then pick a category the way that type requires.

        Expenses and returns go through the category classifier, income and
        investment rows get their fixed category, and transfers get none.

        Args:
            amount: Signed amount (positive is money out)
            description: Raw merchant/description text, also the mapping key
            extended_details: Optional extended statement details
            texts: Texts scanned for type patterns; defaults to description
                and extended details
            provider_category: Optional provider category hint
            legacy_categories: Optional legacy provider category strings

        Returns:
            Classification for the transaction
        """
        if texts is None:
            texts = [description, extended_details]
        transaction_type = detect_transaction_type(
            amount, texts, provider_category, legacy_categories, self.rules
        )

        if transaction_type in CATEGORIZED_TYPES:
            result = categorize_transaction(
                description,
                extended_details,
                provider_category=provider_category,
                mapping=self.mapping_for(description),
                category_names=self.category_names,
                rules=self.rules,
            )
            return Classification(
                transaction_type=transaction_type,
                category_name=result.category_name,
                category_id=result.category_id or self.category_ids.get(result.category_name),
                needs_review=result.needs_review,
            )

        fixed = auto_category_name(transaction_type)
        return Classification(
            transaction_type=transaction_type,
            category_name=fixed,
            category_id=self.category_ids.get(fixed) if fixed else None,
            needs_review=False,
        )
