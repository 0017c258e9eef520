"""Tests for spending category classification."""

from budgetflow.domain.categorizer import auto_category_name, categorize_transaction
from budgetflow.domain.entities import MerchantMapping, ProviderCategory, TransactionType
from budgetflow.domain.rules import ClassificationRules


def test_keyword_match():
    """A keyword in the description picks its category."""
    result = categorize_transaction("STARBUCKS STORE #123")
    assert result.category_name == "Dining"
    assert result.needs_review is False


def test_keyword_in_extended_details():
    """Extended details are scanned as well as the description."""
    result = categorize_transaction("ZQXJ", extended_details="WHOLE FOODS MARKET")
    assert result.category_name == "Groceries"


def test_fallback_is_other_and_needs_review():
    """Nothing matching yields Other, flagged for review."""
    result = categorize_transaction("ZQXJ")
    assert result.category_name == "Other"
    assert result.needs_review is True


def test_provider_detailed_category_before_primary():
    """The detailed provider category is looked up before the primary one."""
    hint = ProviderCategory(primary="FOOD_AND_DRINK", detailed="FOOD_AND_DRINK_GROCERIES")
    result = categorize_transaction("ZQXJ", provider_category=hint)
    assert result.category_name == "Groceries"
    assert result.needs_review is False


def test_provider_category_beats_keywords():
    """A mapped provider hint wins over keyword matching."""
    hint = ProviderCategory(primary="TRAVEL", detailed="TRAVEL_FLIGHTS")
    result = categorize_transaction("STARBUCKS", provider_category=hint)
    assert result.category_name == "Travel"


def test_unmapped_provider_category_falls_through():
    """An unknown provider hint falls back to keywords."""
    hint = ProviderCategory(primary="GENERAL_SERVICES", detailed="GENERAL_SERVICES_OTHER")
    result = categorize_transaction("STARBUCKS", provider_category=hint)
    assert result.category_name == "Dining"


def test_mapping_wins():
    """A merchant mapping with a category overrides everything else."""
    mapping = MerchantMapping("STARBUCKS", "Starbucks", default_category_id="cat-1")
    result = categorize_transaction(
        "STARBUCKS", mapping=mapping, category_names={"cat-1": "Subscriptions"}
    )
    assert result.category_name == "Subscriptions"
    assert result.category_id == "cat-1"
    assert result.needs_review is False


def test_mapping_without_category_is_ignored():
    """A display-name-only mapping does not decide the category."""
    mapping = MerchantMapping("STARBUCKS", "Starbucks", default_category_id=None)
    result = categorize_transaction("STARBUCKS", mapping=mapping)
    assert result.category_name == "Dining"
    assert result.category_id is None


def test_keyword_table_order():
    """The first category in table order wins when several match."""
    rules = ClassificationRules(category_keywords={"First": ("foo",), "Second": ("foo",)})
    assert categorize_transaction("FOO BAR", rules=rules).category_name == "First"


def test_auto_category_names():
    """Income and investment carry fixed categories; other types do not."""
    assert auto_category_name(TransactionType.INCOME) == "Income"
    assert auto_category_name(TransactionType.INVESTMENT) == "Investment"
    assert auto_category_name(TransactionType.TRANSFER) is None
    assert auto_category_name(TransactionType.EXPENSE) is None
