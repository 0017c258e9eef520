"""Merchant display-name normalization."""

import re

from budgetflow.domain.rules import ClassificationRules, DEFAULT_RULES

_WHITESPACE = re.compile(r"\s+")


def strip_noise(raw_name: str, rules: ClassificationRules = DEFAULT_RULES) -> str:
    """Remove reference numbers, state suffixes and provider boilerplate.

    Rewrites are reapplied until the text stops changing, since removing one
    suffix can expose another (e.g. "SHOP 12345 CA").
    """
    cleaned = raw_name
    while True:
        previous = cleaned
        for pattern, replacement in rules.noise_rewrites:
            cleaned = pattern.sub(replacement, cleaned)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        if cleaned == previous:
            return cleaned


def normalize_merchant_name(raw_name: str, rules: ClassificationRules = DEFAULT_RULES) -> str:
    """Turn a raw statement description into a display name.

    Examples:
        "AMZN Mktp US*2K4" -> "Amazon"
        "STARBUCKS STORE #123" -> "Starbucks"
        "BLUE BOTTLE COFFEE 94107" -> "Blue Bottle Coffee"

    Args:
        raw_name: Raw merchant or description string
        rules: Lookup tables to use

    Returns:
        Cleaned display name. Running the result through this function again
        returns it unchanged.
    """
    cleaned = strip_noise(raw_name, rules)
    lower_cleaned = cleaned.lower()

    # Already a known display name
    for replacement in rules.merchant_rewrites.values():
        if lower_cleaned == replacement.lower():
            return replacement

    for pattern, replacement in rules.merchant_rewrites.items():
        if pattern in lower_cleaned:
            return replacement

    return " ".join(word.capitalize() for word in cleaned.split(" "))
