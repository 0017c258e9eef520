"""Lookup tables used by the classification functions.

The tables are bundled into a frozen ``ClassificationRules`` value that is
built once at import time and passed explicitly to the classifiers, so
tests can supply their own tables without patching module globals.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _patterns(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


# Bank/peer-payment boilerplate marking movement between the user's own accounts
TRANSFER_PATTERNS = _patterns(
    r"credit\s*card[- ]?auto[- ]?pay",
    r"credit\s*card[- ]?payment",
    r"card[- ]?payment",
    r"payment.*thank\s*you",
    r"autopay",
    r"auto[- ]?pay",
    r"credit\s*crd",
    r"crd\s*autopay",
    r"epayment",
    r"e-payment",
    r"\btransfer\b",
    r"wire\s*transfer",
    r"^payment$",
    r"bill\s*pay",
    r"billpay",
    r"direct\s*debit",
    r"loan\s*payment",
    r"mortgage\s*payment",
    r"\bpmt\b",
    r"zelle",
    r"cash\s*app",
    r"acctverify",
    r"account\s*verification",
    r"bank\s*xfer",
    r"mobile\s*pmt",
    r"-ach\s*pmt",
    r"money\s*out\s*cash",
    r"money\s*in\s*cash",
    r"\bfund\b.*money\s*(out|in)",
)

# Brokerage and crypto providers
INVESTMENT_PATTERNS = _patterns(
    r"robinhood[- ]?debits?",
    r"fidelity",
    r"vanguard",
    r"schwab",
    r"etrade",
    r"e-trade",
    r"td\s*ameritrade",
    r"coinbase",
    r"webull",
    r"acorns",
    r"betterment",
)

# Provider primary category prefixes meaning money moved between accounts
TRANSFER_PROVIDER_PREFIXES = ("TRANSFER", "LOAN")
INVESTMENT_PROVIDER_MARKERS = ("INVESTMENT", "RETIREMENT")
INCOME_PROVIDER_CATEGORY = "INCOME"

# Legacy provider category strings meaning transfer
TRANSFER_LEGACY_CATEGORIES = ("Transfer", "Payment", "Credit Card", "Loan Payments")

# Keyword table, scanned in declaration order
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Housing": (
        "rent", "mortgage", "landlord", "property", "apartment", "lease",
        "hoa", "homeowner", "housing", "real estate", "realty", "zillow",
        "bilt", "condo", "tenant", "rental",
    ),
    "Dining": (
        "restaurant", "cafe", "coffee", "starbucks", "dunkin", "mcdonald",
        "chipotle", "subway", "pizza", "burger", "sushi", "thai", "chinese",
        "indian", "mexican", "doordash", "ubereats", "grubhub", "seamless",
        "postmates", "caviar", "bar", "pub", "grill", "kitchen", "eatery",
        "diner", "bakery", "taco", "wing", "noodle", "ramen", "pho",
    ),
    "Groceries": (
        "grocery", "supermarket", "whole foods", "trader joe", "safeway",
        "kroger", "walmart", "target", "costco", "aldi", "publix", "wegmans",
        "market", "fresh", "organic", "instacart", "amazon fresh",
    ),
    "Transportation": (
        "uber", "lyft", "taxi", "cab", "parking", "gas", "shell", "chevron",
        "exxon", "mobil", "bp", "citgo", "metro", "transit", "bus",
        "train", "amtrak", "airline", "toll", "car wash", "auto",
    ),
    "Entertainment": (
        "netflix", "hulu", "disney", "hbo", "spotify", "apple music", "youtube",
        "twitch", "movie", "theater", "cinema", "concert", "ticket", "game",
        "steam", "playstation", "xbox", "nintendo", "arcade", "bowling",
    ),
    "Shopping": (
        "amazon", "ebay", "etsy", "best buy", "apple store",
        "nike", "adidas", "zara", "h&m", "uniqlo", "nordstrom", "macy", "gap",
        "old navy", "tj maxx", "marshall", "ross", "home depot", "lowes", "ikea",
    ),
    "Utilities": (
        "electric", "water", "internet", "comcast", "verizon", "at&t",
        "t-mobile", "sprint", "phone", "utility", "power", "energy", "sewage",
    ),
    "Subscriptions": (
        "subscription", "membership", "monthly", "annual", "recurring", "premium",
        "plus", "pro", "patreon", "substack", "medium", "gym", "fitness",
    ),
    "Travel": (
        "hotel", "airbnb", "vrbo", "expedia", "booking", "kayak", "tripadvisor",
        "united", "delta", "american", "southwest", "jetblue",
        "spirit", "frontier", "rental car", "hertz", "enterprise", "avis",
    ),
    "Healthcare": (
        "pharmacy", "cvs", "walgreens", "rite aid", "doctor", "hospital", "clinic",
        "medical", "dental", "dentist", "vision", "eye", "health", "insurance",
        "prescription", "rx", "urgent care", "lab", "therapy",
    ),
    "Income": (
        "payroll", "direct deposit", "salary", "wage", "bonus", "refund",
        "reimbursement", "transfer from", "deposit",
    ),
}

# Provider personal finance categories; detailed values are checked before primary ones
PROVIDER_CATEGORY_MAP: dict[str, str] = {
    "FOOD_AND_DRINK_GROCERIES": "Groceries",
    "FOOD_AND_DRINK": "Dining",
    "GENERAL_MERCHANDISE": "Shopping",
    "HOME_IMPROVEMENT": "Housing",
    "RENT_AND_UTILITIES_RENT": "Housing",
    "RENT_AND_UTILITIES": "Utilities",
    "TRANSPORTATION": "Transportation",
    "TRAVEL": "Travel",
    "ENTERTAINMENT": "Entertainment",
    "MEDICAL": "Healthcare",
    "INCOME": "Income",
}

FALLBACK_CATEGORY = "Other"
SUBSCRIPTIONS_CATEGORY = "Subscriptions"
INCOME_CATEGORY = "Income"
INVESTMENT_CATEGORY = "Investment"

DEFAULT_CATEGORIES = (
    "Housing",
    "Dining",
    "Groceries",
    "Transportation",
    "Entertainment",
    "Shopping",
    "Utilities",
    "Subscriptions",
    "Travel",
    "Healthcare",
    "Income",
    "Investment",
    "Other",
)

# (pattern, replacement) applied in order to strip statement noise
NOISE_REWRITES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\s*Money\s*(In|Out)\s*Dda_transaction\s*$", re.IGNORECASE), ""),
    (re.compile(r"\s*Dda_transaction\s*$", re.IGNORECASE), ""),
    (re.compile(r"-[a-z0-9]{10,}", re.IGNORECASE), ""),
    (re.compile(r"-acctverify", re.IGNORECASE), " Verification"),
    (re.compile(r"-transfer\b", re.IGNORECASE), " Transfer"),
    (re.compile(r"\s*#\d+"), ""),
    (re.compile(r"\s*\*\d+"), ""),
    (re.compile(r"\s*-\s*\d+"), ""),
    (re.compile(r"\s+\d{4,}"), ""),
    (re.compile(r"\s*\b(US|USA|CA|NY|TX|FL|IL)\s*$", re.IGNORECASE), ""),
    (re.compile(r"\s*\d{5}(-\d{4})?\s*$"), ""),
    (re.compile(r"\bEnterta-edi\b", re.IGNORECASE), "Entertainment"),
    (re.compile(r"\bPymnts?\b", re.IGNORECASE), "Payment"),
    (re.compile(r"\bPmt\b", re.IGNORECASE), "Payment"),
    (re.compile(r"\bXfer\b", re.IGNORECASE), "Transfer"),
    (re.compile(r"\bDep\b", re.IGNORECASE), "Deposit"),
    (re.compile(r"\bWdrl\b", re.IGNORECASE), "Withdrawal"),
)

# Substring (lowercase) -> display name; first match wins
MERCHANT_REWRITES: dict[str, str] = {
    "amzn mktp": "Amazon",
    "amazon.com": "Amazon",
    "amzn": "Amazon",
    "wm supercenter": "Walmart",
    "wal-mart": "Walmart",
    "tgt": "Target",
    "starbucks store": "Starbucks",
    "sbux": "Starbucks",
    "mcdonalds": "McDonald's",
    "chick-fil-a": "Chick-fil-A",
    "dd donut": "Dunkin'",
    "dunkin": "Dunkin'",
    "capital one verification": "Capital One (Verification)",
    "capital one transfer": "Capital One Transfer",
}


@dataclass(frozen=True)
class ClassificationRules:
    """Immutable bundle of every table the classifiers consult."""

    transfer_patterns: tuple[re.Pattern[str], ...] = TRANSFER_PATTERNS
    investment_patterns: tuple[re.Pattern[str], ...] = INVESTMENT_PATTERNS
    transfer_provider_prefixes: tuple[str, ...] = TRANSFER_PROVIDER_PREFIXES
    investment_provider_markers: tuple[str, ...] = INVESTMENT_PROVIDER_MARKERS
    transfer_legacy_categories: tuple[str, ...] = TRANSFER_LEGACY_CATEGORIES
    category_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(CATEGORY_KEYWORDS))
    )
    provider_category_map: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(PROVIDER_CATEGORY_MAP))
    )
    noise_rewrites: tuple[tuple[re.Pattern[str], str], ...] = NOISE_REWRITES
    merchant_rewrites: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(MERCHANT_REWRITES))
    )
    fallback_category: str = FALLBACK_CATEGORY


DEFAULT_RULES = ClassificationRules()
