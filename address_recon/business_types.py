from __future__ import annotations
import re
from typing import Dict, List, Optional, Pattern, Tuple

# Evaluated top to bottom; the first rule whose key occurs in the
# lower-cased business name wins.
BUSINESS_RULES: List[Tuple[str, List[str]]] = [
    # retail
    ("petsmart", ["pet store", "pet shop", "pet supply"]),
    ("petco", ["pet store", "pet shop", "pet supply"]),
    ("walmart", ["supermarket", "department store", "walmart"]),
    ("target", ["department store", "target", "retail"]),
    ("costco", ["wholesale", "supermarket", "costco"]),
    ("home depot", ["hardware store", "home improvement"]),
    ("lowes", ["hardware store", "home improvement"]),
    ("best buy", ["electronics store", "technology"]),
    ("apple store", ["electronics store", "technology"]),
    ("ikea", ["furniture store", "home furnishings"]),
    # food
    ("mcdonalds", ["restaurant", "fast food", "burger"]),
    ("burger king", ["restaurant", "fast food", "burger"]),
    ("wendys", ["restaurant", "fast food", "burger"]),
    ("taco bell", ["restaurant", "fast food", "mexican"]),
    ("chipotle", ["restaurant", "mexican", "fast casual"]),
    ("starbucks", ["cafe", "coffee shop", "coffeehouse"]),
    ("subway", ["restaurant", "sandwich shop", "fast food"]),
    # fuel
    ("shell", ["gas station", "fuel", "service station"]),
    ("bp", ["gas station", "fuel", "service station"]),
    ("exxon", ["gas station", "fuel", "service station"]),
    # lodging
    ("marriott", ["hotel", "lodging", "accommodation"]),
    ("hilton", ["hotel", "lodging", "accommodation"]),
    ("holiday inn", ["hotel", "lodging", "accommodation"]),
    # banks
    ("bank of america", ["bank", "financial institution"]),
    ("chase", ["bank", "financial institution"]),
    ("wells fargo", ["bank", "financial institution"]),
    # generic words that also appear in plenty of names
    ("store", ["store", "retail", "shop"]),
    ("restaurant", ["restaurant", "eatery", "dining"]),
    ("hotel", ["hotel", "motel", "lodging"]),
    ("bank", ["bank", "financial institution"]),
    ("gas", ["gas station", "fuel", "service station"]),
    ("pharmacy", ["pharmacy", "drug store"]),
    ("grocery", ["grocery store", "supermarket"]),
]

CATEGORY_HINTS: Dict[str, List[str]] = {
    "restaurant": ["restaurant", "eatery", "dining"],
    "store": ["store", "retail", "shop"],
    "hotel": ["hotel", "motel", "lodging"],
    "bank": ["bank", "financial institution"],
    "gas": ["gas station", "fuel", "service station"],
    "pharmacy": ["pharmacy", "drug store"],
    "grocery": ["grocery store", "supermarket"],
}

# second tier, consulted only when no rule above matched
CATEGORY_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"restaurant|diner|cafe|grill|bar|pub", re.I), "restaurant"),
    (re.compile(r"store|shop|mart|retail", re.I), "store"),
    (re.compile(r"hotel|inn|suites|lodging", re.I), "hotel"),
    (re.compile(r"bank|credit union|financial", re.I), "bank"),
    (re.compile(r"gas|petrol|fuel|station", re.I), "gas"),
    (re.compile(r"pharmacy|drug|rx", re.I), "pharmacy"),
    (re.compile(r"grocery|food|market", re.I), "grocery"),
]


def get_business_type_hints(business_name: Optional[str]) -> List[str]:
    """Ordered hint phrases for a business name; empty list when nothing fits."""
    if not business_name:
        return []
    # "McDonald's" should hit the "mcdonalds" rule
    name = business_name.lower().replace("'", "").replace("’", "")

    for key, hints in BUSINESS_RULES:
        if key in name:
            return list(hints)

    for pattern, category in CATEGORY_PATTERNS:
        if pattern.search(name):
            return list(CATEGORY_HINTS[category])

    return []
