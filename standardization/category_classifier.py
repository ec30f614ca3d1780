"""
Category Classifier

Keyword classification of catalog items into Sneakers / Clothing /
Accessories, plus tag generation and gender hints used by the size
normalizer.

Priority is fixed: any clothing keyword wins over accessory keywords, and
anything unmatched is Sneakers (the catalog's default). The keyword lists
are heuristic; a sneaker described as "inspired by the track jacket" lands
in Clothing, and that is accepted.

Example:
    >>> classify_category(["Stone Island Ghost Jacket"])
    'Clothing'
    >>> classify_category(["Nike Dunk Low", "Sneakers"])
    'Sneakers'
"""

import re
from typing import Iterable, List, Optional


CLOTHING_KEYWORDS = [
    "hoodie", "jacket", "shirt", "t-shirt", "tee", "pants", "pant", "trousers",
    "shorts", "jogger", "joggers", "sweatshirt", "coat", "vest", "pullover",
    "fleece", "sweater", "cardigan", "parka", "windbreaker", "tracksuit",
    "crewneck", "jeans", "chino", "cargo", "overshirt",
    "flannel", "puffer", "hood", "hooded", "top",
]

ACCESSORY_KEYWORDS = [
    "hat", "cap", "bag", "backpack", "wallet", "belt", "watch", "sunglasses",
    "scarf", "gloves", "socks", "beanie", "keychain", "tote", "crossbody",
    "bum bag",
]

SNEAKER_KEYWORDS = [
    "shoe", "shoes", "sneaker", "sneakers", "trainer", "trainers", "schoen",
    "chaussure", "runner", "air max", "air jordan", "dunk", "yeezy",
    "ultraboost", "nmd", "old skool", "samba", "gazelle", "air tn",
]

# Sneaker vocabulary that contains a garment or accessory word
NON_GARMENT_PREFIXES = {
    "top": ("low ", "high ", "mid "),
    "cap": ("toe ",),
}


def _keyword_pattern(keywords: List[str]) -> "re.Pattern":
    parts = []
    for keyword in keywords:
        escaped = re.escape(keyword)
        for prefix in NON_GARMENT_PREFIXES.get(keyword, ()):
            escaped = f"(?<!{re.escape(prefix)})" + escaped
        parts.append(escaped)
    return re.compile(r"\b(" + "|".join(parts) + r")s?\b", re.IGNORECASE)


CLOTHING_PATTERN = _keyword_pattern(CLOTHING_KEYWORDS)
ACCESSORY_PATTERN = _keyword_pattern(ACCESSORY_KEYWORDS)
SNEAKER_PATTERN = _keyword_pattern(SNEAKER_KEYWORDS)

KIDS_PATTERN = re.compile(r"\((td|ps|gs)\)|\b(baby|toddler|kids|infant|junior|youth)\b", re.IGNORECASE)
WOMENS_PATTERN = re.compile(r"\b(wmns|wmn|women|womens|women's)\b", re.IGNORECASE)

# Store labels that say nothing about the product
GENERIC_TAGS = {
    "footwear", "new arrivals", "new in", "shoes", "mens", "men", "all",
    "all products", "latest", "just in", "trending",
}


def classify_category(texts: Iterable[Optional[str]]) -> str:
    """
    Classify from the union of names, tags and descriptions.

    Returns:
        'Clothing', 'Accessories' or 'Sneakers'
    """
    blob = " ".join(t for t in texts if t)
    if re.search(r"\bclothing\b", blob, re.IGNORECASE) or CLOTHING_PATTERN.search(blob):
        return "Clothing"
    if re.search(r"\baccessories\b", blob, re.IGNORECASE) or ACCESSORY_PATTERN.search(blob):
        return "Accessories"
    return "Sneakers"


def detect_tags(name: Optional[str], brand: Optional[str] = None) -> List[str]:
    """
    Tags from the name: a type tag (Sneakers, or the matched garment /
    accessory word), the brand, and 'Sale'.
    """
    tags = []
    if name:
        match = None
        if SNEAKER_PATTERN.search(name):
            tags.append("Sneakers")
        else:
            match = CLOTHING_PATTERN.search(name) or ACCESSORY_PATTERN.search(name)
        if match:
            tags.append(match.group(1).capitalize())
    if brand:
        tags.append(brand)
    tags.append("Sale")
    return clean_tags(tags)


def clean_tags(tags: Iterable[Optional[str]], category: Optional[str] = None) -> List[str]:
    """
    Drop generic store labels, de-duplicate case-insensitively (first
    spelling wins) and make sure `category` is present.
    """
    seen = set()
    result = []
    if category:
        seen.add(category.lower())
        result.append(category)
    for tag in tags:
        tag = (tag or "").strip()
        key = tag.lower()
        if not tag or key in GENERIC_TAGS or key in seen:
            continue
        seen.add(key)
        result.append(tag)
    return result


def is_kids(name: Optional[str], tags: Iterable[str] = ()) -> bool:
    if name and KIDS_PATTERN.search(name):
        return True
    return any((t or "").lower() == "kids" for t in tags)


def is_womens(name: Optional[str], tags: Iterable[str] = ()) -> bool:
    if name and WOMENS_PATTERN.search(name):
        return True
    return any((t or "").lower() in ("women", "womens") for t in tags)


def detect_gender(name: Optional[str], tags: Iterable[str] = ()) -> str:
    """'Kids', 'Women', 'Men' or '' when the name gives no hint."""
    tags = list(tags)
    if is_kids(name, tags):
        return "Kids"
    if is_womens(name, tags):
        return "Women"
    if name and re.search(r"\b(men|mens|men's)\b", name, re.IGNORECASE):
        return "Men"
    return ""
