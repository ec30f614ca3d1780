"""
Name Normalizer

Cleans product names and descriptions scraped from store pages.

Key functions:
1. clean_name: decode entities, drop style-code suffix, duplicated brand and
   sub-brand prefixes, "Wmns" markers
2. normalize_name: lowercase matching form
3. slugify: URL-safe identity slug
4. clean_description: HTML-free, placeholder-free, length-capped text

Example:
    >>> clean_name("adidas Originals Samba OG - B75806", "adidas")
    'adidas Samba OG'
    >>> slugify("Nike Air Max 1 '86 OG")
    'nike-air-max-1-86-og'
"""

import html
import re
from typing import Optional


STYLE_CODE_SUFFIX = re.compile(r"\s*-\s*([A-Za-z0-9][\w-]+)$")

# Sub-lines stores prepend after the brand
SUB_BRAND_PREFIXES = [
    r"Originals\s+",
    r"Sportswear\s+",
    r"Basketball\s+",
    r"Running\s+",
]

WOMENS_MARKER = re.compile(r"\bW(?:MN|MNS)\b\.?\s*", re.IGNORECASE)

# Boilerplate some stores use instead of a real description
PLACEHOLDER_DESCRIPTIONS = [
    re.compile(r"^find your new favou?rite pair", re.IGNORECASE),
    re.compile(r"^no description available", re.IGNORECASE),
]

DESCRIPTION_LIMIT = 300
SLUG_LIMIT = 60


def extract_style_code(name: Optional[str]) -> str:
    """
    Style code from a trailing " - TOKEN" on the name, e.g.
    "Nike Dunk Low - DD1391-100" -> "DD1391-100".

    The token must be at least 5 characters and contain a digit, so
    colour suffixes like " - Black" are not mistaken for codes.
    """
    if not name:
        return ""
    match = STYLE_CODE_SUFFIX.search(name.strip())
    if not match:
        return ""
    code = match.group(1)
    if len(code) >= 5 and re.search(r"\d", code):
        return code
    return ""


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    text = re.sub(r"<(script|style)[^>]*>.*?</\1>", " ", text, flags=re.IGNORECASE | re.DOTALL)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html.unescape(text)
    return re.sub(r"\s+", " ", text).strip()


def clean_name(name: Optional[str], brand: Optional[str] = None) -> str:
    """
    Clean a scraped product name for display.

    Args:
        name: Raw product name
        brand: Known brand, used to collapse "Nike Nike Dunk"

    Returns:
        Cleaned name (may be empty)
    """
    if not name:
        return ""

    result = strip_html(name)

    code = extract_style_code(result)
    if code:
        result = result[: result.rfind(code)].rstrip(" -")

    if brand:
        escaped = re.escape(brand.strip())
        result = re.sub(rf"^({escaped}\s+)+", f"{brand.strip()} ", result, flags=re.IGNORECASE)
        for prefix in SUB_BRAND_PREFIXES:
            result = re.sub(rf"^({escaped}\s+){prefix}", r"\1", result, flags=re.IGNORECASE)

    result = WOMENS_MARKER.sub("", result)
    return re.sub(r"\s+", " ", result).strip(" -")


def strip_brand_prefix(name: str, brand: Optional[str]) -> str:
    """Drop a leading brand from the name ("STONE ISLAND Ghost Jacket" -> "Ghost Jacket")."""
    if not name or not brand:
        return name or ""
    stripped = re.sub(rf"^{re.escape(brand.strip())}\s*[-:]?\s*", "", name, flags=re.IGNORECASE)
    return stripped or name


def normalize_name(name: Optional[str]) -> str:
    """Lowercase, punctuation-free form for comparisons."""
    if not name:
        return ""
    result = html.unescape(name).lower()
    result = re.sub(r"[^\w\s]", " ", result)
    return re.sub(r"\s+", " ", result).strip()


def slugify(text: Optional[str], limit: int = SLUG_LIMIT) -> str:
    """Lowercase slug with non-word runs collapsed to '-', capped at `limit` chars."""
    if not text:
        return ""
    slug = re.sub(r"[\W_]+", "-", html.unescape(text).lower()).strip("-")
    return slug[:limit].rstrip("-")


def is_placeholder_description(text: str) -> bool:
    return any(p.search(text) for p in PLACEHOLDER_DESCRIPTIONS)


def clean_description(text: Optional[str], limit: int = DESCRIPTION_LIMIT) -> str:
    """
    Strip HTML, drop store boilerplate and cap the length.

    Text over `limit` is cut to limit-3 characters plus '...'.
    """
    result = strip_html(text)
    if not result or is_placeholder_description(result):
        return ""
    if len(result) > limit:
        result = result[: limit - 3].rstrip() + "..."
    return result
