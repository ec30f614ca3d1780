"""
Size Normalizer

Converts the size tokens stores print (US, UK, EU, kids C/Y, letters,
waist) into one canonical display: "EU 42", "EU 42.5", or the letter/waist
token unchanged.

Conversion tables are brand-agnostic approximations. A token with no table
entry falls back to a linear formula and is flagged approximate; a token no
rule recognises passes through unchanged. normalize_size never raises.

Example:
    >>> ctx = SizeContext(size_system=SizeSystem.US)
    >>> normalize_size("9.5", ctx).display
    'EU 43'
    >>> normalize_size("UK 8", SizeContext()).display
    'EU 42'
    >>> normalize_size("EU 42", SizeContext()).display
    'EU 42'
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional


class SizeSystem(str, Enum):
    """How a store prints bare numeric sizes."""
    EU = "eu"              # bare numbers are already EU
    US = "us"              # bare numbers are US
    PREFIXED = "prefixed"  # store prints "UK 8" / "EU 42"; bare >= 35 is EU, else kept
    UNKNOWN = "unknown"


# === Conversion tables (value = EU) ===

US_M_TO_EU = {
    3.5: 35.5, 4: 36, 4.5: 36.5, 5: 37.5, 5.5: 38, 6: 38.5, 6.5: 39,
    7: 40, 7.5: 40.5, 8: 41, 8.5: 42, 9: 42.5, 9.5: 43, 10: 44,
    10.5: 44.5, 11: 45, 11.5: 45.5, 12: 46, 12.5: 47, 13: 47.5,
    14: 48.5, 15: 49.5,
}

UK_M_TO_EU = {
    3: 35.5, 3.5: 36, 4: 36.5, 4.5: 37.5, 5: 38, 5.5: 38.5, 6: 39,
    6.5: 40, 7: 40.5, 7.5: 41, 8: 42, 8.5: 42.5, 9: 43, 9.5: 44,
    10: 44.5, 10.5: 45, 11: 45.5, 11.5: 46, 12: 47, 12.5: 47.5,
    13: 48.5, 14: 49.5,
}

US_W_TO_EU = {
    5: 35.5, 5.5: 36, 6: 36.5, 6.5: 37.5, 7: 38, 7.5: 38.5, 8: 39,
    8.5: 40, 9: 40.5, 9.5: 41, 10: 42, 10.5: 42.5, 11: 43, 11.5: 44,
    12: 44.5,
}

# C = toddler / little kid, Y = youth / big kid
US_KIDS_TO_EU = {
    "1C": 16, "1.5C": 16.5, "2C": 17, "2.5C": 18, "3C": 18.5, "3.5C": 19,
    "4C": 19.5, "4.5C": 20, "5C": 21, "5.5C": 21.5, "6C": 22, "6.5C": 22.5,
    "7C": 23.5, "7.5C": 24, "8C": 25, "8.5C": 25.5, "9C": 26, "9.5C": 26.5,
    "10C": 27, "10.5C": 27.5, "11C": 28, "11.5C": 28.5, "12C": 29.5,
    "12.5C": 30, "13C": 31, "13.5C": 31.5,
    "1Y": 32, "1.5Y": 33, "2Y": 33.5, "2.5Y": 34, "3Y": 35, "3.5Y": 35.5,
    "4Y": 36, "4.5Y": 36.5, "5Y": 37.5, "5.5Y": 38, "6Y": 38.5,
    "6.5Y": 39, "7Y": 40,
}

UK_KIDS_TO_EU = {
    "0.5C": 16, "1C": 17, "1.5C": 17.5, "2C": 18, "2.5C": 18.5,
    "11.5C": 29.5, "2Y": 33.5,
}

LETTER_SIZES = {
    "XXS", "XS", "S", "M", "L", "XL", "XXL", "2XL", "XXXL", "3XL",
    "OS", "ONE SIZE",
}

# Linear fallbacks when a table has no entry
UK_OFFSET = 33.5
US_MEN_OFFSET = 33
US_WOMEN_OFFSET = 31

# Bare numbers at or above this are already EU on prefixed/unknown stores;
# smaller ones stay as printed
EU_THRESHOLD = 35

_NUM = r"(\d+(?:[.,]\d+)?)"
WAIST_PATTERN = re.compile(r"^W\d+", re.IGNORECASE)
KIDS_PATTERN = re.compile(rf"^{_NUM}\s*([CY])$", re.IGNORECASE)
EU_PATTERN = re.compile(rf"^EU\s*{_NUM}$", re.IGNORECASE)
UK_PATTERN = re.compile(rf"^UK\s*{_NUM}\s*([CY])?$", re.IGNORECASE)
US_PATTERN = re.compile(rf"^US\s*{_NUM}\s*([CY])?$", re.IGNORECASE)
BARE_PATTERN = re.compile(rf"^{_NUM}$")
JUNK_SIZE_PATTERN = re.compile(
    r"select|choose|notify|sold\s*out|size\s*guide|out of stock|add to|kies|maat",
    re.IGNORECASE,
)


@dataclass
class SizeContext:
    """What the owning record tells us about how to read its sizes."""
    size_system: SizeSystem = SizeSystem.UNKNOWN
    is_womens: bool = False
    is_kids: bool = False


@dataclass
class SizeResult:
    display: str
    original: str
    system: str
    eu: Optional[float] = None
    approximate: bool = False


def round_half(value: float) -> float:
    """Round to the nearest 0.5, halves going up."""
    return math.floor(value * 2 + 0.5) / 2


def format_eu(value: float) -> str:
    """EU display string: 'EU 42' for whole sizes, 'EU 42.5' otherwise."""
    if float(value).is_integer():
        return f"EU {int(value)}"
    return f"EU {value:g}"


def _number(text: str) -> float:
    return float(text.replace(",", "."))


def _kids_key(value: float, suffix: str) -> str:
    return f"{value:g}{suffix.upper()}"


def _eu(value: float, original: str, system: str, approximate: bool = False) -> SizeResult:
    return SizeResult(format_eu(value), original, system, float(value), approximate)


def _convert_kids(value: float, suffix: str, original: str) -> SizeResult:
    key = _kids_key(value, suffix)
    if key in US_KIDS_TO_EU:
        return _eu(US_KIDS_TO_EU[key], original, "kids-us")
    if key in UK_KIDS_TO_EU:
        return _eu(UK_KIDS_TO_EU[key], original, "kids-uk")
    return SizeResult(original, original, "kids-unknown")


def _convert_uk(value: float, suffix: Optional[str], original: str) -> SizeResult:
    if suffix:
        key = _kids_key(value, suffix)
        if key in UK_KIDS_TO_EU:
            return _eu(UK_KIDS_TO_EU[key], original, "kids-uk")
        if key in US_KIDS_TO_EU:
            return _eu(US_KIDS_TO_EU[key], original, "kids-us")
        return SizeResult(original, original, "kids-unknown")
    if value in UK_M_TO_EU:
        return _eu(UK_M_TO_EU[value], original, "uk")
    return _eu(round_half(value + UK_OFFSET), original, "uk-approx", approximate=True)


def _convert_us(value: float, context: SizeContext, original: str) -> SizeResult:
    if context.is_womens:
        if value in US_W_TO_EU:
            return _eu(US_W_TO_EU[value], original, "us-w")
        return _eu(round_half(value + US_WOMEN_OFFSET), original, "us-w-approx", approximate=True)
    if context.is_kids:
        key = _kids_key(value, "Y")
        if key in US_KIDS_TO_EU:
            return _eu(US_KIDS_TO_EU[key], original, "kids-us")
    if value in US_M_TO_EU:
        return _eu(US_M_TO_EU[value], original, "us")
    return _eu(round_half(value + US_MEN_OFFSET), original, "us-approx", approximate=True)


def normalize_size(token: Optional[str], context: Optional[SizeContext] = None) -> SizeResult:
    """
    Normalize one raw size token.

    Rules, first match wins: letter/waist passthrough, kids C/Y suffix,
    "EU n", "UK n", "US n", bare number by store system, else unknown.
    """
    context = context or SizeContext()
    original = str(token or "").strip()
    text = re.sub(r"\s+", " ", original)
    upper = text.upper()

    if not text:
        return SizeResult(original, original, "unknown")

    if upper in LETTER_SIZES:
        return SizeResult(original, original, "letter")
    if WAIST_PATTERN.match(text):
        return SizeResult(original, original, "waist")

    match = KIDS_PATTERN.match(text)
    if match:
        return _convert_kids(_number(match.group(1)), match.group(2), original)

    match = EU_PATTERN.match(text)
    if match:
        return _eu(_number(match.group(1)), original, "eu")

    match = UK_PATTERN.match(text)
    if match:
        return _convert_uk(_number(match.group(1)), match.group(2), original)

    match = US_PATTERN.match(text)
    if match:
        if match.group(2):
            return _convert_kids(_number(match.group(1)), match.group(2), original)
        return _convert_us(_number(match.group(1)), context, original)

    match = BARE_PATTERN.match(text)
    if match:
        value = _number(match.group(1))
        if context.size_system == SizeSystem.EU:
            return _eu(value, original, "eu")
        if context.size_system == SizeSystem.US:
            return _convert_us(value, context, original)
        if value >= EU_THRESHOLD:
            return _eu(value, original, "eu")
        return SizeResult(original, original, "unknown")

    return SizeResult(original, original, "unknown")


def normalize_sizes(tokens: Iterable[str], context: Optional[SizeContext] = None) -> List[str]:
    """Normalize a size list, keeping first-seen order and dropping duplicates."""
    seen = set()
    result = []
    for token in tokens or []:
        display = normalize_size(token, context).display
        if display and display not in seen:
            seen.add(display)
            result.append(display)
    return result


def is_valid_size(token: Optional[str]) -> bool:
    """
    Filter out junk that size selectors sometimes pick up ("Notify me",
    "Select size", stock counts).
    """
    text = str(token or "").strip()
    if not text or len(text) > 15:
        return False
    if not re.search(r"[0-9A-Za-z]", text):
        return False
    return not JUNK_SIZE_PATTERN.search(text)
