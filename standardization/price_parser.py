"""
Price Parser

Parses the currency-prefixed price strings stores print and derives the
discount percentage for a listing.

Example:
    >>> parse_price("€ 129,99")
    Price(amount=129.99, currency='EUR')
    >>> parse_price("£1,299.00")
    Price(amount=1299.0, currency='GBP')
    >>> compute_discount(100, 75)
    25
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .schema import Price

logger = logging.getLogger(__name__)


CURRENCY_SYMBOLS = {
    "€": "EUR",
    "£": "GBP",
    "$": "USD",
}

CURRENCY_CODES = {"EUR", "GBP", "USD", "CHF", "SEK", "DKK", "PLN"}

DEFAULT_CURRENCY = "EUR"

NUMBER_PATTERN = re.compile(r"\d[\d.,\s]*")


@dataclass
class ListingPrices:
    retail: Price
    sale: Price
    discount: int
    swapped: bool = False
    parse_failed: bool = False


def detect_currency(text: str) -> Optional[str]:
    """Currency from a glyph or ISO code anywhere in the string."""
    for symbol, code in CURRENCY_SYMBOLS.items():
        if symbol in text:
            return code
    for code in re.findall(r"[A-Z]{3}", text.upper()):
        if code in CURRENCY_CODES:
            return code
    return None


def parse_amount(text: str) -> Optional[float]:
    """
    Parse a locale-formatted number.

    When both separators appear the last one is the decimal point. A lone
    separator followed by exactly three digits is a thousands separator
    ("1.299", "1,299"); otherwise it is the decimal point.
    """
    match = NUMBER_PATTERN.search(text or "")
    if not match:
        return None
    number = re.sub(r"\s+", "", match.group(0)).rstrip(".,")
    if not number:
        return None

    last_dot = number.rfind(".")
    last_comma = number.rfind(",")
    if last_dot >= 0 and last_comma >= 0:
        decimal = "." if last_dot > last_comma else ","
        thousands = "," if decimal == "." else "."
        number = number.replace(thousands, "").replace(decimal, ".")
    elif last_dot >= 0 or last_comma >= 0:
        sep = "." if last_dot >= 0 else ","
        parts = number.split(sep)
        if len(parts) > 2 or len(parts[-1]) == 3:
            number = "".join(parts)
        else:
            number = ".".join(parts)

    try:
        return float(number)
    except ValueError:
        return None


def parse_price(text: Optional[str], default_currency: Optional[str] = None) -> Optional[Price]:
    """
    Parse "€ 129,99" / "£120.00" / "$95" / "89.95" into a Price.

    Returns None for empty or unparseable input.
    """
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None

    amount = parse_amount(text)
    if amount is None:
        return None

    currency = detect_currency(text) or default_currency or DEFAULT_CURRENCY
    return Price(round(amount, 2), currency)


def compute_discount(retail: Optional[float], sale: Optional[float]) -> int:
    """Whole-number discount, 0 unless both prices are known and retail > 0."""
    if not retail or sale is None or retail <= 0:
        return 0
    percent = (retail - sale) / retail * 100
    return max(0, int(math.floor(percent + 0.5)))


def reconcile_prices(retail: Optional[Price], sale: Optional[Price]) -> Tuple[Optional[Price], Optional[Price], bool]:
    """Swap prices scraped in reverse so that retail >= sale."""
    if retail and sale and retail.amount > 0 and sale.amount > 0 and retail.amount < sale.amount:
        return sale, retail, True
    return retail, sale, False


def build_listing_prices(
    retail_text: Optional[str],
    sale_text: Optional[str],
    currency: Optional[str] = None,
) -> ListingPrices:
    """
    Parse both prices of a listing, fix reversed pairs, compute the discount.

    Missing prices become amount 0 in the listing currency.
    """
    sale = parse_price(sale_text, currency)
    retail = parse_price(retail_text, currency)
    parse_failed = bool(sale_text and str(sale_text).strip()) and sale is None

    if parse_failed:
        logger.warning(f"Unparseable sale price: {sale_text!r}")

    retail, sale, swapped = reconcile_prices(retail, sale)
    if swapped:
        logger.debug(f"Swapped reversed prices {retail_text!r} / {sale_text!r}")

    listing_currency = (sale or retail).currency if (sale or retail) else (currency or DEFAULT_CURRENCY)
    retail = retail or Price(0.0, listing_currency)
    sale = sale or Price(0.0, listing_currency)

    # a transposed pair carries no trustworthy markdown
    discount = 0 if swapped else compute_discount(retail.amount, sale.amount)

    return ListingPrices(
        retail=retail,
        sale=sale,
        discount=discount,
        swapped=swapped,
        parse_failed=parse_failed,
    )


def format_price(price: Optional[Price]) -> str:
    """Display string, e.g. '€89.99'."""
    if not price or not price.amount:
        return ""
    symbols = {code: symbol for symbol, code in CURRENCY_SYMBOLS.items()}
    symbol = symbols.get(price.currency)
    if symbol:
        return f"{symbol}{price.amount:.2f}"
    return f"{price.amount:.2f} {price.currency}"
