"""
Identity Resolver

Decides which catalog product a scraped record belongs to.

Identity key, first available wins:
1. explicit style code ("DD1391-100")
2. style code found at the end of the name ("Nike Dunk Low - DD1391-100")
3. slug of the cleaned name ("nike-dunk-low-panda")

Duplicate check between two records/listings, first match wins:
1. same normalized URL (query, fragment and trailing slash ignored)
2. same SKU extracted from the URL
3. same non-empty style code

Example:
    >>> derive_identity(record).key
    'DD1391-100'
    >>> extract_sku_from_url("https://x.com/p/123456789012.html?ref=ig")
    '123456789012'
"""

import hashlib
import logging
import re
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from standardization.name_normalizer import clean_name, extract_style_code, slugify
from standardization.schema import Product, StandardRecord

logger = logging.getLogger(__name__)


SKU_PATTERNS = [
    re.compile(r"(\d{10,15})\.html"),
    re.compile(r"[/\-](\d{10,15})(?:\?|$)"),
    re.compile(r"([a-zA-Z0-9]+-[a-zA-Z0-9]+)\.html"),
]


@dataclass(frozen=True)
class IdentityKey:
    key: str
    source: str  # "style_code" | "name_code" | "slug" | "url" | "hash"


def normalize_url(url: Optional[str]) -> str:
    """Lowercased scheme://host/path without query, fragment or trailing '/'."""
    if not url:
        return ""
    text = url.strip()
    parsed = urlparse(text)
    if parsed.scheme and parsed.netloc:
        text = f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    else:
        text = re.split(r"[?#]", text)[0]
    return text.rstrip("/").lower()


def listing_key(listing) -> str:
    """Store plus normalized URL; query strings do not make a new listing."""
    return f"{listing.store}|{normalize_url(listing.url)}"


def extract_sku_from_url(url: Optional[str]) -> str:
    """
    Product SKU embedded in a store URL: a 10-15 digit run before '.html'
    or at the end of the path, else a hyphenated code before '.html'.
    """
    if not url:
        return ""
    for pattern in SKU_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1).lower()
    return ""


def derive_identity(record: StandardRecord) -> IdentityKey:
    """Stable identity key for a record."""
    if record.style_code and record.style_code.strip():
        return IdentityKey(record.style_code.strip(), "style_code")

    code = extract_style_code(record.name)
    if code:
        return IdentityKey(code, "name_code")

    slug = slugify(clean_name(record.name, record.brand))
    if slug:
        return IdentityKey(slug, "slug")

    url_path = urlparse(record.url or "").path
    slug = slugify(url_path.rsplit("/", 1)[-1].replace(".html", "")) if url_path else ""
    if slug:
        logger.warning(f"No style code or name for {record.url}; identity from URL slug {slug!r}")
        return IdentityKey(slug, "url")

    digest = hashlib.md5((record.url or repr(record)).encode()).hexdigest()[:12]
    logger.warning(f"Record has no identity data; using hash key unknown-{digest}")
    return IdentityKey(f"unknown-{digest}", "hash")


def _url_and_code(item) -> Tuple[str, str]:
    """(url, style_code) of a StandardRecord or a (listing url, product style code) pair."""
    if isinstance(item, tuple):
        return item
    listing = getattr(item, "listing", None)
    url = getattr(item, "url", "") or (listing.url if listing else "")
    return url, getattr(item, "style_code", "") or ""


def is_duplicate(a, b) -> bool:
    """
    True when a and b denote the same product.

    Accepts StandardRecords or (url, style_code) tuples.
    """
    url_a, code_a = _url_and_code(a)
    url_b, code_b = _url_and_code(b)

    norm_a, norm_b = normalize_url(url_a), normalize_url(url_b)
    if norm_a and norm_a == norm_b:
        return True

    sku_a, sku_b = extract_sku_from_url(url_a), extract_sku_from_url(url_b)
    if sku_a and sku_a == sku_b:
        return True

    code_a, code_b = code_a.strip().lower(), code_b.strip().lower()
    if code_a and code_a == code_b:
        return True

    # a SKU in one URL can be the other side's style code
    return bool((sku_a and sku_a == code_b) or (sku_b and sku_b == code_a))


def product_refs(product: Product) -> List[Tuple[str, str]]:
    refs = [(listing.url, product.style_code) for listing in product.listings]
    return refs or [("", product.style_code)]


def find_duplicate(record: StandardRecord, products: Iterable[Product]) -> Optional[Product]:
    """First stored product that `record` duplicates, if any."""
    for product in products:
        for ref in product_refs(product):
            if is_duplicate(record, ref):
                return product
    return None


def group_records(
    records: Iterable[StandardRecord],
    existing: Optional[Dict[str, Product]] = None,
) -> "OrderedDict[str, List[StandardRecord]]":
    """
    Group records by product identity.

    Each record is matched by URL / SKU / style code against stored
    products and against groups formed so far; only when nothing matches
    does its derived identity key decide. Keys of stored products are
    their existing productIds.
    """
    existing = existing or {}
    groups: "OrderedDict[str, List[StandardRecord]]" = OrderedDict()

    for record in records:
        key = None

        product = find_duplicate(record, existing.values())
        if product:
            key = product.product_id

        if key is None:
            for group_key, members in groups.items():
                if any(is_duplicate(record, member) for member in members):
                    key = group_key
                    break

        if key is None:
            key = derive_identity(record).key

        groups.setdefault(key, []).append(record)

    return groups
