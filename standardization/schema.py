"""
Catalog Schema

Entity types shared by every pipeline stage:

- RawRecord: what a store page yields before any cleaning
- Price: amount + ISO currency
- NormalizedListing: one store's offer for a product, with lifecycle state
- StandardRecord: a RawRecord after adapter + normalization, ready to merge
- Product: the canonical catalog entity (one per identity key)

Entities are treated as values. Pipeline stages return new instances
(dataclasses.replace) instead of mutating their inputs.

Example:
    record = RawRecord.from_dict({
        "name": "Nike Dunk Low - DD1391-100",
        "salePrice": "€ 89,99",
        "retailPrice": "€ 119,99",
        "sizes": ["40", "41"],
        "url": "https://www.footlocker.nl/nl/product/x/314217718504.html",
        "store": "Foot Locker",
    })
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class ListingStatus(str, Enum):
    ACTIVE = "active"
    PRICE_CHANGED = "price_changed"
    SOLD_OUT = "sold_out"
    ENDED = "ended"
    ERROR = "error"


CATEGORIES = ("Sneakers", "Clothing", "Accessories")

# Titles served by bot walls and empty product shells
PLACEHOLDER_NAMES = {
    "unknown product",
    "access denied",
    "just a moment...",
    "attention required!",
    "page not found",
}


@dataclass
class Price:
    amount: float
    currency: str = "EUR"

    def to_dict(self) -> Dict[str, Any]:
        return {"amount": self.amount, "currency": self.currency}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Price":
        if not data:
            return cls(0.0)
        return cls(float(data.get("amount") or 0), data.get("currency") or "EUR")


@dataclass
class RawRecord:
    """
    A product as scraped from one store page. Every field is free text.

    `sale_price` / `retail_price` keep the currency glyph the store printed
    ("£120.00", "€ 89,99"); `sizes` holds the raw tokens of in-stock sizes.
    """

    name: str = ""
    brand: str = ""
    image: str = ""
    description: str = ""
    colorway: str = ""
    style_code: str = ""
    sale_price: str = ""
    retail_price: str = ""
    currency: str = ""
    sizes: List[str] = field(default_factory=list)
    url: str = ""
    store: str = ""
    tags: List[str] = field(default_factory=list)
    original_image: str = ""
    total_sizes: Optional[int] = None
    h1_text: str = ""

    # camelCase keys used by the scraper JSON dumps
    _ALIASES = {
        "salePrice": "sale_price",
        "retailPrice": "retail_price",
        "styleCode": "style_code",
        "_originalImage": "original_image",
        "originalImage": "original_image",
        "totalSizes": "total_sizes",
        "h1Text": "h1_text",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawRecord":
        values: Dict[str, Any] = {}
        for key, value in data.items():
            key = cls._ALIASES.get(key, key)
            if key in cls.__dataclass_fields__ and value is not None:
                values[key] = value
        values["sizes"] = [str(s) for s in values.get("sizes") or []]
        values["tags"] = [str(t) for t in values.get("tags") or []]
        for key in ("sale_price", "retail_price"):
            if key in values:
                values[key] = str(values[key])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def has_usable_name(self) -> bool:
        name = (self.name or "").strip()
        return bool(name) and name.lower() not in PLACEHOLDER_NAMES

    def has_content(self) -> bool:
        """False when the page gave us nothing to identify or price the item."""
        return self.has_usable_name() or bool(self.style_code.strip()) or bool(self.sale_price.strip())


@dataclass
class PriceHistoryEntry:
    date: str
    sale_price: float
    retail_price: float


@dataclass
class SizesHistoryEntry:
    date: str
    available: int
    total: int


@dataclass
class NormalizedListing:
    """
    One store's offer for a product.

    Invariants: retail >= sale when both are positive; discount is 0 when
    retail is 0; `available` is true iff `sizes` is non-empty.
    """

    store: str
    url: str
    retail_price: Price
    sale_price: Price
    discount: int = 0
    sizes: List[str] = field(default_factory=list)
    available: bool = False
    last_scraped: str = ""

    # lifecycle state
    status: ListingStatus = ListingStatus.ACTIVE
    last_checked: Optional[str] = None
    price_history: List[PriceHistoryEntry] = field(default_factory=list)
    sizes_history: List[SizesHistoryEntry] = field(default_factory=list)
    check_fail_count: int = 0
    link_dead: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedListing":
        sizes = list(data.get("sizes") or [])
        return cls(
            store=data.get("store", ""),
            url=data.get("url", ""),
            retail_price=Price.from_dict(data.get("retail_price")),
            sale_price=Price.from_dict(data.get("sale_price")),
            discount=int(data.get("discount") or 0),
            sizes=sizes,
            available=bool(data.get("available", bool(sizes))),
            last_scraped=data.get("last_scraped") or "",
            status=ListingStatus(data.get("status") or ListingStatus.ACTIVE.value),
            last_checked=data.get("last_checked"),
            price_history=[PriceHistoryEntry(**e) for e in data.get("price_history") or []],
            sizes_history=[SizesHistoryEntry(**e) for e in data.get("sizes_history") or []],
            check_fail_count=int(data.get("check_fail_count") or 0),
            link_dead=bool(data.get("link_dead")),
        )


@dataclass
class StandardRecord:
    """
    A scraped record after store cleaning and normalization.

    This is the unit the merge engine scores and groups. `listing` is None
    only for the seed record built from an already stored Product.
    """

    name: str
    brand: str = ""
    colorway: str = ""
    style_code: str = ""
    category: str = "Sneakers"
    tags: List[str] = field(default_factory=list)
    image: str = ""
    original_image: str = ""
    description: str = ""
    url: str = ""
    listing: Optional[NormalizedListing] = None
    has_content: bool = True
    issues: List[str] = field(default_factory=list)
    total_sizes: Optional[int] = None


@dataclass
class Product:
    """
    Canonical catalog entity. `product_id` is assigned once and never
    recomputed; listings are unique by (store, url).
    """

    product_id: str
    name: str
    brand: str = ""
    colorway: str = ""
    style_code: str = ""
    category: str = "Sneakers"
    tags: List[str] = field(default_factory=list)
    image: str = ""
    original_image: str = ""
    image_status: str = "missing"
    description: str = ""
    listings: List[NormalizedListing] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["listings"] = [listing.to_dict() for listing in self.listings]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        values = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        values["listings"] = [NormalizedListing.from_dict(l) for l in data.get("listings") or []]
        values["tags"] = list(data.get("tags") or [])
        return cls(**values)
