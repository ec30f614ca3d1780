"""
Pydantic Models for the Catalog Index

The index is a projection of stored Products for the frontend: one
summary row per product plus brand / category / store counts. It is
rebuilt from scratch every time and never read back as a source of truth.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from standardization.schema import ListingStatus, Product


class PriceModel(BaseModel):
    amount: float
    currency: str = "EUR"


class IndexEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    name: str
    brand: str = ""
    category: str = "Sneakers"
    image: str = ""
    best_price: Optional[PriceModel] = Field(default=None, alias="bestPrice")
    best_discount: int = Field(default=0, alias="bestDiscount")
    store_count: int = Field(default=0, alias="storeCount")
    tags: List[str] = Field(default_factory=list)


class CountEntry(BaseModel):
    name: str
    count: int


class CatalogIndex(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    generated_at: str = Field(alias="generatedAt")
    total_products: int = Field(alias="totalProducts")
    products: List[IndexEntry]
    brands: List[CountEntry] = Field(default_factory=list)
    categories: List[CountEntry] = Field(default_factory=list)
    stores: List[CountEntry] = Field(default_factory=list)


def _live_listings(product: Product):
    return [
        listing for listing in product.listings
        if listing.available and listing.status != ListingStatus.ENDED
    ]


def build_index_entry(product: Product) -> IndexEntry:
    """Summary row: best price is the lowest sale price among live listings."""
    live = _live_listings(product)
    priced = [listing for listing in live if listing.sale_price.amount > 0]
    best = min(priced, key=lambda l: l.sale_price.amount) if priced else None
    return IndexEntry(
        product_id=product.product_id,
        name=product.name,
        brand=product.brand,
        category=product.category,
        image=product.image,
        best_price=PriceModel(amount=best.sale_price.amount, currency=best.sale_price.currency) if best else None,
        best_discount=max((l.discount for l in live), default=0),
        store_count=len({listing.store for listing in live}),
        tags=list(product.tags),
    )


def _counts(values: Iterable[str]) -> List[CountEntry]:
    counter = Counter(v for v in values if v)
    return [CountEntry(name=name, count=count) for name, count in sorted(counter.items(), key=lambda kv: (-kv[1], kv[0]))]


def build_catalog_index(products: Iterable[Product], generated_at: Optional[str] = None) -> CatalogIndex:
    """
    Rebuild the index from products. Same products in, same index out
    (apart from `generated_at`, which callers may pin).
    """
    products = sorted(products, key=lambda p: ((p.brand or "").lower(), (p.name or "").lower(), p.product_id))
    entries = [build_index_entry(p) for p in products]
    return CatalogIndex(
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
        total_products=len(entries),
        products=entries,
        brands=_counts(p.brand for p in products),
        categories=_counts(p.category for p in products),
        stores=_counts(store for p in products for store in {l.store for l in _live_listings(p)}),
    )
