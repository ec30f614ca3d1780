"""
Merge Engine

Folds every record of one identity group into a single Product.

Steps:
1. Score each record for data richness and take the best as the base
2. Override fields where another record has better data than the base
3. Classify the category from the union of all records
4. Attach one listing per record, unique by (store, normalized url)
5. Clean and de-duplicate tags

A product that already exists takes part as the first candidate, so its
productId is kept, and on equal scores its data stays.

Example:
    engine = MergeEngine()
    product = engine.merge("DD1391-100", records, existing=stored_product)
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from matching.identity import listing_key
from standardization.category_classifier import classify_category, clean_tags
from standardization.name_normalizer import clean_description
from standardization.schema import NormalizedListing, Product, StandardRecord

logger = logging.getLogger(__name__)

PLACEHOLDER_COLORWAYS = {"", "tbd", "n/a", "na", "unknown", "-", "multi"}
PLACEHOLDER_COLORWAY_PREFIXES = ("kies een model", "select a colo")

TRIVIAL_DESCRIPTION_LENGTH = 20
RICH_DESCRIPTION_LENGTH = 100


def is_real_colorway(colorway: Optional[str]) -> bool:
    text = (colorway or "").strip().lower()
    if text in PLACEHOLDER_COLORWAYS:
        return False
    return not text.startswith(PLACEHOLDER_COLORWAY_PREFIXES)


def score_record(record: StandardRecord, group: List[StandardRecord]) -> int:
    """
    Data-richness score.

    +3 non-trivial description, +2 more if over 100 chars, +3 real
    colorway, +2 original image, +1 name longer than the group's
    shortest, +1 more tags than the group's fewest.
    """
    score = 0
    description = record.description or ""
    if len(description) >= TRIVIAL_DESCRIPTION_LENGTH:
        score += 3
        if len(description) > RICH_DESCRIPTION_LENGTH:
            score += 2
    if is_real_colorway(record.colorway):
        score += 3
    if record.original_image:
        score += 2
    if len(record.name or "") > min(len(r.name or "") for r in group):
        score += 1
    if len(record.tags) > min(len(r.tags) for r in group):
        score += 1
    return score


def record_from_product(product: Product) -> StandardRecord:
    """Stored product as a merge candidate (carries no listing)."""
    return StandardRecord(
        name=product.name,
        brand=product.brand,
        colorway=product.colorway,
        style_code=product.style_code,
        category=product.category,
        tags=list(product.tags),
        image=product.image,
        original_image=product.original_image,
        description=product.description,
        listing=None,
    )


def merge_listings(existing: List[NormalizedListing], fresh: List[NormalizedListing]) -> List[NormalizedListing]:
    """
    Listings unique by (store, normalized url).

    A fresh listing for a stored key replaces its price/size data but
    keeps the stored URL and lifecycle state. Among fresh listings the first wins.
    """
    merged: Dict[str, NormalizedListing] = {listing_key(listing): listing for listing in existing}
    updated = set()
    for listing in fresh:
        key = listing_key(listing)
        if key in updated:
            continue
        updated.add(key)
        previous = merged.get(key)
        if previous is None:
            merged[key] = listing
        else:
            merged[key] = replace(
                listing,
                url=previous.url,
                status=previous.status,
                last_checked=previous.last_checked,
                price_history=list(previous.price_history),
                sizes_history=list(previous.sizes_history),
                check_fail_count=previous.check_fail_count,
                link_dead=previous.link_dead,
            )
    return list(merged.values())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MergeEngine:
    """
    Merges identity groups into Products.
    """

    def __init__(self, description_limit: int = 300, clock: Callable[[], datetime] = utc_now):
        self.description_limit = description_limit
        self.clock = clock
        self.stats = {
            'created': 0,
            'updated': 0,
            'listings_added': 0,
        }

    def merge(
        self,
        product_id: str,
        records: List[StandardRecord],
        existing: Optional[Product] = None,
    ) -> Product:
        """
        Merge one identity group.

        Args:
            product_id: Identity key; ignored when `existing` is given
            records: Group members in encounter order
            existing: Stored product for this identity, if any

        Returns:
            New Product (inputs are not modified)
        """
        candidates = list(records)
        if existing is not None:
            candidates.insert(0, record_from_product(existing))
        if not candidates:
            raise ValueError(f"Nothing to merge for {product_id}")

        # Step 1: base = highest score, first wins ties
        base = candidates[0]
        best = score_record(base, candidates)
        for candidate in candidates[1:]:
            score = score_record(candidate, candidates)
            if score > best:
                base, best = candidate, score
        logger.debug(f"{product_id}: base {base.url or 'stored product'} (score {best})")

        # Step 2: field overrides
        colorway = next((c.colorway for c in candidates if is_real_colorway(c.colorway)), base.colorway or "")
        original_image = next((c.original_image for c in candidates if c.original_image), "")
        name = base.name
        for candidate in candidates:
            if len(candidate.name or "") > len(name or ""):
                name = candidate.name
        brand = base.brand or next((c.brand for c in candidates if c.brand), "")
        image = base.image or next((c.image for c in candidates if c.image), "")
        style_code = base.style_code or next((c.style_code for c in candidates if c.style_code), "")
        description = clean_description(base.description, self.description_limit)

        # Step 3: category from every name, tag and description in the group
        texts: List[str] = []
        for candidate in candidates:
            texts.append(candidate.name)
            texts.extend(candidate.tags)
            texts.append(candidate.description)
        category = classify_category(texts)

        # Step 4: listings
        fresh = [c.listing for c in records if c.listing is not None]
        listings = merge_listings(existing.listings if existing else [], fresh)

        # Step 5: tags
        tags = clean_tags([tag for c in candidates for tag in c.tags], category)

        now = self.clock().isoformat()
        if existing is not None:
            self.stats['updated'] += 1
            self.stats['listings_added'] += len(listings) - len(existing.listings)
        else:
            self.stats['created'] += 1
            self.stats['listings_added'] += len(listings)

        return Product(
            product_id=existing.product_id if existing else product_id,
            name=name,
            brand=brand,
            colorway=colorway,
            style_code=style_code,
            category=category,
            tags=tags,
            image=image,
            original_image=original_image,
            image_status="ok" if image else "missing",
            description=description,
            listings=listings,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )
