"""
Product Processor

Main orchestrator that turns a scraped RawRecord into a StandardRecord:
store adapter cleanup, then size, price, brand, tag and category
normalization.

Usage:
    processor = ProductProcessor(config, registry)

    # Transform single record
    record = processor.transform(raw)

    # Transform a batch, collecting failures instead of aborting
    records, failures = processor.transform_batch(raw_records)
"""

import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, List, Optional, Tuple

from .category_classifier import classify_category, clean_tags, detect_tags, is_kids, is_womens
from .name_normalizer import clean_description
from .price_parser import build_listing_prices
from .schema import NormalizedListing, RawRecord, StandardRecord
from .size_normalizer import SizeContext, SizeSystem, is_valid_size, normalize_sizes

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProductProcessor:
    """
    Processes raw records into standardized records.

    Applies the store adapter first (its cleanup decides the name the rest
    of the steps see), then every standardization module in order.
    """

    def __init__(self, config=None, registry=None, clock: Callable[[], datetime] = utc_now):
        # Imported here: adapters and config depend on this package
        from adapters import build_registry
        from services.scraper.config import CatalogConfig

        self.config = config or CatalogConfig()
        self.registry = registry or build_registry()
        self.clock = clock
        self.stats = {
            'processed': 0,
            'brands_detected': 0,
            'sizes_normalized': 0,
            'prices_swapped': 0,
            'price_failures': 0,
            'images_missing': 0,
            'errors': 0,
        }
        self._lock = Lock()

    def _count(self, key: str, amount: int = 1) -> None:
        # checker workers share one processor
        with self._lock:
            self.stats[key] += amount

    def transform(self, raw: RawRecord, adapter=None) -> StandardRecord:
        """
        Transform one raw record.

        Args:
            raw: Record as scraped
            adapter: Override the adapter resolved from the record URL

        Returns:
            StandardRecord with its NormalizedListing attached
        """
        self._count('processed')

        store = self.config.store_for(raw.url) if raw.url else None
        adapter = adapter or self.registry.resolve(raw.url)
        had_brand = bool(raw.brand)

        # Step 1: store-specific cleanup
        record = adapter.post_process(raw, store)
        if record.brand and not had_brand:
            self._count('brands_detected')

        # Step 2: sizes, read in the store's size system
        size_system = store.size_system if store and store.size_system != SizeSystem.UNKNOWN else adapter.size_system
        context = SizeContext(
            size_system=size_system,
            is_womens=is_womens(raw.name, record.tags),
            is_kids=is_kids(raw.name, record.tags),
        )
        sizes = normalize_sizes([s for s in record.sizes if is_valid_size(s)], context)
        self._count('sizes_normalized', len(sizes))

        # Step 3: prices
        currency = record.currency or (store.currency if store else None)
        prices = build_listing_prices(record.retail_price, record.sale_price, currency)
        issues = []
        if prices.swapped:
            self._count('prices_swapped')
        if prices.parse_failed:
            self._count('price_failures')
            issues.append('price_unparsed')
        if not record.image:
            self._count('images_missing')
            issues.append('image_missing')

        # Step 4: tags + category
        description = clean_description(record.description, self.config.description_limit)
        tags = detect_tags(record.name, record.brand) + list(record.tags)
        category = classify_category([record.name, description] + tags)
        tags = clean_tags(tags, category)

        listing = NormalizedListing(
            store=store.slug if store else adapter.name,
            url=record.url,
            retail_price=prices.retail,
            sale_price=prices.sale,
            discount=prices.discount,
            sizes=sizes,
            available=bool(sizes),
            last_scraped=self.clock().isoformat(),
        )

        return StandardRecord(
            name=record.name,
            brand=record.brand,
            colorway=(record.colorway or "").strip(),
            style_code=record.style_code,
            category=category,
            tags=tags,
            image=record.image,
            original_image=record.original_image,
            description=description,
            url=record.url,
            listing=listing,
            has_content=raw.has_content(),
            issues=issues,
            total_sizes=record.total_sizes,
        )

    def transform_batch(self, raw_records: List[RawRecord]) -> Tuple[List[StandardRecord], List[Tuple[RawRecord, str]]]:
        """
        Transform many records.

        Returns:
            (records, failures) where failures pairs each rejected raw
            record with its error message
        """
        records = []
        failures = []
        for raw in raw_records:
            try:
                records.append(self.transform(raw))
            except Exception as e:
                self._count('errors')
                logger.error(f"Error processing {raw.url or raw.name!r}: {e}")
                failures.append((raw, str(e)))
        return records, failures


def standardize_record(raw: RawRecord, processor: Optional[ProductProcessor] = None) -> StandardRecord:
    """Convenience wrapper for one-off transforms."""
    return (processor or ProductProcessor()).transform(raw)
