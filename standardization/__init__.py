"""
Catalog Standardization Module

Turns scraped store records into comparable catalog data.

Key Components:
- schema: RawRecord, Price, NormalizedListing, StandardRecord, Product
- SizeNormalizer: US / UK / EU / kids / letter sizes -> "EU n"
- PriceParser: currency-prefixed prices, discounts, reversed pairs
- BrandExtractor: brands from model keywords, casing fixes
- NameNormalizer: name / description cleanup, slugs, style codes
- CategoryClassifier: Sneakers / Clothing / Accessories, tags, gender
- ImageUrls: highest-resolution CDN variants
- ProductProcessor: Main orchestrator
"""

from .schema import (
    CATEGORIES,
    ListingStatus,
    NormalizedListing,
    Price,
    PriceHistoryEntry,
    Product,
    RawRecord,
    SizesHistoryEntry,
    StandardRecord,
)
from .size_normalizer import SizeContext, SizeResult, SizeSystem, normalize_size, normalize_sizes
from .price_parser import build_listing_prices, compute_discount, parse_price, reconcile_prices
from .brand_extractor import BRAND_MAP, extract_brand, normalize_brand
from .name_normalizer import clean_description, clean_name, extract_style_code, normalize_name, slugify
from .category_classifier import classify_category, clean_tags, detect_gender, detect_tags
from .image_urls import upgrade_image_url
from .processor import ProductProcessor, standardize_record

__all__ = [
    # Schema
    'CATEGORIES',
    'ListingStatus',
    'NormalizedListing',
    'Price',
    'PriceHistoryEntry',
    'Product',
    'RawRecord',
    'SizesHistoryEntry',
    'StandardRecord',

    # Sizes
    'SizeContext',
    'SizeResult',
    'SizeSystem',
    'normalize_size',
    'normalize_sizes',

    # Prices
    'build_listing_prices',
    'compute_discount',
    'parse_price',
    'reconcile_prices',

    # Brands
    'BRAND_MAP',
    'extract_brand',
    'normalize_brand',

    # Names
    'clean_description',
    'clean_name',
    'extract_style_code',
    'normalize_name',
    'slugify',

    # Categories
    'classify_category',
    'clean_tags',
    'detect_gender',
    'detect_tags',

    # Images
    'upgrade_image_url',

    # Processor
    'ProductProcessor',
    'standardize_record',
]
