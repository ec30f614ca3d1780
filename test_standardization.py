#!/usr/bin/env python3
"""
Tests for name / brand / category / image helpers, store config and the
record processor.
"""

import json
import os
import tempfile
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from services.scraper.config import (
    CatalogConfig,
    ConfigError,
    base_domain,
    detect_currency,
    extract_domain,
    load_config,
    store_slug,
)
from standardization.brand_extractor import extract_brand, normalize_brand
from standardization.category_classifier import (
    classify_category,
    clean_tags,
    detect_gender,
    detect_tags,
)
from standardization.image_urls import upgrade_image_url
from standardization.name_normalizer import (
    clean_description,
    clean_name,
    extract_style_code,
    slugify,
    strip_brand_prefix,
)
from standardization.processor import ProductProcessor
from standardization.schema import ListingStatus, RawRecord
from standardization.size_normalizer import SizeSystem


class TestNames(unittest.TestCase):

    def test_style_code_suffix(self):
        self.assertEqual(extract_style_code("Nike Dunk Low - DD1391-100"), "DD1391-100")
        self.assertEqual(extract_style_code("Nike Dunk Low - Black"), "")
        self.assertEqual(extract_style_code("Gel - 1130"), "")

    def test_clean_name(self):
        self.assertEqual(clean_name("adidas Originals Samba OG - B75806", "adidas"), "adidas Samba OG")
        self.assertEqual(clean_name("Nike Nike Dunk Low", "Nike"), "Nike Dunk Low")
        self.assertEqual(clean_name("Nike Wmns Air Max 1 &amp; More", "Nike"), "Nike Air Max 1 & More")

    def test_strip_brand_prefix(self):
        self.assertEqual(strip_brand_prefix("STONE ISLAND Ghost Jacket", "Stone Island"), "Ghost Jacket")
        self.assertEqual(strip_brand_prefix("Nike", "Nike"), "Nike")

    def test_slugify(self):
        self.assertEqual(slugify("Nike Air Max 1 '86 OG"), "nike-air-max-1-86-og")
        self.assertEqual(slugify(""), "")

    def test_clean_description(self):
        self.assertEqual(clean_description("<p>Soft <b>suede</b> upper.</p>"), "Soft suede upper.")
        self.assertEqual(clean_description("Find your new favourite pair at our store"), "")
        self.assertEqual(len(clean_description("z" * 400)), 300)


class TestBrands(unittest.TestCase):

    def test_jordan_before_nike(self):
        self.assertEqual(extract_brand("Nike Air Jordan 1 Retro High OG"), "Jordan")

    def test_model_keywords(self):
        self.assertEqual(extract_brand("Samba OG Cloud White"), "adidas")
        self.assertEqual(extract_brand("Plain White Tee"), "")

    def test_casing(self):
        self.assertEqual(normalize_brand("STONE ISLAND"), "Stone Island")
        self.assertEqual(normalize_brand("Adidas"), "adidas")
        self.assertEqual(normalize_brand("asics"), "ASICS")
        self.assertEqual(normalize_brand("APC"), "APC")


class TestCategories(unittest.TestCase):

    def test_priority(self):
        self.assertEqual(classify_category(["Stone Island Ghost Jacket"]), "Clothing")
        self.assertEqual(classify_category(["New Era Cap", "Bag"]), "Accessories")
        self.assertEqual(classify_category(["Hoodie", "Cap"]), "Clothing")
        self.assertEqual(classify_category(["Nike Dunk Low", "Sneakers"]), "Sneakers")

    def test_sneaker_vocabulary_is_not_clothing(self):
        self.assertEqual(classify_category(["Nike Air Force 1 Low Top"]), "Sneakers")
        self.assertEqual(classify_category(["Converse Chuck 70 High Top with toe cap"]), "Sneakers")

    def test_detect_tags(self):
        self.assertEqual(detect_tags("Nike Dunk Low Sneaker", "Nike"), ["Sneakers", "Nike", "Sale"])
        self.assertEqual(detect_tags("Arc'teryx Beta Jacket", "Arc'teryx"), ["Jacket", "Arc'teryx", "Sale"])

    def test_clean_tags(self):
        self.assertEqual(clean_tags(["Shoes", "Nike", "NIKE", ""], "Sneakers"), ["Sneakers", "Nike"])

    def test_gender(self):
        self.assertEqual(detect_gender("Nike Dunk Low (GS)"), "Kids")
        self.assertEqual(detect_gender("Nike Wmns Dunk Low"), "Women")
        self.assertEqual(detect_gender("Nike Dunk Low"), "")


class TestImages(unittest.TestCase):

    def test_nike(self):
        self.assertEqual(
            upgrade_image_url("https://static.nike.com/a/images/t_PDP_864_v1/f_auto/x.png"),
            "https://static.nike.com/a/images/t_PDP_1728_v1/f_auto/x.png",
        )

    def test_mrporter(self):
        self.assertEqual(
            upgrade_image_url("https://www.mrporter.com/variants/images/123/in/w358_q60.jpg?x=1"),
            "https://www.mrporter.com/variants/images/123/in/w358_q60.jpg",
        )
        self.assertEqual(
            upgrade_image_url("https://cache.mrporter.com/images/products/123/123_mrp_in_pp.jpg"),
            "https://cache.mrporter.com/images/products/123/123_mrp_in_xl.jpg",
        )

    def test_footlocker(self):
        url = upgrade_image_url("https://images.footlocker.com/is/image/FLEU/314217718504?wid=232")
        self.assertTrue(url.endswith("314217718504?wid=1904&hei=1344&fmt=png-alpha&resMode=sharp2"))

    def test_generic_params(self):
        self.assertEqual(
            upgrade_image_url("https://cdn.shop.com/img.jpg?w=300&q=60"),
            "https://cdn.shop.com/img.jpg?w=1200&q=95",
        )

    def test_protocol_relative_and_empty(self):
        self.assertEqual(upgrade_image_url("//cdn.shop.com/a.jpg"), "https://cdn.shop.com/a.jpg")
        self.assertEqual(upgrade_image_url(""), "")


class TestConfig(unittest.TestCase):

    def test_domain_helpers(self):
        self.assertEqual(extract_domain("https://www.footlocker.nl/nl/p/x.html"), "footlocker.nl")
        self.assertEqual(base_domain("footlocker.co.uk"), "footlocker")
        self.assertEqual(detect_currency("shop.co.uk"), "GBP")
        self.assertEqual(detect_currency("shop.se"), "EUR")
        self.assertEqual(store_slug("END. Clothing"), "end-clothing")

    def test_store_lookup_and_inherit(self):
        config = CatalogConfig()
        uk = config.store_for("https://www.footlocker.co.uk/en/product/x.html")
        self.assertEqual(uk.currency, "GBP")
        self.assertEqual(uk.size_system, SizeSystem.EU)
        self.assertEqual(uk.scrape_method, "patchright")

    def test_base_domain_fallback(self):
        store = CatalogConfig().store_for("footlocker.be")
        self.assertEqual(store.name, "Foot Locker")

    def test_unknown_domain_uses_default(self):
        store = CatalogConfig().store_for("https://www.kicksshop.co.uk/p/1")
        self.assertEqual(store.name, "Kicksshop")
        self.assertEqual(store.currency, "GBP")
        self.assertEqual(store.size_system, SizeSystem.UNKNOWN)

    def test_load_config_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "config.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({
                    "history_limit": 10,
                    "retry": {"max_attempts": 5},
                    "stores": {"kith.com": {"name": "Kith", "currency": "USD", "size_system": "us"}},
                }, f)
            config = load_config(path)
        self.assertEqual(config.history_limit, 10)
        self.assertEqual(config.retry.max_attempts, 5)
        self.assertEqual(config.store_for("kith.com").size_system, SizeSystem.US)
        self.assertEqual(config.store_for("endclothing.com").currency, "GBP")

    def test_missing_config_file(self):
        with self.assertRaises(ConfigError):
            load_config("/nonexistent/config.json")

    def test_unknown_parent(self):
        config = CatalogConfig(stores={"a.com": {"_inherit": "b.com"}})
        with self.assertRaises(ConfigError):
            config.store_for("a.com")


class TestProcessor(unittest.TestCase):

    def setUp(self):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        self.processor = ProductProcessor(clock=lambda: now)

    def test_footlocker_record(self):
        raw = RawRecord.from_dict({
            "name": "Nike Dunk Low Retro",
            "salePrice": "€ 89,99",
            "retailPrice": "€ 119,99",
            "sizes": ["40", "41", "42.5", "Select size"],
            "url": "https://www.footlocker.nl/nl/product/nike-dunk-low/314217718504.html",
            "image": "https://images.footlocker.com/is/image/FLEU/314217718504?wid=232",
        })
        record = self.processor.transform(raw)
        self.assertEqual(record.brand, "Nike")
        self.assertEqual(record.category, "Sneakers")
        self.assertEqual(record.listing.store, "foot-locker")
        self.assertEqual(record.listing.sizes, ["EU 40", "EU 41", "EU 42.5"])
        self.assertEqual(record.listing.discount, 25)
        self.assertEqual(record.listing.sale_price.currency, "EUR")
        self.assertTrue(record.listing.available)
        self.assertEqual(record.listing.status, ListingStatus.ACTIVE)
        self.assertEqual(record.listing.last_scraped, "2026-03-01T00:00:00+00:00")
        self.assertEqual(record.issues, [])

    def test_sns_record(self):
        raw = RawRecord(
            name="Puma Speedcat OG - 398846-56",
            sale_price="€ 70",
            retail_price="€ 100",
            sizes=["9", "9.5"],
            url="https://www.sneakersnstuff.com/en/product/1/puma-speedcat",
        )
        record = self.processor.transform(raw)
        self.assertEqual(record.name, "Puma Speedcat OG")
        self.assertEqual(record.style_code, "398846-56")
        self.assertEqual(record.listing.sizes, ["EU 42.5", "EU 43"])
        self.assertEqual(record.listing.discount, 30)

    def test_issues_recorded(self):
        raw = RawRecord(name="Mystery Item", sale_price="call us", url="https://shop.example.de/p/1")
        record = self.processor.transform(raw)
        self.assertIn("price_unparsed", record.issues)
        self.assertIn("image_missing", record.issues)
        self.assertEqual(self.processor.stats['price_failures'], 1)

    def test_placeholder_page_has_no_content(self):
        record = self.processor.transform(RawRecord(name="Access Denied", url="https://www.mrporter.com/p/1"))
        self.assertFalse(record.has_content)

    def test_stats_counted_across_threads(self):
        raws = [RawRecord(name="Nike Dunk Low", sizes=["42"], url=f"https://a.com/{i}") for i in range(200)]
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(self.processor.transform, raws))
        self.assertEqual(self.processor.stats['processed'], 200)
        self.assertEqual(self.processor.stats['sizes_normalized'], 200)

    def test_batch_collects_records(self):
        raws = [RawRecord(name="Nike Dunk Low", url="https://a.com/1"), RawRecord(name="Samba OG", url="https://b.com/2")]
        records, failures = self.processor.transform_batch(raws)
        self.assertEqual(len(records), 2)
        self.assertEqual(failures, [])
        self.assertEqual(records[1].brand, "adidas")


if __name__ == '__main__':
    unittest.main()
