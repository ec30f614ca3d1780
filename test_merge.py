#!/usr/bin/env python3
"""
Tests for the merge engine: base selection, overrides, listings, tags.
"""

import unittest
from dataclasses import replace
from datetime import datetime, timezone

from matching.identity import listing_key
from matching.merge import MergeEngine, is_real_colorway, merge_listings, score_record
from standardization.schema import (
    ListingStatus,
    NormalizedListing,
    Price,
    PriceHistoryEntry,
    Product,
    StandardRecord,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
LONG_DESCRIPTION = (
    "The Dunk Low returns in a clean black and white colour blocking with a leather upper, "
    "padded low-cut collar and a rubber cupsole with classic pivot circle traction for all-day wear."
)


def make_listing(store="sns", url="https://www.sneakersnstuff.com/p/1", sale=90.0, retail=120.0, sizes=None):
    sizes = ["EU 42"] if sizes is None else sizes
    return NormalizedListing(
        store=store,
        url=url,
        retail_price=Price(retail),
        sale_price=Price(sale),
        discount=25,
        sizes=sizes,
        available=bool(sizes),
    )


def make_record(**kwargs):
    values = {
        "name": "Nike Dunk Low",
        "brand": "Nike",
        "url": "https://www.sneakersnstuff.com/p/1",
        "tags": ["Sneakers", "Nike"],
    }
    values.update(kwargs)
    if "listing" not in values:
        values["listing"] = make_listing(url=values["url"])
    return StandardRecord(**values)


class TestScoring(unittest.TestCase):

    def test_placeholder_colorways(self):
        self.assertFalse(is_real_colorway("TBD"))
        self.assertFalse(is_real_colorway(""))
        self.assertFalse(is_real_colorway("Kies een model"))
        self.assertTrue(is_real_colorway("Triple Black"))

    def test_scores(self):
        poor = make_record(colorway="TBD")
        rich = make_record(description=LONG_DESCRIPTION, colorway="Triple Black", original_image="https://cdn/x.jpg")
        group = [poor, rich]
        self.assertEqual(score_record(poor, group), 0)
        self.assertEqual(score_record(rich, group), 3 + 2 + 3 + 2)

    def test_relative_points(self):
        short = make_record(name="Dunk", tags=["Nike"])
        longer = make_record(name="Nike Dunk Low Retro", tags=["Nike", "Sale"])
        group = [short, longer]
        self.assertEqual(score_record(short, group), 0)
        self.assertEqual(score_record(longer, group), 2)


class TestMerge(unittest.TestCase):

    def setUp(self):
        self.engine = MergeEngine(clock=lambda: FIXED_NOW)

    def test_richer_record_wins_even_when_second(self):
        a = make_record(colorway="TBD", description="", url="https://a.com/1", listing=make_listing("a", "https://a.com/1"))
        b = make_record(
            colorway="Triple Black",
            description="x" * 200,
            url="https://b.com/1",
            listing=make_listing("b", "https://b.com/1"),
        )
        product = self.engine.merge("dunk", [a, b])
        self.assertEqual(product.colorway, "Triple Black")
        self.assertEqual(product.description, "x" * 200)

    def test_longest_name_and_first_original_image(self):
        a = make_record(name="Nike Dunk Low Retro Panda", original_image="https://cdn/a.jpg")
        b = make_record(name="Nike Dunk", original_image="https://cdn/b.jpg", url="https://b.com/1",
                        listing=make_listing("b", "https://b.com/1"))
        product = self.engine.merge("dunk", [a, b])
        self.assertEqual(product.name, "Nike Dunk Low Retro Panda")
        self.assertEqual(product.original_image, "https://cdn/a.jpg")

    def test_description_capped(self):
        product = self.engine.merge("dunk", [make_record(description="y" * 500)])
        self.assertEqual(len(product.description), 300)
        self.assertTrue(product.description.endswith("..."))

    def test_category_from_union(self):
        a = make_record(name="Stone Island Overshirt", tags=[])
        b = make_record(name="Stone Island Ghost", tags=["Bags"], url="https://b.com/1",
                        listing=make_listing("b", "https://b.com/1"))
        product = self.engine.merge("si", [a, b])
        self.assertEqual(product.category, "Clothing")
        self.assertEqual(product.tags[0], "Clothing")

    def test_default_category(self):
        product = self.engine.merge("dunk", [make_record()])
        self.assertEqual(product.category, "Sneakers")

    def test_tags_cleaned(self):
        record = make_record(tags=["New Arrivals", "nike", "Nike", "Sale", "Footwear"])
        product = self.engine.merge("dunk", [record])
        self.assertEqual(product.tags, ["Sneakers", "nike", "Sale"])

    def test_listings_unique_by_store_and_url(self):
        a = make_record()
        b = make_record(listing=make_listing(sale=80.0))
        c = make_record(url="https://www.footlocker.nl/p/2", listing=make_listing("foot-locker", "https://www.footlocker.nl/p/2"))
        product = self.engine.merge("dunk", [a, b, c])
        self.assertEqual([listing_key(l) for l in product.listings], [
            "sns|https://www.sneakersnstuff.com/p/1",
            "foot-locker|https://www.footlocker.nl/p/2",
        ])
        self.assertEqual(product.listings[0].sale_price.amount, 90.0)

    def test_new_product_timestamps(self):
        product = self.engine.merge("dunk", [make_record()])
        self.assertEqual(product.product_id, "dunk")
        self.assertEqual(product.created_at, FIXED_NOW.isoformat())
        self.assertEqual(product.image_status, "missing")

    def test_existing_product_keeps_id_and_lifecycle(self):
        stored_listing = make_listing(sale=100.0)
        stored_listing.status = ListingStatus.PRICE_CHANGED
        stored_listing.price_history = [PriceHistoryEntry("2026-02-01", 100.0, 120.0)]
        stored_listing.check_fail_count = 1
        existing = Product(
            product_id="legacy-7",
            name="Nike Dunk Low",
            brand="Nike",
            colorway="Panda",
            image="https://cdn/stored.jpg",
            listings=[stored_listing],
            created_at="2026-01-01T00:00:00+00:00",
        )
        product = self.engine.merge("DD1391-100", [make_record(colorway="TBD")], existing=existing)

        self.assertEqual(product.product_id, "legacy-7")
        self.assertEqual(product.created_at, "2026-01-01T00:00:00+00:00")
        self.assertEqual(product.colorway, "Panda")
        self.assertEqual(product.image_status, "ok")
        self.assertEqual(len(product.listings), 1)
        listing = product.listings[0]
        self.assertEqual(listing.sale_price.amount, 90.0)
        self.assertEqual(listing.status, ListingStatus.PRICE_CHANGED)
        self.assertEqual(len(listing.price_history), 1)
        self.assertEqual(listing.check_fail_count, 1)

    def test_inputs_not_mutated(self):
        record = make_record(tags=["Sale"])
        self.engine.merge("dunk", [record])
        self.assertEqual(record.tags, ["Sale"])


class TestMergeListings(unittest.TestCase):

    def test_new_listing_appended(self):
        stored = [make_listing()]
        fresh = [make_listing("end-clothing", "https://www.endclothing.com/p/1")]
        self.assertEqual(len(merge_listings(stored, fresh)), 2)

    def test_tracking_parameters_update_same_listing(self):
        stored = [replace(make_listing(), status=ListingStatus.SOLD_OUT, check_fail_count=1)]
        fresh = [make_listing(url="https://www.sneakersnstuff.com/p/1/?ref=ig", sale=70.0)]
        merged = merge_listings(stored, fresh)
        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].url, "https://www.sneakersnstuff.com/p/1")
        self.assertEqual(merged[0].sale_price.amount, 70.0)
        self.assertEqual(merged[0].status, ListingStatus.SOLD_OUT)
        self.assertEqual(merged[0].check_fail_count, 1)


if __name__ == '__main__':
    unittest.main()
