#!/usr/bin/env python3
"""
Tests for store adapters and adapter resolution.
"""

import unittest

from bs4 import BeautifulSoup

from adapters import (
    AdapterRegistry,
    EndAdapter,
    FootLockerAdapter,
    GenericAdapter,
    MrPorterAdapter,
    SnsAdapter,
    build_registry,
)
from adapters.end import extract_colorway
from adapters.footlocker import prefix_eu_sizes
from services.scraper.config import CatalogConfig
from standardization.schema import RawRecord


class TestRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = build_registry()

    def test_exact_domain(self):
        self.assertIsInstance(self.registry.resolve("https://www.mrporter.com/en-gb/mens/product/1"), MrPorterAdapter)
        self.assertIsInstance(self.registry.resolve("net-a-porter.com"), MrPorterAdapter)
        self.assertIsInstance(self.registry.resolve("endclothing.com"), EndAdapter)

    def test_base_domain_token(self):
        self.assertIsInstance(self.registry.resolve("https://www.footlocker.be/nl/p/1.html"), FootLockerAdapter)

    def test_generic_fallback(self):
        self.assertIsInstance(self.registry.resolve("https://www.kith.com/products/x"), GenericAdapter)
        self.assertIsInstance(self.registry.resolve(""), GenericAdapter)

    def test_first_registered_wins(self):
        first, second = SnsAdapter(), SnsAdapter()
        registry = AdapterRegistry([first, second])
        self.assertIs(registry.resolve("sneakersnstuff.com"), first)

    def test_capabilities(self):
        self.assertEqual(GenericAdapter().capabilities, frozenset())
        self.assertEqual(MrPorterAdapter().capabilities, {"clean_name", "post_process"})
        self.assertEqual(EndAdapter().capabilities, {"extract_fallback", "post_process"})
        self.assertEqual(FootLockerAdapter().capabilities, {"extract_fallback", "post_process"})


class TestMrPorter(unittest.TestCase):

    def setUp(self):
        self.adapter = MrPorterAdapter()
        self.store = CatalogConfig().store_for("mrporter.com")

    def test_name_brand_and_image(self):
        raw = RawRecord(
            name="STONE ISLAND Ghost Garment-Dyed Overshirt - XL",
            brand="STONE ISLAND",
            image="https://cache.mrporter.com/images/products/1/1_mrp_in_pp.jpg?v=2",
            url="https://www.mrporter.com/en-gb/mens/product/1",
        )
        record = self.adapter.post_process(raw, self.store)
        self.assertEqual(record.brand, "Stone Island")
        self.assertEqual(record.name, "Ghost Garment-Dyed Overshirt")
        self.assertEqual(record.image, "https://cache.mrporter.com/images/products/1/1_mrp_in_xl.jpg")
        self.assertEqual(record.currency, "GBP")
        self.assertEqual(record.store, "MR PORTER")

    def test_record_currency_wins(self):
        record = self.adapter.post_process(RawRecord(name="Jacket", currency="EUR"), self.store)
        self.assertEqual(record.currency, "EUR")

    def test_name_left_alone_when_only_brand(self):
        record = self.adapter.post_process(RawRecord(name="Nike", brand="Nike"), self.store)
        self.assertEqual(record.name, "Nike")


class TestEnd(unittest.TestCase):

    HTML = """
    <html><body>
      <h1>adidas Tahiti Marine Sneaker Night Sky &amp; Bold Blue</h1>
      <div class="ProductDetails__DetailsPriceSaleWas-sc-1">£120</div>
      <button data-test-id="Size__Button">UK 8</button>
      <button data-test-id="Size__Button">UK 9</button>
    </body></html>
    """

    def test_fallback(self):
        fields = EndAdapter().extract_fallback(BeautifulSoup(self.HTML, "html.parser"))
        self.assertEqual(fields["retail_price"], "£120")
        self.assertEqual(fields["sizes"], ["UK 8", "UK 9"])
        self.assertEqual(fields["h1_text"], "adidas Tahiti Marine Sneaker Night Sky & Bold Blue")

    def test_colorway_from_h1(self):
        self.assertEqual(
            extract_colorway("adidas Tahiti Marine Sneaker Night Sky & Bold Blue", "Tahiti Marine Sneaker"),
            "Night Sky & Bold Blue",
        )
        self.assertEqual(extract_colorway("Other title", "Tahiti"), "")

    def test_post_process(self):
        raw = RawRecord(
            name="Tahiti Marine Sneaker",
            brand="Adidas",
            image="https://media.endclothing.com/media/catalog/product/x.jpg?w=300&h=300",
            h1_text="adidas Tahiti Marine Sneaker Night Sky",
            url="https://www.endclothing.com/gb/adidas-tahiti.html",
        )
        record = EndAdapter().post_process(raw, CatalogConfig().store_for("endclothing.com"))
        self.assertEqual(record.brand, "adidas")
        self.assertEqual(record.colorway, "Night Sky")
        self.assertEqual(record.image, "https://media.endclothing.com/media/catalog/product/x.jpg")
        self.assertEqual(record.currency, "GBP")


class TestFootLocker(unittest.TestCase):

    HTML = """
    <html><body>
      <div class="ProductPrice">
        <span class="line-through">€ 119,99</span>
        <span class="text-sale_red">€ 89,99</span>
      </div>
      <div class="ProductCard"><span class="line-through">€ 49,99</span></div>
      <p class="ProductColor">White/Black</p>
      <a class="size-box">40</a><a class="size-box">42.5</a><a class="size-box">Size guide</a>
    </body></html>
    """

    def test_fallback(self):
        fields = FootLockerAdapter().extract_fallback(BeautifulSoup(self.HTML, "html.parser"))
        self.assertEqual(fields["retail_price"], "€ 119,99")
        self.assertEqual(fields["sale_price"], "€ 89,99")
        self.assertEqual(fields["colorway"], "White/Black")
        self.assertEqual(fields["sizes"], ["40", "42.5"])

    def test_recommendation_prices_ignored(self):
        html = '<div class="ProductCard-x"><span class="line-through">€ 49,99</span></div>'
        fields = FootLockerAdapter().extract_fallback(BeautifulSoup(html, "html.parser"))
        self.assertNotIn("retail_price", fields)

    def test_sizes_prefixed(self):
        self.assertEqual(prefix_eu_sizes(["40", "42,5", "XL", "7"]), ["EU 40", "EU 42,5", "XL", "7"])


class TestSns(unittest.TestCase):

    def test_style_code_lifted(self):
        raw = RawRecord(name="Puma Speedcat OG - 398846-56", url="https://www.sneakersnstuff.com/p/1")
        record = SnsAdapter().post_process(raw, CatalogConfig().store_for("sneakersnstuff.com"))
        self.assertEqual(record.name, "Puma Speedcat OG")
        self.assertEqual(record.style_code, "398846-56")
        self.assertEqual(record.currency, "EUR")

    def test_existing_style_code_kept(self):
        raw = RawRecord(name="Puma Speedcat OG", style_code="398846-01")
        record = SnsAdapter().post_process(raw)
        self.assertEqual(record.style_code, "398846-01")


if __name__ == '__main__':
    unittest.main()
