#!/usr/bin/env python3
"""
Tests for price parsing and discount calculation.
"""

import unittest

from standardization.price_parser import (
    build_listing_prices,
    compute_discount,
    format_price,
    parse_amount,
    parse_price,
    reconcile_prices,
)
from standardization.schema import Price


class TestParsePrice(unittest.TestCase):

    def test_currency_glyphs(self):
        self.assertEqual(parse_price("€ 129,99"), Price(129.99, "EUR"))
        self.assertEqual(parse_price("£120.00"), Price(120.0, "GBP"))
        self.assertEqual(parse_price("$95"), Price(95.0, "USD"))

    def test_trailing_glyph_and_code(self):
        self.assertEqual(parse_price("89,95 €"), Price(89.95, "EUR"))
        self.assertEqual(parse_price("1.299,00 EUR"), Price(1299.0, "EUR"))

    def test_thousands_separators(self):
        self.assertEqual(parse_amount("1,299.00"), 1299.0)
        self.assertEqual(parse_amount("1.299"), 1299.0)
        self.assertEqual(parse_amount("1 299,50"), 1299.5)

    def test_default_currency(self):
        self.assertEqual(parse_price("89.99", "GBP"), Price(89.99, "GBP"))
        self.assertEqual(parse_price("89.99").currency, "EUR")

    def test_unparseable(self):
        self.assertIsNone(parse_price(""))
        self.assertIsNone(parse_price(None))
        self.assertIsNone(parse_price("Sold out"))


class TestDiscount(unittest.TestCase):

    def test_formula(self):
        self.assertEqual(compute_discount(100, 75), 25)
        self.assertEqual(compute_discount(120, 89.99), 25)

    def test_zero_retail(self):
        self.assertEqual(compute_discount(0, 75), 0)
        self.assertEqual(compute_discount(0, 0), 0)

    def test_never_negative(self):
        self.assertEqual(compute_discount(50, 80), 0)

    def test_half_rounds_up(self):
        self.assertEqual(compute_discount(40, 35), 13)  # 12.5%


class TestListingPrices(unittest.TestCase):

    def test_swapped_prices(self):
        prices = build_listing_prices("€50", "€80")
        self.assertTrue(prices.swapped)
        self.assertEqual(prices.retail.amount, 80.0)
        self.assertEqual(prices.sale.amount, 50.0)
        self.assertEqual(prices.discount, 0)

    def test_reconcile_keeps_ordered_pair(self):
        retail, sale, swapped = reconcile_prices(Price(100.0), Price(75.0))
        self.assertFalse(swapped)
        self.assertEqual((retail.amount, sale.amount), (100.0, 75.0))

    def test_regular_pair(self):
        prices = build_listing_prices("€ 100,00", "€ 75,00")
        self.assertEqual(prices.discount, 25)
        self.assertFalse(prices.swapped)
        self.assertFalse(prices.parse_failed)

    def test_missing_retail(self):
        prices = build_listing_prices("", "£60.00")
        self.assertEqual(prices.retail, Price(0.0, "GBP"))
        self.assertEqual(prices.sale, Price(60.0, "GBP"))
        self.assertEqual(prices.discount, 0)

    def test_unparseable_sale_is_flagged(self):
        with self.assertLogs("standardization.price_parser", level="WARNING"):
            prices = build_listing_prices("€100", "Price on request")
        self.assertTrue(prices.parse_failed)
        self.assertEqual(prices.sale.amount, 0.0)

    def test_store_currency_used_without_glyph(self):
        prices = build_listing_prices("150", "99", "GBP")
        self.assertEqual(prices.sale.currency, "GBP")
        self.assertEqual(prices.discount, 34)


class TestFormatPrice(unittest.TestCase):

    def test_format(self):
        self.assertEqual(format_price(Price(89.9, "EUR")), "€89.90")
        self.assertEqual(format_price(Price(120.0, "SEK")), "120.00 SEK")
        self.assertEqual(format_price(Price(0.0)), "")


if __name__ == '__main__':
    unittest.main()
