"""
Foot Locker adapter (nl, co.uk, com, de, fr)

Sizes come as bare EU numbers ("42.5"); they get an explicit "EU " prefix
so the normalizer never reads them as US. The DOM fallback reads the
strike-through retail price outside recommendation cards.
"""

import re
from dataclasses import replace
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from services.scraper.config import StoreConfig
from standardization.schema import RawRecord
from standardization.size_normalizer import EU_THRESHOLD, SizeSystem

from .base import BaseAdapter

CURRENCY_GLYPHS = ("€", "£", "$")


def prefix_eu_sizes(sizes: List[str]) -> List[str]:
    result = []
    for size in sizes:
        text = str(size).strip()
        try:
            value = float(text.replace(",", "."))
        except ValueError:
            result.append(text)
            continue
        result.append(f"EU {text}" if value >= EU_THRESHOLD else text)
    return result


class FootLockerAdapter(BaseAdapter):
    name = "footlocker"
    domains = (
        "footlocker.nl",
        "footlocker.co.uk",
        "footlocker.com",
        "footlocker.de",
        "footlocker.fr",
    )
    size_system = SizeSystem.EU

    def extract_fallback(self, soup: BeautifulSoup) -> Dict[str, Any]:
        result: Dict[str, Any] = {"sizes": []}

        for span in soup.select("span.line-through"):
            text = span.get_text(strip=True)
            if not any(glyph in text for glyph in CURRENCY_GLYPHS):
                continue
            in_card = span.find_parent(class_=re.compile("ProductCard"))
            if not in_card:
                result["retail_price"] = text
                break

        sale = soup.select_one('span.text-sale_red, [class*="text-sale"]')
        if sale:
            result["sale_price"] = sale.get_text(strip=True)

        color = soup.select_one('[class*="ProductColor"], [data-testid="product-color"]')
        if color:
            result["colorway"] = color.get_text(strip=True)

        for link in soup.select("a.size-box"):
            text = link.get_text(strip=True)
            if re.match(r"^\d{2,3}(\.5)?$", text):
                result["sizes"].append(text)
        return result

    def post_process(self, record: RawRecord, store: Optional[StoreConfig] = None) -> RawRecord:
        record = super().post_process(record, store)
        return replace(record, sizes=prefix_eu_sizes(record.sizes))
