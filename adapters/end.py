"""
END. Clothing adapter

JSON-LD carries the sale price only; the "was" price and the size buttons
live in the DOM. The colorway is whatever the H1 adds after the product
name ("adidas Tahiti Marine Sneaker Night Sky & Bold Blue").
"""

from dataclasses import replace
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from services.scraper.config import StoreConfig
from standardization.image_urls import strip_query
from standardization.schema import RawRecord
from standardization.size_normalizer import SizeSystem

from .base import BaseAdapter


def extract_colorway(h1_text: str, product_name: str) -> str:
    """Text the H1 appends after the product name."""
    if not h1_text or not product_name:
        return ""
    idx = h1_text.find(product_name)
    if idx == -1:
        return ""
    after = h1_text[idx + len(product_name):].strip()
    return after.lstrip("-| ").strip()


class EndAdapter(BaseAdapter):
    name = "end"
    domains = ("endclothing.com",)
    size_system = SizeSystem.PREFIXED

    def extract_fallback(self, soup: BeautifulSoup) -> Dict[str, Any]:
        result: Dict[str, Any] = {"sizes": []}

        was_price = soup.select_one('[class*="DetailsPriceSaleWas"]')
        if was_price:
            result["retail_price"] = was_price.get_text(strip=True)
        else:
            container = soup.select_one('[class*="PriceContainer"]')
            if container:
                spans = container.find_all("span")
                if len(spans) >= 2:
                    result["retail_price"] = spans[0].get_text(strip=True)

        for button in soup.select('[data-test-id="Size__Button"]'):
            text = button.get_text(strip=True)
            if text:
                result["sizes"].append(text)

        h1 = soup.find("h1")
        if h1:
            result["h1_text"] = h1.get_text(" ", strip=True)
        return result

    def post_process(self, record: RawRecord, store: Optional[StoreConfig] = None) -> RawRecord:
        record = super().post_process(record, store)
        image = record.image
        if "endclothing.com" in image:
            image = strip_query(image)
        colorway = record.colorway or extract_colorway(record.h1_text, record.name)
        return replace(
            record,
            brand="adidas" if record.brand.lower() == "adidas" else record.brand,
            image=image,
            colorway=colorway,
            currency=record.currency or "GBP",
        )
