"""
MR PORTER / NET-A-PORTER adapter

Quirks:
- Names repeat the designer: "NIKE Air Max 95" when brand is Nike
- Variant names carry a size suffix: "Ghost Overshirt - XL"
- Designer names are often ALL CAPS
- Listing images are '_in_pp.jpg'; '_in_xl.jpg' is the full-size shot
- GBP by default, but /en-xx/ locales price in EUR (taken from the record)
"""

import re
from dataclasses import replace
from typing import Optional

from services.scraper.config import StoreConfig
from standardization.brand_extractor import extract_brand, normalize_brand
from standardization.image_urls import upgrade_mrporter
from standardization.name_normalizer import strip_html
from standardization.schema import RawRecord
from standardization.size_normalizer import SizeSystem

from .base import BaseAdapter

SIZE_SUFFIX = re.compile(r"\s*-\s*(XXS|XS|S|M|L|XL|XXL|\d{1,2}(\.5)?)\s*$", re.IGNORECASE)


class MrPorterAdapter(BaseAdapter):
    name = "mrporter"
    domains = ("mrporter.com", "net-a-porter.com")
    size_system = SizeSystem.PREFIXED

    def clean_name(self, name: str, brand: str = "") -> str:
        cleaned = strip_html(name)
        if brand and cleaned.upper().startswith(brand.upper() + " "):
            cleaned = cleaned[len(brand):].strip()
        return SIZE_SUFFIX.sub("", cleaned).strip()

    def post_process(self, record: RawRecord, store: Optional[StoreConfig] = None) -> RawRecord:
        brand = normalize_brand(record.brand) or extract_brand(record.name)
        image = record.image
        if "mrporter.com" in image or "net-a-porter.com" in image:
            image = upgrade_mrporter(image)
        currency = record.currency or (store.currency if store else "") or "GBP"
        return replace(
            record,
            brand=brand,
            name=self.clean_name(record.name, brand) or record.name,
            image=image,
            currency=currency,
            store=record.store or (store.name if store else "MR PORTER"),
        )
