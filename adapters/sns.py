"""
Sneakersnstuff (SNS) adapter

SNS names end in the style code: "Puma Speedcat OG - 398846-56". The code
is lifted into `style_code` and removed from the display name. Sizes are
US.
"""

import re
from dataclasses import replace
from typing import Optional

from services.scraper.config import StoreConfig
from standardization.name_normalizer import strip_html
from standardization.schema import RawRecord
from standardization.size_normalizer import SizeSystem

from .base import BaseAdapter

STYLE_CODE = re.compile(r"\s-\s([A-Za-z0-9][-A-Za-z0-9]+)$")


def extract_sns_style_code(name: str) -> str:
    match = STYLE_CODE.search((name or "").strip())
    return match.group(1) if match else ""


class SnsAdapter(BaseAdapter):
    name = "sns"
    domains = ("sneakersnstuff.com",)
    size_system = SizeSystem.US

    def clean_name(self, name: str, brand: str = "") -> str:
        return STYLE_CODE.sub("", strip_html(name)).strip()

    def post_process(self, record: RawRecord, store: Optional[StoreConfig] = None) -> RawRecord:
        style_code = record.style_code or extract_sns_style_code(record.name)
        record = super().post_process(record, store)
        return replace(
            record,
            style_code=style_code or record.style_code,
            currency=record.currency or "EUR",
        )
