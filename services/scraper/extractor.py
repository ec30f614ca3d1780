"""
Structured Data Extraction

Builds a RawRecord from a product page: schema.org JSON-LD first
(ProductGroup with variants, or Product with offers), meta tags for
whatever is still missing, then the store adapter's DOM fallback.

Example:
    soup = BeautifulSoup(html, "html.parser")
    record = extract_record(soup, url, adapter)
"""

import json
import logging
import re
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

from standardization.schema import RawRecord

logger = logging.getLogger(__name__)

VARIANT_SIZE_SUFFIX = re.compile(r"\s*-\s*(XXS|XS|S|M|L|XL|XXL|\d{1,2}(\.5)?)\s*$", re.IGNORECASE)


def _types(node: Dict[str, Any]) -> List[str]:
    value = node.get("@type")
    return value if isinstance(value, list) else [value]


def iter_json_ld(soup: BeautifulSoup) -> Iterator[Dict[str, Any]]:
    """Every JSON-LD object on the page, @graph members flattened."""
    for tag in soup.find_all("script", type=lambda t: t and "ld+json" in t):
        try:
            data = json.loads(tag.string or tag.get_text() or "{}")
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping malformed JSON-LD block")
            continue
        nodes = data if isinstance(data, list) else [data]
        for node in nodes:
            if not isinstance(node, dict):
                continue
            if isinstance(node.get("@graph"), list):
                for member in node["@graph"]:
                    if isinstance(member, dict):
                        yield member
            else:
                yield node


def _first_image(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else ""
    if isinstance(value, dict):
        return value.get("url") or value.get("contentUrl") or ""
    return value or ""


def _brand_name(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("name") or ""
    return value or ""


def _in_stock(offer: Dict[str, Any]) -> bool:
    return "InStock" in str(offer.get("availability") or "")


def _offers(node: Dict[str, Any]) -> List[Dict[str, Any]]:
    offers = node.get("offers") or []
    if isinstance(offers, dict):
        offers = [offers]
    return [o for o in offers if isinstance(o, dict)]


def _variant_size(variant: Dict[str, Any]) -> str:
    name = variant.get("name") or ""
    match = re.search(r"\s-\s(.+)$", name)
    if match:
        return match.group(1).strip()
    if variant.get("size"):
        return str(variant["size"])
    sku = variant.get("sku") or ""
    return sku.split("-")[-1] if sku else ""


def _apply_offer_prices(fields: Dict[str, Any], offer: Dict[str, Any]) -> None:
    specs = offer.get("priceSpecification")
    if isinstance(specs, dict):
        specs = [specs]
    if specs:
        for spec in specs:
            if spec.get("priceCurrency"):
                fields["currency"] = spec["priceCurrency"]
            if "StrikethroughPrice" in str(spec.get("priceType") or ""):
                fields["retail_price"] = str(spec.get("price", ""))
            elif not spec.get("priceType"):
                fields["sale_price"] = str(spec.get("price", ""))
    elif offer.get("price") is not None or offer.get("lowPrice") is not None:
        price = offer.get("price") if offer.get("price") is not None else offer.get("lowPrice")
        fields["sale_price"] = str(price)
        if offer.get("priceCurrency"):
            fields["currency"] = offer["priceCurrency"]


def parse_product_group(node: Dict[str, Any]) -> Dict[str, Any]:
    """Fields from a ProductGroup (SNS, MR PORTER): one variant per size."""
    variants = [v for v in node.get("hasVariant") or [] if isinstance(v, dict)]
    first = variants[0] if variants else {}
    fields: Dict[str, Any] = {
        "name": VARIANT_SIZE_SUFFIX.sub("", first.get("name") or node.get("name") or "").strip(),
        "brand": _brand_name(node.get("brand")),
        "style_code": node.get("productGroupID") or node.get("productGroupId") or "",
        "description": node.get("description") or "",
        "image": _first_image(first.get("image") or node.get("image")),
    }
    color = first.get("color") or node.get("color") or ""
    if color:
        fields["colorway"] = color[:1].upper() + color[1:]

    in_stock = [v for v in variants if any(_in_stock(o) for o in _offers(v))]
    fields["sizes"] = [s for s in (_variant_size(v) for v in in_stock) if s]
    fields["total_sizes"] = len(variants)

    if not fields["style_code"] and first.get("sku"):
        match = re.match(r"^(.+)-\d+(\.5)?$", first["sku"])
        if match:
            fields["style_code"] = match.group(1)

    price_variant = in_stock[0] if in_stock else first
    for offer in _offers(price_variant)[:1]:
        _apply_offer_prices(fields, offer)
    return fields


def parse_product(node: Dict[str, Any]) -> Dict[str, Any]:
    """Fields from a Product node (END., Foot Locker, most stores)."""
    fields: Dict[str, Any] = {
        "name": node.get("name") or "",
        "brand": _brand_name(node.get("brand")),
        "style_code": node.get("sku") or node.get("mpn") or "",
        "description": node.get("description") or "",
        "image": _first_image(node.get("image")),
        "colorway": node.get("color") or "",
    }
    offers = _offers(node)
    if offers:
        _apply_offer_prices(fields, offers[0])
    if len(offers) > 1:
        fields["total_sizes"] = len(offers)
        sizes = []
        for offer in offers:
            size = (offer.get("sku") or "").split("-")[-1]
            if _in_stock(offer) and size:
                sizes.append(size)
        if sizes:
            fields["sizes"] = sizes
    return fields


def extract_structured(soup: BeautifulSoup) -> Dict[str, Any]:
    """JSON-LD fields; a ProductGroup wins over a plain Product."""
    product_fields: Dict[str, Any] = {}
    for node in iter_json_ld(soup):
        types = _types(node)
        if "ProductGroup" in types and node.get("hasVariant"):
            return parse_product_group(node)
        if "Product" in types and not product_fields:
            product_fields = parse_product(node)
    return product_fields


def extract_meta(soup: BeautifulSoup) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    h1 = soup.find("h1")
    if h1:
        fields["name"] = h1.get_text(" ", strip=True)
    og_image = soup.find("meta", attrs={"property": "og:image"})
    if og_image and og_image.get("content"):
        fields["image"] = og_image["content"]
    description = soup.find("meta", attrs={"name": "description"})
    if description and description.get("content"):
        fields["description"] = description["content"]
    return fields


def merge_fields(record: RawRecord, fields: Dict[str, Any], overwrite: bool = False) -> RawRecord:
    """Fill `record` from `fields`; existing values win unless `overwrite`."""
    updates = {}
    for key, value in fields.items():
        if key not in RawRecord.__dataclass_fields__ or value in (None, "", []):
            continue
        if overwrite or not getattr(record, key):
            updates[key] = value
    return replace(record, **updates) if updates else record


def extract_record(soup: BeautifulSoup, url: str, adapter=None, store_name: str = "") -> RawRecord:
    """
    Build a RawRecord from a parsed page.

    The adapter DOM fallback only fills fields the structured data left
    empty (retail prices and size lists, mostly).
    """
    record = RawRecord(url=url, store=store_name)
    record = merge_fields(record, extract_structured(soup))
    record = merge_fields(record, extract_meta(soup))

    if adapter is not None and "extract_fallback" in adapter.capabilities:
        fallback = adapter.extract_fallback(soup)
        if fallback:
            logger.debug(f"{adapter.name} DOM fallback filled {sorted(k for k, v in fallback.items() if v)}")
        record = merge_fields(record, fallback)
    return record
