"""
Store Adapter Base

Each store gets an adapter: a bundle of optional store-specific behaviours
layered over the generic pipeline.

Capabilities (override any subset):
- clean_name(name, brand): store-specific name cleanup
- extract_fallback(soup): read fields straight from the DOM when the
  structured data is incomplete
- post_process(record, store): final per-store fixes on the RawRecord

The registry picks an adapter for a domain with an explicit resolution
order: exact domain, then base-domain token, then the generic adapter.

Example:
    registry = build_registry()
    adapter = registry.resolve("www.footlocker.de")   # FootLockerAdapter
    record = adapter.post_process(raw, store_config)
"""

import logging
from abc import ABC
from dataclasses import replace
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from bs4 import BeautifulSoup

from services.scraper.config import StoreConfig, base_domain, extract_domain
from standardization.brand_extractor import extract_brand, normalize_brand
from standardization.image_urls import upgrade_image_url
from standardization.name_normalizer import clean_name, extract_style_code
from standardization.schema import RawRecord
from standardization.size_normalizer import SizeSystem

logger = logging.getLogger(__name__)

CAPABILITIES = ("clean_name", "extract_fallback", "post_process")


class BaseAdapter(ABC):
    """
    Generic behaviour shared by all stores. Subclasses set `name` and
    `domains` and override the capabilities they need.
    """

    name: str = "base"
    domains: Tuple[str, ...] = ()
    size_system: SizeSystem = SizeSystem.UNKNOWN

    @property
    def capabilities(self) -> FrozenSet[str]:
        """Capabilities this adapter overrides."""
        overridden = set()
        for capability in CAPABILITIES:
            if getattr(type(self), capability) is not getattr(BaseAdapter, capability):
                overridden.add(capability)
        return frozenset(overridden)

    def clean_name(self, name: str, brand: str = "") -> str:
        return clean_name(name, brand)

    def extract_fallback(self, soup: BeautifulSoup) -> Dict[str, Any]:
        """Fields read from the page DOM; empty when the store has no fallback."""
        return {}

    def post_process(self, record: RawRecord, store: Optional[StoreConfig] = None) -> RawRecord:
        """
        Generic cleanup: brand detection/casing, name cleanup, best image,
        currency default from the store.
        """
        brand = normalize_brand(record.brand) or extract_brand(record.name)
        return replace(
            record,
            brand=brand,
            style_code=record.style_code.strip() or extract_style_code(record.name),
            name=self.clean_name(record.name, brand),
            image=upgrade_image_url(record.image),
            currency=record.currency or (store.currency if store else ""),
            store=record.store or (store.name if store else ""),
        )

    def matches_exact(self, domain: str) -> bool:
        return domain in self.domains

    def matches_base(self, domain: str) -> bool:
        return any(base_domain(d) in domain for d in self.domains)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class GenericAdapter(BaseAdapter):
    """Stores without custom handling: brand/category/tags from the name only."""

    name = "generic"


class AdapterRegistry:
    """
    Ordered collection of adapters with deterministic domain resolution.
    """

    def __init__(self, adapters: Optional[List[BaseAdapter]] = None, fallback: Optional[BaseAdapter] = None):
        self._adapters: List[BaseAdapter] = list(adapters or [])
        self.fallback = fallback or GenericAdapter()

    def register(self, adapter: BaseAdapter) -> None:
        self._adapters.append(adapter)

    @property
    def adapters(self) -> List[BaseAdapter]:
        return list(self._adapters)

    def resolve(self, domain_or_url: str) -> BaseAdapter:
        """
        Adapter for a domain or URL.

        Exact domain match first, then the first adapter whose base-domain
        token ("footlocker") appears in the domain, then the generic one.
        """
        domain = extract_domain(domain_or_url)
        if not domain:
            return self.fallback

        for adapter in self._adapters:
            if adapter.matches_exact(domain):
                return adapter

        for adapter in self._adapters:
            if adapter.matches_base(domain):
                logger.debug(f"Adapter {adapter.name} matched {domain} by base domain")
                return adapter

        return self.fallback


def build_registry() -> AdapterRegistry:
    """Registry with every built-in store adapter."""
    from .end import EndAdapter
    from .footlocker import FootLockerAdapter
    from .mrporter import MrPorterAdapter
    from .sns import SnsAdapter

    return AdapterRegistry([
        SnsAdapter(),
        EndAdapter(),
        FootLockerAdapter(),
        MrPorterAdapter(),
    ])
