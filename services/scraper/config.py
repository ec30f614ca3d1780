"""
Catalog Configuration

Central configuration for the normalization and lifecycle pipeline:
paths, lifecycle limits, HTTP behaviour and per-store settings.

A CatalogConfig is built once per run (defaults, or load_config(path) for a
JSON file) and passed to every pipeline object that needs it.

Store JSON format:
    {
      "stores": {
        "_default": {"currency": "EUR", "scrape_method": "browser"},
        "footlocker.nl": {"name": "Foot Locker", "currency": "EUR", "size_system": "eu"},
        "footlocker.be": {"_inherit": "footlocker.nl", "name": "Foot Locker BE"}
      },
      "history_limit": 30
    }
"""

import json
import logging
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from standardization.size_normalizer import SizeSystem

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a config file is missing or malformed."""


@dataclass
class TimeoutConfig:
    """Timeout settings for page fetches"""
    connect: float = 10.0
    read: float = 30.0


@dataclass
class RetryConfig:
    """Retry settings"""
    max_attempts: int = 3
    base_delay: float = 2.0
    max_delay: float = 30.0
    jitter: str = "full"  # "full", "equal", "decorrelated", "none"

    # Status codes that trigger retry
    retryable_codes: Tuple[int, ...] = (500, 502, 503, 504)


@dataclass
class StoreConfig:
    """Settings for one store domain"""
    domain: str
    name: str
    slug: str
    currency: str = "EUR"
    country: str = "Unknown"
    flag: str = "🌐"
    scrape_method: str = "browser"  # "browser" | "patchright" | "http"
    size_system: SizeSystem = SizeSystem.UNKNOWN


@dataclass
class CatalogConfig:
    """Main pipeline configuration"""
    # Paths
    data_dir: Path = Path("./data")
    db_path: Path = Path("./data/catalog.db")
    export_dir: Path = Path("./data/export")

    # Lifecycle
    history_limit: int = 30
    failure_threshold: int = 3
    description_limit: int = 300

    # Recheck batches
    workers: int = 1
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Per-domain settings, "_default" applies to unknown domains
    stores: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def __post_init__(self):
        if not self.stores:
            self.stores = {key: dict(value) for key, value in DEFAULT_STORES.items()}

    def store_for(self, domain_or_url: str) -> StoreConfig:
        """
        Resolve store settings for a domain (or product URL).

        Lookup: exact domain, then same base domain (footlocker.be ->
        footlocker.nl), then "_default" with name/currency derived from
        the domain itself.
        """
        domain = extract_domain(domain_or_url)

        if domain in self.stores:
            return self._build(domain, self._resolve(domain))

        base = base_domain(domain)
        if base:
            for key in self.stores:
                if key != "_default" and key.startswith(base + "."):
                    return self._build(key, self._resolve(key))

        settings = dict(self.stores.get("_default", {}))
        name = base.capitalize() if base else "Unknown"
        settings.setdefault("name", name)
        settings["currency"] = detect_currency(domain)
        return self._build(domain, settings)

    def _resolve(self, key: str) -> Dict[str, Any]:
        settings = dict(self.stores[key])
        parent = settings.pop("_inherit", None)
        if parent:
            if parent not in self.stores:
                raise ConfigError(f"Store {key!r} inherits unknown store {parent!r}")
            merged = dict(self._resolve(parent))
            merged.update(settings)
            settings = merged
        return settings

    def _build(self, domain: str, settings: Dict[str, Any]) -> StoreConfig:
        name = settings.get("name") or domain
        return StoreConfig(
            domain=domain,
            name=name,
            slug=settings.get("slug") or store_slug(name),
            currency=settings.get("currency") or detect_currency(domain),
            country=settings.get("country", "Unknown"),
            flag=settings.get("flag", "🌐"),
            scrape_method=settings.get("scrape_method", "browser"),
            size_system=SizeSystem(settings.get("size_system") or SizeSystem.UNKNOWN.value),
        )


DEFAULT_STORES: Dict[str, Dict[str, Any]] = {
    "_default": {"scrape_method": "browser"},
    "endclothing.com": {
        "name": "END. Clothing", "flag": "🇬🇧", "country": "UK", "currency": "GBP",
        "scrape_method": "browser", "size_system": "prefixed",
    },
    "sneakersnstuff.com": {
        "name": "SNS", "flag": "🇸🇪", "country": "Sweden", "currency": "EUR",
        "scrape_method": "browser", "size_system": "us",
    },
    "footlocker.nl": {
        "name": "Foot Locker", "flag": "🇪🇺", "country": "Netherlands", "currency": "EUR",
        "scrape_method": "patchright", "size_system": "eu",
    },
    "footlocker.co.uk": {
        "_inherit": "footlocker.nl", "name": "Foot Locker UK", "flag": "🇬🇧",
        "country": "UK", "currency": "GBP",
    },
    "footlocker.com": {
        "_inherit": "footlocker.nl", "name": "Foot Locker US", "flag": "🇺🇸",
        "country": "US", "currency": "USD", "size_system": "us",
    },
    "footlocker.de": {"_inherit": "footlocker.nl", "name": "Foot Locker DE", "flag": "🇩🇪", "country": "Germany"},
    "footlocker.fr": {"_inherit": "footlocker.nl", "name": "Foot Locker FR", "flag": "🇫🇷", "country": "France"},
    "mrporter.com": {
        "name": "MR PORTER", "flag": "🇬🇧", "country": "UK", "currency": "GBP",
        "scrape_method": "patchright", "size_system": "prefixed",
    },
    "net-a-porter.com": {"_inherit": "mrporter.com", "name": "NET-A-PORTER"},
    "nike.com": {
        "name": "Nike", "flag": "🇺🇸", "country": "US", "currency": "USD",
        "scrape_method": "browser", "size_system": "us",
    },
    "adidas.com": {
        "name": "adidas", "flag": "🇩🇪", "country": "Germany", "currency": "EUR",
        "scrape_method": "browser", "size_system": "prefixed",
    },
    "newbalance.com": {
        "name": "New Balance", "flag": "🇺🇸", "country": "US", "currency": "USD",
        "scrape_method": "browser", "size_system": "us",
    },
}


def extract_domain(url_or_domain: str) -> str:
    """'https://www.footlocker.nl/nl/p/x.html' -> 'footlocker.nl'"""
    text = (url_or_domain or "").strip().lower()
    if "://" in text:
        text = urlparse(text).netloc
    text = text.split("/")[0].split(":")[0]
    return text[4:] if text.startswith("www.") else text


def base_domain(domain: str) -> str:
    """Registrable label: 'footlocker.co.uk' -> 'footlocker', 'endclothing.com' -> 'endclothing'."""
    parts = [p for p in domain.split(".") if p]
    if len(parts) >= 3 and parts[-2] in ("co", "com", "org") and len(parts[-1]) == 2:
        parts = parts[:-1]
    if len(parts) >= 2:
        return parts[-2]
    return parts[0] if parts else ""


def detect_currency(domain: str) -> str:
    """Currency guessed from the TLD."""
    if domain.endswith(".co.uk") or domain.endswith(".uk"):
        return "GBP"
    if domain.endswith(".com") or domain.endswith(".us"):
        return "USD"
    return "EUR"


def store_slug(name: str) -> str:
    """'END. Clothing' -> 'end-clothing', 'MR PORTER' -> 'mr-porter'"""
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


def load_config(path: Optional[str] = None, **overrides) -> CatalogConfig:
    """
    Build a CatalogConfig from an optional JSON file plus keyword overrides.

    Store entries in the file are layered over the built-in store map.
    """
    data: Dict[str, Any] = {}
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid config JSON in {config_path}: {e}") from e
        logger.info(f"Loaded config from {config_path}")

    known = {f.name for f in fields(CatalogConfig)}
    values: Dict[str, Any] = {}
    for key, value in {**data, **overrides}.items():
        if key not in known or value is None:
            continue
        if key in ("data_dir", "db_path", "export_dir"):
            value = Path(value)
        elif key == "timeouts":
            value = TimeoutConfig(**value)
        elif key == "retry":
            value = RetryConfig(**value)
        values[key] = value

    stores = {key: dict(value) for key, value in DEFAULT_STORES.items()}
    stores.update(values.pop("stores", {}))
    config = CatalogConfig(stores=stores, **values)

    if "data_dir" in values and "db_path" not in values:
        config = replace(config, db_path=config.data_dir / "catalog.db")
    if "data_dir" in values and "export_dir" not in values:
        config = replace(config, export_dir=config.data_dir / "export")
    return config
