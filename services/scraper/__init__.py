# Page fetching and store configuration
from .config import CatalogConfig, ConfigError, StoreConfig, load_config
from .fetcher import BaseFetcher, FetchError, HttpFetcher

__all__ = [
    'CatalogConfig',
    'ConfigError',
    'StoreConfig',
    'load_config',
    'BaseFetcher',
    'FetchError',
    'HttpFetcher',
]
