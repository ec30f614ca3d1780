# Database module
from .db import Database, CatalogStore, DEFAULT_DB_PATH
from .models import CatalogIndex, IndexEntry, build_catalog_index
from .export_json import export_catalog, rebuild_index

__all__ = [
    'Database',
    'CatalogStore',
    'DEFAULT_DB_PATH',
    'CatalogIndex',
    'IndexEntry',
    'build_catalog_index',
    'export_catalog',
    'rebuild_index',
]
