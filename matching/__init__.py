"""
Catalog Matching Module

Identity resolution, merging and batch ingest.
"""

from .identity import (
    IdentityKey,
    derive_identity,
    extract_sku_from_url,
    find_duplicate,
    group_records,
    is_duplicate,
    normalize_url,
)
from .merge import MergeEngine, score_record
from .pipeline import CatalogMerger, InputFileError, load_raw_records, run_merge_pipeline

__all__ = [
    'IdentityKey',
    'derive_identity',
    'extract_sku_from_url',
    'find_duplicate',
    'group_records',
    'is_duplicate',
    'normalize_url',
    'MergeEngine',
    'score_record',
    'CatalogMerger',
    'InputFileError',
    'load_raw_records',
    'run_merge_pipeline',
]
