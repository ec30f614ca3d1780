"""
Catalog Ingest Pipeline

Turns a batch of scraped records into stored Products.

Phases:
1. Standardize: adapter cleanup + size/price/tag normalization per record
2. Group: URL / SKU / style-code matching, then identity keys
3. Merge: one Product per group, folded into the stored product if any
4. Persist: one product at a time

A record that fails in any phase is logged and reported; the batch goes on.
Only an unreadable input file stops the run (InputFileError).
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from services.database.db import CatalogStore
from services.report import BatchReport, ReportItem
from standardization.processor import ProductProcessor
from standardization.schema import RawRecord, StandardRecord

from .identity import group_records
from .merge import MergeEngine

logger = logging.getLogger(__name__)


class InputFileError(Exception):
    """The batch input file is missing or not valid JSON."""


def load_raw_records(path: Union[str, Path]) -> List[RawRecord]:
    """
    Read raw records from a JSON file: either a list of records or an
    object with a "picks" / "records" list.
    """
    path = Path(path)
    if not path.exists():
        raise InputFileError(f"Input file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InputFileError(f"Corrupt input file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("picks") or data.get("records") or []
    if not isinstance(data, list):
        raise InputFileError(f"Expected a list of records in {path}")

    records = []
    for item in data:
        if isinstance(item, dict):
            records.append(RawRecord.from_dict(item))
        else:
            logger.warning(f"Skipping non-object entry in {path}: {item!r}")
    return records


class CatalogMerger:
    """
    Batch ingest: raw records in, merged products stored, report out.
    """

    def __init__(
        self,
        store: CatalogStore,
        processor: Optional[ProductProcessor] = None,
        engine: Optional[MergeEngine] = None,
    ):
        self.store = store
        self.processor = processor or ProductProcessor()
        self.engine = engine or MergeEngine(
            description_limit=self.processor.config.description_limit,
        )

    def run(self, raw_records: Iterable[Union[RawRecord, Dict[str, Any]]]) -> BatchReport:
        report = BatchReport(kind="ingest")

        # Phase 1: standardize
        standardized: List[StandardRecord] = []
        for raw in raw_records:
            if isinstance(raw, dict):
                raw = RawRecord.from_dict(raw)
            try:
                record = self.processor.transform(raw)
            except Exception as e:
                logger.error(f"Failed to standardize {raw.url or raw.name!r}: {e}")
                report.errors.append(ReportItem("", raw.url, raw.store, str(e)))
                continue
            if not record.has_content:
                logger.warning(f"Skipping record without name, style code or price: {raw.url}")
                report.errors.append(ReportItem("", raw.url, raw.store, "no usable content"))
                continue
            standardized.append(record)

        # Phase 2: group against the stored catalog
        existing = {product.product_id: product for product in self.store.get_all()}
        groups = group_records(standardized, existing)
        logger.info(f"{len(standardized)} records -> {len(groups)} products")

        # Phase 3 + 4: merge and persist
        for product_id, members in groups.items():
            stored = existing.get(product_id)
            try:
                product = self.engine.merge(product_id, members, existing=stored)
                self.store.put(product)
            except Exception as e:
                logger.error(f"Failed to merge {product_id}: {e}")
                report.errors.append(ReportItem(product_id, members[0].url, "", str(e)))
                continue

            existing[product.product_id] = product
            target = report.updated if stored else report.created
            target.append(ReportItem(product.product_id, detail=f"{len(product.listings)} listings"))
            for member in members:
                listing = member.listing
                store_slug = listing.store if listing else ""
                if "price_unparsed" in member.issues:
                    report.price_parse_failures.append(ReportItem(product.product_id, member.url, store_slug))
                if "image_missing" in member.issues:
                    report.image_failures.append(ReportItem(product.product_id, member.url, store_slug))

        report.finish()
        self.store.record_run(report.kind, report.started_at, report.finished_at, report.to_dict())
        logger.info(
            f"Ingest done: {len(report.created)} created, {len(report.updated)} updated, "
            f"{len(report.errors)} errors"
        )
        return report


def run_merge_pipeline(
    input_path: Union[str, Path],
    store: CatalogStore,
    processor: Optional[ProductProcessor] = None,
) -> BatchReport:
    """Load a records file and ingest it."""
    records = load_raw_records(input_path)
    logger.info(f"Loaded {len(records)} records from {input_path}")
    return CatalogMerger(store, processor=processor).run(records)
