#!/usr/bin/env python3
"""
Fashion Catalog - Product Normalization & Lifecycle Pipeline

Usage:
    python3 main.py ingest data/picks.json
    python3 main.py check
    python3 main.py check --brand Jordan --workers 4
    python3 main.py check --id nike-dunk-low-dd1391-100
    python3 main.py index --output data/export/index.json
    python3 main.py export data/export
"""

import argparse
import logging
import sys
from pathlib import Path

from lifecycle import SaleChecker
from matching.pipeline import InputFileError, run_merge_pipeline
from services.database.db import CatalogStore
from services.database.export_json import export_catalog, rebuild_index
from services.scraper.config import ConfigError, load_config
from services.scraper.fetcher import HttpFetcher
from standardization.processor import ProductProcessor

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


def cmd_ingest(args, config, store):
    """Merge a records file into the catalog."""
    report = run_merge_pipeline(args.input, store, processor=ProductProcessor(config))
    print(report.summary())
    return 0


def cmd_check(args, config, store):
    """Recheck stored listings."""
    checker = SaleChecker(config, store, HttpFetcher(config))
    report = checker.run(
        product_ids=args.id or None,
        brand=args.brand,
        workers=args.workers or config.workers,
    )
    print(report.summary())
    return 0


def cmd_index(args, config, store):
    """Rebuild index.json."""
    output = Path(args.output) if args.output else config.export_dir / "index.json"
    index = rebuild_index(store, output)
    print(f"Index: {index.total_products} products -> {output}")
    return 0


def cmd_export(args, config, store):
    """Write product files and index.json."""
    out_dir = Path(args.out_dir) if args.out_dir else config.export_dir
    count = export_catalog(store, out_dir)
    print(f"Exported {count} products -> {out_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Fashion catalog pipeline')
    parser.add_argument('--db', help='SQLite catalog path (default: from config)')
    parser.add_argument('--config', help='JSON config file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    ingest = sub.add_parser('ingest', help='Standardize and merge scraped records')
    ingest.add_argument('input', help='Records JSON file')
    ingest.set_defaults(func=cmd_ingest)

    check = sub.add_parser('check', help='Recheck listings for price / size / availability changes')
    check.add_argument('--id', action='append', help='Only this product (repeatable)')
    check.add_argument('--brand', help='Only products whose brand contains this text')
    check.add_argument('--workers', type=int, default=0, help='Parallel products (default: from config)')
    check.set_defaults(func=cmd_check)

    index = sub.add_parser('index', help='Rebuild the catalog index')
    index.add_argument('--output', help='index.json path')
    index.set_defaults(func=cmd_index)

    export = sub.add_parser('export', help='Export product JSON files and the index')
    export.add_argument('out_dir', nargs='?', help='Output directory')
    export.set_defaults(func=cmd_export)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config, db_path=args.db)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    store = CatalogStore.open(str(config.db_path))
    try:
        return args.func(args, config, store)
    except InputFileError as e:
        logger.error(str(e))
        return 1
    finally:
        store.close()


if __name__ == '__main__':
    sys.exit(main())
