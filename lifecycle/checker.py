"""
Sale Checker

Re-visits every stored listing and folds the result into the product.

Each product is one unit of work: its listings are fetched in order by a
single worker, and the updated product is written back by the calling
thread as soon as its worker finishes. Stopping the run between products
leaves every stored product consistent.

Usage:
    checker = SaleChecker(config, store, HttpFetcher(config))
    report = checker.run(brand="Jordan", workers=4)
    print(report.summary())
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from services.database.db import CatalogStore
from services.report import BatchReport, ReportItem
from services.scraper.config import CatalogConfig
from services.scraper.fetcher import BaseFetcher, FetchError
from standardization.processor import ProductProcessor
from standardization.schema import Product

from .tracker import CheckOutcome, LifecycleTracker

logger = logging.getLogger(__name__)


class SaleChecker:
    """Recheck driver: fetch, standardize, track, persist."""

    def __init__(
        self,
        config: Optional[CatalogConfig],
        store: CatalogStore,
        fetcher: BaseFetcher,
        processor: Optional[ProductProcessor] = None,
        tracker: Optional[LifecycleTracker] = None,
    ):
        self.config = config or CatalogConfig()
        self.store = store
        self.fetcher = fetcher
        self.processor = processor or ProductProcessor(self.config)
        self.tracker = tracker or LifecycleTracker(
            history_limit=self.config.history_limit,
            failure_threshold=self.config.failure_threshold,
        )

    def check_listing(self, listing) -> CheckOutcome:
        adapter = self.processor.registry.resolve(listing.url)
        try:
            raw = self.fetcher.fetch(listing.url, adapter)
        except FetchError as e:
            return self.tracker.apply_failure(listing, e)

        if not raw.url:
            raw = replace(raw, url=listing.url)
        fresh = self.processor.transform(raw, adapter)
        return self.tracker.apply_check(listing, fresh)

    def check_product(self, product: Product) -> Tuple[Product, List[CheckOutcome]]:
        """
        Check every listing of one product.

        A listing that raises is recorded as a failed check; its siblings
        keep their results.

        Returns:
            (updated product, one outcome per listing)
        """
        outcomes = []
        for listing in product.listings:
            try:
                outcome = self.check_listing(listing)
            except Exception as e:
                logger.error(f"Check of {listing.url} raised {type(e).__name__}: {e}")
                outcome = self.tracker.apply_failure(listing, e)
            outcomes.append(outcome)
        updated = replace(
            product,
            listings=[outcome.listing for outcome in outcomes],
            updated_at=self.tracker.clock().isoformat(),
        )
        return updated, outcomes

    def select(self, product_ids: Optional[Iterable[str]] = None, brand: Optional[str] = None) -> List[Product]:
        if product_ids:
            products = [p for p in (self.store.get(pid) for pid in product_ids) if p is not None]
        else:
            products = self.store.get_all()
        if brand:
            needle = brand.lower()
            products = [p for p in products if needle in (p.brand or "").lower()]
        return products

    def run(
        self,
        product_ids: Optional[Iterable[str]] = None,
        brand: Optional[str] = None,
        workers: int = 1,
    ) -> BatchReport:
        report = BatchReport(kind="check")
        products = self.select(product_ids, brand)
        if not products:
            logger.warning("No products to check")
            return report.finish()

        logger.info(f"Checking {len(products)} products with {workers} worker(s)")

        if workers <= 1:
            for index, product in enumerate(products, 1):
                logger.info(f"[{index}/{len(products)}] {product.brand} - {product.name}")
                try:
                    result = self.check_product(product)
                except Exception as e:
                    self._record_error(report, product, e)
                    continue
                self._persist(report, *result)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {executor.submit(self.check_product, product): product for product in products}
                for future in as_completed(futures):
                    product = futures[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        self._record_error(report, product, e)
                        continue
                    self._persist(report, *result)

        report.finish()
        self.store.record_run(report.kind, report.started_at, report.finished_at, report.to_dict())
        logger.info(f"Check done: {report.status_counts}")
        return report

    def _persist(self, report: BatchReport, product: Product, outcomes: List[CheckOutcome]) -> None:
        self.store.put(product)
        report.updated.append(ReportItem(product.product_id, detail=f"{len(outcomes)} listings"))
        for outcome in outcomes:
            listing = outcome.listing
            report.count_status(outcome.status.value)
            if outcome.dead:
                detail = "; ".join(outcome.changes)
                report.dead.append(ReportItem(product.product_id, listing.url, listing.store, detail))
            if outcome.error:
                report.errors.append(ReportItem(product.product_id, listing.url, listing.store, outcome.error))

    def _record_error(self, report: BatchReport, product: Product, error: Exception) -> None:
        logger.error(f"Failed to check {product.product_id}: {error}")
        report.errors.append(ReportItem(product.product_id, detail=str(error)))
