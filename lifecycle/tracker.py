"""
Listing Lifecycle Tracker

Decides a listing's status after a recheck and keeps its price / size
history.

Status precedence for a successful fetch:
1. page has no usable content     -> ended (link dead)
2. sizes went to zero             -> sold_out
3. sale price changed             -> price_changed
4. otherwise                      -> active (size count changes only logged)

A failed fetch increments the consecutive failure counter: three in a row
end the listing, fewer leave it in error. Any successful check resets it.

Example:
    tracker = LifecycleTracker()
    outcome = tracker.apply_check(listing, fresh_record)
    outcome.listing.status  # ListingStatus.SOLD_OUT
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Optional

from standardization.processor import utc_now
from standardization.schema import (
    ListingStatus,
    NormalizedListing,
    PriceHistoryEntry,
    SizesHistoryEntry,
    StandardRecord,
)

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30
FAILURE_THRESHOLD = 3


@dataclass
class CheckOutcome:
    status: ListingStatus
    listing: NormalizedListing
    changes: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def dead(self) -> bool:
        return self.status == ListingStatus.ENDED


class LifecycleTracker:
    """Pure listing -> listing transitions; nothing is mutated in place."""

    def __init__(
        self,
        history_limit: int = HISTORY_LIMIT,
        failure_threshold: int = FAILURE_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.history_limit = history_limit
        self.failure_threshold = failure_threshold
        self.clock = clock

    def apply_check(self, listing: NormalizedListing, fresh: StandardRecord) -> CheckOutcome:
        """
        Fold a freshly scraped record into a stored listing.

        Args:
            listing: Stored listing
            fresh: Standardized record from the listing's URL

        Returns:
            CheckOutcome with the updated listing
        """
        now = self.clock()
        today = now.date().isoformat()
        changes: List[str] = []

        if not fresh.has_content:
            changes.append("product page gone")
            updated = replace(
                listing,
                status=ListingStatus.ENDED,
                last_checked=now.isoformat(),
                check_fail_count=0,
                link_dead=True,
            )
            logger.warning(f"Listing ended (no content): {listing.url}")
            return CheckOutcome(ListingStatus.ENDED, updated, changes)

        scraped = fresh.listing
        new_sizes = list(scraped.sizes) if scraped else []
        old_count = len(listing.sizes)
        new_sale = scraped.sale_price if scraped else listing.sale_price
        price_known = new_sale.amount > 0

        status = ListingStatus.ACTIVE
        if not new_sizes and (old_count > 0 or listing.status == ListingStatus.SOLD_OUT):
            status = ListingStatus.SOLD_OUT
            if old_count:
                changes.append(f"all sizes sold out (was {old_count})")
        elif price_known and listing.sale_price.amount > 0 and new_sale.amount != listing.sale_price.amount:
            status = ListingStatus.PRICE_CHANGED
            direction = "dropped" if new_sale.amount < listing.sale_price.amount else "increased"
            changes.append(f"price {direction}: {listing.sale_price.amount} -> {new_sale.amount}")

        if status != ListingStatus.SOLD_OUT and len(new_sizes) != old_count:
            verb = "restocked" if len(new_sizes) > old_count else "reduced"
            changes.append(f"sizes {verb}: {old_count} -> {len(new_sizes)}")

        if price_known:
            retail, sale, discount = scraped.retail_price, scraped.sale_price, scraped.discount
        else:
            # Unparseable price keeps the last known one
            retail, sale, discount = listing.retail_price, listing.sale_price, listing.discount

        price_history = self._append_price(listing.price_history, today, sale.amount, retail.amount)
        total = fresh.total_sizes or max(len(new_sizes), old_count)
        sizes_history = self._append_sizes(listing.sizes_history, today, len(new_sizes), total)

        updated = replace(
            listing,
            retail_price=retail,
            sale_price=sale,
            discount=discount,
            sizes=new_sizes,
            available=bool(new_sizes),
            last_scraped=now.isoformat(),
            status=status,
            last_checked=now.isoformat(),
            price_history=price_history,
            sizes_history=sizes_history,
            check_fail_count=0,
            link_dead=False,
        )

        for change in changes:
            logger.info(f"{listing.store}: {change}")
        return CheckOutcome(status, updated, changes)

    def apply_failure(self, listing: NormalizedListing, error) -> CheckOutcome:
        """Record a failed fetch; the listing ends at the failure threshold."""
        now = self.clock().isoformat()
        count = listing.check_fail_count + 1
        message = str(error)

        if count >= self.failure_threshold:
            logger.warning(f"Listing ended after {count} failed checks: {listing.url}")
            updated = replace(
                listing,
                status=ListingStatus.ENDED,
                last_checked=now,
                check_fail_count=count,
                link_dead=True,
            )
            return CheckOutcome(ListingStatus.ENDED, updated, [f"{count} check failures"], message)

        logger.debug(f"Check failed ({count}/{self.failure_threshold}) for {listing.url}: {message}")
        updated = replace(
            listing,
            status=ListingStatus.ERROR,
            last_checked=now,
            check_fail_count=count,
        )
        return CheckOutcome(ListingStatus.ERROR, updated, [f"check failed: {message}"], message)

    def _append_price(self, history, date: str, sale: float, retail: float) -> List[PriceHistoryEntry]:
        history = list(history)
        last = history[-1] if history else None
        if sale > 0 and (last is None or last.date != date or last.sale_price != sale or last.retail_price != retail):
            history.append(PriceHistoryEntry(date=date, sale_price=sale, retail_price=retail))
        return history[-self.history_limit:]

    def _append_sizes(self, history, date: str, available: int, total: int) -> List[SizesHistoryEntry]:
        history = list(history)
        last = history[-1] if history else None
        if last is None or last.date != date or last.available != available:
            history.append(SizesHistoryEntry(date=date, available=available, total=total))
        return history[-self.history_limit:]
