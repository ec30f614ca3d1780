"""
Batch Reports

Every ingest or recheck run produces a BatchReport. Dead listings and
failed price / image parses are listed apart from the listings that simply
updated, so they can be reviewed by hand.
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class ReportItem:
    product_id: str
    url: str = ""
    store: str = ""
    detail: str = ""


@dataclass
class BatchReport:
    """Outcome of one batch run."""
    kind: str  # "ingest" | "check"
    started_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    finished_at: Optional[str] = None

    created: List[ReportItem] = field(default_factory=list)
    updated: List[ReportItem] = field(default_factory=list)
    dead: List[ReportItem] = field(default_factory=list)
    price_parse_failures: List[ReportItem] = field(default_factory=list)
    image_failures: List[ReportItem] = field(default_factory=list)
    errors: List[ReportItem] = field(default_factory=list)

    # listing status -> count (check runs)
    status_counts: Dict[str, int] = field(default_factory=dict)

    def count_status(self, status: str) -> None:
        self.status_counts[status] = self.status_counts.get(status, 0) + 1

    def finish(self) -> "BatchReport":
        self.finished_at = datetime.now(timezone.utc).isoformat()
        return self

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    def summary(self) -> str:
        lines = [
            "=" * 50,
            f"{self.kind.upper()} REPORT",
            "=" * 50,
            f"Created:          {len(self.created)}",
            f"Updated:          {len(self.updated)}",
            f"Dead listings:    {len(self.dead)}",
            f"Price failures:   {len(self.price_parse_failures)}",
            f"Image failures:   {len(self.image_failures)}",
            f"Errors:           {len(self.errors)}",
        ]
        for status, count in sorted(self.status_counts.items()):
            lines.append(f"  {status:<15} {count}")
        for title, items in (("DEAD", self.dead), ("ERRORS", self.errors)):
            if items:
                lines.append(f"\n{title}:")
                for item in items:
                    lines.append(f"  {item.product_id} [{item.store}] {item.url} {item.detail}".rstrip())
        return "\n".join(lines)
