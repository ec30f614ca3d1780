"""
Export the catalog to JSON for frontend consumption.

Writes:
    <out>/products/<productId>.json   one file per product
    <out>/index.json                  the catalog index
"""

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Optional

from .db import CatalogStore
from .models import CatalogIndex, build_catalog_index

logger = logging.getLogger(__name__)


def safe_filename(product_id: str) -> str:
    """File-system safe name; rewritten ids get a hash suffix so they stay distinct."""
    name = re.sub(r"[^\w.-]+", "-", product_id).strip("-")
    if name and name == product_id:
        return name
    digest = hashlib.sha1(product_id.encode("utf-8")).hexdigest()[:8]
    return f"{name or 'product'}-{digest}"


def write_index(index: CatalogIndex, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(index.model_dump(by_alias=True), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    return path


def rebuild_index(store: CatalogStore, output: Path, generated_at: Optional[str] = None) -> CatalogIndex:
    """Rebuild index.json from every stored product."""
    index = build_catalog_index(store.get_all(), generated_at=generated_at)
    write_index(index, Path(output))
    logger.info(f"Index rebuilt: {index.total_products} products -> {output}")
    return index


def export_catalog(store: CatalogStore, out_dir: Path) -> int:
    """
    Write every product file plus index.json.

    Returns:
        Number of products exported
    """
    out_dir = Path(out_dir)
    products_dir = out_dir / "products"
    products_dir.mkdir(parents=True, exist_ok=True)

    products = store.get_all()
    for product in products:
        path = products_dir / f"{safe_filename(product.product_id)}.json"
        path.write_text(json.dumps(product.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")

    write_index(build_catalog_index(products), out_dir / "index.json")
    logger.info(f"Exported {len(products)} products to {out_dir}")
    return len(products)
