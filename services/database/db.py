"""
Database Connection and Catalog Storage

SQLite holds one JSON document per Product, keyed by productId, plus a log
of batch runs. The catalog index is always rebuilt from these documents.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from standardization.schema import Product

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("./data/catalog.db")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS products (
    product_id  TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    brand       TEXT,
    category    TEXT,
    payload     TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_brand ON products(brand);

CREATE TABLE IF NOT EXISTS runs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    kind        TEXT NOT NULL,
    started_at  TEXT NOT NULL,
    finished_at TEXT,
    report      TEXT
);
"""


class Database:
    """
    SQLite database wrapper with a lazily opened connection.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                timeout=30.0
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA journal_mode = WAL")
        return self._connection

    def close(self):
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    @contextmanager
    def transaction(self):
        """Context manager for transactions."""
        conn = self.connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.connect().execute(query, params)

    def fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return self.execute(query, params).fetchone()

    def fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        return self.execute(query, params).fetchall()

    def init_schema(self):
        """Create tables if missing."""
        conn = self.connect()
        conn.executescript(SCHEMA_SQL)
        conn.commit()
        logger.debug(f"Database schema initialized: {self.db_path}")

    def get_table_counts(self) -> Dict[str, int]:
        counts = {}
        for table in ("products", "runs"):
            try:
                result = self.fetchone(f"SELECT COUNT(*) AS cnt FROM {table}")
                counts[table] = result["cnt"] if result else 0
            except sqlite3.OperationalError:
                counts[table] = 0
        return counts


class CatalogStore:
    """
    Product persistence: get / get_all / put by productId.

    Each put is its own transaction, so an interrupted batch leaves every
    stored product either fully old or fully new.
    """

    def __init__(self, db: Database):
        self.db = db
        self.db.init_schema()

    @classmethod
    def open(cls, db_path: Optional[str] = None) -> "CatalogStore":
        return cls(Database(db_path))

    def close(self):
        self.db.close()

    def get(self, product_id: str) -> Optional[Product]:
        row = self.db.fetchone("SELECT payload FROM products WHERE product_id = ?", (product_id,))
        if row is None:
            return None
        return Product.from_dict(json.loads(row["payload"]))

    def get_all(self) -> List[Product]:
        rows = self.db.fetchall("SELECT payload FROM products ORDER BY product_id")
        return [Product.from_dict(json.loads(row["payload"])) for row in rows]

    def iter_ids(self) -> Iterator[str]:
        for row in self.db.fetchall("SELECT product_id FROM products ORDER BY product_id"):
            yield row["product_id"]

    def put(self, product: Product) -> None:
        now = datetime.now(timezone.utc).isoformat()
        payload = json.dumps(product.to_dict(), ensure_ascii=False)
        with self.db.transaction() as conn:
            conn.execute("""
                INSERT INTO products (product_id, name, brand, category, payload, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(product_id) DO UPDATE SET
                    name = excluded.name,
                    brand = excluded.brand,
                    category = excluded.category,
                    payload = excluded.payload,
                    updated_at = excluded.updated_at
            """, (
                product.product_id,
                product.name,
                product.brand,
                product.category,
                payload,
                product.created_at or now,
                product.updated_at or now,
            ))

    def count(self) -> int:
        return self.db.get_table_counts()["products"]

    def record_run(self, kind: str, started_at: str, finished_at: Optional[str], report: Dict[str, Any]) -> int:
        with self.db.transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO runs (kind, started_at, finished_at, report) VALUES (?, ?, ?, ?)",
                (kind, started_at, finished_at, json.dumps(report, ensure_ascii=False)),
            )
            return cursor.lastrowid
