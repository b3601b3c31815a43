# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Database layer for SMB ProfitSight.

This module stores the raw business records in a SQLite database and serves
them back as complete, unfiltered collections. It is responsible for:

- Initializing the database schema (one table per record type).
- Importing a Snapshot (upsert by record id).
- Exposing a repository object whose ``list_*`` methods feed
  ``io.load_snapshot()``.

The computation engine never depends on this module: it only receives the
DataFrames of a Snapshot, wherever they come from.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

One table per record type, with the canonical columns of
``io.TABLE_SCHEMAS``:

    products, purchase_invoices, purchase_invoice_items, sales_invoices,
    sales_invoice_items, operating_expenses, customers, suppliers

Every table has ``id TEXT PRIMARY KEY``. Text columns are stored as TEXT,
numeric columns as REAL. Dates are kept as the ISO strings they were
recorded with (date or date-time); the engine compares their
'YYYY-MM-DD' prefix.

Re-importing a record with an existing id replaces it (INSERT OR REPLACE),
so importing the same directory twice is idempotent.

------------------------------------------------------------------------------
End of module description.
------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, fields
from pathlib import Path

import pandas as pd

from .io import NUMBER, TABLE_SCHEMAS, Snapshot

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for SMB ProfitSight.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a snapshot import.

    Attributes
    ----------
    rows_by_table:
        Number of rows written to each table (inserted or replaced).
    """

    rows_by_table: dict[str, int]

    @property
    def total_rows(self) -> int:
        return sum(self.rows_by_table.values())


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported for now."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _column_sql(name: str, kind: str) -> str:
    if name == "id":
        return "id TEXT PRIMARY KEY"
    if kind == NUMBER:
        return f"{name} REAL NOT NULL DEFAULT 0"
    return f"{name} TEXT NOT NULL DEFAULT ''"


def _create_schema_if_needed(conn: sqlite3.Connection) -> None:
    """
    Create tables and indexes if they do not exist yet.

    This function is idempotent and can be called multiple times safely.
    """
    for table, schema in TABLE_SCHEMAS.items():
        columns = ", ".join(_column_sql(name, kind) for name, kind in schema.items())
        conn.execute(f"CREATE TABLE IF NOT EXISTS {table} ({columns});")

    # Line items are always looked up by invoice.
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_purchase_items_invoice "
        "ON purchase_invoice_items(invoice_id);"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_sales_items_invoice "
        "ON sales_invoice_items(invoice_id);"
    )

    conn.commit()


def _read_table(cfg: DatabaseConfig, table: str) -> pd.DataFrame:
    """Return every row of `table`, in insertion order."""
    columns = list(TABLE_SCHEMAS[table])
    conn = _connect(cfg)
    try:
        cur = conn.execute(f"SELECT {', '.join(columns)} FROM {table} ORDER BY rowid;")
        rows = cur.fetchall()
    finally:
        conn.close()

    return pd.DataFrame(rows, columns=columns)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if it does not exist.
    - Creates one table per record type if missing.
    - This function is idempotent: calling it multiple times is safe.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    _ensure_sqlite(cfg)
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        _create_schema_if_needed(conn)
    finally:
        conn.close()


def import_snapshot(snapshot: Snapshot, cfg: DatabaseConfig) -> ImportStats:
    """
    Write every table of a snapshot into the database.

    Records are upserted by id: an existing row with the same id is
    replaced. Rows without an id cannot be stored and are skipped.

    Parameters
    ----------
    snapshot:
        Normalized records (see io.py).
    cfg:
        Database configuration.

    Returns
    -------
    ImportStats
        Number of rows written per table.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If database operations fail (the whole import is rolled back).
    """
    init_database(cfg)

    rows_by_table: dict[str, int] = {}
    conn = _connect(cfg)
    try:
        for f in fields(snapshot):
            table = f.name
            frame: pd.DataFrame = getattr(snapshot, table)
            columns = list(TABLE_SCHEMAS[table])

            keep = frame["id"].astype(str) != ""
            skipped = int((~keep).sum())
            if skipped:
                logger.warning("Skipping %d %s row(s) without id", skipped, table)

            records = [
                tuple(
                    float(v) if TABLE_SCHEMAS[table][c] == NUMBER else str(v)
                    for c, v in zip(columns, row)
                )
                for row in frame.loc[keep, columns].itertuples(index=False, name=None)
            ]
            placeholders = ", ".join("?" for _ in columns)
            conn.executemany(
                f"INSERT OR REPLACE INTO {table} ({', '.join(columns)}) "
                f"VALUES ({placeholders});",
                records,
            )
            rows_by_table[table] = len(records)

        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()

    logger.info("Imported %d row(s) into %s", sum(rows_by_table.values()), cfg.path)
    return ImportStats(rows_by_table=rows_by_table)


def has_records(cfg: DatabaseConfig) -> bool:
    """
    Return True if the database contains at least one sales or purchase invoice.

    Useful to warn the user when a report is requested on an empty DB.
    """
    init_database(cfg)

    conn = _connect(cfg)
    try:
        for table in ("sales_invoices", "purchase_invoices"):
            cur = conn.execute(f"SELECT 1 FROM {table} LIMIT 1;")
            if cur.fetchone() is not None:
                return True
        return False
    finally:
        conn.close()


class SqliteRepository:
    """
    Read-only repository over the SQLite store.

    Every ``list_*`` method returns the complete table as a DataFrame with the
    canonical columns; no server-side filtering is applied. Pass an instance
    to ``io.load_snapshot()``.
    """

    def __init__(self, cfg: DatabaseConfig) -> None:
        init_database(cfg)
        self.cfg = cfg

    def list_products(self) -> pd.DataFrame:
        return _read_table(self.cfg, "products")

    def list_purchase_invoices(self) -> pd.DataFrame:
        return _read_table(self.cfg, "purchase_invoices")

    def list_purchase_items(self) -> pd.DataFrame:
        return _read_table(self.cfg, "purchase_invoice_items")

    def list_sales_invoices(self) -> pd.DataFrame:
        return _read_table(self.cfg, "sales_invoices")

    def list_sales_items(self) -> pd.DataFrame:
        return _read_table(self.cfg, "sales_invoice_items")

    def list_expenses(self) -> pd.DataFrame:
        return _read_table(self.cfg, "operating_expenses")

    def list_customers(self) -> pd.DataFrame:
        return _read_table(self.cfg, "customers")

    def list_suppliers(self) -> pd.DataFrame:
        return _read_table(self.cfg, "suppliers")
