# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SMB ProfitSight.

This module turns raw business records into the canonical pandas DataFrames
consumed by the computation engine, and bundles them into a read-only
:class:`Snapshot`.

Record sources
--------------
Records can come from three places, all normalized the same way:

1) Plain Python records (lists of dicts), for example rows fetched from
   another application:       ``snapshot_from_records({...})``
2) A directory of CSV files, one ``<table>.csv`` per table:
                              ``read_csv_directory(path)``
3) Any repository object exposing ``list_products()``,
   ``list_purchase_invoices()``, ... (see ``db.SqliteRepository``):
                              ``load_snapshot(repository)``

Column names
------------
Canonical columns are snake_case. camelCase names used by the exported record
format are accepted (``conversionFactor``, ``invoiceId``, ``productId``,
``customerId``, ``supplierId``, ...), and ``price`` is accepted as an alias of
``unit_price`` for line items.

Normalization rules
-------------------
- Missing columns are added with their default value.
- Numeric columns are coerced with ``pd.to_numeric`` and missing/invalid
  values default to 0. A product ``conversion_factor`` of 0 defaults to 1.
- Text columns (ids, names, dates, units) are strings; missing values are "".
- Line items without an ``id`` receive ``"<invoice_id>:<position>"``.
- Any other column is ignored.

Nothing here raises on bad numbers or dangling references: the engine treats
them as zeros and silently excluded records.
"""

import logging
import os
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Protocol, Union

import pandas as pd

logger = logging.getLogger(__name__)

TEXT = "text"
NUMBER = "number"

LINE_ITEM_COLUMNS: dict[str, str] = {
    "id": TEXT,
    "invoice_id": TEXT,
    "product_id": TEXT,
    "quantity": NUMBER,
    "unit": TEXT,
    "unit_price": NUMBER,
}

# Canonical schema of every table, in column order.
TABLE_SCHEMAS: dict[str, dict[str, str]] = {
    "products": {
        "id": TEXT,
        "name": TEXT,
        "category": TEXT,
        "smallest_unit": TEXT,
        "largest_unit": TEXT,
        "conversion_factor": NUMBER,
    },
    "purchase_invoices": {
        "id": TEXT,
        "supplier_id": TEXT,
        "date": TEXT,
        "total": NUMBER,
        "paid": NUMBER,
        "remaining": NUMBER,
    },
    "purchase_invoice_items": dict(LINE_ITEM_COLUMNS),
    "sales_invoices": {
        "id": TEXT,
        "customer_id": TEXT,
        "date": TEXT,
        "total": NUMBER,
        "paid": NUMBER,
        "remaining": NUMBER,
    },
    "sales_invoice_items": dict(LINE_ITEM_COLUMNS),
    "operating_expenses": {
        "id": TEXT,
        "date": TEXT,
        "amount": NUMBER,
        "category": TEXT,
        "description": TEXT,
    },
    "customers": {"id": TEXT, "name": TEXT},
    "suppliers": {"id": TEXT, "name": TEXT},
}

_COLUMN_ALIASES: dict[str, str] = {
    "price": "unit_price",
    "invoice": "invoice_id",
    "product": "product_id",
}

_ITEM_TABLES = {"purchase_invoice_items", "sales_invoice_items"}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True)
class Snapshot:
    """
    Fully materialized, read-only view of all business records.

    Each attribute is a DataFrame following ``TABLE_SCHEMAS[<attribute>]``.
    The engine never mutates these frames; every function that narrows them
    returns a new frame.
    """

    products: pd.DataFrame
    purchase_invoices: pd.DataFrame
    purchase_invoice_items: pd.DataFrame
    sales_invoices: pd.DataFrame
    sales_invoice_items: pd.DataFrame
    operating_expenses: pd.DataFrame
    customers: pd.DataFrame
    suppliers: pd.DataFrame

    def table_sizes(self) -> dict[str, int]:
        """Return the number of rows of each table (useful for logging)."""
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


class Repository(Protocol):
    """Narrow read-only interface of the persistence collaborator."""

    def list_products(self) -> Any: ...

    def list_purchase_invoices(self) -> Any: ...

    def list_purchase_items(self) -> Any: ...

    def list_sales_invoices(self) -> Any: ...

    def list_sales_items(self) -> Any: ...

    def list_expenses(self) -> Any: ...

    def list_customers(self) -> Any: ...

    def list_suppliers(self) -> Any: ...


def _snake_case(name: str) -> str:
    """Convert 'conversionFactor' / 'Conversion Factor' to 'conversion_factor'."""
    s = _CAMEL_BOUNDARY.sub("_", str(name).strip())
    s = re.sub(r"[\s\-]+", "_", s)
    return s.lower()


def empty_table(table: str) -> pd.DataFrame:
    """Return an empty DataFrame with the canonical columns of `table`."""
    schema = TABLE_SCHEMAS[table]
    data = {
        col: pd.Series(dtype="float64" if kind == NUMBER else "object")
        for col, kind in schema.items()
    }
    return pd.DataFrame(data)


def _text_column(values: pd.Series) -> pd.Series:
    """Convert a column to strings, mapping missing values to ''."""

    def _to_text(v) -> str:
        if v is None:
            return ""
        try:
            if pd.isna(v):
                return ""
        except (TypeError, ValueError):
            pass
        # Integral floats coming from CSV ids ("1.0") are rendered as "1".
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v).strip()

    return values.map(_to_text).astype(object)


def normalize_table(
    table: str,
    data: Union[pd.DataFrame, Iterable[Mapping[str, Any]], None],
) -> pd.DataFrame:
    """
    Normalize raw records of `table` into its canonical DataFrame.

    Parameters
    ----------
    table:
        Table name, one of ``TABLE_SCHEMAS``.
    data:
        A DataFrame or an iterable of dict-like records. None is treated as
        an empty table.

    Returns
    -------
    pandas.DataFrame
        A new DataFrame with exactly the canonical columns of the table.

    Raises
    ------
    ValueError
        If `table` is not a known table name.
    """
    if table not in TABLE_SCHEMAS:
        raise ValueError(f"Unknown table: {table!r}")

    if data is None:
        return empty_table(table)

    df = data.copy() if isinstance(data, pd.DataFrame) else pd.DataFrame(list(data))
    if df.empty and len(df.columns) == 0:
        return empty_table(table)

    renamed = {col: _snake_case(col) for col in df.columns}
    present = set(renamed.values())
    for col, snake in renamed.items():
        target = _COLUMN_ALIASES.get(snake)
        # An explicit canonical column wins over its alias.
        if target and target not in present:
            renamed[col] = target
    df = df.rename(columns=renamed)
    df = df.loc[:, ~df.columns.duplicated()]

    schema = TABLE_SCHEMAS[table]
    out = pd.DataFrame(index=df.index)
    for col, kind in schema.items():
        if col in df.columns:
            raw = df[col]
        else:
            raw = pd.Series([None] * len(df), index=df.index, dtype="object")

        if kind == NUMBER:
            out[col] = pd.to_numeric(raw, errors="coerce").fillna(0.0).astype(float)
        else:
            out[col] = _text_column(raw)

    if table == "products":
        out["conversion_factor"] = out["conversion_factor"].where(
            out["conversion_factor"] != 0.0, 1.0
        )

    if table in _ITEM_TABLES and len(out):
        position = out.groupby("invoice_id").cumcount() + 1
        generated = out["invoice_id"] + ":" + position.astype(str)
        out["id"] = out["id"].where(out["id"] != "", generated)

    return out.reset_index(drop=True)


def snapshot_from_records(records: Mapping[str, Any]) -> Snapshot:
    """
    Build a Snapshot from a mapping of table name -> raw records.

    Missing tables are empty. Unknown table names raise ValueError so that
    typos do not silently drop data.
    """
    unknown = set(records).difference(TABLE_SCHEMAS)
    if unknown:
        names = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown table(s) in records: {names}")

    tables = {name: normalize_table(name, records.get(name)) for name in TABLE_SCHEMAS}
    return Snapshot(**tables)


def read_csv_directory(path: Union[str, "os.PathLike[str]"]) -> Snapshot:
    """
    Read one ``<table>.csv`` file per table from a directory.

    Absent files produce empty tables. Ids and dates are read as strings so
    that values such as '007' or '2025-01-01T10:00:00' are kept verbatim.

    Raises
    ------
    FileNotFoundError
        If `path` is not a directory.
    """
    directory = Path(path)
    if not directory.is_dir():
        raise FileNotFoundError(f"Records directory not found: {directory}")

    tables: dict[str, pd.DataFrame] = {}
    for name in TABLE_SCHEMAS:
        csv_path = directory / f"{name}.csv"
        if not csv_path.is_file():
            logger.info("No %s.csv in %s, using an empty table", name, directory)
            tables[name] = empty_table(name)
            continue

        raw = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        tables[name] = normalize_table(name, raw)
        logger.info("Read %d %s record(s) from %s", len(raw), name, csv_path)

    return Snapshot(**tables)


def load_snapshot(repository: Repository) -> Snapshot:
    """
    Fetch every table from a repository, unfiltered, and normalize it.

    Filtering is entirely the engine's responsibility, so the repository is
    asked for complete collections.
    """
    snapshot = Snapshot(
        products=normalize_table("products", repository.list_products()),
        purchase_invoices=normalize_table(
            "purchase_invoices", repository.list_purchase_invoices()
        ),
        purchase_invoice_items=normalize_table(
            "purchase_invoice_items", repository.list_purchase_items()
        ),
        sales_invoices=normalize_table(
            "sales_invoices", repository.list_sales_invoices()
        ),
        sales_invoice_items=normalize_table(
            "sales_invoice_items", repository.list_sales_items()
        ),
        operating_expenses=normalize_table(
            "operating_expenses", repository.list_expenses()
        ),
        customers=normalize_table("customers", repository.list_customers()),
        suppliers=normalize_table("suppliers", repository.list_suppliers()),
    )
    logger.debug("Loaded snapshot: %s", snapshot.table_sizes())
    return snapshot
