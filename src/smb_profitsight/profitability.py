# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Per-entity profitability tables.

This module groups the filtered sales (or the purchase ledger) by entity and
produces one row per entity:

1. By product
   -----------
   Groups costed sales lines by product:
       total_quantity      quantity sold, in smallest units
       total_sales         sum(unit_price * quantity)
       total_cost          sum(line COGS)
       avg_purchase_price  total_cost / total_quantity
       avg_sale_price      total_sales / total_quantity
       profit              total_sales - total_cost
       profit_margin       profit / total_sales * 100 (0 without sales)
       status              margin classification (see below)
   Sorted by profit, descending.

2. By customer
   ------------
   Groups filtered invoices by customer. Sales are invoice totals; cost is
   the COGS of the customer's line items, each valued at its own invoice
   date. Status:
       profit_margin >= 20  -> 'profitable'
       profit_margin >= 10  -> 'moderate'
       profit_margin <  0   -> 'loss'
       otherwise            -> 'low'
   Sorted by profit, descending.

3. By supplier
   ------------
   Groups purchase invoices dated within the filter dates by supplier. When a
   category/product selector is active, only matching purchase lines are
   counted and invoices without any matching line are skipped. Sales-side
   profit does not apply here; rows carry purchase totals, quantities, the
   average price per smallest unit, and the paid / remaining amounts of the
   counted invoices. Status on the average price:
       avg_price <= 100  -> 'good'
       avg_price <= 500  -> 'moderate'
       otherwise         -> 'high'
   Sorted by total purchases, descending.

In every mode, a group whose entity id does not resolve to a known product,
customer or supplier is dropped. Threshold values are parameters so they can
be driven by configuration.
"""

import pandas as pd

from .cogs import cost_sales_lines
from .costing import normalize_quantities
from .filters import (
    FilterSpec,
    filter_by_date_range,
    filter_items_by_selector,
    parse_category_selector,
)
from .kpis import margin_pct

PRODUCT_COLUMNS = [
    "product_id",
    "name",
    "category",
    "total_quantity",
    "avg_purchase_price",
    "avg_sale_price",
    "total_cost",
    "total_sales",
    "profit",
    "profit_margin",
    "status",
]

CUSTOMER_COLUMNS = [
    "customer_id",
    "name",
    "invoice_count",
    "total_sales",
    "total_cost",
    "profit",
    "profit_margin",
    "paid",
    "remaining",
    "status",
]

SUPPLIER_COLUMNS = [
    "supplier_id",
    "name",
    "invoice_count",
    "total_purchases",
    "total_cost",
    "total_quantity",
    "avg_price",
    "paid",
    "remaining",
    "status",
]

_TEXT_COLUMNS = {
    "product_id",
    "customer_id",
    "supplier_id",
    "name",
    "category",
    "status",
}

DEFAULT_PROFITABLE_MARGIN = 20.0
DEFAULT_MODERATE_MARGIN = 10.0
DEFAULT_GOOD_PRICE = 100.0
DEFAULT_MODERATE_PRICE = 500.0


def classify_margin(
    profit_margin: float,
    profitable: float = DEFAULT_PROFITABLE_MARGIN,
    moderate: float = DEFAULT_MODERATE_MARGIN,
) -> str:
    """Classify a profit margin (%) as profitable / moderate / loss / low."""
    if profit_margin >= profitable:
        return "profitable"
    if profit_margin >= moderate:
        return "moderate"
    if profit_margin < 0:
        return "loss"
    return "low"


def classify_supplier_price(
    avg_price: float,
    good: float = DEFAULT_GOOD_PRICE,
    moderate: float = DEFAULT_MODERATE_PRICE,
) -> str:
    """Classify an average purchase price per smallest unit."""
    if avg_price <= good:
        return "good"
    if avg_price <= moderate:
        return "moderate"
    return "high"


def _empty_table(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            col: pd.Series(dtype="object" if col in _TEXT_COLUMNS else "float64")
            for col in columns
        }
    )


def _safe_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    """Element-wise numerator / denominator, 0.0 where the denominator is not > 0."""
    positive = denominator > 0
    return (numerator / denominator.where(positive, 1.0)).where(positive, 0.0)


def _finalize(rows: pd.DataFrame, columns: list[str], sort_by: str) -> pd.DataFrame:
    rows = rows.sort_values(sort_by, ascending=False, kind="stable")
    return rows[columns].reset_index(drop=True)


def product_profitability(
    items: pd.DataFrame,
    invoices: pd.DataFrame,
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    *,
    profitable: float = DEFAULT_PROFITABLE_MARGIN,
    moderate: float = DEFAULT_MODERATE_MARGIN,
) -> pd.DataFrame:
    """
    Profitability table grouped by product.

    Args:
        items: Filtered sales line items.
        invoices: Filtered sales invoices (provide the sale dates).
        products: Canonical products DataFrame.
        purchase_invoices, purchase_items: Full purchase ledger.
        profitable, moderate: Margin thresholds (%) used for 'status'.

    Returns:
        A DataFrame with the columns of ``PRODUCT_COLUMNS``, sorted by
        profit (descending).
    """
    lines = cost_sales_lines(
        items, invoices, products, purchase_invoices, purchase_items
    )
    if lines.empty:
        return _empty_table(PRODUCT_COLUMNS)

    grouped = (
        lines.groupby("product_id", sort=False)
        .agg(
            total_quantity=("quantity_smallest", "sum"),
            total_sales=("line_sales", "sum"),
            total_cost=("cogs", "sum"),
        )
        .reset_index()
    )

    info = products.drop_duplicates("id")[["id", "name", "category"]].rename(
        columns={"id": "product_id"}
    )
    rows = grouped.merge(info, on="product_id", how="inner")

    rows["avg_purchase_price"] = _safe_ratio(rows["total_cost"], rows["total_quantity"])
    rows["avg_sale_price"] = _safe_ratio(rows["total_sales"], rows["total_quantity"])
    rows["profit"] = rows["total_sales"] - rows["total_cost"]
    rows["profit_margin"] = [
        margin_pct(p, s) for p, s in zip(rows["profit"], rows["total_sales"])
    ]
    rows["status"] = [
        classify_margin(m, profitable, moderate) for m in rows["profit_margin"]
    ]

    return _finalize(rows, PRODUCT_COLUMNS, sort_by="profit")


def customer_profitability(
    invoices: pd.DataFrame,
    items: pd.DataFrame,
    customers: pd.DataFrame,
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    *,
    profitable: float = DEFAULT_PROFITABLE_MARGIN,
    moderate: float = DEFAULT_MODERATE_MARGIN,
) -> pd.DataFrame:
    """
    Profitability table grouped by customer.

    Args:
        invoices: Filtered sales invoices.
        items: Filtered sales line items.
        customers: Canonical customers DataFrame.
        products: Canonical products DataFrame.
        purchase_invoices, purchase_items: Full purchase ledger.
        profitable, moderate: Margin thresholds (%) used for 'status'.

    Returns:
        A DataFrame with the columns of ``CUSTOMER_COLUMNS``, sorted by
        profit (descending).
    """
    known = invoices.loc[invoices["customer_id"].isin(customers["id"])]
    if known.empty:
        return _empty_table(CUSTOMER_COLUMNS)

    rows = (
        known.groupby("customer_id", sort=False)
        .agg(
            invoice_count=("id", "count"),
            total_sales=("total", "sum"),
            paid=("paid", "sum"),
            remaining=("remaining", "sum"),
        )
        .reset_index()
    )

    # Cost: each line valued at the date of its own invoice.
    lines = cost_sales_lines(
        items.loc[items["invoice_id"].isin(known["id"])],
        known,
        products,
        purchase_invoices,
        purchase_items,
    )
    customer_by_invoice = known.drop_duplicates("id").set_index("id")["customer_id"]
    lines["customer_id"] = lines["invoice_id"].map(customer_by_invoice)
    cost_by_customer = lines.groupby("customer_id")["cogs"].sum()
    rows["total_cost"] = rows["customer_id"].map(cost_by_customer).fillna(0.0)

    names = customers.drop_duplicates("id").set_index("id")["name"]
    rows["name"] = rows["customer_id"].map(names)
    rows["invoice_count"] = rows["invoice_count"].astype(int)
    rows["profit"] = rows["total_sales"] - rows["total_cost"]
    rows["profit_margin"] = [
        margin_pct(p, s) for p, s in zip(rows["profit"], rows["total_sales"])
    ]
    rows["status"] = [
        classify_margin(m, profitable, moderate) for m in rows["profit_margin"]
    ]

    return _finalize(rows, CUSTOMER_COLUMNS, sort_by="profit")


def supplier_profitability(
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    suppliers: pd.DataFrame,
    products: pd.DataFrame,
    spec: FilterSpec,
    *,
    good: float = DEFAULT_GOOD_PRICE,
    moderate: float = DEFAULT_MODERATE_PRICE,
) -> pd.DataFrame:
    """
    Purchase table grouped by supplier.

    Args:
        purchase_invoices, purchase_items: Full purchase ledger.
        suppliers: Canonical suppliers DataFrame.
        products: Canonical products DataFrame.
        spec: Filter specification; its dates bound the purchase invoices and
            its selector narrows the purchase lines. The customer filter does
            not apply.
        good, moderate: Average price thresholds used for 'status'.

    Returns:
        A DataFrame with the columns of ``SUPPLIER_COLUMNS``, sorted by
        total purchases (descending).
    """
    invoices = filter_by_date_range(purchase_invoices, spec)
    invoices = invoices.loc[invoices["supplier_id"].isin(suppliers["id"])]

    items = purchase_items.loc[purchase_items["invoice_id"].isin(invoices["id"])]
    selector = parse_category_selector(spec.category)
    items = filter_items_by_selector(items, selector, products)
    if selector.is_active:
        invoices = invoices.loc[invoices["id"].isin(items["invoice_id"])]

    if invoices.empty:
        return _empty_table(SUPPLIER_COLUMNS)

    rows = (
        invoices.groupby("supplier_id", sort=False)
        .agg(
            invoice_count=("id", "count"),
            paid=("paid", "sum"),
            remaining=("remaining", "sum"),
        )
        .reset_index()
    )

    items = items.copy()
    items["line_total"] = items["unit_price"].astype(float) * items["quantity"].astype(
        float
    )
    items["quantity_smallest"] = normalize_quantities(items, products)
    # Lines of unknown products count in purchases but not in cost/quantity.
    items["line_cost"] = items["line_total"].where(
        items["quantity_smallest"].notna(), 0.0
    )
    supplier_by_invoice = invoices.drop_duplicates("id").set_index("id")["supplier_id"]
    items["supplier_id"] = items["invoice_id"].map(supplier_by_invoice)

    by_supplier = items.groupby("supplier_id")
    rows["total_purchases"] = (
        rows["supplier_id"].map(by_supplier["line_total"].sum()).fillna(0.0)
    )
    rows["total_cost"] = rows["supplier_id"].map(by_supplier["line_cost"].sum()).fillna(
        0.0
    )
    rows["total_quantity"] = (
        rows["supplier_id"].map(by_supplier["quantity_smallest"].sum()).fillna(0.0)
    )

    names = suppliers.drop_duplicates("id").set_index("id")["name"]
    rows["name"] = rows["supplier_id"].map(names)
    rows["invoice_count"] = rows["invoice_count"].astype(int)
    rows["avg_price"] = _safe_ratio(rows["total_cost"], rows["total_quantity"])
    rows["status"] = [
        classify_supplier_price(p, good, moderate) for p in rows["avg_price"]
    ]

    return _finalize(rows, SUPPLIER_COLUMNS, sort_by="total_purchases")
