# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cost of goods sold (COGS) per sales line.

For a sales line item:

    cogs = average_unit_cost(product, sale date) * quantity in smallest unit

where the sale date is the date of the owning invoice. The valuation itself
lives in costing.py; this module applies it to collections of line items and
returns a "costed lines" DataFrame that every aggregation (KPIs, per-entity
profitability, alerts) builds on.

Lines whose product cannot be resolved are dropped: they contribute neither
sales nor cost to any aggregate.
"""

from collections.abc import Mapping
from typing import Any, Optional

import pandas as pd

from .costing import (
    average_unit_cost,
    conversion_factors,
    normalize_quantities,
    normalize_quantity,
    purchase_dates,
)
from .periods import date_key

COSTED_LINE_COLUMNS = [
    "id",
    "invoice_id",
    "product_id",
    "quantity",
    "unit",
    "unit_price",
    "sale_date",
    "quantity_smallest",
    "line_sales",
    "unit_cost",
    "cogs",
]

_NUMERIC = {
    "quantity",
    "unit_price",
    "quantity_smallest",
    "line_sales",
    "unit_cost",
    "cogs",
}


def line_cogs(
    item: Mapping[str, Any],
    sale_date: Optional[str],
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
) -> float:
    """
    Cost of goods sold of a single sales line item.

    Args:
        item: Mapping with at least 'product_id', 'quantity' and 'unit'.
        sale_date: Date of the owning invoice; None makes all purchase
            history eligible.
        products, purchase_invoices, purchase_items: Canonical DataFrames.

    Returns:
        The line cost, or 0.0 if the product cannot be resolved.
    """
    product_id = str(item.get("product_id", ""))
    match = products.loc[products["id"] == product_id]
    if match.empty:
        return 0.0

    factor = float(match["conversion_factor"].iloc[0])
    quantity = normalize_quantity(
        item.get("quantity", 0.0), item.get("unit", ""), factor
    )
    unit_cost = average_unit_cost(
        product_id, sale_date, purchase_invoices, purchase_items, products
    )
    return unit_cost * quantity


def cost_sales_lines(
    items: pd.DataFrame,
    invoices: pd.DataFrame,
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
) -> pd.DataFrame:
    """
    Attach sale date, normalized quantity, sales amount and cost to line items.

    Args:
        items: Sales line items to cost.
        invoices: Sales invoices owning the items. An item whose invoice is
            not in this frame is valued against all purchase history.
        products: Canonical products DataFrame.
        purchase_invoices: Full purchase invoices ledger.
        purchase_items: Full purchase line items ledger.

    Returns:
        A new DataFrame with the columns of ``COSTED_LINE_COLUMNS``:
            sale_date          'YYYY-MM-DD' key of the invoice date (or None)
            quantity_smallest  quantity in the product's smallest unit
            line_sales         unit_price * quantity (as recorded)
            unit_cost          weighted-average cost per smallest unit
            cogs               unit_cost * quantity_smallest
        Only items with a resolvable product are returned.
    """
    if items.empty:
        return pd.DataFrame(
            {
                col: pd.Series(dtype="float64" if col in _NUMERIC else "object")
                for col in COSTED_LINE_COLUMNS
            }
        )

    factors = conversion_factors(products)
    dates_by_invoice = purchase_dates(purchase_invoices)

    lines = items.copy()
    lines["quantity_smallest"] = normalize_quantities(lines, products, factors)
    lines = lines.loc[lines["quantity_smallest"].notna()].copy()

    date_by_invoice = invoices.drop_duplicates("id").set_index("id")["date"]
    lines["sale_date"] = [
        date_key(d) or None for d in lines["invoice_id"].map(date_by_invoice)
    ]
    lines["line_sales"] = lines["unit_price"].astype(float) * lines["quantity"].astype(
        float
    )

    # Valuation depends only on (product, sale date): evaluate each pair once.
    unit_costs: dict[tuple[str, Optional[str]], float] = {}
    costs = []
    for product_id, sale_date in zip(lines["product_id"], lines["sale_date"]):
        key = (product_id, sale_date)
        if key not in unit_costs:
            unit_costs[key] = average_unit_cost(
                product_id,
                sale_date,
                purchase_invoices,
                purchase_items,
                products,
                factors=factors,
                dates_by_invoice=dates_by_invoice,
            )
        costs.append(unit_costs[key])

    lines["unit_cost"] = pd.Series(costs, index=lines.index, dtype=float)
    lines["cogs"] = lines["unit_cost"] * lines["quantity_smallest"]

    return lines[COSTED_LINE_COLUMNS].reset_index(drop=True)
