# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Inventory cost valuation for SMB ProfitSight.

Products are bought and sold in two units of measure: a smallest unit (e.g.
piece) and a largest unit (e.g. carton) holding `conversion_factor` smallest
units. Every quantity is normalized to the smallest unit before it is summed.

Weighted-average unit cost
--------------------------
The unit cost of a product at a given "as-of" date (normally the sale date)
is a single blended average over all eligible purchase history:

    eligible lines = purchase lines of the product whose invoice exists and
                     whose invoice date <= as-of date
                     (all lines when no as-of date is given)

    total_cost     = sum(unit_price * quantity)        in the line's own unit
    total_qty      = sum(quantity normalized to smallest unit)

    unit cost      = total_cost / total_qty   if total_qty > 0   else 0

Purchases dated after the as-of date are never used (no look-ahead). Two
transactions on the same calendar day are treated as simultaneous, so a
purchase made later in the day of a sale still counts for that sale.

This is neither FIFO nor a moving average: the value is recomputed from
scratch at every call, without caching or side effects.
"""

from typing import Optional

import pandas as pd

from .periods import date_key, date_keys

SMALLEST = "smallest"
LARGEST = "largest"


def normalize_quantity(quantity: float, unit: str, conversion_factor: float) -> float:
    """
    Express a quantity in the product's smallest unit.

    >>> normalize_quantity(2, "largest", 12)
    24.0
    >>> normalize_quantity(2, "smallest", 12)
    2.0
    """
    qty = float(quantity or 0.0)
    if unit == LARGEST:
        return qty * float(conversion_factor or 1.0)
    return qty


def conversion_factors(products: pd.DataFrame) -> pd.Series:
    """Return a Series product id -> conversion factor (first row wins)."""
    return products.drop_duplicates("id").set_index("id")["conversion_factor"]


def purchase_dates(purchase_invoices: pd.DataFrame) -> pd.Series:
    """Return a Series purchase invoice id -> 'YYYY-MM-DD' date key."""
    return date_keys(purchase_invoices.drop_duplicates("id").set_index("id")["date"])


def normalize_quantities(
    items: pd.DataFrame,
    products: pd.DataFrame,
    factors: Optional[pd.Series] = None,
) -> pd.Series:
    """
    Vectorized quantity normalization for line items.

    Items whose product cannot be resolved get NaN, so that callers can drop
    them explicitly. `factors` may be a prebuilt :func:`conversion_factors`
    Series.
    """
    if factors is None:
        factors = conversion_factors(products)
    line_factors = items["product_id"].map(factors)
    line_factors = line_factors.where(line_factors != 0.0, 1.0)
    quantities = items["quantity"].astype(float)
    return quantities.where(
        items["unit"] != LARGEST, quantities * line_factors
    ).where(line_factors.notna())


def eligible_purchase_lines(
    product_id: str,
    as_of_date: Optional[str],
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    dates_by_invoice: Optional[pd.Series] = None,
) -> pd.DataFrame:
    """
    Return the purchase lines of a product usable for a valuation as of a date.

    A line is eligible if its invoice exists and, when `as_of_date` is set,
    the invoice date key is <= the as-of date key. `dates_by_invoice` may be
    a prebuilt :func:`purchase_dates` Series.
    """
    lines = purchase_items.loc[purchase_items["product_id"] == product_id]
    if lines.empty:
        return lines.copy()

    if dates_by_invoice is None:
        dates_by_invoice = purchase_dates(purchase_invoices)
    invoice_dates = lines["invoice_id"].map(dates_by_invoice)
    mask = invoice_dates.notna()

    cutoff = date_key(as_of_date)
    if cutoff:
        mask &= invoice_dates.fillna("") <= cutoff

    return lines.loc[mask].copy()


def average_unit_cost(
    product_id: str,
    as_of_date: Optional[str],
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    products: pd.DataFrame,
    *,
    factors: Optional[pd.Series] = None,
    dates_by_invoice: Optional[pd.Series] = None,
) -> float:
    """
    Weighted-average purchase cost per smallest unit of a product.

    Args:
        product_id: Product identifier.
        as_of_date: Cut-off date ('YYYY-MM-DD' or ISO date-time). None or ''
            makes all purchase history eligible.
        purchase_invoices: Canonical purchase invoices DataFrame.
        purchase_items: Canonical purchase line items DataFrame.
        products: Canonical products DataFrame.
        factors: Optional prebuilt conversion_factors(products).
        dates_by_invoice: Optional prebuilt purchase_dates(purchase_invoices).

    Returns:
        The cost per smallest unit, or 0.0 when the product is unknown or has
        no eligible purchased quantity.
    """
    if factors is None:
        factors = conversion_factors(products)
    if product_id not in factors.index:
        return 0.0
    factor = float(factors.loc[product_id]) or 1.0

    lines = eligible_purchase_lines(
        product_id, as_of_date, purchase_invoices, purchase_items, dates_by_invoice
    )
    if lines.empty:
        return 0.0

    quantities = lines["quantity"].astype(float)
    total_cost = float((lines["unit_price"].astype(float) * quantities).sum())
    total_qty = float(
        quantities.where(lines["unit"] != LARGEST, quantities * factor).sum()
    )

    return total_cost / total_qty if total_qty > 0 else 0.0
