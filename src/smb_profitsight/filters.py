# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report filters for SMB ProfitSight.

A report is always computed for a :class:`FilterSpec`:

    from_date, to_date : inclusive 'YYYY-MM-DD' bounds
    customer_id        : optional customer restriction ("" = all customers)
    category           : optional category-or-product selector:
                           ""                  all products
                           "category:<name>"   products whose category is <name>
                           "product:<id>"      a single product

This module turns that specification into a consistent subset of sales
invoices and sales line items (:func:`apply_filters`) and exposes the shared
pieces reused by other aggregations (date-range filtering of any ledger,
selector matching of any line items).

Behaviour worth knowing
-----------------------
- Date bounds are compared as strings on the 'YYYY-MM-DD' prefix of each
  record date.
- An empty or absent bound matches nothing: the result is empty rather than
  "all dates".
- When a selector is active, invoices left without any matching line item are
  dropped so that invoice totals and line items describe the same sales.
- A non-empty selector without a known prefix matches every line item but
  still counts as active.

All functions are pure: inputs are never modified.
"""

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .periods import date_keys

CATEGORY_PREFIX = "category:"
PRODUCT_PREFIX = "product:"


@dataclass(frozen=True)
class FilterSpec:
    """Filter specification of one report run."""

    from_date: Optional[str]
    to_date: Optional[str]
    customer_id: str = ""
    category: str = ""


@dataclass(frozen=True)
class CategorySelector:
    """
    Parsed category-or-product selector.

    Attributes
    ----------
    kind:
        'all' (no selector), 'category', 'product' or 'other' (unrecognized
        non-empty selector, which matches every item).
    value:
        Category name or product id, '' otherwise.
    """

    kind: str
    value: str = ""

    @property
    def is_active(self) -> bool:
        return self.kind != "all"


@dataclass(frozen=True)
class FilteredSales:
    """Mutually consistent subset of sales invoices and their line items."""

    invoices: pd.DataFrame
    items: pd.DataFrame


def parse_category_selector(raw: Optional[str]) -> CategorySelector:
    """Parse the 'category:<name>' / 'product:<id>' / '' convention."""
    if not raw:
        return CategorySelector(kind="all")
    if raw.startswith(CATEGORY_PREFIX):
        return CategorySelector(kind="category", value=raw[len(CATEGORY_PREFIX) :])
    if raw.startswith(PRODUCT_PREFIX):
        return CategorySelector(kind="product", value=raw[len(PRODUCT_PREFIX) :])
    return CategorySelector(kind="other", value=raw)


def date_range_mask(
    dates: pd.Series, from_date: Optional[str], to_date: Optional[str]
) -> pd.Series:
    """
    Boolean mask of the dates whose 'YYYY-MM-DD' key lies in [from, to].

    Both bounds are required: if either is empty or None, nothing matches.
    """
    if not from_date or not to_date:
        return pd.Series(False, index=dates.index, dtype=bool)

    keys = date_keys(dates)
    return (keys >= from_date[:10]) & (keys <= to_date[:10])


def filter_by_date_range(frame: pd.DataFrame, spec: FilterSpec) -> pd.DataFrame:
    """Return the rows of a ledger (with a 'date' column) within the spec dates."""
    mask = date_range_mask(frame["date"], spec.from_date, spec.to_date)
    return frame.loc[mask].copy()


def filter_items_by_selector(
    items: pd.DataFrame,
    selector: CategorySelector,
    products: pd.DataFrame,
) -> pd.DataFrame:
    """
    Return the line items matching a category/product selector.

    For a category selector, the product is resolved through `products`; items
    whose product cannot be resolved do not match.
    """
    if selector.kind == "category":
        category_by_id = products.drop_duplicates("id").set_index("id")["category"]
        item_category = items["product_id"].map(category_by_id)
        mask = item_category.eq(selector.value) & item_category.notna()
        return items.loc[mask].copy()

    if selector.kind == "product":
        return items.loc[items["product_id"] == selector.value].copy()

    return items.copy()


def apply_filters(
    spec: FilterSpec,
    sales_invoices: pd.DataFrame,
    sales_items: pd.DataFrame,
    products: pd.DataFrame,
) -> FilteredSales:
    """
    Narrow sales invoices and line items to a filter specification.

    Steps:
        1. keep invoices dated within [from_date, to_date] and, when a
           customer is given, belonging to that customer;
        2. keep line items of retained invoices that match the selector;
        3. when a selector is active, drop invoices with no retained item.

    Args:
        spec: Filter specification.
        sales_invoices: Canonical sales invoices DataFrame.
        sales_items: Canonical sales line items DataFrame.
        products: Canonical products DataFrame (used to resolve categories).

    Returns:
        A FilteredSales with new DataFrames (inputs are left untouched).
    """
    # 1) Invoice-level filters: dates, then customer.
    mask = date_range_mask(sales_invoices["date"], spec.from_date, spec.to_date)
    if spec.customer_id:
        mask &= sales_invoices["customer_id"] == spec.customer_id
    invoices = sales_invoices.loc[mask]

    # 2) Items of retained invoices, narrowed by the selector.
    items = sales_items.loc[sales_items["invoice_id"].isin(invoices["id"])]
    selector = parse_category_selector(spec.category)
    items = filter_items_by_selector(items, selector, products)

    # 3) Keep invoices and items consistent when a selector narrows the items.
    if selector.is_active:
        invoices = invoices.loc[invoices["id"].isin(items["invoice_id"])]

    return FilteredSales(
        invoices=invoices.reset_index(drop=True),
        items=items.reset_index(drop=True),
    )
