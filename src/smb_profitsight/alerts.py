# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Product alerts.

Two lists are derived from the per-product profitability table:

- high sales, low margin: total_sales > min_sales and
  0 <= profit_margin < max_margin
- loss making:            profit < 0

A loss-making product always has a negative margin (or no sales at all), so
it never appears in the first list: the two lists are disjoint. Rows keep
the order of the product table (profit, descending).
"""

from dataclasses import dataclass

import pandas as pd

from .profitability import product_profitability

ALERT_COLUMNS = [
    "product_id",
    "name",
    "total_sales",
    "total_cost",
    "profit",
    "profit_margin",
]


@dataclass(frozen=True)
class AlertThresholds:
    """Thresholds of the 'high sales, low margin' rule."""

    min_sales: float = 1000.0
    max_margin: float = 10.0


@dataclass(frozen=True)
class Alerts:
    """The two alert lists, as DataFrames with the columns of ALERT_COLUMNS."""

    high_sales_low_margin: pd.DataFrame
    loss_making: pd.DataFrame

    def is_empty(self) -> bool:
        return self.high_sales_low_margin.empty and self.loss_making.empty


def classify_alerts(
    product_rows: pd.DataFrame, thresholds: AlertThresholds = AlertThresholds()
) -> Alerts:
    """Split an already computed product table into the two alert lists."""
    sales = product_rows["total_sales"].astype(float)
    margin = product_rows["profit_margin"].astype(float)
    profit = product_rows["profit"].astype(float)

    low_margin = (
        (sales > thresholds.min_sales)
        & (margin >= 0)
        & (margin < thresholds.max_margin)
    )
    losing = profit < 0

    return Alerts(
        high_sales_low_margin=product_rows.loc[low_margin, ALERT_COLUMNS].reset_index(
            drop=True
        ),
        loss_making=product_rows.loc[losing, ALERT_COLUMNS].reset_index(drop=True),
    )


def generate_alerts(
    items: pd.DataFrame,
    invoices: pd.DataFrame,
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    thresholds: AlertThresholds = AlertThresholds(),
) -> Alerts:
    """
    Compute the product alerts of a filtered set of sales.

    The product table is recomputed from the filtered items, then split with
    :func:`classify_alerts`.
    """
    rows = product_profitability(
        items, invoices, products, purchase_invoices, purchase_items
    )
    return classify_alerts(rows, thresholds)
