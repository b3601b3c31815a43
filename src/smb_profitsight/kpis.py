# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
KPI summary of a filtered set of sales.

Given the invoices and line items selected by filters.apply_filters(), the
purchase ledger and the operating expenses ledger, compute:

    total_sales    = sum of invoice totals
    total_cogs     = sum of line COGS (see cogs.py)
    gross_profit   = total_sales - total_cogs
    total_expenses = sum of operating expenses dated within the filter dates
    net_profit     = gross_profit - total_expenses
    profit_margin  = net_profit / total_sales * 100   (0 when there are no sales)

Expenses are bounded by the filter dates only; the customer and
category/product selectors do not apply to them.

The result is a plain record with raw floats. Rounding and currency or
percentage formatting belong to views.py.
"""

from dataclasses import asdict, dataclass

import pandas as pd

from .cogs import cost_sales_lines
from .filters import FilteredSales, FilterSpec, filter_by_date_range


@dataclass(frozen=True)
class KPISummary:
    """Flat KPI record of one report run."""

    total_sales: float
    total_cogs: float
    gross_profit: float
    total_expenses: float
    net_profit: float
    profit_margin: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def margin_pct(profit: float, sales: float) -> float:
    """Profit as a percentage of sales, 0.0 when sales are not positive."""
    return (profit / sales) * 100 if sales > 0 else 0.0


def total_operating_expenses(expenses: pd.DataFrame, spec: FilterSpec) -> float:
    """Sum of expense amounts dated within the filter dates."""
    in_range = filter_by_date_range(expenses, spec)
    return float(in_range["amount"].astype(float).sum())


def compute_kpis(
    filtered: FilteredSales,
    products: pd.DataFrame,
    purchase_invoices: pd.DataFrame,
    purchase_items: pd.DataFrame,
    expenses: pd.DataFrame,
    spec: FilterSpec,
) -> KPISummary:
    """
    Compute the KPI summary of a filtered set of sales.

    Args:
        filtered: Output of filters.apply_filters().
        products: Canonical products DataFrame.
        purchase_invoices: Full purchase invoices ledger.
        purchase_items: Full purchase line items ledger.
        expenses: Full operating expenses ledger.
        spec: The filter specification used to produce `filtered`; only its
            dates are used here (for expenses).

    Returns:
        A KPISummary.
    """
    total_sales = float(filtered.invoices["total"].astype(float).sum())

    lines = cost_sales_lines(
        filtered.items, filtered.invoices, products, purchase_invoices, purchase_items
    )
    total_cogs = float(lines["cogs"].astype(float).sum())

    gross_profit = total_sales - total_cogs
    total_expenses = total_operating_expenses(expenses, spec)
    net_profit = gross_profit - total_expenses

    return KPISummary(
        total_sales=total_sales,
        total_cogs=total_cogs,
        gross_profit=gross_profit,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_margin=margin_pct(net_profit, total_sales),
    )
