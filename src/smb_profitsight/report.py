# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report orchestration.

This module provides the high-level entry points used by the CLI (or any
other caller holding a :class:`~smb_profitsight.io.Snapshot`) to compute a
complete profitability report in a single pass.

Overview
--------
``compute_profit_report()`` runs the filter step once and feeds the same
filtered sales to every aggregation:

1. KPI summary                (kpis.compute_kpis)
2. Per-product table          (profitability.product_profitability)
3. Per-customer table         (profitability.customer_profitability)
4. Per-supplier table         (profitability.supplier_profitability)
5. Alerts                     (alerts.classify_alerts on the product table)

Because every part is computed from the same filtered set, the report is
internally consistent: the KPI total sales equal the sum of the customer
sales, the alerts are exactly the flagged rows of the product table, and so
on.

``compute_kpis_multi_period()`` evaluates the KPI summary for a list of
Period objects and returns a long-format DataFrame with a ``period_label``
column, suitable for time-series display or CSV export.

Separation of concerns
----------------------
- filters.py, costing.py, cogs.py, kpis.py, profitability.py and alerts.py
  are the single source of truth for each computation.
- report.py only sequences them; it neither loads data nor formats output.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from .alerts import AlertThresholds, Alerts, classify_alerts
from .filters import FilterSpec, apply_filters
from .io import Snapshot
from .kpis import KPISummary, compute_kpis
from .periods import Period
from .profitability import (
    DEFAULT_GOOD_PRICE,
    DEFAULT_MODERATE_MARGIN,
    DEFAULT_MODERATE_PRICE,
    DEFAULT_PROFITABLE_MARGIN,
    customer_profitability,
    product_profitability,
    supplier_profitability,
)

logger = logging.getLogger(__name__)

KPI_LABELS = {
    "total_sales": "Total sales",
    "total_cogs": "Cost of goods sold",
    "gross_profit": "Gross profit",
    "total_expenses": "Operating expenses",
    "net_profit": "Net profit",
    "profit_margin": "Profit margin",
}


@dataclass(frozen=True)
class ReportSettings:
    """
    Tunable thresholds of a report run.

    Attributes
    ----------
    alerts :
        Thresholds of the 'high sales, low margin' alert.
    profitable_margin, moderate_margin :
        Margin thresholds (%) of the customer and product status.
    good_price, moderate_price :
        Average price thresholds of the supplier status.
    """

    alerts: AlertThresholds = field(default_factory=AlertThresholds)
    profitable_margin: float = DEFAULT_PROFITABLE_MARGIN
    moderate_margin: float = DEFAULT_MODERATE_MARGIN
    good_price: float = DEFAULT_GOOD_PRICE
    moderate_price: float = DEFAULT_MODERATE_PRICE


@dataclass(frozen=True)
class ProfitReport:
    """
    Complete profitability report for one filter specification.

    Attributes
    ----------
    spec :
        The FilterSpec the report was computed for.
    kpis :
        KPI summary.
    products, customers, suppliers :
        Per-entity tables (see profitability.py for their columns).
    alerts :
        High-sales-low-margin and loss-making product lists.
    """

    spec: FilterSpec
    kpis: KPISummary
    products: pd.DataFrame
    customers: pd.DataFrame
    suppliers: pd.DataFrame
    alerts: Alerts


def compute_profit_report(
    snapshot: Snapshot,
    spec: FilterSpec,
    settings: Optional[ReportSettings] = None,
) -> ProfitReport:
    """
    Compute the KPI summary, entity tables and alerts for one filter spec.

    Parameters
    ----------
    snapshot :
        Canonical records (see io.py).
    spec :
        Filter specification (dates, customer, category/product selector).
    settings :
        Optional classification and alert thresholds. Defaults apply when
        omitted.

    Returns
    -------
    ProfitReport
    """
    settings = settings or ReportSettings()

    filtered = apply_filters(
        spec,
        snapshot.sales_invoices,
        snapshot.sales_invoice_items,
        snapshot.products,
    )
    logger.debug(
        "Filtered sales for %s..%s (customer=%r, category=%r): "
        "%d invoices, %d items",
        spec.from_date,
        spec.to_date,
        spec.customer_id,
        spec.category,
        len(filtered.invoices),
        len(filtered.items),
    )

    kpis = compute_kpis(
        filtered,
        snapshot.products,
        snapshot.purchase_invoices,
        snapshot.purchase_invoice_items,
        snapshot.operating_expenses,
        spec,
    )

    products = product_profitability(
        filtered.items,
        filtered.invoices,
        snapshot.products,
        snapshot.purchase_invoices,
        snapshot.purchase_invoice_items,
        profitable=settings.profitable_margin,
        moderate=settings.moderate_margin,
    )
    customers = customer_profitability(
        filtered.invoices,
        filtered.items,
        snapshot.customers,
        snapshot.products,
        snapshot.purchase_invoices,
        snapshot.purchase_invoice_items,
        profitable=settings.profitable_margin,
        moderate=settings.moderate_margin,
    )
    suppliers = supplier_profitability(
        snapshot.purchase_invoices,
        snapshot.purchase_invoice_items,
        snapshot.suppliers,
        snapshot.products,
        spec,
        good=settings.good_price,
        moderate=settings.moderate_price,
    )
    alerts = classify_alerts(products, settings.alerts)

    logger.debug(
        "Report rows: %d products, %d customers, %d suppliers, %d alerts",
        len(products),
        len(customers),
        len(suppliers),
        len(alerts.high_sales_low_margin) + len(alerts.loss_making),
    )

    return ProfitReport(
        spec=spec,
        kpis=kpis,
        products=products,
        customers=customers,
        suppliers=suppliers,
        alerts=alerts,
    )


def compute_kpis_multi_period(
    snapshot: Snapshot,
    periods: list[Period],
    customer_id: str = "",
    category: str = "",
) -> pd.DataFrame:
    """
    Compute the KPI summary over multiple periods.

    Returns a long-format DataFrame with one row per period and KPI:

        period_label | kpi | label | value

    Raises
    ------
    ValueError
        If no periods are provided.
    """
    if not periods:
        raise ValueError("compute_kpis_multi_period requires at least one Period.")

    rows: list[dict[str, Any]] = []
    for period in periods:
        spec = period.to_filter_spec(customer_id=customer_id, category=category)
        filtered = apply_filters(
            spec,
            snapshot.sales_invoices,
            snapshot.sales_invoice_items,
            snapshot.products,
        )
        kpis = compute_kpis(
            filtered,
            snapshot.products,
            snapshot.purchase_invoices,
            snapshot.purchase_invoice_items,
            snapshot.operating_expenses,
            spec,
        )
        logger.debug("KPIs computed for period %s", period.label)

        for key, value in kpis.as_dict().items():
            rows.append(
                {
                    "period_label": period.label,
                    "kpi": key,
                    "label": KPI_LABELS.get(key, key),
                    "value": float(value),
                }
            )

    return pd.DataFrame(rows, columns=["period_label", "kpi", "label", "value"])
