# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
SMB ProfitSight
---------------

A Python-based profitability analytics application for small businesses that
buy and sell inventory. The project provides a pure, snapshot-based
computation engine and a thin command-line interface.

Main capabilities:
- date-bounded weighted-average purchase cost valuation (no look-ahead),
- cost of goods sold per sales line, with smallest/largest unit normalization,
- KPI summary (sales, COGS, gross profit, operating expenses, net profit,
  profit margin),
- per-product, per-customer and per-supplier profitability tables,
- threshold-based alerts (high sales with low margin, loss-making products),
- multi-period KPI series,
- a SQLite store and CSV import for the raw business records.

SMB ProfitSight separates computation (core modules operating on pandas
DataFrames), configuration (TOML), persistence (SQLite) and presentation
(CLI), so the engine can be reused from any caller holding an in-memory
snapshot of the records.


Version: 0.2.0

Usage:
    python -m smb_profitsight.cli --help
"""

__all__ = [
    "filters",
    "costing",
    "cogs",
    "kpis",
    "profitability",
    "alerts",
    "report",
    "io",
    "periods",
    "db",
    "views",
    "config",
    "logging_config",
    "cli",
]

__version__ = "0.2.0"
