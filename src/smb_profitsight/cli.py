# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB ProfitSight.

This module wires together the main building blocks of SMB ProfitSight:

- application configuration (database, thresholds, display options),
- CSV import & database access,
- report orchestration (filters, cost valuation, KPIs, entity tables,
  alerts),
- view helpers (rounding, Latin or Eastern-Arabic number formatting).

The CLI is intentionally thin: it does not implement any profitability
logic itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (smb_profitsight_config.toml by default,
   built-in defaults when that file does not exist) and set up logging.

2) Initialize the database and, with ``--import DIR``, import the
   ``<table>.csv`` files of DIR into it.

3) Determine the reporting period and build the filter specification
   (period dates, optional ``--customer`` and ``--category``).

4) Load a snapshot of all records from the database and compute the
   report.

5) Render the selected scope as console tables and/or CSV files.


Period selection
----------------

Predefined periods (``--period``): ``last-30-days``, ``mtd``, ``ytd``,
``last-month``. Custom periods: ``--from-date`` / ``--to-date``
(YYYY-MM-DD). Custom dates take precedence over ``--period``; without
either, the last ``report.default_window_days`` days are used.


Scopes: what to render
----------------------

- ``kpis`` (default): KPI summary.
- ``products`` / ``customers`` / ``suppliers``: one profitability table.
- ``alerts``: high-sales-low-margin and loss-making products.
- ``all``: everything above.


Display modes and output
------------------------

``display.mode`` (config) or ``--display-mode``:

- ``table``: print tables to stdout (formatted numbers),
- ``csv``:   write CSV files only (rounded raw numbers),
- ``both``:  do both.

CSV files are written to ``--output DIR`` (default ``data/output``) with a
timestamp-based name, e.g. ``products_YYYY-MM-DD-HH-MM-SS.csv``.


Examples
--------

    python -m smb_profitsight.cli --import data/records --scope all
    python -m smb_profitsight.cli --period mtd --scope products
    python -m smb_profitsight.cli --category "category:Beverages" --scope alerts
    python -m smb_profitsight.cli --from-date 2025-01-01 --to-date 2025-03-31 \\
        --customer cust-001 --display-mode csv --output reports/q1
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DISPLAY_MODES, NUMERALS, AppConfig, load_app_config
from .db import SqliteRepository, has_records, import_snapshot, init_database
from .io import load_snapshot, read_csv_directory
from .logging_config import parse_level, setup_logging
from .periods import determine_period_from_args
from .report import ProfitReport, compute_profit_report
from .views import (
    format_currency,
    format_percentage,
    format_table,
    kpis_to_dataframe,
    round_money_columns,
)

logger = logging.getLogger(__name__)

SCOPES = ["kpis", "products", "customers", "suppliers", "alerts", "all"]
PERIODS = ["last-30-days", "mtd", "ytd", "last-month"]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m smb_profitsight.cli",
        description=(
            "SMB ProfitSight - Profitability analytics for SMB inventory & sales. "
            "Values sales at weighted-average purchase cost and renders KPIs, "
            "per-product / per-customer / per-supplier profitability and alerts."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_profitsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'smb_profitsight_config.toml' in the current directory is used "
            "when present, built-in defaults otherwise."
        ),
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Override the logging.level setting (DEBUG, INFO, WARNING, ...).",
    )

    # Optional import: feed the database from CSV files before the report
    ap.add_argument(
        "--import",
        dest="import_dir",
        metavar="DIR",
        help=(
            "Import the <table>.csv files found in DIR (products.csv, "
            "sales_invoices.csv, ...) into the database before the report."
        ),
    )

    # Period selection
    ap.add_argument(
        "--period",
        choices=PERIODS,
        help=(
            "Predefined reporting period. If not provided, the last "
            "report.default_window_days days are used."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom period start date (YYYY-MM-DD).",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom period end date (YYYY-MM-DD).",
    )

    # Filters
    ap.add_argument(
        "--customer",
        dest="customer_id",
        default="",
        help="Restrict sales to a single customer id.",
    )
    ap.add_argument(
        "--category",
        dest="category",
        default="",
        help=(
            "Restrict sales lines with a selector: 'category:<name>' or "
            "'product:<id>'."
        ),
    )

    # Scope and display
    ap.add_argument(
        "--scope",
        choices=SCOPES,
        default="kpis",
        help="Select what to render.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=DISPLAY_MODES,
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. Defaults to 'data/output'."
        ),
    )
    ap.add_argument(
        "--numerals",
        choices=NUMERALS,
        help="Override the display.numerals setting for console tables.",
    )

    return ap


def _kpis_display(
    report: ProfitReport, config: AppConfig, numerals: str
) -> pd.DataFrame:
    """KPI table with formatted values for the console."""
    df = kpis_to_dataframe(report.kpis, decimals=config.display.decimals)
    decimals = config.display.decimals
    df["value"] = [
        format_percentage(v, numerals, decimals)
        if unit == "percent"
        else format_currency(v, config.report.currency, numerals, decimals)
        for v, unit in zip(df["value"], df["unit"])
    ]
    return df[["label", "value"]]


def _collect_sections(
    report: ProfitReport, scope: str
) -> list[tuple[str, str, pd.DataFrame]]:
    """Return (file stem, title, raw table) for every table in scope."""
    want = set(SCOPES[:-1]) if scope == "all" else {scope}

    sections: list[tuple[str, str, pd.DataFrame]] = []
    if "products" in want:
        sections.append(("products", "Products profitability", report.products))
    if "customers" in want:
        sections.append(("customers", "Customers profitability", report.customers))
    if "suppliers" in want:
        sections.append(("suppliers", "Suppliers", report.suppliers))
    if "alerts" in want:
        sections.append(
            (
                "alerts_high_sales_low_margin",
                "Alerts: high sales, low margin",
                report.alerts.high_sales_low_margin,
            )
        )
        sections.append(
            (
                "alerts_loss_making",
                "Alerts: loss-making products",
                report.alerts.loss_making,
            )
        )
    return sections


def _entity_of(stem: str) -> str:
    return stem if stem in {"products", "customers", "suppliers"} else "products"


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SMB ProfitSight CLI.

    This function parses command-line arguments, loads the configuration,
    sets up logging, initializes the database, optionally imports CSV
    records, loads a snapshot of all records, computes the report for the
    selected period and filters, and finally renders the selected scope as
    console tables and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"smb_profitsight version {__version__}")
        return

    # 1) Configuration and logging
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    try:
        level = parse_level(args.log_level or config.logging.level)
    except ValueError as exc:
        parser.error(str(exc))
    setup_logging(config.logging.dir, level)
    logger.info("smb_profitsight %s started", __version__)

    # 2) Database and optional import
    try:
        init_database(config.database)
    except ValueError as exc:
        parser.error(str(exc))

    if args.import_dir:
        import_dir = Path(args.import_dir)
        if not import_dir.is_dir():
            parser.error(f"Directory for --import not found: {import_dir}")

        print(f"Importing records from {import_dir} into the database...")
        stats = import_snapshot(read_csv_directory(import_dir), config.database)
        details = ", ".join(
            f"{table}: {count}" for table, count in stats.rows_by_table.items() if count
        )
        print(f"Imported {stats.total_rows} records ({details or 'none'}).")
    elif not has_records(config.database):
        print("Warning: database is empty, use --import to load records.")

    # 3) Reporting period and filters
    try:
        period = determine_period_from_args(
            args, default_window_days=config.report.default_window_days
        )
    except ValueError as exc:
        parser.error(f"Invalid period: {exc}")

    spec = period.to_filter_spec(customer_id=args.customer_id, category=args.category)
    print(
        f"Applied period: {period.label} "
        f"({period.start.isoformat()} → {period.end.isoformat()})"
    )
    if spec.customer_id:
        print(f"Customer: {spec.customer_id}")
    if spec.category:
        print(f"Selector: {spec.category}")

    # 4) Snapshot and report
    snapshot = load_snapshot(SqliteRepository(config.database))
    logger.info("Loaded snapshot: %s", snapshot.table_sizes())
    report = compute_profit_report(snapshot, spec, config.report_settings())

    # 5) Resolve display options: config values overridden by CLI if provided.
    display_mode = args.display_mode or config.display.mode
    numerals = args.numerals or config.display.numerals
    decimals = config.display.decimals

    want_kpis = args.scope in {"kpis", "all"}
    sections = _collect_sections(report, args.scope)

    # 6) Render to console (table mode).
    if display_mode in {"table", "both"}:
        if want_kpis:
            print()
            print("=== KPIs ===")
            print(_kpis_display(report, config, numerals).to_string(index=False))

        for stem, title, table in sections:
            print()
            print(f"=== {title} ===")
            if table.empty:
                print("No data for the selected filters.")
                continue
            shown = format_table(table, _entity_of(stem), numerals, decimals)
            print(shown.to_string(index=False))

    # 7) Render to CSV files (csv mode).
    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

        outputs = list(sections)
        if want_kpis:
            outputs.insert(0, ("kpis", "", kpis_to_dataframe(report.kpis, decimals)))

        for stem, _title, table in outputs:
            path = output_dir / f"{stem}_{timestamp}.csv"
            round_money_columns(table, decimals).to_csv(path, index=False)
            print(f"Wrote {path} ({len(table)} rows)")
            logger.info("Wrote %s (%d rows)", path, len(table))


if __name__ == "__main__":
    main()
