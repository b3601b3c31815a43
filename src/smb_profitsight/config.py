# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB ProfitSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- falling back to built-in defaults when the default file is absent,
- exposing typed dataclasses used by the rest of the application.
"""

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .alerts import AlertThresholds
from .db import DatabaseConfig
from .report import ReportSettings

DEFAULT_CONFIG_FILE = "smb_profitsight_config.toml"
DEFAULT_DB_PATH = "data/db/smb_profitsight.sqlite"

DISPLAY_MODES = ("table", "csv", "both")
NUMERALS = ("latin", "arabic")


@dataclass(frozen=True)
class ReportConfig:
    """Report defaults: window length (days) and display currency."""

    default_window_days: int
    currency: str


@dataclass(frozen=True)
class ClassificationConfig:
    """Status thresholds of the customer/product and supplier tables."""

    profitable_margin: float
    moderate_margin: float
    good_price: float
    moderate_price: float


@dataclass(frozen=True)
class DisplayConfig:
    mode: str
    decimals: int
    numerals: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    dir: Path


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB ProfitSight.

    This aggregates:
    - the database configuration (where records are stored),
    - report defaults (window, currency),
    - alert and classification thresholds,
    - display options for tables,
    - logging options.
    """

    database: DatabaseConfig
    report: ReportConfig
    alerts: AlertThresholds
    classification: ClassificationConfig
    display: DisplayConfig
    logging: LoggingConfig

    def report_settings(self) -> ReportSettings:
        """Thresholds of a report run, as configured."""
        return ReportSettings(
            alerts=self.alerts,
            profitable_margin=self.classification.profitable_margin,
            moderate_margin=self.classification.moderate_margin,
            good_price=self.classification.good_price,
            moderate_price=self.classification.moderate_price,
        )


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    """Return a nested table, or {} when it is missing or not a table."""
    current: Any = raw
    for key in keys:
        current = current.get(key) if isinstance(current, Mapping) else None
    return current if isinstance(current, Mapping) else {}


def _number(section: Mapping[str, Any], key: str, default: float, where: str) -> float:
    value = section.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected a number."
        ) from exc


def _choice(
    section: Mapping[str, Any],
    key: str,
    default: str,
    allowed: tuple[str, ...],
    where: str,
) -> str:
    value = str(section.get(key, default)).lower()
    if value not in allowed:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration: {value!r}. "
            f"Expected one of: {', '.join(allowed)}."
        )
    return value


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB ProfitSight application configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        Database engine and SQLite file path.

    [report]
        default_window_days (default 30) and currency (default "EGP").

    [alerts]
        min_sales (default 1000) and max_margin (default 10) of the
        'high sales, low margin' alert.

    [classification.customers]
        profitable (default 20) and moderate (default 10) margin thresholds.

    [classification.suppliers]
        good (default 100) and moderate (default 500) price thresholds.

    [display]
        mode ("table", "csv" or "both"), decimals, numerals ("latin" or
        "arabic").

    [logging]
        level (default "INFO") and dir (default "logs").

    Notes
    -----
    - Every section is optional. When no path is given and the default
      ``smb_profitsight_config.toml`` does not exist in the working
      directory, the built-in defaults are used.
    - File paths in the TOML are resolved relative to the directory of the
      TOML file itself.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If an explicitly given file does not exist.
    ValueError
        If the file cannot be parsed or a value is invalid.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        raw = _load_toml(config_file) if config_file.is_file() else {}
    else:
        config_file = Path(config_path).resolve()
        raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or DEFAULT_DB_PATH
    db_path = (base_dir / str(db_path_raw)).resolve()

    # 2) Report defaults
    report_section = _section(raw, "report")
    try:
        window_days = int(report_section.get("default_window_days", 30))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid value for 'report.default_window_days' in the configuration. "
            "Expected an integer."
        ) from exc
    if window_days < 1:
        raise ValueError("'report.default_window_days' must be at least 1.")
    currency = str(report_section.get("currency") or "EGP")

    # 3) Alert thresholds
    alerts_section = _section(raw, "alerts")
    alerts = AlertThresholds(
        min_sales=_number(alerts_section, "min_sales", 1000.0, "alerts"),
        max_margin=_number(alerts_section, "max_margin", 10.0, "alerts"),
    )

    # 4) Classification thresholds
    customers_section = _section(raw, "classification", "customers")
    suppliers_section = _section(raw, "classification", "suppliers")
    classification = ClassificationConfig(
        profitable_margin=_number(
            customers_section, "profitable", 20.0, "classification.customers"
        ),
        moderate_margin=_number(
            customers_section, "moderate", 10.0, "classification.customers"
        ),
        good_price=_number(
            suppliers_section, "good", 100.0, "classification.suppliers"
        ),
        moderate_price=_number(
            suppliers_section, "moderate", 500.0, "classification.suppliers"
        ),
    )

    # 5) Display options
    display_section = _section(raw, "display")
    display_mode = _choice(display_section, "mode", "table", DISPLAY_MODES, "display")
    numerals = _choice(display_section, "numerals", "latin", NUMERALS, "display")
    try:
        decimals = int(display_section.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    # 6) Logging options
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level") or "INFO").upper()
    log_dir = (base_dir / str(logging_section.get("dir") or "logs")).resolve()

    return AppConfig(
        database=DatabaseConfig(engine=db_engine, path=db_path),
        report=ReportConfig(default_window_days=window_days, currency=currency),
        alerts=alerts,
        classification=classification,
        display=DisplayConfig(mode=display_mode, decimals=decimals, numerals=numerals),
        logging=LoggingConfig(level=log_level, dir=log_dir),
    )
