# SMB ProfitSight - Profitability analytics for SMB inventory & sales
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB ProfitSight.

The computation engine returns raw floats. This module prepares those
results for display or CSV export:

- ``kpis_to_dataframe``: KPI summary as a key / label / value / unit table,
- ``round_money_columns``: rounding of the numeric columns of entity tables,
- ``format_arabic_number``, ``format_currency``, ``format_percentage``:
  string formatting with Latin or Eastern-Arabic numerals,
- ``STATUS_LABELS`` / ``status_label``: display labels of the customer and
  supplier statuses.

Eastern-Arabic numerals use the digits ٠١٢٣٤٥٦٧٨٩, '٬' as thousands separator
and '٫' as decimal separator, e.g. 1234.5 -> '١٬٢٣٤٫٥٠'.
"""

import math

import pandas as pd

from .kpis import KPISummary
from .report import KPI_LABELS

ARABIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")
ARABIC_THOUSANDS_SEPARATOR = "٬"
ARABIC_DECIMAL_SEPARATOR = "٫"

LATIN = "latin"
ARABIC = "arabic"

STATUS_LABELS: dict[str, dict[str, str]] = {
    "customers": {
        "profitable": "مربح جداً",
        "moderate": "مربح",
        "low": "ربح منخفض",
        "loss": "خسارة",
    },
    "products": {
        "profitable": "مربح جداً",
        "moderate": "مربح",
        "low": "ربح منخفض",
        "loss": "خسارة",
    },
    "suppliers": {
        "good": "سعر مناسب",
        "moderate": "متوسط",
        "high": "سعر مرتفع",
    },
}

_KPI_UNITS = {"profit_margin": "percent"}


def status_label(entity: str, status: str, numerals: str = LATIN) -> str:
    """Display label of a status; the raw status unless numerals is 'arabic'."""
    if numerals != ARABIC:
        return status
    return STATUS_LABELS.get(entity, {}).get(status, status)


def _as_number(value) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def format_arabic_number(value, decimals: int = 2) -> str:
    """
    Format a number with Eastern-Arabic digits and separators.

    None and NaN are formatted as 0.

    >>> format_arabic_number(1234.5)
    '١٬٢٣٤٫٥٠'
    >>> format_arabic_number(None, 0)
    '٠'
    """
    latin = f"{_as_number(value):,.{decimals}f}"
    swapped = latin.replace(",", ARABIC_THOUSANDS_SEPARATOR).replace(
        ".", ARABIC_DECIMAL_SEPARATOR
    )
    return swapped.translate(ARABIC_DIGITS)


def format_number(value, decimals: int = 2, numerals: str = LATIN) -> str:
    if numerals == ARABIC:
        return format_arabic_number(value, decimals)
    return f"{_as_number(value):,.{decimals}f}"


def format_currency(
    value, currency: str = "EGP", numerals: str = LATIN, decimals: int = 2
) -> str:
    """Format an amount followed by its currency, e.g. '1,234.50 EGP'."""
    return f"{format_number(value, decimals, numerals)} {currency}"


def format_percentage(value, numerals: str = LATIN, decimals: int = 2) -> str:
    """Format a percentage value, e.g. 12.5 -> '12.50%'."""
    return f"{format_number(value, decimals, numerals)}%"


def kpis_to_dataframe(kpis: KPISummary, decimals: int = 2) -> pd.DataFrame:
    """
    Convert a KPISummary into a display/export DataFrame.

    Columns:
        - key:   KPI identifier (e.g. "net_profit").
        - label: Human-readable label.
        - value: Value rounded to `decimals`.
        - unit:  "amount" or "percent".
    """
    rows = [
        {
            "key": key,
            "label": KPI_LABELS.get(key, key),
            "value": round(float(value), decimals),
            "unit": _KPI_UNITS.get(key, "amount"),
        }
        for key, value in kpis.as_dict().items()
    ]
    return pd.DataFrame(rows, columns=["key", "label", "value", "unit"])


def round_money_columns(frame: pd.DataFrame, decimals: int = 2) -> pd.DataFrame:
    """Return a copy of `frame` with every float column rounded."""
    out = frame.copy()
    float_cols = out.select_dtypes(include="float").columns
    out[float_cols] = out[float_cols].round(decimals)
    return out


def format_table(
    frame: pd.DataFrame,
    entity: str,
    numerals: str = LATIN,
    decimals: int = 2,
) -> pd.DataFrame:
    """
    Return a display copy of an entity table.

    Float columns become formatted strings ('profit_margin' as a percentage)
    and the 'status' column is translated through STATUS_LABELS when Arabic
    numerals are requested.
    """
    out = frame.copy()
    for col in out.select_dtypes(include="float").columns:
        if col == "profit_margin":
            out[col] = [format_percentage(v, numerals, decimals) for v in out[col]]
        else:
            out[col] = [format_number(v, decimals, numerals) for v in out[col]]
    if "status" in out.columns:
        out["status"] = [status_label(entity, s, numerals) for s in out["status"]]
    return out
