import logging
from pathlib import Path

import pandas as pd
import pytest

from smb_profitsight import __version__
from smb_profitsight.cli import main


@pytest.fixture(autouse=True)
def isolated_logging(monkeypatch):
    root = logging.getLogger()
    report = logging.getLogger("smb_profitsight.report")
    levels = (root.level, report.level)
    monkeypatch.setattr(report, "handlers", [])
    yield
    for handler in report.handlers:
        handler.close()
    root.setLevel(levels[0])
    report.setLevel(levels[1])


@pytest.fixture
def config_file(tmp_path) -> Path:
    path = tmp_path / "smb_profitsight_config.toml"
    path.write_text(
        """
[database]
engine = "sqlite"
path = "db/test.sqlite"

[logging]
level = "WARNING"
dir = "logs"
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def records_dir(tmp_path, records) -> Path:
    directory = tmp_path / "records"
    directory.mkdir()
    for table, rows in records.items():
        pd.DataFrame(rows).to_csv(directory / f"{table}.csv", index=False)
    return directory


MARCH = ["--from-date", "2025-03-01", "--to-date", "2025-03-15"]


def test_version_flag(capsys):
    main(["--version"])
    assert f"smb_profitsight version {__version__}" in capsys.readouterr().out


def test_import_then_print_kpis(config_file, records_dir, capsys):
    main(["--config", str(config_file), "--import", str(records_dir), *MARCH])

    out = capsys.readouterr().out
    assert "Imported 24 records" in out
    assert "Applied period: Custom period (2025-03-01 → 2025-03-15)" in out
    assert "=== KPIs ===" in out
    assert "2,500.00 EGP" in out
    assert (config_file.parent / "db" / "test.sqlite").exists()
    assert (config_file.parent / "logs" / "reports.log").exists()


def test_empty_database_warns(config_file, capsys):
    main(["--config", str(config_file), *MARCH])

    out = capsys.readouterr().out
    assert "database is empty" in out
    assert "0.00 EGP" in out


def test_all_scopes_written_as_csv(config_file, records_dir, tmp_path, capsys):
    out_dir = tmp_path / "out"
    main(
        [
            "--config",
            str(config_file),
            "--import",
            str(records_dir),
            *MARCH,
            "--scope",
            "all",
            "--display-mode",
            "csv",
            "--output",
            str(out_dir),
        ]
    )

    assert "=== KPIs ===" not in capsys.readouterr().out

    stems = sorted(p.name.rsplit("_", 1)[0] for p in out_dir.glob("*.csv"))
    assert stems == [
        "alerts_high_sales_low_margin",
        "alerts_loss_making",
        "customers",
        "kpis",
        "products",
        "suppliers",
    ]

    kpis = pd.read_csv(next(out_dir.glob("kpis_*.csv"))).set_index("key")
    assert kpis.loc["total_sales", "value"] == pytest.approx(2500.0)
    assert kpis.loc["total_expenses", "value"] == pytest.approx(450.0)

    products = pd.read_csv(next(out_dir.glob("products_*.csv")))
    assert products["product_id"].tolist() == ["prod-003", "prod-001", "prod-002"]


def test_customer_filter_and_arabic_numerals(config_file, records_dir, capsys):
    main(
        [
            "--config",
            str(config_file),
            "--import",
            str(records_dir),
            *MARCH,
            "--customer",
            "cust-001",
            "--scope",
            "customers",
            "--numerals",
            "arabic",
        ]
    )

    out = capsys.readouterr().out
    assert "Customer: cust-001" in out
    assert "١٬٣٠٠٫٠٠" in out
    assert "cust-002" not in out


def test_invalid_dates_exit_with_usage_error(config_file, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(
            [
                "--config",
                str(config_file),
                "--from-date",
                "2025-03-15",
                "--to-date",
                "2025-03-01",
            ]
        )
    assert excinfo.value.code == 2
    assert "Invalid period" in capsys.readouterr().err


def test_missing_import_directory(config_file, tmp_path):
    with pytest.raises(SystemExit):
        main(["--config", str(config_file), "--import", str(tmp_path / "nope")])
