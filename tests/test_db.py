import pandas as pd
import pytest

from smb_profitsight.db import (
    DatabaseConfig,
    SqliteRepository,
    has_records,
    import_snapshot,
    init_database,
)
from smb_profitsight.io import load_snapshot, snapshot_from_records
from smb_profitsight.report import compute_profit_report


def make_tmp_db_cfg(tmp_path) -> DatabaseConfig:
    """Helper to build a DatabaseConfig pointing to a temporary SQLite file."""
    db_path = tmp_path / "db" / "test_db.sqlite"
    return DatabaseConfig(engine="sqlite", path=db_path)


def test_init_database_creates_file_and_schema(tmp_path):
    """init_database should create the SQLite file and an empty schema."""
    cfg = make_tmp_db_cfg(tmp_path)

    assert not cfg.path.exists()
    init_database(cfg)
    init_database(cfg)
    assert cfg.path.exists()

    # A freshly initialized database should not contain any records.
    assert has_records(cfg) is False
    assert load_snapshot(SqliteRepository(cfg)).table_sizes()["products"] == 0


def test_unsupported_engine_is_rejected(tmp_path):
    cfg = DatabaseConfig(engine="postgres", path=tmp_path / "x.db")
    with pytest.raises(ValueError, match="Unsupported database engine"):
        init_database(cfg)


def test_import_and_load_round_trip(tmp_path, snapshot):
    cfg = make_tmp_db_cfg(tmp_path)

    stats = import_snapshot(snapshot, cfg)
    assert stats.rows_by_table["sales_invoice_items"] == 4
    assert stats.total_rows == sum(snapshot.table_sizes().values())
    assert has_records(cfg) is True

    loaded = load_snapshot(SqliteRepository(cfg))
    assert loaded.table_sizes() == snapshot.table_sizes()
    pd.testing.assert_frame_equal(
        loaded.purchase_invoice_items, snapshot.purchase_invoice_items
    )
    pd.testing.assert_frame_equal(loaded.products, snapshot.products)


def test_reimport_replaces_records_by_id(tmp_path, snapshot):
    cfg = make_tmp_db_cfg(tmp_path)
    import_snapshot(snapshot, cfg)
    import_snapshot(snapshot, cfg)

    changed = snapshot_from_records(
        {
            "sales_invoices": [
                {"id": "sales-inv-003", "customerId": "cust-002", "total": 999}
            ]
        }
    )
    import_snapshot(changed, cfg)

    loaded = load_snapshot(SqliteRepository(cfg))
    assert len(loaded.sales_invoices) == 3
    totals = loaded.sales_invoices.set_index("id")["total"]
    assert totals["sales-inv-003"] == 999.0


def test_report_from_database_matches_in_memory(tmp_path, snapshot, march_spec):
    cfg = make_tmp_db_cfg(tmp_path)
    import_snapshot(snapshot, cfg)

    from_db = compute_profit_report(load_snapshot(SqliteRepository(cfg)), march_spec)
    in_memory = compute_profit_report(snapshot, march_spec)

    assert from_db.kpis.as_dict() == pytest.approx(in_memory.kpis.as_dict())
    pd.testing.assert_frame_equal(from_db.products, in_memory.products)
