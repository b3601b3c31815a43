import pandas as pd
import pytest

from smb_profitsight.io import (
    TABLE_SCHEMAS,
    load_snapshot,
    normalize_table,
    read_csv_directory,
    snapshot_from_records,
)


def test_camel_case_columns_and_price_alias(snapshot):
    items = snapshot.purchase_invoice_items
    assert list(items.columns) == list(TABLE_SCHEMAS["purchase_invoice_items"])
    assert items.loc[0, "invoice_id"] == "purch-inv-001"
    assert items.loc[0, "unit_price"] == 8.0

    products = snapshot.products
    assert products.set_index("id").loc["prod-003", "conversion_factor"] == 1000.0


def test_canonical_column_wins_over_alias():
    df = normalize_table(
        "sales_invoice_items",
        [{"invoice_id": "i1", "product_id": "p1", "unit_price": 5, "price": 99}],
    )
    assert df.loc[0, "unit_price"] == 5.0


def test_missing_numbers_default_to_zero_and_factor_to_one():
    products = normalize_table(
        "products", [{"id": "p1", "conversion_factor": None}, {"id": "p2"}]
    )
    assert products["conversion_factor"].tolist() == [1.0, 1.0]

    invoices = normalize_table(
        "sales_invoices", [{"id": "s1", "date": "2025-01-01", "total": "oops"}]
    )
    assert invoices.loc[0, "total"] == 0.0
    assert invoices.loc[0, "customer_id"] == ""


def test_line_items_get_generated_ids():
    items = normalize_table(
        "sales_invoice_items",
        [
            {"invoice_id": "i1", "product_id": "p1"},
            {"invoice_id": "i1", "product_id": "p2", "id": "keep-me"},
            {"invoice_id": "i2", "product_id": "p1"},
        ],
    )
    assert items["id"].tolist() == ["i1:1", "keep-me", "i2:1"]


def test_unknown_table_is_rejected():
    with pytest.raises(ValueError):
        normalize_table("orders", [])
    with pytest.raises(ValueError, match="orders"):
        snapshot_from_records({"orders": []})


def test_missing_tables_are_empty(snapshot):
    empty = snapshot_from_records({})
    assert all(size == 0 for size in empty.table_sizes().values())
    assert snapshot.table_sizes()["sales_invoice_items"] == 4


def test_read_csv_directory(tmp_path):
    pd.DataFrame(
        [{"id": "007", "name": "Bolt", "category": "Hardware", "conversionFactor": "50"}]
    ).to_csv(tmp_path / "products.csv", index=False)
    pd.DataFrame(
        [{"id": "s1", "customerId": "c1", "date": "2025-01-01T10:00:00", "total": "12.5"}]
    ).to_csv(tmp_path / "sales_invoices.csv", index=False)

    snap = read_csv_directory(tmp_path)

    assert snap.products.loc[0, "id"] == "007"
    assert snap.products.loc[0, "conversion_factor"] == 50.0
    assert snap.sales_invoices.loc[0, "date"] == "2025-01-01T10:00:00"
    assert snap.sales_invoices.loc[0, "total"] == 12.5
    assert snap.customers.empty


def test_read_csv_directory_requires_a_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_csv_directory(tmp_path / "nope")


class _ListRepository:
    def __init__(self, records):
        self.records = records

    def list_products(self):
        return self.records["products"]

    def list_purchase_invoices(self):
        return self.records["purchase_invoices"]

    def list_purchase_items(self):
        return self.records["purchase_invoice_items"]

    def list_sales_invoices(self):
        return self.records["sales_invoices"]

    def list_sales_items(self):
        return self.records["sales_invoice_items"]

    def list_expenses(self):
        return self.records["operating_expenses"]

    def list_customers(self):
        return self.records["customers"]

    def list_suppliers(self):
        return self.records["suppliers"]


def test_load_snapshot_from_any_repository(records, snapshot):
    loaded = load_snapshot(_ListRepository(records))
    assert loaded.table_sizes() == snapshot.table_sizes()
    pd.testing.assert_frame_equal(loaded.sales_invoices, snapshot.sales_invoices)
