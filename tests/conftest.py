import pytest

from smb_profitsight.filters import FilterSpec
from smb_profitsight.io import snapshot_from_records

# Fixed calendar used by the sample records.
TODAY = "2025-03-15"
YESTERDAY = "2025-03-14"
LAST_WEEK = "2025-03-08"
LAST_MONTH = "2025-02-13"


def _at_ten(day: str) -> str:
    return f"{day}T10:00:00"


@pytest.fixture
def records():
    """Raw records in the camelCase shape of the exported records."""
    return {
        "products": [
            {
                "id": "prod-001",
                "name": "Product A",
                "category": "Category 1",
                "smallestUnit": "piece",
                "largestUnit": "carton",
                "conversionFactor": 12,
            },
            {
                "id": "prod-002",
                "name": "Product B",
                "category": "Category 1",
                "smallestUnit": "piece",
                "largestUnit": "carton",
                "conversionFactor": 10,
            },
            {
                "id": "prod-003",
                "name": "Product C",
                "category": "Category 2",
                "smallestUnit": "kilo",
                "largestUnit": "ton",
                "conversionFactor": 1000,
            },
        ],
        "customers": [
            {"id": "cust-001", "name": "Customer A"},
            {"id": "cust-002", "name": "Customer B"},
        ],
        "suppliers": [
            {"id": "supp-001", "name": "Supplier A"},
            {"id": "supp-002", "name": "Supplier B"},
        ],
        "purchase_invoices": [
            {
                "id": "purch-inv-001",
                "supplierId": "supp-001",
                "date": _at_ten(LAST_MONTH),
                "total": 1000,
                "paid": 800,
                "remaining": 200,
            },
            {
                "id": "purch-inv-002",
                "supplierId": "supp-001",
                "date": _at_ten(LAST_WEEK),
                "total": 1500,
                "paid": 1500,
                "remaining": 0,
            },
            {
                "id": "purch-inv-003",
                "supplierId": "supp-002",
                "date": _at_ten(YESTERDAY),
                "total": 2000,
                "paid": 1000,
                "remaining": 1000,
            },
        ],
        "purchase_invoice_items": [
            {
                "id": "purch-item-001",
                "invoiceId": "purch-inv-001",
                "productId": "prod-001",
                "quantity": 50,
                "unit": "smallest",
                "price": 8,
            },
            {
                "id": "purch-item-002",
                "invoiceId": "purch-inv-001",
                "productId": "prod-002",
                "quantity": 30,
                "unit": "smallest",
                "price": 12,
            },
            {
                "id": "purch-item-003",
                "invoiceId": "purch-inv-002",
                "productId": "prod-001",
                "quantity": 100,
                "unit": "smallest",
                "price": 9,
            },
            {
                "id": "purch-item-004",
                "invoiceId": "purch-inv-003",
                "productId": "prod-003",
                "quantity": 2,
                "unit": "largest",
                "price": 15000,
            },
        ],
        "sales_invoices": [
            {
                "id": "sales-inv-001",
                "customerId": "cust-001",
                "date": _at_ten(LAST_WEEK),
                "total": 500,
                "paid": 500,
                "remaining": 0,
            },
            {
                "id": "sales-inv-002",
                "customerId": "cust-001",
                "date": _at_ten(YESTERDAY),
                "total": 800,
                "paid": 400,
                "remaining": 400,
            },
            {
                "id": "sales-inv-003",
                "customerId": "cust-002",
                "date": _at_ten(TODAY),
                "total": 1200,
                "paid": 0,
                "remaining": 1200,
            },
        ],
        "sales_invoice_items": [
            {
                "id": "sales-item-001",
                "invoiceId": "sales-inv-001",
                "productId": "prod-001",
                "quantity": 20,
                "unit": "smallest",
                "price": 10,
            },
            {
                "id": "sales-item-002",
                "invoiceId": "sales-inv-001",
                "productId": "prod-002",
                "quantity": 10,
                "unit": "smallest",
                "price": 15,
            },
            {
                "id": "sales-item-003",
                "invoiceId": "sales-inv-002",
                "productId": "prod-001",
                "quantity": 30,
                "unit": "smallest",
                "price": 10,
            },
            {
                "id": "sales-item-004",
                "invoiceId": "sales-inv-003",
                "productId": "prod-003",
                "quantity": 1,
                "unit": "largest",
                "price": 20000,
            },
        ],
        "operating_expenses": [
            {"id": "exp-001", "date": _at_ten(LAST_WEEK), "amount": 100},
            {"id": "exp-002", "date": _at_ten(YESTERDAY), "amount": 200},
            {"id": "exp-003", "date": _at_ten(TODAY), "amount": 150},
        ],
    }


@pytest.fixture
def snapshot(records):
    return snapshot_from_records(records)


@pytest.fixture
def march_spec():
    """Covers last week, yesterday and today; excludes last month."""
    return FilterSpec(from_date="2025-03-01", to_date=TODAY)
