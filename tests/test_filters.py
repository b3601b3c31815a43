import pandas as pd
import pytest

from smb_profitsight.filters import (
    CategorySelector,
    FilterSpec,
    apply_filters,
    date_range_mask,
    filter_items_by_selector,
    parse_category_selector,
)


def _filter(snapshot, spec):
    return apply_filters(
        spec,
        snapshot.sales_invoices,
        snapshot.sales_invoice_items,
        snapshot.products,
    )


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", CategorySelector(kind="all")),
        (None, CategorySelector(kind="all")),
        ("category:Category 1", CategorySelector(kind="category", value="Category 1")),
        ("product:prod-003", CategorySelector(kind="product", value="prod-003")),
        ("Category 1", CategorySelector(kind="other", value="Category 1")),
    ],
)
def test_parse_category_selector(raw, expected):
    assert parse_category_selector(raw) == expected


def test_date_range_is_inclusive_on_date_prefix():
    dates = pd.Series(
        ["2025-02-28T23:59:59", "2025-03-01T00:00:00", "2025-03-15T10:00:00", "2025-03-16"]
    )
    mask = date_range_mask(dates, "2025-03-01", "2025-03-15")
    assert mask.tolist() == [False, True, True, False]


@pytest.mark.parametrize("from_date,to_date", [("", "2025-03-15"), ("2025-03-01", None)])
def test_missing_bound_matches_nothing(snapshot, from_date, to_date):
    result = _filter(snapshot, FilterSpec(from_date=from_date, to_date=to_date))
    assert result.invoices.empty
    assert result.items.empty


def test_date_filter_keeps_items_of_retained_invoices(snapshot):
    result = _filter(snapshot, FilterSpec(from_date="2025-03-14", to_date="2025-03-15"))

    assert result.invoices["id"].tolist() == ["sales-inv-002", "sales-inv-003"]
    assert result.items["id"].tolist() == ["sales-item-003", "sales-item-004"]


def test_customer_filter(snapshot, march_spec):
    spec = FilterSpec(march_spec.from_date, march_spec.to_date, customer_id="cust-002")
    result = _filter(snapshot, spec)

    assert result.invoices["id"].tolist() == ["sales-inv-003"]
    assert result.items["product_id"].tolist() == ["prod-003"]


def test_category_filter_drops_invoices_without_matching_items(snapshot, march_spec):
    spec = FilterSpec(march_spec.from_date, march_spec.to_date, category="category:Category 2")
    result = _filter(snapshot, spec)

    assert result.invoices["id"].tolist() == ["sales-inv-003"]
    assert result.items["id"].tolist() == ["sales-item-004"]


def test_product_filter(snapshot, march_spec):
    spec = FilterSpec(march_spec.from_date, march_spec.to_date, category="product:prod-001")
    result = _filter(snapshot, spec)

    assert result.invoices["id"].tolist() == ["sales-inv-001", "sales-inv-002"]
    assert result.items["id"].tolist() == ["sales-item-001", "sales-item-003"]


def test_unrecognized_selector_matches_every_item(snapshot, march_spec):
    spec = FilterSpec(march_spec.from_date, march_spec.to_date, category="Category 1")
    result = _filter(snapshot, spec)

    assert len(result.invoices) == 3
    assert len(result.items) == 4


def test_category_of_unknown_product_does_not_match(snapshot):
    items = pd.DataFrame({"id": ["x"], "invoice_id": ["i"], "product_id": ["ghost"]})
    selector = CategorySelector(kind="category", value="Category 1")
    assert filter_items_by_selector(items, selector, snapshot.products).empty


def test_filtered_invoices_and_items_are_consistent(snapshot, march_spec):
    for category in ("", "category:Category 1", "product:prod-002"):
        spec = FilterSpec(march_spec.from_date, march_spec.to_date, category=category)
        result = _filter(snapshot, spec)
        assert set(result.items["invoice_id"]).issubset(set(result.invoices["id"]))


def test_filters_do_not_modify_inputs(snapshot, march_spec):
    before = snapshot.sales_invoices.copy()
    spec = FilterSpec(march_spec.from_date, march_spec.to_date, category="category:Category 1")
    _filter(snapshot, spec)
    pd.testing.assert_frame_equal(snapshot.sales_invoices, before)
