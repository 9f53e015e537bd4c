# tests/domains/test_services_n.py

"""
'inv' 서비스 계층의 응답 변환 함수(`group_rows_by_store`, `paginate`) 단위 테스트 모듈입니다.
"""

from datetime import date

import pytest

from app.domains.inv import models as inv_models
from app.domains.inv import services as inv_services


def make_row(store_code, material_code, qty, price=1.0, **extra):
    row = {
        "store_code": store_code,
        "store_guid": f"s-{store_code}",
        "store_name": f"store {store_code}",
        "material_guid": f"m-{material_code}",
        "material_code": material_code,
        "material_name": material_code.lower(),
        "latin_name": None,
        "unity": "kg",
        "group_guid": None,
        "group_name": None,
        "retail_price": None,
        "wholesale_price": None,
        "last_price": None,
        "store_qty": qty,
        "avg_price": price,
        "first_production_date": None,
        "last_production_date": date(2024, 1, 2),
        "nearest_expire_date": None,
        "transactions_count": 1,
    }
    row.update(extra)
    return row


def test_group_rows_includes_every_known_store():
    rows = [make_row("102", "A", 2.0, price=1.5), make_row("102", "B", 1.0)]

    stores = inv_services.group_rows_by_store(rows, stores=[])

    assert [store["code"] for store in stores] == list(inv_models.KNOWN_STORES)
    by_code = {store["code"]: store for store in stores}
    assert by_code["12"]["materials"] == []
    assert by_code["12"]["name"] == inv_models.KNOWN_STORES["12"]
    assert by_code["102"]["materials_count"] == 2
    assert by_code["102"]["total_quantity"] == 3.0
    assert by_code["102"]["total_value"] == pytest.approx(4.0)
    assert by_code["102"]["materials"][0]["last_production_date"] == "2024-01-02"


def test_group_rows_with_scope_returns_single_store():
    rows = [make_row("102", "A", 2.0), make_row("12", "C", 9.0)]
    store = inv_models.Store(guid="s-12", code="12", name="Ready")

    stores = inv_services.group_rows_by_store(rows, stores=[store], scope_code="12")

    assert len(stores) == 1
    assert stores[0]["name"] == "Ready"
    assert stores[0]["guid"] == "s-12"
    assert [item["code"] for item in stores[0]["materials"]] == ["C"]


def test_group_rows_ignores_unknown_store_rows():
    stores = inv_services.group_rows_by_store([make_row("999", "Z", 5.0)], stores=[])

    assert sum(store["materials_count"] for store in stores) == 0


@pytest.mark.parametrize(
    "page, per_page, total, expected",
    [
        (1, 10, 25, {"from": 1, "to": 10, "total_pages": 3, "has_previous": False, "has_next": True}),
        (3, 10, 25, {"from": 21, "to": 25, "total_pages": 3, "has_previous": True, "has_next": False}),
        (2, 10, 5, {"from": 11, "to": 5, "total_pages": 1, "has_previous": True, "has_next": False}),
        (1, 50, 0, {"from": 1, "to": 0, "total_pages": 0, "has_previous": False, "has_next": False}),
    ],
)
def test_paginate(page, per_page, total, expected):
    pagination = inv_services.paginate(page, per_page, total)

    assert pagination["current_page"] == page
    assert pagination["per_page"] == per_page
    assert pagination["total_items"] == total
    for key, value in expected.items():
        assert pagination[key] == value
