from datetime import date

import pytest

from discounts import (
    apply_discount, create_discount, delete_discount, find_active_discount,
    list_discounts, toggle_status, validate_discount,
)
from errors import NotFound, ValidationError
from helpers import FakeStore


def test_both_amounts_are_rejected_before_insert():
    store = FakeStore()

    with pytest.raises(ValidationError, match="not both"):
        create_discount(store, {
            "code": "SAVE", "discount_percentage": 10, "fixed_discount": 5,
            "expiry_date": "2030-01-01",
        })

    assert store.calls_to("insert") == []
    assert store.calls == []


def test_neither_amount_is_rejected():
    store = FakeStore()

    with pytest.raises(ValidationError, match="either"):
        create_discount(store, {"code": "SAVE", "expiry_date": "2030-01-01",
                                "discount_percentage": "", "fixed_discount": None})
    assert store.calls == []


@pytest.mark.parametrize("data", [
    {"code": "", "fixed_discount": 5, "expiry_date": "2030-01-01"},
    {"code": "SAVE", "fixed_discount": 5, "expiry_date": ""},
    {"code": "SAVE", "discount_percentage": 150, "expiry_date": "2030-01-01"},
    {"code": "SAVE", "discount_percentage": "ten", "expiry_date": "2030-01-01"},
    {"code": "SAVE", "fixed_discount": -1, "expiry_date": "2030-01-01"},
    {"code": "SAVE", "fixed_discount": 5, "expiry_date": "next week"},
])
def test_invalid_discounts(data):
    with pytest.raises(ValidationError):
        validate_discount(data)


def test_create_discount():
    store = FakeStore()

    row = create_discount(store, {"code": " save10 ", "discount_percentage": "10",
                                  "expiry_date": "2030-01-01"})

    assert row["code"] == "SAVE10"
    assert row["discount_percentage"] == 10.0
    assert row["fixed_discount"] is None
    assert row["status"] == "active"


def test_duplicate_code():
    store = FakeStore({"discounts": [{"id": 1, "code": "SAVE10"}]})

    with pytest.raises(ValidationError, match="already exists"):
        create_discount(store, {"code": "save10", "fixed_discount": 2,
                                "expiry_date": "2030-01-01"})
    assert store.calls_to("insert") == []


def test_list_toggle_and_delete():
    store = FakeStore({"discounts": [
        {"id": 1, "code": "LATER", "expiry_date": "2031-01-01", "status": "active"},
        {"id": 2, "code": "SOONER", "expiry_date": "2030-01-01", "status": "active"},
    ]})

    assert [d["code"] for d in list_discounts(store)] == ["SOONER", "LATER"]

    assert toggle_status(store, 1)["status"] == "expired"
    assert [d["code"] for d in list_discounts(store, status="expired")] == ["LATER"]
    assert [d["code"] for d in list_discounts(store, search="soo")] == ["SOONER"]

    delete_discount(store, 2)
    with pytest.raises(NotFound):
        delete_discount(store, 2)


def test_find_active_discount():
    store = FakeStore({"discounts": [
        {"id": 1, "code": "OLD", "expiry_date": "2024-01-01", "status": "active",
         "fixed_discount": 5},
        {"id": 2, "code": "OFF", "expiry_date": "2030-01-01", "status": "expired",
         "fixed_discount": 5},
        {"id": 3, "code": "GOOD", "expiry_date": "2030-01-01", "status": "active",
         "fixed_discount": 5},
    ]})
    today = date(2024, 5, 15)

    assert find_active_discount(store, "good", today)["id"] == 3
    with pytest.raises(ValidationError, match="expired"):
        find_active_discount(store, "OLD", today)
    with pytest.raises(ValidationError, match="Invalid"):
        find_active_discount(store, "OFF", today)
    with pytest.raises(ValidationError, match="Invalid"):
        find_active_discount(store, "NOPE", today)


def test_apply_discount():
    assert apply_discount(50.0, {"discount_percentage": 10, "fixed_discount": None}) == 5.0
    assert apply_discount(50.0, {"discount_percentage": None, "fixed_discount": 7.5}) == 7.5
    assert apply_discount(4.0, {"discount_percentage": None, "fixed_discount": 10}) == 4.0
    assert apply_discount(50.0, None) == 0.0
