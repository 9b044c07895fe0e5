import json

import pytest

from normalizer import (
    NO_ADDRESS, NO_CONTACT, NO_EMAIL, NOT_SET, UNKNOWN_NAME,
    assign_sequential_ids, normalize_order, order_amount,
)


@pytest.mark.parametrize("stub, detail", [
    ({"id": "o1", "typeoforder": "mystery"}, {"name": "Bob"}),
    ({"id": "o2", "typeoforder": "party_order", "party_order_id": "missing"}, None),
    ({"id": "o3"}, None),
    ({"id": "o4", "typeoforder": ["not", "a", "tag"]}, "garbage"),
    ({}, {}),
    (None, None),
])
def test_normalize_never_fails(stub, detail):
    order = normalize_order(stub, detail, None)

    assert order is not None
    assert order.created_at == NOT_SET
    assert order.order_status == "pending"
    assert order.user_name == UNKNOWN_NAME
    assert order.user_email == NO_EMAIL
    assert order.user_contact == NO_CONTACT
    assert order.user_address == NO_ADDRESS
    assert order.user_id == "unknown"


def test_unknown_type_gets_empty_details():
    order = normalize_order(
        {"id": "o1", "typeoforder": "catering", "created_at": "2024-05-01T10:00:00"},
        {"name": "Bob", "total_amount": 99},
    )

    assert order.type_of_order == "unknown"
    assert order.details == {}
    assert order.menu_details is None
    assert order_amount(order) == 0.0


def test_missing_detail_row_gives_empty_details():
    order = normalize_order(
        {"id": "o1", "typeoforder": "menuorder", "menuorder_id": "m1"}, None
    )

    assert order.type_of_order == "menuorder"
    assert order.details == {}
    assert order.menu_details is None


def test_profile_fills_in_missing_detail_name():
    order = normalize_order(
        {"id": "o1", "typeoforder": "reservation", "reservation_id": "r1"},
        {"name": None, "guests": 2},
        {"full_name": "Alice"},
    )

    assert order.user_name == "Alice"
    assert order.details["name"] == "Alice"


def test_detail_value_wins_over_profile():
    order = normalize_order(
        {"id": "o1", "typeoforder": "party_order", "party_order_id": "p1"},
        {"name": "Office Party", "contact": "0700", "email": None},
        {"full_name": "Alice", "phone": "0800", "email": "alice@example.com"},
    )

    assert order.user_name == "Office Party"
    assert order.user_contact == "0700"
    assert order.user_email == "alice@example.com"


def test_no_name_anywhere_is_unknown():
    order = normalize_order(
        {"id": "o1", "typeoforder": "reservation", "reservation_id": "r1"},
        {"name": None},
        {"full_name": None},
    )

    assert order.user_name == "Unknown"


def test_takeaway_status_comes_from_order_status_column():
    selections = [
        {"item_id": "a", "name": "Samosa", "price": 4.5, "quantity": 2},
        {"item_id": "b", "name": "Naan", "price": 2.0, "quantity": 1},
    ]
    order = normalize_order(
        {"id": "o1", "typeoforder": "takeaway_order", "takeaway_order_id": "t1"},
        {"order_status": "confirmed", "status": "ignored",
         "menu_selections": json.dumps(selections), "pickup_time": "18:30"},
    )

    assert order.order_status == "confirmed"
    assert order.details["pickup_time"] == "18:30"
    assert order.details["instructions"] == "None"
    # no stored total, so it is summed from the selections
    assert order.details["total_amount"] == 11.0
    assert order_amount(order) == 11.0


def test_menu_order_details():
    order = normalize_order(
        {"id": "o1", "typeoforder": "menuorder", "menuorder_id": "m1",
         "user_id": "u1", "created_at": "2024-05-15T12:00:00"},
        {
            "items": json.dumps([{"id": "x", "name": "Biryani", "price": 12.75, "quantity": 2}]),
            "total_amount": 25.5,
            "shipping_info": json.dumps({"address": "1 High St"}),
            "payment_method": "COD",
            "status": "completed",
        },
        {"full_name": "Alice", "address": "Profile Rd"},
    )

    assert order.details == {}
    assert order.menu_details.items == [
        {"name": "Biryani", "price": 12.75, "quantity": 2, "item_id": "x"}
    ]
    assert order.menu_details.shipping_address == "1 High St"
    assert order.user_address == "1 High St"
    assert order.order_status == "completed"
    assert order_amount(order) == 25.5


def test_reservation_contributes_no_revenue():
    order = normalize_order(
        {"id": "o1", "typeoforder": "reservation", "reservation_id": "r1"},
        {"name": "Bob", "guests": "4", "date": "2024-06-01", "total_amount": 50},
    )

    assert order.details["guests"] == 4
    assert order.details["time"] == NOT_SET
    assert order_amount(order) == 0.0


def test_with_status_updates_every_copy():
    order = normalize_order(
        {"id": "o1", "typeoforder": "takeaway_order", "takeaway_order_id": "t1"},
        {"order_status": "pending"},
    )

    updated = order.with_status("completed", "order_status")

    assert updated.order_status == "completed"
    assert updated.details["order_status"] == "completed"
    assert order.order_status == "pending"
    assert order.details["order_status"] == "pending"


def test_sequential_ids_follow_creation_time():
    stubs = [
        {"id": "c", "created_at": None},
        {"id": "b", "created_at": "2024-05-02T00:00:00"},
        {"id": "a", "created_at": "2024-05-01T00:00:00"},
    ]

    numbered = assign_sequential_ids(stubs)

    assert [(n, s["id"]) for n, s in numbered] == [(1, "a"), (2, "b"), (3, "c")]
