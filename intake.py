"""
Customer-facing order intake: checkout, reservations, takeaway and party orders.

Every order is written as its detail row first and the umbrella ``orders`` row
second. The two writes are independent; nothing rolls the first back if the
second fails.
"""
import json
import logging

from discounts import apply_discount, find_active_discount
from errors import (
    AuthorizationError, NotFound, StatusUpdateError, ValidationError,
)
from menu import get_item
from models import now_iso
from normalizer import load_json, to_int
from order_types import (
    DEFAULT_STATUS, MENU_ORDER, ORDER_SOURCES, PARTY_ORDER, RESERVATION,
    TAKEAWAY_ORDER, source_for,
)
from resolver import resolve_orders

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("COD", "online")


def _object(value, label="Order details"):
    if not isinstance(value, dict):
        raise ValidationError(f"{label} must be a JSON object")
    return value


def _require(data, *fields):
    missing = [f for f in fields if not str(data.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def _positive_int(value, label):
    number = to_int(value)
    if number <= 0:
        raise ValidationError(f"Please enter a valid number of {label} greater than 0.")
    return number


def _priced_selections(store, selections):
    """Copy name and price from the menu for each selected item."""
    # form posts send the list as a JSON string
    if isinstance(selections, str):
        selections = load_json(selections, None)
    if selections is None:
        return []
    if not isinstance(selections, list):
        raise ValidationError("Selections must be a list of items")

    lines = []
    for selection in selections:
        if not isinstance(selection, dict):
            raise ValidationError("Each selection needs an item_id and a quantity")
        quantity = to_int(selection.get("quantity"))
        if quantity <= 0:
            continue
        item_id = selection.get("item_id")
        if not isinstance(item_id, (str, int)):
            raise ValidationError("Each selection needs an item_id and a quantity")
        item = get_item(store, str(item_id))
        lines.append({
            "item_id": item["id"],
            "name": item["name"],
            "price": item["price"],
            "quantity": quantity,
        })
    return lines


def _total(lines):
    return round(sum(line["price"] * line["quantity"] for line in lines), 2)


def _create(store, user_id, order_type, detail):
    source = ORDER_SOURCES[order_type]
    created_at = now_iso()
    row = store.insert(source.table, {
        **detail,
        "user_id": user_id,
        source.status_column: DEFAULT_STATUS,
        "created_at": created_at,
    })[0]
    stub = store.insert("orders", {
        "user_id": user_id,
        "typeoforder": order_type,
        "created_at": created_at,
        source.foreign_key: row["id"],
    })[0]
    logger.info("New %s %s for user %s", order_type, stub["id"], user_id)
    return stub, row


def checkout(store, user_id, cart, shipping_info, payment_method="COD",
             discount_code=None, vat_rate=0.2, today=None):
    if cart.is_empty():
        raise ValidationError("Your cart is empty")
    shipping_info = _object(shipping_info or {}, "Shipping info")
    _require(shipping_info, "address")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Unsupported payment method")

    subtotal = cart.total
    discount = find_active_discount(store, discount_code, today) if discount_code else None
    off = apply_discount(subtotal, discount)
    total = round((subtotal - off) * (1 + vat_rate), 2)

    stub, row = _create(store, user_id, MENU_ORDER, {
        "items": json.dumps(cart.items),
        "total_amount": total,
        "shipping_info": json.dumps(shipping_info),
        "payment_method": payment_method,
    })
    cart.clear()
    return {
        "order_id": stub["id"],
        "subtotal": subtotal,
        "discount": off,
        "vat": round(total - (subtotal - off), 2),
        "total": total,
    }


def place_reservation(store, user_id, data):
    data = _object(data)
    _require(data, "name", "contact", "date", "time")
    guests = _positive_int(data.get("guests"), "guests")
    stub, _ = _create(store, user_id, RESERVATION, {
        "name": data["name"],
        "contact": data["contact"],
        "email": data.get("email") or None,
        "date": data["date"],
        "time": data["time"],
        "guests": guests,
        "special_requests": data.get("special_requests") or None,
    })
    return stub


def place_takeaway_order(store, user_id, data):
    data = _object(data)
    lines = _priced_selections(store, data.get("menu_selections"))
    if not lines:
        raise ValidationError("Please select at least one item for your takeaway order.")
    _require(data, "name", "contact", "pickup_time")
    stub, _ = _create(store, user_id, TAKEAWAY_ORDER, {
        "name": data["name"],
        "contact": data["contact"],
        "address": data.get("address") or None,
        "pickup_time": data["pickup_time"],
        "instructions": data.get("instructions") or None,
        "menu_selections": json.dumps(lines),
        "total_amount": _total(lines),
    })
    return stub


def place_party_order(store, user_id, data):
    data = _object(data)
    lines = _priced_selections(store, data.get("dish_selections"))
    if not lines:
        raise ValidationError("Please select at least one dish for your party order.")
    _require(data, "name", "contact", "event_date")
    guest_count = _positive_int(data.get("guest_count"), "guests")
    stub, _ = _create(store, user_id, PARTY_ORDER, {
        "name": data["name"],
        "contact": data["contact"],
        "email": data.get("email") or None,
        "address": data.get("address") or None,
        "guest_count": guest_count,
        "event_date": data["event_date"],
        "dish_selections": json.dumps(lines),
        "delivery_method": data.get("delivery_method") or None,
        "special_requests": data.get("special_requests") or None,
        "total_amount": _total(lines),
    })
    return stub


def list_customer_orders(store, user_id, workers=1):
    stubs = store.select("orders", {"user_id": user_id})
    profile = store.select_one("profiles", {"id": user_id})
    orders = resolve_orders(store, stubs, [profile] if profile else [], workers)
    return sorted(orders, key=lambda o: o.sequential_id, reverse=True)


def get_customer_order(store, user_id, order_id):
    stub = store.select_one("orders", {"id": order_id})
    if stub is None:
        raise NotFound("Order not found")
    if stub["user_id"] != user_id:
        raise AuthorizationError("This is not your order")
    profile = store.select_one("profiles", {"id": user_id})
    return resolve_orders(store, [stub], [profile] if profile else [])[0]


def cancel_own_order(store, user_id, order_id):
    """A customer may cancel their own order while it is still pending."""
    stub = store.select_one("orders", {"id": order_id})
    if stub is None:
        raise NotFound("Order not found")
    if stub["user_id"] != user_id:
        raise AuthorizationError("This is not your order")

    _, source, key = source_for(stub)
    if source is None:
        raise NotFound("Order has no detail record")
    # read failures propagate: an unknown status must never pass as pending
    detail = store.select_one(source.table, {"id": key})
    if detail is None:
        raise NotFound("Order details not found")
    if (detail.get(source.status_column) or DEFAULT_STATUS) != DEFAULT_STATUS:
        raise ValidationError("Order cannot be cancelled now.")

    if not store.update(source.table, {source.status_column: "cancelled"}, {"id": key}):
        raise StatusUpdateError("Failed to cancel order: record not found")
    logger.info("Order %s cancelled by customer %s", order_id, user_id)
