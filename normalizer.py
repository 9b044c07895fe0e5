"""
Turns an umbrella order row plus its detail row into one normalized Order.

The four order tables share almost no columns, so everything the dashboard
shows is copied into a uniform shape here. Missing values are replaced with
the placeholder strings below rather than None, and normalization never
raises: a bad or missing detail row just gives an order with no details.
"""
import json
from dataclasses import asdict, dataclass, field, replace
from typing import Optional

from order_types import (
    DEFAULT_STATUS, MENU_ORDER, ORDER_SOURCES, PARTY_ORDER, RESERVATION,
    TAKEAWAY_ORDER, UNKNOWN,
)

NOT_SET = "Not Set"
UNKNOWN_NAME = "Unknown"
NO_EMAIL = "No Email"
NO_CONTACT = "No Contact"
NO_ADDRESS = "No Address"
UNKNOWN_USER = "unknown"


@dataclass
class MenuDetails:
    items: list = field(default_factory=list)
    total_amount: float = 0.0
    shipping_address: Optional[str] = None
    payment_method: Optional[str] = None
    status: Optional[str] = None


@dataclass
class Order:
    id: str
    sequential_id: int
    type_of_order: str
    user_id: str
    user_name: str
    user_email: str
    user_contact: str
    user_address: str
    created_at: str
    order_status: str
    details: dict = field(default_factory=dict)
    menu_details: Optional[MenuDetails] = None
    reservation_id: Optional[str] = None
    party_order_id: Optional[str] = None
    takeaway_order_id: Optional[str] = None
    menuorder_id: Optional[str] = None

    def to_dict(self):
        return asdict(self)

    def with_status(self, status, status_column="status"):
        """Copy of this order carrying a new status everywhere it is shown."""
        details = dict(self.details)
        if details:
            details[status_column] = status
        menu_details = self.menu_details
        if menu_details is not None:
            menu_details = replace(menu_details, status=status)
        return replace(self, order_status=status, details=details,
                       menu_details=menu_details)


def load_json(value, default):
    if value is None or value == "":
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default


def to_float(value):
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def to_int(value):
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def line_items(raw):
    """Selections and cart items as a clean list of {name, price, quantity, ...}."""
    items = []
    for item in load_json(raw, []):
        if not isinstance(item, dict):
            continue
        line = {
            "name": item.get("name") or UNKNOWN_NAME,
            "price": to_float(item.get("price")),
            "quantity": to_int(item.get("quantity")),
        }
        if item.get("item_id") or item.get("id"):
            line["item_id"] = item.get("item_id") or item.get("id")
        if item.get("image_url"):
            line["image_url"] = item["image_url"]
        items.append(line)
    return items


def items_total(items):
    return round(sum(i["price"] * i["quantity"] for i in items), 2)


def _first(*values):
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _party_details(row, customer):
    return {
        **customer,
        "guest_count": to_int(row.get("guest_count")),
        "event_date": row.get("event_date") or NOT_SET,
        "dish_selections": line_items(row.get("dish_selections")),
        "delivery_method": row.get("delivery_method") or "Not Specified",
        "special_requests": row.get("special_requests") or "None",
        "status": row.get("status") or DEFAULT_STATUS,
        "total_amount": to_float(row.get("total_amount")),
    }


def _takeaway_details(row, customer):
    selections = line_items(row.get("menu_selections"))
    details = {
        **customer,
        "pickup_time": row.get("pickup_time") or NOT_SET,
        "instructions": row.get("instructions") or "None",
        "menu_selections": selections,
        "order_status": row.get("order_status") or DEFAULT_STATUS,
        "total_amount": to_float(row.get("total_amount")) or items_total(selections),
    }
    details.pop("email", None)
    return details


def _reservation_details(row, customer):
    details = {
        **customer,
        "date": row.get("date") or NOT_SET,
        "time": row.get("time") or NOT_SET,
        "guests": to_int(row.get("guests")),
        "special_requests": row.get("special_requests") or "None",
        "status": row.get("status") or DEFAULT_STATUS,
        "total_amount": 0.0,
    }
    details.pop("address", None)
    return details


def _menu_details(row, address):
    shipping = load_json(row.get("shipping_info"), {})
    if not isinstance(shipping, dict):
        shipping = {}
    return MenuDetails(
        items=line_items(row.get("items")),
        total_amount=to_float(row.get("total_amount")),
        shipping_address=shipping.get("address") or address,
        payment_method=row.get("payment_method") or "Not Specified",
        status=row.get("status") or DEFAULT_STATUS,
    )


DETAIL_BUILDERS = {
    PARTY_ORDER: _party_details,
    TAKEAWAY_ORDER: _takeaway_details,
    RESERVATION: _reservation_details,
}


def normalize_order(stub, detail=None, profile=None, sequential_id=0):
    stub = stub if isinstance(stub, dict) else {}
    detail = detail if isinstance(detail, dict) else {}
    profile = profile if isinstance(profile, dict) else {}

    order_type = stub.get("typeoforder")
    if not isinstance(order_type, str) or order_type not in ORDER_SOURCES:
        order_type = UNKNOWN
        detail = {}

    shipping = load_json(detail.get("shipping_info"), {})
    shipping_address = shipping.get("address") if isinstance(shipping, dict) else None

    customer = {
        "name": _first(detail.get("name"), profile.get("full_name")) or UNKNOWN_NAME,
        "email": _first(detail.get("email"), profile.get("email")) or NO_EMAIL,
        "contact": _first(detail.get("contact"), profile.get("phone")) or NO_CONTACT,
        "address": _first(detail.get("address"), shipping_address,
                          profile.get("address")) or NO_ADDRESS,
    }

    details = {}
    menu_details = None
    status = DEFAULT_STATUS
    if detail:
        if order_type == MENU_ORDER:
            menu_details = _menu_details(detail, customer["address"])
        else:
            details = DETAIL_BUILDERS[order_type](detail, customer)
        status_column = ORDER_SOURCES[order_type].status_column
        status = detail.get(status_column) or DEFAULT_STATUS

    return Order(
        id=str(stub.get("id") or ""),
        sequential_id=sequential_id,
        type_of_order=order_type,
        user_id=stub.get("user_id") or UNKNOWN_USER,
        user_name=customer["name"],
        user_email=customer["email"],
        user_contact=customer["contact"],
        user_address=customer["address"],
        created_at=stub.get("created_at") or NOT_SET,
        order_status=status,
        details=details,
        menu_details=menu_details,
        reservation_id=stub.get("reservation_id"),
        party_order_id=stub.get("party_order_id"),
        takeaway_order_id=stub.get("takeaway_order_id"),
        menuorder_id=stub.get("menuorder_id"),
    )


def assign_sequential_ids(stubs):
    """
    Number stubs 1..n by creation time, undated ones last.

    The number is a display ordinal for this batch only; it changes whenever
    the set of orders changes and must not be used as a key.
    """
    def sort_key(stub):
        created = stub.get("created_at")
        return (created in (None, "", NOT_SET), str(created or ""), str(stub.get("id") or ""))

    return [(index + 1, stub) for index, stub in enumerate(sorted(stubs, key=sort_key))]


def order_amount(order):
    if order.type_of_order == MENU_ORDER:
        return to_float(order.menu_details.total_amount) if order.menu_details else 0.0
    if order.type_of_order in ORDER_SOURCES:
        return to_float(order.details.get("total_amount"))
    return 0.0
