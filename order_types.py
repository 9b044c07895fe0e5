"""
Where each kind of order lives.

Reservations, party orders, takeaway orders and menu orders each keep their
content in their own table. The umbrella ``orders`` row points at exactly one
of them. Both the detail lookup and the status update go through
ORDER_SOURCES so the ``status`` / ``order_status`` column mismatch is kept in
one place.
"""
from collections import namedtuple

OrderSource = namedtuple("OrderSource", ["table", "foreign_key", "status_column"])

RESERVATION = "reservation"
PARTY_ORDER = "party_order"
TAKEAWAY_ORDER = "takeaway_order"
MENU_ORDER = "menuorder"
UNKNOWN = "unknown"

ORDER_SOURCES = {
    RESERVATION: OrderSource("reservations", "reservation_id", "status"),
    PARTY_ORDER: OrderSource("party_orders", "party_order_id", "status"),
    TAKEAWAY_ORDER: OrderSource("takeaway_orders", "takeaway_order_id", "order_status"),
    MENU_ORDER: OrderSource("menuorder", "menuorder_id", "status"),
}

FOREIGN_KEYS = tuple(source.foreign_key for source in ORDER_SOURCES.values())

ORDER_STATUSES = ("pending", "confirmed", "completed", "cancelled")
DEFAULT_STATUS = "pending"


def source_for(order):
    """
    Return (type, OrderSource, foreign key value) for a stub dict or Order.

    The type tag picks the table; only that type's foreign key is read.
    Returns (None, None, None) for an unknown tag or a missing key.
    """
    order_type = _get(order, "typeoforder") or _get(order, "type_of_order")
    source = ORDER_SOURCES.get(order_type) if isinstance(order_type, str) else None
    if source is None:
        return None, None, None
    key = _get(order, source.foreign_key)
    if not key:
        return None, None, None
    return order_type, source, key


def _get(order, name):
    if isinstance(order, dict):
        return order.get(name)
    return getattr(order, name, None)
