"""
Publishes order status changes back to the table the order came from.
"""
import logging

from errors import (
    AuthorizationError, InvalidStatusError, OrderNotFound, StatusUpdateError,
    StoreError,
)
from order_types import ORDER_STATUSES, source_for

logger = logging.getLogger(__name__)


class OrderBoard:
    """The normalized orders an admin is looking at, plus the one opened in detail."""

    def __init__(self, orders=None):
        self.orders = list(orders or [])
        self.selected = None

    def get(self, order_id):
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def open(self, order_id):
        self.selected = self.get(order_id)
        return self.selected

    def close(self):
        self.selected = None

    def patch(self, updated):
        self.orders = [updated if o.id == updated.id else o for o in self.orders]
        if self.selected is not None and self.selected.id == updated.id:
            self.selected = updated

    def filter(self, order_type=None, status=None):
        orders = self.orders
        if order_type and order_type != "all":
            orders = [o for o in orders if o.type_of_order == order_type]
        if status and status != "all":
            orders = [o for o in orders if (o.order_status or "").lower() == status]
        return orders


class StatusDispatcher:

    def __init__(self, store, authorize):
        self.store = store
        self.authorize = authorize

    def update_status(self, user, board, order_id, new_status):
        # checked on every call, the role may have been revoked since last time
        if not self.authorize(user):
            raise AuthorizationError("Only admins can update order status.")
        if new_status not in ORDER_STATUSES:
            raise InvalidStatusError(f"Invalid status: {new_status}")

        order = board.get(order_id)
        if order is None:
            raise OrderNotFound("Order not found")
        order_type, source, key = source_for(order)
        if source is None:
            raise OrderNotFound("Order has no detail record to update")

        try:
            affected = self.store.update(
                source.table, {source.status_column: new_status}, {"id": key}
            )
        except StoreError as e:
            raise StatusUpdateError(f"Failed to update status: {e.message}") from e
        if not affected:
            raise StatusUpdateError("Failed to update status: record not found")

        updated = order.with_status(new_status, source.status_column)
        board.patch(updated)
        logger.info("Order %s (%s) set to %s", order_id, order_type, new_status)
        return updated

    def cancel_order(self, user, board, order_id):
        return self.update_status(user, board, order_id, "cancelled")
