"""
Shopping cart kept in the browser session.

Menu items are copied into the cart by value, so later catalog edits do not
change what is already in a cart or an order.
"""
from normalizer import to_float, to_int

CART_FIELDS = ("id", "name", "price", "image_url")


class Cart:

    def __init__(self, items=None):
        self.items = [dict(i) for i in (items or [])]

    @classmethod
    def from_session(cls, session):
        return cls(session.get("cart"))

    def save(self, session):
        session["cart"] = self.items

    def _find(self, item_id):
        for item in self.items:
            if item["id"] == item_id:
                return item
        return None

    def add(self, menu_item):
        item = self._find(menu_item["id"])
        if item:
            item["quantity"] += 1
        else:
            item = {k: menu_item.get(k) for k in CART_FIELDS}
            item["price"] = to_float(item["price"])
            item["quantity"] = 1
            self.items.append(item)
        return item["quantity"]

    def remove(self, item_id):
        self.items = [i for i in self.items if i["id"] != item_id]

    def update_quantity(self, item_id, quantity):
        quantity = max(0, to_int(quantity))
        item = self._find(item_id)
        if item is None:
            return 0
        if quantity == 0:
            self.remove(item_id)
        else:
            item["quantity"] = quantity
        return quantity

    def decrease(self, item_id):
        item = self._find(item_id)
        if item is None:
            return 0
        return self.update_quantity(item_id, item["quantity"] - 1)

    def clear(self):
        self.items = []

    @property
    def total(self):
        return round(sum(i["price"] * i["quantity"] for i in self.items), 2)

    @property
    def count(self):
        return sum(i["quantity"] for i in self.items)

    def is_empty(self):
        return not self.items

    def to_dict(self):
        return {"items": self.items, "total": self.total, "count": self.count}
