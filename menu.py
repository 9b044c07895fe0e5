from errors import NotFound, ValidationError

CATEGORIES = ("veg", "non-veg")


def list_menu(store, category=None, search=None, sort=None):
    items = store.select("menu_items", order_by="name")

    if category in CATEGORIES:
        items = [i for i in items if i["category"] == category]

    search = (search or "").strip().lower()
    if search:
        items = [
            i for i in items
            if search in (i["name"] or "").lower()
            or search in (i["description"] or "").lower()
        ]

    if sort == "low":
        items.sort(key=lambda i: i["price"])
    elif sort == "high":
        items.sort(key=lambda i: i["price"], reverse=True)
    return items


def get_item(store, item_id):
    item = store.select_one("menu_items", {"id": item_id})
    if item is None:
        raise NotFound("Menu item not found")
    return item


def validate_menu_item(data):
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("Name is required")
    try:
        price = float(data.get("price"))
    except (TypeError, ValueError):
        raise ValidationError("Price must be a number")
    if price <= 0:
        raise ValidationError("Price must be greater than 0")
    category = data.get("category") or "veg"
    if category not in CATEGORIES:
        raise ValidationError("Category must be veg or non-veg")
    return {
        "name": name,
        "description": (data.get("description") or "").strip(),
        "price": price,
        "category": category,
        "image_url": data.get("image_url") or None,
    }


def create_item(store, data):
    return store.insert("menu_items", validate_menu_item(data))[0]


def update_item(store, item_id, data):
    fields = validate_menu_item(data)
    if not fields["image_url"]:
        # keep the current photo unless a new one is given
        fields.pop("image_url")
    if not store.update("menu_items", fields, {"id": item_id}):
        raise NotFound("Menu item not found")
    return {"id": item_id, **fields}


def delete_item(store, item_id):
    if not store.delete("menu_items", {"id": item_id}):
        raise NotFound("Menu item not found")
