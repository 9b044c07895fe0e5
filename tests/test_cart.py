from cart import Cart

SAMOSA = {"id": "a", "name": "Samosa", "price": 4.5, "image_url": None,
          "description": "Crispy", "category": "veg"}
NAAN = {"id": "b", "name": "Naan", "price": "2", "image_url": "naan.jpg"}


def test_add_and_total():
    cart = Cart()

    assert cart.add(SAMOSA) == 1
    assert cart.add(SAMOSA) == 2
    assert cart.add(NAAN) == 1

    assert cart.total == 11.0
    assert cart.count == 3
    # only the fields an order line needs are copied
    assert set(cart.items[0]) == {"id", "name", "price", "image_url", "quantity"}


def test_catalog_changes_do_not_touch_cart():
    item = dict(SAMOSA)
    cart = Cart()
    cart.add(item)

    item["price"] = 99

    assert cart.items[0]["price"] == 4.5


def test_update_quantity_and_remove():
    cart = Cart()
    cart.add(SAMOSA)
    cart.add(NAAN)

    assert cart.update_quantity("a", 4) == 4
    assert cart.update_quantity("b", -3) == 0
    assert [i["id"] for i in cart.items] == ["a"]

    assert cart.decrease("a") == 3
    cart.remove("a")
    assert cart.is_empty()
    assert cart.update_quantity("missing", 2) == 0


def test_session_round_trip():
    session = {}
    cart = Cart.from_session(session)
    cart.add(SAMOSA)
    cart.save(session)

    again = Cart.from_session(session)
    again.clear()

    assert again.is_empty()
    assert session["cart"][0]["quantity"] == 1
