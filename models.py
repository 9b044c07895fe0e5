import uuid
from datetime import datetime, timezone

from extensions import db
from flask_login import UserMixin


def new_id():
    return uuid.uuid4().hex


def now_iso():
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat()


class Profile(db.Model, UserMixin):
    __tablename__ = "profiles"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    full_name = db.Column(db.String(100))
    email = db.Column(db.String(120), unique=True)
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    password = db.Column(db.String(200))

    role = db.Column(db.String(20), default="user")
    # user | admin

    created_at = db.Column(db.String(32), default=now_iso)


class OrderStub(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32), db.ForeignKey('profiles.id'))
    typeoforder = db.Column(db.String(20))
    created_at = db.Column(db.String(32), default=now_iso)

    # exactly one of these is set
    reservation_id = db.Column(db.String(32), db.ForeignKey('reservations.id'))
    party_order_id = db.Column(db.String(32), db.ForeignKey('party_orders.id'))
    takeaway_order_id = db.Column(db.String(32), db.ForeignKey('takeaway_orders.id'))
    menuorder_id = db.Column(db.String(32), db.ForeignKey('menuorder.id'))


class Reservation(db.Model):
    __tablename__ = "reservations"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32))
    name = db.Column(db.String(100))
    contact = db.Column(db.String(20))
    email = db.Column(db.String(120))
    date = db.Column(db.String(20))
    time = db.Column(db.String(20))
    guests = db.Column(db.Integer)
    special_requests = db.Column(db.Text)
    status = db.Column(db.String(20), default="pending")
    created_at = db.Column(db.String(32), default=now_iso)


class PartyOrder(db.Model):
    __tablename__ = "party_orders"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32))
    name = db.Column(db.String(100))
    contact = db.Column(db.String(20))
    email = db.Column(db.String(120))
    address = db.Column(db.Text)
    guest_count = db.Column(db.Integer)
    event_date = db.Column(db.String(20))
    dish_selections = db.Column(db.Text)  # JSON list
    delivery_method = db.Column(db.String(30))
    special_requests = db.Column(db.Text)
    status = db.Column(db.String(20), default="pending")
    total_amount = db.Column(db.Float)
    created_at = db.Column(db.String(32), default=now_iso)


class TakeawayOrder(db.Model):
    __tablename__ = "takeaway_orders"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32))
    name = db.Column(db.String(100))
    contact = db.Column(db.String(20))
    address = db.Column(db.Text)
    pickup_time = db.Column(db.String(30))
    instructions = db.Column(db.Text)
    menu_selections = db.Column(db.Text)  # JSON list
    # historical column name, see order_types.ORDER_SOURCES
    order_status = db.Column(db.String(20), default="pending")
    total_amount = db.Column(db.Float)
    created_at = db.Column(db.String(32), default=now_iso)


class MenuOrder(db.Model):
    __tablename__ = "menuorder"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    user_id = db.Column(db.String(32))
    items = db.Column(db.Text)  # JSON list
    total_amount = db.Column(db.Float)
    shipping_info = db.Column(db.Text)  # JSON object
    payment_method = db.Column(db.String(20))
    status = db.Column(db.String(20), default="pending")
    created_at = db.Column(db.String(32), default=now_iso)


class Discount(db.Model):
    __tablename__ = "discounts"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(20), unique=True, nullable=False)
    discount_percentage = db.Column(db.Float)
    fixed_discount = db.Column(db.Float)
    expiry_date = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), default="active")  # active | expired


class MenuItem(db.Model):
    __tablename__ = "menu_items"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(10), default="veg")  # veg | non-veg
    image_url = db.Column(db.String(255))
    created_at = db.Column(db.String(32), default=now_iso)
