from flask import Flask, request, jsonify, send_file, session
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import (login_user, login_required, logout_user, current_user)
import logging

from config import get_config
from extensions import db, login_manager
from models import Profile
from decorators import admin_required
from errors import AppError, NotFound, ValidationError
from store import Store
from access import can_mutate_orders, list_users, grant_admin, revoke_admin
from cart import Cart
from dispatcher import StatusDispatcher
from resolver import load_order_board
from reporting import dashboard_report
from invoice import build_invoice
import discounts
import intake
import menu as catalog

# ---------------- APP CONFIG ---------------- #

app = Flask(__name__)
app.config.from_object(get_config())

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

db.init_app(app)
login_manager.init_app(app)

# admin id -> OrderBoard, patched in place by status updates
order_boards = {}


def get_store():
    return Store(db.session)


def payload():
    return request.get_json(silent=True) or request.form.to_dict()


def json_error(message, code=400):
    return jsonify({"success": False, "error": message}), code


@app.errorhandler(AppError)
def handle_app_error(e):
    if e.status_code >= 500:
        logger.error("Request failed: %s", e.message)
    return json_error(e.message, e.status_code)


@app.cli.command("init-db")
def init_db():
    db.create_all()
    print("✅ Tables created")

# ---------------- LOGIN ---------------- #

@login_manager.user_loader
def load_user(user_id):
    return db.session.get(Profile, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return json_error("Please sign in first", 401)

# ---------------- AUTH ---------------- #

@app.route('/register', methods=['POST'])
def register():
    data = payload()
    email = (data.get('email') or '').strip().lower()
    password = data.get('password') or ''
    if not email or not password:
        raise ValidationError("Email and password are required")

    # 🔒 Check duplicate email
    if Profile.query.filter_by(email=email).first():
        raise ValidationError("An account with this email already exists")

    user = Profile(
        email=email,
        password=generate_password_hash(password),
        full_name=data.get('full_name'),
        phone=data.get('phone'),
        address=data.get('address'),
    )
    db.session.add(user)
    db.session.commit()

    return jsonify({"success": True, "id": user.id}), 201


@app.route('/login', methods=['POST'])
def login():
    data = payload()
    user = Profile.query.filter_by(
        email=(data.get('email') or '').strip().lower()
    ).first()

    if user and check_password_hash(user.password, data.get('password') or ''):
        login_user(user)
        return jsonify({"success": True, "id": user.id, "role": user.role})
    return json_error("Invalid email or password", 401)


@app.route('/logout', methods=['POST'])
@login_required
def logout():
    order_boards.pop(current_user.id, None)
    logout_user()
    return jsonify({"success": True})


@app.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    store = get_store()
    if request.method == 'POST':
        data = payload()
        patch = {
            k: data[k] for k in ('full_name', 'phone', 'address') if k in data
        }
        if patch:
            store.update("profiles", patch, {"id": current_user.id})
    return jsonify({
        "success": True,
        "profile": store.select_one("profiles", {"id": current_user.id}),
    })

# ---------------- MENU ---------------- #

@app.route('/menu')
def menu():
    items = catalog.list_menu(
        get_store(),
        category=request.args.get('category'),
        search=request.args.get('search'),
        sort=request.args.get('sort'),
    )
    return jsonify({"success": True, "items": items})


@app.route('/menu/<item_id>')
def menu_item(item_id):
    return jsonify({"success": True, "item": catalog.get_item(get_store(), item_id)})

# ---------------- CART ---------------- #

@app.route('/cart')
def cart():
    return jsonify({"success": True, **Cart.from_session(session).to_dict()})


@app.route('/api/cart/add/<item_id>', methods=['POST'])
def api_add_to_cart(item_id):
    item = catalog.get_item(get_store(), item_id)
    cart = Cart.from_session(session)
    quantity = cart.add(item)
    cart.save(session)
    return jsonify({"success": True, "quantity": quantity, "total": cart.total})


@app.route('/api/cart/remove/<item_id>', methods=['POST'])
def api_remove_from_cart(item_id):
    cart = Cart.from_session(session)
    quantity = cart.decrease(item_id)
    cart.save(session)
    return jsonify({"success": True, "quantity": quantity, "total": cart.total})


@app.route('/api/cart/quantity/<item_id>', methods=['POST'])
def api_update_quantity(item_id):
    cart = Cart.from_session(session)
    quantity = cart.update_quantity(item_id, payload().get('quantity'))
    cart.save(session)
    return jsonify({"success": True, "quantity": quantity, "total": cart.total})


@app.route('/api/cart/clear', methods=['POST'])
def api_clear_cart():
    cart = Cart.from_session(session)
    cart.clear()
    cart.save(session)
    return jsonify({"success": True})


@app.route('/apply_coupon', methods=['POST'])
def apply_coupon():
    cart = Cart.from_session(session)
    if cart.is_empty():
        raise ValidationError("Your cart is empty")
    discount = discounts.find_active_discount(get_store(), payload().get('coupon_code'))
    off = discounts.apply_discount(cart.total, discount)
    return jsonify({
        "success": True,
        "total": cart.total,
        "discount": off,
        "final_total": round(cart.total - off, 2),
    })

# ---------------- CHECKOUT & ORDERS ---------------- #

@app.route('/checkout', methods=['POST'])
@login_required
def checkout():
    data = payload()
    cart = Cart.from_session(session)
    result = intake.checkout(
        get_store(),
        current_user.id,
        cart,
        shipping_info=data.get('shipping_info'),
        payment_method=data.get('payment_method', 'COD'),
        discount_code=data.get('discount_code'),
        vat_rate=app.config['VAT_RATE'],
    )
    cart.save(session)
    return jsonify({"success": True, **result}), 201


@app.route('/reservations', methods=['POST'])
@login_required
def reservations():
    stub = intake.place_reservation(get_store(), current_user.id, payload())
    return jsonify({"success": True, "order_id": stub["id"]}), 201


@app.route('/takeaway', methods=['POST'])
@login_required
def takeaway():
    stub = intake.place_takeaway_order(get_store(), current_user.id, payload())
    return jsonify({"success": True, "order_id": stub["id"]}), 201


@app.route('/party-orders', methods=['POST'])
@login_required
def party_orders():
    stub = intake.place_party_order(get_store(), current_user.id, payload())
    return jsonify({"success": True, "order_id": stub["id"]}), 201


@app.route('/orders')
@login_required
def orders():
    orders = intake.list_customer_orders(
        get_store(), current_user.id, app.config['DETAIL_FETCH_WORKERS']
    )
    return jsonify({"success": True, "orders": [o.to_dict() for o in orders]})


@app.route('/cancel-order/<order_id>', methods=['POST'])
@login_required
def user_cancel_order(order_id):
    intake.cancel_own_order(get_store(), current_user.id, order_id)
    return jsonify({"success": True, "message": "Order cancelled successfully."})


@app.route("/invoice/<order_id>")
@login_required
def generate_invoice(order_id):
    # customers can download only their own invoice
    order = intake.get_customer_order(get_store(), current_user.id, order_id)
    buffer = build_invoice(order, app.config['VAT_RATE'])
    return send_file(
        buffer,
        as_attachment=True,
        download_name=f"VGFoods_Invoice_Order_{order.id}.pdf",
        mimetype="application/pdf"
    )

# ---------------- ADMIN ---------------- #

def admin_board(refresh=False):
    board = order_boards.get(current_user.id)
    if board is None or refresh:
        board = load_order_board(get_store(), app.config['DETAIL_FETCH_WORKERS'])
        order_boards[current_user.id] = board
    return board


def load_customers(store):
    counts = store.count_by("orders", "user_id")
    return [
        {**p, "total_orders": counts.get(p["id"], 0)}
        for p in store.select(
            "profiles", columns=["id", "full_name", "email", "phone", "address"]
        )
    ]


@app.route('/admin/dashboard')
@login_required
@admin_required
def admin_dashboard():
    board = admin_board(refresh=True)
    customers = load_customers(get_store())
    return jsonify({"success": True, **dashboard_report(board.orders, customers)})


SORT_FIELDS = ("sequential_id", "user_name", "order_status")


@app.route('/admin/orders')
@login_required
@admin_required
def admin_orders():
    board = admin_board(refresh=request.args.get('refresh') == '1')
    orders = board.filter(
        order_type=request.args.get('type'),
        status=request.args.get('status'),
    )

    sort = request.args.get('sort', 'sequential_id')
    if sort not in SORT_FIELDS:
        sort = 'sequential_id'
    orders = sorted(
        orders,
        key=lambda o: getattr(o, sort),
        reverse=request.args.get('order', 'desc') == 'desc',
    )
    return jsonify({"success": True, "orders": [o.to_dict() for o in orders]})


@app.route('/admin/orders/<order_id>')
@login_required
@admin_required
def admin_order_details(order_id):
    order = admin_board().open(order_id)
    if order is None:
        raise NotFound("Order not found")
    return jsonify({"success": True, "order": order.to_dict()})


@app.route('/admin/update-order-status/<order_id>', methods=['POST'])
@login_required
@admin_required
def update_order_status(order_id):
    board = admin_board()
    dispatcher = StatusDispatcher(get_store(), can_mutate_orders)
    order = dispatcher.update_status(
        current_user, board, order_id, payload().get('status')
    )
    return jsonify({
        "success": True,
        "message": "Order status updated!",
        "order": order.to_dict(),
    })


@app.route('/admin/cancel-order/<order_id>', methods=['POST'])
@login_required
@admin_required
def cancel_order(order_id):
    board = admin_board()
    dispatcher = StatusDispatcher(get_store(), can_mutate_orders)
    order = dispatcher.cancel_order(current_user, board, order_id)
    return jsonify({
        "success": True,
        "message": "Order cancelled successfully.",
        "order": order.to_dict(),
    })


@app.route('/admin/customers')
@login_required
@admin_required
def admin_customers():
    return jsonify({"success": True, "customers": load_customers(get_store())})

# ---------------- ADMIN MENU ---------------- #

@app.route('/admin/menu', methods=['POST'])
@login_required
@admin_required
def admin_add_menu_item():
    item = catalog.create_item(get_store(), payload())
    return jsonify({"success": True, "message": "Menu item added successfully", "item": item}), 201


@app.route('/admin/menu/<item_id>', methods=['PUT'])
@login_required
@admin_required
def admin_update_menu_item(item_id):
    item = catalog.update_item(get_store(), item_id, payload())
    return jsonify({"success": True, "message": "Menu item updated successfully", "item": item})


@app.route('/admin/menu/<item_id>', methods=['DELETE'])
@login_required
@admin_required
def admin_delete_menu_item(item_id):
    catalog.delete_item(get_store(), item_id)
    return jsonify({"success": True, "message": "Menu item deleted successfully"})

# ---------------- ADMIN DISCOUNTS ---------------- #

@app.route('/admin/discounts', methods=['GET', 'POST'])
@login_required
@admin_required
def admin_discounts():
    store = get_store()
    if request.method == 'POST':
        discount = discounts.create_discount(store, payload())
        return jsonify({
            "success": True,
            "message": "Discount added successfully!",
            "discount": discount,
        }), 201
    return jsonify({
        "success": True,
        "discounts": discounts.list_discounts(
            store,
            search=request.args.get('search'),
            status=request.args.get('status'),
        ),
    })


@app.route('/admin/discounts/<int:discount_id>/toggle', methods=['POST'])
@login_required
@admin_required
def admin_toggle_discount(discount_id):
    discount = discounts.toggle_status(get_store(), discount_id)
    return jsonify({"success": True, "discount": discount})


@app.route('/admin/discounts/<int:discount_id>', methods=['DELETE'])
@login_required
@admin_required
def admin_delete_discount(discount_id):
    discounts.delete_discount(get_store(), discount_id)
    return jsonify({"success": True, "message": "Discount deleted successfully!"})

# ---------------- ADMIN ROLES ---------------- #

@app.route('/admin/roles')
@login_required
@admin_required
def admin_roles():
    users, admins = list_users(get_store())
    return jsonify({"success": True, "users": users, "admins": admins})


@app.route('/admin/roles/grant', methods=['POST'])
@login_required
@admin_required
def admin_grant_role():
    grant_admin(get_store(), payload().get('user_id'))
    return jsonify({"success": True, "message": "User has been made an admin successfully"})


@app.route('/admin/roles/revoke', methods=['POST'])
@login_required
@admin_required
def admin_revoke_role():
    user_id = payload().get('user_id')
    revoke_admin(get_store(), current_user.id, user_id)
    order_boards.pop(user_id, None)
    return jsonify({"success": True, "message": "Admin role removed successfully"})


# ---------------- RUN ---------------- #

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=True)
